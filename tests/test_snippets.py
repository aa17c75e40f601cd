"""
Test: Computational Layer snippet rendering.
"""
import re

from codehub.services.form_state import FormState, set_number_of_options, set_extra_credit
from codehub.services.snippet_templates import (
    render_snippets, copy_text, escape, explanation_snippet, misconception_snippet,
)

UNESCAPED_QUOTE = re.compile(r'(?<!\\)"')


def _content_literal(snippet):
    """Text between the quotes of the content: line."""
    line = next(l for l in snippet.split("\n") if l.startswith("content: "))
    assert line.startswith('content: "') and line.endswith('"')
    return line[len('content: "'):-1]


class TestTemplates:
    def test_keys(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert list(snippets) == [
            "q3_qtn", "q3_teks", "q3_mc", "q3_feedback", "q3_btn_ans", "q3_exp", "q3_ec",
            "q3_mis1", "q3_mis2", "q3_mis3",
        ]

    def test_teks(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_teks"] == (
            'hidden: when submit_button.pressCount>0 false otherwise true\n'
            'content: "A.2C — writing equations"'
        )
        assert snippets["q3_qtn"] == snippets["q3_teks"]

    def test_multiple_choice(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_mc"] == (
            'disableChange: when submit_button.pressCount>0 true otherwise false\n'
            'correct: "B"'
        )

    def test_feedback(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_feedback"] == (
            'hidden: when submit_button.pressCount>0 false otherwise true\n'
            'content: when submit_button.pressCount>0 and q3_mc.matchesKey "correct ✅" \n'
            'when submit_button.pressCount>0 and not(q3_mc.matchesKey) "incorrect ❌"\n'
            'otherwise ""'
        )

    def test_answer_button(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_btn_ans"] == (
            'hidden: when (submit_button.pressCount>0 and not(q3_mc.matchesKey)) false otherwise true\n'
            'style: buttonStyles.white'
        )

    def test_explanation(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_exp"] == (
            'hidden: when (submit_button.pressCount>0 and q3_btn_ans.pressCount>0) false otherwise true\n'
            'content: "The slope is the coefficient of x and the intercept is the constant."'
        )

    def test_extra_credit(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        assert snippets["q3_ec"] == (
            'hidden: when (submit_button.pressCount>0 and q3_btn_ans.pressCount>0 '
            'and not(q3_mc.matchesKey)) false otherwise true'
        )

    def test_extra_credit_disabled(self, sample_state):
        state = set_extra_credit(FormState.from_dict(sample_state), False)
        assert "q3_ec" not in render_snippets(state)


class TestMisconceptionSnippets:
    def test_one_per_incorrect_option(self, sample_state):
        snippets = render_snippets(FormState.from_dict(sample_state))
        # Correct answer is B, so the distractors are A, C, D
        assert snippets["q3_mis1"] == (
            'hidden: when (submit_button.pressCount>0 and q3_btn_ans.pressCount>0 '
            'and q3_mc.isSelected(1)) false otherwise true\n'
            'content: "Swapped slope and intercept."'
        )
        assert "q3_mc.isSelected(3)" in snippets["q3_mis2"]
        assert "q3_mc.isSelected(4)" in snippets["q3_mis3"]

    def test_always_three(self):
        state = set_number_of_options(FormState(), 2)
        snippets = render_snippets(state)
        assert [k for k in snippets if "_mis" in k] == ["q1_mis1", "q1_mis2", "q1_mis3"]
        assert "q1_mc.isSelected(2)" in snippets["q1_mis1"]
        assert "not(q1_mc.matchesKey)" in snippets["q1_mis2"]
        assert snippets["q1_mis3"].endswith('content: ""')


class TestEscaping:
    def test_escape(self):
        assert escape('say "hi"') == 'say \\"hi\\"'
        assert escape(None) == ""

    def test_quotes_in_explanation(self):
        state = FormState(explanation='The "slope" is rise over run')
        literal = _content_literal(explanation_snippet(state))
        assert literal == 'The \\"slope\\" is rise over run'
        assert not UNESCAPED_QUOTE.search(literal)

    def test_quotes_in_misconceptions(self):
        state = FormState(misconceptions=('Read "m" as the intercept', '"b"', '""'))
        for i in range(3):
            literal = _content_literal(misconception_snippet(state, i))
            assert not UNESCAPED_QUOTE.search(literal)
            assert literal.count('\\"') == state.misconceptions[i].count('"')


class TestCopyText:
    def test_header(self):
        assert copy_text("q1_mc", "correct: \"A\"") == '// For q1_mc\ncorrect: "A"'
