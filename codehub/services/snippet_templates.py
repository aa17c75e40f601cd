"""
Computational Layer snippet templates.

Every snippet is keyed q<N>_<slot>, where N is the question number. The
templates are fixed; only the question number and the escaped user/AI text
change between renders.
"""
from codehub.models import MISCONCEPTION_COUNT
from codehub.services.form_state import FormState, OPTION_LABELS

SUBMITTED = "submit_button.pressCount>0"


def escape(text) -> str:
    """Escape text for a CL string literal."""
    return str(text or "").replace('"', '\\"')


def _visible_when(condition: str) -> str:
    return f"hidden: when {condition} false otherwise true"


def teks_snippet(state: FormState) -> str:
    return f'{_visible_when(SUBMITTED)}\ncontent: "{escape(state.teks_standard)}"'


def mc_snippet(state: FormState) -> str:
    return (
        f"disableChange: when {SUBMITTED} true otherwise false\n"
        f'correct: "{escape(state.correct_answer)}"'
    )


def feedback_snippet(state: FormState) -> str:
    n = state.question_number
    return (
        f"{_visible_when(SUBMITTED)}\n"
        f'content: when {SUBMITTED} and q{n}_mc.matchesKey "correct ✅" \n'
        f'when {SUBMITTED} and not(q{n}_mc.matchesKey) "incorrect ❌"\n'
        f'otherwise ""'
    )


def btn_ans_snippet(state: FormState) -> str:
    n = state.question_number
    return (
        f"{_visible_when(f'({SUBMITTED} and not(q{n}_mc.matchesKey))')}\n"
        f"style: buttonStyles.white"
    )


def explanation_snippet(state: FormState) -> str:
    n = state.question_number
    condition = f"({SUBMITTED} and q{n}_btn_ans.pressCount>0)"
    return f'{_visible_when(condition)}\ncontent: "{escape(state.explanation)}"'


def extra_credit_snippet(state: FormState) -> str:
    n = state.question_number
    return _visible_when(
        f"({SUBMITTED} and q{n}_btn_ans.pressCount>0 and not(q{n}_mc.matchesKey))"
    )


def misconception_snippet(state: FormState, index: int) -> str:
    """
    Snippet for misconception slot `index` (0-based).

    Slot i is tied to the i-th incorrect option; the choice index passed to
    isSelected is 1-based. A slot with no matching option shows for any
    incorrect answer.
    """
    n = state.question_number
    distractors = state.distractor_labels
    if index < len(distractors):
        choice = OPTION_LABELS.index(distractors[index]) + 1
        selected = f"q{n}_mc.isSelected({choice})"
    else:
        selected = f"not(q{n}_mc.matchesKey)"
    condition = f"({SUBMITTED} and q{n}_btn_ans.pressCount>0 and {selected})"
    return f'{_visible_when(condition)}\ncontent: "{escape(state.misconceptions[index])}"'


def render_snippets(state: FormState) -> dict:
    """Render every snippet for the question, in tab order."""
    n = state.question_number
    teks = teks_snippet(state)
    snippets = {
        f"q{n}_qtn": teks,
        f"q{n}_teks": teks,
        f"q{n}_mc": mc_snippet(state),
        f"q{n}_feedback": feedback_snippet(state),
        f"q{n}_btn_ans": btn_ans_snippet(state),
        f"q{n}_exp": explanation_snippet(state),
    }
    if state.include_extra_credit:
        snippets[f"q{n}_ec"] = extra_credit_snippet(state)
    for i in range(MISCONCEPTION_COUNT):
        snippets[f"q{n}_mis{i + 1}"] = misconception_snippet(state, i)
    return snippets


def copy_text(key: str, snippet: str) -> str:
    """Clipboard text for one snippet, headed by its target element."""
    return f"// For {key}\n{snippet}"
