"""
Form State
==========
Immutable authoring-session state plus one pure transition per user edit.

Every transition takes a FormState and returns a new one; nothing is
mutated in place. The browser keeps the current value and posts it back
with each edit.
"""
from dataclasses import dataclass, field, replace
from typing import Optional

from codehub.errors import InvalidEditError
from codehub.models import (
    ProblemAnalysis, MISCONCEPTION_COUNT, QUESTION_TYPES, fixed_arity, posted_misconceptions,
)

OPTION_LABELS = ("A", "B", "C", "D", "E", "F", "G", "H")
MIN_OPTIONS = 2
MAX_OPTIONS = len(OPTION_LABELS)


@dataclass(frozen=True)
class FormState:
    question_number: int = 1
    teks_standard: str = ""
    question_text: str = ""
    question_type: str = "multiple-choice"
    number_of_options: int = 4
    options: tuple = ("",) * MAX_OPTIONS
    correct_answer: str = "A"
    explanation: str = ""
    misconceptions: tuple = ("",) * MISCONCEPTION_COUNT
    include_extra_credit: bool = True
    image_preview: Optional[str] = field(default=None, compare=False)

    @property
    def active_labels(self) -> tuple:
        return OPTION_LABELS[:self.number_of_options]

    @property
    def distractor_labels(self) -> tuple:
        """Incorrect option labels in display order."""
        return tuple(label for label in self.active_labels if label != self.correct_answer)

    def option(self, label: str) -> str:
        return self.options[OPTION_LABELS.index(label)]

    def to_dict(self) -> dict:
        return {
            "questionNumber": self.question_number,
            "teksStandard": self.teks_standard,
            "questionText": self.question_text,
            "questionType": self.question_type,
            "numberOfOptions": self.number_of_options,
            "options": {label: self.option(label) for label in self.active_labels},
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "misconceptions": list(self.misconceptions),
            "includeExtraCredit": self.include_extra_credit,
            "imagePreview": self.image_preview,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FormState":
        """Rebuild from the wire format, routing each field through its transition."""
        state = cls()
        if data is None:
            return state
        if not isinstance(data, dict):
            raise InvalidEditError("state must be an object")
        options = data.get("options") or {}
        if not isinstance(options, dict):
            raise InvalidEditError("options must be an object keyed by label")
        misconceptions = posted_misconceptions(data.get("misconceptions"))

        state = set_question_type(state, data.get("questionType", state.question_type))
        state = set_number_of_options(state, data.get("numberOfOptions", state.number_of_options))
        state = set_question_number(state, data.get("questionNumber", state.question_number))
        state = set_teks_standard(state, data.get("teksStandard", ""))
        state = set_question_text(state, data.get("questionText", ""))
        for label, text in options.items():
            if str(label).upper() in OPTION_LABELS:
                state = set_option(state, label, text)
        if data.get("correctAnswer") not in (None, ""):
            state = set_correct_answer(state, data["correctAnswer"])
        state = set_explanation(state, data.get("explanation", ""))
        state = replace(state, misconceptions=fixed_arity(misconceptions))
        state = set_extra_credit(state, data.get("includeExtraCredit", True))
        state = set_image_preview(state, data.get("imagePreview"))
        return state


# =============================================================================
# TRANSITIONS
# =============================================================================

def set_question_number(state: FormState, value) -> FormState:
    """Non-numeric input falls back to 1, as the number field does."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 1
    return replace(state, question_number=max(number, 1))


def set_teks_standard(state: FormState, value) -> FormState:
    return replace(state, teks_standard=str(value or ""))


def set_question_text(state: FormState, value) -> FormState:
    return replace(state, question_text=str(value or ""))


def set_question_type(state: FormState, value) -> FormState:
    if value not in QUESTION_TYPES:
        raise InvalidEditError(f"Unknown question type: {value}")
    new_state = replace(state, question_type=value)
    if value == "multiple-choice" and new_state.correct_answer not in new_state.active_labels:
        new_state = replace(new_state, correct_answer="A")
    return new_state


def set_number_of_options(state: FormState, value) -> FormState:
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise InvalidEditError(f"Invalid number of options: {value}")
    count = min(max(count, MIN_OPTIONS), MAX_OPTIONS)

    new_state = replace(state, number_of_options=count)
    if new_state.question_type == "multiple-choice" and new_state.correct_answer not in new_state.active_labels:
        new_state = replace(new_state, correct_answer="A")
    return new_state


def set_option(state: FormState, label, text) -> FormState:
    label = str(label).upper()
    if label not in OPTION_LABELS:
        raise InvalidEditError(f"Unknown option: {label}")
    options = list(state.options)
    options[OPTION_LABELS.index(label)] = str(text or "")
    return replace(state, options=tuple(options))


def set_correct_answer(state: FormState, value) -> FormState:
    if state.question_type == "multiple-choice":
        label = str(value or "").strip().upper()
        if label not in state.active_labels:
            raise InvalidEditError(f"Correct answer must be one of {', '.join(state.active_labels)}")
        return replace(state, correct_answer=label)
    return replace(state, correct_answer=str(value or "").strip())


def set_explanation(state: FormState, value) -> FormState:
    return replace(state, explanation=str(value or ""))


def set_misconception(state: FormState, index, text) -> FormState:
    try:
        index = int(index)
    except (TypeError, ValueError):
        raise InvalidEditError(f"Invalid misconception index: {index}")
    if not 0 <= index < MISCONCEPTION_COUNT:
        raise InvalidEditError(f"Misconception index must be 0-{MISCONCEPTION_COUNT - 1}")
    misconceptions = list(state.misconceptions)
    misconceptions[index] = str(text or "")
    return replace(state, misconceptions=tuple(misconceptions))


def set_extra_credit(state: FormState, enabled) -> FormState:
    if isinstance(enabled, str):
        enabled = enabled.lower() in ("1", "true", "yes", "on")
    return replace(state, include_extra_credit=bool(enabled))


def set_image_preview(state: FormState, preview_url) -> FormState:
    return replace(state, image_preview=preview_url or None)


def apply_analysis(state: FormState, analysis: ProblemAnalysis) -> FormState:
    """
    Merge an AI analysis into the form.

    The explanation and misconceptions are replaced wholesale. A multiple
    choice answer is only taken when it names one of the active options.
    """
    new_state = replace(state, explanation=analysis.explanation, misconceptions=analysis.misconceptions)

    answer = analysis.correct_answer
    if answer is None:
        return new_state
    if state.question_type == "multiple-choice":
        if answer.upper() in new_state.active_labels:
            new_state = replace(new_state, correct_answer=answer.upper())
        return new_state
    return replace(new_state, correct_answer=answer)


TRANSITIONS = {
    "set_question_number": set_question_number,
    "set_teks_standard": set_teks_standard,
    "set_question_text": set_question_text,
    "set_question_type": set_question_type,
    "set_number_of_options": set_number_of_options,
    "set_option": set_option,
    "set_correct_answer": set_correct_answer,
    "set_explanation": set_explanation,
    "set_misconception": set_misconception,
    "set_extra_credit": set_extra_credit,
    "set_image_preview": set_image_preview,
}


def apply_edit(state: FormState, action: str, args=None) -> FormState:
    """Dispatch one named edit. args is a dict of keyword arguments."""
    handler = TRANSITIONS.get(action)
    if handler is None:
        raise InvalidEditError(f"Unknown action: {action}")
    try:
        return handler(state, **(args or {}))
    except TypeError as e:
        raise InvalidEditError(f"Invalid arguments for {action}: {e}")
