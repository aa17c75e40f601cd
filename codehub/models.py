"""
Value types passed between the AI services, form state and routes.
"""
import base64
from dataclasses import dataclass, field
from typing import Optional

from werkzeug.utils import secure_filename

from codehub.config import SUPPORTED_IMAGE_TYPES
from codehub.errors import InvalidEditError, UnsupportedImageError

MISCONCEPTION_COUNT = 3

QUESTION_TYPES = ("multiple-choice", "equation")


def fixed_arity(items) -> tuple:
    """Pad with empty strings / drop extras so exactly three slots remain.
    A single string is one item."""
    if isinstance(items, str):
        items = (items,)
    items = [("" if item is None else str(item)) for item in (items or ())]
    items = items[:MISCONCEPTION_COUNT]
    items.extend([""] * (MISCONCEPTION_COUNT - len(items)))
    return tuple(items)


def posted_misconceptions(value) -> list:
    """Misconceptions from a posted record: a list, or one string as one item."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise InvalidEditError("misconceptions must be a list of strings")


@dataclass(frozen=True)
class ProblemAnalysis:
    """
    Canonical result of one LLM analysis.

    misconceptions always holds exactly MISCONCEPTION_COUNT strings; unused
    slots are empty strings.
    """
    correct_answer: Optional[str] = None
    explanation: str = ""
    misconceptions: tuple = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "misconceptions", fixed_arity(self.misconceptions))
        object.__setattr__(self, "explanation", self.explanation or "")

    def to_dict(self) -> dict:
        return {
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "misconceptions": list(self.misconceptions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProblemAnalysis":
        data = data or {}
        if not isinstance(data, dict):
            raise InvalidEditError("analysis must be an object")
        answer = data.get("correctAnswer")
        return cls(
            correct_answer=str(answer) if answer not in (None, "") else None,
            explanation=str(data.get("explanation") or ""),
            misconceptions=posted_misconceptions(data.get("misconceptions")),
        )


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded question image held in memory for one request."""
    filename: str
    mime_type: str
    data: bytes

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode('utf-8')
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_file_storage(cls, file) -> "ImageUpload":
        """Build from a werkzeug FileStorage (request.files entry)."""
        mime_type = (file.mimetype or "").lower()
        if mime_type == "image/jpg":
            mime_type = "image/jpeg"
        if mime_type not in SUPPORTED_IMAGE_TYPES:
            raise UnsupportedImageError(
                f"Unsupported image type: {mime_type or 'unknown'}. Use PNG, JPEG, GIF, or WEBP"
            )
        data = file.read()
        if not data:
            raise UnsupportedImageError("Uploaded image is empty")
        filename = secure_filename(file.filename or "") or f"question{SUPPORTED_IMAGE_TYPES[mime_type]}"
        return cls(filename=filename, mime_type=mime_type, data=data)
