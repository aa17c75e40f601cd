"""
Exception types shared by the Code Hub services and routes.
"""


class CodeHubError(Exception):
    """Base class for errors surfaced to the user."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingInputError(CodeHubError):
    """Required user input (image/question text, API key) was not provided."""


class UnsupportedImageError(CodeHubError):
    """Uploaded file is not an image type the LLM endpoint accepts."""


class InvalidEditError(CodeHubError):
    """A form edit named an unknown action or carried invalid arguments."""


class AIServiceError(CodeHubError):
    """The LLM endpoint returned a failure or no content."""

    status_code = 502
