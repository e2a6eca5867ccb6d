from typing import Optional


class NameCorrectorError(Exception):
    """Base class for errors raised by the name corrector."""


class RemoteServiceError(NameCorrectorError):
    """The numerology service could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LLMUnavailableError(NameCorrectorError):
    """The generative model is not configured (missing GOOGLE_API_KEY) or failed to start."""


class SuggestionGenerationError(NameCorrectorError):
    """The model's name suggestions could not be generated or parsed."""
