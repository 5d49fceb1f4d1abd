"""Error hierarchy for extraction and document generation.

Transient failures (worth retrying) are kept apart from permanent ones so the
Gemini client can hand the classification straight to tenacity.

Example usage with tenacity:
    Retrying(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from registro_formazione.models import ValidationReport


class RegistroError(Exception):
    """Base exception for all registro_formazione errors."""

    pass


class TransientError(RegistroError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 from the extraction API.
    """

    pass


class RateLimitError(TransientError):
    """Extraction API quota exceeded (HTTP 429)."""

    pass


class PermanentError(RegistroError):
    """Failure that won't succeed on retry."""

    pass


class AuthenticationError(PermanentError):
    """Missing or rejected API key."""

    pass


class ExtractionError(PermanentError):
    """The extraction API answered, but not with a usable JSON object."""

    pass


class TemplateNotFoundError(PermanentError):
    """Unknown template key or unreadable template file."""

    pass


class ValidationFailedError(PermanentError):
    """Extracted data is missing required fields.

    The full report is kept so callers can show every error and warning.
    """

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        super().__init__("; ".join(report.errors) or "validation failed")
