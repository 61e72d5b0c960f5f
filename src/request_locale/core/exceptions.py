"""Exception hierarchy for locale resolution.

All custom exceptions inherit from AppException, which provides:
- Consistent error response format
- HTTP status codes
- Machine-readable error codes
- Optional details dict for additional context

The plugin's exception handler converts these to JSON responses.
"""

from collections.abc import Sequence
from typing import Any


class AppException(Exception):
    """Base exception for all locale errors.

    - message: Human-readable error description
    - error_code: Machine-readable code (e.g., "LOCALE_NOT_FOUND")
    - status_code: HTTP status code
    - details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dict for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class LocaleConfigurationError(AppException):
    """Locale options are invalid or no usable locale set could be built.

    Raised once while the plugin is constructed; the application should not
    start accepting traffic after it.
    """

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(
            message,
            "LOCALE_CONFIGURATION_ERROR",
            500,
            {"setting": setting} if setting else {},
        )


class LocaleNotFoundError(AppException):
    """None of the requested locales is available for this request."""

    def __init__(self, candidates: Sequence[str], source: str | None = None):
        requested = ",".join(candidates)
        super().__init__(
            f'Requested localization "{requested}" is not available.',
            "LOCALE_NOT_FOUND",
            404,
            {"requested": list(candidates), "source": source},
        )
        self.candidates = tuple(candidates)
        self.source = source
