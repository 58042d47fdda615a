"""
Yoto API exceptions.

Provides the exception hierarchy raised by the HTTP client layer.
"""

from __future__ import annotations

from typing import Any


class YotoApiError(Exception):
    """Base exception for all Yoto API errors."""

    pass


class YotoAuthError(YotoApiError):
    """Authentication/authorization errors."""

    pass


class YotoRateLimitError(YotoApiError):
    """Rate limiting errors."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class YotoValidationError(YotoApiError):
    """Request validation errors."""

    pass


class YotoNotFoundError(YotoApiError):
    """Resource not found."""

    pass


class YotoServerError(YotoApiError):
    """Server-side errors."""

    pass


class YotoNetworkError(YotoApiError):
    """Network connectivity errors."""

    pass


class YotoTimeoutError(YotoApiError):
    """Request timeout errors."""

    pass


class YotoResponseError(YotoApiError):
    """Response body did not match any known shape."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
