"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    └── ExternalServiceError - Channel layer / broker failures

Usage:
    from core.exceptions import ExternalServiceError

    try:
        async_to_sync(layer.group_send)(group, payload)
    except Exception as e:
        raise ExternalServiceError(
            "Realtime publish failed",
            error_code="REALTIME_PUBLISH_FAILED",
            details={"group": group, "original_error": str(e)},
        ) from e

Note:
    Services report expected failures through ServiceResult. These
    exceptions are for code paths where a result object cannot be returned,
    such as the realtime broadcast task.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, ids, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Used for the Channels layer (Redis) and the Celery broker. Log the
    original error but don't expose its details to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
