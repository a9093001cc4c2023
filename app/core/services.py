"""
Service layer primitives shared by every app.

- ServiceResult: success/failure wrapper returned by service classmethods
- BaseService: logging and transaction helpers for stateless services

Expected failures (a missing room, an edit by someone other than the author)
come back as ServiceResult.failure with a machine-readable error_code that the
view layer maps to an HTTP status. Unexpected failures are raised.

Usage:
    from core.services import BaseService, ServiceResult

    class MembershipService(BaseService):
        @classmethod
        def leave(cls, room_id: int, user) -> ServiceResult[dict]:
            participant = Participant.objects.filter(
                room_id=room_id, user=user, is_active=True
            ).first()
            if participant is None:
                return ServiceResult.failure(
                    "You are not a participant in this room",
                    error_code="MEMBERSHIP_NOT_FOUND",
                )

            with cls.atomic():
                participant.is_active = False
                participant.save(update_fields=["is_active"])

            cls.get_logger().info(f"User {user.id} left room {room_id}")
            return ServiceResult.success({"message": "You have left the room"})
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Human-readable error message if failed
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        result = MessageService.edit_message(message_id, user, content)
        if result:
            message = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Example:
            return ServiceResult.failure("Message not found", "MESSAGE_NOT_FOUND")
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert a failed result to the API error body.

        Returns:
            Dict with ``error`` and, when present, ``error_code`` and ``errors``
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {"error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Design Notes:
        - Use @classmethod (no instance state)
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
        - Wrap multi-row writes in cls.atomic()
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        The logger is named ``<module>.<ClassName>`` so chat services can be
        filtered individually, e.g. ``chat.services.MessageService``.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around ``django.db.transaction.atomic`` that keeps the
        transaction boundary visible in service code. If any statement in
        the block fails, every write in it is rolled back.

        Example:
            with cls.atomic():
                participant.save(update_fields=["is_active"])
                cls._create_system_message(room, "Ana left the room")
        """
        with transaction.atomic():
            yield

    @classmethod
    def validate_required(cls, **kwargs) -> ServiceResult | None:
        """
        Validate that required fields are provided.

        Returns a VALIDATION_ERROR failure listing every field that is None
        or a blank string, or None when all fields are present.

        Example:
            validation = cls.validate_required(name=name)
            if validation is not None:
                return validation
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.failure(
                "Required fields missing",
                error_code="VALIDATION_ERROR",
                errors=errors,
            )
        return None
