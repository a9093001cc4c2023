"""
Custom QuerySet classes for soft-deletable models.

Chat messages stay addressable after a soft delete (the author can delete
twice, an edit must be refused with MESSAGE_DELETED), so the default
manager does not hide deleted rows. Callers filter explicitly:

    from core.managers import SoftDeleteQuerySet

    class Message(SoftDeleteMixin, BaseModel):
        objects = SoftDeleteQuerySet.as_manager()

    Message.objects.active()    # history shown to clients
"""

from __future__ import annotations

from django.db import models


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with explicit soft delete filtering."""

    def active(self) -> SoftDeleteQuerySet:
        """Only records that are not soft deleted."""
        return self.filter(is_deleted=False)
