"""
Chat system models.

This module defines the data models for course chat rooms:
- Public rooms (general, support) readable by any signed-in user
- Class rooms and private (1:1) rooms readable by their participants only

Models:
    Room: Container for messages between participants
    Participant: A user's membership in a room (reactivated on rejoin)
    Message: Individual message within a room
    MessageRead: Per-user read receipt for a message

Design Decisions:
    - One Participant row per (room, user); leaving flips is_active and a
      later join reactivates the same row
    - Messages are never hard deleted; soft delete replaces content with a
      placeholder and clears any attachment
    - Message.seen_at is the most recent reader's view; per-reader state
      lives in MessageRead
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.managers import SoftDeleteQuerySet
from core.model_mixins import SoftDeleteMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


DELETED_MESSAGE_PLACEHOLDER = "[Message deleted]"


class RoomType(models.TextChoices):
    """
    Type of room.

    GENERAL: Public room open to every user
    SUPPORT: Public help-desk room, created by admins only
    CLASS: Room for a course group, participants only
    PRIVATE: Two-person room started from the user directory
    """

    GENERAL = "general", "General"
    SUPPORT = "support", "Support"
    CLASS = "class", "Class"
    PRIVATE = "private", "Private"


PUBLIC_ROOM_TYPES = (RoomType.GENERAL, RoomType.SUPPORT)


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: User-authored text message
    IMAGE: Image attachment (attachment_url points to it)
    FILE: Generic file attachment
    SYSTEM: Auto-generated event message (e.g., "Ana Lopez joined the room")
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    FILE = "file", "File"
    SYSTEM = "system", "System"


class Room(BaseModel):
    """
    A chat room.

    Rooms are deactivated rather than deleted. An inactive room behaves as
    missing for every operation (join, send, list).

    Fields:
        name: Display name
        description: Optional room description
        room_type: general, support, class or private
        is_active: False once the room is closed
        created_by: User who opened the room (null for seeded rooms)

    Relationships:
        participants: All Participant records for this room
        messages: All Message records for this room
    """

    name = models.CharField(
        max_length=255,
        help_text="Display name of the room",
    )

    description = models.TextField(
        blank=True,
        default="",
        help_text="Optional description shown in the room header",
    )

    room_type = models.CharField(
        max_length=10,
        choices=RoomType.choices,
        default=RoomType.GENERAL,
        db_index=True,
        help_text="Type of room (general, support, class or private)",
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive rooms are hidden from every chat operation",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_rooms",
        help_text="User who created this room (null for seeded rooms)",
    )

    class Meta:
        db_table = "chat_room"
        ordering = ["-updated_at", "-created_at"]
        indexes = [
            models.Index(
                fields=["room_type", "is_active"],
                name="chat_room_type_active_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_room_type_display()}: {self.name}"

    @property
    def is_public(self) -> bool:
        """General and support rooms are readable by every user."""
        return self.room_type in PUBLIC_ROOM_TYPES

    @property
    def is_private(self) -> bool:
        return self.room_type == RoomType.PRIVATE

    def get_active_participants(self):
        return self.participants.filter(is_active=True)

    def get_active_participant_for_user(self, user: User) -> Participant | None:
        """
        Get the active participant row for a user.

        Always hits the database so callers authorize against current state.
        """
        return Participant.objects.filter(room=self, user=user, is_active=True).first()


class Participant(BaseModel):
    """
    A user's membership in a room.

    Membership Lifecycle:
        1. User joins: row created with is_active=True
        2. User leaves: is_active=False, row kept
        3. User rejoins: same row reactivated, joined_at reset

    Fields:
        room: Room this membership belongs to
        user: Member
        is_active: Whether the user currently belongs to the room
        joined_at: When the user (re)joined
        last_seen_at: Last time the user read the room (drives unread counts)

    Constraints:
        - UniqueConstraint(room, user): one row per user per room
    """

    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Room this participation belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="room_participations",
        help_text="User participating in the room",
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="False after the user leaves; reactivated on rejoin",
    )

    joined_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user last joined this room",
    )

    last_seen_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the user marked the room as read",
    )

    class Meta:
        db_table = "chat_participant"
        ordering = ["joined_at"]
        indexes = [
            models.Index(
                fields=["room", "is_active"],
                name="chat_part_room_active_idx",
            ),
            models.Index(
                fields=["user", "is_active"],
                name="chat_part_user_active_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["room", "user"],
                name="unique_room_participant",
            ),
        ]

    def __str__(self) -> str:
        status = "active" if self.is_active else "left"
        return f"Participant: {self.user_id} in {self.room_id} [{status}]"


class Message(SoftDeleteMixin, BaseModel):
    """
    A message within a room.

    Lifecycle:
        created -> edited (0..n times, by sender) -> deleted (terminal)

    Soft Delete Behavior:
        When is_deleted=True:
        - content holds DELETED_MESSAGE_PLACEHOLDER
        - attachment_url and attachment_name are cleared
        - the row is excluded from room history but still resolvable by id

    Fields:
        room: Room this message belongs to
        sender: Author (null for system messages or removed accounts)
        content: Message text (null for attachment-only messages)
        message_type: text, image, file or system
        attachment_url / attachment_name: Optional attachment reference
        delivered_at: First delivery acknowledgement (set once)
        edited_at: Last edit time
        seen_at: Most recent reader's read time
    """

    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Room this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_messages",
        help_text="User who sent this message (null for system messages)",
    )

    content = models.TextField(
        null=True,
        blank=True,
        help_text="Message text (null for attachment-only messages)",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        db_index=True,
        help_text="Type of message (text, image, file or system)",
    )

    attachment_url = models.URLField(
        max_length=1024,
        null=True,
        blank=True,
        help_text="Location of the attached file",
    )

    attachment_name = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Original file name of the attachment",
    )

    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the message was first delivered (never overwritten)",
    )

    edited_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp when message was last edited",
    )

    seen_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the most recent reader marked this message as read",
    )

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["room", "created_at", "id"],
                name="chat_msg_room_created_idx",
            ),
            models.Index(
                fields=["sender", "-created_at"],
                name="chat_msg_sender_idx",
            ),
        ]

    def __str__(self) -> str:
        sender_str = f"User {self.sender_id}" if self.sender_id else "System"
        content = self.content or ""
        content_preview = content[:50] + "..." if len(content) > 50 else content
        deleted_str = " [deleted]" if self.is_deleted else ""
        return f"{sender_str}: {content_preview}{deleted_str}"

    @property
    def is_system_message(self) -> bool:
        return self.message_type == MessageType.SYSTEM

    @property
    def is_edited(self) -> bool:
        return self.edited_at is not None

    def scrub(self) -> None:
        """
        Soft delete this message.

        Replaces content with the placeholder and clears the attachment in
        the same UPDATE that sets is_deleted. Calling it again rewrites the
        same values.
        """
        self.content = DELETED_MESSAGE_PLACEHOLDER
        self.attachment_url = None
        self.attachment_name = None
        self.soft_delete(
            extra_update_fields=["content", "attachment_url", "attachment_name"]
        )


class MessageRead(models.Model):
    """
    Read receipt: user U has read message M at read_at.

    Rows are only ever upserted. Marking the same message as read twice
    refreshes read_at on the existing row.

    Constraints:
        - UniqueConstraint(message, user)
    """

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="reads",
        help_text="Message that was read",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="message_reads",
        help_text="Reader",
    )

    read_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user last marked the message as read",
    )

    class Meta:
        db_table = "chat_message_read"
        ordering = ["read_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user"],
                name="unique_message_read",
            ),
        ]

    def __str__(self) -> str:
        return f"Read: message {self.message_id} by {self.user_id}"
