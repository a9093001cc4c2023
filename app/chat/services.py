"""
Chat system service layer.

This module provides the business logic for course chat rooms,
encapsulating all operations on rooms, participants, messages and receipts.

Services:
    RoomService: Room lifecycle (create, private chats, listing, access)
    MembershipService: Join, leave, mark room read, presence
    MessageService: Send, list, edit, soft delete, delivered, read
    ReadReceiptService: Idempotent (message, user) read receipts
    UserDirectoryService: Find people to start a private chat with

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions
    - Multi-step writes run in one transaction (cls.atomic())
    - Authorization reads the participant table at the moment of action
    - Realtime events are scheduled on commit, never for rolled-back writes

Usage:
    from chat.services import MembershipService, MessageService

    result = MembershipService.join(room_id=room.id, user=user)

    result = MessageService.send_message(
        room_id=room.id,
        sender=user,
        content="Hola a todos!",
    )
    if result.success:
        message = result.data
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone

from core.services import BaseService, ServiceResult

from chat.constants import MESSAGE_CONFIG, ROOM_CONFIG, RoomEvent
from chat.models import (
    Message,
    MessageRead,
    MessageType,
    Participant,
    PUBLIC_ROOM_TYPES,
    Room,
    RoomType,
)
from chat.realtime import schedule_room_event

if TYPE_CHECKING:
    from datetime import datetime

    from authentication.models import User


def _message_queryset():
    """Messages joined with sender summary and all read receipts."""
    return Message.objects.select_related("sender", "room").prefetch_related(
        "reads__user"
    )


def _message_event_data(message: Message) -> dict:
    """Serialize a message for a realtime event payload."""
    from chat.serializers import MessageSerializer

    return MessageSerializer(message).data


# =============================================================================
# RoomService
# =============================================================================


class RoomService(BaseService):
    """
    Service for room lifecycle operations.

    Methods:
        create_room: Open a general, support or class room
        start_private_chat: Find or create a private room between two users
        list_rooms: Rooms visible to a user with last message and unread count
        get_readable_room: Resolve a room the user may read
    """

    @classmethod
    def get_readable_room(cls, room_id: int, user: User) -> Room | None:
        """
        Resolve an active room the user may read.

        Public rooms (general, support) are readable by everyone; other
        rooms require an active participant row.

        Returns:
            Room, or None when missing, inactive or not readable
        """
        room = Room.objects.filter(id=room_id, is_active=True).first()
        if room is None:
            return None
        if room.is_public:
            return room
        if room.get_active_participant_for_user(user) is None:
            return None
        return room

    @classmethod
    def create_room(
        cls,
        creator: User,
        name: str,
        description: str = "",
        room_type: str = RoomType.GENERAL,
    ) -> ServiceResult[Room]:
        """
        Create a room with its creator as the first participant.

        Args:
            creator: User opening the room
            name: Display name (required)
            description: Optional description
            room_type: general, support or class

        Returns:
            ServiceResult with the new Room

        Error codes:
            VALIDATION_ERROR: Missing name, unknown type, or private type
            PERMISSION_DENIED: Support rooms can only be created by admins
        """
        validation = cls.validate_required(name=name)
        if validation is not None:
            return validation

        if room_type not in RoomType.values:
            return ServiceResult.failure(
                f"Unknown room type: {room_type}",
                error_code="VALIDATION_ERROR",
                errors={"room_type": ["Invalid choice."]},
            )

        if room_type == RoomType.PRIVATE:
            return ServiceResult.failure(
                "Private rooms are started from the user directory",
                error_code="VALIDATION_ERROR",
                errors={"room_type": ["Use the private chat endpoint."]},
            )

        if room_type == RoomType.SUPPORT and not creator.is_admin:
            return ServiceResult.failure(
                "Only administrators can create support rooms",
                error_code="PERMISSION_DENIED",
            )

        with cls.atomic():
            room = Room.objects.create(
                name=name.strip(),
                description=description or "",
                room_type=room_type,
                created_by=creator,
            )
            Participant.objects.create(room=room, user=creator)
            MessageService._create_system_message(
                room=room,
                actor=creator,
                text=f"{creator.get_full_name()} created the room",
            )

        cls.get_logger().info(
            f"User {creator.id} created {room_type} room {room.id}"
        )

        return ServiceResult.success(room)

    @classmethod
    def start_private_chat(
        cls,
        user: User,
        target_user_id: int,
    ) -> ServiceResult[tuple[Room, bool]]:
        """
        Find or create a private room between two users.

        Args:
            user: User starting the chat
            target_user_id: User to chat with

        Returns:
            ServiceResult with (room, created)

        Error codes:
            SAME_USER: Cannot start a private chat with yourself
            USER_NOT_FOUND: Target does not exist or is inactive
        """
        if target_user_id == user.id:
            return ServiceResult.failure(
                "You cannot start a private chat with yourself",
                error_code="SAME_USER",
            )

        User = get_user_model()
        target = User.objects.filter(id=target_user_id, is_active=True).first()
        if target is None:
            return ServiceResult.failure(
                "User not found",
                error_code="USER_NOT_FOUND",
            )

        existing = cls._find_private_room(user, target)
        if existing is not None:
            return ServiceResult.success((existing, False))

        with cls.atomic():
            room = Room.objects.create(
                name=f"{user.get_full_name()} & {target.get_full_name()}",
                description="Private conversation",
                room_type=RoomType.PRIVATE,
                created_by=user,
            )
            Participant.objects.bulk_create(
                [
                    Participant(room=room, user=user),
                    Participant(room=room, user=target),
                ]
            )
            MessageService._create_system_message(
                room=room,
                actor=user,
                text=f"{user.get_full_name()} started a private conversation",
            )

        cls.get_logger().info(
            f"User {user.id} started private room {room.id} with user {target.id}"
        )

        return ServiceResult.success((room, True))

    @classmethod
    def _find_private_room(cls, user: User, other: User) -> Room | None:
        # Chained filters on a multi-valued relation join participants twice.
        return (
            Room.objects.filter(
                room_type=RoomType.PRIVATE,
                is_active=True,
                participants__user=user,
                participants__is_active=True,
            )
            .filter(participants__user=other, participants__is_active=True)
            .order_by("created_at")
            .first()
        )

    @classmethod
    def list_rooms(cls, user: User) -> ServiceResult[list[Room]]:
        """
        List rooms visible to a user.

        Rooms where the user is an active participant come first (most
        recently active first), followed by public rooms the user has not
        joined. Each Room is annotated with:
            last_message: Latest non-deleted message or None
            unread_count: Messages from others after the user's last_seen_at
            is_participant: Whether the user is an active member
        """
        memberships = {
            p.room_id: p
            for p in Participant.objects.filter(
                user=user, is_active=True, room__is_active=True
            )
        }

        joined_rooms = list(
            Room.objects.filter(id__in=memberships.keys()).select_related("created_by")
        )
        public_rooms = list(
            Room.objects.filter(is_active=True, room_type__in=PUBLIC_ROOM_TYPES)
            .exclude(id__in=memberships.keys())
            .select_related("created_by")
            .order_by("created_at")
        )

        rooms = joined_rooms + public_rooms
        for room in rooms:
            participant = memberships.get(room.id)
            room.is_participant = participant is not None
            room.last_message = (
                room.messages.active()
                .select_related("sender")
                .order_by("-created_at", "-id")
                .first()
            )
            room.unread_count = cls._count_unread(room, user, participant)

        return ServiceResult.success(rooms)

    @classmethod
    def _count_unread(
        cls,
        room: Room,
        user: User,
        participant: Participant | None,
    ) -> int:
        """
        Count unread messages in a room for a participant.

        Messages from the user themselves and deleted messages are excluded.
        Without a last_seen_at every message counts. Non-participants have 0.
        """
        if participant is None:
            return 0

        queryset = room.messages.active().exclude(sender=user)
        if participant.last_seen_at:
            queryset = queryset.filter(created_at__gt=participant.last_seen_at)

        return queryset.count()


# =============================================================================
# MembershipService
# =============================================================================


class MembershipService(BaseService):
    """
    Service for room membership.

    Methods:
        join: Join or rejoin a room (idempotent for active members)
        leave: Leave a room, keeping the participant row
        mark_room_read: Move the caller's last_seen_at to now
        touch_presence: Refresh last_seen_at across all memberships
    """

    @classmethod
    def join(cls, room_id: int, user: User) -> ServiceResult[dict]:
        """
        Join a room.

        Reactivates an existing inactive participant row or creates one,
        then appends a join announcement. The participant write and the
        announcement are committed together.

        Args:
            room_id: Room to join
            user: Joining user

        Returns:
            ServiceResult with {"message": ...}

        Error codes:
            ROOM_NOT_FOUND: Room missing, inactive, or a private room the
                user never belonged to
        """
        room = Room.objects.filter(id=room_id, is_active=True).first()
        if room is None:
            return ServiceResult.failure(
                "Room not found",
                error_code="ROOM_NOT_FOUND",
            )

        participant = Participant.objects.filter(room=room, user=user).first()

        if participant is not None and participant.is_active:
            return ServiceResult.success(
                {"message": "You are already a participant in this room"}
            )

        if participant is None and room.is_private:
            return ServiceResult.failure(
                "Room not found",
                error_code="ROOM_NOT_FOUND",
            )

        with cls.atomic():
            if participant is not None:
                participant.is_active = True
                participant.joined_at = timezone.now()
                participant.save(update_fields=["is_active", "joined_at", "updated_at"])
            else:
                participant = Participant.objects.create(room=room, user=user)

            announcement = MessageService._create_system_message(
                room=room,
                actor=user,
                text=f"{user.get_full_name()} joined the room",
            )

        schedule_room_event(
            room.id,
            RoomEvent.MEMBER_JOINED,
            {"user_id": user.id, "message": _message_event_data(announcement)},
        )

        cls.get_logger().info(f"User {user.id} joined room {room.id}")

        return ServiceResult.success({"message": "You have joined the room"})

    @classmethod
    def leave(cls, room_id: int, user: User) -> ServiceResult[dict]:
        """
        Leave a room.

        Sets is_active=False on the caller's row and appends a departure
        announcement in the same transaction. The row is kept for rejoin.

        Error codes:
            MEMBERSHIP_NOT_FOUND: Caller has no active row in the room
        """
        participant = (
            Participant.objects.select_related("room")
            .filter(room_id=room_id, user=user, is_active=True)
            .first()
        )
        if participant is None:
            return ServiceResult.failure(
                "You are not a participant in this room",
                error_code="MEMBERSHIP_NOT_FOUND",
            )

        room = participant.room

        with cls.atomic():
            participant.is_active = False
            participant.save(update_fields=["is_active", "updated_at"])

            announcement = MessageService._create_system_message(
                room=room,
                actor=user,
                text=f"{user.get_full_name()} left the room",
            )

        schedule_room_event(
            room.id,
            RoomEvent.MEMBER_LEFT,
            {"user_id": user.id, "message": _message_event_data(announcement)},
        )

        cls.get_logger().info(f"User {user.id} left room {room.id}")

        return ServiceResult.success({"message": "You have left the room"})

    @classmethod
    def mark_room_read(cls, room_id: int, user: User) -> ServiceResult[dict]:
        """
        Mark every message in a room as read for the caller.

        Sets last_seen_at=now on the caller's active participant row. A
        caller without an active row gets the same success response and
        nothing is written.
        """
        updated = Participant.objects.filter(
            room_id=room_id, user=user, is_active=True
        ).update(last_seen_at=timezone.now())

        if not updated:
            cls.get_logger().debug(
                f"mark_room_read by non-participant {user.id} in room {room_id}"
            )

        return ServiceResult.success({"message": "Messages marked as read"})

    @classmethod
    def touch_presence(cls, user: User, is_online: bool) -> ServiceResult[dict]:
        """
        Record that a user is online.

        When is_online is true, last_seen_at is refreshed on every active
        membership of the user.

        Returns:
            ServiceResult with {"is_online": bool, "timestamp": datetime}
        """
        now = timezone.now()
        if is_online:
            Participant.objects.filter(user=user, is_active=True).update(
                last_seen_at=now
            )

        return ServiceResult.success({"is_online": is_online, "timestamp": now})


# =============================================================================
# MessageService
# =============================================================================


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send_message: Post a message (auto-enrolls in public rooms)
        list_messages: Room history with participants
        get_message: Single message the caller can read
        edit_message: Author-only edit of a live message
        delete_message: Author-only soft delete
        mark_delivered: First-delivery-wins acknowledgement
        mark_read: Read receipt plus room-level seen marker
    """

    @classmethod
    def send_message(
        cls,
        room_id: int,
        sender: User,
        content: str | None,
        message_type: str = MessageType.TEXT,
        attachment_url: str | None = None,
        attachment_name: str | None = None,
    ) -> ServiceResult[Message]:
        """
        Send a message to a room.

        Senders posting to a public room they have not joined are enrolled
        silently. delivered_at stays empty until a recipient acknowledges.

        Args:
            room_id: Target room
            sender: Author
            content: Message text (optional when an attachment is given)
            message_type: text, image or file
            attachment_url: Optional attachment location
            attachment_name: Optional attachment file name

        Returns:
            ServiceResult with the new Message

        Error codes:
            ROOM_NOT_FOUND: Room missing, inactive or not readable by sender
            EMPTY_CONTENT: No text and no attachment
            VALIDATION_ERROR: System type, unknown type, or content too long
        """
        room = RoomService.get_readable_room(room_id, sender)
        if room is None:
            return ServiceResult.failure(
                "Room not found",
                error_code="ROOM_NOT_FOUND",
            )

        if message_type == MessageType.SYSTEM or message_type not in MessageType.values:
            return ServiceResult.failure(
                f"Invalid message type: {message_type}",
                error_code="VALIDATION_ERROR",
                errors={"message_type": ["Invalid choice."]},
            )

        content = content.strip() if content else ""
        if not content and not attachment_url:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
            )

        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message content exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="VALIDATION_ERROR",
                errors={"content": ["Too long."]},
            )

        with cls.atomic():
            if room.is_public:
                cls._ensure_active_participant(room, sender)

            message = Message.objects.create(
                room=room,
                sender=sender,
                content=content or None,
                message_type=message_type,
                attachment_url=attachment_url or None,
                attachment_name=attachment_name or None,
            )

            room.save(update_fields=["updated_at"])

        message = _message_queryset().get(id=message.id)

        schedule_room_event(
            room.id, RoomEvent.MESSAGE_CREATED, _message_event_data(message)
        )

        cls.get_logger().debug(
            f"User {sender.id} sent message {message.id} to room {room.id}"
        )

        return ServiceResult.success(message)

    @classmethod
    def _ensure_active_participant(cls, room: Room, user: User) -> Participant:
        """Create or reactivate the user's row. Call inside a transaction."""
        participant, created = Participant.objects.get_or_create(room=room, user=user)
        if not created and not participant.is_active:
            participant.is_active = True
            participant.joined_at = timezone.now()
            participant.save(update_fields=["is_active", "joined_at", "updated_at"])
        return participant

    @classmethod
    def list_messages(cls, room_id: int, user: User) -> ServiceResult[dict]:
        """
        Get room history.

        Returns the most recent MESSAGE_CONFIG.HISTORY_LIMIT non-deleted
        messages, oldest first, with the room's active participants.

        Returns:
            ServiceResult with {"room", "messages", "participants"}

        Error codes:
            ROOM_NOT_FOUND: Room missing, inactive or not readable
        """
        room = RoomService.get_readable_room(room_id, user)
        if room is None:
            return ServiceResult.failure(
                "Room not found",
                error_code="ROOM_NOT_FOUND",
            )

        recent = list(
            _message_queryset()
            .filter(room=room)
            .active()
            .order_by("-created_at", "-id")[: MESSAGE_CONFIG.HISTORY_LIMIT]
        )
        recent.reverse()

        participants = list(
            room.get_active_participants().select_related("user").order_by("joined_at")
        )

        return ServiceResult.success(
            {"room": room, "messages": recent, "participants": participants}
        )

    @classmethod
    def get_message(cls, message_id: int, user: User) -> ServiceResult[Message]:
        """
        Get a single message.

        Error codes:
            MESSAGE_NOT_FOUND: Missing, or in a room the caller cannot read
        """
        message = _message_queryset().filter(id=message_id).first()
        if message is None or RoomService.get_readable_room(message.room_id, user) is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        return ServiceResult.success(message)

    @classmethod
    def edit_message(
        cls,
        message_id: int,
        user: User,
        new_content: str | None,
    ) -> ServiceResult[Message]:
        """
        Edit a message.

        Checks run in this order: existence, authorship, deleted state,
        content. A rejected edit leaves the message untouched.

        Args:
            message_id: ID of message to edit
            user: User attempting to edit
            new_content: Replacement text

        Returns:
            ServiceResult with the updated Message (sender and receipts loaded)

        Error codes:
            MESSAGE_NOT_FOUND: Message does not exist
            NOT_AUTHOR: User is not the message author
            MESSAGE_DELETED: Cannot edit deleted messages
            EMPTY_CONTENT: Content is empty after trimming
            VALIDATION_ERROR: Content too long
        """
        new_content = new_content.strip() if new_content else ""

        with cls.atomic():
            message = Message.objects.select_for_update().filter(id=message_id).first()

            if message is None:
                return ServiceResult.failure(
                    "Message not found",
                    error_code="MESSAGE_NOT_FOUND",
                )

            if message.sender_id != user.id:
                cls.get_logger().warning(
                    f"User {user.id} tried to edit message {message_id} "
                    f"owned by {message.sender_id}"
                )
                return ServiceResult.failure(
                    "You can only edit your own messages",
                    error_code="NOT_AUTHOR",
                )

            if message.is_deleted:
                return ServiceResult.failure(
                    "Cannot edit deleted messages",
                    error_code="MESSAGE_DELETED",
                )

            if not new_content:
                return ServiceResult.failure(
                    "Message content cannot be empty",
                    error_code="EMPTY_CONTENT",
                )

            if len(new_content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
                return ServiceResult.failure(
                    f"Message content exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                    error_code="VALIDATION_ERROR",
                    errors={"content": ["Too long."]},
                )

            message.content = new_content
            message.edited_at = timezone.now()
            message.save(update_fields=["content", "edited_at", "updated_at"])

        message = _message_queryset().get(id=message.id)

        schedule_room_event(
            message.room_id, RoomEvent.MESSAGE_UPDATED, _message_event_data(message)
        )

        cls.get_logger().info(f"User {user.id} edited message {message.id}")

        return ServiceResult.success(message)

    @classmethod
    def delete_message(cls, message_id: int, user: User) -> ServiceResult[Message]:
        """
        Soft delete a message.

        Content becomes the deleted-message placeholder and the attachment
        is cleared. Deleting an already deleted message rewrites the same
        values and succeeds.

        Returns:
            ServiceResult with the Message (sender loaded, no receipts)

        Error codes:
            MESSAGE_NOT_FOUND: Message does not exist
            NOT_AUTHOR: User is not the message author
        """
        message = Message.objects.select_related("sender").filter(id=message_id).first()
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        if message.sender_id != user.id:
            cls.get_logger().warning(
                f"User {user.id} tried to delete message {message_id} "
                f"owned by {message.sender_id}"
            )
            return ServiceResult.failure(
                "You can only delete your own messages",
                error_code="NOT_AUTHOR",
            )

        message.scrub()

        schedule_room_event(
            message.room_id,
            RoomEvent.MESSAGE_DELETED,
            {"id": message.id, "room_id": message.room_id},
        )

        cls.get_logger().info(
            f"User {user.id} deleted message {message.id} in room {message.room_id}"
        )

        return ServiceResult.success(message)

    @classmethod
    def mark_delivered(cls, message_id: int, user: User) -> ServiceResult[Message]:
        """
        Acknowledge delivery of a message.

        Only the first acknowledgement sets delivered_at; later calls return
        the message unchanged. The conditional UPDATE makes concurrent
        acknowledgements agree on a single timestamp.

        Error codes:
            MESSAGE_NOT_FOUND: Message does not exist
            NOT_PARTICIPANT: Caller is not an active member of the room
        """
        message = Message.objects.filter(id=message_id).only("id", "room_id").first()
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        if not cls._is_active_participant(message.room_id, user):
            cls.get_logger().warning(
                f"Non-participant {user.id} tried to mark message {message_id} "
                f"delivered in room {message.room_id}"
            )
            return ServiceResult.failure(
                "You are not a participant in this room",
                error_code="NOT_PARTICIPANT",
            )

        now = timezone.now()
        transitioned = Message.objects.filter(
            id=message.id, delivered_at__isnull=True
        ).update(delivered_at=now, updated_at=now)

        message = _message_queryset().get(id=message.id)

        if transitioned:
            schedule_room_event(
                message.room_id,
                RoomEvent.MESSAGE_DELIVERED,
                {"id": message.id, "delivered_at": message.delivered_at.isoformat()},
            )

        return ServiceResult.success(message)

    @classmethod
    def mark_read(cls, message_id: int, user: User) -> ServiceResult[Message]:
        """
        Mark a message as read by the caller.

        In one transaction: sets the message's seen_at to now (the most
        recent reader's view) and upserts the caller's read receipt. The
        message is then re-fetched with its sender and every receipt.

        Error codes:
            MESSAGE_NOT_FOUND: Message does not exist
            NOT_PARTICIPANT: Caller is not an active member of the room
        """
        message = Message.objects.filter(id=message_id).first()
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            )

        if not cls._is_active_participant(message.room_id, user):
            cls.get_logger().warning(
                f"Non-participant {user.id} tried to mark message {message_id} "
                f"read in room {message.room_id}"
            )
            return ServiceResult.failure(
                "You are not a participant in this room",
                error_code="NOT_PARTICIPANT",
            )

        now = timezone.now()
        with cls.atomic():
            Message.objects.filter(id=message.id).update(seen_at=now, updated_at=now)
            ReadReceiptService.record(message=message, user=user, read_at=now)

        message = _message_queryset().get(id=message.id)

        schedule_room_event(
            message.room_id,
            RoomEvent.MESSAGE_READ,
            {"id": message.id, "user_id": user.id, "read_at": now.isoformat()},
        )

        cls.get_logger().debug(f"User {user.id} read message {message.id}")

        return ServiceResult.success(message)

    @classmethod
    def _is_active_participant(cls, room_id: int, user: User) -> bool:
        return Participant.objects.filter(
            room_id=room_id, user=user, is_active=True
        ).exists()

    @classmethod
    def _create_system_message(cls, room: Room, actor: User, text: str) -> Message:
        """
        Internal: Append a system announcement to a room.

        The acting user is recorded as sender. Call within an existing
        transaction so the announcement commits with the change it reports.
        """
        message = Message.objects.create(
            room=room,
            sender=actor,
            message_type=MessageType.SYSTEM,
            content=text,
        )

        room.save(update_fields=["updated_at"])

        return message


# =============================================================================
# ReadReceiptService
# =============================================================================


class ReadReceiptService(BaseService):
    """Service for per-user read receipts."""

    @classmethod
    def record(
        cls,
        message: Message,
        user: User,
        read_at: datetime | None = None,
    ) -> MessageRead:
        """
        Upsert the receipt for (message, user).

        Creates the row on first read and refreshes read_at afterwards.
        Receipts are never deleted.
        """
        receipt, created = MessageRead.objects.update_or_create(
            message=message,
            user=user,
            defaults={"read_at": read_at or timezone.now()},
        )

        cls.get_logger().debug(
            f"{'Created' if created else 'Refreshed'} read receipt "
            f"for message {message.id} by user {user.id}"
        )

        return receipt


# =============================================================================
# UserDirectoryService
# =============================================================================


class UserDirectoryService(BaseService):
    """Service for finding users to chat with."""

    @classmethod
    def search(
        cls,
        current_user: User,
        query: str = "",
        limit: int = ROOM_CONFIG.USER_SEARCH_DEFAULT_LIMIT,
    ) -> ServiceResult[list]:
        """
        Search verified, active users other than the caller.

        Matches first name, last name or email (case-insensitive). Each
        user is annotated with has_private_chat and private_room_id.

        Args:
            current_user: User searching
            query: Optional search text
            limit: Maximum results (capped at ROOM_CONFIG.USER_SEARCH_MAX_LIMIT)
        """
        limit = max(1, min(limit, ROOM_CONFIG.USER_SEARCH_MAX_LIMIT))

        User = get_user_model()
        users = User.objects.filter(is_active=True, email_verified=True).exclude(
            id=current_user.id
        )

        query = (query or "").strip()
        if query:
            users = users.filter(
                Q(first_name__icontains=query)
                | Q(last_name__icontains=query)
                | Q(email__icontains=query)
            )

        users = list(users.order_by("first_name", "last_name", "id")[:limit])

        private_rooms = dict(
            Participant.objects.filter(
                is_active=True,
                user__in=users,
                room__room_type=RoomType.PRIVATE,
                room__is_active=True,
                room__participants__user=current_user,
                room__participants__is_active=True,
            ).values_list("user_id", "room_id")
        )

        for user in users:
            user.private_room_id = private_rooms.get(user.id)
            user.has_private_chat = user.private_room_id is not None

        return ServiceResult.success(users)
