"""
Serializers for chat API.

Serializer Hierarchy:
    RoomSerializer: Room with creator
    RoomListSerializer: Room list entry with last message and unread count
    RoomCreateSerializer: Open a room
    PrivateChatCreateSerializer: Start a private chat

    ParticipantSerializer: Participant with user info

    MessageSummarySerializer: Message with sender (deleted-message response)
    MessageSerializer: Message with sender and read receipts
    MessagePreviewSerializer: Minimal message for room lists
    MessageCreateSerializer / MessageUpdateSerializer: Request bodies

    PresenceSerializer, DirectoryUserSerializer, ChatTokenSerializer

Design Decisions:
    - Read and write serializers are separate
    - Business rules (empty content, permissions) are enforced by services;
      write serializers only check shapes and types
"""

from __future__ import annotations

from collections.abc import Mapping

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.constants import MESSAGE_CONFIG, ROOM_CONFIG
from chat.models import Message, MessageRead, MessageType, Participant, Room, RoomType


# =============================================================================
# Message Serializers
# =============================================================================


class MessageReadSerializer(serializers.ModelSerializer):
    """Read receipt with reader summary."""

    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = MessageRead
        fields = ["user", "read_at"]
        read_only_fields = fields


class MessageSummarySerializer(serializers.ModelSerializer):
    """
    Message with sender summary.

    Returned by DELETE messages/{id}/, which reports the scrubbed message
    without receipt detail.
    """

    sender = UserSummarySerializer(read_only=True, allow_null=True)
    sent_at = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "room_id",
            "sender",
            "content",
            "message_type",
            "attachment_url",
            "attachment_name",
            "is_deleted",
            "sent_at",
            "edited_at",
            "delivered_at",
            "seen_at",
        ]
        read_only_fields = fields


class MessageSerializer(MessageSummarySerializer):
    """Message with sender summary and every read receipt."""

    reads = MessageReadSerializer(many=True, read_only=True)

    class Meta(MessageSummarySerializer.Meta):
        fields = MessageSummarySerializer.Meta.fields + ["reads"]
        read_only_fields = fields


class MessagePreviewSerializer(serializers.ModelSerializer):
    """Minimal message used for last_message in room lists."""

    sender_name = serializers.SerializerMethodField()
    content = serializers.SerializerMethodField()
    sent_at = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender_name", "content", "message_type", "sent_at"]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str | None:
        if obj.sender is None:
            return None
        return obj.sender.get_full_name()

    def get_content(self, obj: Message) -> str | None:
        if obj.content is None:
            return obj.attachment_name
        if len(obj.content) > MESSAGE_CONFIG.PREVIEW_LENGTH:
            return obj.content[: MESSAGE_CONFIG.PREVIEW_LENGTH] + "..."
        return obj.content


class MessageCreateSerializer(serializers.Serializer):
    """
    Request body for POST rooms/{id}/messages/.

    Content may be omitted for attachment-only messages; the service
    rejects a message with neither.
    """

    content = serializers.CharField(
        allow_blank=True,
        allow_null=True,
        default=None,
        trim_whitespace=False,
    )
    message_type = serializers.ChoiceField(
        choices=[
            MessageType.TEXT,
            MessageType.IMAGE,
            MessageType.FILE,
        ],
        default=MessageType.TEXT,
    )
    attachment_url = serializers.URLField(
        allow_null=True, allow_blank=True, default=None, max_length=1024
    )
    attachment_name = serializers.CharField(
        allow_null=True, allow_blank=True, default=None, max_length=255
    )


class MessageUpdateSerializer(serializers.Serializer):
    """Request body for PATCH messages/{id}/."""

    content = serializers.CharField(
        allow_blank=True,
        trim_whitespace=False,
    )


# =============================================================================
# Participant Serializers
# =============================================================================


class ParticipantSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Participant
        fields = ["id", "user", "is_active", "joined_at", "last_seen_at"]
        read_only_fields = fields


# =============================================================================
# Room Serializers
# =============================================================================


class RoomSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "description",
            "room_type",
            "is_active",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class RoomListSerializer(RoomSerializer):
    """
    Room list entry.

    Expects rooms annotated by RoomService.list_rooms with last_message,
    unread_count and is_participant.
    """

    last_message = MessagePreviewSerializer(read_only=True, allow_null=True)
    unread_count = serializers.IntegerField(read_only=True)
    is_participant = serializers.BooleanField(read_only=True)

    class Meta(RoomSerializer.Meta):
        fields = RoomSerializer.Meta.fields + [
            "last_message",
            "unread_count",
            "is_participant",
        ]
        read_only_fields = fields


class RoomCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=ROOM_CONFIG.MAX_NAME_LENGTH)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    room_type = serializers.ChoiceField(
        choices=[RoomType.GENERAL, RoomType.SUPPORT, RoomType.CLASS],
        default=RoomType.GENERAL,
    )


class PrivateChatCreateSerializer(serializers.Serializer):
    target_user_id = serializers.IntegerField()


# =============================================================================
# Presence, Directory and Token Serializers
# =============================================================================


class PresenceSerializer(serializers.Serializer):
    """Request body for PUT status/. is_online must be a real boolean."""

    is_online = serializers.BooleanField()

    def to_internal_value(self, data):
        # Non-mapping bodies fall through to the "Invalid data" error
        if isinstance(data, Mapping) and not isinstance(data.get("is_online"), bool):
            raise serializers.ValidationError({"is_online": ["Must be a boolean."]})
        return super().to_internal_value(data)


class DirectoryUserSerializer(UserSummarySerializer):
    """User search result with any existing private room."""

    has_private_chat = serializers.BooleanField(read_only=True)
    private_room_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + [
            "has_private_chat",
            "private_room_id",
        ]
        read_only_fields = fields


class UserSearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="")
    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=ROOM_CONFIG.USER_SEARCH_MAX_LIMIT,
        default=ROOM_CONFIG.USER_SEARCH_DEFAULT_LIMIT,
    )


class ChatTokenSerializer(serializers.Serializer):
    token = serializers.CharField()
    user_id = serializers.IntegerField()
    email = serializers.EmailField()
    role = serializers.CharField()
