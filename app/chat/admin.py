"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Room management
- Participant viewing
- Message moderation and read receipts
"""

from django.contrib import admin

from chat.models import Message, MessageRead, Participant, Room


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in room admin."""

    model = Participant
    extra = 0
    readonly_fields = ["joined_at", "last_seen_at"]
    raw_id_fields = ["user"]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "room_type", "is_active", "created_by", "created_at"]
    list_filter = ["room_type", "is_active", "created_at"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["created_by"]
    inlines = [ParticipantInline]
    ordering = ["-created_at"]


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["id", "room", "user", "is_active", "joined_at", "last_seen_at"]
    list_filter = ["is_active", "joined_at"]
    search_fields = ["user__email", "room__name"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["room", "user"]
    ordering = ["-joined_at"]


class MessageReadInline(admin.TabularInline):
    model = MessageRead
    extra = 0
    readonly_fields = ["user", "read_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "room",
        "sender",
        "message_type",
        "content_preview",
        "is_deleted",
        "created_at",
    ]
    list_filter = ["message_type", "is_deleted", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = [
        "created_at",
        "updated_at",
        "deleted_at",
        "delivered_at",
        "edited_at",
        "seen_at",
    ]
    raw_id_fields = ["room", "sender"]
    inlines = [MessageReadInline]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        content = obj.content or obj.attachment_name or ""
        max_length = 50
        if len(content) > max_length:
            return content[:max_length] + "..."
        return content
