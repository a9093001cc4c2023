"""
Constants and configuration for chat module features.

Import example:
    from chat.constants import MESSAGE_CONFIG, ROOM_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters

    # Room history returned by GET rooms/{id}/messages/
    HISTORY_LIMIT: Final[int] = 100

    # Preview length for last_message in room lists
    PREVIEW_LENGTH: Final[int] = 120


# =============================================================================
# Room Configuration
# =============================================================================


class ROOM_CONFIG:
    """Configuration for rooms and the user directory."""

    MAX_NAME_LENGTH: Final[int] = 255

    USER_SEARCH_DEFAULT_LIMIT: Final[int] = 10
    USER_SEARCH_MAX_LIMIT: Final[int] = 50


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for WebSocket fan-out."""

    # Channels group name for a room: chat_room_{room_id}
    GROUP_NAME_TEMPLATE: Final[str] = "chat_room_{room_id}"

    # Close codes sent to WebSocket clients
    CLOSE_UNAUTHENTICATED: Final[int] = 4001
    CLOSE_FORBIDDEN: Final[int] = 4003
    CLOSE_NOT_FOUND: Final[int] = 4004

    # Celery retry policy for broadcast_room_event
    BROADCAST_MAX_RETRIES: Final[int] = 3


class RoomEvent:
    """Event names pushed to room subscribers."""

    MESSAGE_CREATED: Final[str] = "message.created"
    MESSAGE_UPDATED: Final[str] = "message.updated"
    MESSAGE_DELETED: Final[str] = "message.deleted"
    MESSAGE_DELIVERED: Final[str] = "message.delivered"
    MESSAGE_READ: Final[str] = "message.read"
    MEMBER_JOINED: Final[str] = "room.member_joined"
    MEMBER_LEFT: Final[str] = "room.member_left"
