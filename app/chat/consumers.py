"""
WebSocket consumers for the chat application.

Consumers:
    ChatConsumer: Subscribes a socket to one room's events

Authentication:
    JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    Each room has a channel group named "chat_room_{room_id}". Events are
    published to it by chat.tasks.broadcast_room_event after a write commits.

Message Types (from client):
    - typing: {"type": "typing", "is_typing": true}
    - delivered: {"type": "delivered", "message_id": 42}
    - read: {"type": "read", "message_id": 42}

Frames (to client):
    - {"event": "message.created" | ..., "room_id": 1, "data": {...}}
    - {"event": "typing", "room_id": 1, "data": {"user_id": 7, "is_typing": true}}
    - {"event": "error", "room_id": 1, "data": {"error": "...", "error_code": "..."}}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from chat.constants import REALTIME_CONFIG, RoomEvent
from chat.models import Room
from chat.realtime import room_group_name
from chat.services import MessageService, RoomService

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for a chat room.

    Handles:
        - Connection authentication and authorization
        - Joining/leaving the room's channel group
        - Typing indicators
        - Delivery and read acknowledgements

    Attributes:
        room_id: ID of the connected room
        room_group_name: Channel layer group name for the room
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.room_id: int | None = None
        self.room_group_name: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated (4001)
            2. Room exists and is active (4004)
            3. User may read the room (4003)
        """
        self.room_id = self.scope["url_route"]["kwargs"]["room_id"]
        user = self.scope.get("user")

        if not user or isinstance(user, AnonymousUser):
            logger.warning(f"Rejected unauthenticated connection to room {self.room_id}")
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        if not await self._room_exists():
            logger.warning(
                f"User {user.id} tried to connect to non-existent room {self.room_id}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_NOT_FOUND)
            return

        if not await self._can_read_room(user):
            logger.warning(f"User {user.id} may not read room {self.room_id}")
            await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)
            return

        self.room_group_name = room_group_name(self.room_id)
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)

        # Browsers drop the socket unless the offered subprotocol is echoed
        subprotocol = "jwt" if "jwt" in self.scope.get("subprotocols", []) else None
        await self.accept(subprotocol=subprotocol)
        logger.info(f"User {user.id} connected to room {self.room_id}")

    async def disconnect(self, close_code):
        if self.room_group_name:
            await self.channel_layer.group_discard(
                self.room_group_name,
                self.channel_name,
            )
            logger.info(
                f"User {self.scope['user'].id} disconnected from room {self.room_id}"
            )

    async def receive_json(self, content):
        """
        Handle incoming WebSocket frames.

        Args:
            content: Parsed JSON frame from client
        """
        if not isinstance(content, dict):
            await self._send_error("Frame must be a JSON object", "VALIDATION_ERROR")
            return

        frame_type = content.get("type")
        user = self.scope["user"]

        if frame_type == "typing":
            await self._handle_typing(user, content)
        elif frame_type in ("delivered", "read"):
            await self._handle_acknowledgement(user, frame_type, content)
        else:
            await self._send_error(f"Unknown message type: {frame_type}", "UNKNOWN_TYPE")

    async def _handle_typing(self, user, content):
        await self.channel_layer.group_send(
            self.room_group_name,
            {
                "type": "room.typing",
                "user_id": user.id,
                "is_typing": bool(content.get("is_typing", False)),
            },
        )

    async def _handle_acknowledgement(self, user, frame_type, content):
        """
        Route delivered/read frames to MessageService.

        The resulting event reaches every subscriber (this socket included)
        through the broadcast task, so only failures are answered here.
        """
        message_id = content.get("message_id")
        if not isinstance(message_id, int):
            await self._send_error("message_id must be an integer", "VALIDATION_ERROR")
            return

        result = await self._acknowledge(user, frame_type, message_id)
        if not result.success:
            await self._send_error(result.error, result.error_code)

    async def _send_error(self, error: str, error_code: str | None):
        await self.send_json(
            {
                "event": "error",
                "room_id": self.room_id,
                "data": {"error": error, "error_code": error_code},
            }
        )

    async def room_event(self, event):
        """
        Forward a room.event from the channel layer to the client.

        When the socket's own user leaves a room they can no longer read
        (class or private), the socket is unsubscribed and closed with 4003.
        """
        await self.send_json(
            {
                "event": event["event"],
                "room_id": event["room_id"],
                "data": event["data"],
            }
        )

        if event["event"] != RoomEvent.MEMBER_LEFT:
            return

        user = self.scope.get("user")
        if not user or user.id != event["data"].get("user_id"):
            return

        if await self._can_read_room(user):
            return

        await self.channel_layer.group_discard(self.room_group_name, self.channel_name)
        self.room_group_name = None
        logger.info(f"User {user.id} left room {self.room_id}; closing socket")
        await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)

    async def room_typing(self, event):
        """Forward typing indicators to everyone but the typist."""
        user = self.scope.get("user")
        if user and user.id == event["user_id"]:
            return

        await self.send_json(
            {
                "event": "typing",
                "room_id": self.room_id,
                "data": {"user_id": event["user_id"], "is_typing": event["is_typing"]},
            }
        )

    @database_sync_to_async
    def _room_exists(self) -> bool:
        return Room.objects.filter(id=self.room_id, is_active=True).exists()

    @database_sync_to_async
    def _can_read_room(self, user) -> bool:
        return RoomService.get_readable_room(self.room_id, user) is not None

    @database_sync_to_async
    def _acknowledge(self, user, frame_type: str, message_id: int):
        if frame_type == "delivered":
            return MessageService.mark_delivered(message_id=message_id, user=user)
        return MessageService.mark_read(message_id=message_id, user=user)
