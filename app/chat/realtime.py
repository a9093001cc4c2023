"""
Realtime fan-out for chat rooms.

Services call schedule_room_event() after a write. The event is handed to
Celery only once the surrounding transaction commits, and the Celery task
publishes it to the room's Channels group through RealtimeGateway.

Components:
    RealtimeGateway: Process-wide handle on the Channels layer with an
        explicit lifecycle (idle -> ready -> closed)
    get_gateway / set_gateway: Accessors; tests swap in a fake gateway
    schedule_room_event: Enqueue a broadcast on transaction commit
    room_group_name: Channels group for a room

Payload sent to consumers:
    {"type": "room.event", "event": "message.created", "room_id": 1, "data": {...}}

Usage:
    from chat.realtime import schedule_room_event

    schedule_room_event(room.id, RoomEvent.MESSAGE_CREATED, payload)
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from kombu.exceptions import OperationalError

from core.exceptions import ExternalServiceError

from chat.constants import REALTIME_CONFIG

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


def room_group_name(room_id: int) -> str:
    return REALTIME_CONFIG.GROUP_NAME_TEMPLATE.format(room_id=room_id)


class GatewayState:
    IDLE = "idle"
    READY = "ready"
    CLOSED = "closed"


class RealtimeGateway:
    """
    Connection manager for the Channels layer.

    The layer is resolved lazily on first publish so importing this module
    never touches Redis. A closed gateway refuses to publish.

    Usage:
        gateway = RealtimeGateway()
        gateway.publish(room_id=1, event="message.created", data={...})
        gateway.close()
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer
        self._state = GatewayState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return self._state

    def start(self) -> None:
        """
        Resolve the channel layer and move to READY.

        Raises:
            ExternalServiceError: No layer configured or gateway closed
        """
        with self._lock:
            if self._state == GatewayState.CLOSED:
                raise ExternalServiceError(
                    "Realtime gateway is closed",
                    error_code="REALTIME_GATEWAY_CLOSED",
                )
            if self._state == GatewayState.READY:
                return

            if self._channel_layer is None:
                self._channel_layer = get_channel_layer()
            if self._channel_layer is None:
                raise ExternalServiceError(
                    "No channel layer configured",
                    error_code="REALTIME_UNAVAILABLE",
                )

            self._state = GatewayState.READY
            logger.info("Realtime gateway ready")

    def publish(self, room_id: int, event: str, data: dict[str, Any]) -> None:
        """
        Send an event to every socket subscribed to a room.

        Raises:
            ExternalServiceError: Gateway unusable or the layer send failed
        """
        if self._state != GatewayState.READY:
            self.start()

        group = room_group_name(room_id)
        payload = {
            "type": "room.event",
            "event": event,
            "room_id": room_id,
            "data": data,
        }

        try:
            async_to_sync(self._channel_layer.group_send)(group, payload)
        except Exception as e:
            raise ExternalServiceError(
                "Realtime publish failed",
                error_code="REALTIME_PUBLISH_FAILED",
                details={"group": group, "event": event, "original_error": str(e)},
            ) from e

    def close(self) -> None:
        """Release the layer. Further publishes raise ExternalServiceError."""
        with self._lock:
            self._channel_layer = None
            self._state = GatewayState.CLOSED
        logger.info("Realtime gateway closed")


_gateway: RealtimeGateway | None = None
_gateway_lock = threading.Lock()


def get_gateway() -> RealtimeGateway:
    """Return the process-wide gateway, creating it on first use."""
    global _gateway
    with _gateway_lock:
        if _gateway is None or _gateway.state == GatewayState.CLOSED:
            _gateway = RealtimeGateway()
        return _gateway


def set_gateway(gateway: RealtimeGateway | None) -> RealtimeGateway | None:
    """
    Replace the process-wide gateway.

    Returns:
        The previous gateway, so callers can restore it
    """
    global _gateway
    with _gateway_lock:
        previous, _gateway = _gateway, gateway
    return previous


def schedule_room_event(room_id: int, event: str, data: dict[str, Any]) -> None:
    """
    Broadcast an event once the current transaction commits.

    Outside a transaction the callback runs immediately. A broker outage
    is logged and does not fail the caller: the write that produced the
    event is already committed.
    """

    def _enqueue():
        from chat.tasks import broadcast_room_event

        try:
            broadcast_room_event.delay(room_id, event, data)
        except OperationalError as e:
            logger.warning(
                f"Could not enqueue {event} for room {room_id}: {e}"
            )

    transaction.on_commit(_enqueue)
