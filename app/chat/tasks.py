"""
Celery tasks for chat app.

- broadcast_room_event: push a room event to WebSocket subscribers

Related files:
    - realtime.py: RealtimeGateway and schedule_room_event

Usage:
    from chat.tasks import broadcast_room_event

    broadcast_room_event.delay(room_id, "message.created", payload)
"""

import logging

from celery import shared_task

from core.exceptions import ExternalServiceError

from chat.constants import REALTIME_CONFIG
from chat.realtime import get_gateway

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(ExternalServiceError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": REALTIME_CONFIG.BROADCAST_MAX_RETRIES},
)
def broadcast_room_event(self, room_id: int, event: str, data: dict) -> None:
    """
    Publish a room event through the realtime gateway.

    Publish failures raise ExternalServiceError and are retried with
    exponential backoff.

    Args:
        room_id: Room whose subscribers receive the event
        event: Event name (see chat.constants.RoomEvent)
        data: JSON-serializable payload
    """
    try:
        get_gateway().publish(room_id, event, data)
    except ExternalServiceError as e:
        logger.warning(
            f"Broadcast of {event} to room {room_id} failed "
            f"(attempt {self.request.retries + 1}): {e}"
        )
        raise

    logger.debug(f"Broadcast {event} to room {room_id}")
