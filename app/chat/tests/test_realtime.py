"""
Tests for realtime fan-out.

Covers:
- RealtimeGateway lifecycle (idle -> ready -> closed)
- schedule_room_event: broadcasts only after the transaction commits
- broadcast_room_event: Celery task publishing through the gateway
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from asgiref.sync import async_to_sync
from channels.layers import InMemoryChannelLayer
from kombu.exceptions import OperationalError

from core.exceptions import ExternalServiceError

from chat.constants import RoomEvent
from chat.realtime import (
    GatewayState,
    RealtimeGateway,
    get_gateway,
    room_group_name,
    schedule_room_event,
    set_gateway,
)
from chat.services import MessageService
from chat.tasks import broadcast_room_event


@pytest.fixture
def channel_layer():
    return InMemoryChannelLayer()


@pytest.fixture
def gateway(channel_layer):
    """Install a gateway bound to an in-memory layer for the test."""
    gateway = RealtimeGateway(channel_layer=channel_layer)
    previous = set_gateway(gateway)
    yield gateway
    set_gateway(previous)


def _subscribe(layer, room_id):
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(room_group_name(room_id), channel)
    return channel


# =============================================================================
# RealtimeGateway
# =============================================================================


class TestRealtimeGateway:
    def test_starts_idle_and_becomes_ready_on_publish(self, gateway, channel_layer):
        channel = _subscribe(channel_layer, 7)
        assert gateway.state == GatewayState.IDLE

        gateway.publish(7, RoomEvent.MESSAGE_CREATED, {"id": 1})

        assert gateway.state == GatewayState.READY
        received = async_to_sync(channel_layer.receive)(channel)
        assert received == {
            "type": "room.event",
            "event": RoomEvent.MESSAGE_CREATED,
            "room_id": 7,
            "data": {"id": 1},
        }

    def test_closed_gateway_refuses_to_publish(self, gateway):
        """
        Publishing after close raises instead of silently dropping events.

        Why it matters: The Celery task retries on ExternalServiceError.
        """
        gateway.close()

        with pytest.raises(ExternalServiceError) as exc_info:
            gateway.publish(1, RoomEvent.MESSAGE_CREATED, {})

        assert exc_info.value.error_code == "REALTIME_GATEWAY_CLOSED"

    def test_layer_failure_is_wrapped(self):
        layer = MagicMock()
        layer.group_send = AsyncMock(side_effect=ConnectionError("redis down"))
        gateway = RealtimeGateway(channel_layer=layer)

        with pytest.raises(ExternalServiceError) as exc_info:
            gateway.publish(3, RoomEvent.MESSAGE_DELETED, {"id": 9})

        assert exc_info.value.error_code == "REALTIME_PUBLISH_FAILED"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_missing_layer_is_reported(self, mocker):
        mocker.patch("chat.realtime.get_channel_layer", return_value=None)
        gateway = RealtimeGateway()

        with pytest.raises(ExternalServiceError) as exc_info:
            gateway.start()

        assert exc_info.value.error_code == "REALTIME_UNAVAILABLE"
        assert gateway.state == GatewayState.IDLE

    def test_get_gateway_replaces_closed_gateway(self, gateway):
        gateway.close()

        replacement = get_gateway()

        assert replacement is not gateway
        assert replacement.state == GatewayState.IDLE


# =============================================================================
# schedule_room_event
# =============================================================================


class TestScheduleRoomEvent:
    def test_enqueues_on_commit(self, db, django_capture_on_commit_callbacks, mocker):
        delay = mocker.patch("chat.tasks.broadcast_room_event.delay")

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            schedule_room_event(5, RoomEvent.MESSAGE_READ, {"id": 2})

        delay.assert_not_called()
        assert len(callbacks) == 1

        callbacks[0]()

        delay.assert_called_once_with(5, RoomEvent.MESSAGE_READ, {"id": 2})

    def test_broker_outage_does_not_raise(self, db, django_capture_on_commit_callbacks, mocker):
        """
        A broker failure after commit is logged, not raised.

        Why it matters: The write has already committed; the HTTP caller
        must still get its success response.
        """
        mocker.patch(
            "chat.tasks.broadcast_room_event.delay",
            side_effect=OperationalError("broker unreachable"),
        )

        with django_capture_on_commit_callbacks(execute=True):
            schedule_room_event(5, RoomEvent.MESSAGE_READ, {"id": 2})

    def test_send_message_broadcasts_after_commit(
        self, class_room, ana, django_capture_on_commit_callbacks, mocker
    ):
        delay = mocker.patch("chat.tasks.broadcast_room_event.delay")

        with django_capture_on_commit_callbacks(execute=True):
            result = MessageService.send_message(
                room_id=class_room.id, sender=ana, content="Hola"
            )

        delay.assert_called_once()
        room_id, event, data = delay.call_args.args
        assert room_id == class_room.id
        assert event == RoomEvent.MESSAGE_CREATED
        assert data["id"] == result.data.id

    def test_failed_edit_broadcasts_nothing(
        self, class_room, ana, carla, django_capture_on_commit_callbacks, mocker
    ):
        delay = mocker.patch("chat.tasks.broadcast_room_event.delay")
        message = MessageService.send_message(
            room_id=class_room.id, sender=ana, content="Hola"
        ).data

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            MessageService.edit_message(
                message_id=message.id, user=carla, new_content="Adios"
            )

        assert callbacks == []
        delay.assert_not_called()


# =============================================================================
# broadcast_room_event
# =============================================================================


class TestBroadcastRoomEventTask:
    def test_publishes_through_gateway(self, gateway, channel_layer):
        channel = _subscribe(channel_layer, 11)

        broadcast_room_event(11, RoomEvent.MEMBER_JOINED, {"user_id": 4})

        received = async_to_sync(channel_layer.receive)(channel)
        assert received["event"] == RoomEvent.MEMBER_JOINED
        assert received["data"] == {"user_id": 4}

    def test_publish_failure_is_raised_for_retry(self):
        layer = MagicMock()
        layer.group_send = AsyncMock(side_effect=ConnectionError("redis down"))
        previous = set_gateway(RealtimeGateway(channel_layer=layer))

        try:
            with pytest.raises(ExternalServiceError):
                broadcast_room_event(11, RoomEvent.MEMBER_JOINED, {"user_id": 4})
        finally:
            set_gateway(previous)

    def test_retry_policy(self):
        assert ExternalServiceError in broadcast_room_event.autoretry_for
        assert broadcast_room_event.retry_kwargs["max_retries"] == 3
        assert broadcast_room_event.retry_backoff is True
