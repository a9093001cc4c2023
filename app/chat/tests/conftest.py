"""
Test configuration and fixtures for chat tests.

This module provides:
- Users with fixed names (Ana, Bruno, Carla) so announcements are predictable
- Rooms of every type with their participant rows
- API client helpers for authenticated requests
- A recorder for realtime events scheduled by services

Usage:
    def test_example(general_room, ana_client):
        response = ana_client.post(f"/api/v1/chat/rooms/{general_room.id}/join/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import UserRole
from authentication.tests.factories import UserFactory
from chat.models import RoomType
from chat.tests.factories import ParticipantFactory, RoomFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def ana(db):
    """A student named Ana Lopez."""
    return UserFactory(first_name="Ana", last_name="Lopez")


@pytest.fixture
def bruno(db):
    """A student named Bruno Diaz."""
    return UserFactory(first_name="Bruno", last_name="Diaz")


@pytest.fixture
def carla(db):
    """A teacher named Carla Ruiz."""
    return UserFactory(first_name="Carla", last_name="Ruiz", role=UserRole.TEACHER)


@pytest.fixture
def admin_user(db):
    return UserFactory(first_name="Root", last_name="Admin", role=UserRole.ADMIN)


# =============================================================================
# Room Fixtures
# =============================================================================


@pytest.fixture
def general_room(db):
    """An active public room with no participants and no messages."""
    return RoomFactory(name="General", room_type=RoomType.GENERAL, created_by=None)


@pytest.fixture
def inactive_room(db):
    return RoomFactory(name="Closed", room_type=RoomType.GENERAL, is_active=False)


@pytest.fixture
def class_room(db, carla, ana):
    """A class room with Carla and Ana as active participants."""
    room = RoomFactory(name="Spanish A1", room_type=RoomType.CLASS, created_by=carla)
    ParticipantFactory(room=room, user=carla)
    ParticipantFactory(room=room, user=ana)
    return room


@pytest.fixture
def private_room(db, ana, bruno):
    """A private room between Ana and Bruno."""
    room = RoomFactory(
        name="Ana Lopez & Bruno Diaz",
        room_type=RoomType.PRIVATE,
        created_by=ana,
    )
    ParticipantFactory(room=room, user=ana)
    ParticipantFactory(room=room, user=bruno)
    return room


# =============================================================================
# Realtime Fixtures
# =============================================================================


@pytest.fixture
def room_events(mocker):
    """
    Record realtime events scheduled by chat services.

    Usage:
        def test_example(room_events):
            ...
            assert room_events.call_args.args[1] == RoomEvent.MESSAGE_CREATED
    """
    return mocker.patch("chat.services.schedule_room_event")


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, bruno):
            client = authenticated_client_factory(bruno)
            response = client.get("/api/v1/chat/rooms/")
    """

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def ana_client(authenticated_client_factory, ana):
    return authenticated_client_factory(ana)


@pytest.fixture
def bruno_client(authenticated_client_factory, bruno):
    return authenticated_client_factory(bruno)
