"""
URL configuration for chat API.

URL Structure:
    Rooms:
        /rooms/                      GET, POST
        /rooms/{id}/join/            POST
        /rooms/{id}/leave/           POST
        /rooms/{id}/read/            POST
        /rooms/{id}/messages/        GET, POST

    Messages:
        /messages/{id}/              GET, PATCH, DELETE
        /messages/{id}/delivered/    PUT
        /messages/{id}/read/         PUT

    Other:
        /private/                    POST
        /users/                      GET
        /status/                     PUT
        /token/                      GET

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from chat.views import (
    ChatTokenView,
    MessageViewSet,
    PresenceView,
    PrivateChatView,
    RoomViewSet,
    UserSearchView,
)

router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"messages", MessageViewSet, basename="message")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
    path("private/", PrivateChatView.as_view(), name="private-chat"),
    path("users/", UserSearchView.as_view(), name="user-search"),
    path("status/", PresenceView.as_view(), name="status"),
    path("token/", ChatTokenView.as_view(), name="token"),
]
