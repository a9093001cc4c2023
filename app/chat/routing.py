"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/<room_id>/ - Subscribe to a room's events

Authentication:
    JWT token passed as ?token=<jwt_access_token> or as the "jwt, <token>"
    subprotocol; JWTAuthMiddleware attaches the user to the scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/<int:room_id>/",
        consumers.ChatConsumer.as_asgi(),
    ),
]
