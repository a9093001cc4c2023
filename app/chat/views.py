"""
Views for chat API.

This module provides REST API endpoints for course chat rooms:
- RoomViewSet: Room listing/creation, membership and room history
- MessageViewSet: Single-message lifecycle
- PrivateChatView, UserSearchView, PresenceView, ChatTokenView

URL Structure:
    /api/v1/chat/rooms/                     GET, POST
    /api/v1/chat/rooms/{id}/join/           POST
    /api/v1/chat/rooms/{id}/leave/          POST
    /api/v1/chat/rooms/{id}/read/           POST
    /api/v1/chat/rooms/{id}/messages/       GET, POST
    /api/v1/chat/messages/{id}/             GET, PATCH, DELETE
    /api/v1/chat/messages/{id}/delivered/   PUT
    /api/v1/chat/messages/{id}/read/        PUT
    /api/v1/chat/private/                   POST
    /api/v1/chat/users/                     GET
    /api/v1/chat/status/                    PUT
    /api/v1/chat/token/                     GET

Design Decisions:
    - Views handle HTTP concerns only; every rule lives in chat.services
    - Service error codes map to HTTP statuses in ERROR_STATUS_MAP
    - Failures are logged with request context before the response is built
"""

from __future__ import annotations

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import AccessToken

from chat.serializers import (
    ChatTokenSerializer,
    DirectoryUserSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    MessageSummarySerializer,
    MessageUpdateSerializer,
    ParticipantSerializer,
    PresenceSerializer,
    PrivateChatCreateSerializer,
    RoomCreateSerializer,
    RoomListSerializer,
    RoomSerializer,
    UserSearchQuerySerializer,
)
from chat.services import (
    MembershipService,
    MessageService,
    RoomService,
    UserDirectoryService,
)

logger = logging.getLogger(__name__)


ERROR_STATUS_MAP = {
    "ROOM_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "MEMBERSHIP_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "MESSAGE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_AUTHOR": status.HTTP_403_FORBIDDEN,
    "NOT_PARTICIPANT": status.HTTP_403_FORBIDDEN,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "MESSAGE_DELETED": status.HTTP_409_CONFLICT,
    "EMPTY_CONTENT": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "SAME_USER": status.HTTP_400_BAD_REQUEST,
}


def error_response(request, result, operation: str) -> Response:
    """
    Translate a failed ServiceResult into an HTTP response.

    Unknown error codes fall back to 400.
    """
    status_code = ERROR_STATUS_MAP.get(result.error_code, status.HTTP_400_BAD_REQUEST)
    logger.warning(
        f"{operation} failed for user {request.user.id}: "
        f"{result.error_code} ({result.error}) "
        f"[{request.method} {request.path}]"
    )
    return Response(result.to_response(), status=status_code)


ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation error"),
    401: OpenApiResponse(description="Authentication required"),
    403: OpenApiResponse(description="Not allowed"),
    404: OpenApiResponse(description="Not found"),
}


# =============================================================================
# Rooms
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_rooms",
        summary="List rooms",
        description=(
            "Rooms the user belongs to, followed by public rooms they have not "
            "joined. Each entry includes the last message and an unread count."
        ),
        tags=["Chat - Rooms"],
        responses={200: RoomListSerializer(many=True)},
    ),
    create=extend_schema(
        operation_id="create_room",
        summary="Create room",
        description="Support rooms can only be created by administrators.",
        tags=["Chat - Rooms"],
        request=RoomCreateSerializer,
        responses={201: RoomSerializer, **ERROR_RESPONSES},
    ),
)
class RoomViewSet(viewsets.ViewSet):
    """
    ViewSet for rooms.

    list:
        Rooms visible to the current user.

    create:
        Open a room; the creator becomes its first participant.

    join / leave:
        Membership changes with a system announcement.

    read:
        Mark every message in the room as read for the caller.

    messages:
        GET room history (last 100 messages) or POST a new message.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        result = RoomService.list_rooms(request.user)
        serializer = RoomListSerializer(result.data, many=True)
        return Response(serializer.data)

    def create(self, request):
        serializer = RoomCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = RoomService.create_room(
            creator=request.user,
            **serializer.validated_data,
        )
        if not result.success:
            return error_response(request, result, "create_room")

        return Response(RoomSerializer(result.data).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="join_room",
        summary="Join room",
        tags=["Chat - Rooms"],
        request=None,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["post"])
    def join(self, request, pk=None):
        result = MembershipService.join(room_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "join_room")
        return Response(result.data)

    @extend_schema(
        operation_id="leave_room",
        summary="Leave room",
        tags=["Chat - Rooms"],
        request=None,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        result = MembershipService.leave(room_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "leave_room")
        return Response(result.data)

    @extend_schema(
        operation_id="mark_room_read",
        summary="Mark room as read",
        description="Non-members receive the same response and nothing changes.",
        tags=["Chat - Rooms"],
        request=None,
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = MembershipService.mark_room_read(room_id=int(pk), user=request.user)
        return Response(result.data)

    @extend_schema(
        operation_id="room_messages",
        summary="Room history / send message",
        tags=["Chat - Messages"],
        request=MessageCreateSerializer,
        responses={200: OpenApiTypes.OBJECT, 201: MessageSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        if request.method == "POST":
            return self._send_message(request, int(pk))

        result = MessageService.list_messages(room_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "list_messages")

        return Response(
            {
                "room": RoomSerializer(result.data["room"]).data,
                "messages": MessageSerializer(result.data["messages"], many=True).data,
                "participants": ParticipantSerializer(
                    result.data["participants"], many=True
                ).data,
            }
        )

    def _send_message(self, request, room_id: int):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.send_message(
            room_id=room_id,
            sender=request.user,
            **serializer.validated_data,
        )
        if not result.success:
            return error_response(request, result, "send_message")

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Messages
# =============================================================================


@extend_schema_view(
    retrieve=extend_schema(
        operation_id="get_message",
        summary="Get message",
        tags=["Chat - Messages"],
        responses={200: MessageSerializer, **ERROR_RESPONSES},
    ),
    partial_update=extend_schema(
        operation_id="edit_message",
        summary="Edit message",
        description="Only the author can edit, and only while the message is not deleted.",
        tags=["Chat - Messages"],
        request=MessageUpdateSerializer,
        responses={
            200: MessageSerializer,
            409: OpenApiResponse(description="Message is deleted"),
            **ERROR_RESPONSES,
        },
    ),
    destroy=extend_schema(
        operation_id="delete_message",
        summary="Delete message",
        description="Soft delete: content is replaced and the attachment cleared.",
        tags=["Chat - Messages"],
        responses={200: MessageSummarySerializer, **ERROR_RESPONSES},
    ),
)
class MessageViewSet(viewsets.ViewSet):
    """
    ViewSet for a single message.

    retrieve / partial_update / destroy:
        Read, edit or soft delete a message.

    delivered:
        First acknowledgement sets delivered_at; later calls change nothing.

    read:
        Upsert the caller's read receipt and set seen_at.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def retrieve(self, request, pk=None):
        result = MessageService.get_message(message_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "get_message")
        return Response(MessageSerializer(result.data).data)

    def partial_update(self, request, pk=None):
        serializer = MessageUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MessageService.edit_message(
            message_id=int(pk),
            user=request.user,
            new_content=serializer.validated_data["content"],
        )
        if not result.success:
            return error_response(request, result, "edit_message")
        return Response(MessageSerializer(result.data).data)

    def destroy(self, request, pk=None):
        result = MessageService.delete_message(message_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "delete_message")
        return Response(MessageSummarySerializer(result.data).data)

    @extend_schema(
        operation_id="mark_message_delivered",
        summary="Mark message delivered",
        tags=["Chat - Messages"],
        request=None,
        responses={200: MessageSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["put"])
    def delivered(self, request, pk=None):
        result = MessageService.mark_delivered(message_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "mark_delivered")
        return Response(MessageSerializer(result.data).data)

    @extend_schema(
        operation_id="mark_message_read",
        summary="Mark message read",
        tags=["Chat - Messages"],
        request=None,
        responses={200: MessageSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        result = MessageService.mark_read(message_id=int(pk), user=request.user)
        if not result.success:
            return error_response(request, result, "mark_read")
        return Response(MessageSerializer(result.data).data)


# =============================================================================
# Private chats, directory, presence and token
# =============================================================================


class PrivateChatView(APIView):
    """
    Start (or resume) a private chat.

    URL: /api/v1/chat/private/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="start_private_chat",
        summary="Start private chat",
        description="Returns 201 with a new room, or 200 with the existing one.",
        tags=["Chat - Rooms"],
        request=PrivateChatCreateSerializer,
        responses={200: RoomSerializer, 201: RoomSerializer, **ERROR_RESPONSES},
    )
    def post(self, request):
        serializer = PrivateChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = RoomService.start_private_chat(
            user=request.user,
            target_user_id=serializer.validated_data["target_user_id"],
        )
        if not result.success:
            return error_response(request, result, "start_private_chat")

        room, created = result.data
        return Response(
            RoomSerializer(room).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class UserSearchView(APIView):
    """
    Search people to chat with.

    URL: /api/v1/chat/users/?q=<text>&limit=<n>
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="search_chat_users",
        summary="Search users",
        tags=["Chat - Users"],
        parameters=[
            OpenApiParameter("q", OpenApiTypes.STR, description="Name or email fragment"),
            OpenApiParameter("limit", OpenApiTypes.INT, description="Maximum results"),
        ],
        responses={200: DirectoryUserSerializer(many=True)},
    )
    def get(self, request):
        params = UserSearchQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        result = UserDirectoryService.search(
            current_user=request.user,
            query=params.validated_data["q"],
            limit=params.validated_data["limit"],
        )
        return Response(DirectoryUserSerializer(result.data, many=True).data)


class PresenceView(APIView):
    """
    Report online status.

    URL: /api/v1/chat/status/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="update_chat_status",
        summary="Update online status",
        tags=["Chat - Users"],
        request=PresenceSerializer,
        responses={200: OpenApiTypes.OBJECT, 400: OpenApiResponse(description="is_online must be a boolean")},
    )
    def put(self, request):
        serializer = PresenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MembershipService.touch_presence(
            user=request.user,
            is_online=serializer.validated_data["is_online"],
        )
        return Response(
            {
                "is_online": result.data["is_online"],
                "timestamp": result.data["timestamp"].isoformat(),
            }
        )


class ChatTokenView(APIView):
    """
    Issue an access token for the WebSocket handshake.

    URL: /api/v1/chat/token/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_chat_token",
        summary="Get WebSocket token",
        tags=["Chat - Realtime"],
        responses={200: ChatTokenSerializer},
    )
    def get(self, request):
        user = request.user
        token = AccessToken.for_user(user)
        serializer = ChatTokenSerializer(
            {
                "token": str(token),
                "user_id": user.id,
                "email": user.email,
                "role": user.role,
            }
        )
        return Response(serializer.data)
