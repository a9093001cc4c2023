"""
Chat app for course rooms.

This app handles:
- Rooms (general, support, class and private)
- Membership (join, leave, mark room read)
- Message lifecycle (send, edit, soft delete, delivered, read)
- Read receipts
- WebSocket fan-out through Django Channels

Usage:
    from chat.services import MembershipService, MessageService

    MembershipService.join(room_id=room.id, user=user)
    result = MessageService.send_message(room_id=room.id, sender=user, content="Hola!")
"""
