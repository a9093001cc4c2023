"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Room, Participant, Message, MessageRead model tests
- test_services.py: Membership, message lifecycle and receipt services
- test_realtime.py: Gateway, on-commit scheduling and broadcast task
- test_middleware.py: WebSocket JWT authentication
- test_consumers.py: WebSocket consumer tests
- test_views.py: REST API endpoint tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
