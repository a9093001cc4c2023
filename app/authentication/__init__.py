"""
Authentication application.

This app provides the email-based user model with LMS roles and the JWT
endpoints that clients use for both REST and WebSocket access.

Key components:
    - User model: Custom email-based user with admin/teacher/student role
    - Token views: Access/refresh pair via djangorestframework-simplejwt
    - MeView: Current user endpoint

Usage:
    from authentication.models import User, UserRole
"""
