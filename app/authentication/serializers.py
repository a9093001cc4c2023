"""
Serializers for authentication models.

- UserSerializer: current user (GET /api/v1/auth/me/)
- UserSummarySerializer: compact user embedded in chat payloads

Security:
    - Password and permission fields are never exposed
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated user's own account."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "email_verified",
            "date_joined",
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Compact user representation for chat senders and participants.

    Email is deliberately left out: room members see each other's names
    and roles only.
    """

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "full_name", "role"]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()
