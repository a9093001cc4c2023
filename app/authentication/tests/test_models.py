"""
Tests for the authentication User model and its manager.

Test Organization:
    - TestUserModel: fields, display names and role helpers
    - TestUserManager: create_user / create_superuser behavior
"""

import pytest
from django.db import IntegrityError

from authentication.models import User, UserRole
from authentication.tests.factories import UserFactory


# =============================================================================
# User Model Tests
# =============================================================================


class TestUserModel:
    """Tests for the User model."""

    def test_email_must_be_unique(self, db, user):
        """
        Two accounts cannot share an email.

        Why it matters: email is the login identifier for JWT issuance.
        """
        with pytest.raises(IntegrityError):
            User.objects.create_user(email=user.email, password="TestPass123!")

    def test_role_defaults_to_student(self, db):
        """
        New accounts are students unless a role is given.

        Why it matters: only admins may open support rooms, so the
        default must be the least privileged role.
        """
        user = User.objects.create_user(email="new@example.com", password="x")

        assert user.role == UserRole.STUDENT
        assert user.is_admin is False

    def test_get_full_name_joins_first_and_last_name(self, db):
        """
        Full name is used in room announcements.

        Why it matters: "Ana Lopez joined the room" is built from it.
        """
        user = UserFactory(first_name="Ana", last_name="Lopez")

        assert user.get_full_name() == "Ana Lopez"

    def test_get_full_name_falls_back_to_email(self, db):
        """Users without a name are announced by email."""
        user = UserFactory(first_name="", last_name="", email="anon@example.com")

        assert user.get_full_name() == "anon@example.com"

    def test_get_short_name(self, db):
        user = UserFactory(first_name="", email="maria@example.com")

        assert user.get_short_name() == "maria"

    def test_is_admin_for_admin_role(self, db):
        user = UserFactory(role=UserRole.ADMIN)

        assert user.is_admin is True

    def test_str_is_email(self, db, user):
        assert str(user) == user.email


# =============================================================================
# User Manager Tests
# =============================================================================


class TestUserManager:
    """Tests for UserManager."""

    def test_create_user_requires_email(self, db):
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="TestPass123!")

    def test_create_user_normalizes_email_domain(self, db):
        user = User.objects.create_user(email="Ana@EXAMPLE.COM", password="x")

        assert user.email == "Ana@example.com"

    def test_create_user_hashes_password(self, db):
        user = User.objects.create_user(email="a@example.com", password="Secret123!")

        assert user.password != "Secret123!"
        assert user.check_password("Secret123!")

    def test_create_user_without_password_is_unusable(self, db):
        user = User.objects.create_user(email="b@example.com")

        assert user.has_usable_password() is False

    def test_create_superuser_is_verified_admin(self, db, superuser):
        """
        Superusers are platform admins.

        Why it matters: the admin role gates support room creation.
        """
        assert superuser.is_staff is True
        assert superuser.is_superuser is True
        assert superuser.email_verified is True
        assert superuser.role == UserRole.ADMIN

    def test_create_superuser_rejects_non_staff(self, db):
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="x@example.com", password="x", is_staff=False
            )
