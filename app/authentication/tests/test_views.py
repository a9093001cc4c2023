"""
Tests for authentication API endpoints.

Endpoints:
    POST /api/v1/auth/token/
    POST /api/v1/auth/token/refresh/
    GET  /api/v1/auth/me/
"""

from rest_framework import status


TOKEN_URL = "/api/v1/auth/token/"
REFRESH_URL = "/api/v1/auth/token/refresh/"
ME_URL = "/api/v1/auth/me/"


class TestTokenObtain:
    """Tests for JWT issuance."""

    def test_valid_credentials_return_token_pair(self, api_client, user):
        response = api_client.post(
            TOKEN_URL,
            {"email": user.email, "password": "TestPass123!"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data
        assert "refresh" in response.data

    def test_wrong_password_is_rejected(self, api_client, user):
        response = api_client.post(
            TOKEN_URL,
            {"email": user.email, "password": "wrong"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_returns_new_access_token(self, api_client, user):
        pair = api_client.post(
            TOKEN_URL,
            {"email": user.email, "password": "TestPass123!"},
            format="json",
        ).data

        response = api_client.post(REFRESH_URL, {"refresh": pair["refresh"]}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data


class TestMeView:
    """Tests for GET /api/v1/auth/me/."""

    def test_returns_current_user(self, authenticated_client, user):
        response = authenticated_client.get(ME_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == user.id
        assert response.data["full_name"] == "Ana Lopez"
        assert response.data["role"] == "student"

    def test_requires_authentication(self, api_client):
        """
        Anonymous requests are refused.

        Why it matters: every chat and account endpoint requires a resolved user.
        """
        response = api_client.get(ME_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
