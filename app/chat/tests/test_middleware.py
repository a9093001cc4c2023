"""
Tests for JWTAuthMiddleware.

Token extraction is tested without a database. User resolution runs
through database_sync_to_async, which needs a transactional database.
"""

import pytest
from asgiref.sync import async_to_sync
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import UserFactory
from chat.middleware import JWTAuthMiddleware


async def _noop_app(scope, receive, send):
    return scope


def _resolve_user(scope):
    """Run the middleware over a scope and return the user it attached."""
    captured = {}

    async def inner(scope, receive, send):
        captured["user"] = scope["user"]

    async def run():
        await JWTAuthMiddleware(inner)(scope, None, None)

    async_to_sync(run)()
    return captured["user"]


class TestTokenExtraction:
    def setup_method(self):
        self.middleware = JWTAuthMiddleware(_noop_app)

    def test_token_from_query_string(self):
        scope = {"query_string": b"token=abc.def.ghi&foo=bar"}

        assert self.middleware._get_token_from_query(scope) == "abc.def.ghi"

    def test_missing_query_token(self):
        assert self.middleware._get_token_from_query({"query_string": b""}) is None

    def test_token_from_subprotocol(self):
        scope = {"subprotocols": ["jwt", "abc.def.ghi"]}

        assert self.middleware._get_token_from_subprotocol(scope) == "abc.def.ghi"

    def test_other_subprotocols_are_ignored(self):
        scope = {"subprotocols": ["graphql-ws"]}

        assert self.middleware._get_token_from_subprotocol(scope) is None


@pytest.mark.django_db(transaction=True)
class TestUserResolution:
    def test_valid_token_attaches_user(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))

        resolved = _resolve_user({"type": "websocket", "query_string": f"token={token}".encode()})

        assert resolved.id == user.id

    def test_subprotocol_token_attaches_user(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))

        resolved = _resolve_user(
            {"type": "websocket", "query_string": b"", "subprotocols": ["jwt", token]}
        )

        assert resolved.id == user.id

    def test_no_token_is_anonymous(self):
        resolved = _resolve_user({"type": "websocket", "query_string": b""})

        assert isinstance(resolved, AnonymousUser)

    def test_garbage_token_is_anonymous(self):
        resolved = _resolve_user({"type": "websocket", "query_string": b"token=not-a-jwt"})

        assert isinstance(resolved, AnonymousUser)

    def test_inactive_user_is_anonymous(self):
        user = UserFactory(is_active=False)
        token = str(AccessToken.for_user(user))

        resolved = _resolve_user({"type": "websocket", "query_string": f"token={token}".encode()})

        assert isinstance(resolved, AnonymousUser)

    def test_deleted_user_is_anonymous(self):
        user = UserFactory()
        token = str(AccessToken.for_user(user))
        user.delete()

        resolved = _resolve_user({"type": "websocket", "query_string": f"token={token}".encode()})

        assert isinstance(resolved, AnonymousUser)
