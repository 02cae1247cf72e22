"""
Unit tests for the session auth provider.
"""

import pytest
from unittest.mock import MagicMock

from lab_entitlements.app.adapters.auth import SessionAuthProvider
from lab_entitlements.app.adapters.base import AuthEvent
from shared.errors import AuthenticationError
from shared.test_helpers import MOCK_JWT_SECRET, create_mock_jwt_token


class TestSessionAuthProvider:
    """Test cases for SessionAuthProvider."""

    @pytest.fixture
    def auth(self):
        return SessionAuthProvider(jwt_secret=MOCK_JWT_SECRET)

    @pytest.mark.asyncio
    async def test_signed_out_has_no_user(self, auth):
        assert await auth.get_current_user_id() is None
        assert auth.access_token is None

    @pytest.mark.asyncio
    async def test_sign_in_exposes_subject(self, auth):
        auth.sign_in(create_mock_jwt_token("user-42"))

        assert await auth.get_current_user_id() == "user-42"

    @pytest.mark.asyncio
    async def test_expired_token_is_no_identity(self, auth):
        auth.sign_in(create_mock_jwt_token("user-42", expires_in=-60))

        assert await auth.get_current_user_id() is None

    @pytest.mark.asyncio
    async def test_wrong_secret_is_no_identity(self, auth):
        auth.sign_in(create_mock_jwt_token("user-42", secret="another-secret-entirely-32-bytes!"))

        assert await auth.get_current_user_id() is None

    @pytest.mark.asyncio
    async def test_wrong_audience_is_no_identity(self, auth):
        auth.sign_in(create_mock_jwt_token("user-42", audience="anon"))

        assert await auth.get_current_user_id() is None

    @pytest.mark.asyncio
    async def test_audience_check_disabled(self):
        auth = SessionAuthProvider(jwt_secret=MOCK_JWT_SECRET, audience=None)
        auth.sign_in(create_mock_jwt_token("user-42", audience="anything"))

        assert await auth.get_current_user_id() == "user-42"

    def test_decode_strips_bearer(self, auth):
        token = create_mock_jwt_token("user-42")

        claims = auth.decode(f"Bearer {token}")

        assert claims["sub"] == "user-42"

    def test_decode_invalid(self, auth):
        with pytest.raises(AuthenticationError) as exc_info:
            auth.decode("not-a-jwt")

        assert exc_info.value.code == "AUTHENTICATION_ERROR"

    @pytest.mark.asyncio
    async def test_unset_secret_rejects_every_token(self):
        auth = SessionAuthProvider(jwt_secret="")
        token = create_mock_jwt_token("user-42")

        with pytest.raises(AuthenticationError) as exc_info:
            auth.decode(token)

        assert "not configured" in exc_info.value.message

        auth.sign_in(token)
        assert await auth.get_current_user_id() is None

    def test_events_emitted(self, auth):
        listener = MagicMock()
        auth.subscribe(listener)

        auth.sign_in(create_mock_jwt_token("user-1"))
        auth.refresh_session(create_mock_jwt_token("user-1"))
        auth.sign_out()

        assert [c.args[0] for c in listener.call_args_list] == [
            AuthEvent.SIGNED_IN,
            AuthEvent.TOKEN_REFRESHED,
            AuthEvent.SIGNED_OUT,
        ]
        assert auth.access_token is None

    def test_unsubscribe(self, auth):
        listener = MagicMock()
        unsubscribe = auth.subscribe(listener)

        unsubscribe()
        unsubscribe()
        auth.sign_out()

        listener.assert_not_called()
        assert auth.listener_count == 0

    def test_failing_listener_does_not_block_others(self, auth):
        failing = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        auth.subscribe(failing)
        auth.subscribe(healthy)

        auth.sign_out()

        healthy.assert_called_once_with(AuthEvent.SIGNED_OUT)
