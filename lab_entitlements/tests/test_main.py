"""
Tests for configuration, logging and access layer wiring.
"""

import httpx
import pytest

from lab_entitlements.app.main import AccessLayer, create_access_layer
from shared.config import AccessConfig, get_config
from shared.logging import (
    add_correlation_context,
    add_service_context,
    load_id_var,
    user_id_var,
)
from shared.test_helpers import EntitlementFactory, MOCK_JWT_SECRET, create_mock_jwt_token


class TestConfig:
    """Test cases for AccessConfig."""

    def test_defaults(self):
        config = get_config()

        assert config.effective_relation == "entitlements_effective"
        assert config.base_relation == "entitlements"
        assert config.enforce_validity_window is True
        assert config.jwt_audience == "authenticated"
        assert config.jwt_secret == ""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ACCESS_DATA_API_URL", "https://data.example.test")
        monkeypatch.setenv("ACCESS_ENFORCE_VALIDITY_WINDOW", "false")

        config = AccessConfig()

        assert config.data_api_url == "https://data.example.test"
        assert config.enforce_validity_window is False

    def test_explicit_overrides(self):
        config = get_config(log_level="debug", request_timeout_seconds=2.5)

        assert config.log_level == "debug"
        assert config.request_timeout_seconds == 2.5


class TestLoggingProcessors:
    """Test cases for the structlog processors."""

    def test_service_context(self):
        event = add_service_context(None, "info", {"logger": "entitlements.store"})

        assert event["service"] == "entitlements"

    def test_correlation_context(self):
        load_token = load_id_var.set("load-1")
        user_token = user_id_var.set("user-1")
        try:
            event = add_correlation_context(None, "info", {"event": "x"})
        finally:
            user_id_var.reset(user_token)
            load_id_var.reset(load_token)

        assert event["load_id"] == "load-1"
        assert event["user_id"] == "user-1"

    def test_no_correlation_outside_a_load(self):
        event = add_correlation_context(None, "info", {"event": "x"})

        assert "load_id" not in event
        assert "user_id" not in event

    def test_explicit_user_id_wins(self):
        token = user_id_var.set("user-1")
        try:
            event = add_correlation_context(None, "info", {"user_id": "user-2"})
        finally:
            user_id_var.reset(token)

        assert event["user_id"] == "user-2"


class TestCreateAccessLayer:
    """Test cases for create_access_layer."""

    @pytest.mark.asyncio
    async def test_wiring_end_to_end(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            rows = [EntitlementFactory.create_row("challenge_pack:intro", user_id="user-7")]
            return httpx.Response(200, json=rows)

        config = get_config(jwt_secret=MOCK_JWT_SECRET, data_api_url="http://data.test", data_api_key="anon")
        layer = create_access_layer(config, transport=httpx.MockTransport(handler))

        assert isinstance(layer, AccessLayer)
        assert layer.store.resolver.enforce_validity_window is True

        await layer.start()
        try:
            assert layer.gate.check_access("challenge_pack:intro").allowed is False
            assert layer.store.state.user_id is None
            assert seen == []

            token = create_mock_jwt_token("user-7")
            layer.auth.sign_in(token)
            assert layer.gate.check_access("challenge_pack:intro").pending is True

            await layer.store.wait_until_settled()

            assert layer.gate.check_access("challenge_pack:intro").allowed is True
            assert seen[0].headers["Authorization"] == f"Bearer {token}"
        finally:
            await layer.stop()

        assert layer.auth.listener_count == 0
