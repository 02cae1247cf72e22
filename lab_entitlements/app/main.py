"""
Composition root for the Lab Access entitlement layer.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from shared.config import AccessConfig, get_config
from shared.logging import configure_logging, get_logger
from .adapters.auth import SessionAuthProvider
from .adapters.rest_backend import RestEntitlementBackend
from .gating.access_gate import AccessGate
from .rules.engine import EntitlementResolver
from .store.entitlement_store import EntitlementStore


@dataclass
class AccessLayer:
    """Wired components exposed to the rest of the application."""
    config: AccessConfig
    auth: SessionAuthProvider
    backend: RestEntitlementBackend
    store: EntitlementStore
    gate: AccessGate

    async def start(self) -> None:
        await self.store.start()

    async def stop(self) -> None:
        await self.store.stop()


def create_access_layer(
    config: Optional[AccessConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> AccessLayer:
    """Build the auth provider, data API backend, store and gate from config."""
    config = config or get_config()
    configure_logging(config.service_name, config.log_level)
    logger = get_logger(f"{config.service_name}.main")

    auth = SessionAuthProvider(
        jwt_secret=config.jwt_secret,
        audience=config.jwt_audience,
        algorithm=config.jwt_algorithm
    )
    backend = RestEntitlementBackend(
        base_url=config.data_api_url,
        api_key=config.data_api_key,
        effective_relation=config.effective_relation,
        base_relation=config.base_relation,
        timeout=config.request_timeout_seconds,
        token_getter=lambda: auth.access_token,
        transport=transport
    )
    store = EntitlementStore(
        backend=backend,
        auth=auth,
        resolver=EntitlementResolver(enforce_validity_window=config.enforce_validity_window)
    )
    gate = AccessGate(
        store,
        poll_interval=config.activation_poll_interval_seconds,
        poll_timeout=config.activation_poll_timeout_seconds
    )

    if not config.jwt_secret:
        logger.warning("ACCESS_JWT_SECRET is not set; every session will resolve to no identity")

    logger.info(
        "Access layer created",
        env=config.env,
        data_api_url=config.data_api_url,
        enforce_validity_window=config.enforce_validity_window
    )
    return AccessLayer(config=config, auth=auth, backend=backend, store=store, gate=gate)
