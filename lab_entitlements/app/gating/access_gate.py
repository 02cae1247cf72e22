"""
Access gate consulted before rendering protected content.
"""

import asyncio
from typing import Optional

from shared.logging import get_logger
from ..rules.models import AccessDecision, AccessStatus
from ..rules.tiers import required_scope_for_tier
from ..store.entitlement_store import EntitlementStore


class AccessGate:
    """Composes the store and resolver into allow/deny/pending decisions."""

    def __init__(
        self,
        store: EntitlementStore,
        poll_interval: float = 3.0,
        poll_timeout: Optional[float] = None
    ):
        self.store = store
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.logger = get_logger("entitlements.gate")

    def check_access(self, required: Optional[str]) -> AccessDecision:
        """Decide access for a required scope against the store's current state."""
        state = self.store.state

        if state.loading:
            return AccessDecision(status=AccessStatus.PENDING, required=required, reason="loading")

        if self.store.resolver.is_satisfied(required, state.entitlements):
            return AccessDecision(
                status=AccessStatus.ALLOWED,
                required=required,
                reason="entitled" if required else "open"
            )

        # Informational only; never changes the decision
        best_match = self.store.resolver.best_match(required, state.entitlements)

        if state.error is not None:
            reason = "fetch_failed"
        elif state.user_id is None:
            reason = "no_identity"
        else:
            reason = "not_entitled"

        self.logger.debug("Access denied", required=required, reason=reason)
        return AccessDecision(
            status=AccessStatus.DENIED,
            required=required,
            best_match=best_match,
            reason=reason,
            error=state.error
        )

    def check_tier(self, access_tier: Optional[str]) -> AccessDecision:
        """Decide access for a content row's access tier."""
        return self.check_access(required_scope_for_tier(access_tier))

    async def refresh(self, required: Optional[str]) -> AccessDecision:
        """Reload entitlements, e.g. after a voucher redemption, and re-check."""
        await self.store.load()
        return self.check_access(required)

    async def wait_for_activation(
        self,
        required: str,
        interval: Optional[float] = None,
        timeout: Optional[float] = None
    ) -> AccessDecision:
        """Poll until a freshly purchased grant shows up or the timeout elapses.

        Returns the last decision; a timeout is not an error.
        """
        interval = self.poll_interval if interval is None else interval
        timeout = self.poll_timeout if timeout is None else timeout

        loop = asyncio.get_running_loop()
        started = loop.time()
        attempts = 0

        while True:
            attempts += 1
            decision = await self.refresh(required)

            if decision.allowed:
                self.logger.info("Entitlement activated", required=required, attempts=attempts)
                return decision

            if timeout is not None and loop.time() - started >= timeout:
                self.logger.warning("Activation polling timed out", required=required, attempts=attempts)
                return decision

            await asyncio.sleep(interval)
