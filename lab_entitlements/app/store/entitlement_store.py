"""
Session-scoped entitlement store for the current user.
"""

import asyncio
import uuid
from dataclasses import dataclass, replace
from typing import List, Optional, Set, Tuple

from shared.logging import get_logger, load_id_var, user_id_var
from ..adapters.base import AuthEvent, AuthProvider, EntitlementBackend, Unsubscribe
from ..rules.engine import EntitlementResolver
from ..rules.models import Entitlement


@dataclass(frozen=True)
class StoreState:
    """Immutable snapshot of the store.

    ``loading``, ``error`` and an empty-but-loaded collection are distinct
    states; callers must not collapse them into one boolean.
    """
    entitlements: Tuple[Entitlement, ...] = ()
    loading: bool = True
    loaded: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None
    user_id: Optional[str] = None


class EntitlementStore:
    """Owns the current user's entitlements and keeps them in step with auth state."""

    def __init__(
        self,
        backend: EntitlementBackend,
        auth: AuthProvider,
        resolver: Optional[EntitlementResolver] = None
    ):
        self.backend = backend
        self.auth = auth
        self.resolver = resolver or EntitlementResolver()
        self.logger = get_logger("entitlements.store")

        self._state = StoreState()
        self._generation = 0
        self._settled = asyncio.Event()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()

    # Lifecycle

    async def start(self) -> None:
        """Subscribe to auth changes and perform the initial load."""
        self._loop = asyncio.get_running_loop()
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.subscribe(self._on_auth_change)
            self.logger.info("Entitlement store started")
        await self.load()

    async def stop(self) -> None:
        """Unsubscribe and cancel loads still in flight."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._loop = None

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self.logger.info("Entitlement store stopped", cancelled_loads=len(tasks))

    async def __aenter__(self) -> "EntitlementStore":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    # State

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def entitlements(self) -> Tuple[Entitlement, ...]:
        return self._state.entitlements

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    async def wait_until_settled(self) -> StoreState:
        """Wait for the most recently issued load to finish."""
        await self._settled.wait()
        return self._state

    # Loading

    async def load(self) -> StoreState:
        """Replace the held collection with a fresh fetch.

        Never raises for fetch problems: failures leave an empty collection
        and a recorded error. If another load was issued while this one was
        in flight, this result is discarded.
        """
        token = load_id_var.set(uuid.uuid4().hex[:12])
        try:
            return await self._load()
        finally:
            load_id_var.reset(token)

    refresh = load

    async def _load(self) -> StoreState:
        self._generation += 1
        generation = self._generation
        self._settled.clear()
        self._state = replace(self._state, loading=True, error=None, error_code=None)

        entitlements: List[Entitlement] = []
        error: Optional[str] = None
        error_code: Optional[str] = None
        user_id: Optional[str] = None

        try:
            user_id = await self.auth.get_current_user_id()
            if user_id is not None:
                token = user_id_var.set(user_id)
                try:
                    entitlements = await self._fetch(user_id)
                finally:
                    user_id_var.reset(token)
        except Exception as e:
            error = getattr(e, "message", None) or str(e) or type(e).__name__
            error_code = getattr(e, "code", "ENTITLEMENT_FETCH_ERROR")
            entitlements = []
            self.logger.error("Entitlement load failed", user_id=user_id, error=error, code=error_code)

        if generation != self._generation:
            self.logger.debug(
                "Discarding stale entitlement load",
                generation=generation,
                latest_generation=self._generation
            )
            return self._state

        self._state = StoreState(
            entitlements=tuple(entitlements),
            loading=False,
            loaded=True,
            error=error,
            error_code=error_code,
            user_id=user_id
        )
        self._settled.set()

        if error is None:
            self.logger.info("Entitlements loaded", user_id=user_id, count=len(entitlements))
        return self._state

    async def _fetch(self, user_id: str) -> List[Entitlement]:
        try:
            return list(await self.backend.fetch_effective(user_id))
        except Exception as e:
            self.logger.warning(
                "Effective entitlements unavailable, falling back to base table",
                user_id=user_id,
                error=str(e)
            )

        return list(await self.backend.fetch_base(user_id))

    def _on_auth_change(self, event: AuthEvent) -> None:
        auth_event = getattr(event, "value", event)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is None or running is not self._loop:
            # Events from other threads are handed to the loop the store started on
            if self._loop is None or self._loop.is_closed():
                self.logger.warning("Auth change ignored, store has no event loop", auth_event=auth_event)
                return
            self._loop.call_soon_threadsafe(self._on_auth_change, event)
            return

        self.logger.info("Reloading entitlements after auth change", auth_event=auth_event)
        # Readers see loading until the reload lands; loads already in flight become stale
        self._generation += 1
        self._settled.clear()
        if event == AuthEvent.SIGNED_OUT:
            self._state = StoreState(loading=True)
        else:
            self._state = replace(self._state, loading=True, error=None, error_code=None)
        task = running.create_task(self.load())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # Queries

    def has_entitlement(self, scope: Optional[str]) -> bool:
        """Whether the held collection satisfies a scope. False while a load is pending."""
        if self._state.loading:
            return False
        return self.resolver.is_satisfied(scope, self._state.entitlements)

    def best_match(self, scope: str) -> Optional[Entitlement]:
        """Most specific held entitlement for a scope."""
        return self.resolver.best_match(scope, self._state.entitlements)
