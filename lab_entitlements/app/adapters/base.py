"""
Interfaces the entitlement store consumes.
"""

from enum import Enum
from typing import Callable, List, Optional, Protocol

from ..rules.models import Entitlement


class AuthEvent(str, Enum):
    """Auth state transitions."""
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"


AuthListener = Callable[[AuthEvent], None]
Unsubscribe = Callable[[], None]


class AuthProvider(Protocol):
    """Supplies the current identity and auth state changes."""

    async def get_current_user_id(self) -> Optional[str]:
        ...

    def subscribe(self, listener: AuthListener) -> Unsubscribe:
        ...


class EntitlementBackend(Protocol):
    """Read-only access to a user's entitlement rows.

    Both methods raise EntitlementFetchError on failure.
    """

    async def fetch_effective(self, user_id: str) -> List[Entitlement]:
        ...

    async def fetch_base(self, user_id: str) -> List[Entitlement]:
        ...
