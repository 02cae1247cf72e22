"""
Entitlement resolution over a user's collection of grants.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from shared.logging import get_logger
from .matcher import entitlement_matches
from .models import Entitlement, REDVSBLUE_UNLIMITED, WILDCARD


SCORE_EXACT = 100
SCORE_CONCRETE = 50
SCORE_WILDCARD = 10
SCORE_UNLIMITED = 5


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_within_window(entitlement: Entitlement, at: datetime) -> bool:
    """Check the entitlement's starts_at/ends_at bounds against a point in time."""
    at = _as_utc(at)
    if entitlement.starts_at is not None and _as_utc(entitlement.starts_at) > at:
        return False
    if entitlement.ends_at is not None and _as_utc(entitlement.ends_at) <= at:
        return False
    return True


def _qualifies(required: str, entitlement: Entitlement, at: Optional[datetime]) -> bool:
    if not entitlement.active:
        return False
    if at is not None and not is_within_window(entitlement, at):
        return False
    return entitlement_matches(required, entitlement.scope)


def specificity_score(required: str, owned: str) -> int:
    """Rank how specifically an owned scope explains a required one.

    Only meaningful for scopes that already match.
    """
    if owned == REDVSBLUE_UNLIMITED:
        # Broadest grant, surfaced only when nothing narrower exists
        return SCORE_UNLIMITED
    if owned == required:
        return SCORE_EXACT
    if WILDCARD in owned:
        return SCORE_WILDCARD
    return SCORE_CONCRETE


def has_entitlement(
    required: Optional[str],
    entitlements: Optional[Iterable[Entitlement]],
    at: Optional[datetime] = None
) -> bool:
    """Return True if any active entitlement satisfies the required scope.

    An empty requirement is open access. When ``at`` is given, entitlements
    outside their validity window are skipped as well.
    """
    if not required:
        return True
    if not entitlements:
        return False
    return any(_qualifies(required, e, at) for e in entitlements)


def best_matching_entitlement(
    required: str,
    entitlements: Optional[Iterable[Entitlement]],
    at: Optional[datetime] = None
) -> Optional[Entitlement]:
    """Pick the most specific active entitlement satisfying the requirement.

    Ties keep the first entitlement seen. Returns None when nothing qualifies.
    """
    if not required or not entitlements:
        return None

    best: Optional[Entitlement] = None
    best_score = -1
    for entitlement in entitlements:
        if not _qualifies(required, entitlement, at):
            continue
        score = specificity_score(required, entitlement.scope)
        if score > best_score:
            best, best_score = entitlement, score
    return best


class EntitlementResolver:
    """Resolver bound to a validity-window policy."""

    def __init__(self, enforce_validity_window: bool = True):
        self.enforce_validity_window = enforce_validity_window
        self.logger = get_logger("entitlements.resolver")

    def _now(self) -> Optional[datetime]:
        if self.enforce_validity_window:
            return datetime.now(timezone.utc)
        return None

    def is_satisfied(self, required: Optional[str], entitlements: Optional[Iterable[Entitlement]]) -> bool:
        """Aggregate predicate over a collection."""
        allowed = has_entitlement(required, entitlements, at=self._now())
        self.logger.debug("Entitlement check", required=required, allowed=allowed)
        return allowed

    def best_match(self, required: str, entitlements: Optional[Iterable[Entitlement]]) -> Optional[Entitlement]:
        """Most specific qualifying entitlement, or None."""
        return best_matching_entitlement(required, entitlements, at=self._now())
