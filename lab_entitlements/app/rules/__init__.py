"""
Rules package.

Defines the entitlement model and the scope matching and resolution
rules used by the store and the access gate.

Modules of interest:
- models: Entitlement record, sources, well-known scopes, access decisions.
- matcher: Wildcard/hierarchical scope matching between two scopes.
- engine: Aggregate satisfaction check and best-match ranking.
- tiers: Mapping from content access tiers to required scopes.

Everything here is synchronous and side-effect free.
"""

from .models import (
    Entitlement, EntitlementSource, AccessStatus, AccessDecision,
)
from .matcher import entitlement_matches
from .engine import (
    EntitlementResolver, has_entitlement, best_matching_entitlement, specificity_score,
)
from .tiers import required_scope_for_tier

__all__ = [
    "Entitlement",
    "EntitlementSource",
    "AccessStatus",
    "AccessDecision",
    "entitlement_matches",
    "EntitlementResolver",
    "has_entitlement",
    "best_matching_entitlement",
    "specificity_score",
    "required_scope_for_tier",
]
