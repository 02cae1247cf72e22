"""
Content access tiers.
"""

from typing import Optional

FREE_TIER = "free"


def required_scope_for_tier(access_tier: Optional[str]) -> Optional[str]:
    """Map a content row's access tier to the scope it requires.

    Free content (or no tier) requires nothing. Every other tier maps
    directly to a scope of the same name, e.g. ``"hifi"``.
    """
    if not access_tier or access_tier == FREE_TIER:
        return None
    return access_tier
