"""
Entitlement store package.
"""

from .entitlement_store import EntitlementStore, StoreState

__all__ = ["EntitlementStore", "StoreState"]
