"""
Adapters to the hosted auth service and data API.
"""

from .base import AuthEvent, AuthProvider, EntitlementBackend
from .auth import SessionAuthProvider
from .rest_backend import RestEntitlementBackend

__all__ = [
    "AuthEvent",
    "AuthProvider",
    "EntitlementBackend",
    "SessionAuthProvider",
    "RestEntitlementBackend",
]
