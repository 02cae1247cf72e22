"""
Scope matching rules.
"""

from .models import (
    CERT_WILDCARD, CERT_PREFIX,
    REDVSBLUE_OPS_WILDCARD, REDVSBLUE_OP_PREFIX, REDVSBLUE_SEASON_PREFIX,
    REDVSBLUE_UNLIMITED, REDVSBLUE_PREFIX,
)


def entitlement_matches(required: str, owned: str) -> bool:
    """Return True if an owned scope satisfies a required scope.

    Matching is case-sensitive and limited to these rules:

    - exact equality
    - ``cert:*`` satisfies any ``cert:`` scope
    - ``redvsblue:ops:*`` satisfies ``redvsblue:op:`` and ``redvsblue:season:`` scopes
    - ``redvsblue:unlimited`` satisfies any ``redvsblue:`` scope

    Any other pair is unrelated. Never raises for string input.
    """
    if required == owned:
        return True

    if owned == CERT_WILDCARD and required.startswith(CERT_PREFIX):
        return True

    if owned == REDVSBLUE_OPS_WILDCARD and (
        required.startswith(REDVSBLUE_OP_PREFIX) or required.startswith(REDVSBLUE_SEASON_PREFIX)
    ):
        return True

    if owned == REDVSBLUE_UNLIMITED and required.startswith(REDVSBLUE_PREFIX):
        return True

    return False
