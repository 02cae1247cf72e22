"""
Entitlement data models.
"""

from typing import Optional
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# Well-known scopes
APP = "app"
CHALLENGES_ALL = "challenges:all"
CERT_WILDCARD = "cert:*"
REDVSBLUE_OPS_WILDCARD = "redvsblue:ops:*"
REDVSBLUE_UNLIMITED = "redvsblue:unlimited"

# Namespace prefixes
CERT_PREFIX = "cert:"
REDVSBLUE_PREFIX = "redvsblue:"
REDVSBLUE_OP_PREFIX = "redvsblue:op:"
REDVSBLUE_SEASON_PREFIX = "redvsblue:season:"

WILDCARD = "*"


class EntitlementSource(str, Enum):
    """Where an entitlement came from. Informational only."""
    SUBSCRIPTION = "subscription"
    VOUCHER = "voucher"
    GRANT = "grant"


class Entitlement(BaseModel):
    """A single access grant owned by one user."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Entitlement ID")
    user_id: str = Field(..., description="Owning user ID")
    product_id: Optional[str] = Field(None, description="Product that produced the grant")
    scope: str = Field(..., description="Granted scope, e.g. cert:* or challenge_pack:intro")
    source: EntitlementSource = Field(EntitlementSource.GRANT, description="Grant provenance")
    active: bool = Field(False, description="Whether the grant is currently eligible")
    starts_at: Optional[datetime] = Field(None, description="Start of validity")
    ends_at: Optional[datetime] = Field(None, description="End of validity")


class AccessStatus(str, Enum):
    """Access gate outcomes."""
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class AccessDecision:
    """Result of an access gate check."""
    status: AccessStatus
    required: Optional[str] = None
    best_match: Optional[Entitlement] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.status == AccessStatus.ALLOWED

    @property
    def pending(self) -> bool:
        return self.status == AccessStatus.PENDING
