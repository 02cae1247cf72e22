"""
Shared error handling for the Lab Access layer.
"""

from typing import Dict, Any, Optional


class AccessLayerException(Exception):
    """Base exception for Access Layer components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(AccessLayerException):
    """Authentication-related errors."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ExternalServiceError(AccessLayerException):
    """External service errors."""

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None, code: str = "EXTERNAL_SERVICE_ERROR"):
        super().__init__(code, f"{service}: {message}", details)


class EntitlementFetchError(ExternalServiceError):
    """Entitlement rows could not be read from the data API."""

    def __init__(self, relation: str, message: str = "Entitlement fetch failed",
                 status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["relation"] = relation
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__("data_api", message, details, code="ENTITLEMENT_FETCH_ERROR")
        self.relation = relation
        self.status_code = status_code
