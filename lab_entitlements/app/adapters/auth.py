"""
Session auth provider backed by the hosted auth service's JWTs.
"""

from typing import Any, Dict, List, Optional

import jwt

from shared.logging import get_logger
from shared.errors import AuthenticationError
from .base import AuthEvent, AuthListener, Unsubscribe


class SessionAuthProvider:
    """Holds the current session token and broadcasts auth state changes."""

    def __init__(self, jwt_secret: str, audience: Optional[str] = "authenticated", algorithm: str = "HS256"):
        self.jwt_secret = jwt_secret
        self.audience = audience
        self.algorithm = algorithm
        self.logger = get_logger("entitlements.auth")
        self._access_token: Optional[str] = None
        self._listeners: List[AuthListener] = []

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify a session token and return its claims."""
        if not self.jwt_secret:
            raise AuthenticationError("Session token secret is not configured")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            return jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except jwt.PyJWTError as e:
            raise AuthenticationError(f"Invalid session token: {e}", details={"token_error": str(e)})

    async def get_current_user_id(self) -> Optional[str]:
        """Return the signed-in user's ID, or None without a valid session."""
        if not self._access_token:
            return None

        try:
            claims = self.decode(self._access_token)
        except AuthenticationError as e:
            self.logger.warning("Session token rejected", error=e.message)
            return None

        return claims.get("sub")

    def sign_in(self, access_token: str) -> None:
        self._access_token = access_token
        self._emit(AuthEvent.SIGNED_IN)

    def refresh_session(self, access_token: str) -> None:
        self._access_token = access_token
        self._emit(AuthEvent.TOKEN_REFRESHED)

    def sign_out(self) -> None:
        self._access_token = None
        self._emit(AuthEvent.SIGNED_OUT)

    def subscribe(self, listener: AuthListener) -> Unsubscribe:
        """Register a listener; the returned callable removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _emit(self, event: AuthEvent) -> None:
        self.logger.info("Auth state changed", auth_event=event.value, listeners=len(self._listeners))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.error("Auth listener failed", auth_event=event.value, error=str(e))
