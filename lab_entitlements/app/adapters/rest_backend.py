"""
Entitlement reads against the hosted PostgREST data API.
"""

from typing import Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from shared.logging import get_logger
from shared.errors import EntitlementFetchError
from ..rules.models import Entitlement


class RestEntitlementBackend:
    """Client for the entitlements view and table of the data API."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        effective_relation: str = "entitlements_effective",
        base_relation: str = "entitlements",
        timeout: float = 10.0,
        token_getter: Optional[Callable[[], Optional[str]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.effective_relation = effective_relation
        self.base_relation = base_relation
        self.timeout = timeout
        self.token_getter = token_getter
        self.transport = transport
        self.logger = get_logger("entitlements.backend.rest")

    async def fetch_effective(self, user_id: str) -> List[Entitlement]:
        """Read the resolved/expanded entitlement view."""
        return await self._fetch(self.effective_relation, user_id)

    async def fetch_base(self, user_id: str) -> List[Entitlement]:
        """Read the raw entitlement table."""
        return await self._fetch(self.base_relation, user_id)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key

        token = self.token_getter() if self.token_getter else None
        bearer = token or self.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    async def _fetch(self, relation: str, user_id: str) -> List[Entitlement]:
        url = f"{self.base_url}/rest/v1/{relation}"
        params = {"select": "*", "user_id": f"eq.{user_id}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            self.logger.error("Data API request failed", relation=relation, error=str(e))
            raise EntitlementFetchError(relation, f"Request failed: {e}") from e

        if response.status_code != 200:
            message = self._error_message(response)
            self.logger.error(
                "Data API error",
                relation=relation,
                status_code=response.status_code,
                body=response.text
            )
            raise EntitlementFetchError(relation, message, status_code=response.status_code)

        try:
            rows = response.json()
            if not isinstance(rows, list):
                raise ValueError("expected a JSON array of rows")
            entitlements = [Entitlement.model_validate(row) for row in rows]
        except (ValueError, ValidationError) as e:
            self.logger.error("Malformed entitlement rows", relation=relation, error=str(e))
            raise EntitlementFetchError(relation, f"Malformed response: {e}", status_code=response.status_code) from e

        self.logger.debug("Fetched entitlements", relation=relation, user_id=user_id, count=len(entitlements))
        return entitlements

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"
