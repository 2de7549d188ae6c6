"""Client for the external identity provider's user API.

Only what the backend needs: reading a user's public metadata and writing it
back with the local role and user ID merged in.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from wildtrip.config import IdentityConfig
from wildtrip.lib.exceptions import UpstreamSyncError

logger = logging.getLogger(__name__)


class IdentityProviderClient:
    """Thin async wrapper over the provider's REST API."""

    def __init__(
        self,
        api_url: str,
        secret_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.secret_key = secret_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config: IdentityConfig) -> IdentityProviderClient:
        return cls(config.api_url, config.secret_key, timeout=config.timeout)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers={"Authorization": f"Bearer {self.secret_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamSyncError(f"Identity provider request failed: {exc}") from exc

        if response.status_code >= 400:
            raise UpstreamSyncError(
                f"Identity provider answered {response.status_code} for {method} {path}"
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamSyncError(
                f"Identity provider sent an unreadable body for {method} {path}"
            ) from exc

    async def get_user(self, external_id: str) -> dict:
        """Fetch a user record from the provider."""
        return await self._request("GET", f"/users/{external_id}")

    async def update_public_metadata(self, external_id: str, metadata: dict[str, Any]) -> dict:
        """Replace the user's public metadata."""
        return await self._request(
            "PATCH",
            f"/users/{external_id}",
            json={"public_metadata": metadata},
        )

    async def sync_user(self, external_id: str, role: str, user_id: int) -> None:
        """Push the local role and user ID, keeping the other metadata keys.

        Raises:
            UpstreamSyncError: The provider could not be read or written
        """
        remote = await self.get_user(external_id)
        if not isinstance(remote, dict):
            raise UpstreamSyncError(f"Identity provider returned no user object for {external_id}")
        metadata = remote.get("public_metadata") or {}
        if not isinstance(metadata, dict):
            raise UpstreamSyncError(f"Identity provider returned malformed metadata for {external_id}")
        metadata = dict(metadata)
        metadata["role"] = role
        metadata["userId"] = user_id
        await self.update_public_metadata(external_id, metadata)
        logger.info("Synced role %s and user ID %s for %s", role, user_id, external_id)
