from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from staff_portal.core.errors import UpstreamOtherError, classify_upstream_status
from staff_portal.planday.token_cache import TokenCache

logger = logging.getLogger(__name__)


def extract_list(payload: Any, *keys: str) -> list[Any] | None:
    """Pull the record list out of a Planday envelope.

    Planday answers with a bare list or with the list under one of ``keys``.
    Returns ``None`` when no list can be found.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return None


class PlandayClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: TokenCache,
        *,
        client_id: str | None,
        api_base: str,
    ) -> None:
        self._http = http
        self._tokens = tokens
        self._client_id = client_id or ""
        self._api_base = api_base.rstrip("/")

    async def get_json(self, path: str, params: Mapping[str, str] | None = None) -> Any:
        access_token = await self._tokens.get_token()
        headers = {
            "Authorization": f"Bearer {access_token}",
            "X-ClientId": self._client_id,
            "Content-Type": "application/json",
        }
        url = f"{self._api_base}{path}"

        try:
            response = await self._http.get(url, params=dict(params or {}), headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamOtherError(None, f"Failed to reach Planday at {url}: {exc}") from exc

        if response.status_code >= 400:
            logger.debug("Planday %s %s -> %s", path, dict(params or {}), response.status_code)
            raise classify_upstream_status(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamOtherError(response.status_code, f"Planday API returned non-JSON body for {path}") from exc
