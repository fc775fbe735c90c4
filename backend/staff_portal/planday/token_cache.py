from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

import httpx

from staff_portal.core.errors import AuthError

logger = logging.getLogger(__name__)

EXPIRY_MARGIN_SECONDS = 30
MIN_TTL_SECONDS = 60
MAX_TTL_SECONDS = 3600


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: int

    def usable_at(self, now: int) -> bool:
        return self.expires_at - EXPIRY_MARGIN_SECONDS > now


def _clamp_ttl(expires_in: object) -> int:
    try:
        ttl = int(float(expires_in))
    except (TypeError, ValueError):
        ttl = MIN_TTL_SECONDS
    return max(MIN_TTL_SECONDS, min(ttl, MAX_TTL_SECONDS))


class TokenCache:
    """Process-wide holder of the Planday access token.

    Construct once per process and pass it to the client. Concurrent refreshes
    are tolerated: each produces a valid credential and the last write wins.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        client_id: str | None,
        refresh_token: str | None,
        token_url: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._client_id = client_id
        self._refresh_token = refresh_token
        self._token_url = token_url
        self._clock = clock
        self._credential: Credential | None = None

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def _now(self) -> int:
        return int(self._clock())

    def invalidate(self) -> None:
        self._credential = None

    async def get_token(self) -> str:
        credential = self._credential
        if credential is not None and credential.usable_at(self._now()):
            return credential.token
        credential = await self.refresh()
        return credential.token

    async def refresh(self) -> Credential:
        if not self._client_id or not self._refresh_token:
            raise AuthError("Missing PORTAL_PLANDAY_CLIENT_ID or PORTAL_PLANDAY_REFRESH_TOKEN")

        now = self._now()
        try:
            response = await self._http.post(
                self._token_url,
                data={
                    "client_id": self._client_id,
                    "grant_type": "refresh_token",
                    "refresh_token": self._refresh_token,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Planday token exchange failed: {exc}") from exc

        failure = AuthError(f"Planday token exchange failed: {response.status_code} {response.text}")
        if response.status_code >= 400:
            raise failure

        try:
            payload = response.json()
        except ValueError as exc:
            raise failure from exc
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise failure

        ttl = _clamp_ttl(payload.get("expires_in"))
        self._credential = Credential(token=str(access_token), expires_at=now + ttl)
        logger.info("Refreshed Planday access token (ttl=%ss)", ttl)
        return self._credential
