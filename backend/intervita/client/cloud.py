"""
Managed token generator used by `cloud` connection mode.

The cloud project hands out tokens over HTTP and publishes a fixed transport
endpoint. Both are opaque to this package:

    GET {cloud_token_url}        Authorization: Bearer <cloud_project_key>
    200 {"accessToken": "..."}   (or {"token": "..."})
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from intervita.core.config import Settings, get_settings
from intervita.core.errors import ConfigurationError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)


class TokenGenerator(Protocol):
    ws_url: str

    async def generate_token(self) -> str: ...


class CloudTokenGenerator:
    def __init__(
        self,
        settings: Settings | None = None,
        client:   httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client   = client

    @property
    def ws_url(self) -> str:
        return self._settings.cloud_ws_url

    async def generate_token(self) -> str:
        url = self._settings.cloud_token_url
        if not url:
            raise ConfigurationError("CLOUD_TOKEN_URL is not set")

        headers = {}
        if self._settings.cloud_project_key:
            headers["Authorization"] = f"Bearer {self._settings.cloud_project_key}"

        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Cloud token request failed: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(
                f"Cloud token request failed with status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError("Cloud token response is not JSON") from exc

        token = None
        if isinstance(body, dict):
            token = body.get("accessToken") or body.get("token")
        if not isinstance(token, str) or not token:
            raise UpstreamError("Cloud token response carried no token")
        return token
