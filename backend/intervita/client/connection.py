"""
Connection Broker — single authority for "should we hold a live session,
and with which credential"

Modes:
  cloud   token + endpoint from the managed token generator; failures become
          a toast and leave shouldConnect false, nothing is raised
  env     endpoint from LIVEKIT_URL (missing ⇒ ConfigurationError, raised),
          token from the credential service:
            with a document payload → POST {roomName?, participantName?, resumeData}
            without                 → GET ?roomName=&participantName= (non-empty only)
          service / network failures propagate to the caller
  manual  static token + endpoint from settings, no network

State is one immutable ConnectionState replaced wholesale on every change.
Listeners are called after the replacement; one that raises is logged and
the remaining listeners are still notified.

Request fencing (settings.fence_connect_requests):
  Every connect() and disconnect() takes a ticket from a monotonic counter.
  A connect() that resolves after a newer ticket was issued is discarded, so
  overlapping connects resolve in call order and a disconnect cannot be undone
  by a connect that was still in flight. With fencing off, the last call to
  resolve wins.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

import httpx
from pydantic import BaseModel, ConfigDict, Field, model_validator

from intervita.client.cloud import CloudTokenGenerator, TokenGenerator
from intervita.client.notifications import ToastChannel, ToastType
from intervita.core.config import Settings, get_settings
from intervita.core.errors import (
    ConfigurationError,
    IntervitaError,
    NetworkError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

CLOUD_TOKEN_FAILED_MESSAGE = (
    "Failed to generate token, you may need to increase your role in this LiveKit Cloud project."
)


class ConnectionMode(str, Enum):
    CLOUD  = "cloud"
    MANUAL = "manual"
    ENV    = "env"


class ConnectionState(BaseModel):
    """What the transport layer consumes. Never mutated in place."""
    model_config = ConfigDict(frozen=True)

    mode:           ConnectionMode = ConnectionMode.MANUAL
    server_url:     str            = ""
    token:          str            = ""
    should_connect: bool           = False
    metadata:       dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _token_required_to_connect(self) -> "ConnectionState":
        if self.should_connect and not self.token:
            raise ValueError("should_connect requires a non-empty token")
        return self

    def transport_view(self) -> dict[str, Any]:
        """{serverUrl, token, shouldConnect} as handed to the room transport."""
        return {
            "serverUrl":     self.server_url,
            "token":         self.token,
            "shouldConnect": self.should_connect,
        }


StateListener = Callable[[ConnectionState], None]


class ConnectionBroker:
    def __init__(
        self,
        settings:      Settings | None = None,
        *,
        cloud:         TokenGenerator | None = None,
        http_client:   httpx.AsyncClient | None = None,
        notifications: ToastChannel | None = None,
    ) -> None:
        self._settings      = settings or get_settings()
        self._cloud         = cloud or CloudTokenGenerator(self._settings, client=http_client)
        self._http          = http_client
        self._notifications = notifications or ToastChannel()
        self._state         = ConnectionState()
        self._ticket        = 0
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def notifications(self) -> ToastChannel:
        return self._notifications

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def connect(
        self,
        mode: ConnectionMode | str,
        document_payload: dict[str, Any] | None = None,
    ) -> None:
        mode = ConnectionMode(mode)
        self._check_configuration(mode)
        ticket = self._take_ticket()
        logger.info("Connect requested | mode=%s ticket=%d", mode.value, ticket)

        if mode is ConnectionMode.CLOUD:
            try:
                token = await self._cloud.generate_token()
                if not isinstance(token, str) or not token:
                    raise UpstreamError("Cloud token generator returned no token")
                if not self._cloud.ws_url:
                    raise UpstreamError("Cloud project published no transport endpoint")
            except (IntervitaError, httpx.HTTPError) as exc:
                logger.warning("Cloud token generation failed: %s", exc)
                self._notifications.show(CLOUD_TOKEN_FAILED_MESSAGE, ToastType.ERROR)
                self._publish(ticket, self._state.model_copy(update={"should_connect": False}))
                return
            url = self._cloud.ws_url

        elif mode is ConnectionMode.ENV:
            url = self._settings.livekit_url
            token = await self._request_env_token(document_payload)

        else:
            token = self._settings.manual_token
            url   = self._settings.manual_ws_url

        self._publish(
            ticket,
            ConnectionState(
                mode=mode,
                server_url=url,
                token=token,
                should_connect=True,
                metadata={"role": self._settings.participant_role},
            ),
        )

    async def disconnect(self) -> None:
        ticket = self._take_ticket()
        self._publish(ticket, self._state.model_copy(update={"should_connect": False}))
        logger.info("Disconnected | ticket=%d", ticket)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_configuration(self, mode: ConnectionMode) -> None:
        if mode is ConnectionMode.ENV and not self._settings.livekit_url:
            raise ConfigurationError("LIVEKIT_URL is not set")
        if mode is ConnectionMode.MANUAL and not self._settings.manual_token:
            raise ConfigurationError("MANUAL_TOKEN is not set")

    def _take_ticket(self) -> int:
        self._ticket += 1
        return self._ticket

    def _publish(self, ticket: int, state: ConnectionState) -> bool:
        if self._settings.fence_connect_requests and ticket != self._ticket:
            logger.debug("Discarding stale resolution | ticket=%d latest=%d", ticket, self._ticket)
            return False

        self._state = state
        for listener in self._listeners:
            # State is already replaced; a failing listener is logged and the rest still run
            try:
                listener(state)
            except Exception:
                logger.exception("Connection state listener failed | listener=%r", listener)
        return True

    async def _request_env_token(self, document_payload: dict[str, Any] | None) -> str:
        url = self._settings.token_endpoint_url
        names: dict[str, str] = {}
        if self._settings.room_name:
            names["roomName"] = self._settings.room_name
        if self._settings.participant_name:
            names["participantName"] = self._settings.participant_name

        try:
            if document_payload is not None:
                response = await self._send("POST", url, json={**names, "resumeData": document_payload})
            else:
                response = await self._send("GET", url, params=names)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Token request failed: {exc}") from exc

        if response.status_code == 400:
            raise ValidationError(_error_text(response) or "Token request was rejected")
        if not response.is_success:
            raise UpstreamError(
                f"Failed to generate token (status {response.status_code})",
                status_code=response.status_code,
            )

        try:
            token = response.json().get("accessToken")
        except (ValueError, AttributeError) as exc:
            raise UpstreamError("Token response is not a JSON object") from exc
        if not isinstance(token, str) or not token:
            raise UpstreamError("Token response carried no accessToken")
        return token

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._http is not None:
            return await self._http.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=10.0) as client:
            return await client.request(method, url, **kwargs)


def _error_text(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error") if isinstance(body, dict) else None
