"""
Access Token Minting — LiveKit-Compatible JWT

A room credential is an HS256 JWT signed with the project's API secret:

  Header:  {"alg": "HS256", "typ": "JWT"}
  Claims:  iss       API key (lets the media server pick the secret)
           sub, jti  participant identity
           nbf, exp  validity window (exp = nbf + ttl)
           name      optional display name
           metadata  optional opaque string attached to the participant
           video     capability grant, see VideoGrant

The media server verifies the signature with the secret registered for `iss`
and admits the participant to `video.room` with the granted capabilities.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field

from intervita.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 6 * 60 * 60


# ---------------------------------------------------------------------------
# Capability grant
# ---------------------------------------------------------------------------

class VideoGrant(BaseModel):
    """Room scope and capability flags bound into a credential."""
    model_config = ConfigDict(populate_by_name=True)

    room:             str
    room_join:        bool = Field(True, alias="roomJoin")
    can_publish:      bool = Field(True, alias="canPublish")
    can_publish_data: bool = Field(True, alias="canPublishData")
    can_subscribe:    bool = Field(True, alias="canSubscribe")

    @classmethod
    def full_access(cls, room: str) -> "VideoGrant":
        """All four capabilities, scoped to one room. The only grant this system issues."""
        return cls(
            room=room,
            room_join=True,
            can_publish=True,
            can_publish_data=True,
            can_subscribe=True,
        )

    def to_claim(self) -> dict:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Token builder
# ---------------------------------------------------------------------------

@dataclass
class AccessToken:
    """
    Builder for a signed room credential.

        at = AccessToken(api_key, api_secret, identity="alice", metadata="{...}")
        at.add_grant(VideoGrant.full_access("interview-1"))
        jwt_str = at.to_jwt()
    """
    api_key:     str
    api_secret:  str
    identity:    str
    name:        str | None = None
    metadata:    str | None = None
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    grant:       VideoGrant | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_secret:
            raise ConfigurationError("API key and secret are required to sign access tokens")

    def add_grant(self, grant: VideoGrant) -> "AccessToken":
        self.grant = grant
        return self

    def claims(self, now: int | None = None) -> dict:
        issued = int(now if now is not None else time.time())
        claims: dict = {
            "iss": self.api_key,
            "sub": self.identity,
            "jti": self.identity,
            "nbf": issued,
            "exp": issued + self.ttl_seconds,
        }
        if self.name:
            claims["name"] = self.name
        if self.metadata is not None:
            claims["metadata"] = self.metadata
        if self.grant is not None:
            claims["video"] = self.grant.to_claim()
        return claims

    def to_jwt(self) -> str:
        if self.grant is None:
            raise ValueError("An access token needs a grant before it can be signed")
        return jwt.encode(self.claims(), self.api_secret, algorithm=_ALGORITHM)


# ---------------------------------------------------------------------------
# Verification (diagnostics and tests; the media server does this in prod)
# ---------------------------------------------------------------------------

class InvalidAccessToken(Exception):
    pass


def decode_access_token(token: str, api_key: str, api_secret: str) -> dict:
    """
    Verify signature, issuer and expiry; return the claims.
    Raises InvalidAccessToken on any failure.
    """
    try:
        return jwt.decode(
            token,
            api_secret,
            algorithms=[_ALGORITHM],
            issuer=api_key,
            options={"verify_exp": True, "verify_aud": False},
        )
    except ExpiredSignatureError as exc:
        raise InvalidAccessToken("Token has expired") from exc
    except JWTError as exc:
        raise InvalidAccessToken(f"Invalid token: {exc}") from exc
