"""
Credential Issuance Service

Mints a scoped, time-bound room credential:
  1. Resolve room name      (supplied, else room-<rand4>-<rand4>)
  2. Resolve identity       (supplied participantName, else identity-<rand4>)
  3. Build the grant        (join + publish + publish data + subscribe, one room)
  4. Attach the payload     (serialized resume; required while
                             settings.require_document_payload is on)
  5. Sign                   (HS256 with the project's API key/secret)

Generated names are random and unchecked for collisions; callers must treat
them as opaque and only rely on their shape.
"""

from __future__ import annotations

import json
import logging
import secrets
import string

from intervita.auth.token import AccessToken, VideoGrant
from intervita.core.config import Settings, get_settings
from intervita.core.errors import ConfigurationError, ValidationError
from intervita.schemas.tokens import CredentialRequest, TokenResult

logger = logging.getLogger(__name__)

# Lower-case alphanumerics only: safe in file names, URLs and room names
_ALPHABET = string.digits + string.ascii_lowercase

PAYLOAD_REQUIRED_MESSAGE = "Resume data is required"


def generate_random_alphanumeric(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_room_name() -> str:
    return f"room-{generate_random_alphanumeric(4)}-{generate_random_alphanumeric(4)}"


def generate_identity() -> str:
    return f"identity-{generate_random_alphanumeric(4)}"


def serialize_payload(payload: dict, max_bytes: int) -> str:
    """
    Compact JSON form of the payload, as embedded in the token.
    Raises ValidationError if it is not serializable or exceeds max_bytes.
    """
    try:
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Resume data is not serializable: {exc}") from exc

    size = len(text.encode("utf-8"))
    if size > max_bytes:
        raise ValidationError(
            f"Resume data is {size:,} bytes; the limit is {max_bytes:,} bytes"
        )
    return text


class CredentialIssuer:
    """
    Stateless issuer — safe to share across requests.
    Settings are injected so tests can run with their own keys.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def issue(self, request: CredentialRequest) -> TokenResult:
        """
        Raises:
            ConfigurationError  signing keys are not configured
            ValidationError     payload missing (while required) or oversized
        """
        cfg = self._settings
        if not cfg.can_sign_tokens:
            raise ConfigurationError("Environment variables aren't set up correctly")

        room_name = request.room_name or generate_room_name()
        identity  = request.participant_name or generate_identity()
        grant     = VideoGrant.full_access(room_name)

        metadata: str | None = None
        if request.metadata_payload is not None:
            metadata = serialize_payload(request.metadata_payload, cfg.max_metadata_bytes)
        elif cfg.require_document_payload:
            raise ValidationError(PAYLOAD_REQUIRED_MESSAGE)

        token = AccessToken(
            api_key=cfg.livekit_api_key,
            api_secret=cfg.livekit_api_secret,
            identity=identity,
            metadata=metadata,
            ttl_seconds=cfg.token_ttl_seconds,
        ).add_grant(grant).to_jwt()

        logger.info("Token generated | identity=%s room=%s", identity, room_name)
        return TokenResult(identity=identity, access_token=token)
