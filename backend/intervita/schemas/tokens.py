"""
Credential Endpoint — Pydantic Request/Response Schemas

GET  /api/token?roomName=&participantName=        (query style)
POST /api/token {roomName?, participantName?, resumeData?}   (body style)

Field names are camelCase on the wire to stay compatible with existing
browser clients; Python code uses snake_case through aliases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CredentialRequest(BaseModel):
    """One token request. Every field is optional; the service fills the gaps."""
    model_config = ConfigDict(populate_by_name=True)

    room_name:        str | None            = Field(None, alias="roomName")
    participant_name: str | None            = Field(None, alias="participantName")
    metadata_payload: dict[str, Any] | None = Field(
        None,
        alias="resumeData",
        description="Opaque parsed document embedded as participant metadata",
    )


class TokenResult(BaseModel):
    """200 response body."""
    model_config = ConfigDict(populate_by_name=True)

    identity:     str
    access_token: str = Field(..., alias="accessToken")


class TokenErrorBody(BaseModel):
    """4xx response body, e.g. {"error": "Resume data is required"}."""
    error: str
