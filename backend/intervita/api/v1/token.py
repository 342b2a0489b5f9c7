"""
Credential Endpoint
GET  /token?roomName=&participantName=
POST /token  {roomName?, participantName?, resumeData?}

The HTTP method decides where fields are read from: query string for GET,
JSON body for POST. Only the body style can carry resumeData, so while the
payload rule is on, every GET is answered with 400.

Responses:
  200  {identity, accessToken}
  400  {error: "..."}                      missing / oversized payload, malformed body
  500  empty body, X-Status-Message header  signing keys missing or signing failed
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from intervita.core.config import Settings, get_settings
from intervita.core.errors import ConfigurationError, ValidationError
from intervita.schemas.tokens import CredentialRequest, TokenErrorBody, TokenResult
from intervita.services.credentials import CredentialIssuer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Credentials"])

_RESPONSES = {
    200: {"model": TokenResult, "description": "Signed room credential"},
    400: {"model": TokenErrorBody, "description": "Resume data missing or too large, or malformed body"},
    500: {"description": "Signing keys not configured or signing failed (empty body)"},
}


def get_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> CredentialIssuer:
    return CredentialIssuer(settings)


Issuer = Annotated[CredentialIssuer, Depends(get_issuer)]


@router.get(
    "/token",
    response_model=TokenResult,
    summary="Issue a room credential (query style)",
    responses=_RESPONSES,
)
async def issue_token_query(
    issuer: Issuer,
    room_name:        Annotated[str | None, Query(alias="roomName")]        = None,
    participant_name: Annotated[str | None, Query(alias="participantName")] = None,
) -> Response:
    request = CredentialRequest(room_name=room_name, participant_name=participant_name)
    return _issue(issuer, request)


@router.post(
    "/token",
    response_model=TokenResult,
    summary="Issue a room credential carrying resume data (body style)",
    responses=_RESPONSES,
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": CredentialRequest.model_json_schema()}},
        },
    },
)
async def issue_token_body(issuer: Issuer, http_request: Request) -> Response:
    try:
        request = await _read_body(http_request)
    except ValidationError as exc:
        logger.info("Rejected token request body: %s", exc)
        return _bad_request(str(exc))
    return _issue(issuer, request)


async def _read_body(http_request: Request) -> CredentialRequest:
    """
    Parse the POST body by hand so malformed input is answered with 400
    {error} like every other rejection on this route. An empty body is an
    empty request.
    """
    raw = await http_request.body()
    if not raw.strip():
        return CredentialRequest()

    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Request body is not valid JSON") from exc

    try:
        return CredentialRequest.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first["loc"]) or "body"
        raise ValidationError(f"Invalid token request: {where}: {first['msg']}") from exc


def _issue(issuer: CredentialIssuer, request: CredentialRequest) -> Response:
    try:
        result = issuer.issue(request)
    except ValidationError as exc:
        return _bad_request(str(exc))
    except ConfigurationError as exc:
        logger.error("Credential service misconfigured: %s", exc)
        return _empty_500(str(exc))
    except Exception as exc:
        logger.exception("Token signing failed")
        return _empty_500(str(exc))

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(by_alias=True),
    )


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=TokenErrorBody(error=message).model_dump(),
    )


def _empty_500(message: str) -> Response:
    # Header values must be single-line latin-1
    safe = " ".join(message.split()).encode("latin-1", "replace").decode("latin-1")
    return Response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers={"X-Status-Message": safe},
    )
