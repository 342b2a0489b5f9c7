"""
Resume Parse Proxy
POST /api/v1/documents/parse

Lets browser clients reach the parsing service through this API instead of
calling it cross-origin:

  1. Read the multipart "file" field (size guard)
  2. Validate it is a PDF (magic bytes + extension, never client Content-Type)
  3. Forward through DocumentParserGateway
  4. Return {filename, data}; parse failures map to 502
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from intervita.core.config import Settings, get_settings
from intervita.core.errors import ParseError
from intervita.schemas.documents import (
    ALLOWED_EXTENSIONS,
    PDF_MAGIC,
    DocumentErrors,
    ErrorResponse,
    ParsedDocumentResponse,
)
from intervita.services.parser import DocumentParserGateway

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
)


def get_parser_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DocumentParserGateway:
    return DocumentParserGateway(settings)


@router.post(
    "/parse",
    response_model=ParsedDocumentResponse,
    summary="Parse a resume PDF into structured data",
    responses={
        200: {"model": ParsedDocumentResponse},
        400: {"model": ErrorResponse, "description": "Missing, empty or non-PDF file"},
        413: {"model": ErrorResponse, "description": "File exceeds the configured limit"},
        502: {"model": ErrorResponse, "description": "Parsing service failed or returned nothing"},
    },
)
async def parse_document(
    request:  Request,
    file:     Annotated[UploadFile, File(description="Resume PDF")],
    settings: Annotated[Settings, Depends(get_settings)],
    gateway:  Annotated[DocumentParserGateway, Depends(get_parser_gateway)],
) -> JSONResponse:
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    filename = file.filename or "resume.pdf"

    data = await file.read()
    if not data:
        return _error(status.HTTP_400_BAD_REQUEST, DocumentErrors.missing_file(), request_id)

    if len(data) > settings.max_document_bytes:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            DocumentErrors.file_too_large(len(data), settings.max_document_bytes),
            request_id,
        )

    if not data.startswith(PDF_MAGIC) or _get_extension(filename) not in ALLOWED_EXTENSIONS:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            DocumentErrors.unsupported_file_type(filename),
            request_id,
        )

    try:
        parsed = await gateway.parse(data, filename=filename)
    except ParseError as exc:
        logger.warning("Parse proxy failed | file=%s request_id=%s error=%s", filename, request_id, exc)
        return _error(status.HTTP_502_BAD_GATEWAY, DocumentErrors.parse_failed(str(exc)), request_id)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=ParsedDocumentResponse(filename=filename, data=parsed).model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


def _error(status_code: int, body: ErrorResponse, request_id: str) -> JSONResponse:
    body.request_id = request_id
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


def _get_extension(filename: str) -> str:
    """Return lowercased file extension including the dot."""
    parts = filename.rsplit(".", 1)
    return f".{parts[-1].lower()}" if len(parts) == 2 else ""
