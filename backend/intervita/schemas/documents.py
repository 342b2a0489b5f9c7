"""
Document Schemas — cache records, parse proxy responses, error envelope

Design decisions:
  - StoredDocument.id is always generated at save time; never caller-supplied.
  - `data` is the parser's output, kept opaque (any JSON object).
  - uploadDate is an ISO-8601 UTC string on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Upload constraints for the parse proxy
# ---------------------------------------------------------------------------

ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset({"application/pdf"})
ALLOWED_EXTENSIONS:    frozenset[str] = frozenset({".pdf"})

PDF_MAGIC = b"%PDF"


# ---------------------------------------------------------------------------
# Cached document record
# ---------------------------------------------------------------------------

class StoredDocument(BaseModel):
    """One previously parsed resume kept in the durable document cache."""
    model_config = ConfigDict(populate_by_name=True)

    id:          str
    name:        str
    upload_date: datetime       = Field(..., alias="uploadDate")
    data:        dict[str, Any]


# ---------------------------------------------------------------------------
# Parse proxy response
# ---------------------------------------------------------------------------

class ParsedDocumentResponse(BaseModel):
    filename: str
    data:     dict[str, Any]


# ---------------------------------------------------------------------------
# Structured error bodies
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    field:   str | None = Field(None, description="Request field that caused the error, if applicable")
    message: str
    code:    str        = Field(..., description="Machine-readable error code for client handling")


class ErrorResponse(BaseModel):
    """
    Uniform error envelope for 4xx/5xx responses outside the credential endpoint.
    Clients should check `error_code` for programmatic handling.
    """
    error_code: str               = Field(..., description="Stable machine-readable code")
    message:    str               = Field(..., description="Human-readable summary")
    details:    list[ErrorDetail] = Field(default_factory=list)
    request_id: str | None        = Field(None, description="Trace ID for log correlation")


class DocumentErrors:
    """Factories for every documented parse-proxy error case."""

    @staticmethod
    def missing_file() -> ErrorResponse:
        return ErrorResponse(
            error_code="MISSING_FILE",
            message="No file was provided in the request.",
            details=[
                ErrorDetail(
                    field="file",
                    message="The 'file' multipart field is required and must not be empty.",
                    code="MISSING_FILE",
                )
            ],
        )

    @staticmethod
    def unsupported_file_type(filename: str) -> ErrorResponse:
        return ErrorResponse(
            error_code="UNSUPPORTED_FILE_TYPE",
            message="Only PDF resumes are supported.",
            details=[
                ErrorDetail(
                    field="file",
                    message=f"'{filename}' is not a PDF document.",
                    code="UNSUPPORTED_FILE_TYPE",
                )
            ],
        )

    @staticmethod
    def file_too_large(size_bytes: int, limit_bytes: int) -> ErrorResponse:
        return ErrorResponse(
            error_code="FILE_TOO_LARGE",
            message=f"Uploaded file exceeds the {limit_bytes // (1024 * 1024)} MB limit.",
            details=[
                ErrorDetail(
                    field="file",
                    message=f"Received {size_bytes:,} bytes; limit is {limit_bytes:,} bytes.",
                    code="FILE_TOO_LARGE",
                )
            ],
        )

    @staticmethod
    def parse_failed(reason: str) -> ErrorResponse:
        return ErrorResponse(
            error_code="PARSE_FAILED",
            message="The resume could not be parsed.",
            details=[ErrorDetail(field=None, message=reason, code="PARSE_FAILED")],
        )

    @staticmethod
    def internal_error(request_id: str | None = None) -> ErrorResponse:
        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred. Our team has been notified.",
            details=[],
            request_id=request_id,
        )
