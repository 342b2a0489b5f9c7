"""
Document Parsing Gateway

Uploads a resume to the remote parsing service and returns its structured
output:

    POST {parser_api_url}/resume/parse/     multipart, field name "file"
    200  → JSON object (the parsed resume)
    else → ParseError

An empty or non-object result is treated exactly like a failed call: the
document is never accepted on partial output.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from intervita.core.config import Settings, get_settings
from intervita.core.errors import ParseError

logger = logging.getLogger(__name__)

PARSE_PATH = "/resume/parse/"


class DocumentParserGateway:
    """
    Thin async client over the parsing service.

    Pass an `httpx.AsyncClient` to share a connection pool (or a mock transport
    in tests); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client:   httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client   = client

    @property
    def endpoint(self) -> str:
        return f"{self._settings.parser_api_url.rstrip('/')}{PARSE_PATH}"

    async def parse(
        self,
        file_bytes:   bytes,
        filename:     str = "resume.pdf",
        content_type: str = "application/pdf",
    ) -> dict[str, Any]:
        files = {"file": (filename, file_bytes, content_type)}

        try:
            if self._client is not None:
                response = await self._client.post(self.endpoint, files=files)
            else:
                async with httpx.AsyncClient(
                    timeout=self._settings.parser_timeout_seconds,
                ) as client:
                    response = await client.post(self.endpoint, files=files)
        except httpx.HTTPError as exc:
            logger.error("Resume parsing request failed | file=%s error=%s", filename, exc)
            raise ParseError(f"Resume parsing request failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Resume parsing failed | file=%s status=%d", filename, response.status_code,
            )
            raise ParseError(
                f"Resume parsing failed with status: {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError("Resume parser returned a non-JSON body") from exc

        if not isinstance(data, dict) or not data:
            raise ParseError("Resume parsing failed or returned empty data")

        logger.info("Resume parsed | file=%s fields=%d", filename, len(data))
        return data
