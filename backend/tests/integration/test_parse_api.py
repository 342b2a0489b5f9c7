"""
Integration Tests — POST /api/v1/documents/parse

What is mocked vs real
──────────────────────
  ✅ Real: multipart parsing, PDF validation, DocumentParserGateway
  🔲 Mock: the remote parsing service (httpx.MockTransport)
"""

from __future__ import annotations

import httpx
import pytest

from intervita.api.v1.documents import get_parser_gateway
from intervita.core.config import get_settings
from intervita.services.parser import DocumentParserGateway


@pytest.fixture
def use_parser(app_with_overrides, test_settings, mock_http):
    """Route the parse proxy to a fake parsing service answering with `handler`."""
    def _install(handler):
        client = mock_http(handler)
        app_with_overrides.dependency_overrides[get_parser_gateway] = (
            lambda: DocumentParserGateway(test_settings, client=client)
        )
        return client
    return _install


@pytest.mark.integration
@pytest.mark.parser
class TestParseEndpoint:

    async def test_pdf_is_parsed(self, async_client, use_parser, sample_pdf_bytes, sample_resume):
        upstream = use_parser(lambda req: httpx.Response(200, json=sample_resume))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", sample_pdf_bytes, "application/pdf")},
        )

        assert resp.status_code == 200
        assert resp.json() == {"filename": "cv.pdf", "data": sample_resume}
        assert len(upstream.requests) == 1

    async def test_empty_parse_result_is_502(self, async_client, use_parser, sample_pdf_bytes):
        use_parser(lambda req: httpx.Response(200, json={}))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", sample_pdf_bytes, "application/pdf")},
        )

        assert resp.status_code == 502
        assert resp.json()["error_code"] == "PARSE_FAILED"

    async def test_upstream_failure_is_502(self, async_client, use_parser, sample_pdf_bytes):
        use_parser(lambda req: httpx.Response(503))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", sample_pdf_bytes, "application/pdf")},
        )

        assert resp.status_code == 502
        assert "503" in resp.json()["details"][0]["message"]

    async def test_non_pdf_is_rejected_before_upstream(self, async_client, use_parser):
        upstream = use_parser(lambda req: httpx.Response(200, json={"a": 1}))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", b"MZ\x90\x00" + b"\x00" * 64, "application/pdf")},
        )

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "UNSUPPORTED_FILE_TYPE"
        assert upstream.requests == []

    async def test_wrong_extension_is_rejected(self, async_client, use_parser, sample_pdf_bytes):
        use_parser(lambda req: httpx.Response(200, json={"a": 1}))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.docx", sample_pdf_bytes, "application/pdf")},
        )

        assert resp.status_code == 400

    async def test_empty_file_is_rejected(self, async_client, use_parser):
        use_parser(lambda req: httpx.Response(200, json={"a": 1}))

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", b"", "application/pdf")},
        )

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "MISSING_FILE"

    async def test_oversized_file_is_413(self, async_client, app_with_overrides, use_parser, make_settings, sample_pdf_bytes):
        use_parser(lambda req: httpx.Response(200, json={"a": 1}))
        app_with_overrides.dependency_overrides[get_settings] = lambda: make_settings(max_document_bytes=16)

        resp = await async_client.post(
            "/api/v1/documents/parse",
            files={"file": ("cv.pdf", sample_pdf_bytes, "application/pdf")},
        )

        assert resp.status_code == 413
        assert resp.json()["error_code"] == "FILE_TOO_LARGE"

    async def test_missing_file_field_is_422(self, async_client, use_parser):
        use_parser(lambda req: httpx.Response(200, json={"a": 1}))
        resp = await async_client.post("/api/v1/documents/parse", data={"other": "x"})
        assert resp.status_code == 422
