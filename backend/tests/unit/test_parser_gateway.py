"""
Unit Tests — DocumentParserGateway

The parsing service is faked with httpx.MockTransport; no sockets are opened.
"""

from __future__ import annotations

import httpx
import pytest

from intervita.core.errors import ParseError
from intervita.services.parser import DocumentParserGateway


@pytest.mark.unit
@pytest.mark.parser
class TestDocumentParserGateway:

    async def test_returns_structured_data(self, test_settings, mock_http, sample_resume, sample_pdf_bytes):
        client = mock_http(lambda req: httpx.Response(200, json=sample_resume))
        gateway = DocumentParserGateway(test_settings, client=client)

        data = await gateway.parse(sample_pdf_bytes, filename="cv.pdf")

        assert data == sample_resume

    async def test_posts_multipart_file_field(self, test_settings, mock_http, sample_resume, sample_pdf_bytes):
        client = mock_http(lambda req: httpx.Response(200, json=sample_resume))
        gateway = DocumentParserGateway(test_settings, client=client)

        await gateway.parse(sample_pdf_bytes, filename="cv.pdf")

        (request,) = client.requests
        assert request.method == "POST"
        assert str(request.url) == "http://parser.test/resume/parse/"
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.read()
        assert b'name="file"; filename="cv.pdf"' in body
        assert sample_pdf_bytes in body

    def test_endpoint_tolerates_trailing_slash(self, make_settings):
        gateway = DocumentParserGateway(make_settings(parser_api_url="http://parser.test/"))
        assert gateway.endpoint == "http://parser.test/resume/parse/"

    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    async def test_non_success_status_raises(self, test_settings, mock_http, status, sample_pdf_bytes):
        client = mock_http(lambda req: httpx.Response(status, json={"detail": "nope"}))
        gateway = DocumentParserGateway(test_settings, client=client)

        with pytest.raises(ParseError, match=str(status)):
            await gateway.parse(sample_pdf_bytes)

    @pytest.mark.parametrize("body", [{}, [], None, [1, 2]])
    async def test_empty_or_non_object_result_is_a_failure(self, test_settings, mock_http, body, sample_pdf_bytes):
        client = mock_http(lambda req: httpx.Response(200, json=body))
        gateway = DocumentParserGateway(test_settings, client=client)

        with pytest.raises(ParseError):
            await gateway.parse(sample_pdf_bytes)

    async def test_non_json_body_is_a_failure(self, test_settings, mock_http, sample_pdf_bytes):
        client = mock_http(lambda req: httpx.Response(200, text="<html>oops</html>"))
        gateway = DocumentParserGateway(test_settings, client=client)

        with pytest.raises(ParseError, match="non-JSON"):
            await gateway.parse(sample_pdf_bytes)

    async def test_transport_error_is_a_parse_error(self, test_settings, mock_http, sample_pdf_bytes):
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = DocumentParserGateway(test_settings, client=mock_http(_refuse))

        with pytest.raises(ParseError, match="request failed"):
            await gateway.parse(sample_pdf_bytes)
