"""
Root conftest.py — Shared fixtures for ALL tests (unit + integration)

Environment strategy:
  - Settings are built explicitly per test (make_settings) — no test depends
    on the developer's .env file.
  - Upstream HTTP collaborators (parser, credential service, cloud token
    generator) are faked with httpx.MockTransport; no sockets are opened.
  - The document cache writes to pytest's tmp_path.

How to run:
  pytest                           # all tests
  pytest -m unit                   # unit tests only
  pytest -m integration            # FastAPI routing stack
  pytest backend/tests/unit/test_connection_broker.py
"""

from __future__ import annotations

import os
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

# ─────────────────────────────────────────────────────────────────────────────
# Patch environment BEFORE any app imports so module-level settings are sane
# ─────────────────────────────────────────────────────────────────────────────

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DEBUG",   "true")

TEST_API_KEY    = "APItestkey"
TEST_API_SECRET = "test-secret-that-is-long-enough-for-hs256"
TEST_LIVEKIT_URL = "wss://intervita-test.livekit.cloud"
TEST_TOKEN_ENDPOINT = "http://credentials.test/api/token"
TEST_PARSER_URL = "http://parser.test"


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def make_settings(tmp_path):
    """
    Factory fixture: returns Settings with test keys and endpoints.

    Usage:
        cfg = make_settings()
        cfg = make_settings(livekit_url="", require_document_payload=False)
    """
    from intervita.core.config import Settings

    def _build(**overrides) -> Settings:
        values: dict = {
            "livekit_api_key":     TEST_API_KEY,
            "livekit_api_secret":  TEST_API_SECRET,
            "livekit_url":         TEST_LIVEKIT_URL,
            "token_endpoint_url":  TEST_TOKEN_ENDPOINT,
            "parser_api_url":      TEST_PARSER_URL,
            "cloud_token_url":     "http://cloud.test/token",
            "cloud_ws_url":        "wss://cloud.test",
            "manual_token":        "manual-token",
            "manual_ws_url":       "wss://manual.test",
            "document_cache_path": str(tmp_path / "storage.json"),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _build


@pytest.fixture
def test_settings(make_settings):
    return make_settings()


# ─────────────────────────────────────────────────────────────────────────────
# Sample payloads
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_resume() -> dict:
    """Structured output as returned by the parsing service."""
    return {
        "name":   "Alice Example",
        "email":  "alice@example.com",
        "skills": ["python", "fastapi"],
        "experience": [
            {"company": "Acme", "title": "Engineer", "years": 3},
        ],
    }


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Minimal valid PDF — passes magic-byte check (%PDF header)."""
    return (
        b"%PDF-1.4\n"
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
        b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>\nendobj\n"
        b"trailer\n<< /Size 4 /Root 1 0 R >>\n"
        b"%%EOF"
    )


# ─────────────────────────────────────────────────────────────────────────────
# Fake upstreams
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def mock_http():
    """
    Factory fixture: an httpx.AsyncClient whose requests are answered by `handler`.
    Every request is recorded on the returned client's `.requests` list.

    Usage:
        client = mock_http(lambda req: httpx.Response(200, json={...}))
    """
    clients: list[httpx.AsyncClient] = []

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        client.requests = seen  # type: ignore[attr-defined]
        clients.append(client)
        return client

    return _build


# ─────────────────────────────────────────────────────────────────────────────
# Document cache
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def file_store(tmp_path):
    from intervita.storage.durable import FileKeyValueStore
    return FileKeyValueStore(tmp_path / "storage.json")


@pytest.fixture
def document_cache(file_store):
    from intervita.storage.document_cache import DocumentCache
    return DocumentCache(file_store)


# ─────────────────────────────────────────────────────────────────────────────
# FastAPI test client with settings override
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def app_with_overrides(test_settings):
    """
    FastAPI app with settings overridden:
      - get_settings → test_settings (test signing keys, fake parser URL)

    Tests that need a different configuration override get_settings again.
    """
    from intervita.core.config import get_settings
    from intervita.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app_with_overrides) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client over ASGITransport."""
    from httpx import ASGITransport
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
