"""Shared fixtures: a test client whose services never touch the real network."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from aione.config import Settings
from aione.dependencies import build_services
from aione.main import app
from aione.services.gateway import GeminiGateway
from aione.services.storage import MemoryStore

PROXIES = [
    "https://proxy-a.test/raw?url={url}",
    "https://proxy-b.test/?url={url}",
]

PAGE_HTML = """
<!DOCTYPE html>
<html>
<head><title>Example Domain</title></head>
<body>
  <h1>Example Domain</h1>
  <p>This domain is for use in illustrative examples in documents.</p>
  <p><a href="https://www.iana.org/domains/example">More information...</a></p>
</body>
</html>
"""


def make_settings(**overrides) -> Settings:
    values = {
        "supabase_url": "https://your-project-url.supabase.co",
        "supabase_key": "your-anon-key",
        "gemini_api_key": "",
        "proxy_endpoints": PROXIES,
        "retry_delay": 0.0,
        "storage_dir": "",
    }
    values.update(overrides)
    return Settings(**values)


def page_handler(html: str = PAGE_HTML):
    """MockTransport handler that serves *html* from every proxy."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=html)

    return handler


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear the slowapi in-memory counter before every test."""
    app.state.limiter._storage.reset()
    yield


@pytest.fixture
def install_services():
    """Replace ``app.state.services`` for one test and restore it afterwards."""
    original = app.state.services

    def install(settings: Settings = None, handler=None, **kwargs):
        settings = settings or make_settings()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler or page_handler()))
        kwargs.setdefault("store", MemoryStore())
        kwargs.setdefault("gateway", GeminiGateway(settings, sleep=AsyncMock()))
        services = build_services(settings, http_client=http_client, **kwargs)
        app.state.services = services
        return services

    yield install
    app.state.services = original


@pytest.fixture
def client():
    return TestClient(app)
