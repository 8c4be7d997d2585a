"""Shared fixtures for proxy and service-layer tests.

- The FastAPI app is driven in-process through httpx.ASGITransport.
- The supplier API (and, for pure service tests, the proxy) is an
  httpx.MockTransport whose handler records every request.
- AnyIO runs the async tests (@pytest.mark.anyio) on asyncio.
"""

import json

import httpx
import pytest

from cache.memory_cache import clear_all
from config import UpstreamSettings
from main import app
from proxy.base import get_upstream
from services.context import RequestContext
from services.hotel_service import HotelService
from utils.upstream_client import UpstreamClient

from factories import PROXY_URL, SUPPLIER_KEY, SUPPLIER_URL


class RecordingHandler:
    """MockTransport handler that records requests and replies as configured."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responder = lambda request: httpx.Response(200, json={"status": True, "data": {}})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responder(request)
        if hasattr(response, "__await__"):
            response = await response
        return response

    def reply(self, status=200, json=None, text=None):
        if text is not None:
            self._responder = lambda request: httpx.Response(status, text=text)
        else:
            self._responder = lambda request: httpx.Response(status, json=json)

    def raise_error(self, exc_type=httpx.ConnectError, message="connection refused"):
        def responder(request):
            raise exc_type(message, request=request)
        self._responder = responder

    def respond_with(self, responder):
        self._responder = responder

    @property
    def calls(self) -> int:
        return len(self.requests)

    def bodies(self) -> list:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_caches():
    clear_all()
    yield
    clear_all()


@pytest.fixture
def supplier() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
async def upstream(supplier):
    client = UpstreamClient(
        UpstreamSettings(base_url=SUPPLIER_URL, api_key=SUPPLIER_KEY),
        transport=httpx.MockTransport(supplier),
    )
    await client.start()
    yield client
    await client.stop()


@pytest.fixture
async def wired_app(upstream):
    """The app with its upstream dependency pointed at the mock supplier."""
    app.dependency_overrides[get_upstream] = lambda: upstream
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def api(wired_app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=wired_app), base_url=PROXY_URL) as client:
        yield client


@pytest.fixture
def proxy() -> RecordingHandler:
    """Stands in for the proxy routes in pure service-layer tests."""
    return RecordingHandler()


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(session_id="session-under-test")


@pytest.fixture
async def service(proxy, context):
    svc = HotelService.connect(context, base_url=PROXY_URL, transport=httpx.MockTransport(proxy))
    yield svc
    await svc.aclose()


@pytest.fixture
async def wired_service(wired_app, context):
    """Service layer talking to the real proxy routes, which talk to the mock supplier."""
    svc = HotelService.connect(context, base_url=PROXY_URL, transport=httpx.ASGITransport(app=wired_app))
    yield svc
    await svc.aclose()
