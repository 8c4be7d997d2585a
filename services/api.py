"""HTTP client used by every service-layer call to reach the proxy routes."""

import logging

import httpx

from config import API_BASE_URL, SESSION_ID_HEADER, UPSTREAM_TIMEOUT
from services.context import RequestContext

logger = logging.getLogger("services")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s [%(name)s] %(levelname)s: %(message)s'))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


async def _log_error_response(response: httpx.Response):
    if not response.is_error:
        return
    await response.aread()
    level = logging.ERROR if response.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"API Error: {response.status_code} {response.request.method} "
        f"{response.request.url.path}: {response.text}",
    )


def create_api_client(
    context: RequestContext,
    base_url: str = API_BASE_URL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Client bound to the proxy origin. It never carries the supplier API key."""
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers={
            "Content-Type": "application/json",
            "accept-language": context.language,
            SESSION_ID_HEADER: context.session_id,
        },
        event_hooks={"response": [_log_error_response]},
        timeout=UPSTREAM_TIMEOUT,
        transport=transport,
    )
