"""Shared proxy plumbing: body parsing, validation, forwarding and error mapping."""

import json
import logging
import time
from typing import Any, Iterable

import httpx
from fastapi import Request

from utils.upstream_client import UpstreamClient

# Structured logger for all proxy routes
logger = logging.getLogger("proxy")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s [%(name)s] %(levelname)s: %(message)s'))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


# Per-operation health tracking
proxy_stats = {
    "autosuggest": {"success": 0, "failure": 0, "upstream_error": 0, "last_success": 0},
    "search": {"success": 0, "failure": 0, "upstream_error": 0, "last_success": 0},
    "roomsandrates": {"success": 0, "failure": 0, "upstream_error": 0, "last_success": 0},
    "details": {"success": 0, "failure": 0, "upstream_error": 0, "last_success": 0},
}


class ProxyError(Exception):
    """Rendered by the app as {"error": message, "details": details}."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def _record(operation: str, outcome: str):
    stats = proxy_stats.get(operation)
    if stats is None:
        return
    stats[outcome] += 1
    if outcome == "success":
        stats["last_success"] = time.time()


def get_upstream(request: Request) -> UpstreamClient:
    """FastAPI dependency returning the app's upstream client."""
    upstream = getattr(request.app.state, "upstream", None)
    if upstream is None or not upstream.is_ready:
        raise ProxyError(503, "Upstream client is not available.")
    return upstream


async def read_json_body(request: Request, label: str) -> dict:
    raw = await request.body()
    try:
        body = json.loads(raw)
    except ValueError as e:
        logger.error(f"[{label}] Failed to parse request body: {e}")
        raise ProxyError(400, "Invalid JSON body")
    if not isinstance(body, dict):
        logger.error(f"[{label}] Request body is not a JSON object: {body!r}")
        raise ProxyError(400, "Invalid JSON body")
    return body


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == []


def require_fields(body: dict, fields: Iterable[str], label: str):
    missing = [name for name in fields if _is_missing(body.get(name))]
    if missing:
        logger.error(f"[{label}] Missing required fields {missing}: {body}")
        raise ProxyError(
            400,
            "Missing required fields in request body.",
            details={"missing": missing},
        )


async def forward(
    upstream: UpstreamClient,
    operation: str,
    path: str,
    body: dict,
    label: str,
) -> tuple[int, Any]:
    """POST body to the supplier and return (status, parsed JSON).

    The response is read as text and parsed separately so the raw text is
    available for logging and for the error details.
    """
    logger.info(f"[{label}] Proxying to supplier API: {upstream.base_url}{path}")
    try:
        response, trace = await upstream.post(path, body)
    except httpx.HTTPError as e:
        _record(operation, "failure")
        logger.error(f"[{label}] Error fetching from external API: {e!r}")
        raise ProxyError(
            500,
            "Failed to fetch data from external API.",
            details=str(e) or type(e).__name__,
        )

    text = response.text
    logger.debug(f"[{label}] [{trace.correlation_id}] Raw response text from supplier: {text}")

    if not response.is_success:
        _record(operation, "upstream_error")
        logger.error(f"[{label}] [{trace.correlation_id}] Supplier API error ({response.status_code}): {text}")
        raise ProxyError(
            response.status_code,
            f"External API Error: {response.reason_phrase}",
            details=text,
        )

    try:
        data = json.loads(text)
    except ValueError as e:
        _record(operation, "failure")
        logger.error(f"[{label}] [{trace.correlation_id}] Failed to parse supplier response: {e}: {text}")
        raise ProxyError(500, "Failed to parse response from external API.")

    _record(operation, "success")
    return response.status_code, data
