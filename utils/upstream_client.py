"""Shared httpx client for the upstream supplier API."""

import httpx

from config import API_KEY_HEADER, UpstreamSettings
from utils.tagging import TraceIds, new_trace_ids, trace_headers


class UpstreamClient:
    """Owns one AsyncClient preconfigured with the supplier base URL and API key.

    Only server-side code holds an instance; the key never leaves this process.
    """

    def __init__(self, settings: UpstreamSettings, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self):
        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers={
                "Content-Type": "application/json",
                API_KEY_HEADER: self._settings.api_key,
            },
            timeout=self._settings.timeout,
            transport=self._transport,
        )

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    async def post(self, path: str, body: dict, trace: TraceIds | None = None) -> tuple[httpx.Response, TraceIds]:
        """POST a JSON body with a fresh trace-id pair; returns the response and the ids used."""
        if self._client is None:
            raise RuntimeError("Upstream client not started")
        trace = trace or new_trace_ids()
        response = await self._client.post(path, json=body, headers=trace_headers(trace))
        return response, trace

    async def stop(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
