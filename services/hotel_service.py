"""Client-side hotel service: shapes parameters and calls the proxy routes."""

from urllib.parse import quote

import httpx

from config import (
    API_BASE_URL,
    CORRELATION_ID_HEADER,
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MIN_SUGGESTION_LENGTH,
)
from models.booking import BookingRequest
from models.search import HotelPageQuery, LocationSuggestion, RoomsQuery, SearchQuery
from services.api import create_api_client, logger
from services.context import RequestContext
from services.envelope import extract_location_suggestions


class HotelServiceError(Exception):
    """A proxy call failed; the message is safe to show to the user."""


def _error_message(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if message:
                return str(message)
    return str(exc) or type(exc).__name__


class HotelService:
    """All calls go through the proxy routes; none reach the supplier directly."""

    def __init__(self, client: httpx.AsyncClient, context: RequestContext):
        self._client = client
        self.context = context

    @classmethod
    def connect(
        cls,
        context: RequestContext | None = None,
        base_url: str = API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HotelService":
        context = context or RequestContext.new()
        return cls(create_api_client(context, base_url=base_url, transport=transport), context)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "HotelService":
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {CORRELATION_ID_HEADER: self.context.new_correlation_id()}

    async def _post(self, url: str, body: dict, params: dict | None = None) -> dict:
        response = await self._client.post(url, json=body, params=params, headers=self._headers())
        response.raise_for_status()
        return response.json()

    async def _get(self, url: str, params: dict) -> dict:
        response = await self._client.get(url, params=params, headers=self._headers())
        response.raise_for_status()
        return response.json()

    async def search_hotels(
        self,
        query: SearchQuery,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> dict:
        """Return the raw envelope; callers read data.hotels and data.totalCount."""
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be >= 1, got page={page} limit={limit}")
        return await self._post("/api/ext/hotelSearch", query.to_body(), params={"page": page, "limit": limit})

    async def get_location_suggestions(self, text: str) -> list[LocationSuggestion]:
        """Suggestions for a partially typed location.

        Never raises: any failure degrades to an empty list.
        """
        query = (text or "").strip()
        if len(query) < MIN_SUGGESTION_LENGTH:
            return []

        try:
            envelope = await self._post("/api/ext/hotel/autosuggest", {"text": query})
        except httpx.HTTPStatusError:
            # Already logged by the client's response hook: 4xx as a warning, 5xx as an error
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Unexpected error during autosuggest: {e!r}")
            return []

        suggestions = extract_location_suggestions(envelope)
        if suggestions is None:
            logger.warning(f"Unexpected response structure from autosuggest: {envelope}")
            return []
        return suggestions

    async def get_hotel_details(self, hotel_id: str) -> dict:
        if not hotel_id:
            raise ValueError("Hotel ID is required to fetch details.")
        try:
            return await self._get("/api/ext/hotel/details", {"hotelId": hotel_id})
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch details for hotel ID {hotel_id}: {e!r}")
            raise

    async def get_hotel_page_details(self, query: HotelPageQuery) -> dict:
        """Details for the hotel page, with the stay context as query parameters."""
        try:
            return await self._get("/api/ext/hotel/details", query.to_query_params())
        except httpx.HTTPError as e:
            logger.error(f"Fetching hotel page details for {query.hotelId} failed: {e!r}")
            raise HotelServiceError(f"Fetching hotel details failed: {_error_message(e)}") from e

    async def get_rooms_and_rates(self, query: RoomsQuery) -> dict:
        try:
            return await self._post("/api/ext/hotel/roomsandrates", query.to_body())
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch rooms and rates for {query.hotelId}: {e!r}")
            raise HotelServiceError(f"Failed to fetch rooms and rates: {_error_message(e)}") from e

    async def create_booking(self, request: BookingRequest) -> dict:
        url = f"/api/ext/hotel/{quote(request.hotelId, safe='')}/{quote(request.token, safe='')}/book"
        try:
            return await self._post(url, request.to_body())
        except httpx.HTTPError as e:
            logger.error(f"Booking failed for hotel {request.hotelId}: {e!r}")
            raise HotelServiceError(f"Booking failed: {_error_message(e)}") from e
