"""Search result state and the featured destinations loader."""

import asyncio
from dataclasses import dataclass, field
from datetime import date, timedelta

import httpx

from config import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    FEATURED_DAYS_AHEAD,
    FEATURED_DESTINATIONS,
    FEATURED_NIGHTS,
)
from models.hotels import FeaturedHotel, HotelSummary
from models.search import RoomOccupancy, RoomsQuery, SearchQuery
from services.api import logger
from services.envelope import extract_hotels, extract_total_count
from services.hotel_service import HotelService

SEARCH_FAILED_MESSAGE = "Failed to fetch hotel results. Please try again."
FEATURED_PARTIAL_MESSAGE = "Could not load all featured destinations."
FEATURED_FAILED_MESSAGE = "An error occurred while fetching featured hotels."


class SearchState:
    """Results of the most recent search.

    Every submission takes a ticket; a response that arrives after a newer
    search was submitted is dropped instead of overwriting newer results.
    """

    def __init__(self):
        self.hotels: list[HotelSummary] = []
        self.total_count = 0
        self.error: str | None = None
        self.is_loading = False
        self.last_query: SearchQuery | None = None
        self._latest_ticket = 0

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._latest_ticket

    async def submit(
        self,
        service: HotelService,
        query: SearchQuery,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> bool:
        """Run a search; returns True when its outcome was applied."""
        self._latest_ticket += 1
        ticket = self._latest_ticket
        self.is_loading = True
        self.error = None
        self.hotels = []
        self.total_count = 0
        self.last_query = None

        try:
            envelope = await service.search_hotels(query, page, limit)
        except (httpx.HTTPError, ValueError) as e:
            if not self._is_current(ticket):
                logger.info(f"Dropping failure of superseded search #{ticket}: {e!r}")
                return False
            logger.error(f"Search failed: {e!r}")
            self.error = SEARCH_FAILED_MESSAGE
            self.is_loading = False
            return True

        if not self._is_current(ticket):
            logger.info(f"Dropping results of superseded search #{ticket}")
            return False

        self.hotels = extract_hotels(envelope)
        self.total_count = extract_total_count(envelope)
        self.last_query = query
        self.is_loading = False
        if not self.hotels:
            logger.info("No hotels found for the given criteria.")
        return True

    def rooms_query(self, hotel_id: str) -> RoomsQuery:
        """Rooms-and-rates lookup for a hotel from the applied search."""
        if self.last_query is None:
            raise ValueError("No completed search to take the stay details from.")
        return RoomsQuery.for_hotel(hotel_id, self.last_query)


@dataclass
class FeaturedResult:
    hotels: list[FeaturedHotel] = field(default_factory=list)
    error: str | None = None


def featured_query(destination: dict, today: date) -> SearchQuery:
    check_in = today + timedelta(days=FEATURED_DAYS_AHEAD)
    lat, lng = destination["lat"], destination["lng"]
    return SearchQuery(
        locationId=f"coords:{lat},{lng}",
        type="COORDINATES",
        nationality="US",
        lat=lat,
        lng=lng,
        checkInDate=check_in,
        checkOutDate=check_in + timedelta(days=FEATURED_NIGHTS),
        occupancies=[RoomOccupancy.from_guests(adults=2)],
    )


async def load_featured_hotels(
    service: HotelService,
    destinations: list[dict] | None = None,
    today: date | None = None,
) -> FeaturedResult:
    """Search every destination concurrently and keep the first hotel of each.

    A failed destination does not abort the others.
    """
    destinations = FEATURED_DESTINATIONS if destinations is None else destinations
    today = today or date.today()

    try:
        queries = [featured_query(dest, today) for dest in destinations]
    except ValueError as e:
        logger.error(f"Error building featured hotel searches: {e!r}")
        return FeaturedResult(error=FEATURED_FAILED_MESSAGE)

    results = await asyncio.gather(
        *(service.search_hotels(query) for query in queries),
        return_exceptions=True,
    )

    featured = FeaturedResult()
    failed = False
    for dest, result in zip(destinations, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(f"Failed to fetch hotel for {dest['displayName']}: {result!r}")
            failed = True
            continue
        hotels = extract_hotels(result)
        if not hotels:
            logger.warning(
                f"No hotel found for destination: {dest['displayName']} "
                f"(Coords: {dest['lat']},{dest['lng']})"
            )
            continue
        featured.hotels.append(
            FeaturedHotel(**hotels[0].model_dump(), displayName=dest["displayName"])
        )

    if failed and len(featured.hotels) < len(destinations):
        featured.error = FEATURED_PARTIAL_MESSAGE
    return featured
