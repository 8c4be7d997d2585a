"""Client-side filtering and sorting of a fetched hotel list."""

import math

from models.hotels import HotelSummary
from models.search import Filters, SortBy


def processed_hotels(
    hotels: list[HotelSummary],
    filters: Filters | None = None,
    name_query: str = "",
    sort_by: SortBy | None = "price_desc",
) -> list[HotelSummary]:
    """Filter by name, star rating and amenities, then sort by per-night rate.

    Hotels without a rate sort as if priced at 0. Sorting is stable, and
    sort_by=None keeps the supplier's order.
    """
    filters = filters or Filters()
    needle = name_query.strip().lower()
    ratings = set(filters.starRating)

    result = []
    for hotel in hotels:
        if needle and needle not in hotel.hotelName.lower():
            continue
        if ratings and math.floor(hotel.star_rating) not in ratings:
            continue
        if filters.amenities and not all(hotel.matches_amenity(a) for a in filters.amenities):
            continue
        result.append(hotel)

    if sort_by == "price_asc":
        result.sort(key=lambda h: h.per_night_rate)
    elif sort_by == "price_desc":
        result.sort(key=lambda h: h.per_night_rate, reverse=True)
    return result
