"""Pydantic models for hotel search results and room rates."""

import math
from typing import Any

from pydantic import BaseModel, field_validator


class NamedRef(BaseModel):
    name: str | None = None


class CountryRef(BaseModel):
    code: str | None = None


class HotelAddress(BaseModel):
    line1: str | None = None
    city: NamedRef | None = None
    state: NamedRef | None = None
    country: CountryRef | None = None


class HotelRate(BaseModel):
    currency: str | None = None
    perNightRate: float | None = None
    totalRate: float | None = None
    baseRate: float | None = None


class HotelSummary(BaseModel):
    id: str
    hotelName: str
    image: str | None = None
    address: HotelAddress | None = None
    rate: HotelRate | None = None
    rating: str | float | None = None  # supplier sends a string, e.g. "4.5"
    freeCancellation: bool = False
    lat: float | None = None
    lng: float | None = None
    facilities: list[str] = []

    @field_validator("facilities", mode="before")
    @classmethod
    def _facility_names(cls, value: Any):
        if value is None:
            return []
        names = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("name")
            if item:
                names.append(str(item))
        return names

    @property
    def star_rating(self) -> float:
        """Numeric rating, 0 when missing or unparseable."""
        try:
            rating = float(self.rating)
        except (TypeError, ValueError):
            return 0.0
        return rating if math.isfinite(rating) else 0.0

    @property
    def per_night_rate(self) -> float:
        if self.rate is None or self.rate.perNightRate is None:
            return 0.0
        return self.rate.perNightRate

    def matches_amenity(self, amenity: str) -> bool:
        needle = amenity.lower()
        return any(needle in facility.lower() for facility in self.facilities)


class FeaturedHotel(HotelSummary):
    displayName: str


class ImageLink(BaseModel):
    url: str | None = None
    size: str | None = None


class RoomImage(BaseModel):
    caption: str | None = None
    links: list[ImageLink] = []


class Bed(BaseModel):
    type: str | None = None
    count: int | None = None


class RatePrice(BaseModel):
    currency: str | None = None
    total: float | None = None
    perNightStay: float | None = None
    baseRate: float | None = None
    taxes: float | None = None


class RateExtra(BaseModel):
    """One priced alternative of a room (board basis / refundability)."""

    recommendationId: str | None = None
    boardBasis: Any = None
    refundable: bool | None = None
    price: RatePrice | None = None


class RoomRate(BaseModel):
    rateId: list[str] = []
    groupId: str | None = None
    roomId: str | None = None
    name: str | None = None
    beds: list[Bed] = []
    totalSleep: int | None = None
    images: list[RoomImage] = []
    roomAmenities: list[str] = []
    extra: list[RateExtra] = []

    @field_validator("rateId", mode="before")
    @classmethod
    def _rate_id_list(cls, value: Any):
        if value is None:
            return []
        if isinstance(value, (str, int)):
            return [str(value)]
        return [str(v) for v in value]

    @property
    def image_url(self) -> str | None:
        # Second link is the larger rendition when the supplier sends both
        if not self.images:
            return None
        links = self.images[0].links
        for link in links[1:2] + links[:1]:
            if link.url:
                return link.url
        return None

    def display_price(self) -> tuple[float, str] | None:
        """Price of the first extra and its label ("night" or "total")."""
        price = self.extra[0].price if self.extra else None
        if price is None:
            return None
        if price.perNightStay is not None:
            return price.perNightStay, "night"
        if price.total is not None:
            return price.total, "total"
        return None

    @property
    def recommendation_ids(self) -> list[str]:
        return [e.recommendationId for e in self.extra if e.recommendationId]
