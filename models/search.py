"""Pydantic models for search requests and location suggestions."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

MAX_CHILD_AGE = 17

SortBy = Literal["price_asc", "price_desc"]


class RoomOccupancy(BaseModel):
    """Guest composition of one room, in the supplier's wire format."""

    numOfRoom: int = Field(1, ge=1)
    numOfAdults: int = Field(..., ge=1)
    numOfChildren: int = Field(0, ge=0)
    childAges: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_child_ages(self):
        if len(self.childAges) != self.numOfChildren:
            raise ValueError(
                f"childAges has {len(self.childAges)} entries but numOfChildren is {self.numOfChildren}"
            )
        for age in self.childAges:
            if not 0 <= age <= MAX_CHILD_AGE:
                raise ValueError(f"child age {age} is outside 0..{MAX_CHILD_AGE}")
        return self

    @classmethod
    def from_guests(cls, adults: int, children: int = 0, child_ages: list[int] | None = None):
        return cls(
            numOfAdults=adults,
            numOfChildren=children,
            childAges=list(child_ages or []),
        )


class Coordinates(BaseModel):
    lat: float
    long: float


class LocationSuggestion(BaseModel):
    id: str
    name: str
    type: str | None = None
    coordinates: Coordinates | None = None
    country: str | None = None
    fullName: str | None = None
    isTermMatch: bool | None = None
    referenceScore: float | None = None
    code: str | None = None


class SearchQuery(BaseModel):
    """Body of a hotel search, forwarded as-is to the supplier."""

    locationId: str = Field(..., min_length=1)
    checkInDate: date
    checkOutDate: date
    occupancies: list[RoomOccupancy] = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    type: str | None = None
    nationality: str = "US"
    currency: str = "USD"
    destinationCountryCode: str | None = None
    countryOfResidence: str | None = None
    radius: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.checkOutDate <= self.checkInDate:
            raise ValueError("checkOutDate must be after checkInDate")
        return self

    @classmethod
    def from_suggestion(
        cls,
        suggestion: LocationSuggestion,
        check_in: date,
        check_out: date,
        occupancies: list[RoomOccupancy],
        **extra,
    ) -> "SearchQuery":
        """Build a search for the place the user picked from autosuggest."""
        if suggestion.coordinates is None:
            raise ValueError(f"Location {suggestion.id} has no coordinates")
        return cls(
            locationId=suggestion.id,
            lat=suggestion.coordinates.lat,
            lng=suggestion.coordinates.long,
            type=suggestion.type,
            checkInDate=check_in,
            checkOutDate=check_out,
            occupancies=occupancies,
            **extra,
        )

    def to_body(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class Filters(BaseModel):
    starRating: list[int] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)


def occupancy_query_params(occupancies: list[RoomOccupancy]) -> dict[str, str]:
    """Flatten occupancies into the details route's query parameters.

    The supplier's details operation takes a single guest count, so only the
    first room is described.
    """
    if not occupancies:
        return {}
    first = occupancies[0]
    return {
        "numOfAdults": str(first.numOfAdults),
        "numOfChildren": str(first.numOfChildren),
    }


class RoomsQuery(BaseModel):
    """Body of a rooms-and-rates lookup for one hotel."""

    hotelId: str = Field(..., min_length=1)
    checkInDate: date
    checkOutDate: date
    occupancies: list[RoomOccupancy] = Field(..., min_length=1)
    lat: float
    lng: float
    currency: str = "USD"

    @model_validator(mode="after")
    def _check_dates(self):
        if self.checkOutDate <= self.checkInDate:
            raise ValueError("checkOutDate must be after checkInDate")
        return self

    @classmethod
    def for_hotel(cls, hotel_id: str, search: SearchQuery) -> "RoomsQuery":
        """Reuse the stay context of the search that produced the hotel."""
        return cls(
            hotelId=hotel_id,
            checkInDate=search.checkInDate,
            checkOutDate=search.checkOutDate,
            occupancies=search.occupancies,
            lat=search.lat,
            lng=search.lng,
            currency=search.currency,
        )

    def to_body(self) -> dict:
        return self.model_dump(mode="json")


class HotelPageQuery(RoomsQuery):
    destinationISOCode: str
    nationalityISOCode: str
    type: str

    def to_query_params(self) -> dict[str, str]:
        params = {
            "hotelId": self.hotelId,
            "checkInDate": self.checkInDate.isoformat(),
            "checkOutDate": self.checkOutDate.isoformat(),
            "lat": str(self.lat),
            "lng": str(self.lng),
            "currency": self.currency,
            "destinationISOCode": self.destinationISOCode,
            "nationalityISOCode": self.nationalityISOCode,
            "type": self.type,
        }
        params.update(occupancy_query_params(self.occupancies))
        return params
