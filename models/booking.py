"""Pydantic models for the booking request (stub flow)."""

from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from models.search import RoomOccupancy


class GuestDetails(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    email: str
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str):
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError(f"not an email address: {value!r}")
        return value


class BookingRequest(BaseModel):
    hotelId: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    guestDetails: GuestDetails
    checkInDate: date
    checkOutDate: date
    occupancies: list[RoomOccupancy] = Field(..., min_length=1)
    currency: str
    rateId: list[str] = Field(..., min_length=1)
    recommendationId: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_dates(self):
        if self.checkOutDate <= self.checkInDate:
            raise ValueError("checkOutDate must be after checkInDate")
        return self

    def to_body(self) -> dict:
        """Body for the booking route; hotel id and token travel in the path."""
        return self.model_dump(mode="json", exclude={"hotelId", "token"}, exclude_none=True)
