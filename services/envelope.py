"""Unwrap the supplier's { status, message, data } envelope into model objects."""

from typing import Any

from pydantic import ValidationError

from models.hotels import HotelSummary, RoomRate
from models.search import LocationSuggestion
from services.api import logger


def unwrap(envelope: Any, *path: str, default: Any = None) -> Any:
    node = envelope
    for key in path:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


def _parse_list(items: Any, model, label: str) -> list:
    if not isinstance(items, list):
        return []
    parsed = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            # One malformed entry should not hide the rest of the results
            logger.warning(f"Skipping malformed {label}: {e.error_count()} validation errors")
    return parsed


def extract_hotels(envelope: Any) -> list[HotelSummary]:
    return _parse_list(unwrap(envelope, "data", "hotels", default=[]), HotelSummary, "hotel")


def extract_total_count(envelope: Any) -> int:
    total = unwrap(envelope, "data", "totalCount", default=0)
    try:
        return int(total)
    except (TypeError, ValueError):
        return 0


def extract_room_rates(envelope: Any) -> list[RoomRate]:
    return _parse_list(unwrap(envelope, "data", "roomLists", default=[]), RoomRate, "room rate")


def extract_hotel_details(envelope: Any) -> dict | None:
    return unwrap(envelope, "data", "hotel")


def extract_location_suggestions(envelope: Any) -> list[LocationSuggestion] | None:
    """Suggestions from a successful envelope, None when the shape is unexpected."""
    if unwrap(envelope, "status") is not True:
        return None
    items = unwrap(envelope, "data", "locationSuggestions")
    if not isinstance(items, list):
        return None
    return _parse_list(items, LocationSuggestion, "location suggestion")
