"""Great-circle distance helpers."""

import math

from config import EARTH_RADIUS_KM


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometres between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_to_hotel(lat: float, lng: float, hotel) -> float | None:
    """Distance from a point to a HotelSummary, None when the hotel has no coordinates."""
    if hotel.lat is None or hotel.lng is None:
        return None
    return haversine_km(lat, lng, hotel.lat, hotel.lng)
