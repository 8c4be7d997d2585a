"""TTL-based in-memory caches using cachetools."""

from cachetools import TTLCache

from config import (
    CACHE_TTL_SUGGESTIONS,
    CACHE_TTL_HOTEL_DETAILS,
    CACHE_MAX_SUGGESTIONS,
    CACHE_MAX_HOTEL_DETAILS,
)

suggestions_cache = TTLCache(maxsize=CACHE_MAX_SUGGESTIONS, ttl=CACHE_TTL_SUGGESTIONS)
hotel_details_cache = TTLCache(maxsize=CACHE_MAX_HOTEL_DETAILS, ttl=CACHE_TTL_HOTEL_DETAILS)


def get_suggestions(key: str):
    return suggestions_cache.get(key)


def set_suggestions(key: str, value):
    suggestions_cache[key] = value


def get_hotel_details(key: str):
    return hotel_details_cache.get(key)


def set_hotel_details(key: str, value):
    hotel_details_cache[key] = value


def clear_all():
    suggestions_cache.clear()
    hotel_details_cache.clear()
