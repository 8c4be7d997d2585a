"""Proxy routes for the supplier hotel API.

Each route validates the browser's JSON body, forwards it to the supplier with
fresh trace ids and relays the parsed response or a normalized error.
"""

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from cache.memory_cache import (
    get_hotel_details,
    get_suggestions,
    set_hotel_details,
    set_suggestions,
)
from config import DEFAULT_LIMIT, DEFAULT_PAGE
from proxy.base import (
    ProxyError,
    forward,
    get_upstream,
    logger,
    read_json_body,
    require_fields,
)
from utils.upstream_client import UpstreamClient

router = APIRouter(prefix="/api/ext")

SEARCH_REQUIRED = ("locationId", "checkInDate", "checkOutDate", "occupancies", "lat", "lng")
ROOMS_REQUIRED = ("hotelId", "checkInDate", "checkOutDate", "occupancies", "lat", "lng", "currency")
BOOKING_REQUIRED = (
    "guestDetails",
    "checkInDate",
    "checkOutDate",
    "occupancies",
    "currency",
    "rateId",
    "recommendationId",
)

# Query parameters of the details route that the supplier expects as numbers
_DETAILS_FLOATS = ("lat", "lng")
_DETAILS_INTS = ("numOfAdults", "numOfChildren")


def _is_success(status: int, data) -> bool:
    # The supplier also reports failures as HTTP 200 with status: false
    return status == 200 and isinstance(data, dict) and data.get("status") is True


# ── Location autosuggest ──
@router.post("/hotel/autosuggest")
async def autosuggest(request: Request, upstream: UpstreamClient = Depends(get_upstream)):
    logger.info("[autosuggest] Received POST request")
    body = await read_json_body(request, "autosuggest")
    require_fields(body, ("text",), "autosuggest")

    text = str(body["text"]).strip()
    cached = get_suggestions(text)
    if cached is not None:
        return JSONResponse(cached)

    status, data = await forward(upstream, "autosuggest", "/hotel/autosuggest", {"text": text}, "autosuggest")
    if _is_success(status, data):
        set_suggestions(text, data)
    return JSONResponse(data, status_code=status)


# ── Hotel search ──
@router.post("/hotelSearch")
async def hotel_search(
    request: Request,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    upstream: UpstreamClient = Depends(get_upstream),
):
    logger.info(f"[hotel-search] Received POST request page={page} limit={limit}")
    body = await read_json_body(request, "hotel-search")
    require_fields(body, SEARCH_REQUIRED, "hotel-search")

    # Query-string pagination wins over anything in the body
    payload = {**body, "page": page, "limit": limit}
    status, data = await forward(upstream, "search", "/hotel/search", payload, "hotel-search")
    return JSONResponse(data, status_code=status)


# ── Rooms and rates for one hotel ──
@router.post("/hotel/roomsandrates")
async def rooms_and_rates(request: Request, upstream: UpstreamClient = Depends(get_upstream)):
    logger.info("[roomsandrates] Received POST request")
    body = await read_json_body(request, "roomsandrates")
    require_fields(body, ROOMS_REQUIRED, "roomsandrates")

    status, data = await forward(upstream, "roomsandrates", "/hotel/roomsandrates", body, "roomsandrates")
    return JSONResponse(data, status_code=status)


def _details_payload(params: dict) -> dict:
    payload = dict(params)
    try:
        for key in _DETAILS_FLOATS:
            if key in payload:
                payload[key] = float(payload[key])
        for key in _DETAILS_INTS:
            if key in payload:
                payload[key] = int(payload[key])
    except ValueError:
        raise ProxyError(400, "Invalid query parameters.", details={"parameter": key})
    return payload


# ── Static hotel details ──
@router.get("/hotel/details")
async def hotel_details(request: Request, upstream: UpstreamClient = Depends(get_upstream)):
    params = dict(request.query_params)
    logger.info(f"[hotel-details] Received GET request for hotel {params.get('hotelId')}")
    require_fields(params, ("hotelId",), "hotel-details")
    payload = _details_payload(params)

    cache_key = urlencode(sorted(params.items()))
    cached = get_hotel_details(cache_key)
    if cached is not None:
        return JSONResponse(cached)

    status, data = await forward(upstream, "details", "/hotel/details", payload, "hotel-details")
    if _is_success(status, data):
        set_hotel_details(cache_key, data)
    return JSONResponse(data, status_code=status)


# ── Booking (not implemented by the supplier integration yet) ──
@router.post("/hotel/{hotel_id}/{token}/book")
async def create_booking(hotel_id: str, token: str, request: Request):
    logger.info(f"[booking] Received POST request for hotel {hotel_id}")
    body = await read_json_body(request, "booking")
    require_fields(body, BOOKING_REQUIRED, "booking")
    logger.warning(f"[booking] Booking for hotel {hotel_id} rejected: booking is not implemented")
    raise ProxyError(501, "Booking is not available yet.", details={"hotelId": hotel_id})
