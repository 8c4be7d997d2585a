"""Tests for the /api/ext proxy routes against a mock supplier."""

import httpx
import pytest

from config import API_KEY_HEADER, CORRELATION_ID_HEADER, SESSION_ID_HEADER
from main import app
from factories import (
    PROXY_URL,
    SUPPLIER_KEY,
    booking_body,
    rooms_body,
    search_body,
    search_envelope,
    suggestion_data,
    suggestions_envelope,
)

pytestmark = pytest.mark.anyio


# ── Pagination ──

async def test_search_merges_pagination_from_query_string(api, supplier):
    supplier.reply(json=search_envelope([]))

    resp = await api.post("/api/ext/hotelSearch?page=3&limit=20", json=search_body())

    assert resp.status_code == 200
    assert supplier.calls == 1
    assert supplier.requests[0].url.path == "/hotel/search"
    forwarded = supplier.bodies()[0]
    assert forwarded["page"] == 3
    assert forwarded["limit"] == 20
    assert forwarded["locationId"] == "LOC-1"
    assert forwarded["occupancies"] == search_body()["occupancies"]


async def test_search_defaults_pagination(api, supplier):
    supplier.reply(json=search_envelope([]))

    await api.post("/api/ext/hotelSearch", json=search_body())

    forwarded = supplier.bodies()[0]
    assert forwarded["page"] == 1
    assert forwarded["limit"] == 50


async def test_query_string_pagination_wins_over_body(api, supplier):
    supplier.reply(json=search_envelope([]))

    await api.post("/api/ext/hotelSearch?limit=10", json=search_body(page=7, limit=999))

    forwarded = supplier.bodies()[0]
    assert forwarded["page"] == 1
    assert forwarded["limit"] == 10


@pytest.mark.parametrize("query", ["page=0", "limit=0", "page=abc"])
async def test_search_rejects_bad_pagination(api, supplier, query):
    resp = await api.post(f"/api/ext/hotelSearch?{query}", json=search_body())

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request parameters."
    assert supplier.calls == 0


# ── Inbound validation ──

@pytest.mark.parametrize(
    "path, body, missing",
    [
        ("/api/ext/hotel/autosuggest", {}, ["text"]),
        ("/api/ext/hotel/autosuggest", {"text": ""}, ["text"]),
        ("/api/ext/hotelSearch", search_body(locationId=None), ["locationId"]),
        ("/api/ext/hotelSearch", search_body(occupancies=[]), ["occupancies"]),
        ("/api/ext/hotel/roomsandrates", rooms_body(hotelId=None, currency=""), ["hotelId", "currency"]),
        ("/api/ext/hotel/roomsandrates", {k: v for k, v in rooms_body().items() if k != "lat"}, ["lat"]),
    ],
)
async def test_missing_fields_are_rejected_without_upstream_call(api, supplier, path, body, missing):
    resp = await api.post(path, json=body)

    assert resp.status_code == 400
    payload = resp.json()
    assert payload["error"] == "Missing required fields in request body."
    assert payload["details"]["missing"] == missing
    assert supplier.calls == 0


async def test_zero_coordinates_are_not_missing(api, supplier):
    supplier.reply(json={"status": True, "data": {"roomLists": []}})

    resp = await api.post("/api/ext/hotel/roomsandrates", json=rooms_body(lat=0, lng=0))

    assert resp.status_code == 200
    assert supplier.calls == 1


@pytest.mark.parametrize("raw", [b"{not json", b"", b"[1, 2]"])
async def test_invalid_json_body(api, supplier, raw):
    resp = await api.post(
        "/api/ext/hotel/autosuggest",
        content=raw,
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON body"}
    assert supplier.calls == 0


# ── Upstream outcomes ──

async def test_success_relays_parsed_body(api, supplier):
    envelope = suggestions_envelope(suggestion_data())
    supplier.reply(json=envelope)

    resp = await api.post("/api/ext/hotel/autosuggest", json={"text": "Las"})

    assert resp.status_code == 200
    assert resp.json() == envelope


@pytest.mark.parametrize("status, reason", [(400, "Bad Request"), (404, "Not Found"), (503, "Service Unavailable")])
async def test_upstream_error_status_is_relayed_with_raw_body(api, supplier, status, reason):
    supplier.reply(status=status, text='{"message": "supplier says no"}')

    resp = await api.post("/api/ext/hotelSearch", json=search_body())

    assert resp.status_code == status
    assert resp.json() == {
        "error": f"External API Error: {reason}",
        "details": '{"message": "supplier says no"}',
    }


async def test_unparseable_success_body(api, supplier):
    supplier.reply(status=200, text="<html>gateway</html>")

    resp = await api.post("/api/ext/hotel/roomsandrates", json=rooms_body())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to parse response from external API."}


async def test_network_failure(api, supplier):
    supplier.raise_error(httpx.ConnectError, "connection refused")

    resp = await api.post("/api/ext/hotelSearch", json=search_body())

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to fetch data from external API.",
        "details": "connection refused",
    }


async def test_timeout_is_reported_as_fetch_failure(api, supplier):
    supplier.raise_error(httpx.ReadTimeout, "")

    resp = await api.post("/api/ext/hotelSearch", json=search_body())

    assert resp.status_code == 500
    assert resp.json()["details"] == "ReadTimeout"


# ── Outbound headers ──

async def test_outbound_headers_carry_key_and_fresh_trace_ids(api, supplier):
    supplier.reply(json=search_envelope([]))

    await api.post("/api/ext/hotelSearch", json=search_body())
    await api.post("/api/ext/hotelSearch", json=search_body())

    first, second = supplier.requests
    for request in (first, second):
        assert request.headers[API_KEY_HEADER] == SUPPLIER_KEY
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers[SESSION_ID_HEADER] != request.headers[CORRELATION_ID_HEADER]
    assert first.headers[SESSION_ID_HEADER] != second.headers[SESSION_ID_HEADER]
    assert first.headers[CORRELATION_ID_HEADER] != second.headers[CORRELATION_ID_HEADER]


# ── Autosuggest ──

async def test_autosuggest_forwards_only_text(api, supplier):
    supplier.reply(json=suggestions_envelope())

    await api.post("/api/ext/hotel/autosuggest", json={"text": "Par", "debug": True})

    assert supplier.requests[0].url.path == "/hotel/autosuggest"
    assert supplier.bodies() == [{"text": "Par"}]


async def test_autosuggest_repeats_are_served_from_cache(api, supplier):
    supplier.reply(json=suggestions_envelope(suggestion_data()))

    first = await api.post("/api/ext/hotel/autosuggest", json={"text": "Vegas"})
    second = await api.post("/api/ext/hotel/autosuggest", json={"text": " Vegas "})

    assert first.json() == second.json()
    assert supplier.calls == 1
    assert supplier.bodies() == [{"text": "Vegas"}]


async def test_autosuggest_cache_is_keyed_on_forwarded_text(api, supplier):
    supplier.reply(json=suggestions_envelope(suggestion_data()))

    await api.post("/api/ext/hotel/autosuggest", json={"text": "Vegas"})
    await api.post("/api/ext/hotel/autosuggest", json={"text": "vegas"})

    assert supplier.bodies() == [{"text": "Vegas"}, {"text": "vegas"}]


async def test_autosuggest_failures_are_not_cached(api, supplier):
    supplier.reply(status=502, text="bad gateway")
    await api.post("/api/ext/hotel/autosuggest", json={"text": "Vegas"})

    supplier.reply(json=suggestions_envelope())
    resp = await api.post("/api/ext/hotel/autosuggest", json={"text": "Vegas"})

    assert resp.status_code == 200
    assert supplier.calls == 2


async def test_autosuggest_status_false_replies_are_not_cached(api, supplier):
    supplier.reply(json={"status": False, "message": "Supplier busy", "data": None})
    first = await api.post("/api/ext/hotel/autosuggest", json={"text": "Paris"})

    supplier.reply(json=suggestions_envelope(suggestion_data()))
    second = await api.post("/api/ext/hotel/autosuggest", json={"text": "Paris"})

    assert first.json()["status"] is False
    assert second.json()["status"] is True
    assert supplier.calls == 2


# ── Rooms and rates ──

async def test_rooms_and_rates_forwards_body_unchanged(api, supplier):
    supplier.reply(json={"status": True, "data": {"roomLists": []}})

    resp = await api.post("/api/ext/hotel/roomsandrates", json=rooms_body())

    assert resp.status_code == 200
    assert supplier.requests[0].url.path == "/hotel/roomsandrates"
    assert supplier.bodies() == [rooms_body()]


# ── Hotel details ──

async def test_details_converts_numeric_params_and_caches(api, supplier):
    supplier.reply(json={"status": True, "data": {"hotel": {"overview": {"name": "Bellagio"}}}})

    params = {"hotelId": "H-1", "lat": "36.1", "lng": "-115.2", "numOfAdults": "2", "currency": "USD"}
    first = await api.get("/api/ext/hotel/details", params=params)
    second = await api.get("/api/ext/hotel/details", params=params)

    assert first.status_code == second.status_code == 200
    assert supplier.calls == 1
    assert supplier.requests[0].url.path == "/hotel/details"
    assert supplier.bodies()[0] == {
        "hotelId": "H-1",
        "lat": 36.1,
        "lng": -115.2,
        "numOfAdults": 2,
        "currency": "USD",
    }


async def test_details_status_false_replies_are_not_cached(api, supplier):
    supplier.reply(json={"status": False, "message": "Hotel not found"})
    await api.get("/api/ext/hotel/details", params={"hotelId": "H-1"})

    supplier.reply(json={"status": True, "data": {"hotel": {}}})
    resp = await api.get("/api/ext/hotel/details", params={"hotelId": "H-1"})

    assert resp.json()["status"] is True
    assert supplier.calls == 2


async def test_details_requires_hotel_id(api, supplier):
    resp = await api.get("/api/ext/hotel/details")

    assert resp.status_code == 400
    assert resp.json()["details"] == {"missing": ["hotelId"]}
    assert supplier.calls == 0


async def test_details_rejects_non_numeric_coordinates(api, supplier):
    resp = await api.get("/api/ext/hotel/details", params={"hotelId": "H-1", "lat": "north"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid query parameters.", "details": {"parameter": "lat"}}
    assert supplier.calls == 0


# ── Booking stub ──

async def test_booking_is_not_implemented(api, supplier):
    resp = await api.post("/api/ext/hotel/H-1/tok-1/book", json=booking_body())

    assert resp.status_code == 501
    assert resp.json() == {"error": "Booking is not available yet.", "details": {"hotelId": "H-1"}}
    assert supplier.calls == 0


async def test_booking_validates_body_first(api, supplier):
    resp = await api.post("/api/ext/hotel/H-1/tok-1/book", json=booking_body(recommendationId=None))

    assert resp.status_code == 400
    assert resp.json()["details"] == {"missing": ["recommendationId"]}


# ── App wiring ──

async def test_missing_upstream_client_is_a_503():
    app.dependency_overrides.clear()
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=PROXY_URL) as client:
        resp = await client.post("/api/ext/hotelSearch", json=search_body())

    assert resp.status_code == 503
    assert resp.json() == {"error": "Upstream client is not available."}


async def test_health_reports_operation_counters(api, supplier):
    supplier.reply(json=search_envelope([]))
    await api.post("/api/ext/hotelSearch", json=search_body())

    resp = await api.get("/health")

    body = resp.json()
    assert body["status"] == "ok"
    assert body["upstream_ready"] is False  # no lifespan in tests; the dependency is overridden
    search = body["operations"]["search"]
    assert search["total_requests"] >= 1
    assert search["last_success_seconds_ago"] is not None
    assert set(body["operations"]) == {"autosuggest", "search", "roomsandrates", "details"}
