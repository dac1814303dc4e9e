import asyncio
import json

import httpx
import pytest

from tripcore.errors import InvalidResponseError, NetworkError, NonSuccessStatus, TierNotConfigured
from tripcore.schemas import Trip
from tripcore.tools.route_backend import RouteBackendClient, build_route_payload

URL = "http://backend.test/generate-route"


def _trip(saved_places=None) -> Trip:
    return Trip.model_validate({
        "id": 42,
        "name": "Paris long weekend",
        "destination": "Paris",
        "coordinates": [{"name": "Paris", "lat": 48.8566, "lng": 2.3522}],
        "savedPlaces": saved_places or [],
    })


SAVED = [
    {"id": 1, "name": "Louvre", "lat": 48.8606, "lng": 2.3376, "priority": "medium"},
    {"id": 2, "name": "Eiffel Tower", "lat": 48.8584, "lng": 2.2945, "priority": "high"},
    {"id": 3, "name": "Unmapped cafe", "priority": "low"},
]


def test_payload_uses_saved_places_with_coordinates():
    payload = build_route_payload(_trip(SAVED))

    assert payload["tripId"] == "42"
    assert payload["routeType"] == "balanced"
    assert payload["tripData"]["savedPlaces"][0]["name"] == "Louvre"
    assert [entry["placeName"] for entry in payload["distanceMatrix"]] == ["Louvre", "Eiffel Tower"]
    # The route starts at the high-priority place.
    assert [p["name"] for p in payload["optimizedRoute"]] == ["Eiffel Tower", "Louvre"]


def test_payload_falls_back_to_destinations():
    payload = build_route_payload(_trip())
    assert [p["name"] for p in payload["optimizedRoute"]] == ["Paris"]
    assert payload["distanceMatrix"][0]["distancesTo"] == []


def test_destination_ids_stay_unique_whatever_their_positions():
    trip = Trip.model_validate({
        "id": 43,
        "coordinates": [
            {"name": "Paris", "lat": 48.8566, "lng": 2.3522, "position": 1},
            {"name": "Lyon", "lat": 45.764, "lng": 4.8357, "position": 0},
            {"name": "Nice", "lat": 43.7102, "lng": 7.262, "position": 2},
        ],
    })
    payload = build_route_payload(trip)

    ids = [entry["placeId"] for entry in payload["distanceMatrix"]]
    assert len(set(ids)) == 3
    assert all(len(entry["distancesTo"]) == 2 for entry in payload["distanceMatrix"])
    assert sorted(p["name"] for p in payload["optimizedRoute"]) == ["Lyon", "Nice", "Paris"]


def _client(handler) -> RouteBackendClient:
    return RouteBackendClient(URL, transport=httpx.MockTransport(handler))


def test_generate_routes_returns_day_itineraries():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "itinerary": [
                {
                    "day": 1,
                    "date": "Jun 1",
                    "destinationName": "Paris",
                    "places": [{"id": "1", "name": "Louvre", "estimatedTime": "2 hours"}],
                    "totalTime": "2.0h",
                }
            ]
        })

    days = asyncio.run(_client(handler).generate_routes(_trip(SAVED)))

    assert captured["body"]["routeType"] == "balanced"
    assert len(days) == 1
    assert days[0].destination_name == "Paris"
    assert days[0].places[0].estimated_time == "2 hours"


def test_error_key_in_body_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "quota exceeded"})

    with pytest.raises(NetworkError, match="quota exceeded"):
        asyncio.run(_client(handler).generate_routes(_trip(SAVED)))


def test_non_success_status_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(NonSuccessStatus) as info:
        asyncio.run(_client(handler).generate_routes(_trip(SAVED)))
    assert info.value.tier == "secondary"


def test_non_object_body_is_invalid():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "an", "object"])

    with pytest.raises(InvalidResponseError):
        asyncio.run(_client(handler).generate_routes(_trip(SAVED)))


def test_missing_url_means_not_configured():
    with pytest.raises(TierNotConfigured):
        asyncio.run(RouteBackendClient("").generate_routes(_trip()))
