import asyncio
import json

import httpx
import pytest

from tripcore.errors import (
    InvalidResponseError,
    NetworkError,
    NonSuccessStatus,
    TierNotConfigured,
    TierTimeoutError,
)
from tripcore.schemas import OptimizationPlace, OptimizationRequest
from tripcore.tools.optimizer_client import OptimizationServiceClient

BASE_URL = "http://optimizer.test"


def _request() -> OptimizationRequest:
    return OptimizationRequest(
        places=[OptimizationPlace(name="Louvre", lat=48.8606, lon=2.3376, type="museum", priority=9)],
        start_date="2026-06-01",
        end_date="2026-06-03",
    )


def _response_body() -> dict:
    return {
        "itinerary": [
            {
                "day": 1,
                "date": "2026-06-01",
                "activities": [
                    {
                        "activity": {
                            "name": "Louvre",
                            "coordinates": {"latitude": 48.8606, "longitude": 2.3376},
                            "category": "museum",
                            "priority": 9,
                        },
                        "scheduled_time": "09:00",
                        "duration": 3,
                    }
                ],
            }
        ],
        "metadata": {"generation_time": 0.4, "api_version": "2", "ml_model_version": "hybrid-1"},
    }


def _client(handler, **kwargs) -> OptimizationServiceClient:
    return OptimizationServiceClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


def test_generate_itinerary_posts_request_and_parses_response():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_response_body())

    client = _client(handler, api_key="secret")
    response = asyncio.run(client.generate_itinerary(_request()))

    assert len(seen) == 1
    sent = seen[0]
    assert sent.method == "POST"
    assert str(sent.url) == f"{BASE_URL}/api/v2/itinerary/generate-hybrid"
    assert sent.headers["Authorization"] == "Bearer secret"
    body = json.loads(sent.content)
    assert body["places"][0]["lon"] == 2.3376
    assert body["transport_mode"] == "walk"
    assert response.itinerary[0].activities[0].activity.name == "Louvre"
    assert response.metadata.ml_model_version == "hybrid-1"


def test_non_success_status_carries_code_and_details():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "bad places"})

    with pytest.raises(NonSuccessStatus) as info:
        asyncio.run(_client(handler).generate_itinerary(_request()))
    assert info.value.status_code == 422
    assert info.value.details == {"detail": "bad places"}
    assert info.value.tier == "ml"


def test_server_error_is_non_success():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(NonSuccessStatus) as info:
        asyncio.run(_client(handler).generate_itinerary(_request()))
    assert info.value.status_code == 500


def test_timeout_is_reported_as_tier_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(TierTimeoutError):
        asyncio.run(_client(handler, timeout=5).generate_itinerary(_request()))


def test_connection_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_client(handler).generate_itinerary(_request()))


def test_malformed_body_is_invalid_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>", headers={"Content-Type": "text/html"})

    with pytest.raises(InvalidResponseError):
        asyncio.run(_client(handler).generate_itinerary(_request()))


def test_unexpected_shape_is_invalid_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"itinerary": [{"day": "first"}]})

    with pytest.raises(InvalidResponseError):
        asyncio.run(_client(handler).generate_itinerary(_request()))


def test_unconfigured_client_fails_without_network():
    client = OptimizationServiceClient("")
    assert not client.configured
    with pytest.raises(TierNotConfigured):
        asyncio.run(client.generate_itinerary(_request()))


def test_health_check_hits_health_path():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/health"
        return httpx.Response(200, json={"status": "healthy"})

    client = OptimizationServiceClient(BASE_URL + "/", transport=httpx.MockTransport(handler))
    assert asyncio.run(client.check_health()) == {"status": "healthy"}
