from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from tripcore.config import get_logger
from tripcore.errors import (
    InvalidResponseError,
    NetworkError,
    NonSuccessStatus,
    TierNotConfigured,
    TierTimeoutError,
)
from tripcore.schemas import DayItinerary, Trip
from tripcore.tools.geo import distance_matrix, nearest_neighbour_order

logger = get_logger(__name__)

TIER = "secondary"
ROUTE_TYPE = "balanced"


def _route_points(trip: Trip) -> List[Dict[str, Any]]:
    points = [
        {
            "id": str(place.id),
            "name": place.name,
            "lat": place.lat,
            "lng": place.lng,
            "priority": place.priority,
            "estimatedTime": place.estimated_time,
        }
        for place in trip.saved_places
        if place.has_coordinates and place.lat != 0 and place.lng != 0
    ]
    if points:
        return points
    return [
        {"id": f"destination-{idx}", "name": coord.name, "lat": coord.lat, "lng": coord.lng, "priority": "high"}
        for idx, coord in enumerate(trip.coordinates)
    ]


def build_route_payload(trip: Trip, route_type: str = ROUTE_TYPE) -> Dict[str, Any]:
    """Request body for the backend route generator."""
    points = _route_points(trip)
    return {
        "tripId": str(trip.id),
        "tripData": trip.model_dump(mode="json", by_alias=True),
        "routeType": route_type,
        "distanceMatrix": distance_matrix(points),
        "optimizedRoute": [dict(p) for p in nearest_neighbour_order(points)],
    }


class RouteBackendClient:
    """Client for the backend route-generation function."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or ""
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def generate_routes(self, trip: Trip) -> List[DayItinerary]:
        if not self.configured:
            raise TierNotConfigured("Route backend URL not configured", tier=TIER)

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = build_route_payload(trip)
        logger.info(
            "Requesting %s routes for trip %s (%d route point(s))",
            payload["routeType"],
            payload["tripId"],
            len(payload["optimizedRoute"]),
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise TierTimeoutError(f"Route backend timed out after {self.timeout:.0f}s", tier=TIER) from exc
        except httpx.HTTPStatusError as exc:
            raise NonSuccessStatus(
                f"Route backend returned {exc.response.status_code}",
                status_code=exc.response.status_code,
                details=exc.response.text,
                tier=TIER,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network error calling route backend: {exc}", tier=TIER) from exc
        except ValueError as exc:
            raise InvalidResponseError("Route backend returned non-JSON body", tier=TIER) from exc

        if not isinstance(data, dict):
            raise InvalidResponseError("Route backend response is not an object", tier=TIER)
        if data.get("error"):
            raise NetworkError(f"Route backend error: {data['error']}", tier=TIER)
        try:
            return [DayItinerary.model_validate(day) for day in data.get("itinerary") or []]
        except ValidationError as exc:
            raise InvalidResponseError(f"Unexpected route backend itinerary shape: {exc}", tier=TIER) from exc
