"""Great-circle distances and the city coordinate lookup."""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from tripcore.config import get_logger
from tripcore.errors import LocationUnresolved
from tripcore.schemas import Location

logger = get_logger(__name__)

EARTH_RADIUS_KM = 6371.0

# Approximate city centres; keys are display names as they appear in trips.
CITY_COORDINATES: Dict[str, Tuple[float, float]] = {
    "New York, NY": (40.7128, -74.0060),
    "Los Angeles, CA": (34.0522, -118.2437),
    "San Francisco, CA": (37.7749, -122.4194),
    "Chicago, IL": (41.8781, -87.6298),
    "London": (51.5074, -0.1278),
    "Paris": (48.8566, 2.3522),
    "Tokyo": (35.6762, 139.6503),
    "Rome": (41.9028, 12.4964),
    "Milan": (45.4642, 9.1900),
    "Barcelona": (41.3851, 2.1734),
    "Amsterdam": (52.3676, 4.9041),
    "Berlin": (52.5200, 13.4050),
    "Madrid": (40.4168, -3.7038),
    "Lisbon": (38.7223, -9.1393),
    "Sydney": (-33.8688, 151.2093),
    "Dubai": (25.2048, 55.2708),
    "Singapore": (1.3521, 103.8198),
    "Hong Kong": (22.3193, 114.1694),
    "Bangkok": (13.7563, 100.5018),
    "Mumbai": (19.0760, 72.8777),
    "São Paulo": (-23.5505, -46.6333),
    "Santiago": (-33.4489, -70.6693),
    "Buenos Aires": (-34.6037, -58.3816),
    "Mexico City": (19.4326, -99.1332),
    "Toronto": (43.6532, -79.3832),
    "Vancouver": (49.2827, -123.1207),
}

CoordinateTable = Mapping[str, Tuple[float, float]]
Matcher = Callable[[str, CoordinateTable], Optional[Location]]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(a: Location, b: Location) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


# ---------- name resolution ----------
def _location(key: str, table: CoordinateTable) -> Location:
    lat, lng = table[key]
    return Location(name=key, lat=lat, lng=lng)


def _exact_match(name: str, table: CoordinateTable) -> Optional[Location]:
    if name in table:
        return _location(name, table)
    return None


def _substring_match(name: str, table: CoordinateTable) -> Optional[Location]:
    needle = name.lower()
    for key in table:
        candidate = key.lower()
        if needle in candidate or candidate in needle:
            return _location(key, table)
    return None


def _comma_stripped_match(name: str, table: CoordinateTable) -> Optional[Location]:
    head = name.split(",", 1)[0].strip().lower()
    if not head:
        return None
    for key in table:
        candidate = key.split(",", 1)[0].strip().lower()
        if head == candidate or head in candidate or candidate in head:
            return _location(key, table)
    return None


MATCHERS: Tuple[Matcher, ...] = (_exact_match, _substring_match, _comma_stripped_match)


def lookup_city(name: str, table: CoordinateTable = CITY_COORDINATES) -> Optional[Location]:
    """Return the table entry for ``name`` or ``None``; blank names never match."""
    cleaned = (name or "").strip()
    if not cleaned:
        return None
    for matcher in MATCHERS:
        found = matcher(cleaned, table)
        if found is not None:
            logger.debug("Resolved %r to %s via %s", name, found.name, matcher.__name__)
            return found
    return None


def resolve_coordinates(name: str, table: CoordinateTable = CITY_COORDINATES) -> Location:
    found = lookup_city(name, table)
    if found is None:
        raise LocationUnresolved(name)
    return found


# ---------- route metrics ----------
_SPEEDS_KMH = {"walking": 5.0, "transit": 20.0, "driving": 30.0}


def transport_for_distance(km: float) -> str:
    if km <= 1:
        return "walking"
    if km <= 10:
        return "transit"
    return "driving"


def travel_minutes(km: float, transport: str = "walking") -> int:
    return round(km / _SPEEDS_KMH[transport] * 60)


def distance_matrix(places: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Pairwise distances between places carrying ``id``, ``name``, ``lat`` and ``lng``."""
    matrix: List[Dict[str, Any]] = []
    for place in places:
        origin = {"lat": place["lat"], "lng": place["lng"]}
        distances_to = []
        for other in places:
            if other["id"] == place["id"]:
                continue
            km = haversine_km(place["lat"], place["lng"], other["lat"], other["lng"])
            transport = transport_for_distance(km)
            distances_to.append({
                "from": origin,
                "to": {"lat": other["lat"], "lng": other["lng"]},
                "distance": round(km, 3),
                "travelTime": travel_minutes(km, transport),
                "transportType": transport,
            })
        matrix.append({
            "placeId": place["id"],
            "placeName": place["name"],
            "coordinate": origin,
            "distancesTo": distances_to,
        })
    return matrix


HIGH_PRIORITY_DISTANCE_WEIGHT = 0.7


def nearest_neighbour_order(places: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Greedy visiting order; starts at the first high-priority place and favours others like it."""
    unvisited = list(places)
    if len(unvisited) <= 1:
        return unvisited

    start = next((i for i, p in enumerate(unvisited) if p.get("priority") == "high"), 0)
    current = unvisited.pop(start)
    route = [current]
    while unvisited:
        best_index, best_score = 0, math.inf
        for index, candidate in enumerate(unvisited):
            km = haversine_km(current["lat"], current["lng"], candidate["lat"], candidate["lng"])
            if candidate.get("priority") == "high":
                km *= HIGH_PRIORITY_DISTANCE_WEIGHT
            if km < best_score:
                best_index, best_score = index, km
        current = unvisited.pop(best_index)
        route.append(current)
    return route
