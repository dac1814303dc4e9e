"""Mapping between trips and the optimization service's request/response schema."""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from tripcore.agents.day_allocator import trip_date_range
from tripcore.config import get_logger
from tripcore.errors import DateParseError
from tripcore.schemas import (
    DayItinerary,
    ItineraryPreferences,
    OptimizationPlace,
    OptimizationRequest,
    OptimizationResponse,
    OptimizedPlace,
    Priority,
    SavedPlace,
    Trip,
)

logger = get_logger(__name__)

PRIORITY_TO_SCORE: Dict[str, int] = {"high": 9, "medium": 6, "low": 3}
DESTINATION_FALLBACK_PRIORITY = 8
DESTINATION_FALLBACK_TYPE = "attraction"
DEFAULT_PLACE_TYPE = "monument"
DEFAULT_RATING = 4.5
DEFAULT_DAILY_START_HOUR = 9
DEFAULT_DAILY_END_HOUR = 18
DEFAULT_TRANSPORT_MODE = "walk"
DEFAULT_TRIP_SPAN_DAYS = 2

CATEGORY_TO_TYPE: Dict[str, str] = {
    "restaurant": "restaurant",
    "food": "restaurant",
    "dining": "restaurant",
    "museum": "museum",
    "attraction": "monument",
    "monument": "monument",
    "park": "monument",
    "church": "church",
    "cathedral": "church",
    "temple": "church",
    "shopping": "shopping_mall",
    "mall": "shopping_mall",
    "market": "shopping_mall",
    "beach": "beach",
    "hotel": "hotel",
    "lodging": "hotel",
    "accommodation": "hotel",
}

TRANSPORT_MODES: Dict[str, str] = {"walking": "walk", "driving": "drive", "transit": "transit"}


def category_to_type(category: Optional[str]) -> str:
    return CATEGORY_TO_TYPE.get((category or "").strip().lower(), DEFAULT_PLACE_TYPE)


def priority_to_score(priority: str) -> int:
    return PRIORITY_TO_SCORE.get(priority, PRIORITY_TO_SCORE["medium"])


def score_to_priority(score: float) -> Priority:
    if score >= 8:
        return "high"
    if score >= 5:
        return "medium"
    return "low"


def _hour(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        return int(value.split(":", 1)[0])
    except ValueError:
        return default


def _valid_coordinates(lat: float, lon: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _external_place(name: str, lat: float, lon: float, place_type: str, priority: int) -> OptimizationPlace:
    return OptimizationPlace(
        name=name.strip(),
        lat=lat,
        lon=lon,
        type=re.sub(r"\s+", "_", place_type),
        priority=max(1, min(10, priority)),
    )


def split_by_coordinates(places: List[SavedPlace]) -> Tuple[List[SavedPlace], List[SavedPlace]]:
    """Partition saved places into (usable, skipped) for the optimization service."""
    located: List[SavedPlace] = []
    skipped: List[SavedPlace] = []
    for place in places:
        if place.has_coordinates and _valid_coordinates(place.lat, place.lng):
            located.append(place)
        else:
            skipped.append(place)
    return located, skipped


def _request_dates(trip: Trip, today: date) -> Tuple[date, date]:
    try:
        window = trip_date_range(trip)
    except DateParseError:
        logger.warning("Trip %s dates unreadable; defaulting request dates", trip.id, exc_info=True)
        window = None
    if window is not None:
        return window.start, window.end
    start = trip.start_date or today
    end = trip.end_date or (start + timedelta(days=DEFAULT_TRIP_SPAN_DAYS))
    return start, max(start, end)


def to_external_request(
    trip: Trip,
    preferences: Optional[ItineraryPreferences] = None,
    today: Optional[date] = None,
) -> OptimizationRequest:
    """Build the optimization-service request for ``trip``.

    Saved places without usable coordinates are skipped. A trip without any
    usable saved place sends its destinations instead, so the service only
    receives an empty list when the trip has neither.
    """
    prefs = preferences or ItineraryPreferences()
    located, skipped = split_by_coordinates(trip.saved_places)
    if skipped:
        logger.warning(
            "Skipping %d saved place(s) without valid coordinates: %s",
            len(skipped),
            ", ".join(p.name for p in skipped),
        )

    places = [
        _external_place(p.name, p.lat, p.lng, category_to_type(p.category), priority_to_score(p.priority))
        for p in located
    ]
    if not places:
        places = [
            _external_place(coord.name, coord.lat, coord.lng, DESTINATION_FALLBACK_TYPE, DESTINATION_FALLBACK_PRIORITY)
            for coord in trip.coordinates
            if _valid_coordinates(coord.lat, coord.lng)
        ]

    start, end = _request_dates(trip, today or date.today())
    transport = TRANSPORT_MODES.get(prefs.preferred_transport or "", DEFAULT_TRANSPORT_MODE)

    return OptimizationRequest(
        places=places,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        daily_start_hour=_hour(prefs.start_time, DEFAULT_DAILY_START_HOUR),
        daily_end_hour=_hour(prefs.end_time, DEFAULT_DAILY_END_HOUR),
        transport_mode=transport,
    )


def _hours(value: float) -> str:
    return f"{value:.1f}h"


def from_external_response(response: OptimizationResponse, trip: Trip) -> List[DayItinerary]:
    destination = trip.primary_destination
    days: List[DayItinerary] = []
    for day in response.itinerary:
        places: List[OptimizedPlace] = []
        walking = 0.0
        transport = 0.0
        for index, scheduled in enumerate(day.activities):
            activity = scheduled.activity
            hop = scheduled.transport_to_next
            if hop is not None:
                if hop.mode == "walking":
                    walking += hop.duration
                else:
                    transport += hop.duration
            places.append(OptimizedPlace(
                id=f"{day.day}-{index}",
                name=activity.name,
                category=activity.category,
                rating=DEFAULT_RATING,
                description=f"Scheduled for {scheduled.scheduled_time}, duration: {scheduled.duration:g}h",
                lat=activity.coordinates.latitude,
                lng=activity.coordinates.longitude,
                priority=score_to_priority(activity.priority),
                estimated_time=f"{scheduled.duration:g}h",
                recommended_duration=f"{scheduled.duration:g}h",
                best_time_to_visit=scheduled.scheduled_time,
                order_in_route=index + 1,
                destination_name=destination,
                transport_to_next=hop,
            ))
        days.append(DayItinerary(
            day=day.day,
            date=day.date,
            destination_name=destination,
            places=places,
            total_time=_hours(sum(a.duration for a in day.activities)),
            walking_time=_hours(walking),
            transport_time=_hours(transport),
            free_time="2h",
            allocated_days=1,
        ))
    return days


_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:-\s*\d+(?:\.\d+)?\s*)?h", re.IGNORECASE)
_MINUTES = re.compile(r"(\d+)\s*min", re.IGNORECASE)


def parse_estimated_time(value: Optional[str], default: float = 2.0) -> float:
    """Hours in a free-text estimate such as ``"1-2 hours"`` or ``"30 minutes"``; the lower bound wins."""
    text = value or ""
    hours = _HOURS.search(text)
    if hours:
        return float(hours.group(1))
    minutes = _MINUTES.search(text)
    if minutes:
        return int(minutes.group(1)) / 60
    return default
