"""Network-free itinerary builder used when both remote tiers are unavailable."""
from __future__ import annotations

import math
from typing import Dict, List, Literal, Sequence

from tripcore.agents.day_allocator import allocate_trip
from tripcore.config import get_logger
from tripcore.schemas import DateRange, DayAllocation, DayItinerary, OptimizedPlace, SavedPlace, Trip, TripCoordinate
from tripcore.tools.date_range import individual_day_labels
from tripcore.transform import parse_estimated_time

logger = get_logger(__name__)

RouteType = Literal["balanced", "speed", "leisure"]

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

_TIME_SLOTS: Dict[str, Sequence[str]] = {
    "balanced": ("09:00", "13:00", "16:00", "18:00"),
    "speed": ("09:00", "11:00", "13:00", "15:00", "17:00"),
    "leisure": ("10:00", "15:00", "18:00"),
}
_PLACES_PER_TENTATIVE_DAY = {"balanced": 3, "speed": 4, "leisure": 2}
_PLACES_PER_SUGGESTED_DAY = {"balanced": 2, "speed": 2, "leisure": 1}
WALKING_HOURS_PER_HOP = 0.3
TRANSPORT_HOURS_PER_HOP = 0.25
ACTIVE_HOURS_PER_DAY = 8.0
MIN_FREE_HOURS = 2.0


def _suggestion(dest: str, slug: str, name: str, category: str, rating: float, estimate: str, priority: str, description: str) -> SavedPlace:
    return SavedPlace(
        id=f"suggest-{slug}",
        name=name,
        category=category,
        rating=rating,
        estimated_time=estimate,
        priority=priority,
        destination_name=dest,
        description=description,
    )


POPULAR_PLACES: Dict[str, List[SavedPlace]] = {
    "Paris": [
        _suggestion("Paris", "paris-1", "Notre-Dame Cathedral", "Landmark", 4.6, "1-2 hours", "medium", "Gothic cathedral with stunning architecture"),
        _suggestion("Paris", "paris-2", "Montmartre District", "Neighborhood", 4.5, "2-3 hours", "medium", "Artistic district with panoramic city views"),
        _suggestion("Paris", "paris-3", "Seine River Cruise", "Activity", 4.4, "1-2 hours", "low", "Scenic boat tour along the Seine"),
    ],
    "Rome": [
        _suggestion("Rome", "rome-1", "Pantheon", "Landmark", 4.7, "1 hour", "medium", "Ancient Roman temple with impressive dome"),
        _suggestion("Rome", "rome-2", "Spanish Steps", "Landmark", 4.3, "30 minutes", "low", "Famous baroque stairway with great views"),
        _suggestion("Rome", "rome-3", "Trastevere District", "Neighborhood", 4.5, "2-3 hours", "medium", "Charming neighborhood with local restaurants"),
    ],
    "Barcelona": [
        _suggestion("Barcelona", "barcelona-1", "Casa Batlló", "Architecture", 4.6, "1-2 hours", "medium", "Modernist masterpiece by Gaudí"),
        _suggestion("Barcelona", "barcelona-2", "Barceloneta Beach", "Beach", 4.2, "2-4 hours", "low", "Popular city beach with restaurants"),
    ],
    "Tokyo": [
        _suggestion("Tokyo", "tokyo-1", "Meiji Shrine", "Temple", 4.5, "1-2 hours", "medium", "Peaceful Shinto shrine in the city"),
        _suggestion("Tokyo", "tokyo-2", "Tsukiji Outer Market", "Market", 4.4, "2-3 hours", "medium", "Famous fish market and street food"),
    ],
}


def generic_activities(destination: str) -> List[SavedPlace]:
    slug = f"generic-{'-'.join(destination.lower().split())}"
    return [
        SavedPlace(id=f"{slug}-1", name=f"Historic Center of {destination}", category="Historic District", rating=4.3,
                   estimated_time="2-3 hours", priority="high", destination_name=destination,
                   description=f"Explore the historic heart of {destination}"),
        SavedPlace(id=f"{slug}-2", name="Local Market Tour", category="Market", rating=4.1,
                   estimated_time="1-2 hours", priority="medium", destination_name=destination,
                   description=f"Local culture and cuisine at the markets of {destination}"),
        SavedPlace(id=f"{slug}-3", name="City Walking Tour", category="Walking Tour", rating=4.4,
                   estimated_time="2-3 hours", priority="medium", destination_name=destination,
                   description=f"Guided walk past the main sights of {destination}"),
        SavedPlace(id=f"{slug}-4", name="Local Restaurant Experience", category="Dining", rating=4.2,
                   estimated_time="1-2 hours", priority="low", destination_name=destination,
                   description=f"Authentic local cuisine in {destination}"),
        SavedPlace(id=f"{slug}-5", name="Cultural Museum Visit", category="Museum", rating=4.0,
                   estimated_time="2 hours", priority="medium", destination_name=destination,
                   description=f"History and culture of {destination}"),
        SavedPlace(id=f"{slug}-6", name="Scenic Viewpoint", category="Viewpoint", rating=4.5,
                   estimated_time="1 hour", priority="low", destination_name=destination,
                   description=f"Panoramic views of {destination}"),
    ]


def suggested_places(destination: str, exclude_ids: Sequence[str] = ()) -> List[SavedPlace]:
    catalogue = POPULAR_PLACES.get(destination) or generic_activities(destination)
    excluded = {str(i) for i in exclude_ids}
    return [p for p in catalogue if str(p.id) not in excluded]


def group_by_destination(trip: Trip) -> Dict[str, List[SavedPlace]]:
    grouped: Dict[str, List[SavedPlace]] = {}
    for place in trip.saved_places:
        grouped.setdefault(place.destination_name or trip.primary_destination, []).append(place)
    return grouped


def distribute_across_days(places: Sequence[SavedPlace], days: int) -> List[List[SavedPlace]]:
    """Chunk ``places`` into at most ``days`` consecutive, non-empty groups."""
    if days <= 1:
        return [list(places)] if places else []
    per_day = math.ceil(len(places) / days)
    return [list(places[i:i + per_day]) for i in range(0, len(places), per_day)] if per_day else []


def _hours(value: float) -> str:
    return f"{value:.1f}h"


def _to_optimized(places: Sequence[SavedPlace], coord: TripCoordinate, route_type: str) -> List[OptimizedPlace]:
    slots = _TIME_SLOTS[route_type]
    converted = []
    for index, place in enumerate(places):
        estimate = place.estimated_time or "2 hours"
        converted.append(OptimizedPlace(
            id=str(place.id),
            name=place.name,
            category=place.category,
            rating=place.rating,
            description=place.description,
            lat=place.lat if place.lat is not None else coord.lat,
            lng=place.lng if place.lng is not None else coord.lng,
            priority=place.priority,
            estimated_time=estimate,
            recommended_duration="1h" if route_type == "speed" else f"{parse_estimated_time(estimate):g}h",
            best_time_to_visit=slots[min(index, len(slots) - 1)],
            order_in_route=index + 1,
            destination_name=coord.name,
        ))
    return converted


def _day(number: int, label: str, coord: TripCoordinate, places: List[OptimizedPlace], allocated: int, **flags: bool) -> DayItinerary:
    hops = max(0, len(places) - 1)
    busy = sum(parse_estimated_time(p.estimated_time) for p in places)
    return DayItinerary(
        day=number,
        date=label,
        destination_name=coord.name,
        places=places,
        total_time=_hours(busy),
        walking_time=_hours(hops * WALKING_HOURS_PER_HOP),
        transport_time=_hours(hops * TRANSPORT_HOURS_PER_HOP),
        free_time=_hours(max(MIN_FREE_HOURS, ACTIVE_HOURS_PER_DAY - busy)),
        allocated_days=allocated,
        **flags,
    )


def _tentative_selection(catalogue: Sequence[SavedPlace], day_index: int, route_type: str) -> List[SavedPlace]:
    if not catalogue:
        return []
    count = min(_PLACES_PER_TENTATIVE_DAY[route_type], len(catalogue))
    start = day_index * count
    return [catalogue[(start + k) % len(catalogue)] for k in range(count)]


def _day_labels(allocation: DayAllocation) -> List[str]:
    if allocation.start_date and allocation.end_date:
        return individual_day_labels(DateRange(start=allocation.start_date, end=allocation.end_date))
    return [allocation.label] * allocation.day_count


def build_local_itinerary(trip: Trip, route_type: RouteType = "balanced") -> List[DayItinerary]:
    """Deterministic per-destination itinerary from saved places and a static catalogue.

    Days follow :func:`allocate_trip`. Saved places are spread over their
    destination's days by priority; leftover days are filled with suggestions
    (``is_suggested``) and destinations without saved places get a tentative
    plan (``is_tentative``).
    """
    if not trip.coordinates:
        return []

    saved_by_destination = group_by_destination(trip)
    days: List[DayItinerary] = []
    counter = 1

    for allocation, coord in zip(allocate_trip(trip), trip.coordinates):
        labels = _day_labels(allocation)
        saved = sorted(saved_by_destination.get(coord.name, []), key=lambda p: _PRIORITY_RANK[p.priority])

        if saved:
            groups = distribute_across_days(saved, allocation.day_count)
            extras = suggested_places(coord.name, [p.id for p in saved])
            for index, label in enumerate(labels):
                if index < len(groups):
                    places = _to_optimized(groups[index], coord, route_type)
                    days.append(_day(counter, label, coord, places, allocation.day_count))
                else:
                    picks = extras[:_PLACES_PER_SUGGESTED_DAY[route_type]]
                    places = _to_optimized(picks, coord, route_type)
                    days.append(_day(counter, label, coord, places, allocation.day_count, is_suggested=True))
                counter += 1
        else:
            catalogue = suggested_places(coord.name)
            for index, label in enumerate(labels):
                picks = _tentative_selection(catalogue, index, route_type)
                places = _to_optimized(picks, coord, route_type)
                days.append(_day(counter, label, coord, places, allocation.day_count, is_tentative=True))
                counter += 1

    logger.info("Built local %s itinerary for trip %s: %d day(s)", route_type, trip.id, len(days))
    return days
