"""Flight legs for a trip: outbound, hops between destinations, and the return."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence, Union

from tripcore.agents.day_allocator import trip_date_range
from tripcore.agents.flight_timing import adjust_departure, recommend_departure
from tripcore.config import get_logger
from tripcore.errors import DateParseError, NoDestinationsError
from tripcore.schemas import FlightLeg, FlightPlan, Location, Trip

logger = get_logger(__name__)

MIN_DAYS_PER_DESTINATION = 2
DEFAULT_DAYS_PER_DESTINATION = 3
DEFAULT_CABIN_CLASS = "economy"


def _name(destination: Union[Location, str]) -> str:
    return destination if isinstance(destination, str) else destination.name


def _advised_leg(frm: str, to: str, on: date, travelers: int, cabin_class: str) -> FlightLeg:
    recommendation = recommend_departure(frm, to, on)
    return FlightLeg(
        frm=frm,
        to=to,
        depart_date=adjust_departure(on, recommendation),
        passengers=travelers,
        cabin_class=cabin_class,
        ai_optimized=True,
    )


def plan_multi_city(
    destinations: Sequence[Union[Location, str]],
    origin: str,
    trip_start: date,
    trip_end: Optional[date] = None,
    travelers: int = 1,
    cabin_class: str = DEFAULT_CABIN_CLASS,
) -> List[FlightLeg]:
    """One leg per hop, each dated by its own geography.

    The return leg, emitted only when ``trip_end`` is known, departs exactly
    on ``trip_end``.
    """
    names = [_name(d) for d in destinations]
    if not names:
        raise NoDestinationsError()

    legs = [_advised_leg(origin, names[0], trip_start, travelers, cabin_class)]

    if trip_end is not None:
        total_days = (trip_end - trip_start).days
    else:
        total_days = len(names) * DEFAULT_DAYS_PER_DESTINATION
    days_per_destination = max(MIN_DAYS_PER_DESTINATION, total_days // len(names))

    for idx in range(1, len(names)):
        hop_date = trip_start + timedelta(days=idx * days_per_destination)
        leg = _advised_leg(names[idx - 1], names[idx], hop_date, travelers, cabin_class)
        if trip_end is not None and leg.depart_date > trip_end:
            logger.warning(
                "Hop %s -> %s departs %s, after trip end %s; trip too short for %d destinations",
                leg.frm,
                leg.to,
                leg.depart_date,
                trip_end,
                len(names),
            )
        legs.append(leg)

    if trip_end is not None:
        legs.append(FlightLeg(
            frm=names[-1],
            to=origin,
            depart_date=trip_end,
            passengers=travelers,
            cabin_class=cabin_class,
            ai_optimized=False,
        ))
        logger.debug("Return leg %s -> %s fixed to trip end %s", names[-1], origin, trip_end)

    logger.info("Planned %d flight leg(s) from %s across %d destination(s)", len(legs), origin, len(names))
    return legs


def plan_trip_flights(trip: Trip, origin: str, today: Optional[date] = None) -> FlightPlan:
    """Flight plan for a stored trip, classified as multi-city, round-trip or one-way."""
    if not trip.coordinates:
        raise NoDestinationsError()

    try:
        window = trip_date_range(trip)
    except DateParseError:
        logger.warning("Trip %s dates unreadable; planning from today", trip.id, exc_info=True)
        window = None
    trip_start = trip.start_date or (window.start if window else None) or today or date.today()
    trip_end = trip.end_date or (window.end if window else None)
    travelers = max(1, trip.travelers)

    first = trip.coordinates[0].name
    recommendation = recommend_departure(origin, first, trip_start)

    if len(trip.coordinates) > 1:
        legs = plan_multi_city(trip.coordinates, origin, trip_start, trip_end, travelers)
        return FlightPlan(trip_type="multi-city", legs=legs, recommendation=recommendation)

    legs = [FlightLeg(
        frm=origin,
        to=first,
        depart_date=adjust_departure(trip_start, recommendation),
        passengers=travelers,
        ai_optimized=True,
    )]
    if trip_end is None:
        return FlightPlan(trip_type="one-way", legs=legs, recommendation=recommendation)
    legs.append(FlightLeg(frm=first, to=origin, depart_date=trip_end, passengers=travelers))
    return FlightPlan(trip_type="round-trip", legs=legs, recommendation=recommendation)
