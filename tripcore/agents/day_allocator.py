"""Split a trip's days across its destinations."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence

from tripcore.config import get_logger
from tripcore.errors import DateParseError, NoDestinationsError
from tripcore.schemas import DateRange, DayAllocation, Trip
from tripcore.tools.date_range import format_display_range, format_window, parse_display_range

logger = get_logger(__name__)


def allocate_days(total_days: int, destination_count: int) -> List[int]:
    """Even split with the remainder going to the earliest destinations.

    ``allocate_days(10, 3) == [4, 3, 3]``. Entries are zero only when there
    are fewer days than destinations.
    """
    if destination_count < 1:
        raise NoDestinationsError("Cannot allocate days without destinations")
    if total_days < 0:
        raise ValueError(f"total_days must be >= 0, got {total_days}")
    base, remainder = divmod(total_days, destination_count)
    return [base + 1 if idx < remainder else base for idx in range(destination_count)]


def date_ranges_for(allocation: Sequence[int], trip_start: date) -> List[Optional[DateRange]]:
    """Contiguous windows for each allocation entry; zero-day entries get ``None``."""
    ranges: List[Optional[DateRange]] = []
    cursor = trip_start
    for days in allocation:
        if days <= 0:
            ranges.append(None)
            continue
        end = cursor + timedelta(days=days - 1)
        ranges.append(DateRange(start=cursor, end=end))
        cursor = end + timedelta(days=1)
    return ranges


def trip_date_range(trip: Trip) -> Optional[DateRange]:
    """The trip's explicit dates, else its parsed display string.

    Raises ``DateParseError`` when only a malformed display string is present.
    """
    if trip.start_date and trip.end_date:
        return DateRange(start=trip.start_date, end=trip.end_date)
    if trip.dates:
        return parse_display_range(trip.dates)
    return None


def fallback_allocations(names: Sequence[str]) -> List[DayAllocation]:
    return [
        DayAllocation(destination_index=idx, destination_name=name, day_count=1, label=f"Day {idx + 1}")
        for idx, name in enumerate(names)
    ]


def allocate_trip(trip: Trip) -> List[DayAllocation]:
    """Per-destination day counts and calendar windows for ``trip``.

    When the trip's dates cannot be read every destination gets one day
    labelled ``"Day N"``; callers rely on that exact label.
    """
    names = [coord.name for coord in trip.coordinates]
    if not names:
        raise NoDestinationsError()

    try:
        window = trip_date_range(trip)
    except DateParseError as exc:
        logger.warning("Falling back to sequential day labels: %s", exc)
        return fallback_allocations(names)
    if window is None:
        logger.info("Trip %s has no dates; labelling destinations sequentially", trip.id)
        return fallback_allocations(names)

    counts = allocate_days(window.days, len(names))
    if window.days < len(names):
        logger.warning(
            "Trip %s (%s) has %d day(s) for %d destinations; some destinations get no days",
            trip.id,
            format_display_range(window),
            window.days,
            len(names),
        )
    allocations: List[DayAllocation] = []
    for idx, (name, days, span) in enumerate(zip(names, counts, date_ranges_for(counts, window.start))):
        allocations.append(DayAllocation(
            destination_index=idx,
            destination_name=name,
            day_count=days,
            start_date=span.start if span else None,
            end_date=span.end if span else None,
            label=format_window(span) if span else "",
        ))
    return allocations
