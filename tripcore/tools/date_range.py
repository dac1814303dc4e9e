"""Parser for the trip display date form ``"Mon D - Mon D, YYYY"``."""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import List

from tripcore.errors import DateParseError
from tripcore.schemas import DateRange

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_MONTH_INDEX = {name.lower(): idx + 1 for idx, name in enumerate(MONTHS)}
_MONTH_INDEX.update({name.lower(): idx + 1 for idx, name in enumerate(MONTH_NAMES)})
_MONTH_INDEX["sept"] = 9

# A start month later than the end month is read as a New Year crossing only
# when the trip spans at most this many calendar months.
MAX_YEAR_CROSSING_MONTHS = 3

_PART = re.compile(r"^\s*([A-Za-z]+)\.?\s+(\d{1,2})\s*$")


def _split_part(raw: str, part: str) -> tuple[int, int]:
    match = _PART.match(part)
    if not match:
        raise DateParseError(raw, f"unrecognised date {part.strip()!r}")
    month = _MONTH_INDEX.get(match.group(1).lower())
    if month is None:
        raise DateParseError(raw, f"unknown month {match.group(1)!r}")
    return month, int(match.group(2))


def parse_display_range(text: str) -> DateRange:
    """Parse ``"Jun 1 - Jun 9, 2025"`` into a :class:`DateRange`.

    The year is only given once, after the end date. A start month later than
    the end month means the trip crosses New Year, so the start falls in the
    previous year; a crossing longer than ``MAX_YEAR_CROSSING_MONTHS`` is
    rejected.
    """
    raw = text or ""
    pieces = raw.split(" - ")
    if len(pieces) != 2:
        raise DateParseError(raw, "missing ' - ' separator")
    start_part, end_part = pieces
    if "," not in end_part:
        raise DateParseError(raw, "missing year")
    end_part, year_part = end_part.rsplit(",", 1)
    year_part = year_part.strip()
    if not year_part.isdigit() or len(year_part) != 4:
        raise DateParseError(raw, f"invalid year {year_part!r}")
    year = int(year_part)

    start_month, start_day = _split_part(raw, start_part)
    end_month, end_day = _split_part(raw, end_part)
    start_year = year
    if start_month > end_month:
        if end_month + 12 - start_month > MAX_YEAR_CROSSING_MONTHS:
            raise DateParseError(raw, "start month after end month")
        start_year = year - 1
    try:
        start = date(start_year, start_month, start_day)
        end = date(year, end_month, end_day)
    except ValueError as exc:
        raise DateParseError(raw, str(exc)) from exc
    if end < start:
        raise DateParseError(raw, "end date precedes start date")
    return DateRange(start=start, end=end)


def format_short(value: date) -> str:
    return f"{MONTHS[value.month - 1]} {value.day}"


def format_display_range(value: DateRange) -> str:
    return f"{format_short(value.start)} - {format_short(value.end)}, {value.end.year}"


def format_window(value: DateRange) -> str:
    if value.days == 1:
        return format_short(value.start)
    return f"{format_short(value.start)} - {format_short(value.end)}"


def individual_day_labels(value: DateRange) -> List[str]:
    return [format_short(value.start + timedelta(days=offset)) for offset in range(value.days)]
