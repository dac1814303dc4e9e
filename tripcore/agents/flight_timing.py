"""Same-day vs. day-before departure advice derived from route geography."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from tripcore.config import get_logger
from tripcore.errors import LocationUnresolved
from tripcore.schemas import FlightTimingRecommendation
from tripcore.tools.geo import distance_km, resolve_coordinates

logger = get_logger(__name__)

# Band upper bounds in km. These are policy thresholds; moving them changes
# what travellers are told.
REGIONAL_MAX_KM = 500
CONTINENTAL_SHORT_MAX_KM = 1500
CONTINENTAL_MAX_KM = 3000
INTERCONTINENTAL_SHORT_MAX_KM = 6000
MAJOR_INTERCONTINENTAL_MAX_KM = 10000

CONTINENTAL_TZ_TOLERANCE_HOURS = 3
DEGREES_PER_TIMEZONE = 15.0

UNRESOLVED_DURATION_BAND = "2-8 hours"


def estimate_timezone_delta(lng_a: float, lng_b: float) -> int:
    """Whole hours between two longitudes at 15 degrees per hour, rounded half up."""
    return int(abs(lng_a - lng_b) / DEGREES_PER_TIMEZONE + 0.5)


def _unresolved(origin: str, destination: str, missing: str) -> FlightTimingRecommendation:
    logger.info("Coordinates unavailable for %r (%s -> %s); defaulting to same-day", missing, origin, destination)
    return FlightTimingRecommendation(
        should_depart_day_before=False,
        reason=f"Coordinates unavailable for {missing}. Conservative same-day departure recommended.",
        confidence="low",
        estimated_duration_band=UNRESOLVED_DURATION_BAND,
        distance_km=0,
        time_zone_delta_hours=0,
        jet_lag_factor="low",
    )


def classify(distance: float, tz_delta: int) -> FlightTimingRecommendation:
    """Map a distance and time-zone delta onto a departure recommendation."""
    km = round(distance)
    needs_adaptation_day = False
    if distance < REGIONAL_MAX_KM:
        day_before, jet_lag, band = False, "low", "1-2 hours"
        reason = f"Regional flight ({km} km, {tz_delta}h time difference). Same-day departure makes the most of the trip."
    elif distance < CONTINENTAL_SHORT_MAX_KM:
        day_before, jet_lag, band = False, "low", "2-3 hours"
        reason = f"Short continental flight ({km} km, {tz_delta}h time difference). A morning flight on the start date works well."
    elif distance < CONTINENTAL_MAX_KM:
        band = "3-5 hours"
        if tz_delta <= CONTINENTAL_TZ_TOLERANCE_HOURS:
            day_before, jet_lag = False, "low"
            reason = f"Continental flight ({km} km) with only {tz_delta}h time difference. Same-day departure is fine."
        else:
            day_before, jet_lag = True, "medium"
            reason = f"Continental flight ({km} km) crossing {tz_delta} time zones. Leave the day before to adjust."
    elif distance < INTERCONTINENTAL_SHORT_MAX_KM:
        day_before, jet_lag, band = True, "medium", "5-8 hours"
        reason = f"Intercontinental flight ({km} km, {tz_delta}h time difference). Departing the day before avoids jet lag."
    elif distance < MAJOR_INTERCONTINENTAL_MAX_KM:
        day_before, jet_lag, band = True, "high", "8-15 hours"
        reason = f"Long-haul flight ({km} km, {tz_delta}h time difference). Departing the day before is essential to adapt."
    else:
        day_before, jet_lag, band = True, "high", "15+ hours"
        needs_adaptation_day = True
        reason = (
            f"Extreme long-haul flight ({km} km, {tz_delta}h time difference). "
            "Depart the day before and plan an extra rest day on arrival."
        )
    return FlightTimingRecommendation(
        should_depart_day_before=day_before,
        reason=reason,
        confidence="high",
        estimated_duration_band=band,
        distance_km=km,
        time_zone_delta_hours=tz_delta,
        jet_lag_factor=jet_lag,
        needs_adaptation_day=needs_adaptation_day,
    )


def recommend_departure(origin: str, destination: str, trip_start: Optional[date] = None) -> FlightTimingRecommendation:
    """Recommend whether to fly on the trip start date or the day before.

    Never raises: an origin or destination missing from the lookup table
    yields a low-confidence same-day recommendation with ``distance_km == 0``.
    """
    try:
        origin_loc = resolve_coordinates(origin)
        dest_loc = resolve_coordinates(destination)
    except LocationUnresolved as exc:
        return _unresolved(origin, destination, exc.name)

    distance = distance_km(origin_loc, dest_loc)
    tz_delta = estimate_timezone_delta(origin_loc.lng, dest_loc.lng)
    recommendation = classify(distance, tz_delta)
    logger.debug(
        "Timing %s -> %s starting %s: %.0f km, %dh, day_before=%s",
        origin,
        destination,
        trip_start.isoformat() if trip_start else "n/a",
        distance,
        tz_delta,
        recommendation.should_depart_day_before,
    )
    return recommendation


def adjust_departure(value: date, recommendation: FlightTimingRecommendation) -> date:
    if recommendation.should_depart_day_before:
        return value - timedelta(days=1)
    return value
