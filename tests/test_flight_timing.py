from datetime import date

import pytest

from tripcore.agents.flight_timing import (
    adjust_departure,
    classify,
    estimate_timezone_delta,
    recommend_departure,
)

START = date(2026, 6, 10)
_SEVERITY = {"low": 0, "medium": 1, "high": 2}


def test_short_hop_stays_same_day():
    rec = recommend_departure("Paris", "London", START)

    assert rec.should_depart_day_before is False
    assert rec.jet_lag_factor == "low"
    assert rec.confidence == "high"
    assert 300 <= rec.distance_km < 500


def test_long_hop_departs_day_before():
    rec = recommend_departure("Paris", "Tokyo", START)

    assert 6000 <= rec.distance_km < 10000
    assert rec.should_depart_day_before is True
    assert rec.jet_lag_factor == "high"
    assert rec.needs_adaptation_day is False


def test_extreme_distance_flags_adaptation_day():
    rec = recommend_departure("London", "Sydney", START)

    assert rec.distance_km >= 10000
    assert rec.should_depart_day_before is True
    assert rec.needs_adaptation_day is True


def test_unresolved_city_degrades_to_low_confidence():
    rec = recommend_departure("Paris", "Atlantis", START)

    assert rec.confidence == "low"
    assert rec.distance_km == 0
    assert rec.should_depart_day_before is False
    assert "Atlantis" in rec.reason


@pytest.mark.parametrize(
    "distance, tz_delta, day_before, jet_lag",
    [
        (300, 0, False, "low"),
        (1200, 1, False, "low"),
        (2500, 2, False, "low"),
        (2500, 4, True, "medium"),
        (4000, 5, True, "medium"),
        (9000, 8, True, "high"),
        (15000, 10, True, "high"),
    ],
)
def test_distance_bands(distance, tz_delta, day_before, jet_lag):
    rec = classify(distance, tz_delta)
    assert rec.should_depart_day_before is day_before
    assert rec.jet_lag_factor == jet_lag
    assert rec.confidence == "high"
    assert str(round(distance)) in rec.reason


def test_jet_lag_never_decreases_with_distance():
    distances = [100, 499, 500, 1499, 1500, 2999, 3000, 5999, 6000, 9999, 10000, 20000]
    for tz_delta in (0, 6):
        severities = [_SEVERITY[classify(d, tz_delta).jet_lag_factor] for d in distances]
        assert severities == sorted(severities)


def test_timezone_delta_rounds_half_up():
    assert estimate_timezone_delta(0, 22.5) == 2
    assert estimate_timezone_delta(10, -20) == 2
    assert estimate_timezone_delta(2.35, 139.65) == 9


def test_adjust_departure_only_shifts_when_recommended():
    assert adjust_departure(START, classify(9000, 8)) == date(2026, 6, 9)
    assert adjust_departure(START, classify(300, 0)) == START
