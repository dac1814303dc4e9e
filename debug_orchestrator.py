# debug_orchestrator.py
import asyncio
import json

from tripcore.agents.flight_planner import plan_trip_flights
from tripcore.orchestrator import ItineraryOrchestrator
from tripcore.schemas import Trip, dump_alias


async def main():
    trip = Trip.model_validate({
        "id": "debug-trip",
        "name": "Europe sampler",
        "dates": "Jun 1 - Jun 10, 2026",
        "travelers": 2,
        "coordinates": [
            {"name": "Paris", "lat": 48.8566, "lng": 2.3522, "position": 0},
            {"name": "Rome", "lat": 41.9028, "lng": 12.4964, "position": 1},
            {"name": "Barcelona", "lat": 41.3851, "lng": 2.1734, "position": 2},
        ],
        "savedPlaces": [
            {"id": "p1", "name": "Louvre Museum", "category": "Museum", "lat": 48.8606, "lng": 2.3376,
             "priority": "high", "estimatedTime": "2-3 hours", "destinationName": "Paris"},
            {"id": "p2", "name": "Colosseum", "category": "Monument", "lat": 41.8902, "lng": 12.4922,
             "priority": "high", "estimatedTime": "2 hours", "destinationName": "Rome"},
        ],
    })

    # Uses TRIPCORE_OPTIMIZER_URL / TRIPCORE_ROUTE_BACKEND_URL when set; otherwise
    # the local tier answers.
    result = await ItineraryOrchestrator.from_settings().run(trip)
    print("➡️ Orchestrator returned:\n")
    print(json.dumps(dump_alias(result), indent=2))

    print("\n✈️ Flight plan from New York:\n")
    print(json.dumps(dump_alias(plan_trip_flights(trip, "New York, NY")), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
