from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from tripcore.agents.flight_planner import plan_trip_flights
from tripcore.agents.flight_timing import recommend_departure
from tripcore.config import load_settings
from tripcore.errors import NoDestinationsError, TierError
from tripcore.orchestrator import ItineraryOrchestrator
from tripcore.schemas import (
    FlightPlan,
    FlightPlanRequest,
    FlightTimingRecommendation,
    FlightTimingRequest,
    ItineraryRequest,
    OrchestrationResult,
)

settings = load_settings()
orchestrator = ItineraryOrchestrator.from_settings(settings)

app = FastAPI(title="Trip Itinerary & Flight Timing API")

# Local UIs call the API from other origins; operators can scope this via
# TRIPCORE_ALLOWED_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/itinerary", response_model=OrchestrationResult)
async def api_itinerary(body: ItineraryRequest) -> OrchestrationResult:
    """Itinerary from the first fallback tier that succeeds."""
    return await orchestrator.run(body.trip, body.preferences)


@app.post("/api/flights/timing", response_model=FlightTimingRecommendation)
async def api_flight_timing(body: FlightTimingRequest) -> FlightTimingRecommendation:
    return recommend_departure(body.origin, body.destination, body.trip_start_date)


@app.post("/api/flights/plan", response_model=FlightPlan)
async def api_flight_plan(body: FlightPlanRequest) -> FlightPlan:
    try:
        return plan_trip_flights(body.trip, body.origin)
    except NoDestinationsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.get("/api/optimizer/health")
async def api_optimizer_health() -> Dict[str, Any]:
    try:
        return await orchestrator.check_optimizer_health()
    except TierError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
