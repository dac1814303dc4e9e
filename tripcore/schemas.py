from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Priority = Literal["high", "medium", "low"]
Confidence = Literal["high", "medium", "low"]
JetLag = Literal["low", "medium", "high"]
SourceTier = Literal["ml", "secondary", "local"]
TripType = Literal["round-trip", "one-way", "multi-city"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ------- Trip models -------
class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float


class TripCoordinate(Location):
    position: int = 0


class SavedPlace(_CamelModel):
    id: Union[str, int]
    name: str
    category: str = ""
    rating: Optional[float] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    priority: Priority = "medium"
    estimated_time: str = Field("", alias="estimatedTime")
    destination_name: Optional[str] = Field(None, alias="destinationName")
    position_order: int = Field(0, alias="positionOrder")
    description: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class Trip(_CamelModel):
    id: Union[str, int]
    name: str = ""
    destination: str = ""
    dates: Optional[str] = None  # display form: "Mon D - Mon D, YYYY"
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    coordinates: List[TripCoordinate] = Field(default_factory=list)
    saved_places: List[SavedPlace] = Field(default_factory=list, alias="savedPlaces")
    travelers: int = 1

    @model_validator(mode="after")
    def _check_date_order(self) -> "Trip":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("trip end date must not precede its start date")
        return self

    @property
    def primary_destination(self) -> str:
        if self.destination:
            return self.destination
        return self.coordinates[0].name if self.coordinates else ""


class DateRange(BaseModel):
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


class DayAllocation(_CamelModel):
    destination_index: int = Field(..., alias="destinationIndex")
    destination_name: str = Field("", alias="destinationName")
    day_count: int = Field(..., alias="dayCount")
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    label: str = ""


# ------- Flight models -------
class FlightTimingRecommendation(_CamelModel):
    should_depart_day_before: bool = Field(..., alias="shouldDepartDayBefore")
    reason: str
    confidence: Confidence
    estimated_duration_band: str = Field(..., alias="estimatedDurationBand")
    distance_km: float = Field(..., alias="distanceKm")
    time_zone_delta_hours: int = Field(0, alias="timeZoneDeltaHours")
    jet_lag_factor: JetLag = Field("low", alias="jetLagFactor")
    needs_adaptation_day: bool = Field(False, alias="needsAdaptationDay")


class FlightLeg(_CamelModel):
    frm: str = Field(..., alias="from")
    to: str
    depart_date: date = Field(..., alias="departDate")
    passengers: int = 1
    cabin_class: str = Field("economy", alias="cabinClass")
    ai_optimized: bool = Field(False, alias="aiOptimized")


class FlightPlan(_CamelModel):
    trip_type: TripType = Field(..., alias="tripType")
    legs: List[FlightLeg] = Field(default_factory=list)
    recommendation: FlightTimingRecommendation


# ------- Optimization service schema -------
class ItineraryPreferences(BaseModel):
    start_time: str = "09:00"
    end_time: str = "18:00"
    max_daily_activities: int = 6
    preferred_transport: Optional[Literal["walking", "driving", "transit"]] = "walking"


class OptimizationPlace(BaseModel):
    name: str
    lat: float
    lon: float
    type: str
    priority: int = Field(..., ge=1, le=10)


class OptimizationRequest(BaseModel):
    places: List[OptimizationPlace]
    start_date: str
    end_date: str
    daily_start_hour: int = 9
    daily_end_hour: int = 18
    transport_mode: str = "walk"


class ExternalCoordinates(BaseModel):
    latitude: float
    longitude: float


class ExternalActivity(BaseModel):
    name: str
    address: Optional[str] = None
    coordinates: ExternalCoordinates
    category: str = ""
    priority: int = 5
    estimated_duration: Optional[float] = None
    opening_hours: Optional[str] = None


class TransportInfo(BaseModel):
    mode: str
    duration: float = 0.0
    distance: Union[str, float, None] = None


class ScheduledActivity(BaseModel):
    activity: ExternalActivity
    scheduled_time: str
    duration: float
    transport_to_next: Optional[TransportInfo] = None


class ExternalDay(BaseModel):
    day: int
    date: str
    activities: List[ScheduledActivity] = Field(default_factory=list)


class TransportRecommendations(BaseModel):
    walking: float = 0
    driving: float = 0
    transit: float = 0


class OptimizationAnalytics(BaseModel):
    total_activities: int = 0
    total_days: int = 0
    optimization_efficiency: float = 0.0
    optimization_mode: str = ""
    transport_recommendations: TransportRecommendations = Field(default_factory=TransportRecommendations)


class OptimizationMetadata(BaseModel):
    generation_time: float = 0.0
    api_version: str = ""
    ml_model_version: str = ""


class OptimizationResponse(BaseModel):
    itinerary: List[ExternalDay] = Field(default_factory=list)
    analytics: Optional[OptimizationAnalytics] = None
    metadata: Optional[OptimizationMetadata] = None


# ------- Internal itinerary -------
class OptimizedPlace(_CamelModel):
    id: str
    name: str
    category: str = ""
    rating: Optional[float] = None
    description: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    priority: Priority = "medium"
    estimated_time: str = Field("", alias="estimatedTime")
    recommended_duration: str = Field("", alias="aiRecommendedDuration")
    best_time_to_visit: str = Field("", alias="bestTimeToVisit")
    order_in_route: int = Field(1, alias="orderInRoute")
    destination_name: str = Field("", alias="destinationName")
    transport_to_next: Optional[TransportInfo] = None


class DayItinerary(_CamelModel):
    day: int
    date: str
    destination_name: str = Field("", alias="destinationName")
    places: List[OptimizedPlace] = Field(default_factory=list)
    total_time: str = Field("0h", alias="totalTime")
    walking_time: str = Field("0h", alias="walkingTime")
    transport_time: str = Field("0h", alias="transportTime")
    free_time: str = Field("2h", alias="freeTime")
    allocated_days: int = Field(1, alias="allocatedDays")
    is_suggested: bool = Field(False, alias="isSuggested")
    is_tentative: bool = Field(False, alias="isTentative")


class OrchestrationResult(_CamelModel):
    itinerary: List[DayItinerary] = Field(default_factory=list)
    source_tier: SourceTier = Field(..., alias="sourceTier")
    analytics: Optional[OptimizationAnalytics] = None
    metadata: Optional[OptimizationMetadata] = None
    error: Optional[str] = None


class ItineraryRequest(BaseModel):
    trip: Trip
    preferences: Optional[ItineraryPreferences] = None


class FlightPlanRequest(BaseModel):
    trip: Trip
    origin: str


class FlightTimingRequest(_CamelModel):
    origin: str
    destination: str
    trip_start_date: date = Field(..., alias="tripStartDate")


def dump_alias(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)
