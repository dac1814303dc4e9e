from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Protocol

from tripcore.agents.local_itinerary import build_local_itinerary
from tripcore.config import Settings, get_logger, load_settings
from tripcore.errors import EmptyResultError
from tripcore.schemas import (
    DayItinerary,
    ItineraryPreferences,
    OptimizationAnalytics,
    OptimizationMetadata,
    OrchestrationResult,
    SourceTier,
    Trip,
)
from tripcore.tools.optimizer_client import OptimizationServiceClient
from tripcore.tools.route_backend import RouteBackendClient
from tripcore.transform import from_external_response, to_external_request

logger = get_logger(__name__)


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None: ...


class LoggingNotifier:
    """Default sink: user-facing notices go to the log."""

    def notify(self, kind: str, message: str) -> None:
        logger.info("[notify:%s] %s", kind, message)


@dataclass
class TierOutcome:
    itinerary: List[DayItinerary]
    analytics: Optional[OptimizationAnalytics] = None
    metadata: Optional[OptimizationMetadata] = None


TierCall = Callable[[Trip, ItineraryPreferences], Awaitable[TierOutcome]]


@dataclass
class Tier:
    name: SourceTier
    run: TierCall
    success_message: str = ""


@dataclass
class ItineraryOrchestrator:
    """
    Walks the fallback tiers in order (ML service, backend route generator,
    local builder) and returns the first non-empty itinerary.

    ``run`` never raises for tier failures; callers learn which tier answered
    from ``source_tier`` and get the last failure text in ``error``.
    """
    optimizer: OptimizationServiceClient
    route_backend: RouteBackendClient
    notifier: Notifier = field(default_factory=LoggingNotifier)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, notifier: Optional[Notifier] = None) -> "ItineraryOrchestrator":
        settings = settings or load_settings()
        return cls(
            optimizer=OptimizationServiceClient(
                settings.optimizer_url,
                timeout=settings.optimizer_timeout,
                api_key=settings.optimizer_api_key or None,
            ),
            route_backend=RouteBackendClient(
                settings.route_backend_url,
                timeout=settings.route_backend_timeout,
                api_key=settings.route_backend_api_key or None,
            ),
            notifier=notifier or LoggingNotifier(),
        )

    # ---------- tiers ----------
    async def _ml_tier(self, trip: Trip, preferences: ItineraryPreferences) -> TierOutcome:
        request = to_external_request(trip, preferences)
        if not request.places:
            raise EmptyResultError("Trip has no places or destinations to optimize", tier="ml")
        self._notify("info", f"Generating AI route for {len(request.places)} place(s)...")
        response = await self.optimizer.generate_itinerary(request)
        return TierOutcome(
            itinerary=from_external_response(response, trip),
            analytics=response.analytics,
            metadata=response.metadata,
        )

    async def _secondary_tier(self, trip: Trip, preferences: ItineraryPreferences) -> TierOutcome:
        return TierOutcome(itinerary=await self.route_backend.generate_routes(trip))

    async def _local_tier(self, trip: Trip, preferences: ItineraryPreferences) -> TierOutcome:
        return TierOutcome(itinerary=build_local_itinerary(trip, "balanced"))

    def tiers(self) -> List[Tier]:
        return [
            Tier("ml", self._ml_tier, "AI route generated."),
            Tier("secondary", self._secondary_tier, "Route generated."),
            Tier("local", self._local_tier, "Itinerary generated."),
        ]

    # ---------- orchestration ----------
    def _notify(self, kind: str, message: str) -> None:
        try:
            self.notifier.notify(kind, message)
        except Exception:
            logger.warning("Notifier failed for %s message %r", kind, message, exc_info=True)

    async def run(
        self,
        trip: Trip,
        preferences: Optional[ItineraryPreferences] = None,
        abort: Optional[asyncio.Event] = None,
    ) -> OrchestrationResult:
        """Produce an itinerary for ``trip`` from the first tier that succeeds.

        Setting ``abort`` (or cancelling the awaiting task) stops the chain
        before the next tier starts and raises ``asyncio.CancelledError``.
        """
        prefs = preferences or ItineraryPreferences()
        tiers = self.tiers()
        last_error: Optional[str] = None
        logger.info(
            "Orchestration start: trip=%s destinations=%d saved_places=%d",
            trip.id,
            len(trip.coordinates),
            len(trip.saved_places),
        )

        for position, tier in enumerate(tiers):
            if abort is not None and abort.is_set():
                logger.info("Orchestration for trip %s abandoned before %s tier", trip.id, tier.name)
                raise asyncio.CancelledError()
            try:
                outcome = await tier.run(trip, prefs)
                if not outcome.itinerary:
                    raise EmptyResultError(f"{tier.name} tier returned an empty itinerary", tier=tier.name)
            except Exception as exc:
                last_error = f"{tier.name}: {exc}"
                is_last = position == len(tiers) - 1
                if is_last:
                    logger.error("Final %s tier failed for trip %s", tier.name, trip.id, exc_info=True)
                    break
                logger.warning(
                    "%s tier failed for trip %s; falling back to %s tier",
                    tier.name,
                    trip.id,
                    tiers[position + 1].name,
                    exc_info=True,
                )
                continue

            logger.info("Trip %s itinerary produced by %s tier (%d day(s))", trip.id, tier.name, len(outcome.itinerary))
            self._notify("success", tier.success_message)
            return OrchestrationResult(
                itinerary=outcome.itinerary,
                source_tier=tier.name,
                analytics=outcome.analytics,
                metadata=outcome.metadata,
                error=last_error,
            )

        return OrchestrationResult(itinerary=[], source_tier="local", error=last_error)

    async def check_optimizer_health(self) -> dict:
        return await self.optimizer.check_health()
