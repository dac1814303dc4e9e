import asyncio
from typing import List, Tuple

import pytest

from tripcore.errors import NetworkError, NonSuccessStatus, TierNotConfigured, TierTimeoutError
from tripcore.orchestrator import ItineraryOrchestrator
from tripcore.schemas import DayItinerary, OptimizationResponse, Trip


def _trip(**overrides) -> Trip:
    payload = {
        "id": "t-1",
        "destination": "Paris",
        "dates": "Jun 1 - Jun 3, 2026",
        "coordinates": [{"name": "Paris", "lat": 48.8566, "lng": 2.3522}],
        "savedPlaces": [
            {"id": 1, "name": "Louvre", "category": "Museum", "lat": 48.8606, "lng": 2.3376, "priority": "high"},
        ],
    }
    payload.update(overrides)
    return Trip.model_validate(payload)


ML_RESPONSE = {
    "itinerary": [
        {
            "day": 1,
            "date": "2026-06-01",
            "activities": [
                {
                    "activity": {
                        "name": "Louvre",
                        "coordinates": {"latitude": 48.8606, "longitude": 2.3376},
                        "priority": 9,
                    },
                    "scheduled_time": "09:00",
                    "duration": 3,
                }
            ],
        }
    ],
    "analytics": {"total_activities": 1, "total_days": 1, "optimization_mode": "hybrid"},
}


class FakeOptimizer:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = 0

    async def generate_itinerary(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return OptimizationResponse.model_validate(self.response)

    async def check_health(self):
        return {"status": "healthy"}


class FakeRouteBackend:
    def __init__(self, days=None, error=None):
        self.days = days or []
        self.error = error
        self.calls = 0

    async def generate_routes(self, trip):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.days


class RecordingNotifier:
    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def notify(self, kind, message):
        self.messages.append((kind, message))


class BrokenNotifier:
    def notify(self, kind, message):
        raise RuntimeError("toast service down")


BACKEND_DAY = DayItinerary(day=1, date="Jun 1", destination_name="Paris")


def test_ml_tier_answers_first():
    notifier = RecordingNotifier()
    backend = FakeRouteBackend(days=[BACKEND_DAY])
    orchestrator = ItineraryOrchestrator(FakeOptimizer(ML_RESPONSE), backend, notifier)

    result = asyncio.run(orchestrator.run(_trip()))

    assert result.source_tier == "ml"
    assert result.error is None
    assert result.itinerary[0].places[0].name == "Louvre"
    assert result.analytics.optimization_mode == "hybrid"
    assert backend.calls == 0
    assert notifier.messages[-1][0] == "success"


def test_ml_failure_falls_back_to_secondary():
    optimizer = FakeOptimizer(error=NonSuccessStatus("Optimization service returned 500", status_code=500, tier="ml"))
    backend = FakeRouteBackend(days=[BACKEND_DAY])
    orchestrator = ItineraryOrchestrator(optimizer, backend, RecordingNotifier())

    result = asyncio.run(orchestrator.run(_trip()))

    assert result.source_tier == "secondary"
    assert result.itinerary == [BACKEND_DAY]
    assert result.error.startswith("ml: ")
    assert optimizer.calls == 1 and backend.calls == 1


def test_empty_ml_itinerary_is_a_failure():
    orchestrator = ItineraryOrchestrator(
        FakeOptimizer({"itinerary": []}),
        FakeRouteBackend(days=[BACKEND_DAY]),
        RecordingNotifier(),
    )
    result = asyncio.run(orchestrator.run(_trip()))
    assert result.source_tier == "secondary"


@pytest.mark.parametrize(
    "ml_error, backend_error",
    [
        (TierTimeoutError("timed out", tier="ml"), NetworkError("refused", tier="secondary")),
        (TierNotConfigured("no url", tier="ml"), TierNotConfigured("no url", tier="secondary")),
        (ValueError("unexpected"), RuntimeError("unexpected")),
    ],
)
def test_both_remote_tiers_failing_uses_local_builder(ml_error, backend_error):
    orchestrator = ItineraryOrchestrator(
        FakeOptimizer(error=ml_error),
        FakeRouteBackend(error=backend_error),
        RecordingNotifier(),
    )

    result = asyncio.run(orchestrator.run(_trip()))

    assert result.source_tier == "local"
    assert len(result.itinerary) == 3
    assert result.itinerary[0].places[0].name == "Louvre"
    assert result.error.startswith("secondary: ")


def test_trip_without_places_skips_ml_call():
    optimizer = FakeOptimizer(ML_RESPONSE)
    orchestrator = ItineraryOrchestrator(optimizer, FakeRouteBackend(), RecordingNotifier())

    result = asyncio.run(orchestrator.run(_trip(coordinates=[], savedPlaces=[])))

    assert optimizer.calls == 0
    assert result.itinerary == []
    assert result.source_tier == "local"
    assert result.error is not None


def test_notifier_failure_does_not_break_orchestration():
    orchestrator = ItineraryOrchestrator(FakeOptimizer(ML_RESPONSE), FakeRouteBackend(), BrokenNotifier())
    result = asyncio.run(orchestrator.run(_trip()))
    assert result.source_tier == "ml"


def test_abort_before_start_cancels_without_calling_tiers():
    optimizer = FakeOptimizer(ML_RESPONSE)
    orchestrator = ItineraryOrchestrator(optimizer, FakeRouteBackend(), RecordingNotifier())

    async def scenario():
        abort = asyncio.Event()
        abort.set()
        with pytest.raises(asyncio.CancelledError):
            await orchestrator.run(_trip(), abort=abort)

    asyncio.run(scenario())
    assert optimizer.calls == 0


def test_abort_between_tiers_stops_the_chain():
    abort = None

    class AbortingOptimizer(FakeOptimizer):
        async def generate_itinerary(self, request):
            abort.set()
            raise NetworkError("down", tier="ml")

    backend = FakeRouteBackend(days=[BACKEND_DAY])
    orchestrator = ItineraryOrchestrator(AbortingOptimizer(), backend, RecordingNotifier())

    async def scenario():
        nonlocal abort
        abort = asyncio.Event()
        with pytest.raises(asyncio.CancelledError):
            await orchestrator.run(_trip(), abort=abort)

    asyncio.run(scenario())
    assert backend.calls == 0


def test_health_check_delegates_to_optimizer():
    orchestrator = ItineraryOrchestrator(FakeOptimizer(), FakeRouteBackend(), RecordingNotifier())
    assert asyncio.run(orchestrator.check_optimizer_health()) == {"status": "healthy"}


def test_cancelling_the_task_during_ml_tier_skips_later_tiers():
    class HangingOptimizer(FakeOptimizer):
        def __init__(self):
            super().__init__()
            self.started = asyncio.Event()

        async def generate_itinerary(self, request):
            self.calls += 1
            self.started.set()
            await asyncio.Event().wait()

    optimizer = HangingOptimizer()
    backend = FakeRouteBackend(days=[BACKEND_DAY])
    orchestrator = ItineraryOrchestrator(optimizer, backend, RecordingNotifier())

    async def scenario():
        task = asyncio.create_task(orchestrator.run(_trip()))
        await optimizer.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert optimizer.calls == 1
    assert backend.calls == 0
