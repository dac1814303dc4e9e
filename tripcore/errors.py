"""Error kinds raised by the planning core and its network tiers."""
from __future__ import annotations

from typing import Any, Optional


class TripCoreError(Exception):
    """Base class for every error raised by this package."""


class NoDestinationsError(TripCoreError, ValueError):
    def __init__(self, message: str = "No destinations found in trip") -> None:
        super().__init__(message)


class LocationUnresolved(TripCoreError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No coordinates known for location {name!r}")
        self.name = name


class DateParseError(TripCoreError, ValueError):
    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"Cannot parse trip dates {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class TierError(TripCoreError):
    """A fallback tier could not produce an itinerary."""

    def __init__(self, message: str, *, tier: str = "") -> None:
        super().__init__(message)
        self.tier = tier


class TierNotConfigured(TierError):
    pass


class NetworkError(TierError):
    pass


class TierTimeoutError(TierError):
    pass


class NonSuccessStatus(TierError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        details: Optional[Any] = None,
        tier: str = "",
    ) -> None:
        super().__init__(message, tier=tier)
        self.status_code = status_code
        self.details = details


class InvalidResponseError(TierError):
    pass


class EmptyResultError(TierError):
    pass
