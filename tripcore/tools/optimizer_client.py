from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from tripcore.config import get_logger
from tripcore.errors import (
    InvalidResponseError,
    NetworkError,
    NonSuccessStatus,
    TierNotConfigured,
    TierTimeoutError,
)
from tripcore.schemas import OptimizationRequest, OptimizationResponse

logger = get_logger(__name__)

TIER = "ml"


class OptimizationServiceClient:
    """
    Async client for the itinerary optimization service.

    Every failure is raised as a ``TierError`` subclass; there is no retry
    here, a single failure ends the ML tier.
    """
    HEALTH_PATH = "/health"
    GENERATE_PATH = "/api/v2/itinerary/generate-hybrid"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        if not self.configured:
            raise TierNotConfigured("Optimization service URL not configured", tier=TIER)
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=payload, headers=self._headers())
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as exc:
            raise TierTimeoutError(f"Optimization service timed out after {self.timeout:.0f}s", tier=TIER) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            try:
                details = exc.response.json()
            except ValueError:
                details = exc.response.text
            if status == 422:
                logger.error("Optimization service rejected request format: %s", details)
            raise NonSuccessStatus(
                f"Optimization service returned {status} {exc.response.reason_phrase}",
                status_code=status,
                details=details,
                tier=TIER,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network error calling optimization service: {exc}", tier=TIER) from exc
        except ValueError as exc:
            raise InvalidResponseError("Optimization service returned non-JSON body", tier=TIER) from exc

    async def check_health(self) -> Dict[str, Any]:
        data = await self._request("GET", self.HEALTH_PATH)
        logger.info("Optimization service health: %s", data)
        return data if isinstance(data, dict) else {"status": data}

    async def generate_itinerary(self, request: OptimizationRequest) -> OptimizationResponse:
        logger.info(
            "Requesting optimized itinerary for %d place(s) %s..%s (%s)",
            len(request.places),
            request.start_date,
            request.end_date,
            request.transport_mode,
        )
        data = await self._request("POST", self.GENERATE_PATH, request.model_dump(mode="json"))
        try:
            parsed = OptimizationResponse.model_validate(data)
        except ValidationError as exc:
            raise InvalidResponseError(f"Unexpected optimization response shape: {exc}", tier=TIER) from exc
        logger.info(
            "Optimization service returned %d day(s) (model %s)",
            len(parsed.itinerary),
            parsed.metadata.ml_model_version if parsed.metadata else "unknown",
        )
        return parsed
