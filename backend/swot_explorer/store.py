"""
SWOT Explorer — Client-side Insight Store

Async client for POST /api/generate that keeps the generated insights for one
session in memory, one per (segment_id, prompt_type_id).

The usage counters are an optimistic local mirror of the server quota. They
are for display only and never gate a request; the server limiter is the
only authority.
"""

import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from swot_explorer.config import STORE_CONFIG, log
from swot_explorer.models import BusinessObjective, InsightResponse, Product, Segment

GENERATE_PATH = "/api/generate"
RESET_HEADER = "X-RateLimit-Reset"
NO_INSIGHT_TEXT = "No insight generated"
DEFAULT_ERROR_MESSAGE = "Failed to generate insight"


def _now_ms() -> int:
    return int(time.time() * 1000)


class InsightStore:
    """
    Args:
        client: httpx.AsyncClient pointed at the backend (base_url set).
        clock: Callable returning epoch milliseconds; used for ids and countdowns.
        initial_remaining_requests: Starting value of the local quota mirror.
        cost_per_request: Flat estimated cost per successful request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        clock: Callable[[], int] = _now_ms,
        initial_remaining_requests: int = STORE_CONFIG["initial_remaining_requests"],
        cost_per_request: float = STORE_CONFIG["cost_per_request"],
    ):
        self._client = client
        self._clock = clock
        self._responses: list[InsightResponse] = []
        self._is_generating = False
        self.error: Optional[str] = None
        self.remaining_requests = initial_remaining_requests
        self.total_requests = 0
        self.cost_per_request = cost_per_request

    # ── Read side ───────────────────────────────────────────────────────────

    @property
    def responses(self) -> list[InsightResponse]:
        return list(self._responses)

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def estimated_cost(self) -> float:
        return self.total_requests * self.cost_per_request

    def lookup(self, segment_id: str, prompt_type_id: str) -> InsightResponse | None:
        for response in self._responses:
            if response.segment_id == segment_id and response.prompt_type_id == prompt_type_id:
                return response
        return None

    def __len__(self) -> int:
        return len(self._responses)

    # ── Write side ──────────────────────────────────────────────────────────

    async def generate(
        self,
        product: Product,
        objective: BusinessObjective,
        segment: Segment,
        prompt_type_id: str,
        prompt: str,
    ) -> None:
        """
        Request one insight and upsert it on success.

        Single-flight for the whole store: a call made while another is
        outstanding returns immediately without touching the network.
        Failures are recorded in `error` (one current message, dismissible
        via clear_error) and never raised; the response collection is left
        unchanged.
        """
        if self._is_generating:
            log("INFO", "generate skipped, request in flight", segment=segment.id, prompt_type=prompt_type_id)
            return

        self._is_generating = True
        self.error = None

        try:
            content = await self._post(
                {
                    "prompt": prompt,
                    "segment": segment.name,
                    "product": product.name,
                    "objective": objective.name,
                    "promptType": prompt_type_id,
                }
            )
            now = self._clock()
            self._upsert(
                InsightResponse(
                    id=f"{segment.id}-{prompt_type_id}-{now}",
                    segment_id=segment.id,
                    prompt_type_id=prompt_type_id,
                    content=content,
                    timestamp=datetime.fromtimestamp(now / 1000, tz=timezone.utc).isoformat(),
                    product=product.name,
                    objective=objective.name,
                )
            )
            self.total_requests += 1
            self.remaining_requests = max(0, self.remaining_requests - 1)
        except InsightRequestError as e:
            self.error = str(e)
            log("WARN", "insight request failed", segment=segment.id, prompt_type=prompt_type_id, error=str(e))
        except Exception as e:
            self.error = "An unexpected error occurred"
            log("ERROR", "insight request crashed", segment=segment.id, prompt_type=prompt_type_id, error=str(e))
        finally:
            self._is_generating = False

    def clear(self) -> None:
        """Drop every response and the current error. Usage counters are kept."""
        self._responses = []
        self.error = None

    def clear_error(self) -> None:
        self.error = None

    # ── Internals ───────────────────────────────────────────────────────────

    def _upsert(self, response: InsightResponse) -> None:
        self._responses = [
            r
            for r in self._responses
            if not (r.segment_id == response.segment_id and r.prompt_type_id == response.prompt_type_id)
        ]
        self._responses.append(response)

    async def _post(self, body: dict) -> str:
        try:
            response = await self._client.post(GENERATE_PATH, json=body)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError(self._seconds_until_reset(response.headers.get(RESET_HEADER)))

        if not response.is_success:
            raise InsightRequestError(_error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise InsightRequestError("Invalid response from server") from e
        return data.get("insight") or data.get("content") or NO_INSIGHT_TEXT

    def _seconds_until_reset(self, reset_header: str | None) -> int:
        now = self._clock()
        reset_at = now + STORE_CONFIG["default_reset_seconds"] * 1000
        if reset_header:
            try:
                reset_at = int(reset_header)
            except ValueError:
                pass
        return max(0, math.ceil((reset_at - now) / 1000))


# -----------------------------------------------------------------------------
# Errors (caught inside generate, surfaced through InsightStore.error)
# -----------------------------------------------------------------------------


class InsightRequestError(Exception):
    pass


class NetworkError(InsightRequestError):
    """Transport failure: the request never produced an HTTP response."""


class RateLimitedError(InsightRequestError):
    def __init__(self, seconds_left: int):
        self.seconds_left = seconds_left
        super().__init__(f"Rate limit exceeded. Please wait {seconds_left} seconds before trying again.")


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return DEFAULT_ERROR_MESSAGE
