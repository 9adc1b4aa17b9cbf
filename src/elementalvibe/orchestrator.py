"""Narrative request orchestration: retry with backoff plus a minimum-duration floor.

One orchestrator per submission:

    IDLE → REQUESTING → (RETRYING → REQUESTING)* → SUCCEEDED | FAILED

The request and a fixed-duration timer run concurrently; the terminal state
is only entered once both have finished.
"""

import asyncio
import enum
import functools
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from elementalvibe.config import Settings, load_settings
from elementalvibe.models import BriefNarrative, NarrativeResult, Reading
from elementalvibe.narrative import (
    VARIANTS,
    NarrativeError,
    NarrativeParseError,
    build_prompt,
    request_narrative,
)

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = frozenset({429, 503})

NarrativeCall = Callable[[str, dict[str, Any]], Awaitable[dict[str, Any]]]


class NarrativeUnavailableError(NarrativeError):
    """Terminal orchestrator failure. No partial result exists."""


class NarrativeState(enum.Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    return status if isinstance(status, int) else None


def is_transient(exc: BaseException) -> bool:
    """Rate-limited or overloaded: status 429/503, or "429" in the message."""
    if isinstance(exc, NarrativeParseError):
        return False
    if _status_code(exc) in TRANSIENT_STATUS_CODES:
        return True
    return "429" in str(exc)


def backoff_delays(max_retries: int = 3, base: float = 1.0) -> tuple[float, ...]:
    """Exponential backoff schedule: base * 2**n for each retry (1s, 2s, 4s)."""
    return tuple(base * 2**n for n in range(max_retries))


class NarrativeOrchestrator:
    """Obtain a narrative for one reading under retry and timing constraints.

    Args:
        call: Coroutine function ``(prompt, schema) -> payload``. Defaults to
            a Claude API call built from settings.
        settings: Retry budget, backoff base and minimum duration.
        variant: "full" or "brief" response shape.
        sleep: Coroutine used for backoff delays.
        on_state: Called with each new NarrativeState.
    """

    def __init__(
        self,
        call: NarrativeCall | None = None,
        *,
        settings: Settings | None = None,
        variant: str = "full",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_state: Callable[[NarrativeState], None] | None = None,
    ):
        if variant not in VARIANTS:
            raise ValueError(f"Unknown narrative variant: {variant!r}")
        self.settings = settings or load_settings()
        self.variant = variant
        self._call = call or functools.partial(request_narrative, settings=self.settings)
        self._sleep = sleep
        self._on_state = on_state
        self.state = NarrativeState.IDLE
        self.history: list[NarrativeState] = [NarrativeState.IDLE]
        self.attempts = 0
        self.delays: list[float] = []

    def _enter(self, state: NarrativeState) -> None:
        self.state = state
        self.history.append(state)
        if self._on_state is not None:
            self._on_state(state)

    async def _request_with_retry(
        self, prompt: str
    ) -> NarrativeResult | BriefNarrative:
        schema, parse = VARIANTS[self.variant]
        schedule = backoff_delays(self.settings.max_retries, self.settings.backoff_base)
        while True:
            self._enter(NarrativeState.REQUESTING)
            self.attempts += 1
            try:
                payload = await self._call(prompt, schema)
            except Exception as exc:
                retry_index = self.attempts - 1
                if not is_transient(exc) or retry_index >= len(schedule):
                    raise
                delay = schedule[retry_index]
                logger.warning(
                    "Narrative service busy (%s). Retrying in %.0fms (attempt %d/%d)",
                    exc,
                    delay * 1000,
                    retry_index + 1,
                    len(schedule),
                )
                self._enter(NarrativeState.RETRYING)
                self.delays.append(delay)
                await self._sleep(delay)
                continue
            return parse(payload)

    async def run(self, reading: Reading) -> NarrativeResult | BriefNarrative:
        """Request the narrative and wait for the minimum-duration floor.

        Returns:
            The validated narrative.

        Raises:
            NarrativeUnavailableError: Non-transient failure, malformed
                response, or retries exhausted. Raised only after the floor.
            RuntimeError: The orchestrator was already used.
        """
        if self.state is not NarrativeState.IDLE:
            raise RuntimeError("NarrativeOrchestrator is single-use; create one per submission")

        prompt = build_prompt(reading, self.variant)
        _, outcome = await asyncio.gather(
            asyncio.sleep(self.settings.min_duration),
            self._request_with_retry(prompt),
            return_exceptions=True,
        )

        if isinstance(outcome, BaseException):
            self._enter(NarrativeState.FAILED)
            logger.error(
                "Narrative request failed after %d attempt(s): %s", self.attempts, outcome
            )
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            raise NarrativeUnavailableError(str(outcome)) from outcome

        self._enter(NarrativeState.SUCCEEDED)
        return outcome


async def fetch_narrative(
    reading: Reading,
    *,
    settings: Settings | None = None,
    variant: str = "full",
    client: Any = None,
) -> NarrativeResult | BriefNarrative:
    """Convenience wrapper: one Claude-backed orchestrator run."""
    settings = settings or load_settings()
    call = functools.partial(request_narrative, client=client, settings=settings)
    return await NarrativeOrchestrator(call, settings=settings, variant=variant).run(reading)


class SubmissionTracker:
    """Hands out submission ids so late results of abandoned submissions can be dropped."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.current = 0

    def begin(self) -> int:
        self.current = next(self._ids)
        return self.current

    def is_current(self, submission_id: int) -> bool:
        return submission_id == self.current
