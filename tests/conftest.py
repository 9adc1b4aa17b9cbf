"""Shared test fixtures for the elementalvibe test suite."""

import pytest

from elementalvibe.compute import run
from elementalvibe.config import Settings
from elementalvibe.models import QueryInput


# ── Readings ─────────────────────────────────────────────────────────────

@pytest.fixture
def make_reading():
    """Factory: birthdate + name → Reading."""

    def _make(birthdate: str = "01/02/2000", name: str = "Ziying"):
        return run(QueryInput(birthdate=birthdate, name=name))

    return _make


@pytest.fixture
def reading(make_reading):
    return make_reading()


# ── Settings ─────────────────────────────────────────────────────────────

@pytest.fixture
def fast_settings():
    """No floor, default retry budget and backoff schedule."""
    return Settings(api_key="test-key", min_duration=0.0)


# ── Narrative payloads ───────────────────────────────────────────────────

@pytest.fixture
def narrative_payload():
    return {
        "opening": "Water. Metal. You. Moonlight on a silver lake.",
        "birthImagery": "Born when the winter river hardens into glass.",
        "soulCity": "London, where fog keeps its secrets and bridges hold.",
        "complementarySouls": "You're drawn to Fire souls who warm the room.",
        "talismans": {
            "color": "Silver Tide",
            "item": "a polished river stone",
            "mantra": "I flow, I cut, I endure",
        },
        "ps": "Feeling stuck? Move like rain. Your edges are your compass.",
        "element": "Tidal Sage",
        "color": "#4ecdc4",
    }


@pytest.fixture
def brief_payload():
    return {
        "element": "Tidal Sage",
        "color": "#4ecdc4",
        "description": "Quiet depth with a blade's clarity.",
        "vibe": "LUMINOUS",
    }


# ── Sleep recorder ───────────────────────────────────────────────────────

class SleepRecorder:
    """Stands in for asyncio.sleep in backoff; records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()
