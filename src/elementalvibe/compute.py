"""Elemental computation layer — birthdate parsing, scoring, archetype and season classification.

Everything here is pure and synchronous: no I/O, no shared state, never raises.
"""

import logging
import unicodedata
from collections.abc import Mapping

from elementalvibe.models import (
    AXES,
    Archetype,
    BirthFacts,
    ElementProfile,
    QueryInput,
    Reading,
)

logger = logging.getLogger(__name__)

BASE_SCORE = 20
YEAR_BONUS = 25
MONTH_BONUS = 20
DAY_BONUS = 15
NAME_LENGTH_BONUS = 10
FIRST_LETTER_BONUS = 10

DEFAULT_MONTH = 1
DEFAULT_DAY = 1
DEFAULT_YEAR = 2000

FALLBACK_ARCHETYPE = "Cosmic Wanderer"

# Last digit of the birth year → axis
_YEAR_DIGIT_AXIS: dict[int, str] = {
    0: "metal",
    1: "metal",
    2: "water",
    3: "water",
    4: "wood",
    5: "wood",
    6: "fire",
    7: "fire",
    8: "earth",
    9: "earth",
}

# Birth month → axis. Covers all twelve months exactly once.
_MONTH_AXIS: dict[int, str] = {
    12: "water",
    1: "water",
    11: "water",
    2: "wood",
    3: "wood",
    5: "fire",
    6: "fire",
    7: "fire",
    8: "metal",
    9: "metal",
    10: "metal",
    4: "earth",
}

# value mod 5 → axis. Shared by the day rule and the name-length rule.
_REMAINDER_AXIS: tuple[str, ...] = ("metal", "water", "wood", "fire", "earth")

# Inclusive uppercase letter ranges → axis
_LETTER_RANGES: tuple[tuple[str, str, str], ...] = (
    ("A", "E", "wood"),
    ("F", "J", "fire"),
    ("K", "O", "earth"),
    ("P", "T", "metal"),
    ("U", "Z", "water"),
)

_SEASONS: dict[int, str] = {
    12: "winter",
    1: "winter",
    2: "winter",
    3: "spring",
    4: "spring",
    5: "spring",
    6: "summer",
    7: "summer",
    8: "summer",
    9: "autumn",
    10: "autumn",
    11: "autumn",
}

# Unordered axis pair → archetype name. Enumerates all C(5, 2) pairs.
ARCHETYPE_NAMES: dict[frozenset[str], str] = {
    frozenset(("water", "metal")): "Tidal Sage",
    frozenset(("water", "fire")): "Steam Oracle",
    frozenset(("water", "wood")): "Ocean Dreamer",
    frozenset(("water", "earth")): "Marsh Guardian",
    frozenset(("metal", "fire")): "Forge Master",
    frozenset(("metal", "wood")): "Iron Oak",
    frozenset(("metal", "earth")): "Stone Sentinel",
    frozenset(("fire", "wood")): "Verdant Spark",
    frozenset(("fire", "earth")): "Solar Nomad",
    frozenset(("wood", "earth")): "Forest Keeper",
}


def _parse_component(raw: str | None, default: int, low: int, high: int) -> int:
    """Parse one date component, substituting the default when garbled or out of range."""
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    if value < low or value > high:
        return default
    return value


def parse_birthdate(birthdate: str) -> BirthFacts:
    """Parse a "MM/DD/YYYY" string into BirthFacts.

    Never raises: absent, non-numeric or out-of-range components fall back to
    month 1, day 1, year 2000.
    """
    parts: list[str | None] = list((birthdate or "").split("/"))
    parts += [None] * (3 - len(parts))
    return BirthFacts(
        month=_parse_component(parts[0], DEFAULT_MONTH, 1, 12),
        day=_parse_component(parts[1], DEFAULT_DAY, 1, 31),
        year=_parse_component(parts[2], DEFAULT_YEAR, 1, 9999),
    )


def _first_letter_axis(name: str) -> str | None:
    """Bucket the first character of the name into an axis.

    An empty name counts as 'A'. Diacritics are folded ("É" → "E"); any
    character still outside A–Z matches no bucket.
    """
    first = name[0] if name else "A"
    first = unicodedata.normalize("NFKD", first.upper())[:1]
    for low, high, axis in _LETTER_RANGES:
        if low <= first <= high:
            return axis
    return None


def score_facts(facts: BirthFacts, name: str) -> ElementProfile:
    """Apply the five bonus rules on top of the uniform base."""
    scores = dict.fromkeys(AXES, BASE_SCORE)

    scores[_YEAR_DIGIT_AXIS[facts.year % 10]] += YEAR_BONUS
    scores[_MONTH_AXIS[facts.month]] += MONTH_BONUS
    scores[_REMAINDER_AXIS[facts.day % 5]] += DAY_BONUS
    scores[_REMAINDER_AXIS[len(name) % 5]] += NAME_LENGTH_BONUS

    letter_axis = _first_letter_axis(name)
    if letter_axis is not None:
        scores[letter_axis] += FIRST_LETTER_BONUS

    return ElementProfile(**scores)


def calculate_elements(birthdate: str, name: str) -> ElementProfile:
    """Compute the five-axis elemental profile from a birthdate and a name.

    Args:
        birthdate: Date string in "MM/DD/YYYY" format. Garbled input degrades
            to the defaults instead of failing.
        name: The user's name. May be empty.

    Returns:
        ElementProfile with each score in [20, 100].
    """
    return score_facts(parse_birthdate(birthdate), name or "")


def rank_axes(profile: ElementProfile | Mapping[str, int]) -> list[tuple[str, int]]:
    """Return (axis, score) pairs sorted by score descending.

    Ties keep the natural AXES order (sorted() is stable). Mappings missing
    an axis score it as 0.
    """
    if isinstance(profile, ElementProfile):
        pairs = list(profile.items())
    else:
        pairs = [(axis, profile.get(axis) or 0) for axis in AXES]
    return sorted(pairs, key=lambda pair: pair[1], reverse=True)


def dominant_axes(profile: ElementProfile | Mapping[str, int]) -> tuple[str, str]:
    """The two highest-scoring axes, primary first."""
    ranked = rank_axes(profile)
    return ranked[0][0], ranked[1][0]


def weakest_axes(profile: ElementProfile, count: int = 2) -> tuple[str, ...]:
    """The lowest-scoring axes, ascending. Ties keep the natural AXES order."""
    pairs = sorted(profile.items(), key=lambda pair: pair[1])
    return tuple(axis for axis, _ in pairs[:count])


def archetype_name(primary: str, secondary: str) -> str:
    """Look up the archetype for an unordered axis pair."""
    return ARCHETYPE_NAMES.get(frozenset((primary, secondary)), FALLBACK_ARCHETYPE)


def determine_archetype(profile: ElementProfile) -> Archetype:
    """Classify a profile by its two dominant axes.

    Total: the fallback name is only returned if the pair table is incomplete.
    """
    primary, secondary = dominant_axes(profile)
    return Archetype(
        name=archetype_name(primary, secondary),
        primary=primary,
        secondary=secondary,
    )


def birth_season(month: int) -> str:
    """Map a month (1–12) to its season. Out-of-range months count as winter."""
    return _SEASONS.get(month, "winter")


def run(query: QueryInput) -> Reading:
    """Top-level entry point: takes a QueryInput and returns a Reading.

    Args:
        query: User input (birthdate string, name).

    Returns:
        Fully computed Reading.
    """
    facts = parse_birthdate(query.birthdate)
    profile = score_facts(facts, query.name or "")
    archetype = determine_archetype(profile)
    season = birth_season(facts.month)
    logger.debug(
        "Computed reading: profile=%s archetype=%s season=%s",
        profile.as_dict(),
        archetype.name,
        season,
    )
    return Reading(
        query=query,
        facts=facts,
        profile=profile,
        archetype=archetype,
        season=season,
    )
