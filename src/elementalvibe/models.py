"""Data model definitions — explicit boundaries between input, compute, narrative, and render layers."""

from collections.abc import Iterator
from dataclasses import asdict, dataclass

# Natural enumeration order. Also the tie-break priority when ranking axes.
AXES: tuple[str, ...] = ("fire", "water", "wood", "earth", "metal")


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    birthdate: str  # "MM/DD/YYYY" format string
    name: str


@dataclass(frozen=True)
class BirthFacts:
    """Parsed birthdate with defaults already substituted."""

    month: int
    day: int
    year: int


@dataclass(frozen=True)
class ElementProfile:
    """Five-axis elemental scores, each in [20, 100].

    Totals 180 when the name starts with a Latin letter (after folding
    diacritics) and 170 otherwise, since no letter bonus is awarded.
    """

    fire: int
    water: int
    wood: int
    earth: int
    metal: int

    def score(self, axis: str) -> int:
        """Score for an axis name. Unknown axes score 0."""
        if axis not in AXES:
            return 0
        return getattr(self, axis)

    def items(self) -> Iterator[tuple[str, int]]:
        for axis in AXES:
            yield axis, getattr(self, axis)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    @property
    def total(self) -> int:
        return sum(score for _, score in self.items())


@dataclass(frozen=True)
class Archetype:
    """Named classification derived from the two highest-scoring axes."""

    name: str  # "Tidal Sage", "Solar Nomad", ...
    primary: str  # Highest-scoring axis
    secondary: str  # Second-highest axis, always distinct from primary


@dataclass(frozen=True)
class Reading:
    """Fully computed deterministic result of one submission.

    The sole input to the narrative orchestrator and the renderers.
    """

    query: QueryInput
    facts: BirthFacts
    profile: ElementProfile
    archetype: Archetype
    season: str  # "winter" | "spring" | "summer" | "autumn"


@dataclass(frozen=True)
class Talismans:
    color: str
    item: str
    mantra: str


@dataclass(frozen=True)
class NarrativeResult:
    """Structured flavor text returned by the narrative service.

    Contents are opaque; only presence and type are validated.
    """

    opening: str
    birth_imagery: str
    soul_city: str
    complementary_souls: str
    talismans: Talismans
    ps: str
    element: str
    color: str  # Hex code used for the background glow


@dataclass(frozen=True)
class BriefNarrative:
    """Minimal narrative variant (single description + vibe tag)."""

    element: str
    color: str
    description: str
    vibe: str


@dataclass(frozen=True)
class ArchetypeAssets:
    """Character image pair shown next to an archetype."""

    front: str  # Front-facing image path
    side: str  # Side-facing image path
