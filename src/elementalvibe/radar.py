"""Radar projection geometry — polar layout of a five-axis profile in pixel space.

Renderers draw from a RadarLayout; none of them recompute angles or radii.

Coordinate system:
  origin top-left, x to the right, y downward (screen/SVG convention)
  angles in degrees, 0° = +x, positive = clockwise on screen
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from elementalvibe.compute import dominant_axes
from elementalvibe.models import AXES, ElementProfile

DEFAULT_SIZE = 320
DEFAULT_PADDING = 55  # Room for labels
DEFAULT_RINGS = 5
LABEL_OFFSET = 28  # Label distance beyond the outer ring
SCORE_SCALE = 100  # Score mapped to the outer ring

# Drawing order around the pentagon (clockwise from the top)
AXIS_ANGLES: dict[str, float] = {
    "fire": -90.0,
    "wood": -18.0,
    "water": 54.0,
    "metal": 126.0,
    "earth": 198.0,
}

AXIS_COLORS: dict[str, str] = {
    "fire": "#ff6b6b",
    "wood": "#95e1d3",
    "water": "#4ecdc4",
    "metal": "#e0e0e0",
    "earth": "#c7956d",
}


@dataclass(frozen=True)
class RadarPoint:
    """A single profile vertex with its label anchor."""

    axis: str
    score: int
    angle_deg: float
    x: float
    y: float
    label_x: float
    label_y: float
    color: str
    dominant: bool  # One of the two highest-scoring axes


@dataclass(frozen=True)
class RadarLayout:
    """Everything a renderer needs to draw the radar."""

    size: int
    center: tuple[float, float]
    max_radius: float
    rings: tuple[tuple[tuple[float, float], ...], ...]  # Grid pentagons, inner → outer
    spokes: tuple[tuple[float, float], ...]  # Spoke end points at max_radius
    points: tuple[RadarPoint, ...]  # In AXIS_ANGLES order
    dominant: tuple[str, str]  # (primary, secondary)

    @property
    def polygon(self) -> tuple[tuple[float, float], ...]:
        return tuple((p.x, p.y) for p in self.points)


def polar_point(
    center: tuple[float, float], angle_deg: float, radius: float
) -> tuple[float, float]:
    """Project (angle, radius) around center into pixel coordinates."""
    theta = math.radians(angle_deg)
    return center[0] + radius * math.cos(theta), center[1] + radius * math.sin(theta)


def score_radius(score: float, max_radius: float) -> float:
    """Linear score → radius map. Out-of-range scores follow the same line."""
    return score / SCORE_SCALE * max_radius


def _score_of(profile: ElementProfile | Mapping[str, int] | None, axis: str) -> int:
    if profile is None:
        return 0
    if isinstance(profile, ElementProfile):
        return profile.score(axis)
    value = profile.get(axis)
    return value if isinstance(value, (int, float)) else 0


def _normalized(profile: ElementProfile | Mapping[str, int] | None) -> dict[str, int]:
    return {axis: _score_of(profile, axis) for axis in AXES}


def build_radar_layout(
    profile: ElementProfile | Mapping[str, int] | None,
    size: int = DEFAULT_SIZE,
    padding: int = DEFAULT_PADDING,
    rings: int = DEFAULT_RINGS,
) -> RadarLayout:
    """Compute the radar geometry for a profile.

    Missing axes score 0; the function never raises for malformed profiles.

    Args:
        profile: ElementProfile or a mapping of axis → score.
        size: Square drawing surface side in pixels.
        padding: Margin reserved for labels on every side.
        rings: Number of concentric grid pentagons.

    Returns:
        RadarLayout in pixel coordinates.
    """
    scores = _normalized(profile)
    center = (size / 2, size / 2)
    max_radius = max(0.0, (size - padding * 2) / 2)
    primary, secondary = dominant_axes(scores)

    ring_shapes = tuple(
        tuple(
            polar_point(center, angle, max_radius * level / rings)
            for angle in AXIS_ANGLES.values()
        )
        for level in range(1, rings + 1)
    )
    spokes = tuple(polar_point(center, angle, max_radius) for angle in AXIS_ANGLES.values())

    points: list[RadarPoint] = []
    for axis, angle in AXIS_ANGLES.items():
        score = scores[axis]
        x, y = polar_point(center, angle, score_radius(score, max_radius))
        label_x, label_y = polar_point(center, angle, max_radius + LABEL_OFFSET)
        points.append(
            RadarPoint(
                axis=axis,
                score=score,
                angle_deg=angle,
                x=x,
                y=y,
                label_x=label_x,
                label_y=label_y,
                color=AXIS_COLORS[axis],
                dominant=axis in (primary, secondary),
            )
        )

    return RadarLayout(
        size=size,
        center=center,
        max_radius=max_radius,
        rings=ring_shapes,
        spokes=spokes,
        points=tuple(points),
        dominant=(primary, secondary),
    )
