"""SVG radar chart renderer.

Produces a self-contained SVG string for embedding via st.markdown() or
writing to disk. Uses viewBox="0 0 size size" in pixel units so the browser
handles scaling.

Coordinate system (matches radar.py):
  x ∈ [0, size]  left → right
  y ∈ [0, size]  top → bottom
"""

from __future__ import annotations

from collections.abc import Mapping
from html import escape

from elementalvibe.models import ElementProfile
from elementalvibe.radar import DEFAULT_SIZE, RadarLayout, build_radar_layout

_GRID_COLOR = "#ffffff"
_FILL_COLOR = "#4ecdc4"
_LABEL_SCORE_COLOR = "#ffffff"


def _points_attr(points: tuple[tuple[float, float], ...]) -> str:
    return " ".join(f"{x:.2f},{y:.2f}" for x, y in points)


def _dot_radius(dominant: bool) -> float:
    """Dominant axes get a larger dot."""
    return 6.0 if dominant else 4.0


def render_radar_svg_from_layout(layout: RadarLayout) -> str:
    """Draw a precomputed RadarLayout as an SVG document string."""
    cx, cy = layout.center

    # --- Grid rings + spokes ---
    ring_parts = [
        f'<polygon points="{_points_attr(ring)}" fill="none"'
        f' stroke="{_GRID_COLOR}" stroke-opacity="0.08" stroke-width="1"/>'
        for ring in layout.rings
    ]
    spoke_parts = [
        f'<line x1="{cx:.2f}" y1="{cy:.2f}" x2="{x:.2f}" y2="{y:.2f}"'
        f' stroke="{_GRID_COLOR}" stroke-opacity="0.12" stroke-width="1"/>'
        for x, y in layout.spokes
    ]

    # --- Data polygon ---
    polygon = (
        f'<polygon class="profile" points="{_points_attr(layout.polygon)}"'
        f' fill="{_FILL_COLOR}" fill-opacity="0.2"'
        f' stroke="{_FILL_COLOR}" stroke-width="2" stroke-linejoin="round"/>'
    )

    # --- Vertex dots ---
    # Dominant dots share one blur filter for the glow.
    dot_parts: list[str] = []
    for p in layout.points:
        r = _dot_radius(p.dominant)
        if p.dominant:
            dot_parts.append(
                f'<circle class="glow" cx="{p.x:.2f}" cy="{p.y:.2f}" r="{r * 2:.1f}"'
                f' fill="{p.color}" opacity="0.45" filter="url(#glow)"/>'
            )
        dot_parts.append(
            f'<circle class="dot" data-axis="{p.axis}" data-dominant="{str(p.dominant).lower()}"'
            f' cx="{p.x:.2f}" cy="{p.y:.2f}" r="{r:.1f}"'
            f' fill="{p.color}" stroke="#ffffff" stroke-width="1.5"/>'
        )

    # --- Labels: axis name above, score below ---
    label_parts: list[str] = []
    for p in layout.points:
        label_parts.append(
            f'<text x="{p.label_x:.2f}" y="{p.label_y - 7:.2f}" fill="{p.color}"'
            f' font-family="monospace" font-size="9" font-weight="bold"'
            f' text-anchor="middle" dominant-baseline="middle">{escape(p.axis.upper())}</text>'
        )
        label_parts.append(
            f'<text x="{p.label_x:.2f}" y="{p.label_y + 7:.2f}" fill="{_LABEL_SCORE_COLOR}"'
            f' fill-opacity="0.7" font-family="monospace" font-size="8"'
            f' text-anchor="middle" dominant-baseline="middle">{p.score}</text>'
        )

    grid_svg = "\n    ".join(ring_parts + spoke_parts)
    dots_svg = "\n    ".join(dot_parts)
    labels_svg = "\n    ".join(label_parts)

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{layout.size}" height="{layout.size}" viewBox="0 0 {layout.size} {layout.size}">
  <defs>
    <filter id="glow" x="-100%" y="-100%" width="300%" height="300%">
      <feGaussianBlur stdDeviation="3"/>
    </filter>
  </defs>
  <g id="grid">
    {grid_svg}
  </g>
  {polygon}
  <g id="dots">
    {dots_svg}
  </g>
  <g id="labels">
    {labels_svg}
  </g>
</svg>"""


def render_radar_svg(
    profile: ElementProfile | Mapping[str, int] | None,
    size: int = DEFAULT_SIZE,
) -> str:
    """Return an SVG radar chart for a profile.

    Args:
        profile: ElementProfile or axis → score mapping. Missing axes draw at 0.
        size: Square chart side in pixels.

    Returns:
        SVG document string.
    """
    return render_radar_svg_from_layout(build_radar_layout(profile, size=size))
