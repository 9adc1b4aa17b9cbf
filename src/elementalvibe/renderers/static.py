"""Matplotlib static PNG radar renderer."""

from collections.abc import Mapping
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.patches import Polygon  # noqa: E402

from elementalvibe.models import ElementProfile  # noqa: E402
from elementalvibe.radar import DEFAULT_SIZE, build_radar_layout  # noqa: E402

_ROOT = Path(__file__).parent.parent.parent.parent
_BG = "#1a1a2e"
_FILL_COLOR = "#4ecdc4"


def render_static_radar(
    profile: ElementProfile | Mapping[str, int] | None,
    size: int = DEFAULT_SIZE,
    dpi: int = 100,
) -> Figure:
    """Render a profile as a static matplotlib radar chart.

    The axes are set up in pixel units with y pointing down, so the
    RadarLayout coordinates are used as-is.

    Args:
        profile: ElementProfile or axis → score mapping.
        size: Output image side in pixels.
        dpi: Figure resolution.

    Returns:
        matplotlib Figure object.
    """
    layout = build_radar_layout(profile, size=size)

    fig = plt.figure(figsize=(size / dpi, size / dpi), dpi=dpi)
    fig.patch.set_facecolor(_BG)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_facecolor(_BG)

    for ring in layout.rings:
        ax.add_patch(
            Polygon(np.array(ring), closed=True, fill=False, edgecolor="white", alpha=0.08, linewidth=1)
        )
    cx, cy = layout.center
    for x, y in layout.spokes:
        ax.plot([cx, x], [cy, y], color="white", alpha=0.12, linewidth=1)

    poly = np.array(layout.polygon)
    ax.add_patch(Polygon(poly, closed=True, facecolor=_FILL_COLOR, alpha=0.2, linewidth=0))
    ax.add_patch(
        Polygon(poly, closed=True, fill=False, edgecolor=_FILL_COLOR, linewidth=2, joinstyle="round")
    )

    for p in layout.points:
        if p.dominant:
            # Glow halo behind the dominant dots
            ax.scatter([p.x], [p.y], s=400, color=p.color, alpha=0.25, linewidths=0, zorder=3)
        ax.scatter(
            [p.x],
            [p.y],
            s=100 if p.dominant else 40,
            color=p.color,
            edgecolors="white",
            linewidths=1.5,
            zorder=4,
        )
        ax.text(
            p.label_x,
            p.label_y - 7,
            p.axis.upper(),
            color=p.color,
            fontsize=7,
            fontweight="bold",
            family="monospace",
            ha="center",
            va="center",
        )
        ax.text(
            p.label_x,
            p.label_y + 7,
            str(p.score),
            color="white",
            alpha=0.7,
            fontsize=6,
            family="monospace",
            ha="center",
            va="center",
        )

    ax.set_xlim(0, size)
    ax.set_ylim(size, 0)
    ax.axis("off")

    return fig


def save_static_radar(
    profile: ElementProfile | Mapping[str, int] | None,
    output_path: Path | None = None,
    size: int = DEFAULT_SIZE,
) -> Path:
    """Save a radar chart as a PNG file.

    Args:
        profile: ElementProfile or axis → score mapping.
        output_path: Destination path. Auto-generated under results/ if None.
        size: Output image side in pixels.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        scores = build_radar_layout(profile, size=size).points
        filename = "radar__" + "_".join(f"{p.axis}{p.score}" for p in scores) + ".png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_radar(profile, size=size)
    fig.savefig(output_path, facecolor=_BG)
    plt.close(fig)
    return output_path
