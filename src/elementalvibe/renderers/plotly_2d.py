"""Plotly 2D interactive radar renderer.

Draws the RadarLayout pixel coordinates directly (y axis reversed) instead
of go.Scatterpolar, so the pentagon orientation matches the SVG and PNG
renderers exactly. Hovering a vertex shows the axis and score.
"""

from collections.abc import Mapping

import plotly.graph_objects as go

from elementalvibe.models import ElementProfile
from elementalvibe.radar import DEFAULT_SIZE, build_radar_layout

_BG = "#1a1a2e"
_GRID_COLOR = "rgba(255, 255, 255, 0.12)"
_FILL_COLOR = "#4ecdc4"


def _closed(points: tuple[tuple[float, float], ...]) -> tuple[list[float], list[float]]:
    xs = [x for x, _ in points] + [points[0][0]]
    ys = [y for _, y in points] + [points[0][1]]
    return xs, ys


def render_plotly_radar(
    profile: ElementProfile | Mapping[str, int] | None,
    size: int = DEFAULT_SIZE,
) -> go.Figure:
    """Render a profile as a Plotly radar chart.

    Args:
        profile: ElementProfile or axis → score mapping.
        size: Figure side in pixels.

    Returns:
        Plotly Figure object.
    """
    layout = build_radar_layout(profile, size=size)
    cx, cy = layout.center

    # Grid rings + spokes: single trace using None separators
    gx: list[float | None] = []
    gy: list[float | None] = []
    for ring in layout.rings:
        xs, ys = _closed(ring)
        gx += xs + [None]
        gy += ys + [None]
    for x, y in layout.spokes:
        gx += [cx, x, None]
        gy += [cy, y, None]

    grid_trace = go.Scatter(
        x=gx,
        y=gy,
        mode="lines",
        line=dict(color=_GRID_COLOR, width=1),
        hoverinfo="skip",
        name="grid",
    )

    px, py = _closed(layout.polygon)
    profile_trace = go.Scatter(
        x=px,
        y=py,
        mode="lines",
        fill="toself",
        fillcolor="rgba(78, 205, 196, 0.2)",
        line=dict(color=_FILL_COLOR, width=2),
        hoverinfo="skip",
        name="profile",
    )

    dot_trace = go.Scatter(
        x=[p.x for p in layout.points],
        y=[p.y for p in layout.points],
        mode="markers",
        marker=dict(
            size=[12 if p.dominant else 8 for p in layout.points],
            color=[p.color for p in layout.points],
            line=dict(color="#ffffff", width=1.5),
        ),
        customdata=[[p.axis, p.score] for p in layout.points],
        hovertemplate="%{customdata[0]}: %{customdata[1]}<extra></extra>",
        name="axes",
    )

    label_trace = go.Scatter(
        x=[p.label_x for p in layout.points],
        y=[p.label_y for p in layout.points],
        mode="text",
        text=[f"<b>{p.axis.upper()}</b><br>{p.score}" for p in layout.points],
        textfont=dict(family="monospace", size=10, color=[p.color for p in layout.points]),
        hoverinfo="skip",
        name="labels",
    )

    fig = go.Figure(data=[grid_trace, profile_trace, dot_trace, label_trace])
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=size,
        height=size,
        xaxis=dict(visible=False, range=[0, size], fixedrange=True),
        yaxis=dict(visible=False, range=[size, 0], fixedrange=True),
    )
    return fig
