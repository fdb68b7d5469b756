from __future__ import annotations

import datetime as dt
from importlib import metadata
from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.path as mpath
import matplotlib.pyplot as plt
from matplotlib.patches import FancyArrowPatch, FancyBboxPatch

from .graph import NODE_HEIGHT, NODE_WIDTH
from .portfolio_models import LayoutEdge, LayoutNode

# Canvas units per inch when sizing the figure.
UNITS_PER_INCH = 100.0
CANVAS_PAD = 40.0
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 10 * FONT_SCALE
LEVEL_FONT = 8 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
NODE_COLOR = "#dbe7f5"
CRITICAL_COLOR = "#e4572e"
EDGE_COLOR = "#3a3a3a"


def render_network(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    out_path: str,
    title: str,
    critical_path: Sequence[str] = (),
    year: int | None = None,
) -> None:
    """
    Render the layered dependency network as a static SVG to `out_path`.

    - Expects laid-out nodes and edges (see graph.layout_network).
    - Projects on the critical path, and edges between consecutive critical
      projects, are drawn in the highlight colour.
    """

    if not nodes:
        raise ValueError("nodes must not be empty")

    critical_nodes = set(critical_path)
    critical_edges = set(zip(critical_path, critical_path[1:]))

    x_min = min(node.x for node in nodes) - CANVAS_PAD
    x_max = max(node.x for node in nodes) + NODE_WIDTH + CANVAS_PAD
    y_min = min(node.y for node in nodes) - CANVAS_PAD
    y_max = max(node.y for node in nodes) + NODE_HEIGHT + CANVAS_PAD

    fig_width = max(6.0, (x_max - x_min) / UNITS_PER_INCH)
    fig_height = max(3.0, (y_max - y_min) / UNITS_PER_INCH)
    fig, ax = plt.subplots(figsize=(fig_width, fig_height))
    # Canvas coordinates grow downwards.
    ax.set_xlim(x_min, x_max)
    ax.set_ylim(y_max, y_min)
    ax.set_aspect("equal")
    ax.axis("off")

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT)
    footer_year = year or dt.date.today().year
    footer = f"© {footer_year} Portfolio dependencies v{_tool_version()}"
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    for edge in edges:
        _draw_edge(ax, edge, (edge.source_project_id, edge.target_project_id) in critical_edges)

    for node in nodes:
        critical = node.id in critical_nodes
        ax.add_patch(
            FancyBboxPatch(
                (node.x, node.y),
                NODE_WIDTH,
                NODE_HEIGHT,
                boxstyle="round,pad=0,rounding_size=12",
                facecolor=NODE_COLOR,
                edgecolor=CRITICAL_COLOR if critical else "black",
                linewidth=2.0 if critical else 0.8,
                zorder=3,
            )
        )
        ax.text(
            node.x + NODE_WIDTH / 2,
            node.y + NODE_HEIGHT / 2,
            node.name,
            ha="center",
            va="center",
            fontsize=LABEL_FONT,
            fontweight="bold" if critical else "normal",
            zorder=4,
        )
        ax.text(
            node.x + 8,
            node.y + 14,
            f"L{node.level}",
            ha="left",
            va="center",
            fontsize=LEVEL_FONT,
            alpha=0.7,
            zorder=4,
        )

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _draw_edge(ax: plt.Axes, edge: LayoutEdge, critical: bool) -> None:
    path = mpath.Path(
        [edge.start, edge.control_1, edge.control_2, edge.end],
        [mpath.Path.MOVETO, mpath.Path.CURVE4, mpath.Path.CURVE4, mpath.Path.CURVE4],
    )
    arrow = FancyArrowPatch(
        path=path,
        arrowstyle="-|>",
        mutation_scale=10.0,
        lw=2.0 if critical else 0.9,
        color=CRITICAL_COLOR if critical else EDGE_COLOR,
        shrinkA=0.5,
        shrinkB=0.5,
        zorder=2,
    )
    ax.add_patch(arrow)


def _tool_version() -> str:
    try:
        return metadata.version("portfolio-dependencies")
    except Exception:
        return "0.0.0"
