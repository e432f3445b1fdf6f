"""
Visual debugging for the monotone sweep.

SweepPlotter can be passed as the on_step hook of triangulate_polygon() to
draw the edge set after sweep events:

    >>> plotter = SweepPlotter(stop_at=5)
    >>> triangulate_polygon(graph, on_step=plotter)
    >>> plotter.save('/tmp/sweep_step5.png')

Edges are coloured by piece id, active edges are drawn thick, diagonals are
dashed, and a vertical line marks the sweep position.
"""

from __future__ import annotations
from typing import Optional

import matplotlib
import matplotlib.pyplot as plt

from .monotone import NO_PIECE, MonotoneDecomposer
from .planar_graph import PlanarGraph
from .triangulate import TriangulationResult, triangulate_polygon


UNASSIGNED_COLOR = 'lightgray'


class SweepPlotter:
    """Step hook that renders the decomposer state with matplotlib."""

    def __init__(self, ax=None, stop_at: Optional[int] = None, cmap: str = 'tab10'):
        """
        Args:
            ax: Axes to draw into; a new figure is created when None
            stop_at: Only draw this step index (every step when None)
            cmap: Colormap used for piece ids
        """
        if ax is None:
            _, ax = plt.subplots(figsize=(8, 8))
        self.ax = ax
        self.stop_at = stop_at
        self.cmap = matplotlib.colormaps[cmap]
        self.steps_drawn: list[int] = []

    def __call__(self, decomposer: MonotoneDecomposer, step_index: int) -> None:
        if self.stop_at is not None and step_index != self.stop_at:
            return
        self.draw(decomposer, step_index)

    def piece_color(self, piece: int):
        if piece == NO_PIECE:
            return UNASSIGNED_COLOR
        return self.cmap(piece % self.cmap.N)

    def draw(self, decomposer: MonotoneDecomposer, step_index: int) -> None:
        ax = self.ax
        ax.clear()

        active = set(decomposer.active_edges())
        diagonals = set(decomposer.diagonal_edges())

        for eid in range(len(decomposer.edges)):
            p1 = decomposer.edge_start(eid)
            p2 = decomposer.edge_end(eid)
            ax.plot(
                [p1[0], p2[0]], [p1[1], p2[1]],
                color=self.piece_color(decomposer.edge_piece_id(eid)),
                linewidth=3 if eid in active else 1.5,
                linestyle='--' if eid in diagonals else '-',
            )

        for vid, vtype in decomposer.vertex_types.items():
            x, y = decomposer.points[vid]
            ax.annotate(f"{vid}{vtype.value}", (x, y), textcoords='offset points',
                        xytext=(4, 4), fontsize=8)

        sweep_x = decomposer.sorted_verts[step_index].pos[0]
        ax.axvline(sweep_x, color='red', linewidth=0.8, linestyle=':')

        ax.set_title(f"Sweep step {step_index}: {decomposer.num_pieces} pieces")
        ax.set_aspect('equal')
        self.steps_drawn.append(step_index)

    def save(self, filepath: str, dpi: int = 150) -> None:
        self.ax.figure.savefig(filepath, dpi=dpi)


def plot_triangulation(
    graph: PlanarGraph,
    ax=None,
    clockwise: Optional[bool] = None
) -> TriangulationResult:
    """Triangulate a graph and draw the final sweep state with the triangles on top."""
    plotter = SweepPlotter(ax=ax)
    result = triangulate_polygon(graph, clockwise=clockwise, on_step=plotter)

    if result.triangles:
        xs = [p[0] for p in result.points]
        ys = [p[1] for p in result.points]
        plotter.ax.triplot(xs, ys, [list(t) for t in result.triangles],
                           color='gray', linewidth=0.5)
    return result
