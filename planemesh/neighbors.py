"""
Constant-time predecessor/successor lookup for polygon vertices.
"""

from __future__ import annotations
from typing import Iterable

from .errors import InvalidPolygonError
from .planar_graph import PlanarGraph


UNUSED = -1


class VertexNeighborIndex:
    """
    Maps each vertex id to its (prev, next) vertex along the boundary.

    Two flat slots per vertex; vertices not touched by any edge keep the
    UNUSED sentinel.
    """

    def __init__(self, num_vertices: int):
        self._data = [UNUSED] * (2 * num_vertices)

    @classmethod
    def from_graph(cls, graph: PlanarGraph, clockwise: bool = False) -> VertexNeighborIndex:
        """
        Index every edge of a graph.

        Args:
            graph: Source graph
            clockwise: The graph is wound clockwise; prev and next are swapped
                so walking "next" always runs counter-clockwise.
        """
        index = cls(graph.num_vertices)
        for a, b in zip(graph.edge_a, graph.edge_b):
            if clockwise:
                a, b = b, a
            index.set_prev(b, a)
            index.set_next(a, b)
        return index

    @classmethod
    def from_edges(
        cls,
        num_vertices: int,
        edges: list[tuple[int, int]],
        active_edges: Iterable[int]
    ) -> VertexNeighborIndex:
        """Index only the listed edges (one monotone piece)."""
        index = cls(num_vertices)
        for eid in active_edges:
            a, b = edges[eid]
            index.set_prev(b, a)
            index.set_next(a, b)
        return index

    def __len__(self) -> int:
        return len(self._data) // 2

    def prev(self, vid: int) -> int:
        return self._data[2 * vid]

    def next(self, vid: int) -> int:
        return self._data[2 * vid + 1]

    def set_prev(self, vid: int, nbor: int) -> None:
        self._data[2 * vid] = nbor

    def set_next(self, vid: int, nbor: int) -> None:
        self._data[2 * vid + 1] = nbor

    def is_used(self, vid: int) -> bool:
        return self._data[2 * vid] != UNUSED

    def are_neighbors(self, a: int, b: int) -> bool:
        return self.prev(a) == b or self.prev(b) == a

    def require_complete(self) -> None:
        """Raise unless every vertex has both a predecessor and a successor."""
        for vid in range(len(self)):
            if self.prev(vid) == UNUSED:
                raise InvalidPolygonError(f"Vertex {vid} has no predecessor")
            if self.next(vid) == UNUSED:
                raise InvalidPolygonError(f"Vertex {vid} has no successor")
