"""
Planar graph of points and directed edges.

A PlanarGraph holds vertex positions plus two parallel lists of vertex ids;
edge e runs from edge_a[e] to edge_b[e]. Graphs used for triangulation must be
manifold: every vertex is the tail of exactly one edge and the head of exactly
one edge. Several disjoint loops (an outer boundary plus holes) may share one
graph.

The clipping and reflection operators are used to author symmetric shapes,
e.g. by mirroring a wedge repeatedly:

    >>> wedge = PlanarGraph.from_loop([(0, 0), (2, 0), (0, 1)])
    >>> wedge.reflect((0, 0), (0, 1), keep_right=True)
    >>> wedge.num_vertices
    4
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Sequence

from .config import DEFAULT_CONFIG
from .errors import GeometryError, InvalidPolygonError
from .geometry import (
    Point, BoundingBox, dot, intersect_lines, normalized, perp_ccw,
    reflect_point, sub,
)


logger = logging.getLogger(__name__)


def _cut_line_frame(l0: Point, l1: Point, keep_right: bool) -> tuple[Point, Point]:
    """
    Orient a cut line so the kept half-space lies to its right.

    Returns:
        (origin, right_dir) where right_dir is the unit normal pointing into
        the kept half-space.
    """
    if not keep_right:
        l0, l1 = l1, l0
    line_dir = normalized(sub(l1, l0))
    if line_dir == (0.0, 0.0):
        raise GeometryError(f"Cut line endpoints coincide: {l0}")
    right = perp_ccw(line_dir)
    return l0, (-right[0], -right[1])


def _crossing_point(l0: Point, l1: Point, a: Point, b: Point) -> Point:
    point = intersect_lines(l0, l1, a, b)
    if point is None:
        raise GeometryError(f"Edge {a} -> {b} is parallel to the cut line")
    return point


def clip_by_line(
    points: list[Point],
    l0: Point,
    l1: Point,
    keep_right: bool
) -> list[Point]:
    """
    Clip a closed polygon against the half-plane on one side of a line.

    Args:
        points: Ordered vertices of a closed loop
        l0, l1: Two points on the cut line
        keep_right: Keep the half-plane right of l0 -> l1 (else the left one)

    Returns:
        The kept vertices plus the intersection points of crossing edges, in
        the original cyclic order. May be empty or degenerate when the polygon
        lies entirely on the discarded side.
    """
    n = len(points)
    if n == 0:
        return []

    origin, right_dir = _cut_line_frame(l0, l1, keep_right)

    kept = [dot(sub(p, origin), right_dir) > 0 for p in points]

    clipped = []
    for i in range(n):
        j = (i + 1) % n
        if kept[i]:
            clipped.append(points[i])
        if kept[i] != kept[j]:
            clipped.append(_crossing_point(l0, l1, points[i], points[j]))

    return clipped


@dataclass
class PlanarGraph:
    """
    Vertices plus directed edges.

    Attributes:
        pts: Vertex positions, indexed by vertex id
        edge_a: Tail vertex id of each edge
        edge_b: Head vertex id of each edge
    """
    pts: list[Point] = field(default_factory=list)
    edge_a: list[int] = field(default_factory=list)
    edge_b: list[int] = field(default_factory=list)

    @classmethod
    def from_loop(cls, points: list[Point]) -> PlanarGraph:
        """Build a single closed loop: edge i runs from point i to point i+1."""
        n = len(points)
        return cls(
            pts=[(float(p[0]), float(p[1])) for p in points],
            edge_a=list(range(n)),
            edge_b=[(i + 1) % n for i in range(n)],
        )

    @classmethod
    def from_loops(cls, outer: list[Point], holes: Sequence[list[Point]] = ()) -> PlanarGraph:
        """
        Build a polygon with holes.

        The holes must be wound opposite to the outer boundary so the
        interior stays on one consistent side of every edge.
        """
        graph = cls.from_loop(outer)
        for hole in holes:
            graph.append(cls.from_loop(hole))
        return graph

    @property
    def num_vertices(self) -> int:
        return len(self.pts)

    @property
    def num_edges(self) -> int:
        return len(self.edge_a)

    def edge_start(self, edge: int) -> Point:
        return self.pts[self.edge_a[edge]]

    def edge_end(self, edge: int) -> Point:
        return self.pts[self.edge_b[edge]]

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.pts)

    def duplicate(self) -> PlanarGraph:
        """Independent copy; mutating it never affects this graph."""
        return PlanarGraph(list(self.pts), list(self.edge_a), list(self.edge_b))

    def scale_points(self, s: float) -> None:
        """Uniformly scale all vertex positions about the origin."""
        self.pts = [(p[0] * s, p[1] * s) for p in self.pts]

    def append(self, other: PlanarGraph) -> None:
        """
        Structural union with another graph.

        The other graph's vertex ids are offset by this graph's vertex count.
        Nothing is merged or deduplicated.
        """
        offset = len(self.pts)
        self.pts.extend(other.pts)
        self.edge_a.extend(a + offset for a in other.edge_a)
        self.edge_b.extend(b + offset for b in other.edge_b)

    def contained_by(self, bbox: BoundingBox) -> bool:
        """True if every vertex lies inside bbox."""
        return all(bbox.contains(p[0], p[1]) for p in self.pts)

    def signed_area(self) -> float:
        """
        Signed area enclosed by the directed edges.

        Positive when the outer boundary runs counter-clockwise; holes wound
        the other way subtract their area.
        """
        area = 0.0
        for a, b in zip(self.edge_a, self.edge_b):
            pa = self.pts[a]
            pb = self.pts[b]
            area += pa[0] * pb[1] - pb[0] * pa[1]
        return area / 2.0

    def is_manifold(self) -> bool:
        """Every vertex has exactly one outgoing and one incoming edge."""
        n = len(self.pts)
        out_degree = [0] * n
        in_degree = [0] * n
        for a, b in zip(self.edge_a, self.edge_b):
            if not (0 <= a < n and 0 <= b < n) or a == b:
                return False
            out_degree[a] += 1
            in_degree[b] += 1
        return all(d == 1 for d in out_degree) and all(d == 1 for d in in_degree)

    def reflect(
        self,
        l0: Point,
        l1: Point,
        keep_right: bool,
        mirror_orientation: bool = False,
        tolerance: float = DEFAULT_CONFIG.reflect_tolerance
    ) -> None:
        """
        Keep one side of a line and glue its mirror image onto it.

        Vertices within tolerance of the line count as discarded and are
        pushed off the line toward the discarded side, so seam edges never
        collapse to zero length.

        Args:
            l0, l1: Two points on the mirror line
            keep_right: Keep the half-plane right of l0 -> l1 (else the left one)
            mirror_orientation: Mirrored edges keep their local direction.
                When False the mirrored half is traversed in reverse, so a
                loop that crosses the line becomes one consistently wound loop.
            tolerance: Seam snapping distance
        """
        origin, right_dir = _cut_line_frame(l0, l1, keep_right)
        pts = list(self.pts)
        npts = len(pts)

        kept = [False] * npts
        for i in range(npts):
            dist = dot(sub(pts[i], origin), right_dir)
            if abs(dist) < tolerance:
                pts[i] = (pts[i][0] - right_dir[0] * tolerance,
                          pts[i][1] - right_dir[1] * tolerance)
            else:
                kept[i] = dist > 0

        new_pts: list[Point] = []
        old_to_new = [-1] * npts
        old_to_ref = [-1] * npts
        for i in range(npts):
            if kept[i]:
                old_to_new[i] = len(new_pts)
                new_pts.append(pts[i])
                old_to_ref[i] = len(new_pts)
                new_pts.append(reflect_point(pts[i], l0, l1))

        new_a: list[int] = []
        new_b: list[int] = []

        def emit(a: int, b: int) -> None:
            new_a.append(a)
            new_b.append(b)

        for a, b in zip(self.edge_a, self.edge_b):
            if kept[a] and kept[b]:
                emit(old_to_new[a], old_to_new[b])
                if mirror_orientation:
                    emit(old_to_ref[a], old_to_ref[b])
                else:
                    emit(old_to_ref[b], old_to_ref[a])
            elif kept[a]:
                c = len(new_pts)
                new_pts.append(_crossing_point(l0, l1, pts[a], pts[b]))
                emit(old_to_new[a], c)
                if mirror_orientation:
                    emit(old_to_ref[a], c)
                else:
                    emit(c, old_to_ref[a])
            elif kept[b]:
                c = len(new_pts)
                new_pts.append(_crossing_point(l0, l1, pts[a], pts[b]))
                if mirror_orientation:
                    emit(c, old_to_ref[b])
                else:
                    emit(old_to_ref[b], c)
                emit(c, old_to_new[b])
            # Both discarded: edge dropped

        logger.debug(
            "reflect: %d -> %d vertices, %d -> %d edges",
            npts, len(new_pts), len(self.edge_a), len(new_a)
        )
        self.pts = new_pts
        self.edge_a = new_a
        self.edge_b = new_b

    def get_edge_loop(self, start_edge: int) -> list[int]:
        """
        Follow edges head-to-tail from start_edge until the loop closes.

        Requires the manifold invariant.

        Returns:
            Edge ids in loop order, starting with start_edge.

        Raises:
            InvalidPolygonError: if the walk dead-ends or never returns.
        """
        if not 0 <= start_edge < len(self.edge_a):
            raise InvalidPolygonError(f"Edge {start_edge} does not exist")

        outgoing: dict[int, int] = {}
        for e, a in enumerate(self.edge_a):
            outgoing.setdefault(a, e)

        loop = [start_edge]
        prev = start_edge
        for _ in range(len(self.edge_a)):
            if self.edge_b[prev] == self.edge_a[start_edge]:
                return loop
            nxt = outgoing.get(self.edge_b[prev])
            if nxt is None:
                raise InvalidPolygonError(
                    f"Vertex {self.edge_b[prev]} has no outgoing edge; loop from edge {start_edge} is open"
                )
            loop.append(nxt)
            prev = nxt

        raise InvalidPolygonError(f"Edge loop from edge {start_edge} does not close")

