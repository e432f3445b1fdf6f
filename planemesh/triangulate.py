"""
Polygon triangulation.

Pipeline for a simple polygon (holes allowed) given as a PlanarGraph:

1. Build a VertexNeighborIndex so "next" always walks counter-clockwise.
2. Sort vertices by x then y.
3. Sweep with MonotoneDecomposer, which adds diagonals and tags every edge
   with the monotone piece it bounds.
4. Walk each piece's edge loop.
5. Triangulate each piece with the stack-based monotone triangulator.
6. Optionally write the result into a mesh sink.

Usage:
    >>> graph = PlanarGraph.from_loop([(0, 0), (1, 0), (1, 1), (0, 1)])
    >>> result = triangulate_polygon(graph)
    >>> len(result.triangles)
    2
"""

from __future__ import annotations
from collections import defaultdict
import math
from dataclasses import dataclass, field
import logging
from typing import NamedTuple, Optional

from .config import GeometryConfig, resolve_config
from .errors import InvalidPolygonError
from .geometry import Point, is_left_of_line, is_right_of_line, triangle_area
from .mesh import MeshBuffer
from .monotone import MonotoneDecomposer, SortedVertex, StepHook, sort_vertices, NO_PIECE
from .neighbors import VertexNeighborIndex
from .planar_graph import PlanarGraph


logger = logging.getLogger(__name__)


class TriangleIndices(NamedTuple):
    """Three vertex ids in counter-clockwise order."""
    a: int
    b: int
    c: int


@dataclass
class TriangulationResult:
    """
    Output of triangulate_polygon.

    Attributes:
        points: Vertex positions (same ids as the input graph)
        triangles: Counter-clockwise triangles over points
        num_pieces: Number of monotone pieces the sweep produced
        pieces: Edge ids of each piece boundary, in walk order
        edges: Boundary edges followed by the inserted diagonals
    """
    points: list[Point]
    triangles: list[TriangleIndices] = field(default_factory=list)
    num_pieces: int = 0
    pieces: list[list[int]] = field(default_factory=list)
    edges: list[tuple[int, int]] = field(default_factory=list)

    @property
    def area(self) -> float:
        """Sum of the (signed) triangle areas."""
        return sum(
            triangle_area(self.points[t.a], self.points[t.b], self.points[t.c])
            for t in self.triangles
        )

    def piece_vertices(self, piece: int) -> list[int]:
        """Vertex ids around one piece, in boundary order."""
        return [self.edges[eid][0] for eid in self.pieces[piece]]


# =============================================================================
# Monotone piece triangulation
# =============================================================================

def triangulate_monotone_piece(
    sorted_verts: list[SortedVertex],
    edges: list[tuple[int, int]],
    piece_edges: list[int]
) -> list[TriangleIndices]:
    """
    Triangulate one x-monotone piece.

    Args:
        sorted_verts: All vertices of the polygon in x-then-y order
        edges: Directed edges (boundary plus diagonals)
        piece_edges: Ids of the edges forming this piece, counter-clockwise

    Returns:
        Counter-clockwise triangles. Collinear candidates are skipped, so a
        degenerate piece may yield fewer than (vertex count - 2) triangles.
    """
    num_verts = len(sorted_verts)
    pos: list[Optional[Point]] = [None] * num_verts
    for sv in sorted_verts:
        pos[sv.vid] = sv.pos

    nbors = VertexNeighborIndex.from_edges(num_verts, edges, piece_edges)
    used = [sv.vid for sv in sorted_verts if nbors.is_used(sv.vid)]
    if len(used) < 3:
        return []

    triangles: list[TriangleIndices] = []

    def emit_ccw(a: int, b: int, c: int) -> bool:
        """Emit the triangle a, b, c wound counter-clockwise; False if collinear."""
        if is_right_of_line(pos[b], pos[c], pos[a]):
            triangles.append(TriangleIndices(a, c, b))
            return True
        if is_left_of_line(pos[b], pos[c], pos[a]):
            triangles.append(TriangleIndices(a, b, c))
            return True
        return False

    stack = [used[0], used[1]]

    for a in used[2:]:
        top = stack[-1]

        if nbors.are_neighbors(a, top):
            # Same chain: cut off convex corners while they face a
            on_bottom_chain = nbors.prev(a) == top
            while True:
                b = stack.pop()
                if not stack:
                    stack.extend((b, a))
                    break
                c = stack.pop()
                if on_bottom_chain:
                    convex = is_right_of_line(pos[b], pos[c], pos[a])
                else:
                    convex = is_left_of_line(pos[b], pos[c], pos[a])
                if convex:
                    emit_ccw(a, b, c)
                    stack.append(c)
                else:
                    stack.extend((c, b, a))
                    break
        else:
            # Opposite chain: a sees every vertex on the stack
            while len(stack) > 1:
                b = stack.pop()
                c = stack[-1]
                if not emit_ccw(a, b, c):
                    logger.warning("skipping degenerate triangle (%d, %d, %d)", a, b, c)
            stack = [top, a]

    if len(triangles) != len(used) - 2:
        logger.debug(
            "monotone piece with %d vertices produced %d triangles",
            len(used), len(triangles)
        )
    return triangles


# =============================================================================
# Piece extraction
# =============================================================================

def extract_pieces(
    edges: list[tuple[int, int]],
    piece_ids: list[int],
    num_boundary_edges: int
) -> list[list[int]]:
    """
    Group edges into closed loops, one per monotone piece.

    Each unvisited boundary edge seeds a walk that follows edges of the same
    piece head-to-tail until it returns to the seed's tail.

    Returns:
        Edge id lists, one per piece, in discovery order.

    Raises:
        InvalidPolygonError: if an edge has no piece or a walk dead-ends.
    """
    outgoing: dict[tuple[int, int], list[int]] = defaultdict(list)
    for eid, (a, _) in enumerate(edges):
        outgoing[(piece_ids[eid], a)].append(eid)

    visited = [False] * len(edges)
    pieces = []

    for seed in range(num_boundary_edges):
        if visited[seed]:
            continue
        piece = piece_ids[seed]
        if piece == NO_PIECE:
            raise InvalidPolygonError(f"Edge {seed} was not assigned to any piece")

        start_vertex = edges[seed][0]
        loop = [seed]
        visited[seed] = True
        current = seed

        while edges[current][1] != start_vertex:
            if len(loop) > len(edges):
                raise InvalidPolygonError(f"Piece {piece} does not close")
            head = edges[current][1]
            candidates = [eid for eid in outgoing[(piece, head)] if not visited[eid]]
            if not candidates:
                raise InvalidPolygonError(
                    f"Piece {piece} has no continuation from vertex {head}"
                )
            current = candidates[0]
            visited[current] = True
            loop.append(current)

        pieces.append(loop)

    return pieces


# =============================================================================
# Orchestration
# =============================================================================

def count_loops(nbors: VertexNeighborIndex) -> int:
    """Number of closed boundary loops (outer boundary plus holes)."""
    seen = [False] * len(nbors)
    loops = 0
    for start in range(len(nbors)):
        if seen[start]:
            continue
        loops += 1
        v = start
        while not seen[v]:
            seen[v] = True
            v = nbors.next(v)
    return loops


def _check_coverage(
    graph: PlanarGraph,
    nbors: VertexNeighborIndex,
    triangles: list[TriangleIndices]
) -> None:
    """
    Reject triangulations that do not tile the polygon exactly once.

    A crossing boundary can slip past every sweep check and still yield
    overlapping triangles whose summed area differs from the enclosed area.

    Raises:
        InvalidPolygonError: on too many triangles or an area mismatch.
    """
    num_holes = count_loops(nbors) - 1
    expected_tris = graph.num_vertices + 2 * num_holes - 2
    # Collinear candidates are skipped, so fewer triangles is allowed
    if len(triangles) > expected_tris:
        raise InvalidPolygonError(
            f"Got {len(triangles)} triangles, at most {expected_tris} fit a simple polygon; "
            "is the boundary self-intersecting?"
        )

    pts = graph.pts
    covered = sum(triangle_area(pts[t.a], pts[t.b], pts[t.c]) for t in triangles)
    enclosed = abs(graph.signed_area())
    if not math.isclose(covered, enclosed, rel_tol=1e-7, abs_tol=1e-12):
        raise InvalidPolygonError(
            f"Triangles cover area {covered:g} but the boundary encloses {enclosed:g}; "
            "is the boundary self-intersecting?"
        )

def triangulate_polygon(
    graph: PlanarGraph,
    clockwise: Optional[bool] = None,
    on_step: Optional[StepHook] = None
) -> TriangulationResult:
    """
    Triangulate a simple polygon, optionally with holes.

    Args:
        graph: Manifold graph; outer loop and holes wound oppositely
        clockwise: Winding of the outer loop. None detects it from the
            signed area.
        on_step: Debug hook called after every sweep event

    Returns:
        TriangulationResult with counter-clockwise triangles

    Raises:
        InvalidPolygonError: for too few vertices, non-manifold or zero-area
            input, or a self-intersecting boundary.
    """
    num_verts = graph.num_vertices
    if num_verts < 3:
        raise InvalidPolygonError(f"Polygon needs at least 3 vertices, got {num_verts}")
    if not graph.is_manifold():
        raise InvalidPolygonError("Every vertex needs exactly one incoming and one outgoing edge")

    if clockwise is None:
        area = graph.signed_area()
        if area == 0:
            raise InvalidPolygonError("Polygon has zero area")
        clockwise = area < 0

    nbors = VertexNeighborIndex.from_graph(graph, clockwise=clockwise)
    nbors.require_complete()

    # Edge v runs from v to its counter-clockwise successor
    edges = [(v, nbors.next(v)) for v in range(num_verts)]
    sorted_verts = sort_vertices(graph.pts)

    decomposer = MonotoneDecomposer(graph.pts, edges, sorted_verts, nbors)
    decomposer.run(on_step)

    piece_ids = [decomposer.edge_piece_id(eid) for eid in range(len(edges))]
    pieces = extract_pieces(edges, piece_ids, num_verts)

    triangles: list[TriangleIndices] = []
    for piece_edges in pieces:
        triangles.extend(triangulate_monotone_piece(sorted_verts, edges, piece_edges))

    _check_coverage(graph, nbors, triangles)

    logger.debug(
        "triangulated %d vertices: %d pieces, %d triangles",
        num_verts, len(pieces), len(triangles)
    )
    return TriangulationResult(
        points=list(graph.pts),
        triangles=triangles,
        num_pieces=decomposer.num_pieces,
        pieces=pieces,
        edges=edges,
    )


def build_polygon_mesh(
    graph: PlanarGraph,
    sink,
    clockwise: Optional[bool] = None,
    on_step: Optional[StepHook] = None,
    config: Optional[GeometryConfig] = None
) -> TriangulationResult:
    """
    Triangulate a polygon and write it into a mesh sink at z = 0.

    Triangles are rewound to config.front_face; normals face +Z.
    UVs are the XY positions when config.uv_from_positions is set.
    """
    config = resolve_config(config)
    result = triangulate_polygon(graph, clockwise=clockwise, on_step=on_step)

    buffer = MeshBuffer()
    buffer.allocate(len(result.points), len(result.triangles))
    for vid, (x, y) in enumerate(result.points):
        buffer.vertices[vid] = (x, y, 0.0)
        if config.uv_from_positions:
            buffer.uv[vid] = (x, y)
    for tid, tri in enumerate(result.triangles):
        buffer.triangles[tid] = tri
    buffer.set_all_normals((0.0, 0.0, 1.0))

    buffer.copy_to(sink, front_face=config.front_face)
    return result
