"""
Monotone Decomposition Module

Splits a simple polygon (holes allowed) into pieces that are monotone along
the X axis, using a left-to-right plane sweep.

================================================================================
OVERVIEW
================================================================================

Vertices are processed in x-then-y order. Each vertex is classified by where
its two boundary neighbours sit in that order and by the turn direction:

  neighbours       turn    type
  both after       left    START
  both after       right   SPLIT
  both before      left    END
  both before      right   MERGE
  prev after       -       REGULAR_TOP      (upper chain, runs right to left)
  prev before      -       REGULAR_BOTTOM   (lower chain, runs left to right)

The boundary must be wound so the interior is on the left of every directed
edge (outer loop CCW, holes CW). Edges running right to left therefore have
the interior below them; only these "top" edges are ever active in the sweep
status, and each active edge carries a HelperRecord: the most recent vertex
seen directly below it.

================================================================================
PIECE IDS
================================================================================

Besides inserting diagonals, the sweep assigns every edge the id of the
monotone piece whose boundary it belongs to. Diagonals are inserted as two
anti-parallel edges: the left-to-right copy bounds the piece above it, the
right-to-left copy bounds the piece below it. After the sweep, the edges that
share a piece id form that piece's closed boundary, so pieces can be walked
without any point-in-polygon tests.

A MERGE helper remembers both piece ids (above and below the merge vertex)
because the diagonal that eventually resolves it separates those two pieces.

================================================================================
COMPLEXITY
================================================================================

find_edge_above() scans all active edges, so the sweep is O(n * k) for k
simultaneously active edges rather than O(n log n). A balanced sweep status
would fix this at the cost of ordering edges by their y at the sweep line.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, NamedTuple, Optional

from .errors import InvalidPolygonError, SweepInvariantError
from .geometry import Point, compare_xy, eval_line_at_x, is_left_of_line
from .neighbors import VertexNeighborIndex


logger = logging.getLogger(__name__)

NO_PIECE = -1


class VertexType(Enum):
    START = "S"
    END = "E"
    SPLIT = "P"
    MERGE = "M"
    REGULAR_TOP = "T"
    REGULAR_BOTTOM = "B"


class SortedVertex(NamedTuple):
    """A vertex id with its position, ordered by x then y."""
    vid: int
    pos: Point


@dataclass
class HelperRecord:
    """Sweep bookkeeping attached to an active edge."""
    vid: int
    vertex_type: VertexType
    top_piece_id: int
    bot_piece_id: int

    @property
    def is_merge(self) -> bool:
        return self.vertex_type is VertexType.MERGE


def sort_vertices(points: list[Point]) -> list[SortedVertex]:
    """Vertices in sweep order: x ascending, ties broken by y ascending."""
    return sorted(
        (SortedVertex(vid, p) for vid, p in enumerate(points)),
        key=lambda sv: (sv.pos[0], sv.pos[1])
    )


def classify_vertex(pos: Point, prev_pos: Point, next_pos: Point) -> VertexType:
    """
    Classify a boundary vertex for the sweep.

    Assumes the interior lies left of prev -> pos -> next.
    """
    prev_cmp = compare_xy(prev_pos, pos)
    next_cmp = compare_xy(next_pos, pos)

    if prev_cmp == next_cmp:
        left_turn = is_left_of_line(next_pos, prev_pos, pos)
        if prev_cmp < 0:
            return VertexType.END if left_turn else VertexType.MERGE
        return VertexType.START if left_turn else VertexType.SPLIT

    if prev_cmp < 0:
        return VertexType.REGULAR_BOTTOM
    return VertexType.REGULAR_TOP


StepHook = Callable[["MonotoneDecomposer", int], None]


class MonotoneDecomposer:
    """
    Plane sweep that adds diagonals and piece ids for a monotone decomposition.

    Example:
        >>> nbors = VertexNeighborIndex.from_graph(graph)
        >>> edges = [(v, nbors.next(v)) for v in range(graph.num_vertices)]
        >>> decomposer = MonotoneDecomposer(graph.pts, edges, sort_vertices(graph.pts), nbors)
        >>> decomposer.run()
        >>> decomposer.num_pieces
    """

    def __init__(
        self,
        points: list[Point],
        edges: list[tuple[int, int]],
        sorted_verts: list[SortedVertex],
        nbors: VertexNeighborIndex
    ):
        """
        Prepare a sweep.

        Args:
            points: Vertex positions
            edges: Directed boundary edges (tail, head); diagonals are appended
                to this list in place
            sorted_verts: All vertices in sweep order
            nbors: Neighbour index consistent with edges
        """
        self.points = points
        self.edges = edges
        self.sorted_verts = sorted_verts
        self.nbors = nbors

        num_verts = len(points)
        num_edges = len(edges)

        self._prev_edge = [-1] * num_verts
        self._next_edge = [-1] * num_verts
        for eid, (a, b) in enumerate(edges):
            self._next_edge[a] = eid
            self._prev_edge[b] = eid

        for vid in range(num_verts):
            if self._next_edge[vid] == -1:
                raise InvalidPolygonError(f"Vertex {vid} has no outgoing edge")
            if self._prev_edge[vid] == -1:
                raise InvalidPolygonError(f"Vertex {vid} has no incoming edge")

        # Indexed by boundary edge id; diagonals never carry helpers
        self._helpers: list[Optional[HelperRecord]] = [None] * num_edges
        self._piece_ids = [NO_PIECE] * num_edges
        self._num_pieces = 0
        self._num_boundary_edges = num_edges
        self._current = 0

        self.vertex_types: dict[int, VertexType] = {}

        self._handlers = {
            VertexType.START: self._handle_start,
            VertexType.END: self._handle_end,
            VertexType.SPLIT: self._handle_split,
            VertexType.MERGE: self._handle_merge,
            VertexType.REGULAR_TOP: self._handle_regular_top,
            VertexType.REGULAR_BOTTOM: self._handle_regular_bottom,
        }

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def num_pieces(self) -> int:
        return self._num_pieces

    @property
    def num_steps(self) -> int:
        """Number of sweep events processed so far."""
        return self._current

    @property
    def done(self) -> bool:
        return self._current >= len(self.sorted_verts)

    def edge_piece_id(self, eid: int) -> int:
        return self._piece_ids[eid]

    def edge_start(self, eid: int) -> Point:
        return self.points[self.edges[eid][0]]

    def edge_end(self, eid: int) -> Point:
        return self.points[self.edges[eid][1]]

    def helper(self, eid: int) -> Optional[HelperRecord]:
        return self._helpers[eid]

    def active_edges(self) -> list[int]:
        """Edges currently in the sweep status."""
        return [eid for eid, h in enumerate(self._helpers) if h is not None]

    def diagonal_edges(self) -> list[int]:
        """Edges inserted by the sweep (both directions of every diagonal)."""
        return list(range(self._num_boundary_edges, len(self.edges)))

    def vertex_type(self, vid: int) -> VertexType:
        return classify_vertex(
            self.points[vid],
            self.points[self.nbors.prev(vid)],
            self.points[self.nbors.next(vid)]
        )

    def find_edge_above(self, p: Point) -> int:
        """
        Active edge with the smallest positive vertical gap above p.

        Returns:
            Edge id, or -1 if no active edge passes above p.
        """
        best_eid = -1
        best_dist = 0.0
        for eid, h in enumerate(self._helpers):
            if h is None:
                continue
            y = eval_line_at_x(self.edge_start(eid), self.edge_end(eid), p[0])
            if y > p[1]:
                dist = y - p[1]
                if best_eid == -1 or dist < best_dist:
                    best_eid = eid
                    best_dist = dist
        return best_eid

    # -------------------------------------------------------------------------
    # Sweep
    # -------------------------------------------------------------------------

    def step(self) -> bool:
        """
        Process the next vertex event.

        Returns:
            True if more events remain.
        """
        if self.done:
            return False

        vid = self.sorted_verts[self._current].vid
        vtype = self.vertex_type(vid)
        self.vertex_types[vid] = vtype

        logger.debug("sweep step %d: vertex %d is %s", self._current, vid, vtype.name)
        self._handlers[vtype](vid, self._prev_edge[vid], self._next_edge[vid])

        self._current += 1
        return not self.done

    def run(self, on_step: Optional[StepHook] = None) -> None:
        """
        Sweep all remaining vertices.

        Args:
            on_step: Called as on_step(decomposer, step_index) after every event
        """
        while not self.done:
            index = self._current
            self.step()
            if on_step is not None:
                on_step(self, index)

        logger.debug(
            "decomposed %d vertices into %d pieces with %d diagonals",
            len(self.points), self._num_pieces, len(self.diagonal_edges()) // 2
        )

    # -------------------------------------------------------------------------
    # Bookkeeping
    # -------------------------------------------------------------------------

    def _new_piece(self) -> int:
        pid = self._num_pieces
        self._num_pieces += 1
        return pid

    def _set_helper(self, eid: int, vid: int, vtype: VertexType, top_pid: int, bot_pid: int) -> None:
        self._helpers[eid] = HelperRecord(vid, vtype, top_pid, bot_pid)

    def _deactivate(self, eid: int) -> None:
        self._helpers[eid] = None

    def _add_diagonal(self, v1: int, v2: int, top_pid: int, bot_pid: int) -> None:
        """
        Insert v1 -> v2 and v2 -> v1.

        Top/bottom assume v1 -> v2 runs left to right.
        """
        self.edges.append((v1, v2))
        self.edges.append((v2, v1))
        self._piece_ids.append(top_pid)
        self._piece_ids.append(bot_pid)

    def _resolve_merge_helper(self, eid: int, vid: int, return_bottom: bool) -> int:
        """
        Connect vid to the helper of eid if that helper is a MERGE vertex.

        Returns:
            The piece id below (return_bottom) or above the inserted diagonal,
            or NO_PIECE if no diagonal was needed.
        """
        helper = self._helpers[eid]
        if helper is None or not helper.is_merge:
            return NO_PIECE

        self._require(helper.top_piece_id != NO_PIECE and helper.bot_piece_id != NO_PIECE,
                      f"merge helper of edge {eid} has no piece ids", vid)
        self._add_diagonal(helper.vid, vid, helper.top_piece_id, helper.bot_piece_id)
        return helper.bot_piece_id if return_bottom else helper.top_piece_id

    def _edge_above(self, vid: int) -> int:
        above = self.find_edge_above(self.points[vid])
        self._require(above != -1, "no active edge above vertex", vid)
        return above

    @staticmethod
    def _require(condition: bool, message: str, vid: int) -> None:
        if not condition:
            raise SweepInvariantError(f"Sweep invariant violated: {message}; is the polygon self-intersecting?", vid)

    # -------------------------------------------------------------------------
    # Event handlers (e1 = incoming edge, e2 = outgoing edge)
    # -------------------------------------------------------------------------

    def _handle_start(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] == NO_PIECE and pid[e2] == NO_PIECE, "start edges already assigned", vid)

        piece = self._new_piece()
        self._set_helper(e1, vid, VertexType.START, piece, piece)
        pid[e1] = piece
        pid[e2] = piece

    def _handle_end(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] != NO_PIECE and pid[e2] != NO_PIECE, "end edges unassigned", vid)
        # e1 runs left to right, so it is never in the sweep status
        self._require(self._helpers[e1] is None, "lower edge of end vertex is active", vid)

        self._resolve_merge_helper(e2, vid, return_bottom=False)
        self._deactivate(e2)

    def _handle_split(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] == NO_PIECE and pid[e2] == NO_PIECE, "split edges already assigned", vid)

        above = self._edge_above(vid)
        helper = self._helpers[above]
        self._require(helper.top_piece_id != NO_PIECE and helper.bot_piece_id != NO_PIECE,
                      f"helper of edge {above} has no piece ids", vid)

        if helper.is_merge:
            # The diagonal separates the two pieces the merge vertex joined
            self._require(helper.top_piece_id != helper.bot_piece_id, "merge helper with a single piece", vid)
            self._add_diagonal(helper.vid, vid, helper.top_piece_id, helper.bot_piece_id)
            pid[e1] = helper.bot_piece_id
            pid[e2] = helper.top_piece_id
            self._set_helper(above, vid, VertexType.SPLIT, helper.top_piece_id, helper.top_piece_id)
        elif self._prev_edge[helper.vid] == above:
            # Helper sits on the upper chain: the region above the diagonal is new
            self._require(
                helper.vertex_type in (VertexType.REGULAR_TOP, VertexType.START, VertexType.SPLIT),
                f"unexpected {helper.vertex_type.name} helper on upper chain", vid
            )
            piece = self._new_piece()
            self._add_diagonal(helper.vid, vid, piece, helper.bot_piece_id)
            pid[above] = piece
            pid[e1] = helper.bot_piece_id
            pid[e2] = piece
            self._set_helper(above, vid, VertexType.SPLIT, piece, piece)
        else:
            # Helper sits on a lower chain: the region below the diagonal is new
            self._require(
                helper.vertex_type in (VertexType.REGULAR_BOTTOM, VertexType.SPLIT),
                f"unexpected {helper.vertex_type.name} helper on lower chain", vid
            )
            piece = self._new_piece()
            self._add_diagonal(helper.vid, vid, helper.top_piece_id, piece)
            pid[self._next_edge[helper.vid]] = piece
            pid[e1] = piece
            pid[e2] = helper.top_piece_id
            self._set_helper(above, vid, VertexType.SPLIT, helper.top_piece_id, helper.top_piece_id)

        self._set_helper(e1, vid, VertexType.SPLIT, pid[e1], pid[e1])

    def _handle_merge(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] != NO_PIECE and pid[e2] != NO_PIECE, "merge edges unassigned", vid)
        self._require(pid[e1] != pid[e2], "merge vertex joins a piece to itself", vid)
        self._require(self._helpers[e1] is None, "lower edge of merge vertex is active", vid)

        # Side below the merge vertex
        bot_piece = self._resolve_merge_helper(e2, vid, return_bottom=True)
        self._deactivate(e2)
        if bot_piece == NO_PIECE:
            bot_piece = pid[e2]

        # Side above the merge vertex
        above = self._edge_above(vid)
        top_piece = self._resolve_merge_helper(above, vid, return_bottom=False)
        if top_piece == NO_PIECE:
            top_piece = pid[e1]

        self._set_helper(above, vid, VertexType.MERGE, top_piece, bot_piece)

    def _handle_regular_top(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] == NO_PIECE, "upper chain edge already assigned", vid)
        self._require(pid[e2] != NO_PIECE, "upper chain edge unassigned", vid)

        bot_piece = self._resolve_merge_helper(e2, vid, return_bottom=True)
        self._deactivate(e2)
        if bot_piece == NO_PIECE:
            bot_piece = pid[e2]

        pid[e1] = bot_piece
        self._set_helper(e1, vid, VertexType.REGULAR_TOP, bot_piece, bot_piece)

    def _handle_regular_bottom(self, vid: int, e1: int, e2: int) -> None:
        pid = self._piece_ids
        self._require(pid[e1] != NO_PIECE, "lower chain edge unassigned", vid)
        self._require(pid[e2] == NO_PIECE, "lower chain edge already assigned", vid)
        self._require(self._helpers[e1] is None and self._helpers[e2] is None,
                      "lower chain edge is active", vid)

        # Lower-chain vertices also become the helper of the edge above them,
        # otherwise a later MERGE diagonal could cross this chain.
        above = self._edge_above(vid)
        top_piece = self._resolve_merge_helper(above, vid, return_bottom=False)
        if top_piece == NO_PIECE:
            top_piece = pid[e1]

        pid[e2] = top_piece
        self._set_helper(above, vid, VertexType.REGULAR_BOTTOM, top_piece, top_piece)
