"""
Ribbon builders for polylines.

build_stroke() turns a polyline into a flat ribbon of constant width in the
XY plane. build_belt_mesh() extrudes a planar graph along Z into a vertical
wall, one quad per edge.
"""

from __future__ import annotations
import logging
import math
from typing import Optional, Sequence

from .config import GeometryConfig, resolve_config
from .errors import GeometryError, InvalidPolygonError
from .geometry import Point, add, dot, length, normalized, perp_ccw, scale, sub
from .mesh import MeshBuffer
from .planar_graph import PlanarGraph


logger = logging.getLogger(__name__)


def _joint_offset(
    d_in: Optional[Point],
    d_out: Optional[Point],
    radius: float,
    miter: bool,
    miter_min_cos: float
) -> Point:
    """
    Offset from a control point to the left edge of the ribbon.

    The right edge sits at the negated offset. At interior joints the offset
    runs along the bisector of the two segment normals; with miter enabled
    it is stretched by 1 / cos(theta / 2) so both edges stay parallel to
    their segments at distance radius.
    """
    if d_in is None:
        return scale(perp_ccw(d_out), radius)
    if d_out is None:
        return scale(perp_ccw(d_in), radius)

    n0 = perp_ccw(d_in)
    n1 = perp_ccw(d_out)
    diag = normalized(add(n0, n1))
    if diag == (0.0, 0.0):
        # Path doubles back on itself
        diag = n0

    if not miter:
        return scale(diag, radius)

    half_angle = math.acos(max(-1.0, min(1.0, dot(n0, n1)))) / 2
    cos_half = math.cos(half_angle)
    if cos_half < miter_min_cos:
        return scale(diag, radius)
    return scale(diag, radius / cos_half)


def build_stroke(
    ctrl_pts: Sequence[Point],
    width: float,
    buffer: MeshBuffer,
    tex_vs: Optional[Sequence[float]] = None,
    first_ctrl: int = 0,
    last_ctrl: Optional[int] = None,
    is_loop: bool = False,
    first_vert: int = 0,
    first_tri: int = 0,
    miter: bool = True,
    config: Optional[GeometryConfig] = None
) -> tuple[int, int]:
    """
    Write a ribbon along ctrl_pts[first_ctrl..last_ctrl] into a buffer.

    Control point i produces vertex first_vert + 2i on the left of the path
    (U = 0) and first_vert + 2i + 1 on the right (U = 1). V is tex_vs[ctrl]
    when given, otherwise the arclength from the first control point.
    Triangles are counter-clockwise and reference absolute buffer indices.

    Args:
        ctrl_pts: Polyline points
        width: Ribbon width
        buffer: Preallocated buffer; only the written ranges are touched
        tex_vs: Per-control-point V coordinate, indexed like ctrl_pts
        first_ctrl, last_ctrl: Inclusive control point range (default: all)
        is_loop: Join the last control point back to the first
        first_vert, first_tri: Where to start writing in the buffer
        miter: Stretch joint offsets to keep the ribbon width constant

    Returns:
        (vertices written, triangles written)

    Raises:
        InvalidPolygonError: fewer than two control points in range
        BufferTooSmallError: buffer cannot hold the output; nothing is written
    """
    config = resolve_config(config)
    if last_ctrl is None:
        last_ctrl = len(ctrl_pts) - 1

    num_ctrl = last_ctrl - first_ctrl + 1
    if num_ctrl < 2:
        raise InvalidPolygonError(f"A stroke needs at least 2 control points, got {max(num_ctrl, 0)}")
    if first_ctrl < 0 or last_ctrl >= len(ctrl_pts):
        raise GeometryError(
            f"Control range [{first_ctrl}, {last_ctrl}] outside {len(ctrl_pts)} points"
        )
    if tex_vs is not None and len(tex_vs) <= last_ctrl:
        raise GeometryError(f"Got {len(tex_vs)} V coordinates for control point {last_ctrl}")

    num_verts = 2 * num_ctrl
    num_tris = 2 * num_ctrl if is_loop else 2 * (num_ctrl - 1)
    buffer.require_capacity(first_vert + num_verts, first_tri + num_tris)

    radius = width / 2
    pts = [tuple(ctrl_pts[i]) for i in range(first_ctrl, last_ctrl + 1)]

    arclength = 0.0
    for i, p in enumerate(pts):
        if i > 0:
            prev_p = pts[i - 1]
        elif is_loop:
            prev_p = pts[-1]
        else:
            prev_p = None

        if i < num_ctrl - 1:
            next_p = pts[i + 1]
        elif is_loop:
            next_p = pts[0]
        else:
            next_p = None

        d_in = normalized(sub(p, prev_p)) if prev_p is not None else None
        d_out = normalized(sub(next_p, p)) if next_p is not None else None
        offset = _joint_offset(d_in, d_out, radius, miter, config.miter_min_cos)

        if i > 0:
            arclength += length(sub(p, pts[i - 1]))
        v_coord = tex_vs[first_ctrl + i] if tex_vs is not None else arclength

        left = first_vert + 2 * i
        buffer.vertices[left] = (p[0] + offset[0], p[1] + offset[1], 0.0)
        buffer.vertices[left + 1] = (p[0] - offset[0], p[1] - offset[1], 0.0)
        buffer.uv[left] = (0.0, v_coord)
        buffer.uv[left + 1] = (1.0, v_coord)
        buffer.normals[left] = (0.0, 0.0, 1.0)
        buffer.normals[left + 1] = (0.0, 0.0, 1.0)

    tri = first_tri
    for i in range(num_ctrl - 1):
        v = first_vert + 2 * i
        buffer.triangles[tri] = (v, v + 1, v + 2)
        buffer.triangles[tri + 1] = (v + 1, v + 3, v + 2)
        tri += 2

    if is_loop:
        v = first_vert + 2 * (num_ctrl - 1)
        buffer.triangles[tri] = (v, v + 1, first_vert)
        buffer.triangles[tri + 1] = (v + 1, first_vert + 1, first_vert)

    logger.debug("stroke: %d control points -> %d vertices, %d triangles",
                 num_ctrl, num_verts, num_tris)
    return num_verts, num_tris


def build_belt_mesh(
    graph: PlanarGraph,
    z_min: float,
    z_max: float,
    normal_pointing_right: bool,
    sink,
    config: Optional[GeometryConfig] = None
) -> None:
    """
    Extrude every edge of a graph into a vertical quad.

    Point i becomes vertex 2i at z_min and 2i + 1 at z_max. Faces point to
    the right of each directed edge when normal_pointing_right is set, to the
    left otherwise. Triangles are rewound to config.front_face. An empty
    graph clears the sink.
    """
    config = resolve_config(config)
    if graph.num_vertices == 0:
        sink.clear()
        return

    buffer = MeshBuffer()
    buffer.allocate(2 * graph.num_vertices, 2 * graph.num_edges)

    for i, (x, y) in enumerate(graph.pts):
        buffer.vertices[2 * i] = (x, y, z_min)
        buffer.vertices[2 * i + 1] = (x, y, z_max)
        buffer.uv[2 * i] = (0.0, 0.0)
        buffer.uv[2 * i + 1] = (0.0, 1.0)

    for e, (a, b) in enumerate(zip(graph.edge_a, graph.edge_b)):
        if normal_pointing_right:
            buffer.triangles[2 * e] = (2 * a, 2 * b, 2 * a + 1)
            buffer.triangles[2 * e + 1] = (2 * b, 2 * b + 1, 2 * a + 1)
        else:
            buffer.triangles[2 * e] = (2 * a, 2 * a + 1, 2 * b)
            buffer.triangles[2 * e + 1] = (2 * b, 2 * a + 1, 2 * b + 1)

    buffer.copy_to(sink, front_face=config.front_face)
    sink.compute_normals()
