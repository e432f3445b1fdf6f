"""Unit tests for polygon triangulation."""

import math
import random

import pytest

from conftest import regular_polygon_points, star_points

from planemesh.config import GeometryConfig
from planemesh.errors import GeometryError, InvalidPolygonError, SweepInvariantError
from planemesh.geometry import triangle_area
from planemesh.mesh import Mesh
from planemesh.monotone import sort_vertices
from planemesh.neighbors import VertexNeighborIndex
from planemesh.planar_graph import PlanarGraph
from planemesh.triangulate import (
    TriangleIndices,
    build_polygon_mesh,
    count_loops,
    extract_pieces,
    triangulate_monotone_piece,
    triangulate_polygon,
)


def assert_ccw(result):
    """Every triangle has strictly positive area."""
    for t in result.triangles:
        assert triangle_area(result.points[t.a], result.points[t.b], result.points[t.c]) > 0


class TestMonotonePiece:
    """Tests for the stack-based monotone triangulator."""

    def test_square(self):
        """Test convex quad gives two triangles."""
        pts = [(0, 0), (1, 0), (1, 1), (0, 1)]
        edges = [(0, 1), (1, 2), (2, 3), (3, 0)]
        tris = triangulate_monotone_piece(sort_vertices(pts), edges, [0, 1, 2, 3])
        assert len(tris) == 2
        assert all(isinstance(t, TriangleIndices) for t in tris)
        assert sum(triangle_area(pts[t.a], pts[t.b], pts[t.c]) for t in tris) == pytest.approx(1)

    def test_reflex_chain(self):
        """Test monotone piece with a reflex upper chain."""
        pts = [(0, 0), (4, 0), (3, 1), (2, 0.5), (1, 1)]
        edges = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0)]
        tris = triangulate_monotone_piece(sort_vertices(pts), edges, list(range(5)))
        assert len(tris) == 3
        areas = [triangle_area(pts[t.a], pts[t.b], pts[t.c]) for t in tris]
        assert all(a > 0 for a in areas)

    def test_subset_of_vertices(self):
        """Test vertices outside the piece are ignored."""
        pts = [(0, 0), (1, 0), (0, 1), (5, 5)]
        edges = [(0, 1), (1, 2), (2, 0)]
        tris = triangulate_monotone_piece(sort_vertices(pts), edges, [0, 1, 2])
        assert len(tris) == 1
        assert 3 not in tris[0]

    def test_too_small(self):
        """Test fewer than three vertices gives nothing."""
        pts = [(0, 0), (1, 0)]
        assert triangulate_monotone_piece(sort_vertices(pts), [(0, 1), (1, 0)], [0, 1]) == []


class TestExtractPieces:
    """Tests for piece extraction."""

    def test_single_piece(self):
        """Test one loop."""
        edges = [(0, 1), (1, 2), (2, 0)]
        assert extract_pieces(edges, [0, 0, 0], 3) == [[0, 1, 2]]

    def test_two_pieces_share_diagonal(self):
        """Test square split by a diagonal."""
        edges = [(0, 1), (1, 2), (2, 3), (3, 0), (0, 2), (2, 0)]
        piece_ids = [0, 0, 1, 1, 1, 0]
        pieces = extract_pieces(edges, piece_ids, 4)
        assert pieces == [[0, 1, 5], [2, 3, 4]]

    def test_unassigned_edge_raises(self):
        """Test edge without a piece is rejected."""
        edges = [(0, 1), (1, 2), (2, 0)]
        with pytest.raises(InvalidPolygonError):
            extract_pieces(edges, [-1, 0, 0], 3)

    def test_dead_end_raises(self):
        """Test broken piece loop is rejected."""
        edges = [(0, 1), (1, 2), (2, 0)]
        with pytest.raises(InvalidPolygonError):
            extract_pieces(edges, [0, 1, 0], 3)


class TestTriangulatePolygon:
    """Tests for the full pipeline."""

    def test_square(self, unit_square):
        """Test unit square."""
        result = triangulate_polygon(unit_square)
        assert len(result.triangles) == 2
        assert result.num_pieces == 1
        assert result.area == pytest.approx(1)
        assert_ccw(result)

    @pytest.mark.parametrize("n", [3, 5, 8, 17])
    def test_convex(self, n):
        """Test convex polygon gives V - 2 triangles."""
        graph = PlanarGraph.from_loop(regular_polygon_points(n))
        result = triangulate_polygon(graph)
        assert len(result.triangles) == n - 2
        assert result.num_pieces == 1
        assert result.area == pytest.approx(graph.signed_area())
        assert_ccw(result)

    def test_l_shape(self, l_shape):
        """Test split vertex."""
        result = triangulate_polygon(l_shape)
        assert result.num_pieces == 2
        assert len(result.triangles) == 4
        assert result.area == pytest.approx(3)
        assert_ccw(result)

    def test_notched_hexagon(self, notched_hexagon):
        """Test split and merge vertices together."""
        result = triangulate_polygon(notched_hexagon)
        assert result.num_pieces == 2
        assert len(result.pieces) == 2
        assert len(result.triangles) == 4
        assert result.area == pytest.approx(6)
        assert_ccw(result)

    def test_star(self, star):
        """Test star with a merge vertex."""
        result = triangulate_polygon(star)
        assert len(result.triangles) == star.num_vertices - 2
        assert result.area == pytest.approx(star.signed_area())
        assert_ccw(result)

    def test_hole(self, square_with_hole):
        """Test polygon with one hole gives V + 2H - 2 triangles."""
        result = triangulate_polygon(square_with_hole)
        assert len(result.triangles) == 8 + 2 - 2
        assert result.area == pytest.approx(14)
        assert_ccw(result)

    def test_piece_vertices(self, notched_hexagon):
        """Test pieces walk their own boundary."""
        result = triangulate_polygon(notched_hexagon)
        all_vertices = set()
        for piece in range(len(result.pieces)):
            vertices = result.piece_vertices(piece)
            assert len(vertices) == len(set(vertices))
            all_vertices.update(vertices)
        assert all_vertices == set(range(6))

    def test_clockwise_autodetect(self):
        """Test clockwise input still yields CCW triangles."""
        graph = PlanarGraph.from_loop(list(reversed(star_points())))
        result = triangulate_polygon(graph)
        assert len(result.triangles) == 8
        assert result.area == pytest.approx(-graph.signed_area())
        assert_ccw(result)

    def test_clockwise_explicit(self):
        """Test clockwise flag on a clockwise square."""
        graph = PlanarGraph.from_loop([(0, 0), (0, 1), (1, 1), (1, 0)])
        result = triangulate_polygon(graph, clockwise=True)
        assert len(result.triangles) == 2
        assert_ccw(result)

    def test_step_hook(self, l_shape):
        """Test hook is called for every sweep event."""
        steps = []
        triangulate_polygon(l_shape, on_step=lambda d, i: steps.append(i))
        assert steps == list(range(6))

    def test_too_few_vertices(self):
        """Test two points are rejected."""
        graph = PlanarGraph.from_loop([(0, 0), (1, 0)])
        with pytest.raises(InvalidPolygonError):
            triangulate_polygon(graph)

    def test_non_manifold(self):
        """Test open chain is rejected."""
        graph = PlanarGraph([(0, 0), (1, 0), (1, 1)], [0, 1], [1, 2])
        with pytest.raises(InvalidPolygonError):
            triangulate_polygon(graph)

    def test_zero_area(self):
        """Test bow-tie with cancelling lobes is rejected."""
        graph = PlanarGraph.from_loop([(0, 0), (2, 2), (2, 0), (0, 2)])
        with pytest.raises(InvalidPolygonError):
            triangulate_polygon(graph)

    def test_crossing_boundary_breaks_sweep(self):
        """Test a bow-tie whose left lobe runs backwards stops the sweep."""
        graph = PlanarGraph.from_loop([(0, 0), (4, 4), (4, 0), (0, 2)])
        with pytest.raises(SweepInvariantError) as exc_info:
            triangulate_polygon(graph)
        assert exc_info.value.vertex_id == 0

    @pytest.mark.parametrize("points", [
        [(4, 5), (1, 9), (5, 9), (2, 6), (4, 8)],
        [(0, 0), (4, 0), (4, 4), (2, -1), (0, 4)],
    ])
    def test_crossing_boundary_overlap(self, points):
        """Test crossing boundaries that pass the sweep are still rejected."""
        graph = PlanarGraph.from_loop(points)
        with pytest.raises(InvalidPolygonError, match="self-intersecting"):
            triangulate_polygon(graph)

    def test_several_holes(self):
        """Test V + 2H - 2 triangles with three holes."""
        graph = PlanarGraph.from_loops(
            [(0, 0), (10, 0), (10, 10), (0, 10)],
            [
                [(3, 2), (2, 3), (3, 4), (4, 3)],
                [(7, 5), (6, 6), (7, 7), (8, 6)],
                [(5, 8), (4.5, 8.5), (5, 9), (5.5, 8.5)],
            ]
        )
        result = triangulate_polygon(graph)
        assert len(result.triangles) == 16 + 2 * 3 - 2
        assert result.area == pytest.approx(95.5)
        assert_ccw(result)

    @pytest.mark.parametrize("seed", range(20))
    def test_random_star_shaped(self, seed):
        """Test random star-shaped polygons give V - 2 triangles covering their area."""
        rng = random.Random(seed)
        n = rng.randint(4, 40)
        # Jittered angles keep every gap below pi so the loop stays simple
        angles = [2 * math.pi * (k + 0.8 * rng.random()) / n for k in range(n)]
        points = [(r * math.cos(a), r * math.sin(a))
                  for a, r in zip(angles, (rng.uniform(1, 3) for _ in range(n)))]
        graph = PlanarGraph.from_loop(points)

        result = triangulate_polygon(graph)
        assert len(result.triangles) == n - 2
        assert result.area == pytest.approx(abs(graph.signed_area()))
        assert_ccw(result)

    def test_input_unchanged(self, notched_hexagon):
        """Test the input graph is not modified."""
        before = notched_hexagon.duplicate()
        triangulate_polygon(notched_hexagon)
        assert notched_hexagon == before


class TestBuildPolygonMesh:
    """Tests for writing triangulations into a sink."""

    def test_square_into_mesh(self, unit_square):
        """Test vertices, UVs and normals."""
        mesh = Mesh()
        build_polygon_mesh(unit_square, mesh)
        assert len(mesh.vertices) == 4
        assert mesh.num_triangles == 2
        assert mesh.vertices[2] == (1.0, 1.0, 0.0)
        assert mesh.uv[2] == (1.0, 1.0)
        assert all(n == (0.0, 0.0, 1.0) for n in mesh.normals)

    def test_faces_point_up(self, star):
        """Test recomputed normals agree with the written ones."""
        mesh = Mesh()
        build_polygon_mesh(star, mesh)
        mesh.compute_normals()
        for n in mesh.normals:
            assert n[2] == pytest.approx(1)

    def test_clockwise_front_face(self, unit_square):
        """Test cw sinks receive rewound triangles."""
        ccw = Mesh()
        cw = Mesh()
        build_polygon_mesh(unit_square, ccw)
        build_polygon_mesh(unit_square, cw, config=GeometryConfig(front_face="cw"))
        for (a, b, c), (a2, b2, c2) in zip(ccw.faces, cw.faces):
            assert (a2, b2, c2) == (a, c, b)

    def test_uv_disabled(self, unit_square):
        """Test UVs stay zero when not derived from positions."""
        mesh = Mesh()
        build_polygon_mesh(unit_square, mesh, config=GeometryConfig(uv_from_positions=False))
        assert all(t == (0.0, 0.0) for t in mesh.uv)

    def test_returns_result(self, l_shape):
        """Test the triangulation is returned."""
        mesh = Mesh()
        result = build_polygon_mesh(l_shape, mesh)
        assert len(result.triangles) == mesh.num_triangles

    def test_invalid_config(self, unit_square):
        """Test bad config is rejected before the sink is touched."""
        mesh = Mesh()
        with pytest.raises(GeometryError, match="front_face"):
            build_polygon_mesh(unit_square, mesh, config=GeometryConfig(front_face="up"))
        assert mesh.vertices == []


class TestCountLoops:
    """Tests for boundary loop counting."""

    def test_single_loop(self, star):
        """Test a plain polygon has one loop."""
        assert count_loops(VertexNeighborIndex.from_graph(star)) == 1

    def test_with_hole(self, square_with_hole):
        """Test outer boundary plus one hole."""
        assert count_loops(VertexNeighborIndex.from_graph(square_with_hole)) == 2
