"""
planemesh - planar polygon triangulation and ribbon meshing.

The debug plotter lives in planemesh.debug_plot and needs matplotlib.
"""

from .config import GeometryConfig, DEFAULT_CONFIG
from .errors import (
    GeometryError, InvalidPolygonError, SweepInvariantError,
    MeshBufferError, BufferTooSmallError,
)
from .geometry import Point, BoundingBox
from .mesh import Mesh, MeshBuffer, rewind_triangles
from .monotone import MonotoneDecomposer, VertexType
from .neighbors import VertexNeighborIndex
from .planar_graph import PlanarGraph, clip_by_line
from .stroke import build_belt_mesh, build_stroke
from .triangulate import (
    TriangleIndices, TriangulationResult, build_polygon_mesh, triangulate_polygon,
)

__version__ = "0.1.0"
