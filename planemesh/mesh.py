"""
Mesh containers.

Mesh is the reference sink that builders write into. MeshBuffer is a
preallocated set of numpy arrays that builders fill in place before handing
the data to a sink in one call.

Any object with set_buffers(), clear() and compute_normals() can act as a
sink.
"""

from dataclasses import dataclass, field
import math
from typing import Optional, Sequence

import numpy as np

from .config import FRONT_FACES
from .errors import BufferTooSmallError, MeshBufferError


Vertex3 = tuple[float, float, float]


def rewind_triangles(triangles: np.ndarray, front_face: str = "ccw") -> np.ndarray:
    """
    Reorder counter-clockwise triangles for a sink's front-face convention.

    Args:
        triangles: (M, 3) array of counter-clockwise vertex ids
        front_face: "ccw" returns a copy, "cw" swaps the last two columns

    Returns:
        New (M, 3) array.
    """
    if front_face not in FRONT_FACES:
        raise MeshBufferError(f"Unknown front face {front_face!r}, expected one of {FRONT_FACES}")
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if front_face == "cw":
        return triangles[:, [0, 2, 1]].copy()
    return triangles.copy()


@dataclass
class Mesh:
    """
    A 3D triangle mesh.

    Vertices are (x, y, z) tuples.
    Triangles are stored flat: three vertex indices per triangle.
    """
    vertices: list[Vertex3] = field(default_factory=list)
    triangles: list[int] = field(default_factory=list)
    uv: list[tuple[float, float]] = field(default_factory=list)
    normals: list[Vertex3] = field(default_factory=list)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles) // 3

    @property
    def faces(self) -> list[list[int]]:
        """Triangles as [a, b, c] lists."""
        t = self.triangles
        return [t[i:i + 3] for i in range(0, len(t), 3)]

    def clear(self):
        self.vertices = []
        self.triangles = []
        self.uv = []
        self.normals = []

    def set_buffers(
        self,
        vertices: Sequence,
        triangles: Sequence,
        uv: Optional[Sequence] = None,
        normals: Optional[Sequence] = None
    ):
        """
        Replace all mesh data.

        Triangles are dropped before the new vertices are assigned, so the
        mesh never holds indices into a vertex list they were not built for.

        Raises:
            MeshBufferError: if indices are out of range or the per-vertex
                arrays disagree in length.
        """
        self.triangles = []

        new_vertices = [tuple(float(c) for c in v) for v in vertices]
        new_triangles = [int(i) for i in np.asarray(triangles).ravel()]
        num_verts = len(new_vertices)

        if len(new_triangles) % 3 != 0:
            raise MeshBufferError(f"Triangle index count {len(new_triangles)} is not a multiple of 3")
        for i in new_triangles:
            if not 0 <= i < num_verts:
                raise MeshBufferError(f"Triangle index {i} out of range for {num_verts} vertices")

        new_uv = [tuple(float(c) for c in t) for t in uv] if uv is not None else []
        new_normals = [tuple(float(c) for c in n) for n in normals] if normals is not None else []
        if new_uv and len(new_uv) != num_verts:
            raise MeshBufferError(f"Got {len(new_uv)} UVs for {num_verts} vertices")
        if new_normals and len(new_normals) != num_verts:
            raise MeshBufferError(f"Got {len(new_normals)} normals for {num_verts} vertices")

        self.vertices = new_vertices
        self.uv = new_uv
        self.normals = new_normals
        self.triangles = new_triangles

    def compute_normals(self):
        """Compute per-vertex normals, weighting each face by its area."""
        sums = [[0.0, 0.0, 0.0] for _ in self.vertices]
        for v0i, v1i, v2i in self.faces:
            v0 = self.vertices[v0i]
            v1 = self.vertices[v1i]
            v2 = self.vertices[v2i]

            # Two edge vectors
            e1 = (v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2])
            e2 = (v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2])

            # Cross product (length is twice the face area)
            nx = e1[1] * e2[2] - e1[2] * e2[1]
            ny = e1[2] * e2[0] - e1[0] * e2[2]
            nz = e1[0] * e2[1] - e1[1] * e2[0]

            for vi in (v0i, v1i, v2i):
                sums[vi][0] += nx
                sums[vi][1] += ny
                sums[vi][2] += nz

        self.normals = []
        for nx, ny, nz in sums:
            length = math.sqrt(nx*nx + ny*ny + nz*nz)
            if length > 1e-10:
                self.normals.append((nx/length, ny/length, nz/length))
            else:
                self.normals.append((0.0, 0.0, 1.0))


class MeshBuffer:
    """
    Preallocated vertex, UV, normal and triangle arrays.

    Builders write into slices of the arrays and then call copy_to() once.
    """

    def __init__(self):
        self.vertices = np.zeros((0, 3))
        self.uv = np.zeros((0, 2))
        self.normals = np.zeros((0, 3))
        self.triangles = np.zeros((0, 3), dtype=np.int64)

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles)

    def allocate(self, num_verts: int, num_tris: int):
        """Size the arrays; existing data is kept when the sizes already match."""
        if num_verts < 0 or num_tris < 0:
            raise MeshBufferError(f"Cannot allocate {num_verts} vertices and {num_tris} triangles")
        if num_verts != self.num_vertices:
            self.vertices = np.zeros((num_verts, 3))
            self.uv = np.zeros((num_verts, 2))
            self.normals = np.zeros((num_verts, 3))
        if num_tris != self.num_triangles:
            self.triangles = np.zeros((num_tris, 3), dtype=np.int64)

    def require_capacity(self, num_verts: int, num_tris: int):
        """
        Raises:
            BufferTooSmallError: if fewer vertices or triangles are allocated
        """
        if num_verts > self.num_vertices:
            raise BufferTooSmallError(
                f"Need {num_verts} vertices but only {self.num_vertices} are allocated"
            )
        if num_tris > self.num_triangles:
            raise BufferTooSmallError(
                f"Need {num_tris} triangles but only {self.num_triangles} are allocated"
            )

    def set_all_normals(self, normal: Sequence[float]):
        self.normals[:] = normal

    def copy_to(self, sink, front_face: str = "ccw"):
        """Hand every array to a sink, rewinding triangles for its convention."""
        sink.set_buffers(
            vertices=self.vertices,
            triangles=rewind_triangles(self.triangles, front_face),
            uv=self.uv,
            normals=self.normals,
        )
