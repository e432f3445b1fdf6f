"""
Exceptions raised by planemesh.

Bad geometric input is reported with ValueError subclasses so callers can
catch either the specific error or ValueError.
"""


class GeometryError(ValueError):
    """Base class for all planemesh errors."""


class InvalidPolygonError(GeometryError):
    """Input polygon is too small, non-manifold or self-intersecting."""


class SweepInvariantError(InvalidPolygonError):
    """
    The plane sweep reached a state that cannot occur for a simple polygon.

    Raised instead of continuing with corrupt piece ids, typically because the
    input boundary crosses itself.
    """

    def __init__(self, message: str, vertex_id: int = -1):
        if vertex_id >= 0:
            message = f"{message} (at vertex {vertex_id})"
        super().__init__(message)
        self.vertex_id = vertex_id


class MeshBufferError(GeometryError):
    """Vertex/index buffers are inconsistent."""


class BufferTooSmallError(MeshBufferError):
    """A preallocated buffer cannot hold the requested geometry."""
