"""
Planar geometry primitives.

Points are plain (x, y) tuples. All orientation tests assume a standard
Y-up frame: "left of a directed line" means a counter-clockwise turn.
"""

from dataclasses import dataclass
from typing import Optional
import math


# Type aliases
Point = tuple[float, float]


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    @classmethod
    def from_points(cls, points: list[Point]) -> 'BoundingBox':
        if not points:
            return cls(0, 0, 0, 0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


# =============================================================================
# Vector helpers
# =============================================================================

def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def scale(a: Point, s: float) -> Point:
    return (a[0] * s, a[1] * s)


def dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def length(a: Point) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1])


def normalized(a: Point) -> Point:
    """Unit vector along a; the zero vector is returned unchanged."""
    n = length(a)
    if n < 1e-12:
        return (0.0, 0.0)
    return (a[0] / n, a[1] / n)


def perp_ccw(a: Point) -> Point:
    """Rotate a by +90 degrees."""
    return (-a[1], a[0])


def cross_product_2d(o: Point, a: Point, b: Point) -> float:
    """
    Cross product of vectors OA and OB.
    Positive = B is to the left of OA (CCW turn)
    Negative = B is to the right of OA (CW turn)
    """
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def is_left_of_line(p: Point, l0: Point, l1: Point) -> bool:
    """True if p lies strictly left of the directed line l0 -> l1."""
    return cross_product_2d(l0, l1, p) > 0


def is_right_of_line(p: Point, l0: Point, l1: Point) -> bool:
    """True if p lies strictly right of the directed line l0 -> l1."""
    return cross_product_2d(l0, l1, p) < 0


def compare_xy(a: Point, b: Point) -> int:
    """
    Total order used by the sweep: x ascending, ties broken by y ascending.

    Returns -1, 0 or 1.
    """
    if a[0] == b[0]:
        if a[1] == b[1]:
            return 0
        return -1 if a[1] < b[1] else 1
    return -1 if a[0] < b[0] else 1


def intersect_lines(l0: Point, l1: Point, p0: Point, p1: Point) -> Optional[Point]:
    """
    Intersection of the infinite lines l0-l1 and p0-p1.

    Returns None if the lines are parallel.
    """
    x1, y1 = l0
    x2, y2 = l1
    x3, y3 = p0
    x4, y4 = p1

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)

    if abs(denom) < 1e-12:
        return None  # Lines are parallel

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom

    return (x1 + t * (x2 - x1), y1 + t * (y2 - y1))


def reflect_point(p: Point, l0: Point, l1: Point) -> Point:
    """Mirror p across the line through l0 and l1."""
    d = normalized(sub(l1, l0))
    rel = sub(p, l0)
    # Foot of the perpendicular, then step the same distance past it
    foot = add(l0, scale(d, dot(rel, d)))
    return (2 * foot[0] - p[0], 2 * foot[1] - p[1])


def eval_line_at_x(a: Point, b: Point, x: float) -> float:
    """
    Y coordinate of the line through a and b at the given x.

    Vertical segments report their upper end.
    """
    dx = b[0] - a[0]
    if abs(dx) < 1e-12:
        return max(a[1], b[1])
    t = (x - a[0]) / dx
    return a[1] + t * (b[1] - a[1])


def signed_area(polygon: list[Point]) -> float:
    """
    Calculate signed area of polygon using shoelace formula.

    Returns:
        Positive for CCW winding, negative for CW winding.
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return area / 2.0


def triangle_area(a: Point, b: Point, c: Point) -> float:
    """Signed area of triangle abc (positive when CCW)."""
    return cross_product_2d(a, b, c) / 2.0
