"""Pytest fixtures for planemesh tests."""

import math
import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from planemesh.planar_graph import PlanarGraph


def star_points(num_tips: int = 5, outer: float = 2.0, inner: float = 1.0, phase: float = 0.1):
    """Counter-clockwise star; the phase keeps vertex x coordinates distinct."""
    pts = []
    for k in range(2 * num_tips):
        angle = phase + k * math.pi / num_tips
        r = outer if k % 2 == 0 else inner
        pts.append((r * math.cos(angle), r * math.sin(angle)))
    return pts


def regular_polygon_points(n: int, radius: float = 1.0, phase: float = 0.1):
    """Counter-clockwise regular polygon."""
    return [
        (radius * math.cos(phase + 2 * math.pi * k / n),
         radius * math.sin(phase + 2 * math.pi * k / n))
        for k in range(n)
    ]


@pytest.fixture
def unit_square() -> PlanarGraph:
    """Counter-clockwise unit square."""
    return PlanarGraph.from_loop([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def l_shape() -> PlanarGraph:
    """L-shaped hexagon with one reflex (split) vertex at (1, 1)."""
    return PlanarGraph.from_loop([(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)])


@pytest.fixture
def notched_hexagon() -> PlanarGraph:
    """Hexagon notched on both sides: a split vertex at (3, 1), a merge vertex at (1, 1)."""
    return PlanarGraph.from_loop([(0, 0), (4, 0), (3, 1), (4, 2), (0, 2), (1, 1)])


@pytest.fixture
def square_with_hole() -> PlanarGraph:
    """4x4 square with a clockwise diamond hole."""
    return PlanarGraph.from_loops(
        [(0, 0), (4, 0), (4, 4), (0, 4)],
        [[(2, 1), (1, 2), (2, 3), (3, 2)]]
    )


@pytest.fixture
def star() -> PlanarGraph:
    """Five-pointed star."""
    return PlanarGraph.from_loop(star_points())
