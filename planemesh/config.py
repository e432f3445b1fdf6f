"""
Configuration for polygon meshing.

Defines numeric tolerances and output conventions shared by the
triangulation, reflection and stroke builders.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import GeometryError


# Winding conventions accepted by mesh sinks
FRONT_FACES = ("ccw", "cw")


@dataclass
class GeometryConfig:
    """
    Tolerances and output conventions for mesh generation.

    Attributes:
        reflect_tolerance: Vertices closer than this to a reflection line are
            treated as discarded and nudged off the line by the same amount
        miter_min_cos: Below this cos(theta/2) a stroke joint falls back to a
            plain offset instead of a secant miter
        front_face: Triangle winding expected by the mesh sink ("ccw" or "cw")
        uv_from_positions: Use XY positions as UVs for triangulated polygons
    """
    # Reflection
    reflect_tolerance: float = 1e-4

    # Strokes
    miter_min_cos: float = 1e-7

    # Output
    front_face: str = "ccw"
    uv_from_positions: bool = True

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.reflect_tolerance <= 0:
            errors.append(f"reflect_tolerance must be positive, got {self.reflect_tolerance}")
        if self.reflect_tolerance > 1e-1:
            errors.append(f"reflect_tolerance {self.reflect_tolerance} is excessive (max recommended: 0.1)")

        if not 0 < self.miter_min_cos < 1:
            errors.append(f"miter_min_cos must be in (0, 1), got {self.miter_min_cos}")

        if self.front_face not in FRONT_FACES:
            errors.append(f"front_face must be one of {FRONT_FACES}, got {self.front_face!r}")

        return errors


DEFAULT_CONFIG = GeometryConfig()


def resolve_config(config: Optional[GeometryConfig]) -> GeometryConfig:
    """
    Config a builder should run with: the defaults when None.

    Raises:
        GeometryError: listing every problem validate() reports.
    """
    if config is None:
        return DEFAULT_CONFIG
    errors = config.validate()
    if errors:
        raise GeometryError("Invalid geometry config: " + "; ".join(errors))
    return config
