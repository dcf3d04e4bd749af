"""Inverse transform -- reflect a warp about its own baseline.

The reflected curve is the correction a compensating optic would need:
for a vertical line at ``base_x`` each control point maps
``(x, y) → (2·base_x − x, y)``; for a horizontal line at ``base_y``,
``(x, y) → (x, 2·base_y − y)``.  Applying it twice is the identity up to
float rounding.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from src.amsler_grid.model import Axis, GridConfig, GridLine, Point
from src.utils import geometry


def reflect_points(points: Sequence[Point], axis: Axis, base: float) -> tuple[Point, ...]:
    """Reflect control points about the baseline ``base`` of an ``axis`` line."""
    if not points:
        return ()
    reflected = geometry.reflect_about_line(
        geometry.points_to_tensor(points), axis.across, base
    )
    return tuple(Point(x, y) for x, y in geometry.tensor_to_pairs(reflected))


def invert_line(line: GridLine, config: GridConfig) -> GridLine:
    """Reflected copy of ``line`` about its undistorted position."""
    base = config.baseline(line.axis, line.index)
    return replace(
        line, control_points=reflect_points(line.control_points, line.axis, base)
    )
