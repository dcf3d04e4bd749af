"""Orientation classifier -- which line family a stroke perturbs.

A stroke spanning more vertically than horizontally is read as a
distortion of a vertical grid line, and vice versa.  Ties (including a
single point, where both extents are zero) resolve to horizontal.
"""

from __future__ import annotations

from typing import Sequence

from src.amsler_grid.model import Axis, Point
from src.utils import geometry


def classify_points(points) -> Axis:
    """Classify an (N, 2) tensor of stroke points.  N must be >= 1."""
    dx, dy = geometry.bbox_extents(points)
    return Axis.VERTICAL if dx < dy else Axis.HORIZONTAL


def classify_stroke(stroke: Sequence[Point]) -> Axis:
    """Classify a non-empty stroke as VERTICAL (dx < dy) or HORIZONTAL.

    Raises
    ------
    ValueError
        If the stroke is empty; integration filters empty strokes first.
    """
    if not stroke:
        raise ValueError("cannot classify an empty stroke")
    return classify_points(geometry.points_to_tensor(stroke))
