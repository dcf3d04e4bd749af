"""Warp sampler -- turn a freehand stroke into a fixed-resolution grid line.

Pipeline (per stroke):
    1. Classify orientation (classifier.classify_points)
    2. Index: half-up rounding of mean(across) / step, not clamped
    3. Sort points along the line direction (stable)
    4. Piecewise-linear interpolant along → across, clamped at both ends
    5. Resample at the ``divisions + 1`` cross-axis sampling positions

The resampled curve always has ``divisions + 1`` control points, however
many raw points the user drew, so the renderer treats every stored line
the same way.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import torch

from src.amsler_grid.classifier import classify_points
from src.amsler_grid.model import Axis, GridConfig, GridLine, Point
from src.utils import geometry

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (2.5 → 3, -2.5 → -2)."""
    return int(math.floor(value + 0.5))


def assign_index(points: torch.Tensor, axis: Axis, config: GridConfig) -> int:
    """Baseline index nearest to the stroke's mean cross-axis coordinate."""
    mean = geometry.axis_mean(points, axis.across)
    return round_half_up(mean / config.step(axis))


def build_interpolant(points: torch.Tensor, axis: Axis):
    """Return ``f(positions) -> across`` for a stroke classified as ``axis``.

    ``positions`` is a 1-D float64 tensor of coordinates along the line.
    """
    along_col = 1 if axis.along == "y" else 0
    across_col = 1 - along_col

    ordered = geometry.sort_along(points, axis.along)
    xp = ordered[:, along_col].contiguous()
    fp = ordered[:, across_col].contiguous()

    def interp(positions: torch.Tensor) -> torch.Tensor:
        return geometry.interp_clamped(xp, fp, positions)

    return interp


def resample(points: torch.Tensor, axis: Axis, config: GridConfig) -> tuple[Point, ...]:
    """Evaluate the stroke's interpolant at the grid's sampling positions."""
    positions = torch.tensor(config.sample_positions(axis), dtype=geometry.DTYPE)
    across = build_interpolant(points, axis)(positions)

    if axis is Axis.VERTICAL:
        pairs = zip(across.tolist(), positions.tolist())
    else:
        pairs = zip(positions.tolist(), across.tolist())
    return tuple(Point(float(x), float(y)) for x, y in pairs)


def sample_warp(stroke: Sequence[Point], config: GridConfig) -> Optional[GridLine]:
    """Integrate one stroke into a GridLine.

    Parameters
    ----------
    stroke : Sequence[Point]
        Raw stroke in drawing order
    config : GridConfig
        Grid geometry

    Returns
    -------
    GridLine or None
        None for an empty stroke (no-op, not an error).
    """
    if not stroke:
        logger.debug("Empty stroke, nothing to integrate")
        return None

    points = geometry.points_to_tensor(stroke)
    axis = classify_points(points)
    index = assign_index(points, axis, config)
    control_points = resample(points, axis, config)

    logger.debug(
        f"Sampled {len(stroke)} raw points into {axis.value} line {index} "
        f"({len(control_points)} control points)"
    )
    return GridLine(axis=axis, index=index, control_points=control_points)
