"""Grid model -- value types and baseline geometry.

Every value here is an immutable, slotted dataclass.  Coordinates are
**canvas-local pixels** (top-left origin, +Y down).

Baselines
---------
A grid with ``divisions`` cells per axis has ``divisions + 1`` straight
lines per axis.  Vertical line ``i`` sits at ``x = i * step_x`` and
horizontal line ``i`` at ``y = i * step_y``.  The same positions, read
along the other axis, are the sampling positions a warped line is
resampled at.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Stroke = tuple["Point", ...]
"""A committed freehand stroke, in drawing order."""


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Point:
    """Canvas-local point in pixels."""

    x: float
    y: float


class Axis(enum.Enum):
    """Family of baseline grid lines a distortion belongs to."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"

    @property
    def along(self) -> str:
        """Coordinate that runs along a line of this family."""
        return "y" if self is Axis.VERTICAL else "x"

    @property
    def across(self) -> str:
        """Coordinate that is perturbed by a distortion of this family."""
        return "x" if self is Axis.VERTICAL else "y"


@dataclass(frozen=True, slots=True)
class GridLine:
    """A warped grid line produced by integrating one stroke.

    Parameters
    ----------
    axis : Axis
        Which line family was distorted.
    index : int
        Baseline index.  Not clamped: values outside ``0..divisions`` are
        kept as computed and never drawn.
    control_points : tuple[Point, ...]
        ``divisions + 1`` points; entry ``k`` lies on the k-th cross-axis
        sampling position.
    """

    axis: Axis
    index: int
    control_points: tuple[Point, ...]

    @property
    def key(self) -> tuple[Axis, int]:
        return (self.axis, self.index)


@dataclass(frozen=True, slots=True)
class GridConfig:
    """Canvas size and subdivision, fixed for a grid's lifetime.

    Parameters
    ----------
    width, height : float
        Canvas size in pixels.
    divisions : int
        Cells per axis; the grid has ``divisions + 1`` lines per axis.
    """

    width: float = 400.0
    height: float = 400.0
    divisions: int = 20

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"canvas size must be positive, got {self.width}x{self.height}"
            )
        if self.divisions < 1:
            raise ValueError(f"divisions must be >= 1, got {self.divisions}")

    @property
    def step_x(self) -> float:
        return self.width / self.divisions

    @property
    def step_y(self) -> float:
        return self.height / self.divisions

    def step(self, axis: Axis) -> float:
        """Spacing between neighbouring baselines of ``axis``."""
        return self.step_x if axis is Axis.VERTICAL else self.step_y

    def cross_step(self, axis: Axis) -> float:
        """Spacing of the sampling positions along a line of ``axis``."""
        return self.step_y if axis is Axis.VERTICAL else self.step_x

    def line_indices(self) -> range:
        """Indices of the drawable lines, ``0..divisions`` inclusive."""
        return range(self.divisions + 1)

    def baseline(self, axis: Axis, index: int) -> float:
        """Undistorted coordinate of line ``index`` (any integer)."""
        return index * self.step(axis)

    def baselines(self, axis: Axis) -> tuple[float, ...]:
        """All ``divisions + 1`` baseline coordinates for ``axis``."""
        return tuple(self.baseline(axis, i) for i in self.line_indices())

    def sample_positions(self, axis: Axis) -> tuple[float, ...]:
        """Positions along a line of ``axis`` where control points sit."""
        step = self.cross_step(axis)
        return tuple(k * step for k in self.line_indices())

    def in_range(self, index: int) -> bool:
        return 0 <= index <= self.divisions
