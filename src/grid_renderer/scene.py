"""Scene composition -- grid state to an ordered list of draw operations.

Every draw action is an immutable, slotted dataclass.  ``compose_frame``
is a pure function of (GridConfig, DistortionStore, live stroke, view
mode, style); executing the resulting Frame is the raster backend's job.

Order
-----
1. ``Clear`` with the background color
2. For ``i`` in ``0..divisions``: vertical line ``i``, then horizontal line ``i``
3. ``FillCircle`` fixation marker at the canvas center
4. The in-progress stroke, if one is being drawn and has > 1 point

A line with a stored warp is drawn from its control points (reflected in
inverse mode), extended straight to the two canvas edges it runs between,
at the emphasised width.  Otherwise the straight baseline is drawn.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from src.amsler_grid.inverse import reflect_points
from src.amsler_grid.model import Axis, GridConfig, GridLine, Point
from src.amsler_grid.store import DistortionStore
from src.utils.validators import RenderStyleV1

RGB = tuple[int, int, int]

# ---------------------------------------------------------------------------
# Draw operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DrawOp(ABC):
    """Base class for all draw operations."""

    pass


@dataclass(frozen=True, slots=True)
class Clear(DrawOp):
    """Fill the whole canvas."""

    color: RGB


@dataclass(frozen=True, slots=True)
class DrawPolyline(DrawOp):
    """Open polyline.

    Parameters
    ----------
    points : tuple[tuple[float, float], ...]
        Vertices in canvas px, at least 2.
    role : ``"baseline"`` | ``"warp"`` | ``"live"``
        What the line depicts; the raster backend ignores it.
    """

    points: tuple[tuple[float, float], ...]
    color: RGB
    width: int
    role: Literal["baseline", "warp", "live"]

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError("Polyline requires at least 2 points")


@dataclass(frozen=True, slots=True)
class FillCircle(DrawOp):
    """Filled disc."""

    center: tuple[float, float]
    radius: float
    color: RGB


@dataclass(frozen=True, slots=True)
class Frame:
    """Everything needed to draw one view of the grid."""

    width: float
    height: float
    inverse: bool
    ops: tuple[DrawOp, ...]

    def polylines(self, role: Optional[str] = None) -> tuple[DrawPolyline, ...]:
        return tuple(
            op for op in self.ops
            if isinstance(op, DrawPolyline) and (role is None or op.role == role)
        )


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def _baseline_op(config: GridConfig, axis: Axis, index: int, style: RenderStyleV1) -> DrawPolyline:
    base = config.baseline(axis, index)
    if axis is Axis.VERTICAL:
        pts = ((base, 0.0), (base, config.height))
    else:
        pts = ((0.0, base), (config.width, base))
    return DrawPolyline(points=pts, color=style.line_color,
                        width=style.baseline_width, role="baseline")


def warp_polyline_points(
    line: GridLine,
    config: GridConfig,
    inverse: bool = False
) -> tuple[tuple[float, float], ...]:
    """Control points (reflected if ``inverse``) extended to the canvas edges."""
    curve = line.control_points
    if inverse:
        curve = reflect_points(curve, line.axis, config.baseline(line.axis, line.index))

    first, last = curve[0], curve[-1]
    if line.axis is Axis.VERTICAL:
        head, tail = (first.x, 0.0), (last.x, config.height)
    else:
        head, tail = (0.0, first.y), (config.width, last.y)
    return (head,) + tuple((p.x, p.y) for p in curve) + (tail,)


def _line_op(
    config: GridConfig,
    store: DistortionStore,
    axis: Axis,
    index: int,
    inverse: bool,
    style: RenderStyleV1
) -> DrawPolyline:
    line = store.find(axis, index)
    if line is None:
        return _baseline_op(config, axis, index, style)
    return DrawPolyline(points=warp_polyline_points(line, config, inverse),
                        color=style.line_color, width=style.warp_width, role="warp")


def marker_op(config: GridConfig, style: RenderStyleV1) -> FillCircle:
    """Central fixation dot."""
    radius = min(config.width, config.height) * style.marker_radius_ratio
    return FillCircle(center=(config.width / 2.0, config.height / 2.0),
                      radius=radius, color=style.marker_color)


def compose_frame(
    config: GridConfig,
    store: DistortionStore,
    live_stroke: Sequence[Point] = (),
    drawing: bool = False,
    inverse: bool = False,
    style: Optional[RenderStyleV1] = None
) -> Frame:
    """Project grid state into a Frame.  Does not mutate any input."""
    style = style or RenderStyleV1()

    ops: list[DrawOp] = [Clear(color=style.background)]
    for i in config.line_indices():
        ops.append(_line_op(config, store, Axis.VERTICAL, i, inverse, style))
        ops.append(_line_op(config, store, Axis.HORIZONTAL, i, inverse, style))

    ops.append(marker_op(config, style))

    if drawing and len(live_stroke) > 1:
        ops.append(DrawPolyline(points=tuple((p.x, p.y) for p in live_stroke),
                                color=style.live_color, width=style.live_width,
                                role="live"))

    return Frame(width=config.width, height=config.height,
                 inverse=inverse, ops=tuple(ops))
