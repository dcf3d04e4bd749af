"""Raster backend -- execute a Frame onto an RGB numpy canvas with OpenCV.

Canvas layout: (H, W, 3) uint8, RGB channel order (convert with
cv2.cvtColor(..., cv2.COLOR_RGB2BGR) before cv2.imshow).  Canvas size is
the integer part of the frame's width/height.

Coordinates are drawn with a fixed-point ``shift`` so fractional
control points (e.g. 203.33 px) are not snapped to whole pixels.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from src.grid_renderer.scene import Clear, DrawPolyline, FillCircle, Frame
from src.utils import fs

logger = logging.getLogger(__name__)

SHIFT_BITS = 4
_SCALE = 1 << SHIFT_BITS

# Largest |px| whose fixed-point value still fits in int32
_MAX_PX = (2 ** 31 - 1) / _SCALE


def _fixed(points) -> np.ndarray:
    """Float px → int32 fixed-point vertices, shape (N, 1, 2)."""
    arr = np.clip(np.asarray(points, dtype=np.float64), -_MAX_PX, _MAX_PX) * _SCALE
    return np.round(arr).astype(np.int32).reshape(-1, 1, 2)


def new_canvas(frame: Frame) -> np.ndarray:
    w, h = int(frame.width), int(frame.height)
    return np.zeros((h, w, 3), dtype=np.uint8)


def draw_frame(
    frame: Frame,
    canvas: Optional[np.ndarray] = None,
    antialias: bool = True
) -> np.ndarray:
    """Rasterize ``frame``.

    Parameters
    ----------
    frame : Frame
        Draw operations from scene.compose_frame()
    canvas : np.ndarray, optional
        (H, W, 3) uint8 target, drawn in place; a new one is allocated if None
    antialias : bool
        cv2.LINE_AA when True, cv2.LINE_8 otherwise

    Returns
    -------
    np.ndarray
        The drawn canvas
    """
    if canvas is None:
        canvas = new_canvas(frame)
    line_type = cv2.LINE_AA if antialias else cv2.LINE_8

    for op in frame.ops:
        if isinstance(op, Clear):
            canvas[:] = op.color
        elif isinstance(op, DrawPolyline):
            cv2.polylines(canvas, [_fixed(op.points)], isClosed=False,
                          color=op.color, thickness=op.width,
                          lineType=line_type, shift=SHIFT_BITS)
        elif isinstance(op, FillCircle):
            cx, cy = _fixed([op.center])[0, 0]
            radius = int(_fixed([[op.radius, 0.0]])[0, 0, 0])
            cv2.circle(canvas, (int(cx), int(cy)), radius,
                       op.color, thickness=cv2.FILLED,
                       lineType=line_type, shift=SHIFT_BITS)
        else:
            raise TypeError(f"Unsupported draw operation: {type(op).__name__}")

    return canvas


def save_frame(
    frame: Frame,
    path: Union[str, Path],
    antialias: bool = True
) -> np.ndarray:
    """Rasterize ``frame`` and write it atomically (format from extension)."""
    canvas = draw_frame(frame, antialias=antialias)
    fs.atomic_save_image(canvas, path)
    logger.info(f"Saved {'undistorted' if frame.inverse else 'distorted'} frame → {path}")
    return canvas
