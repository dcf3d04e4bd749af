"""Renderer: grid state → draw operations → RGB frame.

    - scene: pure composition of Frames (DrawPolyline, FillCircle, Clear)
    - raster: OpenCV execution of a Frame onto a numpy canvas, PNG export
"""

from . import raster
from . import scene

__all__ = ['raster', 'scene']
