"""Amsler grid core: stroke integration and warp/inverse-warp geometry.

Modules:
    - model: Point, Axis, GridLine, GridConfig and baseline positions
    - classifier: stroke orientation (vertical vs. horizontal)
    - sampler: stroke → fixed-resolution GridLine
    - store: ordered multimap of integrated lines (first-match lookup)
    - inverse: reflection of a warp about its baseline
    - grid: AmslerGrid, the stateful object hosts drive
    - replay: scripted event playback

``grid`` and ``replay`` depend on src.grid_renderer and are imported
explicitly:
    from src.amsler_grid.grid import AmslerGrid
"""

from . import classifier
from . import inverse
from . import model
from . import sampler
from . import store

from .model import Axis, GridConfig, GridLine, Point

__all__ = [
    'classifier',
    'inverse',
    'model',
    'sampler',
    'store',
    'Axis',
    'GridConfig',
    'GridLine',
    'Point',
]
