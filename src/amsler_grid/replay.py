"""Drive a grid from a scripted event sequence.

Used by the replay CLI and by tests in place of a live pointer device.
Events come from a validated stroke_script.v1 file (see
src.utils.validators.StrokeScriptV1).
"""

from __future__ import annotations

import logging
from typing import Iterable

from src.amsler_grid.grid import AmslerGrid
from src.utils.validators import PointerEventV1

logger = logging.getLogger(__name__)


def apply_event(grid: AmslerGrid, event: PointerEventV1) -> None:
    """Dispatch one event to the matching grid operation."""
    if event.type == "down":
        grid.pointer_down(event.x, event.y)
    elif event.type == "move":
        grid.pointer_move(event.x, event.y)
    elif event.type == "up":
        grid.pointer_up()
    elif event.type == "integrate":
        grid.integrate_stroke()
    elif event.type == "reset":
        grid.reset_grid()
    else:
        raise ValueError(f"Unknown event type: {event.type!r}")


def apply_events(grid: AmslerGrid, events: Iterable[PointerEventV1]) -> int:
    """Apply events in order; returns how many were applied."""
    count = 0
    for event in events:
        apply_event(grid, event)
        count += 1
    logger.debug(f"Replayed {count} events, {len(grid.distortions)} warps stored")
    return count
