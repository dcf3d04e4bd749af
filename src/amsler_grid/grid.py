"""Interactive Amsler grid -- the stateful object a host drives.

The host feeds pointer events, issues integrate/reset commands, and asks
for a Frame whenever it wants to redraw.  All state (completed strokes,
live stroke buffer, distortion store) is private to the instance; the
only outward notification is the ``on_distortion_change`` callback.

Usage::

    grid = AmslerGrid(width=400, height=400,
                      on_distortion_change=lambda lines: print(len(lines)))
    grid.pointer_down(200, 0)
    grid.pointer_move(210, 200)
    grid.pointer_move(200, 400)
    grid.pointer_up()
    grid.integrate_stroke()          # vertical line 10 is now warped
    frame = grid.render()            # or grid.render(inverse=True)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from src.amsler_grid.model import GridConfig, GridLine, Point, Stroke
from src.amsler_grid.sampler import sample_warp
from src.amsler_grid.store import DistortionStore
from src.grid_renderer.scene import Frame, compose_frame
from src.utils import validators

logger = logging.getLogger(__name__)

DistortionCallback = Callable[[tuple[GridLine, ...]], None]


class ConfigError(ValueError):
    """Raised when a config (plus overrides) cannot be turned into a grid."""

    pass


class AmslerGrid:
    """20×20 (by default) grid that integrates freehand distortion strokes.

    Parameters
    ----------
    width, height : float
        Canvas size in pixels, default 400×400.
    divisions : int
        Cells per axis, default 20.
    inverse : bool
        Default view mode: False draws warps as traced, True draws their
        reflection about each line's baseline.
    style : RenderStyleV1, optional
        Colors and widths for the renderer.
    on_distortion_change : callable, optional
        Called with the full ordered tuple of stored GridLines after every
        store change (integration or reset).
    """

    def __init__(
        self,
        width: float = 400.0,
        height: float = 400.0,
        divisions: int = 20,
        inverse: bool = False,
        style: Optional[validators.RenderStyleV1] = None,
        on_distortion_change: Optional[DistortionCallback] = None,
    ) -> None:
        self._config = GridConfig(width=float(width), height=float(height),
                                  divisions=int(divisions))
        self._inverse = bool(inverse)
        self._style = style or validators.RenderStyleV1()
        self._on_change = on_distortion_change

        self._store = DistortionStore()
        self._strokes: List[Stroke] = []
        self._live: List[Point] = []
        self._drawing = False

        logger.info(
            f"Grid ready: {self._config.width:g}x{self._config.height:g} px, "
            f"{self._config.divisions} divisions, "
            f"{'undistorted' if self._inverse else 'distorted'} view"
        )

    @classmethod
    def from_config(
        cls,
        path: Union[str, Path],
        on_distortion_change: Optional[DistortionCallback] = None,
        **overrides,
    ) -> "AmslerGrid":
        """Build a grid from an amsler_grid.v1 YAML file.

        See from_settings() for ``overrides``.
        """
        cfg = validators.load_grid_config(path)
        return cls.from_settings(cfg, on_distortion_change, source=str(path), **overrides)

    @classmethod
    def from_settings(
        cls,
        cfg: validators.AmslerConfigV1,
        on_distortion_change: Optional[DistortionCallback] = None,
        source: str = "<settings>",
        **overrides,
    ) -> "AmslerGrid":
        """Build a grid from an already validated config.

        Parameters
        ----------
        cfg : AmslerConfigV1
            Validated config (style and grid sections are used)
        on_distortion_change : callable, optional
            Forwarded to the constructor
        source : str
            Config origin, used in error messages
        **overrides
            width, height, divisions or inverse replacing the config's grid
            values (e.g. from CLI flags); None means "keep the config value".
            Overrides bypass schema validation.

        Raises
        ------
        ConfigError
            Unknown override key, or resulting geometry rejected by GridConfig
        """
        grid_kwargs = {
            'width': cfg.grid.width,
            'height': cfg.grid.height,
            'divisions': cfg.grid.divisions,
            'inverse': cfg.grid.inverse,
        }
        unknown = sorted(set(overrides) - set(grid_kwargs))
        if unknown:
            raise ConfigError(f"Unknown grid override(s) for {source}: {', '.join(unknown)}")
        grid_kwargs.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(style=cfg.style, on_distortion_change=on_distortion_change,
                       **grid_kwargs)
        except ValueError as e:
            raise ConfigError(f"Invalid grid config {source}: {e}") from e

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def inverse(self) -> bool:
        return self._inverse

    @property
    def style(self) -> validators.RenderStyleV1:
        return self._style

    @property
    def drawing(self) -> bool:
        """True between pointer_down and pointer_up."""
        return self._drawing

    @property
    def live_stroke(self) -> Stroke:
        return tuple(self._live)

    @property
    def completed_strokes(self) -> tuple[Stroke, ...]:
        return tuple(self._strokes)

    @property
    def distortions(self) -> tuple[GridLine, ...]:
        return self._store.entries()

    @property
    def store(self) -> DistortionStore:
        return self._store

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        """Start a new live stroke at (x, y)."""
        self._live = [Point(float(x), float(y))]
        self._drawing = True

    def pointer_move(self, x: float, y: float) -> None:
        """Extend the live stroke; ignored unless a stroke is in progress."""
        if self._drawing:
            self._live.append(Point(float(x), float(y)))

    def pointer_up(self) -> None:
        """Commit the live stroke to the completed strokes."""
        if self._drawing:
            self._strokes.append(tuple(self._live))
        self._drawing = False

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def integrate_stroke(self) -> None:
        """Integrate the live stroke, or the most recent completed one.

        No-op when neither is available or the chosen stroke is empty.
        Completed strokes are not consumed, so integrating again after
        pointer_up stores the same warp a second time (shadowed).
        """
        if self._drawing:
            stroke = tuple(self._live)
        else:
            stroke = self._strokes[-1] if self._strokes else ()

        line = sample_warp(stroke, self._config)
        if line is None:
            return

        visible = self._store.append(line)
        self._live = []

        if not self._config.in_range(line.index):
            logger.warning(
                f"{line.axis.value.capitalize()} line index {line.index} is outside "
                f"0..{self._config.divisions}; stored but never drawn"
            )
        elif not visible:
            logger.debug(
                f"{line.axis.value.capitalize()} line {line.index} already warped; "
                f"new entry is shadowed by the first one"
            )
        else:
            logger.info(f"Integrated stroke into {line.axis.value} line {line.index}")

        self._notify()

    def reset_grid(self) -> None:
        """Clear completed strokes, the live stroke and every stored warp."""
        self._strokes = []
        self._live = []
        self._store.clear()
        logger.info("Grid reset")
        self._notify()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, inverse: Optional[bool] = None) -> Frame:
        """Frame for the current state.

        ``inverse`` overrides the instance's default view mode for this
        call only (used by hosts that toggle the view).
        """
        view = self._inverse if inverse is None else bool(inverse)
        return compose_frame(self._config, self._store, self._live,
                             drawing=self._drawing, inverse=view, style=self._style)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._store.entries())
