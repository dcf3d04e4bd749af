"""YAML schema validation and config loading.

Provides centralized validation for the configuration files using pydantic:
    - Grid config schema (amsler_grid.v1.yaml): canvas size, divisions, view
      mode, render style, logging
    - Stroke script schema (stroke_script.v1.yaml): ordered pointer events and
      integrate/reset commands used by the replay CLI and tests

All loaders fail fast with actionable messages (offending key, expected range).

Units:
    - Geometry: canvas pixels (top-left origin, +Y down)
    - Colors: RGB triplets, 0-255

Usage:
    from src.utils import validators

    cfg = validators.load_grid_config("configs/amsler_grid_v1.yaml")
    script = validators.load_stroke_script("strokes/wavy_center.yaml")
"""

from pathlib import Path
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================================================
# GRID CONFIG SCHEMA V1
# ============================================================================

class GridV1(BaseModel):
    """Grid geometry: canvas size (px) and number of cells per axis."""
    width: float = Field(400.0, gt=0.0, description="Canvas width (px)")
    height: float = Field(400.0, gt=0.0, description="Canvas height (px)")
    divisions: int = Field(20, ge=1, le=400, description="Cells per axis (lines = divisions + 1)")
    inverse: bool = Field(False, description="Render the reflected (undistorted) view by default")


RGB = Tuple[int, int, int]


class RenderStyleV1(BaseModel):
    """Colors and stroke widths used by the renderer."""
    background: RGB = Field((255, 255, 255), description="Canvas fill color")
    line_color: RGB = Field((0, 0, 0), description="Baseline and warped line color")
    baseline_width: int = Field(1, ge=1, description="Straight baseline width (px)")
    warp_width: int = Field(2, ge=1, description="Integrated (warped) line width (px)")
    marker_color: RGB = Field((255, 0, 0), description="Center fixation marker color")
    marker_radius_ratio: float = Field(
        1.0 / 40.0, gt=0.0, le=0.5,
        description="Marker radius as a fraction of min(width, height)"
    )
    live_color: RGB = Field((255, 0, 0), description="In-progress stroke color")
    live_width: int = Field(2, ge=1, description="In-progress stroke width (px)")
    antialias: bool = Field(True, description="Use anti-aliased rasterization")

    @field_validator('background', 'line_color', 'marker_color', 'live_color')
    @classmethod
    def validate_rgb(cls, v: RGB) -> RGB:
        for c in v:
            if not 0 <= c <= 255:
                raise ValueError(f"RGB component {c} out of range [0, 255]")
        return v


class LoggingV1(BaseModel):
    """Logging options forwarded to logging_config.setup_logging()."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None
    json_format: bool = Field(False, alias="json")
    color: bool = True

    model_config = ConfigDict(populate_by_name=True)


class AmslerConfigV1(BaseModel):
    """Top-level grid configuration (amsler_grid.v1.yaml)."""
    schema_version: str = Field("amsler_grid.v1", alias="schema")
    grid: GridV1 = Field(default_factory=GridV1)
    style: RenderStyleV1 = Field(default_factory=RenderStyleV1)
    logging: LoggingV1 = Field(default_factory=LoggingV1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "amsler_grid.v1":
            raise ValueError(f"Expected schema 'amsler_grid.v1', got '{v}'")
        return v


# ============================================================================
# STROKE SCRIPT SCHEMA V1
# ============================================================================

class PointerEventV1(BaseModel):
    """Single scripted event.

    ``down`` and ``move`` carry canvas-local coordinates; ``up``,
    ``integrate`` and ``reset`` carry none.
    """
    type: Literal["down", "move", "up", "integrate", "reset"]
    x: Optional[float] = None
    y: Optional[float] = None

    @model_validator(mode='after')
    def validate_coordinates(self) -> 'PointerEventV1':
        needs_xy = self.type in ("down", "move")
        has_xy = self.x is not None and self.y is not None
        if needs_xy and not has_xy:
            raise ValueError(f"Event '{self.type}' requires both x and y")
        if not needs_xy and (self.x is not None or self.y is not None):
            raise ValueError(f"Event '{self.type}' takes no coordinates")
        return self


class StrokeScriptV1(BaseModel):
    """Ordered event script (stroke_script.v1.yaml)."""
    schema_version: str = Field("stroke_script.v1", alias="schema")
    events: List[PointerEventV1] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "stroke_script.v1":
            raise ValueError(f"Expected schema 'stroke_script.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def load_grid_config(path: Union[str, Path]) -> AmslerConfigV1:
    """Load and validate grid config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to amsler_grid.v1 YAML file

    Returns
    -------
    AmslerConfigV1
        Validated grid configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid config not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return AmslerConfigV1(**data)
    except Exception as e:
        raise ValueError(f"Grid config validation failed at {path}: {e}") from e


def load_stroke_script(path: Union[str, Path]) -> StrokeScriptV1:
    """Load and validate a stroke event script from YAML.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (message includes the event index)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stroke script not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return StrokeScriptV1(**data)
    except Exception as e:
        raise ValueError(f"Stroke script validation failed at {path}: {e}") from e
