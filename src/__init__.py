"""Amsler Grid: interactive distortion mapping on a 20×20 vision-test grid.

The user traces freehand strokes where grid lines look bent; each stroke
is integrated into the nearest grid line as a resampled warp, and an
inverse view draws the mirror-image correction.

Architecture layers (strict one-way dependency):
    scripts/ → src/amsler_grid/{grid,replay} → src/grid_renderer/
             → src/amsler_grid/{model,classifier,sampler,store,inverse} → src/utils/

Key invariants:
    - Canvas-local pixel coordinates end-to-end (top-left origin, +Y down)
    - Every stored warp has exactly divisions + 1 control points
    - First-inserted warp per (axis, index) is the one drawn
    - YAML-only configs, validated with pydantic
"""

__version__ = "1.0.0"
