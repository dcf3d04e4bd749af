"""Geometric operations for strokes and grid-line curves.

Provides:
    - Point sequence → tensor conversion (float64, shape (N, 2))
    - Polyline bounding box and axis extents
    - Stable sorting of a stroke along one axis
    - Piecewise-linear interpolation with clamp-to-endpoint behaviour
    - Reflection of points about an axis-aligned line

Used by:
    - Orientation classifier: bbox extents (dx, dy)
    - Warp sampler: sort + interpolate + resample at baseline positions
    - Inverse transform: reflection about a grid line's baseline

All coordinates are canvas-local pixels (top-left origin, +Y down).
Tensors are float64 so resampled control points match exact arithmetic
on the baseline positions (0, step, 2·step, ...).
"""

from typing import Iterable, Sequence, Tuple

import torch

DTYPE = torch.float64

# Column index per axis name
_COL = {'x': 0, 'y': 1}


def points_to_tensor(points: Iterable) -> torch.Tensor:
    """Stack (x, y) pairs or objects with ``.x``/``.y`` into a tensor.

    Parameters
    ----------
    points : Iterable
        Sequence of (x, y) tuples or point-like objects

    Returns
    -------
    torch.Tensor
        Shape (N, 2), float64. Shape (0, 2) for an empty input.
    """
    rows = [
        (float(p.x), float(p.y)) if hasattr(p, 'x') else (float(p[0]), float(p[1]))
        for p in points
    ]
    if not rows:
        return torch.zeros((0, 2), dtype=DTYPE)
    return torch.tensor(rows, dtype=DTYPE)


def polyline_bbox(points: torch.Tensor) -> Tuple[float, float, float, float]:
    """Compute axis-aligned bounding box of polyline.

    Parameters
    ----------
    points : torch.Tensor
        Polyline vertices, shape (N, 2)

    Returns
    -------
    Tuple[float, float, float, float]
        (xmin, ymin, xmax, ymax)

    Notes
    -----
    Returns empty bbox (0, 0, 0, 0) if no points.
    """
    if points.shape[0] == 0:
        return (0.0, 0.0, 0.0, 0.0)

    mins = points.min(dim=0).values
    maxs = points.max(dim=0).values
    return (mins[0].item(), mins[1].item(), maxs[0].item(), maxs[1].item())


def bbox_extents(points: torch.Tensor) -> Tuple[float, float]:
    """Width and height of the bounding box, (dx, dy)."""
    xmin, ymin, xmax, ymax = polyline_bbox(points)
    return (xmax - xmin, ymax - ymin)


def axis_mean(points: torch.Tensor, axis: str) -> float:
    """Mean of one coordinate column ('x' or 'y')."""
    return points[:, _COL[axis]].mean().item()


def sort_along(points: torch.Tensor, axis: str) -> torch.Tensor:
    """Stable sort of points by one coordinate.

    Points sharing the same coordinate keep their drawing order, so the
    interpolant below sees duplicates in the order the user drew them.
    """
    _, order = torch.sort(points[:, _COL[axis]], stable=True)
    return points[order]


def interp_clamped(
    xp: torch.Tensor,
    fp: torch.Tensor,
    query: torch.Tensor
) -> torch.Tensor:
    """Piecewise-linear interpolation that clamps outside the sample range.

    Parameters
    ----------
    xp : torch.Tensor
        Sample positions, shape (N,), non-decreasing, N ≥ 1
    fp : torch.Tensor
        Sample values, shape (N,)
    query : torch.Tensor
        Query positions, shape (M,)

    Returns
    -------
    torch.Tensor
        Interpolated values, shape (M,)

    Notes
    -----
    - query ≤ xp[0]  → fp[0]   (checked first, so it wins when xp[0] == xp[-1])
    - query ≥ xp[-1] → fp[-1]
    - otherwise the first segment [xp[i], xp[i+1]] containing the query.
      searchsorted(left) returns the first j with xp[j] ≥ query, so
      xp[j-1] < query ≤ xp[j] and the segment never has zero length.

    No extrapolation: a stroke that only covers part of a grid line leaves
    the remainder flat at the nearest endpoint.
    """
    n = xp.shape[0]
    first = fp[0].expand_as(query)
    last = fp[-1].expand_as(query)

    if n == 1:
        return first.clone()

    j = torch.searchsorted(xp.contiguous(), query.contiguous(), right=False)
    j = j.clamp(1, n - 1)

    x0, x1 = xp[j - 1], xp[j]
    f0, f1 = fp[j - 1], fp[j]
    span = x1 - x0
    span = torch.where(span == 0, torch.ones_like(span), span)
    t = (query - x0) / span
    inner = f0 + t * (f1 - f0)

    out = torch.where(query >= xp[-1], last, inner)
    out = torch.where(query <= xp[0], first, out)
    return out


def reflect_about_line(
    points: torch.Tensor,
    axis: str,
    base: float
) -> torch.Tensor:
    """Reflect points about the line ``axis = base``.

    Parameters
    ----------
    points : torch.Tensor
        Shape (N, 2)
    axis : str
        'x' reflects about a vertical line x = base,
        'y' about a horizontal line y = base
    base : float
        Coordinate of the mirror line

    Returns
    -------
    torch.Tensor
        Reflected copy, shape (N, 2)

    Notes
    -----
    Involution: reflecting twice returns the input up to float rounding.
    """
    out = points.clone()
    col = _COL[axis]
    out[:, col] = 2.0 * base - points[:, col]
    return out


def tensor_to_pairs(points: torch.Tensor) -> Sequence[Tuple[float, float]]:
    """Convert an (N, 2) tensor back to a tuple of (x, y) floats."""
    return tuple((float(x), float(y)) for x, y in points.tolist())
