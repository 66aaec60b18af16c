"""
Coordinate Normalizer
=====================
Maps raw embedding coordinates into the fixed logical canvas.

Why is this file needed?
------------------------
The pipeline's 2D vectors are unbounded real pairs. Everything downstream
(viewport, hit testing, rendering) works in a square logical canvas of side
CANVAS_SIZE, so positions are normalized per axis against the bounds of the
whole map.

Functions:
    compute_bounds: Per-axis min/max over all positioned items.
    normalize: Map one vector into the canvas.
    layout_points: Canvas position of every positioned item.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fontmap.model import CANVAS_SIZE

if TYPE_CHECKING:
    import numpy.typing as npt

    from fontmap.model.fonts import FontMetadata


@dataclass(frozen=True)
class CanvasBounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def _vectors(items: Iterable[FontMetadata]) -> tuple[list[str], npt.NDArray[np.float64]]:
    keys: list[str] = []
    coords: list[tuple[float, float]] = []
    for item in items:
        if item.vector is None:
            continue
        keys.append(item.safe_name)
        coords.append(item.vector)
    return keys, np.asarray(coords, dtype=np.float64).reshape(-1, 2)


def compute_bounds(items: Iterable[FontMetadata]) -> CanvasBounds | None:
    """
    Compute the bounds of all items that carry a computed vector.

    Returns:
        The bounds, or None when no item has a vector.
    """
    _, pts = _vectors(items)
    if pts.shape[0] == 0:
        return None
    x_min, y_min = pts.min(axis=0)
    x_max, y_max = pts.max(axis=0)
    return CanvasBounds(float(x_min), float(x_max), float(y_min), float(y_max))


def _normalize_axis(
    values: npt.NDArray[np.float64],
    lo: float,
    hi: float,
    size: float
) -> npt.NDArray[np.float64]:
    # halved operands keep hi - lo finite for any pair of finite doubles
    half_lo = lo / 2.0
    span = hi / 2.0 - half_lo
    if span == 0.0 or not np.isfinite(span):
        # degenerate axis, everything sits in the middle
        return np.full_like(values, size / 2.0)
    scaled = (values / 2.0 - half_lo) / span * size
    return np.clip(np.nan_to_num(scaled, nan=size / 2.0, posinf=size, neginf=0.0), 0.0, size)


def normalize(
    vector: tuple[float, float],
    bounds: CanvasBounds,
    size: float = CANVAS_SIZE
) -> tuple[float, float]:
    """
    Map a raw vector into the logical canvas [0, size] x [0, size].

    Args:
        vector: Raw (x, y) embedding coordinates.
        bounds: Bounds of the map the vector belongs to.
        size: Side length of the logical canvas.

    Returns:
        Canvas (x, y). A degenerate axis (min == max) maps to size / 2.
    """
    x = _normalize_axis(np.array([vector[0]], dtype=np.float64), bounds.min_x, bounds.max_x, size)
    y = _normalize_axis(np.array([vector[1]], dtype=np.float64), bounds.min_y, bounds.max_y, size)
    return float(x[0]), float(y[0])


def layout_points(
    items: Mapping[str, FontMetadata] | Iterable[FontMetadata],
    size: float = CANVAS_SIZE,
    bounds: CanvasBounds | None = None
) -> dict[str, tuple[float, float]]:
    """
    Compute the canvas position of every item that has a computed vector.

    Args:
        items: Font map (or any iterable of FontMetadata).
        size: Side length of the logical canvas.
        bounds: Precomputed bounds; computed from `items` when omitted.

    Returns:
        Mapping safe_name -> (x, y). Items without a vector are left out.
    """
    if isinstance(items, Mapping):
        items = items.values()
    keys, pts = _vectors(items)
    if not keys:
        return {}

    if bounds is None:
        x_min, y_min = pts.min(axis=0)
        x_max, y_max = pts.max(axis=0)
        bounds = CanvasBounds(float(x_min), float(x_max), float(y_min), float(y_max))

    xs = _normalize_axis(pts[:, 0], bounds.min_x, bounds.max_x, size)
    ys = _normalize_axis(pts[:, 1], bounds.min_y, bounds.max_y, size)
    return {key: (float(x), float(y)) for key, x, y in zip(keys, xs, ys)}
