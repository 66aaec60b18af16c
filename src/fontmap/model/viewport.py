"""
Viewport Controller
===================
Pan/zoom state of the map view and the conversions between screen pixels and
logical canvas units.

The logical canvas is square. A surface of any aspect ratio shows the view
rectangle fitted to its smaller side and centred along the longer one, so one
logical unit has the same on-screen size on both axes.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from fontmap.model import CANVAS_PADDING, CANVAS_SIZE

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.1
BUTTON_ZOOM_STEP = ZOOM_STEP ** 3


@dataclass(frozen=True)
class ViewRect:
    """The visible sub-rectangle of the logical canvas."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    def is_valid(self) -> bool:
        values = (self.x, self.y, self.width, self.height)
        return all(math.isfinite(v) for v in values) and self.width > 0.0 and self.height > 0.0


@dataclass(frozen=True)
class SurfaceRect:
    """On-screen size of the drawing surface in pixels."""
    width: float
    height: float

    @property
    def min_side(self) -> float:
        return min(self.width, self.height)

    @property
    def offset(self) -> tuple[float, float]:
        """Pixel offset of the fitted square inside the surface."""
        return max(self.width - self.height, 0.0) / 2.0, max(self.height - self.width, 0.0) / 2.0


INITIAL_VIEW_RECT = ViewRect(
    x=-CANVAS_PADDING,
    y=-CANVAS_PADDING,
    width=CANVAS_SIZE + 2.0 * CANVAS_PADDING,
    height=CANVAS_SIZE + 2.0 * CANVAS_PADDING,
)


class ViewportController:
    """Owns the ViewRect and updates it from pointer deltas and wheel steps."""

    def __init__(self, initial: ViewRect = INITIAL_VIEW_RECT) -> None:
        if not initial.is_valid():
            raise ValueError(f"Initial view rectangle must be finite and positive, got {initial}.")
        self._initial = initial
        self._rect = initial

    @property
    def rect(self) -> ViewRect:
        return self._rect

    # ------------------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------------------

    @staticmethod
    def _check_surface(surface: SurfaceRect) -> None:
        if surface.min_side <= 0:
            raise ValueError(f"Surface must have a positive size, got {surface}.")

    def zoom_factor(self, surface: SurfaceRect) -> float:
        """Logical units per screen pixel."""
        self._check_surface(surface)
        return self._rect.width / surface.min_side

    def screen_to_logical(self, sx: float, sy: float, surface: SurfaceRect) -> tuple[float, float]:
        self._check_surface(surface)
        ox, oy = surface.offset
        side = surface.min_side
        r = self._rect
        return r.x + (sx - ox) / side * r.width, r.y + (sy - oy) / side * r.height

    def logical_to_screen(self, lx: float, ly: float, surface: SurfaceRect) -> tuple[float, float]:
        self._check_surface(surface)
        ox, oy = surface.offset
        side = surface.min_side
        r = self._rect
        return ox + (lx - r.x) / r.width * side, oy + (ly - r.y) / r.height * side

    def visible_bounds(self, surface: SurfaceRect, padding_px: float = 0.0) -> ViewRect:
        """
        Logical rectangle covered by the whole surface, grown by `padding_px`
        screen pixels on every side. Used to cull points outside the view.
        """
        x0, y0 = self.screen_to_logical(-padding_px, -padding_px, surface)
        x1, y1 = self.screen_to_logical(surface.width + padding_px, surface.height + padding_px, surface)
        return ViewRect(x0, y0, x1 - x0, y1 - y0)

    # ------------------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------------------

    def _commit(self, rect: ViewRect) -> bool:
        if not rect.is_valid():
            logger.debug(f"Rejected degenerate view rectangle {rect}")
            return False
        self._rect = rect
        return True

    def pan(self, dx: float, dy: float, surface: SurfaceRect) -> bool:
        """
        Move the view by a screen-space pointer delta.

        Args:
            dx: Horizontal pointer movement in pixels.
            dy: Vertical pointer movement in pixels.
            surface: Current on-screen surface size.

        Returns:
            True if the rectangle changed.
        """
        self._check_surface(surface)
        r = self._rect
        scale_x = r.width / surface.min_side
        scale_y = r.height / surface.min_side
        return self._commit(ViewRect(r.x - dx * scale_x, r.y - dy * scale_y, r.width, r.height))

    def zoom_at(self, factor: float, lx: float, ly: float) -> bool:
        """Scale the view by `factor` keeping the logical point (lx, ly) fixed on screen."""
        if not math.isfinite(factor) or factor <= 0.0:
            return False
        r = self._rect
        return self._commit(ViewRect(
            x=lx - (lx - r.x) * factor,
            y=ly - (ly - r.y) * factor,
            width=r.width * factor,
            height=r.height * factor,
        ))

    def zoom(self, wheel_delta: float, sx: float, sy: float, surface: SurfaceRect) -> bool:
        """
        Zoom one wheel step anchored at the pointer.

        A positive delta (wheel away from the user) zooms in, a negative one
        zooms out, zero does nothing.

        Returns:
            True if the rectangle changed.
        """
        if wheel_delta == 0:
            return False
        factor = 1.0 / ZOOM_STEP if wheel_delta > 0 else ZOOM_STEP
        lx, ly = self.screen_to_logical(sx, sy, surface)
        return self.zoom_at(factor, lx, ly)

    def zoom_about_center(self, factor: float) -> bool:
        cx, cy = self._rect.center
        return self.zoom_at(factor, cx, cy)

    def zoom_in(self) -> bool:
        return self.zoom_about_center(1.0 / BUTTON_ZOOM_STEP)

    def zoom_out(self) -> bool:
        return self.zoom_about_center(BUTTON_ZOOM_STEP)

    def reset(self) -> None:
        self._rect = self._initial
