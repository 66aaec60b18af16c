"""
Font Map Canvas
===============
The 2D view of the embedding space.

Why is this file needed?
------------------------
1. Rendering: Draws every positioned font sample with QPainter. Samples that
   match the committed query are drawn at full strength, the rest dimmed. Only
   points inside the visible logical rectangle (plus a margin) are painted.
2. Interaction: Right-button drag pans, the wheel zooms about the pointer and
   a primary-button press (or drag) selects the nearest point under the
   pointer. The viewport math lives in `fontmap.model.viewport`; this widget
   only translates Qt events into those calls.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QBrush, QFont, QMouseEvent, QPainter, QPaintEvent, QPen, QWheelEvent
from PySide6.QtWidgets import QSizePolicy, QWidget

from fontmap.app.state import Store
from fontmap.app.ui.colors import FAMILY_COLOR, LABEL_COLOR, SELECTION_COLOR, cluster_color, dimmed
from fontmap.config import (
    CULL_PADDING_PX,
    LABEL_ZOOM_THRESHOLD,
    POINT_RADIUS_PX,
    SELECTED_POINT_RADIUS_PX,
    SELECTION_RADIUS_PX,
)
from fontmap.model.hit_test import PointVisual, find_hit
from fontmap.model.viewport import SurfaceRect, ViewportController, ViewRect

logger = logging.getLogger(__name__)

LABEL_MAX_CHARS = 12


class FontMapCanvas(QWidget):
    # text to put on the clipboard (font or family name)
    copy_requested = Signal(str)
    view_changed = Signal(object)

    def __init__(self, store: Store, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self.viewport = ViewportController()

        self.setMinimumSize(200, 200)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMouseTracking(False)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.PreventContextMenu)

        self._last_pan_pos: QPointF | None = None

        store.session_changed.connect(lambda *_: self.reset_view())
        store.layout_changed.connect(lambda *_: self.update())
        store.filter_changed.connect(lambda *_: self.update())
        store.selection_changed.connect(lambda *_: self.update())
        store.weights_changed.connect(lambda *_: self.update())

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def surface(self) -> SurfaceRect:
        return SurfaceRect(float(self.width()), float(self.height()))

    def zoom_in(self) -> None:
        self._after_view_change(self.viewport.zoom_in())

    def zoom_out(self) -> None:
        self._after_view_change(self.viewport.zoom_out())

    def reset_view(self) -> None:
        self.viewport.reset()
        self._after_view_change(True)

    def visible_keys(self) -> list[str]:
        """Positioned keys with an active weight, in render order."""
        weights = set(self.store.selected_weights)
        fonts = self.store.fonts
        return [key for key in self.store.layout if fonts[key].weight in weights]

    def selectable_visuals(self) -> list[PointVisual]:
        """Screen-space selection areas of the points that match the current filter."""
        surface = self.surface()
        if surface.min_side <= 0:
            return []
        filtered = self.store.filtered_keys
        layout = self.store.layout
        visuals = []
        for key in self.visible_keys():
            if key not in filtered:
                continue
            sx, sy = self.viewport.logical_to_screen(*layout[key], surface)
            visuals.append(PointVisual(key, sx, sy, SELECTION_RADIUS_PX))
        return visuals

    def select_at(self, pos: QPointF, modifiers: Qt.KeyboardModifier = Qt.KeyboardModifier.NoModifier) -> str | None:
        """
        Select the point under `pos`. A miss leaves the selection unchanged.

        Returns:
            The key of the hit point, or None.
        """
        key = find_hit(pos.x(), pos.y(), self.selectable_visuals())
        if key is None:
            return None
        self.store.select(key)

        font = self.store.fonts[key]
        if modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier):
            self.copy_requested.emit(font.font_name)
        elif modifiers & Qt.KeyboardModifier.ShiftModifier:
            self.copy_requested.emit(font.family_name)
        return key

    # ------------------------------------------------------------------------------
    # Mouse handling
    # ------------------------------------------------------------------------------

    @staticmethod
    def _is_panning(event: QMouseEvent) -> bool:
        # hit testing is suspended while the pan button is held
        return bool(event.buttons() & Qt.MouseButton.RightButton)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.RightButton:
            self._last_pan_pos = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        elif event.button() == Qt.MouseButton.LeftButton and not self._is_panning(event):
            self.select_at(event.position(), event.modifiers())
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._is_panning(event):
            if self._last_pan_pos is not None:
                delta = event.position() - self._last_pan_pos
                self._last_pan_pos = event.position()
                self._after_view_change(self.viewport.pan(delta.x(), delta.y(), self.surface()))
        elif event.buttons() & Qt.MouseButton.LeftButton:
            self.select_at(event.position())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.RightButton:
            self._last_pan_pos = None
            self.unsetCursor()
        event.accept()

    def wheelEvent(self, event: QWheelEvent) -> None:
        delta = event.angleDelta().y()
        pos = event.position()
        self._after_view_change(self.viewport.zoom(delta, pos.x(), pos.y(), self.surface()))
        event.accept()

    def _after_view_change(self, changed: bool) -> None:
        if changed:
            self.view_changed.emit(self.viewport.rect)
            self.update()

    # ------------------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------------------

    @staticmethod
    def _inside(rect: ViewRect, x: float, y: float) -> bool:
        return rect.x <= x <= rect.x + rect.width and rect.y <= y <= rect.y + rect.height

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHints(QPainter.RenderHint.Antialiasing | QPainter.RenderHint.TextAntialiasing)
        painter.fillRect(self.rect(), self.palette().base())

        surface = self.surface()
        if not self.store.layout or surface.min_side <= 0:
            painter.setPen(QPen(LABEL_COLOR))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, self.tr("No samples"))
            painter.end()
            return

        visible = self.viewport.visible_bounds(surface, CULL_PADDING_PX)
        show_all_labels = self.viewport.zoom_factor(surface) < LABEL_ZOOM_THRESHOLD
        layout = self.store.layout
        fonts = self.store.fonts
        filtered = self.store.filtered_keys
        selected_key = self.store.selected_key
        selected_family = self.store.selected_family

        dim_points: list[tuple[str, QPointF]] = []
        full_points: list[tuple[str, QPointF]] = []
        for key in self.visible_keys():
            lx, ly = layout[key]
            if not self._inside(visible, lx, ly):
                continue
            sx, sy = self.viewport.logical_to_screen(lx, ly, surface)
            (full_points if key in filtered else dim_points).append((key, QPointF(sx, sy)))

        painter.setPen(Qt.PenStyle.NoPen)
        for key, pos in dim_points:
            painter.setBrush(QBrush(dimmed(cluster_color(fonts[key].cluster_id))))
            painter.drawEllipse(pos, POINT_RADIUS_PX, POINT_RADIUS_PX)

        label_font = QFont(self.font())
        bold_font = QFont(label_font)
        bold_font.setBold(True)

        for key, pos in full_points:
            font = fonts[key]
            is_selected = key == selected_key
            in_family = selected_family is not None and font.family_name == selected_family

            radius = SELECTED_POINT_RADIUS_PX if (is_selected or in_family) else POINT_RADIUS_PX
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(cluster_color(font.cluster_id)))
            painter.drawEllipse(pos, radius, radius)

            if is_selected or in_family:
                ring = SELECTION_RADIUS_PX if is_selected else SELECTION_RADIUS_PX / 2.0
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.setPen(QPen(SELECTION_COLOR if is_selected else FAMILY_COLOR, 1.5))
                painter.drawEllipse(pos, ring, ring)

            if show_all_labels or is_selected:
                text = font.font_name
                if not is_selected and len(text) > LABEL_MAX_CHARS:
                    text = text[:LABEL_MAX_CHARS] + "…"
                painter.setFont(bold_font if is_selected else label_font)
                painter.setPen(QPen(LABEL_COLOR))
                box = QRectF(pos.x() - 100.0, pos.y() - 30.0, 200.0, 18.0)
                painter.drawText(box, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignBottom, text)

        painter.end()
