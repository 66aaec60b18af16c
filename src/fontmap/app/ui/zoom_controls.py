from __future__ import annotations

from collections.abc import Callable

from PySide6.QtWidgets import QToolButton, QVBoxLayout, QWidget

from fontmap.app.ui.canvas import FontMapCanvas


class ZoomControls(QWidget):
    """Zoom in / reset / zoom out buttons overlaid on the canvas."""
    def __init__(self, canvas: FontMapCanvas, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.canvas = canvas

        v = QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 0)
        v.setSpacing(2)

        self.zoom_in_button = self._button("+", self.tr("Zoom in"), canvas.zoom_in)
        self.reset_button = self._button("⟲", self.tr("Reset view"), canvas.reset_view)
        self.zoom_out_button = self._button("−", self.tr("Zoom out"), canvas.zoom_out)
        for b in (self.zoom_in_button, self.reset_button, self.zoom_out_button):
            v.addWidget(b)

    def _button(self, text: str, tooltip: str, slot: Callable[[], None]) -> QToolButton:
        b = QToolButton(self)
        b.setText(text)
        b.setToolTip(tooltip)
        b.setFixedSize(28, 28)
        b.clicked.connect(slot)
        return b
