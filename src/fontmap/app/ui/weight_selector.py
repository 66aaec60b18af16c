from __future__ import annotations

from PySide6.QtWidgets import QHBoxLayout, QLabel, QToolButton, QWidget

from fontmap.app.state import Store
from fontmap.config import DEFAULT_WEIGHTS
from fontmap.model.fonts import SessionConfig


class WeightSelector(QWidget):
    """
    One checkable button per weight of the current session.

    Only samples whose weight is checked are drawn and selectable. At least
    one weight always stays checked.
    """
    def __init__(self, store: Store, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self.buttons: dict[int, QToolButton] = {}

        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(6, 0, 6, 0)
        self._layout.addWidget(QLabel(self.tr("Weights:"), self))

        store.session_config_changed.connect(self._rebuild)
        store.weights_changed.connect(lambda *_: self._sync_checked())
        self._rebuild(store.session_config)

    def _rebuild(self, config: SessionConfig | None) -> None:
        for b in self.buttons.values():
            self._layout.removeWidget(b)
            b.deleteLater()
        self.buttons.clear()

        weights = config.weights if config is not None and config.weights else DEFAULT_WEIGHTS
        for w in sorted(weights):
            b = QToolButton(self)
            b.setText(str(w))
            b.setCheckable(True)
            b.toggled.connect(lambda _checked, weight=w: self._on_toggled(weight))
            self._layout.addWidget(b)
            self.buttons[w] = b
        self._sync_checked()

    def _sync_checked(self) -> None:
        selected = set(self.store.selected_weights)
        for w, b in self.buttons.items():
            b.blockSignals(True)
            b.setChecked(w in selected)
            b.blockSignals(False)

    def _on_toggled(self, weight: int) -> None:
        checked = [w for w, b in self.buttons.items() if b.isChecked()]
        if not checked:
            # keep at least one weight visible
            self._sync_checked()
            return
        self.store.set_selected_weights(checked)
