from __future__ import annotations

from PySide6.QtWidgets import QHBoxLayout, QLabel, QLineEdit, QToolButton, QWidget

from fontmap.app.search import SearchController
from fontmap.app.state import Store


class SearchBar(QWidget):
    """Search field feeding the debounced SearchController, plus a match counter."""
    def __init__(self, store: Store, controller: SearchController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self.controller = controller

        h = QHBoxLayout(self)
        h.setContentsMargins(6, 6, 6, 6)

        self.edit = QLineEdit(self)
        self.edit.setPlaceholderText(self.tr("Search fonts, families, designers…"))
        self.edit.setText(store.search_query)
        h.addWidget(self.edit, 1)

        self.clear_button = QToolButton(self)
        self.clear_button.setText(self.tr("Clear"))
        h.addWidget(self.clear_button)

        self.count_label = QLabel(self)
        h.addWidget(self.count_label)

        self.edit.textChanged.connect(controller.on_query_changed)
        self.edit.returnPressed.connect(controller.flush)
        self.clear_button.clicked.connect(self._on_clear)

        store.filter_changed.connect(lambda *_: self._update_count())
        store.fonts_changed.connect(lambda *_: self._update_count())
        self._update_count()

    def _on_clear(self) -> None:
        self.edit.blockSignals(True)
        self.edit.clear()
        self.edit.blockSignals(False)
        self.controller.clear()

    def _update_count(self) -> None:
        self.count_label.setText(
            self.tr("{0} / {1}").format(len(self.store.filtered_keys), self.store.sample_count)
        )
