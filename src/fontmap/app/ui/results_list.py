"""
Results List
============
The font samples as a list next to the map.

Why is this file needed?
------------------------
1. Navigation: Lists the matches of the committed query, best first, or every
   sample grouped by cluster when no query is set. Clicking a row selects the
   sample, and the list scrolls to selections made on the map.
2. Previews: Each row can show the image the pipeline rendered for the sample
   in the session directory. The "Images" button shows or hides them.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (
    QAbstractItemView, QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QToolButton, QVBoxLayout, QWidget,
)

from fontmap.app.backend import sample_image_path
from fontmap.app.state import Store
from fontmap.app.ui.colors import cluster_color

logger = logging.getLogger(__name__)

KEY_ROLE = Qt.ItemDataRole.UserRole
PREVIEW_SIZE = QSize(160, 32)


def list_order(store: Store) -> list[str]:
    """
    Keys in display order.

    With a query: the ranked matches. Without one: clustered samples by
    cluster id, unclustered ones last, then family name and weight.
    """
    if store.search_query:
        return list(store.ranked_keys)

    fonts = store.fonts

    def sort_key(key: str) -> tuple:
        font = fonts[key]
        return font.cluster_id < 0, font.cluster_id, font.family_name.casefold(), font.weight, key

    return sorted(fonts, key=sort_key)


class ResultsList(QWidget):
    def __init__(self, store: Store, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self._show_images = True
        self._pixmaps: dict[str, QPixmap | None] = {}
        self._items: dict[str, QListWidgetItem] = {}

        v = QVBoxLayout(self)
        v.setContentsMargins(6, 6, 6, 6)

        header = QHBoxLayout()
        self.title = QLabel(self)
        header.addWidget(self.title, 1)
        self.images_button = QToolButton(self)
        self.images_button.setText(self.tr("Images"))
        self.images_button.setToolTip(self.tr("Show or hide sample images"))
        self.images_button.setCheckable(True)
        self.images_button.setChecked(self._show_images)
        self.images_button.toggled.connect(self.set_show_images)
        header.addWidget(self.images_button)
        v.addLayout(header)

        self.list = QListWidget(self)
        self.list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.list.setIconSize(PREVIEW_SIZE)
        self.list.setUniformItemSizes(True)
        self.list.currentItemChanged.connect(self._on_row_chosen)
        self.list.itemClicked.connect(self._on_row_chosen)
        v.addWidget(self.list, 1)

        store.fonts_changed.connect(lambda *_: self.rebuild())
        store.query_changed.connect(lambda *_: self.rebuild())
        store.selection_changed.connect(lambda *_: self.sync_selection())
        store.session_directory_changed.connect(lambda *_: self._on_directory_changed())

        self.rebuild()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def show_images(self) -> bool:
        return self._show_images

    def keys(self) -> list[str]:
        """Keys of the rows, top to bottom."""
        return [self.list.item(row).data(KEY_ROLE) for row in range(self.list.count())]

    def set_show_images(self, show: bool) -> None:
        if show == self._show_images:
            return
        self._show_images = show
        self.images_button.setChecked(show)
        for key, item in self._items.items():
            item.setIcon(self._icon(key))

    def rebuild(self) -> None:
        fonts = self.store.fonts
        keys = list_order(self.store)

        self.list.blockSignals(True)
        self.list.clear()
        self._items = {}
        for key in keys:
            font = fonts[key]
            item = QListWidgetItem(f"{font.weight}  {font.font_name}")
            item.setData(KEY_ROLE, key)
            item.setToolTip(font.family_name)
            item.setForeground(cluster_color(font.cluster_id))
            item.setIcon(self._icon(key))
            self.list.addItem(item)
            self._items[key] = item
        self.list.blockSignals(False)

        if self.store.search_query:
            self.title.setText(self.tr("{0} matches").format(len(keys)))
        else:
            self.title.setText(self.tr("{0} samples").format(len(keys)))
        self.sync_selection()

    def sync_selection(self) -> None:
        """Highlight the selected sample and scroll it into the middle of the list."""
        item = self._items.get(self.store.selected_key) if self.store.selected_key else None
        self.list.blockSignals(True)
        if item is None:
            self.list.setCurrentRow(-1)
            self.list.clearSelection()
        else:
            self.list.setCurrentItem(item)
            self.list.scrollToItem(item, QAbstractItemView.ScrollHint.PositionAtCenter)
        self.list.blockSignals(False)

    # ------------------------------------------------------------------------------
    # Previews
    # ------------------------------------------------------------------------------

    def _pixmap(self, key: str) -> QPixmap | None:
        if key not in self._pixmaps:
            path = sample_image_path(self.store.session_directory, key)
            pixmap = QPixmap(str(path)) if path is not None else None
            if pixmap is not None and pixmap.isNull():
                logger.warning(f"Cannot load sample image '{path}'")
                pixmap = None
            self._pixmaps[key] = pixmap
        return self._pixmaps[key]

    def _icon(self, key: str) -> QIcon:
        if not self._show_images:
            return QIcon()
        pixmap = self._pixmap(key)
        return QIcon(pixmap) if pixmap is not None else QIcon()

    def _on_directory_changed(self) -> None:
        self._pixmaps.clear()
        for key, item in self._items.items():
            item.setIcon(self._icon(key))

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def _on_row_chosen(self, current: QListWidgetItem | None, *_) -> None:
        if current is not None:
            self.store.select(current.data(KEY_ROLE))
