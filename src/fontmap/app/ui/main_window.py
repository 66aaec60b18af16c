"""
Main Window
===========
Puts the search bar, the map canvas and the status area together and connects
them to the store.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QApplication, QLabel, QMainWindow, QProgressBar, QSplitter, QStatusBar, QToolBar, QVBoxLayout, QWidget,
)

from fontmap.app.application import VISIBLE_APP_NAME
from fontmap.app.search import SearchController
from fontmap.app.state import Store
from fontmap.app.sync import SyncController
from fontmap.app.ui.canvas import FontMapCanvas
from fontmap.app.ui.results_list import ResultsList
from fontmap.app.ui.search_bar import SearchBar
from fontmap.app.ui.weight_selector import WeightSelector
from fontmap.app.ui.zoom_controls import ZoomControls
from fontmap.config import DEFAULT_SAMPLE_TEXT
from fontmap.model.fonts import FontMetadata

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, store: Store, sync: SyncController, search: SearchController) -> None:
        super().__init__()
        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1200, 900)

        self.store = store
        self.sync = sync
        self.search = search

        # ---- Central: search bar on top, canvas and results list below ----
        central = QWidget(self)
        v = QVBoxLayout(central)
        v.setContentsMargins(0, 0, 0, 0)
        v.setSpacing(0)

        self.search_bar = SearchBar(store, search, central)
        v.addWidget(self.search_bar, 0)

        self.weight_selector = WeightSelector(store, central)
        v.addWidget(self.weight_selector, 0)

        split = QSplitter(Qt.Orientation.Horizontal, central)
        self.canvas = FontMapCanvas(store, split)
        self.results_list = ResultsList(store, split)
        split.addWidget(self.canvas)
        split.addWidget(self.results_list)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 1)
        v.addWidget(split, 1)

        self.zoom_controls = ZoomControls(self.canvas, self.canvas)
        self.zoom_controls.move(8, 8)

        self.setCentralWidget(central)

        # ---- Toolbar ----
        toolbar = QToolBar(self.tr("Session"), self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.act_reload = QAction(self.tr("Reload"), self)
        self.act_reload.triggered.connect(sync.refetch_all)
        toolbar.addAction(self.act_reload)

        self.act_latest = QAction(self.tr("Latest session"), self)
        self.act_latest.triggered.connect(sync.load_latest_session)
        toolbar.addAction(self.act_latest)

        self.act_run = QAction(self.tr("Run pipeline"), self)
        self.act_run.triggered.connect(self._on_run)
        self.act_stop = QAction(self.tr("Stop"), self)
        self.act_stop.triggered.connect(sync.stop_jobs)
        if sync.pipeline is not None:
            toolbar.addSeparator()
            toolbar.addAction(self.act_run)
            toolbar.addAction(self.act_stop)

        # ---- Status bar ----
        status = QStatusBar(self)
        self.setStatusBar(status)
        self.selection_label = QLabel(status)
        self.session_label = QLabel(status)
        self.progress_label = QLabel(status)
        self.progress_bar = QProgressBar(status)
        self.progress_bar.setMaximumWidth(200)
        self.progress_bar.setTextVisible(False)
        status.addWidget(self.selection_label, 1)
        status.addPermanentWidget(self.session_label)
        status.addPermanentWidget(self.progress_label)
        status.addPermanentWidget(self.progress_bar)

        # ---- Store wiring ----
        self.canvas.copy_requested.connect(self.copy_to_clipboard)
        store.selection_changed.connect(lambda *_: self._update_selection())
        store.fonts_changed.connect(lambda *_: self._update_selection())
        store.session_changed.connect(lambda *_: self._update_session())
        store.status_changed.connect(lambda *_: self._update_session())
        store.fonts_changed.connect(lambda *_: self._update_session())
        store.progress_changed.connect(self._update_progress)
        store.processing_changed.connect(self._update_processing)

        self._update_selection()
        self._update_session()
        self._update_progress(*store.progress)
        self._update_processing(store.is_processing)

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def copy_to_clipboard(self, text: str) -> None:
        QApplication.clipboard().setText(text)
        self.statusBar().showMessage(self.tr("Copied '{0}'").format(text), 2000)
        logger.info(f"Copied '{text}' to clipboard")

    def _on_run(self) -> None:
        config = self.store.session_config
        text = config.preview_text if config is not None and config.preview_text else DEFAULT_SAMPLE_TEXT
        self.sync.run_jobs(text, list(self.store.selected_weights))

    def _update_selection(self) -> None:
        font: FontMetadata | None = self.store.selected_font
        if font is None:
            self.selection_label.setText(self.tr("No font selected"))
            return
        parts = [font.font_name, font.family_name, str(font.weight)]
        if font.designers:
            parts.append(", ".join(font.designers))
        self.selection_label.setText("  |  ".join(parts))

    def _update_session(self) -> None:
        session_id = self.store.session_id or self.tr("none")
        self.session_label.setText(
            self.tr("Session: {0} ({1}, {2} samples)").format(
                session_id, self.store.status.value, self.store.sample_count
            )
        )

    def _update_progress(self, numerator: int, denominator: int) -> None:
        # raw values are shown; only the bar widget needs bounds
        self.progress_label.setText(f"{numerator} / {denominator}")
        self.progress_bar.setRange(0, max(denominator, 1))
        self.progress_bar.setValue(max(0, min(numerator, max(denominator, 1))))

    def _update_processing(self, processing: bool) -> None:
        self.act_run.setEnabled(not processing)
        self.act_stop.setEnabled(processing)
        self.progress_bar.setVisible(processing)
        self.progress_label.setVisible(processing)
        self.setCursor(Qt.CursorShape.BusyCursor if processing else Qt.CursorShape.ArrowCursor)
