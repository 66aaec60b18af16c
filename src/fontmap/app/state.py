"""
Application Store
=================
The single state container of the viewer.

Why is this file needed?
------------------------
1. Ownership: Every piece of shared state lives here and is changed only via
   the named mutation methods below. The sync layer writes session and font
   data, the UI writes query, selection and weights.
2. Derived values: The filtered key set, canvas layout and selection validity
   are recomputed from the current snapshot whenever a field they depend on
   changes (see DERIVED_DEPENDENCIES). All of them are up to date before any
   change signal is emitted, so observers never see old and new data mixed.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from fontmap.config import DEFAULT_WEIGHTS
from fontmap.model.fonts import FontMap, FontMetadata, ProcessStatus, SessionConfig
from fontmap.model.geometry import CanvasBounds, compute_bounds, layout_points
from fontmap.model.reconcile import reconcile
from fontmap.model.search import SearchEngine, SearchResult

logger = logging.getLogger(__name__)

# derived value -> store fields it reads
DERIVED_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "layout": ("fonts",),
    "filtered_keys": ("fonts", "search_query"),
    "selection": ("fonts",),
}


class Store(QObject):
    """Central state store with signals for widget sync."""
    session_changed = Signal(str)
    session_config_changed = Signal(object)
    session_directory_changed = Signal(str)
    status_changed = Signal(object)
    processing_changed = Signal(bool)
    progress_changed = Signal(int, int)

    fonts_changed = Signal(object)
    layout_changed = Signal(object)
    filter_changed = Signal(object)
    query_changed = Signal(str)
    selection_changed = Signal(object)
    weights_changed = Signal(object)

    def __init__(self, search_engine: SearchEngine | None = None) -> None:
        super().__init__()
        self._search = search_engine or SearchEngine()

        # session
        self._session_id: str = ""
        self._session_config: SessionConfig | None = None
        self._session_directory: str = ""
        self._status: ProcessStatus = ProcessStatus.EMPTY
        self._is_processing: bool = False
        self._progress: tuple[int, int] = (0, 0)

        # fonts
        self._fonts: FontMap = {}
        self._fonts_version: int = 0

        # ui
        self._search_query: str = ""
        self._selected_key: str | None = None
        self._selected_weights: tuple[int, ...] = DEFAULT_WEIGHTS

        # derived
        self._filter = SearchResult()
        self._layout: dict[str, tuple[float, float]] = {}
        self._bounds: CanvasBounds | None = None
        self.filter_computations = 0

    # ------------------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def session_config(self) -> SessionConfig | None:
        return self._session_config

    @property
    def session_directory(self) -> str:
        return self._session_directory

    @property
    def status(self) -> ProcessStatus:
        return self._status

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def progress(self) -> tuple[int, int]:
        """(numerator, denominator) as reported by the pipeline, unclamped."""
        return self._progress

    @property
    def fonts(self) -> Mapping[str, FontMetadata]:
        return self._fonts

    @property
    def fonts_version(self) -> int:
        return self._fonts_version

    @property
    def sample_count(self) -> int:
        return len(self._fonts)

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def filtered_keys(self) -> frozenset[str]:
        return self._filter.keys

    @property
    def ranked_keys(self) -> tuple[str, ...]:
        """Matches of the current query, best first. Empty when no query is set."""
        return self._filter.ranked

    @property
    def layout(self) -> Mapping[str, tuple[float, float]]:
        return self._layout

    @property
    def bounds(self) -> CanvasBounds | None:
        return self._bounds

    @property
    def selected_key(self) -> str | None:
        return self._selected_key

    @property
    def selected_font(self) -> FontMetadata | None:
        if self._selected_key is None:
            return None
        return self._fonts.get(self._selected_key)

    @property
    def selected_family(self) -> str | None:
        font = self.selected_font
        return font.family_name if font is not None else None

    @property
    def selected_weights(self) -> tuple[int, ...]:
        return self._selected_weights

    # ------------------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------------------

    def _commit(self, changed: set[str]) -> None:
        """Recompute the derived values depending on `changed`, then notify observers."""
        dirty = {name for name, deps in DERIVED_DEPENDENCIES.items() if changed.intersection(deps)}

        layout_dirty = "layout" in dirty
        if layout_dirty:
            self._bounds = compute_bounds(self._fonts.values())
            self._layout = layout_points(self._fonts, bounds=self._bounds)

        old_selection = self._selected_key
        if "selection" in dirty and self._selected_key is not None and self._selected_key not in self._fonts:
            logger.debug(f"Selected font '{self._selected_key}' is gone, clearing selection.")
            self._selected_key = None

        filter_dirty = False
        if "filtered_keys" in dirty:
            result = self._search.filter(self._fonts, self._fonts_version, self._search_query)
            self.filter_computations += 1
            filter_dirty = result != self._filter
            self._filter = result
            # the top match follows a newly committed query
            if "search_query" in changed and self._search_query and result.top is not None:
                self._selected_key = result.top

        if "fonts" in changed:
            self.fonts_changed.emit(self._fonts)
        if "search_query" in changed:
            self.query_changed.emit(self._search_query)
        if layout_dirty:
            self.layout_changed.emit(self._layout)
        if filter_dirty:
            self.filter_changed.emit(self._filter.keys)
        if self._selected_key != old_selection:
            self.selection_changed.emit(self._selected_key)

    # ------------------------------------------------------------------------------
    # Session mutations (sync layer)
    # ------------------------------------------------------------------------------

    def set_session_id(self, session_id: str) -> None:
        if session_id == self._session_id:
            return
        logger.info(f"Switching to session '{session_id}'")
        self._session_id = session_id
        self.session_changed.emit(session_id)

    def apply_session_config(self, config: SessionConfig | None) -> None:
        """Store a fetched session config and the values it implies (status, weights)."""
        if config == self._session_config:
            return
        self._session_config = config
        self.session_config_changed.emit(config)
        if config is None:
            return
        self.set_status(config.process_status)
        if config.weights:
            self.set_selected_weights(config.weights)

    def set_session_directory(self, directory: str | Path) -> None:
        directory = str(directory)
        if directory != self._session_directory:
            self._session_directory = directory
            self.session_directory_changed.emit(directory)

    def apply_fonts(self, fonts: Mapping[str, FontMetadata]) -> bool:
        """
        Replace the font map, keeping the stored objects of unchanged entries.

        Returns:
            True if the map actually changed.
        """
        merged, changed = reconcile(self._fonts, fonts)
        if not changed:
            logger.debug("Fetched font map is identical to the stored one.")
            return False
        self._fonts = merged
        self._fonts_version += 1
        logger.info(f"Font map updated: {len(merged)} samples (version {self._fonts_version})")
        self._commit({"fonts"})
        return True

    def set_status(self, status: ProcessStatus) -> None:
        if status != self._status:
            self._status = status
            self.status_changed.emit(status)

    def set_processing(self, processing: bool) -> None:
        if processing != self._is_processing:
            self._is_processing = processing
            self.processing_changed.emit(processing)

    # ---- progress ----

    def _set_progress(self, numerator: int, denominator: int) -> None:
        if (numerator, denominator) != self._progress:
            self._progress = (numerator, denominator)
            self.progress_changed.emit(numerator, denominator)

    def reset_progress_numerator(self, value: int = 0) -> None:
        self._set_progress(value, self._progress[1])

    def reset_progress_denominator(self, value: int = 0) -> None:
        self._set_progress(self._progress[0], value)

    def increase_progress_numerator(self, delta: int) -> None:
        self._set_progress(self._progress[0] + delta, self._progress[1])

    def set_progress_denominator(self, value: int) -> None:
        self._set_progress(self._progress[0], value)

    def decrease_progress_denominator(self, delta: int) -> None:
        self._set_progress(self._progress[0], self._progress[1] - delta)

    # ------------------------------------------------------------------------------
    # UI mutations
    # ------------------------------------------------------------------------------

    def commit_search_query(self, query: str) -> None:
        """Commit a debounced query. Called by the search controller's timer only."""
        if query == self._search_query:
            return
        self._search_query = query
        self._commit({"search_query"})

    def select(self, key: str | None) -> None:
        if key is not None and key not in self._fonts:
            logger.debug(f"Ignoring selection of unknown font '{key}'")
            return
        if key != self._selected_key:
            self._selected_key = key
            self.selection_changed.emit(key)

    def set_selected_weights(self, weights: Iterable[int]) -> None:
        weights = tuple(sorted(set(int(w) for w in weights)))
        if weights != self._selected_weights:
            self._selected_weights = weights
            self.weights_changed.emit(weights)
