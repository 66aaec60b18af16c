from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from fontmap.app.state import Store
from fontmap.config import SEARCH_DEBOUNCE_MS

logger = logging.getLogger(__name__)


class SearchController(QObject):
    """
    Debounces raw search input before committing it to the store.

    Every keystroke restarts a single-shot timer; only the text present when
    the input has been quiet for `interval_ms` is committed.
    """
    committed = Signal(str)

    def __init__(self, store: Store, interval_ms: int = SEARCH_DEBOUNCE_MS, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.store = store
        self._pending: str = store.search_query

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._commit)

    @property
    def pending_query(self) -> str:
        return self._pending

    def is_pending(self) -> bool:
        return self._timer.isActive()

    def on_query_changed(self, text: str) -> None:
        """Slot for the search field's textChanged signal."""
        self._pending = text
        self._timer.start()

    def clear(self) -> None:
        """Clear the query immediately, without waiting for the debounce delay."""
        self._timer.stop()
        self._pending = ""
        self._commit()

    def flush(self) -> None:
        """Commit a pending query now (e.g. on Enter)."""
        if self._timer.isActive():
            self._timer.stop()
            self._commit()

    def _commit(self) -> None:
        query = self._pending
        logger.debug(f"Committing search query '{query}'")
        self.store.commit_search_query(query)
        self.committed.emit(query)
