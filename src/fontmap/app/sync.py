"""
Reactive Sync Layer
===================
Mirrors externally fetched data into the store.

Why is this file needed?
------------------------
1. Responsiveness: Backend reads run on a QThreadPool. Results come back to
   the GUI thread through queued signals, so every store mutation happens on
   one thread.
2. Staleness: Each fetch remembers the session id and a generation number. A
   result that arrives after the session changed, or after a newer request
   for the same resource, is dropped.
3. Events: Pipeline progress and phase completion events are translated into
   store updates, and the data is refetched once the pipeline is done.

Classes:
    Resource: One externally sourced value keyed by the session id.
    SyncController: Wires store, backend and pipeline together.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from fontmap.app.backend import Backend
from fontmap.app.pipeline import (
    ALL_JOBS_COMPLETE,
    CLUSTERING_COMPLETE,
    COMPRESSION_COMPLETE,
    FONT_GENERATION_COMPLETE,
    PROGRESS_DENOMINATOR_DECREASE,
    PROGRESS_DENOMINATOR_RESET,
    PROGRESS_DENOMINATOR_SET,
    PROGRESS_NUMERATOR_INCREASE,
    PROGRESS_NUMERATOR_RESET,
    VECTORIZATION_COMPLETE,
    JobRequest,
    PipelineRunner,
)
from fontmap.app.state import Store
from fontmap.model.fonts import FontMap, ProcessStatus, SessionConfig, parse_font_map, parse_session_config

logger = logging.getLogger(__name__)

PHASE_STATUS: dict[str, ProcessStatus] = {
    FONT_GENERATION_COMPLETE: ProcessStatus.GENERATED,
    VECTORIZATION_COMPLETE: ProcessStatus.VECTORIZED,
    COMPRESSION_COMPLETE: ProcessStatus.COMPRESSED,
    CLUSTERING_COMPLETE: ProcessStatus.CLUSTERED,
}


# -------------------------------------------------------------------------------
# Background calls
# -------------------------------------------------------------------------------

class WorkerSignals(QObject):
    done = Signal(int, object)
    failed = Signal(int, str)


class CallWorker(QRunnable):
    """Runs one blocking backend call on the thread pool."""

    def __init__(self, request_id: int, fn: Callable[[], Any], name: str, signals: WorkerSignals) -> None:
        super().__init__()
        self.request_id = request_id
        self.fn = fn
        self.name = name
        self.signals = signals

    def run(self) -> None:
        try:
            result = self.fn()
        except Exception as e:
            logger.error(f"Error in background call '{self.name}': {e}")
            self.signals.failed.emit(self.request_id, str(e))
            return
        self.signals.done.emit(self.request_id, result)


class AsyncCaller(QObject):
    """
    Submits CallWorkers and hands their results back on the GUI thread.

    The shared WorkerSignals object lives in the thread that created the
    caller, so emissions from pool threads reach the slots below as queued
    calls.
    """

    def __init__(self, pool: QThreadPool, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.pool = pool
        self.signals = WorkerSignals(self)
        self.signals.done.connect(self._on_done)
        self.signals.failed.connect(self._on_failed)
        self._next_id = 0
        self._callbacks: dict[int, tuple[Callable[[Any], None], Callable[[str], None] | None]] = {}

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def call(
        self,
        name: str,
        fn: Callable[[], Any],
        on_done: Callable[[Any], None],
        on_failed: Callable[[str], None] | None = None,
    ) -> None:
        self._next_id += 1
        self._callbacks[self._next_id] = (on_done, on_failed)
        self.pool.start(CallWorker(self._next_id, fn, name, self.signals))

    @Slot(int, object)
    def _on_done(self, request_id: int, result: Any) -> None:
        on_done, _ = self._callbacks.pop(request_id, (None, None))
        if on_done is not None:
            on_done(result)

    @Slot(int, str)
    def _on_failed(self, request_id: int, message: str) -> None:
        _, on_failed = self._callbacks.pop(request_id, (None, None))
        if on_failed is not None:
            on_failed(message)


# -------------------------------------------------------------------------------
# Resources
# -------------------------------------------------------------------------------

class Resource(QObject):
    """
    An external value fetched for the store's current session.

    Refetches whenever the session id changes and on explicit `refetch()`.
    Failures are logged and leave the store untouched.
    """
    resolved = Signal(str, object)
    failed = Signal(str, str)

    def __init__(
        self,
        name: str,
        store: Store,
        caller: AsyncCaller,
        loader: Callable[[str], Any],
        apply: Callable[[Any], None],
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.name = name
        self.store = store
        self.caller = caller
        self.loader = loader
        self.apply = apply
        self._generation = 0
        self.loading = False

        store.session_changed.connect(lambda *_: self.refetch())

    def refetch(self) -> None:
        session_id = self.store.session_id
        self._generation += 1
        if not session_id:
            self.loading = False
            return

        generation = self._generation
        self.loading = True
        logger.debug(f"Fetching {self.name} for session '{session_id}' (#{generation})")
        self.caller.call(
            f"{self.name}:{session_id}",
            lambda: self.loader(session_id),
            lambda value: self._on_resolved(generation, session_id, value),
            lambda message: self._on_failed(generation, session_id, message),
        )

    def _is_current(self, generation: int, session_id: str) -> bool:
        return generation == self._generation and session_id == self.store.session_id

    def _on_resolved(self, generation: int, session_id: str, value: Any) -> None:
        if not self._is_current(generation, session_id):
            logger.debug(f"Discarding stale {self.name} for session '{session_id}' (#{generation})")
            return
        self.loading = False
        self.apply(value)
        self.resolved.emit(session_id, value)

    def _on_failed(self, generation: int, session_id: str, message: str) -> None:
        if not self._is_current(generation, session_id):
            return
        self.loading = False
        logger.error(f"Failed to fetch {self.name} for session '{session_id}': {message}")
        self.failed.emit(session_id, message)


# -------------------------------------------------------------------------------
# Controller
# -------------------------------------------------------------------------------

class SyncController(QObject):
    """Keeps the store in sync with the backend and the pipeline event stream."""
    sessions_listed = Signal(object)
    session_deleted = Signal(str, bool)

    def __init__(
        self,
        store: Store,
        backend: Backend,
        pipeline: PipelineRunner | None = None,
        pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.store = store
        self.backend = backend
        self.pipeline = pipeline
        self.pool = pool or QThreadPool(self)
        self.caller = AsyncCaller(self.pool, self)

        self.session_config = Resource(
            "session config", store, self.caller, self._load_session_config, store.apply_session_config, self
        )
        self.fonts = Resource(
            "font map", store, self.caller, self._load_fonts, store.apply_fonts, self
        )
        self.session_directory = Resource(
            "session directory", store, self.caller,
            lambda sid: str(backend.get_session_directory(sid)), store.set_session_directory, self
        )

        if pipeline is not None:
            pipeline.event_received.connect(self.handle_event)
            pipeline.finished.connect(self._on_jobs_finished)

    # ---- loaders (worker thread) ----

    def _load_session_config(self, session_id: str) -> SessionConfig | None:
        payload = self.backend.get_session_info(session_id)
        if not payload:
            return None
        return parse_session_config(payload)

    def _load_fonts(self, session_id: str) -> FontMap:
        return parse_font_map(self.backend.get_compressed_vectors(session_id))

    # ---- public API ----

    def load_latest_session(self) -> None:
        """Switch to the most recently modified session, if there is one."""
        def _apply(session_id: str | None) -> None:
            if session_id:
                logger.info(f"Latest session: '{session_id}'")
                self.store.set_session_id(session_id)
            else:
                logger.info("No existing sessions found.")

        self.caller.call(
            "latest session id",
            self.backend.get_latest_session_id,
            _apply,
            lambda message: logger.error(f"Failed to get latest session id: {message}"),
        )

    def refetch_all(self) -> None:
        self.session_config.refetch()
        self.fonts.refetch()
        self.session_directory.refetch()

    def list_sessions(self) -> None:
        self.caller.call(
            "available sessions",
            self.backend.get_available_sessions,
            self.sessions_listed.emit,
            lambda message: logger.error(f"Failed to list sessions: {message}"),
        )

    def delete_session(self, session_id: str) -> None:
        def _apply(deleted: bool) -> None:
            self.session_deleted.emit(session_id, bool(deleted))
            if deleted and session_id == self.store.session_id:
                self.load_latest_session()

        self.caller.call(
            f"delete session {session_id}",
            lambda: self.backend.delete_session(session_id),
            _apply,
            lambda message: logger.error(f"Failed to delete session '{session_id}': {message}"),
        )

    def run_jobs(
        self,
        text: str,
        weights: list[int],
        algorithm: dict[str, Any] | None = None,
        session_id: str | None = None,
        override_status: ProcessStatus | None = None,
    ) -> bool:
        if self.pipeline is None:
            logger.error("Cannot run jobs: no pipeline configured.")
            return False
        request = JobRequest(
            text=text,
            weights=list(weights),
            algorithm=algorithm,
            session_id=session_id,
            override_status=override_status,
        )
        started = self.pipeline.run(request)
        if started:
            self.store.set_processing(True)
        return started

    def stop_jobs(self) -> None:
        if self.pipeline is not None:
            self.pipeline.stop()

    # ---- pipeline events ----

    def handle_event(self, name: str, payload: Any) -> None:
        """Apply one pipeline event to the store."""
        store = self.store

        if name in PHASE_STATUS:
            store.set_status(PHASE_STATUS[name])
            if name == CLUSTERING_COMPLETE and isinstance(payload, str) and payload:
                store.set_session_id(payload)
            return

        if name == ALL_JOBS_COMPLETE:
            logger.info(f"All jobs completed for session '{payload}'")
            if isinstance(payload, str) and payload:
                store.set_session_id(payload)
            return

        progress_handlers: dict[str, Callable[[int], None]] = {
            PROGRESS_NUMERATOR_RESET: store.reset_progress_numerator,
            PROGRESS_DENOMINATOR_RESET: store.reset_progress_denominator,
            PROGRESS_NUMERATOR_INCREASE: store.increase_progress_numerator,
            PROGRESS_DENOMINATOR_SET: store.set_progress_denominator,
            PROGRESS_DENOMINATOR_DECREASE: store.decrease_progress_denominator,
        }
        handler = progress_handlers.get(name)
        if handler is None:
            logger.debug(f"Ignoring unknown pipeline event '{name}'")
            return
        try:
            value = int(payload or 0)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring pipeline event '{name}' with non-integer payload {payload!r}")
            return
        handler(value)

    def _on_jobs_finished(self, success: bool, session_id: str) -> None:
        self.store.set_processing(False)
        if not success:
            logger.error("Processing jobs failed; keeping the current data.")
            return
        if session_id:
            self.store.set_session_id(session_id)
        self.refetch_all()
