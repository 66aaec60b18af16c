"""
Pipeline Process
================
Runs the external processing pipeline and relays its event stream.

Why is this file needed?
------------------------
1. Responsiveness: The pipeline (render, vectorize, compress, cluster) runs as
   a separate process driven by QProcess, so the GUI thread never blocks.
2. Events: The process prints one JSON object per line,
   {"event": "<name>", "payload": <value>}. Each line becomes an
   `event_received` signal; any other output is forwarded to the log.

Classes:
    JobRequest: Parameters of one pipeline run.
    PipelineRunner: QProcess wrapper with run/stop and Qt signals.
"""
from __future__ import annotations

import json
import logging
import shlex
from dataclasses import asdict, dataclass, field
from typing import Any

from PySide6.QtCore import QObject, QProcess, Signal

from fontmap.model.fonts import ProcessStatus

logger = logging.getLogger(__name__)

# Event names emitted by the pipeline, in pipeline order for the phase events
PROGRESS_NUMERATOR_RESET = "progress_numerator_reset"
PROGRESS_DENOMINATOR_RESET = "progress_denominator_reset"
PROGRESS_NUMERATOR_INCREASE = "progress_numerator_increase"
PROGRESS_DENOMINATOR_SET = "progress_denominator_set"
PROGRESS_DENOMINATOR_DECREASE = "progress_denominator_decrease"
FONT_GENERATION_COMPLETE = "font_generation_complete"
VECTORIZATION_COMPLETE = "vectorization_complete"
COMPRESSION_COMPLETE = "compression_complete"
CLUSTERING_COMPLETE = "clustering_complete"
ALL_JOBS_COMPLETE = "all_jobs_complete"


@dataclass
class JobRequest:
    text: str
    weights: list[int] = field(default_factory=lambda: [400])
    algorithm: dict[str, Any] | None = None
    session_id: str | None = None
    override_status: ProcessStatus | None = None

    def to_json(self) -> str:
        data = asdict(self)
        if self.override_status is not None:
            data["override_status"] = self.override_status.value
        return json.dumps(data)


class PipelineRunner(QObject):
    # Signals to update the UI from the pipeline process
    started = Signal()
    event_received = Signal(str, object)
    finished = Signal(bool, str)  # (success, session id)
    error_occurred = Signal(str)

    def __init__(self, command: str, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.command = command
        self._process: QProcess | None = None
        self._buffer = b""
        self._session_id = ""
        self._request_bytes = b""

    def is_running(self) -> bool:
        return self._process is not None and self._process.state() != QProcess.ProcessState.NotRunning

    def run(self, request: JobRequest) -> bool:
        """
        Start the pipeline with `request` written to its stdin.

        Returns:
            False if no command is configured or a run is already active.
        """
        if not self.command:
            msg = "No pipeline command configured."
            logger.error(msg)
            self.error_occurred.emit(msg)
            return False
        if self.is_running():
            logger.warning("Pipeline is already running.")
            return False

        args = shlex.split(self.command)
        self._buffer = b""
        self._session_id = request.session_id or ""
        self._request_bytes = request.to_json().encode("utf-8") + b"\n"

        process = QProcess(self)
        process.started.connect(self._on_started)
        process.readyReadStandardOutput.connect(self._on_stdout)
        process.readyReadStandardError.connect(self._on_stderr)
        process.finished.connect(self._on_finished)
        process.errorOccurred.connect(self._on_error)
        self._process = process

        logger.info(f"Starting pipeline: {self.command}")
        process.start(args[0], args[1:])
        return True

    def stop(self) -> None:
        if self.is_running():
            logger.info("Stopping pipeline.")
            self._process.kill()

    # ------------------------------------------------------------------------------
    # Process callbacks
    # ------------------------------------------------------------------------------

    def _on_started(self) -> None:
        if self._process is None:
            return
        self._process.write(self._request_bytes)
        self._process.closeWriteChannel()
        self.started.emit()

    def _on_stdout(self) -> None:
        if self._process is None:
            return
        self._buffer += bytes(self._process.readAllStandardOutput().data())
        *lines, self._buffer = self._buffer.split(b"\n")
        for line in lines:
            self._handle_line(line.decode("utf-8", errors="replace").strip())

    def _on_stderr(self) -> None:
        if self._process is None:
            return
        text = bytes(self._process.readAllStandardError().data()).decode("utf-8", errors="replace")
        for line in text.splitlines():
            if line.strip():
                logger.warning(f"[pipeline] {line}")

    def _handle_line(self, line: str) -> None:
        if not line:
            return
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            logger.info(f"[pipeline] {line}")
            return
        if not isinstance(message, dict) or "event" not in message:
            logger.info(f"[pipeline] {line}")
            return

        name = str(message["event"])
        payload = message.get("payload")
        if name == ALL_JOBS_COMPLETE and isinstance(payload, str):
            self._session_id = payload
        logger.debug(f"Pipeline event '{name}': {payload!r}")
        self.event_received.emit(name, payload)

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        self._on_stdout()
        if self._buffer:
            self._handle_line(self._buffer.decode("utf-8", errors="replace").strip())
            self._buffer = b""

        success = exit_status == QProcess.ExitStatus.NormalExit and exit_code == 0
        if success:
            logger.info(f"Pipeline finished for session '{self._session_id}'")
        else:
            logger.error(f"Pipeline failed (exit code {exit_code}, status {exit_status})")
        if self._process is not None:
            self._process.deleteLater()
        self._process = None
        self.finished.emit(success, self._session_id)

    def _on_error(self, error: QProcess.ProcessError) -> None:
        if error == QProcess.ProcessError.FailedToStart:
            msg = f"Pipeline command could not be started: {self.command}"
            logger.error(msg)
            self._process = None
            self.error_occurred.emit(msg)
            self.finished.emit(False, "")
