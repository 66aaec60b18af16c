"""
Session Backend
===============
The request/response side of the external boundary.

Why is this file needed?
------------------------
1. Contract: `Backend` lists the calls the viewer makes to the processing
   pipeline's session store. The sync layer only talks to this protocol.
2. Local store: `LocalSessionBackend` implements it on top of the directory
   tree the pipeline writes:

       <root>/Generated/<session_id>/config.json              session config
       <root>/Generated/<session_id>/<safe_name>/config.json  one font sample
       <root>/Generated/<session_id>/<safe_name>/sample.png   its rendered preview

All methods block and are meant to run on a worker thread. "Not found" is
reported as None; I/O and decoding failures raise ExternalFetchError.
"""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Protocol

from fontmap.model.errors import ExternalFetchError

logger = logging.getLogger(__name__)

SESSIONS_DIR_NAME = "Generated"
CONFIG_FILE_NAME = "config.json"
SAMPLE_IMAGE_NAME = "sample.png"


class Backend(Protocol):
    def get_latest_session_id(self) -> str | None: ...
    def get_session_info(self, session_id: str) -> dict[str, Any] | None: ...
    def get_compressed_vectors(self, session_id: str) -> dict[str, Any] | None: ...
    def get_session_directory(self, session_id: str) -> Path: ...
    def get_available_sessions(self) -> list[dict[str, Any]]: ...
    def delete_session(self, session_id: str) -> bool: ...


def _read_json(path: Path, operation: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ExternalFetchError(operation, f"cannot read '{path}': {e}") from e


def sample_image_path(session_directory: str | Path, safe_name: str) -> Path | None:
    """Path of the rendered preview of one sample, or None if it has not been written."""
    if not session_directory or not safe_name:
        return None
    path = Path(session_directory) / safe_name / SAMPLE_IMAGE_NAME
    return path if path.is_file() else None


class LocalSessionBackend:
    """Reads sessions from the pipeline's output directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.sessions_dir = self.root / SESSIONS_DIR_NAME

    def get_session_directory(self, session_id: str) -> Path:
        if not session_id or session_id in (".", "..") or "/" in session_id or "\\" in session_id:
            raise ValueError(f"Invalid session id '{session_id}'.")
        return self.sessions_dir / session_id

    def get_session_info(self, session_id: str) -> dict[str, Any] | None:
        path = self.get_session_directory(session_id) / CONFIG_FILE_NAME
        if not path.is_file():
            return None
        data = _read_json(path, "get_session_info")
        if not isinstance(data, dict):
            raise ExternalFetchError("get_session_info", f"'{path}' does not hold an object")
        return data

    def get_compressed_vectors(self, session_id: str) -> dict[str, Any] | None:
        session_dir = self.get_session_directory(session_id)
        if not session_dir.is_dir():
            return None

        fonts: dict[str, Any] = {}
        try:
            entries = sorted(p for p in session_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise ExternalFetchError("get_compressed_vectors", f"cannot list '{session_dir}': {e}") from e

        for font_dir in entries:
            config_path = font_dir / CONFIG_FILE_NAME
            if not config_path.is_file():
                continue
            try:
                data = _read_json(config_path, "get_compressed_vectors")
            except ExternalFetchError as e:
                # one unreadable sample does not invalidate the session
                logger.warning(f"Skipping font sample: {e}")
                continue
            key = data.get("safe_name", font_dir.name) if isinstance(data, dict) else font_dir.name
            fonts[str(key)] = data
        return fonts

    def get_available_sessions(self) -> list[dict[str, Any]]:
        if not self.sessions_dir.is_dir():
            return []

        sessions: list[dict[str, Any]] = []
        for path in self.sessions_dir.iterdir():
            config_path = path / CONFIG_FILE_NAME
            if not config_path.is_file():
                continue
            try:
                data = _read_json(config_path, "get_available_sessions")
            except ExternalFetchError as e:
                logger.warning(f"Skipping session: {e}")
                continue
            if isinstance(data, dict):
                data.setdefault("id", path.name)
                sessions.append(data)

        sessions.sort(key=lambda s: str(s.get("modified_at") or s.get("date") or ""), reverse=True)
        return sessions

    def get_latest_session_id(self) -> str | None:
        sessions = self.get_available_sessions()
        return str(sessions[0]["id"]) if sessions else None

    def delete_session(self, session_id: str) -> bool:
        session_dir = self.get_session_directory(session_id)
        if not session_dir.is_dir():
            return False
        try:
            shutil.rmtree(session_dir)
        except OSError as e:
            raise ExternalFetchError("delete_session", f"cannot delete '{session_dir}': {e}") from e
        logger.info(f"Deleted session '{session_id}'")
        return True
