"""
Configuration & Path Management
===============================
This module serves as the central registry for global constants and user
settings.

Why is this file needed?
------------------------
1. Abstraction: Tunables (debounce delay, selection radius, data location)
   live in one place instead of being scattered through the widgets.
2. Overrides: Settings persisted by QSettings can be overridden from the
   environment, which is how the pipeline and tests point the viewer at a
   different session store.

Exports:
    SEARCH_DEBOUNCE_MS (int): Quiet period before a typed query is committed.
    SELECTION_RADIUS_PX (float): Radius of a point's selection area on screen.
    ViewerSettings: User settings loaded from QSettings and the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings, QStandardPaths

# Global Constants
SEARCH_DEBOUNCE_MS: int = 250
SELECTION_RADIUS_PX: float = 40.0
POINT_RADIUS_PX: float = 3.0
SELECTED_POINT_RADIUS_PX: float = 6.0
CULL_PADDING_PX: float = 50.0
LABEL_ZOOM_THRESHOLD: float = 0.25
DEFAULT_WEIGHTS: tuple[int, ...] = (400,)
DEFAULT_SAMPLE_TEXT: str = "Hamburgevons"

ENV_DATA_ROOT = "FONTMAP_DATA_ROOT"
ENV_PIPELINE = "FONTMAP_PIPELINE"
ENV_LOG_LEVEL = "FONTMAP_LOG_LEVEL"
ENV_LOG_FILE = "FONTMAP_LOG_FILE"


def default_data_root() -> Path:
    """Directory that holds the pipeline's 'Generated' session folders."""
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if location:
        return Path(location)
    return Path.home() / ".fontmap"


@dataclass
class ViewerSettings:
    data_root: Path
    pipeline_command: str = ""
    debounce_ms: int = SEARCH_DEBOUNCE_MS

    @classmethod
    def load(cls, settings: QSettings | None = None) -> ViewerSettings:
        """
        Read settings from QSettings, then apply environment overrides.

        Keys:
            data/root, pipeline/command, search/debounce_ms
        """
        if settings is None:
            settings = QSettings()

        root = settings.value("data/root", "", type=str) or str(default_data_root())
        command = settings.value("pipeline/command", "", type=str) or ""
        debounce = settings.value("search/debounce_ms", SEARCH_DEBOUNCE_MS, type=int)

        root = os.environ.get(ENV_DATA_ROOT, root)
        command = os.environ.get(ENV_PIPELINE, command)

        return cls(
            data_root=Path(root).expanduser(),
            pipeline_command=command,
            debounce_ms=max(0, int(debounce)),
        )
