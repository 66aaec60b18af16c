"""
Application Initialization
==========================
This module constructs the object graph of the viewer and starts the Qt Event
Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging and the QApplication (organisation ids, QSettings format).
2. Reads the user settings and builds the backend and pipeline runner.
3. Instantiates the Store, the sync and search controllers and the Main Window.
4. Prevents circular import errors by being the orchestrator.
"""
import logging
import sys

from fontmap.app.application import create_app
from fontmap.app.backend import LocalSessionBackend
from fontmap.app.pipeline import PipelineRunner
from fontmap.app.search import SearchController
from fontmap.app.state import Store
from fontmap.app.sync import SyncController
from fontmap.app.ui.main_window import MainWindow
from fontmap.config import ViewerSettings
from fontmap.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    # 1. Setup Logging (Console + Optional File)
    # FONTMAP_LOG_LEVEL=debug shows everything during development
    setup_logging(level=logging.INFO)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Settings and external collaborators
    settings = ViewerSettings.load()
    logger.info(f"Reading sessions from '{settings.data_root}'")
    backend = LocalSessionBackend(settings.data_root)
    pipeline = PipelineRunner(settings.pipeline_command, app) if settings.pipeline_command else None

    # 4. Initialize the Data Model and controllers
    store = Store()
    sync = SyncController(store, backend, pipeline)
    search = SearchController(store, interval_ms=settings.debounce_ms)

    # 5. Initialize the Main Window, passing the model
    window = MainWindow(store, sync, search)
    window.show()

    sync.load_latest_session()

    # 6. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
