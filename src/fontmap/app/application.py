"""
Application Setup
=================
Creates the QApplication together with the identity QSettings relies on.

`QSettings()` without arguments finds its file through the organisation and
application names, so `configure_identity` has to run before
`fontmap.config.ViewerSettings.load` reads anything. The INI format keeps the
settings file editable by hand on every platform.
"""
from __future__ import annotations

import os
import sys

from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtWidgets import QApplication

from fontmap import __version__

ORG_ID = "fontmap"
APP_ID = "fontmap-viewer"
ORG_DOMAIN = "fontmap.local"

VISIBLE_APP_NAME = "Font Map"


def configure_identity() -> None:
    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
    QCoreApplication.setApplicationName(APP_ID)
    QCoreApplication.setApplicationVersion(__version__)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)


def create_app(argv: list[str] | None = None) -> QApplication:
    """Return the QApplication, creating it on first use."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    configure_identity()

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv if argv is None else argv)

    app.setApplicationDisplayName(QCoreApplication.translate("App", VISIBLE_APP_NAME))
    return app
