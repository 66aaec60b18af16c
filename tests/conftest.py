import os
import time

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication

from fontmap.model.fonts import ComputedData, FontMetadata


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def wait_until(qapp):
    """Process Qt events until `predicate()` holds or the timeout expires."""
    def _wait(predicate, timeout_ms: int = 3000) -> bool:
        deadline = time.monotonic() + timeout_ms / 1000.0
        while time.monotonic() < deadline:
            QCoreApplication.processEvents()
            if predicate():
                return True
            QTest.qWait(10)
        return predicate()
    return _wait


@pytest.fixture
def make_font():
    def _make(
        safe_name: str,
        font_name: str | None = None,
        family_name: str | None = None,
        vector: tuple[float, float] | None = None,
        cluster_id: int = 0,
        weight: int = 400,
        **fields,
    ) -> FontMetadata:
        font_name = font_name or safe_name
        return FontMetadata(
            safe_name=safe_name,
            font_name=font_name,
            family_name=family_name or font_name,
            weight=weight,
            computed=ComputedData(vector, cluster_id) if vector is not None else None,
            **fields,
        )
    return _make
