from __future__ import annotations

import pyqtgraph as pg
from PySide6.QtGui import QColor

from fontmap.model.fonts import NO_CLUSTER

CLUSTER_HUES = 10
UNCLUSTERED_COLOR = QColor("#9e9e9e")
SELECTION_COLOR = QColor("#e53935")
FAMILY_COLOR = QColor("#fb8c00")
LABEL_COLOR = QColor("#212121")

_cache: dict[int, QColor] = {}


def cluster_color(cluster_id: int) -> QColor:
    """Stable palette colour for a cluster label; unclustered points are gray."""
    if cluster_id == NO_CLUSTER or cluster_id < 0:
        return UNCLUSTERED_COLOR
    color = _cache.get(cluster_id)
    if color is None:
        color = pg.intColor(cluster_id, hues=CLUSTER_HUES)
        _cache[cluster_id] = color
    return color


def dimmed(color: QColor, alpha: int = 50) -> QColor:
    out = QColor(color)
    out.setAlpha(alpha)
    return out
