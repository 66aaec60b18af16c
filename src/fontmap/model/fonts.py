"""
Font Data Model
===============
Immutable records for the font samples and the session they belong to.

Why is this file needed?
------------------------
1. Parsing: The pipeline writes loosely typed JSON. This module is the single
   place that turns it into typed records and rejects malformed entries.
2. Reconciliation: Records are frozen dataclasses with structural equality,
   so a refetched map can be compared entry by entry with the stored one.

Classes:
    ComputedData: 2D embedding vector and cluster id produced by the pipeline.
    FontMetadata: One font sample (the Item of the map).
    SessionConfig: Metadata of a processing session.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fontmap.model.errors import MalformedDataError

logger = logging.getLogger(__name__)

FontMap = dict[str, "FontMetadata"]

NO_CLUSTER = -1


class ProcessStatus(StrEnum):
    """How far the pipeline got for a session."""
    EMPTY = "empty"
    GENERATED = "generated"
    VECTORIZED = "vectorized"
    COMPRESSED = "compressed"
    CLUSTERED = "clustered"

    @classmethod
    def parse(cls, value: Any) -> ProcessStatus:
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown process status '{value}', assuming '{cls.EMPTY.value}'.")
            return cls.EMPTY


@dataclass(frozen=True)
class ComputedData:
    vector: tuple[float, float]
    cluster_id: int = NO_CLUSTER


@dataclass(frozen=True)
class FontMetadata:
    """A single font sample keyed by its file-system safe name."""
    safe_name: str
    font_name: str
    family_name: str
    weight: int = 400
    weights: tuple[str, ...] = ()
    family_names: tuple[str, ...] = ()
    preferred_family_names: tuple[str, ...] = ()
    publishers: tuple[str, ...] = ()
    designers: tuple[str, ...] = ()
    computed: ComputedData | None = None

    @property
    def vector(self) -> tuple[float, float] | None:
        return self.computed.vector if self.computed is not None else None

    @property
    def cluster_id(self) -> int:
        return self.computed.cluster_id if self.computed is not None else NO_CLUSTER


@dataclass(frozen=True)
class SessionConfig:
    session_id: str
    preview_text: str = ""
    weights: tuple[int, ...] = ()
    process_status: ProcessStatus = ProcessStatus.EMPTY
    modified_at: str | None = None
    samples_amount: int = 0
    clusters_amount: int = 0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


# -------------------------------------------------------------------------------
# Parsing
# -------------------------------------------------------------------------------

def _string_values(value: Any) -> tuple[str, ...]:
    """Flatten a name field (object of localised names, list or scalar) to its strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Mapping):
        value = value.values()
    if isinstance(value, (list, tuple)) or hasattr(value, "__iter__"):
        return tuple(v for v in value if isinstance(v, str))
    return ()


def _parse_computed(raw: Any, key: str) -> ComputedData | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise MalformedDataError("'computed' is not an object", key)

    vector = raw.get("vector")
    if not isinstance(vector, (list, tuple)) or len(vector) < 2:
        raise MalformedDataError("'computed.vector' must hold at least two numbers", key)
    try:
        x, y = float(vector[0]), float(vector[1])
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"'computed.vector' is not numeric ({e})", key) from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise MalformedDataError("'computed.vector' is not finite", key)

    # the pipeline writes the cluster label as "k"
    cluster = raw.get("k", raw.get("cluster_id", NO_CLUSTER))
    try:
        cluster_id = int(cluster)
    except (TypeError, ValueError):
        cluster_id = NO_CLUSTER
    return ComputedData(vector=(x, y), cluster_id=cluster_id)


def parse_font_metadata(key: str, raw: Any) -> FontMetadata:
    """
    Build a FontMetadata record from one entry of the pipeline's font map.

    Args:
        key: Key of the entry in the payload, used when 'safe_name' is missing.
        raw: The decoded JSON object.

    Returns:
        The parsed record.

    Raises:
        MalformedDataError: If the entry is not an object, has no usable name,
            or carries an invalid 'computed' payload.
    """
    if not isinstance(raw, Mapping):
        raise MalformedDataError("entry is not an object", key)

    safe_name = raw.get("safe_name") or key
    font_name = raw.get("font_name")
    if not isinstance(safe_name, str) or not isinstance(font_name, str) or not font_name:
        raise MalformedDataError("missing 'safe_name' or 'font_name'", key)

    family_name = raw.get("family_name")
    if not isinstance(family_name, str):
        family_name = font_name

    try:
        weight = int(raw.get("weight", 400))
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"invalid weight ({e})", key) from e

    return FontMetadata(
        safe_name=safe_name,
        font_name=font_name,
        family_name=family_name,
        weight=weight,
        weights=tuple(str(w) for w in raw.get("weights") or ()),
        family_names=_string_values(raw.get("family_names")),
        preferred_family_names=_string_values(raw.get("preferred_family_names")),
        publishers=_string_values(raw.get("publishers")),
        designers=_string_values(raw.get("designers")),
        computed=_parse_computed(raw.get("computed"), key),
    )


def parse_font_map(payload: Any) -> FontMap:
    """
    Parse the pipeline's font map, dropping entries that cannot be parsed.

    Raises:
        MalformedDataError: If the payload itself is not an object.
    """
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise MalformedDataError(f"font map must be an object, got {type(payload).__name__}")

    fonts: FontMap = {}
    for key, raw in payload.items():
        try:
            meta = parse_font_metadata(str(key), raw)
        except MalformedDataError as e:
            logger.warning(f"Skipping malformed font entry: {e}")
            continue
        fonts[meta.safe_name] = meta
    return fonts


def parse_session_config(payload: Any) -> SessionConfig:
    """
    Parse a session config.json payload.

    Raises:
        MalformedDataError: If the payload is not an object or has no id.
    """
    if not isinstance(payload, Mapping):
        raise MalformedDataError("session config must be an object")

    session_id = payload.get("id") or payload.get("session_id")
    if not isinstance(session_id, str) or not session_id:
        raise MalformedDataError("session config has no id")

    weights: list[int] = []
    for w in payload.get("weights") or ():
        try:
            weights.append(int(w))
        except (TypeError, ValueError):
            logger.warning(f"Session {session_id}: ignoring invalid weight {w!r}")

    def _int(name: str) -> int:
        try:
            return int(payload.get(name) or 0)
        except (TypeError, ValueError):
            return 0

    known = {"id", "session_id", "preview_text", "weights", "process_status",
             "modified_at", "date", "samples_amount", "clusters_amount"}

    return SessionConfig(
        session_id=session_id,
        preview_text=str(payload.get("preview_text") or ""),
        weights=tuple(weights),
        process_status=ProcessStatus.parse(payload.get("process_status", ProcessStatus.EMPTY.value)),
        modified_at=payload.get("modified_at") or payload.get("date"),
        samples_amount=_int("samples_amount"),
        clusters_amount=_int("clusters_amount"),
        extra={k: v for k, v in payload.items() if k not in known},
    )
