"""
Fuzzy Font Search
=================
Approximate, typo tolerant search over the font map.

Why is this file needed?
------------------------
1. Index: Names, alternate family names, publishers and designers of every
   font are flattened once into lower-cased search values.
2. Ranking: Each value is scored against the query (0.0 = perfect, 1.0 = no
   match); an item scores its best value. Items within SEARCH_THRESHOLD are
   returned best first.
3. Memoization: SearchEngine rebuilds the index only when the font map
   version changes, never on a query change.

Scoring follows the bitap idea: errors relative to the query length plus a
penalty for how far into the value the match starts.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from difflib import SequenceMatcher

from fontmap.model.fonts import FontMetadata

logger = logging.getLogger(__name__)

SEARCH_THRESHOLD = 0.4
# characters of offset that cost a full error
LOCATION_DISTANCE = 100.0

SEARCH_FIELDS: tuple[tuple[str, Callable[[FontMetadata], Iterable[str]]], ...] = (
    ("font_name", lambda f: (f.font_name,)),
    ("family_name", lambda f: (f.family_name,)),
    ("family_names", lambda f: f.family_names),
    ("preferred_family_names", lambda f: f.preferred_family_names),
    ("publishers", lambda f: f.publishers),
    ("designers", lambda f: f.designers),
)


def match_score(pattern: str, text: str) -> float:
    """
    Score how well `pattern` matches somewhere inside `text`.

    Both arguments are expected lower-cased.

    Returns:
        0.0 for an exact match at the start, growing with edit errors and
        match offset. 1.0 when nothing matches.
    """
    if not pattern or not text:
        return 1.0

    idx = text.find(pattern)
    if idx >= 0:
        return min(1.0, idx / LOCATION_DISTANCE)

    blocks = [b for b in SequenceMatcher(None, pattern, text, autojunk=False).get_matching_blocks() if b.size]
    if not blocks:
        return 1.0

    matched = sum(b.size for b in blocks)
    start = blocks[0].b
    span = blocks[-1].b + blocks[-1].size - start
    # missing pattern characters + extra characters inside the matched span
    errors = (len(pattern) - matched) + (span - matched)
    return min(1.0, errors / len(pattern) + start / LOCATION_DISTANCE)


def extract_search_values(font: FontMetadata) -> tuple[str, ...]:
    """Flatten all searchable fields of a font into unique lower-cased strings."""
    values: dict[str, None] = {}
    for _, getter in SEARCH_FIELDS:
        for value in getter(font):
            if not isinstance(value, str):
                raise TypeError(f"search value must be a string, got {type(value).__name__}")
            if value:
                values.setdefault(value.lower(), None)
    return tuple(values)


@dataclass(frozen=True)
class SearchResult:
    ranked: tuple[str, ...] = ()
    keys: frozenset[str] = field(default_factory=frozenset)

    @property
    def top(self) -> str | None:
        return self.ranked[0] if self.ranked else None


class FuzzyIndex:
    """Immutable search index over one font map."""

    def __init__(self, fonts: Mapping[str, FontMetadata], threshold: float = SEARCH_THRESHOLD) -> None:
        self.threshold = threshold
        self._entries: list[tuple[str, tuple[str, ...]]] = []
        for key, font in fonts.items():
            try:
                self._entries.append((key, extract_search_values(font)))
            except (AttributeError, TypeError) as e:
                logger.warning(f"Font '{key}' excluded from search: {e}")

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, query: str) -> list[str]:
        """
        Return the keys matching `query`, best match first.

        Equal scores keep index (insertion) order.
        """
        pattern = query.lower()
        if not pattern:
            return [key for key, _ in self._entries]

        scored: list[tuple[float, int, str]] = []
        for i, (key, values) in enumerate(self._entries):
            best = min((match_score(pattern, v) for v in values), default=1.0)
            if best <= self.threshold:
                scored.append((best, i, key))
        scored.sort()
        return [key for _, _, key in scored]


class SearchEngine:
    """Memoizes a FuzzyIndex per font map version."""

    def __init__(self, threshold: float = SEARCH_THRESHOLD) -> None:
        self.threshold = threshold
        self._index: FuzzyIndex | None = None
        self._version: int | None = None
        self.builds = 0

    def index_for(self, fonts: Mapping[str, FontMetadata], version: int) -> FuzzyIndex:
        if self._index is None or self._version != version:
            self._index = FuzzyIndex(fonts, self.threshold)
            self._version = version
            self.builds += 1
            logger.debug(f"Search index rebuilt for version {version} ({len(self._index)} fonts)")
        return self._index

    def filter(self, fonts: Mapping[str, FontMetadata], version: int, query: str) -> SearchResult:
        """
        Compute the filtered key set for `query`.

        An empty query returns every key of `fonts` and does not touch the index.
        """
        if not query:
            return SearchResult(ranked=(), keys=frozenset(fonts))
        ranked = tuple(self.index_for(fonts, version).search(query))
        return SearchResult(ranked=ranked, keys=frozenset(ranked))
