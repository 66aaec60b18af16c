"""
Font map reconciliation.

A refetched map replaces the stored one wholesale, but entries equal to the
stored ones keep the stored object so identity-based consumers (selection,
open detail views) are unaffected.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

T = TypeVar("T")


def reconcile(current: Mapping[str, T], incoming: Mapping[str, T]) -> tuple[dict[str, T], bool]:
    """
    Merge `incoming` into `current` by key.

    Args:
        current: The stored map.
        incoming: The freshly fetched map.

    Returns:
        (merged, changed). `merged` has exactly the keys of `incoming`; values
        equal to the stored ones are the stored objects. `changed` is False
        when the merge is identical to `current`.
    """
    merged: dict[str, T] = {}
    changed = len(current) != len(incoming)
    for key, value in incoming.items():
        old = current.get(key)
        if old is not None and old == value:
            merged[key] = old
        else:
            merged[key] = value
            changed = True
    return merged, changed
