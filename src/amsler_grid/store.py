"""Distortion store -- append-only ordered multimap of integrated lines.

Entries are kept in insertion order and keyed by (axis, index).  Keys are
not unique: integrating twice at the same key stores both entries, and
lookups return the **first** one inserted.  Later entries stay stored but
are shadowed for rendering until the store is cleared.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterator, List, Optional

from src.amsler_grid.model import Axis, GridLine


class DistortionStore:
    """Insertion-ordered GridLine collection with first-match lookup."""

    def __init__(self) -> None:
        self._entries: List[GridLine] = []
        self._by_key: Dict[tuple, List[GridLine]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GridLine]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def append(self, line: GridLine) -> bool:
        """Store ``line``.  Returns False if it is shadowed by an earlier entry."""
        bucket = self._by_key[line.key]
        bucket.append(line)
        self._entries.append(line)
        return len(bucket) == 1

    def find(self, axis: Axis, index: int) -> Optional[GridLine]:
        """First-inserted entry for (axis, index), or None."""
        bucket = self._by_key.get((axis, index))
        return bucket[0] if bucket else None

    def matches(self, axis: Axis, index: int) -> tuple[GridLine, ...]:
        """Every entry for (axis, index), oldest first."""
        return tuple(self._by_key.get((axis, index), ()))

    def entries(self) -> tuple[GridLine, ...]:
        """Snapshot of the whole collection in insertion order."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries = []
        self._by_key = defaultdict(list)

    def to_records(self) -> List[Dict[str, Any]]:
        """Plain records for YAML inspection dumps.

        ``shadowed`` marks entries hidden behind an earlier one at the
        same key.
        """
        seen = set()
        records = []
        for line in self._entries:
            records.append({
                'axis': line.axis.value,
                'index': line.index,
                'shadowed': line.key in seen,
                'control_points': [[p.x, p.y] for p in line.control_points],
            })
            seen.add(line.key)
        return records
