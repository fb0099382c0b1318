"""Bounded content cache keyed by cell coordinate."""
from __future__ import annotations

from typing import Dict, Optional

from .contracts import Coordinate

DEFAULT_CAPACITY = 50


class CoordinateCache:
    """Capacity guarded map of coordinate to sanitized content.

    Eviction follows first-insert order. Updating an existing key replaces
    its value but keeps its original position, so this is not an LRU.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._capacity = capacity
        self._entries: Dict[Coordinate, str] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, coordinate: Coordinate) -> Optional[str]:
        return self._entries.get(coordinate)

    def set(self, coordinate: Coordinate, content: str) -> None:
        if coordinate not in self._entries and len(self._entries) >= self._capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[coordinate] = content

    def invalidate(self, coordinate: Coordinate) -> None:
        self._entries.pop(coordinate, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._entries


__all__ = ["CoordinateCache", "DEFAULT_CAPACITY"]
