from __future__ import annotations

import pytest

from richcell.cache import DEFAULT_CAPACITY, CoordinateCache
from richcell.contracts import Coordinate

A = Coordinate(1, 1)
B = Coordinate(1, 2)
C = Coordinate(1, 3)


def test_oldest_entry_is_evicted_at_capacity() -> None:
    cache = CoordinateCache(capacity=2)
    cache.set(A, "1")
    cache.set(B, "2")
    cache.set(C, "3")

    assert cache.get(A) is None
    assert cache.get(B) == "2"
    assert cache.get(C) == "3"
    assert len(cache) == 2


def test_updating_a_key_does_not_refresh_its_position() -> None:
    cache = CoordinateCache(capacity=2)
    cache.set(A, "1")
    cache.set(B, "2")
    cache.set(A, "10")
    cache.set(C, "3")

    assert A not in cache
    assert cache.get(B) == "2"
    assert cache.get(C) == "3"


def test_updating_existing_key_at_capacity_evicts_nothing() -> None:
    cache = CoordinateCache(capacity=2)
    cache.set(A, "1")
    cache.set(B, "2")
    cache.set(B, "20")

    assert cache.get(A) == "1"
    assert cache.get(B) == "20"


def test_size_never_exceeds_bound() -> None:
    cache = CoordinateCache(capacity=5)
    for row in range(1, 40):
        cache.set(Coordinate(row, 1), f"v{row}")
        assert len(cache) <= 5

    assert [cache.get(Coordinate(row, 1)) for row in range(35, 40)] == [f"v{row}" for row in range(35, 40)]


def test_invalidate_and_clear() -> None:
    cache = CoordinateCache(capacity=3)
    cache.set(A, "1")
    cache.set(B, "2")

    cache.invalidate(A)
    cache.invalidate(C)

    assert cache.get(A) is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0
    assert cache.get(B) is None


def test_equal_coordinates_share_an_entry() -> None:
    cache = CoordinateCache()
    cache.set(Coordinate(4, 2), "x")

    assert cache.get(Coordinate(4, 2)) == "x"
    assert cache.capacity == DEFAULT_CAPACITY == 50


@pytest.mark.parametrize("capacity", [0, -1, True, 2.5])
def test_capacity_must_be_positive_integer(capacity: object) -> None:
    with pytest.raises(ValueError):
        CoordinateCache(capacity=capacity)  # type: ignore[arg-type]
