from __future__ import annotations

import logging
from typing import Callable

import pytest

from richcell.batch import BatchWriter
from richcell.cache import CoordinateCache
from richcell.contracts import Coordinate, EditUpdate
from richcell.errors import BatchWriteError
from richcell.metrics import EditorMetrics
from richcell.stores.memory import InMemoryCellStore

Cells = Callable[[int], list[Coordinate]]


def _updates(coordinates: list[Coordinate]) -> list[EditUpdate]:
    return [EditUpdate(coordinate, f"<p>{coordinate.a1}</p>") for coordinate in coordinates]


def test_batch_writes_in_order_and_flushes_once(
    store: InMemoryCellStore, cache: CoordinateCache, column_cells: Cells
) -> None:
    cells = column_cells(3)
    writer = BatchWriter(store=store, cache=cache)

    result = writer.apply_batch(_updates(cells))

    assert result.applied_count == 3
    assert store.call_names() == [
        "set_recalculation_suspended",
        "write_cell",
        "write_cell",
        "write_cell",
        "flush",
        "set_recalculation_suspended",
    ]
    assert [arg for name, arg in store.calls if name == "write_cell"] == cells
    assert [arg for name, arg in store.calls if name == "set_recalculation_suspended"] == [True, False]
    assert store.recalculation_suspended is False
    assert writer.holds_suspension is False
    assert store.durable == {cell: f"<p>{cell.a1}</p>" for cell in cells}


def test_failure_on_third_of_five_restores_recalculation(
    cache: CoordinateCache, column_cells: Cells
) -> None:
    cells = column_cells(5)
    store = InMemoryCellStore(fail_writes=[cells[2]])
    for cell in cells:
        cache.set(cell, "<p>cached</p>")
    writer = BatchWriter(store=store, cache=cache)

    with pytest.raises(BatchWriteError) as info:
        writer.apply_batch(_updates(cells))

    assert info.value.applied_count == 2
    assert info.value.details["cell"] == "A3"
    assert store.recalculation_suspended is False
    assert store.flush_count == 0
    assert set(store.cells) == {cells[0], cells[1]}
    assert all(cell not in cache for cell in cells[:3])
    assert all(cache.get(cell) == "<p>cached</p>" for cell in cells[3:])


def test_empty_batch_touches_nothing(store: InMemoryCellStore, cache: CoordinateCache) -> None:
    result = BatchWriter(store=store, cache=cache).apply_batch([])

    assert result.applied_count == 0
    assert store.calls == []


def test_outer_suspension_is_left_in_place(
    store: InMemoryCellStore, cache: CoordinateCache, column_cells: Cells
) -> None:
    store.recalculation_suspended = True

    BatchWriter(store=store, cache=cache).apply_batch(_updates(column_cells(2)))

    assert "set_recalculation_suspended" not in store.call_names()
    assert store.recalculation_suspended is True
    assert store.flush_count == 1


def test_contents_are_sanitized_and_duplicates_apply_in_order(
    store: InMemoryCellStore, cache: CoordinateCache
) -> None:
    target = Coordinate(2, 2)
    updates = [
        EditUpdate(target, "<p>first</p>"),
        EditUpdate(target, '<p onclick="x()">second</p><style>p{}</style>'),
    ]

    result = BatchWriter(store=store, cache=cache).apply_batch(updates)

    assert result.applied_count == 2
    assert store.cells[target] == '<p "x()">second</p>'
    assert store.call_names().count("write_cell") == 2


def test_flush_failure_reports_all_writes_applied(
    cache: CoordinateCache, column_cells: Cells
) -> None:
    store = InMemoryCellStore(fail_flush=True)

    with pytest.raises(BatchWriteError) as info:
        BatchWriter(store=store, cache=cache).apply_batch(_updates(column_cells(4)))

    assert info.value.applied_count == 4
    assert store.recalculation_suspended is False


def test_resume_failure_never_hides_original_error(
    cache: CoordinateCache, column_cells: Cells, caplog: pytest.LogCaptureFixture
) -> None:
    cells = column_cells(3)
    store = InMemoryCellStore(fail_writes=[cells[1]], fail_resume=True)
    writer = BatchWriter(store=store, cache=cache)

    with caplog.at_level(logging.ERROR, logger="richcell.batch"):
        with pytest.raises(BatchWriteError) as info:
            writer.apply_batch(_updates(cells))

    assert info.value.applied_count == 1
    assert any(record.getMessage() == "batch.resume_failed" for record in caplog.records)
    assert writer.holds_suspension is True


def test_resume_failure_after_success_propagates(
    cache: CoordinateCache, column_cells: Cells
) -> None:
    cells = column_cells(2)
    store = InMemoryCellStore(fail_resume=True)
    for cell in cells:
        cache.set(cell, "old")

    with pytest.raises(RuntimeError, match="could not be resumed"):
        BatchWriter(store=store, cache=cache).apply_batch(_updates(cells))

    assert store.flush_count == 1
    assert len(cache) == 0


def test_batch_metrics(
    store: InMemoryCellStore, cache: CoordinateCache, metrics: EditorMetrics, column_cells: Cells
) -> None:
    cells = column_cells(3)
    store.fail_writes.add(cells[2])

    with pytest.raises(BatchWriteError):
        BatchWriter(store=store, cache=cache, metrics=metrics).apply_batch(_updates(cells))

    assert metrics.sample("richcell_writes_total", {"mode": "batch", "outcome": "ok"}) == 2.0
    assert metrics.sample("richcell_writes_total", {"mode": "batch", "outcome": "error"}) == 1.0
    assert metrics.sample("richcell_batch_size_count") == 1.0
