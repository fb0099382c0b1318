"""Ordered batch writes with recalculation suspended for the whole batch."""
from __future__ import annotations

import logging
from typing import List, Sequence

from .cache import CoordinateCache
from .contracts import BatchResult, CellStore, Coordinate, EditUpdate
from .errors import BatchWriteError
from .metrics import EditorMetrics
from .sanitizer import sanitize

logger = logging.getLogger(__name__)


class BatchWriter:
    """Apply many cell updates as one logical operation.

    Recalculation is suspended before the first write (unless an outer
    caller already suspended it) and restored on every exit path. One flush
    is issued after all writes succeed. Every coordinate whose write was
    attempted is dropped from the cache, including on failure.
    """

    def __init__(
        self,
        *,
        store: CellStore,
        cache: CoordinateCache,
        metrics: EditorMetrics | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.metrics = metrics
        self._holds_suspension = False

    @property
    def holds_suspension(self) -> bool:
        """``True`` while this writer has recalculation suspended."""

        return self._holds_suspension

    def apply_batch(self, updates: Sequence[EditUpdate]) -> BatchResult:
        pending = list(updates)
        if not pending:
            return BatchResult(applied_count=0)
        if self.metrics is not None:
            self.metrics.batch_size.observe(len(pending))

        already_suspended = self.store.is_recalculation_suspended()
        if not already_suspended:
            self.store.set_recalculation_suspended(True)
            self._holds_suspension = True

        touched: List[Coordinate] = []
        applied = 0
        try:
            for update in pending:
                touched.append(update.coordinate)
                try:
                    self.store.write_cell(update.coordinate, sanitize(update.content))
                except Exception as exc:
                    self._count_write("error")
                    logger.warning(
                        "batch.write_failed",
                        extra={"cell": update.coordinate.a1, "applied_count": applied, "batch_size": len(pending)},
                    )
                    raise BatchWriteError(
                        f"write to {update.coordinate.a1} failed after {applied} of {len(pending)} updates",
                        applied_count=applied,
                        details={"cell": update.coordinate.a1, "cause": repr(exc)},
                    ) from exc
                applied += 1
                self._count_write("ok")
            try:
                self.store.flush()
            except Exception as exc:
                logger.warning("batch.flush_failed", extra={"applied_count": applied})
                raise BatchWriteError(
                    f"flush failed after {applied} updates",
                    applied_count=applied,
                    details={"cause": repr(exc)},
                ) from exc
        except BaseException:
            self._restore(already_suspended, primary_failure=True)
            raise
        else:
            self._restore(already_suspended, primary_failure=False)
        finally:
            for coordinate in touched:
                self.cache.invalidate(coordinate)

        logger.info("batch.applied", extra={"applied_count": applied})
        return BatchResult(applied_count=applied)

    def _restore(self, already_suspended: bool, *, primary_failure: bool) -> None:
        if already_suspended:
            return
        try:
            self.store.set_recalculation_suspended(False)
        except Exception:
            if not primary_failure:
                raise
            # The original failure wins; the restore failure is only reported.
            logger.error("batch.resume_failed", exc_info=True)
        else:
            self._holds_suspension = False

    def _count_write(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.writes_total.labels(mode="batch", outcome=outcome).inc()


__all__ = ["BatchWriter"]
