"""Interactive single-cell edit workflow."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .cache import CoordinateCache
from .contracts import CellStore, Coordinate
from .errors import StoreReadError, StoreWriteError
from .metrics import EditorMetrics
from .sanitizer import sanitize

if TYPE_CHECKING:  # pragma: no cover
    from .templates import TemplateLibrary

logger = logging.getLogger(__name__)

Editor = Callable[[str], Optional[str]]


class EditSession:
    """Load a cell through the cache, hand it to an editor, write it back."""

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

    def load_for_edit(self, coordinate: Coordinate) -> str:
        cached = self.cache.get(coordinate)
        if cached is not None:
            self._count_lookup("hit")
            return cached
        self._count_lookup("miss")
        try:
            raw = self.store.read_cell(coordinate)
        except StoreReadError:
            raise
        except Exception as exc:
            raise StoreReadError(
                f"could not read {coordinate.a1}",
                details={"cell": coordinate.a1, "cause": repr(exc)},
            ) from exc
        content = sanitize(raw)
        self.cache.set(coordinate, content)
        logger.debug("cell.loaded", extra={"cell": coordinate.a1, "length": len(content)})
        return content

    def commit(self, coordinate: Coordinate, proposed: str) -> bool:
        """Sanitize and write *proposed*, then flush.

        The cache entry is dropped only after the store accepted the write; on
        ``StoreWriteError`` from the write the cache is left as it was and the
        error propagates. A failed flush comes after the write, so the entry is
        already gone by then.
        """

        content = sanitize(proposed)
        self._guarded_write(coordinate, "write", lambda: self.store.write_cell(coordinate, content))
        self.cache.invalidate(coordinate)
        self._guarded_write(coordinate, "flush", self.store.flush)
        self._count_write("ok")
        logger.info("cell.committed", extra={"cell": coordinate.a1, "length": len(content)})
        return True

    def edit(self, coordinate: Coordinate, editor: Editor) -> bool:
        """Run one round trip through *editor*; ``None`` from it cancels."""

        current = self.load_for_edit(coordinate)
        replacement = editor(current)
        if replacement is None:
            logger.info("cell.edit_cancelled", extra={"cell": coordinate.a1})
            return False
        return self.commit(coordinate, replacement)

    def apply_template(self, coordinate: Coordinate, library: "TemplateLibrary", name: str) -> bool:
        template = library.get(name)
        return self.commit(coordinate, template.html)

    def _guarded_write(self, coordinate: Coordinate, step: str, action: Callable[[], None]) -> None:
        try:
            action()
        except StoreWriteError:
            self._count_write("error")
            logger.warning("cell.%s_failed", step, extra={"cell": coordinate.a1})
            raise
        except Exception as exc:
            self._count_write("error")
            logger.warning("cell.%s_failed", step, extra={"cell": coordinate.a1})
            raise StoreWriteError(
                f"could not {step} {coordinate.a1}",
                details={"cell": coordinate.a1, "step": step, "cause": repr(exc)},
            ) from exc

    def _count_lookup(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.cache_lookups_total.labels(outcome=outcome).inc()

    def _count_write(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.writes_total.labels(mode="single", outcome=outcome).inc()


__all__ = ["EditSession", "Editor"]
