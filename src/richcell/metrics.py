from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram


class EditorMetrics:
    """Prometheus metrics wrapper for cell edits and batch writes."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.cache_lookups_total = Counter(
            "richcell_cache_lookups_total",
            "Cache lookups by outcome",
            labelnames=("outcome",),
            registry=self.registry,
        )
        self.writes_total = Counter(
            "richcell_writes_total",
            "Cell writes by mode and outcome",
            labelnames=("mode", "outcome"),
            registry=self.registry,
        )
        self.batch_size = Histogram(
            "richcell_batch_size",
            "Number of updates per batch",
            buckets=(1, 2, 5, 10, 25, 50, 100, 250, 500),
            registry=self.registry,
        )

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float:
        value = self.registry.get_sample_value(name, labels or {})
        return float(value or 0.0)


__all__ = ["EditorMetrics"]
