"""Telemetry sinks for generation metrics.

The generator reports two metrics:

* ``template_files_generated_total`` - counter, one increment per file,
  tagged ``library_type`` and ``file_type``;
* ``template_generation_duration_ms`` - histogram, one observation per batch,
  tagged ``library_type``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

FILES_GENERATED = "template_files_generated_total"
GENERATION_DURATION = "template_generation_duration_ms"

TagKey = tuple[tuple[str, str], ...]


def exponential_buckets(start: float = 10, factor: float = 2, count: int = 10) -> list[float]:
    """Upper bounds ``start, start*factor, ...`` (``count`` values)."""
    if start <= 0 or factor <= 1 or count < 1:
        raise ValueError("exponential buckets need start > 0, factor > 1 and count >= 1")
    return [start * factor**i for i in range(count)]


def _tag_key(tags: Optional[Mapping[str, str]]) -> TagKey:
    return tuple(sorted((tags or {}).items()))


@runtime_checkable
class TelemetrySink(Protocol):
    def increment(self, name: str, tags: Optional[Mapping[str, str]] = None) -> None: ...

    def observe(self, name: str, value: float, tags: Optional[Mapping[str, str]] = None) -> None: ...


class NullTelemetry:
    """Discards every event."""

    def increment(self, name: str, tags: Optional[Mapping[str, str]] = None) -> None:
        return None

    def observe(self, name: str, value: float, tags: Optional[Mapping[str, str]] = None) -> None:
        return None


class Histogram:
    """Cumulative-bucket histogram (the last bucket is ``+Inf``)."""

    def __init__(self, boundaries: list[float]) -> None:
        self.boundaries = list(boundaries)
        self.bucket_counts = [0] * (len(self.boundaries) + 1)
        self.count = 0
        self.total = 0.0

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        for i, bound in enumerate(self.boundaries):
            if value <= bound:
                self.bucket_counts[i] += 1
                return
        self.bucket_counts[-1] += 1


class InMemoryTelemetry:
    """Thread-safe in-process counters and histograms.

    Every event is also logged at DEBUG so ``--verbose`` runs show what was
    recorded.
    """

    def __init__(self, boundaries: Optional[list[float]] = None) -> None:
        self.boundaries = boundaries if boundaries is not None else exponential_buckets()
        self._counters: dict[tuple[str, TagKey], int] = {}
        self._histograms: dict[tuple[str, TagKey], Histogram] = {}
        self._lock = threading.Lock()

    def increment(self, name: str, tags: Optional[Mapping[str, str]] = None) -> None:
        key = (name, _tag_key(tags))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + 1
        logger.debug("counter %s %s +1", name, dict(key[1]))

    def observe(self, name: str, value: float, tags: Optional[Mapping[str, str]] = None) -> None:
        key = (name, _tag_key(tags))
        with self._lock:
            histogram = self._histograms.get(key)
            if histogram is None:
                histogram = self._histograms[key] = Histogram(self.boundaries)
            histogram.observe(value)
        logger.debug("histogram %s %s %.2f", name, dict(key[1]), value)

    # -- Inspection --------------------------------------------------------

    def counter(self, name: str, tags: Optional[Mapping[str, str]] = None) -> int:
        with self._lock:
            return self._counters.get((name, _tag_key(tags)), 0)

    def histogram(self, name: str, tags: Optional[Mapping[str, str]] = None) -> Optional[Histogram]:
        with self._lock:
            return self._histograms.get((name, _tag_key(tags)))

    def counter_total(self, name: str) -> int:
        """Sum of *name* across every tag combination."""
        with self._lock:
            return sum(v for (n, _), v in self._counters.items() if n == name)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()
