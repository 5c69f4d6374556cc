"""Per-object metric cache and its Prometheus collector.

Object change notifications regenerate that object's metric families;
scrapes read a snapshot of every cached family. This mirrors how
kube-state-metrics style stores keep generated metrics between scrapes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from typing import Any

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from acm_exporter.collector import FamilyGenerator
from acm_exporter.models import MetricFamily, MetricType

logger = logging.getLogger(__name__)


def object_key(obj: dict[str, Any]) -> str:
    metadata = obj.get("metadata") or {}
    namespace = metadata.get("namespace") or ""
    name = metadata.get("name") or ""
    return f"{namespace}/{name}" if namespace else name


class MetricCache:
    """Thread-safe store of generated metric families keyed by object."""

    def __init__(self, generators: list[FamilyGenerator]) -> None:
        self._generators = list(generators)
        self._families: dict[str, list[MetricFamily]] = {}
        self._lock = threading.Lock()

    @property
    def generators(self) -> list[FamilyGenerator]:
        return list(self._generators)

    def __len__(self) -> int:
        with self._lock:
            return len(self._families)

    def upsert(self, obj: dict[str, Any]) -> None:
        key = object_key(obj)
        families = self._generate(obj)
        with self._lock:
            self._families[key] = families
        logger.debug("Cached metrics for %s", key)

    def delete(self, obj: dict[str, Any]) -> None:
        key = object_key(obj)
        with self._lock:
            self._families.pop(key, None)
        logger.debug("Dropped metrics for %s", key)

    def replace(self, objs: Iterable[dict[str, Any]]) -> None:
        """Reset the cache to exactly *objs* (used after a full list)."""
        fresh = {object_key(obj): self._generate(obj) for obj in objs}
        with self._lock:
            self._families = fresh
        logger.info("Metric cache resynced with %d objects", len(fresh))

    def families(self) -> list[MetricFamily]:
        """Merge cached samples into one family per generator."""
        with self._lock:
            snapshot = [self._families[k] for k in sorted(self._families)]

        merged: list[MetricFamily] = []
        for i, gen in enumerate(self._generators):
            records = [m for per_obj in snapshot for m in per_obj[i].metrics]
            merged.append(MetricFamily(
                name=gen.name, type=gen.type, help=gen.help, metrics=records,
            ))
        return merged

    def _generate(self, obj: dict[str, Any]) -> list[MetricFamily]:
        return [gen.generate(obj) for gen in self._generators]


class MetricCacheCollector:
    """prometheus_client collector exposing a :class:`MetricCache`."""

    def __init__(self, cache: MetricCache) -> None:
        self._cache = cache

    def describe(self) -> Iterator[Metric]:
        for gen in self._cache.generators:
            yield _to_prometheus(MetricFamily(name=gen.name, type=gen.type, help=gen.help))

    def collect(self) -> Iterator[Metric]:
        for family in self._cache.families():
            yield _to_prometheus(family)


def _to_prometheus(family: MetricFamily) -> Metric:
    labels = family.metrics[0].label_keys if family.metrics else []
    if family.type == MetricType.COUNTER:
        metric: Any = CounterMetricFamily(family.name, family.help, labels=labels)
    else:
        metric = GaugeMetricFamily(family.name, family.help, labels=labels)
    for m in family.metrics:
        metric.add_metric(m.label_values, m.value)
    return metric
