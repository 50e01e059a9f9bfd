"""Métricas do object cache usando OpenTelemetry."""

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from cachetools import LRUCache
from opentelemetry import metrics as otel_metrics

from .protocols import CacheMetrics

logger = logging.getLogger(__name__)

__all__ = [
    "CacheMetrics",
    "CacheStats",
    "InMemoryMetrics",
    "KeyStats",
    "NoOpMetrics",
    "OpenTelemetryMetrics",
]


class NoOpMetrics:
    """Coletor de métricas que não faz nada (default)."""

    def record_hit(self, key: str, latency: float) -> None:
        pass

    def record_miss(self, key: str, latency: float) -> None:
        pass

    def record_write(self, key: str, size: int) -> None:
        pass

    def record_error(self, key: str, error: Exception) -> None:
        pass

    def record_invalidation(self, keys: list[str]) -> None:
        pass


@dataclass
class KeyStats:
    """Contadores de uma chave específica."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    errors: int = 0
    invalidations: int = 0
    bytes_written: int = 0

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        total = self.total_operations
        return self.hits / total if total > 0 else 0.0


@dataclass
class CacheStats:
    """Estatísticas agregadas do cache."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    errors: int = 0
    invalidations: int = 0
    hit_latencies: list[float] = field(default_factory=list)
    miss_latencies: list[float] = field(default_factory=list)
    write_sizes: list[int] = field(default_factory=list)

    @property
    def total_operations(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        total = self.total_operations
        return self.hits / total if total > 0 else 0.0

    @property
    def avg_hit_latency_ms(self) -> float:
        if not self.hit_latencies:
            return 0.0
        return sum(self.hit_latencies) / len(self.hit_latencies) * 1000

    @property
    def avg_miss_latency_ms(self) -> float:
        if not self.miss_latencies:
            return 0.0
        return sum(self.miss_latencies) / len(self.miss_latencies) * 1000


class OpenTelemetryMetrics:
    """Coletor de métricas usando OpenTelemetry.

    Métricas exportadas:
    - object_cache.hits (counter)
    - object_cache.misses (counter)
    - object_cache.writes (counter)
    - object_cache.errors (counter)
    - object_cache.invalidations (counter): chaves removidas por escrita/remoção de atributo
    - object_cache.latency (histogram): latência do lookup em segundos
    - object_cache.size (histogram): tamanho dos valores gravados em bytes

    Example:
        ```python
        from opentelemetry import metrics
        from opentelemetry.sdk.metrics import MeterProvider

        metrics.set_meter_provider(MeterProvider())

        proxy = ObjectCache(repo, storage="cache", metrics=OpenTelemetryMetrics())
        ```
    """

    def __init__(self, meter_name: str = "dapr_object_cache") -> None:
        meter = otel_metrics.get_meter(meter_name)

        self._hits_counter = meter.create_counter(
            "object_cache.hits",
            description="Número de cache hits",
            unit="1",
        )
        self._misses_counter = meter.create_counter(
            "object_cache.misses",
            description="Número de cache misses",
            unit="1",
        )
        self._writes_counter = meter.create_counter(
            "object_cache.writes",
            description="Número de escritas no cache",
            unit="1",
        )
        self._errors_counter = meter.create_counter(
            "object_cache.errors",
            description="Número de erros de cache",
            unit="1",
        )
        self._invalidations_counter = meter.create_counter(
            "object_cache.invalidations",
            description="Número de chaves invalidadas",
            unit="1",
        )

        self._latency_histogram = meter.create_histogram(
            "object_cache.latency",
            description="Latência do lookup no cache",
            unit="s",
        )
        self._size_histogram = meter.create_histogram(
            "object_cache.size",
            description="Tamanho dos dados escritos no cache",
            unit="By",
        )

    def record_hit(self, key: str, latency: float) -> None:
        self._hits_counter.add(1, {"key": key})
        self._latency_histogram.record(latency, {"operation": "hit", "key": key})

    def record_miss(self, key: str, latency: float) -> None:
        self._misses_counter.add(1, {"key": key})
        self._latency_histogram.record(latency, {"operation": "miss", "key": key})

    def record_write(self, key: str, size: int) -> None:
        self._writes_counter.add(1, {"key": key})
        self._size_histogram.record(size, {"key": key})

    def record_error(self, key: str, error: Exception) -> None:
        self._errors_counter.add(1, {"key": key, "error_type": type(error).__name__})

    def record_invalidation(self, keys: list[str]) -> None:
        for key in keys:
            self._invalidations_counter.add(1, {"key": key})


class InMemoryMetrics:
    """Coletor de métricas em memória com estatísticas por chave.

    Útil para desenvolvimento e testes. Pode ser compartilhado entre
    vários proxies, por isso protege os contadores com um Lock.

    Chaves derivadas de argumentos crescem sem limite, então só as
    ``max_keys`` chaves usadas mais recentemente mantêm contadores próprios.
    Os totais agregados continuam contando todas.

    Attributes:
        max_samples: Máximo de amostras de latência mantidas
        max_keys: Máximo de chaves com contadores próprios
    """

    def __init__(self, max_samples: int = 1000, max_keys: int = 1000) -> None:
        self._max_samples = max_samples
        self._max_keys = max_keys
        self._lock = Lock()
        self._overall = CacheStats()
        self._by_key: LRUCache = LRUCache(maxsize=max_keys)

    def record_hit(self, key: str, latency: float) -> None:
        with self._lock:
            self._overall.hits += 1
            self._overall.hit_latencies.append(latency)
            self._trim_samples(self._overall.hit_latencies)

            self._key_stats(key).hits += 1

    def record_miss(self, key: str, latency: float) -> None:
        with self._lock:
            self._overall.misses += 1
            self._overall.miss_latencies.append(latency)
            self._trim_samples(self._overall.miss_latencies)

            self._key_stats(key).misses += 1

    def record_write(self, key: str, size: int) -> None:
        with self._lock:
            self._overall.writes += 1
            self._overall.write_sizes.append(size)
            self._trim_samples(self._overall.write_sizes)

            stats = self._key_stats(key)
            stats.writes += 1
            stats.bytes_written += size

    def record_error(self, key: str, error: Exception) -> None:
        with self._lock:
            self._overall.errors += 1
            self._key_stats(key).errors += 1
        logger.debug("Erro registrado para %s: %s", key, type(error).__name__)

    def record_invalidation(self, keys: list[str]) -> None:
        with self._lock:
            self._overall.invalidations += len(keys)
            for key in keys:
                self._key_stats(key).invalidations += 1

    def _key_stats(self, key: str) -> KeyStats:
        stats = self._by_key.get(key)
        if stats is None:
            stats = self._by_key[key] = KeyStats()
        return stats

    def _trim_samples(self, samples: list[Any]) -> None:
        """Remove amostras antigas se exceder limite."""
        if len(samples) > self._max_samples:
            del samples[: len(samples) - self._max_samples]

    def get_stats(self) -> CacheStats:
        """Retorna uma cópia das estatísticas agregadas."""
        with self._lock:
            return CacheStats(
                hits=self._overall.hits,
                misses=self._overall.misses,
                writes=self._overall.writes,
                errors=self._overall.errors,
                invalidations=self._overall.invalidations,
                hit_latencies=self._overall.hit_latencies.copy(),
                miss_latencies=self._overall.miss_latencies.copy(),
                write_sizes=self._overall.write_sizes.copy(),
            )

    def get_key_stats(self, key: str) -> KeyStats | None:
        """Retorna estatísticas de uma chave específica."""
        with self._lock:
            stats = self._by_key.get(key)
            if stats is None:
                return None
            return KeyStats(**vars(stats))

    def reset(self) -> None:
        """Reseta todas as estatísticas."""
        with self._lock:
            self._overall = CacheStats()
            self._by_key.clear()
