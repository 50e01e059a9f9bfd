"""Primitiva compute-and-cache: dada uma chave e um producer, devolve o valor cacheado ou calculado."""

import logging
import time
from collections.abc import Callable
from typing import Any

from .exceptions import CacheError
from .metrics import NoOpMetrics
from .protocols import CacheMetrics, Serializer, StorageAdapter
from .serializer import MsgPackSerializer

logger = logging.getLogger(__name__)


class CallbackCache:
    """Executa um producer com cache em um storage adapter.

    Não há coordenação entre leitura e escrita: dois misses concorrentes
    para a mesma chave executam o producer duas vezes e a última escrita
    prevalece. Erros do storage, do serializer e do producer são
    propagados sem tradução (e registrados nas métricas).
    """

    def __init__(
        self,
        storage: StorageAdapter,
        serializer: Serializer | None = None,
        metrics: CacheMetrics | None = None,
        ttl_seconds: int = 3600,
    ) -> None:
        self._storage = storage
        self._serializer = serializer or MsgPackSerializer()
        self._metrics = metrics or NoOpMetrics()
        self._ttl_seconds = ttl_seconds

    def call(self, key: str, producer: Callable[[], Any]) -> Any:
        """Retorna o valor da chave ou executa o producer e armazena o resultado."""
        start_time = time.perf_counter()

        try:
            cached_data = self._storage.get(key)
            if cached_data is not None:
                result = self._serializer.deserialize(cached_data)
                self._metrics.record_hit(key, time.perf_counter() - start_time)
                logger.debug("Cache hit: %s", key)
                return result
        except Exception as e:
            self._metrics.record_error(key, e)
            raise

        self._metrics.record_miss(key, time.perf_counter() - start_time)
        logger.debug("Cache miss: %s", key)

        result = producer()

        try:
            serialized = self._serializer.serialize(result)
            self._storage.set(key, serialized, self._ttl_seconds)
        except Exception as e:
            self._metrics.record_error(key, e)
            raise

        self._metrics.record_write(key, len(serialized))
        return result

    def remove(self, keys: list[str]) -> bool:
        """Remove chaves do storage numa única operação.

        Returns:
            True se o storage confirmou a remoção (ou não havia chaves)
        """
        if not keys:
            return True

        try:
            removed = self._storage.remove_many(keys)
        except Exception as e:
            for key in keys:
                self._metrics.record_error(key, e)
            raise

        if not removed:
            error = CacheError("Storage não confirmou a remoção", key=keys[0])
            for key in keys:
                self._metrics.record_error(key, error)
            logger.warning("Falha ao invalidar chaves %s, leituras antigas podem continuar no cache", keys)
            return False

        self._metrics.record_invalidation(keys)
        logger.debug("Cache invalidado: %s", keys)
        return True
