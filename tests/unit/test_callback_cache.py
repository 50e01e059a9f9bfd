"""Testes para a primitiva compute-and-cache."""

from unittest.mock import MagicMock

import pytest

from dapr_object_cache.backend import MemoryStateBackend
from dapr_object_cache.callback_cache import CallbackCache
from dapr_object_cache.exceptions import CacheConnectionError, CacheSerializationError
from dapr_object_cache.metrics import InMemoryMetrics


class TestCallbackCache:
    """Testes para CallbackCache."""

    def test_miss_then_hit(self, storage: MagicMock) -> None:
        """Producer só é executado no miss."""
        metrics = InMemoryMetrics()
        cache = CallbackCache(storage, metrics=metrics, ttl_seconds=30)
        producer = MagicMock(return_value={"id": 1})

        assert cache.call("k", producer) == {"id": 1}
        assert cache.call("k", producer) == {"id": 1}

        producer.assert_called_once_with()
        storage.set.assert_called_once()
        assert storage.set.call_args[0][0] == "k"
        assert storage.set.call_args[0][2] == 30
        stats = metrics.get_stats()
        assert (stats.hits, stats.misses, stats.writes) == (1, 1, 1)

    def test_none_result_is_cached(self) -> None:
        """Resultado None também é cacheado."""
        cache = CallbackCache(MemoryStateBackend())
        producer = MagicMock(return_value=None)

        assert cache.call("k", producer) is None
        assert cache.call("k", producer) is None
        producer.assert_called_once()

    def test_producer_error_propagates(self) -> None:
        """Erro do producer propaga e nada é gravado."""
        storage = MemoryStateBackend()
        cache = CallbackCache(storage)

        with pytest.raises(RuntimeError):
            cache.call("k", MagicMock(side_effect=RuntimeError("boom")))

        assert "k" not in storage

    def test_storage_error_propagates(self) -> None:
        """Erro do storage propaga sem tradução e é registrado."""
        storage = MagicMock(spec=MemoryStateBackend)
        storage.get.side_effect = CacheConnectionError("down", key="k")
        metrics = InMemoryMetrics()
        cache = CallbackCache(storage, metrics=metrics)
        producer = MagicMock()

        with pytest.raises(CacheConnectionError):
            cache.call("k", producer)

        producer.assert_not_called()
        assert metrics.get_stats().errors == 1

    def test_serialization_error_propagates(self) -> None:
        """Valor não serializável propaga CacheSerializationError."""
        cache = CallbackCache(MemoryStateBackend())

        with pytest.raises(CacheSerializationError):
            cache.call("k", lambda: object())

    def test_remove(self, storage: MagicMock) -> None:
        """Deve remover em lote e registrar invalidação."""
        metrics = InMemoryMetrics()
        cache = CallbackCache(storage, metrics=metrics)

        cache.remove(["a", "b"])
        cache.remove([])

        storage.remove_many.assert_called_once_with(["a", "b"])
        assert metrics.get_stats().invalidations == 2

    def test_remove_confirmed(self, storage: MagicMock) -> None:
        """Remoção confirmada retorna True."""
        cache = CallbackCache(storage)

        assert cache.remove(["a"]) is True
        assert cache.remove([]) is True

    def test_remove_not_confirmed(self, storage: MagicMock) -> None:
        """Storage que não confirma a remoção não conta como invalidação."""
        storage.remove_many.return_value = False
        metrics = InMemoryMetrics()
        cache = CallbackCache(storage, metrics=metrics)

        assert cache.remove(["a", "b"]) is False

        stats = metrics.get_stats()
        assert stats.invalidations == 0
        assert stats.errors == 2

    def test_remove_storage_error_propagates(self) -> None:
        """Erro do storage na remoção é registrado e propagado."""
        storage = MagicMock(spec=MemoryStateBackend)
        storage.remove_many.side_effect = CacheConnectionError("down")
        metrics = InMemoryMetrics()
        cache = CallbackCache(storage, metrics=metrics)

        with pytest.raises(CacheConnectionError):
            cache.remove(["a"])

        assert metrics.get_stats().errors == 1
        assert metrics.get_stats().invalidations == 0
