"""Protocols para extensibilidade da biblioteca.

Define interfaces que permitem implementações customizadas de:
- StorageAdapter: Armazenamento chave-valor por trás do cache
- Serializer: Serialização/deserialização de dados
- CacheMetrics: Coleta de métricas
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol para adapters de armazenamento.

    O object cache só precisa de três operações: leitura, escrita
    e remoção em lote (usada na invalidação de atributos dinâmicos).

    Example:
        ```python
        class DictStorage:
            def __init__(self) -> None:
                self.data: dict[str, bytes] = {}

            def get(self, key: str) -> bytes | None:
                return self.data.get(key)

            def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
                self.data[key] = value
                return True

            def remove_many(self, keys: list[str]) -> bool:
                for key in keys:
                    self.data.pop(key, None)
                return True
        ```
    """

    def get(self, key: str) -> bytes | None:
        """Busca valor armazenado.

        Args:
            key: Chave do cache

        Returns:
            Valor em bytes ou None quando não encontrado
        """
        ...

    def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        """Armazena valor.

        Args:
            key: Chave do cache
            value: Valor serializado
            ttl_seconds: Tempo de vida em segundos

        Returns:
            True se armazenado com sucesso
        """
        ...

    def remove_many(self, keys: list[str]) -> bool:
        """Remove várias chaves em uma única operação.

        Args:
            keys: Chaves a remover

        Returns:
            True se removidas com sucesso
        """
        ...


class Serializer(Protocol):
    """Protocol para serialização de dados.

    Example:
        ```python
        import json

        class JsonSerializer:
            def serialize(self, data: Any) -> bytes:
                return json.dumps(data).encode()

            def deserialize(self, data: bytes) -> Any:
                return json.loads(data.decode())
        ```
    """

    def serialize(self, data: Any) -> bytes:
        """Serializa dados Python para bytes."""
        ...

    def deserialize(self, data: bytes) -> Any:
        """Deserializa bytes para dados Python."""
        ...


class CacheMetrics(Protocol):
    """Protocol para coleta de métricas de cache."""

    def record_hit(self, key: str, latency: float) -> None:
        """Registra cache hit.

        Args:
            key: Chave do cache
            latency: Latência da operação em segundos
        """
        ...

    def record_miss(self, key: str, latency: float) -> None:
        """Registra cache miss.

        Args:
            key: Chave do cache
            latency: Latência da operação em segundos
        """
        ...

    def record_write(self, key: str, size: int) -> None:
        """Registra escrita no cache.

        Args:
            key: Chave do cache
            size: Tamanho dos dados em bytes
        """
        ...

    def record_error(self, key: str, error: Exception) -> None:
        """Registra erro de cache."""
        ...

    def record_invalidation(self, keys: list[str]) -> None:
        """Registra invalidação de chaves após escrita/remoção de atributo."""
        ...
