"""Adapters de storage: Dapr State Store (HTTP do sidecar) e memória local."""

import base64
import binascii
import logging
import os
from collections.abc import Mapping
from threading import Lock
from typing import Any

import httpx
from cachetools import TTLCache

from .constants import DEFAULT_TTL_SECONDS, ERROR_INVALID_STORAGE
from .exceptions import CacheConfigurationError, CacheConnectionError, CacheKeyError
from .protocols import StorageAdapter

logger = logging.getLogger(__name__)

# Configuração do sidecar Dapr
DEFAULT_DAPR_HTTP_PORT = 3500
DEFAULT_TIMEOUT_SECONDS = 5.0


def _get_dapr_url() -> str:
    """Obtém a URL base do sidecar Dapr."""
    host = os.getenv("DAPR_HTTP_HOST", "127.0.0.1")
    port = os.getenv("DAPR_HTTP_PORT", str(DEFAULT_DAPR_HTTP_PORT))
    return f"http://{host}:{port}"


class DaprStateBackend:
    """Storage adapter para Dapr State Store usando a API HTTP do sidecar.

    Endpoints usados:
    - GET /v1.0/state/{storename}/{key} - buscar valor
    - POST /v1.0/state/{storename} - salvar valor
    - POST /v1.0/state/{storename}/transaction - remover várias chaves

    Attributes:
        store_name: Nome do state store configurado no Dapr
        timeout: Timeout para operações HTTP em segundos
    """

    def __init__(
        self,
        store_name: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        dapr_url: str | None = None,
    ) -> None:
        """Inicializa o backend.

        Args:
            store_name: Nome do state store Dapr
            timeout: Timeout para operações HTTP
            dapr_url: URL do sidecar (usa env vars se não fornecido)

        Raises:
            CacheKeyError: Se store_name for vazio
        """
        if not store_name:
            raise CacheKeyError("store_name não pode ser vazio")

        self._store_name = store_name
        self._timeout = timeout
        self._base_url = dapr_url or _get_dapr_url()

        # Cliente criado sob demanda
        self._client: httpx.Client | None = None
        self._client_lock = Lock()

    @property
    def store_name(self) -> str:
        """Nome do state store."""
        return self._store_name

    def _get_client(self) -> httpx.Client:
        """Obtém ou cria cliente HTTP (double-checked locking)."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(
                        base_url=self._base_url,
                        timeout=self._timeout,
                    )
        return self._client

    def _state_url(self, key: str | None = None) -> str:
        """Constrói URL para operações de state."""
        if key:
            return f"/v1.0/state/{self._store_name}/{key}"
        return f"/v1.0/state/{self._store_name}"

    def _transaction_url(self) -> str:
        return f"/v1.0/state/{self._store_name}/transaction"

    def _encode_value(self, value: bytes) -> str:
        """Codifica valor em base64 para envio via JSON."""
        return base64.b64encode(value).decode("ascii")

    def _decode_value(self, data: Any) -> bytes | None:
        """Decodifica valor recebido do Dapr."""
        if data is None:
            return None
        if isinstance(data, bytes):
            return data
        if isinstance(data, str):
            # O Dapr devolve o valor como string JSON
            text = data.strip().strip('"')
            try:
                return base64.b64decode(text, validate=True)
            except (binascii.Error, ValueError):
                return text.encode("utf-8")
        return None

    def get(self, key: str) -> bytes | None:
        """Busca valor do state store.

        Returns:
            Valor em bytes ou None se não encontrado

        Raises:
            CacheKeyError: Se a chave for vazia
            CacheConnectionError: Se não conseguir conectar ao sidecar
        """
        if not key:
            raise CacheKeyError("Chave não pode ser vazia", key=key)

        try:
            response = self._get_client().get(self._state_url(key))
        except httpx.ConnectError as e:
            raise CacheConnectionError(f"Não foi possível conectar ao sidecar Dapr: {e}", key=key) from e
        except httpx.TimeoutException as e:
            logger.warning("Timeout ao buscar chave %s: %s", key, e)
            return None

        if response.status_code == 204 or not response.content:
            return None

        if response.status_code == 200:
            try:
                return self._decode_value(response.content.decode("utf-8"))
            except UnicodeDecodeError as e:
                logger.warning("Erro ao decodificar resposta para chave %s: %s", key, e)
                return None

        logger.warning("Resposta inesperada do Dapr: %s", response.status_code)
        return None

    def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        """Armazena valor no state store com TTL.

        Raises:
            CacheKeyError: Se a chave for vazia
            CacheConnectionError: Se não conseguir conectar ao sidecar
        """
        if not key:
            raise CacheKeyError("Chave não pode ser vazia", key=key)

        payload = [
            {
                "key": key,
                "value": self._encode_value(value),
                "metadata": {"ttlInSeconds": str(ttl_seconds)},
            }
        ]
        try:
            response = self._get_client().post(self._state_url(), json=payload)
        except httpx.ConnectError as e:
            raise CacheConnectionError(f"Não foi possível conectar ao sidecar Dapr: {e}", key=key) from e
        except httpx.TimeoutException as e:
            logger.warning("Timeout ao salvar chave %s: %s", key, e)
            return False

        if response.status_code in (200, 201, 204):
            logger.debug("Cache set para chave: %s, TTL: %ss", key, ttl_seconds)
            return True

        logger.warning("Falha ao salvar cache: %s", response.status_code)
        return False

    def remove_many(self, keys: list[str]) -> bool:
        """Remove várias chaves numa única transação de state.

        Raises:
            CacheConnectionError: Se não conseguir conectar ao sidecar
        """
        keys = [key for key in keys if key]
        if not keys:
            return True

        payload = {"operations": [{"operation": "delete", "request": {"key": key}} for key in keys]}
        try:
            response = self._get_client().post(self._transaction_url(), json=payload)
        except httpx.ConnectError as e:
            raise CacheConnectionError(f"Não foi possível conectar ao sidecar Dapr: {e}", key=keys[0]) from e
        except httpx.TimeoutException as e:
            logger.warning("Timeout ao remover chaves %s: %s", keys, e)
            return False

        if response.status_code in (200, 204):
            logger.debug("Cache remove para chaves: %s", keys)
            return True

        logger.warning("Falha ao remover chaves do cache: %s", response.status_code)
        return False

    def close(self) -> None:
        """Fecha o cliente HTTP."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "DaprStateBackend":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class MemoryStateBackend:
    """Storage adapter em memória usando LRU com TTL.

    Adequado para testes e processos únicos. O TTLCache do cachetools
    usa um TTL global, então o ``ttl_seconds`` de cada escrita é ignorado.
    """

    def __init__(self, maxsize: int = 1024, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self._cache: TTLCache[str, bytes] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    def get(self, key: str) -> bytes | None:
        if not key:
            raise CacheKeyError("Chave não pode ser vazia", key=key)
        return self._cache.get(key)

    def set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        if not key:
            raise CacheKeyError("Chave não pode ser vazia", key=key)
        self._cache[key] = value
        return True

    def remove_many(self, keys: list[str]) -> bool:
        for key in keys:
            self._cache.pop(key, None)
        return True

    def clear(self) -> None:
        self._cache.clear()

    def keys(self) -> list[str]:
        return list(self._cache.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def create_storage(storage: Any) -> StorageAdapter:
    """Converte a opção ``storage`` num adapter.

    Aceita um adapter pronto, o nome de um state store Dapr ou um dict
    com os argumentos de ``DaprStateBackend``.

    Raises:
        CacheConfigurationError: Se a opção não puder ser convertida
    """
    if isinstance(storage, str):
        if not storage.strip():
            raise CacheConfigurationError(ERROR_INVALID_STORAGE)
        return DaprStateBackend(storage)

    if isinstance(storage, Mapping):
        try:
            return DaprStateBackend(**storage)
        except (TypeError, CacheKeyError) as e:
            raise CacheConfigurationError(f"{ERROR_INVALID_STORAGE}: {e}") from e

    if isinstance(storage, StorageAdapter):
        return storage

    raise CacheConfigurationError(ERROR_INVALID_STORAGE)
