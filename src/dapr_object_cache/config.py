"""Configuração do object cache.

Resolve valores padrão e variáveis de ambiente, valida parâmetros e
mantém as opções de instância. A precedência segue a regra:

1. Parâmetro explícito (maior precedência)
2. Variável de ambiente
3. Valor padrão (menor precedência)

Opções por chamada (``CallOptions``) sobrepõem as opções de instância
somente na resolução da chave de cache.
"""

import os
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .backend import create_storage
from .constants import (
    DEFAULT_NON_CACHE_METHODS,
    DEFAULT_TTL_SECONDS,
    ERROR_INVALID_ENTITY,
    ERROR_MISSING_ENTITY,
    ERROR_MISSING_STORAGE,
    ERROR_TTL_INVALID,
    ERROR_TTL_TYPE_INVALID,
    MIN_TTL_SECONDS,
)
from .exceptions import CacheConfigurationError
from .metrics import NoOpMetrics
from .policy import CachePolicy
from .protocols import CacheMetrics, Serializer, StorageAdapter
from .serializer import MsgPackSerializer

# Tipos que não representam uma entidade
_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool)


@dataclass(frozen=True)
class CallOptions:
    """Opções de uma única chamada.

    Attributes:
        key: Chave de cache explícita, usada literalmente
        entity_key: Sobrepõe o ``entity_key`` configurado nesta chamada
    """

    key: str | None = None
    entity_key: str | None = None


class CacheConfig:
    """Valores padrão e resolução via variáveis de ambiente."""

    ENV_DEFAULT_TTL_SECONDS = "DAPR_OBJECT_CACHE_TTL_SECONDS"

    DEFAULT_TTL_SECONDS = DEFAULT_TTL_SECONDS

    @classmethod
    def resolve_ttl_seconds(cls, explicit_value: int | None = None) -> int:
        """Resolve TTL seguindo a precedência explícito > env > padrão."""
        if explicit_value is not None:
            return explicit_value

        env_value = os.getenv(cls.ENV_DEFAULT_TTL_SECONDS)
        if env_value:
            try:
                return int(env_value)
            except ValueError as e:
                raise CacheConfigurationError(
                    f"{cls.ENV_DEFAULT_TTL_SECONDS} must be an integer, got {env_value!r}"
                ) from e

        return cls.DEFAULT_TTL_SECONDS

    @staticmethod
    def validate_ttl_seconds(ttl_seconds: int) -> None:
        # bool é subclasse de int
        if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int):
            raise CacheConfigurationError(ERROR_TTL_TYPE_INVALID.format(type_name=type(ttl_seconds).__name__))
        if ttl_seconds < MIN_TTL_SECONDS:
            raise CacheConfigurationError(ERROR_TTL_INVALID.format(value=ttl_seconds))

    @staticmethod
    def validate_entity(entity: Any) -> None:
        if entity is None:
            raise CacheConfigurationError(ERROR_MISSING_ENTITY)
        if isinstance(entity, _SCALAR_TYPES):
            raise CacheConfigurationError(ERROR_INVALID_ENTITY)


class ObjectCacheConfig:
    """Opções de instância do object cache.

    ``entity`` e ``storage`` são obrigatórios e validados na construção.
    Todas as opções podem ser alteradas depois pelos setters, que
    normalizam e validam os valores.
    """

    def __init__(
        self,
        entity: Any = None,
        storage: StorageAdapter | str | dict[str, Any] | None = None,
        entity_key: str | None = None,
        cache_by_default: bool = True,
        cache_methods: Iterable[str] = (),
        non_cache_methods: Iterable[str] = DEFAULT_NON_CACHE_METHODS,
        cache_dynamic_properties: bool = False,
        ttl_seconds: int | None = None,
        serializer: Serializer | None = None,
        metrics: CacheMetrics | None = None,
    ) -> None:
        self.entity = entity
        if storage is None:
            raise CacheConfigurationError(ERROR_MISSING_STORAGE)

        self.storage = storage
        self.entity_key = entity_key
        self.policy = CachePolicy(cache_by_default, cache_methods, non_cache_methods)
        self.cache_dynamic_properties = cache_dynamic_properties
        self.ttl_seconds = CacheConfig.resolve_ttl_seconds(ttl_seconds)
        self.serializer = serializer or MsgPackSerializer()
        self.metrics = metrics or NoOpMetrics()

    @property
    def entity(self) -> Any:
        return self._entity

    @entity.setter
    def entity(self, entity: Any) -> None:
        CacheConfig.validate_entity(entity)
        self._entity = entity
        self._entity_token = uuid.uuid4().hex

    @property
    def entity_token(self) -> str:
        """Identifica a entidade atual nas chaves derivadas da identidade.

        Gerado de novo a cada troca de entidade, então entradas de uma
        entidade anterior nunca são servidas para a nova.
        """
        return self._entity_token

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    @storage.setter
    def storage(self, storage: StorageAdapter | str | dict[str, Any]) -> None:
        self._storage = create_storage(storage)

    @property
    def entity_key(self) -> str | None:
        """Parte fixa da chave; None gera a chave a partir da identidade da entidade."""
        return self._entity_key

    @entity_key.setter
    def entity_key(self, key: str | None) -> None:
        self._entity_key = str(key) if key is not None else None

    @property
    def cache_by_default(self) -> bool:
        return self.policy.cache_by_default

    @cache_by_default.setter
    def cache_by_default(self, flag: bool) -> None:
        self.policy.cache_by_default = flag

    @property
    def cache_methods(self) -> frozenset[str]:
        return self.policy.cache_methods

    @cache_methods.setter
    def cache_methods(self, methods: Iterable[str]) -> None:
        self.policy.cache_methods = methods

    @property
    def non_cache_methods(self) -> frozenset[str]:
        return self.policy.non_cache_methods

    @non_cache_methods.setter
    def non_cache_methods(self, methods: Iterable[str]) -> None:
        self.policy.non_cache_methods = methods

    @property
    def cache_dynamic_properties(self) -> bool:
        return self._cache_dynamic_properties

    @cache_dynamic_properties.setter
    def cache_dynamic_properties(self, flag: bool) -> None:
        self._cache_dynamic_properties = bool(flag)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @ttl_seconds.setter
    def ttl_seconds(self, ttl_seconds: int) -> None:
        CacheConfig.validate_ttl_seconds(ttl_seconds)
        self._ttl_seconds = ttl_seconds

    def as_dict(self) -> dict[str, Any]:
        """Retorna as opções atuais."""
        return {
            "entity": self.entity,
            "storage": self.storage,
            "entity_key": self.entity_key,
            "cache_by_default": self.cache_by_default,
            "cache_methods": sorted(self.cache_methods),
            "non_cache_methods": sorted(self.non_cache_methods),
            "cache_dynamic_properties": self.cache_dynamic_properties,
            "ttl_seconds": self.ttl_seconds,
            "serializer": self.serializer,
            "metrics": self.metrics,
        }
