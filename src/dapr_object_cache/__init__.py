"""dapr-object-cache: proxy de cache transparente para objetos.

Intercepta chamadas de métodos e acesso a atributos dinâmicos de uma
entidade, servindo os resultados a partir de um state store Dapr (ou de
qualquer StorageAdapter) e invalidando leituras cacheadas quando um
atributo dinâmico é escrito ou removido.

Uso básico:
    ```python
    from dapr_object_cache import ObjectCache

    users = ObjectCache(UserRepository(), storage="cache", entity_key="users")

    users.find(42)   # executa e grava
    users.find(42)   # vem do cache

    # Allowlist
    users.cache_config.cache_by_default = False
    users.cache_config.cache_methods = ["find"]
    ```

Com atributos dinâmicos:
    ```python
    settings = ObjectCache(remote_settings, storage=MemoryStateBackend(),
                           cache_dynamic_properties=True)

    settings.color          # cacheado
    settings.color = "red"  # escreve na entidade e invalida a leitura
    ```
"""

__version__ = "0.1.0"

from .backend import DaprStateBackend, MemoryStateBackend, create_storage
from .callback_cache import CallbackCache
from .config import CacheConfig, CallOptions, ObjectCacheConfig
from .constants import (
    DELETE_ACCESSOR,
    EXISTS_ACCESSOR,
    READ_ACCESSOR,
    RESERVED_ACCESSORS,
    WRITE_ACCESSOR,
)
from .dispatcher import Dispatcher, Invocation, OpKind
from .dynamic_access import DynamicAccessHandler, has_declared_member
from .exceptions import (
    CacheConfigurationError,
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
)
from .key_resolver import KeyResolver, resolve_callback_key
from .metrics import (
    CacheStats,
    InMemoryMetrics,
    KeyStats,
    NoOpMetrics,
    OpenTelemetryMetrics,
)
from .object_cache import ObjectCache
from .policy import CachePolicy
from .protocols import CacheMetrics, Serializer, StorageAdapter
from .serializer import MsgPackSerializer

__all__ = [
    # Proxy
    "ObjectCache",
    "CallOptions",
    "ObjectCacheConfig",
    "CacheConfig",
    # Núcleo
    "Dispatcher",
    "Invocation",
    "OpKind",
    "KeyResolver",
    "resolve_callback_key",
    "CachePolicy",
    "DynamicAccessHandler",
    "has_declared_member",
    "CallbackCache",
    # Acessores reservados
    "READ_ACCESSOR",
    "WRITE_ACCESSOR",
    "EXISTS_ACCESSOR",
    "DELETE_ACCESSOR",
    "RESERVED_ACCESSORS",
    # Storage
    "DaprStateBackend",
    "MemoryStateBackend",
    "create_storage",
    "StorageAdapter",
    # Serialização
    "MsgPackSerializer",
    "Serializer",
    # Métricas
    "CacheMetrics",
    "CacheStats",
    "KeyStats",
    "NoOpMetrics",
    "InMemoryMetrics",
    "OpenTelemetryMetrics",
    # Exceções
    "CacheError",
    "CacheConfigurationError",
    "CacheConnectionError",
    "CacheSerializationError",
    "CacheKeyError",
]
