"""Proxy transparente que cacheia chamadas de uma entidade."""

from collections.abc import Iterable, Mapping
from typing import Any

from .config import CallOptions, ObjectCacheConfig
from .constants import DEFAULT_NON_CACHE_METHODS
from .dispatcher import Dispatcher, Invocation, OpKind
from .dynamic_access import has_declared_member
from .key_resolver import KeyResolver
from .protocols import CacheMetrics, Serializer, StorageAdapter


class ObjectCache:
    """Proxy de cache para uma entidade qualquer.

    Métodos chamados pelo proxy passam pela política de cache; atributos
    lidos, escritos e removidos pelo proxy passam pelos acessores dinâmicos.
    Todos os atributos internos do proxy começam com ``_``, então qualquer
    outro nome é encaminhado para a entidade.

    Example:
        ```python
        repo = UserRepository()
        users = ObjectCache(repo, storage="cache", entity_key="users")

        users.find(42)          # miss: executa repo.find(42) e grava
        users.find(42)          # hit: vem do state store

        users.call("find", (42,), options=CallOptions(key="user-42"))
        ```

    As opções ficam em ``cache_config`` (getters e setters).
    """

    def __init__(
        self,
        entity: Any = None,
        storage: StorageAdapter | str | dict[str, Any] | None = None,
        *,
        entity_key: str | None = None,
        cache_by_default: bool = True,
        cache_methods: Iterable[str] = (),
        non_cache_methods: Iterable[str] = DEFAULT_NON_CACHE_METHODS,
        cache_dynamic_properties: bool = False,
        ttl_seconds: int | None = None,
        serializer: Serializer | None = None,
        metrics: CacheMetrics | None = None,
        key_resolver: KeyResolver | None = None,
    ) -> None:
        config = ObjectCacheConfig(
            entity=entity,
            storage=storage,
            entity_key=entity_key,
            cache_by_default=cache_by_default,
            cache_methods=cache_methods,
            non_cache_methods=non_cache_methods,
            cache_dynamic_properties=cache_dynamic_properties,
            ttl_seconds=ttl_seconds,
            serializer=serializer,
            metrics=metrics,
        )
        object.__setattr__(self, "_dispatcher", Dispatcher(config, key_resolver))

    @property
    def cache_config(self) -> ObjectCacheConfig:
        return self._dispatcher.config

    def call(
        self,
        method: str,
        args: Iterable[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
    ) -> Any:
        """Chama um método da entidade com opções de cache por chamada."""
        return self._dispatcher.dispatch(
            Invocation(OpKind.CALL, method, tuple(args), kwargs or {}, options or CallOptions())
        )

    def generate_key(
        self,
        method: str,
        args: Iterable[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
    ) -> str:
        """Chave de cache de ``method`` com estes argumentos."""
        return self._dispatcher.generate_key(method, tuple(args), kwargs, options)

    def has_property(self, name: str, options: CallOptions | None = None) -> bool:
        """Verifica a existência de um atributo da entidade."""
        return self._dispatcher.dispatch(Invocation(OpKind.HAS, name, options=options or CallOptions()))

    def __getattr__(self, name: str) -> Any:
        if name == "_dispatcher" or (name.startswith("__") and name.endswith("__")):
            # Protocolos do Python (copy, pickle, ...) não são encaminhados
            raise AttributeError(name)

        entity = self._dispatcher.config.entity
        if not has_declared_member(entity, name):
            return self._dispatcher.dispatch(Invocation(OpKind.GET, name))

        # Membro declarado: lido uma única vez, sem passar pelo cache
        value = getattr(entity, name)
        if callable(value):
            return _BoundCall(self, name)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        self._dispatcher.dispatch(Invocation(OpKind.SET, name, (value,)))

    def __delattr__(self, name: str) -> None:
        self._dispatcher.dispatch(Invocation(OpKind.DELETE, name))

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.call("__call__", args, kwargs)

    def __str__(self) -> str:
        return self.call("__str__")

    def __repr__(self) -> str:
        return f"<ObjectCache entity={self._dispatcher.config.entity!r}>"


class _BoundCall:
    """Método da entidade visto pelo proxy."""

    __slots__ = ("_proxy", "_name")

    def __init__(self, proxy: ObjectCache, name: str) -> None:
        self._proxy = proxy
        self._name = name

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._proxy.call(self._name, args, kwargs)

    def __repr__(self) -> str:
        return f"<cached method {self._name}>"
