"""Ponto de entrada único de todas as chamadas interceptadas."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .callback_cache import CallbackCache
from .config import CallOptions, ObjectCacheConfig
from .constants import DELETE_ACCESSOR, EXISTS_ACCESSOR, READ_ACCESSOR, WRITE_ACCESSOR
from .dynamic_access import DynamicAccessHandler
from .key_resolver import KeyResolver

logger = logging.getLogger(__name__)


class OpKind(str, Enum):
    """Tipo da operação interceptada."""

    CALL = "call"
    GET = "get"
    SET = "set"
    HAS = "has"
    DELETE = "delete"


# Chamar um acessor reservado pelo nome equivale à operação correspondente
_ACCESSOR_OPS = {
    READ_ACCESSOR: OpKind.GET,
    WRITE_ACCESSOR: OpKind.SET,
    EXISTS_ACCESSOR: OpKind.HAS,
    DELETE_ACCESSOR: OpKind.DELETE,
}


@dataclass(frozen=True)
class Invocation:
    """Uma chamada interceptada.

    Para ``SET`` o valor a escrever é ``args[0]``.
    """

    op: OpKind
    name: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)
    options: CallOptions = field(default_factory=CallOptions)


class Dispatcher:
    """Orquestra política, resolução de chaves, acessores dinâmicos e cache.

    Example:
        ```python
        config = ObjectCacheConfig(entity=repo, storage=MemoryStateBackend())
        dispatcher = Dispatcher(config)

        dispatcher.dispatch(Invocation(OpKind.CALL, "find_user", (42,)))
        dispatcher.dispatch(Invocation(OpKind.SET, "color", ("red",)))
        ```
    """

    def __init__(self, config: ObjectCacheConfig, key_resolver: KeyResolver | None = None) -> None:
        self._config = config
        self._key_resolver = key_resolver or KeyResolver()
        self._dynamic = DynamicAccessHandler(config, self._key_resolver, self._callback_cache)

    @property
    def config(self) -> ObjectCacheConfig:
        return self._config

    @property
    def key_resolver(self) -> KeyResolver:
        return self._key_resolver

    def dispatch(self, invocation: Invocation) -> Any:
        """Executa a invocação, passando ou não pelo cache."""
        op = invocation.op
        name = invocation.name
        args = invocation.args
        options = invocation.options

        if op is OpKind.CALL and name.lower() in _ACCESSOR_OPS:
            if not args:
                raise TypeError(f"{name}() requires the attribute name as first argument")
            op = _ACCESSOR_OPS[name.lower()]
            name, args = args[0], tuple(args[1:])

        if op is OpKind.CALL:
            return self._call(name, args, invocation.kwargs, options)
        if op is OpKind.GET:
            return self._dynamic.read(name, options)
        if op is OpKind.HAS:
            return self._dynamic.exists(name, options)
        if op is OpKind.SET:
            if not args:
                raise TypeError(f"Missing value to set attribute {name!r}")
            self._dynamic.write(name, args[0], options)
            return None
        if op is OpKind.DELETE:
            self._dynamic.delete(name, options)
            return None

        raise ValueError(f"Unknown operation: {op!r}")

    def generate_key(
        self,
        name: str,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
        options: CallOptions | None = None,
    ) -> str:
        """Chave que seria usada para chamar ``name`` com estes argumentos."""
        return self._key_resolver.resolve_for_call(
            self._config.entity,
            name.lower(),
            tuple(args),
            kwargs,
            options or CallOptions(),
            self._config.entity_key,
            self._config.entity_token,
        )

    def _call(self, name: str, args: tuple[Any, ...], kwargs: Mapping[str, Any], options: CallOptions) -> Any:
        entity = self._config.entity
        method_name = name.lower()

        if not self._config.policy.should_cache(method_name):
            logger.debug("Cache ignorado para %s.%s", type(entity).__name__, name)
            return getattr(entity, name)(*args, **kwargs)

        key = self.generate_key(method_name, args, kwargs, options)
        return self._callback_cache().call(key, lambda: getattr(entity, name)(*args, **kwargs))

    def _callback_cache(self) -> CallbackCache:
        return CallbackCache(
            storage=self._config.storage,
            serializer=self._config.serializer,
            metrics=self._config.metrics,
            ttl_seconds=self._config.ttl_seconds,
        )
