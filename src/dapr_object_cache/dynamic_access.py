"""Leitura, escrita, existência e remoção de atributos dinâmicos da entidade.

Um atributo é *declarado* quando a busca estática o encontra (dict da
instância, classe ou MRO) sem passar por ``__getattr__``. Atributos
declarados nunca tocam o cache. Atributos *dinâmicos* só são cacheados
com ``cache_dynamic_properties`` ligado; escrever ou remover um deles
invalida as leituras e verificações de existência cacheadas.
"""

import inspect
from collections.abc import Callable
from typing import Any

from .callback_cache import CallbackCache
from .config import CallOptions, ObjectCacheConfig
from .constants import EXISTS_ACCESSOR, READ_ACCESSOR
from .key_resolver import KeyResolver


_MISSING = object()


def has_declared_member(entity: Any, name: str) -> bool:
    """Verifica se ``name`` é um membro real da entidade.

    A entidade pode responder por conta própria implementando
    ``has_declared_member(name)``; caso contrário usa introspecção estática.
    """
    checker = inspect.getattr_static(entity, "has_declared_member", _MISSING)
    if checker is not _MISSING and callable(checker):
        return bool(entity.has_declared_member(name))
    return inspect.getattr_static(entity, name, _MISSING) is not _MISSING


def resolves_dynamically(entity: Any) -> bool:
    """True se a classe da entidade define ``__getattr__`` ou um ``__getattribute__`` próprio."""
    cls = type(entity)
    if inspect.getattr_static(cls, "__getattr__", _MISSING) is not _MISSING:
        return True
    return inspect.getattr_static(cls, "__getattribute__") is not object.__getattribute__


class DynamicAccessHandler:
    """Política dos quatro acessores dinâmicos.

    Não guarda estado próprio: tudo vem da configuração e da introspecção
    da entidade. ``callback_cache`` é chamado a cada uso para refletir
    alterações feitas na configuração depois da construção.
    """

    def __init__(
        self,
        config: ObjectCacheConfig,
        key_resolver: KeyResolver,
        callback_cache: Callable[[], CallbackCache],
    ) -> None:
        self._config = config
        self._key_resolver = key_resolver
        self._callback_cache = callback_cache

    def is_dynamic(self, name: str) -> bool:
        """True se o atributo deve passar pelo cache."""
        if not self._config.cache_dynamic_properties:
            return False
        return not has_declared_member(self._config.entity, name)

    def read(self, name: str, options: CallOptions) -> Any:
        entity = self._config.entity
        if not self.is_dynamic(name):
            return getattr(entity, name)
        return self._cached(READ_ACCESSOR, name, options, lambda: getattr(entity, name))

    def exists(self, name: str, options: CallOptions) -> bool:
        entity = self._config.entity
        if not self.is_dynamic(name):
            return hasattr(entity, name)
        return bool(self._cached(EXISTS_ACCESSOR, name, options, lambda: hasattr(entity, name)))

    # O tipo do atributo é decidido antes da escrita/remoção: depois dela um
    # atributo de instância pode ter deixado de existir (ou passado a existir).

    def write(self, name: str, value: Any, options: CallOptions) -> None:
        dynamic = self.is_dynamic(name)
        setattr(self._config.entity, name, value)
        if dynamic:
            self._invalidate(name, options)

    def delete(self, name: str, options: CallOptions) -> None:
        dynamic = self.is_dynamic(name)
        delattr(self._config.entity, name)
        if dynamic:
            self._invalidate(name, options)

    def invalidation_keys(self, name: str, options: CallOptions) -> list[str]:
        """Chaves das leituras e verificações de existência cacheadas para ``name``."""
        entity = self._config.entity
        if not resolves_dynamically(entity):
            return []

        keys: list[str] = []
        for accessor in (READ_ACCESSOR, EXISTS_ACCESSOR):
            key = self._key(accessor, name, options)
            if key not in keys:
                keys.append(key)
        return keys

    def _invalidate(self, name: str, options: CallOptions) -> None:
        keys = self.invalidation_keys(name, options)
        self._callback_cache().remove(keys)

    def _cached(self, accessor: str, name: str, options: CallOptions, producer: Callable[[], Any]) -> Any:
        return self._callback_cache().call(self._key(accessor, name, options), producer)

    def _key(self, accessor: str, name: str, options: CallOptions) -> str:
        return self._key_resolver.resolve_for_call(
            self._config.entity,
            accessor,
            (name,),
            None,
            options,
            self._config.entity_key,
            self._config.entity_token,
        )
