"""Política de cache: decide quais métodos passam pelo cache."""

from collections.abc import Iterable

from .constants import DEFAULT_NON_CACHE_METHODS, ERROR_RESERVED_ACCESSOR, RESERVED_ACCESSORS
from .exceptions import CacheConfigurationError


def normalize_method_names(methods: Iterable[str]) -> frozenset[str]:
    """Normaliza nomes de métodos (minúsculas, sem duplicatas).

    Raises:
        CacheConfigurationError: Se algum nome for um acessor dinâmico reservado
    """
    if isinstance(methods, str):
        methods = [methods]

    normalized = set()
    for method in methods:
        name = str(method).lower()
        if name in RESERVED_ACCESSORS:
            raise CacheConfigurationError(ERROR_RESERVED_ACCESSOR.format(name=name))
        normalized.add(name)
    return frozenset(normalized)


class CachePolicy:
    """Decide se o resultado de uma chamada é elegível para cache.

    Com ``cache_by_default`` ligado, tudo é cacheado exceto ``non_cache_methods``.
    Desligado, só ``cache_methods`` é cacheado. Apenas um dos conjuntos é
    consultado por vez.

    Os acessores dinâmicos (``__getattr__``, ``__setattr__``, ``__hasattr__``,
    ``__delattr__``) não podem aparecer em nenhum dos conjuntos: eles são
    controlados só por ``cache_dynamic_properties``.
    """

    def __init__(
        self,
        cache_by_default: bool = True,
        cache_methods: Iterable[str] = (),
        non_cache_methods: Iterable[str] = DEFAULT_NON_CACHE_METHODS,
    ) -> None:
        self._cache_by_default = bool(cache_by_default)
        self._cache_methods = normalize_method_names(cache_methods)
        self._non_cache_methods = normalize_method_names(non_cache_methods)

    @property
    def cache_by_default(self) -> bool:
        return self._cache_by_default

    @cache_by_default.setter
    def cache_by_default(self, flag: bool) -> None:
        self._cache_by_default = bool(flag)

    @property
    def cache_methods(self) -> frozenset[str]:
        return self._cache_methods

    @cache_methods.setter
    def cache_methods(self, methods: Iterable[str]) -> None:
        self._cache_methods = normalize_method_names(methods)

    @property
    def non_cache_methods(self) -> frozenset[str]:
        return self._non_cache_methods

    @non_cache_methods.setter
    def non_cache_methods(self, methods: Iterable[str]) -> None:
        self._non_cache_methods = normalize_method_names(methods)

    def should_cache(self, op_name: str) -> bool:
        """Retorna True se a operação deve passar pelo cache."""
        name = op_name.lower()
        if self._cache_by_default:
            return name not in self._non_cache_methods
        return name in self._cache_methods
