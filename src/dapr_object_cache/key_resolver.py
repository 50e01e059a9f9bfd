"""Resolução determinística de chaves de cache."""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from .config import CallOptions
from .constants import DEFAULT_KEY_NAMESPACE, ENTITY_KEY_SEPARATOR, ERROR_MISSING_ENTITY_TOKEN
from .exceptions import CacheKeyError

_JSON_SCALARS = (type(None), bool, int, float, str)


def resolve_callback_key(op_name: str, options: CallOptions, entity_key: str | None) -> str | None:
    """Aplica a precedência por chamada > instância para o entity key.

    Returns:
        ``"{entity_key}::{op}"`` ou None quando nenhum entity key se aplica
    """
    effective = options.entity_key if options.entity_key is not None else entity_key
    if effective is None:
        return None
    return f"{effective}{ENTITY_KEY_SEPARATOR}{op_name.lower()}"


class KeyResolver:
    """Construtor de chaves usando SHA256.

    Formatos gerados:
    - chave explícita da chamada: usada literalmente
    - com entity key: ``{entity_key}::{op}:{hash_args}``
    - sem entity key: ``{namespace}:{module}.{qualname}@{entity_token}::{op}:{hash_args}``

    O hash cobre argumentos posicionais e nomeados (ordenados) numa forma
    canônica que inclui o tipo de cada valor, então argumentos diferentes
    nunca compartilham a mesma entrada.

    Attributes:
        namespace: Prefixo das chaves derivadas da identidade da entidade
    """

    def __init__(self, namespace: str = DEFAULT_KEY_NAMESPACE) -> None:
        if not namespace:
            raise ValueError("Namespace não pode ser vazio")
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def resolve(
        self,
        entity: Any,
        op_name: str,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
        callback_key: str | None = None,
        entity_token: str | None = None,
    ) -> str:
        """Constrói a chave de uma operação.

        Args:
            entity: Entidade encapsulada
            op_name: Nome do método ou acessor (case-insensitive)
            args: Argumentos posicionais
            kwargs: Argumentos nomeados
            callback_key: Parte fixa já resolvida; None usa a identidade da entidade
            entity_token: Token da entidade, usado quando não há callback key

        Returns:
            Chave de cache
        """
        if callback_key is None:
            callback_key = self.identity_key(entity, op_name, entity_token)
        args_hash = self._hash_arguments(args, kwargs or {})
        return f"{callback_key}:{args_hash}"

    def resolve_for_call(
        self,
        entity: Any,
        op_name: str,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any] | None,
        options: CallOptions,
        entity_key: str | None,
        entity_token: str | None = None,
    ) -> str:
        """Resolve a chave aplicando a precedência completa.

        chave explícita > entity key da chamada > entity key configurado > identidade
        """
        if options.key is not None:
            return options.key
        callback_key = resolve_callback_key(op_name, options, entity_key)
        return self.resolve(entity, op_name, args, kwargs, callback_key, entity_token)

    def identity_key(self, entity: Any, op_name: str, entity_token: str | None = None) -> str:
        """Parte fixa derivada da classe e do token da entidade.

        O token identifica a entidade encapsulada enquanto ela está
        configurada. ``id()`` não serve aqui: o CPython reaproveita o id de
        objetos liberados e as entradas sobrevivem à entidade no state store.

        Raises:
            CacheKeyError: Se nenhum token for informado
        """
        if not entity_token:
            raise CacheKeyError(ERROR_MISSING_ENTITY_TOKEN)
        cls = type(entity)
        return (
            f"{self._namespace}:{cls.__module__}.{cls.__qualname__}@{entity_token}"
            f"{ENTITY_KEY_SEPARATOR}{op_name.lower()}"
        )

    def _hash_arguments(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> str:
        """Calcula hash SHA256 da forma canônica dos argumentos."""
        canonical = _dumps([self._normalize(tuple(args)), self._normalize(dict(kwargs))])
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]

    def _normalize(self, obj: Any) -> Any:
        """Converte o objeto numa forma JSON canônica com o tipo embutido.

        Escalares JSON (exatamente ``None``, ``bool``, ``int``, ``float`` e
        ``str``) ficam como estão. Todo o resto vira uma lista cujo primeiro
        item é o nome do tipo, então ``(1, 2)`` e ``[1, 2]``, ``b"1"`` e
        ``"1"`` ou ``Decimal("1")`` e ``"1"`` nunca se confundem.
        """
        if type(obj) in _JSON_SCALARS:
            return obj
        type_name = _type_name(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return [type_name, bytes(obj).hex()]
        if isinstance(obj, (list, tuple)):
            return [type_name, [self._normalize(item) for item in obj]]
        if isinstance(obj, Mapping):
            pairs = [[self._normalize(k), self._normalize(v)] for k, v in obj.items()]
            return [type_name, sorted(pairs, key=lambda pair: _dumps(pair[0]))]
        if isinstance(obj, (set, frozenset)):
            return [type_name, sorted((self._normalize(item) for item in obj), key=_dumps)]
        return ["object", type_name, repr(obj)]


def _type_name(obj: Any) -> str:
    cls = type(obj)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))
