"""Testes para a resolução de chaves."""

from collections import namedtuple
from decimal import Decimal

import pytest

from dapr_object_cache.config import CallOptions
from dapr_object_cache.exceptions import CacheKeyError
from dapr_object_cache.key_resolver import KeyResolver, resolve_callback_key


class Entity:
    def find(self, user_id: int) -> dict:
        return {"id": user_id}


class TestResolveCallbackKey:
    """Testes para a precedência por chamada > instância."""

    def test_no_entity_key_returns_none(self) -> None:
        """Sem entity key não há callback key."""
        assert resolve_callback_key("find", CallOptions(), None) is None

    def test_configured_entity_key(self) -> None:
        """Deve combinar entity key configurado com a operação."""
        assert resolve_callback_key("Find", CallOptions(), "users") == "users::find"

    def test_call_entity_key_overrides_configured(self) -> None:
        """Entity key da chamada deve prevalecer."""
        options = CallOptions(entity_key="admins")
        assert resolve_callback_key("find", options, "users") == "admins::find"



Point = namedtuple("Point", "x y")


class Opaque:
    """Objeto sem representação JSON."""

    def __init__(self, value: str) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Opaque({self.value!r})"


@pytest.fixture
def resolver() -> KeyResolver:
    return KeyResolver()


def _key(resolver: KeyResolver, *args, **kwargs) -> str:
    return resolver.resolve(Entity(), "find", args, kwargs, callback_key="users::find")


class TestKeyResolver:
    """Testes para KeyResolver."""

    def test_same_input_same_key(self, resolver: KeyResolver) -> None:
        """Mesma entidade, operação e argumentos geram a mesma chave."""
        entity = Entity()

        key1 = resolver.resolve(entity, "find", (1,), {"full": True}, entity_token="t1")
        key2 = resolver.resolve(entity, "find", (1,), {"full": True}, entity_token="t1")

        assert key1 == key2

    def test_operation_name_is_case_insensitive(self, resolver: KeyResolver) -> None:
        """Nome da operação não diferencia maiúsculas."""
        entity = Entity()

        key1 = resolver.resolve(entity, "FIND", (1,), entity_token="t1")
        key2 = resolver.resolve(entity, "find", (1,), entity_token="t1")

        assert key1 == key2

    def test_different_operation_different_keys(self, resolver: KeyResolver) -> None:
        """Operações diferentes geram chaves diferentes."""
        entity = Entity()

        key1 = resolver.resolve(entity, "find", (1,), entity_token="t1")
        key2 = resolver.resolve(entity, "load", (1,), entity_token="t1")

        assert key1 != key2

    def test_different_tokens_different_keys(self, resolver: KeyResolver) -> None:
        """Tokens diferentes geram chaves diferentes, mesmo para a mesma classe."""
        key1 = resolver.resolve(Entity(), "find", (1,), entity_token="t1")
        key2 = resolver.resolve(Entity(), "find", (1,), entity_token="t2")

        assert key1 != key2

    def test_identity_key_format(self) -> None:
        """Chave derivada da identidade inclui classe, token e operação."""
        resolver = KeyResolver(namespace="ns")

        key = resolver.resolve(Entity(), "Find", (1,), entity_token="abc123")

        assert key.startswith(f"ns:{Entity.__module__}.Entity@abc123::find:")
        assert len(key.rsplit(":", 1)[1]) == 32

    def test_identity_key_requires_token(self, resolver: KeyResolver) -> None:
        """Sem entity key e sem token não há como identificar a entidade."""
        with pytest.raises(CacheKeyError):
            resolver.resolve(Entity(), "find", (1,))

    def test_callback_key_replaces_identity(self, resolver: KeyResolver) -> None:
        """Callback key substitui a parte derivada da identidade."""
        assert _key(resolver, 1).startswith("users::find:")

    def test_callback_key_shared_between_instances(self, resolver: KeyResolver) -> None:
        """Com entity key, instâncias diferentes compartilham entradas."""
        assert _key(resolver, 1) == _key(resolver, 1)

    def test_resolve_for_call_explicit_key_wins(self, resolver: KeyResolver) -> None:
        """Chave explícita é usada literalmente."""
        options = CallOptions(key="explicit", entity_key="admins")

        key = resolver.resolve_for_call(Entity(), "find", (1,), None, options, "users", "t1")

        assert key == "explicit"

    def test_resolve_for_call_uses_token_without_entity_key(self, resolver: KeyResolver) -> None:
        """Sem entity key a chave usa o token informado."""
        key = resolver.resolve_for_call(Entity(), "find", (1,), None, CallOptions(), None, "t1")

        assert "@t1::find:" in key

    def test_empty_namespace_raises_error(self) -> None:
        """Namespace vazio deve lançar erro."""
        with pytest.raises(ValueError):
            KeyResolver(namespace="")


class TestArgumentHashing:
    """Testes para o hash canônico dos argumentos."""

    def test_kwargs_order_does_not_affect_key(self, resolver: KeyResolver) -> None:
        """Ordem dos kwargs não deve afetar a chave."""
        assert _key(resolver, a=1, b=2) == _key(resolver, b=2, a=1)

    def test_set_arguments_are_order_independent(self, resolver: KeyResolver) -> None:
        """Sets com tipos mistos devem gerar chave estável."""
        assert _key(resolver, {1, "a", 2.5}) == _key(resolver, {2.5, "a", 1})

    def test_dict_arguments_are_order_independent(self, resolver: KeyResolver) -> None:
        """Ordem de inserção de um dict não afeta a chave."""
        assert _key(resolver, {"a": 1, "b": 2}) == _key(resolver, {"b": 2, "a": 1})

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (1, 2),
            (b"\xff", b"\xfe"),
            (b"abc", "abc"),
            (b"abc", bytearray(b"abc")),
            ("1", Decimal("1")),
            (Decimal("1"), Decimal("1.0")),
            ([1, 2], (1, 2)),
            ([1, 2], {1, 2}),
            ((1, 2), Point(1, 2)),
            ({1: "a"}, {"1": "a"}),
            (1, 1.0),
            (1, True),
            (0, None),
            ("Opaque('x')", Opaque("x")),
            (Opaque("x"), Opaque("y")),
            (["tuple", [1]], (1,)),
        ],
    )
    def test_distinct_arguments_distinct_keys(self, resolver: KeyResolver, first, second) -> None:
        """Valores diferentes (em valor ou tipo) nunca compartilham chave."""
        assert _key(resolver, first) != _key(resolver, second)

    def test_positional_and_keyword_are_distinct(self, resolver: KeyResolver) -> None:
        """Argumento posicional e nomeado geram chaves diferentes."""
        assert _key(resolver, 1) != _key(resolver, x=1)

    def test_equal_objects_share_key(self, resolver: KeyResolver) -> None:
        """Objetos com a mesma representação geram a mesma chave."""
        assert _key(resolver, Decimal("1.5")) == _key(resolver, Decimal("1.5"))
        assert _key(resolver, Opaque("x")) == _key(resolver, Opaque("x"))

    def test_nested_structures_are_tagged(self, resolver: KeyResolver) -> None:
        """Tipos são distinguidos também dentro de estruturas aninhadas."""
        assert _key(resolver, {"ids": [1, 2]}) != _key(resolver, {"ids": (1, 2)})
        assert _key(resolver, [b"\xff"]) != _key(resolver, [b"\xfe"])
