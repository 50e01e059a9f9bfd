"""Configuração de fixtures para testes."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from dapr_object_cache.backend import MemoryStateBackend


class Greeter:
    """Entidade simples com métodos declarados."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def greet(self, name: str) -> str:
        self.calls.append("greet")
        return f"Hello, {name}"

    def foo(self) -> str:
        self.calls.append("foo")
        return "foo"

    def bar(self) -> str:
        self.calls.append("bar")
        return "bar"

    def fail(self) -> None:
        raise RuntimeError("entity failure")

    def __str__(self) -> str:
        self.calls.append("__str__")
        return "Greeter"


class DynamicSettings:
    """Entidade com atributos dinâmicos resolvidos por __getattr__/__setattr__."""

    def __init__(self, **values: Any) -> None:
        object.__setattr__(self, "_values", dict(values))
        object.__setattr__(self, "lookups", [])
        object.__setattr__(self, "declared", "static")

    def __getattr__(self, name: str) -> Any:
        self.lookups.append(name)
        values = self._values
        if name in values:
            return values[name]
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.__dict__:
            object.__setattr__(self, name, value)
        else:
            self._values[name] = value

    def __delattr__(self, name: str) -> None:
        if name in self.__dict__:
            object.__delattr__(self, name)
        else:
            del self._values[name]


@pytest.fixture
def greeter() -> Greeter:
    return Greeter()


@pytest.fixture
def settings() -> DynamicSettings:
    return DynamicSettings(color="blue")


@pytest.fixture
def storage() -> MagicMock:
    """Storage em memória embrulhado num mock para inspecionar as chamadas."""
    return MagicMock(spec=MemoryStateBackend, wraps=MemoryStateBackend())
