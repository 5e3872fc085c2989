"""Name resolution: runtime frames and the checker's symbol table."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .ast import Pos
from .errors import RuntimeFault
from .values import Type, Value


class Frame:
    """Variables of one active call (or of the main script).

    Scopes follow block nesting; a name introduced in a block disappears
    when the block exits.
    """

    def __init__(self, bindings: dict[str, Value] | None = None) -> None:
        self._scopes: list[dict[str, Value]] = [dict(bindings or {})]

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        self._scopes.pop()

    @contextmanager
    def scope(self) -> Iterator[None]:
        self.push_scope()
        try:
            yield
        finally:
            self.pop_scope()

    def bind(self, name: str, value: Value) -> None:
        self._scopes[-1][name] = value

    def get(self, name: str, pos: Pos | None = None) -> Value:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        raise RuntimeFault(f"undefined variable '{name}'", pos)

    def set(self, name: str, value: Value, pos: Pos | None = None) -> None:
        for scope in reversed(self._scopes):
            if name in scope:
                scope[name] = value
                return
        raise RuntimeFault(f"undefined variable '{name}'", pos)


class SymbolTable:
    """Declared types of variables, one scope per enclosing block."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Type]] = [{}]

    def mark(self) -> None:
        self._scopes.append({})

    def pop_until_mark(self) -> None:
        if len(self._scopes) == 1:
            raise RuntimeError("symbol table scope underflow")
        self._scopes.pop()

    @contextmanager
    def scope(self) -> Iterator[None]:
        self.mark()
        try:
            yield
        finally:
            self.pop_until_mark()

    def is_redefining(self, name: str) -> bool:
        """True if name is already declared in the innermost scope."""
        return name in self._scopes[-1]

    def add_local(self, name: str, typ: Type) -> None:
        self._scopes[-1][name] = typ

    def lookup(self, name: str) -> Type | None:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None
