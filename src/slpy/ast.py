"""slpy AST — node definitions produced by the (external) parser."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from .errors import CheckError
from .values import Type, Value


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for all expressions."""

    pos: Pos


@dataclass
class Lit(Expr):
    """Literal value: 3, "abc", True, None."""

    value: Value


@dataclass
class Var(Expr):
    """Variable reference."""

    name: str


@dataclass
class BinaryOp(Expr):
    """left op right. op is one of + - * // % < > <= >= == and or."""

    op: str
    left: Expr
    right: Expr


@dataclass
class UnaryOp(Expr):
    """op operand. op is 'not' or '-'."""

    op: str
    operand: Expr


@dataclass
class Ternary(Expr):
    """then_expr if cond else else_expr."""

    then_expr: Expr
    cond: Expr
    else_expr: Expr


@dataclass
class Input(Expr):
    """input(prompt)."""

    prompt: Expr


@dataclass
class IntConv(Expr):
    """int(expr)."""

    expr: Expr


@dataclass
class StrConv(Expr):
    """str(expr)."""

    expr: Expr


@dataclass
class Call(Expr):
    """name(args) used as an expression."""

    name: str
    args: list[Expr]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for all statements."""

    pos: Pos


@dataclass
class Block:
    """A sequence of statements; opens a scope."""

    pos: Pos
    stmts: list[Stmt]


@dataclass
class IntroStmt(Stmt):
    """name: typ = value."""

    name: str
    typ: Type
    value: Expr


@dataclass
class AssignStmt(Stmt):
    """name = value."""

    name: str
    value: Expr


@dataclass
class OpAssignStmt(Stmt):
    """name op value, op is '+=' or '-='."""

    name: str
    op: str
    value: Expr


@dataclass
class PrintStmt(Stmt):
    """print(args)."""

    args: list[Expr]


@dataclass
class PassStmt(Stmt):
    """pass."""


@dataclass
class CallStmt(Stmt):
    """name(args) used as a statement; any result is discarded."""

    name: str
    args: list[Expr]


@dataclass
class ReturnStmt(Stmt):
    """return expr?."""

    value: Expr | None


@dataclass
class IfArm:
    """One guarded arm of a conditional: the if or an elif."""

    pos: Pos
    cond: Expr
    body: Block


@dataclass
class IfStmt(Stmt):
    """if c: ... elif c: ... else: ...; arms holds the if and each elif."""

    arms: list[IfArm]
    else_body: Block | None


@dataclass
class WhileStmt(Stmt):
    """while cond: body."""

    cond: Expr
    body: Block


@dataclass
class RepeatStmt(Stmt):
    """repeat: body until cond."""

    body: Block
    cond: Expr


# ============================================================
# DEFINITIONS
# ============================================================


@dataclass(frozen=True)
class Param:
    """Formal parameter."""

    pos: Pos
    name: str
    typ: Type


@dataclass(frozen=True)
class Defn:
    """def name(params) -> ret: body. A procedure has ret None."""

    pos: Pos
    name: str
    params: tuple[Param, ...]
    ret: Type
    body: Block

    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Program:
    """Definitions followed by the main script block."""

    defs: Mapping[str, Defn]
    main: Block


def make_program(defns: Sequence[Defn], main: Block) -> Program:
    """Build a program, freezing its definition table."""
    table: dict[str, Defn] = {}
    for d in defns:
        if d.name in table:
            raise CheckError(f"duplicate definition '{d.name}'", d.pos)
        table[d.name] = d
    return Program(defs=MappingProxyType(table), main=main)
