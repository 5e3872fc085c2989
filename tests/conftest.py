"""Pytest configuration and AST builders for the slpy test suite."""

import io
import sys
from pathlib import Path

# Add src directory to path so tests run without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from slpy.ast import (  # noqa: E402
    AssignStmt,
    BinaryOp,
    Block,
    Call,
    CallStmt,
    Defn,
    Expr,
    IfArm,
    IfStmt,
    Input,
    IntConv,
    IntroStmt,
    Lit,
    OpAssignStmt,
    Param,
    PassStmt,
    Pos,
    PrintStmt,
    Program,
    RepeatStmt,
    ReturnStmt,
    StrConv,
    Ternary,
    UnaryOp,
    Var,
    WhileStmt,
    make_program,
)
from slpy import execute  # noqa: E402
from slpy.values import NONE, VBool, VInt, VStr, type_from_name  # noqa: E402

P = Pos(1, 1)


# ============================================================
# Expressions
# ============================================================


def lit(v):
    """Wrap a Python int/str/bool/None as a literal expression."""
    if v is None:
        return Lit(P, NONE)
    if isinstance(v, bool):
        return Lit(P, VBool(v))
    if isinstance(v, int):
        return Lit(P, VInt(v))
    return Lit(P, VStr(v))


def var(name):
    return Var(P, name)


def _e(x):
    """Plain Python values become literals; use var() for names."""
    if isinstance(x, Expr):
        return x
    return lit(x)


def binop(op, left, right):
    return BinaryOp(P, op, _e(left), _e(right))


def neg(x):
    return UnaryOp(P, "-", _e(x))


def not_(x):
    return UnaryOp(P, "not", _e(x))


def ternary(then_expr, cond, else_expr):
    return Ternary(P, _e(then_expr), _e(cond), _e(else_expr))


def input_(prompt):
    return Input(P, _e(prompt))


def int_(x):
    return IntConv(P, _e(x))


def str_(x):
    return StrConv(P, _e(x))


def call(name, *args):
    return Call(P, name, [_e(a) for a in args])


# ============================================================
# Statements
# ============================================================


def block(*stmts):
    return Block(P, list(stmts))


def intro(name, typ, value):
    return IntroStmt(P, name, type_from_name(typ), _e(value))


def assign(name, value):
    return AssignStmt(P, name, _e(value))


def op_assign(name, op, value):
    return OpAssignStmt(P, name, op, _e(value))


def print_(*args):
    return PrintStmt(P, [_e(a) for a in args])


def pass_():
    return PassStmt(P)


def call_stmt(name, *args):
    return CallStmt(P, name, [_e(a) for a in args])


def ret(value=None):
    if value is None:
        return ReturnStmt(P, None)
    return ReturnStmt(P, _e(value))


def if_(*arms, else_=None):
    """if_((cond, [stmts]), (cond, [stmts]), else_=[stmts])."""
    if_arms = [IfArm(P, _e(c), block(*body)) for c, body in arms]
    else_body = block(*else_) if else_ is not None else None
    return IfStmt(P, if_arms, else_body)


def while_(cond, *body):
    return WhileStmt(P, _e(cond), block(*body))


def repeat(cond, *body):
    return RepeatStmt(P, block(*body), _e(cond))


# ============================================================
# Programs
# ============================================================


def defn(name, params, ret_type, *body):
    """defn("f", [("x", "int")], "int", stmt, ...)."""
    ps = tuple(Param(P, n, type_from_name(t)) for n, t in params)
    return Defn(P, name, ps, type_from_name(ret_type), block(*body))


def program(*main, defs=()) -> Program:
    return make_program(list(defs), block(*main))


def run_output(prog, stdin="") -> str:
    """Check and run a program, returning everything it printed."""
    out = io.StringIO()
    execute(prog, stdin=io.StringIO(stdin), stdout=out)
    return out.getvalue()
