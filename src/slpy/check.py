"""slpy typechecker — validates types and return behavior before a program runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from .ast import (
    AssignStmt,
    BinaryOp,
    Block,
    Call,
    CallStmt,
    Defn,
    Expr,
    IfStmt,
    Input,
    IntConv,
    IntroStmt,
    Lit,
    OpAssignStmt,
    PassStmt,
    Pos,
    PrintStmt,
    Program,
    RepeatStmt,
    ReturnStmt,
    Stmt,
    StrConv,
    Ternary,
    UnaryOp,
    Var,
    WhileStmt,
)
from .env import SymbolTable
from .errors import CheckError
from .values import BOOL_T, INT_T, NONE_T, STR_T, Type, type_name

logger = logging.getLogger(__name__)


# ============================================================
# RETURN FLOW
# ============================================================

FLOW_NEVER: str = "never"
FLOW_MAYBE: str = "maybe"
FLOW_ALWAYS: str = "always"


@dataclass(frozen=True)
class ReturnFlow:
    """Whether a statement or block returns: never, on some paths, or on all."""

    kind: str
    typ: Type | None = None

    def display(self) -> str:
        if self.typ is None:
            return self.kind
        return f"{self.kind}({type_name(self.typ)})"


NEVER: ReturnFlow = ReturnFlow(FLOW_NEVER)


def maybe(t: Type) -> ReturnFlow:
    return ReturnFlow(FLOW_MAYBE, t)


def always(t: Type) -> ReturnFlow:
    return ReturnFlow(FLOW_ALWAYS, t)


def _flow_type(flow: ReturnFlow) -> Type:
    assert flow.typ is not None
    return flow.typ


def merge_arms(acc: ReturnFlow, arm: ReturnFlow, pos: Pos) -> ReturnFlow:
    """Combine the flows of two alternative arms of one conditional."""
    if acc.kind == FLOW_NEVER and arm.kind == FLOW_NEVER:
        return NEVER
    if acc.kind == FLOW_NEVER:
        return maybe(_flow_type(arm))
    if arm.kind == FLOW_NEVER:
        return maybe(_flow_type(acc))
    if acc.typ != arm.typ:
        raise CheckError(
            f"branch returns {type_name(_flow_type(arm))} but an earlier branch"
            f" returns {type_name(_flow_type(acc))}",
            pos,
        )
    if acc.kind == FLOW_ALWAYS and arm.kind == FLOW_ALWAYS:
        return acc
    return maybe(_flow_type(acc))


def loop_flow(body: ReturnFlow) -> ReturnFlow:
    """A loop body may run zero times, so it can at best maybe return."""
    if body.kind == FLOW_NEVER:
        return NEVER
    return maybe(_flow_type(body))


# ============================================================
# CHECKER
# ============================================================

_LOGICAL_OPS = ("and", "or")
_COMPARE_OPS = ("<", ">", "<=", ">=", "==")
_INT_OPS = ("-", "//", "%")


class Checker:
    def __init__(self, defs: Mapping[str, Defn]) -> None:
        self.defs = defs

    def check_program(self, program: Program) -> None:
        for defn in program.defs.values():
            self.check_defn(defn)
        logger.debug("checking main script")
        self.check_block(program.main, NEVER, SymbolTable())

    def check_defn(self, defn: Defn) -> None:
        logger.debug("checking definition %s", defn.name)
        symtab = SymbolTable()
        for p in defn.params:
            if symtab.is_redefining(p.name):
                raise CheckError(f"duplicate parameter '{p.name}'", p.pos)
            symtab.add_local(p.name, p.typ)
        flow = self.check_block(defn.body, always(defn.ret), symtab)
        if defn.ret == NONE_T:
            return
        if flow.kind == FLOW_NEVER:
            raise CheckError(f"body of '{defn.name}' never returns", defn.pos)
        if flow.kind == FLOW_MAYBE:
            raise CheckError(f"body of '{defn.name}' might not return", defn.pos)

    # ── Statements ────────────────────────────────────────────

    def check_block(
        self, block: Block, expected: ReturnFlow, symtab: SymbolTable
    ) -> ReturnFlow:
        flow = NEVER
        with symtab.scope():
            for st in block.stmts:
                st_flow = self.check_stmt(st, expected, symtab)
                if st_flow.kind == FLOW_ALWAYS:
                    if flow.kind != FLOW_NEVER and flow.typ != st_flow.typ:
                        raise CheckError(
                            f"statement returns {type_name(_flow_type(st_flow))}"
                            f" but an earlier statement returns"
                            f" {type_name(_flow_type(flow))}",
                            st.pos,
                        )
                    flow = st_flow
                    # Anything after this statement is unreachable.
                    break
                if st_flow.kind == FLOW_MAYBE:
                    if flow.kind == FLOW_NEVER:
                        flow = st_flow
                    elif flow.typ != st_flow.typ:
                        raise CheckError(
                            "statements might return different types", st.pos
                        )
        return flow

    def check_stmt(
        self, st: Stmt, expected: ReturnFlow, symtab: SymbolTable
    ) -> ReturnFlow:
        if isinstance(st, IntroStmt):
            if symtab.is_redefining(st.name):
                raise CheckError(f"variable '{st.name}' already introduced", st.pos)
            vty = self.check_expr(st.value, symtab)
            if vty != st.typ:
                raise CheckError(
                    f"cannot initialize '{st.name}' of type {type_name(st.typ)}"
                    f" with {type_name(vty)}",
                    st.pos,
                )
            symtab.add_local(st.name, st.typ)
            return NEVER

        if isinstance(st, AssignStmt):
            target = self._lookup_target(st.name, st.pos, symtab)
            vty = self.check_expr(st.value, symtab)
            if vty != target:
                raise CheckError(
                    f"type mismatch: '{st.name}' is {type_name(target)},"
                    f" got {type_name(vty)}",
                    st.value.pos,
                )
            return NEVER

        if isinstance(st, OpAssignStmt):
            target = self._lookup_target(st.name, st.pos, symtab)
            vty = self.check_expr(st.value, symtab)
            if st.op == "+=":
                ok = vty == target and target in (INT_T, STR_T)
            elif st.op == "-=":
                ok = vty == target and target == INT_T
            else:
                raise CheckError(f"unknown assignment operator: {st.op}", st.pos)
            if not ok:
                raise CheckError(
                    f"wrong operand types for {st.op}: {type_name(target)}"
                    f" and {type_name(vty)}",
                    st.pos,
                )
            return NEVER

        if isinstance(st, PrintStmt):
            for arg in st.args:
                self.check_expr(arg, symtab)
            return NEVER

        if isinstance(st, PassStmt):
            return NEVER

        if isinstance(st, CallStmt):
            self.check_call(st.name, st.args, st.pos, symtab)
            return NEVER

        if isinstance(st, ReturnStmt):
            return self.check_return(st, expected, symtab)

        if isinstance(st, IfStmt):
            return self.check_if(st, expected, symtab)

        if isinstance(st, WhileStmt):
            self._check_guard(st.cond, "while", symtab)
            return loop_flow(self.check_block(st.body, expected, symtab))

        if isinstance(st, RepeatStmt):
            self._check_guard(st.cond, "repeat", symtab)
            return loop_flow(self.check_block(st.body, expected, symtab))

        raise CheckError("unsupported statement", st.pos)

    def check_return(
        self, st: ReturnStmt, expected: ReturnFlow, symtab: SymbolTable
    ) -> ReturnFlow:
        if expected.kind == FLOW_NEVER:
            raise CheckError("unexpected return statement", st.pos)
        want = _flow_type(expected)
        if st.value is None:
            if want != NONE_T:
                raise CheckError(
                    f"missing return value; should return {type_name(want)}", st.pos
                )
            return always(NONE_T)
        got = self.check_expr(st.value, symtab)
        if got != want:
            if want == NONE_T:
                raise CheckError("a procedure does not return a value", st.pos)
            raise CheckError(
                f"return type should be {type_name(want)} but got {type_name(got)}",
                st.pos,
            )
        return always(want)

    def check_if(
        self, st: IfStmt, expected: ReturnFlow, symtab: SymbolTable
    ) -> ReturnFlow:
        if len(st.arms) == 0:
            raise CheckError("conditional without an if arm", st.pos)
        for arm in st.arms:
            self._check_guard(arm.cond, "if", symtab)
        flow = self.check_block(st.arms[0].body, expected, symtab)
        for arm in st.arms[1:]:
            arm_flow = self.check_block(arm.body, expected, symtab)
            flow = merge_arms(flow, arm_flow, arm.pos)
        if st.else_body is None:
            return merge_arms(flow, NEVER, st.pos)
        else_flow = self.check_block(st.else_body, expected, symtab)
        return merge_arms(flow, else_flow, st.else_body.pos)

    def _check_guard(self, cond: Expr, what: str, symtab: SymbolTable) -> None:
        cty = self.check_expr(cond, symtab)
        if cty != BOOL_T:
            raise CheckError(
                f"{what} condition must be bool, got {type_name(cty)}", cond.pos
            )

    def _lookup_target(self, name: str, pos: Pos, symtab: SymbolTable) -> Type:
        t = symtab.lookup(name)
        if t is None:
            raise CheckError(f"variable '{name}' never introduced", pos)
        return t

    # ── Expressions ───────────────────────────────────────────

    def check_expr(self, expr: Expr, symtab: SymbolTable) -> Type:
        """Type-check an expression and return its type."""
        if isinstance(expr, Lit):
            return expr.value.ty()
        if isinstance(expr, Var):
            t = symtab.lookup(expr.name)
            if t is None:
                raise CheckError(f"unknown identifier '{expr.name}'", expr.pos)
            return t
        if isinstance(expr, BinaryOp):
            left = self.check_expr(expr.left, symtab)
            right = self.check_expr(expr.right, symtab)
            return self.check_binary_op_types(expr.op, left, right, expr.pos)
        if isinstance(expr, UnaryOp):
            return self.check_unary_op(expr, symtab)
        if isinstance(expr, Ternary):
            self._check_guard(expr.cond, "ternary", symtab)
            then_type = self.check_expr(expr.then_expr, symtab)
            else_type = self.check_expr(expr.else_expr, symtab)
            if then_type != else_type:
                raise CheckError(
                    f"ternary branches must have the same type, got"
                    f" {type_name(then_type)} and {type_name(else_type)}",
                    expr.pos,
                )
            return then_type
        if isinstance(expr, Input):
            pty = self.check_expr(expr.prompt, symtab)
            if pty != STR_T:
                raise CheckError(
                    f"input requires a str prompt, got {type_name(pty)}", expr.pos
                )
            return STR_T
        if isinstance(expr, IntConv):
            ety = self.check_expr(expr.expr, symtab)
            if ety not in (INT_T, STR_T, BOOL_T):
                raise CheckError(
                    f"cannot convert {type_name(ety)} to int", expr.pos
                )
            return INT_T
        if isinstance(expr, StrConv):
            self.check_expr(expr.expr, symtab)
            return STR_T
        if isinstance(expr, Call):
            return self.check_call(expr.name, expr.args, expr.pos, symtab)
        raise CheckError("unsupported expression", expr.pos)

    def check_binary_op_types(
        self, op: str, left: Type, right: Type, pos: Pos
    ) -> Type:
        if op in _LOGICAL_OPS:
            if left == BOOL_T and right == BOOL_T:
                return BOOL_T
        elif op in _COMPARE_OPS:
            if left == INT_T and right == INT_T:
                return BOOL_T
        elif op == "+":
            if left == INT_T and right == INT_T:
                return INT_T
            if left == STR_T and right == STR_T:
                return STR_T
        elif op == "*":
            if left == INT_T and right == INT_T:
                return INT_T
            if left == STR_T and right == INT_T:
                return STR_T
        elif op in _INT_OPS:
            if left == INT_T and right == INT_T:
                return INT_T
        else:
            raise CheckError(f"unknown binary operator: {op}", pos)
        raise CheckError(
            f"wrong operand types for {op}: {type_name(left)} and {type_name(right)}",
            pos,
        )

    def check_unary_op(self, expr: UnaryOp, symtab: SymbolTable) -> Type:
        operand = self.check_expr(expr.operand, symtab)
        if expr.op == "not":
            if operand != BOOL_T:
                raise CheckError(
                    f"not requires bool, got {type_name(operand)}", expr.pos
                )
            return BOOL_T
        if expr.op == "-":
            if operand != INT_T:
                raise CheckError(
                    f"negation requires int, got {type_name(operand)}", expr.pos
                )
            return INT_T
        raise CheckError(f"unknown unary operator: {expr.op}", expr.pos)

    def check_call(
        self, name: str, args: list[Expr], pos: Pos, symtab: SymbolTable
    ) -> Type:
        defn = self.defs.get(name)
        if defn is None:
            raise CheckError(f"unknown function or procedure '{name}'", pos)
        if len(args) != defn.arity():
            raise CheckError(
                f"'{name}' takes {defn.arity()} argument(s), got {len(args)}", pos
            )
        for i, (formal, arg) in enumerate(zip(defn.params, args)):
            aty = self.check_expr(arg, symtab)
            if aty != formal.typ:
                raise CheckError(
                    f"argument {i + 1} of '{name}' should be {type_name(formal.typ)}"
                    f" but got {type_name(aty)}",
                    arg.pos,
                )
        return defn.ret


# ============================================================
# PUBLIC API
# ============================================================


def check(program: Program) -> None:
    """Type-check a program. Raises CheckError on the first violation."""
    Checker(program.defs).check_program(program)
