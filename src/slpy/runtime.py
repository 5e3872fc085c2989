"""slpy runtime — evaluate a checked program by walking its AST.

`run` assumes the program already passed `check`; the runtime still faults
on anything it cannot evaluate rather than trusting the tree blindly.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Mapping, TextIO

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
from .env import Frame
from .errors import RuntimeFault
from .values import NONE, VBool, VInt, VStr, Value

logger = logging.getLogger(__name__)

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


# ============================================================
# Runtime I/O
# ============================================================


class _TokenReader:
    """Reads whitespace-delimited tokens from a text stream."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def read_token(self) -> str:
        ch = self._stream.read(1)
        while ch != "" and ch.isspace():
            ch = self._stream.read(1)
        chars: list[str] = []
        while ch != "" and not ch.isspace():
            chars.append(ch)
            ch = self._stream.read(1)
        return "".join(chars)


# ============================================================
# Operators
# ============================================================


def _binary(op: str, left: Value, right: Value, pos: Pos) -> Value:
    if isinstance(left, VInt) and isinstance(right, VInt):
        a = left.value
        b = right.value
        if op == "+":
            return VInt(a + b)
        if op == "-":
            return VInt(a - b)
        if op == "*":
            return VInt(a * b)
        if op in ("//", "%"):
            if b == 0:
                raise RuntimeFault("division by zero", pos)
            return VInt(a // b if op == "//" else a % b)
        if op == "<":
            return VBool(a < b)
        if op == ">":
            return VBool(a > b)
        if op == "<=":
            return VBool(a <= b)
        if op == ">=":
            return VBool(a >= b)
        if op == "==":
            return VBool(a == b)
    elif isinstance(left, VStr) and isinstance(right, VStr):
        if op == "+":
            return VStr(left.value + right.value)
    elif isinstance(left, VStr) and isinstance(right, VInt):
        if op == "*":
            return VStr(left.value * right.value)
    elif isinstance(left, VBool) and isinstance(right, VBool):
        if op == "and":
            return VBool(left.value and right.value)
        if op == "or":
            return VBool(left.value or right.value)
    raise RuntimeFault(f"wrong operand types for {op}", pos)


def _to_int(v: Value, pos: Pos) -> VInt:
    if isinstance(v, VInt):
        return v
    if isinstance(v, VBool):
        return VInt(1 if v.value else 0)
    if isinstance(v, VStr):
        if _INT_LITERAL.fullmatch(v.value) is None:
            raise RuntimeFault(f"{v.literal()} cannot be converted to an int", pos)
        try:
            return VInt(int(v.value))
        except ValueError as e:
            raise RuntimeFault(
                f"string of {len(v.value)} characters is too long to convert to an int",
                pos,
            ) from e
    raise RuntimeFault(f"cannot convert {v.display()} to an int", pos)


def _display(v: Value, pos: Pos) -> str:
    # int to str conversion is capped by sys.get_int_max_str_digits().
    try:
        return v.display()
    except ValueError as e:
        raise RuntimeFault("int is too large to convert to a string", pos) from e


# ============================================================
# Runtime
# ============================================================


class Runtime:
    stdout: TextIO
    depth: int

    def __init__(self, program: Program, *, stdin: TextIO, stdout: TextIO):
        self.program = program
        self.defs: Mapping[str, Defn] = program.defs
        self.stdout = stdout
        self._input = _TokenReader(stdin)
        self.depth = 0

    def run_main(self) -> None:
        logger.debug("running main script")
        try:
            self.exec_block(self.program.main, Frame())
        except RecursionError as e:
            raise RuntimeFault("call stack exhausted") from e
        logger.debug("main script finished")

    # ---- Calls -------------------------------------------------------------

    def call(self, name: str, args: list[Expr], pos: Pos, frame: Frame) -> Value:
        defn = self.defs.get(name)
        if defn is None:
            raise RuntimeFault(f"unknown function or procedure '{name}'", pos)
        if len(args) != defn.arity():
            raise RuntimeFault(
                f"'{name}' takes {defn.arity()} argument(s), got {len(args)}", pos
            )
        # Arguments are evaluated in the caller's frame; the callee sees
        # only its parameters.
        bindings: dict[str, Value] = {}
        for formal, arg in zip(defn.params, args):
            bindings[formal.name] = self.eval_expr(arg, frame)
        self.depth += 1
        logger.debug("call %s (depth %d)", name, self.depth)
        try:
            result = self.exec_block(defn.body, Frame(bindings))
        finally:
            self.depth -= 1
        if result is None:
            return NONE
        return result

    # ---- Statements --------------------------------------------------------

    def exec_block(self, block: Block, frame: Frame) -> Value | None:
        """Run statements in order; stop at the first one that returns."""
        with frame.scope():
            for st in block.stmts:
                result = self.exec_stmt(st, frame)
                if result is not None:
                    return result
        return None

    def exec_stmt(self, st: Stmt, frame: Frame) -> Value | None:
        if isinstance(st, IntroStmt):
            frame.bind(st.name, self.eval_expr(st.value, frame))
            return None

        if isinstance(st, AssignStmt):
            frame.set(st.name, self.eval_expr(st.value, frame), st.pos)
            return None

        if isinstance(st, OpAssignStmt):
            cur = frame.get(st.name, st.pos)
            rhs = self.eval_expr(st.value, frame)
            frame.set(st.name, _binary(st.op[:-1], cur, rhs, st.pos), st.pos)
            return None

        if isinstance(st, PrintStmt):
            parts = [_display(self.eval_expr(arg, frame), arg.pos) for arg in st.args]
            self.stdout.write(" ".join(parts) + "\n")
            return None

        if isinstance(st, PassStmt):
            return None

        if isinstance(st, CallStmt):
            self.call(st.name, st.args, st.pos, frame)
            return None

        if isinstance(st, ReturnStmt):
            if st.value is None:
                return NONE
            return self.eval_expr(st.value, frame)

        if isinstance(st, IfStmt):
            for arm in st.arms:
                if self._truth(arm.cond, frame):
                    return self.exec_block(arm.body, frame)
            if st.else_body is not None:
                return self.exec_block(st.else_body, frame)
            return None

        if isinstance(st, WhileStmt):
            while self._truth(st.cond, frame):
                result = self.exec_block(st.body, frame)
                if result is not None:
                    return result
            return None

        if isinstance(st, RepeatStmt):
            while True:
                result = self.exec_block(st.body, frame)
                if result is not None:
                    return result
                if self._truth(st.cond, frame):
                    return None

        raise RuntimeFault("unsupported statement", st.pos)

    def _truth(self, cond: Expr, frame: Frame) -> bool:
        v = self.eval_expr(cond, frame)
        if not isinstance(v, VBool):
            raise RuntimeFault("condition is not a bool", cond.pos)
        return v.value

    # ---- Expressions -------------------------------------------------------

    def eval_expr(self, expr: Expr, frame: Frame) -> Value:
        if isinstance(expr, Lit):
            return expr.value

        if isinstance(expr, Var):
            return frame.get(expr.name, expr.pos)

        if isinstance(expr, BinaryOp):
            # Both operands are always evaluated, left to right.
            left = self.eval_expr(expr.left, frame)
            right = self.eval_expr(expr.right, frame)
            return _binary(expr.op, left, right, expr.pos)

        if isinstance(expr, UnaryOp):
            operand = self.eval_expr(expr.operand, frame)
            if expr.op == "not" and isinstance(operand, VBool):
                return VBool(not operand.value)
            if expr.op == "-" and isinstance(operand, VInt):
                return VInt(-operand.value)
            raise RuntimeFault(f"wrong operand type for {expr.op}", expr.pos)

        if isinstance(expr, Ternary):
            if self._truth(expr.cond, frame):
                return self.eval_expr(expr.then_expr, frame)
            return self.eval_expr(expr.else_expr, frame)

        if isinstance(expr, Input):
            prompt = self.eval_expr(expr.prompt, frame)
            if not isinstance(prompt, VStr):
                raise RuntimeFault("prompt is not a string", expr.pos)
            self.stdout.write(prompt.value)
            self.stdout.flush()
            return VStr(self._input.read_token())

        if isinstance(expr, IntConv):
            return _to_int(self.eval_expr(expr.expr, frame), expr.pos)

        if isinstance(expr, StrConv):
            return VStr(_display(self.eval_expr(expr.expr, frame), expr.pos))

        if isinstance(expr, Call):
            return self.call(expr.name, expr.args, expr.pos, frame)

        raise RuntimeFault("unsupported expression", expr.pos)


# ============================================================
# PUBLIC API
# ============================================================


def run(
    program: Program,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Run a checked program. Raises RuntimeFault if evaluation fails."""
    rt = Runtime(
        program,
        stdin=stdin if stdin is not None else sys.stdin,
        stdout=stdout if stdout is not None else sys.stdout,
    )
    rt.run_main()
