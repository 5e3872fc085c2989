"""slpy checker and interpreter — public API."""

from __future__ import annotations

import logging
from typing import TextIO

from .ast import Program, make_program
from .check import check
from .errors import CheckError, RuntimeFault, SlpyError
from .runtime import run
from .values import display, literal, parse_literal

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CheckError",
    "Program",
    "RuntimeFault",
    "SlpyError",
    "check",
    "display",
    "execute",
    "literal",
    "make_program",
    "parse_literal",
    "run",
]


def execute(
    program: Program,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Check a program and, if it passes, run it."""
    check(program)
    run(program, stdin=stdin, stdout=stdout)
