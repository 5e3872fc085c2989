"""slpy diagnostics — static and runtime errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import Pos


class SlpyError(Exception):
    """Base error for slpy checking/evaluation."""

    def __init__(self, msg: str, pos: Pos | None = None):
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} at line {pos.line} col {pos.col}")
        self.msg = msg
        self.pos = pos


class CheckError(SlpyError):
    """Static error: the program is rejected before it runs."""


class RuntimeFault(SlpyError):
    """Runtime fault (division by zero, bad conversion, etc.)."""
