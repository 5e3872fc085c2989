"""slpy values and types — the four ground values and their static types."""

from __future__ import annotations

import string
from dataclasses import dataclass


# ============================================================
# Types
# ============================================================

TY_INT: str = "int"
TY_STR: str = "str"
TY_BOOL: str = "bool"
TY_NONE: str = "None"


@dataclass(frozen=True)
class Type:
    """Static type. Two types are equal iff they have the same kind."""

    kind: str

    def display(self) -> str:
        return self.kind


INT_T: Type = Type(kind=TY_INT)
STR_T: Type = Type(kind=TY_STR)
BOOL_T: Type = Type(kind=TY_BOOL)
NONE_T: Type = Type(kind=TY_NONE)

_TYPE_MAP: dict[str, Type] = {
    "int": INT_T,
    "str": STR_T,
    "bool": BOOL_T,
    "None": NONE_T,
}


def type_from_name(name: str) -> Type:
    """Resolve a type annotation name (int, str, bool, None)."""
    result = _TYPE_MAP.get(name)
    if result is None:
        raise ValueError(f"unknown type '{name}'")
    return result


def type_name(t: Type) -> str:
    """Human-readable name for a type, for error messages."""
    return t.kind


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value with a concrete type tag."""

    def ty(self) -> Type:
        raise NotImplementedError

    def display(self) -> str:
        """The form `print` and `str()` produce."""
        raise NotImplementedError

    def literal(self) -> str:
        """Source-code form of the value."""
        return self.display()


@dataclass(frozen=True)
class VInt(Value):
    value: int

    def ty(self) -> Type:
        return INT_T

    def display(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VStr(Value):
    value: str

    def ty(self) -> Type:
        return STR_T

    def display(self) -> str:
        return self.value

    def literal(self) -> str:
        return '"' + escape(self.value) + '"'


@dataclass(frozen=True)
class VBool(Value):
    value: bool

    def ty(self) -> Type:
        return BOOL_T

    def display(self) -> str:
        return "True" if self.value else "False"


@dataclass(frozen=True)
class VNone(Value):
    def ty(self) -> Type:
        return NONE_T

    def display(self) -> str:
        return "None"


NONE: VNone = VNone()
TRUE: VBool = VBool(True)
FALSE: VBool = VBool(False)


def display(v: Value) -> str:
    return v.display()


def literal(v: Value) -> str:
    return v.literal()


# ============================================================
# Literal form
# ============================================================

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}

_UNESCAPES: dict[str, str] = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


def escape(s: str) -> str:
    """Escape a string's contents for its quoted literal form."""
    out: list[str] = []
    for ch in s:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return "".join(out)


def _unescape(body: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '"':
            raise ValueError("unescaped quote in string literal")
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(body):
            raise ValueError("dangling escape in string literal")
        code = body[i + 1]
        if code in _UNESCAPES:
            out.append(_UNESCAPES[code])
            i += 2
        elif code == "x":
            digits = body[i + 2 : i + 4]
            if len(digits) != 2:
                raise ValueError("truncated \\x escape in string literal")
            if any(d not in string.hexdigits for d in digits):
                raise ValueError(f"bad \\x escape '\\x{digits}' in string literal")
            out.append(chr(int(digits, 16)))
            i += 4
        else:
            raise ValueError(f"unknown escape '\\{code}' in string literal")
    return "".join(out)


def parse_literal(text: str) -> Value:
    """Read one value written in its literal form."""
    if text == "None":
        return NONE
    if text == "True":
        return TRUE
    if text == "False":
        return FALSE
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return VStr(_unescape(text[1:-1]))
    digits = text[1:] if text[:1] == "-" else text
    if digits != "" and digits.isascii() and digits.isdigit():
        return VInt(int(text))
    raise ValueError(f"not a literal: {text!r}")
