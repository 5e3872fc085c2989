"""Tests for values, types, and the literal form."""

import pytest

from slpy.values import (
    BOOL_T,
    FALSE,
    INT_T,
    NONE,
    NONE_T,
    STR_T,
    TRUE,
    VBool,
    VInt,
    VStr,
    display,
    escape,
    literal,
    parse_literal,
    type_from_name,
    type_name,
)


# ============================================================
# Types
# ============================================================


def test_value_types():
    assert VInt(3).ty() == INT_T
    assert VStr("x").ty() == STR_T
    assert VBool(True).ty() == BOOL_T
    assert NONE.ty() == NONE_T


def test_type_from_name():
    assert type_from_name("int") == INT_T
    assert type_from_name("None") == NONE_T
    assert type_name(type_from_name("bool")) == "bool"


def test_type_from_name_unknown():
    with pytest.raises(ValueError, match="unknown type 'float'"):
        type_from_name("float")


def test_types_compare_by_kind():
    assert INT_T != STR_T
    assert type_from_name("str") is STR_T


# ============================================================
# Display
# ============================================================


def test_display():
    assert display(VInt(-42)) == "-42"
    assert display(VStr("a b")) == "a b"
    assert display(TRUE) == "True"
    assert display(FALSE) == "False"
    assert display(NONE) == "None"


def test_display_string_is_unquoted():
    assert display(VStr('say "hi"\n')) == 'say "hi"\n'


# ============================================================
# Literal form
# ============================================================


def test_literal_quotes_strings():
    assert literal(VStr("abc")) == '"abc"'
    assert literal(VInt(7)) == "7"
    assert literal(NONE) == "None"


def test_literal_escapes():
    assert literal(VStr('a"b\\c\n\t\r')) == '"a\\"b\\\\c\\n\\t\\r"'


def test_escape_other_control_chars():
    assert escape("\x00\x1b\x7f") == "\\x00\\x1b\\x7f"


def test_parse_literal_scalars():
    assert parse_literal("None") is NONE
    assert parse_literal("True") == TRUE
    assert parse_literal("False") == FALSE
    assert parse_literal("123") == VInt(123)
    assert parse_literal("-5") == VInt(-5)


def test_parse_literal_string():
    assert parse_literal('"a\\tb\\x41"') == VStr("a\tbA")
    assert parse_literal('""') == VStr("")


def test_parse_literal_reads_back_literal():
    for v in [VStr('tab\there "q" back\\slash \x01'), VInt(-9), TRUE, NONE]:
        assert parse_literal(literal(v)) == v


@pytest.mark.parametrize(
    "text",
    [
        "",
        "-",
        "1.5",
        "abc",
        "true",
        '"unterminated',
        '"bad \\q"',
        '"a"b"',
        '"\\x4"',
        '"\\x+f"',
        '"\\x f"',
    ],
)
def test_parse_literal_rejects(text):
    with pytest.raises(ValueError):
        parse_literal(text)


def test_parse_literal_hex_escape_needs_two_hex_digits():
    assert parse_literal('"\\x7e"') == VStr("~")
    assert parse_literal('"\\xAB"') == VStr("\xab")
    with pytest.raises(ValueError, match="bad \\\\x escape"):
        parse_literal('"\\x-1"')
