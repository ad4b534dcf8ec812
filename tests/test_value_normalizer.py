"""
tests/test_value_normalizer.py

Pytest unit tests for CSV cell normalization.

Coverage
--------
- Empty / None cells
- Case-insensitive booleans
- Decimal, exponent, and prefixed integer literals
- Non-finite and Python-only numeric spellings staying strings
- Whitespace handling
"""

from __future__ import annotations

import pytest

from app.services.value_normalizer import MAX_SAFE_INTEGER, normalize_value, parse_finite_number


@pytest.mark.parametrize("cell", [None, ""])
def test_empty_cells_become_none(cell: str | None) -> None:
    assert normalize_value(cell) is None


@pytest.mark.parametrize(
    ("cell", "expected"),
    [("true", True), ("TRUE", True), ("False", False), (" false ", False), ("tRuE", True)],
)
def test_boolean_literals_ignore_case(cell: str, expected: bool) -> None:
    assert normalize_value(cell) is expected


@pytest.mark.parametrize(
    ("cell", "expected"),
    [
        ("30", 30),
        ("-7", -7),
        ("+5", 5),
        (" 42 ", 42),
        ("0", 0),
        ("3.14", 3.14),
        ("-1.5", -1.5),
        (".5", 0.5),
        ("5.", 5),
        ("1e3", 1000),
        ("2.5E-2", 0.025),
        ("0x1F", 31),
        ("0b101", 5),
        ("0o17", 15),
    ],
)
def test_finite_numbers_are_parsed(cell: str, expected: float) -> None:
    result = normalize_value(cell)
    assert result == expected
    assert not isinstance(result, bool)


def test_integer_literals_stay_integers() -> None:
    assert isinstance(normalize_value("30"), int)
    assert isinstance(normalize_value("30.5"), float)


@pytest.mark.parametrize(("cell", "expected"), [("1.0", 1), ("5.", 5), ("1e3", 1000), ("-2.000", -2), ("2.5e1", 25)])
def test_integral_decimals_become_integers(cell: str, expected: int) -> None:
    result = normalize_value(cell)
    assert result == expected
    assert type(result) is int


def test_integral_decimals_beyond_safe_range_stay_floats() -> None:
    assert type(normalize_value("1e20")) is float


def test_integers_beyond_safe_range_become_floats() -> None:
    result = normalize_value(str(MAX_SAFE_INTEGER + 2))
    assert isinstance(result, float)
    assert normalize_value(str(MAX_SAFE_INTEGER)) == MAX_SAFE_INTEGER


@pytest.mark.parametrize(
    "cell",
    [
        "Infinity",
        "-Infinity",
        "inf",
        "NaN",
        "nan",
        "1e999",
        "-1e999",
        "1_000",
        "0x",
        "1.2.3",
        "12abc",
        "--1",
        "٣٠",
        "３０",
        "1.５",
    ],
)
def test_non_finite_or_non_numeric_text_stays_string(cell: str) -> None:
    assert normalize_value(cell) == cell.strip()


def test_strings_are_trimmed() -> None:
    assert normalize_value("  Ann  ") == "Ann"
    assert normalize_value("oops") == "oops"


def test_whitespace_only_is_not_empty() -> None:
    assert normalize_value("   ") == ""


def test_huge_digit_strings_do_not_raise() -> None:
    assert normalize_value("9" * 5000) == "9" * 5000


def test_parse_finite_number_rejects_text() -> None:
    assert parse_finite_number("abc") is None
    assert parse_finite_number("") is None
