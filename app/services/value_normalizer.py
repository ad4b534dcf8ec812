"""
app/services/value_normalizer.py

Conversion of raw CSV cells into typed scalars.

Checks run in a fixed order: empty -> boolean -> numeric -> string. Only the
plain numeric grammar below counts as a number, so Python-only spellings
such as ``"1_000"``, ``"nan"`` or ``"Infinity"`` stay strings.
"""

from __future__ import annotations

import math
import re

from app.domain.bulk_upload import NormalizedValue

MAX_SAFE_INTEGER = 2**53 - 1

_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_PREFIXED_INTEGER_PATTERN = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")

_BOOLEAN_LITERALS = {"true": True, "false": False}


def normalize_value(cell: str | None) -> NormalizedValue:
    """
    Normalize one raw cell.

    ``None`` and ``""`` become ``None``. Whitespace-only text is not empty;
    it trims to ``""`` and is returned as such.
    """

    if cell is None or cell == "":
        return None

    trimmed = cell.strip()

    boolean = _BOOLEAN_LITERALS.get(trimmed.lower())
    if boolean is not None:
        return boolean

    number = parse_finite_number(trimmed)
    if number is not None:
        return number

    return trimmed


def parse_finite_number(text: str) -> int | float | None:
    """
    Parse ``text`` as a finite number, or return None.

    Integral values within the 53-bit safe range come back as ``int``, so
    ``"1.0"`` and ``"1e3"`` give ``1`` and ``1000``; every other numeric value
    is a ``float``. Only ASCII digits count.
    """

    if _PREFIXED_INTEGER_PATTERN.fullmatch(text):
        return _coerce_integer(int(text, 0))

    if not _DECIMAL_PATTERN.fullmatch(text):
        return None

    if "." not in text and "e" not in text.lower():
        try:
            return _coerce_integer(int(text))
        except ValueError:
            # Past the interpreter's int digit limit; the float path decides.
            pass

    value = float(text)
    if not math.isfinite(value):
        return None
    if value.is_integer() and abs(value) <= MAX_SAFE_INTEGER:
        return int(value)
    return value


def _coerce_integer(value: int) -> int | float | None:
    if abs(value) <= MAX_SAFE_INTEGER:
        return value
    try:
        as_float = float(value)
    except OverflowError:
        return None
    return as_float if math.isfinite(as_float) else None
