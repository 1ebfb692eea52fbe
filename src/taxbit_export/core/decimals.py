from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from ..errors import FormatError, InvariantViolation

# ASCII digits only: no "1_000", no NaN/Infinity, no non-Latin numerals
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parse_decimal(column: str, value: str) -> Decimal | None:
    """
    "" -> None, "3e-7" -> Decimal("3E-7"). No float on the way.
    """
    s = (value or "").strip()
    if not s:
        return None
    if not _DECIMAL_RE.fullmatch(s):
        raise FormatError(column, value, "not a decimal number")
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise FormatError(column, value, "not a decimal number") from e


def decimal_to_string_or_empty(value: Decimal | None) -> str:
    if value is None:
        return ""
    return format(value, "f")


def compare_optional(column: str, a: Decimal | None, b: Decimal | None) -> int:
    """
    Three-way compare of two optional decimals.

    None vs None is equal. None vs a value has no order: InvariantViolation.
    """
    if a is None and b is None:
        return 0
    if a is None or b is None:
        raise InvariantViolation(
            f"{column}: cannot order an absent value against a present one ({a!r} vs {b!r})"
        )
    if a < b:
        return -1
    if a > b:
        return 1
    return 0
