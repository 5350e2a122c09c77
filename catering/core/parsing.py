"""
Tolerant parsing — the storage layer keeps every cell as text, the way a
spreadsheet does. Malformed numbers must never block a quote, so they
degrade to zero instead of raising.
"""
import math


def to_number(value) -> float:
    """Parse a cell into a float. None, blanks and garbage become 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        s = str(value or "").strip().replace("$", "").replace(",", "").replace("%", "")
        if not s:
            return 0.0
        try:
            num = float(s)
        except ValueError:
            return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def to_price(value) -> float:
    """Like to_number(), but prices are never negative."""
    return max(0.0, to_number(value))


def to_bool(value) -> bool:
    """Booleans round-trip through storage as "TRUE"/"FALSE"."""
    if value is True:
        return True
    return str(value or "").strip().upper() == "TRUE"


def bool_cell(value) -> str:
    return "TRUE" if to_bool(value) else "FALSE"


def money(value) -> str:
    """$1,234.50"""
    return f"${to_number(value):,.2f}"
