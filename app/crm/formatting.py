from __future__ import annotations

from typing import Any

BLANK = " "


def capitalize(value: Any) -> str:
    """
    Title-case a name word by word: "john michael" -> "John Michael".

    Each space-separated piece gets its first character upper-cased and the rest
    lower-cased, so "O'BRIEN" becomes "O'brien" (no locale or apostrophe rules).
    Non-string input yields "".
    """
    if not isinstance(value, str):
        return ""
    words = value.lower().split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words).strip()


def upper(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.upper()


def lower(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.lower()


def passthrough(value: Any) -> Any:
    return value


def display_value(value: Any) -> Any:
    """Null fields render as a single space so table cells keep their height."""
    if value is None:
        return BLANK
    return value


def date_part(value: Any) -> Any:
    """Drop the time-of-day from an ISO timestamp ("2024-05-01T10:00:00Z" -> "2024-05-01")."""
    if not isinstance(value, str):
        return value
    return value.split("T")[0]


def option_code(value: Any) -> Any:
    """Select inputs post option-set codes as strings; the CRM wants the integer."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


TRANSFORMS = {
    "capitalize": capitalize,
    "upper": upper,
    "lower": lower,
    "option": option_code,
    "none": passthrough,
}
