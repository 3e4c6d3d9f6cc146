"""Helpers for comparing sender phone numbers.

Israeli numbers arrive as local ("054..."), international ("+972 54...") or
bare country-code ("97254...") strings depending on the carrier and on how
the user typed them, so comparison goes through a canonical form.
"""

from __future__ import annotations

import re

COUNTRY_CODE = "972"

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize(phone: str) -> str:
    """Return the canonical digits-only form of a phone number.

    - "+972-54-219-9006" -> "542199006"
    - "0542199006"       -> "542199006"
    - "972542199006"     -> "542199006"
    """

    digits = _NON_DIGITS.sub("", phone)
    if digits.startswith(COUNTRY_CODE) and len(digits) >= 12:
        return digits[len(COUNTRY_CODE):]
    if digits.startswith("0") and len(digits) == 10:
        return digits[1:]
    return digits


def are_equal(first: str, second: str) -> bool:
    """Return True when both numbers normalize to the same non-empty value."""

    normalized = normalize(first)
    return bool(normalized) and normalized == normalize(second)
