"""
Field value classification.

A field is numeric only if it matches the strict grammar in rules.NUMBER_PATTERN:
an optional leading minus, no leading zeros (other than a lone 0), no
surrounding whitespace, no exponent, no thousands separators and no bare
leading or trailing decimal point. Everything else stays a string, verbatim.
"""

from __future__ import annotations

from typing import Union

from .rules import NUMBER_PATTERN

Value = Union[str, int, float]


def is_numeric_strict(text: str) -> bool:
    return NUMBER_PATTERN.fullmatch(text) is not None


def classify_value(text: str, parse_numbers: bool = True) -> Value:
    if not parse_numbers or not is_numeric_strict(text):
        return text
    if "." in text:
        return float(text)
    return int(text)
