"""
Strict lexical grammar for decimal numerals.

    numeral  := "-"? integer ("." fraction)?
    integer  := "0" | [1-9] [0-9]*
    fraction := [0-9]+

Only ASCII digits count. No whitespace, no "+", no exponent, no separators,
no bare decimal point on either side. Nothing is trimmed or normalized here:
a rejected string stays rejected.
"""

from __future__ import annotations

import re

# [0-9] rather than \d: \d would accept Arabic-Indic and other Unicode digits
NUMERAL_PATTERN = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?")

_NUMERAL_ALPHABET = frozenset("0123456789.-")


def is_lexically_valid(text: str) -> bool:
    """True iff the whole of `text` matches the numeral grammar."""
    return NUMERAL_PATTERN.fullmatch(text) is not None


def diagnose(text: str) -> tuple[str, str, dict] | None:
    """Explain why `text` fails the grammar.

    Returns:
        None if the text is valid, otherwise (code, message, details) for the
        first violation found. Checks run from the coarsest (empty input,
        foreign characters) to the finest (leading zero).
    """
    if is_lexically_valid(text):
        return None

    if not text:
        return "EMPTY_INPUT", "Input is an empty string.", {}

    for position, char in enumerate(text):
        if char not in _NUMERAL_ALPHABET:
            return (
                "ILLEGAL_CHARACTER",
                f"Character {char!r} at position {position} is not an ASCII "
                f"digit, '.' or a leading '-'.",
                {"character": char, "position": position},
            )

    if text.count("-") > 1 or text.rfind("-") > 0:
        return (
            "MISPLACED_SIGN",
            "Only a single '-' is allowed, and only as the first character.",
            {"position": text.rfind("-")},
        )

    if text.count(".") > 1:
        return (
            "MULTIPLE_DECIMAL_POINTS",
            f"Found {text.count('.')} decimal points; at most one is allowed.",
            {"count": text.count(".")},
        )

    body = text[1:] if text.startswith("-") else text
    if not body:
        return "MISSING_DIGITS", "A sign must be followed by digits.", {}

    if body.startswith(".") or body.endswith("."):
        return (
            "BARE_DECIMAL_POINT",
            "A decimal point needs at least one digit on both sides.",
            {"position": text.index(".")},
        )

    integer_part = body.split(".", 1)[0]
    if len(integer_part) > 1 and integer_part.startswith("0"):
        return (
            "LEADING_ZERO",
            f"Integer part {integer_part!r} has a leading zero.",
            {"integer_part": integer_part},
        )

    return "MALFORMED_NUMBER", f"{text!r} is not a decimal numeral.", {}
