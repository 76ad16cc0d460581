"""
Extraction of ExactDecimal values from text, and the safe-integer bound.

Both operations are structural: they look at digit strings, never at floats.
"""

from __future__ import annotations

from .exceptions import LexicalError
from .lexical import diagnose
from .models import ExactDecimal

MAX_SAFE_INTEGER = 2**53 - 1  # 9007199254740991

_MAX_SAFE_INTEGER_DIGITS = str(MAX_SAFE_INTEGER)


def parse_exact_decimal(text: str) -> ExactDecimal:
    """Split a lexically valid numeral into sign, digits and point position.

    Args:
        text: e.g. "-1234.5678"

    Returns:
        ExactDecimal(negative=True, digits="12345678", point_position=4)

    Raises:
        LexicalError: If the text does not match the numeral grammar.
    """
    problem = diagnose(text)
    if problem is not None:
        code, message, details = problem
        raise LexicalError(message, {"reason": code, **details})

    negative = text.startswith("-")
    body = text[1:] if negative else text
    integer_part, _, fraction_part = body.partition(".")

    return ExactDecimal(
        negative=negative,
        digits=integer_part + fraction_part,
        point_position=len(integer_part),
    )


def exceeds_safe_integer(value: ExactDecimal) -> bool:
    """True iff |integer part of value| > 2^53 - 1.

    Digit count decides first; only equal-length integer parts are compared
    digit by digit. The fractional part never matters, so 9007199254740991.9
    is within the bound and 9007199254740992 is not.
    """
    canonical = value.canonical()
    # canonical digits start with a non-zero digit, so the integer part has
    # exactly point_position digits
    length = max(canonical.point_position, 0)
    if length != len(_MAX_SAFE_INTEGER_DIGITS):
        return length > len(_MAX_SAFE_INTEGER_DIGITS)
    return canonical.integer_digits() > _MAX_SAFE_INTEGER_DIGITS
