"""
Convert an exact decimal numeral to the nearest IEEE-754 binary64 value.

THIS IS THE ROUNDING STEP THE SAFETY CHECK EXISTS TO OBSERVE.

We implement it ourselves rather than calling float() because:
  1. The predicate's verdict is only as good as this rounding, so the rule
     (round to nearest, ties to even) must be visible and testable here.
  2. Repeated float multiplication by 10 rounds at every step; that is the
     very error we are trying to detect, so it cannot be part of the detector.
  3. Python's big integers make the exact version short.

Algorithm:
    value = N / D exactly (N, D integers, D a power of ten or 1)

    Pick e so that q = floor(N / (D * 2^e)) has exactly 53 bits, or clamp
    e to -1074 for subnormals. The remainder r = N - q * D * 2^e decides
    the rounding: 2r > divisor rounds up, 2r == divisor rounds to even.
    A round-up that carries to 2^53 bumps the exponent.
"""

from __future__ import annotations

from .decimal_model import parse_exact_decimal
from .exceptions import ConversionError
from .models import (
    HIDDEN_BIT,
    MAX_EXPONENT,
    MIN_EXPONENT,
    Binary64Value,
    ExactDecimal,
)

# Canonical 0.d1d2... × 10^p with d1 != 0 lies in [10^(p-1), 10^p).
# p >= 310 is at least 1e309, beyond the largest finite double.
# p <= -324 is below 1e-324, under half the smallest subnormal (~2.47e-324).
_OVERFLOW_POINT_POSITION = 310
_UNDERFLOW_POINT_POSITION = -324

_PRECISION = 53

# Every double and every halfway point between two doubles has at most 767
# significant digits. Beyond this many, only "is the rest non-zero" matters.
_SIGNIFICANT_DIGITS = 800


def decimal_to_binary64(value: ExactDecimal) -> Binary64Value:
    """Round an ExactDecimal to the nearest binary64, ties to even.

    Args:
        value: Any ExactDecimal; digit strings of any length are exact.

    Returns:
        Binary64Value. The sign of zero is kept ("-0.0" gives -0.0).
        Magnitudes beyond the largest double give ±infinity; magnitudes
        below half the smallest subnormal give ±0.
    """
    negative = value.negative
    canonical = value.canonical()

    if not canonical.digits:
        return Binary64Value.zero(negative)
    if canonical.point_position >= _OVERFLOW_POINT_POSITION:
        return Binary64Value.infinity(negative)
    if canonical.point_position <= _UNDERFLOW_POINT_POSITION:
        return Binary64Value.zero(negative)

    digits = canonical.digits
    if len(digits) > _SIGNIFICANT_DIGITS:
        # canonical digits end in a non-zero digit, so the dropped tail is
        # non-zero; a trailing 1 keeps the value strictly above the cut
        digits = digits[:_SIGNIFICANT_DIGITS] + "1"
    coefficient = int(digits)
    exponent10 = canonical.point_position - len(digits)
    if exponent10 >= 0:
        numerator, denominator = coefficient * 10**exponent10, 1
    else:
        numerator, denominator = coefficient, 10**-exponent10

    significand, exponent = _round_quotient(numerator, denominator)
    return _pack(negative, significand, exponent)


def string_to_number(text: str) -> float:
    """Parse a strict decimal numeral into a float through decimal_to_binary64.

    Raises:
        LexicalError: If the text does not match the numeral grammar.
    """
    return decimal_to_binary64(parse_exact_decimal(text)).to_float()


# ─── Exact Division ──────────────────────────────────────────────────


def _divide(numerator: int, denominator: int, exponent: int) -> tuple[int, int, int]:
    """Divide numerator / denominator by 2^exponent.

    Returns:
        (quotient, remainder, divisor) with everything scaled to integers.
    """
    if exponent >= 0:
        divisor = denominator << exponent
        quotient, remainder = divmod(numerator, divisor)
    else:
        divisor = denominator
        quotient, remainder = divmod(numerator << -exponent, divisor)
    return quotient, remainder, divisor


def _round_quotient(numerator: int, denominator: int) -> tuple[int, int]:
    """Nearest significand × 2^exponent to numerator / denominator."""
    # N / D lies in (2^(nb - db - 1), 2^(nb - db + 1)), so this exponent puts
    # the quotient in [2^52, 2^54); one correction step is always enough.
    exponent = numerator.bit_length() - denominator.bit_length() - _PRECISION
    exponent = max(exponent, MIN_EXPONENT)
    quotient, remainder, divisor = _divide(numerator, denominator, exponent)
    if quotient >= 1 << _PRECISION:
        exponent += 1
        quotient, remainder, divisor = _divide(numerator, denominator, exponent)

    twice_remainder = 2 * remainder
    if twice_remainder > divisor or (twice_remainder == divisor and quotient & 1):
        quotient += 1
        if quotient == 1 << _PRECISION:
            quotient >>= 1
            exponent += 1

    return quotient, exponent


def _pack(negative: bool, significand: int, exponent: int) -> Binary64Value:
    if significand == 0:
        return Binary64Value.zero(negative)
    if exponent > MAX_EXPONENT:
        return Binary64Value.infinity(negative)
    if significand < HIDDEN_BIT:
        if exponent != MIN_EXPONENT:
            raise ConversionError(
                "Short significand outside the subnormal range",
                {"significand": significand, "exponent": exponent},
            )
        return Binary64Value(negative=negative, biased_exponent=0, fraction=significand)
    return Binary64Value(
        negative=negative,
        biased_exponent=exponent - MIN_EXPONENT + 1,
        fraction=significand - HIDDEN_BIT,
    )
