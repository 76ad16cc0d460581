"""
Binary64 → shortest round-trip decimal, with ECMAScript Number::toString output.

A double v = m × 2^e owns a rounding interval: every real number inside it
parses back to v. Its half-width is 2^(e-1) on both sides, except when m is
a power of two (and v is not the smallest normal), where the gap to the
predecessor is half as wide. The endpoints belong to the interval only when
m is even, because ties round to the even significand.

We scan precisions 1, 2, ... 17. At precision p the only candidates worth
checking are the two p-digit decimals bracketing v; any other p-digit value
is further away and, if inside the interval, so is one of these two. The
first precision with a candidate inside the interval is the shortest. If
both bracketing candidates are inside, the closer one wins, and the even one
on an exact tie.

This matches the Burger & Dybvig free-format output (and Ryu), traded for
simpler exact arithmetic: at most 17 big-integer divisions per value.
"""

from __future__ import annotations

from .exceptions import ConversionError, NonFiniteValueError
from .models import Binary64Value, ExactDecimal

# 17 significant digits always identify a double uniquely
_MAX_DIGITS = 17

# ECMAScript switches to exponential notation outside -6 < n <= 21
_MAX_POSITIONAL_POINT = 21
_MIN_POSITIONAL_POINT = -5


def shortest_decimal(value: Binary64Value | float) -> ExactDecimal:
    """The shortest ExactDecimal that converts back to exactly `value`.

    Args:
        value: A finite binary64 (a float is accepted and decomposed).

    Returns:
        Canonical ExactDecimal; both zeros give ExactDecimal() ("0").

    Raises:
        NonFiniteValueError: For NaN and the infinities.
    """
    if not isinstance(value, Binary64Value):
        value = Binary64Value.from_float(value)
    if not value.is_finite:
        raise NonFiniteValueError(
            "NaN and Infinity have no decimal expansion",
            {"bits": f"0x{value.bits:016x}"},
        )
    if value.is_zero:
        return ExactDecimal()

    significand = value.significand
    lower_is_closer = value.fraction == 0 and value.biased_exponent > 1

    # v and its interval, in units of 2^(exponent - 2)
    center = 4 * significand
    low = center - (1 if lower_is_closer else 2)
    high = center + 2
    inclusive = significand % 2 == 0

    shift = value.exponent - 2
    if shift >= 0:
        center, low, high = center << shift, low << shift, high << shift
        denominator = 1
    else:
        denominator = 1 << -shift

    decade = _floor_log10(center, denominator)
    for precision in range(1, _MAX_DIGITS + 1):
        picked = _closest_in_interval(
            center, low, high, denominator, decade - precision + 1, inclusive
        )
        if picked is not None:
            digits, exponent10 = picked
            if value.negative:
                digits = -digits
            return ExactDecimal.from_coefficient(digits, exponent10).canonical()

    raise ConversionError(
        f"No round-tripping decimal within {_MAX_DIGITS} digits",
        {"bits": f"0x{value.bits:016x}"},
    )


def number_to_string(value: Binary64Value | float) -> str:
    """Render a double exactly as ECMAScript's Number::toString(x) does.

    Examples:
        0.1     -> "0.1"
        1e21    -> "1e+21"
        1e-7    -> "1e-7"
        -0.0    -> "0"
        5e-324  -> "5e-324"
    """
    if not isinstance(value, Binary64Value):
        value = Binary64Value.from_float(value)
    if value.is_nan:
        return "NaN"
    if value.is_infinite:
        return "-Infinity" if value.negative else "Infinity"
    if value.is_zero:
        return "0"

    decimal = shortest_decimal(value)
    digits, point = decimal.digits, decimal.point_position
    count = len(digits)
    sign = "-" if decimal.negative else ""

    if count <= point <= _MAX_POSITIONAL_POINT:
        return sign + digits + "0" * (point - count)
    if 0 < point <= _MAX_POSITIONAL_POINT:
        return sign + digits[:point] + "." + digits[point:]
    if _MIN_POSITIONAL_POINT <= point <= 0:
        return sign + "0." + "0" * -point + digits

    exponent = point - 1
    mantissa = digits if count == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


# ─── Exact Helpers ───────────────────────────────────────────────────


def _compare_power_of_ten(numerator: int, denominator: int, power: int) -> int:
    """Sign of numerator / denominator - 10^power."""
    if power >= 0:
        left, right = numerator, denominator * 10**power
    else:
        left, right = numerator * 10**-power, denominator
    return (left > right) - (left < right)


def _floor_log10(numerator: int, denominator: int) -> int:
    """floor(log10(numerator / denominator)) for a positive ratio."""
    # floor(x * log10(2)) for |x| <= 2620, off by at most one from the answer
    estimate = ((numerator.bit_length() - denominator.bit_length()) * 315653) >> 20
    while _compare_power_of_ten(numerator, denominator, estimate) < 0:
        estimate -= 1
    while _compare_power_of_ten(numerator, denominator, estimate + 1) >= 0:
        estimate += 1
    return estimate


def _closest_in_interval(
    center: int,
    low: int,
    high: int,
    denominator: int,
    quantum_exponent: int,
    inclusive: bool,
) -> tuple[int, int] | None:
    """Best multiple of 10^quantum_exponent inside (low, high).

    Returns:
        (digits, quantum_exponent) meaning digits × 10^quantum_exponent,
        or None if neither bracketing multiple lies in the interval.
    """
    if quantum_exponent >= 0:
        divisor = denominator * 10**quantum_exponent
        scale = 1
    else:
        divisor = denominator
        scale = 10**-quantum_exponent

    below, remainder = divmod(center * scale, divisor)
    if remainder == 0:
        return below, quantum_exponent

    low, high = low * scale, high * scale

    def inside(digits: int) -> bool:
        point = digits * divisor
        if inclusive:
            return low <= point <= high
        return low < point < high

    below_fits = inside(below)
    above_fits = inside(below + 1)

    if below_fits and above_fits:
        twice_remainder = 2 * remainder
        if twice_remainder < divisor or (twice_remainder == divisor and below % 2 == 0):
            return below, quantum_exponent
        return below + 1, quantum_exponent
    if below_fits:
        return below, quantum_exponent
    if above_fits:
        return below + 1, quantum_exponent
    return None
