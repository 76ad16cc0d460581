"""
Pydantic models for numeric values — exact types at every stage boundary.

ExactDecimal carries a decimal numeral with no rounding at all. Binary64Value
carries an IEEE-754 double as its three raw fields, so the conversion code
never has to trust a float's own string form. Both are frozen: a value is
built once and compared, never mutated.
"""

from __future__ import annotations

import struct
from enum import Enum
from fractions import Fraction
from typing import Optional

from pydantic import BaseModel, Field

# ─── IEEE-754 binary64 Layout ────────────────────────────────────────

SIGNIFICAND_BITS = 52
EXPONENT_BIAS = 1023
MAX_BIASED_EXPONENT = 2047
HIDDEN_BIT = 1 << SIGNIFICAND_BITS

# value = significand * 2**exponent, with significand an integer < 2**53
MIN_EXPONENT = 1 - EXPONENT_BIAS - SIGNIFICAND_BITS  # -1074
MAX_EXPONENT = MAX_BIASED_EXPONENT - 1 - EXPONENT_BIAS - SIGNIFICAND_BITS  # 971


# ─── Severity Levels ────────────────────────────────────────────────


class Severity(str, Enum):
    """Severity of a validation finding."""

    ERROR = "ERROR"  # The input is not a safe numeric string
    INFO = "INFO"  # Informational observation, verdict unaffected


# ─── Validation Finding ─────────────────────────────────────────────


class ValidationFinding(BaseModel):
    """A single validation finding with severity, machine-readable code, and details."""

    severity: Severity
    code: str  # Machine-readable, e.g. "LEADING_ZERO"
    stage: str  # Which check produced it: "type", "lexical", "magnitude", ...
    message: str  # Human-readable explanation
    details: dict = Field(default_factory=dict)


# ─── Exact Decimal ──────────────────────────────────────────────────


class ExactDecimal(BaseModel):
    """A decimal numeral held exactly: ±0.d1d2...dn × 10^point_position.

    "1234.5678" is (False, "12345678", 4) and "0.001" is (False, "0001", 1).
    Leading and trailing zeros are allowed; canonical() removes them without
    changing the value.
    """

    model_config = {"frozen": True}

    negative: bool = False
    digits: str = Field(default="", pattern=r"^[0-9]*$")
    point_position: int = 0

    @classmethod
    def from_coefficient(cls, coefficient: int, exponent: int) -> ExactDecimal:
        """Build coefficient × 10^exponent."""
        digits = str(abs(coefficient))
        return cls(
            negative=coefficient < 0,
            digits=digits,
            point_position=len(digits) + exponent,
        )

    @property
    def is_zero(self) -> bool:
        return self.digits.strip("0") == ""

    def canonical(self) -> ExactDecimal:
        """Strip leading/trailing zeros. Zero becomes (False, "", 0), so -0 == 0."""
        stripped = self.digits.lstrip("0")
        point = self.point_position - (len(self.digits) - len(stripped))
        stripped = stripped.rstrip("0")
        if not stripped:
            return ExactDecimal()
        return ExactDecimal(
            negative=self.negative, digits=stripped, point_position=point
        )

    def same_value(self, other: ExactDecimal) -> bool:
        """Exact mathematical-value equality (no floating point involved)."""
        return self.canonical() == other.canonical()

    def coefficient_and_exponent(self) -> tuple[int, int]:
        """Return (c, e) with value == c × 10^e and c an integer."""
        coefficient = int(self.digits) if self.digits else 0
        if self.negative:
            coefficient = -coefficient
        return coefficient, self.point_position - len(self.digits)

    def integer_digits(self) -> str:
        """Digits of the integer part, without leading zeros ("" for |x| < 1)."""
        c = self.canonical()
        if c.point_position <= 0:
            return ""
        padding = max(0, c.point_position - len(c.digits))
        return c.digits[: c.point_position] + "0" * padding

    def to_fraction(self) -> Fraction:
        coefficient, exponent = self.coefficient_and_exponent()
        return Fraction(coefficient) * Fraction(10) ** exponent

    def __str__(self) -> str:
        """Plain positional notation of the canonical form, e.g. "-0.001"."""
        c = self.canonical()
        if not c.digits:
            return "0"
        point, digits = c.point_position, c.digits
        if point <= 0:
            body = "0." + "0" * -point + digits
        elif point >= len(digits):
            body = digits + "0" * (point - len(digits))
        else:
            body = digits[:point] + "." + digits[point:]
        return ("-" if c.negative else "") + body


# ─── Binary64 Value ─────────────────────────────────────────────────


class Binary64Value(BaseModel):
    """An IEEE-754 double as its raw sign / biased exponent / fraction fields."""

    model_config = {"frozen": True}

    negative: bool = False
    biased_exponent: int = Field(default=0, ge=0, le=MAX_BIASED_EXPONENT)
    fraction: int = Field(default=0, ge=0, lt=HIDDEN_BIT)

    @classmethod
    def from_bits(cls, bits: int) -> Binary64Value:
        return cls(
            negative=bool(bits >> 63),
            biased_exponent=(bits >> SIGNIFICAND_BITS) & MAX_BIASED_EXPONENT,
            fraction=bits & (HIDDEN_BIT - 1),
        )

    @classmethod
    def from_float(cls, value: float) -> Binary64Value:
        (bits,) = struct.unpack(">Q", struct.pack(">d", value))
        return cls.from_bits(bits)

    @classmethod
    def zero(cls, negative: bool = False) -> Binary64Value:
        return cls(negative=negative)

    @classmethod
    def infinity(cls, negative: bool = False) -> Binary64Value:
        return cls(negative=negative, biased_exponent=MAX_BIASED_EXPONENT)

    @property
    def bits(self) -> int:
        return (
            (int(self.negative) << 63)
            | (self.biased_exponent << SIGNIFICAND_BITS)
            | self.fraction
        )

    def to_float(self) -> float:
        return struct.unpack(">d", struct.pack(">Q", self.bits))[0]

    @property
    def is_finite(self) -> bool:
        return self.biased_exponent != MAX_BIASED_EXPONENT

    @property
    def is_nan(self) -> bool:
        return self.biased_exponent == MAX_BIASED_EXPONENT and self.fraction != 0

    @property
    def is_infinite(self) -> bool:
        return self.biased_exponent == MAX_BIASED_EXPONENT and self.fraction == 0

    @property
    def is_zero(self) -> bool:
        return self.biased_exponent == 0 and self.fraction == 0

    @property
    def is_subnormal(self) -> bool:
        return self.biased_exponent == 0 and self.fraction != 0

    @property
    def significand(self) -> int:
        """Integer significand, hidden bit included for normal numbers."""
        if self.biased_exponent == 0:
            return self.fraction
        return self.fraction | HIDDEN_BIT

    @property
    def exponent(self) -> int:
        """Power of two such that |value| == significand × 2^exponent."""
        return max(self.biased_exponent, 1) - EXPONENT_BIAS - SIGNIFICAND_BITS


# ─── Safety Report ──────────────────────────────────────────────────


class SafetyReport(BaseModel):
    """The outcome of one safety check: verdict, findings, and the values seen."""

    input: Optional[str] = None  # None when the input was not a string
    is_safe: bool
    findings: list[ValidationFinding] = Field(default_factory=list)
    parsed: Optional[ExactDecimal] = None
    binary64: Optional[Binary64Value] = None
    round_tripped: Optional[ExactDecimal] = None

    @property
    def reason(self) -> str | None:
        """Code of the first ERROR finding, or None if the input is safe."""
        for finding in self.findings:
            if finding.severity == Severity.ERROR:
                return finding.code
        return None
