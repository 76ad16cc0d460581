"""
Deterministic validation checks — one per stage of the safety pipeline.

Each validator function:
  - Takes the value its stage works on (text, ExactDecimal, ...)
  - Returns a list of ValidationFinding objects (empty = all clear)
  - Is independently testable

The pipeline runs them in order and stops at the first stage that reports
an ERROR; later stages assume the earlier ones passed.
"""

from __future__ import annotations

from .decimal_model import MAX_SAFE_INTEGER, exceeds_safe_integer
from .lexical import diagnose
from .models import ExactDecimal, Severity, ValidationFinding


def validate_length(text: str, max_length: int | None) -> list[ValidationFinding]:
    """Reject inputs longer than the caller's bound before any big-integer work."""
    findings: list[ValidationFinding] = []

    if max_length is not None and len(text) > max_length:
        findings.append(
            ValidationFinding(
                severity=Severity.ERROR,
                code="INPUT_TOO_LONG",
                stage="length",
                message=(
                    f"Input has {len(text)} characters; the configured "
                    f"maximum is {max_length}."
                ),
                details={"length": len(text), "max_length": max_length},
            )
        )

    return findings


def validate_lexical(text: str) -> list[ValidationFinding]:
    """Check the strict numeral grammar. Reports the first violation only."""
    problem = diagnose(text)
    if problem is None:
        return []

    code, message, details = problem
    return [
        ValidationFinding(
            severity=Severity.ERROR,
            code=code,
            stage="lexical",
            message=message,
            details=details,
        )
    ]


def validate_magnitude(value: ExactDecimal) -> list[ValidationFinding]:
    """Integer parts above 2^53 - 1 are rejected outright.

    This is a policy bound, not a representability test: 2^60 is an exact
    double and is still rejected.
    """
    findings: list[ValidationFinding] = []

    if exceeds_safe_integer(value):
        integer_digits = value.integer_digits()
        findings.append(
            ValidationFinding(
                severity=Severity.ERROR,
                code="MAGNITUDE_EXCEEDED",
                stage="magnitude",
                message=(
                    f"Integer part has {len(integer_digits)} digits and exceeds "
                    f"the safe integer limit {MAX_SAFE_INTEGER}."
                ),
                details={
                    "integer_digits": len(integer_digits),
                    "limit": str(MAX_SAFE_INTEGER),
                },
            )
        )

    return findings


def validate_round_trip(
    text: str, parsed: ExactDecimal, round_tripped: ExactDecimal
) -> list[ValidationFinding]:
    """Compare the exact value before and after the binary64 round trip.

    A mismatch is an ERROR. A match whose text is not the canonical rendering
    ("1.50" for 1.5, "-0" for 0) is noted as INFO and stays safe.
    """
    findings: list[ValidationFinding] = []

    if not parsed.same_value(round_tripped):
        findings.append(
            ValidationFinding(
                severity=Severity.ERROR,
                code="ROUND_TRIP_MISMATCH",
                stage="round_trip",
                message=(
                    f"{text!r} does not survive conversion to binary64: "
                    f"it comes back as {str(round_tripped)!r}."
                ),
                details={"original": str(parsed), "round_tripped": str(round_tripped)},
            )
        )
    elif text != str(round_tripped):
        findings.append(
            ValidationFinding(
                severity=Severity.INFO,
                code="NON_CANONICAL_FORM",
                stage="round_trip",
                message=(
                    f"{text!r} round-trips exactly; its canonical form is "
                    f"{str(round_tripped)!r}."
                ),
                details={"canonical": str(round_tripped)},
            )
        )

    return findings
