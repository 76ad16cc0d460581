"""
Safety pipeline — decides whether a string is a safe numeric string.

Flow:
  ┌──────────┐
  │  Input   │
  └────┬─────┘
       │
  ┌────▼─────┐
  │ Type +   │   ← Non-strings and over-long strings stop here
  │ Length   │
  └────┬─────┘
       │
  ┌────▼─────┐
  │ Lexical  │   ← Strict grammar, no trimming
  └────┬─────┘
       │
  ┌────▼─────┐
  │ Magnitude│   ← |integer part| <= 2^53 - 1
  └────┬─────┘
       │
  ┌────▼─────┐     ┌───────────┐
  │ Decimal  │────►│ Shortest  │   ← Round trip through binary64
  │ → double │     │ decimal   │
  └──────────┘     └─────┬─────┘
                         │
                  ┌──────▼──────┐
                  │ Exact value │   ← Arbitrary precision, never float ==
                  │ comparison  │
                  └──────┬──────┘
                         │
                  ┌──────▼──────┐
                  │   Report    │   ← Typed findings + safe/unsafe
                  └─────────────┘

Design principles:
  - The pipeline is total: every input yields a report, nothing is raised.
  - Each stage is a pure validator; the first ERROR ends the run.
  - The checker holds only immutable configuration, so one instance can be
    shared across threads.
"""

from __future__ import annotations

import logging
import os

from .conversion import decimal_to_binary64
from .decimal_model import parse_exact_decimal
from .formatting import shortest_decimal
from .models import SafetyReport, Severity, ValidationFinding
from .validators import (
    validate_length,
    validate_lexical,
    validate_magnitude,
    validate_round_trip,
)

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH_ENV = "STRICT_NUMERIC_MAX_INPUT_LENGTH"


class SafetyChecker:
    """Runs the full safety check on one input at a time.

    Usage:
        checker = SafetyChecker(max_input_length=64)
        report = checker.run("0.1")
        if not report.is_safe:
            print(report.reason)
    """

    def __init__(self, max_input_length: int | None = None):
        if max_input_length is not None and max_input_length < 1:
            raise ValueError(
                f"max_input_length must be positive, got {max_input_length}"
            )
        self.max_input_length = max_input_length

    @classmethod
    def from_env(cls) -> SafetyChecker:
        """Build a checker from STRICT_NUMERIC_MAX_INPUT_LENGTH (unset = unbounded)."""
        raw = os.environ.get(MAX_INPUT_LENGTH_ENV, "").strip()
        if not raw:
            return cls()
        try:
            max_length = int(raw)
        except ValueError:
            raise ValueError(
                f"{MAX_INPUT_LENGTH_ENV} must be an integer, got {raw!r}"
            ) from None
        logger.info("Input length bounded to %d characters", max_length)
        return cls(max_input_length=max_length)

    def is_safe(self, value: object) -> bool:
        return self.run(value).is_safe

    def run(self, value: object) -> SafetyReport:
        """Execute every stage on `value`.

        Args:
            value: Anything; only str instances can be safe.

        Returns:
            SafetyReport with findings and the safe/unsafe verdict.
        """
        # ── Step 0: Type gate ───────────────────────────────────────
        if not isinstance(value, str):
            logger.debug("Rejected non-string input of type %s", type(value).__name__)
            return SafetyReport(
                is_safe=False,
                findings=[
                    ValidationFinding(
                        severity=Severity.ERROR,
                        code="NOT_A_STRING",
                        stage="type",
                        message=f"Expected str, got {type(value).__name__}.",
                        details={"type": type(value).__name__},
                    )
                ],
            )
        text = value

        # ── Step 1: Length policy and grammar ───────────────────────
        findings = validate_length(text, self.max_input_length)
        if not findings:
            findings = validate_lexical(text)
        if findings:
            logger.debug("Rejected %r at %s stage", text, findings[0].stage)
            return SafetyReport(input=text, is_safe=False, findings=findings)

        # ── Step 2: Exact decimal and magnitude bound ───────────────
        parsed = parse_exact_decimal(text)
        findings = validate_magnitude(parsed)
        if findings:
            logger.debug("Rejected %r: integer part above safe bound", text)
            return SafetyReport(
                input=text, is_safe=False, findings=findings, parsed=parsed
            )

        # ── Step 3: Round trip through binary64 ─────────────────────
        binary64 = decimal_to_binary64(parsed)
        round_tripped = shortest_decimal(binary64)

        # ── Step 4: Exact comparison and final report ───────────────
        findings = validate_round_trip(text, parsed, round_tripped)
        is_safe = not any(f.severity == Severity.ERROR for f in findings)
        logger.debug(
            "Checked %r: binary64=0x%016x round_tripped=%s safe=%s",
            text,
            binary64.bits,
            round_tripped,
            is_safe,
        )

        return SafetyReport(
            input=text,
            is_safe=is_safe,
            findings=findings,
            parsed=parsed,
            binary64=binary64,
            round_tripped=round_tripped,
        )


_default_checker = SafetyChecker()


def check_numeric(value: object) -> SafetyReport:
    """Full diagnostic report for `value` using the default (unbounded) checker."""
    return _default_checker.run(value)


def is_safe_numeric(value: object) -> bool:
    """True iff `value` is a strict decimal string that survives a binary64 round trip.

    Examples:
        >>> is_safe_numeric("0.1")
        True
        >>> is_safe_numeric("0.1234567890123456789")
        False
        >>> is_safe_numeric("9007199254740992")
        False
        >>> is_safe_numeric(0.1)
        False
    """
    return _default_checker.is_safe(value)
