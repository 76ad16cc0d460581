"""
Custom exception hierarchy for the numeric conversion primitives.

The public predicate never raises. These exceptions belong to the lower-level
operations (parsing, formatting) that callers may use directly, where a bad
argument is a programming error rather than a "not safe" verdict.
"""

from __future__ import annotations


class NumericStringError(Exception):
    """Base exception for all numeric string failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class LexicalError(NumericStringError):
    """The text does not match the strict decimal grammar."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("LEXICAL_REJECTED", message, details)


class NonFiniteValueError(NumericStringError):
    """NaN and the infinities have no decimal expansion."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("NON_FINITE_VALUE", message, details)


class ConversionError(NumericStringError):
    """A conversion reached a state that correct arithmetic cannot produce."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("CONVERSION_DEFECT", message, details)
