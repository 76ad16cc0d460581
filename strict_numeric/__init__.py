"""
Strict Numeric — decide whether a decimal string survives a trip through a double.

Architecture: Lexical check → Exact decimal → Magnitude bound → Decimal→binary64 → Shortest decimal → Exact comparison
Philosophy:   Never let a float check its own rounding. Compare exact values only.
"""

from .conversion import decimal_to_binary64, string_to_number
from .decimal_model import MAX_SAFE_INTEGER, parse_exact_decimal
from .formatting import number_to_string, shortest_decimal
from .lexical import is_lexically_valid
from .models import Binary64Value, ExactDecimal, SafetyReport
from .pipeline import SafetyChecker, check_numeric, is_safe_numeric

__version__ = "1.0.0"

__all__ = [
    "MAX_SAFE_INTEGER",
    "Binary64Value",
    "ExactDecimal",
    "SafetyChecker",
    "SafetyReport",
    "check_numeric",
    "decimal_to_binary64",
    "is_lexically_valid",
    "is_safe_numeric",
    "number_to_string",
    "parse_exact_decimal",
    "shortest_decimal",
    "string_to_number",
]
