"""
Test suite for the safety pipeline: grammar, magnitude bound, round trip.

Every rule is verified in isolation AND through the public predicate.

Run: pytest tests/ -v
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from strict_numeric import (
    Binary64Value,
    ExactDecimal,
    SafetyChecker,
    check_numeric,
    decimal_to_binary64,
    is_lexically_valid,
    is_safe_numeric,
    parse_exact_decimal,
    shortest_decimal,
)
from strict_numeric.decimal_model import exceeds_safe_integer
from strict_numeric.models import Severity
from strict_numeric.validators import (
    validate_length,
    validate_lexical,
    validate_magnitude,
    validate_round_trip,
)


# ─── Test Data ───────────────────────────────────────────────────────

# The inputs people usually get wrong with Number() / parseFloat() / isFinite()
PARSER_COMPARISON_TABLE = [
    ("", False),
    (" ", False),
    ("123.45", True),
    (".123", False),
    ("123.", False),
    ("00123", False),
    ("1e5", False),
    ("0x123", False),
    ("9007199254740993", False),
    ("0.1234567890123456789", False),
    ("Infinity", False),
    ("-Infinity", False),
]


# ═══════════════════════════════════════════════════════════════════════
# LEXICAL VALIDATOR
# ═══════════════════════════════════════════════════════════════════════


class TestLexicalGrammar:
    """The grammar is checked exactly as written — nothing is trimmed."""

    @pytest.mark.parametrize(
        "text",
        ["0", "-0", "7", "10", "0.5", "-0.123", "1234.5678", "0.000", "9" * 40],
    )
    def test_valid_numerals(self, text):
        assert is_lexically_valid(text)
        assert validate_lexical(text) == []

    @pytest.mark.parametrize(
        "text",
        [
            "", " ", " 1", "1 ", "+1", "--1", "1-", "1.2.3", ".5", "5.", "-.5",
            "00", "01", "-01.5", "1e5", "1E5", "0x1F", "1,000", "1_000",
            "NaN", "Infinity", "-", ".", "١٢٣", "１２", "1\n",
        ],
    )
    def test_invalid_numerals(self, text):
        assert not is_lexically_valid(text)
        findings = validate_lexical(text)
        assert len(findings) == 1
        assert findings[0].severity == Severity.ERROR
        assert findings[0].stage == "lexical"

    def test_empty_input_code(self):
        assert validate_lexical("")[0].code == "EMPTY_INPUT"

    def test_whitespace_is_illegal_character(self):
        finding = validate_lexical("12 3")[0]
        assert finding.code == "ILLEGAL_CHARACTER"
        assert finding.details == {"character": " ", "position": 2}

    def test_non_ascii_digit_is_illegal_character(self):
        finding = validate_lexical("1٢3")[0]
        assert finding.code == "ILLEGAL_CHARACTER"
        assert finding.details["position"] == 1

    def test_plus_sign_is_illegal_character(self):
        assert validate_lexical("+5")[0].code == "ILLEGAL_CHARACTER"

    def test_trailing_newline_rejected(self):
        """re.match with $ would accept this; the grammar must not."""
        assert validate_lexical("5\n")[0].code == "ILLEGAL_CHARACTER"

    def test_misplaced_sign(self):
        assert validate_lexical("1-2")[0].code == "MISPLACED_SIGN"
        assert validate_lexical("--2")[0].code == "MISPLACED_SIGN"

    def test_multiple_decimal_points(self):
        finding = validate_lexical("1.2.3")[0]
        assert finding.code == "MULTIPLE_DECIMAL_POINTS"
        assert finding.details["count"] == 2

    def test_lone_sign_missing_digits(self):
        assert validate_lexical("-")[0].code == "MISSING_DIGITS"

    def test_bare_decimal_point_both_sides(self):
        assert validate_lexical(".123")[0].code == "BARE_DECIMAL_POINT"
        assert validate_lexical("123.")[0].code == "BARE_DECIMAL_POINT"
        assert validate_lexical("-.5")[0].code == "BARE_DECIMAL_POINT"
        assert validate_lexical(".")[0].code == "BARE_DECIMAL_POINT"

    def test_leading_zero(self):
        finding = validate_lexical("00123")[0]
        assert finding.code == "LEADING_ZERO"
        assert finding.details["integer_part"] == "00123"

    def test_negative_leading_zero(self):
        assert validate_lexical("-007.5")[0].code == "LEADING_ZERO"


# ═══════════════════════════════════════════════════════════════════════
# LENGTH POLICY
# ═══════════════════════════════════════════════════════════════════════


class TestLengthPolicy:
    def test_unbounded_by_default(self):
        assert validate_length("1" * 10_000, None) == []

    def test_at_limit_passes(self):
        assert validate_length("12345", 5) == []

    def test_over_limit_flagged(self):
        findings = validate_length("123456", 5)
        assert findings[0].code == "INPUT_TOO_LONG"
        assert findings[0].details == {"length": 6, "max_length": 5}

    def test_checker_applies_limit_before_grammar(self):
        report = SafetyChecker(max_input_length=3).run("abcd")
        assert report.reason == "INPUT_TOO_LONG"

    def test_non_positive_limit_rejected(self):
        with pytest.raises(ValueError, match="positive"):
            SafetyChecker(max_input_length=0)


# ═══════════════════════════════════════════════════════════════════════
# MAGNITUDE BOUND
# ═══════════════════════════════════════════════════════════════════════


class TestMagnitudeBound:
    """|integer part| <= 9007199254740991, decided on digits alone."""

    @pytest.mark.parametrize(
        "text",
        ["0", "0.5", "9007199254740991", "-9007199254740991",
         "9007199254740991.999999", "8999999999999999", "123"],
    )
    def test_within_bound(self, text):
        assert not exceeds_safe_integer(parse_exact_decimal(text))
        assert validate_magnitude(parse_exact_decimal(text)) == []

    @pytest.mark.parametrize(
        "text",
        ["9007199254740992", "-9007199254740992", "9007199254741000",
         "10000000000000000", "99999999999999999999.5"],
    )
    def test_beyond_bound(self, text):
        assert exceeds_safe_integer(parse_exact_decimal(text))

    def test_leading_zeros_do_not_count_as_digits(self):
        padded = ExactDecimal(digits="0009007199254740991", point_position=19)
        assert not exceeds_safe_integer(padded)

    def test_exactly_representable_power_of_two_still_rejected(self):
        """2^60 is an exact double; the bound is policy, not representability."""
        assert exceeds_safe_integer(parse_exact_decimal(str(2**60)))
        assert is_safe_numeric(str(2**60)) is False

    def test_finding_details(self):
        findings = validate_magnitude(parse_exact_decimal("10000000000000000"))
        assert findings[0].code == "MAGNITUDE_EXCEEDED"
        assert findings[0].details == {
            "integer_digits": 17,
            "limit": "9007199254740991",
        }


# ═══════════════════════════════════════════════════════════════════════
# ROUND-TRIP VALIDATOR
# ═══════════════════════════════════════════════════════════════════════


class TestRoundTripValidator:
    def test_identical_value_passes(self):
        parsed = parse_exact_decimal("0.1")
        assert validate_round_trip("0.1", parsed, parsed.canonical()) == []

    def test_mismatch_is_error(self):
        parsed = parse_exact_decimal("0.1234567890123456789")
        back = parse_exact_decimal("0.12345678901234568")
        findings = validate_round_trip("0.1234567890123456789", parsed, back)
        assert len(findings) == 1
        assert findings[0].severity == Severity.ERROR
        assert findings[0].code == "ROUND_TRIP_MISMATCH"
        assert findings[0].details["round_tripped"] == "0.12345678901234568"

    def test_trailing_zeros_are_info_only(self):
        parsed = parse_exact_decimal("1.50")
        findings = validate_round_trip("1.50", parsed, parse_exact_decimal("1.5"))
        assert [f.code for f in findings] == ["NON_CANONICAL_FORM"]
        assert findings[0].severity == Severity.INFO
        assert findings[0].details["canonical"] == "1.5"


# ═══════════════════════════════════════════════════════════════════════
# PUBLIC PREDICATE
# ═══════════════════════════════════════════════════════════════════════


class TestIsSafeNumeric:
    @pytest.mark.parametrize(("text", "expected"), PARSER_COMPARISON_TABLE)
    def test_parser_comparison_table(self, text, expected):
        assert is_safe_numeric(text) is expected

    def test_magnitude_boundary(self):
        assert is_safe_numeric("9007199254740991") is True
        assert is_safe_numeric("9007199254740992") is False

    @pytest.mark.parametrize(
        "text",
        ["0.1", "1234.5678", "-0.123", "0", "-0", "0.0", "1.50", "123.45",
         "0.3", "0.30000000000000004", "3.141592653589793", "1.0000000000000002",
         "0.000001", "-9007199254740991", "4503599627370495.5",
         "0." + "0" * 323 + "5"],
    )
    def test_safe(self, text):
        assert is_safe_numeric(text) is True

    @pytest.mark.parametrize(
        "text",
        ["0.1234567890123456789", "3.1415926535897932", "1.00000000000000001",
         "9007199254740991.5", "0.1000000000000000000000000001",
         "0." + "0" * 400 + "1", "4503599627370495.25"],
    )
    def test_unsafe_round_trip(self, text):
        assert is_safe_numeric(text) is False
        assert check_numeric(text).reason == "ROUND_TRIP_MISMATCH"

    def test_non_strings_are_rejected(self):
        for value in [0.1, 1, None, b"0.1", ["0.1"], True, object()]:
            assert is_safe_numeric(value) is False

    def test_very_long_input_is_total(self):
        """Digit strings beyond the int/str conversion limit still get a verdict."""
        assert is_safe_numeric("0.1" + "0" * 6000) is True
        assert is_safe_numeric("0.1" + "0" * 6000 + "1") is False
        assert is_safe_numeric("1" * 6000) is False

    def test_total_on_random_garbage(self):
        rng = random.Random(20240117)
        alphabet = "0123456789.-+eE x_,٣"
        for _ in range(2000):
            text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
            assert isinstance(is_safe_numeric(text), bool)

    def test_concurrent_calls_agree(self):
        inputs = [text for text, _ in PARSER_COMPARISON_TABLE] * 20
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(is_safe_numeric, inputs))
        assert results == [is_safe_numeric(text) for text in inputs]


# ═══════════════════════════════════════════════════════════════════════
# FIXED POINTS OF THE ROUND TRIP
# ═══════════════════════════════════════════════════════════════════════


class TestFixedPoints:
    """Accepted strings are exactly the fixed points of decimal → double → decimal."""

    def test_accepted_strings_are_fixed_points(self):
        rng = random.Random(7)
        accepted = 0
        for _ in range(3000):
            integer = str(rng.randint(0, 10 ** rng.randint(0, 6)))
            fraction = "".join(rng.choice("0123456789") for _ in range(rng.randint(0, 18)))
            text = integer + ("." + fraction if fraction else "")
            parsed = parse_exact_decimal(text)
            back = shortest_decimal(decimal_to_binary64(parsed))
            assert is_safe_numeric(text) is parsed.same_value(back)
            accepted += is_safe_numeric(text)
        assert accepted > 0

    def test_shortest_form_of_any_small_double_is_safe(self):
        rng = random.Random(11)
        for _ in range(500):
            value = rng.uniform(-(2.0**53) + 1, 2.0**53 - 1) * 10 ** -rng.randint(0, 30)
            text = str(shortest_decimal(value))
            assert is_safe_numeric(text) is True, text


# ═══════════════════════════════════════════════════════════════════════
# DIAGNOSTIC REPORT
# ═══════════════════════════════════════════════════════════════════════


class TestSafetyReport:
    def test_safe_report_carries_every_stage(self):
        report = check_numeric("0.1")
        assert report.is_safe is True
        assert report.reason is None
        assert report.input == "0.1"
        assert report.parsed == ExactDecimal(digits="01", point_position=1)
        assert report.binary64 == Binary64Value.from_float(0.1)
        assert str(report.round_tripped) == "0.1"
        assert report.findings == []

    def test_lexical_rejection_stops_early(self):
        report = check_numeric("00123")
        assert report.reason == "LEADING_ZERO"
        assert report.parsed is None
        assert report.binary64 is None

    def test_magnitude_rejection_keeps_parsed_value(self):
        report = check_numeric("9007199254740992")
        assert report.reason == "MAGNITUDE_EXCEEDED"
        assert report.parsed is not None
        assert report.binary64 is None

    def test_non_string_report(self):
        report = check_numeric(42)
        assert report.input is None
        assert report.reason == "NOT_A_STRING"
        assert report.findings[0].details == {"type": "int"}

    def test_negative_zero_is_safe_but_non_canonical(self):
        report = check_numeric("-0")
        assert report.is_safe is True
        assert report.binary64 == Binary64Value.zero(negative=True)
        assert [f.code for f in report.findings] == ["NON_CANONICAL_FORM"]

    def test_round_trip_mismatch_details(self):
        report = check_numeric("0.1234567890123456789")
        assert report.is_safe is False
        assert report.findings[0].details == {
            "original": "0.1234567890123456789",
            "round_tripped": "0.12345678901234568",
        }

    def test_rejections_are_logged_at_debug(self, caplog):
        is_safe_numeric("00123")
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("lexical" in m for m in messages)


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════


class TestFromEnv:
    def test_unset_means_unbounded(self, monkeypatch):
        monkeypatch.delenv("STRICT_NUMERIC_MAX_INPUT_LENGTH", raising=False)
        assert SafetyChecker.from_env().max_input_length is None

    def test_empty_means_unbounded(self, monkeypatch):
        monkeypatch.setenv("STRICT_NUMERIC_MAX_INPUT_LENGTH", "  ")
        assert SafetyChecker.from_env().max_input_length is None

    def test_reads_limit(self, monkeypatch):
        monkeypatch.setenv("STRICT_NUMERIC_MAX_INPUT_LENGTH", "32")
        checker = SafetyChecker.from_env()
        assert checker.max_input_length == 32
        assert checker.is_safe("0.1") is True
        assert checker.is_safe("0." + "1" * 40) is False

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv("STRICT_NUMERIC_MAX_INPUT_LENGTH", "lots")
        with pytest.raises(ValueError, match="must be an integer"):
            SafetyChecker.from_env()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
