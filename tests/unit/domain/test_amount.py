"""
Unit tests for Amount value object and base-unit conversion.

Usage:
    pytest tests/unit/domain/test_amount.py
"""

from decimal import Decimal

import pytest

from guichet.domain.exceptions import InvalidAmountError
from guichet.domain.value_objects.amount import (
    LAMPORTS_PER_SOL,
    MAX_BASE_UNITS,
    SOL_DECIMALS,
    Amount,
    from_base_units,
    to_base_units,
)


class TestToBaseUnits:
    """Decimal string -> base units."""

    def test_one_and_a_half_sol(self):
        """Test '1.5' at 9 decimals is exactly 1500000000 lamports."""
        assert to_base_units("1.5", 9).base_units == 1_500_000_000

    def test_whole_number(self):
        assert to_base_units("2", SOL_DECIMALS).base_units == 2 * LAMPORTS_PER_SOL

    def test_smallest_unit(self):
        assert to_base_units("0.000000001", 9).base_units == 1

    def test_leading_dot_and_trailing_dot(self):
        assert to_base_units(".5", 9).base_units == 500_000_000
        assert to_base_units("5.", 9).base_units == 5_000_000_000

    def test_whitespace_is_ignored(self):
        assert to_base_units("  0.25 ", 2).base_units == 25

    def test_trailing_zeros_beyond_precision_accepted(self):
        """Test trailing zeros past the exponent do not count as precision."""
        assert to_base_units("1.500000000000", 9).base_units == 1_500_000_000

    def test_no_float_rounding_above_2_pow_53(self):
        """Test amounts a double cannot represent stay exact."""
        amount = to_base_units("9007199.254740993", 9)
        assert amount.base_units == 9_007_199_254_740_993

    def test_exponent_zero(self):
        assert to_base_units("42", 0).base_units == 42

    def test_u64_maximum_accepted(self):
        assert to_base_units(str(MAX_BASE_UNITS), 0).base_units == MAX_BASE_UNITS

    @pytest.mark.parametrize("text", ["0", "0.0", "-1", "-0.5", "", "   "])
    def test_rejects_non_positive_and_empty(self, text):
        with pytest.raises(InvalidAmountError):
            to_base_units(text, 9)

    @pytest.mark.parametrize("text", ["abc", "1.2.3", "1e5", "inf", "nan", ".", "+"])
    def test_rejects_non_numeric(self, text):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_base_units(text, 9)
        assert exc_info.value.code == "INVALID_AMOUNT"

    @pytest.mark.parametrize("text", ["١.٥", "１", "1.٥"])
    def test_rejects_non_ascii_digits(self, text):
        """Test digits outside 0-9 (Arabic-Indic, fullwidth) are rejected."""
        with pytest.raises(InvalidAmountError):
            to_base_units(text, 9)

    def test_rejects_excess_precision(self):
        """Test a 10th significant decimal is rejected, not truncated."""
        with pytest.raises(InvalidAmountError) as exc_info:
            to_base_units("0.0000000001", 9)
        assert "decimal places" in exc_info.value.message

    def test_rejects_above_u64(self):
        with pytest.raises(InvalidAmountError):
            to_base_units(str(MAX_BASE_UNITS + 1), 0)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidAmountError):
            to_base_units(1.5, 9)

    def test_rejects_invalid_exponent(self):
        with pytest.raises(ValueError):
            to_base_units("1", -1)


class TestFromBaseUnits:
    """Base units -> canonical decimal string."""

    @pytest.mark.parametrize(
        "base_units,exponent,expected",
        [
            (1_500_000_000, 9, "1.5"),
            (1_000_000_000, 9, "1"),
            (1, 9, "0.000000001"),
            (123, 0, "123"),
            (0, 6, "0"),
            (1_000_001, 6, "1.000001"),
        ],
    )
    def test_canonical_form(self, base_units, exponent, expected):
        assert from_base_units(base_units, exponent) == expected

    @pytest.mark.parametrize("text", ["1.5", "0.000000001", "18446744073.709551615"])
    def test_round_trip_from_canonical(self, text):
        """Test canonical strings survive a trip through base units."""
        assert from_base_units(to_base_units(text, 9)) == text

    def test_round_trip_normalizes(self):
        assert from_base_units(to_base_units("001.50", 9)) == "1.5"

    def test_int_requires_exponent(self):
        with pytest.raises(ValueError):
            from_base_units(10)


class TestAmount:
    """Amount value object."""

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            Amount(base_units=-1, exponent=9)

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            Amount(base_units=1.0, exponent=9)

    def test_lamports_display(self):
        amount = Amount.lamports(1_500_000_000)
        assert amount.to_display() == "1.500000000"
        assert str(amount) == "1.5"
        assert amount.display_value == Decimal("1.5")

    def test_is_zero(self):
        assert Amount(base_units=0, exponent=6).is_zero()
        assert not Amount(base_units=1, exponent=6).is_zero()
