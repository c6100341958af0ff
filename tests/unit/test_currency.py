"""
Tests for cent-precision currency arithmetic.

Covers:
- Conversion between major units and integer cents
- Parsing of Brazilian and plain user input
- Display formatting (full and compact)
- Validation predicates
- Round-trip properties over the valid range
"""

from decimal import Decimal

import pytest

from rewards_kernel.domain.currency import (
    MAX_CENTS,
    MAX_VALUE,
    calculate_percentage,
    format_currency,
    format_currency_compact,
    is_valid_amount,
    is_valid_cents,
    parse_currency,
    round_ratio_to_cents,
    sum_amounts,
    sum_cents,
    to_cents,
    to_decimal,
)


class TestCentConversion:
    """Major units <-> integer cents."""

    def test_to_cents_from_decimal_string(self):
        assert to_cents("45.00") == 4500

    def test_to_cents_avoids_float_drift(self):
        assert to_cents(0.1) + to_cents(0.2) == 30

    def test_to_cents_rounds_half_away_from_zero(self):
        assert to_cents("12.345") == 1235
        assert to_cents(Decimal("-1.005")) == -101

    def test_to_cents_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            to_cents("abc")

    def test_to_cents_rejects_infinity(self):
        with pytest.raises(ValueError):
            to_cents(float("inf"))

    def test_to_cents_rejects_bool(self):
        with pytest.raises(TypeError):
            to_cents(True)

    def test_to_decimal_is_exact(self):
        assert to_decimal(4500) == Decimal("45.00")
        assert str(to_decimal(1)) == "0.01"

    def test_sum_amounts_goes_through_cents(self):
        assert sum_amounts(["0.1", "0.2"]) == Decimal("0.30")

    def test_sum_cents(self):
        assert sum_cents([100, 250, 1]) == 351

    def test_sum_cents_rejects_floats(self):
        with pytest.raises(TypeError):
            sum_cents([100, 2.5])

    def test_round_ratio_to_cents(self):
        assert round_ratio_to_cents(Decimal("0.9"), 5000) == 4500
        assert round_ratio_to_cents(Decimal("0.5"), 1) == 1
        assert round_ratio_to_cents(Decimal("0.75"), 1333) == 1000


class TestParseCurrency:
    """User input parsing never raises."""

    def test_brazilian_format(self):
        assert parse_currency("1.234,56") == Decimal("1234.56")

    def test_with_prefix(self):
        assert parse_currency("R$ 45,00") == Decimal("45.00")

    def test_single_fraction_digit(self):
        assert parse_currency("1234,5") == Decimal("1234.50")

    def test_plain_decimal_point(self):
        assert parse_currency("12.50") == Decimal("12.50")

    def test_dots_as_thousands_separators(self):
        # 1234567 > 999999, so taken as cents
        assert parse_currency("1.234.567") == Decimal("12345.67")

    def test_large_plain_number_is_cents(self):
        assert parse_currency("2000000") == Decimal("20000.00")

    def test_fraction_truncated_to_two_digits(self):
        assert parse_currency("10,999") == Decimal("10.99")

    @pytest.mark.parametrize("raw", ["", "abc", "R$", None])
    def test_unparsable_is_zero(self, raw):
        assert parse_currency(raw) == Decimal("0.00")


class TestFormatCurrency:
    def test_thousands_and_decimal_separators(self):
        assert format_currency(Decimal("1234.56")) == "R$ 1.234,56"

    def test_from_cents(self):
        assert format_currency(4500, from_cents=True) == "R$ 45,00"

    def test_zero(self):
        assert format_currency(0) == "R$ 0,00"

    def test_millions(self):
        assert format_currency("1234567.891") == "R$ 1.234.567,89"

    def test_negative(self):
        assert format_currency(-5) == "-R$ 5,00"

    def test_invalid_input_renders_zero(self):
        assert format_currency("abc") == "R$ 0,00"
        assert format_currency(float("nan")) == "R$ 0,00"

    def test_compact_thousands(self):
        assert format_currency_compact(1500) == "R$ 1,5K"

    def test_compact_millions(self):
        assert format_currency_compact(2_500_000) == "R$ 2,5M"

    def test_compact_from_cents(self):
        assert format_currency_compact(150_000, from_cents=True) == "R$ 1,5K"

    def test_compact_below_threshold_is_full_format(self):
        assert format_currency_compact(999) == "R$ 999,00"


class TestValidation:
    @pytest.mark.parametrize("value", [None, "", "R$ 100,00", "45", Decimal("999999.99"), 0])
    def test_valid_amounts(self, value):
        assert is_valid_amount(value) is True

    @pytest.mark.parametrize(
        "value", ["abc", "-5", True, 1_000_000, "1.000.000,00", Decimal("-0.01")]
    )
    def test_invalid_amounts(self, value):
        assert is_valid_amount(value) is False

    def test_valid_cents_bounds(self):
        assert is_valid_cents(0)
        assert is_valid_cents(MAX_CENTS)
        assert not is_valid_cents(MAX_CENTS + 1)
        assert not is_valid_cents(-1)

    def test_cents_must_be_int(self):
        assert not is_valid_cents(10.0)
        assert not is_valid_cents(True)


class TestPercentage:
    def test_whole_percentage(self):
        assert calculate_percentage(45, 90) == 50

    def test_rounds_half_up(self):
        assert calculate_percentage(2, 3) == 67
        assert calculate_percentage(1, 3) == 33

    def test_zero_total(self):
        assert calculate_percentage(5, 0) == 0


# Zero, one cent, thousand-separator and million boundaries, and the ceiling
BOUNDARY_CENTS = [
    0, 1, 9, 10, 99, 100, 101,
    99_999, 100_000, 100_001,
    123_456, 9_999_999, 10_000_000,
    MAX_CENTS - 1, MAX_CENTS,
]
SAMPLED_CENTS = BOUNDARY_CENTS + list(range(0, MAX_CENTS + 1, 999_983))


class TestRoundTripProperties:
    @pytest.mark.parametrize("cents", BOUNDARY_CENTS)
    def test_cents_survive_decimal_conversion(self, cents):
        assert to_cents(to_decimal(cents)) == cents

    def test_cents_survive_decimal_conversion_sampled(self):
        failures = [c for c in SAMPLED_CENTS if to_cents(to_decimal(c)) != c]
        assert failures == []

    @pytest.mark.parametrize("cents", BOUNDARY_CENTS)
    def test_parse_inverts_format(self, cents):
        amount = to_decimal(cents)
        assert parse_currency(format_currency(amount)) == amount

    def test_parse_inverts_format_from_cents(self):
        failures = [
            c for c in SAMPLED_CENTS
            if parse_currency(format_currency(c, from_cents=True)) != to_decimal(c)
        ]
        assert failures == []

    def test_ceiling(self):
        assert to_decimal(MAX_CENTS) == MAX_VALUE
        assert parse_currency(format_currency(MAX_VALUE)) == MAX_VALUE
        assert format_currency(MAX_VALUE) == "R$ 999.999,99"
