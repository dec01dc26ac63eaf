"""
Tests for UK VAT, reverse charge and zero-rated export calculation.
"""
from decimal import Decimal

import pytest

from kitchen_shop.services.tax import (
    REVERSE_CHARGE_REASON,
    ZERO_RATED_EXPORT_REASON,
    calculate_tax,
    calculate_vat_exclusive,
    calculate_vat_inclusive,
    extract_vat_amount,
    format_tax_amount,
    format_tax_rate,
    is_uk_country,
)


class TestUkVat:
    """UK customers pay 20% VAT."""

    def test_gb_subtotal_gets_twenty_percent(self):
        result = calculate_tax(Decimal("49.99"), "GB")
        assert result.tax_rate == Decimal("0.20")
        assert result.tax_amount == Decimal("10.00")
        assert result.total == Decimal("59.99")
        assert result.is_vat_exempt is False
        assert result.exemption_reason is None

    def test_uk_alias_is_treated_as_gb(self):
        result = calculate_tax(Decimal("100.00"), "UK")
        assert result.tax_amount == Decimal("20.00")
        assert result.total == Decimal("120.00")

    def test_lowercase_country_matches(self):
        assert calculate_tax(Decimal("10.00"), "gb").tax_amount == Decimal("2.00")

    def test_vat_number_does_not_exempt_uk_customer(self):
        result = calculate_tax(Decimal("50.00"), "GB", "GB123456789")
        assert result.is_vat_exempt is False
        assert result.tax_amount == Decimal("10.00")

    def test_half_penny_rounds_up(self):
        # 0.125 * 0.20 = 0.025 -> 0.03
        result = calculate_tax(Decimal("0.125"), "GB")
        assert result.tax_amount == Decimal("0.03")

    def test_float_input_is_accepted(self):
        result = calculate_tax(49.99, "GB")
        assert result.tax_amount == Decimal("10.00")

    def test_zero_subtotal(self):
        result = calculate_tax(Decimal("0"), "GB")
        assert result.tax_amount == Decimal("0.00")
        assert result.total == Decimal("0.00")


class TestNonUkTax:
    """Non-UK customers are never charged VAT."""

    def test_reverse_charge_with_vat_number(self):
        result = calculate_tax(Decimal("100.00"), "FR", "FR12345678901")
        assert result.tax_rate == Decimal("0")
        assert result.tax_amount == Decimal("0")
        assert result.total == Decimal("100.00")
        assert result.is_vat_exempt is True
        assert result.exemption_reason == REVERSE_CHARGE_REASON

    def test_zero_rated_export_without_vat_number(self):
        result = calculate_tax(Decimal("100.00"), "US")
        assert result.tax_amount == Decimal("0")
        assert result.total == Decimal("100.00")
        assert result.is_vat_exempt is True
        assert result.exemption_reason == ZERO_RATED_EXPORT_REASON

    def test_blank_vat_number_is_not_reverse_charge(self):
        result = calculate_tax(Decimal("100.00"), "DE", "   ")
        assert result.exemption_reason == ZERO_RATED_EXPORT_REASON

    def test_vat_number_format_is_not_checked_here(self):
        result = calculate_tax(Decimal("100.00"), "DE", "nonsense")
        assert result.exemption_reason == REVERSE_CHARGE_REASON

    @pytest.mark.parametrize("country", [None, ""])
    def test_missing_country_is_not_uk(self, country):
        result = calculate_tax(Decimal("10.00"), country)
        assert result.is_vat_exempt is True


class TestTaxHelpers:
    """Display and VAT-inclusive helpers."""

    def test_is_uk_country(self):
        assert is_uk_country("GB")
        assert is_uk_country(" uk ")
        assert not is_uk_country("IE")
        assert not is_uk_country(None)

    def test_format_tax_amount(self):
        assert format_tax_amount(Decimal("10")) == "£10.00"

    def test_format_tax_rate(self):
        assert format_tax_rate(Decimal("0.20")) == "20%"
        assert format_tax_rate(0) == "0%"

    def test_vat_inclusive_and_exclusive(self):
        assert calculate_vat_inclusive(Decimal("100.00")) == Decimal("120.00")
        assert calculate_vat_exclusive(Decimal("120.00")) == Decimal("100.00")

    def test_extract_vat_amount(self):
        assert extract_vat_amount(Decimal("120.00")) == Decimal("20.00")
