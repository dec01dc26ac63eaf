"""
Tests for shipping cost calculation.
"""
from decimal import Decimal

from kitchen_shop.config import ShippingRules
from kitchen_shop.services.shipping import (
    amount_until_free_shipping,
    calculate_shipping,
    format_shipping_cost,
    qualifies_for_free_shipping,
)


class TestUkShipping:
    """Free UK delivery from £50, £5.99 below."""

    def test_just_below_threshold_pays_standard(self):
        result = calculate_shipping(Decimal("49.99"), "GB")
        assert result.cost == Decimal("5.99")
        assert result.is_free is False
        assert result.reason == "Add £0.01 more for free UK delivery"

    def test_threshold_is_inclusive(self):
        result = calculate_shipping(Decimal("50.00"), "GB")
        assert result.cost == Decimal("0")
        assert result.is_free is True
        assert "Free UK delivery" in result.reason

    def test_uk_alias(self):
        assert calculate_shipping(Decimal("10.00"), "UK").cost == Decimal("5.99")

    def test_custom_rules(self):
        rules = ShippingRules(
            uk_free_threshold=Decimal("100.00"),
            uk_standard_cost=Decimal("3.50"),
            international_cost=Decimal("20.00"),
        )
        assert calculate_shipping(Decimal("60.00"), "GB", rules).cost == Decimal("3.50")
        assert calculate_shipping(Decimal("60.00"), "FR", rules).cost == Decimal("20.00")


class TestInternationalShipping:
    """Flat rate outside the UK, whatever the subtotal."""

    def test_us_flat_rate(self):
        result = calculate_shipping(Decimal("10.00"), "US")
        assert result.cost == Decimal("15.99")
        assert result.is_free is False
        assert result.reason == "International shipping"

    def test_large_international_order_still_pays(self):
        assert calculate_shipping(Decimal("5000.00"), "AU").cost == Decimal("15.99")


class TestShippingHelpers:

    def test_format_shipping_cost(self):
        assert format_shipping_cost(Decimal("0"), True) == "FREE"
        assert format_shipping_cost(Decimal("5.99"), False) == "£5.99"

    def test_amount_until_free_shipping(self):
        assert amount_until_free_shipping(Decimal("45.00"), "GB") == Decimal("5.00")
        assert amount_until_free_shipping(Decimal("60.00"), "GB") == Decimal("0.00")
        assert amount_until_free_shipping(Decimal("10.00"), "US") == Decimal("0.00")

    def test_qualifies_for_free_shipping(self):
        assert qualifies_for_free_shipping(Decimal("50.00"), "GB")
        assert not qualifies_for_free_shipping(Decimal("49.99"), "GB")
        assert not qualifies_for_free_shipping(Decimal("500.00"), "FR")
