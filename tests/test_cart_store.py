"""
Tests for CartStore: line item handling and full total recomputation.
"""
from decimal import Decimal

import pytest

from kitchen_shop.schemas.cart import CartItemInput
from kitchen_shop.services.cart import CartStore
from kitchen_shop.services.shipping import ShippingResult
from kitchen_shop.services.tax import TaxResult

from conftest import make_item


@pytest.fixture
def store():
    return CartStore()


def assert_totals_consistent(state):
    expected_subtotal = sum((i.price * i.quantity for i in state.items), Decimal("0"))
    assert state.subtotal == expected_subtotal.quantize(Decimal("0.01"))
    assert state.total == state.subtotal + state.shipping_cost + state.tax_amount


class TestInitialState:

    def test_new_cart_is_empty_uk_cart(self, store):
        state = store.snapshot()
        assert state.items == []
        assert state.is_empty is True
        assert state.item_count == 0
        assert state.subtotal == Decimal("0")
        assert state.shipping_cost == Decimal("0")
        assert state.tax_amount == Decimal("0")
        assert state.total == Decimal("0")
        assert state.tax_rate == Decimal("0.20")
        assert state.customer_country == "GB"
        assert state.currency == "GBP"
        assert state.vat_number is None
        assert state.is_vat_exempt is False


class TestAddItem:

    def test_add_new_item_has_quantity_one(self, store):
        state = store.add_item(make_item())
        assert len(state.items) == 1
        assert state.items[0].quantity == 1
        assert state.items[0].variant_id == "fls-500"

    def test_adding_same_variant_twice_increments(self, store):
        store.add_item(make_item())
        state = store.add_item(make_item())
        assert len(state.items) == 1
        assert state.items[0].quantity == 2
        assert state.item_count == 2

    def test_re_add_keeps_original_fields(self, store):
        store.add_item(make_item(price="45.00"))
        state = store.add_item(make_item(price="99.00", product_name="Changed"))
        assert state.items[0].price == Decimal("45.00")
        assert state.items[0].product_name == "Food Label System"
        assert state.subtotal == Decimal("90.00")

    def test_different_variants_append_in_order(self, store):
        store.add_item(make_item(variant_id="a", price="10.00"))
        state = store.add_item(make_item(variant_id="b", price="20.00"))
        assert [i.variant_id for i in state.items] == ["a", "b"]
        assert state.subtotal == Decimal("30.00")

    def test_accepts_model_instances(self, store):
        state = store.add_item(CartItemInput(**make_item()))
        assert state.items[0].quantity == 1

    def test_accepts_line_items_from_a_snapshot(self, store):
        line = store.add_item(make_item()).items[0]
        other = CartStore()
        state = other.add_item(line)
        assert state.items[0].quantity == 1


class TestRemoveAndUpdate:

    def test_add_then_remove_restores_prior_totals(self, store):
        store.add_item(make_item(variant_id="a", price="12.00"))
        before = store.snapshot()

        store.add_item(make_item(variant_id="b", price="30.00"))
        after = store.remove_item("b")

        assert after.subtotal == before.subtotal
        assert after.shipping_cost == before.shipping_cost
        assert after.tax_amount == before.tax_amount
        assert after.total == before.total

    def test_removing_last_item_returns_to_zero(self, store):
        store.add_item(make_item())
        state = store.remove_item("fls-500")
        assert state.is_empty is True
        assert state.subtotal == Decimal("0")
        assert state.shipping_cost == Decimal("0")
        assert state.total == Decimal("0")

    def test_remove_missing_variant_is_noop(self, store):
        store.add_item(make_item())
        state = store.remove_item("nope")
        assert len(state.items) == 1

    def test_update_quantity_replaces(self, store):
        store.add_item(make_item(price="10.00"))
        state = store.update_quantity("fls-500", 4)
        assert state.items[0].quantity == 4
        assert state.subtotal == Decimal("40.00")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_quantity_non_positive_removes(self, store, quantity):
        store.add_item(make_item())
        state = store.update_quantity("fls-500", quantity)
        assert state.items == []

    def test_update_quantity_missing_variant_is_noop(self, store):
        state = store.update_quantity("nope", 3)
        assert state.items == []


class TestRecalculation:

    def test_gb_end_to_end(self, store):
        """£45 in the UK: £5.99 shipping, VAT on goods plus shipping."""
        state = store.add_item(make_item(price="45.00"))
        assert state.subtotal == Decimal("45.00")
        assert state.shipping_cost == Decimal("5.99")
        assert state.tax_amount == Decimal("10.20")
        assert state.total == Decimal("61.19")

    def test_free_shipping_at_threshold(self, store):
        store.add_item(make_item(price="25.00"))
        state = store.update_quantity("fls-500", 2)
        assert state.shipping_cost == Decimal("0")
        assert state.tax_amount == Decimal("10.00")
        assert state.total == Decimal("60.00")

    def test_international_customer(self, store):
        store.add_item(make_item(price="45.00"))
        state = store.set_country("US")
        assert state.shipping_cost == Decimal("15.99")
        assert state.tax_amount == Decimal("0")
        assert state.tax_rate == Decimal("0")
        assert state.total == Decimal("60.99")
        assert state.is_vat_exempt is True

    def test_vat_number_survives_item_changes(self, store):
        store.set_country("FR")
        store.set_vat_number("FR12345678901")
        state = store.add_item(make_item(price="45.00"))
        assert state.vat_number == "FR12345678901"
        assert state.is_vat_exempt is True

    def test_clearing_vat_number(self, store):
        store.set_vat_number("FR12345678901")
        state = store.set_vat_number(None)
        assert state.vat_number is None
        state = store.set_vat_number("")
        assert state.vat_number is None

    def test_null_country_resolves_to_default_market(self, store):
        store.add_item(make_item(price="45.00"))
        state = store.set_country(None)
        assert state.customer_country is None
        assert state.tax_rate == Decimal("0.20")
        assert state.shipping_cost == Decimal("5.99")

    def test_totals_stay_consistent_over_mixed_operations(self, store):
        store.add_item(make_item(variant_id="a", price="19.99"))
        assert_totals_consistent(store.snapshot())
        store.add_item(make_item(variant_id="b", price="7.49"))
        assert_totals_consistent(store.snapshot())
        store.update_quantity("b", 3)
        assert_totals_consistent(store.snapshot())
        store.set_country("DE")
        assert_totals_consistent(store.snapshot())
        store.set_country("GB")
        store.remove_item("a")
        assert_totals_consistent(store.snapshot())

    def test_injected_calculators_are_used(self):
        calls = []

        def flat_tax(subtotal, country, vat_number):
            calls.append((subtotal, country, vat_number))
            return TaxResult(
                tax_rate=Decimal("0.10"),
                tax_amount=Decimal("1.00"),
                total=subtotal + Decimal("1.00"),
                is_vat_exempt=False,
            )

        def free_shipping(subtotal, country):
            return ShippingResult(cost=Decimal("0"), is_free=True)

        store = CartStore(tax_calculator=flat_tax, shipping_calculator=free_shipping)
        state = store.add_item(make_item(price="10.00"))

        assert state.tax_amount == Decimal("1.00")
        assert state.total == Decimal("11.00")
        assert calls[-1] == (Decimal("10.00"), "GB", None)


class TestClearAndSnapshots:

    def test_clear_resets_everything(self, store):
        store.add_item(make_item())
        store.set_country("FR")
        store.set_vat_number("FR12345678901")
        state = store.clear()
        assert state.items == []
        assert state.customer_country == "GB"
        assert state.vat_number is None
        assert state.tax_rate == Decimal("0.20")
        assert state.total == Decimal("0")

    def test_snapshot_is_independent(self, store):
        store.add_item(make_item())
        snapshot = store.snapshot()
        snapshot.items[0].quantity = 50
        snapshot.items.clear()
        assert store.snapshot().items[0].quantity == 1

    def test_state_property_and_counters(self, store):
        store.add_item(make_item(variant_id="a"))
        store.add_item(make_item(variant_id="a"))
        store.add_item(make_item(variant_id="b"))
        assert store.item_count == 3
        assert store.is_empty is False
        assert store.state.item_count == 3
