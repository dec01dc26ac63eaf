"""
Cart Store for Kitchen Shop
===========================

The CartStore owns the authoritative list of line items for one shopping
session and the totals derived from them. It is a plain object: callers
construct it (optionally injecting the tax and shipping calculators) and
pass it to whatever needs it. The per-session registry in cart_sessions.py
keeps one instance per visitor.

Recalculation:
--------------
Every mutation runs a full recompute, never an incremental patch:

1. subtotal = sum(price x quantity)
2. shipping = calculate_shipping(subtotal, country)
3. tax      = calculate_tax(subtotal + shipping, country, vat_number)
4. total    = subtotal + shipping + tax

An empty cart is never charged shipping, so removing the last item brings
the totals back to zero.

Country Handling:
-----------------
customer_country keeps exactly what the caller set, including None. None is
resolved to DEFAULT_MARKET each time totals are computed.

Threading:
----------
A CartStore is single-writer. Each mutation completes (including the
recompute) before returning. Concurrent access from HTTP requests must go
through cart_sessions.cart_session(), which serializes per session.

Usage:
------
    store = CartStore()
    store.add_item(CartItemInput(...))
    store.set_country("FR")
    store.set_vat_number("FR12345678901")
    state = store.snapshot()
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import DEFAULT_MARKET, UK_VAT_RATE
from ..money import ZERO, round_money, to_decimal
from ..schemas.cart import CartItemInput, CartLineItem, CartState
from .shipping import ShippingResult, calculate_shipping
from .tax import TaxResult, calculate_tax

logger = logging.getLogger(__name__)

TaxCalculator = Callable[[Decimal, Optional[str], Optional[str]], TaxResult]
ShippingCalculator = Callable[[Decimal, Optional[str]], ShippingResult]


def initial_cart_state(default_country: str = DEFAULT_MARKET) -> CartState:
    """Empty cart with UK defaults."""
    return CartState(
        items=[],
        subtotal=ZERO,
        shipping_cost=ZERO,
        tax_rate=UK_VAT_RATE,
        tax_amount=ZERO,
        total=ZERO,
        customer_country=default_country,
        vat_number=None,
        is_vat_exempt=False,
    )


class CartStore:
    """
    Holds cart line items and recomputes totals on every change.

    Args:
        tax_calculator: Function (subtotal, country, vat_number) -> TaxResult
        shipping_calculator: Function (subtotal, country) -> ShippingResult
        default_country: Market used when the customer country is None
    """

    def __init__(
        self,
        tax_calculator: TaxCalculator = calculate_tax,
        shipping_calculator: ShippingCalculator = calculate_shipping,
        default_country: str = DEFAULT_MARKET,
    ):
        self._calculate_tax = tax_calculator
        self._calculate_shipping = shipping_calculator
        self._default_country = default_country

        self._items: List[CartLineItem] = []
        self._country: Optional[str] = default_country
        self._vat_number: Optional[str] = None
        self._state: CartState = initial_cart_state(default_country)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def snapshot(self) -> CartState:
        """Return a deep copy of the current cart state."""
        return self._state.model_copy(deep=True)

    @property
    def state(self) -> CartState:
        return self.snapshot()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_item(self, item: Union[CartItemInput, Dict[str, Any]]) -> CartState:
        """
        Add one unit of a variant.

        If the variant is already in the cart its quantity goes up by one and
        the incoming fields are ignored, so the price captured when the item
        was first added is kept.
        """
        if isinstance(item, dict):
            item = CartItemInput.model_validate(item)

        existing = self._find(item.variant_id)
        if existing is not None:
            existing.quantity += 1
        else:
            fields = item.model_dump(include=set(CartItemInput.model_fields))
            self._items.append(CartLineItem(**fields, quantity=1))

        logger.debug("Cart add: variant=%s count=%d", item.variant_id, self.item_count)
        return self._recalculate()

    def remove_item(self, variant_id: str) -> CartState:
        """Remove a variant from the cart (no-op if absent)."""
        self._items = [i for i in self._items if i.variant_id != variant_id]
        return self._recalculate()

    def update_quantity(self, variant_id: str, quantity: int) -> CartState:
        """
        Set a line's quantity in place.

        A quantity of zero or less removes the line instead.
        """
        if quantity <= 0:
            return self.remove_item(variant_id)

        existing = self._find(variant_id)
        if existing is not None:
            existing.quantity = int(quantity)
        return self._recalculate()

    def set_country(self, country: Optional[str]) -> CartState:
        """Set the customer country; None means the default market."""
        self._country = country
        return self._recalculate()

    def set_vat_number(self, vat_number: Optional[str]) -> CartState:
        """Set or clear the VAT number used for reverse-charge exemption."""
        self._vat_number = vat_number or None
        return self._recalculate()

    def clear(self) -> CartState:
        """Reset to the empty initial state."""
        self._items = []
        self._country = self._default_country
        self._vat_number = None
        self._state = initial_cart_state(self._default_country)
        return self.snapshot()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _find(self, variant_id: str) -> Optional[CartLineItem]:
        for item in self._items:
            if item.variant_id == variant_id:
                return item
        return None

    def _recalculate(self) -> CartState:
        effective_country = self._country or self._default_country

        subtotal = sum(
            (to_decimal(item.price) * item.quantity for item in self._items),
            ZERO,
        )

        if self._items:
            shipping_cost = to_decimal(self._calculate_shipping(subtotal, effective_country).cost)
        else:
            shipping_cost = ZERO

        tax = self._calculate_tax(subtotal + shipping_cost, effective_country, self._vat_number)
        total = subtotal + shipping_cost + to_decimal(tax.tax_amount)

        self._state = CartState(
            items=[item.model_copy() for item in self._items],
            subtotal=round_money(subtotal),
            shipping_cost=round_money(shipping_cost),
            tax_rate=tax.tax_rate,
            tax_amount=round_money(tax.tax_amount),
            total=round_money(total),
            customer_country=self._country,
            vat_number=self._vat_number,
            is_vat_exempt=tax.is_vat_exempt,
        )
        return self.snapshot()
