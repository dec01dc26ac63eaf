"""
Cart Schemas for Kitchen Shop
=============================

Pydantic models for the shopping cart: the line items a customer adds from
the shop pages and the derived cart totals returned after every change.

All prices are in GBP, exclusive of VAT. Carts are session-only and are
never written to the database; they become an order at checkout.

Invariants:
-----------
- subtotal is always recomputed as the sum of price x quantity
- total == subtotal + shipping_cost + tax_amount (2 decimal places)
- variant_id is unique within a cart
"""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..money import round_money


class CartItemInput(BaseModel):
    """
    A product variant as offered on the shop page (no quantity yet).

    Attributes:
        product_id: Catalog product identifier
        product_name: Display name of the product
        product_image: Image URL or CMS asset reference
        variant_id: Variant identifier, unique within a cart
        variant_name: Display name of the variant (e.g. "500 labels")
        price: Unit price in GBP, ex VAT
        price_per_label: Optional per-label price shown for label bundles
        price_per_probe: Optional per-probe price shown for probe kits
        system_category: Optional product family (e.g. "food-label-system")
        product_type: Optional product type tag
    """
    product_id: str
    product_name: str
    product_image: str = ""
    variant_id: str = Field(min_length=1)
    variant_name: str
    price: Decimal = Field(ge=0)
    price_per_label: Optional[Decimal] = None
    price_per_probe: Optional[Decimal] = None
    system_category: Optional[str] = None
    product_type: Optional[str] = None


class CartLineItem(CartItemInput):
    """A variant in the cart with its quantity."""
    quantity: int = Field(default=1, ge=1)

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return round_money(self.price * self.quantity)


class CartState(BaseModel):
    """
    Snapshot of a cart and its derived totals.

    Consumers always receive a copy; changing it does not change the cart.
    """
    model_config = ConfigDict(validate_assignment=True)

    items: List[CartLineItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    shipping_cost: Decimal = Decimal("0.00")
    tax_rate: Decimal = Decimal("0.20")
    tax_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    currency: Literal["GBP"] = "GBP"
    customer_country: Optional[str] = "GB"
    vat_number: Optional[str] = None
    is_vat_exempt: bool = False

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def is_empty(self) -> bool:
        return not self.items


class CartQuantityUpdate(BaseModel):
    """Request body for changing a line quantity (0 or less removes the line)."""
    quantity: int


class CartCountryUpdate(BaseModel):
    """Request body for setting the customer's country (null means default market)."""
    country: Optional[str] = Field(default=None, max_length=2)


class CartVatNumberUpdate(BaseModel):
    """Request body for setting or clearing the customer's VAT number."""
    vat_number: Optional[str] = Field(default=None, max_length=32)
