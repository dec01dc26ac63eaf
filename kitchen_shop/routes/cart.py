"""
Cart Routes for Kitchen Shop
============================

Endpoints behind the cart drawer. Every mutation runs inside
cart_session(), which holds that session's lock while the cart is changed
and its totals recomputed, and returns the new cart state.

Endpoints:
----------
- GET    /cart/{session_id}: Current cart
- POST   /cart/{session_id}/items: Add one unit of a variant
- PATCH  /cart/{session_id}/items/{variant_id}: Set quantity (0 removes)
- DELETE /cart/{session_id}/items/{variant_id}: Remove a variant
- PUT    /cart/{session_id}/country: Set customer country
- PUT    /cart/{session_id}/vat-number: Set or clear VAT number
- DELETE /cart/{session_id}: Empty the cart

The session id is an opaque token issued by the storefront; carts are
in-memory only.
"""

import logging

from fastapi import APIRouter, HTTPException

from ..schemas.cart import (
    CartCountryUpdate,
    CartItemInput,
    CartQuantityUpdate,
    CartState,
    CartVatNumberUpdate,
)
from ..services.cart_sessions import cart_session
from ..services.vat import validate_vat_number

logger = logging.getLogger(__name__)

cart_router = APIRouter(prefix="/cart", tags=["Cart"])


@cart_router.get("/{session_id}", response_model=CartState)
def get_cart(session_id: str) -> CartState:
    """Return the session's cart (an empty cart if none exists yet)."""
    with cart_session(session_id) as cart:
        return cart.snapshot()


@cart_router.post("/{session_id}/items", response_model=CartState)
def add_cart_item(session_id: str, item: CartItemInput) -> CartState:
    with cart_session(session_id) as cart:
        return cart.add_item(item)


@cart_router.patch("/{session_id}/items/{variant_id}", response_model=CartState)
def update_cart_item(session_id: str, variant_id: str, body: CartQuantityUpdate) -> CartState:
    with cart_session(session_id) as cart:
        return cart.update_quantity(variant_id, body.quantity)


@cart_router.delete("/{session_id}/items/{variant_id}", response_model=CartState)
def remove_cart_item(session_id: str, variant_id: str) -> CartState:
    with cart_session(session_id) as cart:
        return cart.remove_item(variant_id)


@cart_router.put("/{session_id}/country", response_model=CartState)
def set_cart_country(session_id: str, body: CartCountryUpdate) -> CartState:
    """Set the destination country; null resets to the home market."""
    country = body.country.strip().upper() if body.country else None
    with cart_session(session_id) as cart:
        return cart.set_country(country)


@cart_router.put("/{session_id}/vat-number", response_model=CartState)
def set_cart_vat_number(session_id: str, body: CartVatNumberUpdate) -> CartState:
    """
    Set or clear the customer's VAT number.

    A number that fails the local format check is rejected with 400 and the
    cart is left unchanged.
    """
    vat_number = body.vat_number.strip() if body.vat_number else None
    if vat_number:
        result = validate_vat_number(vat_number)
        if not result.is_valid:
            raise HTTPException(status_code=400, detail=result.error)

    with cart_session(session_id) as cart:
        return cart.set_vat_number(vat_number)


@cart_router.delete("/{session_id}", response_model=CartState)
def clear_cart(session_id: str) -> CartState:
    with cart_session(session_id) as cart:
        return cart.clear()
