"""
Checkout as one sequenced transaction: validate, price, record, clear.

The order is created before the cart is cleared and handed back to the
caller, so the confirmation view never has to read it back from a store.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional

from db.models import CustomerInfo, Order
from stores.pricing import compute_totals
from utils.exceptions import EmptyCartError, ValidationError
from utils.logger import get_logger

if TYPE_CHECKING:
    from utils.state import AppState

_logger = get_logger(__name__)

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")


def validate_customer_info(
    full_name: str, shipping_address: str, phone_number: str
) -> Dict[str, str]:
    """
    Check the checkout form fields.

    Returns a mapping of field name to message, empty when the form is valid.
    """
    errors: Dict[str, str] = {}
    full_name = (full_name or "").strip()
    shipping_address = (shipping_address or "").strip()
    phone_number = (phone_number or "").strip()

    if len(full_name) < 2:
        errors["full_name"] = "Full name must be at least 2 characters"
    elif len(full_name) > 50:
        errors["full_name"] = "Full name must be less than 50 characters"
    elif not _NAME_RE.match(full_name):
        errors["full_name"] = "Full name can only contain letters and spaces"

    if len(shipping_address) < 10:
        errors["shipping_address"] = "Shipping address must be at least 10 characters"
    elif len(shipping_address) > 200:
        errors["shipping_address"] = "Shipping address must be less than 200 characters"

    if len(phone_number) < 10:
        errors["phone_number"] = "Phone number must be at least 10 digits"
    elif len(phone_number) > 15:
        errors["phone_number"] = "Phone number must be less than 15 digits"
    elif not _PHONE_RE.match(phone_number):
        errors["phone_number"] = "Please enter a valid phone number"

    return errors


def build_customer_info(
    full_name: str, shipping_address: str, phone_number: str
) -> CustomerInfo:
    """Validate and normalize form input; raises ValidationError."""
    errors = validate_customer_info(full_name, shipping_address, phone_number)
    if errors:
        raise ValidationError(errors)
    return CustomerInfo(
        full_name=full_name.strip(),
        shipping_address=shipping_address.strip(),
        phone_number=phone_number.strip(),
    )


def place_order(
    state: "AppState", customer_info: CustomerInfo, now: Optional[datetime] = None
) -> Order:
    """
    Turn the current cart into an order and empty the cart.

    Raises ValidationError for bad customer info and EmptyCartError when the
    cart has no items; in both cases nothing is changed.
    """
    errors = validate_customer_info(
        customer_info.full_name,
        customer_info.shipping_address,
        customer_info.phone_number,
    )
    if errors:
        raise ValidationError(errors)

    snapshot = state.cart.snapshot()
    if not snapshot.items:
        raise EmptyCartError()

    totals = compute_totals(snapshot)
    order = state.orders.create_order(
        customer_info, snapshot.items, totals.grand_total, now=now
    )
    state.cart.clear()
    _logger.info(f"Checkout complete for {order.id}, cart cleared.")
    return order
