from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from db.models import CartSnapshot
from utils.config import Config
from utils.pure import round_money


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    grand_total: Decimal
    free_shipping_remaining: Decimal

    @property
    def free_shipping(self) -> bool:
        return self.shipping == 0


def compute_totals(
    cart: CartSnapshot,
    *,
    free_shipping_threshold: Decimal = Config.FREE_SHIPPING_THRESHOLD,
    shipping_fee: Decimal = Config.SHIPPING_FEE,
    tax_rate: Decimal = Config.TAX_RATE,
) -> Totals:
    """
    Price a cart snapshot.

    Shipping is free only when the subtotal is strictly above the threshold.
    Tax is reported rounded to cents, while the grand total is rounded once
    from the unrounded sum.
    """
    subtotal = round_money(cart.total)
    shipping = Decimal("0.00") if subtotal > free_shipping_threshold else shipping_fee
    raw_tax = subtotal * tax_rate
    remaining = (
        free_shipping_threshold - subtotal
        if subtotal < free_shipping_threshold
        else Decimal("0")
    )
    return Totals(
        subtotal=subtotal,
        shipping=round_money(shipping),
        tax=round_money(raw_tax),
        grand_total=round_money(subtotal + shipping + raw_tax),
        free_shipping_remaining=round_money(remaining),
    )
