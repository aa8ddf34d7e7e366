"""
Order history, most recent first.

Orders are immutable once created: line items are frozen value objects, so
later cart changes cannot reach into a stored order.
"""
from __future__ import annotations

import random
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from db.models import CartItem, CustomerInfo, Order
from utils.exceptions import EmptyCartError
from utils.logger import get_logger
from utils.pure import round_money

_logger = get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_order_id(now: Optional[datetime] = None) -> str:
    """``ORD-<epoch millis>-<9 random chars>``, unique on a best-effort basis."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"ORD-{millis}-{suffix}"


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int
    total_spent: Decimal
    total_items: int


class OrderStore:
    def __init__(self, orders: Optional[Iterable[Order]] = None):
        self._orders: List[Order] = list(orders or ())

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def latest(self) -> Optional[Order]:
        return self._orders[0] if self._orders else None

    def __len__(self) -> int:
        return len(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def create_order(
        self,
        customer_info: CustomerInfo,
        items: Iterable[CartItem],
        total: Decimal,
        now: Optional[datetime] = None,
    ) -> Order:
        """
        Record a new order at the head of the history.

        ``total`` is the final charged amount. Raises EmptyCartError when
        ``items`` is empty.
        """
        items = tuple(items)
        if not items:
            raise EmptyCartError()

        now = now or datetime.now(timezone.utc)
        order = Order(
            id=generate_order_id(now),
            customer_info=customer_info,
            items=items,
            total=round_money(total),
            order_date=now,
        )
        self._orders.insert(0, order)
        _logger.info(f"Order {order.id} created, total {order.total}.")
        return order

    def summary(self) -> OrderSummary:
        return OrderSummary(
            total_orders=len(self._orders),
            total_spent=round_money(
                sum((o.total for o in self._orders), Decimal("0"))
            ),
            total_items=sum(len(o.items) for o in self._orders),
        )
