"""
Session shopping cart.

Line items keep insertion order and there is never more than one per product
id. ``item_count`` and ``total`` are recomputed after every mutation.
"""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional

from db.models import CartItem, CartSnapshot, Product
from utils.pure import round_money


def calculate_totals(items: Iterable[CartItem]):
    """Return ``(item_count, total)`` for the given line items."""
    items = list(items)
    item_count = sum(item.quantity for item in items)
    total = round_money(sum((item.line_total for item in items), Decimal("0")))
    return item_count, total


class CartStore:
    def __init__(self, items: Optional[Iterable[CartItem]] = None):
        self._items: List[CartItem] = []
        self.item_count = 0
        self.total = Decimal("0.00")
        for item in items or ():
            self._restore_item(item)
        self._recompute()

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def get_item(self, product_id: int) -> Optional[CartItem]:
        idx = self._index(product_id)
        return self._items[idx] if idx is not None else None

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            items=tuple(self._items), item_count=self.item_count, total=self.total
        )

    # ---------------------------
    # Mutations
    # ---------------------------

    def add_item(self, product: Product) -> CartItem:
        """Add one unit of ``product``, appending a new line if needed."""
        idx = self._index(product.id)
        if idx is None:
            item = CartItem(product=product, quantity=1)
            self._items.append(item)
        else:
            item = replace(self._items[idx], quantity=self._items[idx].quantity + 1)
            self._items[idx] = item
        self._recompute()
        return item

    def remove_item(self, product_id: int) -> None:
        self._items = [i for i in self._items if i.product.id != product_id]
        self._recompute()

    def set_quantity(self, product_id: int, quantity: int) -> None:
        """
        Set a line's quantity; zero or less removes the line. Unknown ids and
        non-numeric quantities are ignored.
        """
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            return
        if quantity <= 0:
            self.remove_item(product_id)
            return
        idx = self._index(product_id)
        if idx is not None:
            self._items[idx] = replace(self._items[idx], quantity=quantity)
        self._recompute()

    def clear(self) -> None:
        self._items = []
        self._recompute()

    # ---------------------------
    # Internals
    # ---------------------------

    def _index(self, product_id: int) -> Optional[int]:
        for i, item in enumerate(self._items):
            if item.product.id == product_id:
                return i
        return None

    def _restore_item(self, item: CartItem) -> None:
        # persisted data may hold duplicates or bad quantities, fold them
        if item.quantity <= 0:
            return
        idx = self._index(item.product.id)
        if idx is None:
            self._items.append(item)
        else:
            self._items[idx] = replace(
                self._items[idx], quantity=self._items[idx].quantity + item.quantity
            )

    def _recompute(self) -> None:
        self.item_count, self.total = calculate_totals(self._items)
