from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import db.persist as persist
from catalog.client import CatalogClient
from stores.auth import AuthStore
from stores.cart import CartStore
from stores.orders import OrderStore
from stores.users import UserStore
from utils.config import Config
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass
class AppState:
    """
    Application state container, built once by the app and handed to screens.

    Fields:
      - cart: current session cart (persisted)
      - orders: order history, most recent first (persisted)
      - auth: demo admin session (persisted)
      - users: admin demo user list (re-seeded every start)
      - catalog: product catalog client (re-fetched every start)

    The stores never touch storage themselves; the hosting shell calls
    ``save`` after each cart, order or auth transition.
    """

    cart: CartStore = field(default_factory=CartStore)
    orders: OrderStore = field(default_factory=OrderStore)
    auth: AuthStore = field(default_factory=AuthStore)
    users: UserStore = field(default_factory=UserStore)
    catalog: Optional[CatalogClient] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "version": Config.STATE_VERSION,
            "cart": persist.cart_items_to_list(self.cart.items),
            "orders": [persist.order_to_dict(o) for o in self.orders.orders],
            "auth": persist.session_to_dict(self.auth.user),
        }

    def restore(self, blob: Optional[Dict[str, Any]]) -> bool:
        """
        Replace cart, orders and auth with the contents of ``blob``.

        A blob that cannot be decoded is ignored and the current state kept.
        Returns True if the blob was applied.
        """
        if not blob:
            return False
        if blob.get("version") != Config.STATE_VERSION:
            _logger.warning(f"Ignoring state with version {blob.get('version')}.")
            return False
        try:
            cart = CartStore(persist.cart_items_from_list(blob.get("cart") or []))
            orders = OrderStore(
                persist.order_from_dict(o) for o in blob.get("orders") or []
            )
            user = persist.session_from_dict(blob.get("auth"))
        except (
            KeyError, TypeError, ValueError, AttributeError, ArithmeticError
        ) as e:
            _logger.warning(f"Ignoring unreadable saved state: {e}")
            return False

        self.cart = cart
        self.orders = orders
        self.auth = AuthStore(self.auth.backend, user=user)
        _logger.info(
            f"Restored {len(cart.items)} cart lines and {len(orders)} orders."
        )
        return True

    async def load(self) -> bool:
        return self.restore(await persist.load_state())

    async def save(self) -> None:
        await persist.save_state(self.snapshot())

