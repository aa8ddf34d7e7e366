import asyncio

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import LoadingIndicator

from catalog.client import CatalogClient
from utils.exceptions import PersistenceError
from utils.logger import get_logger
from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    NewOrderMessage,
    QuitRequestedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import AppState
from views.scr_admin import AdminScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_orders import OrdersScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "orders": OrdersScreen,
        "admin": AdminScreen,
    }

    SHOP_MODES = {
        "catalog": "Browse Products",
        "cart": "Cart",
        "orders": "Order History",
    }
    ADMIN_MODES = {"admin": "Admin Dashboard"}

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/catalog.tcss",
        "styles/cart.tcss",
        "styles/orders.tcss",
        "styles/admin.tcss",
    ]

    state: AppState

    def __init__(self, state: AppState | None = None):
        super().__init__()
        self.state = state or AppState(catalog=CatalogClient())
        self._save_lock = asyncio.Lock()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def main_flow(self):
        try:
            await self.state.load()
        except PersistenceError as e:
            _logger.error(f"Could not load saved state: {e}")
            self.notify("Saved cart and orders could not be loaded.", severity="error")
        self.post_message(ModeSwitchedMessage("", "catalog"))
        await self.switch_mode("catalog")

    # every cart, order and auth transition ends up here
    @on(CartChangedMessage)
    @on(NewOrderMessage)
    @on(UserLoginMessage)
    @on(UserLogoutMessage)
    def handle_state_changed(self, message: Message) -> None:
        if isinstance(message, CartChangedMessage):
            _logger.debug(f"Cart {message.action} ({message.product_id}), saving.")
        self.save_state()

    @work(group="persist")
    async def save_state(self) -> None:
        # saves run one at a time, each writes the state as of its turn
        try:
            async with self._save_lock:
                await self.state.save()
        except PersistenceError as e:
            _logger.error(f"Could not save state: {e}")
            self.notify("Could not save your cart and orders.", severity="error")

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        try:
            async with self._save_lock:
                await self.state.save()
        except PersistenceError as e:
            _logger.error(f"Could not save state on exit: {e}")
        if self.state.catalog is not None:
            await self.state.catalog.aclose()
        self.exit()


if __name__ == "__main__":
    app = StorefrontApp()
    app.run()
