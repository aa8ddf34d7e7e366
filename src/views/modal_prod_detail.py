from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, MarkdownViewer

from db.models import Product
from utils.exceptions import CatalogError
from utils.logger import get_logger
from utils.messages import CartChangedMessage
from utils.pure import format_price, generate_markdown_table

_logger = get_logger(__name__)


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail with an add-to-cart button.
    Returns True if the cart changed while the modal was open.
    """

    def __init__(self, product_id: int):
        super().__init__()
        self._pid = product_id
        self._prod: Optional[Product] = None
        self._cart_changed = False

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer(
                "Loading product...", id="md-prod", show_table_of_contents=False
            )
            yield Label("", id="label-in-cart")
            with Horizontal():
                yield Button("Close", id="btn-quit")
                yield Button(
                    "Add to Cart", id="btn-addcart", variant="primary", disabled=True
                )

    def on_mount(self) -> None:
        self.load_product()

    @work(exclusive=True)
    async def load_product(self) -> None:
        catalog = self.app.state.catalog
        try:
            prod = await catalog.get_product(self._pid)
        except CatalogError as e:
            _logger.warning(f"Product {self._pid} fetch failed, using cache: {e}")
            cached = [p for p in catalog.cached_products if p.id == self._pid]
            if not self.is_mounted:
                return
            if not cached:
                self.notify(
                    "Could not load product. Please try again.", severity="error"
                )
                self.dismiss(False)
                return
            prod = cached[0]

        if not self.is_mounted:
            return
        if prod is None:
            self.notify("Product not found.", severity="warning")
            self.dismiss(False)
            return

        self._prod = prod
        rows = [
            ["Price", format_price(prod.price)],
            ["Category", prod.category],
            ["Rating", f"{prod.rating.rate:.1f} / 5 ({prod.rating.count} reviews)"],
        ]
        md = (
            f"## {prod.title}\n\n"
            + generate_markdown_table(["Detail", "Value"], rows, ["l", "l"])
            + f"\n\n{prod.description}\n"
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#btn-addcart", Button).disabled = False
        self.refresh_in_cart()

    def refresh_in_cart(self) -> None:
        item = self.app.state.cart.get_item(self._pid)
        text = f"In cart: {item.quantity}" if item else "Not in cart yet"
        self.query_one("#label-in-cart", Label).update(text)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(self._cart_changed)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(self._cart_changed)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        if self._prod is None:
            return
        self.app.state.cart.add_item(self._prod)
        self._cart_changed = True
        self.app.post_message(CartChangedMessage("add", self._prod.id))
        self.app.notify("Item added to cart successfully.")
        self.refresh_in_cart()
