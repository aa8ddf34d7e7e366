from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Input, Label, Markdown, Rule

from db.models import CartItem
from stores.pricing import compute_totals
from utils.messages import CartChangedMessage, ModeSwitchedMessage, NewOrderMessage
from utils.pure import format_price, generate_markdown_table, truncate_text
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal
from views.modal_order_confirm import OrderConfirmModal


class CartItemQtyMessage(Message):
    bubble = True

    def __init__(self, product_id: int, quantity: int) -> None:
        super().__init__()
        self.product_id = product_id
        self.quantity = quantity


class CartItemRemoveMessage(Message):
    bubble = True

    def __init__(self, product_id: int) -> None:
        super().__init__()
        self.product_id = product_id


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartItem):
        super().__init__()
        self.item = item

    def compose(self):
        prod = self.item.product
        with Container(classes="div-item"):
            yield Label(truncate_text(prod.title, 40), classes="label-item-name")
            yield Label(format_price(prod.price), classes="label-item-price")
            yield Label(
                format_price(self.item.line_total), classes="label-item-total"
            )
        with Container(classes="div-actions"):
            yield Button("-", classes="btn-qty-sub")
            yield Input(
                str(self.item.quantity), type="integer", classes="input-item-qty"
            )
            yield Button("+", classes="btn-qty-add")
            yield Button("Remove", classes="btn-item-remove", variant="error")

    @on(Button.Pressed, ".btn-qty-sub")
    def handle_sub(self) -> None:
        self.post_message(
            CartItemQtyMessage(self.item.product.id, self.item.quantity - 1)
        )

    @on(Button.Pressed, ".btn-qty-add")
    def handle_add(self) -> None:
        self.post_message(
            CartItemQtyMessage(self.item.product.id, self.item.quantity + 1)
        )

    @on(Input.Submitted, ".input-item-qty")
    def handle_qty_input(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        if not value.lstrip("-").isdigit():
            event.input.value = str(self.item.quantity)
            return
        self.post_message(CartItemQtyMessage(self.item.product.id, int(value)))

    @on(Button.Pressed, ".btn-item-remove")
    def handle_remove(self) -> None:
        self.post_message(CartItemRemoveMessage(self.item.product.id))


class CartScreen(BaseScreen):
    """
    cart line items, order summary and checkout
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Markdown("", id="md-cart-summary")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Continue Shopping", id="btn-continue")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True)  # must be exclusive, two rebuilds would mount duplicates
    async def handle_cart_change(self):
        cart = self.app.state.cart
        cart_items = cart.items

        content = self.query_one("#vertscroll-content")
        content_items = [c.item for c in content.children]
        if content_items != cart_items:
            await content.remove_children()
            await content.mount_all([CartItemWidget(item) for item in cart_items])

        if not cart_items:
            content.add_class("no-items")
            await self.query_one("#md-cart-summary", Markdown).update(
                "### Your cart is empty\n\nBrowse products to add something."
            )
        else:
            content.remove_class("no-items")
            await self.query_one("#md-cart-summary", Markdown).update(
                self._summary_markdown()
            )
        self.query_one("#btn-checkout", Button).disabled = not cart_items
        self.query_one("#btn-clear-cart", Button).disabled = not cart_items

    def _summary_markdown(self) -> str:
        cart = self.app.state.cart
        totals = compute_totals(cart.snapshot())
        rows = [
            [f"Items ({cart.item_count})", format_price(totals.subtotal)],
            [
                "Shipping",
                "FREE" if totals.free_shipping else format_price(totals.shipping),
            ],
            ["Tax", format_price(totals.tax)],
            ["**Total**", f"**{format_price(totals.grand_total)}**"],
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            ["Summary", "Amount"], rows, ["l", "r"]
        )
        if totals.free_shipping_remaining > 0:
            md += (
                f"\n\nAdd {format_price(totals.free_shipping_remaining)} more "
                "for free shipping!"
            )
        return md

    @on(CartItemQtyMessage)
    def handle_item_qty(self, message: CartItemQtyMessage) -> None:
        message.stop()
        self.app.state.cart.set_quantity(message.product_id, message.quantity)
        if message.quantity <= 0:
            self.notify("Item removed from cart.")
        self.post_message(CartChangedMessage("update", message.product_id))

    @on(CartItemRemoveMessage)
    @work()
    async def handle_item_remove(self, message: CartItemRemoveMessage) -> None:
        message.stop()
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )
        if remove_confirmed:
            self.app.state.cart.remove_item(message.product_id)
            self.post_message(CartChangedMessage("remove", message.product_id))
            self.notify("Item removed from cart.", severity="information")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                detail=f"{self.app.state.cart.item_count} items will be removed.",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            self.app.state.cart.clear()
            self.post_message(CartChangedMessage("clear"))

    @on(Button.Pressed, "#btn-continue")
    async def handle_continue(self) -> None:
        self.post_message(ModeSwitchedMessage(self.app.current_mode, "catalog"))
        await self.app.switch_mode("catalog")

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        order = await self.app.push_screen_wait(CheckoutModal())
        if order is None:
            return
        # the checkout already emptied the cart; show the order we got back
        self.post_message(CartChangedMessage("checkout"))
        self.post_message(NewOrderMessage(order.id))
        next_mode = await self.app.push_screen_wait(OrderConfirmModal(order))
        if next_mode and next_mode != self.app.current_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, next_mode))
            await self.app.switch_mode(next_mode)
