from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from db.models import Order
from utils.pure import format_price, generate_markdown_table, truncate_text


def order_markdown(order: Order, heading: str) -> str:
    info = order.customer_info
    header = (
        f"{heading}\n\n"
        f"**Order ID:** {order.id}  \n"
        f"**Date:** {order.order_date:%b %d, %Y %H:%M}  \n"
        f"**Status:** {order.status.title()}  \n"
        f"**Ship To:** {info.full_name}, {info.shipping_address}  \n"
        f"**Phone:** {info.phone_number}\n\n"
    )
    rows = [
        [
            truncate_text(item.product.title, 40),
            item.product.category,
            item.quantity,
            format_price(item.product.price),
            format_price(item.line_total),
        ]
        for item in order.items
    ]
    table = generate_markdown_table(
        ["Product", "Category", "Qty", "Unit Price", "Line Total"],
        rows,
        ["l", "l", "r", "r", "r"],
    )
    footer = f"\n\n**Total Paid:** {format_price(order.total)}"
    return header + table + footer


class OrderConfirmModal(ModalScreen[str]):
    """
    Thank-you view for an order that was just placed.
    Dismisses with the mode to go to next.
    """

    def __init__(self, order: Order):
        super().__init__()
        self.order = order

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer(
                order_markdown(self.order, "## Thank you for your order!"),
                show_table_of_contents=False,
            )
            with Horizontal():
                yield Button("View Orders", id="btn-orders")
                yield Button("Continue Shopping", id="btn-shop", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#btn-shop").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss("catalog")

    @on(Button.Pressed, "#btn-orders")
    def handle_orders(self) -> None:
        self.dismiss("orders")

    @on(Button.Pressed, "#btn-shop")
    def handle_shop(self) -> None:
        self.dismiss("catalog")
