from typing import Dict, Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.models import Order
from stores.checkout import build_customer_info, place_order, validate_customer_info
from stores.pricing import compute_totals
from utils.exceptions import EmptyCartError, ValidationError
from utils.logger import get_logger
from utils.pure import format_price, generate_markdown_table, truncate_text
from views.modal_dialog import DialogModal

_logger = get_logger(__name__)

FORM_FIELDS = {
    "full_name": ("Full Name", "Jane Doe"),
    "shipping_address": ("Shipping Address", "123 Main St, Anytown, ST 00000"),
    "phone_number": ("Phone Number", "(555) 123-4567"),
}


class CheckoutModal(ModalScreen[Optional[Order]]):
    """
    Order summary plus the customer info form.
    Dismisses with the placed Order, or None if the customer backed out.
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            with VerticalScroll(id="div-checkout-form"):
                for field, (label, placeholder) in FORM_FIELDS.items():
                    yield Label(label)
                    yield Input(placeholder=placeholder, id=f"input-{field}")
                    yield Label("", id=f"error-{field}", classes="field-error")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Complete Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        cart = self.app.state.cart
        totals = compute_totals(cart.snapshot())
        headers = ["Product", "Unit Price", "Quantity", "Line Total"]
        rows = [
            [
                truncate_text(item.product.title, 40),
                format_price(item.product.price),
                item.quantity,
                format_price(item.line_total),
            ]
            for item in cart.items
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            headers, rows, ["l", "r", "c", "r"]
        )
        shipping = "FREE" if totals.free_shipping else format_price(totals.shipping)
        md += (
            f"\n\n**Subtotal:** {format_price(totals.subtotal)}  \n"
            f"**Shipping:** {shipping}  \n"
            f"**Tax:** {format_price(totals.tax)}  \n"
            f"**Total:** {format_price(totals.grand_total)}"
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-full_name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def _form_values(self) -> Dict[str, str]:
        return {
            field: self.query_one(f"#input-{field}", Input).value
            for field in FORM_FIELDS
        }

    def _show_errors(self, errors: Dict[str, str]) -> None:
        for field in FORM_FIELDS:
            message = errors.get(field, "")
            self.query_one(f"#error-{field}", Label).update(message)
            self.query_one(f"#input-{field}", Input).set_class(
                bool(message), "-invalid"
            )
        for field in FORM_FIELDS:
            if field in errors:
                self.query_one(f"#input-{field}", Input).focus()
                break

    @on(Button.Pressed, "#btn-submit")
    @on(Input.Submitted)
    @work(exclusive=True)
    async def handle_submit(self):
        values = self._form_values()
        errors = validate_customer_info(**values)
        self._show_errors(errors)
        if errors:
            return

        totals = compute_totals(self.app.state.cart.snapshot())
        if not await self.app.push_screen_wait(
            DialogModal(
                "Place this order?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
                detail=f"You will be charged {format_price(totals.grand_total)}.",
            )
        ):
            return

        try:
            order = place_order(self.app.state, build_customer_info(**values))
        except ValidationError as e:
            self._show_errors(e.errors)
            return
        except EmptyCartError:
            _logger.warning("Checkout submitted with an empty cart.")
            self.notify("Your cart is empty.", severity="warning")
            self.dismiss(None)
            return

        self.notify(
            "Order placed successfully!",
            title="You will receive a confirmation email shortly.",
        )
        self.dismiss(order)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(None)
