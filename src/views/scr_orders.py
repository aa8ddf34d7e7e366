from math import ceil
from typing import List, Optional

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Label, Markdown, MarkdownViewer

from db.models import Order
from utils.messages import ModeSwitchedMessage, NewOrderMessage
from utils.pure import format_price, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_order_confirm import order_markdown

ORDERS_PER_PAGE = 5


class OrdersScreen(BaseScreen):
    """
    Order history, newest first, 5 per page with Prev/Next.

    Layout:
    - summary stats on top
    - markdown detail of the highlighted order
    - orders table below
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self) -> None:
        super().__init__()
        self._orders: List[Order] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Markdown("", id="md-order-summary")
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Shop Now", id="btn-shop")
            yield Button("<", id="btn-prev")
            yield Label("1 / 1", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order ID", "Customer", "Date", "Items", "Total")
        self.handle_refresh()

    def action_noop(self) -> None:
        pass

    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(NewOrderMessage)
    def handle_refresh(self) -> None:
        self.page_idx = 1
        self._load_orders()

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._render_detail(self.app.state.orders.get(event.row_key.value))

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1
            self._load_orders()

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1
            self._load_orders()

    @on(Button.Pressed, "#btn-shop")
    async def handle_shop(self) -> None:
        self.post_message(ModeSwitchedMessage(self.app.current_mode, "catalog"))
        await self.app.switch_mode("catalog")

    def _load_orders(self) -> None:
        store = self.app.state.orders
        all_orders = store.orders
        self.page_cnt = max(ceil(len(all_orders) / ORDERS_PER_PAGE), 1)
        self.page_idx = max(1, min(self.page_idx, self.page_cnt))
        start = (self.page_idx - 1) * ORDERS_PER_PAGE
        self._orders = all_orders[start : start + ORDERS_PER_PAGE]

        summary = store.summary()
        self.query_one("#md-order-summary", Markdown).update(
            generate_markdown_table(
                ["Total Orders", "Total Spent", "Items Purchased"],
                [
                    [
                        summary.total_orders,
                        format_price(summary.total_spent),
                        summary.total_items,
                    ]
                ],
                ["c", "c", "c"],
            )
        )

        table = self.query_one(DataTable)
        table.clear()
        for o in self._orders:
            table.add_row(
                o.id,
                o.customer_info.full_name,
                f"{o.order_date:%Y-%m-%d %H:%M}",
                sum(i.quantity for i in o.items),
                format_price(o.total),
                key=o.id,
            )

        self.query_one("#label-page", Label).update(
            f"{self.page_idx} / {self.page_cnt}"
        )
        self.query_one("#btn-prev", Button).disabled = self.page_idx <= 1
        self.query_one("#btn-next", Button).disabled = self.page_idx >= self.page_cnt

        if self._orders:
            table.move_cursor(row=0)
            self._render_detail(self._orders[0])
        else:
            self._render_detail(None)

    def _render_detail(self, order: Optional[Order]) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            if self.app.state.orders.latest is None:
                md = "### No orders yet\n\nYour placed orders will show up here."
            else:
                md = "### Select an order to view its details."
        else:
            md = order_markdown(order, f"### Order {order.id}")
        viewer.document.update(md)
