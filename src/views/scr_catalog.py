from math import ceil
from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Input, Label, Select

from catalog.client import search_products
from db.models import Product
from utils.config import Config
from utils.exceptions import CatalogError
from utils.logger import get_logger
from utils.messages import CartChangedMessage
from utils.pure import format_price, truncate_text
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

_logger = get_logger(__name__)


class CatalogScreen(BaseScreen):
    """
    Product browsing: search, category filter, paginated table.
    Enter opens the product detail, "a" adds the highlighted product to the cart.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
        Binding("a", "add_selected", "Add to Cart", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self):
        super().__init__()
        self._products: List[Product] = []
        self._visible: List[Product] = []
        self._query = ""
        self._category: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder="Search products...")
            yield Select([], prompt="All categories", id="select-category")
        with Horizontal(id="div-catalog-error"):
            yield Label("", id="label-catalog-error")
            yield Button("Retry", id="btn-retry", variant="warning")
        yield Label("Loading products...", id="label-catalog-status")
        yield DataTable(id="table-products")
        with Horizontal(id="hort-table-control"):
            yield Button("<", id="btn-prev")
            yield Label("1 / 1", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Product", "Category", "Price", "Rating")

        self.query_one("#div-catalog-error").display = False
        self.query_one("#input-search").focus()
        self.load_catalog()

    def action_noop(self) -> None:
        pass

    def action_reload(self) -> None:
        self.load_catalog(force=True)

    @on(Button.Pressed, "#btn-retry")
    def handle_retry(self) -> None:
        self.load_catalog(force=True)

    @work(exclusive=True, group="catalog")
    async def load_catalog(self, force: bool = False) -> None:
        catalog = self.app.state.catalog
        self.query_one("#label-catalog-status", Label).update("Loading products...")
        self.query_one("#div-catalog-error").display = False
        try:
            products = await catalog.list_products(force=force)
        except CatalogError as e:
            _logger.error(f"Catalog load failed: {e}")
            if not self.is_mounted:
                return
            self.query_one("#label-catalog-error", Label).update(
                "Could not load products. Please try again."
            )
            self.query_one("#div-catalog-error").display = True
            self.query_one("#label-catalog-status", Label).update("")
            return

        try:
            categories = await catalog.list_categories()
        except CatalogError as e:
            _logger.warning(f"Category list unavailable, deriving locally: {e}")
            categories = sorted({p.category for p in products})

        # the screen may have gone away while we were waiting
        if not self.is_mounted:
            return
        self._products = products
        self.query_one("#select-category", Select).set_options(
            [(c.title(), c) for c in categories]
        )
        self.page_idx = 1
        self.render_page()

    def render_page(self) -> None:
        matched = search_products(self._products, self._query, self._category)
        self.page_cnt = max(ceil(len(matched) / Config.PRODUCTS_PER_PAGE), 1)
        page = max(1, min(self.page_idx, self.page_cnt))
        start = (page - 1) * Config.PRODUCTS_PER_PAGE
        self._visible = matched[start : start + Config.PRODUCTS_PER_PAGE]

        table = self.query_one(DataTable)
        table.clear()
        for p in self._visible:
            table.add_row(
                p.id,
                truncate_text(p.title, 48),
                p.category,
                format_price(p.price),
                f"{p.rating.rate:.1f} ({p.rating.count})",
                key=str(p.id),
            )

        self.query_one("#label-page", Label).update(f"{page} / {self.page_cnt}")
        self.query_one("#btn-prev", Button).disabled = page <= 1
        self.query_one("#btn-next", Button).disabled = page >= self.page_cnt
        if matched:
            status = f"{len(matched)} of {len(self._products)} products"
        elif self._products:
            status = "No products match your search."
        else:
            status = "No products available."
        self.query_one("#label-catalog-status", Label).update(status)

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self._query = message.value
        self.page_idx = 1
        self.render_page()

    @on(Select.Changed, "#select-category")
    def handle_category(self, message: Select.Changed) -> None:
        self._category = message.value if isinstance(message.value, str) else None
        self.page_idx = 1
        self.render_page()

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1
            self.render_page()

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1
            self.render_page()

    def _highlighted_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row = table.cursor_row
        if row is None or row >= len(self._visible):
            return None
        return self._visible[row]

    @on(DataTable.RowSelected, "#table-products")
    @work()
    async def handle_view_product(self, event: DataTable.RowSelected) -> None:
        pid = int(event.row_key.value)
        if await self.app.push_screen_wait(ProdDetailModal(pid)):
            await self.handle_sidebar_refresh()

    def action_add_selected(self) -> None:
        product = self._highlighted_product()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return
        item = self.app.state.cart.add_item(product)
        self.post_message(CartChangedMessage("add", product.id))
        self.notify(f"{truncate_text(product.title, 30)} added (x{item.quantity}).")
