from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Markdown, Select

from db.models import USER_ROLES, User
from stores.users import ROLE_FILTER_ALL
from utils.exceptions import ValidationError
from utils.logger import get_logger
from utils.messages import NewOrderMessage, UserLoginMessage
from utils.pure import format_price, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_user import UserModal
from views.scr_login import LoginScreen

_logger = get_logger(__name__)


class AdminScreen(BaseScreen):
    """
    Admin dashboard: store stats and user management.
    Requires the admin to be logged in, otherwise the login screen is shown
    and cancelling it goes back to the catalog.
    """

    BINDINGS = [
        Binding("n", "add_user", "Add User", show=True),
        Binding("e", "edit_user", "Edit", show=True),
        Binding("t", "toggle_user", "Toggle Status", show=True),
        Binding("delete", "delete_user", "Delete", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._login_pending = False

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Markdown("", id="md-admin-stats")
        with Horizontal(id="hort-filters"):
            yield Input(
                id="input-user-search", placeholder="Search by name or email..."
            )
            yield Select(
                [(ROLE_FILTER_ALL, ROLE_FILTER_ALL)] + [(r, r) for r in USER_ROLES],
                value=ROLE_FILTER_ALL,
                allow_blank=False,
                id="select-role-filter",
            )
        yield DataTable(id="table-users")
        with Horizontal(id="hort-table-control"):
            yield Button("Add User", id="btn-add-user", variant="primary")
            yield Button("Edit", id="btn-edit-user")
            yield Button("Toggle Status", id="btn-toggle-user")
            yield Button("Delete", id="btn-delete-user", variant="error")
            yield Button("<", id="btn-prev")
            yield Label("", id="label-page")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Email", "Role", "Status", "Created")

    @on(ScreenResume)
    @work()
    async def ensure_login(self) -> None:
        if self.app.state.auth.is_authenticated:
            self.refresh_dashboard()
            return
        # resumed on the way out after a cancelled login
        if self._login_pending or not self.is_current:
            return

        self._login_pending = True
        try:
            user = await self.app.push_screen_wait(LoginScreen())
            if user is None:
                await self.app.switch_mode("catalog")
                return
        finally:
            self._login_pending = False
        self.refresh_dashboard()

    @on(UserLoginMessage)
    @on(NewOrderMessage)
    def refresh_dashboard(self) -> None:
        state = self.app.state
        if not state.auth.is_authenticated:
            return
        stats = state.users.stats(state.orders.orders)
        self.query_one("#md-admin-stats", Markdown).update(
            f"### Welcome, {state.auth.user.username}\n\n"
            + generate_markdown_table(
                ["Total Users", "Active", "Inactive", "Orders", "Revenue"],
                [
                    [
                        stats.total_users,
                        stats.active_users,
                        stats.inactive_users,
                        stats.total_orders,
                        format_price(stats.total_revenue),
                    ]
                ],
                ["c", "c", "c", "c", "c"],
            )
        )
        self.render_users()

    def render_users(self) -> None:
        page = self.app.state.users.current_page()
        table = self.query_one(DataTable)
        table.clear()
        for u in page.users:
            table.add_row(
                u.name,
                u.email,
                u.role,
                u.status,
                u.created_at.isoformat(),
                key=u.id,
            )

        if page.total:
            label = (
                f"{page.first_index}-{page.last_index} of {page.total}"
                f"  |  {page.page} / {page.page_count}"
            )
        else:
            label = "No users found"
        self.query_one("#label-page", Label).update(label)
        self.query_one("#btn-prev", Button).disabled = page.page <= 1
        self.query_one("#btn-next", Button).disabled = page.page >= page.page_count

    def _selected_user(self) -> Optional[User]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return self.app.state.users.get(row_key.value)

    @on(Input.Changed, "#input-user-search")
    def handle_search(self, message: Input.Changed) -> None:
        self.app.state.users.set_search_term(message.value)
        self.render_users()

    @on(Select.Changed, "#select-role-filter")
    def handle_role_filter(self, message: Select.Changed) -> None:
        if isinstance(message.value, str):
            self.app.state.users.set_role_filter(message.value)
            self.render_users()

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        users = self.app.state.users
        users.set_page(users.page - 1)
        self.render_users()

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        users = self.app.state.users
        users.set_page(users.page + 1)
        self.render_users()

    @on(Button.Pressed, "#btn-add-user")
    @work(exclusive=True, group="user-edit")
    async def action_add_user(self) -> None:
        values = await self.app.push_screen_wait(UserModal())
        if values is None:
            return
        try:
            user = self.app.state.users.add_user(**values)
        except ValidationError as e:
            self.notify(str(e), severity="error")
            return
        _logger.info(f"User {user.id} added.")
        self.notify(f"User {user.name} added.")
        self.refresh_dashboard()

    @on(Button.Pressed, "#btn-edit-user")
    @work(exclusive=True, group="user-edit")
    async def action_edit_user(self) -> None:
        user = self._selected_user()
        if user is None:
            self.notify("Select a user first.", severity="warning")
            return
        values = await self.app.push_screen_wait(UserModal(user))
        if values is None:
            return
        try:
            self.app.state.users.update_user(
                User(id=user.id, created_at=user.created_at, **values)
            )
        except ValidationError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"User {values['name']} updated.")
        self.refresh_dashboard()

    @on(Button.Pressed, "#btn-toggle-user")
    def action_toggle_user(self) -> None:
        user = self._selected_user()
        if user is None:
            self.notify("Select a user first.", severity="warning")
            return
        updated = self.app.state.users.toggle_status(user.id)
        self.notify(f"{updated.name} is now {updated.status}.")
        self.refresh_dashboard()

    @on(Button.Pressed, "#btn-delete-user")
    @work(exclusive=True, group="user-edit")
    async def action_delete_user(self) -> None:
        user = self._selected_user()
        if user is None:
            self.notify("Select a user first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete {user.name}?",
                detail="This cannot be undone.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        if self.app.state.users.delete_user(user.id):
            _logger.info(f"User {user.id} deleted.")
            self.notify(f"User {user.name} deleted.")
        self.refresh_dashboard()
