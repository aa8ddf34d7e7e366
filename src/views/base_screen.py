from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize, ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.pure import format_price, generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal
from views.modal_resize import ResizeScreenPromptModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Your Cart", id="label-info-1")
        yield Markdown("", id="md-cartinfo")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")
        yield Button("Log out", id="btn-logout", variant="error")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        modes = {**self.app.SHOP_MODES, **self.app.ADMIN_MODES}
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.highlight_item(self.init_mode)
        await self.refresh_info()

    async def refresh_info(self) -> None:
        state = self.app.state
        table_rows = [
            ["Items", state.cart.item_count],
            ["Total", format_price(state.cart.total)],
        ]
        if state.auth.is_authenticated:
            table_rows.append(["Admin", state.auth.user.username])
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one("#md-cartinfo", Markdown).update(md_table_str)
        self.query_one("#btn-logout").display = state.auth.is_authenticated

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.app.state.auth.logout()
        self.notify("Logout successful.")
        self.post_message(UserLogoutMessage())
        await self.refresh_info()
        if self.app.current_mode in self.app.ADMIN_MODES:
            await self.app.switch_mode("catalog")

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Base Screen",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        :return:
        """

        # auto gen titles and subtitles
        self.app.title = "Storefront"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                if k in self.app.ADMIN_MODES:
                    self.sub_title = self.app.ADMIN_MODES[k]
                elif k in self.app.SHOP_MODES:
                    self.sub_title = self.app.SHOP_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    async def on_resize(self, event: Resize) -> None:
        min_width = 60
        min_height = 20
        too_small = event.size.width < min_width or event.size.height < min_height
        if too_small and not isinstance(self.app.screen, ResizeScreenPromptModal):
            self.app.push_screen(ResizeScreenPromptModal(min_width, min_height))

    @on(ScreenResume)
    @on(CartChangedMessage)
    @on(UserLoginMessage)
    @on(UserLogoutMessage)
    async def handle_sidebar_refresh(self) -> None:
        if self._show_sidebar and self.query(Sidebar):
            await self.query_one(Sidebar).refresh_info()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
