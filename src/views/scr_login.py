from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label

from db.models import SessionUser
from utils.config import Config
from utils.exceptions import InvalidCredentials
from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen


class LoginScreen(BaseScreen):
    """
    Admin login. Dismisses with the SessionUser on success, None on cancel.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Admin Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("Username")
            yield Input(placeholder=Config.DEMO_USERNAME, id="input-login-user")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-login-pwd")
            yield Label(
                f"Demo credentials: {Config.DEMO_USERNAME} / {Config.DEMO_PASSWORD}",
                id="label-login-hint",
            )
            with Horizontal(id="div-login-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Login", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-user").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(None)
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> Optional[SessionUser]:
        username = self.query_one("#input-login-user", Input).value.strip()
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        pwd = input_login_pwd.value

        if not username or not pwd:
            self.notify("Username and password are required.", severity="error")
            return None

        try:
            user = self.app.state.auth.login(username, pwd)
        except InvalidCredentials:
            self.notify("Invalid username or password.", severity="error")
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return None

        self.notify(f"Welcome back, {user.username}!")
        self.app.post_message(UserLoginMessage(user))
        self.dismiss(user)
        return user

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)
