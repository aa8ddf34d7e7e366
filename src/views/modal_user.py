from typing import Dict, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from db.models import USER_ROLES, USER_STATUSES, User
from stores.users import validate_user_fields


class UserModal(ModalScreen[Optional[Dict[str, str]]]):
    """
    Add/edit form for a user.
    Dismisses with the field values (name, email, role, status) or None.
    """

    def __init__(self, user: Optional[User] = None):
        super().__init__()
        self.user = user

    def compose(self) -> ComposeResult:
        user = self.user
        with Vertical(id="div-user-form"):
            yield Label("Edit User" if user else "Add New User", id="label-user-title")
            yield Label("Name")
            yield Input(
                user.name if user else "", placeholder="Jane Doe", id="input-name"
            )
            yield Label("", id="error-name", classes="field-error")
            yield Label("Email")
            yield Input(
                user.email if user else "",
                placeholder="user@example.com",
                id="input-email",
            )
            yield Label("", id="error-email", classes="field-error")
            yield Label("Role")
            yield Select(
                [(r, r) for r in USER_ROLES],
                value=user.role if user else "Viewer",
                allow_blank=False,
                id="select-role",
            )
            yield Label("Status")
            yield Select(
                [(s, s) for s in USER_STATUSES],
                value=user.status if user else "Active",
                allow_blank=False,
                id="select-status",
            )
            with Horizontal():
                yield Button("Cancel", id="btn-quit")
                yield Button(
                    "Save" if user else "Add User", id="btn-save", variant="primary"
                )

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    @on(Input.Submitted)
    def handle_save(self) -> None:
        values = {
            "name": self.query_one("#input-name", Input).value.strip(),
            "email": self.query_one("#input-email", Input).value.strip(),
            "role": self.query_one("#select-role", Select).value,
            "status": self.query_one("#select-status", Select).value,
        }
        errors = validate_user_fields(**values)
        for field in ("name", "email"):
            self.query_one(f"#error-{field}", Label).update(errors.get(field, ""))
            self.query_one(f"#input-{field}", Input).set_class(
                field in errors, "-invalid"
            )
        if errors:
            self.notify("Please fix the highlighted fields.", severity="error")
            return
        self.dismiss(values)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(None)
