from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from api.models import User
from utils.forms import FormPhase, FormState, UserFormValues

ROLE_OPTIONS = [("Customer", "user"), ("Admin", "admin")]


class UserFormModal(ModalScreen[bool]):
    """
    Add (user=None) or edit a user. On edit an empty password keeps the
    current one.
    """

    def __init__(self, user: Optional[User] = None) -> None:
        super().__init__()
        blank = UserFormValues()
        values = UserFormValues.of(user) if user else blank
        self.form = FormState(blank).open(values, user.id if user else None)

    def compose(self) -> ComposeResult:
        editing = self.form.is_editing_existing
        with Vertical(id="div-form"):
            yield Label("Edit User" if editing else "Add User", id="label-title")
            yield Label("Username")
            yield Input(value=self.form.values.username, id="input-username")
            yield Label(
                "Password (leave empty to keep unchanged)" if editing else "Password"
            )
            yield Input(password=True, id="input-password")
            yield Label("Role")
            yield Select(
                ROLE_OPTIONS,
                value=self.form.values.role,
                allow_blank=False,
                id="select-role",
            )
            yield Label("", id="label-error", classes="error hidden")
            with Horizontal(id="div-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update" if editing else "Create", id="btn-submit", variant="primary"
                )

    def on_mount(self) -> None:
        self.query_one("#input-username").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.handle_cancel()

    def _read_values(self) -> UserFormValues:
        return UserFormValues(
            username=self.query_one("#input-username", Input).value,
            password=self.query_one("#input-password", Input).value,
            role=str(self.query_one("#select-role", Select).value),
        )

    def _show_error(self) -> None:
        label = self.query_one("#label-error", Label)
        label.update(self.form.error or "")
        label.set_class(self.form.phase != FormPhase.ERROR, "hidden")

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.form = self.form.cancel(UserFormValues())
        self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work()
    async def handle_submit(self) -> None:
        if self.form.phase == FormPhase.SUBMITTING:
            return
        self.form = self.form.change(self._read_values())
        try:
            payload = self.form.values.to_payload(editing=self.form.is_editing_existing)
        except ValueError as exc:
            self.form = self.form.fail(str(exc))
            self._show_error()
            return

        self.form = self.form.submit()
        store = self.app.state.users
        if self.form.target_id:
            saved = await store.update(self.form.target_id, payload)
        else:
            saved = await store.create(payload)

        if saved is None:
            self.form = self.form.fail(store.error or "Failed to save user")
            self._show_error()
            return

        self.form = self.form.succeed(UserFormValues())
        self.dismiss(True)
