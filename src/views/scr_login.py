from typing import Optional, Tuple

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Dismissed once the auth store holds a session (login or sign up).
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="tabs-auth"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield from self._credential_inputs("login", "admin")
                    with Horizontal():
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield from self._credential_inputs("reg", "janedoe")
                    yield Button("Create account", id="btn-reg", variant="primary")
        yield Label("", id="label-error", classes="error hidden")

    @staticmethod
    def _credential_inputs(prefix: str, example: str) -> ComposeResult:
        yield Label("Username")
        yield Input(placeholder=example, id=f"input-{prefix}-username")
        yield Label("Password")
        yield Input(placeholder="*********", password=True, id=f"input-{prefix}-pwd")

    def on_mount(self):
        # e.g. "session expired" after a failed token refresh, shown once
        auth = self.app.state.auth
        self.render_error(auth.error)
        auth.clear_error()
        self.query_one("#input-login-username").focus()

    def read_credentials(self, prefix: str) -> Optional[Tuple[str, str]]:
        username = self.query_one(f"#input-{prefix}-username", Input).value.strip()
        pwd = self.query_one(f"#input-{prefix}-pwd", Input).value
        if not username or not pwd:
            self.render_error("Username and password are required.")
            return None
        return username, pwd

    @on(Input.Submitted, "#input-login-username")
    def focus_login_pwd(self) -> None:
        self.query_one("#input-login-pwd").focus()

    @on(Input.Submitted, "#input-reg-username")
    def focus_reg_pwd(self) -> None:
        self.query_one("#input-reg-pwd").focus()

    @on(Input.Submitted, "#input-login-pwd")
    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True, group="auth")
    async def handle_login_submit(self) -> None:
        creds = self.read_credentials("login")
        if creds is None:
            return

        auth = self.app.state.auth
        user = await auth.login(*creds)
        if user is None:
            self.render_error(auth.error)
            pwd_input = self.query_one("#input-login-pwd", Input)
            pwd_input.value = ""
            pwd_input.focus()
            return

        self.notify(f"Hello {user.username}!")
        self.dismiss()

    @on(Input.Submitted, "#input-reg-pwd")
    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True, group="auth")
    async def handle_registration_submit(self) -> None:
        creds = self.read_credentials("reg")
        if creds is None:
            return

        auth = self.app.state.auth
        user = await auth.register(*creds)
        if user is None:
            self.render_error(auth.error)
            return

        self.notify(f"Registration successful. Welcome {user.username}!")
        self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.app.push_screen(QuitDialogModal())
