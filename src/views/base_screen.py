from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import NavigateMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from utils.routes import menu_for, mode_for, route_for
from views.modal_dialog import DialogModal, QuitDialogModal

APP_TITLE = "Product Management System"


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def populate(self) -> None:
        """
        (Re)draw user info and the role dependent menu. Called whenever the
        screen is resumed, the user may have changed since last time.
        """
        user = self.app.state.auth.user
        if user is None:
            return

        rows = [
            ["Username", user.username],
            ["Role", "Administrator" if user.is_admin else "Customer"],
        ]
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(title), id="list-menu-item-" + mode_for(route))
                for route, title in menu_for(user).items()
            ]
        )
        self.highlight_item(self.app.current_mode)

    def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.current_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(NavigateMessage(route_for(selected_mode)))

    @on(Button.Pressed, "#btn-logout")
    @work()
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

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode: str):
        for item in self.query_one("#list-menu").children:
            item.highlighted = item.id == "list-menu-item-" + mode


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, the inline error line and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        self.app.title = APP_TITLE
        self.sub_title = header_sub_title
        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(ScreenResume)
    async def handle_screen_resume(self) -> None:
        if self._show_sidebar:
            await self.query_one(Sidebar).populate()
        self.reload()

    def reload(self) -> None:
        """Screens that show backend data refetch here."""

    def render_error(self, message: Optional[str]) -> None:
        """Show (or hide, for None) the inline error line of the screen."""
        labels = self.query("#label-error")
        if not labels:
            if message:
                self.notify(message, severity="error")
            return
        label = labels.first(Label)
        label.update(message or "")
        label.set_class(not message, "hidden")

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
