from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.credentials import LOGIN_ROUTE
from api.errors import SESSION_EXPIRED_MESSAGE
from utils.config import Settings, load_settings
from utils.logger import get_logger, set_debug
from utils.messages import (
    NavigateMessage,
    QuitRequestedMessage,
    SessionInvalidatedMessage,
    UserLogoutMessage,
)
from utils.routes import guard, mode_for, start_route
from utils.state import GlobalState
from views.scr_admin_dashboard import AdminDashboardScreen
from views.scr_admin_orders import AdminOrdersScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_admin_users import AdminUsersScreen
from views.scr_login import LoginScreen
from views.scr_my_orders import MyOrdersScreen
from views.scr_products import ProductsScreen

_logger = get_logger(__name__)


class ShopAdminApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "products": ProductsScreen,
        "orders": MyOrdersScreen,
        "admin_dashboard": AdminDashboardScreen,
        "admin_products": AdminProductsScreen,
        "admin_orders": AdminOrdersScreen,
        "admin_users": AdminUsersScreen,
    }

    CSS = """
    Sidebar {
        dock: left;
        width: 28;
        padding: 0 1;
        border-right: vkey $primary;
    }
    #div-content {
        padding: 0 1;
    }
    #div-login, #div-reg, #div-form {
        width: 60;
        height: auto;
        padding: 1 2;
    }
    #div-dialog, #div-markdown-modal {
        width: 70;
        height: auto;
        padding: 1 2;
        border: thick $primary;
        background: $surface;
    }
    ModalScreen {
        align: center middle;
    }
    Horizontal {
        height: auto;
    }
    DataTable {
        height: 1fr;
    }
    #md-prod, #md-dashboard {
        height: 1fr;
    }
    #input-description {
        height: 6;
    }
    .error {
        color: $error;
    }
    .success {
        color: $success;
    }
    .hidden {
        display: none;
    }
    """

    state: GlobalState

    def __init__(self, settings: Optional[Settings] = None, transport=None):
        super().__init__()
        self.settings = settings or load_settings()
        set_debug(self.settings.debug)
        _logger.debug(f"Backend at {self.settings.api_url}")
        self.state = GlobalState.from_settings(self.settings, transport)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.state.gateway.subscribe(self._session_invalidated)
        self.bootstrap()

    async def on_unmount(self) -> None:
        await self.state.close()

    def _session_invalidated(self) -> None:
        self.post_message(SessionInvalidatedMessage())

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work(exclusive=True, group="bootstrap")
    async def bootstrap(self):
        """Resume the stored session (cancelled with the app), then route."""
        await self.state.auth.bootstrap()
        self.main_flow()

    @work(group="main-flow")
    async def main_flow(self):
        auth = self.state.auth
        if not auth.is_authenticated:
            if isinstance(self.screen, LoginScreen):
                return
            await self.push_screen_wait(LoginScreen())

        last_route = await self.state.credentials.get_last_route()
        await self.navigate(start_route(last_route, auth.is_authenticated, auth.user))

    async def navigate(self, route: str) -> None:
        auth = self.state.auth
        target = guard(route, auth.is_authenticated, auth.user)
        if target == LOGIN_ROUTE:
            self.main_flow()
            return

        if target != route:
            _logger.debug(f"Route {route} redirected to {target}")
        await self.state.remember_route(target)
        await self.switch_mode(mode_for(target))

    @on(NavigateMessage)
    async def handle_navigate(self, message: NavigateMessage):
        await self.navigate(message.route)

    @on(SessionInvalidatedMessage)
    def handle_session_invalidated(self):
        self.state.auth.invalidate()
        self.state.forget_caches()
        self.notify(SESSION_EXPIRED_MESSAGE, severity="warning")
        self.main_flow()

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.auth.logout()
        self.state.forget_caches()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()


def run() -> None:
    app = ShopAdminApp()
    app.run()


if __name__ == "__main__":
    run()
