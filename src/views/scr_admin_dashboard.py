from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, MarkdownViewer

from utils.messages import NavigateMessage
from utils.pure import format_date, format_idr, generate_markdown_table, status_label
from views.base_screen import BaseScreen

QUICK_ACTIONS = {
    "btn-goto-products": "/admin/products",
    "btn-goto-orders": "/admin/orders",
    "btn-goto-users": "/admin/users",
}


class AdminDashboardScreen(BaseScreen):
    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Dashboard")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            yield MarkdownViewer("", id="md-dashboard", show_table_of_contents=False)
            with Horizontal(id="hort-actions"):
                yield Button("Manage Products", id="btn-goto-products")
                yield Button("View Orders", id="btn-goto-orders")
                yield Button("Manage Users", id="btn-goto-users")
                yield Button("Refresh", id="btn-refresh", variant="primary")
            yield Label("Showcase image: -", id="label-showcase")
            with Horizontal(id="hort-showcase"):
                yield Input(placeholder="path/to/image.png", id="input-showcase-path")
                yield Button("Upload", id="btn-upload", variant="success")

    def reload(self) -> None:
        self.load_stats()
        self.load_showcase()

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="stats")
    async def load_stats(self) -> None:
        store = self.app.state.dashboard
        await store.fetch_stats()
        self.render_error(store.error)
        if store.error:
            return

        stats = store.stats
        cards = generate_markdown_table(
            ["Total Products", "Total Orders", "Active Users", "Revenue"],
            [
                [
                    stats.total_products,
                    stats.total_orders,
                    stats.active_users,
                    format_idr(stats.total_revenue, decimals=0),
                ]
            ],
        )
        recent = generate_markdown_table(
            ["Order", "Customer", "Total", "Status", "Date"],
            [
                [
                    o.id[-8:],
                    o.username or "Unknown User",
                    format_idr(o.total_amount, decimals=0),
                    status_label(o.status),
                    format_date(o.created_at),
                ]
                for o in stats.recent_orders
            ],
            ["l", "l", "r", "c", "c"],
        ) or "No recent orders"

        await self.query_one("#md-dashboard", MarkdownViewer).document.update(
            "### Overview\n\n" + cards + "\n\n### Recent Orders\n\n" + recent
        )

    @work(exclusive=True, group="showcase")
    async def load_showcase(self) -> None:
        store = self.app.state.showcase
        await store.fetch()
        self.render_showcase()

    def render_showcase(self) -> None:
        url = self.app.state.showcase.image_url or "-"
        self.query_one("#label-showcase", Label).update(f"Showcase image: {url}")

    @on(Button.Pressed, "#btn-upload")
    @work(exclusive=True, group="showcase")
    async def handle_upload(self) -> None:
        path_input = self.query_one("#input-showcase-path", Input)
        path = path_input.value.strip()
        if not path:
            path_input.focus()
            return

        store = self.app.state.showcase
        if await store.upload(path):
            self.notify("Showcase image updated.")
            path_input.value = ""
        else:
            self.notify(store.error or "Upload failed", severity="error")
        self.render_showcase()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        route = QUICK_ACTIONS.get(event.button.id)
        if route:
            self.post_message(NavigateMessage(route))
