from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, Select

from api.models import ORDER_STATUSES, Order
from utils.pure import describe_items, format_date, format_idr, sort_orders, status_label
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDeleteModal

SORT_OPTIONS = [
    ("Newest First", "date-desc"),
    ("Oldest First", "date-asc"),
    ("Highest Total", "total-desc"),
    ("Lowest Total", "total-asc"),
]
STATUS_OPTIONS = [(status_label(s), s) for s in ORDER_STATUSES]
ALL_USERS = ""


class AdminOrdersScreen(BaseScreen):
    """
    Every order, filterable by customer and sortable client side.
    """

    sort_key = "date-desc"

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Manage Orders")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            with Horizontal(id="hort-filters"):
                yield Select(
                    [("All Users", ALL_USERS)],
                    value=ALL_USERS,
                    allow_blank=False,
                    id="select-user",
                )
                yield Select(
                    SORT_OPTIONS, value=self.sort_key, allow_blank=False, id="select-sort"
                )
                yield Button("Clear All Orders", id="btn-clear-all", variant="error")
            yield DataTable(id="table-orders", cursor_type="row", zebra_stripes=True)
            with Horizontal(id="hort-controls"):
                yield Select(STATUS_OPTIONS, prompt="New status", id="select-status")
                yield Button("Update Status", id="btn-status", variant="primary")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns(
            "Order ID", "Customer", "Items", "Total", "Status", "Date"
        )

    def reload(self) -> None:
        self.load_users()
        self.load_orders()

    @work(exclusive=True, group="users")
    async def load_users(self) -> None:
        users = self.app.state.users
        await users.fetch_all(limit=1000)
        options = [("All Users", ALL_USERS)] + [(u.username, u.id) for u in users.users]
        select = self.query_one("#select-user", Select)
        current = select.value
        select.set_options(options)
        if any(value == current for _, value in options):
            select.value = current

    def _user_filter(self) -> Optional[str]:
        value = self.query_one("#select-user", Select).value
        return value if isinstance(value, str) and value else None

    @work(exclusive=True, group="load")
    async def load_orders(self) -> None:
        store = self.app.state.orders
        await store.fetch_all(self._user_filter())
        self.render_error(store.error)
        self.render_table()

    def render_table(self) -> None:
        by, order = self.sort_key.split("-")
        table = self.query_one(DataTable)
        table.clear()
        orders = self.app.state.orders.orders
        for o in sort_orders(orders, by, order):
            table.add_row(
                o.id[-8:],
                o.username or "Unknown User",
                describe_items(o),
                format_idr(o.total_amount),
                status_label(o.status),
                format_date(o.created_at, with_time=True),
                key=o.id,
            )
        self.query_one("#btn-clear-all", Button).disabled = not orders

    def selected_order(self) -> Optional[Order]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.app.state.orders.get(row_key.value)

    @on(Select.Changed, "#select-user")
    def handle_user_changed(self) -> None:
        self.load_orders()

    @on(Select.Changed, "#select-sort")
    def handle_sort_changed(self, event: Select.Changed) -> None:
        self.sort_key = str(event.value)
        self.render_table()

    @on(Button.Pressed, "#btn-status")
    @work(exclusive=True, group="mutate")
    async def handle_update_status(self) -> None:
        order = self.selected_order()
        status = self.query_one("#select-status", Select).value
        if order is None or status is Select.BLANK:
            self.notify("Select an order and a status first.", severity="warning")
            return

        store = self.app.state.orders
        if await store.update_status(order.id, str(status)):
            self.notify(f"Order {order.id[-8:]} is now {status_label(str(status))}.")
        self.render_error(store.error)
        self.render_table()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="mutate")
    async def handle_delete(self) -> None:
        order = self.selected_order()
        if order is None:
            return
        if not await self.app.push_screen_wait(
            ConfirmDeleteModal("Are you sure you want to delete this order?")
        ):
            return

        store = self.app.state.orders
        if await store.delete(order.id):
            self.notify("Order deleted.")
        self.render_error(store.error)
        self.render_table()

    @on(Button.Pressed, "#btn-clear-all")
    @work(exclusive=True, group="mutate")
    async def handle_clear_all(self) -> None:
        if not await self.app.push_screen_wait(
            ConfirmDeleteModal("Are you sure you want to delete ALL orders?")
        ):
            return

        store = self.app.state.orders
        if await store.delete_all():
            self.notify("All orders deleted.")
        self.render_error(store.error)
        self.render_table()
