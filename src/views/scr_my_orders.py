from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label

from utils.pure import describe_items, format_date, format_idr, status_label
from views.base_screen import BaseScreen


class MyOrdersScreen(BaseScreen):
    """
    Orders placed by the logged in customer, newest as the backend sends them.
    """

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="My Orders")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            yield Label("You have no orders yet", id="label-empty", classes="hidden")
            yield DataTable(id="table-orders", cursor_type="row", zebra_stripes=True)
            with Horizontal(id="hort-controls"):
                yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns("Order ID", "Items", "Total", "Status", "Date")

    def reload(self) -> None:
        self.load_orders()

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)
    async def load_orders(self) -> None:
        store = self.app.state.orders
        await store.fetch_mine()
        self.render_error(store.error)

        table = self.query_one(DataTable)
        table.clear()
        for order in store.orders:
            table.add_row(
                order.id,
                describe_items(order),
                format_idr(order.total_amount, decimals=0),
                status_label(order.status),
                format_date(order.created_at),
                key=order.id,
            )
        self.query_one("#label-empty").set_class(bool(store.orders), "hidden")
