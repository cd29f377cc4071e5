from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from api.models import Product
from utils.messages import NavigateMessage
from utils.pure import can_order, format_idr, generate_markdown_table
from views.base_screen import BaseScreen


class ProductsScreen(BaseScreen):
    """
    The catalog. Customers order one unit of the highlighted product;
    the button is disabled when it is out of stock and hidden for admins.
    """

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Our Products")
        self._highlighted: Optional[Product] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            yield Label("", id="label-success", classes="success hidden")
            yield DataTable(id="table-products", cursor_type="row", zebra_stripes=True)
            yield MarkdownViewer("", id="md-prod", show_table_of_contents=False)
            with Horizontal(id="hort-controls"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("Order Now", id="btn-order", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("Name", "Price", "Stock")

    def reload(self) -> None:
        self.load_products()

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="load")
    async def load_products(self) -> None:
        store = self.app.state.products
        await store.fetch_all()
        self.render_error(store.error)

        table = self.query_one(DataTable)
        table.clear()
        for p in store.products:
            stock = f"{p.stock} in stock" if p.in_stock else "Out of stock"
            table.add_row(p.name, format_idr(p.price), stock, key=p.id)

        if not store.products:
            self._highlighted = None
            await self.query_one("#md-prod", MarkdownViewer).document.update(
                "No products found"
            )
        self.update_order_button()

    @on(DataTable.RowHighlighted)
    async def handle_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._highlighted = self.app.state.products.get(event.row_key.value)
        self.update_order_button()
        if self._highlighted is None:
            return

        p = self._highlighted
        rows = [
            ["Name", p.name],
            ["Description", p.description or "-"],
            ["Price", format_idr(p.price)],
            ["Stock", p.stock],
        ]
        md_table = generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        await self.query_one("#md-prod", MarkdownViewer).document.update(
            f"### {p.name}\n\n" + md_table
        )

    def update_order_button(self) -> None:
        auth = self.app.state.auth
        btn = self.query_one("#btn-order", Button)
        btn.display = not auth.is_admin
        product = self._highlighted
        btn.disabled = product is None or not can_order(
            product, auth.is_authenticated, auth.user
        )
        if product is not None and not product.in_stock:
            btn.label = "Out of Stock"
        else:
            btn.label = "Order Now"

    @on(Button.Pressed, "#btn-order")
    @work(exclusive=True, group="order")
    async def handle_order(self) -> None:
        auth = self.app.state.auth
        product = self._highlighted
        if product is None or not can_order(product, auth.is_authenticated, auth.user):
            return
        if not auth.is_authenticated:
            self.post_message(NavigateMessage("/login"))
            return

        orders = self.app.state.orders
        if await orders.place_single(product) is None:
            self.render_error(orders.error or "Failed to create order. Please try again.")
            return

        success = self.query_one("#label-success", Label)
        success.update(f"Successfully ordered {product.name}!")
        success.remove_class("hidden")

        # stock is decremented server side
        self.load_products()
