from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Label

from api.models import Product
from utils.pure import format_idr
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDeleteModal, MarkdownModal
from views.modal_product_form import ProductFormModal

IMPORT_GUIDE = """\
## Excel import guide

Row 1 of the sheet must hold these column titles:

| name | description | price | stock |
| :--- | :--- | ---: | ---: |
| Gaming Mouse | High-performance gaming mouse | 59.99 | 25 |
| Gaming Keyboard | Mechanical RGB keyboard | 89.99 | 30 |

- price is a number, decimals allowed
- stock is a whole number
- every column is required
- save the file as .xlsx or .xls
"""


class AdminProductsScreen(BaseScreen):
    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Manage Products")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            with Horizontal(id="hort-import"):
                yield Input(placeholder="path/to/products.xlsx", id="input-import-path")
                yield Button("Import Excel", id="btn-import", variant="success")
                yield Button("Import Guide", id="btn-guide")
            yield DataTable(id="table-products", cursor_type="row", zebra_stripes=True)
            with Horizontal(id="hort-controls"):
                yield Button("Add Product", id="btn-add", variant="primary")
                yield Button("Edit", id="btn-edit")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns("Name", "Description", "Price", "Stock")

    def reload(self) -> None:
        self.load_products()

    @work(exclusive=True, group="load")
    async def load_products(self) -> None:
        store = self.app.state.products
        await store.fetch_all()
        self.render_error(store.error)
        self.render_table()

    def render_table(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for p in self.app.state.products.products:
            table.add_row(p.name, p.description, format_idr(p.price), p.stock, key=p.id)

    def selected_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.app.state.products.get(row_key.value)

    @on(Button.Pressed, "#btn-add")
    @work()
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(ProductFormModal()):
            self.notify("Product created.")
            self.load_products()

    @on(Button.Pressed, "#btn-edit")
    @work()
    async def handle_edit(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return
        if await self.app.push_screen_wait(ProductFormModal(product)):
            self.notify("Product updated.")
            self.load_products()

    @on(Button.Pressed, "#btn-delete")
    @work()
    async def handle_delete(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            ConfirmDeleteModal(f"Are you sure you want to delete {product.name}?")
        ):
            return

        store = self.app.state.products
        if await store.delete(product.id):
            self.notify("Product deleted.")
            self.load_products()
        else:
            self.render_error(store.error)

    @on(Button.Pressed, "#btn-guide")
    def handle_guide(self) -> None:
        self.app.push_screen(MarkdownModal(IMPORT_GUIDE))

    @on(Button.Pressed, "#btn-import")
    @work(exclusive=True, group="import")
    async def handle_import(self) -> None:
        path_input = self.query_one("#input-import-path", Input)
        path = path_input.value.strip()
        if not path:
            path_input.focus()
            path_input.add_class("-invalid")
            return

        store = self.app.state.products
        if await store.import_spreadsheet(path):
            self.notify("Products imported successfully!")
            path_input.value = ""
        else:
            self.notify(f"Failed to import products: {store.error}", severity="error")
        self.render_error(store.error)
        self.render_table()
