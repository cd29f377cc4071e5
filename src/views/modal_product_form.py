from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, TextArea

from api.models import Product
from utils.forms import FormPhase, FormState, ProductFormValues


class ProductFormModal(ModalScreen[bool]):
    """
    Add (product=None) or edit a product.
    Returns True if the backend accepted the change.
    """

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        blank = ProductFormValues()
        values = ProductFormValues.of(product) if product else blank
        self.form = FormState(blank).open(values, product.id if product else None)

    def compose(self) -> ComposeResult:
        values = self.form.values
        title = "Edit Product" if self.form.is_editing_existing else "Add Product"
        with Vertical(id="div-form"):
            yield Label(title, id="label-title")
            yield Label("Name")
            yield Input(value=values.name, id="input-name")
            yield Label("Description")
            yield TextArea(values.description, id="input-description")
            with Horizontal():
                with Vertical():
                    yield Label("Price")
                    yield Input(
                        value=values.price,
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Stock")
                    yield Input(
                        value=values.stock,
                        id="input-stock",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
            yield Label("", id="label-error", classes="error hidden")
            with Horizontal(id="div-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update" if self.form.is_editing_existing else "Create",
                    id="btn-submit",
                    variant="primary",
                )

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.handle_cancel()

    def _read_values(self) -> ProductFormValues:
        return ProductFormValues(
            name=self.query_one("#input-name", Input).value,
            description=self.query_one("#input-description", TextArea).text,
            price=self.query_one("#input-price", Input).value,
            stock=self.query_one("#input-stock", Input).value,
        )

    def _show_error(self) -> None:
        label = self.query_one("#label-error", Label)
        label.update(self.form.error or "")
        label.set_class(self.form.phase != FormPhase.ERROR, "hidden")

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.form = self.form.cancel(ProductFormValues())
        self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work()
    async def handle_submit(self) -> None:
        if self.form.phase == FormPhase.SUBMITTING:
            return
        self.form = self.form.change(self._read_values())
        try:
            payload = self.form.values.to_payload()
        except ValueError as exc:
            self.form = self.form.fail(str(exc))
            self._show_error()
            return

        self.form = self.form.submit()
        self.query_one("#btn-submit", Button).disabled = True

        store = self.app.state.products
        if self.form.target_id:
            saved = await store.update(self.form.target_id, payload)
        else:
            saved = await store.create(payload)

        self.query_one("#btn-submit", Button).disabled = False
        if saved is None:
            self.form = self.form.fail(store.error or "Failed to save product")
            self._show_error()
            return

        self.form = self.form.succeed(ProductFormValues())
        self.dismiss(True)
