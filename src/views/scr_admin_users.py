from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, Select

from api.models import User
from utils.pure import format_date, sort_users
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDeleteModal, DialogModal
from views.modal_user_form import UserFormModal

SORT_OPTIONS = [
    ("Newest", "date-desc"),
    ("Oldest", "date-asc"),
    ("Username A-Z", "username-asc"),
    ("Username Z-A", "username-desc"),
]


class AdminUsersScreen(BaseScreen):
    """
    User management. Admin accounts can be edited but their role can't be
    changed and they can't be deleted from here.
    """

    sort_key = "date-desc"

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Manage Users")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-content"):
            yield Label("", id="label-error", classes="error hidden")
            with Horizontal(id="hort-filters"):
                yield Select(
                    SORT_OPTIONS, value=self.sort_key, allow_blank=False, id="select-sort"
                )
                yield Button("Add User", id="btn-add", variant="success")
            yield DataTable(id="table-users", cursor_type="row", zebra_stripes=True)
            with Horizontal(id="hort-controls"):
                yield Button("Edit", id="btn-edit")
                yield Button("Toggle Role", id="btn-role", variant="warning")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns("Username", "Role", "Joined")

    def reload(self) -> None:
        self.load_users()

    @work(exclusive=True, group="load")
    async def load_users(self) -> None:
        store = self.app.state.users
        await store.fetch_all()
        self.render_error(store.error)
        self.render_table()

    def render_table(self) -> None:
        by, order = self.sort_key.split("-")
        table = self.query_one(DataTable)
        table.clear()
        for u in sort_users(self.app.state.users.users, by, order):
            table.add_row(
                u.username,
                "Admin" if u.is_admin else "Customer",
                format_date(u.created_at),
                key=u.id,
            )
        self.update_controls(self.selected_user())

    def selected_user(self) -> Optional[User]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.app.state.users.get(row_key.value)

    def update_controls(self, user: Optional[User]) -> None:
        protected = user is None or user.is_admin
        self.query_one("#btn-role", Button).disabled = protected
        self.query_one("#btn-delete", Button).disabled = protected
        self.query_one("#btn-edit", Button).disabled = user is None

    @on(DataTable.RowHighlighted)
    def handle_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self.update_controls(self.app.state.users.get(event.row_key.value))

    @on(Select.Changed, "#select-sort")
    def handle_sort_changed(self, event: Select.Changed) -> None:
        self.sort_key = str(event.value)
        self.render_table()

    @on(Button.Pressed, "#btn-add")
    @work()
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(UserFormModal()):
            self.notify("User created.")
            self.render_table()

    @on(Button.Pressed, "#btn-edit")
    @work()
    async def handle_edit(self) -> None:
        user = self.selected_user()
        if user is None:
            return
        if await self.app.push_screen_wait(UserFormModal(user)):
            self.notify("User updated.")
            self.render_table()

    @on(Button.Pressed, "#btn-role")
    @work(exclusive=True, group="mutate")
    async def handle_toggle_role(self) -> None:
        user = self.selected_user()
        if user is None or user.is_admin:
            return
        new_role = "admin"
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Change the role of {user.username} to {new_role}?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        store = self.app.state.users
        await store.update(user.id, {"role": new_role})
        self.render_error(store.error)
        self.render_table()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="mutate")
    async def handle_delete(self) -> None:
        user = self.selected_user()
        if user is None or user.is_admin:
            return
        if not await self.app.push_screen_wait(
            ConfirmDeleteModal(f"Are you sure you want to delete {user.username}?")
        ):
            return

        store = self.app.state.users
        if await store.delete(user.id):
            self.notify("User deleted.")
        self.render_error(store.error)
        self.render_table()
