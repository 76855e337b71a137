from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Input

import db.crud as crud
from views.base_screen import LiveScreen
from views.modal_dialog import ConfirmDeleteModal


class DepartmentsScreen(LiveScreen):
    """
    Admin: departments with their head count. A department with employees cannot be deleted.
    """

    TITLE_TEXT = "Departments"
    VIEW_ID = "departments-page"
    KINDS = frozenset({"departments", "employees"})

    def __init__(self) -> None:
        super().__init__()
        self.editing: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-departments")
            with Horizontal(id="hort-dept-form"):
                yield Input(placeholder="Name", id="input-name")
                yield Input(placeholder="Description", id="input-descr")
            with Horizontal(id="hort-dept-btns"):
                yield Button("Clear", id="btn-clear")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Description", "Employees")

    def reload(self) -> None:
        store = self.app.state.store
        table = self.query_one(DataTable)
        table.clear()
        for d in store.departments:
            head_count = sum(1 for e in store.employees if e.dept_id == d.id)
            table.add_row(d.id, d.name, d.description, head_count, key=str(d.id))
        if self.editing is not None and not store.find_department(self.editing):
            self.clear_form()

    def clear_form(self) -> None:
        self.editing = None
        for inp in self.query(Input):
            inp.value = ""

    @on(DataTable.RowSelected)
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        dept = self.app.state.store.find_department(int(event.row_key.value))
        if dept is None:
            return
        self.editing = dept.id
        self.query_one("#input-name", Input).value = dept.name
        self.query_one("#input-descr", Input).value = dept.description

    @on(Button.Pressed, "#btn-clear")
    def handle_clear(self) -> None:
        self.clear_form()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        name = self.query_one("#input-name", Input).value
        descr = self.query_one("#input-descr", Input).value
        if self.editing is not None:
            op = crud.update_department(self.app.state, self.editing, name, descr)
            msg = "Department updated."
        else:
            op = crud.create_department(self.app.state, name, descr)
            msg = "Department created."
        if await self.mutate(op, msg, self.KINDS):
            self.clear_form()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if self.editing is None:
            self.notify("Select a department first.", severity="warning")
            return
        dept = self.app.state.store.find_department(self.editing)
        if not await self.app.push_screen_wait(ConfirmDeleteModal(f"department '{dept.name}'")):
            return
        await self.mutate(
            crud.delete_department(self.app.state, self.editing),
            "Department deleted.",
            self.KINDS,
        )
