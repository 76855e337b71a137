from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Input, Select

import db.crud as crud
from views.base_screen import LiveScreen
from views.modal_dialog import ConfirmDeleteModal


class EmployeesScreen(LiveScreen):
    """
    Admin: employee records. Each one links an existing account to a department.
    """

    TITLE_TEXT = "Employees"
    VIEW_ID = "employees-page"
    KINDS = frozenset({"employees", "accounts", "departments"})

    def __init__(self) -> None:
        super().__init__()
        self.editing: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-employees")
            with Horizontal(id="hort-emp-form"):
                yield Input(placeholder="Employee ID", id="input-emp-id")
                yield Input(placeholder="User email", id="input-email")
                yield Input(placeholder="Position", id="input-position")
                yield Select([], prompt="Department", id="select-dept")
                yield Input(placeholder="Hire date (YYYY-MM-DD)", id="input-hire-date")
            with Horizontal(id="hort-emp-btns"):
                yield Button("Clear", id="btn-clear")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Email", "Position", "Department", "Hired")

    def reload(self) -> None:
        store = self.app.state.store
        table = self.query_one(DataTable)
        table.clear()
        for e in store.employees:
            account = store.find_account(e.user_email)
            dept = store.find_department(e.dept_id)
            table.add_row(
                e.employee_id,
                account.full_name if account else "-",
                e.user_email,
                e.position,
                dept.name if dept else f"#{e.dept_id}",
                e.hire_date,
                key=e.employee_id,
            )

        select = self.query_one("#select-dept", Select)
        selected = select.value
        select.set_options([(d.name, d.id) for d in store.departments])
        if selected != Select.BLANK and store.find_department(selected):
            select.value = selected

        if self.editing and not store.find_employee(self.editing):
            self.clear_form()

    def clear_form(self) -> None:
        self.editing = None
        for inp in self.query(Input):
            inp.value = ""
        self.query_one("#input-emp-id", Input).disabled = False
        self.query_one("#select-dept", Select).clear()

    @on(DataTable.RowSelected)
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        emp = self.app.state.store.find_employee(event.row_key.value)
        if emp is None:
            return
        self.editing = emp.employee_id
        id_input = self.query_one("#input-emp-id", Input)
        id_input.value = emp.employee_id
        id_input.disabled = True
        self.query_one("#input-email", Input).value = emp.user_email
        self.query_one("#input-position", Input).value = emp.position
        self.query_one("#select-dept", Select).value = emp.dept_id
        self.query_one("#input-hire-date", Input).value = emp.hire_date

    @on(Button.Pressed, "#btn-clear")
    def handle_clear(self) -> None:
        self.clear_form()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        dept_id = self.query_one("#select-dept", Select).value
        fields = (
            self.query_one("#input-emp-id", Input).value,
            self.query_one("#input-email", Input).value,
            self.query_one("#input-position", Input).value,
            None if dept_id == Select.BLANK else dept_id,
            self.query_one("#input-hire-date", Input).value,
        )
        if self.editing:
            op = crud.update_employee(self.app.state, *fields)
            msg = "Employee updated."
        else:
            op = crud.create_employee(self.app.state, *fields)
            msg = "Employee added."
        if await self.mutate(op, msg, self.KINDS):
            self.clear_form()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if not self.editing:
            self.notify("Select an employee first.", severity="warning")
            return
        if not await self.app.push_screen_wait(ConfirmDeleteModal(f"employee {self.editing}")):
            return
        await self.mutate(
            crud.delete_employee(self.app.state, self.editing),
            "Employee deleted.",
            self.KINDS,
        )
