from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, DataTable, Input, Select

import db.crud as crud
from db.models import ROLES
from views.base_screen import LiveScreen
from views.modal_dialog import ConfirmDeleteModal


class AccountsScreen(LiveScreen):
    """
    Admin: list, create, edit and delete accounts.
    Selecting a row loads it into the form; email is locked while editing.
    """

    TITLE_TEXT = "Accounts"
    VIEW_ID = "accounts-page"
    KINDS = frozenset({"accounts"})

    def __init__(self) -> None:
        super().__init__()
        self.editing: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-accounts")
            with Horizontal(id="hort-account-form"):
                yield Input(placeholder="First name", id="input-first")
                yield Input(placeholder="Last name", id="input-last")
                yield Input(placeholder="Email", id="input-email")
                yield Input(placeholder="Password", password=True, id="input-pwd")
                yield Select(
                    [(r.title(), r) for r in ROLES],
                    value="user",
                    allow_blank=False,
                    id="select-role",
                )
                yield Checkbox("Verified", id="chk-verified")
            with Horizontal(id="hort-account-btns"):
                yield Button("Clear", id="btn-clear")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Email", "Role", "Verified")

    def reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for a in self.app.state.store.accounts:
            table.add_row(
                a.full_name, a.email, a.role, "Yes" if a.verified else "No", key=a.email
            )
        if self.editing and not self.app.state.store.find_account(self.editing):
            self.clear_form()

    def clear_form(self) -> None:
        self.editing = None
        for inp in self.query(Input):
            inp.value = ""
        self.query_one("#input-email", Input).disabled = False
        self.query_one("#select-role", Select).value = "user"
        self.query_one("#chk-verified", Checkbox).value = False

    @on(DataTable.RowSelected)
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        account = self.app.state.store.find_account(event.row_key.value)
        if account is None:
            return
        self.editing = account.email
        self.query_one("#input-first", Input).value = account.first_name
        self.query_one("#input-last", Input).value = account.last_name
        email_input = self.query_one("#input-email", Input)
        email_input.value = account.email
        email_input.disabled = True
        self.query_one("#input-pwd", Input).value = ""
        self.query_one("#select-role", Select).value = account.role
        self.query_one("#chk-verified", Checkbox).value = account.verified

    @on(Button.Pressed, "#btn-clear")
    def handle_clear(self) -> None:
        self.clear_form()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        state = self.app.state
        first = self.query_one("#input-first", Input).value
        last = self.query_one("#input-last", Input).value
        pwd = self.query_one("#input-pwd", Input).value
        role = self.query_one("#select-role", Select).value
        verified = self.query_one("#chk-verified", Checkbox).value

        if self.editing:
            op = crud.update_account(
                state, self.editing, first, last, role, verified, pwd or None
            )
            msg = "Account updated."
        else:
            email = self.query_one("#input-email", Input).value
            op = crud.create_account(state, first, last, email, pwd, role, verified)
            msg = "Account created."

        if await self.mutate(op, msg, self.KINDS):
            self.clear_form()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if not self.editing:
            self.notify("Select an account first.", severity="warning")
            return
        if not await self.app.push_screen_wait(ConfirmDeleteModal(self.editing)):
            return
        await self.mutate(
            crud.delete_account(self.app.state, self.editing),
            "Account deleted.",
            self.KINDS,
        )
