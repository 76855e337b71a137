from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Markdown

import db.crud as crud
from utils.pure import generate_markdown_table
from views.base_screen import LiveScreen


class ProfileScreen(LiveScreen):
    """
    Own account details and employee record, with name and password edits.
    """

    TITLE_TEXT = "Profile"
    VIEW_ID = "profile-page"
    KINDS = frozenset({"accounts", "employees", "departments"})

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-profile"):
            yield Markdown("", id="md-profile")
            with Horizontal(id="hort-name"):
                yield Input(placeholder="First name", id="input-first")
                yield Input(placeholder="Last name", id="input-last")
                yield Button("Save name", id="btn-save-name", variant="primary")
            with Horizontal(id="hort-pwd"):
                yield Label("New password")
                yield Input(placeholder="*********", password=True, id="input-new-pwd")
                yield Button("Change password", id="btn-change-pwd", variant="warning")

    def reload(self) -> None:
        state = self.app.state
        account = state.account
        if account is None:
            return

        rows = [
            ["Name", account.full_name],
            ["Email", account.email],
            ["Role", account.role.title()],
            ["Verified", "Yes" if account.verified else "No"],
        ]
        emp = next(
            (e for e in state.store.employees if e.user_email == account.email), None
        )
        if emp:
            dept = state.store.find_department(emp.dept_id)
            rows += [
                ["Employee ID", emp.employee_id],
                ["Position", emp.position],
                ["Department", dept.name if dept else f"#{emp.dept_id}"],
                ["Hire date", emp.hire_date],
            ]
        md = "### My Profile\n\n" + generate_markdown_table(
            ["Field", "Value"], rows, ["l", "l"]
        )
        self.query_one("#md-profile", Markdown).update(md)
        self.query_one("#input-first", Input).value = account.first_name
        self.query_one("#input-last", Input).value = account.last_name

    @on(Button.Pressed, "#btn-save-name")
    @work(exclusive=True)
    async def handle_save_name(self) -> None:
        await self.mutate(
            crud.update_profile(
                self.app.state,
                self.query_one("#input-first", Input).value,
                self.query_one("#input-last", Input).value,
            ),
            "Profile updated.",
            frozenset({"accounts"}),
        )

    @on(Button.Pressed, "#btn-change-pwd")
    @work(exclusive=True)
    async def handle_change_password(self) -> None:
        pwd_input = self.query_one("#input-new-pwd", Input)
        account = await self.mutate(
            crud.reset_password(
                self.app.state, self.app.state.account.email, pwd_input.value
            ),
            "Password changed.",
        )
        if account:
            pwd_input.value = ""
