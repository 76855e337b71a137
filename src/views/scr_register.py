from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label

import db.crud as crud
from views.base_screen import BaseScreen


class RegisterScreen(BaseScreen):
    """
    Self-registration. New accounts are unverified until the email link is used.
    """

    TITLE_TEXT = "Register"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-reg"):
            yield Label("First name")
            yield Input(placeholder="Jane", id="input-reg-first")
            yield Label("Last name")
            yield Input(placeholder="Doe", id="input-reg-last")
            yield Label("Email")
            yield Input(placeholder="user@example.com", id="input-reg-email")
            yield Label(f"Password (min {crud.MIN_PASSWORD_LEN} characters)")
            yield Input(placeholder="*********", password=True, id="input-reg-pwd")
            with Horizontal(id="div-reg-btns"):
                yield Button("Back to login", id="btn-goto-login")
                yield Button("Register", id="btn-reg", variant="primary")

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        values = [
            self.query_one(f"#input-reg-{k}", Input).value
            for k in ("first", "last", "email", "pwd")
        ]
        account = await self.mutate(
            crud.register(self.app.state, *values),
            "Registration successful. Check your email to verify the account.",
        )
        if account is None:
            return

        for inp in self.query(Input):
            inp.value = ""
        self.app.state.pending_email = account.email
        self.app.navigate("/verify-email")

    @on(Button.Pressed, "#btn-goto-login")
    def handle_goto_login(self) -> None:
        self.app.navigate("/login")
