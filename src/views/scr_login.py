from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key, ScreenResume
from textual.widgets import Button, Input, Label

from utils.errors import AuthFailure
from views.base_screen import BaseScreen


class LoginScreen(BaseScreen):
    TITLE_TEXT = "Login"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("Email")
            yield Input(placeholder="user@example.com", id="input-login-email")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-login-pwd")
            with Horizontal(id="div-login-btns"):
                yield Button("Create account", id="btn-goto-reg")
                yield Button("Login", id="btn-login", variant="primary")

    @on(ScreenResume)
    def handle_resume_focus(self) -> None:
        self.query_one("#input-login-pwd", Input).value = ""
        self.query_one("#input-login-email", Input).focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        if not email or not pwd:
            self.notify("Email or password cannot be empty!", severity="error")
            return

        try:
            account = await self.app.state.login(email, pwd)
        except AuthFailure as e:
            self.notify(str(e), severity="error")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return

        self.notify(f"Hello {account.first_name}!")
        self.app.navigate("/profile")

    @on(Button.Pressed, "#btn-goto-reg")
    def handle_goto_register(self) -> None:
        self.app.navigate("/register")
