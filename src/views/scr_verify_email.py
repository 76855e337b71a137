from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Markdown

import db.crud as crud
from views.base_screen import BaseScreen


class VerifyEmailScreen(BaseScreen):
    """
    Stand-in for the verification email: one button marks the pending account verified.
    """

    TITLE_TEXT = "Verify Email"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-verify"):
            yield Markdown("", id="md-verify")
            yield Button("Simulate verification", id="btn-verify", variant="success")

    @on(ScreenResume)
    async def handle_show_pending(self) -> None:
        email = self.app.state.pending_email
        btn = self.query_one("#btn-verify", Button)
        if email:
            md = f"## Verify your email\n\nA verification link was sent to **{email}**."
            btn.disabled = False
        else:
            md = "## Verify your email\n\nNothing to verify. Register first."
            btn.disabled = True
        await self.query_one("#md-verify", Markdown).update(md)

    @on(Button.Pressed, "#btn-verify")
    @work(exclusive=True)
    async def handle_verify(self) -> None:
        account = await self.mutate(
            crud.verify_email(self.app.state, self.app.state.pending_email or ""),
            "Email verified. You may now log in.",
        )
        if account is None:
            return
        self.app.state.pending_email = None
        self.app.navigate("/login")
