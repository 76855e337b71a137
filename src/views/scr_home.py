from textual import on
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Markdown

from views.base_screen import BaseScreen


class HomeScreen(BaseScreen):
    TITLE_TEXT = "Home"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-home"):
            yield Markdown("", id="md-home")

    @on(ScreenResume)
    async def handle_greeting(self) -> None:
        state = self.app.state
        if state.account:
            md = (
                f"## Welcome, {state.display_name}!\n\n"
                "Use the menu to view your profile or submit supply requests."
            )
            if state.is_admin:
                md += "\n\nAs an admin you can also manage employees, departments and accounts."
        else:
            md = (
                "## Staff Portal\n\n"
                "Log in to continue, or register a new account."
            )
        await self.query_one("#md-home", Markdown).update(md)
