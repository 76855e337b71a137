import sys
from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db.models import Account
from utils.logger import get_logger
from utils.messages import QuitRequestedMessage, SessionChangedMessage, UserLogoutMessage
from utils.router import ROUTES, Router, normalize
from utils.state import AppState
from views.base_screen import LiveScreen, Sidebar
from views.scr_accounts import AccountsScreen
from views.scr_departments import DepartmentsScreen
from views.scr_employees import EmployeesScreen
from views.scr_home import HomeScreen
from views.scr_login import LoginScreen
from views.scr_profile import ProfileScreen
from views.scr_register import RegisterScreen
from views.scr_requests import RequestsScreen
from views.scr_verify_email import VerifyEmailScreen

_logger = get_logger(__name__)


class PortalApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    # one mode per view id; switching mode hides every other page
    MODES = {
        "home-page": HomeScreen,
        "login-page": LoginScreen,
        "register-page": RegisterScreen,
        "verify-email-page": VerifyEmailScreen,
        "profile-page": ProfileScreen,
        "employees-page": EmployeesScreen,
        "departments-page": DepartmentsScreen,
        "accounts-page": AccountsScreen,
        "requests-page": RequestsScreen,
    }

    CSS = """
    Sidebar {
        dock: left;
        width: 28;
        padding: 0 1;
        border-right: solid $primary;
    }
    #btn-logout { width: 100%; }
    DataTable { height: 1fr; }
    Horizontal { height: auto; }
    #div-login, #div-reg, #div-verify { width: 60; height: auto; padding: 1 2; }
    Input.-invalid { border: tall $error; }
    #div-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        border: thick $background 80%;
        background: $surface;
    }
    DialogModal { align: center middle; }
    """

    state: AppState
    router: Optional[Router]

    def __init__(self, start_address: str = "/"):
        super().__init__()
        self.state = AppState()
        self.router = None
        self.start_address = start_address

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.state.subscribe(self._on_session_changed)
        await self.state.start()

        self.router = Router(
            session=lambda: self.state.account,
            activate=self.switch_mode,
            notify=lambda message, severity: self.notify(message, severity=severity),
        )
        for view_id, screen_cls in self.MODES.items():
            if issubclass(screen_cls, LiveScreen):
                self.router.register(
                    view_id,
                    lambda view_id=view_id: self._reload_view(view_id),
                    screen_cls.KINDS,
                )
        self.navigate(self.start_address)

    def _on_session_changed(self, account: Optional[Account]) -> None:
        self.post_message(SessionChangedMessage(account))

    def _reload_view(self, view_id: str) -> None:
        screen = self.screen
        if isinstance(screen, LiveScreen) and screen.VIEW_ID == view_id:
            screen.reload()

    @work(exclusive=True, group="router")
    async def navigate(self, address: str) -> None:
        await self.router.navigate(address)

    def action_navigate(self, address: str) -> None:
        self.navigate(address)

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(SessionChangedMessage)
    async def handle_session_changed(self) -> None:
        for sidebar in self.screen.query(Sidebar):
            await sidebar.update_session()

    @on(UserLogoutMessage)
    async def handle_user_logout(self):
        await self.state.logout()
        self.notify("Logout successful.")
        self.navigate("/")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()


def run() -> None:
    address = sys.argv[1] if len(sys.argv) > 1 else "/"
    if normalize(address) not in ROUTES:
        _logger.info(f"Unknown start address {address!r}, using '/'.")
    PortalApp(address).run()


if __name__ == "__main__":
    run()
