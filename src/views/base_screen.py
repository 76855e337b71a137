import asyncio
from typing import Awaitable, ClassVar, FrozenSet, Optional, TypeVar

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.errors import PortalError
from utils.messages import QuitRequestedMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from utils.router import ROUTES
from views.modal_dialog import DialogModal, QuitDialogModal

T = TypeVar("T")

GUEST_MENU = {"/": "Home", "/login": "Login", "/register": "Register"}
USER_MENU = {"/": "Home", "/profile": "Profile", "/requests": "My Requests"}
ADMIN_MENU = {
    **USER_MENU,
    "/employees": "Employees",
    "/departments": "Departments",
    "/accounts": "Accounts",
}


def _item_id(address: str) -> str:
    return "nav-" + (address.strip("/") or "home")


class Sidebar(Container):
    def __init__(self) -> None:
        super().__init__()
        self._update_lock = asyncio.Lock()

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def update_session(self) -> None:
        """Rebuild user info and menu entries for the current role."""
        # one rebuild at a time, menu item ids must stay unique
        async with self._update_lock:
            await self._rebuild()

    async def _rebuild(self) -> None:
        state = self.app.state
        btn_logout = self.query_one("#btn-logout", Button)

        if state.account:
            rows = [
                ["Name", state.display_name],
                ["Email", state.account.email],
                ["Role", state.role.title()],
            ]
            md = generate_markdown_table(None, rows, ["l", "l"])
            menu = ADMIN_MENU if state.is_admin else USER_MENU
            btn_logout.display = True
        else:
            md = "_Not logged in._"
            menu = GUEST_MENU
            btn_logout.display = False
        await self.query_one(Markdown).update(md)

        list_menu = self.query_one("#list-menu", ListView)
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(label), id=_item_id(addr)) for addr, label in menu.items()]
        )
        self.highlight_item(
            next((a for a, v in ROUTES.items() if v == self.app.current_mode), None)
        )

    def highlight_item(self, address: Optional[str]) -> None:
        current = _item_id(address) if address else None
        for item in self.query_one("#list-menu", ListView).children:
            item.highlighted = item.id == current

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        name = event.item.id.removeprefix("nav-")
        self.app.navigate("/" if name == "home" else "/" + name)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    TITLE_TEXT: ClassVar[str] = ""

    def compose(self) -> ComposeResult:
        yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def on_mount(self) -> None:
        self.app.title = "Staff Portal"
        self.sub_title = self.TITLE_TEXT

    @on(ScreenResume)
    async def handle_resume(self) -> None:
        await self.query_one(Sidebar).update_session()

    async def mutate(
        self, op: Awaitable[T], success: str, kinds: FrozenSet[str] = frozenset()
    ) -> Optional[T]:
        """
        Run one store mutation at the handler boundary.
        Errors become an error notice and None; on success the views that
        render `kinds` are refreshed before returning.
        """
        try:
            result = await op
        except PortalError as e:
            self.notify(str(e), severity="error")
            return None
        self.notify(success)
        if kinds:
            await self.app.router.store_changed(kinds)
        return result

    @work()
    async def action_quit(self):
        if await self.app.push_screen_wait(QuitDialogModal()):
            self.app.post_message(QuitRequestedMessage())


class LiveScreen(BaseScreen):
    """
    A page that renders store data. The router calls `reload` once per
    settled navigation to it, and again whenever a collection in KINDS changes.
    """

    VIEW_ID: ClassVar[str] = ""
    KINDS: ClassVar[FrozenSet[str]] = frozenset()

    def reload(self) -> None:
        raise NotImplementedError
