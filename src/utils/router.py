"""
Address -> view routing with the authentication and admin gates.

`resolve` is pure and decides where an address settles for a given session.
`Router` wraps it with the side effects: notices, view activation, and the
per-view refresh that must run after the view is visible.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from db.models import Account
from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_ROUTE = "/"
LOGIN_ROUTE = "/login"

ROUTES: Dict[str, str] = {
    "/": "home-page",
    "/login": "login-page",
    "/register": "register-page",
    "/verify-email": "verify-email-page",
    "/profile": "profile-page",
    "/employees": "employees-page",
    "/departments": "departments-page",
    "/accounts": "accounts-page",
    "/requests": "requests-page",
}

PROTECTED_ROUTES = frozenset(
    {"/profile", "/employees", "/departments", "/accounts", "/requests"}
)
ADMIN_ROUTES = frozenset({"/employees", "/departments", "/accounts"})

LIVE_VIEWS = frozenset(
    {"profile-page", "accounts-page", "departments-page", "employees-page", "requests-page"}
)

MSG_LOGIN_REQUIRED = "You must log in first."
MSG_ADMIN_ONLY = "Access denied. Admins only."


@dataclass(frozen=True)
class Notice:
    message: str
    severity: str = "warning"


@dataclass(frozen=True)
class Resolution:
    address: str
    view_id: str
    redirected: bool = False
    notices: Tuple[Notice, ...] = ()


def normalize(address: Optional[str]) -> str:
    """'#/profile', 'profile', ' ' and None become '/profile', '/profile', '/', '/'."""
    address = (address or "").strip().lstrip("#").strip()
    if not address:
        return DEFAULT_ROUTE
    if not address.startswith("/"):
        address = "/" + address
    return address


def resolve(address: Optional[str], account: Optional[Account]) -> Resolution:
    """
    Decide where `address` settles for the given session.

    The login check runs before the admin check: without an identity there is no
    role to evaluate. Each rejection substitutes an address that passes its own
    gate, so at most two hops happen.
    """
    target = normalize(address)
    notices: List[Notice] = []

    if target in PROTECTED_ROUTES and account is None:
        notices.append(Notice(MSG_LOGIN_REQUIRED))
        target = LOGIN_ROUTE
    elif target in ADMIN_ROUTES and account.role != "admin":
        notices.append(Notice(MSG_ADMIN_ONLY))
        target = DEFAULT_ROUTE

    if target not in ROUTES:
        target = DEFAULT_ROUTE

    return Resolution(
        address=target,
        view_id=ROUTES[target],
        redirected=bool(notices),
        notices=tuple(notices),
    )


RefreshCallback = Callable[[], Any]
ActivateCallback = Callable[[str], Awaitable[Any]]
NotifyCallback = Callable[[str, str], Any]


@dataclass
class _ViewEntry:
    refresh: RefreshCallback
    kinds: FrozenSet[str] = frozenset()


@dataclass
class Router:
    """
    Holds the current address and the registered view refresh callbacks.

    `session` returns the current account (or None) at navigation time.
    `activate` makes exactly one view visible. `notify` shows a notice.
    """

    session: Callable[[], Optional[Account]]
    activate: ActivateCallback
    notify: NotifyCallback = lambda message, severity: None
    current: Optional[str] = None

    _views: Dict[str, _ViewEntry] = field(default_factory=dict, repr=False)

    @property
    def current_view(self) -> Optional[str]:
        return ROUTES.get(self.current) if self.current else None

    def register(
        self, view_id: str, refresh: RefreshCallback, kinds: Iterable[str] = ()
    ) -> None:
        """
        Register the zero-argument refresh for a view. `kinds` names the store
        collections ("accounts", "departments", ...) the view renders.
        """
        self._views[view_id] = _ViewEntry(refresh, frozenset(kinds))

    async def navigate(self, address: Optional[str]) -> Resolution:
        res = resolve(address, self.session())
        for notice in res.notices:
            self.notify(notice.message, notice.severity)
        if res.redirected:
            _logger.info(f"Redirect {normalize(address)} -> {res.address}")

        await self.activate(res.view_id)
        self.current = res.address
        _logger.debug(f"Settled on {res.address} ({res.view_id})")

        if res.view_id in LIVE_VIEWS:
            await self._refresh(res.view_id)
        return res

    async def store_changed(self, kinds: Iterable[str]) -> bool:
        """Refresh the current view if it renders any of the changed collections."""
        view_id = self.current_view
        entry = self._views.get(view_id) if view_id else None
        if entry is None or not entry.kinds & frozenset(kinds):
            return False
        await self._refresh(view_id)
        return True

    async def _refresh(self, view_id: str) -> None:
        entry = self._views.get(view_id)
        if entry is None:
            return
        result = entry.refresh()
        if inspect.isawaitable(result):
            await result
