from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from db import store as store_io
from db.models import Account, Store
from utils.errors import AuthFailure
from utils.logger import get_logger

_logger = get_logger(__name__)

SessionListener = Callable[[Optional[Account]], None]


@dataclass
class AppState:
    """
    Centralized application context shared by the router and every screen.

    Fields:
      - store: the loaded data set, mutated in place by db.crud
      - account: current logged-in account, or None
      - pending_email: account awaiting verification after registration (not persisted)
    """

    store: Store = field(default_factory=Store)
    account: Optional[Account] = None
    pending_email: Optional[str] = None

    _listeners: List[SessionListener] = field(default_factory=list, repr=False)

    @property
    def role(self) -> Optional[str]:
        return self.account.role if self.account else None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        return self.account.full_name if self.account else ""

    def subscribe(self, listener: SessionListener) -> None:
        """listener(account) is called after every session change."""
        self._listeners.append(listener)

    def _set_account(self, account: Optional[Account]) -> None:
        self.account = account
        for listener in self._listeners:
            listener(account)

    def session_updated(self) -> None:
        """Re-notify listeners after the session account was edited in place."""
        self._set_account(self.account)

    async def start(self) -> None:
        """Load the store, then rebuild the session from the saved token."""
        self.store = await store_io.load()
        await self.resolve_from_token()

    async def resolve_from_token(self) -> Optional[Account]:
        token = await store_io.read_token()
        if not token:
            return None
        account = self.store.find_account(token)
        if account is None:
            _logger.info(f"Stale auth token for {token}, ignoring.")
            return None
        self._set_account(account)
        return account

    async def login(self, email: str, password: str) -> Account:
        """
        Raises AuthFailure for unknown email, wrong password, or unverified account
        alike. The session is left untouched on failure.
        """
        account = self.store.find_account(email or "")
        if account is None or account.password != password or not account.verified:
            _logger.info(f"Login failed for {email!r}.")
            raise AuthFailure("Invalid email or password, or email not verified.")

        await store_io.write_token(account.email)
        self._set_account(account)
        _logger.info(f"Login: {account.email} ({account.role}).")
        return account

    async def logout(self) -> None:
        if self.account:
            _logger.info(f"Logout: {self.account.email}.")
        await store_io.clear_token()
        self._set_account(None)
