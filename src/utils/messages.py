from typing import Optional

from textual.message import Message

from db.models import Account


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class SessionChangedMessage(Message):
    """
    Posted at app level after login, logout or token resolution,
    so the sidebar can show the right name and menu entries.
    """

    bubble = True

    def __init__(self, account: Optional[Account]) -> None:
        super().__init__()
        self.account = account


class UserLogoutMessage(Message):
    """
    broadcasted when the user confirms logging out
    """

    bubble = True
