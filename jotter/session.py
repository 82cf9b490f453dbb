from __future__ import annotations
from typing import Optional

from .storage import LocalStorage

TOKEN_KEY = "authToken"
USERNAME_KEY = "username"


class SessionStore:
    """Token and username of the signed-in user, kept as two independent entries.

    A stored token is what makes the client authenticated; nothing checks
    its shape or expiry. A stale token is only discovered when the backend
    rejects a request.
    """

    def __init__(self, storage: Optional[LocalStorage] = None) -> None:
        self.storage = storage if storage is not None else LocalStorage()

    def is_authenticated(self) -> bool:
        return bool(self.storage.get_item(TOKEN_KEY))

    def get_token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY)

    def get_username(self) -> Optional[str]:
        return self.storage.get_item(USERNAME_KEY)

    def set_session(self, token: str, username: str) -> None:
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USERNAME_KEY, username)

    def clear_session(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USERNAME_KEY)
