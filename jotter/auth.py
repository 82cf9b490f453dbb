from __future__ import annotations
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from .api import ApiClient
from .exceptions import StructuralError

_current: ContextVar[Optional["AuthContext"]] = ContextVar("jotter_auth", default=None)


class AuthContext:
    """In-memory view of who is signed in, for the view layer.

    State is read from the session store once, when the context is built.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.is_authenticated = api.is_authenticated()
        self.username: Optional[str] = api.get_username()

    def login(self, username: str, password: str) -> None:
        response = self.api.login(username, password)
        self.is_authenticated = True
        self.username = response.username

    def register(self, username: str, password: str) -> None:
        # registering does not sign the user in
        self.api.register(username, password)

    def logout(self) -> None:
        self.api.logout()
        self.is_authenticated = False
        self.username = None


@contextmanager
def provide_auth(api: ApiClient) -> Iterator[AuthContext]:
    """Make an AuthContext available to `use_auth()` for the duration of the block."""
    auth = AuthContext(api)
    token = _current.set(auth)
    try:
        yield auth
    finally:
        _current.reset(token)


def use_auth() -> AuthContext:
    auth = _current.get()
    if auth is None:
        raise StructuralError("use_auth must be used within an AuthProvider")
    return auth
