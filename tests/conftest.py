from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional

import pytest
from fastapi import FastAPI, Header, Request, Response
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from pydantic import BaseModel

from jotter.api import ApiClient
from jotter.session import SessionStore
from jotter.storage import LocalStorage

BASE_URL = "http://testserver/api"


class Credentials(BaseModel):
    username: str
    password: str


class NoteIn(BaseModel):
    title: str
    content: str = ""


class FakeBackend:
    """In-memory notes server speaking the same JSON API as the real backend."""

    def __init__(self) -> None:
        self.users: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.notes: dict[int, dict] = {}
        self.owners: dict[int, str] = {}
        self.requests: list[tuple[str, str, Optional[str]]] = []
        self.next_token: Optional[str] = None
        self._next_id = 1
        self.app = self._build()

    def calls(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.requests if m == method and p == path)

    def add_user(self, username: str, password: str) -> None:
        self.users[username] = password

    def _user(self, authorization: Optional[str]) -> Optional[str]:
        if not authorization or not authorization.startswith("Bearer "):
            return None
        return self.tokens.get(authorization[len("Bearer "):])

    def _owned(self, note_id: int, user: str) -> Optional[dict]:
        if self.owners.get(note_id) != user:
            return None
        return self.notes.get(note_id)

    def _build(self) -> FastAPI:
        app = FastAPI(title="fake notes backend")

        def unauthorized():
            return JSONResponse({"error": "Access token required"}, status_code=401)

        def not_found():
            return JSONResponse({"error": "Note not found"}, status_code=404)

        @app.middleware("http")
        async def record(request: Request, call_next):
            self.requests.append((request.method, request.url.path, request.headers.get("authorization")))
            return await call_next(request)

        @app.post("/api/auth/register", status_code=201)
        def register(payload: Credentials):
            if payload.username in self.users:
                return JSONResponse({"error": "Username already exists"}, status_code=400)
            self.users[payload.username] = payload.password
            return {"message": "User registered successfully", "userId": len(self.users)}

        @app.post("/api/auth/login")
        def login(payload: Credentials):
            if self.users.get(payload.username) != payload.password:
                return JSONResponse({"error": "Invalid credentials"}, status_code=401)
            token = self.next_token or f"token-{payload.username}"
            self.tokens[token] = payload.username
            return {"message": "Login successful", "token": token, "username": payload.username}

        @app.get("/api/notes")
        def list_notes(authorization: Optional[str] = Header(None)):
            user = self._user(authorization)
            if user is None:
                return unauthorized()
            return [n for i, n in self.notes.items() if self.owners[i] == user]

        @app.get("/api/notes/{note_id}")
        def get_note(note_id: int, authorization: Optional[str] = Header(None)):
            user = self._user(authorization)
            if user is None:
                return unauthorized()
            note = self._owned(note_id, user)
            return note if note else not_found()

        @app.post("/api/notes", status_code=201)
        def create_note(payload: NoteIn, authorization: Optional[str] = Header(None)):
            user = self._user(authorization)
            if user is None:
                return unauthorized()
            now = datetime.now(UTC).isoformat()
            note = {"id": self._next_id, "title": payload.title, "content": payload.content,
                    "created_at": now, "updated_at": now}
            self.notes[self._next_id] = note
            self.owners[self._next_id] = user
            self._next_id += 1
            return note

        @app.put("/api/notes/{note_id}")
        def update_note(note_id: int, payload: NoteIn, authorization: Optional[str] = Header(None)):
            user = self._user(authorization)
            if user is None:
                return unauthorized()
            note = self._owned(note_id, user)
            if not note:
                return not_found()
            note.update(title=payload.title, content=payload.content,
                        updated_at=datetime.now(UTC).isoformat())
            return note

        @app.delete("/api/notes/{note_id}")
        def delete_note(note_id: int, authorization: Optional[str] = Header(None)):
            user = self._user(authorization)
            if user is None:
                return unauthorized()
            if not self._owned(note_id, user):
                return not_found()
            del self.notes[note_id]
            del self.owners[note_id]
            return Response(status_code=204)

        return app


@pytest.fixture
def store(tmp_path):
    storage = LocalStorage(tmp_path / "store.sqlite")
    yield storage
    storage.close()


@pytest.fixture
def session(store):
    return SessionStore(store)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http(backend):
    with TestClient(backend.app) as client:
        yield client


@pytest.fixture
def api(session, http):
    return ApiClient(session, base_url=BASE_URL, http=http)


@pytest.fixture
def logged_in(api, backend):
    backend.add_user("alice", "pw")
    api.login("alice", "pw")
    return api
