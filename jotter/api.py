from __future__ import annotations
from typing import Any, Optional
import logging

import httpx
from pydantic import TypeAdapter

from .config import api_base_url
from .exceptions import RequestError
from .models import LoginResponse, Note, RegisterResponse
from .session import SessionStore

logger = logging.getLogger("jotter.api")


class ApiClient:
    """One method per backend endpoint.

    Every call is a single round trip: no retries, no pagination, and the
    httpx default timeout. `login` and `logout` also write the session store,
    so the client is not a pure HTTP wrapper.

    Auth endpoints report the server's `error` field; note endpoints report a
    fixed message and keep whatever the server said in `RequestError.context`.
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: Optional[str] = None,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.session = session
        self.base_url = (base_url or api_base_url()).rstrip("/")
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client()

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---------- plumbing ----------
    def _auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
        failure: str,
    ) -> httpx.Response:
        try:
            response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RequestError(failure, context={"method": method, "path": path, "reason": str(e)}) from e
        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _decode(response: httpx.Response, schema: Any, failure: str) -> Any:
        """Parse a success body into `schema`; an unreadable body is a failed request."""
        try:
            return TypeAdapter(schema).validate_json(response.content)
        except ValueError as e:
            logger.warning("%s %s returned an unreadable body", response.request.method, response.request.url.path)
            raise RequestError(
                failure,
                status_code=response.status_code,
                context={"path": response.request.url.path, "reason": str(e)},
            ) from e

    def _auth_call(self, path: str, username: str, password: str, failure: str) -> httpx.Response:
        response = self._send(
            "POST",
            path,
            json={"username": username, "password": password},
            headers={"Content-Type": "application/json"},
            failure=failure,
        )
        if not response.is_success:
            body = self._error_body(response)
            message = body.get("error") or failure
            logger.warning("POST %s rejected with %d: %s", path, response.status_code, message)
            raise RequestError(message, status_code=response.status_code, context={"path": path})
        return response

    def _notes_call(self, method: str, path: str, failure: str, json: Any = None) -> httpx.Response:
        response = self._send(method, path, json=json, headers=self._auth_headers(), failure=failure)
        if not response.is_success:
            detail = self._error_body(response).get("error")
            logger.warning("%s %s rejected with %d", method, path, response.status_code)
            raise RequestError(
                failure,
                status_code=response.status_code,
                context={"method": method, "path": path, "detail": detail},
            )
        return response

    # ---------- authentication ----------
    def register(self, username: str, password: str) -> RegisterResponse:
        response = self._auth_call("/auth/register", username, password, "Registration failed")
        return self._decode(response, RegisterResponse, "Registration failed")

    def login(self, username: str, password: str) -> LoginResponse:
        response = self._auth_call("/auth/login", username, password, "Login failed")
        result = self._decode(response, LoginResponse, "Login failed")
        self.session.set_session(result.token, result.username)
        logger.info("logged in as %s", result.username)
        return result

    def logout(self) -> None:
        self.session.clear_session()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    def get_username(self) -> Optional[str]:
        return self.session.get_username()

    # ---------- notes ----------
    def get_notes(self) -> list[Note]:
        response = self._notes_call("GET", "/notes", "Failed to fetch notes")
        return self._decode(response, list[Note], "Failed to fetch notes")

    def get_note(self, note_id: int) -> Note:
        response = self._notes_call("GET", f"/notes/{note_id}", "Failed to fetch note")
        return self._decode(response, Note, "Failed to fetch note")

    def create_note(self, title: str, content: str) -> Note:
        response = self._notes_call(
            "POST", "/notes", "Failed to create note", json={"title": title, "content": content}
        )
        return self._decode(response, Note, "Failed to create note")

    def update_note(self, note_id: int, title: str, content: str) -> Note:
        response = self._notes_call(
            "PUT", f"/notes/{note_id}", "Failed to update note", json={"title": title, "content": content}
        )
        return self._decode(response, Note, "Failed to update note")

    def delete_note(self, note_id: int) -> None:
        self._notes_call("DELETE", f"/notes/{note_id}", "Failed to delete note")
