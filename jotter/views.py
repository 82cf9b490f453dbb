from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Union
import logging

from .api import ApiClient
from .auth import use_auth
from .cache import Mutation, QueryCache, Result
from .exceptions import RequestError, ValidationError
from .models import Note
from .ui import Navigator, Notifier

logger = logging.getLogger("jotter.views")

NOTES_KEY = ("notes",)


def note_key(note_id: int) -> tuple:
    return ("note", note_id)


def filter_notes(notes: Iterable[Note], query: str) -> list[Note]:
    """Case-insensitive substring match on title or content. Empty query keeps everything."""
    q = query.lower()
    return [n for n in notes if q in n.title.lower() or q in n.content.lower()]


def format_date(value: datetime) -> str:
    return f"{value:%b} {value.day}, {value.year}"


class Dashboard:
    """Note list with search, delete confirmation and logout."""

    def __init__(
        self,
        api: ApiClient,
        cache: QueryCache,
        notifier: Notifier,
        navigator: Navigator,
    ) -> None:
        self.auth = use_auth()
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self.navigator = navigator
        self.search_query = ""
        self.pending_delete_id: Optional[int] = None
        self.load_error: Optional[RequestError] = None
        self.delete_mutation = Mutation(
            api.delete_note,
            on_success=self._deleted,
            on_error=self._delete_failed,
        )

    @property
    def username(self) -> Optional[str]:
        return self.auth.username

    @property
    def is_loading(self) -> bool:
        return self.cache.peek(NOTES_KEY) is None

    @property
    def notes(self) -> list[Note]:
        try:
            notes = self.cache.fetch(NOTES_KEY, self.api.get_notes)
        except RequestError as e:
            logger.warning("could not load notes: %s", e.message)
            self.load_error = e
            return []
        self.load_error = None
        return notes

    @property
    def filtered_notes(self) -> list[Note]:
        return filter_notes(self.notes, self.search_query)

    @property
    def empty_message(self) -> str:
        return "No notes found" if self.search_query else "No notes yet"

    # ---------- delete flow ----------
    def request_delete(self, note_id: int) -> None:
        self.pending_delete_id = note_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    def confirm_delete(self) -> Optional[Result[None]]:
        if self.pending_delete_id is None:
            return None
        return self.delete_mutation.mutate(self.pending_delete_id)

    def _deleted(self, _: None) -> None:
        self.cache.invalidate(NOTES_KEY)
        self.notifier.toast("Note deleted", "Your note has been deleted successfully")
        self.pending_delete_id = None

    def _delete_failed(self, _: Exception) -> None:
        # pending_delete_id is left as is, the confirmation stays open
        self.notifier.toast("Error", "Failed to delete note", "destructive")

    # ---------- navigation ----------
    def logout(self) -> None:
        self.auth.logout()
        self.navigator.navigate("/login")
        self.notifier.toast("Logged out", "You have been logged out successfully")

    def new_note(self) -> None:
        self.navigator.navigate("/notes/new")

    def edit_note(self, note_id: int) -> None:
        self.navigator.navigate(f"/notes/{note_id}")


class EditorState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"


class NoteEditor:
    """Edit buffer for one note, or for a new one when opened with id "new"."""

    def __init__(
        self,
        note_id: Union[int, str],
        api: ApiClient,
        cache: QueryCache,
        notifier: Notifier,
        navigator: Navigator,
    ) -> None:
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self.navigator = navigator
        self.is_new = str(note_id) == "new"
        self.note_id: Optional[int] = None if self.is_new else int(note_id)
        self.state = EditorState.READY if self.is_new else EditorState.LOADING
        self.title = ""
        self.content = ""
        self.is_saving = False
        self.load_error: Optional[RequestError] = None

        self.create_mutation = Mutation(
            api.create_note,
            on_success=self._created,
            on_error=lambda _: self.notifier.toast("Error", "Failed to create note", "destructive"),
        )
        self.update_mutation = Mutation(
            api.update_note,
            on_success=self._updated,
            on_error=lambda _: self.notifier.toast("Error", "Failed to save note", "destructive"),
        )

    @property
    def save_disabled(self) -> bool:
        return self.is_saving

    def load(self) -> Optional[Note]:
        if self.is_new:
            return None
        note_id = self.note_id
        try:
            note = self.cache.fetch(note_key(note_id), lambda: self.api.get_note(note_id))
        except RequestError as e:
            logger.warning("could not load note %s: %s", note_id, e.message)
            self.load_error = e
            # the form still opens, with empty buffers
            self.state = EditorState.READY
            return None
        self.load_error = None
        self.title = note.title
        self.content = note.content
        self.state = EditorState.READY
        return note

    def save(self) -> Result[Note]:
        if not self.title.strip():
            self.notifier.toast("Title required", "Please enter a title for your note", "destructive")
            return Result(error=ValidationError("Please enter a title for your note", field="title"))

        self.is_saving = True
        self.state = EditorState.SAVING
        try:
            if self.is_new:
                return self.create_mutation.mutate(self.title, self.content)
            return self.update_mutation.mutate(self.note_id, self.title, self.content)
        finally:
            self.is_saving = False
            if self.state is EditorState.SAVING:
                self.state = EditorState.READY

    def _created(self, _: Note) -> None:
        self.cache.invalidate(NOTES_KEY)
        self.notifier.toast("Note created", "Your note has been created successfully")
        self.navigator.navigate("/dashboard")

    def _updated(self, _: Note) -> None:
        self.cache.invalidate(NOTES_KEY)
        self.cache.invalidate(note_key(self.note_id))
        self.notifier.toast("Note saved", "Your changes have been saved")

    def back(self) -> None:
        self.navigator.navigate("/dashboard")
