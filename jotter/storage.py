from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime, UTC
from pathlib import Path
from typing import Iterator, Optional

from sqlmodel import Session, SQLModel, create_engine, select

from .config import store_path
from .models import StoredEntry


class LocalStorage:
    """Persistent string key-value store, the local counterpart of browser localStorage.

    Each instance owns an engine bound to one SQLite file; the file and its
    table are created on first use. Two instances on the same path see the
    same entries.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else store_path()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{self.path}", echo=False)
        SQLModel.metadata.create_all(self.engine, tables=[StoredEntry.__table__])

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _scope(self) -> Iterator[Session]:
        # commit on success, roll back on any error
        with Session(self.engine, expire_on_commit=False) as s:
            try:
                yield s
                s.commit()
            except Exception:
                s.rollback()
                raise

    def get_item(self, key: str) -> Optional[str]:
        with self._scope() as s:
            entry = s.get(StoredEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self._scope() as s:
            entry = s.get(StoredEntry, key)
            if entry is None:
                entry = StoredEntry(key=key, value=value)
            else:
                entry.value = value
                entry.updated_at = datetime.now(UTC)
            s.add(entry)

    def remove_item(self, key: str) -> None:
        with self._scope() as s:
            entry = s.get(StoredEntry, key)
            if entry is not None:
                s.delete(entry)

    def clear(self) -> None:
        with self._scope() as s:
            for entry in s.exec(select(StoredEntry)):
                s.delete(entry)
