from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar
import logging

from .exceptions import JotterError

logger = logging.getLogger("jotter.cache")

T = TypeVar("T")
Key = tuple[Hashable, ...]


@dataclass
class _Entry:
    value: Any
    stale: bool = False


class QueryCache:
    """Results of read calls, keyed by tuples such as ("notes",) or ("note", 7)."""

    def __init__(self) -> None:
        self._entries: dict[Key, _Entry] = {}

    def fetch(self, key: Key, fn: Callable[[], T]) -> T:
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            return entry.value
        value = fn()  # failures are not cached
        self._entries[key] = _Entry(value)
        return value

    def peek(self, key: Key) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def is_stale(self, key: Key) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def invalidate(self, prefix: Key) -> int:
        """Mark every entry whose key starts with `prefix` stale. Returns how many matched."""
        n = len(prefix)
        matched = 0
        for key, entry in self._entries.items():
            if key[:n] == prefix:
                entry.stale = True
                matched += 1
        logger.debug("invalidated %d entries under %r", matched, prefix)
        return matched


@dataclass
class Result(Generic[T]):
    """Outcome of a mutation: either `data` or `error`, checked via `ok`."""

    data: Optional[T] = None
    error: Optional[JotterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Mutation(Generic[T]):
    def __init__(
        self,
        fn: Callable[..., T],
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[JotterError], None]] = None,
    ) -> None:
        self.fn = fn
        self.on_success = on_success
        self.on_error = on_error
        self.is_pending = False

    def mutate(self, *args: Any) -> Result[T]:
        self.is_pending = True
        try:
            data = self.fn(*args)
        except JotterError as e:
            if self.on_error:
                self.on_error(e)
            return Result(error=e)
        finally:
            self.is_pending = False
        if self.on_success:
            self.on_success(data)
        return Result(data=data)
