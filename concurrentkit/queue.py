"""A thread-safe first-in-first-out container."""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from .linked_list import ConditionNotMetError, Entry, Tag

T = TypeVar("T")
R = TypeVar("R")


class Queue(Generic[T]):
    """First-in-first-out container built from linked entries.

    ``oldest`` points to the oldest entry; ``newest`` eventually points to
    the newest one and is reset once the queue has been emptied.
    """

    def __init__(self) -> None:
        self._oldest: Optional[Entry[T]] = None
        self._newest: Optional[Entry[T]] = None
        self._lock = threading.Lock()

    def _load_oldest(self) -> Optional[Entry[T]]:
        with self._lock:
            return self._oldest

    def _load_newest(self) -> Optional[Entry[T]]:
        with self._lock:
            return self._newest

    def _set_newest(self, entry: Optional[Entry[T]]) -> None:
        with self._lock:
            self._newest = entry

    def _compare_exchange_oldest(
        self, expected: Optional[Entry[T]], new: Optional[Entry[T]]
    ) -> tuple[bool, Optional[Entry[T]]]:
        with self._lock:
            if self._oldest is expected:
                self._oldest = new
                return True, new
            return False, self._oldest

    def _cleanup_oldest(self) -> Optional[Entry[T]]:
        """Unlink a deleted oldest entry and return the current oldest one."""
        oldest = self._load_oldest()
        if oldest is not None and oldest.is_deleted():
            ok, actual = self._compare_exchange_oldest(oldest, oldest.next_ptr())
            if ok and actual is None:
                self._set_newest(None)
            return actual
        return oldest

    @staticmethod
    def _traverse(start: Optional[Entry[T]]) -> Optional[Entry[T]]:
        current = start
        while current is not None:
            nxt = current.next_ptr()
            if nxt is None:
                break
            current = nxt
        return current

    def push(self, val: T) -> Entry[T]:
        """Push a value and return the entry holding it."""
        return self.push_if(val, lambda _entry: True)

    def push_if(self, val: T, cond: Callable[[Optional[Entry[T]]], bool]) -> Entry[T]:
        """Push a value if ``cond`` accepts the newest entry (or None).

        Raises ConditionNotMetError carrying ``val`` otherwise.
        """
        newest = self._load_newest()
        if newest is None:
            newest = self._load_oldest()
        newest = self._traverse(newest)
        if not cond(newest):
            raise ConditionNotMetError(val)

        new_entry: Entry[T] = Entry(val)
        while True:
            if newest is not None:
                ok = newest._compare_exchange(None, Tag.NONE, new_entry, Tag.NONE)
                actual_next, actual_tag = (None, Tag.NONE) if ok else newest._load()
            else:
                ok, actual_next = self._compare_exchange_oldest(None, new_entry)
                actual_tag = Tag.NONE
            if ok:
                self._set_newest(new_entry)
                if self._load_oldest() is None:
                    # The queue was emptied in the meantime.
                    self._set_newest(None)
                return new_entry
            if actual_tag is Tag.FIRST:
                newest = self._cleanup_oldest()
            elif actual_next is None:
                newest = self._load_oldest()
            else:
                newest = actual_next  # type: ignore[assignment]
            newest = self._traverse(newest)
            if not cond(newest):
                raise ConditionNotMetError(new_entry.take_inner())

    def pop(self) -> Optional[Entry[T]]:
        """Pop the oldest entry, or return None if the queue is empty."""
        return self.pop_if(lambda _entry: True)

    def pop_if(self, cond: Callable[[Entry[T]], bool]) -> Optional[Entry[T]]:
        """Pop the oldest entry if ``cond`` accepts it.

        Returns None if the queue is empty; raises ConditionNotMetError
        carrying the oldest entry if the condition fails.
        """
        current = self._load_oldest()
        while current is not None:
            if not current.is_deleted() and not cond(current):
                raise ConditionNotMetError(current)
            if current.delete_self():
                self._cleanup_oldest()
                return current
            current = self._cleanup_oldest()
        return None

    def peek(self, reader: Callable[[Entry[T]], R]) -> Optional[R]:
        """Apply ``reader`` to the oldest entry; None if the queue is empty."""
        current = self._load_oldest()
        while current is not None:
            if current.is_deleted():
                current = self._cleanup_oldest()
                continue
            return reader(current)
        return None

    def is_empty(self) -> bool:
        """Return True if the queue holds no entries."""
        return self._load_newest() is None

    def copy(self) -> Queue[T]:
        """Return a new queue holding the same values in the same order."""
        cloned: Queue[T] = Queue()
        current = self._load_oldest()
        while current is not None:
            nxt = current.next_ptr()
            if not current.is_deleted():
                cloned.push(current.value)
            current = nxt
        return cloned

    def __iter__(self) -> Iterator[T]:
        current = self._load_oldest()
        while current is not None:
            nxt = current.next_ptr()
            if not current.is_deleted():
                yield current.value
            current = nxt

    def __repr__(self) -> str:
        items: list[Any] = list(self)
        return "{" + ", ".join(repr(v) for v in items) + "}"