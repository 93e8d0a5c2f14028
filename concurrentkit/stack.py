"""A thread-safe last-in-first-out container."""

from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from .linked_list import ConditionNotMetError, Entry, Tag

T = TypeVar("T")
R = TypeVar("R")


class Stack(Generic[T]):
    """Last-in-first-out container built from linked entries."""

    def __init__(self) -> None:
        self._newest: Optional[Entry[T]] = None
        self._lock = threading.Lock()

    def _load(self) -> Optional[Entry[T]]:
        with self._lock:
            return self._newest

    def _compare_exchange(
        self, expected: Optional[Entry[T]], new: Optional[Entry[T]]
    ) -> tuple[bool, Optional[Entry[T]]]:
        with self._lock:
            if self._newest is expected:
                self._newest = new
                return True, new
            return False, self._newest

    def _cleanup_newest(self, newest: Optional[Entry[T]]) -> Optional[Entry[T]]:
        while newest is not None and newest.is_deleted():
            _, newest = self._compare_exchange(newest, newest.next_ptr())
        return newest

    def push(self, val: T) -> Entry[T]:
        """Push a value and return the entry holding it."""
        return self.push_if(val, lambda _entry: True)

    def push_if(self, val: T, cond: Callable[[Optional[Entry[T]]], bool]) -> Entry[T]:
        """Push a value if ``cond`` accepts the newest entry (or None).

        Raises ConditionNotMetError carrying ``val`` otherwise.
        """
        newest = self._cleanup_newest(self._load())
        if not cond(newest):
            raise ConditionNotMetError(val)
        new_entry: Entry[T] = Entry(val)
        while True:
            new_entry._store(newest, Tag.NONE)
            ok, actual = self._compare_exchange(newest, new_entry)
            if ok:
                return new_entry
            newest = self._cleanup_newest(actual)
            if not cond(newest):
                raise ConditionNotMetError(new_entry.take_inner())

    def pop(self) -> Optional[Entry[T]]:
        """Pop the newest entry, or return None if the stack is empty."""
        return self.pop_if(lambda _entry: True)

    def pop_if(self, cond: Callable[[Entry[T]], bool]) -> Optional[Entry[T]]:
        """Pop the newest entry if ``cond`` accepts it.

        Returns None if the stack is empty; raises ConditionNotMetError
        carrying the newest entry if the condition fails.
        """
        newest = self._cleanup_newest(self._load())
        while newest is not None:
            if not newest.is_deleted() and not cond(newest):
                raise ConditionNotMetError(newest)
            if newest.delete_self():
                self._cleanup_newest(newest)
                return newest
            newest = self._cleanup_newest(newest)
        return None

    def peek(self, reader: Callable[[Entry[T]], R]) -> Optional[R]:
        """Apply ``reader`` to the newest entry; None if the stack is empty."""
        newest = self._cleanup_newest(self._load())
        return None if newest is None else reader(newest)

    def is_empty(self) -> bool:
        """Return True if the stack holds no entries."""
        return self._cleanup_newest(self._load()) is None

    def copy(self) -> Stack[T]:
        """Return a new stack holding the same values in the same order."""
        cloned: Stack[T] = Stack()
        previous: Optional[Entry[T]] = None
        current = self._load()
        while current is not None:
            if not current.is_deleted():
                new_entry: Entry[T] = Entry(current.value)
                if previous is None:
                    cloned._newest = new_entry
                else:
                    previous._store(new_entry, Tag.NONE)
                previous = new_entry
            current = current.next_ptr()
        return cloned

    def __iter__(self) -> Iterator[T]:
        current = self._cleanup_newest(self._load())
        while current is not None:
            yield current.value
            current = current.next_ptr()

    def __repr__(self) -> str:
        items: list[Any] = list(self)
        return "{" + ", ".join(repr(v) for v in items) + "}"