"""Singly linked list nodes whose forward link carries a small tag."""

from __future__ import annotations

import enum
import threading
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

_TAKEN = object()


class Tag(enum.Enum):
    """State flag stored alongside a forward link."""

    NONE = 0
    FIRST = 1
    SECOND = 2


class EntryDeletedError(Exception):
    """Raised when appending after a node that has been deleted."""

    def __init__(self, entry: Any) -> None:
        super().__init__("the node has been deleted")
        self.entry = entry


class ConditionNotMetError(Exception):
    """Raised when a conditional operation finds its condition unmet.

    ``value`` holds what the caller supplied, or the entry that failed the test.
    """

    def __init__(self, value: Any) -> None:
        super().__init__("the condition is not met")
        self.value = value


class LinkedList:
    """Mixin for a node of a singly linked list with a tagged forward link.

    A tag of ``Tag.FIRST`` means the node is marked, ``Tag.SECOND`` that it
    has been logically deleted.
    """

    def __init__(self) -> None:
        self._next: Optional[LinkedList] = None
        self._tag = Tag.NONE
        self._link_lock = threading.Lock()

    def _load(self) -> tuple[Optional[LinkedList], Tag]:
        with self._link_lock:
            return self._next, self._tag

    def _store(self, nxt: Optional[LinkedList], tag: Tag) -> None:
        with self._link_lock:
            self._next = nxt
            self._tag = tag

    def _compare_exchange(
        self,
        expected_next: Optional[LinkedList],
        expected_tag: Tag,
        new_next: Optional[LinkedList],
        new_tag: Tag,
    ) -> bool:
        with self._link_lock:
            if self._next is expected_next and self._tag is expected_tag:
                self._next = new_next
                self._tag = new_tag
                return True
            return False

    def _update_tag_if(self, new_tag: Tag, condition) -> bool:
        with self._link_lock:
            if condition(self._tag):
                self._tag = new_tag
                return True
            return False

    def is_clear(self) -> bool:
        """Return True if the node is neither marked nor deleted."""
        return self._load()[1] is Tag.NONE

    def mark(self) -> bool:
        """Mark the node; return False if it already carries a flag."""
        return self._update_tag_if(Tag.FIRST, lambda t: t is Tag.NONE)

    def unmark(self) -> bool:
        """Remove the mark; return False if the node was not marked."""
        return self._update_tag_if(Tag.NONE, lambda t: t is Tag.FIRST)

    def is_marked(self) -> bool:
        """Return True if the node is marked."""
        return self._load()[1] is Tag.FIRST

    def delete_self(self) -> bool:
        """Delete the node; return False if it was already deleted."""
        return self._update_tag_if(Tag.SECOND, lambda t: t is not Tag.SECOND)

    def is_deleted(self) -> bool:
        """Return True if the node has been deleted."""
        return self._load()[1] is Tag.SECOND

    def push_back(self, entry: LinkedList, mark: bool) -> LinkedList:
        """Link ``entry`` right after this node and return it.

        With ``mark`` true the node is marked in the same step, otherwise
        any mark is cleared. Raises EntryDeletedError if this node is deleted.
        """
        new_tag = Tag.FIRST if mark else Tag.NONE
        nxt, tag = self._load()
        while tag is not Tag.SECOND:
            entry._store(nxt, Tag.NONE)
            if self._compare_exchange(nxt, tag, entry, new_tag):
                return entry
            nxt, tag = self._load()
        raise EntryDeletedError(entry)

    def next_ptr(self) -> Optional[LinkedList]:
        """Return the closest following node that is not deleted.

        Deleted nodes passed over are unlinked if this node is still valid.
        """
        self_next, self_tag = self._load()
        nxt = self_next
        update_self = False
        while nxt is not None:
            next_next, next_tag = nxt._load()
            if next_tag is not Tag.SECOND:
                break
            update_self = True
            nxt = next_next
        if update_self and self_tag is not Tag.SECOND:
            self._compare_exchange(self_next, self_tag, nxt, self_tag)
        return nxt


class Entry(LinkedList, Generic[T]):
    """A list node holding one value."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value: Any = value

    @property
    def value(self) -> T:
        """The stored value; raises LookupError once it has been taken."""
        if self._value is _TAKEN:
            raise LookupError("the value has been taken out of the entry")
        return self._value

    def take_inner(self) -> T:
        """Remove and return the stored value."""
        value = self.value
        self._value = _TAKEN
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self._value is other._value or self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self._value is _TAKEN:
            return "None"
        return f"Some({self._value})"

    def __repr__(self) -> str:
        shown = None if self._value is _TAKEN else self._value
        return f"Entry(value={shown!r}, removed={self.is_deleted()})"