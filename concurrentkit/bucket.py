"""Fixed-size buckets with linear probing and linked overflow blocks."""

from __future__ import annotations

import threading
from typing import Any, Callable, Iterator, Optional, TypeVar

R = TypeVar("R")

BUCKET_LEN = 32
"""Number of entry slots in a bucket."""

LINKED_LEN = BUCKET_LEN // 4
"""Number of entry slots in an overflow block."""

KILLED = 1 << 31
WAITING = 1 << 30
LOCK = 1 << 29
SLOCK_MAX = LOCK - 1
LOCK_MASK = LOCK | SLOCK_MAX

_FULL_BITMAP = 0xFFFFFFFF >> (32 - BUCKET_LEN)
_FUSED = -1


class WouldBlockError(Exception):
    """Raised when a bucket lock cannot be taken without waiting."""


class _Metadata:
    """Slot bookkeeping shared by buckets and their overflow blocks."""

    def __init__(self, length: int, link: Optional[LinkedBucket] = None) -> None:
        self.length = length
        self.link: Optional[LinkedBucket] = link
        self.occupied_bitmap = 0
        self.removed_bitmap = 0
        self.partial_hash_array: list[int] = [0] * length
        self.data_block: list[Optional[tuple[Any, Any]]] = [None] * length

    def valid_bitmap(self, lock_free: bool) -> int:
        if lock_free:
            return self.occupied_bitmap & ~self.removed_bitmap
        return self.occupied_bitmap


class LinkedBucket(_Metadata):
    """A small overflow block attached to a bucket as a linked list."""

    def __init__(self, next_link: Optional[LinkedBucket] = None) -> None:
        super().__init__(LINKED_LEN, next_link)
        self.prev_link: Optional[LinkedBucket] = None


def _search_entry(
    metadata: _Metadata, key: Any, partial_hash: int, lock_free: bool
) -> Optional[tuple[int, tuple[Any, Any]]]:
    """Probe ``metadata`` from the preferred slot for an entry matching ``key``."""
    bitmap = metadata.valid_bitmap(lock_free)
    length = metadata.length
    preferred = partial_hash % length
    for offset in range(length):
        index = (preferred + offset) % length
        if bitmap & (1 << index) and metadata.partial_hash_array[index] == partial_hash:
            entry = metadata.data_block[index]
            if entry is not None and entry[0] == key:
                return index, entry
    return None


def _next_valid_index(metadata: _Metadata, current_index: int, lock_free: bool) -> Optional[int]:
    """Return the first valid slot at or after ``current_index``."""
    if current_index >= metadata.length:
        return None
    bitmap = metadata.valid_bitmap(lock_free) & ~((1 << current_index) - 1)
    if bitmap == 0:
        return None
    index = (bitmap & -bitmap).bit_length() - 1
    return index if index < metadata.length else None


class Bucket:
    """A small fixed-size hash table with linear probing.

    Entries that do not fit are kept in a chain of ``LinkedBucket`` blocks.
    With ``lock_free`` set, erased entries stay in place and are only
    flagged as removed so that concurrent readers can still see them.
    """

    def __init__(self, lock_free: bool = False) -> None:
        self._lock_free = lock_free
        self._state = 0
        self._num_entries = 0
        self._metadata = _Metadata(BUCKET_LEN)
        self._cond = threading.Condition(threading.RLock())

    @property
    def lock_free(self) -> bool:
        """Whether erased entries are kept in place for readers."""
        return self._lock_free

    def killed(self) -> bool:
        """Return True if the bucket has been killed."""
        with self._cond:
            return bool(self._state & KILLED)

    def num_entries(self) -> int:
        """Return the number of valid entries in the bucket."""
        return self._num_entries

    def need_rebuild(self) -> bool:
        """Return True if every slot of the bucket holds a removed entry."""
        return self._metadata.removed_bitmap == _FULL_BITMAP

    def search(self, key: Any, partial_hash: int) -> Optional[tuple[Any, Any]]:
        """Return the ``(key, value)`` entry for ``key``, or None."""
        if self._num_entries == 0:
            return None
        found = _search_entry(self._metadata, key, partial_hash, self._lock_free)
        if found is not None:
            return found[1]
        link = self._metadata.link
        while link is not None:
            found = _search_entry(link, key, partial_hash, self._lock_free)
            if found is not None:
                return found[1]
            link = link.link
        return None

    def entries(self) -> Iterator[tuple[Any, Any]]:
        """Yield every valid entry, bucket slots first, then overflow blocks."""
        entry_ptr = EntryPtr()
        while entry_ptr.next(self):
            yield entry_ptr.get()

    def _get(self, key: Any, partial_hash: int) -> EntryPtr:
        """Return an EntryPtr to the entry for ``key``; invalid if absent."""
        if self._num_entries == 0:
            return EntryPtr(self)
        found = _search_entry(self._metadata, key, partial_hash, self._lock_free)
        if found is not None:
            return EntryPtr(self, None, found[0])
        link = self._metadata.link
        while link is not None:
            found = _search_entry(link, key, partial_hash, self._lock_free)
            if found is not None:
                return EntryPtr(self, link, found[0])
            link = link.link
        return EntryPtr(self)

    def _clear_links(self) -> None:
        """Detach every overflow block from the bucket."""
        link = self._metadata.link
        self._metadata.link = None
        while link is not None:
            following = link.link
            link.link = None
            link = following

    # Lock state primitives.

    def _try_lock_exclusive(self) -> bool:
        """Take the exclusive lock; False if killed, WouldBlockError if busy."""
        with self._cond:
            current = self._state & ~LOCK_MASK
            if current & KILLED:
                return False
            if self._state != current:
                raise WouldBlockError("the bucket is locked")
            self._state = current | LOCK
            return True

    def _try_lock_shared(self) -> bool:
        """Take a shared lock; False if killed, WouldBlockError if busy."""
        with self._cond:
            current = self._state
            if (current & LOCK_MASK) >= SLOCK_MAX:
                raise WouldBlockError("the bucket is exclusively locked")
            if current & KILLED:
                return False
            self._state = current + 1
            return True

    def _unlock_exclusive(self) -> None:
        with self._cond:
            wakeup = bool(self._state & WAITING)
            self._state &= ~(WAITING | LOCK)
            if wakeup:
                self._cond.notify_all()

    def _unlock_shared(self) -> None:
        with self._cond:
            wakeup = bool(self._state & WAITING)
            self._state = (self._state - 1) & ~WAITING
            if wakeup:
                self._cond.notify_all()

    def _acquire(self, attempt: Callable[[], R]) -> R:
        """Call ``attempt`` until it stops raising WouldBlockError, waiting in between."""
        while True:
            try:
                return attempt()
            except WouldBlockError:
                pass
            with self._cond:
                self._state |= WAITING
                try:
                    return attempt()
                except WouldBlockError:
                    self._cond.wait()

    def _kill(self) -> None:
        with self._cond:
            self._state |= KILLED


class EntryPtr:
    """A cursor over the entries of a bucket and its overflow blocks."""

    def __init__(
        self,
        bucket: Optional[Bucket] = None,
        link: Optional[LinkedBucket] = None,
        index: int = BUCKET_LEN,
    ) -> None:
        self._bucket = bucket
        self.current_link = link
        self.current_index = index

    def is_valid(self) -> bool:
        """Return True if the cursor points to an entry or has been exhausted."""
        return self.current_index != BUCKET_LEN

    def next(self, bucket: Bucket) -> bool:
        """Advance to the next valid entry; return False once exhausted."""
        self._bucket = bucket
        if self.current_index != _FUSED:
            lock_free = bucket.lock_free
            if self.current_link is None and self._next_entry(bucket._metadata, lock_free):
                return True
            while self.current_link is not None:
                if self._next_entry(self.current_link, lock_free):
                    return True
            self.current_index = _FUSED
        return False

    def get(self) -> tuple[Any, Any]:
        """Return the ``(key, value)`` entry the cursor points to."""
        metadata = self._metadata()
        if not 0 <= self.current_index < metadata.length:
            raise LookupError("the cursor does not point to an entry")
        entry = metadata.data_block[self.current_index]
        if entry is None:
            raise LookupError("the cursor does not point to an entry")
        return entry

    def partial_hash(self, bucket: Bucket) -> int:
        """Return the partial hash stored for the entry the cursor points to."""
        metadata = self.current_link if self.current_link is not None else bucket._metadata
        if not 0 <= self.current_index < metadata.length:
            raise LookupError("the cursor does not point to an entry")
        return metadata.partial_hash_array[self.current_index]

    def _metadata(self) -> _Metadata:
        if self.current_link is not None:
            return self.current_link
        if self._bucket is None:
            raise LookupError("the cursor is not attached to a bucket")
        return self._bucket._metadata

    def _next_entry(self, metadata: _Metadata, lock_free: bool) -> bool:
        start = 0 if self.current_index == metadata.length else self.current_index + 1
        index = _next_valid_index(metadata, start, lock_free)
        if index is not None:
            self.current_index = index
            return True
        self.current_link = metadata.link
        self.current_index = LINKED_LEN
        return False