"""Arrays of buckets sized in powers of two, with an optional old array being rehashed."""

from __future__ import annotations

import threading
from typing import Optional

from .bucket import BUCKET_LEN, Bucket

_USIZE_BITS = 64
_USIZE_MAX = (1 << _USIZE_BITS) - 1
_HASH_MASK = (1 << 64) - 1


def _next_power_of_two(value: int) -> int:
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


def calculate_log2_array_size(capacity: int) -> int:
    """Return log2 of the number of buckets needed to hold ``capacity`` entries.

    The result is at least 1.
    """
    if capacity < 0:
        raise ValueError("capacity must not be negative")
    adjusted = min(capacity, (_USIZE_MAX // 2) - (BUCKET_LEN - 1))
    required_buckets = _next_power_of_two((adjusted + BUCKET_LEN - 1) // BUCKET_LEN)
    return max(required_buckets.bit_length() - 1, 1)


class _AtomicCounter:
    """An integer updated under a lock."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def load(self) -> int:
        with self._lock:
            return self._value

    def store(self, value: int) -> None:
        with self._lock:
            self._value = value

    def compare_exchange(self, expected: int, new: int) -> tuple[bool, int]:
        with self._lock:
            if self._value == expected:
                self._value = new
                return True, new
            return False, self._value

    def fetch_sub(self, amount: int) -> int:
        with self._lock:
            previous = self._value
            self._value -= amount
            return previous


class BucketArray:
    """A power-of-two sized array of buckets.

    ``capacity`` is the desired number of entries, not of buckets. While the
    array replaces a smaller or larger one, that one is kept as the old array
    until all of its buckets have been relocated. Buckets are created on first
    access.
    """

    def __init__(
        self,
        capacity: int,
        old_array: Optional[BucketArray] = None,
        lock_free: bool = False,
    ) -> None:
        log2_array_len = calculate_log2_array_size(capacity)
        self._array_len = 1 << log2_array_len
        self._hash_offset = 64 - log2_array_len
        self._sample_size = _next_power_of_two(log2_array_len)
        self._lock_free = lock_free
        self._buckets: list[Optional[Bucket]] = [None] * self._array_len
        self._buckets_lock = threading.Lock()
        self._old_array = old_array
        self._old_lock = threading.Lock()
        self._rehashing = _AtomicCounter(0)

    @staticmethod
    def partial_hash(hash: int) -> int:
        """Return the low eight bits of ``hash``."""
        return hash % (1 << 8)

    @property
    def lock_free(self) -> bool:
        """Whether the buckets keep erased entries in place."""
        return self._lock_free

    def bucket(self, index: int) -> Bucket:
        """Return the bucket at ``index``."""
        if not 0 <= index < self._array_len:
            raise IndexError("bucket index out of range")
        bucket = self._buckets[index]
        if bucket is None:
            with self._buckets_lock:
                bucket = self._buckets[index]
                if bucket is None:
                    bucket = Bucket(self._lock_free)
                    self._buckets[index] = bucket
        return bucket

    def num_buckets(self) -> int:
        """Return the number of buckets."""
        return self._array_len

    def num_entries(self) -> int:
        """Return the total number of entry slots."""
        return self._array_len * BUCKET_LEN

    def sample_size(self) -> int:
        """Return the recommended number of buckets to sample."""
        return self._sample_size

    def old_array(self) -> Optional[BucketArray]:
        """Return the array being rehashed into this one, or None."""
        with self._old_lock:
            return self._old_array

    def drop_old_array(self) -> None:
        """Detach the old array."""
        with self._old_lock:
            self._old_array = None

    def calculate_bucket_index(self, hash: int) -> int:
        """Return the bucket index for ``hash`` from its high bits."""
        return (hash & _HASH_MASK) >> self._hash_offset

    def __len__(self) -> int:
        return self._array_len