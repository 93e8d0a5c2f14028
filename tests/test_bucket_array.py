import pytest

from concurrentkit.bucket import BUCKET_LEN, Bucket
from concurrentkit.bucket_array import BucketArray, calculate_log2_array_size


def test_alloc_large_array():
    array = BucketArray(1024 * 1024 * 32)
    assert array.num_buckets() == 1024 * 1024


@pytest.mark.parametrize("s", range(BUCKET_LEN * 2))
def test_array_sizes(s):
    array = BucketArray(s, lock_free=True)
    base = max(s, BUCKET_LEN)
    assert array.num_buckets() >= base // BUCKET_LEN
    assert array.num_buckets() <= 2 * (base // BUCKET_LEN)
    assert array.num_entries() >= base
    assert array.num_entries() <= 2 * base


@pytest.mark.parametrize(
    "capacity, expected",
    [(0, 64), (64, 64), (1000, 1024), (1000000, 1048576)],
)
def test_capacity_rounding(capacity, expected):
    assert BucketArray(capacity).num_entries() == expected


def test_log2_minimum_is_one():
    assert calculate_log2_array_size(0) == 1
    assert calculate_log2_array_size(BUCKET_LEN) == 1


def test_log2_rejects_negative():
    with pytest.raises(ValueError):
        calculate_log2_array_size(-1)


def test_log2_covers_capacity():
    for capacity in (1, 33, 100, 4097, 10**9):
        assert (1 << calculate_log2_array_size(capacity)) * BUCKET_LEN >= capacity


def test_partial_hash_keeps_low_byte():
    assert BucketArray.partial_hash(0x1234) == 0x34
    assert BucketArray.partial_hash(255) == 255
    assert BucketArray.partial_hash(256) == 0


def test_bucket_index_uses_high_bits():
    array = BucketArray(64)
    assert array.num_buckets() == 2
    assert array.calculate_bucket_index(0) == 0
    assert array.calculate_bucket_index(1 << 63) == 1
    assert array.calculate_bucket_index((1 << 63) - 1) == 0


def test_bucket_index_in_range():
    array = BucketArray(1000)
    for h in (0, 1, -1, 12345678901234567, (1 << 64) - 1, hash("key")):
        assert 0 <= array.calculate_bucket_index(h) < array.num_buckets()


def test_bucket_access():
    array = BucketArray(64, lock_free=True)
    first = array.bucket(0)
    assert isinstance(first, Bucket)
    assert array.bucket(0) is first
    assert first.lock_free
    assert first.num_entries() == 0
    with pytest.raises(IndexError):
        array.bucket(array.num_buckets())
    with pytest.raises(IndexError):
        array.bucket(-1)


def test_sample_size():
    assert BucketArray(64).sample_size() == 1
    assert BucketArray(1000).sample_size() == 8


def test_old_array_lifecycle():
    old = BucketArray(64)
    new = BucketArray(1000, old)
    assert new.old_array() is old
    assert old.old_array() is None
    new.drop_old_array()
    assert new.old_array() is None