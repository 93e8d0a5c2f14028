# concurrentkit

Thread-safe containers for Python programs that share data between threads.

- `concurrentkit.stack.Stack`: last-in-first-out container with conditional
  push and pop.
- `concurrentkit.queue.Queue`: first-in-first-out container with conditional
  push and pop.
- `concurrentkit.linked_list`: `LinkedList`, a singly linked node with a tagged
  forward link (marked / deleted), and `Entry`, a node holding one value.
- `concurrentkit.bucket`: `Bucket`, a 32-slot hash bucket with linear probing
  and overflow `LinkedBucket` blocks, and the `EntryPtr` cursor over it.
- `concurrentkit.bucket_array`: `BucketArray`, a power-of-two array of buckets,
  and `calculate_log2_array_size`.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

Install the test extra to run the test suite:

```
pip install .[test]
pytest
```

## Stack

```python
from concurrentkit.stack import Stack

stack = Stack()
stack.push(37)
stack.push(3)
stack.push(1)

assert stack.peek(lambda entry: entry.value) == 1
assert list(stack) == [1, 3, 37]
assert stack.pop().value == 1
assert stack.pop().value == 3
assert stack.pop().value == 37
assert stack.pop() is None
assert stack.is_empty()
```

`push(val)` returns the `Entry` that holds the value. `push_if(val, cond)`
pushes only if `cond` returns true for the newest entry (or `None` when the
stack is empty); otherwise it raises `ConditionNotMetError` whose `value` is
the value that was not pushed. `pop_if(cond)` pops the newest entry only if
`cond` accepts it; otherwise it raises `ConditionNotMetError` whose `value` is
that entry. Both `pop` and `pop_if` return `None` on an empty stack.

## Queue

```python
from concurrentkit.queue import Queue

queue = Queue()
queue.push(37)
queue.push(3)

assert queue.peek(lambda entry: entry.value) == 37
assert list(queue) == [37, 3]
assert queue.pop().value == 37
assert queue.pop().value == 3
assert queue.pop() is None
```

`push_if` and `pop_if` behave as on the stack, with the condition applied to
the newest entry for `push_if` and to the oldest entry for `pop_if`.

Both containers provide `copy()`, which returns a new container holding the
same values in the same order, support iteration over their values, and show
their contents in `repr` as `{1, 3, 37}`.

## Linked-list nodes

```python
from concurrentkit.linked_list import Entry, EntryDeletedError

head = Entry("head")
tail = Entry("tail")
head.push_back(tail, mark=True)
assert head.is_marked()
assert head.next_ptr() is tail

tail.delete_self()
assert head.next_ptr() is None      # deleted nodes are skipped and unlinked

head.delete_self()
try:
    head.push_back(Entry("x"), mark=False)
except EntryDeletedError as error:
    assert error.entry.value == "x"
```

A node's tag is one of `Tag.NONE`, `Tag.FIRST` (marked) and `Tag.SECOND`
(deleted). `mark`, `unmark` and `delete_self` return `False` when the change
does not apply. `Entry.take_inner()` removes the value; reading `value`
afterwards raises `LookupError`. Entries compare equal when their values do.

## Buckets and bucket arrays

```python
from concurrentkit.bucket import BUCKET_LEN, Bucket, EntryPtr
from concurrentkit.bucket_array import BucketArray, calculate_log2_array_size

array = BucketArray(1000)
assert array.num_buckets() == 32
assert array.num_entries() == 32 * BUCKET_LEN
assert calculate_log2_array_size(1000) == 5

assert BucketArray.partial_hash(0x1234) == 0x34
assert array.calculate_bucket_index(1 << 63) == 16   # taken from the high bits

bucket = array.bucket(0)
assert bucket.num_entries() == 0
assert bucket.search("key", 7) is None
assert list(bucket.entries()) == []
```

A `BucketArray` always has at least two buckets. It may hold an old array
(`old_array()`, `drop_old_array()`) and buckets are created on first access.
A `Bucket` reports `killed()`, `num_entries()` and `need_rebuild()` (true when
every slot holds a removed entry); with `lock_free=True` erased entries are
only flagged as removed. `EntryPtr.next(bucket)` steps through the valid
entries, bucket slots first and then the overflow blocks. Locking a bucket
without waiting raises `WouldBlockError` when it is busy.

## What the package does not do

There is no hash map or hash set here: nothing inserts into or removes from a
`Bucket` through a public call, there is no public lock or reader handle for
buckets, and no code moves entries from an old `BucketArray` into a new one
or decides when to grow or shrink. The buckets and bucket arrays are building
blocks that can be inspected and searched, not a finished table.