import threading

import pytest

from concurrentkit.linked_list import ConditionNotMetError
from concurrentkit.stack import Stack


def test_push_returns_entry():
    stack = Stack()
    assert stack.push(11).value == 11


def test_push_if():
    stack = Stack()
    stack.push(11)
    assert stack.push_if(17, lambda e: e is not None and e.value == 11).value == 17
    with pytest.raises(ConditionNotMetError) as info:
        stack.push_if(29, lambda e: e is not None and e.value == 11)
    assert info.value.value == 29


def test_push_if_on_empty_sees_none():
    stack = Stack()
    seen = []
    stack.push_if(1, lambda e: seen.append(e) or True)
    assert seen == [None]


def test_pop_order():
    stack = Stack()
    stack.push(37)
    stack.push(3)
    stack.push(1)
    assert stack.pop().value == 1
    assert stack.pop().value == 3
    assert stack.pop().value == 37
    assert stack.pop() is None


def test_pop_if():
    stack = Stack()
    stack.push(3)
    stack.push(1)
    with pytest.raises(ConditionNotMetError) as info:
        stack.pop_if(lambda e: e.value == 3)
    assert info.value.value.value == 1
    assert stack.pop().value == 1
    assert stack.pop_if(lambda e: e.value == 3).value == 3
    assert stack.is_empty()


def test_peek():
    stack = Stack()
    assert stack.peek(lambda e: e.value) is None
    stack.push(37)
    stack.push(3)
    assert stack.peek(lambda e: e.value) == 3


def test_is_empty():
    stack = Stack()
    assert stack.is_empty()
    stack.push(7)
    assert not stack.is_empty()


def test_copy_preserves_order_and_is_independent():
    stack = Stack()
    for v in (37, 3, 1):
        stack.push(v)
    cloned = stack.copy()
    assert list(cloned) == list(stack)
    cloned.pop()
    assert list(stack) == [1, 3, 37]
    assert list(cloned) == [3, 37]


def test_repr_lists_values():
    stack = Stack()
    stack.push(3)
    stack.push(1)
    assert repr(stack) == "{1, 3}"


def test_concurrent_push_pop():
    stack = Stack()
    per_thread = 500
    threads_count = 8
    popped = []
    lock = threading.Lock()

    def worker(base):
        for i in range(per_thread):
            stack.push(base + i)
        for _ in range(per_thread):
            entry = stack.pop()
            if entry is not None:
                with lock:
                    popped.append(entry.value)

    threads = [
        threading.Thread(target=worker, args=(t * per_thread,))
        for t in range(threads_count)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    remaining = []
    while (entry := stack.pop()) is not None:
        remaining.append(entry.value)
    assert sorted(popped + remaining) == list(range(per_thread * threads_count))
    assert stack.is_empty()