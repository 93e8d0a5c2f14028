import pytest

from concurrentkit.linked_list import (
    ConditionNotMetError,
    Entry,
    EntryDeletedError,
    Tag,
)


def test_is_clear_and_flags():
    head = Entry(0)
    assert head.is_clear()
    assert head.mark()
    assert not head.is_clear()
    assert head.delete_self()
    assert not head.is_clear()


def test_mark_twice_fails():
    head = Entry(0)
    assert head.mark()
    assert not head.mark()


def test_unmark():
    head = Entry(0)
    assert not head.unmark()
    assert head.mark()
    assert head.unmark()
    assert not head.is_marked()


def test_is_marked():
    head = Entry(0)
    assert not head.is_marked()
    assert head.mark()
    assert head.is_marked()


def test_delete_self_once():
    entry = Entry(0)
    assert not entry.is_deleted()
    assert entry.delete_self()
    assert entry.is_deleted()
    assert not entry.delete_self()


def test_deleted_tail_is_skipped():
    head = Entry(0)
    tail = Entry(1)
    assert head.push_back(tail, False) is tail
    tail.delete_self()
    assert head.next_ptr() is None


def test_push_back_marks_and_unmarks():
    head = Entry(0)
    head.push_back(Entry(1), True)
    assert head.is_marked()
    head.push_back(Entry(2), False)
    assert not head.is_marked()
    head.delete_self()
    assert not head.is_marked()
    node = Entry(3)
    with pytest.raises(EntryDeletedError) as info:
        head.push_back(node, False)
    assert info.value.entry is node


def test_next_ptr_keeps_mark():
    head = Entry(0)
    head.push_back(Entry(1), False)
    head.mark()
    nxt = head.next_ptr()
    assert nxt.value == 1
    assert head.is_marked()


def test_push_back_inserts_at_front():
    head = Entry(0)
    head.push_back(Entry(1), False)
    head.push_back(Entry(2), False)
    first = head.next_ptr()
    second = first.next_ptr()
    assert [first.value, second.value] == [2, 1]
    assert second.next_ptr() is None


def test_next_ptr_unlinks_deleted_chain():
    head = Entry(0)
    last = Entry(3)
    head.push_back(last, False)
    middle = Entry(2)
    head.push_back(middle, False)
    middle.delete_self()
    assert head.next_ptr() is last
    assert head._load() == (last, Tag.NONE)


def test_take_inner_and_str():
    entry = Entry(5)
    assert str(entry) == "Some(5)"
    assert entry.take_inner() == 5
    assert str(entry) == "None"
    with pytest.raises(LookupError):
        entry.take_inner()


def test_entry_equality_by_value():
    assert Entry("a") == Entry("a")
    assert not (Entry("a") == Entry("b"))


def test_condition_error_carries_value():
    err = ConditionNotMetError(7)
    assert err.value == 7