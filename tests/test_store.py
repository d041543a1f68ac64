import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from students.models import StudentIn
from students.store import ReadWriteLock, StudentStore


def _candidate(name: str = "Jane", age: int = 22, email: str = "jane@x.com") -> StudentIn:
    return StudentIn(name=name, age=age, email=email)


def test_new_store_is_empty() -> None:
    store = StudentStore()
    assert store.list() == []
    assert len(store) == 0


def test_create_assigns_next_id_and_lists_record() -> None:
    store = StudentStore()
    store.create(_candidate("A"))
    before = len(store)

    created = store.create(_candidate("B"))

    assert created.id == before + 1
    assert [s.id for s in store.list()] == [1, 2]
    assert store.list()[-1] == created


def test_list_preserves_insertion_order() -> None:
    store = StudentStore()
    for name in ["C", "A", "B"]:
        store.create(_candidate(name))
    assert [s.name for s in store.list()] == ["C", "A", "B"]


def test_get_missing_returns_none() -> None:
    store = StudentStore()
    assert store.get(1) is None


def test_update_replaces_fields_and_keeps_id() -> None:
    store = StudentStore()
    created = store.create(_candidate())

    updated = store.update(created.id, _candidate("Jane2", 23, "jane2@x.com"))

    assert updated is not None
    assert updated.id == created.id
    assert store.get(created.id) == updated
    assert (updated.name, updated.age, updated.email) == ("Jane2", 23, "jane2@x.com")


def test_update_missing_leaves_store_unchanged() -> None:
    store = StudentStore()
    store.create(_candidate())
    snapshot = store.list()

    assert store.update(42, _candidate("X")) is None
    assert store.list() == snapshot


def test_delete_removes_record() -> None:
    store = StudentStore()
    first = store.create(_candidate("A"))
    second = store.create(_candidate("B"))

    assert store.delete(first.id) is True
    assert store.get(first.id) is None
    assert [s.id for s in store.list()] == [second.id]


def test_delete_missing_leaves_store_unchanged() -> None:
    store = StudentStore()
    store.create(_candidate())
    assert store.delete(7) is False
    assert len(store) == 1


def test_returned_records_are_copies() -> None:
    store = StudentStore()
    created = store.create(_candidate())
    created.name = "mutated"

    fetched = store.get(created.id)
    fetched.age = 99

    assert store.get(created.id).name == "Jane"
    assert store.get(created.id).age == 22


def test_counter_strategy_never_reuses_ids() -> None:
    store = StudentStore(id_strategy="counter")
    store.create(_candidate("A"))
    second = store.create(_candidate("B"))
    store.delete(1)

    third = store.create(_candidate("C"))

    assert third.id == 3
    assert sorted(s.id for s in store.list()) == [second.id, third.id]


def test_size_strategy_reuses_ids_after_delete() -> None:
    store = StudentStore(id_strategy="size")
    store.create(_candidate("A"))
    store.create(_candidate("B"))
    store.delete(1)

    third = store.create(_candidate("C"))

    assert third.id == 2
    assert [s.id for s in store.list()] == [2, 2]
    assert store.get(2).name == "B"


def test_unknown_strategy_rejected() -> None:
    with pytest.raises(ValueError):
        StudentStore(id_strategy="uuid")


def test_concurrent_reads_see_whole_records() -> None:
    store = StudentStore()
    writers = 200
    snapshots = []

    def write(n: int) -> None:
        store.create(_candidate(f"student-{n}", 20, f"s{n}@x.com"))

    def read() -> None:
        for _ in range(20):
            snapshots.append(store.list())

    with ThreadPoolExecutor(max_workers=16) as pool:
        futures = [pool.submit(write, n) for n in range(writers)]
        futures += [pool.submit(read) for _ in range(8)]
        for future in futures:
            future.result()

    for snapshot in snapshots:
        assert [s.id for s in snapshot] == list(range(1, len(snapshot) + 1))
        for student in snapshot:
            assert student.name and student.email and student.age == 20

    assert len(store) == writers
    assert {s.id for s in store.list()} == set(range(1, writers + 1))


def test_readers_share_lock() -> None:
    lock = ReadWriteLock()
    both_inside = threading.Barrier(2, timeout=5)

    def reader() -> None:
        with lock.read():
            both_inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert not both_inside.broken


def test_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    events = []
    writer_inside = threading.Event()
    release_writer = threading.Event()

    def writer() -> None:
        with lock.write():
            writer_inside.set()
            release_writer.wait(timeout=5)
            events.append("write-done")

    def reader() -> None:
        with lock.read():
            events.append("read")

    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    assert writer_inside.wait(timeout=5)

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    reader_thread.join(timeout=0.2)
    assert events == []

    release_writer.set()
    writer_thread.join(timeout=5)
    reader_thread.join(timeout=5)
    assert events == ["write-done", "read"]
