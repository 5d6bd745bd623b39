# tests/test_task_store.py

from __future__ import annotations

import random
import threading
from datetime import datetime, timedelta, timezone

import pytest

from smart_tasks.tasks.task_ordering import compare_tasks
from smart_tasks.tasks.task_store import TaskStore

T0 = datetime(2024, 3, 1, 12, 0)


def _assert_ordered(tasks) -> None:
    for a, b in zip(tasks, tasks[1:]):
        assert compare_tasks(a, b) < 0, (a, b)


def test_add_find_and_snapshot(store: TaskStore) -> None:
    task_id = store.add("Write report", 2, T0 + timedelta(hours=1))
    task = store.find(task_id)

    assert task is not None
    assert task.title == "Write report"
    assert task.priority == 2
    assert task.deadline == T0 + timedelta(hours=1)
    assert task.completed is False
    assert task.created_at == T0
    assert store.snapshot() == [task]
    assert store.count_tasks() == 1


def test_ids_are_unique_and_titles_may_repeat(store: TaskStore) -> None:
    first = store.add("Same", 1)
    second = store.add("Same", 1)

    assert first != second
    assert [t.id for t in store.find_by_title("Same")] == [first, second]


def test_complete_is_idempotent(store: TaskStore, clock) -> None:
    task_id = store.add("Report", 2)
    clock.advance(timedelta(minutes=3))

    assert store.complete(task_id) is True
    done = store.find(task_id)
    assert done is not None and done.completed is True
    assert done.completed_at == T0 + timedelta(minutes=3)

    assert store.complete(task_id) is False
    again = store.find(task_id)
    assert again == done


def test_missing_ids_are_not_errors(store: TaskStore) -> None:
    assert store.remove(42) is False
    assert store.complete(42) is False
    assert store.find(42) is None


def test_removed_task_never_reappears(store: TaskStore) -> None:
    keep = store.add("keep", 1)
    gone = store.add("gone", 1)

    assert store.remove(gone) is True
    assert store.remove(gone) is False
    assert store.find(gone) is None
    assert store.complete(gone) is False
    assert [t.id for t in store.snapshot()] == [keep]


def test_snapshot_is_not_affected_by_later_mutations(store: TaskStore) -> None:
    task_id = store.add("Report", 2)
    before = store.snapshot()

    store.complete(task_id)
    store.add("Other", 1)

    assert len(before) == 1
    assert before[0].completed is False


def test_completed_task_sorts_after_incomplete_ones(store: TaskStore) -> None:
    done = store.add("done", 1, T0 + timedelta(days=1))
    lazy = store.add("lazy", 100)
    store.complete(done)

    assert [t.id for t in store.snapshot()] == [lazy, done]


def test_deadline_and_priority_interaction(store: TaskStore) -> None:
    b = store.add("B", 1, T0 + timedelta(hours=2))
    a = store.add("A", 5, T0 + timedelta(hours=1))
    assert [t.id for t in store.snapshot()] == [a, b]

    other = TaskStore()
    d = other.add("D", 5, T0 + timedelta(hours=1))
    c = other.add("C", 1)
    assert [t.id for t in other.snapshot()] == [c, d]


@pytest.mark.parametrize(
    "args",
    [
        (123, 1),
        ("title", "1"),
        ("title", True),
        ("title", 1, "2024-03-01 12:00"),
    ],
)
def test_add_rejects_malformed_input(store: TaskStore, args) -> None:
    with pytest.raises(TypeError):
        store.add(*args)
    assert store.count_tasks() == 0


@pytest.mark.parametrize("bad_id", ["1", 1.0, None, True])
def test_malformed_ids_raise_type_error(store: TaskStore, bad_id) -> None:
    store.add("x", 1)
    with pytest.raises(TypeError):
        store.find(bad_id)
    with pytest.raises(TypeError):
        store.remove(bad_id)
    with pytest.raises(TypeError):
        store.complete(bad_id)


@pytest.mark.parametrize("with_deadlines", [True, False])
def test_order_holds_after_random_mutations(with_deadlines: bool) -> None:
    rnd = random.Random(1234)
    store = TaskStore()
    ids: list[int] = []
    removed: set[int] = set()

    for i in range(200):
        deadline = T0 + timedelta(minutes=rnd.randint(0, 600)) if with_deadlines else None
        ids.append(store.add(f"task {i}", rnd.randint(-3, 10), deadline))

        roll = rnd.random()
        if roll < 0.2:
            victim = rnd.choice(ids)
            store.remove(victim)
            removed.add(victim)
        elif roll < 0.5:
            store.complete(rnd.choice(ids))

    snap = store.snapshot()
    _assert_ordered(snap)
    assert {t.id for t in snap} == set(ids) - removed
    assert all(store.find(task_id) is None for task_id in removed)


def test_concurrent_mutations_keep_store_consistent() -> None:
    store = TaskStore()
    errors: list[BaseException] = []

    def writer(offset: int) -> None:
        try:
            for i in range(200):
                task_id = store.add(f"w{offset}-{i}", i % 7)
                if i % 3 == 0:
                    store.complete(task_id)
                if i % 5 == 0:
                    store.remove(task_id)
        except BaseException as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    def reader() -> None:
        try:
            for _ in range(200):
                snap = store.snapshot()
                assert len({t.id for t in snap}) == len(snap)
        except BaseException as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads.append(threading.Thread(target=reader))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    # 40 of each writer's 200 tasks were removed (i % 5 == 0).
    assert store.count_tasks() == 4 * 160


def test_add_rejects_timezone_aware_deadline(store: TaskStore) -> None:
    naive = store.add("naive", 1, datetime(2030, 1, 1, 9))

    with pytest.raises(TypeError):
        store.add("aware", 2, datetime(2030, 1, 1, 9, tzinfo=timezone.utc))
    with pytest.raises(TypeError):
        store.add("offset", 2, datetime(2030, 1, 1, 9, tzinfo=timezone(timedelta(hours=2))))

    # The store keeps working for every later caller.
    assert [t.id for t in store.snapshot()] == [naive]
    assert store.count_tasks() == 1
