import pytest

from agenda_ai.errors import TaskStoreError
from storage.task_store import InMemoryTaskStore


def test_seed_tasks_keep_their_ids(task_factory):
    store = InMemoryTaskStore([task_factory("A"), task_factory("B", id=None)])
    ids = [t.id for t in store.list_tasks()]
    assert ids[0] == "t1"
    assert ids[1]


def test_create_update_delete(store):
    task_id = store.create_task({"title": "Dentista", "scheduled_date": "2026-10-15"})
    updated = store.update_task(task_id, {"start_time": "9:30"})
    assert updated.start_time == "09:30"
    assert store.list_tasks()[0].start_time == "09:30"
    store.delete_task(task_id)
    assert store.list_tasks() == []


def test_invalid_fields_are_rejected(store):
    with pytest.raises(TaskStoreError):
        store.create_task({"title": "  "})
    task_id = store.create_task({"title": "Dentista"})
    with pytest.raises(TaskStoreError):
        store.update_task(task_id, {"start_time": "26:00"})
    assert store.list_tasks()[0].start_time is None


def test_unknown_ids(store):
    with pytest.raises(TaskStoreError):
        store.update_task("missing", {"title": "x"})
    with pytest.raises(TaskStoreError):
        store.delete_task("missing")
