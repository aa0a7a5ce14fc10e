# tests/test_task_store.py

from __future__ import annotations

import mongomock
from bson import ObjectId

from taskapi.models.task_model import Task, TaskStore


def _store() -> TaskStore:
    store = TaskStore(mongomock.MongoClient()["taskapi_test"]["tasks"])
    store.ensure_indexes()
    return store


def test_create_assigns_id_and_timestamps() -> None:
    store = _store()
    owner = ObjectId()

    task = store.create(owner, "Write report", "due friday")
    assert isinstance(task.id, ObjectId)
    assert task.owner == owner
    assert task.created_at is not None

    loaded = store.find_by_id(str(task.id))
    assert loaded is not None
    assert loaded.id == task.id
    assert loaded.owner == owner
    assert loaded.title == "Write report"
    assert loaded.description == "due friday"


def test_find_by_id_handles_bad_ids() -> None:
    store = _store()
    assert store.find_by_id(str(ObjectId())) is None
    assert store.find_by_id("zzz") is None
    assert store.find_by_id(None) is None


def test_find_by_owner_filters() -> None:
    store = _store()
    a, b = ObjectId(), ObjectId()
    ids_a = {store.create(a, f"a{i}").id for i in range(4)}
    store.create(b, "b")

    assert {t.id for t in store.find_by_owner(a)} == ids_a
    assert [t.title for t in store.find_by_owner(b)] == ["b"]
    assert store.find_by_owner(ObjectId()) == []


def test_save_never_rewrites_owner() -> None:
    store = _store()
    owner = ObjectId()
    task = store.create(owner, "Original")

    task.title = "Changed"
    task.owner = ObjectId()
    store.save(task)

    loaded = store.find_by_id(task.id)
    assert loaded.title == "Changed"
    assert loaded.owner == owner


def test_delete() -> None:
    store = _store()
    task = store.create(ObjectId(), "Gone soon")
    assert store.delete(task) is True
    assert store.find_by_id(task.id) is None
    assert store.delete(task) is False


def test_owned_by_compares_object_ids() -> None:
    owner = ObjectId()
    task = Task(title="t", owner=owner)
    assert task.owned_by(ObjectId(str(owner)))
    assert not task.owned_by(ObjectId())


def test_to_dict_serializes_identifiers() -> None:
    owner = ObjectId()
    task = Task(title="t", owner=owner, id=ObjectId())
    data = task.to_dict()
    assert data["id"] == str(task.id)
    assert data["owner"] == str(owner)
    assert "_id" not in data
    assert data["created_at"].endswith("+00:00")
