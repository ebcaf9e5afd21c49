from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.models.user import UserRecord
from app.services import storage_backends
from app.services.storage_backends import (
    JsonFileUserBackend,
    MemoryUserBackend,
    SQLiteUserBackend,
)
from app.services.user_store import UserStore


@pytest.fixture(params=["memory", "json", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryUserBackend()
    if request.param == "json":
        return JsonFileUserBackend(tmp_path)
    return SQLiteUserBackend(tmp_path)


def test_get_user_creates_default_record(backend):
    store = UserStore(backend=backend)

    first = store.get_user("user-1")
    second = store.get_user("user-1")

    assert first == UserRecord(id="user-1", is_subscribed=False, subscription_id=None)
    assert second == first
    assert backend.get_by_id("user-1") == first


def test_update_then_get_returns_subscription(backend):
    store = UserStore(backend=backend)

    store.update_user_subscription("user-2", True, "sub_1")

    user = store.get_user("user-2")
    assert user.is_subscribed is True
    assert user.subscription_id == "sub_1"


def test_update_is_idempotent(backend):
    store = UserStore(backend=backend)
    store.get_user("user-3")

    store.update_user_subscription("user-3", True, "sub_9")
    once = store.get_user("user-3")
    store.update_user_subscription("user-3", True, "sub_9")

    assert store.get_user("user-3") == once


def test_deactivation_overwrites_subscription_id(backend):
    store = UserStore(backend=backend)
    store.update_user_subscription("user-4", True, "sub_old")

    store.update_user_subscription("user-4", False, "sub_new")

    assert store.get_user("user-4") == UserRecord("user-4", False, "sub_new")


def test_returned_records_are_copies(backend):
    store = UserStore(backend=backend)
    user = store.get_user("user-5")

    user.is_subscribed = True

    assert store.get_user("user-5").is_subscribed is False


def test_ids_are_not_normalized(backend):
    store = UserStore(backend=backend)
    store.update_user_subscription("Mixed Case/ID", True, "sub_x")

    assert store.get_user("mixed case/id").is_subscribed is False
    assert store.get_user("Mixed Case/ID").is_subscribed is True


def test_json_backend_persists_document_layout(tmp_path):
    JsonFileUserBackend(tmp_path).upsert("abc", True, "sub_7")

    document = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))
    assert document == {
        "users": {"abc": {"id": "abc", "is_subscribed": True, "subscription_id": "sub_7"}}
    }
    assert JsonFileUserBackend(tmp_path).get_by_id("abc") == UserRecord("abc", True, "sub_7")


def test_sqlite_backend_persists_across_instances(tmp_path):
    SQLiteUserBackend(tmp_path).upsert("abc", True, "sub_7")

    assert (tmp_path / "app.db").exists()
    assert SQLiteUserBackend(tmp_path).get_or_create("abc") == UserRecord("abc", True, "sub_7")


class BrokenBackend(MemoryUserBackend):
    name = "broken"

    def get_by_id(self, user_id):
        raise OSError("disk unavailable")

    def upsert(self, user_id, is_subscribed, subscription_id):
        raise OSError("disk unavailable")


def test_get_user_falls_back_to_default_on_storage_error(caplog):
    store = UserStore(backend=BrokenBackend())

    user = store.get_user("user-6")

    assert user == UserRecord(id="user-6")
    assert "Error loading user user-6" in caplog.text


def test_update_swallows_storage_error(caplog):
    store = UserStore(backend=BrokenBackend())

    store.update_user_subscription("user-7", True, "sub_1")

    assert "Error updating subscription for user user-7" in caplog.text


def test_json_backend_failed_write_keeps_prior_state(tmp_path, monkeypatch):
    backend = JsonFileUserBackend(tmp_path)
    store = UserStore(backend=backend)
    store.update_user_subscription("user-8", True, "sub_1")

    def fail_replace(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(storage_backends.os, "replace", fail_replace)
    store.update_user_subscription("user-8", False, "sub_2")
    monkeypatch.undo()

    assert store.get_user("user-8") == UserRecord("user-8", True, "sub_1")
    assert list(tmp_path.glob(".users.*.tmp")) == []


def test_json_backend_concurrent_writes_keep_every_record(tmp_path):
    backend = JsonFileUserBackend(tmp_path)
    ids = [f"user-{i}" for i in range(40)]

    def touch(index_and_id):
        index, user_id = index_and_id
        if index % 2:
            backend.upsert(user_id, True, f"sub_{index}")
        else:
            backend.get_or_create(user_id)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(touch, enumerate(ids)))

    document = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))
    assert sorted(document["users"]) == sorted(ids)
    for index, user_id in enumerate(ids):
        expected = UserRecord(user_id, True, f"sub_{index}") if index % 2 else UserRecord(user_id)
        assert backend.get_by_id(user_id) == expected
