"""Persistence tests for the JSON document backend."""

import json

import pytest

from asirnet.core.errors import StorageUnavailable
from asirnet.stores import json_file
from asirnet.stores.json_file import JsonFileDatabase
from asirnet.stores.memory import memory_bundle


def test_records_survive_reload(tmp_path) -> None:
    path = tmp_path / "db.json"
    stores = memory_bundle(JsonFileDatabase(path))
    user = stores.identity.register("alice", "digest", avatar="a.png")
    post = stores.content.create(user.id, "hello", user.snapshot)
    stores.interactions.add_reaction(post.id, user.id, "like")

    reloaded = memory_bundle(JsonFileDatabase(path))
    assert reloaded.identity.get(user.id) == user
    assert reloaded.content.list() == [post]
    assert reloaded.interactions.count_reactions(post.id) == 1

    # New posts keep sorting after the reloaded ones.
    newer = reloaded.content.create(user.id, "again", user.snapshot)
    assert reloaded.content.list()[0].id == newer.id


def test_atomic_block_writes_once_and_rolls_back(tmp_path) -> None:
    path = tmp_path / "db.json"
    db = JsonFileDatabase(path)
    stores = memory_bundle(db)
    user = stores.identity.register("alice", "digest")

    try:
        with db.atomic():
            stores.content.create(user.id, "doomed", user.snapshot)
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert stores.content.list() == []
    assert json.loads(path.read_text())["posts"] == []


def test_missing_file_starts_empty(tmp_path) -> None:
    db = JsonFileDatabase(tmp_path / "nested" / "db.json")
    assert db.users == {}
    assert not (tmp_path / "nested" / "db.json").exists()


def test_failed_write_rolls_back_and_removes_temp_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "db.json"
    stores = memory_bundle(JsonFileDatabase(path))
    stores.identity.register("alice", "digest")

    def full_disk(*args, **kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr(json_file.json, "dump", full_disk)
    with pytest.raises(StorageUnavailable):
        stores.identity.register("bob", "digest")
    monkeypatch.undo()

    assert stores.identity.find_by_username("bob") is None
    assert [p.name for p in tmp_path.iterdir()] == ["db.json"]
    assert [u["username"] for u in json.loads(path.read_text())["users"]] == ["alice"]

    # Once the disk recovers the name is free and the next write lands.
    stores.identity.register("bob", "digest")
    reloaded = memory_bundle(JsonFileDatabase(path))
    assert [u.username for u in reloaded.identity.list_users()] == ["alice", "bob"]
