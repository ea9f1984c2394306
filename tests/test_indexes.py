from dataclasses import dataclass, field

import pytest
from pymongo.errors import OperationFailure

from mongomodel.common import IndexModel
from mongomodel.indexes import (
    build_index_map,
    generate_index_name_from_keys,
    get_current_indexes,
    sync_model_indexes,
)


@dataclass
class FakeCollection:
    name: str = "indexTest"
    full_name: str = "witherTestDB.indexTest"


@dataclass
class FakeDatabase:
    """A tiny in-memory server understanding the index commands."""

    indexes: dict = field(default_factory=dict)
    commands: list = field(default_factory=list)
    exists: bool = False
    fail_code: int | None = None

    def command(self, cmd):
        self.commands.append(cmd)
        if self.fail_code is not None:
            raise OperationFailure("command failed", code=self.fail_code)
        if "listIndexes" in cmd:
            if not self.exists:
                raise OperationFailure("ns does not exist", code=26)
            batch = [{"v": 2, "key": {"_id": 1}, "name": "_id_"}]
            batch.extend(dict(doc) for doc in self.indexes.values())
            return {"cursor": {"id": 0, "ns": "db.indexTest", "firstBatch": batch}, "ok": 1.0}
        if "dropIndexes" in cmd:
            name = cmd["index"]
            if name not in self.indexes:
                raise OperationFailure("index not found", code=27)
            del self.indexes[name]
            return {"ok": 1.0}
        if "createIndexes" in cmd:
            self.exists = True
            for spec in cmd["indexes"]:
                self.indexes[spec["name"]] = {"v": 2, **spec}
            return {"ok": 1.0}
        raise AssertionError(f"unexpected command {cmd!r}")


V1 = [IndexModel({"i": 1})]
V2 = [IndexModel({"i": -1})]
V3 = [IndexModel({"i": -1}, {"unique": True})]
V4 = [IndexModel({"i": -1}, {"unique": True, "background": True})]
V5 = [IndexModel({"i": -1}, {"unique": True, "background": True})]
V6 = []


def sync(db, model_indexes):
    coll = FakeCollection()
    sync_model_indexes(db, coll, model_indexes, get_current_indexes(db, coll))


def current(db):
    return get_current_indexes(db, FakeCollection())


@pytest.mark.parametrize(
    "keys, expected",
    [
        ({"i": 1}, "i_1"),
        ({"i": -1}, "i_-1"),
        ({"a": 1, "b": -1}, "a_1_b_-1"),
        ({"t": "text"}, "t_0"),
        ({"f": 1.0}, "f_0"),
        ({"b": True}, "b_0"),
        ({"big": 2**40}, "big_0"),
        ({}, ""),
    ],
)
def test_generate_index_name_from_keys(keys, expected):
    assert generate_index_name_from_keys(keys) == expected


@pytest.mark.parametrize(
    "reply",
    [
        {},
        {"cursor": 5},
        {"cursor": {}},
        {"cursor": {"firstBatch": "nope"}},
    ],
)
def test_build_index_map_malformed_replies_are_empty(reply):
    assert build_index_map(reply) == {}


def test_build_index_map_filters_and_strips_fields():
    reply = {
        "cursor": {
            "firstBatch": [
                {"v": 2, "key": {"_id": 1}, "name": "_id_"},
                {"v": 2, "key": {"x": 1}},
                {"v": 2, "name": "nokey"},
                "not a document",
                {"v": 2, "key": {"email": 1}, "name": "unique-email", "ns": "db.c", "unique": True},
            ]
        }
    }
    result = build_index_map(reply)
    assert result == {
        "email_1": IndexModel({"email": 1}, {"name": "unique-email", "unique": True})
    }


def test_get_current_indexes_missing_namespace_is_empty():
    db = FakeDatabase()
    assert current(db) == {}
    assert db.commands == [{"listIndexes": "indexTest"}]


def test_get_current_indexes_other_errors_propagate():
    db = FakeDatabase(fail_code=13)
    with pytest.raises(OperationFailure) as info:
        current(db)
    assert info.value.code == 13


def test_sync_creates_expected_index():
    db = FakeDatabase()
    assert current(db) == {}
    sync(db, V1)
    after = current(db)
    assert after["i_1"].keys == {"i": 1}
    assert after["i_1"].options == {"name": "i_1"}


def test_sync_does_not_modify_existing_indexes():
    db = FakeDatabase()
    sync(db, V1)
    db.commands.clear()
    sync(db, V1)
    assert db.commands == [{"listIndexes": "indexTest"}]
    assert current(db)["i_1"].options == {"name": "i_1"}


def test_sync_v1_to_v2():
    db = FakeDatabase()
    sync(db, V1)
    sync(db, V2)
    after = current(db)
    assert list(after) == ["i_-1"]
    assert after["i_-1"].keys == {"i": -1}
    assert after["i_-1"].options == {"name": "i_-1"}


def test_sync_v2_to_v3_recreates_with_changed_options():
    db = FakeDatabase()
    sync(db, V2)
    db.commands.clear()
    sync(db, V3)
    assert {"dropIndexes": "indexTest", "index": "i_-1"} in db.commands
    after = current(db)
    assert after["i_-1"].options == {"name": "i_-1", "unique": True}


def test_sync_v3_to_v4():
    db = FakeDatabase()
    sync(db, V3)
    sync(db, V4)
    options = current(db)["i_-1"].options
    assert options["name"] == "i_-1"
    assert options["unique"] is True
    assert options["background"] is True


def test_sync_v4_to_v4_and_v5_is_noop():
    db = FakeDatabase()
    sync(db, V4)
    db.commands.clear()
    sync(db, V4)
    sync(db, V5)
    assert all("listIndexes" in cmd for cmd in db.commands)
    assert current(db)["i_-1"].options == {"name": "i_-1", "unique": True, "background": True}


def test_sync_v5_to_v6_drops_everything():
    db = FakeDatabase()
    sync(db, V5)
    sync(db, V6)
    assert current(db) == {}


def test_sync_keeps_explicit_name_and_does_not_mutate_input():
    db = FakeDatabase()
    model = IndexModel({"email": 1}, {"name": "unique-email", "unique": True})
    sync_model_indexes(db, FakeCollection(), [model], {})
    assert db.commands == [
        {
            "createIndexes": "indexTest",
            "indexes": [{"key": {"email": 1}, "name": "unique-email", "unique": True}],
        }
    ]
    assert model.options == {"name": "unique-email", "unique": True}


def test_sync_replaces_non_string_name():
    db = FakeDatabase()
    sync_model_indexes(db, FakeCollection(), [IndexModel({"a": 1}, {"name": 7})], {})
    assert db.commands[0]["indexes"] == [{"key": {"a": 1}, "name": "a_1"}]


def test_sync_with_nothing_to_do_sends_no_commands():
    db = FakeDatabase()
    sync_model_indexes(db, FakeCollection(), [], {})
    assert db.commands == []