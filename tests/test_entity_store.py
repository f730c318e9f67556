"""Tests for the in-memory and SQLite entity stores."""

from __future__ import annotations

import pytest

from hierarchia import EntityRef, InMemoryEntityStore, SqliteEntityStore
from hierarchia.errors import EntityHydrationError, EntityNotFoundError
from hierarchia.store import EntityStore
from tests.models import Collection, Item, Person


@pytest.fixture
def sqlite_store(tmp_path, registry):
    s = SqliteEntityStore(str(tmp_path / "entities.db"), registry)
    yield s
    s.close()


class TestInMemoryStore:
    def test_resolve(self, store):
        assert store.resolve_entity("Collection", "B") == Collection(id="B", member_of=["A"])

    def test_resolve_missing_returns_none(self, store):
        assert store.resolve_entity("Collection", "Z") is None

    def test_get_entity_raises_when_missing(self, store):
        with pytest.raises(EntityNotFoundError):
            store.get_entity("Collection", "Z")

    def test_types_are_separate_keyspaces(self, registry):
        s = InMemoryEntityStore(registry, [Collection(id="1"), Person(id="1", name="Ada")])
        assert isinstance(s.resolve_entity("Person", "1"), Person)
        assert isinstance(s.resolve_entity("Collection", "1"), Collection)
        assert len(s) == 2

    def test_remove(self, store):
        store.remove("Collection", "A")
        assert store.resolve_entity("Collection", "A") is None

    def test_iter_entities(self, store):
        assert sorted(e.entity_id for e in store.iter_entities("Collection")) == list("ABCD")

    def test_satisfies_protocol(self, store):
        assert isinstance(store, EntityStore)


class TestGetProperty:
    def test_references_become_entity_refs(self, store):
        b = store.resolve_entity("Collection", "B")
        assert store.get_property(b, "member_of") == [EntityRef("Collection", "A")]

    def test_unset_reference_is_empty(self, store):
        a = store.resolve_entity("Collection", "A")
        assert store.get_property(a, "member_of") == []

    def test_single_valued_reference(self, registry):
        s = InMemoryEntityStore(registry)
        assert s.get_property(Person(id="p2", name="B", manager="p1"), "manager") == [
            EntityRef("Person", "p1")
        ]
        assert s.get_property(Person(id="p1", name="A"), "manager") == []

    def test_scalars_returned_as_is(self, registry):
        s = InMemoryEntityStore(registry)
        assert s.get_property(Item(id="i1", tags=["x", "y"]), "tags") == ["x", "y"]
        assert s.get_property(Item(id="i1", title="T"), "title") == ["T"]

    def test_undeclared_property_is_empty(self, store):
        a = store.resolve_entity("Collection", "A")
        assert store.get_property(a, "does_not_exist") == []


class TestSqliteStore:
    def test_put_and_resolve(self, sqlite_store):
        sqlite_store.put(Collection(id="B", title="Books", member_of=["A"]))
        loaded = sqlite_store.resolve_entity("Collection", "B")
        assert loaded == Collection(id="B", title="Books", member_of=["A"])

    def test_missing(self, sqlite_store):
        assert sqlite_store.resolve_entity("Collection", "nope") is None

    def test_put_replaces(self, sqlite_store):
        sqlite_store.put(Collection(id="B", member_of=["A"]))
        sqlite_store.put(Collection(id="B", member_of=["C"]))
        assert sqlite_store.resolve_entity("Collection", "B").member_of == ["C"]
        assert sqlite_store.count("Collection") == 1

    def test_put_many_iter_and_count(self, sqlite_store):
        n = sqlite_store.put_many(
            [Collection(id="b"), Collection(id="a"), Person(id="p", name="Ada")]
        )
        assert n == 3
        assert [e.entity_id for e in sqlite_store.iter_entities("Collection")] == ["a", "b"]
        assert sqlite_store.count() == 3

    def test_delete(self, sqlite_store):
        sqlite_store.put(Collection(id="a"))
        sqlite_store.delete("Collection", "a")
        assert sqlite_store.resolve_entity("Collection", "a") is None

    def test_property_access_after_roundtrip(self, sqlite_store):
        sqlite_store.put(Collection(id="C", additional_member_of=["A"]))
        c = sqlite_store.resolve_entity("Collection", "C")
        assert sqlite_store.get_property(c, "additional_member_of") == [
            EntityRef("Collection", "A")
        ]

    def test_persists_across_connections(self, tmp_path, registry):
        path = str(tmp_path / "persist.db")
        with SqliteEntityStore(path, registry) as s:
            s.put(Collection(id="A"))
        with SqliteEntityStore(path, registry) as s:
            assert s.resolve_entity("Collection", "A") is not None

    @pytest.mark.parametrize("fields_json", ['{"id": "X", "member_of": 5}', "{not json"])
    def test_unreadable_row(self, sqlite_store, fields_json):
        sqlite_store._conn.execute(
            "INSERT INTO entities (entity_type, entity_key, fields_json) VALUES (?, ?, ?)",
            ("Collection", "X", fields_json),
        )
        with pytest.raises(EntityHydrationError) as exc_info:
            sqlite_store.resolve_entity("Collection", "X")
        assert exc_info.value.entity_id == "X"
        with pytest.raises(EntityHydrationError):
            list(sqlite_store.iter_entities("Collection"))
