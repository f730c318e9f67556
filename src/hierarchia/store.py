"""Entity stores: the read side the ancestor walk runs against."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Iterator
from typing import Any, Protocol, runtime_checkable

from hierarchia.errors import EntityHydrationError, EntityNotFoundError
from hierarchia.schema import SchemaRegistry
from hierarchia.types import Entity, EntityRef


@runtime_checkable
class EntityStore(Protocol):
    """Backend-agnostic entity lookup contract."""

    def resolve_entity(self, entity_type_id: str, entity_id: str) -> Entity | None: ...

    def get_property(self, entity: Entity, name: str) -> list[Any]: ...


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None]
    return [value]


class BaseEntityStore:
    """Typed property access shared by the concrete stores.

    Reference properties come back as EntityRef values; everything else is
    returned as stored. Values are always a list, empty when unset or when the
    entity type has no such property.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def resolve_entity(self, entity_type_id: str, entity_id: str) -> Entity | None:
        raise NotImplementedError

    def get_entity(self, entity_type_id: str, entity_id: str) -> Entity:
        entity = self.resolve_entity(entity_type_id, entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_type_id, entity_id)
        return entity

    def get_property(self, entity: Entity, name: str) -> list[Any]:
        if name not in entity.__entity_fields__:
            return []
        values = _as_list(entity.get(name))
        target = self.registry.reference_target(entity.entity_type_id, name)
        if target is None:
            return values
        return [v if isinstance(v, EntityRef) else EntityRef(target, str(v)) for v in values]


class InMemoryEntityStore(BaseEntityStore):
    """Dictionary-backed store, keyed by (entity type, identifier)."""

    def __init__(self, registry: SchemaRegistry, entities: Iterable[Entity] = ()) -> None:
        super().__init__(registry)
        self._entities: dict[tuple[str, str], Entity] = {}
        self.add_all(entities)

    def add(self, entity: Entity) -> None:
        self._entities[(entity.entity_type_id, entity.entity_id)] = entity

    def add_all(self, entities: Iterable[Entity]) -> None:
        for entity in entities:
            self.add(entity)

    def remove(self, entity_type_id: str, entity_id: str) -> None:
        self._entities.pop((entity_type_id, entity_id), None)

    def resolve_entity(self, entity_type_id: str, entity_id: str) -> Entity | None:
        return self._entities.get((entity_type_id, entity_id))

    def iter_entities(self, entity_type_id: str) -> Iterator[Entity]:
        for (type_id, _), entity in self._entities.items():
            if type_id == entity_type_id:
                yield entity

    def __len__(self) -> int:
        return len(self._entities)


class SqliteEntityStore(BaseEntityStore):
    """SQLite-backed store holding the latest field values of each entity."""

    def __init__(self, db_path: str, registry: SchemaRegistry) -> None:
        super().__init__(registry)
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS entities (
                entity_type TEXT NOT NULL,
                entity_key TEXT NOT NULL,
                fields_json TEXT NOT NULL,
                PRIMARY KEY (entity_type, entity_key)
            );
        """)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteEntityStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def put(self, entity: Entity) -> None:
        self.put_many([entity])

    def put_many(self, entities: Iterable[Entity]) -> int:
        rows = [
            (e.entity_type_id, e.entity_id, json.dumps(e.model_dump(), default=str))
            for e in entities
        ]
        self._conn.executemany(
            "INSERT OR REPLACE INTO entities (entity_type, entity_key, fields_json) "
            "VALUES (?, ?, ?)",
            rows,
        )
        self._conn.commit()
        return len(rows)

    def delete(self, entity_type_id: str, entity_id: str) -> None:
        self._conn.execute(
            "DELETE FROM entities WHERE entity_type = ? AND entity_key = ?",
            (entity_type_id, entity_id),
        )
        self._conn.commit()

    def _hydrate(self, entity_type_id: str, entity_id: str, fields_json: str) -> Entity:
        cls = self.registry.entity_type(entity_type_id)
        try:
            return cls(**json.loads(fields_json))
        except (ValueError, TypeError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            raise EntityHydrationError(entity_type_id, entity_id, str(e)) from e

    def resolve_entity(self, entity_type_id: str, entity_id: str) -> Entity | None:
        row = self._conn.execute(
            "SELECT fields_json FROM entities WHERE entity_type = ? AND entity_key = ?",
            (entity_type_id, entity_id),
        ).fetchone()
        if row is None:
            return None
        return self._hydrate(entity_type_id, entity_id, row[0])

    def iter_entities(self, entity_type_id: str) -> Iterator[Entity]:
        cursor = self._conn.execute(
            "SELECT entity_key, fields_json FROM entities "
            "WHERE entity_type = ? ORDER BY entity_key",
            (entity_type_id,),
        )
        for entity_key, fields_json in cursor.fetchall():
            yield self._hydrate(entity_type_id, entity_key, fields_json)

    def count(self, entity_type_id: str | None = None) -> int:
        if entity_type_id is None:
            row = self._conn.execute("SELECT COUNT(*) FROM entities").fetchone()
        else:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM entities WHERE entity_type = ?", (entity_type_id,)
            ).fetchone()
        return int(row[0])
