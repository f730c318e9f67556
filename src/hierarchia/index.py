"""Search index model: field definitions, items, and item fields."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hierarchia.definitions import DataDefinition
from hierarchia.errors import (
    FieldDefinitionError,
    IndexDefinitionError,
    PropertyPathError,
    UnknownEntityTypeError,
)
from hierarchia.schema import PATH_SEPARATOR, SchemaRegistry
from hierarchia.store import EntityStore
from hierarchia.types import Entity, EntityRef


@dataclass
class IndexFieldDefinition:
    """An indexed field: a property path evaluated on the datasource entity."""

    field_id: str
    label: str
    property_path: str
    datasource: str
    registry: SchemaRegistry | None = field(default=None, repr=False, compare=False)

    def get_data_definition(self) -> DataDefinition:
        if self.registry is None:
            raise FieldDefinitionError(self.field_id, "no schema registry bound")
        try:
            return self.registry.resolve_property_path(self.datasource, self.property_path)
        except (PropertyPathError, UnknownEntityTypeError) as e:
            raise FieldDefinitionError(self.field_id, str(e)) from e


class IndexField:
    """Values of one field on an item being indexed."""

    def __init__(self, field_id: str, values: Iterable[Any] = ()) -> None:
        self.field_id = field_id
        self._values = list(values)

    def get_values(self) -> list[Any]:
        return list(self._values)

    def add_value(self, value: Any) -> None:
        self._values.append(value)

    def set_values(self, values: Iterable[Any]) -> None:
        self._values = list(values)

    def __repr__(self) -> str:
        return f"IndexField({self.field_id!r}, {self._values!r})"


@dataclass
class IndexItem:
    """An item handed to the index: its backing entity and its field values."""

    item_id: str
    entity: Entity | None
    fields: dict[str, IndexField] = field(default_factory=dict)

    def get_field(self, field_id: str) -> IndexField | None:
        return self.fields.get(field_id)

    def values(self) -> dict[str, list[Any]]:
        return {fid: f.get_values() for fid, f in self.fields.items()}


def extract_values(entity: Entity, property_path: str, store: EntityStore) -> list[Any]:
    """Evaluate a property path on an entity.

    References are followed through their ``entity`` accessor; whatever is
    left at the end of the path is flattened to plain values, with references
    and entities reduced to their identifiers.
    """
    current: list[Any] = [entity]
    for segment in property_path.split(PATH_SEPARATOR) if property_path else []:
        following: list[Any] = []
        for obj in current:
            if isinstance(obj, Entity):
                following.extend(store.get_property(obj, segment))
            elif isinstance(obj, EntityRef):
                if segment == "target_id":
                    following.append(obj.target_id)
                elif segment == "entity":
                    target = store.resolve_entity(obj.entity_type_id, obj.target_id)
                    if target is not None:
                        following.append(target)
        current = following

    values: list[Any] = []
    for obj in current:
        if isinstance(obj, EntityRef):
            values.append(obj.target_id)
        elif isinstance(obj, Entity):
            values.append(obj.entity_id)
        else:
            values.append(obj)
    return values


class Index:
    """A search index over one entity type."""

    def __init__(
        self,
        index_id: str,
        datasource: str,
        fields: Iterable[IndexFieldDefinition] = (),
        *,
        label: str | None = None,
        registry: SchemaRegistry | None = None,
    ) -> None:
        self.index_id = index_id
        self.datasource = datasource
        self.label = label
        self.registry = registry
        self._fields: dict[str, IndexFieldDefinition] = {}
        self._listeners: list[Callable[[Index], None]] = []
        for f in fields:
            self._bind(f)

    def _bind(self, field_def: IndexFieldDefinition) -> None:
        if field_def.registry is None:
            field_def.registry = self.registry
        self._fields[field_def.field_id] = field_def

    def on_fields_changed(self, callback: Callable[[Index], None]) -> None:
        """Register a callback run whenever the field set changes."""
        self._listeners.append(callback)

    def _fields_changed(self) -> None:
        for callback in self._listeners:
            callback(self)

    def get_fields(self) -> dict[str, IndexFieldDefinition]:
        return dict(self._fields)

    def get_field(self, field_id: str) -> IndexFieldDefinition | None:
        return self._fields.get(field_id)

    def add_field(self, field_def: IndexFieldDefinition) -> None:
        self._bind(field_def)
        self._fields_changed()

    def remove_field(self, field_id: str) -> None:
        if self._fields.pop(field_id, None) is not None:
            self._fields_changed()

    def create_item(self, entity: Entity, store: EntityStore) -> IndexItem:
        """Build an item with every field pre-populated from its property path."""
        if entity.entity_type_id != self.datasource:
            raise ValueError(
                f"Index '{self.index_id}' indexes '{self.datasource}', "
                f"got '{entity.entity_type_id}'"
            )
        fields = {
            fid: IndexField(fid, extract_values(entity, f.property_path, store))
            for fid, f in self._fields.items()
        }
        return IndexItem(
            item_id=f"entity:{entity.entity_type_id}/{entity.entity_id}",
            entity=entity,
            fields=fields,
        )

    def __repr__(self) -> str:
        return f"Index({self.index_id!r}, datasource={self.datasource!r})"


def load_index(path: str | Path, registry: SchemaRegistry) -> Index:
    """Load an index description from YAML.

    Expected shape::

        id: collections
        label: Collections
        datasource: Collection
        fields:
          ancestors:
            label: Ancestors
            property_path: member_of
    """
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise IndexDefinitionError(f"Index file {path} must contain a mapping")
    for key in ("id", "datasource"):
        if not raw.get(key):
            raise IndexDefinitionError(f"Index file {path} is missing '{key}'")

    datasource = str(raw["datasource"])
    fields_raw = raw.get("fields") or {}
    if not isinstance(fields_raw, dict):
        raise IndexDefinitionError(f"'fields' in {path} must be a mapping")

    fields = []
    for field_id, field_raw in fields_raw.items():
        field_raw = field_raw or {}
        if not isinstance(field_raw, dict):
            raise IndexDefinitionError(f"Field '{field_id}' in {path} must be a mapping")
        fields.append(
            IndexFieldDefinition(
                field_id=str(field_id),
                label=str(field_raw.get("label") or field_id),
                property_path=str(field_raw.get("property_path", field_id)),
                datasource=datasource,
            )
        )
    return Index(
        str(raw["id"]),
        datasource,
        fields,
        label=raw.get("label"),
        registry=registry,
    )
