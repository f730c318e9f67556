"""Schema registry: property definition trees for declared entity types."""

from __future__ import annotations

import types
import typing
from collections.abc import Iterable
from typing import Any, get_args, get_origin, get_type_hints

from hierarchia.definitions import (
    ComplexDefinition,
    DataDefinition,
    EntityDefinition,
    ListDefinition,
    ReferenceDefinition,
    ScalarDefinition,
    get_nested_properties,
)
from hierarchia.errors import PropertyPathError, UnknownEntityTypeError
from hierarchia.types import Entity, Ref, ref_target_name

PATH_SEPARATOR = ":"


class SchemaRegistry:
    """Registry of entity types and the definitions derived from their fields.

    Acts as the field definition source for indexes and as the property source
    for lazily expanded entity definitions.
    """

    def __init__(self, entity_types: Iterable[type[Entity]] = ()) -> None:
        self._types: dict[str, type[Entity]] = {}
        self._class_names: dict[str, str] = {}
        self._properties: dict[str, dict[str, DataDefinition]] = {}
        for cls in entity_types:
            self.register(cls)

    def register(self, cls: type[Entity]) -> type[Entity]:
        if not (isinstance(cls, type) and issubclass(cls, Entity)) or cls is Entity:
            raise TypeError(f"Expected an Entity subclass, got {cls!r}")
        self._types[cls.__entity_name__] = cls
        self._class_names[cls.__name__] = cls.__entity_name__
        self._properties.clear()
        return cls

    def entity_types(self) -> dict[str, type[Entity]]:
        return dict(self._types)

    def canonical_type_id(self, name: str) -> str:
        """Map an entity name or a class name onto the registered type id."""
        if name in self._types:
            return name
        if name in self._class_names:
            return self._class_names[name]
        raise UnknownEntityTypeError(name)

    def entity_type(self, entity_type_id: str) -> type[Entity]:
        return self._types[self.canonical_type_id(entity_type_id)]

    def entity_definition(self, entity_type_id: str, label: str | None = None) -> EntityDefinition:
        cls = self.entity_type(entity_type_id)
        return EntityDefinition(
            label=label or cls.__entity_label__,
            entity_type_id=cls.__entity_name__,
            source=self,
        )

    def property_definitions(self, entity_type_id: str) -> dict[str, DataDefinition]:
        """Definitions of every field of an entity type, built once per type."""
        type_id = self.canonical_type_id(entity_type_id)
        if type_id not in self._properties:
            cls = self._types[type_id]
            annotations = cls.field_annotations()
            self._properties[type_id] = {
                name: self.build_definition(annotations[name], label=f.display_label)
                for name, f in cls._field_definitions.items()
            }
        return dict(self._properties[type_id])

    def build_definition(
        self, annotation: Any, *, label: str = "", _visited: set[str] | None = None
    ) -> DataDefinition:
        """Translate a field annotation into a definition tree.

        Handles primitives, list[T], Optional/Union, Ref[T] and TypedDict.
        TypedDict cycles are cut with a visited set.
        """
        if _visited is None:
            _visited = set()

        if annotation is typing.Any or annotation is type(None):
            return ScalarDefinition(label=label, data_type="any")

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in args if a is not type(None)]
            if len(members) == 1:
                return self.build_definition(members[0], label=label, _visited=_visited)
            return ScalarDefinition(label=label, data_type="union")

        if origin is list:
            item = args[0] if args else typing.Any
            return ListDefinition(
                label=label, item=self.build_definition(item, label=label, _visited=_visited)
            )

        if origin is Ref:
            return self._reference_item(ref_target_name(annotation) or "", label)

        if _is_typed_dict(annotation):
            name = annotation.__name__
            if name in _visited:
                return ComplexDefinition(label=label or name)
            _visited = _visited | {name}
            try:
                hints = get_type_hints(annotation)
            except Exception:
                hints = annotation.__annotations__
            return ComplexDefinition(
                label=label or name,
                properties={
                    key: self.build_definition(hint, label=key, _visited=_visited)
                    for key, hint in hints.items()
                },
            )

        if isinstance(annotation, type):
            return ScalarDefinition(label=label, data_type=annotation.__name__)
        return ScalarDefinition(label=label, data_type=str(annotation))

    def _reference_item(self, target: str, label: str) -> ComplexDefinition:
        # A reference item exposes the raw identifier and, one level further
        # down, the referenced entity itself.
        try:
            entity = self.entity_definition(target)
        except UnknownEntityTypeError:
            # Unregistered targets are opaque: no properties to inspect.
            entity = EntityDefinition(label=target, entity_type_id=target)
        return ComplexDefinition(
            label=label,
            properties={
                "target_id": ScalarDefinition(label="Entity ID", data_type="str"),
                "entity": ReferenceDefinition(label=entity.label, target=entity),
            },
        )

    def resolve_property_path(self, entity_type_id: str, path: str) -> DataDefinition:
        """Resolve a ``:``-separated property path starting at an entity type."""
        definition: DataDefinition = self.entity_definition(entity_type_id)
        if not path:
            return definition
        for segment in path.split(PATH_SEPARATOR):
            nested = get_nested_properties(definition)
            if segment not in nested:
                raise PropertyPathError(entity_type_id, path, segment)
            definition = nested[segment]
        return definition

    def reference_target(self, entity_type_id: str, property_name: str) -> str | None:
        """Entity type referenced by a property, or None for non-reference fields."""
        cls = self.entity_type(entity_type_id)
        annotation = cls.field_annotations().get(property_name)
        if annotation is None:
            return None
        target = ref_target_name(annotation)
        if target is None:
            return None
        try:
            return self.canonical_type_id(target)
        except UnknownEntityTypeError:
            return target


def _is_typed_dict(annotation: Any) -> bool:
    if not isinstance(annotation, type):
        return False
    return (
        hasattr(annotation, "__annotations__")
        and hasattr(annotation, "__required_keys__")
        and hasattr(annotation, "__optional_keys__")
    )
