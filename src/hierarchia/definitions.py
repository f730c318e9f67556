"""Property definition tree used for schema inspection.

Definitions describe the shape of data without holding any: a scalar, a
complex structure of named sub-properties, an entity of some type, or a
wrapper (list or reference) around another definition. Entity definitions
look their properties up lazily so self-referential types can be described
without infinite recursion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class DataDefinition:
    """Base definition; every node in the tree carries a display label."""

    label: str = ""


@dataclass
class ScalarDefinition(DataDefinition):
    data_type: str = "string"


@dataclass
class ComplexDefinition(DataDefinition):
    """A structure with named sub-properties."""

    properties: dict[str, DataDefinition] = field(default_factory=dict)

    def get_property_definitions(self) -> dict[str, DataDefinition]:
        return dict(self.properties)


class PropertySource(Protocol):
    """Anything that can list the properties of an entity type."""

    def property_definitions(self, entity_type_id: str) -> dict[str, DataDefinition]: ...


@dataclass
class EntityDefinition(ComplexDefinition):
    """An entity of a given type; its properties are the type's fields."""

    entity_type_id: str = ""
    source: PropertySource | None = field(default=None, repr=False, compare=False)

    def get_property_definitions(self) -> dict[str, DataDefinition]:
        if self.source is None:
            return dict(self.properties)
        return self.source.property_definitions(self.entity_type_id)


@dataclass
class ListDefinition(DataDefinition):
    """A multi-valued wrapper around an item definition."""

    item: DataDefinition = field(default_factory=ScalarDefinition)


@dataclass
class ReferenceDefinition(DataDefinition):
    """A reference wrapper that points at a target definition."""

    target: DataDefinition = field(default_factory=DataDefinition)


def get_inner_property(definition: DataDefinition) -> DataDefinition:
    """Strip list and reference wrappers down to the concrete definition."""
    while True:
        if isinstance(definition, ListDefinition):
            definition = definition.item
        elif isinstance(definition, ReferenceDefinition):
            definition = definition.target
        else:
            return definition


def get_nested_properties(definition: DataDefinition) -> dict[str, DataDefinition]:
    """Direct sub-properties of a definition after unwrapping; empty for scalars."""
    inner = get_inner_property(definition)
    if isinstance(inner, ComplexDefinition):
        return inner.get_property_definitions()
    return {}
