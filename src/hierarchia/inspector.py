"""Schema inspection: find index fields that can carry hierarchy data."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable

from hierarchia.config import HierarchiaConfig
from hierarchia.definitions import (
    ComplexDefinition,
    DataDefinition,
    EntityDefinition,
    get_inner_property,
    get_nested_properties,
)
from hierarchia.errors import FieldDefinitionError
from hierarchia.index import Index, IndexFieldDefinition
from hierarchia.observability import get_logger

logger = get_logger(__name__)

# field id -> {"<entity type>-<property>": label}
HierarchyFieldOptions = dict[str, dict[str, str]]


def _copy(options: HierarchyFieldOptions) -> HierarchyFieldOptions:
    return {field_id: dict(opts) for field_id, opts in options.items()}


class HierarchyFieldCache:
    """Discovered options per index id, kept until explicitly invalidated.

    Invalidate whenever the index's field set changes. Concurrent misses may
    compute the same value twice; the last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, HierarchyFieldOptions] = {}
        self._lock = threading.Lock()

    def get_or_compute(
        self, index_id: str, compute: Callable[[], HierarchyFieldOptions]
    ) -> HierarchyFieldOptions:
        with self._lock:
            cached = self._entries.get(index_id)
        if cached is None:
            cached = compute()
            with self._lock:
                self._entries[index_id] = cached
        return _copy(cached)

    def invalidate(self, index_id: str) -> None:
        with self._lock:
            self._entries.pop(index_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, index_id: object) -> bool:
        with self._lock:
            return index_id in self._entries


class SchemaInspector:
    """Finds hierarchy candidate fields and their relation property options.

    A field is a candidate if it points to an entity type, and that entity type
    has a property referencing the same type of entity, so that a hierarchy
    can be walked through that property.
    """

    def __init__(
        self,
        config: HierarchiaConfig | None = None,
        cache: HierarchyFieldCache | None = None,
    ) -> None:
        self.config = config or HierarchiaConfig()
        self.cache = cache if cache is not None else HierarchyFieldCache()

    def discover(self, index: Index) -> HierarchyFieldOptions:
        """Cached discovery over an index's fields."""
        return self.cache.get_or_compute(
            index.index_id,
            lambda: self.discover_fields(
                index.get_fields().values(), index_label=index.label or index.index_id
            ),
        )

    def invalidate(self, index_id: str) -> None:
        self.cache.invalidate(index_id)

    def watch(self, index: Index) -> None:
        """Invalidate the cached options whenever the index's fields change."""
        index.on_fields_changed(lambda changed: self.invalidate(changed.index_id))

    def supports_index(self, index: Index) -> bool:
        return bool(self.discover(index))

    def discover_fields(
        self,
        index_fields: Iterable[IndexFieldDefinition],
        *,
        index_label: str | None = None,
    ) -> HierarchyFieldOptions:
        """Uncached discovery; one broken field never stops the others."""
        field_options: HierarchyFieldOptions = {}

        for index_field in index_fields:
            try:
                definition = index_field.get_data_definition()
            except FieldDefinitionError as e:
                logger.warning(
                    "hierarchy_field_unresolvable",
                    index=index_label,
                    field_id=index_field.field_id,
                    error=str(e),
                )
                continue

            if not isinstance(get_inner_property(definition), ComplexDefinition):
                continue

            properties: dict[str, DataDefinition] = dict(get_nested_properties(definition))
            # The field itself may be an entity definition.
            properties[""] = definition
            for prop in properties.values():
                label = prop.label
                inner = get_inner_property(prop)
                if not isinstance(inner, EntityDefinition):
                    continue
                options = self.find_hierarchical_properties(inner, label)
                if options:
                    merged = field_options.setdefault(index_field.field_id, {})
                    for key, option_label in options.items():
                        merged.setdefault(key, option_label)

        return field_options

    def find_hierarchical_properties(
        self, entity: EntityDefinition, label: str
    ) -> dict[str, str]:
        """Options for the properties of ``entity`` that reference its own type.

        Looks two levels down: reference properties usually wrap the target
        behind an ``entity`` sub-property, which one level would miss.
        """
        entity_type_id = entity.entity_type_id
        options: dict[str, str] = {}

        for name, prop in get_nested_properties(entity).items():
            prop_label = prop.label or name
            inner = get_inner_property(prop)
            is_reference = False
            if isinstance(inner, EntityDefinition):
                is_reference = inner.entity_type_id == entity_type_id
            elif isinstance(inner, ComplexDefinition):
                for nested in inner.get_property_definitions().values():
                    nested_inner = get_inner_property(nested)
                    if (
                        isinstance(nested_inner, EntityDefinition)
                        and nested_inner.entity_type_id == entity_type_id
                    ):
                        is_reference = True
                        break
            if is_reference:
                options[f"{entity_type_id}-{name}"] = (
                    f"{label}{self.config.label_separator}{prop_label}"
                )
        return options


def discover(
    index_fields: Iterable[IndexFieldDefinition], config: HierarchiaConfig | None = None
) -> HierarchyFieldOptions:
    """Uncached discovery over a sequence of field definitions."""
    return SchemaInspector(config).discover_fields(index_fields)
