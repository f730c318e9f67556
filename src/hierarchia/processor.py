"""Index processor that adds every ancestor's identifier to hierarchy fields."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from hierarchia.config import HierarchiaConfig
from hierarchia.configuration import (
    FieldSubmission,
    HierarchyConfiguration,
    default_configuration,
    validate_configuration,
)
from hierarchia.errors import HierarchiaError
from hierarchia.index import Index, IndexItem
from hierarchia.inspector import HierarchyFieldOptions, SchemaInspector
from hierarchia.observability import get_logger
from hierarchia.resolver import AncestorResolver
from hierarchia.store import EntityStore

logger = get_logger(__name__)


def merge_ancestors(
    items: Iterable[IndexItem],
    configuration: HierarchyConfiguration,
    resolver: AncestorResolver,
) -> None:
    """Add resolved ancestors to each configured field, skipping values already present.

    Walks from the item's entity rather than from the field's current values.
    A failure on one field is logged and the remaining fields and items go on.
    """
    for item in items:
        for field_id in configuration.fields:
            index_field = item.get_field(field_id)
            if index_field is None:
                continue
            if item.entity is None:
                continue

            properties = configuration.relation_properties(field_id)
            try:
                ancestors = resolver.iter_ancestors(item.entity, properties)
            except HierarchiaError as e:
                logger.error(
                    "ancestor_resolution_failed",
                    item_id=item.item_id,
                    field_id=field_id,
                    error=str(e),
                )
                continue

            present = set(index_field.get_values())
            for ancestor in ancestors:
                if ancestor not in present:
                    index_field.add_value(ancestor)
                    present.add(ancestor)


def preprocess(
    items: Iterable[IndexItem],
    configuration: HierarchyConfiguration,
    store: EntityStore,
    config: HierarchiaConfig | None = None,
) -> None:
    """Apply a hierarchy configuration to items in place."""
    merge_ancestors(items, configuration, AncestorResolver(store, config))


class AncestorsProcessor:
    """Allows indexing values along with all their ancestors for hierarchical fields.

    Runs at the preprocess-index stage: discovered hierarchy fields of the index
    can be enabled with one or more relation properties, and every ancestor
    reachable through any of them is added to the field.
    """

    processor_id = "ancestors"

    def __init__(
        self,
        index: Index,
        store: EntityStore,
        configuration: HierarchyConfiguration | None = None,
        *,
        inspector: SchemaInspector | None = None,
        config: HierarchiaConfig | None = None,
    ) -> None:
        self.index = index
        self.config = config or HierarchiaConfig()
        self.inspector = inspector or SchemaInspector(self.config)
        self.resolver = AncestorResolver(store, self.config)
        self.configuration = configuration or default_configuration()

    @classmethod
    def supports_index(cls, index: Index, inspector: SchemaInspector | None = None) -> bool:
        return (inspector or SchemaInspector()).supports_index(index)

    def field_options(self) -> HierarchyFieldOptions:
        return self.inspector.discover(self.index)

    def configure(
        self, submission: Mapping[str, FieldSubmission | Mapping[str, Any]]
    ) -> HierarchyConfiguration:
        """Validate a submission against this index and adopt it."""
        self.configuration = validate_configuration(self.field_options(), submission)
        return self.configuration

    def preprocess_index_items(self, items: Iterable[IndexItem]) -> None:
        merge_ancestors(items, self.configuration, self.resolver)
