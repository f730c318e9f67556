"""Hierarchia: ancestor indexing over entity hierarchies built from several relations."""

__version__ = "0.1.0"

from hierarchia.config import HierarchiaConfig
from hierarchia.configuration import (
    FieldSubmission,
    HierarchyConfiguration,
    YamlConfigurationStore,
    default_configuration,
    validate_configuration,
)
from hierarchia.errors import (
    ConfigurationValidationError,
    EntityHydrationError,
    EntityNotFoundError,
    FieldDefinitionError,
    FieldError,
    HierarchiaError,
    TraversalLimitError,
)
from hierarchia.index import Index, IndexField, IndexFieldDefinition, IndexItem, load_index
from hierarchia.inspector import HierarchyFieldCache, SchemaInspector, discover
from hierarchia.processor import AncestorsProcessor, preprocess
from hierarchia.resolver import AncestorResolver, find_ancestors
from hierarchia.schema import SchemaRegistry
from hierarchia.store import EntityStore, InMemoryEntityStore, SqliteEntityStore
from hierarchia.types import Entity, EntityRef, Field, Ref

__all__ = [
    "__version__",
    "Entity",
    "EntityRef",
    "Field",
    "Ref",
    "SchemaRegistry",
    "EntityStore",
    "InMemoryEntityStore",
    "SqliteEntityStore",
    "Index",
    "IndexField",
    "IndexFieldDefinition",
    "IndexItem",
    "load_index",
    "SchemaInspector",
    "HierarchyFieldCache",
    "discover",
    "HierarchyConfiguration",
    "FieldSubmission",
    "YamlConfigurationStore",
    "default_configuration",
    "validate_configuration",
    "AncestorResolver",
    "find_ancestors",
    "AncestorsProcessor",
    "preprocess",
    "HierarchiaConfig",
    "HierarchiaError",
    "ConfigurationValidationError",
    "EntityHydrationError",
    "EntityNotFoundError",
    "FieldDefinitionError",
    "FieldError",
    "TraversalLimitError",
]
