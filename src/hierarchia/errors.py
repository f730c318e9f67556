"""Structured error types for Hierarchia."""

from __future__ import annotations

from dataclasses import dataclass


class HierarchiaError(Exception):
    """Base error for all Hierarchia errors."""


class UnknownEntityTypeError(HierarchiaError):
    """Raised when an entity type identifier is not registered."""

    def __init__(self, entity_type_id: str) -> None:
        self.entity_type_id = entity_type_id
        super().__init__(f"Unknown entity type '{entity_type_id}'")


class PropertyPathError(HierarchiaError):
    """Raised when a property path does not resolve on an entity type."""

    def __init__(self, entity_type_id: str, path: str, segment: str) -> None:
        self.entity_type_id = entity_type_id
        self.path = path
        self.segment = segment
        super().__init__(
            f"Property path '{path}' on '{entity_type_id}' has no property '{segment}'"
        )


class FieldDefinitionError(HierarchiaError):
    """Raised when an index field's data definition cannot be resolved."""

    def __init__(self, field_id: str, detail: str) -> None:
        self.field_id = field_id
        self.detail = detail
        super().__init__(f"Cannot resolve definition of field '{field_id}': {detail}")


class EntityNotFoundError(HierarchiaError):
    """Raised when an entity store cannot resolve an identifier."""

    def __init__(self, entity_type_id: str, entity_id: str) -> None:
        self.entity_type_id = entity_type_id
        self.entity_id = entity_id
        super().__init__(f"Entity '{entity_type_id}:{entity_id}' not found")


class EntityHydrationError(HierarchiaError):
    """Raised when a stored entity no longer validates against its type."""

    def __init__(self, entity_type_id: str, entity_id: str, detail: str) -> None:
        self.entity_type_id = entity_type_id
        self.entity_id = entity_id
        self.detail = detail
        super().__init__(f"Stored entity '{entity_type_id}:{entity_id}' is unreadable: {detail}")


class IndexDefinitionError(HierarchiaError):
    """Raised when an index description is malformed."""


@dataclass(frozen=True)
class FieldError:
    """A single configuration problem, tied to a field where possible."""

    field_id: str | None
    message: str


class ConfigurationValidationError(HierarchiaError):
    """Raised when a submitted hierarchy configuration is rejected."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        details = "; ".join(
            f"{e.field_id}: {e.message}" if e.field_id else e.message for e in errors
        )
        super().__init__(f"Invalid hierarchy configuration: {details}")


class TraversalLimitError(HierarchiaError):
    """Raised when an ancestor walk hits max_visited or max_depth and on_limit is 'raise'."""

    def __init__(
        self, start_id: str, visited: int, limit: int, reason: str = "max_visited"
    ) -> None:
        self.start_id = start_id
        self.visited = visited
        self.limit = limit
        self.reason = reason
        if reason == "max_depth":
            detail = f"stopped at max_depth of {limit} with entities left to expand"
        else:
            detail = f"visited {visited} entities, exceeding max_visited of {limit}"
        super().__init__(f"Ancestor walk from '{start_id}' {detail}")
