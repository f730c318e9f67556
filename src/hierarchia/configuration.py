"""Hierarchy configuration: which relation properties feed which index field."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel, Field, field_validator

from hierarchia.errors import ConfigurationValidationError, FieldError

KEY_SEPARATOR = "-"

NO_PROPERTY_SELECTED = "field requires at least one relation property"
NO_FIELD_ENABLED = "at least one field must be enabled"
NOT_A_CANDIDATE = "field has no hierarchical relation properties"


def relation_property_name(key: str) -> str:
    """Strip the entity type prefix from a '<entity type>-<property>' key."""
    _, sep, name = key.partition(KEY_SEPARATOR)
    return name if sep else key


class HierarchyConfiguration(BaseModel):
    """Selected relation property keys per enabled index field."""

    fields: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("fields")
    @classmethod
    def _non_empty_and_unique(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        normalized: dict[str, list[str]] = {}
        for field_id, keys in value.items():
            unique = list(dict.fromkeys(keys))
            if not unique:
                raise ValueError(f"field '{field_id}' has no relation properties")
            normalized[field_id] = unique
        return normalized

    def relation_properties(self, field_id: str) -> list[str]:
        """Bare property names to walk for a field."""
        return [relation_property_name(key) for key in self.fields.get(field_id, [])]

    def is_empty(self) -> bool:
        return not self.fields


class FieldSubmission(BaseModel):
    """What an operator submitted for one field."""

    enabled: bool = False
    selected: list[str] = Field(default_factory=list)


def default_configuration() -> HierarchyConfiguration:
    return HierarchyConfiguration()


def validate_configuration(
    options: Mapping[str, Mapping[str, str]],
    submission: Mapping[str, FieldSubmission | Mapping[str, Any]],
) -> HierarchyConfiguration:
    """Check a submission against the discovered options.

    Returns the configuration holding only the enabled fields. Raises
    ConfigurationValidationError listing every problem found.
    """
    errors: list[FieldError] = []
    fields: dict[str, list[str]] = {}

    for field_id, raw in submission.items():
        values = raw if isinstance(raw, FieldSubmission) else FieldSubmission.model_validate(raw)
        if not values.enabled:
            continue
        selected = list(dict.fromkeys(values.selected))
        if not selected:
            errors.append(FieldError(field_id, NO_PROPERTY_SELECTED))
            continue
        if field_id not in options:
            errors.append(FieldError(field_id, NOT_A_CANDIDATE))
            continue
        unknown = [key for key in selected if key not in options[field_id]]
        if unknown:
            for key in unknown:
                errors.append(FieldError(field_id, f"unknown relation property '{key}'"))
            continue
        fields[field_id] = selected

    if not fields:
        errors.append(FieldError(None, NO_FIELD_ENABLED))

    if errors:
        raise ConfigurationValidationError(errors)
    return HierarchyConfiguration(fields=fields)


class ConfigurationStore(Protocol):
    def load(self) -> HierarchyConfiguration: ...

    def save(self, configuration: HierarchyConfiguration) -> None: ...


class YamlConfigurationStore:
    """Keeps a hierarchy configuration in a YAML file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> HierarchyConfiguration:
        if not self.path.exists():
            return default_configuration()
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        return HierarchyConfiguration.model_validate(raw)

    def save(self, configuration: HierarchyConfiguration) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(configuration.model_dump(), sort_keys=True, allow_unicode=True),
            encoding="utf-8",
        )
