"""Model loader: build a schema registry from a user's entity module."""

from __future__ import annotations

import importlib
import inspect
import sys
from pathlib import Path
from types import ModuleType

from hierarchia.schema import SchemaRegistry
from hierarchia.types import Entity


def _import_models(models: str | None, models_path: str | None) -> ModuleType:
    if models_path:
        path = Path(models_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Models path not found: {models_path}")
        if str(path.parent) not in sys.path:
            sys.path.insert(0, str(path.parent))
        return importlib.import_module(path.stem)
    if models:
        return importlib.import_module(models)
    raise ValueError("One of --models or --models-path is required")


def _is_entity_type(obj: object) -> bool:
    return inspect.isclass(obj) and issubclass(obj, Entity) and obj is not Entity


def load_models(models: str | None = None, models_path: str | None = None) -> SchemaRegistry:
    """Register every Entity subclass found in a module.

    Args:
        models: Dotted Python import path (e.g. 'myapp.models')
        models_path: Filesystem path to a Python file
    """
    module = _import_models(models, models_path)
    registry = SchemaRegistry(cls for _, cls in inspect.getmembers(module, _is_entity_type))
    if not registry.entity_types():
        raise ValueError(f"No Entity types found in {models_path or models}")
    return registry
