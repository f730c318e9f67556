"""Configuration for the Hierarchia runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Literal

import yaml

OnLimit = Literal["truncate", "raise"]


@dataclass
class HierarchiaConfig:
    """Runtime settings for discovery and ancestor walks."""

    max_visited: int = 10000
    max_depth: int | None = None  # None walks to the top of every hierarchy
    on_limit: OnLimit = "truncate"
    label_separator: str = " » "
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.on_limit not in ("truncate", "raise"):
            raise ValueError(f"on_limit must be 'truncate' or 'raise', got {self.on_limit!r}")
        if self.max_visited < 1:
            raise ValueError("max_visited must be at least 1")
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be at least 1 when set")

    @classmethod
    def from_env(cls) -> HierarchiaConfig:
        """Build a config from HIERARCHIA_* environment variables."""
        data: dict[str, Any] = {}
        if v := os.getenv("HIERARCHIA_MAX_VISITED"):
            data["max_visited"] = int(v)
        if v := os.getenv("HIERARCHIA_MAX_DEPTH"):
            data["max_depth"] = int(v)
        if v := os.getenv("HIERARCHIA_ON_LIMIT"):
            data["on_limit"] = v
        if v := os.getenv("HIERARCHIA_LOG_LEVEL"):
            data["log_level"] = v
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> HierarchiaConfig:
        """Build a config from a YAML mapping; unknown keys are rejected."""
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {unknown}")
        return cls(**raw)
