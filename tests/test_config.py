"""Tests for runtime settings."""

from __future__ import annotations

import pytest

from hierarchia import HierarchiaConfig


def test_defaults():
    config = HierarchiaConfig()
    assert config.max_visited == 10000
    assert config.max_depth is None
    assert config.on_limit == "truncate"
    assert config.label_separator == " » "


@pytest.mark.parametrize(
    "kwargs",
    [{"on_limit": "explode"}, {"max_visited": 0}, {"max_depth": 0}],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        HierarchiaConfig(**kwargs)


def test_from_env(monkeypatch):
    monkeypatch.setenv("HIERARCHIA_MAX_VISITED", "50")
    monkeypatch.setenv("HIERARCHIA_MAX_DEPTH", "3")
    monkeypatch.setenv("HIERARCHIA_ON_LIMIT", "raise")
    monkeypatch.setenv("HIERARCHIA_LOG_LEVEL", "DEBUG")
    config = HierarchiaConfig.from_env()
    assert (config.max_visited, config.max_depth, config.on_limit, config.log_level) == (
        50,
        3,
        "raise",
        "DEBUG",
    )


def test_from_env_without_variables(monkeypatch):
    for name in ("MAX_VISITED", "MAX_DEPTH", "ON_LIMIT", "LOG_LEVEL"):
        monkeypatch.delenv(f"HIERARCHIA_{name}", raising=False)
    assert HierarchiaConfig.from_env() == HierarchiaConfig()


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_visited: 10\non_limit: raise\n")
    config = HierarchiaConfig.from_yaml(path)
    assert config.max_visited == 10
    assert config.on_limit == "raise"


def test_from_yaml_unknown_key(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_visits: 10\n")
    with pytest.raises(ValueError, match="Unknown config keys"):
        HierarchiaConfig.from_yaml(path)
