"""Shared test fixtures for Hierarchia tests."""

from __future__ import annotations

import pytest

from hierarchia import Index, IndexFieldDefinition, InMemoryEntityStore, SchemaRegistry
from tests.models import ALL_TYPES, Collection


@pytest.fixture
def registry():
    return SchemaRegistry(ALL_TYPES)


@pytest.fixture
def store(registry):
    """A and B form a plain chain; C joins A through additional membership; D sits under C."""
    return InMemoryEntityStore(
        registry,
        [
            Collection(id="A"),
            Collection(id="B", member_of=["A"]),
            Collection(id="C", additional_member_of=["A"]),
            Collection(id="D", member_of=["C"]),
        ],
    )


@pytest.fixture
def collection_index(registry):
    return Index(
        "collections",
        "Collection",
        [
            IndexFieldDefinition("ancestors", "Ancestors", "member_of", "Collection"),
            IndexFieldDefinition("title", "Title", "title", "Collection"),
        ],
        label="Collections",
        registry=registry,
    )


@pytest.fixture
def item_index(registry):
    return Index(
        "items",
        "Item",
        [
            IndexFieldDefinition("collection", "Collection", "member_of", "Item"),
            IndexFieldDefinition("owner", "Owner", "owner", "Item"),
            IndexFieldDefinition("tags", "Tags", "tags", "Item"),
        ],
        registry=registry,
    )
