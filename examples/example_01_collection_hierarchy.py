"""Example 01: Collection Hierarchies - Indexing Ancestors.

This example demonstrates:
- Defining entities whose references form a hierarchy
- Discovering which index fields can carry hierarchy data
- Validating a hierarchy configuration that combines two relations
- Preprocessing index items so each one carries every ancestor
"""

from __future__ import annotations

from hierarchia import (
    AncestorsProcessor,
    ConfigurationValidationError,
    Entity,
    Field,
    Index,
    IndexFieldDefinition,
    InMemoryEntityStore,
    Ref,
    SchemaRegistry,
)


# Step 1: Define Entity Types
# A collection can be a member of other collections in two ways.
class Collection(Entity):
    """A collection that can sit under other collections."""

    id: Field[str] = Field(primary_key=True)
    title: Field[str] = Field(default="")
    member_of: Field[list[Ref[Collection]]] = Field(default_factory=list, label="Member of")
    additional_member_of: Field[list[Ref[Collection]]] = Field(
        default_factory=list, label="Additional member of"
    )


def main():
    """Run the collection hierarchy example."""
    print("=" * 80)
    print("HIERARCHIA COLLECTION HIERARCHY EXAMPLE")
    print("=" * 80)

    # Step 2: Load Data
    registry = SchemaRegistry([Collection])
    store = InMemoryEntityStore(
        registry,
        [
            Collection(id="A", title="Archive"),
            Collection(id="B", title="Letters", member_of=["A"]),
            Collection(id="C", title="Photographs", additional_member_of=["A"]),
            Collection(id="D", title="Portraits", member_of=["C"]),
        ],
    )
    print(f"\n✓ Loaded {len(store)} collections")

    # Step 3: Describe the Index
    index = Index(
        "collections",
        "Collection",
        [
            IndexFieldDefinition("ancestors", "Ancestors", "member_of", "Collection"),
            IndexFieldDefinition("title", "Title", "title", "Collection"),
        ],
        label="Collections",
        registry=registry,
    )

    # Step 4: Discover Hierarchy Fields
    processor = AncestorsProcessor(index, store)
    print("\n" + "=" * 80)
    print("HIERARCHY FIELDS")
    print("=" * 80)
    for field_id, options in processor.field_options().items():
        for key, label in options.items():
            print(f"  {field_id}: {key} ({label})")

    # Step 5: Configure
    try:
        processor.configure({"ancestors": {"enabled": True, "selected": []}})
    except ConfigurationValidationError as e:
        print(f"\n✗ Rejected: {e}")

    processor.configure(
        {
            "ancestors": {
                "enabled": True,
                "selected": ["Collection-member_of", "Collection-additional_member_of"],
            }
        }
    )
    print(f"\n✓ Configured: {processor.configuration.fields}")

    # Step 6: Preprocess Items
    print("\n" + "=" * 80)
    print("INDEX ITEMS")
    print("=" * 80)
    items = [index.create_item(e, store) for e in store.iter_entities("Collection")]
    processor.preprocess_index_items(items)
    for item in items:
        print(f"  {item.item_id}: {item.get_field('ancestors').get_values()}")


if __name__ == "__main__":
    main()
