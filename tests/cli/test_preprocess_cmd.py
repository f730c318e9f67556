"""Tests for hierarchia preprocess."""

import json
import sqlite3

import pytest

from tests.cli.conftest import invoke


@pytest.fixture
def hierarchy_file(tmp_path):
    path = tmp_path / "hierarchy.yaml"
    path.write_text(
        "fields:\n"
        "  ancestors:\n"
        "  - Collection-member_of\n"
        "  - Collection-additional_member_of\n"
    )
    return str(path)


def _preprocess(runner, index_file, hierarchy, db, json_output=False):
    args = ["preprocess", "--index", index_file, "--hierarchy", hierarchy, "--db", db]
    return invoke(runner, args, json_output=json_output)


def test_preprocess_json(runner, index_file, hierarchy_file, seeded_db):
    result = _preprocess(runner, index_file, hierarchy_file, seeded_db, json_output=True)
    assert result.exit_code == 0
    items = {i["id"]: i["fields"] for i in json.loads(result.stdout)}
    assert list(items) == [
        "entity:Collection/A",
        "entity:Collection/B",
        "entity:Collection/C",
        "entity:Collection/D",
    ]
    assert items["entity:Collection/A"] == {"ancestors": [], "title": ["Root"]}
    assert items["entity:Collection/C"]["ancestors"] == ["A"]
    assert items["entity:Collection/D"]["ancestors"] == ["C", "A"]


def test_preprocess_text(runner, index_file, hierarchy_file, seeded_db):
    result = _preprocess(runner, index_file, hierarchy_file, seeded_db)
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    d = lines.index("entity:Collection/D")
    assert lines[d + 1] == "  ancestors: C, A"


def test_preprocess_without_configuration(runner, index_file, seeded_db, tmp_path):
    result = _preprocess(runner, index_file, str(tmp_path / "absent.yaml"), seeded_db)
    assert result.exit_code == 2
    assert "No hierarchy fields configured" in result.output


def test_preprocess_missing_db(runner, index_file, hierarchy_file, tmp_path):
    result = _preprocess(runner, index_file, hierarchy_file, str(tmp_path / "missing.db"))
    assert result.exit_code == 3


def test_preprocess_unreadable_datasource_row(runner, index_file, hierarchy_file, seeded_db):
    conn = sqlite3.connect(seeded_db)
    conn.execute(
        "INSERT INTO entities (entity_type, entity_key, fields_json) VALUES (?, ?, ?)",
        ("Collection", "E", '{"id": "E", "member_of": 5}'),
    )
    conn.commit()
    conn.close()
    result = _preprocess(runner, index_file, hierarchy_file, seeded_db)
    assert result.exit_code == 5
    assert "Collection:E" in result.output
