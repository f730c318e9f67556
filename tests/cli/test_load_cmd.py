"""Tests for hierarchia load."""

import json

from hierarchia import SchemaRegistry, SqliteEntityStore
from tests.cli.conftest import invoke
from tests.models import ALL_TYPES


def test_load_records(runner, cli_db, tmp_path):
    source = tmp_path / "records.yaml"
    source.write_text(
        "- {type: Collection, id: top, title: Top}\n"
        "- {type: Collection, id: mid, member_of: [top]}\n"
        "- {type: Item, id: i1, member_of: [mid]}\n"
    )
    result = invoke(runner, ["load", str(source), "--db", cli_db], json_output=True)
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"loaded": 3, "db": cli_db}

    with SqliteEntityStore(cli_db, SchemaRegistry(ALL_TYPES)) as store:
        assert store.count() == 3
        assert store.count("Collection") == 2
        assert store.resolve_entity("Collection", "top").title == "Top"


def test_loaded_entities_can_be_walked(runner, cli_db, tmp_path):
    source = tmp_path / "records.yaml"
    source.write_text(
        "- {type: Collection, id: top}\n"
        "- {type: Collection, id: mid, member_of: [top]}\n"
        "- {type: Item, id: i1, member_of: [mid]}\n"
    )
    assert invoke(runner, ["load", str(source), "--db", cli_db]).exit_code == 0
    args = ["ancestors", "--type", "Item", "--id", "i1", "-p", "member_of", "--db", cli_db]
    result = invoke(runner, args)
    assert result.stdout.splitlines() == ["mid", "top"]


def test_unknown_type(runner, cli_db, tmp_path):
    source = tmp_path / "records.yaml"
    source.write_text("- {type: Folder, id: f1}\n")
    result = invoke(runner, ["load", str(source), "--db", cli_db])
    assert result.exit_code == 1
    assert "Failed to read" in result.output


def test_record_without_type(runner, cli_db, tmp_path):
    source = tmp_path / "records.yaml"
    source.write_text("- {id: f1}\n")
    result = invoke(runner, ["load", str(source), "--db", cli_db])
    assert result.exit_code == 1
    assert "'type' key" in result.output


def test_source_not_a_list(runner, cli_db, tmp_path):
    source = tmp_path / "records.yaml"
    source.write_text("type: Collection\n")
    result = invoke(runner, ["load", str(source), "--db", cli_db])
    assert result.exit_code == 1
