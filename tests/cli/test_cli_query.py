"""Tests for shelf find/count commands."""

import json


def _names(output: str) -> list[str]:
    return [json.loads(line)["name"] for line in output.splitlines() if line.strip()]


def test_find_all(invoke, seeded_db):
    result = invoke(["find", "people"], seeded_db)
    assert result.exit_code == 0
    assert sorted(_names(result.output)) == ["Alice", "Bob", "Carol"]


def test_find_where(invoke, seeded_db):
    result = invoke(["find", "people", "-w", "tier = gold", "--order-by", "age"], seeded_db)
    assert result.exit_code == 0
    assert _names(result.output) == ["Alice", "Carol"]


def test_find_or_desc_limit(invoke, seeded_db):
    result = invoke(
        [
            "find",
            "people",
            "-w",
            "age lt 26",
            "-w",
            "OR age gt 40",
            "--order-by",
            "age",
            "--desc",
            "--limit",
            "1",
        ],
        seeded_db,
    )
    assert result.exit_code == 0
    assert _names(result.output) == ["Carol"]


def test_find_offset(invoke, seeded_db):
    result = invoke(
        ["find", "people", "--order-by", "age", "--offset", "1"], seeded_db
    )
    assert result.exit_code == 0
    assert _names(result.output) == ["Alice", "Carol"]


def test_find_json_output(invoke, seeded_db):
    result = invoke(["--json", "find", "people", "-w", "name = Bob"], seeded_db)
    assert result.exit_code == 0
    docs = json.loads(result.output)
    assert [d["id"] for d in docs] == ["p2"]


def test_find_filter_json(invoke, seeded_db):
    filter_json = json.dumps(
        {
            "comparisons": [
                {"expression": "WHERE", "prop": "age", "comparison": ">=", "val": 30}
            ],
            "orderBy": "age",
            "reverse": True,
        }
    )
    result = invoke(["find", "people", "--filter-json", filter_json], seeded_db)
    assert result.exit_code == 0
    assert _names(result.output) == ["Carol", "Alice"]


def test_find_where_and_filter_json_conflict(invoke, seeded_db):
    result = invoke(
        ["find", "people", "-w", "age gt 1", "--filter-json", '{"comparisons": []}'],
        seeded_db,
    )
    assert result.exit_code == 2


def test_find_bad_operator(invoke, seeded_db):
    result = invoke(["find", "people", "-w", "age like 3"], seeded_db)
    assert result.exit_code == 2
    assert "Unknown filter operator" in result.output


def test_find_unindexed_metadata(invoke, seeded_db):
    result = invoke(["find", "people", "-w", "revision gt 1"], seeded_db)
    assert result.exit_code == 2
    assert "not indexed" in result.output


def test_count(invoke, seeded_db):
    result = invoke(["count", "people"], seeded_db)
    assert result.exit_code == 0
    assert result.output.strip() == "3"

    result = invoke(["count", "people", "-w", "tier = gold"], seeded_db)
    assert result.exit_code == 0
    assert result.output.strip() == "2"


def test_count_empty_collection(invoke, cli_db):
    result = invoke(["count", "nothing_here"], cli_db)
    assert result.exit_code == 0
    assert result.output.strip() == "0"
