"""
CLI smoke tests.

Run the typer app in-process on a small qual file with the suggestion
side-channel switched off.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from qualwizard import __version__
from qualwizard.cli.main import app
from qualwizard.datasource import DataSourceRegistry

runner = CliRunner()


BATCHES = [
    {
        "qualid": 1,
        "where_clause": "orders.status = ?",
        "quals": [
            {"relid": 16384, "attnum": 2, "opno": 96, "indexams": ["btree"], "relname": "orders", "attname": "status"}
        ],
    },
    {
        "qualid": 2,
        "where_clause": "orders.status = ?",
        "quals": [
            {"relid": 16384, "attnum": 2, "opno": 96, "indexams": ["btree"], "relname": "orders", "attname": "status"}
        ],
    },
]


@pytest.fixture
def quals_file(tmp_path: Path) -> Path:
    path = tmp_path / "top_quals.json"
    path.write_text(json.dumps(BATCHES))
    return path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_suggest_json(quals_file: Path) -> None:
    result = runner.invoke(
        app,
        ["suggest", str(quals_file), "-d", "shop", "--no-send-suggestions", "--format", "json"],
    )

    assert result.exit_code == 0
    assert '"shortest_path"' in result.stdout
    assert '"shop"' in result.stdout


def test_suggest_text(quals_file: Path) -> None:
    result = runner.invoke(app, ["suggest", str(quals_file), "-d", "shop", "--no-send-suggestions"])

    assert result.exit_code == 0
    assert "exploration order" in result.stdout


def test_suggest_dot_with_insertion(quals_file: Path) -> None:
    result = runner.invoke(
        app,
        [
            "suggest", str(quals_file), "-d", "shop", "--no-send-suggestions",
            "--strategy", "insertion", "--seed", "1", "--format", "dot",
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.startswith("digraph wizard {")


def test_wizard_is_unsubscribed_after_run(quals_file: Path) -> None:
    runner.invoke(app, ["suggest", str(quals_file), "-d", "shop", "--no-send-suggestions"])

    source = DataSourceRegistry.get_instance().get("wizard_quals")
    assert source is not None
    assert source.listeners == ()


def test_invalid_input_exits_with_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("[{not json")

    result = runner.invoke(app, ["suggest", str(path), "-d", "shop", "--no-send-suggestions"])

    assert result.exit_code == 1


def test_schema() -> None:
    result = runner.invoke(app, ["schema"])

    assert result.exit_code == 0
    assert "WizardResultSchema" in result.stdout
