"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from list_distributor import __main__
from list_distributor.cli import main


@pytest.fixture()
def config_path(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "upload_dir": str(tmp_path / "uploads"),
                "repository": {"backend": "json", "path": str(tmp_path / "lists")},
                "agents": [
                    {"id": "a1", "name": "Ann"},
                    {"id": "a2", "name": "Ben"},
                    {"id": "a3", "name": "Cat", "active": False},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def input_path(tmp_path):
    path = tmp_path / "contacts.csv"
    path.write_text(
        "First Name,Phone Number,Notes\nJane,5551234567,hot lead\nJohn,5559876543,\nJill,5550000000,call later\n",
        encoding="utf-8",
    )
    return path


def _ingest(config_path, *files, capsys, extra=()):
    exit_code = main(["ingest", *map(str, files), "--config", str(config_path), "--uploaded-by", "admin", *extra])
    return exit_code, json.loads(capsys.readouterr().out)


def test_cli_ingest_show_lists_and_export(tmp_path, config_path, input_path, capsys) -> None:
    exit_code, responses = _ingest(config_path, input_path, capsys=capsys)

    assert exit_code == 0
    (response,) = responses
    assert response["success"] is True
    data = response["data"]
    assert data["total_items"] == 3
    assert [d["agent_id"] for d in data["distributions"]] == ["a1", "a2"]
    assert [d["assigned_count"] for d in data["distributions"]] == [2, 1]
    assert list((tmp_path / "uploads").iterdir()) == []

    assert main(["show", data["id"], "--config", str(config_path)]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["data"] == data

    assert main(["lists", "--config", str(config_path)]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert listed["count"] == 1

    output_path = tmp_path / "assignments.csv"
    assert main(["export", data["id"], str(output_path), "--config", str(config_path)]) == 0
    exported = pd.read_csv(output_path, dtype=str, keep_default_na=False)
    assert list(exported["agent_name"]) == ["Ann", "Ann", "Ben"]
    assert list(exported["name"]) == ["Jane", "John", "Jill"]


def test_cli_reports_failures_per_file(tmp_path, config_path, input_path, capsys) -> None:
    bad = tmp_path / "contacts.txt"
    bad.write_text("whatever", encoding="utf-8")

    exit_code, responses = _ingest(
        config_path,
        input_path,
        bad,
        tmp_path / "missing.csv",
        capsys=capsys,
        extra=("--mode", "concurrent", "--max-workers", "2"),
    )

    assert exit_code == 1
    assert [response["success"] for response in responses] == [True, False, False]
    assert responses[1]["status"] == 400
    assert "Unsupported" in responses[1]["message"]
    assert responses[2]["file"].endswith("missing.csv")


def test_cli_show_unknown_list(config_path, capsys) -> None:
    assert main(["show", "unknown", "--config", str(config_path)]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == 404


def test_cli_invalid_configuration(tmp_path) -> None:
    assert main(["lists", "--config", str(tmp_path / "absent.yaml")]) == 2


def test_module_entry_point_delegates_to_cli(config_path, input_path, capsys) -> None:
    exit_code = __main__.main(
        ["ingest", str(input_path), "--config", str(config_path), "--uploaded-by", "admin"]
    )

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)[0]["success"] is True


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m list_distributor" in captured.out
    assert exit_code == 2


def test_cli_export_rejects_unknown_extension(tmp_path, config_path, input_path, capsys) -> None:
    _, (response,) = _ingest(config_path, input_path, capsys=capsys)
    output_path = tmp_path / "assignments.json"

    exit_code = main(["export", response["data"]["id"], str(output_path), "--config", str(config_path)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["success"] is False
    assert payload["status"] == 400
    assert ".json" in payload["message"]
    assert not output_path.exists()
