from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from sequence_runner.cli import cli


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sequence_runner.cli.configure_logging", lambda verbose=False: None)


@pytest.fixture
def scenarios_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scenarios"
    directory.mkdir()
    (directory / "smoke.yaml").write_text(yaml.safe_dump({
        "name": "smoke",
        "steps": [
            {"name": "create", "method": "POST", "url": "/items", "validate": "status_200",
             "extract": {"id": "data.id"}},
            {"name": "read", "method": "GET", "url": "/items/{id}", "validate": "status_200"},
        ],
    }), encoding="utf-8")
    (directory / "strict.yaml").write_text(yaml.safe_dump({
        "name": "strict",
        "steps": [{"name": "created", "method": "POST", "url": "/items", "validate": "status_201"}],
    }), encoding="utf-8")
    (directory / "invalid.yaml").write_text(yaml.safe_dump({
        "name": "invalid",
        "steps": [{"name": "no url", "method": "GET"}],
    }), encoding="utf-8")
    return directory


def _invoke(args: list[str]):
    result = CliRunner().invoke(cli, args, obj={})
    return result, json.loads(result.stdout)


def test_run_dry_run_succeeds(scenarios_dir: Path, tmp_path: Path) -> None:
    report_path = tmp_path / "out" / "report.json"
    result, output = _invoke([
        "--scenarios-dir", str(scenarios_dir),
        "run", "smoke", "--dry-run", "--var", "tenant=acme", "--report", str(report_path),
    ])
    assert result.exit_code == 0
    assert output["success"] is True
    assert output["command"] == "run"
    assert output["data"]["total_steps"] == 2
    assert output["data"]["context"]["tenant"] == "acme"
    assert output["data"]["context"]["id"].startswith("mock-id-")
    assert json.loads(report_path.read_text(encoding="utf-8"))["status"] == "passed"


def test_run_failure_exits_nonzero(scenarios_dir: Path) -> None:
    result, output = _invoke(["--scenarios-dir", str(scenarios_dir), "run", "strict", "--dry-run"])
    assert result.exit_code == 1
    assert output["success"] is False
    assert "Scenario failed at step 1: created" in output["message"]
    assert output["data"]["failed"] == 1


def test_run_by_path(scenarios_dir: Path) -> None:
    result, output = _invoke(["run", str(scenarios_dir / "smoke.yaml"), "--dry-run"])
    assert result.exit_code == 0
    assert output["data"]["scenario"] == "smoke"


def test_run_unknown_scenario(scenarios_dir: Path) -> None:
    result, output = _invoke(["--scenarios-dir", str(scenarios_dir), "run", "nope"])
    assert result.exit_code == 1
    assert "not found" in output["message"]


def test_run_rejects_bad_variables(scenarios_dir: Path) -> None:
    result = CliRunner().invoke(
        cli, ["--scenarios-dir", str(scenarios_dir), "run", "smoke", "--dry-run", "--var", "novalue"], obj={}
    )
    assert result.exit_code == 2


def test_validate_command(scenarios_dir: Path) -> None:
    result, output = _invoke(["--scenarios-dir", str(scenarios_dir), "validate", "smoke"])
    assert result.exit_code == 0
    assert output["success"] is True

    result, output = _invoke(["--scenarios-dir", str(scenarios_dir), "validate", "invalid"])
    assert result.exit_code == 1
    assert output["data"]["errors"][0]["path"] == "steps[0].url"


def test_list_command(scenarios_dir: Path) -> None:
    result, output = _invoke(["--scenarios-dir", str(scenarios_dir), "list"])
    assert result.exit_code == 0
    assert [s["file"] for s in output["data"]["scenarios"]] == ["invalid", "smoke", "strict"]


def test_init_command(tmp_path: Path) -> None:
    directory = tmp_path / "fresh"
    result, output = _invoke(["--scenarios-dir", str(directory), "init", "login", "--template", "auth"])
    assert result.exit_code == 0
    assert (directory / "login.yaml").exists()

    result, output = _invoke(["--scenarios-dir", str(directory), "init", "login"])
    assert result.exit_code == 1
    assert output["success"] is False
