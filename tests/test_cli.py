from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from parabuild.cli import cli

EXAMPLE_PLAN = Path(__file__).resolve().parent.parent / "parabuild_plan.py"


def _write_plan(path: Path, units) -> Path:
    path.write_text(json.dumps({"units": units}))
    return path


def test_build_runs_all_units(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = _write_plan(tmp_path / "plan.json", [
        {"key": "a", "run": "echo a >> log.txt"},
        {"key": "b", "run": "echo b >> log.txt", "needs": ["a"]},
    ])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan), "--workers", "2"])

    assert result.exit_code == 0, result.output
    assert "build flow: [1, 1]" in result.output
    assert "Running build for a..." in result.output
    assert "2 units built successfully in" in result.output
    assert (tmp_path / "log.txt").read_text().split() == ["a", "b"]


def test_build_failure_exits_non_zero(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = _write_plan(tmp_path / "plan.json", [
        {"key": "a", "run": "exit 2"},
        {"key": "b", "run": "touch b.txt", "needs": ["a"]},
    ])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan)])

    assert result.exit_code == 1
    assert "ERROR: ExecutionError" in result.output
    assert "Cannot build a" in result.output
    assert not (tmp_path / "b.txt").exists()


def test_dangling_dependency_aborts_before_work(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = _write_plan(tmp_path / "plan.json", [
        {"key": "a", "run": "touch a.txt", "needs": ["ghost"]},
    ])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan)])

    assert result.exit_code == 1
    assert "ConfigurationError" in result.output
    assert "ghost" in result.output
    assert not (tmp_path / "a.txt").exists()


def test_cycle_reports_stall(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = _write_plan(tmp_path / "plan.json", [
        {"key": "x", "needs": ["y"]},
        {"key": "y", "needs": ["x"]},
    ])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan)])

    assert result.exit_code == 1
    assert "StallError" in result.output


def test_dry_run_does_no_work(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = _write_plan(tmp_path / "plan.json", [
        {"key": "a", "run": "touch a.txt"},
        {"key": "b", "run": "touch b.txt"},
    ])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan), "--dry-run"])

    assert result.exit_code == 0
    assert result.output.strip() == "build flow: [2]"
    assert not (tmp_path / "a.txt").exists()


def test_plan_command_lists_waves():
    result = CliRunner().invoke(cli, ["plan", "--plan", str(EXAMPLE_PLAN)])

    assert result.exit_code == 0, result.output
    assert "build flow: [1, 2, 2]" in result.output
    assert "=== Wave 1 (1) ===" in result.output
    assert "  core" in result.output


def test_missing_default_project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Project config not found" in result.output


def test_workers_must_be_positive(tmp_path):
    result = CliRunner().invoke(cli, ["build", "--workers", "0"])
    assert result.exit_code == 2


def test_bad_workers_environment_is_reported(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PARABUILD_WORKERS", "lots")
    plan = _write_plan(tmp_path / "plan.json", [{"key": "a", "run": "touch a.txt"}])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan)])

    assert result.exit_code == 1
    assert "ConfigurationError" in result.output
    assert "PARABUILD_WORKERS must be an integer" in result.output
    assert not (tmp_path / "a.txt").exists()


def test_workers_environment_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PARABUILD_WORKERS", "1")
    plan = _write_plan(tmp_path / "plan.json", [{"key": "a", "run": "touch a.txt"}])

    result = CliRunner().invoke(cli, ["build", "--plan", str(plan)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "a.txt").exists()


def test_broken_python_plan_is_reported(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    plan = tmp_path / "broken_plan.py"
    plan.write_text("def units(:\n")

    result = CliRunner().invoke(cli, ["plan", "--plan", str(plan)])

    assert result.exit_code == 1
    assert "ERROR: ConfigurationError" in result.output
    assert "SyntaxError" in result.output
    assert not isinstance(result.exception, SyntaxError)
