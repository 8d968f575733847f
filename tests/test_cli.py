"""Tests for the command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlpad.cli import main, parse_args


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "missing.toml"


def test_parse_args_defaults() -> None:
    args = parse_args(["SELECT "])

    assert args.sql == "SELECT "
    assert args.cursor is None
    assert args.verbose is False


def test_main_prints_completions(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["SELECT * FROM ", "--config", str(config_path)])

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert lines == ["users\ttable\ttable", "orders\ttable\ttable", "products\ttable\ttable"]


def test_main_honours_cursor(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["SELECT * FROM or WHERE", "--cursor", "16", "--config", str(config_path)])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["orders\ttable\ttable"]


def test_main_returns_one_without_suggestions(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["SELECT * FROM zz", "--config", str(config_path)]) == 1
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("option", [["--dialect", "klingon"], ["--profile", "Missing"]])
def test_main_reports_configuration_errors(
    option: list[str], config_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["SELECT ", "--config", str(config_path), *option]) == 2
    assert capsys.readouterr().err.startswith("sqlpad: ")
