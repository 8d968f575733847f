"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlpad import config as config_module
from sqlpad.config import (
    AppConfig,
    CompletionSettings,
    ForeignKeyConfig,
    SchemaProfileConfig,
    load_config,
    save_config,
)
from sqlpad.errors import ConfigError
from sqlpad.sqlintel import ForeignKey


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()
    assert result.profiles[0].name == "Local Demo"


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
dialect = "sqlite"
active_profile = "Shop"

[completion]
max_suggestions = 20
limit_values = [10, 100]

[[profiles]]
name = "Shop"

[profiles.tables]
customers = ["id", "email"]
invoices = ["id", "customer_id", "amount"]

[profiles.values]
"customers.email" = ["a@example.com"]

[[profiles.foreign_keys]]
table = "invoices"
column = "customer_id"
referenced_table = "customers"
referenced_column = "id"
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.dialect == "sqlite"
    assert result.active_profile == "Shop"
    assert result.completion.max_suggestions == 20
    assert result.completion.limit_values == [10, 100]
    assert result.completion.min_parse_length == CompletionSettings().min_parse_length
    profile = result.get_profile()
    assert list(profile.tables) == ["customers", "invoices"]
    assert list(profile.tables["invoices"]) == ["id", "customer_id", "amount"]
    assert list(profile.values["customers.email"]) == ["a@example.com"]
    assert profile.foreign_keys[0].to_foreign_key() == ForeignKey("invoices", "customer_id", "customers", "id")


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("dialect = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()


def test_load_config_ignores_invalid_sections(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[completion]
max_suggestions = "lots"

[[profiles]]
host = "no name here"
"""
    )

    result = load_config(config_path)

    assert result.completion == CompletionSettings()
    assert [profile.name for profile in result.profiles] == ["Local Demo"]
    assert "Ignoring invalid completion settings" in caplog.text


def test_save_config_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    original = AppConfig(
        dialect="mysql",
        profiles=[
            SchemaProfileConfig(
                name='Team "A"',
                tables={"accounts": ["id", "owner"], "order": ["id", "account_id"]},
                foreign_keys=[
                    ForeignKeyConfig(
                        table="order",
                        column="account_id",
                        referenced_table="accounts",
                        referenced_column="id",
                    )
                ],
                values={"accounts.owner": ["ann", "bo"]},
            )
        ],
        active_profile='Team "A"',
    ).with_completion(max_suggestions=12)

    save_config(original, config_path)
    loaded = load_config(config_path)

    content = config_path.read_text()
    assert "[completion]" in content
    assert "[[profiles.foreign_keys]]" in content
    assert loaded.dialect == "mysql"
    assert loaded.active_profile == 'Team "A"'
    assert loaded.completion.max_suggestions == 12
    profile = loaded.get_profile()
    assert {table: list(columns) for table, columns in profile.tables.items()} == {
        "accounts": ["id", "owner"],
        "order": ["id", "account_id"],
    }
    assert list(profile.values["accounts.owner"]) == ["ann", "bo"]
    assert profile.foreign_keys == original.profiles[0].foreign_keys


def test_get_profile_resolution() -> None:
    config = AppConfig(profiles=[SchemaProfileConfig(name="a"), SchemaProfileConfig(name="b")])

    assert config.get_profile().name == "a"
    assert config.with_active_profile("b").get_profile().name == "b"
    assert config.get_profile("a").name == "a"
    with pytest.raises(ConfigError):
        config.get_profile("missing")


def test_get_profile_without_profiles() -> None:
    with pytest.raises(ConfigError):
        AppConfig(profiles=[]).get_profile()


def test_with_completion_returns_copy() -> None:
    config = AppConfig()

    updated = config.with_completion(min_parse_length=3)

    assert updated.completion.min_parse_length == 3
    assert config.completion.min_parse_length == 6
