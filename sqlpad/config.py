"""App configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from typing import Mapping, Sequence

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .sqlintel.metadata import VALUE_SAMPLE_LIMIT, ForeignKey

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "sqlpad" / "config.toml"


class CompletionSettings(BaseModel):
    """Tunables for the completion engine."""

    min_parse_length: int = 6
    value_sample_limit: int = VALUE_SAMPLE_LIMIT
    max_suggestions: int = 50
    limit_values: list[int] = Field(default_factory=lambda: [1, 3, 5, 10, 25, 50, 100])


class ForeignKeyConfig(BaseModel):
    """Foreign key edge stored in a schema profile."""

    table: str
    column: str
    referenced_table: str
    referenced_column: str

    def to_foreign_key(self) -> ForeignKey:
        return ForeignKey(self.table, self.column, self.referenced_table, self.referenced_column)


class SchemaProfileConfig(BaseModel):
    """Offline schema snapshot stored in config.toml."""

    name: str
    tables: Mapping[str, Sequence[str]] = Field(default_factory=dict)
    foreign_keys: list[ForeignKeyConfig] = Field(default_factory=list)
    values: Mapping[str, Sequence[str]] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    dialect: str = "postgres"
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    profiles: list[SchemaProfileConfig] = Field(default_factory=lambda: list(_default_profiles()))
    active_profile: str | None = None

    def get_profile(self, name: str | None = None) -> SchemaProfileConfig:
        """Return the named profile, else the active one, else the first."""

        wanted = name or self.active_profile
        if wanted is None:
            if not self.profiles:
                raise ConfigError("No schema profiles are configured.")
            return self.profiles[0]
        for profile in self.profiles:
            if profile.name == wanted:
                return profile
        raise ConfigError(f"Unknown schema profile '{wanted}'.")

    def with_active_profile(self, name: str) -> AppConfig:
        """Return a copy with the active profile updated."""

        return self.model_copy(update={"active_profile": name})

    def with_completion(self, **updates: object) -> AppConfig:
        """Return a copy with completion settings changes applied."""

        completion = self.completion.model_copy(update=updates)
        return self.model_copy(update={"completion": completion})


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    target = path or CONFIG_FILE
    try:
        data = _read_config_file(target)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file", extra={"path": str(target), "error": str(exc)})
        return AppConfig()

    profiles: list[SchemaProfileConfig] | None = None
    profiles_data = data.get("profiles")
    if isinstance(profiles_data, list):
        profiles = []
        for entry in profiles_data:
            try:
                profiles.append(SchemaProfileConfig(**entry))
            except ValidationError as exc:
                LOG.warning("Skipping invalid schema profile", extra={"error": str(exc)})
        profiles = profiles or None

    completion = CompletionSettings()
    completion_data = data.get("completion")
    if isinstance(completion_data, dict):
        try:
            completion = CompletionSettings(**completion_data)
        except ValidationError as exc:
            LOG.warning("Ignoring invalid completion settings", extra={"error": str(exc)})

    return AppConfig(
        dialect=data.get("dialect", AppConfig.model_fields["dialect"].default),
        completion=completion,
        profiles=profiles if profiles is not None else list(_default_profiles()),
        active_profile=data.get("active_profile"),
    )


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Persist configuration to disk."""

    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [f"dialect = {_toml_string(config.dialect)}"]
    if config.active_profile:
        lines.append(f"active_profile = {_toml_string(config.active_profile)}")
    completion = config.completion
    lines.append("")
    lines.append("[completion]")
    lines.append(f"min_parse_length = {completion.min_parse_length}")
    lines.append(f"value_sample_limit = {completion.value_sample_limit}")
    lines.append(f"max_suggestions = {completion.max_suggestions}")
    lines.append(f"limit_values = [{', '.join(str(count) for count in completion.limit_values)}]")
    for profile in config.profiles:
        lines.append("")
        lines.append("[[profiles]]")
        lines.append(f"name = {_toml_string(profile.name)}")
        if profile.tables:
            lines.append("")
            lines.append("[profiles.tables]")
            for table, columns in profile.tables.items():
                lines.append(f"{_toml_string(table)} = {_toml_array(columns)}")
        if profile.values:
            lines.append("")
            lines.append("[profiles.values]")
            for key, samples in profile.values.items():
                lines.append(f"{_toml_string(key)} = {_toml_array(samples)}")
        for key in profile.foreign_keys:
            lines.append("")
            lines.append("[[profiles.foreign_keys]]")
            lines.append(f"table = {_toml_string(key.table)}")
            lines.append(f"column = {_toml_string(key.column)}")
            lines.append(f"referenced_table = {_toml_string(key.referenced_table)}")
            lines.append(f"referenced_column = {_toml_string(key.referenced_column)}")
    target.write_text("\n".join(lines) + "\n")


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _toml_array(values: Sequence[str]) -> str:
    return "[" + ", ".join(_toml_string(str(value)) for value in values) + "]"


def _read_config_file(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    if isinstance(raw, dict):
        dialect = raw.get("dialect")
        if isinstance(dialect, str):
            data["dialect"] = dialect
        active_profile = raw.get("active_profile")
        if isinstance(active_profile, str):
            data["active_profile"] = active_profile
        completion = raw.get("completion")
        if isinstance(completion, dict):
            data["completion"] = completion
        profiles = raw.get("profiles")
        if isinstance(profiles, list):
            parsed_profiles: list[dict[str, object]] = []
            for profile in profiles:
                if not isinstance(profile, dict) or not isinstance(profile.get("name"), str):
                    LOG.warning("Skipping schema profile without a name")
                    continue
                parsed: dict[str, object] = {"name": profile["name"]}
                tables = profile.get("tables")
                if isinstance(tables, dict):
                    parsed["tables"] = {
                        str(table): tuple(str(col) for col in columns)
                        for table, columns in tables.items()
                        if isinstance(columns, list)
                    }
                values = profile.get("values")
                if isinstance(values, dict):
                    parsed["values"] = {
                        str(key): tuple(str(sample) for sample in samples)
                        for key, samples in values.items()
                        if isinstance(samples, list)
                    }
                foreign_keys = profile.get("foreign_keys")
                if isinstance(foreign_keys, list):
                    parsed["foreign_keys"] = [entry for entry in foreign_keys if isinstance(entry, dict)]
                parsed_profiles.append(parsed)
            data["profiles"] = parsed_profiles
    return data


def _default_profiles() -> tuple[SchemaProfileConfig, ...]:
    """Default profile shown on first run before config is customized."""

    return (
        SchemaProfileConfig(
            name="Local Demo",
            tables={
                "users": ("id", "name", "email", "role", "created_at"),
                "orders": ("id", "user_id", "total", "status", "created_at"),
                "products": ("id", "name", "price"),
            },
            foreign_keys=[
                ForeignKeyConfig(
                    table="orders",
                    column="user_id",
                    referenced_table="users",
                    referenced_column="id",
                )
            ],
            values={
                "users.role": ("admin", "editor", "viewer"),
                "orders.status": ("pending", "shipped", "delivered"),
            },
        ),
    )


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "CompletionSettings",
    "ForeignKeyConfig",
    "SchemaProfileConfig",
    "load_config",
    "save_config",
]
