"""Tests for the session manager wiring."""

from __future__ import annotations

import pytest

from sqlpad.config import AppConfig, CompletionSettings, SchemaProfileConfig
from sqlpad.errors import ConfigError
from sqlpad.session import SessionManager, SessionState


def _config() -> AppConfig:
    return AppConfig(
        profiles=[
            SchemaProfileConfig(name="Shop", tables={"customers": ["id", "email"]}),
            SchemaProfileConfig(name="Blog", tables={"posts": ["id", "title"], "tags": ["id", "label"]}),
        ],
        active_profile="Shop",
    )


def test_session_manager_connects_active_profile() -> None:
    manager = SessionManager(_config())

    assert manager.profiles == ("Shop", "Blog")
    assert manager.state is not None
    assert manager.state.profile == "Shop"
    assert manager.state.tables == ("customers",)
    assert manager.state.refreshed_at is not None


def test_session_manager_uses_first_profile_by_default() -> None:
    manager = SessionManager(AppConfig())

    assert manager.state.profile == "Local Demo"
    assert manager.complete("SELECT * FROM ").labels == ["users", "orders", "products"]


def test_session_manager_switches_profiles_and_notifies_listeners() -> None:
    manager = SessionManager(_config())
    seen: list[SessionState] = []

    unsubscribe = manager.subscribe(seen.append)
    manager.connect("Blog")
    unsubscribe()
    manager.connect("Shop")

    assert [state.profile for state in seen] == ["Shop", "Blog"]
    assert manager.complete("SELECT * FROM ").labels == ["customers"]


def test_connect_unknown_profile_raises() -> None:
    manager = SessionManager(_config())

    with pytest.raises(ConfigError):
        manager.connect("Missing")
    assert manager.state.profile == "Shop"


def test_accept_syncs_query_state_and_reconnect_resets_it() -> None:
    manager = SessionManager(_config())
    text = "SELECT * FROM "
    result = manager.complete(text)

    updated, cursor = manager.accept(text, result, result.options[0])

    assert updated == "SELECT * FROM customers "
    assert cursor == len(updated)
    assert manager.query_state.state.selected_table.value == "customers"

    manager.connect("Blog")
    assert manager.query_state.state.selected_table is None


def test_completion_settings_reach_the_service() -> None:
    config = _config().with_active_profile("Blog").model_copy(
        update={"completion": CompletionSettings(max_suggestions=1, limit_values=[7])}
    )
    manager = SessionManager(config)

    assert manager.complete("SELECT * FROM ").labels == ["posts"]
    assert manager.complete("SELECT * FROM posts LIMIT ").labels == ["7"]
