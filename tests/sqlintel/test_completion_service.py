"""Dispatcher behaviour: word spans, filtering, truncation and error isolation."""

from __future__ import annotations

import logging

import pytest

from sqlpad.sqlintel import (
    ContextTag,
    MetadataIndex,
    SqlIntelService,
    StaticMetadataProvider,
)
from sqlpad.sqlintel.handlers import HANDLER_CHAIN


def test_analyze_splits_word_from_text(service: SqlIntelService) -> None:
    request = service.analyze("SELECT * FROM us")

    assert request.text == "SELECT * FROM "
    assert request.word == "us"
    assert (request.start, request.end) == (14, 16)
    assert request.context is ContextTag.FROM


def test_analyze_clamps_cursor(service: SqlIntelService) -> None:
    assert service.analyze("SELECT", cursor=99).end == 6
    assert service.analyze("SELECT", cursor=-4).end == 0


def test_caller_word_must_end_the_prefix(service: SqlIntelService) -> None:
    assert service.analyze("SELECT * FROM us", word="us").word == "us"

    mismatch = service.analyze("SELECT * FROM us", word="zz")
    assert mismatch.word == ""
    assert mismatch.text == "SELECT * FROM us"


def test_cursor_in_the_middle_of_text(complete) -> None:
    result = complete("SELECT * FROM us WHERE id = 1", cursor=16)

    assert result.labels == ["users"]
    assert (result.start, result.end) == (14, 16)


def test_explicit_metadata_overrides_provider(complete) -> None:
    result = complete("SELECT * FROM ", metadata=MetadataIndex.build({"audit_log": ("id",)}))

    assert result.labels == ["audit_log"]


def test_empty_metadata_yields_no_tables(complete) -> None:
    assert complete("SELECT * FROM ", metadata=MetadataIndex.empty()) is None


def test_word_without_matches_returns_none(complete) -> None:
    assert complete("SELECT * FROM zz") is None


def test_results_are_deterministic(complete) -> None:
    text = "SELECT * FROM users WHERE role = 'admin' "

    assert {tuple(complete(text).labels) for _ in range(3)} == {
        ("AND", "OR", "GROUP BY", "ORDER BY", "LIMIT", ";")
    }


def test_join_handler_runs_before_union_handler(labels) -> None:
    assert labels("SELECT * FROM users ")[0] == "INNER JOIN"


def test_results_are_truncated() -> None:
    provider = StaticMetadataProvider({f"table_{index:02d}": ("id",) for index in range(60)})
    service = SqlIntelService(provider, max_suggestions=50)

    result = service.complete("SELECT * FROM ")

    assert len(result.options) == 50
    assert result.labels[-1] == "table_49"


def test_failing_handler_is_isolated(provider: StaticMetadataProvider, caplog: pytest.LogCaptureFixture) -> None:
    def explode(request):
        raise RuntimeError("boom")

    service = SqlIntelService(provider, chain=(explode,) + HANDLER_CHAIN)

    with caplog.at_level(logging.ERROR, logger="sqlpad.sqlintel.service"):
        assert service.complete("SELECT * FROM ") is None

    assert "Completion handler failed" in caplog.text


def test_dialect_is_exposed(provider: StaticMetadataProvider) -> None:
    assert SqlIntelService(provider, dialect="sqlite").dialect == "sqlite"
    assert SqlIntelService(provider).metadata_provider is provider


def test_handler_chain_order_is_pinned() -> None:
    assert [handler.__name__ for handler in HANDLER_CHAIN] == [
        "suggest_select",
        "suggest_with_clause",
        "suggest_columns_after_select",
        "suggest_case_clause",
        "suggest_as_or_from_keyword",
        "suggest_tables_after_from",
        "suggest_join_clause",
        "suggest_where_clause",
        "suggest_order_by_clause",
        "suggest_group_by_clause",
        "suggest_having_clause",
        "suggest_limit_clause",
        "suggest_union_clause",
    ]


def test_unterminated_quote_does_not_raise(service: SqlIntelService, caplog: pytest.LogCaptureFixture) -> None:
    service.complete("SELECT * FROM users WHERE name = 'abc")

    assert "Completion handler failed" not in caplog.text
