"""UNION members, common table expressions and CASE expressions."""

from __future__ import annotations

from sqlpad.query_state import QueryStateStore
from sqlpad.sqlintel import IdentifierOption, SyncAction, apply_completion


def test_union_starts_next_select(labels) -> None:
    assert labels("SELECT * FROM users UNION ") == ["SELECT"]
    assert labels("SELECT * FROM users UNION ALL ") == ["SELECT"]


def test_union_member_tables_sync_to_union(complete) -> None:
    result = complete("SELECT * FROM users UNION SELECT * FROM ")

    assert result.labels == ["users", "orders", "products"]
    assert result.options[1].sync == SyncAction("on_union_table_select", (IdentifierOption.of("orders"), 0))


def test_union_member_drops_unscoped_syncs(complete) -> None:
    result = complete("SELECT * FROM users UNION SELECT ")

    assert result.labels[:2] == ["DISTINCT", "*"]
    assert all(option.sync is None for option in result.options)


def test_with_suggests_default_alias(complete) -> None:
    result = complete("WITH ")

    assert result.labels == ["previous_query AS ("]
    assert not result.filter
    assert result.options[0].sync == SyncAction("on_cte_alias_change", (0, "previous_query"))


def test_with_uses_typed_alias(labels) -> None:
    assert labels("WITH recent") == ["recent AS ("]


def test_cte_alias_then_subquery(complete, labels) -> None:
    alias = complete("WITH recent ")
    assert alias.labels == ["AS ("]
    assert alias.options[0].sync == SyncAction("on_cte_alias_change", (0, "recent"))

    assert labels("WITH recent AS (") == ["SELECT"]


def test_cte_body_completes_with_cte_syncs(complete) -> None:
    result = complete("WITH recent AS (SELECT * FROM ")

    assert result.labels == ["users", "orders", "products"]
    assert result.options[0].sync == SyncAction("on_cte_table_select", (0, IdentifierOption.of("users")))


def test_cte_body_can_be_closed(labels) -> None:
    offered = labels("WITH recent AS (SELECT * FROM users ")

    assert offered[0] == "INNER JOIN"
    assert offered[-1] == ")"


def test_cte_where_syncs_to_cte(complete) -> None:
    result = complete("WITH recent AS (SELECT * FROM users WHERE ")

    assert result.options[0].sync == SyncAction(
        "on_cte_where_column_select", (0, 0, IdentifierOption.of("id"))
    )


def test_main_query_after_cte(labels) -> None:
    assert labels("WITH recent AS (SELECT name FROM users) ") == ["SELECT"]
    assert labels("WITH recent AS (SELECT name FROM users) SELECT * FROM ")[-1] == "recent"


def test_main_query_sees_cte_columns(labels) -> None:
    assert labels("WITH recent AS (SELECT name FROM users) SELECT * FROM recent WHERE ") == ["name"]


def test_case_walkthrough(labels) -> None:
    assert labels("SELECT CASE ") == ["WHEN"]
    assert "role" in labels("SELECT CASE WHEN ")
    assert labels("SELECT CASE WHEN role ") == ["=", "!=", ">", "<", ">=", "<=", "LIKE"]
    assert labels("SELECT CASE WHEN role = ") == ["value", "0"]
    assert labels("SELECT CASE WHEN role = 'admin' ") == ["THEN"]
    assert labels("SELECT CASE WHEN role = 'admin' THEN ") == ["value", "0"]
    assert labels("SELECT CASE WHEN role = 'admin' THEN 'a' ") == ["WHEN", "ELSE", "END"]
    assert labels("SELECT CASE WHEN role = 'admin' THEN 'a' ELSE 'b' ") == ["END"]


def test_case_like_offers_patterns(labels) -> None:
    assert labels("SELECT CASE WHEN name LIKE ") == ["%value%", "value%", "%value"]


def test_case_unknown_column(complete) -> None:
    assert complete("SELECT CASE WHEN nosuch ") is None


def test_case_steps_carry_syncs(complete) -> None:
    role = complete("SELECT CASE WHEN ")
    assert role.options[role.labels.index("role")].sync == SyncAction(
        "on_case_column_select", (IdentifierOption.of("role"), 0)
    )
    assert complete("SELECT CASE WHEN role ").options[0].sync == SyncAction(
        "on_case_operator_select", (IdentifierOption.of("="), 0)
    )
    second = complete("SELECT CASE WHEN role = 'admin' THEN 'a' WHEN id > ")
    assert second.options[1].sync == SyncAction("on_case_value_select", (IdentifierOption.of("0"), 1))


def test_case_index_ignores_when_inside_literals(complete) -> None:
    result = complete("SELECT CASE WHEN name = 'when' THEN ")

    assert result.options[0].sync == SyncAction("on_case_result_select", (IdentifierOption.of("value"), 0))


def test_case_steps_fill_the_case_clause(complete) -> None:
    store = QueryStateStore()
    steps = [
        ("SELECT CASE WHEN ", "role"),
        ("SELECT CASE WHEN role ", "="),
        ("SELECT CASE WHEN role = ", "value"),
        ("SELECT CASE WHEN role = 'admin' THEN ", "0"),
        ("SELECT CASE WHEN role = 'admin' THEN 'a' WHEN id > 1 THEN ", "value"),
        ("SELECT CASE WHEN role = 'admin' THEN 'a' ELSE ", "0"),
        ("SELECT CASE WHEN role = 'admin' THEN 'a' END AS \"kind\" ", "FROM"),
    ]

    for text, label in steps:
        result = complete(text)
        picked = next(option for option in result.options if option.label == label)
        apply_completion(text, result, picked, store)

    case = store.state.case_clause
    first = case.conditions[0]
    assert (first.column.value, first.operator.value, first.value.value, first.result.value) == (
        "role",
        "=",
        "value",
        "0",
    )
    assert case.conditions[1].result.value == "value"
    assert case.else_value.value == "0"
    assert case.alias == "kind"


def test_case_without_alias_leaves_from_plain(complete) -> None:
    result = complete("SELECT CASE WHEN role = 'admin' THEN 'a' END ")

    assert result.labels == ["AS", "FROM"]
    assert result.options[1].sync is None
