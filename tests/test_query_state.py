"""Tests for the structured query-state store."""

from __future__ import annotations

import pytest

from sqlpad.query_state import QueryState, QueryStateStore, SelectedOption
from sqlpad.sqlintel import IdentifierOption


def _opt(value: str) -> IdentifierOption:
    return IdentifierOption.of(value)


def test_table_columns_and_distinct() -> None:
    store = QueryStateStore()

    store.on_table_select(_opt("users"))
    store.on_column_select((_opt("id"), _opt("name")))
    store.on_distinct_select(True)

    state = store.state
    assert state.selected_table == SelectedOption(value="users", label="users")
    assert [column.value for column in state.selected_columns] == ["id", "name"]
    assert state.is_distinct is True


def test_where_conditions_are_built_by_index() -> None:
    store = QueryStateStore()

    store.on_where_column_select(_opt("id"), 0)
    store.on_operator_select(_opt("BETWEEN"), 0)
    store.on_value_select(_opt("1"), 0, False)
    store.on_value_select(_opt("9"), 0, True)
    store.on_logical_operator_select(_opt("AND"))
    store.on_where_column_select(_opt("role"), 1)

    first, second = store.state.where_clause
    assert (first.column.value, first.operator.value, first.value.value, first.value2.value) == (
        "id",
        "BETWEEN",
        "1",
        "9",
    )
    assert first.logical_operator.value == "AND"
    assert second.column.value == "role"


def test_gaps_are_padded_and_negative_indexes_rejected() -> None:
    store = QueryStateStore()

    store.on_join_table_select(_opt("orders"), 2)

    assert len(store.state.join_clauses) == 3
    assert store.state.join_clauses[2].table.value == "orders"
    with pytest.raises(IndexError):
        store.on_having_value_select(_opt("1"), -1)


def test_logical_operator_without_conditions_creates_one() -> None:
    store = QueryStateStore()

    store.on_logical_operator_select(_opt("OR"))

    assert store.state.where_clause[0].logical_operator.value == "OR"


def test_order_by_limit_group_and_having() -> None:
    store = QueryStateStore()
    aggregate = IdentifierOption(value="COUNT(*)", label="COUNT(*)", column="*", aggregate=True)

    store.on_order_by_column_select(_opt("name"))
    store.on_order_by_direction_select(_opt("name"), "DESC")
    store.on_limit_select(_opt("10"))
    store.on_group_by_column_select((_opt("role"),))
    store.on_aggregate_column_select(aggregate, 0)
    store.on_having_operator_select(_opt(">"), 0)
    store.on_having_value_select(_opt("10"), 0)

    state = store.state
    assert (state.order_by.column.value, state.order_by.direction) == ("name", "DESC")
    assert state.limit.value == "10"
    assert [column.value for column in state.group_by_columns] == ["role"]
    having = state.having_clause[0]
    assert having.column.aggregate is True
    assert having.column.column == "*"
    assert (having.operator.value, having.value.value) == (">", "10")


def test_join_and_union_clauses() -> None:
    store = QueryStateStore()

    store.on_join_type_select(_opt("LEFT JOIN"), 0)
    store.on_join_table_select(_opt("orders"), 0)
    store.on_join_on_column1_select(_opt("users.id"), 0)
    store.on_join_on_column2_select(_opt("orders.user_id"), 0)
    store.on_union_type_select(_opt("UNION ALL"), 0)
    store.on_union_table_select(_opt("archive"), 0)

    join = store.state.join_clauses[0]
    assert [join.join_type.value, join.table.value, join.on_column1.value, join.on_column2.value] == [
        "LEFT JOIN",
        "orders",
        "users.id",
        "orders.user_id",
    ]
    union = store.state.union_clauses[0]
    assert (union.union_type.value, union.table.value) == ("UNION ALL", "archive")


def test_cte_callbacks_fill_the_cte_clause() -> None:
    store = QueryStateStore()

    store.on_cte_alias_change(0, "recent")
    store.on_cte_table_select(0, _opt("users"))
    store.on_cte_column_select(0, (_opt("name"),))
    store.on_cte_where_column_select(0, 0, _opt("role"))
    store.on_cte_operator_select(0, 0, _opt("="))
    store.on_cte_value_select(0, 0, _opt("admin"), False)
    store.on_cte_logical_operator_select(0, _opt("AND"))
    store.on_cte_group_by_select(0, (_opt("role"),))
    store.on_cte_having_aggregate_select(0, 0, _opt("COUNT(*)"))
    store.on_cte_having_operator_select(0, 0, _opt(">"))
    store.on_cte_having_value_select(0, 0, _opt("1"))

    cte = store.state.cte_clauses[0]
    assert cte.alias == "recent"
    assert cte.from_table.value == "users"
    assert [column.value for column in cte.selected_columns] == ["name"]
    condition = cte.where_clause[0]
    assert (condition.column.value, condition.operator.value, condition.value.value) == ("role", "=", "admin")
    assert condition.logical_operator.value == "AND"
    assert [column.value for column in cte.group_by_columns] == ["role"]
    assert cte.having_clause[0].value.value == "1"


def test_case_callbacks_fill_the_case_clause() -> None:
    store = QueryStateStore()

    store.on_case_column_select(_opt("role"), 0)
    store.on_case_operator_select(_opt("="), 0)
    store.on_case_value_select(_opt("admin"), 0)
    store.on_case_result_select(_opt("staff"), 0)
    store.on_case_result_select(_opt("guest"), 1)
    store.on_else_result_select(_opt("other"))
    store.on_case_alias_change("kind")

    case = store.state.case_clause
    first = case.conditions[0]
    assert (first.column.value, first.operator.value, first.value.value, first.result.value) == (
        "role",
        "=",
        "admin",
        "staff",
    )
    assert case.conditions[1].column is None
    assert case.conditions[1].result.value == "guest"
    assert case.else_value.value == "other"
    assert case.alias == "kind"

    store.on_case_alias_change(None)

    assert store.state.case_clause.alias is None


def test_listeners_and_reset() -> None:
    store = QueryStateStore()
    seen: list[str | None] = []

    def _listener(state: QueryState) -> None:
        seen.append(state.selected_table.value if state.selected_table else None)

    unsubscribe = store.subscribe(_listener)

    store.on_table_select(_opt("users"))
    store.reset()
    unsubscribe()
    store.on_table_select(_opt("orders"))

    assert seen == ["users", None]
    assert store.state.selected_table.value == "orders"


def test_selected_option_accepts_plain_strings() -> None:
    assert SelectedOption.from_option("x") == SelectedOption(value="x", label="x")
