"""ORDER BY, GROUP BY, HAVING and LIMIT suggestions."""

from __future__ import annotations

from sqlpad.sqlintel import IdentifierOption, SqlIntelService, SyncAction

USERS_COLUMNS = ["id", "name", "email", "role", "created_at"]


def test_order_by_offers_columns_then_positions(complete) -> None:
    result = complete("SELECT * FROM users ORDER BY ")

    assert result.labels == USERS_COLUMNS + ["1", "2", "3", "4", "5"]
    assert result.options[1].sync == SyncAction("on_order_by_column_select", (IdentifierOption.of("name"),))
    assert result.options[5].detail == "position of id"


def test_order_by_positions_follow_select_list(labels) -> None:
    assert labels("SELECT name, email FROM users ORDER BY ")[-2:] == ["1", "2"]


def test_order_by_key_offers_direction(complete) -> None:
    result = complete("SELECT * FROM users ORDER BY name ")

    assert result.labels == ["ASC", "DESC", ",", "LIMIT", ";"]
    assert result.options[1].sync == SyncAction(
        "on_order_by_direction_select", (IdentifierOption.of("name"), "DESC")
    )


def test_order_by_after_direction(labels) -> None:
    assert labels("SELECT * FROM users ORDER BY name DESC ") == [",", "LIMIT", ";"]


def test_order_by_skips_listed_columns(labels) -> None:
    offered = labels("SELECT * FROM users ORDER BY name, ")

    assert "name" not in offered
    assert offered[0] == "id"


def test_group_by_offers_columns_and_positions(labels) -> None:
    assert labels("SELECT role FROM users GROUP BY ") == USERS_COLUMNS + ["1"]


def test_group_by_sync_accumulates_columns(complete) -> None:
    result = complete("SELECT role FROM users GROUP BY role, ")

    assert "role" not in result.labels
    name = next(option for option in result.options if option.label == "name")
    assert name.sync == SyncAction(
        "on_group_by_column_select", ((IdentifierOption.of("role"), IdentifierOption.of("name")),)
    )


def test_group_by_key_offers_next_steps(labels) -> None:
    assert labels("SELECT role FROM users GROUP BY role ") == [",", "HAVING", "ORDER BY", ";"]


def test_having_offers_aggregate_templates(complete) -> None:
    result = complete("SELECT role FROM users GROUP BY role HAVING ")

    assert result.labels == ["COUNT(*)", "COUNT(", "SUM(", "AVG(", "MIN(", "MAX(", "ROUND("]
    count_all = result.options[0].sync
    assert count_all.callback == "on_aggregate_column_select"
    assert count_all.args[0].aggregate
    assert count_all.args[1] == 0
    assert result.options[1].sync is None


def test_having_aggregate_argument(complete) -> None:
    result = complete("SELECT role FROM users GROUP BY role HAVING SUM(")

    first = result.options[0]
    assert first.insert_text == "id) "
    assert first.option.value == "SUM(id)"
    assert first.sync == SyncAction("on_aggregate_column_select", (first.option, 0))


def test_having_operators_and_values(complete, labels) -> None:
    operators = complete("SELECT role FROM users GROUP BY role HAVING COUNT(*) ")
    assert operators.labels == ["=", ">", "<", ">=", "<=", "<>"]
    assert operators.options[1].sync == SyncAction("on_having_operator_select", (IdentifierOption.of(">"), 0))

    assert labels("SELECT role FROM users GROUP BY role HAVING COUNT(*) > ") == ["0", "1", "10", "100"]


def test_having_min_max_use_cached_values(labels) -> None:
    assert labels("SELECT role FROM users GROUP BY role HAVING MAX(role) = ") == ["admin", "editor", "viewer"]


def test_having_completed_condition(labels) -> None:
    assert labels("SELECT role FROM users GROUP BY role HAVING COUNT(*) > 10 ") == [
        "AND",
        "OR",
        "ORDER BY",
        "LIMIT",
        ";",
    ]


def test_limit_values(complete) -> None:
    result = complete("SELECT * FROM users LIMIT ")

    assert result.labels == ["1", "3", "5", "10", "25", "50", "100"]
    assert result.options[3].insert_text == "10 "
    assert result.options[3].sync == SyncAction("on_limit_select", (IdentifierOption.of("10"),))


def test_limit_values_filter_by_digits(labels) -> None:
    assert labels("SELECT * FROM users LIMIT 1") == ["1", "10", "100"]


def test_limit_then_end_statement(labels) -> None:
    assert labels("SELECT * FROM users LIMIT 10 ") == [";"]


def test_custom_limit_values(provider) -> None:
    service = SqlIntelService(provider, limit_values=(5, 500))

    assert service.complete("SELECT * FROM users LIMIT ").labels == ["5", "500"]


def test_limit_after_valid_order_position(labels) -> None:
    assert "LIMIT" in labels("SELECT id, name FROM users ORDER BY 2 ")


def test_no_limit_after_out_of_range_order_position(complete) -> None:
    assert complete("SELECT id, name FROM users ORDER BY 3 ") is None


def test_no_limit_after_unknown_order_column(complete) -> None:
    assert complete("SELECT * FROM users ORDER BY nickname ") is None


def test_limit_values_restrict_reuse_to_digits(complete) -> None:
    assert complete("SELECT * FROM users LIMIT ").valid_for == r"^\d*$"
