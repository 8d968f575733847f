"""Context classification of partial statements."""

from __future__ import annotations

import pytest

from sqlpad.sqlintel.context import CONTEXT_RULES, classify, matching_rule
from sqlpad.sqlintel.models import ContextTag


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("SE", ContextTag.KEYWORD),
        ("SELECT ", ContextTag.SELECT),
        ("SELECT * ", ContextTag.NEED_FROM),
        ("SELECT name ", ContextTag.NEED_FROM),
        ("SELECT * FROM ", ContextTag.FROM),
        ("SELECT * FROM users ", ContextTag.AFTER_FROM),
        ("SELECT * FROM users INNER JOIN ", ContextTag.JOIN),
        ("SELECT * FROM users WHERE id = 1 ", ContextTag.WHERE),
        ("SELECT * FROM users GROUP BY ", ContextTag.GROUP_BY),
        ("SELECT role FROM users GROUP BY role HAVING ", ContextTag.HAVING),
        ("SELECT * FROM users ORDER BY ", ContextTag.ORDER_BY),
        ("SELECT * FROM users LIMIT ", ContextTag.LIMIT),
        ("SELECT * FROM users UNION SELECT ", ContextTag.UNION),
        ("WITH x AS (SELECT ", ContextTag.WITH),
        ("SELECT CASE WHEN ", ContextTag.CASE),
    ],
)
def test_classify(text: str, expected: ContextTag) -> None:
    assert classify(text) is expected


def test_with_rule_wins_over_union() -> None:
    assert classify("WITH x AS (SELECT * FROM users UNION SELECT ") is ContextTag.WITH


def test_from_start_wins_over_later_rules() -> None:
    assert matching_rule("SELECT * FROM users WHERE id IN (SELECT id FROM ").name == "from_clause_start"


def test_case_closed_by_end_is_not_case() -> None:
    assert classify("SELECT CASE WHEN id = 1 THEN 'a' END ") is not ContextTag.CASE


def test_classification_is_deterministic() -> None:
    text = "SELECT * FROM users WHERE role = 'admin' "
    assert {classify(text) for _ in range(5)} == {ContextTag.WHERE}


def test_rule_order_is_stable() -> None:
    names = [rule.name for rule in CONTEXT_RULES]

    assert names[:2] == ["with", "union"]
    assert names.index("from_clause_start") < names.index("after_from") < names.index("in_select")
    assert names[-1] == "where_clause"


def test_fallback_rule_is_keyword() -> None:
    assert matching_rule("zzzzzz").tag is ContextTag.KEYWORD
