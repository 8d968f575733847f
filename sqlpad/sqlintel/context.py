"""Ordered rules that classify the cursor position in partial SQL."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Tuple

from .models import ContextTag

_FLAGS = re.IGNORECASE | re.DOTALL

_FROM_RE = re.compile(r"\bFROM\s+[\w\"']+", _FLAGS)
_GROUP_BY_RE = re.compile(r"\bGROUP\s+BY\b", _FLAGS)
_JOIN_RE = re.compile(r"\b(?:INNER|LEFT|RIGHT|CROSS)\s+JOIN\b", _FLAGS)

_CTE_OPEN_RE = re.compile(r"\bWITH\s+[\w\"]*\s*AS\s*\(\s*SELECT\b", _FLAGS)
_UNION_OPEN_RE = re.compile(r"\bUNION\s+(?:ALL\s+)?SELECT\b", _FLAGS)
_FROM_START_RE = re.compile(r"\bFROM\s*$", _FLAGS)
_FROM_TABLE_RE = re.compile(r"\bFROM\s+[\w\"']+$", _FLAGS)
_AFTER_FROM_RE = re.compile(r"\bSELECT\s+.*\s+FROM\s+[\w\"']+\s+$", _FLAGS)
_SELECT_STAR_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?\*\s*$", _FLAGS)
_SELECT_COLUMNS_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?[\w\"'(),\s]+\s+$", _FLAGS)
_BARE_SELECT_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?$", _FLAGS)
_SELECT_KEYWORD_RE = re.compile(r"\bSELECT\s*(?:DISTINCT\s*)?$", _FLAGS)
_SELECT_LIST_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?[\w\"'(),\s]*$", _FLAGS)
_TRAILING_COMMA_RE = re.compile(r",\s*$")
_LAST_SELECT_RE = re.compile(r"\bSELECT\b", _FLAGS)
_CASE_RE = re.compile(r"\bCASE\b", _FLAGS)
_END_RE = re.compile(r"\bEND\b", _FLAGS)
_FROM_WORD_RE = re.compile(r"\bFROM\b", _FLAGS)

_AFTER_JOIN_CLOSERS = re.compile(r"\b(?:WHERE|GROUP\s+BY|HAVING|ORDER\s+BY|LIMIT|UNION)\b", _FLAGS)
_AFTER_HAVING_CLOSERS = re.compile(r"\b(?:ORDER\s+BY|LIMIT|UNION)\b", _FLAGS)
_AFTER_GROUP_CLOSERS = re.compile(r"\b(?:HAVING|ORDER\s+BY|LIMIT|UNION)\b", _FLAGS)
_AFTER_LIMIT_CLOSERS = re.compile(r"\bUNION\b", _FLAGS)
_AFTER_ORDER_CLOSERS = re.compile(r"\b(?:LIMIT|UNION)\b", _FLAGS)
_AFTER_WHERE_CLOSERS = re.compile(r"\b(?:GROUP\s+BY|HAVING|ORDER\s+BY|LIMIT|UNION)\b", _FLAGS)

_HAVING_RE = re.compile(r"\bHAVING\b", _FLAGS)
_LIMIT_RE = re.compile(r"\bLIMIT\b", _FLAGS)
_ORDER_BY_RE = re.compile(r"\bORDER\s+BY\b", _FLAGS)
_WHERE_RE = re.compile(r"\bWHERE\b", _FLAGS)

MIN_CLASSIFY_LENGTH = 3

Predicate = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class ContextRule:
    """A named predicate; the first rule that matches decides the tag."""

    name: str
    tag: ContextTag
    test: Predicate


def _has_from(text: str) -> bool:
    return bool(_FROM_RE.search(text))


def _open_after(keyword: re.Pattern[str], closers: re.Pattern[str], text: str, *, first: bool = True) -> bool:
    """True when ``keyword`` occurs and no closing keyword follows it."""

    matches = list(keyword.finditer(text))
    if not matches:
        return False
    anchor = matches[0] if first else matches[-1]
    return not closers.search(text[anchor.end():])


def _is_cte_open(text: str) -> bool:
    return bool(_CTE_OPEN_RE.search(text))


def _is_union_open(text: str) -> bool:
    return bool(_UNION_OPEN_RE.search(text))


def _is_from_start(text: str) -> bool:
    return bool(_FROM_START_RE.search(text))


def _is_from_table(text: str) -> bool:
    return bool(_FROM_TABLE_RE.search(text))


def _is_after_from(text: str) -> bool:
    return bool(_AFTER_FROM_RE.search(text))


def _is_case_open(text: str) -> bool:
    selects = list(_LAST_SELECT_RE.finditer(text))
    if not selects:
        return False
    tail = text[selects[-1].end():]
    cases = list(_CASE_RE.finditer(tail))
    if not cases:
        return False
    after_case = tail[cases[-1].end():]
    return not _END_RE.search(after_case) and not _FROM_WORD_RE.search(after_case)


def _is_select_star_without_from(text: str) -> bool:
    return bool(_SELECT_STAR_RE.search(text)) and not _has_from(text)


def _is_column_list_without_from(text: str) -> bool:
    return (
        bool(_SELECT_COLUMNS_RE.search(text))
        and not _has_from(text)
        and not _BARE_SELECT_RE.search(text)
        and not _TRAILING_COMMA_RE.search(text)
    )


def _is_in_select(text: str) -> bool:
    if _SELECT_KEYWORD_RE.search(text):
        return True
    return bool(_SELECT_LIST_RE.search(text)) and not _has_from(text)


def _is_join_open(text: str) -> bool:
    if not _has_from(text) or not _JOIN_RE.search(text):
        return False
    return _open_after(_JOIN_RE, _AFTER_JOIN_CLOSERS, text, first=False)


def _is_having_open(text: str) -> bool:
    return bool(_GROUP_BY_RE.search(text)) and _open_after(_HAVING_RE, _AFTER_HAVING_CLOSERS, text)


def _is_group_by_open(text: str) -> bool:
    return _has_from(text) and _open_after(_GROUP_BY_RE, _AFTER_GROUP_CLOSERS, text)


def _is_limit_open(text: str) -> bool:
    return _open_after(_LIMIT_RE, _AFTER_LIMIT_CLOSERS, text)


def _is_order_by_open(text: str) -> bool:
    return _has_from(text) and _open_after(_ORDER_BY_RE, _AFTER_ORDER_CLOSERS, text)


def _is_where_open(text: str) -> bool:
    return _has_from(text) and _open_after(_WHERE_RE, _AFTER_WHERE_CLOSERS, text)


# Evaluated top to bottom; order is part of the behavior.
CONTEXT_RULES: Tuple[ContextRule, ...] = (
    ContextRule("with", ContextTag.WITH, _is_cte_open),
    ContextRule("union", ContextTag.UNION, _is_union_open),
    ContextRule("from_clause_start", ContextTag.FROM, _is_from_start),
    ContextRule("from_with_table", ContextTag.FROM, _is_from_table),
    ContextRule("after_from", ContextTag.AFTER_FROM, _is_after_from),
    ContextRule("case_open", ContextTag.CASE, _is_case_open),
    ContextRule("select_star_no_from", ContextTag.NEED_FROM, _is_select_star_without_from),
    ContextRule("select_columns_no_from", ContextTag.NEED_FROM, _is_column_list_without_from),
    ContextRule("in_select", ContextTag.SELECT, _is_in_select),
    ContextRule("join_clause", ContextTag.JOIN, _is_join_open),
    ContextRule("having_clause", ContextTag.HAVING, _is_having_open),
    ContextRule("group_by_clause", ContextTag.GROUP_BY, _is_group_by_open),
    ContextRule("limit_clause", ContextTag.LIMIT, _is_limit_open),
    ContextRule("order_by_clause", ContextTag.ORDER_BY, _is_order_by_open),
    ContextRule("where_clause", ContextTag.WHERE, _is_where_open),
)


def classify(text: str) -> ContextTag:
    """Return the context tag for the text before the cursor."""

    return matching_rule(text).tag


def matching_rule(text: str) -> ContextRule:
    """Return the first rule that accepts ``text`` (or the keyword fallback)."""

    if len(text) >= MIN_CLASSIFY_LENGTH:
        for rule in CONTEXT_RULES:
            if rule.test(text):
                return rule
    return _FALLBACK_RULE


_FALLBACK_RULE = ContextRule("keyword", ContextTag.KEYWORD, lambda _text: True)


__all__ = ["CONTEXT_RULES", "ContextRule", "MIN_CLASSIFY_LENGTH", "classify", "matching_rule"]
