"""WHERE clause suggestions: column, operator, value, connector."""

from __future__ import annotations

import re
from typing import Sequence

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, ContextTag, IdentifierOption, Suggestion
from .base import (
    FLAGS,
    IDENT,
    VALUE,
    active_table,
    clause_tail,
    column,
    in_nested_select,
    keyword,
    mask_literals,
    operator,
    respond,
    split_conditions,
    split_top_level,
    value,
)

WHERE_OPERATORS: tuple[tuple[str, str], ...] = (
    ("=", "Equal to"),
    (">", "Greater than"),
    ("<", "Less than"),
    (">=", "Greater than or equal to"),
    ("<=", "Less than or equal to"),
    ("<>", "Not equal to"),
    ("LIKE", "Pattern matching"),
    ("IN", "Match any value in a list"),
    ("BETWEEN", "Range check"),
    ("IS NULL", "Check for null"),
    ("IS NOT NULL", "Check for non-null"),
)

_COMPARISON = r"(?:=|<>|!=|>=|<=|>|<|NOT\s+LIKE|LIKE)"

_WHERE_RE = re.compile(r"\bWHERE\b", FLAGS)
_CLOSED_RE = re.compile(r"\b(?:GROUP\s+BY|HAVING|ORDER\s+BY|LIMIT|UNION)\b", FLAGS)
_READY_FOR_WHERE_RE = re.compile(
    rf"(?:\bFROM\s+{IDENT}|\bJOIN\s+{IDENT}\s+ON\s+{IDENT}\s*=\s*{IDENT}|\bCROSS\s+JOIN\s+{IDENT})\s+$",
    FLAGS,
)

_COLUMN_RE = re.compile(rf"^\s*({IDENT})\s+$", FLAGS)
_IS_RE = re.compile(rf"^\s*({IDENT})\s+IS\s+$", FLAGS)
_COMPARE_RE = re.compile(rf"^\s*({IDENT})\s*({_COMPARISON})\s*$", FLAGS)
_BETWEEN_RE = re.compile(rf"^\s*({IDENT})\s+BETWEEN\s*$", FLAGS)
_BETWEEN_FIRST_RE = re.compile(rf"^\s*({IDENT})\s+BETWEEN\s+{VALUE}\s+$", FLAGS)
_BETWEEN_AND_RE = re.compile(rf"^\s*({IDENT})\s+BETWEEN\s+{VALUE}\s+AND\s*$", FLAGS)
_IN_OPEN_RE = re.compile(rf"^\s*({IDENT})\s+(?:NOT\s+)?IN\s*\(([^)]*)$", FLAGS)

_COMPLETE_RES = (
    re.compile(rf"^\s*{IDENT}\s*{_COMPARISON}\s*{VALUE}\s+$", FLAGS),
    re.compile(rf"^\s*{IDENT}\s+IS\s+(?:NOT\s+)?NULL\s+$", FLAGS),
    re.compile(rf"^\s*{IDENT}\s+BETWEEN\s+{VALUE}\s+AND\s+{VALUE}\s+$", FLAGS),
    re.compile(rf"^\s*{IDENT}\s+(?:NOT\s+)?IN\s*\([^)]*\)\s*$", FLAGS),
)

_FALLBACK_VALUES = (("value", "Text value"), ("0", "Numeric value"))
_LIKE_PATTERNS = ("%value%", "value%", "%value")


def suggest_where_clause(request: CompletionRequest) -> CompletionResult | None:
    """Build a WHERE clause one condition at a time."""

    if in_nested_select(request):
        return None
    table = active_table(request)
    if table is None:
        return None
    text = request.text

    body = clause_tail(text, _WHERE_RE)
    if body is None:
        if _READY_FOR_WHERE_RE.search(text):
            return respond(request, [keyword("WHERE", "Filter rows")])
        return None
    if _CLOSED_RE.search(mask_literals(body)):
        return None

    conditions, connectors = split_conditions(body)
    index = len(conditions) - 1
    current = conditions[-1]
    return _suggest_for_condition(request, table, current, index, connectors)


def where_complete(text: str) -> bool:
    """True when the statement ends on a finished WHERE condition."""

    body = clause_tail(text, _WHERE_RE)
    if body is None or _CLOSED_RE.search(mask_literals(body)):
        return False
    current = split_conditions(body)[0][-1]
    return any(pattern.search(current) for pattern in _COMPLETE_RES)


def _suggest_for_condition(
    request: CompletionRequest,
    table: str,
    current: str,
    index: int,
    connectors: Sequence[str],
) -> CompletionResult | None:
    metadata = request.metadata
    if not current.strip():
        return respond(
            request,
            (
                column(name, table, sync=sync("on_where_column_select", IdentifierOption.of(name), index))
                for name in metadata.columns_for(table)
            ),
        )

    if any(pattern.search(current) for pattern in _COMPLETE_RES):
        return _after_condition(request, connectors)

    between_and = _BETWEEN_AND_RE.search(current)
    if between_and:
        return _values(request, table, between_and.group(1), index, is_value2=True)

    between_first = _BETWEEN_FIRST_RE.search(current)
    if between_first:
        return respond(request, [keyword("AND", "Upper bound of the range")])

    between = _BETWEEN_RE.search(current)
    if between:
        return _values(request, table, between.group(1), index)

    in_list = _IN_OPEN_RE.search(current)
    if in_list:
        return _in_values(request, table, in_list.group(1), in_list.group(2), index)

    compare = _COMPARE_RE.search(current)
    if compare:
        like = "LIKE" in compare.group(2).upper()
        return _values(request, table, compare.group(1), index, like=like)

    is_null = _IS_RE.search(current)
    if is_null:
        if metadata.resolve_column(table, is_null.group(1)) is None:
            return None
        return respond(
            request,
            [
                operator("NULL", "Check for null", sync=sync("on_operator_select", IdentifierOption.of("IS NULL"), index)),
                operator(
                    "NOT NULL",
                    "Check for non-null",
                    sync=sync("on_operator_select", IdentifierOption.of("IS NOT NULL"), index),
                ),
            ],
        )

    picked = _COLUMN_RE.search(current)
    if picked:
        if metadata.resolve_column(table, picked.group(1)) is None:
            return None
        return respond(
            request,
            (
                operator(
                    label,
                    detail,
                    apply="IN (" if label == "IN" else None,
                    sync=sync("on_operator_select", IdentifierOption.of(label), index),
                )
                for label, detail in WHERE_OPERATORS
            ),
        )
    return None


def _values(
    request: CompletionRequest,
    table: str,
    column_ref: str,
    index: int,
    *,
    is_value2: bool = False,
    like: bool = False,
) -> CompletionResult | None:
    metadata = request.metadata
    if metadata.resolve_column(table, column_ref) is None:
        return None
    if like:
        choices = [IdentifierOption.of(pattern) for pattern in _LIKE_PATTERNS]
        details = ["Pattern"] * len(choices)
    else:
        cached = metadata.values_for(table, column_ref)
        if cached:
            choices = list(cached)
            details = ["cached value"] * len(choices)
        else:
            choices = [IdentifierOption.of(label) for label, _ in _FALLBACK_VALUES]
            details = [detail for _, detail in _FALLBACK_VALUES]
    return respond(
        request,
        (
            value(choice, detail=detail, sync=sync("on_value_select", choice, index, is_value2))
            for choice, detail in zip(choices, details)
        ),
    )


def _in_values(
    request: CompletionRequest, table: str, column_ref: str, listed: str, index: int
) -> CompletionResult | None:
    metadata = request.metadata
    if metadata.resolve_column(table, column_ref) is None:
        return None
    items = [item.strip() for item in split_top_level(listed)]
    if items and items[-1]:
        return respond(
            request,
            [
                keyword(",", "Add another value", apply=", "),
                keyword(")", "Close the value list", apply=") "),
            ],
        )
    present = {item.strip("'") for item in items if item}
    cached = metadata.values_for(table, column_ref)
    choices = [option for option in cached if option.value not in present]
    if not cached:
        choices = [IdentifierOption.of(label) for label, _ in _FALLBACK_VALUES]
    return respond(
        request,
        (value(choice, sync=sync("on_value_select", choice, index, False)) for choice in choices),
    )


def _after_condition(request: CompletionRequest, connectors: Sequence[str]) -> CompletionResult | None:
    logical = [connectors[0]] if connectors else ["AND", "OR"]
    options: list[Suggestion] = [
        keyword(
            name,
            "Combine conditions",
            sync=sync("on_logical_operator_select", IdentifierOption.of(name)),
        )
        for name in logical
    ]
    options.extend(request.keywords.suggestions_for(ContextTag.WHERE))
    return respond(request, options)


__all__ = ["WHERE_OPERATORS", "suggest_where_clause", "where_complete"]
