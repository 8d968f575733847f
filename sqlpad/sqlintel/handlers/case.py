"""Step-by-step guidance through a ``CASE WHEN ... END`` expression."""

from __future__ import annotations

import re

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
    selected_columns,
    value,
    with_sync,
)

_CASE_RE = re.compile(r"\bCASE\b", FLAGS)
_WHEN_WORD_RE = re.compile(r"\bWHEN\b", FLAGS)
_CASE_OPERATORS = r"(?:=|!=|<>|>=|<=|>|<|LIKE)"

_BODY_START_RE = re.compile(r"^\s*$")
_WHEN_RE = re.compile(r"\bWHEN\s*$", FLAGS)
_WHEN_COLUMN_RE = re.compile(rf"\bWHEN\s+({IDENT})\s+$", FLAGS)
_WHEN_OPERATOR_RE = re.compile(rf"\bWHEN\s+({IDENT})\s*({_CASE_OPERATORS})\s*$", FLAGS)
_WHEN_VALUE_RE = re.compile(rf"\bWHEN\s+{IDENT}\s*{_CASE_OPERATORS}\s*{VALUE}\s+$", FLAGS)
_THEN_RE = re.compile(r"\bTHEN\s*$", FLAGS)
_THEN_VALUE_RE = re.compile(rf"\bTHEN\s+{VALUE}\s+$", FLAGS)
_ELSE_RE = re.compile(r"\bELSE\s*$", FLAGS)
_ELSE_VALUE_RE = re.compile(rf"\bELSE\s+{VALUE}\s+$", FLAGS)

_OPERATORS = (
    ("=", "Equal to"),
    ("!=", "Not equal to"),
    (">", "Greater than"),
    ("<", "Less than"),
    (">=", "Greater than or equal to"),
    ("<=", "Less than or equal to"),
    ("LIKE", "Pattern matching"),
)

_LIKE_PATTERNS = ("%value%", "value%", "%value")


def suggest_case_clause(request: CompletionRequest) -> CompletionResult | None:
    """Walk the user through WHEN, comparison, THEN, ELSE and END."""

    if in_nested_select(request) or request.context is not ContextTag.CASE:
        return None
    text = request.text
    body = clause_tail(text, _CASE_RE)
    if body is None:
        return None

    if _BODY_START_RE.match(body) or _THEN_VALUE_RE.search(body):
        options = [keyword("WHEN", "Add a condition")]
        if _THEN_VALUE_RE.search(body):
            options.append(keyword("ELSE", "Fallback result"))
            options.append(keyword("END", "Close the CASE expression"))
        return respond(request, options)

    if _ELSE_VALUE_RE.search(body):
        return respond(request, [keyword("END", "Close the CASE expression")])

    index = max(len(_WHEN_WORD_RE.findall(mask_literals(body))) - 1, 0)

    if _ELSE_RE.search(body):
        return respond(
            request, with_sync(_placeholder_values(), lambda entry: sync("on_else_result_select", entry.option))
        )
    if _THEN_RE.search(body):
        return respond(
            request,
            with_sync(_placeholder_values(), lambda entry: sync("on_case_result_select", entry.option, index)),
        )

    if _WHEN_VALUE_RE.search(body):
        return respond(request, [keyword("THEN", "Result when the condition holds")])

    compared = _WHEN_OPERATOR_RE.search(body)
    if compared:
        return respond(
            request,
            with_sync(
                _comparison_values(request, compared.group(1), compared.group(2)),
                lambda entry: sync("on_case_value_select", entry.option, index),
            ),
        )

    tables, columns = _case_columns(request)
    picked = _WHEN_COLUMN_RE.search(body)
    if picked:
        wanted = picked.group(1).split(".")[-1].strip('"').lower()
        if not any(name.lower() == wanted for name in columns):
            return None
        return respond(
            request,
            (
                operator(label, detail, sync=sync("on_case_operator_select", IdentifierOption.of(label), index))
                for label, detail in _OPERATORS
            ),
        )

    if _WHEN_RE.search(body):
        table = tables[0] if len(tables) == 1 else None
        return respond(
            request,
            (
                column(name, table, sync=sync("on_case_column_select", IdentifierOption.of(name), index))
                for name in columns
            ),
        )
    return None


def _case_columns(request: CompletionRequest) -> tuple[tuple[str, ...], tuple[str, ...]]:
    metadata = request.metadata
    table = active_table(request)
    if table:
        return (table,), metadata.columns_for(table)
    chosen = selected_columns(request.text)
    owners = metadata.tables_with_columns(chosen) if chosen else ()
    if owners:
        merged: dict[str, None] = {}
        for owner in owners:
            merged.update(dict.fromkeys(metadata.columns_for(owner)))
        return owners, tuple(merged)
    return (), metadata.all_columns


def _comparison_values(request: CompletionRequest, column_ref: str, comparison: str) -> list[Suggestion]:
    if comparison.upper() == "LIKE":
        return [value(IdentifierOption.of(pattern), detail="Pattern") for pattern in _LIKE_PATTERNS]
    tables, _ = _case_columns(request)
    if len(tables) == 1:
        cached = request.metadata.values_for(tables[0], column_ref)
        if cached:
            return [value(option) for option in cached]
    return _placeholder_values()


def _placeholder_values() -> list[Suggestion]:
    return [
        value(IdentifierOption.of("value"), detail="Text value"),
        value(IdentifierOption.of("0"), detail="Numeric value"),
    ]


__all__ = ["suggest_case_clause"]
