"""HAVING suggestions built around aggregate conditions."""

from __future__ import annotations

import re
from typing import Sequence

from ..callbacks import sync
from ..functions import AGGREGATES, ROUND_PRECISIONS, FunctionCatalog
from ..models import (
    CompletionRequest,
    CompletionResult,
    ContextTag,
    IdentifierOption,
    Suggestion,
    SuggestionType,
    SyncAction,
)
from ..quoting import quote_identifier, strip_quotes
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
    value,
    with_sync,
)

HAVING_OPERATORS: tuple[tuple[str, str], ...] = (
    ("=", "Equal to"),
    (">", "Greater than"),
    ("<", "Less than"),
    (">=", "Greater than or equal to"),
    ("<=", "Less than or equal to"),
    ("<>", "Not equal to"),
)

_FUNCTIONS = FunctionCatalog.default()
_AGGREGATE = rf"({'|'.join(AGGREGATES)})\s*\(([^()]*)\)"

_GROUP_BY_RE = re.compile(r"\bGROUP\s+BY\b", FLAGS)
_HAVING_RE = re.compile(r"\bHAVING\b", FLAGS)
_CLOSED_RE = re.compile(r"\b(?:ORDER\s+BY|LIMIT|UNION)\b", FLAGS)
_GROUP_DONE_RE = re.compile(rf"{IDENT}\s+$", FLAGS)

_OPEN_ARG_RE = re.compile(rf"^\s*({'|'.join(AGGREGATES)})\s*\(\s*$", FLAGS)
_ROUND_PRECISION_RE = re.compile(rf"^\s*ROUND\s*\(\s*{IDENT}\s*,\s*$", FLAGS)
_CLOSED_AGG_RE = re.compile(rf"^\s*{_AGGREGATE}\s+$", FLAGS)
_COMPARE_RE = re.compile(r"^\s*" + _AGGREGATE + r"\s*(=|<>|>=|<=|>|<)\s*$", FLAGS)
_COMPLETE_RE = re.compile(r"^\s*" + _AGGREGATE + rf"\s*(?:=|<>|>=|<=|>|<)\s*{VALUE}\s+$", FLAGS)

_NUMERIC_PLACEHOLDERS = ("0", "1", "10", "100")


def suggest_having_clause(request: CompletionRequest) -> CompletionResult | None:
    """Suggest HAVING and walk through ``AGG(col) op value`` conditions."""

    if in_nested_select(request):
        return None
    text = request.text
    group_body = clause_tail(text, _GROUP_BY_RE)
    if group_body is None:
        return None
    table = active_table(request)

    body = clause_tail(text, _HAVING_RE)
    if body is None:
        if _CLOSED_RE.search(mask_literals(group_body)) or not _GROUP_DONE_RE.search(group_body):
            return None
        return respond(request, [keyword("HAVING", "Filter aggregates")])
    if _CLOSED_RE.search(mask_literals(body)):
        return None

    conditions, connectors = split_conditions(body)
    index = len(conditions) - 1
    current = conditions[-1]

    if not current.strip():
        return respond(request, _aggregate_templates(index))

    if _COMPLETE_RE.search(current):
        return _after_condition(request, connectors)

    precision = _ROUND_PRECISION_RE.search(current)
    if precision:
        return respond(
            request,
            (
                Suggestion(
                    label=str(digits),
                    type=SuggestionType.VALUE,
                    apply=f"{digits}) ",
                    detail=f"Round to {digits} decimal places",
                )
                for digits in ROUND_PRECISIONS
            ),
        )

    opened = _OPEN_ARG_RE.search(current)
    if opened:
        return _aggregate_arguments(request, table, opened.group(1).upper(), index)

    closed = _CLOSED_AGG_RE.search(current)
    if closed:
        return respond(
            request,
            (
                operator(label, detail, sync=sync("on_having_operator_select", IdentifierOption.of(label), index))
                for label, detail in HAVING_OPERATORS
            ),
        )

    compare = _COMPARE_RE.search(current)
    if compare:
        return _having_values(request, table, compare.group(1).upper(), compare.group(2), index)
    return None


def _aggregate_templates(index: int) -> list[Suggestion]:
    def build(entry: Suggestion) -> SyncAction | None:
        if entry.label == "COUNT(*)":
            option = IdentifierOption(value="COUNT(*)", label="COUNT(*)", column="*", aggregate=True)
            return sync("on_aggregate_column_select", option, index)
        return None

    return with_sync(_FUNCTIONS.suggestions(), build)


def _aggregate_arguments(
    request: CompletionRequest, table: str | None, function: str, index: int
) -> CompletionResult | None:
    candidates = request.metadata.columns_for(table) if table else request.metadata.all_columns
    suffix = ", " if function == "ROUND" else ") "
    options = []
    for name in candidates:
        option = IdentifierOption(value=f"{function}({name})", label=name, column=name, aggregate=True)
        options.append(
            column(
                name,
                table,
                apply=f"{quote_identifier(name)}{suffix}",
                option=option,
                sync=sync("on_aggregate_column_select", option, index),
            )
        )
    return respond(request, options)


def _having_values(
    request: CompletionRequest, table: str | None, function: str, argument: str, index: int
) -> CompletionResult | None:
    choices: Sequence[IdentifierOption] = ()
    if function in ("MIN", "MAX") and table:
        reference = strip_quotes(argument.strip())
        if request.metadata.resolve_column(table, reference):
            choices = request.metadata.values_for(table, reference)
    detail = "cached value"
    if not choices:
        choices = [IdentifierOption.of(label) for label in _NUMERIC_PLACEHOLDERS]
        detail = "Numeric value"
    return respond(
        request,
        (value(choice, detail=detail, sync=sync("on_having_value_select", choice, index)) for choice in choices),
    )


def _after_condition(request: CompletionRequest, connectors: Sequence[str]) -> CompletionResult | None:
    logical = [connectors[0]] if connectors else ["AND", "OR"]
    options: list[Suggestion] = [keyword(name, "Combine conditions") for name in logical]
    options.extend(request.keywords.suggestions_for(ContextTag.HAVING))
    return respond(request, options)


__all__ = ["HAVING_OPERATORS", "suggest_having_clause"]
