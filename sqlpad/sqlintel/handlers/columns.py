"""Column, DISTINCT and aggregate suggestions inside the SELECT list."""

from __future__ import annotations

import re

from ..callbacks import column_options, sync
from ..functions import ROUND_PRECISIONS, FunctionCatalog
from ..models import (
    CompletionRequest,
    CompletionResult,
    ContextTag,
    IdentifierOption,
    Suggestion,
    SuggestionType,
)
from ..quoting import quote_identifier
from .base import (
    FLAGS,
    IDENT,
    active_table,
    column,
    in_nested_select,
    keyword,
    normalize,
    respond,
    select_tail,
    selected_columns,
)

_FUNCTIONS = FunctionCatalog.default()

_ROUND_PRECISION_RE = re.compile(rf"\bROUND\(\s*{IDENT}\s*,\s*$", FLAGS)
_AGGREGATE_ARG_RE = re.compile(r"\b(COUNT|SUM|AVG|MIN|MAX|ROUND)\(\s*$", FLAGS)
_SELECT_STAR_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?\*\s*$", FLAGS)
_AFTER_SELECT_RE = re.compile(r"\bSELECT\s+$", FLAGS)
_AFTER_DISTINCT_RE = re.compile(r"\bSELECT\s+DISTINCT\s+$", FLAGS)
_TRAILING_COMMA_RE = re.compile(r",\s*$")
_FROM_RE = re.compile(r"\bFROM\b", FLAGS)


def suggest_columns_after_select(request: CompletionRequest) -> CompletionResult | None:
    """Suggest select-list entries right after SELECT, DISTINCT or a comma."""

    if in_nested_select(request) or request.context is ContextTag.CASE:
        return None
    text = request.text
    tail = select_tail(text)
    if tail is None or _FROM_RE.search(tail):
        return None

    if _ROUND_PRECISION_RE.search(text):
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

    aggregate = _AGGREGATE_ARG_RE.search(text)
    if aggregate:
        return _aggregate_arguments(request, aggregate.group(1).upper())

    if _SELECT_STAR_RE.search(text):
        return respond(request, [keyword("FROM", "Choose a table")])

    after_select = bool(_AFTER_SELECT_RE.search(text))
    after_distinct = bool(_AFTER_DISTINCT_RE.search(text))
    after_comma = bool(_TRAILING_COMMA_RE.search(text))
    if not (after_select or after_distinct or after_comma):
        return None

    options: list[Suggestion] = []
    if after_select:
        options.append(keyword("DISTINCT", "Deduplicate rows", sync=sync("on_distinct_select", True)))
    if after_select or after_distinct:
        star = IdentifierOption.of("*")
        options.append(
            Suggestion(
                label="*",
                type=SuggestionType.COLUMN,
                apply="* ",
                detail="All columns",
                option=star,
                sync=sync("on_column_select", (star,)),
            )
        )

    options.extend(_FUNCTIONS.suggestions(exclude=("COUNT(",)))
    options.append(keyword("CASE", "Conditional expression"))

    existing = selected_columns(text)
    taken = {normalize(name) for name in existing}
    chosen = column_options(existing)
    table = active_table(request)
    candidates = request.metadata.columns_for(table) if table else request.metadata.all_columns
    for name in candidates:
        if normalize(name) in taken:
            continue
        option = IdentifierOption.of(name)
        options.append(
            column(
                name,
                table,
                option=option,
                sync=sync("on_column_select", chosen + (option,)),
            )
        )

    return respond(request, options)


def _aggregate_arguments(request: CompletionRequest, function: str) -> CompletionResult | None:
    table = active_table(request)
    candidates = request.metadata.columns_for(table) if table else request.metadata.all_columns
    if not candidates:
        return None
    suffix = ", " if function == "ROUND" else ") "
    return respond(
        request,
        (
            column(
                name,
                table,
                apply=f"{quote_identifier(name)}{suffix}",
                option=IdentifierOption(value=f"{function}({name})", label=name, column=name, aggregate=True),
            )
            for name in candidates
        ),
    )


__all__ = ["suggest_columns_after_select"]
