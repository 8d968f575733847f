"""GROUP BY suggestions."""

from __future__ import annotations

import re

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, IdentifierOption, Suggestion, SuggestionType
from ..quoting import strip_quotes
from .base import (
    FLAGS,
    IDENT,
    active_table,
    clause_tail,
    column,
    in_nested_select,
    keyword,
    mask_literals,
    normalize,
    position_items,
    respond,
    split_top_level,
    valid_reference,
)
from .where import where_complete

_GROUP_BY_RE = re.compile(r"\bGROUP\s+BY\b", FLAGS)
_CLOSED_RE = re.compile(r"\b(?:HAVING|ORDER\s+BY|LIMIT|UNION)\b", FLAGS)
_AFTER_TABLE_RE = re.compile(rf"\bFROM\s+{IDENT}\s+$", FLAGS)
_ITEM_RE = re.compile(rf"^\s*({IDENT})\s+$", FLAGS)


def suggest_group_by_clause(request: CompletionRequest) -> CompletionResult | None:
    if in_nested_select(request):
        return None
    table = active_table(request)
    if table is None:
        return None
    text = request.text

    body = clause_tail(text, _GROUP_BY_RE)
    if body is None:
        if _AFTER_TABLE_RE.search(text) or where_complete(text):
            return respond(request, [keyword("GROUP BY", "Group rows")])
        return None
    if _CLOSED_RE.search(mask_literals(body)):
        return None

    items = split_top_level(body)
    current = items[-1]
    listed = [strip_quotes(item.strip()) for item in items[:-1] if item.strip()]

    if not current.strip():
        return _group_keys(request, table, listed)

    picked = _ITEM_RE.search(current)
    if picked and valid_reference(request, table, picked.group(1)):
        return respond(
            request,
            [
                keyword(",", "Group by another column", apply=", "),
                keyword("HAVING", "Filter groups"),
                keyword("ORDER BY", "Sort the result"),
                keyword(";", "End the statement", apply=";"),
            ],
        )
    return None


def _group_keys(request: CompletionRequest, table: str, listed: list[str]) -> CompletionResult | None:
    seen = {normalize(name) for name in listed}
    chosen = tuple(IdentifierOption.of(name) for name in listed)
    options: list[Suggestion] = []
    for name in request.metadata.columns_for(table):
        if normalize(name) in seen:
            continue
        option = IdentifierOption.of(name)
        options.append(column(name, table, sync=sync("on_group_by_column_select", chosen + (option,))))
    for position, expression in enumerate(position_items(request, table), start=1):
        label = str(position)
        if label in seen:
            continue
        option = IdentifierOption.of(label)
        options.append(
            Suggestion(
                label=label,
                type=SuggestionType.VALUE,
                apply=f"{label} ",
                detail=f"position of {expression}",
                option=option,
                sync=sync("on_group_by_column_select", chosen + (option,)),
            )
        )
    return respond(request, options)


__all__ = ["suggest_group_by_clause"]
