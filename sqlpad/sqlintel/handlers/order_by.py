"""ORDER BY suggestions: columns, positions and sort direction."""

from __future__ import annotations

import re

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, IdentifierOption, Suggestion, SuggestionType
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

_ORDER_BY_RE = re.compile(r"\bORDER\s+BY\b", FLAGS)
_CLOSED_RE = re.compile(r"\b(?:LIMIT|UNION)\b", FLAGS)
_AFTER_TABLE_RE = re.compile(rf"\bFROM\s+{IDENT}\s+$", FLAGS)
_ITEM_RE = re.compile(rf"^\s*({IDENT})\s+$", FLAGS)
_DIRECTION_RE = re.compile(rf"^\s*({IDENT})\s+(ASC|DESC)\s+$", FLAGS)

DIRECTIONS = (("ASC", "Ascending order"), ("DESC", "Descending order"))


def suggest_order_by_clause(request: CompletionRequest) -> CompletionResult | None:
    """Offer ORDER BY, then columns and directions for each sort key."""

    if in_nested_select(request):
        return None
    table = active_table(request)
    if table is None:
        return None
    text = request.text

    body = clause_tail(text, _ORDER_BY_RE)
    if body is None:
        if _AFTER_TABLE_RE.search(text) or where_complete(text):
            return respond(request, [keyword("ORDER BY", "Sort the result")])
        return None
    if _CLOSED_RE.search(mask_literals(body)):
        return None

    items = split_top_level(body)
    current = items[-1]
    listed = {normalize(item.split()[0]) for item in items[:-1] if item.strip()}

    if not current.strip():
        return _sort_keys(request, table, listed)

    direction = _DIRECTION_RE.search(current)
    if direction:
        return _after_key(request)

    picked = _ITEM_RE.search(current)
    if picked and valid_reference(request, table, picked.group(1)):
        reference = picked.group(1)
        options: list[Suggestion] = [
            keyword(
                name,
                detail,
                sync=sync("on_order_by_direction_select", IdentifierOption.of(reference), name),
            )
            for name, detail in DIRECTIONS
        ]
        options.extend(_after_key(request).options)
        return respond(request, options)
    return None


def _sort_keys(request: CompletionRequest, table: str, listed: set[str]) -> CompletionResult | None:
    options: list[Suggestion] = []
    for name in request.metadata.columns_for(table):
        if normalize(name) in listed:
            continue
        options.append(column(name, table, sync=sync("on_order_by_column_select", IdentifierOption.of(name))))
    for position, expression in enumerate(position_items(request, table), start=1):
        label = str(position)
        if label in listed:
            continue
        option = IdentifierOption.of(label)
        options.append(
            Suggestion(
                label=label,
                type=SuggestionType.VALUE,
                apply=f"{label} ",
                detail=f"position of {expression}",
                option=option,
                sync=sync("on_order_by_column_select", option),
            )
        )
    return respond(request, options)


def _after_key(request: CompletionRequest) -> CompletionResult:
    return CompletionResult(
        start=request.start,
        end=request.end,
        options=(
            keyword(",", "Add another sort key", apply=", "),
            keyword("LIMIT", "Limit the number of rows"),
            keyword(";", "End the statement", apply=";"),
        ),
    )


__all__ = ["DIRECTIONS", "suggest_order_by_clause"]
