"""Table suggestions right after ``FROM``."""

from __future__ import annotations

import re

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, IdentifierOption, Suggestion, SuggestionType
from ..quoting import quote_identifier
from .base import FLAGS, in_nested_select, respond, select_items, select_tail, selected_columns

_FROM_END_RE = re.compile(r"\bFROM\s*$", FLAGS)
_FROM_RE = re.compile(r"\bFROM\b", FLAGS)


def suggest_tables_after_from(request: CompletionRequest) -> CompletionResult | None:
    """List tables able to serve the select list typed so far."""

    if in_nested_select(request):
        return None
    tail = select_tail(request.text)
    if tail is None or not _FROM_END_RE.search(tail) or len(_FROM_RE.findall(tail)) != 1:
        return None
    metadata = request.metadata
    if not metadata.tables:
        return None

    items = select_items(request.text)
    columns = selected_columns(request.text)
    if "*" in items or not columns:
        tables = metadata.tables
    else:
        tables = metadata.tables_with_columns(columns) or metadata.tables

    return respond(request, (_table(name) for name in tables), valid_for=r"^[\w\"']*$")


def _table(name: str) -> Suggestion:
    option = IdentifierOption.of(name)
    return Suggestion(
        label=name,
        type=SuggestionType.TABLE,
        apply=f"{quote_identifier(name)} ",
        detail="table",
        option=option,
        sync=sync("on_table_select", option),
    )


__all__ = ["suggest_tables_after_from"]
