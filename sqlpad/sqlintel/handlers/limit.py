"""LIMIT suggestions."""

from __future__ import annotations

import re

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, IdentifierOption
from .base import (
    FLAGS,
    IDENT,
    active_table,
    in_nested_select,
    keyword,
    mask_literals,
    respond,
    valid_reference,
    value,
)
from .where import where_complete

_LIMIT_OPEN_RE = re.compile(r"\bLIMIT\s*$", FLAGS)
_LIMIT_DONE_RE = re.compile(r"\bLIMIT\s+\d+\s+$", FLAGS)
_LIMIT_RE = re.compile(r"\b(?:LIMIT|UNION)\b", FLAGS)
_AFTER_TABLE_RE = re.compile(rf"\bFROM\s+{IDENT}\s+$", FLAGS)
_AFTER_ORDER_RE = re.compile(rf"\bORDER\s+BY\s+({IDENT})(?:\s+(?:ASC|DESC))?\s+$", FLAGS)


def suggest_limit_clause(request: CompletionRequest) -> CompletionResult | None:
    if in_nested_select(request):
        return None
    text = request.text

    if _LIMIT_OPEN_RE.search(text):
        return respond(
            request,
            (
                value(option, detail="Row limit", sync=sync("on_limit_select", option))
                for option in (IdentifierOption.of(str(count)) for count in request.limit_values)
            ),
            valid_for=r"^\d*$",
        )
    if _LIMIT_DONE_RE.search(text):
        return respond(request, [keyword(";", "End the statement", apply=";")])

    table = active_table(request)
    if _LIMIT_RE.search(mask_literals(text)) or table is None:
        return None
    ordered = _AFTER_ORDER_RE.search(text)
    if ordered and not valid_reference(request, table, ordered.group(1)):
        return None
    if _AFTER_TABLE_RE.search(text) or where_complete(text) or ordered:
        return respond(request, [keyword("LIMIT", "Limit the number of rows")])
    return None


__all__ = ["suggest_limit_clause"]
