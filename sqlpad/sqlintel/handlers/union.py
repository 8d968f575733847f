"""UNION suggestions and re-entry into the chain for each UNION member."""

from __future__ import annotations

import logging
import re

from ..callbacks import scope_to_union, sync
from ..models import CompletionRequest, CompletionResult, ContextTag, IdentifierOption, SyncAction
from .base import FLAGS, IDENT, active_table, clause_tail, keyword, mask_literals, reenter, respond

LOG = logging.getLogger(__name__)

UNION_TYPES = (("UNION", "Combine result sets"), ("UNION ALL", "Combine result sets, keep duplicates"))

_UNION_RE = re.compile(r"\bUNION\b(?:\s+ALL\b)?", FLAGS)
_UNION_END_RE = re.compile(r"\bUNION(?:\s+ALL)?\s*$", FLAGS)
_FROM_RE = re.compile(r"\bFROM\b", FLAGS)
_OTHER_CLAUSE_RE = re.compile(r"\b(?:WHERE|GROUP\s+BY|HAVING|ORDER\s+BY|LIMIT)\b", FLAGS)
_READY_RE = re.compile(
    rf"(?:\bFROM\s+{IDENT}|\bJOIN\s+{IDENT}\s+ON\s+{IDENT}\s*=\s*{IDENT}|\bCROSS\s+JOIN\s+{IDENT})\s+$",
    FLAGS,
)


def union_type_sync(label: str, union_index: int) -> SyncAction:
    return sync("on_union_type_select", IdentifierOption.of(label), union_index)


def suggest_union_clause(request: CompletionRequest) -> CompletionResult | None:
    """Offer UNION after a bare SELECT ... FROM and complete each member."""

    text = request.text
    if _UNION_END_RE.search(text):
        return respond(request, [keyword("SELECT", "Start the next query")])

    masked = mask_literals(text)
    if request.context is ContextTag.UNION:
        members = list(_UNION_RE.finditer(masked))
        if not members:
            return None
        union_index = len(members) - 1
        LOG.debug("Re-entering chain for UNION member", extra={"union_index": union_index})
        nested = reenter(request, text[members[-1].end():])
        if nested is None:
            return None
        return scope_to_union(nested, union_index)

    if request.context is ContextTag.WITH or not _READY_RE.search(text) or active_table(request) is None:
        return None
    tail = clause_tail(text, _FROM_RE)
    if tail is None or _OTHER_CLAUSE_RE.search(mask_literals(tail)):
        return None
    union_index = len(_UNION_RE.findall(masked))
    options = [
        keyword(label, detail, sync=union_type_sync(label, union_index))
        for label, detail in UNION_TYPES
    ]
    options.append(keyword("WHERE", "Filter rows"))
    options.append(keyword(";", "End the statement", apply=";"))
    return respond(request, options)


__all__ = ["UNION_TYPES", "suggest_union_clause", "union_type_sync"]
