"""``AS`` / ``FROM`` suggestions once a select-list item is finished."""

from __future__ import annotations

import re

from sqlglot import exp

from ..callbacks import sync
from ..models import CompletionRequest, CompletionResult, ContextTag, Suggestion, first_select
from ..parser import has_from
from ..quoting import strip_quotes
from .base import FLAGS, IDENT, in_nested_select, keyword, paren_balance, respond, select_items, select_tail

_SELECT_STAR_RE = re.compile(r"\bSELECT\s+(?:DISTINCT\s+)?\*\s*$", FLAGS)
_FROM_RE = re.compile(r"\bFROM\b", FLAGS)
_ALIASED_RE = re.compile(rf"\s(?:AS\s+)?{IDENT}\s*$", FLAGS)
_EXPLICIT_ALIAS_RE = re.compile(rf"\bAS\s+{IDENT}\s*$", FLAGS)
_DANGLING_AS_RE = re.compile(r"\bAS\s*$", FLAGS)
_CASE_END_RE = re.compile(r"\bCASE\b.*\bEND\s*$", FLAGS)
_CASE_ALIAS_RE = re.compile(rf"\bCASE\b.*\bEND\s+AS\s+({IDENT})\s*$", FLAGS)
_TRAILING_COMMA_RE = re.compile(r",\s*$")
_DISTINCT_ONLY_RE = re.compile(r"^\s*(?:DISTINCT\s*)?$", FLAGS)


def suggest_as_or_from_keyword(request: CompletionRequest) -> CompletionResult | None:
    """Offer ``AS`` and/or ``FROM`` after a complete select-list item."""

    if in_nested_select(request) or request.context is ContextTag.CASE:
        return None
    text = request.text
    if _SELECT_STAR_RE.search(text):
        return respond(request, [_from()])

    tail = select_tail(text)
    if tail is None or _FROM_RE.search(tail):
        return None
    if _DISTINCT_ONLY_RE.match(tail) or _TRAILING_COMMA_RE.search(tail) or _DANGLING_AS_RE.search(tail):
        return None
    if paren_balance(tail) > 0:
        return None

    alias = _case_alias(text)
    decision = _decide_from_ast(request, alias)
    if decision is None:
        decision = _decide_from_text(text, alias)
    if decision is None:
        return None
    return respond(request, decision)


def _decide_from_ast(request: CompletionRequest, alias: str | None) -> list[Suggestion] | None:
    select = first_select(request.parser.parse(request.text))
    if select is None or has_from(select) or not select.expressions:
        return None
    last = select.expressions[-1]
    if isinstance(last, exp.Star) or isinstance(last, exp.Alias):
        return [_from(alias)]
    return [_as(), _from()]


def _decide_from_text(text: str, alias: str | None) -> list[Suggestion] | None:
    items = select_items(text)
    if not items:
        return None
    last = items[-1]
    if last == "*" or _EXPLICIT_ALIAS_RE.search(last):
        return [_from(alias)]
    if _CASE_END_RE.search(last):
        return [_as(), _from()]
    if "(" not in last and _ALIASED_RE.search(last) and " " in last.strip():
        return [_from()]
    return [_as(), _from()]


def _as() -> Suggestion:
    return keyword("AS", "Alias the column", apply='AS "" ')


def _case_alias(text: str) -> str | None:
    """Alias given to a trailing ``CASE ... END AS name`` select item."""

    items = select_items(text)
    if not items:
        return None
    named = _CASE_ALIAS_RE.search(items[-1])
    if named is None:
        return None
    return strip_quotes(named.group(1)) or None


def _from(case_alias: str | None = None) -> Suggestion:
    if case_alias is None:
        return keyword("FROM", "Choose a table")
    return keyword("FROM", "Choose a table", sync=sync("on_case_alias_change", case_alias))


__all__ = ["suggest_as_or_from_keyword"]
