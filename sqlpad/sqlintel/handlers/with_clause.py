"""Common table expression suggestions, including the nested subquery."""

from __future__ import annotations

import logging
import re

from sqlglot import exp

from ..callbacks import scope_to_cte, sync
from ..metadata import MetadataIndex
from ..models import CompletionRequest, CompletionResult, ContextTag, first_select
from ..parser import from_table
from ..quoting import strip_quotes
from .base import (
    FLAGS,
    IDENT,
    JOIN_TYPES,
    keyword,
    matching_paren,
    plain_column,
    reenter,
    respond,
    select_items,
)

LOG = logging.getLogger(__name__)

CTE_INDEX = 0
DEFAULT_ALIAS = "previous_query"

_WITH_RE = re.compile(r"\bWITH\s*$", FLAGS)
_WITH_ALIAS_RE = re.compile(r"\bWITH\s+(\"?\w+\"?)\s+$", FLAGS)
_AS_PAREN_RE = re.compile(r"\bWITH\s+[\w\"]*\s+AS\s*\(\s*$", FLAGS)
_CTE_OPEN_RE = re.compile(r"\bWITH\s+(\"?\w+\"?)\s+AS\s*\(", FLAGS)
_ALIAS_WORD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ALIAS_ITEM_RE = re.compile(rf"\bAS\s+({IDENT})\s*$", FLAGS)
_CLOSABLE_RE = re.compile(
    r"^\s*SELECT\s+.+?\s+FROM\s+[A-Za-z_][\w\"]*\s*"
    r"(?:$"
    r"|\b(?:INNER|LEFT|RIGHT|CROSS)\s+JOIN\s+[\w.]+\s*(?:ON\s+[\w.]+\.[\w.]+\s*=\s*[\w.]+\.[\w.]+)?\s*$"
    r"|\bWHERE\s+.*$"
    r"|\bGROUP\s+BY\s+.*$"
    r"|\bHAVING\s+.*$"
    r"|\bORDER\s+BY\s+.*$"
    r"|\bUNION\s*(?:ALL\s*)?$)",
    FLAGS,
)


def suggest_with_clause(request: CompletionRequest) -> CompletionResult | None:
    """Guide ``WITH alias AS (SELECT ...)`` and the query that follows it."""

    text = request.text
    if _WITH_RE.search(text):
        return _suggest_alias(request)

    alias_match = _WITH_ALIAS_RE.search(text)
    if alias_match and alias_match.group(1).upper() != "AS":
        alias = strip_quotes(alias_match.group(1))
        return respond(
            request,
            [keyword("AS (", "Open the CTE subquery", apply="AS ( ", sync=sync("on_cte_alias_change", CTE_INDEX, alias))],
        )

    if _AS_PAREN_RE.search(text):
        return respond(request, [keyword("SELECT", "Start the CTE subquery")])

    if request.context is not ContextTag.WITH:
        return None
    opened = _CTE_OPEN_RE.search(text)
    if opened is None:
        return None
    alias = strip_quotes(opened.group(1))
    close = matching_paren(text, opened.end())
    if close is None:
        return _suggest_in_subquery(request, text[opened.end():])
    return _suggest_main_query(request, alias, text[opened.end():close], text[close + 1:])


def _suggest_alias(request: CompletionRequest) -> CompletionResult | None:
    word = request.word
    typing_alias = bool(_ALIAS_WORD_RE.match(word))
    alias = word if typing_alias else DEFAULT_ALIAS
    return respond(
        request,
        [
            keyword(
                f"{alias} AS (",
                "Name the common table expression",
                apply=f"{alias} AS ( ",
                sync=sync("on_cte_alias_change", CTE_INDEX, alias),
            )
        ],
        filter=False,
    )


def _suggest_in_subquery(request: CompletionRequest, subquery: str) -> CompletionResult | None:
    if not subquery.strip():
        return None
    closable = bool(_CLOSABLE_RE.search(subquery))
    nested = reenter(request, subquery)
    close = keyword(")", "Close CTE subquery", apply=") ")
    if nested is not None:
        scoped = scope_to_cte(nested, CTE_INDEX)
        if closable:
            return scoped.with_options(scoped.options + (close,))
        return scoped
    if not closable:
        return None
    fallback = [close]
    fallback.extend(keyword(join_type, "Join another table") for join_type in JOIN_TYPES)
    fallback.append(keyword("WHERE", "Filter rows"))
    return respond(request, fallback)


def _suggest_main_query(
    request: CompletionRequest, alias: str, body: str, main: str
) -> CompletionResult | None:
    if not main.strip():
        if request.word and not "select".startswith(request.word.lower()):
            return None
        return respond(request, [keyword("SELECT", "Start main query after CTE")])
    columns = cte_columns(request, body)
    metadata: MetadataIndex = request.metadata.with_table(alias, columns)
    LOG.debug("Re-entering chain for main query", extra={"cte_alias": alias, "cte_columns": len(columns)})
    return reenter(request, main, metadata=metadata)


def cte_columns(request: CompletionRequest, body: str) -> tuple[str, ...]:
    """Output columns of a CTE body; ``*`` expands to its FROM table."""

    select = first_select(request.parser.parse(body))
    if select is not None:
        return _columns_from_ast(request, select)

    columns: list[str] = []
    source = None
    from_match = re.search(rf"\bFROM\s+({IDENT})", body, FLAGS)
    if from_match:
        source = from_match.group(1)
    for item in select_items(body):
        if item == "*":
            columns.extend(request.metadata.columns_for(source))
            continue
        alias = _ALIAS_ITEM_RE.search(item)
        if alias:
            columns.append(strip_quotes(alias.group(1)))
            continue
        name = plain_column(item)
        if name:
            columns.append(name)
    return tuple(dict.fromkeys(columns))


def _columns_from_ast(request: CompletionRequest, select: exp.Select) -> tuple[str, ...]:
    source = from_table(select)
    columns: list[str] = []
    for projection in select.expressions:
        if isinstance(projection, exp.Star) or (
            isinstance(projection, exp.Column) and isinstance(projection.this, exp.Star)
        ):
            columns.extend(request.metadata.columns_for(source))
        elif projection.alias_or_name:
            columns.append(projection.alias_or_name)
    return tuple(dict.fromkeys(columns))


__all__ = ["cte_columns", "suggest_with_clause"]
