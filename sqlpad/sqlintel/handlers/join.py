"""JOIN suggestions constrained by foreign keys."""

from __future__ import annotations

import re
from typing import Iterable

from ..callbacks import sync
from ..metadata import MetadataIndex
from ..models import (
    CompletionRequest,
    CompletionResult,
    ContextTag,
    IdentifierOption,
    Suggestion,
    SuggestionType,
)
from ..quoting import quote_identifier, strip_quotes
from .base import (
    FLAGS,
    IDENT,
    JOIN_TYPES,
    active_table,
    in_nested_select,
    keyword,
    mask_literals,
    operator,
    referenced_tables,
    respond,
    with_sync,
)
from .union import union_type_sync

_JOIN_WORD_RE = re.compile(r"\bJOIN\b", FLAGS)
_JOIN_TABLE_RE = re.compile(r"\b(?:INNER|LEFT|RIGHT|CROSS)\s+JOIN\s*$", FLAGS)
_NEEDS_ON_RE = re.compile(rf"\b(?:INNER|LEFT|RIGHT)\s+JOIN\s+({IDENT})\s+$", FLAGS)
_CROSS_DONE_RE = re.compile(rf"\bCROSS\s+JOIN\s+({IDENT})\s+$", FLAGS)
_ON_START_RE = re.compile(rf"\bJOIN\s+({IDENT})\s+ON\s*$", FLAGS)
_ON_FIRST_RE = re.compile(rf"\bJOIN\s+({IDENT})\s+ON\s+({IDENT})\s+$", FLAGS)
_ON_EQUALS_RE = re.compile(rf"\bJOIN\s+({IDENT})\s+ON\s+({IDENT})\s*=\s*$", FLAGS)
_ON_DONE_RE = re.compile(rf"\bJOIN\s+{IDENT}\s+ON\s+{IDENT}\s*=\s*{IDENT}\s+$", FLAGS)
_AFTER_FROM_RE = re.compile(rf"\bFROM\s+{IDENT}\s+$", FLAGS)
_UNION_RE = re.compile(r"\bUNION\b", FLAGS)


def suggest_join_clause(request: CompletionRequest) -> CompletionResult | None:
    """Suggest join types, FK-reachable tables and ON conditions."""

    if in_nested_select(request):
        return None
    primary = active_table(request)
    if primary is None:
        return None
    text = request.text
    metadata = request.metadata
    joins_so_far = len(_JOIN_WORD_RE.findall(text))

    if _JOIN_TABLE_RE.search(text):
        return _join_tables(request, joins_so_far - 1)

    if _ON_DONE_RE.search(text) or _CROSS_DONE_RE.search(text) or _AFTER_FROM_RE.search(text):
        return _next_steps(request, joins_so_far)

    equals = _ON_EQUALS_RE.search(text)
    if equals:
        joined = metadata.resolve_table(equals.group(1))
        if joined is None:
            return None
        return _second_on_column(request, joined, equals.group(2), joins_so_far - 1)

    first = _ON_FIRST_RE.search(text)
    if first:
        joined = metadata.resolve_table(first.group(1))
        if joined is None or _owner(request, joined, first.group(2)) is None:
            return None
        return respond(request, [operator("=", "Equal to")], valid_for=r"^=$")

    on_start = _ON_START_RE.search(text)
    if on_start:
        joined = metadata.resolve_table(on_start.group(1))
        if joined is None:
            return None
        return _first_on_column(request, joined, joins_so_far - 1)

    needs_on = _NEEDS_ON_RE.search(text)
    if needs_on:
        if not metadata.has_table(needs_on.group(1)):
            return None
        return respond(request, [keyword("ON", "Join condition")])
    return None


def _join_tables(request: CompletionRequest, index: int) -> CompletionResult | None:
    referenced = referenced_tables(request)
    candidates = [
        name for name in request.metadata.joinable_tables(referenced) if name not in referenced
    ]
    options = []
    for name in candidates:
        option = IdentifierOption.of(name)
        options.append(
            Suggestion(
                label=name,
                type=SuggestionType.TABLE,
                apply=f"{quote_identifier(name)} ",
                detail="related table",
                option=option,
                sync=sync("on_join_table_select", option, max(index, 0)),
            )
        )
    return respond(request, options)


def _next_steps(request: CompletionRequest, index: int) -> CompletionResult | None:
    options: list[Suggestion] = []
    for join_type in JOIN_TYPES:
        options.append(
            keyword(
                join_type,
                "Join another table",
                sync=sync("on_join_type_select", IdentifierOption.of(join_type), index),
            )
        )
    union_index = len(_UNION_RE.findall(mask_literals(request.text)))
    options.extend(
        with_sync(
            request.keywords.suggestions_for(ContextTag.AFTER_FROM),
            lambda entry: union_type_sync(entry.label, union_index) if entry.label.startswith("UNION") else None,
        )
    )
    return respond(request, options)


def _first_on_column(request: CompletionRequest, joined: str, index: int) -> CompletionResult | None:
    metadata = request.metadata
    sources = [name for name in referenced_tables(request) if name != joined]
    hinted = _fk_columns(metadata, sources, joined)
    labels = list(hinted)
    for table in sources + [joined]:
        labels.extend(f"{table}.{name}" for name in metadata.columns_for(table))
    return respond(
        request,
        (
            _qualified(label, boost=1 if label in hinted else 0, callback="on_join_on_column1_select", index=index)
            for label in dict.fromkeys(labels)
        ),
    )


def _second_on_column(
    request: CompletionRequest, joined: str, first_ref: str, index: int
) -> CompletionResult | None:
    metadata = request.metadata
    owner = _owner(request, joined, first_ref)
    if owner is None:
        return None
    sources = [name for name in referenced_tables(request) if name != joined]
    targets = sources if owner == joined else [joined]
    first_column = metadata.resolve_column(owner, first_ref)
    hinted: list[str] = []
    for table in targets:
        for key in metadata.foreign_keys_between(owner, table):
            if key.table == owner and key.column == first_column:
                hinted.append(f"{key.referenced_table}.{key.referenced_column}")
            elif key.referenced_table == owner and key.referenced_column == first_column:
                hinted.append(f"{key.table}.{key.column}")
    labels = list(hinted)
    for table in targets:
        labels.extend(f"{table}.{name}" for name in metadata.columns_for(table))
    return respond(
        request,
        (
            _qualified(label, boost=1 if label in hinted else 0, callback="on_join_on_column2_select", index=index)
            for label in dict.fromkeys(labels)
        ),
    )


def _fk_columns(metadata: MetadataIndex, sources: Iterable[str], joined: str) -> list[str]:
    hinted: list[str] = []
    for source in sources:
        for key in metadata.foreign_keys_between(source, joined):
            hinted.append(f"{key.table}.{key.column}")
            hinted.append(f"{key.referenced_table}.{key.referenced_column}")
    return hinted


def _owner(request: CompletionRequest, joined: str, reference: str) -> str | None:
    """Table that defines ``reference`` among the tables in play."""

    metadata = request.metadata
    tables = referenced_tables(request)
    if joined not in tables:
        tables.append(joined)
    cleaned = strip_quotes(reference)
    if "." in cleaned:
        qualifier, _, name = cleaned.rpartition(".")
        table = metadata.resolve_table(qualifier)
        if table in tables and metadata.resolve_column(table, name):
            return table
        return None
    for table in tables:
        if metadata.resolve_column(table, cleaned):
            return table
    return None


def _qualified(label: str, *, boost: int, callback: str, index: int) -> Suggestion:
    option = IdentifierOption(value=label, label=label, column=label.rpartition(".")[2])
    return Suggestion(
        label=label,
        type=SuggestionType.COLUMN,
        apply=f"{quote_identifier(label)} ",
        detail="foreign key" if boost else "join column",
        boost=boost,
        option=option,
        sync=sync(callback, option, max(index, 0)),
    )


__all__ = ["suggest_join_clause"]
