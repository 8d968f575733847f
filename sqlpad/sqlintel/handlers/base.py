"""Shared helpers for the clause handlers."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Callable, Iterable, Sequence

from ..context import classify
from ..metadata import MetadataIndex
from ..models import (
    CompletionRequest,
    CompletionResult,
    ContextTag,
    IdentifierOption,
    Suggestion,
    SuggestionType,
    SyncAction,
    first_select,
)
from ..parser import from_table
from ..quoting import quote_identifier, quote_value, strip_quotes

Handler = Callable[[CompletionRequest], "CompletionResult | None"]

FLAGS = re.IGNORECASE | re.DOTALL

IDENT = r'(?:"[^"]*"|[\w.]+)'
VALUE = r"(?:'(?:[^']|'')*'|-?\d+(?:\.\d+)?|[\w.]+)"

JOIN_TYPES = ("INNER JOIN", "LEFT JOIN", "RIGHT JOIN", "CROSS JOIN")

_FROM_TABLE_RE = re.compile(rf"\bFROM\s+({IDENT})", FLAGS)
_REFERENCED_RE = re.compile(rf"\b(?:FROM|JOIN)\s+({IDENT})", FLAGS)
_SELECT_RE = re.compile(r"\bSELECT\b", FLAGS)
_FROM_WORD_RE = re.compile(r"\bFROM\b", FLAGS)
_DISTINCT_PREFIX_RE = re.compile(r"^\s*DISTINCT\b", FLAGS)
_ALIAS_SUFFIX_RE = re.compile(rf"\s+(?:AS\s+)?({IDENT})\s*$", FLAGS)
_PLAIN_COLUMN_RE = re.compile(r'^(?:"[^"]+"|[A-Za-z_][\w.]*)$')
_CONNECTOR_RE = re.compile(r"\b(AND|OR)\b", re.IGNORECASE)
_PENDING_BETWEEN_RE = re.compile(rf"\bBETWEEN\s+{VALUE}\s*$", FLAGS)


def in_nested_select(request: CompletionRequest) -> bool:
    """True while a WITH or UNION handler owns the statement."""

    return request.context in (ContextTag.WITH, ContextTag.UNION)


def respond(
    request: CompletionRequest,
    options: Iterable[Suggestion],
    *,
    filter: bool = True,
    valid_for: str | None = None,
) -> CompletionResult | None:
    """Wrap options for the word span; no options means no result."""

    collected = tuple(options)
    if not collected:
        return None
    return CompletionResult(
        start=request.start,
        end=request.end,
        options=collected,
        filter=filter,
        valid_for=valid_for,
    )


def keyword(
    label: str,
    detail: str | None = None,
    *,
    apply: str | None = None,
    sync: SyncAction | None = None,
    boost: int = 0,
) -> Suggestion:
    return Suggestion(
        label=label,
        type=SuggestionType.KEYWORD,
        apply=apply if apply is not None else f"{label} ",
        detail=detail,
        boost=boost,
        option=IdentifierOption.of(label) if sync is not None else None,
        sync=sync,
    )


def column(
    name: str,
    table: str | None = None,
    *,
    apply: str | None = None,
    sync: SyncAction | None = None,
    option: IdentifierOption | None = None,
    boost: int = 0,
) -> Suggestion:
    quoted = quote_identifier(name)
    return Suggestion(
        label=name,
        type=SuggestionType.COLUMN,
        apply=apply if apply is not None else f"{quoted} ",
        detail=f"{table} column" if table else "column",
        boost=boost,
        option=option or IdentifierOption.of(name),
        sync=sync,
    )


def value(
    option: IdentifierOption,
    *,
    sync: SyncAction | None = None,
    detail: str | None = None,
) -> Suggestion:
    return Suggestion(
        label=option.label,
        type=SuggestionType.VALUE,
        apply=f"{quote_value(option.value)} ",
        detail=detail,
        option=option,
        sync=sync,
    )


def operator(label: str, detail: str, *, apply: str | None = None, sync: SyncAction | None = None) -> Suggestion:
    return Suggestion(
        label=label,
        type=SuggestionType.OPERATOR,
        apply=apply if apply is not None else f"{label} ",
        detail=detail,
        option=IdentifierOption.of(label),
        sync=sync,
    )


def active_table(request: CompletionRequest) -> str | None:
    """The statement's FROM table resolved against metadata, if known."""

    select = first_select(request.parsed)
    if select is not None:
        resolved = request.metadata.resolve_table(from_table(select))
        if resolved:
            return resolved
    match = _FROM_TABLE_RE.search(request.text)
    if not match:
        return None
    return request.metadata.resolve_table(match.group(1))


def referenced_tables(request: CompletionRequest) -> list[str]:
    """Known tables named after FROM or JOIN, in order of appearance."""

    seen: list[str] = []
    for match in _REFERENCED_RE.finditer(request.text):
        resolved = request.metadata.resolve_table(match.group(1))
        if resolved and resolved not in seen:
            seen.append(resolved)
    return seen


def mask_literals(text: str) -> str:
    """Blank out the inside of quoted literals, keeping offsets intact."""

    masked: list[str] = []
    quote: str | None = None
    index = 0
    while index < len(text):
        char = text[index]
        if quote is None:
            if char in ("'", '"'):
                quote = char
            masked.append(char)
        elif char == quote:
            if index + 1 < len(text) and text[index + 1] == quote:
                masked.append("__")
                index += 2
                continue
            quote = None
            masked.append(char)
        else:
            masked.append("_")
        index += 1
    return "".join(masked)


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` outside parentheses and quotes."""

    parts: list[str] = []
    depth = 0
    start = 0
    masked = mask_literals(text)
    for index, char in enumerate(masked):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return parts


def paren_balance(text: str) -> int:
    masked = mask_literals(text)
    return masked.count("(") - masked.count(")")


def matching_paren(text: str, start: int) -> int | None:
    """Index of the ``)`` closing a paren opened just before ``start``."""

    depth = 1
    masked = mask_literals(text)
    for index in range(start, len(masked)):
        char = masked[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def clause_tail(text: str, pattern: re.Pattern[str]) -> str | None:
    """Text after the last match of ``pattern``, or None when absent."""

    masked = mask_literals(text)
    matches = list(pattern.finditer(masked))
    if not matches:
        return None
    return text[matches[-1].end():]


def select_tail(text: str) -> str | None:
    """Text after the last SELECT keyword."""

    return clause_tail(text, _SELECT_RE)


def select_items(text: str) -> list[str]:
    """Items of the current statement's select list, in order."""

    tail = select_tail(text)
    if tail is None:
        return []
    masked = mask_literals(tail)
    stop = _FROM_WORD_RE.search(masked)
    body = tail[: stop.start()] if stop else tail
    body = _DISTINCT_PREFIX_RE.sub("", body, count=1)
    return [item.strip() for item in split_top_level(body) if item.strip()]


def item_name(item: str) -> str:
    """Drop an alias from a select item, keeping the expression."""

    stripped = item.strip()
    if "(" in stripped or " " not in stripped:
        return stripped
    match = _ALIAS_SUFFIX_RE.search(stripped)
    if match:
        return stripped[: match.start()].strip()
    return stripped


def plain_column(item: str) -> str | None:
    """Bare column name of a select item, or None for expressions and ``*``."""

    name = item_name(item)
    if not _PLAIN_COLUMN_RE.match(name):
        return None
    return strip_quotes(name.split(".")[-1])


def selected_columns(text: str) -> list[str]:
    return [name for name in (plain_column(item) for item in select_items(text)) if name]


def normalize(name: str) -> str:
    return strip_quotes(name).lower()


def split_conditions(body: str) -> tuple[list[str], list[str]]:
    """Split a WHERE/HAVING body into conditions and their connectors.

    The ``AND`` inside ``BETWEEN x AND y`` belongs to the condition.
    """

    masked = mask_literals(body)
    conditions: list[str] = []
    connectors: list[str] = []
    start = 0
    for match in _CONNECTOR_RE.finditer(masked):
        segment = masked[start:match.start()]
        if match.group(1).upper() == "AND" and _PENDING_BETWEEN_RE.search(segment):
            continue
        if paren_balance(segment) > 0:
            continue
        conditions.append(body[start:match.start()])
        connectors.append(match.group(1).upper())
        start = match.end()
    conditions.append(body[start:])
    return conditions, connectors


def position_items(request: CompletionRequest, table: str | None) -> list[str]:
    """Select-list expressions usable as 1-based positional references."""

    items = select_items(request.text)
    if items == ["*"]:
        return list(request.metadata.columns_for(table))
    return [item for item in items if item != "*"]


def valid_reference(request: CompletionRequest, table: str | None, reference: str) -> bool:
    """A known column of ``table`` or an in-range select-list position."""

    if reference.isdigit():
        return 1 <= int(reference) <= len(position_items(request, table))
    return request.metadata.resolve_column(table, reference) is not None


def with_sync(
    suggestions: Sequence[Suggestion], build: Callable[[Suggestion], "SyncAction | None"]
) -> list[Suggestion]:
    return [replace(entry, sync=build(entry)) for entry in suggestions]


def reenter(
    request: CompletionRequest,
    text: str,
    *,
    metadata: MetadataIndex | None = None,
) -> CompletionResult | None:
    """Run the full handler chain on a nested SELECT fragment."""

    from .chain import run_chain

    prefix = text + request.word
    nested = replace(
        request,
        text=text,
        context=classify(prefix),
        parsed=request.parser.parse(prefix),
        metadata=metadata if metadata is not None else request.metadata,
    )
    return run_chain(nested)


__all__ = [
    "FLAGS",
    "Handler",
    "IDENT",
    "JOIN_TYPES",
    "VALUE",
    "active_table",
    "clause_tail",
    "column",
    "in_nested_select",
    "item_name",
    "keyword",
    "mask_literals",
    "matching_paren",
    "normalize",
    "operator",
    "paren_balance",
    "plain_column",
    "position_items",
    "reenter",
    "referenced_tables",
    "respond",
    "select_items",
    "select_tail",
    "selected_columns",
    "split_conditions",
    "split_top_level",
    "valid_reference",
    "value",
    "with_sync",
]
