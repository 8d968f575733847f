"""Quoting rules for identifiers and literal values."""

from __future__ import annotations

import re

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "ALL",
        "AND",
        "AS",
        "BETWEEN",
        "BY",
        "CASE",
        "CONNECT",
        "CROSS",
        "DISTINCT",
        "DUAL",
        "ELSE",
        "END",
        "FROM",
        "GROUP",
        "HAVING",
        "IN",
        "INNER",
        "IS",
        "JOIN",
        "LEFT",
        "LEVEL",
        "LIKE",
        "LIMIT",
        "NOCACHE",
        "NOCYCLE",
        "NOT",
        "NULL",
        "ON",
        "OR",
        "ORDER",
        "PRIOR",
        "RIGHT",
        "ROWID",
        "ROWNUM",
        "SELECT",
        "SIBLINGS",
        "START",
        "SYSDATE",
        "SYSTIMESTAMP",
        "TABLE",
        "THEN",
        "UNION",
        "USER",
        "WHEN",
        "WHERE",
        "WITH",
    }
)

_NUMERIC_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_FUNCTION_CALL_RE = re.compile(r"^\w+\s*\(.*\)$", re.S)


def is_numeric(value: str) -> bool:
    return bool(_NUMERIC_RE.match(value.strip()))


def needs_quotes(identifier: str) -> bool:
    """Return True when ``identifier`` must be double-quoted to be used as-is."""

    if identifier == "*" or is_numeric(identifier):
        return False
    if _FUNCTION_CALL_RE.match(identifier):
        return False
    if not _IDENTIFIER_RE.match(identifier):
        return True
    return identifier.upper() in RESERVED_WORDS


def needs_value_quotes(value: str) -> bool:
    """Return True unless ``value`` is a numeric literal; everything else is text."""

    return not is_numeric(value)


def quote_identifier(identifier: str) -> str:
    """Quote ``identifier`` when required; dotted names are quoted per part."""

    if "." in identifier and not identifier.startswith('"'):
        return ".".join(quote_identifier(part) for part in identifier.split("."))
    if not needs_quotes(identifier):
        return identifier
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def quote_value(value: str) -> str:
    if not needs_value_quotes(value):
        return value
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def strip_quotes(value: str) -> str:
    """Undo ``quote_identifier``/``quote_value`` for a single quoted span."""

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        quote = value[0]
        return value[1:-1].replace(quote * 2, quote)
    return value


__all__ = [
    "RESERVED_WORDS",
    "is_numeric",
    "needs_quotes",
    "needs_value_quotes",
    "quote_identifier",
    "quote_value",
    "strip_quotes",
]
