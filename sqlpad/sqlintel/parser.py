"""Best-effort sqlglot parsing of partially typed statements."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterator

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from ..errors import UnknownDialectError
from .models import NOT_PARSED, Multiple, ParsedQuery, Single

LOG = logging.getLogger(__name__)

DEFAULT_MIN_PARSE_LENGTH = 6

DIALECTS: dict[str, str] = {
    "postgres": "postgres",
    "postgresql": "postgres",
    "mysql": "mysql",
    "sqlite": "sqlite",
    "mssql": "tsql",
    "tsql": "tsql",
    "oracle": "oracle",
}


def resolve_dialect(name: str) -> str:
    """Translate a user-facing dialect name into sqlglot's name."""

    try:
        return DIALECTS[name.strip().lower()]
    except KeyError:
        raise UnknownDialectError(f"Unsupported SQL dialect '{name}'.") from None


class ParseAdapter:
    """Wraps sqlglot so partial input yields ``NOT_PARSED`` instead of raising."""

    def __init__(
        self,
        dialect: str = "postgres",
        *,
        min_length: int = DEFAULT_MIN_PARSE_LENGTH,
        cache_size: int = 256,
    ) -> None:
        self._dialect = resolve_dialect(dialect)
        self._min_length = min_length
        self._cached_parse = lru_cache(maxsize=cache_size)(self._parse)

    @property
    def dialect(self) -> str:
        return self._dialect

    def parse(self, text: str) -> ParsedQuery:
        """Return the SELECT statements recovered from ``text``."""

        stripped = text.strip()
        if len(stripped) < self._min_length:
            return NOT_PARSED
        return self._cached_parse(stripped)

    def _parse(self, text: str) -> ParsedQuery:
        try:
            statements = sqlglot.parse(text, read=self._dialect)
        except SqlglotError as exc:
            LOG.debug("Partial statement did not parse", extra={"parse_error": str(exc).strip()})
            return NOT_PARSED
        except Exception:  # sqlglot may fail outside its own hierarchy on fragments
            LOG.debug("Parser failed on partial statement", exc_info=True)
            return NOT_PARSED

        selects = tuple(
            select
            for statement in statements
            if statement is not None
            for select in _select_nodes(statement)
        )
        if not selects:
            return NOT_PARSED
        if len(selects) == 1:
            return Single(selects[0])
        return Multiple(selects)


def _select_nodes(node: exp.Expression) -> Iterator[exp.Select]:
    if isinstance(node, exp.Select):
        yield node
    elif isinstance(node, exp.Union):
        for side in (node.this, node.expression):
            if isinstance(side, exp.Expression):
                yield from _select_nodes(side)


def from_table(select: exp.Select) -> str | None:
    """Name of the first table in ``select``'s FROM clause, if it is a table."""

    from_clause = next((value for value in select.args.values() if isinstance(value, exp.From)), None)
    if from_clause is None:
        return None
    table = from_clause.this
    if not isinstance(table, exp.Table) or not table.name:
        return None
    return f"{table.db}.{table.name}" if table.db else table.name


def has_from(select: exp.Select) -> bool:
    return any(isinstance(value, exp.From) for value in select.args.values())


__all__ = [
    "DEFAULT_MIN_PARSE_LENGTH",
    "DIALECTS",
    "ParseAdapter",
    "from_table",
    "has_from",
    "resolve_dialect",
]
