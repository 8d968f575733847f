"""Schema snapshots that feed identifier and value suggestions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol, Sequence, Tuple

from ..errors import MetadataError
from .models import IdentifierOption
from .quoting import strip_quotes

LOG = logging.getLogger(__name__)

VALUE_SAMPLE_LIMIT = 100

ValueInput = Mapping[str, Sequence["IdentifierOption | str"]]


@dataclass(frozen=True, slots=True)
class ForeignKey:
    """``table.column`` references ``referenced_table.referenced_column``."""

    table: str
    column: str
    referenced_table: str
    referenced_column: str

    def touches(self, table: str) -> bool:
        return table in (self.table, self.referenced_table)

    def other(self, table: str) -> str:
        return self.referenced_table if table == self.table else self.table


@dataclass(frozen=True)
class MetadataIndex:
    """Immutable view over tables, columns, sampled values and foreign keys.

    Derived lookups are computed lazily and cached on the instance, so a
    snapshot that is reused across keystrokes only pays for them once.
    """

    tables: Tuple[str, ...] = ()
    columns: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    values: Mapping[str, Tuple[IdentifierOption, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    foreign_keys: Tuple[ForeignKey, ...] = ()

    @classmethod
    def build(
        cls,
        table_columns: Mapping[str, Sequence[str]],
        *,
        table_names: Sequence[str] | None = None,
        values: ValueInput | None = None,
        foreign_keys: Iterable[ForeignKey] = (),
        value_sample_limit: int = VALUE_SAMPLE_LIMIT,
        strict: bool = False,
    ) -> "MetadataIndex":
        """Normalize raw schema data into a snapshot."""

        names = tuple(table_names) if table_names is not None else tuple(table_columns)
        columns = {name: tuple(table_columns.get(name, ())) for name in names}
        known = set(names)

        edges: list[ForeignKey] = []
        for key in foreign_keys:
            if key.table in known and key.referenced_table in known:
                edges.append(key)
                continue
            if strict:
                raise MetadataError(
                    f"Foreign key {key.table}.{key.column} -> "
                    f"{key.referenced_table}.{key.referenced_column} names an unknown table."
                )
            LOG.debug("Dropping foreign key with unknown table", extra={"fk_table": key.table})

        samples: dict[str, Tuple[IdentifierOption, ...]] = {}
        for cache_key, entries in (values or {}).items():
            samples[cache_key] = tuple(_as_option(entry) for entry in entries[:value_sample_limit])

        return cls(
            tables=names,
            columns=MappingProxyType(columns),
            values=MappingProxyType(samples),
            foreign_keys=tuple(edges),
        )

    @classmethod
    def empty(cls) -> "MetadataIndex":
        return cls()

    def __bool__(self) -> bool:
        return bool(self.tables)

    @cached_property
    def _table_lookup(self) -> dict[str, str]:
        lookup: dict[str, str] = {}
        for name in self.tables:
            lookup.setdefault(_normalize(name), name)
        for name in self.tables:
            lookup.setdefault(_normalize(name.split(".")[-1]), name)
        return lookup

    @cached_property
    def all_columns(self) -> Tuple[str, ...]:
        """Every column name across all tables, first occurrence wins."""

        seen: set[str] = set()
        ordered: list[str] = []
        for name in self.tables:
            for column in self.columns.get(name, ()):
                if column not in seen:
                    seen.add(column)
                    ordered.append(column)
        return tuple(ordered)

    @cached_property
    def column_tables(self) -> Mapping[str, Tuple[str, ...]]:
        """Lower-cased column name -> tables that define it."""

        index: dict[str, list[str]] = {}
        for name in self.tables:
            for column in self.columns.get(name, ()):
                index.setdefault(_normalize(column), []).append(name)
        return MappingProxyType({key: tuple(value) for key, value in index.items()})

    @cached_property
    def join_graph(self) -> Mapping[str, Tuple[str, ...]]:
        """Table -> tables linked to it by a foreign key in either direction."""

        graph: dict[str, list[str]] = {name: [] for name in self.tables}
        for key in self.foreign_keys:
            for source, target in ((key.table, key.referenced_table), (key.referenced_table, key.table)):
                neighbours = graph.setdefault(source, [])
                if target not in neighbours and target != source:
                    neighbours.append(target)
        return MappingProxyType({key: tuple(value) for key, value in graph.items()})

    def resolve_table(self, name: str | None) -> str | None:
        """Map a typed table reference onto the canonical metadata name."""

        if not name:
            return None
        cleaned = ".".join(strip_quotes(part) for part in name.split("."))
        lookup = self._table_lookup
        return lookup.get(_normalize(cleaned)) or lookup.get(_normalize(cleaned.split(".")[-1]))

    def has_table(self, name: str | None) -> bool:
        return self.resolve_table(name) is not None

    def columns_for(self, table: str | None) -> Tuple[str, ...]:
        resolved = self.resolve_table(table)
        if resolved is None:
            return ()
        return self.columns.get(resolved, ())

    def resolve_column(self, table: str | None, column: str) -> str | None:
        """Return the canonical column name if ``table`` defines it."""

        wanted = _normalize(strip_quotes(column.split(".")[-1]))
        for candidate in self.columns_for(table):
            if _normalize(candidate) == wanted:
                return candidate
        return None

    def values_for(self, table: str, column: str) -> Tuple[IdentifierOption, ...]:
        """Cached sample values for exactly ``table.column``."""

        resolved_table = self.resolve_table(table)
        resolved_column = self.resolve_column(resolved_table, column)
        if resolved_table is None or resolved_column is None:
            return ()
        return self.values.get(f"{resolved_table}.{resolved_column}", ())

    def tables_with_columns(self, columns: Iterable[str]) -> Tuple[str, ...]:
        """Tables (in metadata order) that define every column given."""

        wanted = [_normalize(strip_quotes(column)) for column in columns]
        if not wanted:
            return self.tables
        candidates: set[str] | None = None
        for column in wanted:
            owners = set(self.column_tables.get(column, ()))
            candidates = owners if candidates is None else candidates & owners
        return tuple(name for name in self.tables if name in (candidates or set()))

    def joinable_tables(self, tables: Iterable[str]) -> Tuple[str, ...]:
        """Tables reachable over one foreign key from any table given."""

        sources = [resolved for resolved in (self.resolve_table(name) for name in tables) if resolved]
        reachable: set[str] = set()
        for source in sources:
            reachable.update(self.join_graph.get(source, ()))
        return tuple(name for name in self.tables if name in reachable)

    def foreign_keys_between(self, left: str, right: str) -> Tuple[ForeignKey, ...]:
        return tuple(
            key
            for key in self.foreign_keys
            if {key.table, key.referenced_table} == {left, right}
            or (left == right and key.table == key.referenced_table == left)
        )

    def with_table(self, name: str, columns: Sequence[str]) -> "MetadataIndex":
        """Return a derived snapshot with an extra table, e.g. a CTE alias."""

        if self.resolve_table(name) == name:
            return self
        table_columns = dict(self.columns)
        table_columns[name] = tuple(columns)
        return MetadataIndex(
            tables=self.tables + (name,),
            columns=MappingProxyType(table_columns),
            values=self.values,
            foreign_keys=self.foreign_keys,
        )


class MetadataProvider(Protocol):
    """Protocol for services that hand out the current schema snapshot."""

    @property
    def index(self) -> MetadataIndex:
        """Snapshot used for the next completion call."""


class StaticMetadataProvider:
    """Holds the current schema snapshot and swaps it on schema reloads."""

    def __init__(
        self,
        tables: Mapping[str, Sequence[str]] | None = None,
        *,
        foreign_keys: Iterable[ForeignKey] = (),
        values: ValueInput | None = None,
        value_sample_limit: int = VALUE_SAMPLE_LIMIT,
    ) -> None:
        self._value_sample_limit = value_sample_limit
        self._index = MetadataIndex.empty()
        self.update(tables or {}, foreign_keys=foreign_keys, values=values)

    @property
    def index(self) -> MetadataIndex:
        """Snapshot used for completion calls until the next update."""

        return self._index

    def update(
        self,
        tables: Mapping[str, Sequence[str]],
        *,
        foreign_keys: Iterable[ForeignKey] = (),
        values: ValueInput | None = None,
    ) -> MetadataIndex:
        """Replace the snapshot used for identifier suggestions."""

        self._index = MetadataIndex.build(
            tables,
            foreign_keys=foreign_keys,
            values=values,
            value_sample_limit=self._value_sample_limit,
        )
        return self._index


def _as_option(entry: IdentifierOption | str) -> IdentifierOption:
    if isinstance(entry, IdentifierOption):
        return entry
    return IdentifierOption.of(str(entry))


def _normalize(value: str) -> str:
    return value.replace('"', "").lower()


__all__ = ["ForeignKey", "MetadataIndex", "MetadataProvider", "StaticMetadataProvider", "VALUE_SAMPLE_LIMIT"]
