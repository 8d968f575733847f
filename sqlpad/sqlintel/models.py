"""Core dataclasses shared by the SQL completion engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Sequence, Tuple, Union

from sqlglot import exp

if TYPE_CHECKING:
    from .catalog import KeywordCatalog
    from .metadata import MetadataIndex
    from .parser import ParseAdapter


class ContextTag(str, Enum):
    """Grammatical position of the cursor inside a partial statement."""

    SELECT = "select"
    NEED_FROM = "need_from"
    FROM = "from"
    AFTER_FROM = "after_from"
    WHERE = "where"
    JOIN = "join"
    GROUP_BY = "group_by"
    HAVING = "having"
    ORDER_BY = "order_by"
    LIMIT = "limit"
    UNION = "union"
    WITH = "with"
    CASE = "case"
    KEYWORD = "keyword"


class SuggestionType(str, Enum):
    """Types of suggestions surfaced to the editor."""

    KEYWORD = "keyword"
    TABLE = "table"
    COLUMN = "column"
    FUNCTION = "function"
    OPERATOR = "operator"
    VALUE = "value"


@dataclass(frozen=True, slots=True)
class IdentifierOption:
    """A table, column, operator or value the user can pick."""

    value: str
    label: str
    column: str | None = None
    aggregate: bool = False
    alias: str | None = None

    @classmethod
    def of(cls, value: str, **extra: object) -> "IdentifierOption":
        return cls(value=value, label=value, **extra)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class SyncAction:
    """Names the state-sync callback to run when a suggestion is accepted."""

    callback: str
    args: Tuple[object, ...] = ()


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Single autocomplete entry."""

    label: str
    type: SuggestionType
    apply: str | None = None
    detail: str | None = None
    boost: int = 0
    option: IdentifierOption | None = None
    sync: SyncAction | None = None

    @property
    def insert_text(self) -> str:
        """Text written into the buffer when the entry is accepted."""

        return self.apply if self.apply is not None else self.label


@dataclass(frozen=True, slots=True)
class CompletionResult:
    """Options for the span ``[start, end)`` of the document."""

    start: int
    end: int
    options: Tuple[Suggestion, ...]
    filter: bool = True
    valid_for: str | None = None

    @property
    def labels(self) -> list[str]:
        return [option.label for option in self.options]

    def with_options(self, options: Sequence[Suggestion]) -> "CompletionResult":
        return replace(self, options=tuple(options))


@dataclass(frozen=True, slots=True)
class NotParsed:
    """The parse adapter produced nothing usable for this text."""

    @property
    def selects(self) -> Tuple[exp.Select, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class Single:
    """Exactly one SELECT statement was recovered."""

    select: exp.Select

    @property
    def selects(self) -> Tuple[exp.Select, ...]:
        return (self.select,)


@dataclass(frozen=True, slots=True)
class Multiple:
    """Several SELECT statements (or UNION members) were recovered."""

    selects: Tuple[exp.Select, ...]


ParsedQuery = Union[NotParsed, Single, Multiple]

NOT_PARSED = NotParsed()


def first_select(parsed: ParsedQuery) -> exp.Select | None:
    """Return the leading SELECT node of a parse result, if any."""

    selects = parsed.selects
    return selects[0] if selects else None


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """Everything a clause handler needs to decide on suggestions.

    ``text`` is the document up to the start of the word under the cursor and
    ``word`` is the partially typed token itself; ``start``/``end`` delimit the
    span that an accepted suggestion replaces.
    """

    text: str
    word: str
    start: int
    end: int
    context: ContextTag
    parsed: ParsedQuery
    metadata: MetadataIndex
    parser: ParseAdapter
    keywords: KeywordCatalog
    limit_values: Tuple[int, ...] = (1, 3, 5, 10, 25, 50, 100)

    @property
    def prefix(self) -> str:
        """Document text up to the cursor, including the partial word."""

        return self.text + self.word


__all__ = [
    "CompletionRequest",
    "CompletionResult",
    "ContextTag",
    "IdentifierOption",
    "Multiple",
    "NOT_PARSED",
    "NotParsed",
    "ParsedQuery",
    "Single",
    "Suggestion",
    "SuggestionType",
    "SyncAction",
    "first_select",
]
