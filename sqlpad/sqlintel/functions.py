"""Aggregate function templates offered in SELECT lists and HAVING clauses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import Suggestion, SuggestionType


@dataclass(slots=True)
class FunctionEntry:
    """Description of an aggregate template surfaced to the editor."""

    name: str
    signature: str
    detail: str
    template: str


class FunctionCatalog:
    """Returns aggregate templates in a stable order."""

    def __init__(self, entries: Sequence[FunctionEntry]) -> None:
        self._entries = tuple(entries)

    @classmethod
    def default(cls) -> "FunctionCatalog":
        return cls(_DEFAULT_FUNCTIONS)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self._entries)

    def suggestions(self, *, exclude: Sequence[str] = ()) -> list[Suggestion]:
        return [
            Suggestion(
                label=entry.signature,
                type=SuggestionType.FUNCTION,
                apply=entry.template,
                detail=entry.detail,
            )
            for entry in self._entries
            if entry.signature not in exclude
        ]


_DEFAULT_FUNCTIONS: Tuple[FunctionEntry, ...] = (
    FunctionEntry("COUNT", "COUNT(*)", "Count all rows", "COUNT(*) "),
    FunctionEntry("COUNT", "COUNT(", "Count non-null values", "COUNT("),
    FunctionEntry("SUM", "SUM(", "Sum of values", "SUM("),
    FunctionEntry("AVG", "AVG(", "Average value", "AVG("),
    FunctionEntry("MIN", "MIN(", "Minimum value", "MIN("),
    FunctionEntry("MAX", "MAX(", "Maximum value", "MAX("),
    FunctionEntry("ROUND", "ROUND(", "Round to N decimal places", "ROUND("),
)

AGGREGATES: Tuple[str, ...] = ("COUNT", "SUM", "AVG", "MIN", "MAX", "ROUND")

ROUND_PRECISIONS: Tuple[int, ...] = (0, 1, 2, 3, 4)


__all__ = ["AGGREGATES", "FunctionCatalog", "FunctionEntry", "ROUND_PRECISIONS"]
