"""Keyword catalog powering deterministic follow-up keyword suggestions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import ContextTag, Suggestion, SuggestionType


@dataclass(slots=True)
class KeywordEntry:
    """Keyword metadata used when offering the next clause."""

    keyword: str
    detail: str
    contexts: Tuple[ContextTag, ...]
    apply: str | None = None


class KeywordCatalog:
    """In-memory catalog that returns context-aware keyword suggestions."""

    def __init__(self, entries: Sequence[KeywordEntry]) -> None:
        self._entries = tuple(entries)

    @classmethod
    def default(cls) -> "KeywordCatalog":
        return cls(_DEFAULT_ENTRIES)

    def suggestions_for(self, context: ContextTag, *, exclude: Sequence[str] = ()) -> list[Suggestion]:
        """Return catalog entries registered for ``context``, in catalog order."""

        skipped = {keyword.upper() for keyword in exclude}
        matches: list[Suggestion] = []
        for entry in self._entries:
            if context in entry.contexts and entry.keyword.upper() not in skipped:
                matches.append(
                    Suggestion(
                        label=entry.keyword,
                        type=SuggestionType.KEYWORD,
                        apply=entry.apply if entry.apply is not None else f"{entry.keyword} ",
                        detail=entry.detail,
                    )
                )
        return matches

    def keywords_for(self, context: ContextTag) -> list[str]:
        return [entry.keyword for entry in self._entries if context in entry.contexts]


_AFTER_FROM = ContextTag.AFTER_FROM
_WHERE = ContextTag.WHERE
_GROUP = ContextTag.GROUP_BY
_HAVING = ContextTag.HAVING
_ORDER = ContextTag.ORDER_BY
_LIMIT = ContextTag.LIMIT
_KEYWORD = ContextTag.KEYWORD

_DEFAULT_ENTRIES: Tuple[KeywordEntry, ...] = (
    KeywordEntry("WHERE", "Filter rows", (_AFTER_FROM,)),
    KeywordEntry("GROUP BY", "Aggregate rows", (_AFTER_FROM, _WHERE)),
    KeywordEntry("HAVING", "Filter aggregates", (_GROUP,)),
    KeywordEntry("ORDER BY", "Sort result set", (_AFTER_FROM, _WHERE, _GROUP, _HAVING)),
    KeywordEntry("LIMIT", "Restrict row count", (_AFTER_FROM, _WHERE, _ORDER, _HAVING)),
    KeywordEntry("UNION", "Combine result sets", (_AFTER_FROM,)),
    KeywordEntry("UNION ALL", "Combine result sets, keep duplicates", (_AFTER_FROM,)),
    KeywordEntry(";", "End statement", (_AFTER_FROM, _WHERE, _GROUP, _HAVING, _ORDER, _LIMIT), apply=";"),
    KeywordEntry("SELECT", "Start a query", (_KEYWORD,)),
    KeywordEntry("WITH", "Common table expression", (_KEYWORD,)),
)


__all__ = ["KeywordCatalog", "KeywordEntry"]
