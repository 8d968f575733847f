"""Completion dispatcher coordinating parsing, classification and the handler chain."""

from __future__ import annotations

import logging
import re
from typing import Sequence, Tuple

from .catalog import KeywordCatalog
from .context import classify
from .handlers import HANDLER_CHAIN, run_chain
from .handlers.base import Handler
from .metadata import MetadataIndex, MetadataProvider, StaticMetadataProvider
from .models import CompletionRequest, CompletionResult, Suggestion
from .parser import DEFAULT_MIN_PARSE_LENGTH, ParseAdapter
from .quoting import strip_quotes

LOG = logging.getLogger(__name__)

MAX_SUGGESTIONS = 50
DEFAULT_LIMIT_VALUES: Tuple[int, ...] = (1, 3, 5, 10, 25, 50, 100)

_WORD_RE = re.compile(r"[\w\"'.]+$")


class SqlIntelService:
    """Facade that turns a buffer and cursor into completion options."""

    def __init__(
        self,
        metadata_provider: MetadataProvider | None = None,
        keyword_catalog: KeywordCatalog | None = None,
        *,
        dialect: str = "postgres",
        min_parse_length: int = DEFAULT_MIN_PARSE_LENGTH,
        max_suggestions: int = MAX_SUGGESTIONS,
        limit_values: Sequence[int] = DEFAULT_LIMIT_VALUES,
        parser: ParseAdapter | None = None,
        chain: Tuple[Handler, ...] = HANDLER_CHAIN,
    ) -> None:
        self._metadata = metadata_provider or StaticMetadataProvider()
        self._keywords = keyword_catalog or KeywordCatalog.default()
        self._parser = parser or ParseAdapter(dialect, min_length=min_parse_length)
        self._max_suggestions = max_suggestions
        self._limit_values = tuple(limit_values)
        self._chain = chain

    @property
    def dialect(self) -> str:
        return self._parser.dialect

    @property
    def metadata_provider(self) -> MetadataProvider:
        return self._metadata

    def analyze(
        self,
        text: str,
        cursor: int | None = None,
        metadata: MetadataIndex | None = None,
        *,
        word: str | None = None,
    ) -> CompletionRequest:
        """Split the buffer at the cursor, then parse and classify the prefix."""

        cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))
        before = text[:cursor]
        if word is None:
            match = _WORD_RE.search(before)
            word = match.group(0) if match else ""
        elif not before.endswith(word):
            word = ""
        start = cursor - len(word)
        prefix = before[:start] + word
        return CompletionRequest(
            text=before[:start],
            word=word,
            start=start,
            end=cursor,
            context=classify(prefix),
            parsed=self._parser.parse(prefix),
            metadata=metadata if metadata is not None else self._metadata.index,
            parser=self._parser,
            keywords=self._keywords,
            limit_values=self._limit_values,
        )

    def complete(
        self,
        text: str,
        cursor: int | None = None,
        metadata: MetadataIndex | None = None,
        *,
        word: str | None = None,
    ) -> CompletionResult | None:
        """Return the options for the cursor position, or None."""

        try:
            request = self.analyze(text, cursor, metadata, word=word)
            result = run_chain(request, self._chain)
            if result is None:
                return None
            if result.filter and request.word:
                options = [entry for entry in result.options if _matches(entry, request.word)]
                if not options:
                    return None
                result = result.with_options(options)
            if len(result.options) > self._max_suggestions:
                result = result.with_options(result.options[: self._max_suggestions])
            return result
        except Exception:
            LOG.exception(
                "Completion handler failed",
                extra={"cursor": cursor, "text_length": len(text)},
            )
            return None


def _matches(entry: Suggestion, word: str) -> bool:
    needle = word.strip("'\"").lower()
    label = strip_quotes(entry.label).lower()
    if label.startswith(needle):
        return True
    return any(strip_quotes(segment).lower().startswith(needle) for segment in entry.label.split("."))


__all__ = ["DEFAULT_LIMIT_VALUES", "MAX_SUGGESTIONS", "SqlIntelService"]
