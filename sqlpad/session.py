"""Session manager wiring a schema profile into the completion engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .config import AppConfig, SchemaProfileConfig
from .query_state import QueryStateStore
from .sqlintel import CompletionResult, SqlIntelService, StaticMetadataProvider, Suggestion, apply_completion
from .sqlintel.metadata import MetadataIndex

LOG = logging.getLogger(__name__)

SessionListener = Callable[["SessionState"], None]


@dataclass(frozen=True, slots=True)
class SessionState:
    """Current session snapshot (active profile + metadata)."""

    profile: str
    metadata: MetadataIndex
    refreshed_at: datetime

    @property
    def tables(self) -> tuple[str, ...]:
        return self.metadata.tables


class SessionManager:
    """Owns the metadata provider, completion service and query state."""

    def __init__(self, config: AppConfig, *, query_state: QueryStateStore | None = None) -> None:
        self._config = config
        settings = config.completion
        self._provider = StaticMetadataProvider(value_sample_limit=settings.value_sample_limit)
        self._sql_intel = SqlIntelService(
            self._provider,
            dialect=config.dialect,
            min_parse_length=settings.min_parse_length,
            max_suggestions=settings.max_suggestions,
            limit_values=settings.limit_values,
        )
        self._query_state = query_state or QueryStateStore()
        self._listeners: set[SessionListener] = set()
        self._state: SessionState | None = None
        if config.profiles:
            self.connect(config.active_profile or config.profiles[0].name)

    @property
    def profiles(self) -> tuple[str, ...]:
        """Profile names available in the current config."""

        return tuple(profile.name for profile in self._config.profiles)

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def sql_intel(self) -> SqlIntelService:
        return self._sql_intel

    @property
    def query_state(self) -> QueryStateStore:
        return self._query_state

    def connect(self, name: str) -> SessionState:
        """Activate the requested profile; raises ``ConfigError`` when unknown."""

        profile = self._config.get_profile(name)
        self._update_state(profile)
        return self._state

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to session updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        if self._state:
            listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def complete(self, text: str, cursor: int | None = None, *, word: str | None = None) -> CompletionResult | None:
        return self._sql_intel.complete(text, cursor, word=word)

    def accept(self, text: str, result: CompletionResult, suggestion: Suggestion) -> tuple[str, int]:
        """Apply ``suggestion`` to ``text`` and sync the query state."""

        return apply_completion(text, result, suggestion, self._query_state)

    def _update_state(self, profile: SchemaProfileConfig) -> None:
        index = self._provider.update(
            profile.tables,
            foreign_keys=[entry.to_foreign_key() for entry in profile.foreign_keys],
            values=profile.values,
        )
        LOG.debug("Schema profile activated", extra={"profile": profile.name, "tables": len(index.tables)})
        self._query_state.reset()
        self._state = SessionState(
            profile=profile.name,
            metadata=index,
            refreshed_at=datetime.now(tz=timezone.utc),
        )
        self._notify()

    def _notify(self) -> None:
        if not self._state:
            return
        for listener in tuple(self._listeners):
            listener(self._state)


__all__ = ["SessionManager", "SessionState"]
