"""Accepting a suggestion: edit the buffer, then run its state-sync callback."""

from __future__ import annotations

import logging
from typing import Any, Tuple

from .models import CompletionResult, Suggestion, SyncAction

LOG = logging.getLogger(__name__)


def apply_completion(
    text: str,
    result: CompletionResult,
    suggestion: Suggestion,
    callbacks: Any | None = None,
) -> Tuple[str, int]:
    """Replace the result's span with ``suggestion`` and return ``(text, cursor)``."""

    start = max(0, min(result.start, len(text)))
    end = max(start, min(result.end, len(text)))
    inserted = suggestion.insert_text
    updated = f"{text[:start]}{inserted}{text[end:]}"
    if callbacks is not None and suggestion.sync is not None:
        dispatch_sync(callbacks, suggestion.sync)
    return updated, start + len(inserted)


def dispatch_sync(callbacks: Any, action: SyncAction) -> bool:
    """Invoke ``action`` on ``callbacks``; returns False when the method is missing."""

    handler = getattr(callbacks, action.callback, None)
    if handler is None:
        LOG.debug("Skipping state-sync callback", extra={"callback": action.callback})
        return False
    handler(*action.args)
    return True


__all__ = ["apply_completion", "dispatch_sync"]
