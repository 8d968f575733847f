"""Statement-opening keyword suggestions."""

from __future__ import annotations

import re

from ..models import CompletionRequest, CompletionResult
from .base import FLAGS, keyword, respond

_SELECT_RE = re.compile(r"\bSELECT\b", FLAGS)

_OPENERS = (
    ("SELECT", "Start a query"),
    ("WITH", "Start a common table expression"),
)


def suggest_select(request: CompletionRequest) -> CompletionResult | None:
    """Offer ``SELECT`` while the statement has none yet."""

    if request.parsed.selects or _SELECT_RE.search(request.text):
        return None
    word = request.word.lower()
    if not request.text.strip():
        candidates = [entry for entry in _OPENERS if entry[0].lower().startswith(word)]
    elif word and "select".startswith(word):
        candidates = [_OPENERS[0]]
    else:
        return None
    return respond(request, (keyword(label, detail) for label, detail in candidates))


__all__ = ["suggest_select"]
