"""SQL completion engine: context classification, clause handlers and dispatch."""

from __future__ import annotations

from .apply import apply_completion, dispatch_sync
from .callbacks import CALLBACK_NAMES, StateSyncCallbacks
from .catalog import KeywordCatalog
from .context import CONTEXT_RULES, classify
from .functions import FunctionCatalog
from .handlers import HANDLER_CHAIN
from .metadata import ForeignKey, MetadataIndex, MetadataProvider, StaticMetadataProvider
from .models import (
    CompletionRequest,
    CompletionResult,
    ContextTag,
    IdentifierOption,
    Multiple,
    NotParsed,
    Single,
    Suggestion,
    SuggestionType,
    SyncAction,
)
from .parser import ParseAdapter
from .quoting import needs_quotes, needs_value_quotes, quote_identifier, quote_value, strip_quotes
from .service import SqlIntelService

__all__ = [
    "CALLBACK_NAMES",
    "CONTEXT_RULES",
    "CompletionRequest",
    "CompletionResult",
    "ContextTag",
    "ForeignKey",
    "FunctionCatalog",
    "HANDLER_CHAIN",
    "IdentifierOption",
    "KeywordCatalog",
    "MetadataIndex",
    "MetadataProvider",
    "Multiple",
    "NotParsed",
    "ParseAdapter",
    "Single",
    "SqlIntelService",
    "StateSyncCallbacks",
    "StaticMetadataProvider",
    "Suggestion",
    "SuggestionType",
    "SyncAction",
    "apply_completion",
    "classify",
    "dispatch_sync",
    "needs_quotes",
    "needs_value_quotes",
    "quote_identifier",
    "quote_value",
    "strip_quotes",
]
