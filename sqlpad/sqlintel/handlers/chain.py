"""The ordered clause-handler chain."""

from __future__ import annotations

import logging
from typing import Tuple

from ..models import CompletionRequest, CompletionResult
from .as_from import suggest_as_or_from_keyword
from .base import Handler
from .case import suggest_case_clause
from .columns import suggest_columns_after_select
from .group_by import suggest_group_by_clause
from .having import suggest_having_clause
from .join import suggest_join_clause
from .limit import suggest_limit_clause
from .order_by import suggest_order_by_clause
from .select import suggest_select
from .tables import suggest_tables_after_from
from .union import suggest_union_clause
from .where import suggest_where_clause
from .with_clause import suggest_with_clause

LOG = logging.getLogger(__name__)

HANDLER_CHAIN: Tuple[Handler, ...] = (
    suggest_select,
    suggest_with_clause,
    suggest_columns_after_select,
    suggest_case_clause,
    suggest_as_or_from_keyword,
    suggest_tables_after_from,
    suggest_join_clause,
    suggest_where_clause,
    suggest_order_by_clause,
    suggest_group_by_clause,
    suggest_having_clause,
    suggest_limit_clause,
    suggest_union_clause,
)


def run_chain(request: CompletionRequest, chain: Tuple[Handler, ...] = HANDLER_CHAIN) -> CompletionResult | None:
    """Return the first non-null handler result, or None."""

    for handler in chain:
        result = handler(request)
        if result is not None:
            LOG.debug(
                "Completion handled",
                extra={"handler": handler.__name__, "context": request.context.value, "options": len(result.options)},
            )
            return result
    return None


__all__ = ["HANDLER_CHAIN", "run_chain"]
