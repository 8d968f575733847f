"""State-sync callback protocol linking free text to a structured query model.

Handlers never call these directly. They attach a :class:`SyncAction` to the
suggestion that represents a structural choice and the editor integration runs
it through :func:`sqlpad.sqlintel.apply.apply_completion` once the user
accepts that suggestion.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Mapping, Protocol, Sequence, Tuple

from .models import CompletionResult, IdentifierOption, SyncAction


class StateSyncCallbacks(Protocol):
    """Notifications understood by a structured query-state store.

    Implementations may provide any subset; missing methods are skipped.
    """

    def on_table_select(self, table: IdentifierOption) -> None: ...

    def on_column_select(self, columns: Tuple[IdentifierOption, ...]) -> None: ...

    def on_distinct_select(self, distinct: bool) -> None: ...

    def on_where_column_select(self, column: IdentifierOption, index: int) -> None: ...

    def on_operator_select(self, operator: IdentifierOption, index: int) -> None: ...

    def on_value_select(self, value: IdentifierOption, index: int, is_value2: bool) -> None: ...

    def on_logical_operator_select(self, operator: IdentifierOption) -> None: ...

    def on_order_by_column_select(self, column: IdentifierOption) -> None: ...

    def on_order_by_direction_select(self, column: IdentifierOption, direction: str) -> None: ...

    def on_limit_select(self, limit: IdentifierOption) -> None: ...

    def on_group_by_column_select(self, columns: Tuple[IdentifierOption, ...]) -> None: ...

    def on_aggregate_column_select(self, aggregate: IdentifierOption, index: int) -> None: ...

    def on_having_operator_select(self, operator: IdentifierOption, index: int) -> None: ...

    def on_having_value_select(self, value: IdentifierOption, index: int) -> None: ...

    def on_join_type_select(self, join_type: IdentifierOption, index: int) -> None: ...

    def on_join_table_select(self, table: IdentifierOption, index: int) -> None: ...

    def on_join_on_column1_select(self, column: IdentifierOption, index: int) -> None: ...

    def on_join_on_column2_select(self, column: IdentifierOption, index: int) -> None: ...

    def on_union_type_select(self, union_type: IdentifierOption, index: int) -> None: ...

    def on_union_table_select(self, table: IdentifierOption, index: int) -> None: ...

    def on_cte_alias_change(self, cte_index: int, alias: str) -> None: ...

    def on_cte_table_select(self, cte_index: int, table: IdentifierOption) -> None: ...

    def on_cte_column_select(self, cte_index: int, columns: Tuple[IdentifierOption, ...]) -> None: ...

    def on_cte_where_column_select(
        self, cte_index: int, index: int, column: IdentifierOption
    ) -> None: ...

    def on_cte_operator_select(self, cte_index: int, index: int, operator: IdentifierOption) -> None: ...

    def on_cte_value_select(
        self, cte_index: int, index: int, value: IdentifierOption, is_value2: bool
    ) -> None: ...

    def on_cte_logical_operator_select(self, cte_index: int, operator: IdentifierOption) -> None: ...

    def on_cte_group_by_select(self, cte_index: int, columns: Tuple[IdentifierOption, ...]) -> None: ...

    def on_cte_having_aggregate_select(
        self, cte_index: int, index: int, aggregate: IdentifierOption
    ) -> None: ...

    def on_cte_having_operator_select(
        self, cte_index: int, index: int, operator: IdentifierOption
    ) -> None: ...

    def on_cte_having_value_select(self, cte_index: int, index: int, value: IdentifierOption) -> None: ...

    def on_case_column_select(self, column: IdentifierOption, index: int) -> None: ...

    def on_case_operator_select(self, operator: IdentifierOption, index: int) -> None: ...

    def on_case_value_select(self, value: IdentifierOption, index: int) -> None: ...

    def on_case_result_select(self, result: IdentifierOption, index: int) -> None: ...

    def on_else_result_select(self, result: IdentifierOption) -> None: ...

    def on_case_alias_change(self, alias: str | None) -> None: ...


CALLBACK_NAMES: Tuple[str, ...] = tuple(
    name for name in vars(StateSyncCallbacks) if name.startswith("on_")
)


def sync(callback: str, *args: object) -> SyncAction:
    """Build a sync action, rejecting names outside the protocol."""

    if callback not in CALLBACK_NAMES:
        raise ValueError(f"Unknown state-sync callback '{callback}'.")
    return SyncAction(callback, args)


Remap = Callable[[Tuple[object, ...]], SyncAction]


def _cte_remaps(cte_index: int) -> dict[str, Remap]:
    return {
        "on_table_select": lambda args: sync("on_cte_table_select", cte_index, args[0]),
        "on_column_select": lambda args: sync("on_cte_column_select", cte_index, args[0]),
        "on_where_column_select": lambda args: sync(
            "on_cte_where_column_select", cte_index, args[1], args[0]
        ),
        "on_operator_select": lambda args: sync("on_cte_operator_select", cte_index, args[1], args[0]),
        "on_value_select": lambda args: sync(
            "on_cte_value_select", cte_index, args[1], args[0], args[2]
        ),
        "on_logical_operator_select": lambda args: sync(
            "on_cte_logical_operator_select", cte_index, args[0]
        ),
        "on_group_by_column_select": lambda args: sync("on_cte_group_by_select", cte_index, args[0]),
        "on_aggregate_column_select": lambda args: sync(
            "on_cte_having_aggregate_select", cte_index, args[1], args[0]
        ),
        "on_having_operator_select": lambda args: sync(
            "on_cte_having_operator_select", cte_index, args[1], args[0]
        ),
        "on_having_value_select": lambda args: sync(
            "on_cte_having_value_select", cte_index, args[1], args[0]
        ),
    }


def _union_remaps(union_index: int) -> dict[str, Remap]:
    return {
        "on_table_select": lambda args: sync("on_union_table_select", args[0], union_index),
    }


def scope_to_cte(result: CompletionResult, cte_index: int) -> CompletionResult:
    """Redirect syncs produced inside a CTE body to the CTE setters."""

    return _rescope(result, _cte_remaps(cte_index))


def scope_to_union(result: CompletionResult, union_index: int) -> CompletionResult:
    """Redirect syncs produced inside a UNION member to the UNION setters."""

    return _rescope(result, _union_remaps(union_index))


def _rescope(result: CompletionResult, remaps: Mapping[str, Remap]) -> CompletionResult:
    options = []
    for option in result.options:
        action = option.sync
        if action is not None:
            remap = remaps.get(action.callback)
            action = remap(action.args) if remap else None
        options.append(replace(option, sync=action))
    return result.with_options(options)


def column_options(columns: Sequence[str]) -> Tuple[IdentifierOption, ...]:
    return tuple(IdentifierOption.of(column) for column in columns)


__all__ = [
    "CALLBACK_NAMES",
    "StateSyncCallbacks",
    "column_options",
    "scope_to_cte",
    "scope_to_union",
    "sync",
]
