"""Structured query state kept in step with the editor through sync callbacks."""

from __future__ import annotations

from typing import Callable, Sequence

from pydantic import BaseModel, Field

from .sqlintel.models import IdentifierOption

StateListener = Callable[["QueryState"], None]


class SelectedOption(BaseModel):
    """A table, column, operator or value chosen in the editor."""

    value: str
    label: str
    column: str | None = None
    aggregate: bool = False
    alias: str | None = None

    @classmethod
    def from_option(cls, option: IdentifierOption | str) -> "SelectedOption":
        if isinstance(option, str):
            return cls(value=option, label=option)
        return cls(
            value=option.value,
            label=option.label,
            column=option.column,
            aggregate=option.aggregate,
            alias=option.alias,
        )


class Condition(BaseModel):
    """One WHERE or HAVING condition."""

    column: SelectedOption | None = None
    operator: SelectedOption | None = None
    value: SelectedOption | None = None
    value2: SelectedOption | None = None
    logical_operator: SelectedOption | None = None


class OrderByClause(BaseModel):
    column: SelectedOption | None = None
    direction: str | None = None


class JoinClause(BaseModel):
    table: SelectedOption | None = None
    join_type: SelectedOption | None = None
    on_column1: SelectedOption | None = None
    on_column2: SelectedOption | None = None


class UnionClause(BaseModel):
    table: SelectedOption | None = None
    union_type: SelectedOption | None = None


class CteClause(BaseModel):
    alias: str | None = None
    from_table: SelectedOption | None = None
    selected_columns: list[SelectedOption] = Field(default_factory=list)
    where_clause: list[Condition] = Field(default_factory=list)
    group_by_columns: list[SelectedOption] = Field(default_factory=list)
    having_clause: list[Condition] = Field(default_factory=list)


class CaseCondition(BaseModel):
    column: SelectedOption | None = None
    operator: SelectedOption | None = None
    value: SelectedOption | None = None
    result: SelectedOption | None = None


class CaseClause(BaseModel):
    conditions: list[CaseCondition] = Field(default_factory=list)
    else_value: SelectedOption | None = None
    alias: str | None = None


class QueryState(BaseModel):
    """Clause model mirroring the statement being edited."""

    selected_table: SelectedOption | None = None
    selected_columns: list[SelectedOption] = Field(default_factory=list)
    is_distinct: bool = False
    where_clause: list[Condition] = Field(default_factory=list)
    order_by: OrderByClause = Field(default_factory=OrderByClause)
    limit: SelectedOption | None = None
    group_by_columns: list[SelectedOption] = Field(default_factory=list)
    having_clause: list[Condition] = Field(default_factory=list)
    join_clauses: list[JoinClause] = Field(default_factory=list)
    union_clauses: list[UnionClause] = Field(default_factory=list)
    cte_clauses: list[CteClause] = Field(default_factory=list)
    case_clause: CaseClause = Field(default_factory=CaseClause)


class QueryStateStore:
    """Implements every state-sync callback against a ``QueryState``.

    Indexed entries are created on first use and then updated field by field.
    """

    def __init__(self, state: QueryState | None = None) -> None:
        self._state = state or QueryState()
        self._listeners: set[StateListener] = set()

    @property
    def state(self) -> QueryState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after each change; returns an unsubscribe hook."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def reset(self) -> None:
        self._state = QueryState()
        self._notify()

    # Table and column selection

    def on_table_select(self, table: IdentifierOption) -> None:
        self._state.selected_table = SelectedOption.from_option(table)
        self._notify()

    def on_column_select(self, columns: Sequence[IdentifierOption]) -> None:
        self._state.selected_columns = _options(columns)
        self._notify()

    def on_distinct_select(self, distinct: bool) -> None:
        self._state.is_distinct = bool(distinct)
        self._notify()

    # WHERE

    def on_where_column_select(self, column: IdentifierOption, index: int) -> None:
        _entry(self._state.where_clause, index, Condition).column = SelectedOption.from_option(column)
        self._notify()

    def on_operator_select(self, operator: IdentifierOption, index: int) -> None:
        _entry(self._state.where_clause, index, Condition).operator = SelectedOption.from_option(operator)
        self._notify()

    def on_value_select(self, value: IdentifierOption, index: int, is_value2: bool) -> None:
        condition = _entry(self._state.where_clause, index, Condition)
        if is_value2:
            condition.value2 = SelectedOption.from_option(value)
        else:
            condition.value = SelectedOption.from_option(value)
        self._notify()

    def on_logical_operator_select(self, operator: IdentifierOption) -> None:
        _set_logical(self._state.where_clause, operator)
        self._notify()

    # ORDER BY and LIMIT

    def on_order_by_column_select(self, column: IdentifierOption) -> None:
        self._state.order_by = OrderByClause(column=SelectedOption.from_option(column))
        self._notify()

    def on_order_by_direction_select(self, column: IdentifierOption, direction: str) -> None:
        self._state.order_by = OrderByClause(column=SelectedOption.from_option(column), direction=direction)
        self._notify()

    def on_limit_select(self, limit: IdentifierOption) -> None:
        self._state.limit = SelectedOption.from_option(limit)
        self._notify()

    # GROUP BY and HAVING

    def on_group_by_column_select(self, columns: Sequence[IdentifierOption]) -> None:
        self._state.group_by_columns = _options(columns)
        self._notify()

    def on_aggregate_column_select(self, aggregate: IdentifierOption, index: int) -> None:
        _entry(self._state.having_clause, index, Condition).column = SelectedOption.from_option(aggregate)
        self._notify()

    def on_having_operator_select(self, operator: IdentifierOption, index: int) -> None:
        _entry(self._state.having_clause, index, Condition).operator = SelectedOption.from_option(operator)
        self._notify()

    def on_having_value_select(self, value: IdentifierOption, index: int) -> None:
        _entry(self._state.having_clause, index, Condition).value = SelectedOption.from_option(value)
        self._notify()

    # JOIN

    def on_join_type_select(self, join_type: IdentifierOption, index: int) -> None:
        _entry(self._state.join_clauses, index, JoinClause).join_type = SelectedOption.from_option(join_type)
        self._notify()

    def on_join_table_select(self, table: IdentifierOption, index: int) -> None:
        _entry(self._state.join_clauses, index, JoinClause).table = SelectedOption.from_option(table)
        self._notify()

    def on_join_on_column1_select(self, column: IdentifierOption, index: int) -> None:
        _entry(self._state.join_clauses, index, JoinClause).on_column1 = SelectedOption.from_option(column)
        self._notify()

    def on_join_on_column2_select(self, column: IdentifierOption, index: int) -> None:
        _entry(self._state.join_clauses, index, JoinClause).on_column2 = SelectedOption.from_option(column)
        self._notify()

    # UNION

    def on_union_type_select(self, union_type: IdentifierOption, index: int) -> None:
        _entry(self._state.union_clauses, index, UnionClause).union_type = SelectedOption.from_option(union_type)
        self._notify()

    def on_union_table_select(self, table: IdentifierOption, index: int) -> None:
        _entry(self._state.union_clauses, index, UnionClause).table = SelectedOption.from_option(table)
        self._notify()

    # CTE

    def on_cte_alias_change(self, cte_index: int, alias: str) -> None:
        self._cte(cte_index).alias = alias
        self._notify()

    def on_cte_table_select(self, cte_index: int, table: IdentifierOption) -> None:
        self._cte(cte_index).from_table = SelectedOption.from_option(table)
        self._notify()

    def on_cte_column_select(self, cte_index: int, columns: Sequence[IdentifierOption]) -> None:
        self._cte(cte_index).selected_columns = _options(columns)
        self._notify()

    def on_cte_where_column_select(self, cte_index: int, index: int, column: IdentifierOption) -> None:
        _entry(self._cte(cte_index).where_clause, index, Condition).column = SelectedOption.from_option(column)
        self._notify()

    def on_cte_operator_select(self, cte_index: int, index: int, operator: IdentifierOption) -> None:
        _entry(self._cte(cte_index).where_clause, index, Condition).operator = SelectedOption.from_option(operator)
        self._notify()

    def on_cte_value_select(
        self, cte_index: int, index: int, value: IdentifierOption, is_value2: bool
    ) -> None:
        condition = _entry(self._cte(cte_index).where_clause, index, Condition)
        if is_value2:
            condition.value2 = SelectedOption.from_option(value)
        else:
            condition.value = SelectedOption.from_option(value)
        self._notify()

    def on_cte_logical_operator_select(self, cte_index: int, operator: IdentifierOption) -> None:
        _set_logical(self._cte(cte_index).where_clause, operator)
        self._notify()

    def on_cte_group_by_select(self, cte_index: int, columns: Sequence[IdentifierOption]) -> None:
        self._cte(cte_index).group_by_columns = _options(columns)
        self._notify()

    def on_cte_having_aggregate_select(self, cte_index: int, index: int, aggregate: IdentifierOption) -> None:
        _entry(self._cte(cte_index).having_clause, index, Condition).column = SelectedOption.from_option(aggregate)
        self._notify()

    def on_cte_having_operator_select(self, cte_index: int, index: int, operator: IdentifierOption) -> None:
        _entry(self._cte(cte_index).having_clause, index, Condition).operator = SelectedOption.from_option(operator)
        self._notify()

    def on_cte_having_value_select(self, cte_index: int, index: int, value: IdentifierOption) -> None:
        _entry(self._cte(cte_index).having_clause, index, Condition).value = SelectedOption.from_option(value)
        self._notify()

    # CASE

    def on_case_column_select(self, column: IdentifierOption, index: int) -> None:
        self._case(index).column = SelectedOption.from_option(column)
        self._notify()

    def on_case_operator_select(self, operator: IdentifierOption, index: int) -> None:
        self._case(index).operator = SelectedOption.from_option(operator)
        self._notify()

    def on_case_value_select(self, value: IdentifierOption, index: int) -> None:
        self._case(index).value = SelectedOption.from_option(value)
        self._notify()

    def on_case_result_select(self, result: IdentifierOption, index: int) -> None:
        self._case(index).result = SelectedOption.from_option(result)
        self._notify()

    def on_else_result_select(self, result: IdentifierOption) -> None:
        self._state.case_clause.else_value = SelectedOption.from_option(result)
        self._notify()

    def on_case_alias_change(self, alias: str | None) -> None:
        self._state.case_clause.alias = alias or None
        self._notify()

    def _cte(self, cte_index: int) -> CteClause:
        return _entry(self._state.cte_clauses, cte_index, CteClause)

    def _case(self, index: int) -> CaseCondition:
        return _entry(self._state.case_clause.conditions, index, CaseCondition)

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self._state)


def _entry(items: list, index: int, factory: Callable[[], BaseModel]):
    """Return ``items[index]``, padding the list with fresh entries as needed."""

    if index < 0:
        raise IndexError(f"Clause index must be non-negative, got {index}.")
    while len(items) <= index:
        items.append(factory())
    return items[index]


def _set_logical(conditions: list[Condition], operator: IdentifierOption) -> None:
    if not conditions:
        conditions.append(Condition())
    conditions[-1].logical_operator = SelectedOption.from_option(operator)


def _options(columns: Sequence[IdentifierOption]) -> list[SelectedOption]:
    return [SelectedOption.from_option(column) for column in columns]


__all__ = [
    "CaseClause",
    "CaseCondition",
    "Condition",
    "CteClause",
    "JoinClause",
    "OrderByClause",
    "QueryState",
    "QueryStateStore",
    "SelectedOption",
    "UnionClause",
]
