"""Typed query builder for the record store.

A query is a conjunction of conditions plus an optional sort order. Conditions
are validated when they are built so a malformed filter fails at the call site
rather than inside the store.
"""

from collections.abc import Collection
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Operator(str, Enum):
    """Comparison kinds supported by the store."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "in"


_RANGE_OPERATORS = {Operator.LT, Operator.LE, Operator.GT, Operator.GE}


class SortDirection(str, Enum):
    """Sort direction for query results."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Condition:
    """Single filter on one record field.

    Attributes:
        field: Record attribute name
        operator: Comparison kind
        value: Value to compare against (a collection for ``in``)
    """

    field: str
    operator: Operator
    value: Any

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("Condition field must not be empty")
        object.__setattr__(self, "operator", Operator(self.operator))

        if self.operator == Operator.IN:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Collection):
                raise ValueError(f"'in' condition on {self.field} needs a collection of values")
            object.__setattr__(self, "value", tuple(self.value))
        elif self.operator in _RANGE_OPERATORS and self.value is None:
            raise ValueError(f"Range condition on {self.field} needs a value")

    def matches(self, record: Any) -> bool:
        """Check whether a record satisfies this condition.

        Args:
            record: Record object exposing ``field`` as an attribute

        Returns:
            True if the record matches
        """
        actual = getattr(record, self.field, None)

        if self.operator == Operator.EQ:
            return bool(actual == self.value)
        if self.operator == Operator.NE:
            return bool(actual != self.value)
        if self.operator == Operator.IN:
            return actual in self.value

        # Range comparisons never match a missing value
        if actual is None:
            return False
        if self.operator == Operator.LT:
            return bool(actual < self.value)
        if self.operator == Operator.LE:
            return bool(actual <= self.value)
        if self.operator == Operator.GT:
            return bool(actual > self.value)
        return bool(actual >= self.value)


@dataclass(frozen=True)
class SortBy:
    """Sort order applied after filtering."""

    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection(self.direction))


@dataclass(frozen=True)
class Query:
    """Conjunctive query over one collection.

    Example:
        >>> query = Query().where("owner_id", "==", "u1").where("status", "in", ["active"])
        >>> query = query.order_by("start_time", "desc")
    """

    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    sort_by: Optional[SortBy] = None

    def where(self, field_name: str, operator: Any, value: Any) -> "Query":
        """Return a copy of this query with one more condition."""
        condition = Condition(field_name, Operator(operator), value)
        return Query(self.conditions + (condition,), self.sort_by)

    def order_by(self, field_name: str, direction: Any = SortDirection.ASC) -> "Query":
        """Return a copy of this query with the given sort order."""
        return Query(self.conditions, SortBy(field_name, SortDirection(direction)))

    def matches(self, record: Any) -> bool:
        """Check whether a record satisfies every condition."""
        return all(condition.matches(record) for condition in self.conditions)

    def apply(self, records: list[Any]) -> list[Any]:
        """Filter and sort records according to this query.

        Records missing the sort field are placed last.
        """
        result = [record for record in records if self.matches(record)]

        if self.sort_by is not None:
            sort_field = self.sort_by.field
            present = [r for r in result if getattr(r, sort_field, None) is not None]
            missing = [r for r in result if getattr(r, sort_field, None) is None]
            present.sort(
                key=lambda r: getattr(r, sort_field),
                reverse=self.sort_by.direction == SortDirection.DESC,
            )
            result = present + missing

        return result
