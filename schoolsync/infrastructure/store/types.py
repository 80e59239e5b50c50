"""Value types shared by every remote store adapter."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

Record = dict[str, Any]


class ChangeKind(str, Enum):
    """Kinds of live change notification understood by the mirrors."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class FilterOperator(str, Enum):
    """Filter operators a bulk read accepts; anything else is ignored."""

    EQ = "=="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="

    @classmethod
    def parse(cls, op: Any) -> FilterOperator | None:
        """Return the operator for op, or None if unsupported."""
        try:
            return cls(op)
        except ValueError:
            return None


@dataclass(frozen=True)
class QueryFilter:
    """Single field comparison applied server-side to a bulk read."""

    field: str
    operator: FilterOperator
    value: Any

    def matches(self, record: Record) -> bool:
        """Evaluate the filter against a wire-format record (used by local backends)."""
        if self.field not in record:
            return False
        current = record[self.field]
        try:
            if self.operator is FilterOperator.EQ:
                return current == self.value
            if current is None or self.value is None:
                return False
            if self.operator is FilterOperator.GT:
                return current > self.value
            if self.operator is FilterOperator.LT:
                return current < self.value
            if self.operator is FilterOperator.GTE:
                return current >= self.value
            return current <= self.value
        except TypeError:
            return False


@dataclass(frozen=True)
class ChangeEvent:
    """Live change notification for one record.

    kind is the transport's raw string; compare it against ChangeKind.
    new carries the record after INSERT/UPDATE, old the record (or at
    least its id) before UPDATE/DELETE. Both are wire-format records.
    """

    kind: str
    collection: str
    new: Record = field(default_factory=dict)
    old: Record = field(default_factory=dict)


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    """Handle to a live change channel."""

    @property
    def closed(self) -> bool:
        """Return True once close() has been called."""
        ...

    def close(self) -> None:
        """Stop delivery immediately. Idempotent."""
        ...
