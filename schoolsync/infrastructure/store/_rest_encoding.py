"""Encode filters to REST query params and decode change-feed payloads."""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from schoolsync.infrastructure.store.types import (
    ChangeEvent,
    FilterOperator,
    QueryFilter,
)

_OP_MAP: dict[FilterOperator, str] = {
    FilterOperator.EQ: "eq",
    FilterOperator.GT: "gt",
    FilterOperator.LT: "lt",
    FilterOperator.GTE: "gte",
    FilterOperator.LTE: "lte",
}


def _encode_value(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return str(v)


def encode_filter(f: QueryFilter) -> tuple[str, str]:
    """Convert a QueryFilter to a ``(field, "op.value")`` query param."""
    if f.value is None and f.operator is FilterOperator.EQ:
        return f.field, "is.null"
    return f.field, f"{_OP_MAP[f.operator]}.{_encode_value(f.value)}"


def encode_filters(filters: Sequence[QueryFilter]) -> list[tuple[str, str]]:
    """Convert filters to query params, preserving order."""
    return [encode_filter(f) for f in filters]


def id_param(record_id: str) -> tuple[str, str]:
    """Query param addressing a single record by id."""
    return "id", f"eq.{_encode_value(record_id)}"


def decode_change(payload: dict[str, Any], default_collection: str) -> ChangeEvent:
    """Convert a change-feed JSON payload to a ChangeEvent.

    Accepts both ``type``/``record``/``old_record`` and
    ``eventType``/``new``/``old`` key sets. Unknown kinds pass through
    unchanged; the mirrors ignore them.
    """
    kind = payload.get("type") or payload.get("eventType") or ""
    new = payload.get("record")
    if new is None:
        new = payload.get("new")
    old = payload.get("old_record")
    if old is None:
        old = payload.get("old")
    return ChangeEvent(
        kind=str(kind).upper(),
        collection=payload.get("table") or default_collection,
        new=new if isinstance(new, dict) else {},
        old=old if isinstance(old, dict) else {},
    )
