"""JSON mapping for records and the persisted envelope.

Timestamps are written as ``{"__date": "<ISO-8601>"}``. Only the schema's
date fields are tagged on write and unwrapped on read, so a wrapper-shaped
value anywhere else is never mistaken for a date.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from todo_keeper.domain.models import Category, Priority, RecordSet, Todo, as_utc

logger = logging.getLogger(__name__)

DATE_TAG = "__date"
TODO_DATE_FIELDS = ("createdAt", "completedAt", "dueDate")
ENVELOPE_DATE_FIELDS = ("lastModified",)


def encode_date(value: datetime) -> dict[str, str]:
    return {DATE_TAG: as_utc(value).isoformat()}


def is_tagged_date(value: object) -> bool:
    """True for a one-key ``{"__date": str}`` wrapper."""

    return (
        isinstance(value, dict)
        and len(value) == 1
        and isinstance(value.get(DATE_TAG), str)
    )


def decode_date(value: object) -> datetime:
    """Unwrap a tagged date; raises ``ValueError`` for anything else."""

    if not is_tagged_date(value):
        raise ValueError(f"Expected a {DATE_TAG!r} wrapper, got {value!r}")
    return as_utc(datetime.fromisoformat(value[DATE_TAG]))  # type: ignore[index]


def todo_to_dict(todo: Todo) -> dict[str, Any]:
    """Envelope form of a todo; optional fields are omitted when unset."""

    payload: dict[str, Any] = {
        "id": todo.id,
        "title": todo.title,
        "completed": todo.completed,
        "priority": todo.priority.value,
        "categoryId": todo.category_id,
        "createdAt": todo.created_at,
    }
    if todo.description is not None:
        payload["description"] = todo.description
    if todo.completed_at is not None:
        payload["completedAt"] = todo.completed_at
    if todo.due_date is not None:
        payload["dueDate"] = todo.due_date
    return payload


def category_to_dict(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "color": category.color,
        "todoCount": category.todo_count,
    }


def todo_from_dict(raw: dict[str, Any]) -> Todo:
    """Build a todo from an envelope entry that passed structural checks."""

    return Todo(
        id=raw["id"],
        title=raw["title"],
        description=raw.get("description"),
        completed=raw["completed"],
        priority=_priority_from_raw(raw),
        category_id=raw["categoryId"],
        created_at=raw["createdAt"],
        completed_at=raw.get("completedAt"),
        due_date=raw.get("dueDate"),
    )


def category_from_dict(raw: dict[str, Any]) -> Category:
    return Category(
        id=raw["id"],
        name=raw["name"],
        color=raw["color"],
        todo_count=_count_from_raw(raw["todoCount"]),
    )


def _priority_from_raw(raw: dict[str, Any]) -> Priority:
    try:
        return Priority(raw["priority"])
    except ValueError:
        logger.warning(
            "Todo %r has unknown priority %r, using %s",
            raw["title"],
            raw["priority"],
            Priority.MEDIUM.value,
        )
        return Priority.MEDIUM


def _count_from_raw(value: int | float) -> int:
    # Stored counts are recomputed by the coordinator.
    if isinstance(value, int):
        return value
    return int(value) if math.isfinite(value) else 0


def build_envelope(records: RecordSet, *, version: str, last_modified: datetime) -> dict[str, Any]:
    return {
        "todos": [todo_to_dict(todo) for todo in records.todos],
        "categories": [category_to_dict(category) for category in records.categories],
        "version": version,
        "lastModified": last_modified,
    }


def records_from_envelope(payload: dict[str, Any]) -> RecordSet:
    return RecordSet(
        todos=[todo_from_dict(raw) for raw in payload["todos"]],
        categories=[category_from_dict(raw) for raw in payload["categories"]],
    )


def dumps(payload: dict[str, Any], *, extra_date_fields: Iterable[str] = ()) -> str:
    """Serialize an envelope-shaped payload, tagging the schema's date fields."""

    document = _map_dates(
        payload,
        _tag,
        top_level_fields=(*ENVELOPE_DATE_FIELDS, *extra_date_fields),
    )
    return json.dumps(document, ensure_ascii=False, indent=2)


def loads(text: str) -> Any:
    """Parse a serialized envelope and unwrap the schema's date fields.

    Non-object documents are returned unchanged for the structural check
    to reject.
    """

    document = json.loads(text)
    if not isinstance(document, dict):
        return document
    return _map_dates(document, _untag, top_level_fields=ENVELOPE_DATE_FIELDS)


def _tag(value: Any) -> Any:
    return encode_date(value) if isinstance(value, datetime) else value


def _untag(value: Any) -> Any:
    return decode_date(value) if is_tagged_date(value) else value


def _map_dates(
    payload: dict[str, Any],
    convert: Callable[[Any], Any],
    *,
    top_level_fields: Iterable[str],
) -> dict[str, Any]:
    document = dict(payload)
    for key in top_level_fields:
        if key in document:
            document[key] = convert(document[key])
    todos = document.get("todos")
    if isinstance(todos, list):
        document["todos"] = [_map_record(item, convert) for item in todos]
    return document


def _map_record(item: Any, convert: Callable[[Any], Any]) -> Any:
    if not isinstance(item, dict):
        return item
    record = dict(item)
    for key in TODO_DATE_FIELDS:
        if key in record:
            record[key] = convert(record[key])
    return record
