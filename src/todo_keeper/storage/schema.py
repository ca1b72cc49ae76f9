"""Structural checks for the persisted envelope.

These checks guard shape and types only. Business rules such as title
length or reserved category names are enforced by the coordinator on its
write path, so data that is structurally sound loads as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


class EnvelopeSchemaError(ValueError):
    """Envelope does not have the expected structure."""


def validate_envelope(payload: Any) -> None:
    """Raise ``EnvelopeSchemaError`` on the first structural problem found.

    Todos pointing at unknown categories are logged, not rejected.
    """

    if not isinstance(payload, dict):
        raise EnvelopeSchemaError("Data must be an object")
    todos = payload.get("todos")
    categories = payload.get("categories")
    if not isinstance(todos, list):
        raise EnvelopeSchemaError("todos must be an array")
    if not isinstance(categories, list):
        raise EnvelopeSchemaError("categories must be an array")
    version = payload.get("version")
    if not isinstance(version, str) or not version:
        raise EnvelopeSchemaError("version must be a string")

    for index, todo in enumerate(todos):
        try:
            _validate_todo(todo)
        except EnvelopeSchemaError as exc:
            raise EnvelopeSchemaError(f"Invalid todo at index {index}: {exc}") from exc

    for index, category in enumerate(categories):
        try:
            _validate_category(category)
        except EnvelopeSchemaError as exc:
            raise EnvelopeSchemaError(f"Invalid category at index {index}: {exc}") from exc

    category_ids = {category["id"] for category in categories}
    for todo in todos:
        if todo["categoryId"] not in category_ids:
            logger.warning(
                "Todo %r references non-existent category: %s",
                todo["title"],
                todo["categoryId"],
            )


def _validate_todo(todo: Any) -> None:
    if not isinstance(todo, dict):
        raise EnvelopeSchemaError("Todo must be an object")
    _require_str(todo, "id", "Todo must have a valid id")
    _require_str(todo, "title", "Todo must have a valid title")
    if not isinstance(todo.get("completed"), bool):
        raise EnvelopeSchemaError("Todo completed status must be a boolean")
    _require_str(todo, "priority", "Todo must have a valid priority")
    _require_str(todo, "categoryId", "Todo must have a valid categoryId")
    if not isinstance(todo.get("createdAt"), datetime):
        raise EnvelopeSchemaError("Todo must have a valid createdAt date")
    description = todo.get("description")
    if description is not None and not isinstance(description, str):
        raise EnvelopeSchemaError("Todo description must be a string")
    for key in ("completedAt", "dueDate"):
        value = todo.get(key)
        if value is not None and not isinstance(value, datetime):
            raise EnvelopeSchemaError(f"Todo {key} must be a date")


def _validate_category(category: Any) -> None:
    if not isinstance(category, dict):
        raise EnvelopeSchemaError("Category must be an object")
    _require_str(category, "id", "Category must have a valid id")
    _require_str(category, "name", "Category must have a valid name")
    _require_str(category, "color", "Category must have a valid color")
    count = category.get("todoCount")
    if not isinstance(count, int | float) or isinstance(count, bool):
        raise EnvelopeSchemaError("Category todoCount must be a number")


def _require_str(record: dict[str, Any], key: str, message: str) -> None:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise EnvelopeSchemaError(message)
