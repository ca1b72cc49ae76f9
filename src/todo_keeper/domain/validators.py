"""Pure business-rule checks for todo and category fields.

Every check returns a result object instead of raising, so callers can run
several checks and report all failures at once.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from todo_keeper.domain.models import (
    RESERVED_CATEGORY_NAMES,
    Category,
    CategoryInput,
    Priority,
    TodoInput,
)

TITLE_MAX_CHARS = 200
DESCRIPTION_MAX_CHARS = 1000
CATEGORY_NAME_MAX_CHARS = 50

_HEX_COLOR_RE = re.compile(r"#?([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})")


@dataclass(slots=True, frozen=True)
class ValidationResult:
    """Outcome of a single field check."""

    is_valid: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class InputValidation:
    """Outcome of validating a whole input object."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


_OK = ValidationResult(is_valid=True)


def _fail(error: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error)


def validate_title(title: object) -> ValidationResult:
    """Title must be a non-blank string of at most 200 characters."""

    if not isinstance(title, str) or not title:
        return _fail("Title is required and must be a string")
    if not title.strip():
        return _fail("Title cannot be empty")
    if len(title) > TITLE_MAX_CHARS:
        return _fail(f"Title cannot exceed {TITLE_MAX_CHARS} characters")
    return _OK


def validate_description(description: object) -> ValidationResult:
    """Description is optional; when given it is a string of at most 1000 characters."""

    if description is None:
        return _OK
    if not isinstance(description, str):
        return _fail("Description must be a string")
    if len(description) > DESCRIPTION_MAX_CHARS:
        return _fail(f"Description cannot exceed {DESCRIPTION_MAX_CHARS} characters")
    return _OK


def validate_priority(priority: object) -> ValidationResult:
    if isinstance(priority, Priority):
        return _OK
    if isinstance(priority, str) and priority in {item.value for item in Priority}:
        return _OK
    allowed = ", ".join(item.value for item in Priority)
    return _fail(f"Priority must be one of: {allowed}")


def validate_category_id(category_id: object) -> ValidationResult:
    if not isinstance(category_id, str) or not category_id:
        return _fail("Category ID is required and must be a string")
    if not category_id.strip():
        return _fail("Category ID cannot be empty")
    return _OK


def validate_due_date(due_date: object) -> ValidationResult:
    """Due date is optional; when given it must be a ``date`` or ``datetime``."""

    if due_date is None:
        return _OK
    if not isinstance(due_date, date):
        return _fail("Due date must be a date or datetime")
    return _OK


def validate_completed(completed: object) -> ValidationResult:
    if not isinstance(completed, bool):
        return _fail("Completed status must be a boolean")
    return _OK


def validate_todo_input(payload: TodoInput) -> InputValidation:
    """Run every todo field check and collect all failures."""

    results = (
        validate_title(payload.title),
        validate_description(payload.description),
        validate_priority(payload.priority),
        validate_category_id(payload.category_id),
        validate_due_date(payload.due_date),
        validate_completed(payload.completed),
    )
    return _collect(results)


def validate_category_name(name: object) -> ValidationResult:
    """Name must be non-blank, at most 50 characters and not a filter keyword."""

    if not isinstance(name, str) or not name:
        return _fail("Category name is required and must be a string")
    if not name.strip():
        return _fail("Category name cannot be empty")
    if len(name) > CATEGORY_NAME_MAX_CHARS:
        return _fail(f"Category name cannot exceed {CATEGORY_NAME_MAX_CHARS} characters")
    if name.lower() in RESERVED_CATEGORY_NAMES:
        return _fail(f'"{name}" is a reserved category name')
    return _OK


def validate_color(color: object) -> ValidationResult:
    """Colour must be a 3- or 6-digit hex code, ``#`` optional."""

    if not isinstance(color, str) or not color:
        return _fail("Color is required and must be a string")
    if not _HEX_COLOR_RE.fullmatch(color):
        return _fail("Color must be a valid hex color code (e.g., #FF0000 or #F00)")
    return _OK


def validate_category_input(payload: CategoryInput) -> InputValidation:
    return _collect((validate_category_name(payload.name), validate_color(payload.color)))


def is_name_unique(
    name: str,
    existing: Iterable[Category],
    *,
    exclude_id: str | None = None,
) -> bool:
    """Case-insensitive uniqueness of ``name`` among ``existing`` categories."""

    lowered = name.lower()
    return not any(
        category.name.lower() == lowered
        for category in existing
        if exclude_id is None or category.id != exclude_id
    )


def _collect(results: Iterable[ValidationResult]) -> InputValidation:
    errors = [result.error for result in results if not result.is_valid and result.error]
    return InputValidation(is_valid=not errors, errors=errors)
