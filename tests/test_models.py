from __future__ import annotations

import dataclasses
import random
from datetime import UTC, date, datetime, timedelta

import allure
import pytest

from todo_keeper.domain.models import (
    UNSET,
    Category,
    CategoryInput,
    CategoryUpdate,
    Priority,
    TodoInput,
    TodoUpdate,
    as_utc,
    create_category,
    create_todo,
    is_overdue,
)
from todo_keeper.domain.palette import (
    CATEGORY_COLORS,
    hex_to_rgb,
    next_available_color,
    normalize_color,
    suggest_category_name,
)

pytestmark = [
    allure.epic("Domain"),
    allure.feature("Records & Factories"),
]

_NOW = datetime(2026, 10, 16, 12, 0, tzinfo=UTC)


def test_priority_is_ordered_by_weight() -> None:
    assert Priority.LOW < Priority.MEDIUM < Priority.HIGH
    assert Priority.HIGH >= Priority.HIGH
    assert sorted([Priority.HIGH, Priority.LOW, Priority.MEDIUM]) == [
        Priority.LOW,
        Priority.MEDIUM,
        Priority.HIGH,
    ]
    assert max(Priority) is Priority.HIGH


def test_create_todo_assigns_identity_and_defaults() -> None:
    first = create_todo(TodoInput(title="Buy milk", category_id="c1"), now=_NOW)
    second = create_todo(TodoInput(title="Buy milk", category_id="c1"), now=_NOW)

    assert first.id != second.id
    assert first.created_at == _NOW
    assert first.priority is Priority.MEDIUM
    assert first.completed is False
    assert first.completed_at is None


def test_create_todo_already_completed_stamps_completion() -> None:
    todo = create_todo(
        TodoInput(title="Done", category_id="c1", completed=True, priority="high"),
        now=_NOW,
    )
    assert todo.completed_at == _NOW
    assert todo.priority is Priority.HIGH


def test_create_todo_normalizes_due_date_to_utc() -> None:
    todo = create_todo(TodoInput(title="Pay", category_id="c1", due_date=date(2026, 11, 1)))
    assert todo.due_date == datetime(2026, 11, 1, tzinfo=UTC)


def test_records_are_immutable() -> None:
    todo = create_todo(TodoInput(title="Buy milk", category_id="c1"))
    with pytest.raises(dataclasses.FrozenInstanceError):
        todo.completed = True  # type: ignore[misc]

    category = create_category(CategoryInput(name="Work", color="#2ecc71"))
    with pytest.raises(dataclasses.FrozenInstanceError):
        category.todo_count = 7  # type: ignore[misc]


def test_create_category_normalizes_color_and_starts_at_zero() -> None:
    category = create_category(CategoryInput(name="Work", color="2ecc71"))
    assert category.color == "#2ecc71"
    assert category.todo_count == 0
    assert category.id


def test_todo_update_reports_only_supplied_fields() -> None:
    update = TodoUpdate(title="New", description=None)
    assert update.supplied() == {"title": "New", "description": None}
    assert TodoUpdate().supplied() == {}
    assert TodoUpdate().title is UNSET


def test_category_update_cannot_carry_todo_count() -> None:
    with pytest.raises(TypeError):
        CategoryUpdate(todo_count=3)  # type: ignore[call-arg]
    assert CategoryUpdate(color="#fff").supplied() == {"color": "#fff"}


def test_is_overdue() -> None:
    past = _NOW - timedelta(days=1)
    future = _NOW + timedelta(days=1)
    open_past = create_todo(TodoInput(title="a", category_id="c", due_date=past))
    open_future = create_todo(TodoInput(title="b", category_id="c", due_date=future))
    done_past = create_todo(TodoInput(title="c", category_id="c", due_date=past, completed=True))
    no_due = create_todo(TodoInput(title="d", category_id="c"))

    assert is_overdue(open_past, now=_NOW)
    assert not is_overdue(open_future, now=_NOW)
    assert not is_overdue(done_past, now=_NOW)
    assert not is_overdue(no_due, now=_NOW)


def test_as_utc_handles_naive_and_aware_values() -> None:
    assert as_utc(datetime(2026, 1, 1, 8, 30)) == datetime(2026, 1, 1, 8, 30, tzinfo=UTC)
    aware = datetime(2026, 1, 1, 8, 30, tzinfo=UTC)
    assert as_utc(aware) is aware


def test_palette_helpers() -> None:
    assert normalize_color("fff") == "#fff"
    assert normalize_color("") == CATEGORY_COLORS["gray"]
    assert hex_to_rgb("#f00") == (255, 0, 0)
    assert hex_to_rgb("3498db") == (52, 152, 219)
    assert hex_to_rgb("#12345") is None
    assert hex_to_rgb("#zzzzzz") is None


def test_next_available_color_skips_used_colors() -> None:
    assert next_available_color([]) == CATEGORY_COLORS["red"]
    assert next_available_color(["#E74C3C", "3498db"]) == CATEGORY_COLORS["green"]
    every_color = list(CATEGORY_COLORS.values())
    assert next_available_color(every_color, random.Random(7)) in every_color


def test_suggest_category_name() -> None:
    assert suggest_category_name([]) == "Personal"
    assert suggest_category_name(["personal", "Work"]) == "Shopping"

    common = [
        "Personal", "Work", "Shopping", "Health", "Fitness", "Learning",
        "Travel", "Finance", "Home", "Projects", "Goals", "Family",
    ]  # fmt: skip
    assert suggest_category_name(common) == "Category 1"
    assert suggest_category_name([*common, "Category 1"]) == "Category 2"


def test_category_equality_includes_count() -> None:
    assert Category(id="c", name="n", color="#fff") != Category(
        id="c", name="n", color="#fff", todo_count=1
    )
