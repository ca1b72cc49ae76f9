"""Domain records for todos and categories."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import UTC, date, datetime, time
from enum import Enum
from uuid import uuid4

from todo_keeper.domain.palette import CATEGORY_COLORS, normalize_color


class Priority(str, Enum):
    """Todo priority, ordered LOW < MEDIUM < HIGH."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.weight >= other.weight


_PRIORITY_WEIGHTS = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class _Unset:
    """Marker for update fields the caller did not supply."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(slots=True, frozen=True)
class Todo:
    """A single task record.

    Records are immutable; the coordinator swaps in updated copies so that
    ``completed_at`` stays in step with ``completed``.
    """

    id: str
    title: str
    completed: bool
    priority: Priority
    category_id: str
    created_at: datetime
    description: str | None = None
    completed_at: datetime | None = None
    due_date: datetime | None = None


@dataclass(slots=True, frozen=True)
class Category:
    """A named, coloured group of todos.

    ``todo_count`` is derived by the coordinator from the todo set.
    """

    id: str
    name: str
    color: str
    todo_count: int = 0


@dataclass(slots=True)
class TodoInput:
    """Caller-supplied fields for a new todo."""

    title: str
    category_id: str
    priority: Priority | str = Priority.MEDIUM
    description: str | None = None
    completed: bool = False
    due_date: datetime | date | None = None


@dataclass(slots=True)
class TodoUpdate:
    """Partial todo update; fields left as ``UNSET`` are not touched."""

    title: str | _Unset = UNSET
    description: str | None | _Unset = UNSET
    completed: bool | _Unset = UNSET
    priority: Priority | str | _Unset = UNSET
    category_id: str | _Unset = UNSET
    due_date: datetime | date | None | _Unset = UNSET

    def supplied(self) -> dict[str, object]:
        """Fields explicitly set by the caller, by attribute name."""

        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not UNSET
        }


@dataclass(slots=True)
class CategoryInput:
    """Caller-supplied fields for a new category."""

    name: str
    color: str


@dataclass(slots=True)
class CategoryUpdate:
    """Partial category update. There is no way to set ``todo_count``."""

    name: str | _Unset = UNSET
    color: str | _Unset = UNSET

    def supplied(self) -> dict[str, object]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not UNSET
        }


@dataclass(slots=True)
class RecordSet:
    """Both record collections, as loaded from or saved to disk."""

    todos: list[Todo] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)


@dataclass(slots=True)
class TodoStatistics:
    """Aggregate counts over the in-memory todo set."""

    total_todos: int
    completed_todos: int
    pending_todos: int
    overdue_todos: int
    total_categories: int
    priority_breakdown: dict[Priority, int]


RESERVED_CATEGORY_NAMES = frozenset({"all", "completed", "pending", "overdue"})

DEFAULT_CATEGORIES: tuple[CategoryInput, ...] = (
    CategoryInput(name="Personal", color=CATEGORY_COLORS["blue"]),
    CategoryInput(name="Work", color=CATEGORY_COLORS["green"]),
    CategoryInput(name="Shopping", color=CATEGORY_COLORS["orange"]),
    CategoryInput(name="Health", color=CATEGORY_COLORS["red"]),
)


def utc_now() -> datetime:
    """Current UTC timestamp."""

    return datetime.now(tz=UTC)


def as_utc(value: datetime | date) -> datetime:
    """Coerce a date or naive datetime into a timezone-aware UTC datetime."""

    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def create_todo(payload: TodoInput, *, now: datetime | None = None) -> Todo:
    """Build a todo with a fresh id and creation timestamp."""

    created_at = now or utc_now()
    return Todo(
        id=str(uuid4()),
        title=payload.title,
        description=payload.description,
        completed=payload.completed,
        priority=Priority(payload.priority),
        category_id=payload.category_id,
        created_at=created_at,
        completed_at=created_at if payload.completed else None,
        due_date=as_utc(payload.due_date) if payload.due_date is not None else None,
    )


def create_category(payload: CategoryInput) -> Category:
    """Build a category with a fresh id, zero count and ``#``-prefixed colour."""

    return Category(
        id=str(uuid4()),
        name=payload.name,
        color=normalize_color(payload.color),
        todo_count=0,
    )


def is_overdue(todo: Todo, *, now: datetime | None = None) -> bool:
    """True when the due date has passed and the todo is still open."""

    if todo.due_date is None or todo.completed:
        return False
    return as_utc(todo.due_date) < (now or utc_now())
