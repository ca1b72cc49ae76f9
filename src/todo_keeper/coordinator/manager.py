"""Todo manager: the single owner of the in-memory todo and category sets."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from todo_keeper.config import Settings
from todo_keeper.coordinator.events import EventRegistry, Listener, Subscription, TodoEvent
from todo_keeper.domain.models import (
    DEFAULT_CATEGORIES,
    Category,
    CategoryInput,
    CategoryUpdate,
    Priority,
    RecordSet,
    Todo,
    TodoInput,
    TodoStatistics,
    TodoUpdate,
    as_utc,
    create_category,
    create_todo,
    is_overdue,
    utc_now,
)
from todo_keeper.domain.palette import normalize_color
from todo_keeper.domain.validators import (
    ValidationResult,
    is_name_unique,
    validate_category_id,
    validate_category_input,
    validate_category_name,
    validate_color,
    validate_completed,
    validate_description,
    validate_due_date,
    validate_priority,
    validate_title,
    validate_todo_input,
)
from todo_keeper.errors import ErrorCode, ManagerError, StoreError, TodoKeeperError
from todo_keeper.storage.file_store import JsonFileStore

logger = logging.getLogger(__name__)

_TODO_FIELD_CHECKS = {
    "title": ("title", validate_title),
    "description": ("description", validate_description),
    "completed": ("completed status", validate_completed),
    "priority": ("priority", validate_priority),
    "category_id": ("category id", validate_category_id),
    "due_date": ("due date", validate_due_date),
}


class TodoManager:
    """CRUD over todos and categories with validation and auto-save.

    Must be initialized once before use. Every mutation recomputes the
    affected category counts, is flushed to disk before returning when
    auto-save is on, and is then announced to subscribers.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: JsonFileStore | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._store = store or JsonFileStore(self.settings.store)
        self._events = EventRegistry()
        self._todos: list[Todo] = []
        self._categories: list[Category] = []
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def store(self) -> JsonFileStore:
        return self._store

    def subscribe(self, listener: Listener) -> Subscription:
        return self._events.subscribe(listener)

    def unsubscribe(self, subscription: Subscription) -> bool:
        return self._events.unsubscribe(subscription)

    def initialize(self) -> None:
        """Load persisted records, seed starter categories on first run."""

        if self._initialized:
            raise ManagerError("Todo manager is already initialized", ErrorCode.ALREADY_INITIALIZED)

        logger.info("Initializing todo manager from %s", self._store.data_path)
        try:
            records = self._store.load()
            self._todos = list(records.todos)
            self._categories = list(records.categories)
            if not self._categories and self.settings.create_default_categories:
                self._create_default_categories()
        except StoreError as exc:
            raise ManagerError(
                f"Failed to initialize todo manager: {exc.message}",
                ErrorCode.INITIALIZATION,
                details={"store_code": exc.code.value},
                cause=exc,
            ) from exc

        self._recount_all()
        self._initialized = True
        self._events.emit(
            TodoEvent.DATA_LOADED,
            RecordSet(todos=list(self._todos), categories=list(self._categories)),
        )
        logger.info(
            "Todo manager initialized with %d todos and %d categories",
            len(self._todos),
            len(self._categories),
        )

    def save(self) -> None:
        """Flush the current state to disk and announce it."""

        self._ensure_initialized()
        self._flush()

    # Todos

    def add_todo(self, payload: TodoInput) -> Todo:
        self._ensure_initialized()
        validation = validate_todo_input(payload)
        if not validation.is_valid:
            raise ManagerError(
                f"Invalid todo input: {', '.join(validation.errors)}",
                ErrorCode.VALIDATION,
                details=list(validation.errors),
            )
        self._require_category(payload.category_id)

        todo = create_todo(payload)
        self._todos.append(todo)
        self._recount(todo.category_id)
        self._autosave()

        self._events.emit(TodoEvent.TODO_ADDED, todo)
        logger.info("Added todo: %s", todo.title)
        return todo

    def update_todo(self, todo_id: str, update: TodoUpdate) -> Todo:
        """Apply the supplied fields of ``update``; only those are validated.

        A completion transition stamps or clears ``completed_at``; a
        category move recounts both categories.
        """

        self._ensure_initialized()
        index = self._todo_index(todo_id)
        current = self._todos[index]
        supplied = update.supplied()

        for name, value in supplied.items():
            label, check = _TODO_FIELD_CHECKS[name]
            _raise_if_invalid(check(value), label, name)
        if "category_id" in supplied:
            self._require_category(supplied["category_id"])

        changes = dict(supplied)
        if "priority" in changes:
            changes["priority"] = Priority(changes["priority"])
        if changes.get("due_date") is not None:
            changes["due_date"] = as_utc(changes["due_date"])
        if "completed" in changes and changes["completed"] != current.completed:
            changes["completed_at"] = utc_now() if changes["completed"] else None

        updated = replace(current, **changes)
        self._todos[index] = updated
        if updated.category_id != current.category_id:
            self._recount(current.category_id)
            self._recount(updated.category_id)
        self._autosave()

        self._events.emit(TodoEvent.TODO_UPDATED, updated)
        logger.info("Updated todo: %s", updated.title)
        return updated

    def delete_todo(self, todo_id: str) -> Todo:
        self._ensure_initialized()
        index = self._todo_index(todo_id)
        removed = self._todos.pop(index)
        self._recount(removed.category_id)
        self._autosave()

        self._events.emit(TodoEvent.TODO_DELETED, {"id": todo_id, "todo": removed})
        logger.info("Deleted todo: %s", removed.title)
        return removed

    def toggle_todo_completion(self, todo_id: str) -> Todo:
        self._ensure_initialized()
        current = self._todos[self._todo_index(todo_id)]
        return self.update_todo(todo_id, TodoUpdate(completed=not current.completed))

    def get_todo_by_id(self, todo_id: str) -> Todo | None:
        self._ensure_initialized()
        return next((todo for todo in self._todos if todo.id == todo_id), None)

    def get_all_todos(self) -> list[Todo]:
        self._ensure_initialized()
        return list(self._todos)

    def get_todos_by_category(self, category_id: str) -> list[Todo]:
        self._ensure_initialized()
        return [todo for todo in self._todos if todo.category_id == category_id]

    def get_todos_by_status(self, completed: bool) -> list[Todo]:
        self._ensure_initialized()
        return [todo for todo in self._todos if todo.completed == completed]

    def get_todos_by_priority(self, priority: Priority | str) -> list[Todo]:
        self._ensure_initialized()
        _raise_if_invalid(validate_priority(priority), "priority", "priority")
        wanted = Priority(priority)
        return [todo for todo in self._todos if todo.priority is wanted]

    def get_overdue_todos(self, *, now: datetime | None = None) -> list[Todo]:
        self._ensure_initialized()
        moment = now or utc_now()
        return [todo for todo in self._todos if is_overdue(todo, now=moment)]

    def search_todos(self, query: str) -> list[Todo]:
        """Case-sensitive substring match on title or description."""

        self._ensure_initialized()
        return [
            todo
            for todo in self._todos
            if query in todo.title or (todo.description is not None and query in todo.description)
        ]

    # Categories

    def add_category(self, payload: CategoryInput) -> Category:
        self._ensure_initialized()
        category = self._insert_category(payload)
        self._autosave()

        self._events.emit(TodoEvent.CATEGORY_ADDED, category)
        logger.info("Added category: %s", category.name)
        return category

    def update_category(self, category_id: str, update: CategoryUpdate) -> Category:
        """Rename or recolour a category; its todo count is always kept."""

        self._ensure_initialized()
        index = self._category_index(category_id)
        current = self._categories[index]
        changes = update.supplied()

        if "name" in changes:
            _raise_if_invalid(validate_category_name(changes["name"]), "category name", "name")
            if not is_name_unique(changes["name"], self._categories, exclude_id=category_id):
                raise _duplicate_name(changes["name"])
        if "color" in changes:
            _raise_if_invalid(validate_color(changes["color"]), "category color", "color")
            changes["color"] = normalize_color(changes["color"])

        updated = replace(current, **changes)
        self._categories[index] = updated
        self._autosave()

        self._events.emit(TodoEvent.CATEGORY_UPDATED, updated)
        logger.info("Updated category: %s", updated.name)
        return updated

    def delete_category(self, category_id: str, reassign_to_id: str | None = None) -> Category:
        """Remove a category after moving or deleting its todos.

        With ``reassign_to_id`` the todos are moved there, otherwise they
        are deleted. Either way each todo goes through the regular todo
        path so counts, persistence and events follow the same rules.
        """

        self._ensure_initialized()
        category = self._categories[self._category_index(category_id)]
        owned = self.get_todos_by_category(category_id)

        if owned:
            if reassign_to_id is not None:
                if reassign_to_id == category_id or not self._has_category(reassign_to_id):
                    raise ManagerError(
                        f"Target category with ID {reassign_to_id} does not exist",
                        ErrorCode.CATEGORY_NOT_FOUND,
                        details={"category_id": reassign_to_id},
                    )
                for todo in owned:
                    self.update_todo(todo.id, TodoUpdate(category_id=reassign_to_id))
            else:
                for todo in owned:
                    self.delete_todo(todo.id)

        del self._categories[self._category_index(category_id)]
        self._autosave()

        self._events.emit(TodoEvent.CATEGORY_DELETED, {"id": category_id, "category": category})
        logger.info("Deleted category: %s", category.name)
        return category

    def get_category_by_id(self, category_id: str) -> Category | None:
        self._ensure_initialized()
        return next((item for item in self._categories if item.id == category_id), None)

    def get_all_categories(self) -> list[Category]:
        self._ensure_initialized()
        return list(self._categories)

    def category_exists(self, category_id: str) -> bool:
        self._ensure_initialized()
        return self._has_category(category_id)

    def get_statistics(self, *, now: datetime | None = None) -> TodoStatistics:
        """Aggregate counts computed from memory, never from disk."""

        self._ensure_initialized()
        moment = now or utc_now()
        completed = sum(1 for todo in self._todos if todo.completed)
        breakdown = {priority: 0 for priority in sorted(Priority, reverse=True)}
        for todo in self._todos:
            breakdown[todo.priority] += 1
        return TodoStatistics(
            total_todos=len(self._todos),
            completed_todos=completed,
            pending_todos=len(self._todos) - completed,
            overdue_todos=sum(1 for todo in self._todos if is_overdue(todo, now=moment)),
            total_categories=len(self._categories),
            priority_breakdown=breakdown,
        )

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ManagerError(
                "Todo manager must be initialized before use. Call initialize() first.",
                ErrorCode.NOT_INITIALIZED,
            )

    def _flush(self) -> None:
        self._store.save(self._todos, self._categories)
        self._events.emit(TodoEvent.DATA_SAVED)

    def _autosave(self) -> None:
        if self.settings.auto_save:
            self._flush()

    def _create_default_categories(self) -> None:
        logger.info("Creating default categories")
        created: list[Category] = []
        for payload in DEFAULT_CATEGORIES:
            try:
                created.append(self._insert_category(payload))
            except TodoKeeperError as exc:
                logger.warning("Failed to create default category %r: %s", payload.name, exc)
        if created and self.settings.auto_save:
            try:
                self._flush()
            except StoreError as exc:
                logger.warning("Failed to save default categories: %s", exc)
        for category in created:
            self._events.emit(TodoEvent.CATEGORY_ADDED, category)

    def _insert_category(self, payload: CategoryInput) -> Category:
        validation = validate_category_input(payload)
        if not validation.is_valid:
            raise ManagerError(
                f"Invalid category input: {', '.join(validation.errors)}",
                ErrorCode.VALIDATION,
                details=list(validation.errors),
            )
        if not is_name_unique(payload.name, self._categories):
            raise _duplicate_name(payload.name)
        category = create_category(payload)
        self._categories.append(category)
        return category

    def _todo_index(self, todo_id: str) -> int:
        for index, todo in enumerate(self._todos):
            if todo.id == todo_id:
                return index
        raise ManagerError(
            f"Todo with ID {todo_id} not found",
            ErrorCode.TODO_NOT_FOUND,
            details={"id": todo_id},
        )

    def _category_index(self, category_id: str) -> int:
        for index, category in enumerate(self._categories):
            if category.id == category_id:
                return index
        raise ManagerError(
            f"Category with ID {category_id} not found",
            ErrorCode.CATEGORY_NOT_FOUND,
            details={"id": category_id},
        )

    def _has_category(self, category_id: str) -> bool:
        return any(category.id == category_id for category in self._categories)

    def _require_category(self, category_id: str) -> None:
        if not self._has_category(category_id):
            raise ManagerError(
                f"Category with ID {category_id} does not exist",
                ErrorCode.CATEGORY_NOT_FOUND,
                details={"category_id": category_id},
            )

    def _recount(self, category_id: str) -> None:
        count = sum(1 for todo in self._todos if todo.category_id == category_id)
        for index, category in enumerate(self._categories):
            if category.id == category_id:
                self._categories[index] = replace(category, todo_count=count)

    def _recount_all(self) -> None:
        counts: dict[str, int] = {}
        for todo in self._todos:
            counts[todo.category_id] = counts.get(todo.category_id, 0) + 1
        self._categories = [
            replace(category, todo_count=counts.get(category.id, 0))
            for category in self._categories
        ]


def _raise_if_invalid(result: ValidationResult, label: str, field_name: str) -> None:
    if not result.is_valid:
        raise ManagerError(
            f"Invalid {label}: {result.error}",
            ErrorCode.VALIDATION,
            details={"field": field_name, "error": result.error},
        )


def _duplicate_name(name: str) -> ManagerError:
    return ManagerError(
        f'Category name "{name}" already exists',
        ErrorCode.DUPLICATE_NAME,
        details={"name": name},
    )
