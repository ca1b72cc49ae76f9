"""Controllers for todo-keeper CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from todo_keeper.config import Settings
from todo_keeper.coordinator.manager import TodoManager
from todo_keeper.domain.models import (
    Category,
    CategoryInput,
    CategoryUpdate,
    Priority,
    Todo,
    TodoInput,
    is_overdue,
)
from todo_keeper.domain.palette import next_available_color
from todo_keeper.errors import ErrorCode, ManagerError


@dataclass(slots=True)
class TodoAddCommand:
    """CLI inputs for adding a todo."""

    data_path: Path | None
    title: str
    category: str
    priority: str
    description: str | None
    due: date | None


@dataclass(slots=True)
class TodoListCommand:
    """CLI inputs for listing todos."""

    data_path: Path | None
    category: str | None
    status: str
    priority: str | None
    overdue_only: bool


@dataclass(slots=True)
class TodoRefCommand:
    """CLI inputs for commands that act on one todo."""

    data_path: Path | None
    todo_id: str


@dataclass(slots=True)
class TodoSearchCommand:
    data_path: Path | None
    query: str


@dataclass(slots=True)
class CategoryAddCommand:
    data_path: Path | None
    name: str
    color: str | None


@dataclass(slots=True)
class CategoryUpdateCommand:
    data_path: Path | None
    category: str
    name: str | None
    color: str | None


@dataclass(slots=True)
class CategoryDeleteCommand:
    data_path: Path | None
    category: str
    reassign_to: str | None


@dataclass(slots=True)
class ExportCommand:
    data_path: Path | None
    target: Path


class TodoCliController:
    """Runs one manager operation per CLI invocation and renders the result."""

    def add_todo(self, command: TodoAddCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        category = _resolve_category(manager, command.category)
        todo = manager.add_todo(
            TodoInput(
                title=command.title,
                category_id=category.id,
                priority=command.priority,
                description=command.description,
                due_date=command.due,
            ),
        )
        return [f"Added todo {todo.id} to {category.name}: {todo.title}"]

    def list_todos(self, command: TodoListCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        if command.category is not None:
            todos = manager.get_todos_by_category(_resolve_category(manager, command.category).id)
        else:
            todos = manager.get_all_todos()
        if command.status != "all":
            todos = [todo for todo in todos if todo.completed == (command.status == "completed")]
        if command.priority is not None:
            todos = [todo for todo in todos if todo.priority is Priority(command.priority)]
        if command.overdue_only:
            todos = [todo for todo in todos if is_overdue(todo)]

        if not todos:
            return ["No todos found."]
        names = {category.id: category.name for category in manager.get_all_categories()}
        ordered = sorted(todos, key=lambda todo: (todo.completed, -todo.priority.weight))
        return [_format_todo(todo, names) for todo in ordered]

    def toggle_todo(self, command: TodoRefCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        todo = manager.toggle_todo_completion(command.todo_id)
        state = "completed" if todo.completed else "reopened"
        return [f"Todo {todo.id} {state}: {todo.title}"]

    def delete_todo(self, command: TodoRefCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        todo = manager.delete_todo(command.todo_id)
        return [f"Deleted todo {todo.id}: {todo.title}"]

    def search_todos(self, command: TodoSearchCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        matches = manager.search_todos(command.query)
        if not matches:
            return [f"No todos match {command.query!r}."]
        names = {category.id: category.name for category in manager.get_all_categories()}
        return [_format_todo(todo, names) for todo in matches]

    def add_category(self, command: CategoryAddCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        color = command.color or next_available_color(
            category.color for category in manager.get_all_categories()
        )
        category = manager.add_category(CategoryInput(name=command.name, color=color))
        return [f"Added category {category.id}: {category.name} ({category.color})"]

    def list_categories(self, data_path: Path | None) -> list[str]:
        manager = _open_manager(data_path)
        categories = manager.get_all_categories()
        if not categories:
            return ["No categories."]
        return [
            f"{category.id}  {category.name:<20} {category.color}  todos={category.todo_count}"
            for category in categories
        ]

    def update_category(self, command: CategoryUpdateCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        category = _resolve_category(manager, command.category)
        update = CategoryUpdate()
        if command.name is not None:
            update.name = command.name
        if command.color is not None:
            update.color = command.color
        updated = manager.update_category(category.id, update)
        return [f"Updated category {updated.id}: {updated.name} ({updated.color})"]

    def delete_category(self, command: CategoryDeleteCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        category = _resolve_category(manager, command.category)
        target = (
            _resolve_category(manager, command.reassign_to)
            if command.reassign_to is not None
            else None
        )
        moved = category.todo_count
        manager.delete_category(category.id, target.id if target is not None else None)
        if not moved:
            return [f"Deleted category {category.name}."]
        if target is not None:
            return [f"Deleted category {category.name}; moved {moved} todos to {target.name}."]
        return [f"Deleted category {category.name} and its {moved} todos."]

    def stats(self, data_path: Path | None) -> list[str]:
        manager = _open_manager(data_path)
        stats = manager.get_statistics()
        breakdown = " ".join(
            f"{priority.value}={count}" for priority, count in stats.priority_breakdown.items()
        )
        return [
            f"Todos: {stats.total_todos} "
            f"(completed={stats.completed_todos}, pending={stats.pending_todos}, "
            f"overdue={stats.overdue_todos})",
            f"Priorities: {breakdown}",
            f"Categories: {stats.total_categories}",
        ]

    def backup(self, data_path: Path | None) -> list[str]:
        manager = _open_manager(data_path)
        created = manager.store.backup()
        if created is None:
            return ["Nothing to back up."]
        return [f"Backup created: {created}"]

    def export(self, command: ExportCommand) -> list[str]:
        manager = _open_manager(command.data_path)
        target = manager.store.export(command.target)
        return [f"Data exported to {target}"]

    def file_stats(self, data_path: Path | None) -> list[str]:
        settings = Settings.from_env(data_path=data_path)
        manager = TodoManager(settings)
        stats = manager.store.stats()
        if not stats.exists:
            return [
                f"Data file: {settings.store.data_path} (missing)",
                f"Backups: {stats.backup_count}",
            ]
        modified = stats.last_modified.isoformat() if stats.last_modified is not None else "-"
        return [
            f"Data file: {settings.store.data_path}",
            f"Size: {stats.size} bytes",
            f"Last modified: {modified}",
            f"Backups: {stats.backup_count}",
        ]


def _open_manager(data_path: Path | None) -> TodoManager:
    manager = TodoManager(Settings.from_env(data_path=data_path))
    manager.initialize()
    return manager


def _resolve_category(manager: TodoManager, reference: str) -> Category:
    """Find a category by id, then by case-insensitive name."""

    category = manager.get_category_by_id(reference)
    if category is not None:
        return category
    lowered = reference.lower()
    for candidate in manager.get_all_categories():
        if candidate.name.lower() == lowered:
            return candidate
    raise ManagerError(
        f"Category {reference!r} not found",
        ErrorCode.CATEGORY_NOT_FOUND,
        details={"reference": reference},
    )


def _format_todo(todo: Todo, category_names: dict[str, str]) -> str:
    mark = "x" if todo.completed else " "
    due = f" due={todo.due_date.date().isoformat()}" if todo.due_date is not None else ""
    category = category_names.get(todo.category_id, "?")
    return f"[{mark}] {todo.id}  {todo.priority.value:<6} {category}: {todo.title}{due}"
