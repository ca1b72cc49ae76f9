"""CLI entrypoint for todo-keeper."""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import rich_click as click

from todo_keeper import __version__
from todo_keeper.controllers import (
    CategoryAddCommand,
    CategoryDeleteCommand,
    CategoryUpdateCommand,
    ExportCommand,
    TodoAddCommand,
    TodoCliController,
    TodoListCommand,
    TodoRefCommand,
    TodoSearchCommand,
)
from todo_keeper.domain.models import Priority
from todo_keeper.errors import TodoKeeperError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = TodoCliController()
_PRIORITY_CHOICES = [item.value for item in Priority]

data_path_option = click.option(
    "--data-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="JSON data file. Defaults to TODO_KEEPER_DATA_PATH or data/todos.json.",
)


@click.group()
@click.version_option(version=__version__, prog_name="todo-keeper")
@click.option(
    "--log-level",
    envvar="TODO_KEEPER_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Diagnostics level written to stderr.",
)
def todo_keeper(log_level: str) -> None:
    """Todo keeper CLI."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@todo_keeper.group()
def todo() -> None:
    """Todo commands."""


@todo.command("add")
@data_path_option
@click.argument("title")
@click.option("--category", "-c", required=True, help="Category id or name.")
@click.option(
    "--priority",
    "-p",
    type=click.Choice(_PRIORITY_CHOICES),
    default=Priority.MEDIUM.value,
    show_default=True,
)
@click.option("--description", "-d", default=None, help="Optional longer description.")
@click.option("--due", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Due date.")
def todo_add(
    data_path: Path | None,
    title: str,
    category: str,
    priority: str,
    description: str | None,
    due: datetime | None,
) -> None:
    """Add a todo to a category."""

    _run(
        lambda: CONTROLLER.add_todo(
            TodoAddCommand(
                data_path=data_path,
                title=title,
                category=category,
                priority=priority,
                description=description,
                due=due.date() if due is not None else None,
            ),
        ),
    )


@todo.command("list")
@data_path_option
@click.option("--category", "-c", default=None, help="Only todos of this category (id or name).")
@click.option(
    "--status",
    type=click.Choice(["all", "pending", "completed"]),
    default="all",
    show_default=True,
)
@click.option("--priority", "-p", type=click.Choice(_PRIORITY_CHOICES), default=None)
@click.option("--overdue", "overdue_only", is_flag=True, help="Only overdue todos.")
def todo_list(
    data_path: Path | None,
    category: str | None,
    status: str,
    priority: str | None,
    overdue_only: bool,
) -> None:
    """List todos, open and high priority first."""

    _run(
        lambda: CONTROLLER.list_todos(
            TodoListCommand(
                data_path=data_path,
                category=category,
                status=status,
                priority=priority,
                overdue_only=overdue_only,
            ),
        ),
    )


@todo.command("done")
@data_path_option
@click.argument("todo_id")
def todo_done(data_path: Path | None, todo_id: str) -> None:
    """Toggle completion of a todo."""

    _run(lambda: CONTROLLER.toggle_todo(TodoRefCommand(data_path=data_path, todo_id=todo_id)))


@todo.command("delete")
@data_path_option
@click.argument("todo_id")
def todo_delete(data_path: Path | None, todo_id: str) -> None:
    """Delete a todo."""

    _run(lambda: CONTROLLER.delete_todo(TodoRefCommand(data_path=data_path, todo_id=todo_id)))


@todo.command("search")
@data_path_option
@click.argument("query")
def todo_search(data_path: Path | None, query: str) -> None:
    """Case-sensitive search in titles and descriptions."""

    _run(lambda: CONTROLLER.search_todos(TodoSearchCommand(data_path=data_path, query=query)))


@todo_keeper.group()
def category() -> None:
    """Category commands."""


@category.command("add")
@data_path_option
@click.argument("name")
@click.option("--color", default=None, help="Hex colour; the next free palette colour if omitted.")
def category_add(data_path: Path | None, name: str, color: str | None) -> None:
    """Add a category."""

    _run(
        lambda: CONTROLLER.add_category(
            CategoryAddCommand(data_path=data_path, name=name, color=color),
        ),
    )


@category.command("list")
@data_path_option
def category_list(data_path: Path | None) -> None:
    """List categories with their todo counts."""

    _run(lambda: CONTROLLER.list_categories(data_path))


@category.command("update")
@data_path_option
@click.argument("reference")
@click.option("--name", default=None, help="New name.")
@click.option("--color", default=None, help="New hex colour.")
def category_update(
    data_path: Path | None,
    reference: str,
    name: str | None,
    color: str | None,
) -> None:
    """Rename or recolour a category."""

    _run(
        lambda: CONTROLLER.update_category(
            CategoryUpdateCommand(
                data_path=data_path,
                category=reference,
                name=name,
                color=color,
            ),
        ),
    )


@category.command("delete")
@data_path_option
@click.argument("reference")
@click.option(
    "--reassign-to",
    default=None,
    help="Move the category's todos here instead of deleting them.",
)
def category_delete(data_path: Path | None, reference: str, reassign_to: str | None) -> None:
    """Delete a category and delete or move its todos."""

    _run(
        lambda: CONTROLLER.delete_category(
            CategoryDeleteCommand(
                data_path=data_path,
                category=reference,
                reassign_to=reassign_to,
            ),
        ),
    )


@todo_keeper.command("stats")
@data_path_option
def stats(data_path: Path | None) -> None:
    """Show todo counts by status and priority."""

    _run(lambda: CONTROLLER.stats(data_path))


@todo_keeper.command("backup")
@data_path_option
def backup(data_path: Path | None) -> None:
    """Back up the data file now."""

    _run(lambda: CONTROLLER.backup(data_path))


@todo_keeper.command("export")
@data_path_option
@click.argument("target", type=click.Path(path_type=Path, dir_okay=False))
def export(data_path: Path | None, target: Path) -> None:
    """Write a readable JSON snapshot with summary counts."""

    _run(lambda: CONTROLLER.export(ExportCommand(data_path=data_path, target=target)))


@todo_keeper.command("file-stats")
@data_path_option
def file_stats(data_path: Path | None) -> None:
    """Show data file size, modification time and backup count."""

    _run(lambda: CONTROLLER.file_stats(data_path))


def _run(action: Callable[[], list[str]]) -> None:
    try:
        lines = action()
    except TodoKeeperError as error:
        raise click.ClickException(f"{error.message} ({error.code.value})") from error
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    todo_keeper()
