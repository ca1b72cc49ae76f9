from __future__ import annotations

import json
import re
from pathlib import Path

import allure
from click.testing import CliRunner

from todo_keeper.main import todo_keeper

pytestmark = [
    allure.epic("CLI"),
    allure.feature("Todo & Category Commands"),
]


def _invoke(data_path: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(todo_keeper, [*args, "--data-path", str(data_path)])


def test_first_run_lists_starter_categories(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "todos.json", "category", "list")

    assert result.exit_code == 0
    for name in ("Personal", "Work", "Shopping", "Health"):
        assert name in result.output
    assert (tmp_path / "todos.json").exists()


def test_todo_lifecycle(tmp_path: Path) -> None:
    data_path = tmp_path / "todos.json"

    added = _invoke(
        data_path,
        "todo",
        "add",
        "Buy milk",
        "--category",
        "personal",
        "--priority",
        "high",
        "--due",
        "2030-01-15",
    )
    assert added.exit_code == 0
    assert "to Personal: Buy milk" in added.output
    match = re.search(r"Added todo (\S+) to", added.output)
    assert match is not None
    todo_id = match.group(1)

    listed = _invoke(data_path, "todo", "list", "--status", "pending")
    assert listed.exit_code == 0
    assert "Buy milk" in listed.output
    assert "due=2030-01-15" in listed.output

    done = _invoke(data_path, "todo", "done", todo_id)
    assert done.exit_code == 0
    assert f"Todo {todo_id} completed: Buy milk" in done.output

    stats = _invoke(data_path, "stats")
    assert stats.exit_code == 0
    assert "Todos: 1 (completed=1, pending=0, overdue=0)" in stats.output
    assert "Priorities: high=1 medium=0 low=0" in stats.output
    assert "Categories: 4" in stats.output

    deleted = _invoke(data_path, "category", "delete", "Personal")
    assert deleted.exit_code == 0
    assert "Deleted category Personal and its 1 todos." in deleted.output

    empty = _invoke(data_path, "todo", "list")
    assert "No todos found." in empty.output


def test_category_delete_with_reassign(tmp_path: Path) -> None:
    data_path = tmp_path / "todos.json"
    _invoke(data_path, "todo", "add", "Report", "-c", "Work")

    result = _invoke(data_path, "category", "delete", "Work", "--reassign-to", "Personal")

    assert result.exit_code == 0
    assert "moved 1 todos to Personal" in result.output
    listed = _invoke(data_path, "todo", "list", "--category", "Personal")
    assert "Personal: Report" in listed.output


def test_category_add_and_update(tmp_path: Path) -> None:
    data_path = tmp_path / "todos.json"

    added = _invoke(data_path, "category", "add", "Garden")
    assert added.exit_code == 0
    assert "Garden (#9b59b6)" in added.output

    updated = _invoke(data_path, "category", "update", "garden", "--name", "Yard", "--color", "abc")
    assert updated.exit_code == 0
    assert "Yard (#abc)" in updated.output


def test_duplicate_category_is_reported(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "todos.json", "category", "add", "work")

    assert result.exit_code == 1
    assert "duplicate_category_name" in result.output


def test_unknown_todo_is_reported(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "todos.json", "todo", "done", "nope")

    assert result.exit_code == 1
    assert "todo_not_found" in result.output


def test_search_is_case_sensitive(tmp_path: Path) -> None:
    data_path = tmp_path / "todos.json"
    _invoke(data_path, "todo", "add", "Buy milk", "-c", "Shopping", "-d", "Two litres")

    assert "Buy milk" in _invoke(data_path, "todo", "search", "litres").output
    assert "No todos match 'Litres'." in _invoke(data_path, "todo", "search", "Litres").output


def test_backup_export_and_file_stats(tmp_path: Path) -> None:
    data_path = tmp_path / "todos.json"

    missing = _invoke(data_path, "file-stats")
    assert missing.exit_code == 0
    assert "(missing)" in missing.output

    _invoke(data_path, "todo", "add", "Buy milk", "-c", "Shopping")

    backup = _invoke(data_path, "backup")
    assert backup.exit_code == 0
    assert "Backup created:" in backup.output

    target = tmp_path / "export.json"
    exported = _invoke(data_path, "export", str(target))
    assert exported.exit_code == 0
    assert "Data exported to" in exported.output
    assert json.loads(target.read_text("utf-8"))["summary"]["totalTodos"] == 1

    present = _invoke(data_path, "file-stats")
    assert "Size:" in present.output
    assert "Backups: 2" in present.output


def test_invalid_environment_is_reported(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TODO_KEEPER_MAX_BACKUPS", "0")

    result = _invoke(tmp_path / "todos.json", "category", "list")

    assert result.exit_code == 1
    assert "TODO_KEEPER_MAX_BACKUPS" in result.output
