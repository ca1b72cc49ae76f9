from __future__ import annotations

from pathlib import Path

import allure
import pytest

from todo_keeper.config import Settings, StoreSettings

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Settings & Environment"),
]


def test_defaults() -> None:
    settings = Settings.from_env()

    assert settings.store.data_path == Path("data/todos.json")
    assert settings.store.backup_path == Path("data/backups")
    assert settings.store.auto_backup is True
    assert settings.store.max_backups == 5
    assert settings.auto_save is True
    assert settings.create_default_categories is True


def test_from_env_reads_every_variable(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODO_KEEPER_DATA_PATH", str(tmp_path / "todos.json"))
    monkeypatch.setenv("TODO_KEEPER_BACKUP_PATH", str(tmp_path / "snapshots"))
    monkeypatch.setenv("TODO_KEEPER_AUTO_BACKUP", "no")
    monkeypatch.setenv("TODO_KEEPER_MAX_BACKUPS", "9")
    monkeypatch.setenv("TODO_KEEPER_AUTO_SAVE", "0")
    monkeypatch.setenv("TODO_KEEPER_CREATE_DEFAULT_CATEGORIES", "False")

    settings = Settings.from_env()

    assert settings.store.data_path == tmp_path / "todos.json"
    assert settings.store.backup_path == tmp_path / "snapshots"
    assert settings.store.auto_backup is False
    assert settings.store.max_backups == 9
    assert settings.auto_save is False
    assert settings.create_default_categories is False


def test_backup_dir_defaults_next_to_explicit_data_path(tmp_path: Path) -> None:
    settings = Settings.from_env(data_path=tmp_path / "store" / "todos.json")
    assert settings.store.backup_path == tmp_path / "store" / "backups"


def test_blank_backup_path_disables_backups(monkeypatch) -> None:
    monkeypatch.setenv("TODO_KEEPER_BACKUP_PATH", " ")
    assert Settings.from_env().store.backup_path is None


def test_invalid_boolean_flag_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("TODO_KEEPER_AUTO_SAVE", "sometimes")

    with pytest.raises(ValueError, match="TODO_KEEPER_AUTO_SAVE must be a boolean flag"):
        Settings.from_env()


def test_validate_rejects_non_positive_max_backups() -> None:
    settings = Settings(store=StoreSettings(max_backups=0))

    with pytest.raises(ValueError, match="MAX_BACKUPS"):
        settings.validate()


def test_validate_rejects_backup_dir_equal_to_data_file() -> None:
    settings = StoreSettings(data_path=Path("todos.json"), backup_path=Path("todos.json"))

    with pytest.raises(ValueError, match="must differ"):
        settings.validate()


def test_validate_rejects_empty_data_path(monkeypatch) -> None:
    monkeypatch.setenv("TODO_KEEPER_DATA_PATH", "")

    with pytest.raises(ValueError, match="DATA_PATH must not be empty"):
        Settings.from_env()
