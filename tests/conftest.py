"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from todo_keeper.config import Settings, StoreSettings
from todo_keeper.coordinator.manager import TodoManager
from todo_keeper.storage.file_store import JsonFileStore


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep TODO_KEEPER_* variables from the developer shell out of tests."""
    for name in list(os.environ):
        if name.startswith("TODO_KEEPER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def store_settings(tmp_path: Path) -> StoreSettings:
    return StoreSettings(
        data_path=tmp_path / "data" / "todos.json",
        backup_path=tmp_path / "data" / "backups",
        auto_backup=True,
        max_backups=3,
    )


@pytest.fixture()
def store(store_settings: StoreSettings) -> JsonFileStore:
    return JsonFileStore(store_settings)


@pytest.fixture()
def manager(store_settings: StoreSettings) -> TodoManager:
    """Initialized manager without starter categories."""
    todo_manager = TodoManager(Settings(store=store_settings, create_default_categories=False))
    todo_manager.initialize()
    return todo_manager
