"""Runtime configuration for the file store and the coordinator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_ENV_PREFIX = "TODO_KEEPER_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class StoreSettings:
    """File store settings: data file location and backup policy."""

    data_path: Path = Path("data/todos.json")
    backup_path: Path | None = Path("data/backups")
    auto_backup: bool = True
    max_backups: int = 5

    def validate(self) -> None:
        """Raise ``ValueError`` when the settings cannot be used."""

        if not str(self.data_path).strip() or self.data_path == Path():
            raise ValueError("TODO_KEEPER_DATA_PATH must not be empty.")
        if self.max_backups <= 0:
            raise ValueError("TODO_KEEPER_MAX_BACKUPS must be a positive integer.")
        if self.backup_path is not None and self.backup_path == self.data_path:
            raise ValueError("TODO_KEEPER_BACKUP_PATH must differ from TODO_KEEPER_DATA_PATH.")


@dataclass(slots=True)
class Settings:
    """Coordinator settings; embeds the store settings it passes down."""

    store: StoreSettings = field(default_factory=StoreSettings)
    auto_save: bool = True
    create_default_categories: bool = True

    @classmethod
    def from_env(cls, data_path: Path | None = None) -> Settings:
        """Load settings from ``TODO_KEEPER_*`` environment variables."""

        resolved_data_path = data_path or Path(
            os.getenv(f"{_ENV_PREFIX}DATA_PATH", "data/todos.json"),
        )
        settings = cls(
            store=StoreSettings(
                data_path=resolved_data_path,
                backup_path=_backup_path_from_env(resolved_data_path),
                auto_backup=_env_bool(f"{_ENV_PREFIX}AUTO_BACKUP", default=True),
                max_backups=int(os.getenv(f"{_ENV_PREFIX}MAX_BACKUPS", "5")),
            ),
            auto_save=_env_bool(f"{_ENV_PREFIX}AUTO_SAVE", default=True),
            create_default_categories=_env_bool(
                f"{_ENV_PREFIX}CREATE_DEFAULT_CATEGORIES",
                default=True,
            ),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        self.store.validate()


def _backup_path_from_env(data_path: Path) -> Path | None:
    """Unset means a ``backups`` directory next to the data file; blank disables backups."""

    raw = os.getenv(f"{_ENV_PREFIX}BACKUP_PATH")
    if raw is None:
        return data_path.parent / "backups"
    if not raw.strip():
        return None
    return Path(raw)


def _env_bool(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}.")
