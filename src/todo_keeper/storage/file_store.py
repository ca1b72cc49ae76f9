"""JSON file store with atomic replace, rolling backups and recovery."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from contextlib import suppress
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from todo_keeper.config import StoreSettings
from todo_keeper.domain.models import Category, RecordSet, Todo, utc_now
from todo_keeper.errors import ErrorCode, StoreError, describe
from todo_keeper.storage.codec import (
    build_envelope,
    category_to_dict,
    dumps,
    loads,
    records_from_envelope,
    todo_to_dict,
)
from todo_keeper.storage.schema import validate_envelope

logger = logging.getLogger(__name__)

DATA_VERSION = "1.0.0"
BACKUP_PREFIX = "todos-backup-"
BACKUP_SUFFIX = ".json"
_BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"
_READ_ERRORS = (OSError, ValueError, TypeError, KeyError)


@dataclass(slots=True)
class FileStats:
    """Snapshot of the data file and backup directory."""

    exists: bool = False
    size: int | None = None
    last_modified: datetime | None = None
    backup_count: int = 0


class JsonFileStore:
    """Owns the data file and its backup directory.

    The store is a plain I/O layer: it receives record sets, never holds
    them between calls and never calls back into its user.
    """

    def __init__(self, settings: StoreSettings) -> None:
        self.settings = settings

    @property
    def data_path(self) -> Path:
        return self.settings.data_path

    @property
    def backup_dir(self) -> Path | None:
        return self.settings.backup_path

    @property
    def temp_path(self) -> Path:
        return self.data_path.with_name(f"{self.data_path.name}.tmp")

    def save(self, todos: Iterable[Todo], categories: Iterable[Category]) -> None:
        """Write both record sets, replacing the data file atomically.

        The previous file is backed up first when auto-backup is on; a
        failed backup is logged and does not stop the save.
        """

        if self.settings.auto_backup:
            self._create_backup()

        records = RecordSet(todos=list(todos), categories=list(categories))
        try:
            payload = build_envelope(records, version=DATA_VERSION, last_modified=utc_now())
            validate_envelope(payload)
            text = dumps(payload)
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            _write_synced(self.temp_path, text)
            os.replace(self.temp_path, self.data_path)
        except (OSError, ValueError, TypeError) as exc:
            with suppress(OSError):
                self.temp_path.unlink(missing_ok=True)
            raise StoreError(
                f"Failed to save data: {describe(exc)}",
                ErrorCode.SAVE,
                details={"path": str(self.data_path)},
                cause=exc,
            ) from exc

        logger.info(
            "Saved %d todos and %d categories to %s",
            len(records.todos),
            len(records.categories),
            self.data_path,
        )

    def load(self) -> RecordSet:
        """Read both record sets; a missing or blank file is a first run.

        Read, parse or structure failures fall back to the newest backup
        when auto-backup is on.
        """

        try:
            records = self._read_records(self.data_path)
        except _READ_ERRORS as exc:
            logger.error("Failed to load %s: %s", self.data_path, describe(exc))
            if not self.settings.auto_backup:
                raise StoreError(
                    f"Failed to load data: {describe(exc)}",
                    ErrorCode.LOAD,
                    details={"path": str(self.data_path)},
                    cause=exc,
                ) from exc
            logger.warning("Attempting to load from backup")
            try:
                return self.load_from_backup()
            except StoreError as recovery_error:
                raise StoreError(
                    f"Failed to load data: {describe(exc)} "
                    f"(backup recovery failed: {recovery_error.message})",
                    ErrorCode.LOAD,
                    details={
                        "path": str(self.data_path),
                        "recovery_code": recovery_error.code.value,
                        "recovery_error": recovery_error.message,
                    },
                    cause=exc,
                ) from exc

        logger.info(
            "Loaded %d todos and %d categories",
            len(records.todos),
            len(records.categories),
        )
        return records

    def load_from_backup(self) -> RecordSet:
        """Read the newest backup snapshot."""

        if self.backup_dir is None:
            raise StoreError("No backup path configured", ErrorCode.NO_BACKUP_PATH)
        try:
            backups = self.list_backups()
        except OSError as exc:
            raise StoreError(
                f"Failed to list backups: {describe(exc)}",
                ErrorCode.BACKUP_LOAD,
                details={"backup_dir": str(self.backup_dir)},
                cause=exc,
            ) from exc
        if not backups:
            raise StoreError(
                "No backup files found",
                ErrorCode.NO_BACKUPS,
                details={"backup_dir": str(self.backup_dir)},
            )

        latest = backups[0]
        logger.warning("Loading from backup: %s", latest)
        try:
            return self._read_records(latest)
        except _READ_ERRORS as exc:
            raise StoreError(
                f"Failed to load from backup: {describe(exc)}",
                ErrorCode.BACKUP_LOAD,
                details={"backup": str(latest)},
                cause=exc,
            ) from exc

    def backup(self) -> Path | None:
        """Back up the data file now; returns the new backup path if one was made."""

        return self._create_backup()

    def list_backups(self) -> list[Path]:
        """Backup files, newest first."""

        if self.backup_dir is None or not self.backup_dir.is_dir():
            return []
        backups = [
            path
            for path in self.backup_dir.iterdir()
            if path.name.startswith(BACKUP_PREFIX) and path.name.endswith(BACKUP_SUFFIX)
        ]
        return sorted(backups, key=lambda path: path.name, reverse=True)

    def stats(self) -> FileStats:
        """Data file presence, size and mtime plus backup count; never raises."""

        try:
            stats = FileStats(backup_count=len(self.list_backups()))
            if self.data_path.is_file():
                file_stat = self.data_path.stat()
                stats.exists = True
                stats.size = file_stat.st_size
                stats.last_modified = datetime.fromtimestamp(file_stat.st_mtime, tz=UTC)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error getting file stats: %s", exc)
            return FileStats()
        return stats

    def export(self, path: Path) -> Path:
        """Write a readable snapshot with summary counts to ``path``."""

        try:
            records = self.load()
            document: dict[str, Any] = {
                "exportDate": utc_now().isoformat(),
                "summary": {
                    "totalTodos": len(records.todos),
                    "completedTodos": sum(1 for todo in records.todos if todo.completed),
                    "totalCategories": len(records.categories),
                },
                "categories": [category_to_dict(category) for category in records.categories],
                "todos": [todo_to_dict(todo) for todo in records.todos],
            }
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dumps(document), "utf-8")
        except (StoreError, OSError, ValueError, TypeError) as exc:
            raise StoreError(
                f"Failed to export data: {describe(exc)}",
                ErrorCode.EXPORT,
                details={"path": str(path)},
                cause=exc,
            ) from exc

        logger.info("Data exported to %s", path)
        return path

    def _read_records(self, path: Path) -> RecordSet:
        if not path.exists():
            logger.info("No data file at %s, starting empty", path)
            return RecordSet()
        text = path.read_text("utf-8")
        if not text.strip():
            logger.info("Data file %s is empty, starting empty", path)
            return RecordSet()
        payload = loads(text)
        validate_envelope(payload)
        return records_from_envelope(_migrate(payload))

    def _create_backup(self) -> Path | None:
        if self.backup_dir is None or not self.data_path.is_file():
            return None
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            target = _next_backup_path(self.backup_dir)
            shutil.copy2(self.data_path, target)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to create backup: %s", exc)
            return None

        logger.info("Backup created: %s", target)
        self._rotate_backups()
        return target

    def _rotate_backups(self) -> None:
        try:
            backups = self.list_backups()
        except OSError as exc:
            logger.warning("Failed to list backups for cleanup: %s", exc)
            return
        for stale in backups[self.settings.max_backups :]:
            try:
                stale.unlink()
            except OSError as exc:
                logger.warning("Failed to remove old backup %s: %s", stale.name, exc)
            else:
                logger.info("Removed old backup: %s", stale.name)


def _next_backup_path(backup_dir: Path) -> Path:
    # Names sort chronologically; bump by a microsecond on collision.
    stamp = utc_now()
    while True:
        name = f"{BACKUP_PREFIX}{stamp.strftime(_BACKUP_TIMESTAMP_FORMAT)}{BACKUP_SUFFIX}"
        target = backup_dir / name
        if not target.exists():
            return target
        stamp += timedelta(microseconds=1)


def _migrate(payload: dict[str, Any]) -> dict[str, Any]:
    if payload["version"] != DATA_VERSION:
        logger.warning("Unknown data version: %s, attempting to use as-is", payload["version"])
    return payload


def _write_synced(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text)
        handle.flush()
        os.fsync(handle.fileno())
