"""Error taxonomy shared by the file store and the coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Stable machine-readable error codes."""

    VALIDATION = "validation_error"
    TODO_NOT_FOUND = "todo_not_found"
    CATEGORY_NOT_FOUND = "category_not_found"
    DUPLICATE_NAME = "duplicate_category_name"
    NOT_INITIALIZED = "not_initialized"
    ALREADY_INITIALIZED = "already_initialized"
    INITIALIZATION = "initialization_error"
    SAVE = "save_error"
    LOAD = "load_error"
    EXPORT = "export_error"
    BACKUP_LOAD = "backup_load_error"
    NO_BACKUP_PATH = "no_backup_path"
    NO_BACKUPS = "no_backups"


@dataclass(slots=True)
class TodoKeeperError(Exception):
    """Base error carrying a code and an optional structured payload."""

    message: str
    code: ErrorCode
    details: object | None = None
    cause: BaseException | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class StoreError(TodoKeeperError):
    """File store failure (save, load, export, backup recovery)."""


@dataclass(slots=True)
class ManagerError(TodoKeeperError):
    """Coordinator failure: bad input, unknown ids or lifecycle misuse."""


def describe(exc: BaseException) -> str:
    """Short human-readable reason used when wrapping a lower-level error."""

    text = str(exc)
    return text or type(exc).__name__
