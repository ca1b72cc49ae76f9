"""Change notification registry for coordinator observers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TodoEvent(str, Enum):
    """Events emitted by the coordinator after a change is applied."""

    TODO_ADDED = "todo-added"
    TODO_UPDATED = "todo-updated"
    TODO_DELETED = "todo-deleted"
    CATEGORY_ADDED = "category-added"
    CATEGORY_UPDATED = "category-updated"
    CATEGORY_DELETED = "category-deleted"
    DATA_LOADED = "data-loaded"
    DATA_SAVED = "data-saved"


Listener = Callable[[TodoEvent, object], None]


@dataclass(slots=True, frozen=True, eq=False)
class Subscription:
    """Handle returned by ``subscribe``; compared by identity."""

    listener: Listener


class EventRegistry:
    """Ordered subscriber list with per-listener failure isolation."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Listener) -> Subscription:
        subscription = Subscription(listener=listener)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Drop one subscription; returns False if it was not registered."""

        for index, current in enumerate(self._subscriptions):
            if current is subscription:
                del self._subscriptions[index]
                return True
        return False

    def emit(self, event: TodoEvent, payload: object = None) -> None:
        """Deliver to every subscriber; a failing listener is logged and skipped."""

        for subscription in list(self._subscriptions):
            try:
                subscription.listener(event, payload)
            except Exception:  # noqa: BLE001
                logger.exception("Listener failed while handling %s", event.value)
