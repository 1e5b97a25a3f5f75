"""Subscription point for storage changes made by other clients.

The core never listens to a transport itself. An adapter (a browser storage
event bridge, a Redis keyspace listener, a test) calls ``publish`` and every
subscribed handler receives the changed key and its new raw value.
"""

from collections.abc import Callable

import structlog

logger = structlog.get_logger()

ChangeHandler = Callable[[str, str | None], None]


class ExternalChangeHub:
    """Fan-out of external storage changes to in-process handlers."""

    def __init__(self) -> None:
        self._handlers: list[ChangeHandler] = []

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, key: str, new_value: str | None) -> None:
        for handler in list(self._handlers):
            try:
                handler(key, new_value)
            except Exception as e:
                logger.error("External change handler failed", key=key, error=str(e))

    def __len__(self) -> int:
        return len(self._handlers)
