"""Progress fan-out to subscribed observers."""

from __future__ import annotations

import logging
from threading import Lock

from .models import ProgressObserver


class ProgressBroadcaster:
    """Best-effort publisher of status messages.

    Observers that report themselves closed, or whose ``send`` raises, are
    dropped from the registry. Delivery is never retried.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._observers: set[ProgressObserver] = set()
        self._lock = Lock()

    def subscribe(self, observer: ProgressObserver) -> None:
        with self._lock:
            self._observers.add(observer)

    def unsubscribe(self, observer: ProgressObserver) -> None:
        with self._lock:
            self._observers.discard(observer)

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def publish(self, message: str) -> None:
        """Send ``message`` to every open observer."""
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            if not observer.is_open():
                self.unsubscribe(observer)
                continue
            try:
                observer.send(message)
            except Exception as exc:
                self._logger.debug("Dropping observer after send failure: %s", exc)
                self.unsubscribe(observer)


class LoggingObserver:
    """Observer writing each message to a logger, used by the CLI."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def is_open(self) -> bool:
        return True

    def send(self, message: str) -> None:
        self._logger.info(message)
