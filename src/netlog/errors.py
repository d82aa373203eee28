"""
Store error channel.

Persistence runs in the background, so its failures cannot be raised to
the caller. They are collected here instead; UIs subscribe or poll.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

from .models import utc_now

logger = logging.getLogger(__name__)


@dataclass
class StoreError:
    """A recorded (non-fatal) store failure"""
    operation: str
    message: str
    timestamp: datetime = field(default_factory=utc_now)

    def __str__(self) -> str:
        return self.message


class ErrorFeed:
    """
    Thread-safe history of store errors with subscriber callbacks.

    Usage:
        feed = ErrorFeed()
        feed.subscribe(lambda err: print(err.message))
        feed.publish("save_session", "Failed to save session: disk full")
        for err in feed.drain():
            ...
    """

    def __init__(self, max_history: int = 100):
        self._errors: Deque[StoreError] = deque(maxlen=max_history)
        self._callbacks: List[Callable[[StoreError], None]] = []
        self._lock = threading.Lock()

    def publish(self, operation: str, message: str) -> StoreError:
        error = StoreError(operation=operation, message=message)
        with self._lock:
            self._errors.append(error)
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(error)
            except Exception as e:
                logger.warning(f"Error feed callback failed: {e}")

        return error

    def subscribe(self, callback: Callable[[StoreError], None]) -> None:
        with self._lock:
            self._callbacks.append(callback)

    def unsubscribe(self, callback: Callable[[StoreError], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def drain(self) -> List[StoreError]:
        """Return and forget all recorded errors (oldest first)"""
        with self._lock:
            errors = list(self._errors)
            self._errors.clear()
        return errors

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()

    @property
    def latest(self) -> Optional[StoreError]:
        with self._lock:
            return self._errors[-1] if self._errors else None

    @property
    def errors(self) -> List[StoreError]:
        with self._lock:
            return list(self._errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)
