# aquadash/services/notifications.py
"""
Toast-style notifications.

- SessionFlash - per operator, kept in the session until the next page shows it
- ActivityLog  - shared feed of recent live events (socket side)
- run_action   - call the API, turn ApiError into an error toast, never retry
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, MutableMapping, Optional, Protocol, TypeVar

from aquadash.errors import ApiError

log = logging.getLogger(__name__)

T = TypeVar("T")

SUCCESS = "success"
ERROR = "error"
INFO = "info"

FLASH_KEY = "flash"


@dataclass
class Notification:
    kind: str
    message: str
    at: datetime = field(default_factory=datetime.now)


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None: ...


class SessionFlash:
    """Flash messages stored in a Starlette session dict."""

    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    def notify(self, kind: str, message: str) -> None:
        queue = list(self.session.get(FLASH_KEY, []))
        queue.append({"kind": kind, "message": message})
        self.session[FLASH_KEY] = queue

    def pop_all(self) -> list[dict]:
        return self.session.pop(FLASH_KEY, None) or []


class ActivityLog:
    """Bounded, thread-safe list of the latest notifications."""

    def __init__(self, maxlen: int = 50):
        self._items: deque[Notification] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def notify(self, kind: str, message: str) -> None:
        with self._lock:
            self._items.appendleft(Notification(kind, message))

    def recent(self, limit: int = 10) -> list[Notification]:
        with self._lock:
            return list(self._items)[:limit]


def run_action(
    notifier: Notifier,
    action: Callable[[], T],
    *,
    success: Optional[str] = None,
    fallback: str = "Operation failed",
) -> Optional[T]:
    """
    Run one mutating call.

    On ApiError: error toast with the API message (or `fallback`), returns
    None. Nothing is retried and nothing was applied locally beforehand, so
    there is nothing to roll back.
    """
    try:
        result = action()
    except ApiError as e:
        log.warning("action failed: %s", e.message)
        notifier.notify(ERROR, e.message or fallback)
        return None
    if success:
        notifier.notify(SUCCESS, success)
    return result
