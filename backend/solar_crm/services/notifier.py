"""
Notification sink for user-facing success/failure messages (toasts).
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

from ..config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass
class Notification:
    """A toast shown to the user."""
    title: str
    description: Optional[str] = None
    variant: str = DEFAULT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Notifier that only logs."""
    if notification.variant == DESTRUCTIVE:
        logger.warning(f"{notification.title}: {notification.description or ''}")
    else:
        logger.info(f"{notification.title}: {notification.description or ''}")


class NotificationCenter:
    """
    Notifier that keeps a bounded history the UI can poll.

    Oldest entries are dropped once the history is full.
    """

    def __init__(self, max_history: Optional[int] = None):
        self._history: Deque[Notification] = deque(
            maxlen=max_history or settings.notifications_history
        )

    def __call__(self, notification: Notification) -> None:
        log_notifier(notification)
        self._history.append(notification)

    def history(self) -> List[Notification]:
        """Notifications from oldest to newest."""
        return list(self._history)

    def latest(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None
