from __future__ import annotations

from typing import Protocol

from ...domain.models import NotificationPayload


class NotifierError(RuntimeError):
    """Raised when a notification could not be delivered."""


class Notifier(Protocol):
    def notify(self, payload: NotificationPayload) -> None:
        """Deliver the payload or raise NotifierError."""
