from __future__ import annotations

import logging

from ...domain.models import NotificationPayload

LOGGER = logging.getLogger(__name__)


class LogNotifier:
    def __init__(self, *, level: int = logging.INFO) -> None:
        self._level = level

    def notify(self, payload: NotificationPayload) -> None:
        LOGGER.log(
            self._level,
            "%s: %s [icon=%s, target=%s]",
            payload.title,
            payload.body,
            payload.icon,
            payload.target,
        )
