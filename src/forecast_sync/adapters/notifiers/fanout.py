from __future__ import annotations

import logging
from typing import Sequence

from ...domain.models import NotificationPayload
from .base import Notifier, NotifierError

LOGGER = logging.getLogger(__name__)


class FanoutNotifier:
    """Delivers to every channel; fails only when no channel delivered."""

    def __init__(self, notifiers: Sequence[Notifier]) -> None:
        if not notifiers:
            raise ValueError("FanoutNotifier needs at least one notifier")
        self._notifiers = list(notifiers)

    def notify(self, payload: NotificationPayload) -> None:
        failures: list[str] = []
        for notifier in self._notifiers:
            name = type(notifier).__name__
            try:
                notifier.notify(payload)
            except NotifierError as exc:
                LOGGER.warning("Notifier '%s' failed: %s", name, exc)
                failures.append(f"{name}: {exc}")

        if len(failures) == len(self._notifiers):
            raise NotifierError("; ".join(failures))
        if failures:
            LOGGER.warning(
                "Notification delivered on %d of %d channels",
                len(self._notifiers) - len(failures),
                len(self._notifiers),
            )
