from __future__ import annotations

from pathlib import Path

from ...domain.dates import utc_now
from ...domain.models import NotificationPayload
from ...storage.forecast_store import StoreError
from ...storage.state import LATEST_NOTIFICATION_KEY, get_state_entry, set_state_entry
from .base import NotifierError


class FeedNotifier:
    """Keeps the most recent notification where the API can serve it."""

    def __init__(self, *, db_path: Path) -> None:
        self._db_path = Path(db_path)

    def notify(self, payload: NotificationPayload) -> None:
        delivered_at = utc_now()
        entry = {
            **payload.model_dump(mode="json"),
            "delivered_at_utc": delivered_at.isoformat(),
        }
        try:
            set_state_entry(self._db_path, LATEST_NOTIFICATION_KEY, entry, updated_at=delivered_at)
        except StoreError as exc:
            raise NotifierError("Unable to store notification in the feed") from exc

    def latest(self) -> dict | None:
        entry = get_state_entry(self._db_path, LATEST_NOTIFICATION_KEY)
        if entry is None or not isinstance(entry.value, dict):
            return None
        return entry.value
