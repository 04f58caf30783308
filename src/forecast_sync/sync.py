from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable

from .adapters.notifiers import Notifier, NotifierError
from .adapters.weather import FetchError, ForecastFetcher
from .domain.dates import utc_now
from .domain.models import ForecastBatch, SyncOutcome, SyncResult
from .notifications import build_notification, should_notify
from .storage.forecast_store import ForecastStore, StoreError
from .storage.state import PreferencesStore

LOGGER = logging.getLogger(__name__)


class SyncOrchestrator:
    """Fetch, replace the stored forecast, then maybe notify.

    At most one sync runs per orchestrator; a concurrent caller blocks until
    the in-flight sync finishes and then runs its own. Expected failures
    (``FetchError``, ``StoreError``, ``NotifierError``) end the attempt and are
    reported in the returned ``SyncResult``; anything else propagates.
    """

    def __init__(
        self,
        *,
        fetcher: ForecastFetcher,
        store: ForecastStore,
        preferences: PreferencesStore,
        notifier: Notifier,
        notification_title: str = "Weather",
        units: str = "metric",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._preferences = preferences
        self._notifier = notifier
        self._notification_title = notification_title
        self._units = units
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def sync(self) -> SyncResult:
        with self._lock:
            result = self._run()
            self._record(result)
        return result

    def _run(self) -> SyncResult:
        started_at = self._clock()

        try:
            batch = self._fetcher.fetch()
        except FetchError as exc:
            LOGGER.warning("Forecast fetch failed (%s): %s", exc.kind, exc)
            return self._result(SyncOutcome.FAILED, started_at, error=exc, error_kind=exc.kind)

        if batch.is_empty:
            LOGGER.warning("Forecast fetch returned no records; keeping stored forecast")
            return self._result(SyncOutcome.EMPTY, started_at)

        try:
            self._store.replace_all(batch)
        except StoreError as exc:
            LOGGER.exception("Forecast store replace failed")
            return self._result(SyncOutcome.FAILED, started_at, error=exc, error_kind="store")

        LOGGER.info("Forecast store replaced with %d records from %s", len(batch), batch.first.date)
        notified = self._maybe_notify(batch)
        return self._result(
            SyncOutcome.REPLACED,
            started_at,
            record_count=len(batch),
            notified=notified,
        )

    def _maybe_notify(self, batch: ForecastBatch) -> bool:
        now = self._clock()
        try:
            state = self._preferences.load_sync_state()
        except StoreError:
            LOGGER.exception("Unable to load sync state; skipping notification")
            return False

        if not should_notify(state, now):
            LOGGER.debug("Notification suppressed (enabled=%s)", state.notifications_enabled)
            return False

        payload = build_notification(batch.first, title=self._notification_title, units=self._units)
        try:
            self._notifier.notify(payload)
        except NotifierError as exc:
            LOGGER.warning("Forecast notification failed: %s", exc)
            return False

        try:
            self._preferences.record_notification(now)
        except StoreError:
            LOGGER.exception("Notification delivered but its timestamp could not be stored")
        return True

    def _result(
        self,
        outcome: SyncOutcome,
        started_at: datetime,
        *,
        record_count: int = 0,
        notified: bool = False,
        error: Exception | None = None,
        error_kind: str | None = None,
    ) -> SyncResult:
        return SyncResult(
            outcome=outcome,
            started_at=started_at,
            finished_at=self._clock(),
            record_count=record_count,
            notified=notified,
            error_kind=error_kind,
            error_message=str(error) if error is not None else None,
        )

    def _record(self, result: SyncResult) -> None:
        try:
            self._preferences.record_sync_result(result)
        except StoreError:
            LOGGER.exception("Unable to record sync result")
