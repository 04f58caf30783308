from __future__ import annotations

import logging
import socket
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import tzinfo
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from .domain.dates import today
from .domain.models import SyncResult
from .storage.forecast_store import ForecastStore, StoreError
from .sync import SyncOrchestrator

LOGGER = logging.getLogger(__name__)

SYNC_JOB_ID = "forecast-sync"
SYNC_INTERVAL_HOURS = 3
SYNC_INTERVAL_SECONDS = SYNC_INTERVAL_HOURS * 60 * 60
SYNC_FLEX_SECONDS = SYNC_INTERVAL_SECONDS // 3
NETWORK_PROBE_HOST = "api.openweathermap.org"
NETWORK_PROBE_PORT = 443
NETWORK_PROBE_TIMEOUT_SECONDS = 3


def is_network_available(
    host: str = NETWORK_PROBE_HOST,
    port: int = NETWORK_PROBE_PORT,
    *,
    timeout: float = NETWORK_PROBE_TIMEOUT_SECONDS,
) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class RecurrenceScheduler:
    """Owns the recurring sync trigger and the one-shot bootstrap check.

    Construct one per process and hand it to every trigger source.
    ``initialize`` only does work the first time it is called.
    """

    def __init__(
        self,
        *,
        orchestrator: SyncOrchestrator,
        store: ForecastStore,
        timezone: tzinfo,
        require_network: bool = True,
        network_check: Callable[[], bool] = is_network_available,
        scheduler: BackgroundScheduler | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._store = store
        self._timezone = timezone
        self._require_network = require_network
        self._network_check = network_check
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone)
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="forecast-sync")
        self._init_lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def initialize(self) -> Future[bool] | None:
        """Register the recurring job and submit the bootstrap check.

        Returns a future resolving to whether the bootstrap check started a
        sync, or ``None`` when the scheduler was already initialized.
        """
        with self._init_lock:
            if self._initialized:
                return None
            self._initialized = True

            self._register_recurring_job()
            if not self._scheduler.running:
                self._scheduler.start()
            return self._executor.submit(self._bootstrap)

    def _register_recurring_job(self) -> None:
        self._scheduler.add_job(
            self.run_scheduled_sync,
            "interval",
            seconds=SYNC_INTERVAL_SECONDS,
            jitter=SYNC_FLEX_SECONDS,
            id=SYNC_JOB_ID,
            name="Forecast sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=SYNC_FLEX_SECONDS,
        )
        LOGGER.info(
            "Registered '%s' every %dh with up to %ds jitter",
            SYNC_JOB_ID,
            SYNC_INTERVAL_HOURS,
            SYNC_FLEX_SECONDS,
        )

    def _bootstrap(self) -> bool:
        try:
            has_data = self._store.has_any_from(today(self._timezone))
        except StoreError:
            LOGGER.exception("Bootstrap check could not read the forecast store")
            has_data = False

        if has_data:
            LOGGER.info("Bootstrap check found a current forecast; waiting for the next trigger")
            return False

        LOGGER.info("Bootstrap check found no forecast for today; syncing now")
        try:
            self._orchestrator.sync()
        except Exception:
            LOGGER.exception("Bootstrap sync failed")
        return True

    def run_scheduled_sync(self) -> SyncResult | None:
        if self._require_network and not self._network_check():
            LOGGER.warning("Network unavailable; skipping scheduled forecast sync")
            return None
        try:
            return self._orchestrator.sync()
        except Exception:
            LOGGER.exception("Scheduled forecast sync failed")
            return None

    def request_immediate_sync(self) -> Future[SyncResult]:
        return self._executor.submit(self._orchestrator.sync)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._executor.shutdown(wait=wait)
