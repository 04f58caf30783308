"""Fakes and builders shared by the test modules."""

import threading
from datetime import date, datetime, timedelta, timezone

from forecast_sync.domain.models import ForecastBatch, ForecastRecord


def make_batch(start: date, days: int, *, condition_id: int = 800, offset: float = 0.0) -> ForecastBatch:
    records = [
        ForecastRecord(
            date=start + timedelta(days=index),
            condition_id=condition_id,
            min_temp=5.0 + index + offset,
            max_temp=15.0 + index + offset,
            humidity=70.0,
            pressure=1015.0,
            wind_speed=3.5,
            wind_direction_degrees=180.0,
        )
        for index in range(days)
    ]
    return ForecastBatch(records=records, fetched_at=datetime.now(timezone.utc))


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class StubFetcher:
    """Returns queued batches (or raises queued errors) in order."""

    def __init__(self, *results):
        self._results = list(results)
        self.calls = 0

    def fetch(self) -> ForecastBatch:
        self.calls += 1
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


class BlockingFetcher:
    """Blocks every fetch until released; tracks overlapping calls."""

    def __init__(self, batches):
        self._batches = list(batches)
        self._lock = threading.Lock()
        self.release = threading.Event()
        self.entered = threading.Event()
        self.active = 0
        self.max_active = 0
        self.calls = 0

    def fetch(self) -> ForecastBatch:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            batch = self._batches[self.calls % len(self._batches)]
            self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        with self._lock:
            self.active -= 1
        return batch


class RecordingNotifier:
    def __init__(self):
        self.payloads = []

    def notify(self, payload) -> None:
        self.payloads.append(payload)
