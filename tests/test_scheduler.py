"""Tests for the recurrence scheduler and its bootstrap check."""

from datetime import date, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from helpers import RecordingNotifier, StubFetcher, make_batch, utc_today

from forecast_sync.domain.models import SyncOutcome
from forecast_sync.scheduler import (
    SYNC_FLEX_SECONDS,
    SYNC_INTERVAL_SECONDS,
    SYNC_JOB_ID,
    RecurrenceScheduler,
    is_network_available,
)
from forecast_sync.sync import SyncOrchestrator


@pytest.fixture
def mock_apscheduler() -> MagicMock:
    scheduler = MagicMock()
    scheduler.running = False
    return scheduler


def _build(store, preferences, fetcher, mock_apscheduler, **options):
    orchestrator = SyncOrchestrator(
        fetcher=fetcher,
        store=store,
        preferences=preferences,
        notifier=RecordingNotifier(),
    )
    scheduler = RecurrenceScheduler(
        orchestrator=orchestrator,
        store=store,
        timezone=timezone.utc,
        scheduler=mock_apscheduler,
        **options,
    )
    return scheduler, orchestrator


class TestInitialize:
    def test_registers_recurring_job(self, store, preferences, mock_apscheduler):
        scheduler, _ = _build(store, preferences, StubFetcher(make_batch(utc_today(), 7)), mock_apscheduler)
        try:
            scheduler.initialize().result(timeout=5)
        finally:
            scheduler.shutdown()

        mock_apscheduler.add_job.assert_called_once()
        args, kwargs = mock_apscheduler.add_job.call_args
        assert args[0] == scheduler.run_scheduled_sync
        assert args[1] == "interval"
        assert kwargs["seconds"] == 3 * 60 * 60 == SYNC_INTERVAL_SECONDS
        assert kwargs["jitter"] == 60 * 60 == SYNC_FLEX_SECONDS
        assert kwargs["id"] == SYNC_JOB_ID
        assert kwargs["replace_existing"] is True
        assert kwargs["max_instances"] == 1
        mock_apscheduler.start.assert_called_once()

    def test_second_call_is_noop(self, store, preferences, mock_apscheduler):
        fetcher = StubFetcher(make_batch(utc_today(), 7))
        scheduler, _ = _build(store, preferences, fetcher, mock_apscheduler)
        try:
            assert scheduler.initialized is False
            first = scheduler.initialize()
            assert first is not None
            first.result(timeout=5)
            assert scheduler.initialize() is None
            assert scheduler.initialized is True
        finally:
            scheduler.shutdown()

        assert mock_apscheduler.add_job.call_count == 1
        assert fetcher.calls == 1

    def test_separate_service_objects_are_independent(self, store, preferences, mock_apscheduler):
        first, _ = _build(store, preferences, StubFetcher(make_batch(utc_today(), 1)), mock_apscheduler)
        second, _ = _build(store, preferences, StubFetcher(make_batch(utc_today(), 1)), MagicMock(running=False))
        try:
            first.initialize().result(timeout=5)
            assert second.initialized is False
        finally:
            first.shutdown()
            second.shutdown()


class TestBootstrap:
    def test_empty_store_triggers_sync(self, store, preferences, mock_apscheduler):
        today = utc_today()
        fetcher = StubFetcher(make_batch(today, 7))
        scheduler, _ = _build(store, preferences, fetcher, mock_apscheduler)
        try:
            synced = scheduler.initialize().result(timeout=5)
        finally:
            scheduler.shutdown()

        assert synced is True
        records = store.query_from(date.min)
        assert len(records) == 7
        assert records[0].date == today

    def test_current_store_skips_sync(self, store, preferences, mock_apscheduler):
        store.replace_all(make_batch(utc_today(), 3))
        fetcher = StubFetcher(make_batch(utc_today(), 7))
        scheduler, _ = _build(store, preferences, fetcher, mock_apscheduler)
        try:
            synced = scheduler.initialize().result(timeout=5)
        finally:
            scheduler.shutdown()

        assert synced is False
        assert fetcher.calls == 0

    def test_stale_store_triggers_sync(self, store, preferences, mock_apscheduler):
        store.replace_all(make_batch(utc_today() - timedelta(days=10), 3))
        fetcher = StubFetcher(make_batch(utc_today(), 7))
        scheduler, _ = _build(store, preferences, fetcher, mock_apscheduler)
        try:
            assert scheduler.initialize().result(timeout=5) is True
        finally:
            scheduler.shutdown()
        assert fetcher.calls == 1

    def test_bootstrap_absorbs_unexpected_errors(self, store, preferences, mock_apscheduler):
        scheduler, _ = _build(store, preferences, StubFetcher(KeyError("boom")), mock_apscheduler)
        try:
            assert scheduler.initialize().result(timeout=5) is True
        finally:
            scheduler.shutdown()


class TestScheduledSync:
    def test_skips_when_offline(self, store, preferences, mock_apscheduler):
        fetcher = StubFetcher(make_batch(utc_today(), 7))
        scheduler, _ = _build(
            store,
            preferences,
            fetcher,
            mock_apscheduler,
            require_network=True,
            network_check=lambda: False,
        )
        assert scheduler.run_scheduled_sync() is None
        assert fetcher.calls == 0
        scheduler.shutdown()

    def test_runs_when_online(self, store, preferences, mock_apscheduler):
        scheduler, _ = _build(
            store,
            preferences,
            StubFetcher(make_batch(utc_today(), 7)),
            mock_apscheduler,
            network_check=lambda: True,
        )
        result = scheduler.run_scheduled_sync()
        scheduler.shutdown()
        assert result.outcome == SyncOutcome.REPLACED

    def test_unexpected_errors_do_not_escape(self, store, preferences, mock_apscheduler, caplog):
        scheduler, _ = _build(
            store,
            preferences,
            StubFetcher(AttributeError("'NoneType' object has no attribute 'x'")),
            mock_apscheduler,
            require_network=False,
        )
        assert scheduler.run_scheduled_sync() is None
        scheduler.shutdown()
        assert "Scheduled forecast sync failed" in caplog.text

    def test_immediate_sync_returns_future(self, store, preferences, mock_apscheduler):
        scheduler, _ = _build(store, preferences, StubFetcher(make_batch(utc_today(), 2)), mock_apscheduler)
        try:
            result = scheduler.request_immediate_sync().result(timeout=5)
        finally:
            scheduler.shutdown()
        assert result.record_count == 2


class TestNetworkCheck:
    def test_unreachable_host(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("unreachable")

        monkeypatch.setattr("forecast_sync.scheduler.socket.create_connection", refuse)
        assert is_network_available() is False

    def test_reachable_host(self, monkeypatch):
        connection = MagicMock()
        connection.__enter__.return_value = connection
        monkeypatch.setattr(
            "forecast_sync.scheduler.socket.create_connection",
            lambda *args, **kwargs: connection,
        )
        assert is_network_available() is True
