from __future__ import annotations

from dataclasses import dataclass

from .adapters.notifiers import FanoutNotifier, FeedNotifier, LogNotifier, Notifier
from .adapters.weather import ForecastFetcher, OpenWeatherMapFetcher
from .scheduler import RecurrenceScheduler
from .settings import AppSettings
from .storage.forecast_store import ForecastStore
from .storage.state import PreferencesStore
from .sync import SyncOrchestrator


@dataclass(slots=True)
class SyncServices:
    store: ForecastStore
    preferences: PreferencesStore
    feed: FeedNotifier
    orchestrator: SyncOrchestrator
    scheduler: RecurrenceScheduler


def build_fetcher(settings: AppSettings) -> OpenWeatherMapFetcher:
    provider = settings.yaml.weather.provider
    if provider != "openweathermap":
        raise ValueError(f"Unsupported weather provider: {provider}")

    api_key = settings.env.openweathermap_api_key.get_secret_value()
    if not api_key:
        raise ValueError("OPENWEATHERMAP_API_KEY must be set for the openweathermap provider")

    location = settings.yaml.location
    return OpenWeatherMapFetcher(
        location_query=location.query,
        coordinates=location.coordinates,
        api_key=api_key,
        units=settings.yaml.weather.units,
        days=settings.yaml.weather.forecast_days,
        reference_tz=settings.timezone,
    )


def build_notifier(settings: AppSettings, feed: FeedNotifier) -> FanoutNotifier:
    notifiers: list[Notifier] = []
    for channel in settings.yaml.notifications.channels:
        if channel == "log":
            notifiers.append(LogNotifier())
            continue
        if channel == "feed":
            notifiers.append(feed)
            continue
        raise ValueError(f"Unsupported notification channel: {channel}")
    return FanoutNotifier(notifiers)


def build_services(
    settings: AppSettings,
    *,
    fetcher: ForecastFetcher | None = None,
    notifier: Notifier | None = None,
) -> SyncServices:
    store = ForecastStore(settings.db_path)
    preferences = PreferencesStore(
        settings.db_path,
        notifications_enabled_default=settings.yaml.notifications.enabled_by_default,
    )
    feed = FeedNotifier(db_path=settings.db_path)
    orchestrator = SyncOrchestrator(
        fetcher=fetcher or build_fetcher(settings),
        store=store,
        preferences=preferences,
        notifier=notifier or build_notifier(settings, feed),
        notification_title=settings.yaml.notifications.title,
        units=settings.yaml.weather.units,
    )
    scheduler = RecurrenceScheduler(
        orchestrator=orchestrator,
        store=store,
        timezone=settings.timezone,
        require_network=settings.yaml.sync.require_network,
    )
    return SyncServices(
        store=store,
        preferences=preferences,
        feed=feed,
        orchestrator=orchestrator,
        scheduler=scheduler,
    )
