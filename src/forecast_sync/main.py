from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .adapters.notifiers import Notifier
from .adapters.weather import ForecastFetcher
from .domain.dates import today
from .services import SyncServices, build_services
from .settings import AppSettings, load_settings
from .storage.db import initialize_database


class NotificationPreference(BaseModel):
    enabled: bool


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _get_services(request: Request) -> SyncServices:
    return request.app.state.services


def create_app(
    settings_loader: Callable[[], AppSettings] = load_settings,
    *,
    fetcher: ForecastFetcher | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        settings = settings_loader()
        initialize_database(settings.db_path)
        services = build_services(settings, fetcher=fetcher, notifier=notifier)

        application.state.settings = settings
        application.state.services = services
        application.state.started_at_utc = datetime.now(timezone.utc)
        application.state.bootstrap = services.scheduler.initialize()

        try:
            yield
        finally:
            services.scheduler.shutdown(wait=False)

    application = FastAPI(title="Forecast Sync", version="0.1.0", lifespan=lifespan)

    @application.get("/health", response_class=JSONResponse)
    async def health(request: Request) -> JSONResponse:
        settings = _get_settings(request)
        services = _get_services(request)
        last_sync = services.preferences.last_sync_result()
        return JSONResponse(
            {
                "status": "ok",
                "service": "forecast-sync",
                "environment": settings.env.forecast_env,
                "timezone": settings.env.forecast_timezone,
                "scheduler_running": services.scheduler.running,
                "initialized": services.scheduler.initialized,
                "sync_in_flight": services.orchestrator.in_flight,
                "last_sync": last_sync.model_dump(mode="json") if last_sync else None,
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            }
        )

    @application.get("/forecast")
    async def forecast(request: Request, start: date | None = Query(default=None)) -> dict[str, Any]:
        settings = _get_settings(request)
        services = _get_services(request)
        start_day = start or today(settings.timezone)
        records = services.store.query_from(start_day)
        return {
            "start": start_day.isoformat(),
            "units": settings.yaml.weather.units,
            "count": len(records),
            "records": [record.model_dump(mode="json") for record in records],
        }

    @application.get("/forecast/{day}")
    async def forecast_day(request: Request, day: date) -> dict[str, Any]:
        record = _get_services(request).store.get(day)
        if record is None:
            raise HTTPException(status_code=404, detail="No forecast stored for that day")
        return record.model_dump(mode="json")

    @application.post("/sync")
    async def sync_now(request: Request) -> dict[str, Any]:
        services = _get_services(request)
        result = await asyncio.wrap_future(services.scheduler.request_immediate_sync())
        return result.model_dump(mode="json")

    @application.get("/notifications/latest")
    async def latest_notification(request: Request) -> dict[str, Any]:
        latest = _get_services(request).feed.latest()
        if latest is None:
            raise HTTPException(status_code=404, detail="No notification delivered yet")
        return latest

    @application.get("/preferences/notifications")
    async def get_notification_preference(request: Request) -> NotificationPreference:
        state = _get_services(request).preferences.load_sync_state()
        return NotificationPreference(enabled=state.notifications_enabled)

    @application.put("/preferences/notifications")
    async def put_notification_preference(
        request: Request,
        preference: NotificationPreference,
    ) -> NotificationPreference:
        _get_services(request).preferences.set_notifications_enabled(preference.enabled)
        return preference

    return application


app = create_app()
