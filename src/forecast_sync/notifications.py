from __future__ import annotations

from datetime import datetime, timedelta

from .domain.conditions import condition_icon, condition_label, format_temperature
from .domain.dates import normalize_datetime
from .domain.models import ForecastRecord, NotificationPayload, SyncState

NOTIFICATION_COOLDOWN = timedelta(hours=24)


def should_notify(state: SyncState, now: datetime) -> bool:
    """Decide whether a refresh at ``now`` may surface a notification.

    Pure decision: callers record ``last_notification_at`` themselves, and
    only once the notification was actually delivered.
    """
    if not state.notifications_enabled:
        return False
    if state.last_notification_at is None:
        return True
    elapsed = normalize_datetime(now) - normalize_datetime(state.last_notification_at)
    return elapsed >= NOTIFICATION_COOLDOWN


def notification_target(record: ForecastRecord) -> str:
    return f"forecast/{record.date.isoformat()}"


def notification_text(record: ForecastRecord, *, units: str) -> str:
    return (
        f"Forecast: {condition_label(record.condition_id)}"
        f" - High: {format_temperature(record.max_temp, units)}"
        f" Low: {format_temperature(record.min_temp, units)}"
    )


def build_notification(record: ForecastRecord, *, title: str, units: str) -> NotificationPayload:
    return NotificationPayload(
        title=title,
        body=notification_text(record, units=units),
        icon=condition_icon(record.condition_id),
        target=notification_target(record),
    )
