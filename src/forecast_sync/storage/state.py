from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ..domain.dates import normalize_datetime, utc_now
from ..domain.models import SyncResult, SyncState
from .db import open_db
from .forecast_store import StoreError, StoreWriteError

NOTIFICATIONS_ENABLED_KEY = "preferences.notifications_enabled"
LAST_NOTIFICATION_KEY = "preferences.last_notification_at"
LATEST_NOTIFICATION_KEY = "notification.latest"
LAST_SYNC_KEY = "sync.last_result"


@dataclass(slots=True)
class StateEntry:
    key: str
    value: Any
    updated_at: datetime


def _parse_datetime(value: str) -> datetime:
    return normalize_datetime(datetime.fromisoformat(value))


def set_state_entry(
    db_path: Path,
    key: str,
    value: Any,
    *,
    updated_at: datetime | None = None,
) -> None:
    record_time = normalize_datetime(updated_at) if updated_at is not None else utc_now()
    value_json = json.dumps(value, ensure_ascii=True, separators=(",", ":"))

    try:
        with open_db(db_path) as connection:
            connection.execute(
                """
                INSERT INTO state_entries (key, json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    json=excluded.json,
                    updated_at=excluded.updated_at
                """,
                (key, value_json, record_time.isoformat()),
            )
            connection.commit()
    except sqlite3.Error as exc:
        raise StoreWriteError(f"Unable to write state entry '{key}'") from exc


def get_state_entry(db_path: Path, key: str) -> StateEntry | None:
    try:
        with open_db(db_path) as connection:
            row = connection.execute(
                "SELECT key, json, updated_at FROM state_entries WHERE key = ?",
                (key,),
            ).fetchone()
    except sqlite3.Error as exc:
        raise StoreError(f"Unable to read state entry '{key}'") from exc

    if row is None:
        return None

    return StateEntry(
        key=row["key"],
        value=json.loads(row["json"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


def get_state_value(db_path: Path, key: str, default: Any = None) -> Any:
    entry = get_state_entry(db_path, key)
    if entry is None:
        return default
    return entry.value


class PreferencesStore:
    """Read-modify-write access to the persisted sync preferences."""

    def __init__(self, db_path: Path, *, notifications_enabled_default: bool = True) -> None:
        self._db_path = Path(db_path)
        self._notifications_enabled_default = notifications_enabled_default

    def load_sync_state(self, *, initialized: bool = False) -> SyncState:
        enabled = get_state_value(self._db_path, NOTIFICATIONS_ENABLED_KEY)
        if not isinstance(enabled, bool):
            enabled = self._notifications_enabled_default

        last_notification_at = None
        raw_last = get_state_value(self._db_path, LAST_NOTIFICATION_KEY)
        if isinstance(raw_last, str):
            try:
                last_notification_at = _parse_datetime(raw_last)
            except ValueError:
                last_notification_at = None

        return SyncState(
            last_notification_at=last_notification_at,
            notifications_enabled=enabled,
            initialized=initialized,
        )

    def set_notifications_enabled(self, enabled: bool) -> None:
        set_state_entry(self._db_path, NOTIFICATIONS_ENABLED_KEY, bool(enabled))

    def record_notification(self, notified_at: datetime) -> None:
        notified_at = normalize_datetime(notified_at)
        set_state_entry(
            self._db_path,
            LAST_NOTIFICATION_KEY,
            notified_at.isoformat(),
            updated_at=notified_at,
        )

    def record_sync_result(self, result: SyncResult) -> None:
        set_state_entry(
            self._db_path,
            LAST_SYNC_KEY,
            result.model_dump(mode="json"),
            updated_at=result.finished_at,
        )

    def last_sync_result(self) -> SyncResult | None:
        value = get_state_value(self._db_path, LAST_SYNC_KEY)
        if not isinstance(value, dict):
            return None
        return SyncResult.model_validate(value)
