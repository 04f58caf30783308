from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path

from ..domain.models import ForecastBatch, ForecastRecord
from .db import open_db

LOGGER = logging.getLogger(__name__)

COLUMNS = (
    "date",
    "condition_id",
    "min_temp",
    "max_temp",
    "humidity",
    "pressure",
    "wind_speed",
    "wind_direction_degrees",
)
SELECT_COLUMNS = ", ".join(COLUMNS)


class StoreError(RuntimeError):
    """Raised when the forecast store cannot be read or written."""


class StoreWriteError(StoreError):
    """Raised when a new forecast generation could not be persisted."""


def _row_to_record(row: sqlite3.Row) -> ForecastRecord:
    return ForecastRecord(
        date=date.fromisoformat(row["date"]),
        condition_id=int(row["condition_id"]),
        min_temp=float(row["min_temp"]),
        max_temp=float(row["max_temp"]),
        humidity=float(row["humidity"]),
        pressure=float(row["pressure"]),
        wind_speed=float(row["wind_speed"]),
        wind_direction_degrees=float(row["wind_direction_degrees"]),
    )


def _record_to_row(record: ForecastRecord) -> tuple:
    return (
        record.date.isoformat(),
        record.condition_id,
        record.min_temp,
        record.max_temp,
        record.humidity,
        record.pressure,
        record.wind_speed,
        record.wind_direction_degrees,
    )


class ForecastStore:
    """Rows of forecast-by-date, always holding exactly one fetch generation."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def replace_all(self, batch: ForecastBatch) -> None:
        """Swap the stored generation for ``batch`` in a single transaction.

        Readers on other connections keep seeing the previous generation until
        the commit (WAL snapshot isolation), so no empty intermediate state is
        ever visible.
        """
        rows = [_record_to_row(record) for record in batch.records]
        placeholders = ", ".join("?" for _ in COLUMNS)
        try:
            with open_db(self._db_path) as connection:
                try:
                    connection.execute("BEGIN IMMEDIATE")
                    connection.execute("DELETE FROM forecast")
                    connection.executemany(
                        f"INSERT INTO forecast ({SELECT_COLUMNS}) VALUES ({placeholders})",
                        rows,
                    )
                    connection.commit()
                except sqlite3.Error:
                    connection.rollback()
                    raise
        except sqlite3.Error as exc:
            raise StoreWriteError(f"Unable to replace forecast rows in {self._db_path}") from exc
        LOGGER.debug("Forecast store now holds %d rows", len(rows))

    def query_from(self, day: date) -> list[ForecastRecord]:
        try:
            with open_db(self._db_path) as connection:
                rows = connection.execute(
                    f"SELECT {SELECT_COLUMNS} FROM forecast WHERE date >= ? ORDER BY date ASC",
                    (day.isoformat(),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to query forecast rows in {self._db_path}") from exc
        return [_row_to_record(row) for row in rows]

    def has_any_from(self, day: date) -> bool:
        try:
            with open_db(self._db_path) as connection:
                row = connection.execute(
                    "SELECT 1 FROM forecast WHERE date >= ? LIMIT 1",
                    (day.isoformat(),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to query forecast rows in {self._db_path}") from exc
        return row is not None

    def get(self, day: date) -> ForecastRecord | None:
        try:
            with open_db(self._db_path) as connection:
                row = connection.execute(
                    f"SELECT {SELECT_COLUMNS} FROM forecast WHERE date = ?",
                    (day.isoformat(),),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to query forecast rows in {self._db_path}") from exc
        if row is None:
            return None
        return _row_to_record(row)
