from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

# Applied in order, once each. DDL stays idempotent so two connections racing
# on a fresh file both end up with the same schema.
MIGRATIONS: tuple[tuple[str, str], ...] = (
    (
        "v001_forecast",
        """
        CREATE TABLE IF NOT EXISTS forecast (
            date TEXT PRIMARY KEY,
            condition_id INTEGER NOT NULL,
            min_temp REAL NOT NULL,
            max_temp REAL NOT NULL,
            humidity REAL NOT NULL,
            pressure REAL NOT NULL,
            wind_speed REAL NOT NULL,
            wind_direction_degrees REAL NOT NULL
        );
        """,
    ),
    (
        "v002_state_entries",
        """
        CREATE TABLE IF NOT EXISTS state_entries (
            key TEXT PRIMARY KEY,
            json TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
)


def connect(db_path: Path) -> sqlite3.Connection:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(path, timeout=30)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA journal_mode = WAL;")
    connection.execute("PRAGMA synchronous = NORMAL;")
    return connection


def applied_migrations(connection: sqlite3.Connection) -> set[str]:
    connection.execute(
        "CREATE TABLE IF NOT EXISTS schema_versions ("
        " version TEXT PRIMARY KEY,"
        " applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
        ")"
    )
    connection.commit()
    return {row[0] for row in connection.execute("SELECT version FROM schema_versions")}


def ensure_schema(connection: sqlite3.Connection) -> list[str]:
    """Apply pending migrations and return the names applied by this call."""
    applied = applied_migrations(connection)
    newly_applied: list[str] = []
    for version, script in MIGRATIONS:
        if version in applied:
            continue
        connection.executescript(script)
        cursor = connection.execute(
            "INSERT OR IGNORE INTO schema_versions (version) VALUES (?)",
            (version,),
        )
        connection.commit()
        if cursor.rowcount:
            newly_applied.append(version)
    return newly_applied


@contextmanager
def open_db(db_path: Path) -> Iterator[sqlite3.Connection]:
    connection = connect(db_path)
    try:
        ensure_schema(connection)
        yield connection
    finally:
        connection.close()


def initialize_database(db_path: Path) -> list[str]:
    with open_db(db_path) as connection:
        return sorted(applied_migrations(connection))
