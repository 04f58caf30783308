"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from forecast_sync.settings import (
    AppSettings,
    EnvSettings,
    ForecastYamlSettings,
    NotificationSettings,
    SyncSettings,
    build_settings,
)
from forecast_sync.storage.forecast_store import ForecastStore
from forecast_sync.storage.state import PreferencesStore

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "forecast.db"


@pytest.fixture
def settings(tmp_path: Path, db_path: Path) -> AppSettings:
    env = EnvSettings(
        forecast_env="test",
        forecast_timezone="UTC",
        forecast_config_path=tmp_path / "forecast_sync.yaml",
        forecast_db_path=db_path,
        openweathermap_api_key="test-key",
    )
    yaml_settings = ForecastYamlSettings(
        sync=SyncSettings(require_network=False),
        notifications=NotificationSettings(title="Weather", channels=["feed"]),
    )
    return build_settings(env, yaml_settings)


@pytest.fixture
def store(db_path: Path) -> ForecastStore:
    return ForecastStore(db_path)


@pytest.fixture
def preferences(db_path: Path) -> PreferencesStore:
    return PreferencesStore(db_path)


@pytest.fixture
def owm_payload() -> dict:
    with open(FIXTURE_DIR / "owm_daily.json") as f:
        return json.load(f)
