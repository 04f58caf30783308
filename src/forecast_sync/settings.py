from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

COORDINATES_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


class LocationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str = "Stuttgart, DE"

    @field_validator("query")
    @classmethod
    def validate_query(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("location.query must not be empty")
        match = COORDINATES_PATTERN.match(text)
        if match is not None:
            lat, lon = float(match.group(1)), float(match.group(2))
            if not -90 <= lat <= 90 or not -180 <= lon <= 180:
                raise ValueError("location.query coordinates are out of range")
        return text

    @property
    def coordinates(self) -> tuple[float, float] | None:
        match = COORDINATES_PATTERN.match(self.query)
        if match is None:
            return None
        return float(match.group(1)), float(match.group(2))


class WeatherSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: Literal["openweathermap"] = "openweathermap"
    units: Literal["metric", "imperial"] = "metric"
    forecast_days: int = Field(default=14, ge=1, le=16)


class SyncSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    require_network: bool = True


class NotificationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled_by_default: bool = True
    title: str = "Weather"
    channels: list[Literal["log", "feed"]] = Field(default_factory=lambda: ["log", "feed"])

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("notifications.title must not be empty")
        return text

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, values: list[str]) -> list[str]:
        deduplicated = list(dict.fromkeys(values))
        if not deduplicated:
            raise ValueError("notifications.channels must contain at least one channel")
        return deduplicated


class ForecastYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: LocationSettings = Field(default_factory=LocationSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    forecast_env: Literal["dev", "test", "prod"] = "dev"
    forecast_timezone: str = "UTC"
    forecast_config_path: Path = Path("config/forecast_sync.yaml")
    forecast_db_path: Path = Path("data/forecast.db")
    openweathermap_api_key: SecretStr = SecretStr("")

    @field_validator("forecast_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value


class AppSettings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    env: EnvSettings
    yaml: ForecastYamlSettings
    project_root: Path
    config_path: Path
    db_path: Path
    timezone: ZoneInfo


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> ForecastYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Forecast config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Forecast config must be a YAML mapping/object at the top level")
    return ForecastYamlSettings.model_validate(raw_config)


def build_settings(env: EnvSettings, yaml_settings: ForecastYamlSettings | None = None) -> AppSettings:
    config_path = _resolve_project_path(env.forecast_config_path)
    if yaml_settings is None:
        yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
        db_path=_resolve_project_path(env.forecast_db_path),
        timezone=ZoneInfo(env.forecast_timezone),
    )


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    return build_settings(EnvSettings())
