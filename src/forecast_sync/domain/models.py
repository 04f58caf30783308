from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ForecastRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    date: date
    condition_id: int
    min_temp: float
    max_temp: float
    humidity: float
    pressure: float
    wind_speed: float
    wind_direction_degrees: float

    @field_validator("wind_direction_degrees")
    @classmethod
    def validate_wind_direction(cls, value: float) -> float:
        # Meteorological degrees: 0 is north, 180 is south.
        return value % 360


class ForecastBatch(BaseModel):
    """One fetch generation: consecutive days, ascending by date."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    records: list[ForecastRecord] = Field(default_factory=list)
    fetched_at: datetime

    @model_validator(mode="after")
    def validate_ascending_dates(self) -> ForecastBatch:
        for previous, current in zip(self.records, self.records[1:]):
            if current.date <= previous.date:
                raise ValueError("forecast batch dates must be strictly ascending")
        return self

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def first(self) -> ForecastRecord | None:
        return self.records[0] if self.records else None


class SyncState(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    last_notification_at: datetime | None = None
    notifications_enabled: bool = True
    initialized: bool = False


class NotificationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str
    body: str
    icon: str
    target: str


class SyncOutcome(str, Enum):
    REPLACED = "replaced"
    EMPTY = "empty"
    FAILED = "failed"


class SyncResult(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    outcome: SyncOutcome
    started_at: datetime
    finished_at: datetime
    record_count: int = 0
    notified: bool = False
    error_kind: str | None = None
    error_message: str | None = None
