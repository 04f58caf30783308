from __future__ import annotations

import json
from datetime import datetime, timezone, tzinfo
from typing import Any, Literal
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ...domain.dates import normalize_day
from ...domain.models import ForecastBatch, ForecastRecord
from .base import FetchDecodeError, FetchNetworkError, FetchUpstreamError

OPENWEATHERMAP_DAILY_URL = "https://api.openweathermap.org/data/2.5/forecast/daily"
DEFAULT_TIMEOUT_SECONDS = 10
SUCCESS_CODE = "200"


def _coerce_float(value: Any, *, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise FetchDecodeError(f"Invalid numeric value for {field_name}") from exc


def _coerce_int(value: Any, *, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise FetchDecodeError(f"Invalid integer value for {field_name}") from exc


def _decode_json(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FetchDecodeError("OpenWeatherMap response was not valid JSON") from exc


def _raise_for_upstream_code(payload: dict[str, Any]) -> None:
    code = payload.get("cod")
    if code is None or str(code) == SUCCESS_CODE:
        return
    message = payload.get("message") or "no message"
    raise FetchUpstreamError(f"OpenWeatherMap reported error {code}: {message}", code=str(code))


def _fetch_json(url: str) -> dict[str, Any]:
    request = Request(url, headers={"User-Agent": "forecast-sync/0.1"})
    try:
        with urlopen(request, timeout=DEFAULT_TIMEOUT_SECONDS) as response:
            raw = response.read()
    except HTTPError as exc:
        # Error responses carry the provider's own code in a JSON body.
        try:
            body = exc.read()
        except OSError:
            body = b""
        try:
            error_payload = json.loads(body.decode("utf-8")) if body else None
        except (UnicodeDecodeError, json.JSONDecodeError):
            error_payload = None
        if isinstance(error_payload, dict) and "cod" in error_payload:
            _raise_for_upstream_code(error_payload)
        raise FetchNetworkError(f"OpenWeatherMap request failed with HTTP {exc.code}") from exc
    except (URLError, TimeoutError, OSError) as exc:
        raise FetchNetworkError("Failed to fetch forecast data from OpenWeatherMap") from exc

    payload = _decode_json(raw)
    if not isinstance(payload, dict):
        raise FetchDecodeError("Unexpected OpenWeatherMap response shape")
    return payload


class OpenWeatherMapFetcher:
    def __init__(
        self,
        *,
        location_query: str,
        coordinates: tuple[float, float] | None = None,
        api_key: str,
        units: Literal["metric", "imperial"] = "metric",
        days: int = 14,
        reference_tz: tzinfo = timezone.utc,
        base_url: str = OPENWEATHERMAP_DAILY_URL,
    ) -> None:
        self._location_query = location_query
        self._coordinates = coordinates
        self._api_key = api_key
        self._units = units
        self._days = min(max(days, 1), 16)
        self._reference_tz = reference_tz
        self._base_url = base_url

    def build_url(self) -> str:
        params: dict[str, str] = {}
        if self._coordinates is not None:
            lat, lon = self._coordinates
            params["lat"] = f"{lat:.5f}"
            params["lon"] = f"{lon:.5f}"
        else:
            params["q"] = self._location_query
        params.update(
            {
                "mode": "json",
                "units": self._units,
                "cnt": str(self._days),
                "appid": self._api_key,
            }
        )
        return f"{self._base_url}?{urlencode(params)}"

    def fetch(self) -> ForecastBatch:
        payload = _fetch_json(self.build_url())
        return self.parse_payload(payload, fetched_at=datetime.now(timezone.utc))

    def parse_payload(self, payload: dict[str, Any], *, fetched_at: datetime) -> ForecastBatch:
        _raise_for_upstream_code(payload)

        days = payload.get("list")
        if days is None:
            raise FetchDecodeError("OpenWeatherMap response did not include a forecast list")
        if not isinstance(days, list):
            raise FetchDecodeError("OpenWeatherMap forecast list was not a list")

        records_by_date: dict[Any, ForecastRecord] = {}
        for index, item in enumerate(days):
            record = self._parse_day(item, index=index)
            records_by_date[record.date] = record

        records = [records_by_date[key] for key in sorted(records_by_date)]
        return ForecastBatch(records=records, fetched_at=fetched_at)

    def _parse_day(self, item: Any, *, index: int) -> ForecastRecord:
        if not isinstance(item, dict):
            raise FetchDecodeError(f"OpenWeatherMap forecast entry {index} was not an object")

        temp = item.get("temp")
        weather = item.get("weather")
        if not isinstance(temp, dict) or not isinstance(weather, list) or not weather:
            raise FetchDecodeError(f"OpenWeatherMap forecast entry {index} was incomplete")
        if not isinstance(weather[0], dict):
            raise FetchDecodeError(f"OpenWeatherMap forecast entry {index} had no condition")

        timestamp = _coerce_float(item.get("dt"), field_name=f"list[{index}].dt")
        try:
            return ForecastRecord(
                date=normalize_day(timestamp, self._reference_tz),
                condition_id=_coerce_int(weather[0].get("id"), field_name=f"list[{index}].weather.id"),
                min_temp=_coerce_float(temp.get("min"), field_name=f"list[{index}].temp.min"),
                max_temp=_coerce_float(temp.get("max"), field_name=f"list[{index}].temp.max"),
                humidity=_coerce_float(item.get("humidity"), field_name=f"list[{index}].humidity"),
                pressure=_coerce_float(item.get("pressure"), field_name=f"list[{index}].pressure"),
                wind_speed=_coerce_float(item.get("speed"), field_name=f"list[{index}].speed"),
                wind_direction_degrees=_coerce_float(item.get("deg"), field_name=f"list[{index}].deg"),
            )
        except ValueError as exc:
            raise FetchDecodeError(f"OpenWeatherMap forecast entry {index} was invalid") from exc
