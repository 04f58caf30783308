from .base import (
    FetchDecodeError,
    FetchError,
    FetchNetworkError,
    FetchUpstreamError,
    ForecastFetcher,
)
from .openweathermap import OpenWeatherMapFetcher

__all__ = [
    "FetchDecodeError",
    "FetchError",
    "FetchNetworkError",
    "FetchUpstreamError",
    "ForecastFetcher",
    "OpenWeatherMapFetcher",
]
