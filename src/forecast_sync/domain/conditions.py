from __future__ import annotations

# OpenWeatherMap condition ids: https://openweathermap.org/weather-conditions
CONDITION_LABELS = {
    200: "Thunderstorm with light rain",
    201: "Thunderstorm with rain",
    202: "Thunderstorm with heavy rain",
    210: "Light thunderstorm",
    211: "Thunderstorm",
    212: "Heavy thunderstorm",
    221: "Ragged thunderstorm",
    230: "Thunderstorm with light drizzle",
    231: "Thunderstorm with drizzle",
    232: "Thunderstorm with heavy drizzle",
    300: "Light drizzle",
    301: "Drizzle",
    302: "Heavy drizzle",
    310: "Light drizzle rain",
    311: "Drizzle rain",
    312: "Heavy drizzle rain",
    313: "Shower rain and drizzle",
    314: "Heavy shower rain and drizzle",
    321: "Shower drizzle",
    500: "Light rain",
    501: "Moderate rain",
    502: "Heavy rain",
    503: "Very heavy rain",
    504: "Extreme rain",
    511: "Freezing rain",
    520: "Light shower rain",
    521: "Shower rain",
    522: "Heavy shower rain",
    531: "Ragged shower rain",
    600: "Light snow",
    601: "Snow",
    602: "Heavy snow",
    611: "Sleet",
    612: "Light shower sleet",
    613: "Shower sleet",
    615: "Light rain and snow",
    616: "Rain and snow",
    620: "Light shower snow",
    621: "Shower snow",
    622: "Heavy shower snow",
    701: "Mist",
    711: "Smoke",
    721: "Haze",
    731: "Sand and dust whirls",
    741: "Fog",
    751: "Sand",
    761: "Dust",
    762: "Volcanic ash",
    771: "Squalls",
    781: "Tornado",
    800: "Clear",
    801: "Few clouds",
    802: "Scattered clouds",
    803: "Broken clouds",
    804: "Overcast clouds",
}

GROUP_LABELS = {
    2: "Thunderstorm",
    3: "Drizzle",
    5: "Rain",
    6: "Snow",
    7: "Atmosphere",
    8: "Clouds",
}


def condition_label(condition_id: int) -> str:
    label = CONDITION_LABELS.get(condition_id)
    if label is not None:
        return label
    return GROUP_LABELS.get(condition_id // 100, f"Code {condition_id}")


def condition_icon(condition_id: int) -> str:
    """Return the icon selector a presentation layer maps onto its artwork."""
    if 200 <= condition_id <= 232:
        return "storm"
    if 300 <= condition_id <= 321:
        return "light_rain"
    if 500 <= condition_id <= 504:
        return "rain"
    if condition_id == 511:
        return "snow"
    if 520 <= condition_id <= 531:
        return "rain"
    if 600 <= condition_id <= 622:
        return "snow"
    if condition_id in (771, 781):
        return "storm"
    if 701 <= condition_id <= 762:
        return "fog"
    if condition_id == 800:
        return "clear"
    if condition_id == 801:
        return "light_clouds"
    if 802 <= condition_id <= 804:
        return "clouds"
    return "unknown"


def format_temperature(value: float, units: str) -> str:
    symbol = "F" if units == "imperial" else "C"
    return f"{value:.0f}°{symbol}"
