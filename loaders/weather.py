"""
Rainfall Loader - Monthly rainfall estimate from OpenWeather.

Current conditions first; if they report no rain, the 5-day forecast
is averaged. Hourly and 3-hourly totals are scaled by separate
multipliers to a 30-day month.
"""

from typing import Dict, Optional
from dataclasses import dataclass
import logging
import requests

from core.errors import ConfigurationError, UpstreamFailure

log = logging.getLogger(__name__)

SOURCE_NAME = "OpenWeather API"

HOURS_PER_DAY = 24
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class RainfallResult:
    """Estimated monthly rainfall for a location."""
    latitude: float
    longitude: float
    monthly_rainfall_mm: float
    basis: str  # "current_1h", "current_3h" or "forecast_3h"
    data_source: str = SOURCE_NAME


def monthly_from_hourly(rain_1h: float) -> float:
    return rain_1h * HOURS_PER_DAY * DAYS_PER_MONTH


def monthly_from_three_hourly(rain_3h: float) -> float:
    return (rain_3h / 3) * HOURS_PER_DAY * DAYS_PER_MONTH


class WeatherLoader:
    """
    OpenWeather current-conditions and forecast client.

    API Documentation:
    https://openweathermap.org/current
    https://openweathermap.org/forecast5
    """

    TIMEOUT_SECONDS = 8

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openweathermap.org/data/2.5",
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, endpoint: str, lat: float, lon: float) -> Dict:
        if not self.api_key:
            raise ConfigurationError(SOURCE_NAME, "OpenWeather API key not configured")

        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            response = self.session.get(
                f"{self.base_url}/{endpoint}", params=params, timeout=self.TIMEOUT_SECONDS
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            log.error(f"OpenWeather {endpoint} timed out for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"{endpoint} timed out after {self.TIMEOUT_SECONDS}s") from e
        except (requests.RequestException, ValueError) as e:
            # Avoid logging the request URL, it carries the API key
            log.error(f"OpenWeather {endpoint} failed for ({lat}, {lon}): {type(e).__name__}")
            raise UpstreamFailure(SOURCE_NAME, f"{endpoint} request failed ({type(e).__name__})") from e

    def get_monthly_rainfall(self, lat: float, lon: float) -> RainfallResult:
        """
        Estimate monthly rainfall in mm.

        Raises:
            ConfigurationError: OPENWEATHER_API_KEY is not set
            UpstreamFailure: a request failed, or neither current nor
                forecast data include precipitation
        """
        current = self._get("weather", lat, lon)
        rain = current.get("rain") or {}

        rainfall = 0.0
        basis = ""
        if rain.get("1h"):
            rainfall = monthly_from_hourly(float(rain["1h"]))
            basis = "current_1h"
        elif rain.get("3h"):
            rainfall = monthly_from_three_hourly(float(rain["3h"]))
            basis = "current_3h"

        if rainfall == 0:
            rainfall = self.get_forecast_rainfall(lat, lon)
            basis = "forecast_3h"

        rainfall = max(0.0, rainfall)
        log.debug(f"Rainfall at ({lat:.4f}, {lon:.4f}): {rainfall:.0f}mm/month ({basis})")
        return RainfallResult(latitude=lat, longitude=lon, monthly_rainfall_mm=rainfall, basis=basis)

    def get_forecast_rainfall(self, lat: float, lon: float) -> float:
        """Monthly estimate from the mean 3-hour total across rainy forecast intervals."""
        forecast = self._get("forecast", lat, lon)

        totals = [
            float(item["rain"]["3h"])
            for item in forecast.get("list") or []
            if isinstance(item, dict) and (item.get("rain") or {}).get("3h")
        ]
        if not totals:
            raise UpstreamFailure(SOURCE_NAME, "no rainfall data available in current or forecast data")

        return monthly_from_three_hourly(sum(totals) / len(totals))
