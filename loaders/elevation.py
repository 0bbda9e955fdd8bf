"""
Elevation Loader - Point elevation from an Open-Elevation compatible API.

Single POST lookup per point, 10 second timeout, no retry. Any failure
is raised to the caller; there is no substitute value.
"""

from typing import Optional
from dataclasses import dataclass
import logging
import requests

from core.errors import ConfigurationError, UpstreamFailure

log = logging.getLogger(__name__)

SOURCE_NAME = "Open-Elevation API"


@dataclass(frozen=True)
class ElevationResult:
    """Elevation data for a point."""
    latitude: float
    longitude: float
    elevation_meters: float
    data_source: str


class ElevationLoader:
    """
    Fetch elevation from an Open-Elevation style endpoint.

    API Documentation:
    https://github.com/Jorl17/open-elevation/blob/master/docs/api.md
    """

    USER_AGENT = "DIY-Risk-Analysis/1.0"
    TIMEOUT_SECONDS = 10

    def __init__(self, api_url: Optional[str], session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})

    def get_elevation(self, lat: float, lon: float) -> ElevationResult:
        """
        Get elevation for a single point.

        Raises:
            ConfigurationError: ELEVATION_API_URL is not set
            UpstreamFailure: request failed, timed out, or returned no result
        """
        if not self.api_url:
            raise ConfigurationError(SOURCE_NAME, "Elevation API URL not configured")

        body = {
            "locations": [{
                "latitude": round(lat, 6),
                "longitude": round(lon, 6),
            }]
        }

        try:
            response = self.session.post(self.api_url, json=body, timeout=self.TIMEOUT_SECONDS)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            log.error(f"Elevation request timed out for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"timed out after {self.TIMEOUT_SECONDS}s") from e
        except (requests.RequestException, ValueError) as e:
            log.error(f"Elevation request failed for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"request failed: {e}") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            raise UpstreamFailure(SOURCE_NAME, "no elevation data returned")

        try:
            elevation = float(results[0]["elevation"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamFailure(SOURCE_NAME, f"malformed elevation result: {e}") from e

        log.debug(f"Elevation at ({lat:.4f}, {lon:.4f}): {elevation:.1f}m")
        return ElevationResult(
            latitude=float(results[0].get("latitude", lat)),
            longitude=float(results[0].get("longitude", lon)),
            elevation_meters=elevation,
            data_source=SOURCE_NAME,
        )
