"""
Runtime configuration.

Values come from environment variables and are read once at process
start via Settings.from_env(). Adapters that need an endpoint or a
credential check for it themselves and raise ConfigurationError.
"""

import os
from dataclasses import dataclass, asdict, field
from typing import Dict, Mapping, Optional
import logging

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s │ %(name)-20s │ %(levelname)-8s │ %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Console logging for entry points. Library modules only get loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler()],
    )


# ═══════════════════════════════════════════════════════════════════════════
# BOUNDING BOX
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class BoundingBox:
    """
    Rectangular supported region, in decimal degrees (WGS84).

    Built from the southwest / northeast corners of the deployment area.
    """
    min_latitude: float   # Southwest corner latitude
    min_longitude: float  # Southwest corner longitude
    max_latitude: float   # Northeast corner latitude
    max_longitude: float  # Northeast corner longitude

    def contains(self, lat: float, lon: float) -> bool:
        """Check if a point is inside this bounding box (edges included)."""
        return (self.min_latitude <= lat <= self.max_latitude and
                self.min_longitude <= lon <= self.max_longitude)

    def to_dict(self) -> Dict:
        return {
            "south_west": [self.min_latitude, self.min_longitude],
            "north_east": [self.max_latitude, self.max_longitude],
        }

    def describe(self) -> str:
        return (
            f"Valid area: latitude {self.min_latitude} to {self.max_latitude}, "
            f"longitude {self.min_longitude} to {self.max_longitude}"
        )


# DIY Yogyakarta defaults
DEFAULT_BOUNDS = BoundingBox(
    min_latitude=-8.35,
    min_longitude=109.95,
    max_latitude=-7.35,
    max_longitude=110.85,
)

DEFAULT_OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_GEONAMES_URL = "http://api.geonames.org"


def _env_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning(f"Ignoring non-numeric {key}={raw!r}, using {default}")
        return default


def _env_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _env_str(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


# ═══════════════════════════════════════════════════════════════════════════
# SETTINGS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class Settings:
    """
    All externally supplied configuration.

    Endpoints and credentials are optional here; a missing one only
    fails the adapter that needs it.
    """

    # Remote services
    elevation_api_url: Optional[str] = None
    overpass_url: Optional[str] = None
    nominatim_url: Optional[str] = None
    openweather_api_key: Optional[str] = None
    openweather_url: str = DEFAULT_OPENWEATHER_URL
    geonames_username: Optional[str] = None
    geonames_url: str = DEFAULT_GEONAMES_URL

    # Region
    bounds: BoundingBox = field(default_factory=lambda: DEFAULT_BOUNDS)

    # Cache
    cache_ttl_seconds: float = 30 * 60
    cache_enabled: bool = True

    # Nominatim usage policy asks for at most one request per second
    geocoder_delay_seconds: float = 1.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        bounds = BoundingBox(
            min_latitude=_env_float(env, "DIY_SOUTHWEST_LAT", DEFAULT_BOUNDS.min_latitude),
            min_longitude=_env_float(env, "DIY_SOUTHWEST_LNG", DEFAULT_BOUNDS.min_longitude),
            max_latitude=_env_float(env, "DIY_NORTHEAST_LAT", DEFAULT_BOUNDS.max_latitude),
            max_longitude=_env_float(env, "DIY_NORTHEAST_LNG", DEFAULT_BOUNDS.max_longitude),
        )

        return cls(
            elevation_api_url=_env_str(env, "ELEVATION_API_URL"),
            overpass_url=_env_str(env, "OVERPASS_URL"),
            nominatim_url=_env_str(env, "NOMINATIM_URL"),
            openweather_api_key=_env_str(env, "OPENWEATHER_API_KEY"),
            openweather_url=_env_str(env, "OPENWEATHER_URL") or DEFAULT_OPENWEATHER_URL,
            geonames_username=_env_str(env, "GEONAMES_USERNAME"),
            geonames_url=_env_str(env, "GEONAMES_URL") or DEFAULT_GEONAMES_URL,
            bounds=bounds,
            cache_ttl_seconds=_env_float(env, "CACHE_TTL_SECONDS", 30 * 60),
            cache_enabled=_env_bool(env, "ENABLE_CACHE", True),
            geocoder_delay_seconds=_env_float(env, "GEOCODER_DELAY_SECONDS", 1.0),
            log_level=(_env_str(env, "LOG_LEVEL") or "INFO").upper(),
        )

    def api_status(self) -> Dict[str, bool]:
        """Which external services have their configuration present."""
        return {
            "elevation_api": bool(self.elevation_api_url),
            "openweather_api": bool(self.openweather_api_key),
            "geonames_api": bool(self.geonames_username),
            "osm_geocoding": bool(self.nominatim_url),
            "osm_overpass": bool(self.overpass_url),
        }

    def to_dict(self) -> Dict:
        """Settings without credentials, for diagnostics."""
        data = asdict(self)
        data.pop("openweather_api_key")
        data.pop("geonames_username")
        data["bounds"] = self.bounds.to_dict()
        return data
