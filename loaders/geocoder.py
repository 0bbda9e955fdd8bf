"""
Geocoder - Reverse geocode a coordinate to an Indonesian address using Nominatim.

Features:
- Fixed delay before every request (Nominatim allows 1 request/second)
- Administrative hierarchy formatting (Jalan, Dusun, Desa, Kecamatan, ...)
- No address caching
"""

import time
from typing import Callable, Dict, List, Mapping, Optional
import logging
import requests

from core.errors import ConfigurationError, UpstreamFailure
from core.models import AddressDetails

log = logging.getLogger(__name__)

SOURCE_NAME = "OpenStreetMap Nominatim"
DEFAULT_PROVINCE = "Daerah Istimewa Yogyakarta"


# ═══════════════════════════════════════════════════════════════════════════
# ADDRESS FORMATTING
# ═══════════════════════════════════════════════════════════════════════════
def _first(address: Mapping[str, str], *candidates) -> Optional[str]:
    """First candidate whose key is present, rendered with its prefix."""
    for key, prefix in candidates:
        value = address.get(key)
        if value:
            return f"{prefix}{value}"
    return None


def _city_part(address: Mapping[str, str]) -> Optional[str]:
    return _first(address, ("city", ""), ("town", "Kota "), ("county", "Kabupaten "))


def format_full_address(address: Mapping[str, str]) -> str:
    """
    Comma-joined address from most to least specific.

    building, road, hamlet, village/neighbourhood/suburb, city_district,
    city/town/county, state (or the DIY default), postcode.
    """
    parts: List[str] = []

    if address.get("building"):
        parts.append(address["building"])
    if address.get("road"):
        parts.append(f"Jalan {address['road']}")
    if address.get("hamlet"):
        parts.append(f"Dusun {address['hamlet']}")

    locality = _first(
        address,
        ("village", "Desa "),
        ("neighbourhood", "Perumahan "),
        ("suburb", "Kelurahan "),
    )
    if locality:
        parts.append(locality)

    if address.get("city_district"):
        parts.append(f"Kecamatan {address['city_district']}")

    city = _city_part(address)
    if city:
        parts.append(city)

    parts.append(address.get("state") or DEFAULT_PROVINCE)

    if address.get("postcode"):
        parts.append(f"Kode Pos {address['postcode']}")

    return ", ".join(parts)


def format_display_lines(address: Mapping[str, str]) -> List[str]:
    """Shorter line-per-level rendering for display."""
    lines: List[str] = []

    street = _first(address, ("road", "Jalan "), ("building", ""))
    if street:
        lines.append(street)

    locality = _first(
        address,
        ("hamlet", "Dusun "),
        ("village", "Desa "),
        ("suburb", "Kelurahan "),
    )
    if locality:
        lines.append(locality)

    if address.get("city_district"):
        lines.append(f"Kecamatan {address['city_district']}")

    city = _city_part(address)
    if city:
        lines.append(city)

    province = address.get("state") or DEFAULT_PROVINCE
    if address.get("postcode"):
        province += f" - Kode Pos {address['postcode']}"
    lines.append(province)

    return lines


def build_address_details(address: Mapping[str, str], source: str = "nominatim") -> AddressDetails:
    return AddressDetails(
        full=format_full_address(address),
        display=tuple(format_display_lines(address)),
        components=dict(address),
        source=source,
    )


# ═══════════════════════════════════════════════════════════════════════════
# GEOCODER
# ═══════════════════════════════════════════════════════════════════════════
class Geocoder:
    """
    Reverse geocoder using an OpenStreetMap Nominatim instance.

    Sleeps a fixed delay before each request to stay within the
    service's rate limit.
    """

    USER_AGENT = "DIY-Risk-Analysis-App/1.0"
    TIMEOUT_SECONDS = 5

    def __init__(
        self,
        nominatim_url: Optional[str],
        delay_seconds: float = 1.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.nominatim_url = nominatim_url.rstrip("/") if nominatim_url else None
        self.delay_seconds = delay_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})
        self._sleep = sleep

    def _throttle(self):
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)

    def _reverse(self, lat: float, lon: float) -> Dict:
        params = {
            "format": "json",
            "lat": lat,
            "lon": lon,
            "zoom": 16,
            "addressdetails": 1,
            "accept-language": "id",
        }
        try:
            self._throttle()
            response = self.session.get(
                f"{self.nominatim_url}/reverse", params=params, timeout=self.TIMEOUT_SECONDS
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            log.error(f"Reverse geocoding timed out for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"timed out after {self.TIMEOUT_SECONDS}s") from e
        except (requests.RequestException, ValueError) as e:
            log.error(f"Reverse geocoding failed for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"request failed: {e}") from e

    def resolve(self, lat: float, lon: float) -> AddressDetails:
        """
        Convert coordinates to a structured address.

        Raises:
            ConfigurationError: NOMINATIM_URL is not set
            UpstreamFailure: request failed or no address was returned
        """
        if not self.nominatim_url:
            raise ConfigurationError(SOURCE_NAME, "Nominatim URL not configured")

        result = self._reverse(lat, lon)
        address = result.get("address") if isinstance(result, dict) else None
        if not address:
            raise UpstreamFailure(SOURCE_NAME, "no address data returned")

        details = build_address_details(address)
        log.info(f"Reverse geocoded ({lat:.4f}, {lon:.4f}) -> {details.full}")
        return details
