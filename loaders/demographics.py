"""
Population Density Loader

Uses the GeoNames nearby-place lookup when a username is configured,
with fallback to the DIY district density table (BPS).
"""

import requests
import logging
from dataclasses import dataclass
from typing import Optional

from core import regions
from core.errors import ClassificationFailure

log = logging.getLogger(__name__)

GEONAMES_SOURCE = "GeoNames"
DISTRICT_SOURCE = "DIY Population Database (BPS 2023)"


@dataclass(frozen=True)
class PopulationResult:
    """Population density for a location."""
    population_density: float   # people per km²
    data_source: str
    place_name: Optional[str] = None
    district: Optional[str] = None
    estimated: bool = True      # True when read from the district table


# ═══════════════════════════════════════════════════════════════════════════
# POPULATION LOADER
# ═══════════════════════════════════════════════════════════════════════════
class DemographicsLoader:
    """
    Loads population density for locations.

    Primary source: GeoNames findNearbyJSON (if a username is set)
    Fallback: district density table
    """

    TIMEOUT_SECONDS = 5
    # GeoNames reports a place's population, not its area
    ASSUMED_AREA_SQ_KM = 100
    MIN_DENSITY = 100

    def __init__(
        self,
        username: Optional[str] = None,
        base_url: str = "http://api.geonames.org",
        session: Optional[requests.Session] = None,
    ):
        self.username = username
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def get_population_density(self, lat: float, lon: float) -> PopulationResult:
        """
        Get population density for a location.

        Raises:
            ClassificationFailure: GeoNames gave nothing usable and the
                coordinate is in no known district
        """
        if self.username:
            try:
                result = self._fetch_geonames(lat, lon)
                if result:
                    return result
                log.warning(f"GeoNames has no population near ({lat:.4f}, {lon:.4f}), using district table")
            except (requests.RequestException, ValueError, KeyError, TypeError) as e:
                log.warning(f"GeoNames failed, using district table: {e}")

        return self._district_density(lat, lon)

    def _fetch_geonames(self, lat: float, lon: float) -> Optional[PopulationResult]:
        """Nearest place with a population, or None."""
        params = {
            "lat": lat,
            "lng": lon,
            "username": self.username,
            "maxRows": 1,
        }
        response = self.session.get(
            f"{self.base_url}/findNearbyJSON", params=params, timeout=self.TIMEOUT_SECONDS
        )
        response.raise_for_status()
        data = response.json()

        places = (data.get("geonames") if isinstance(data, dict) else None) or []
        if not isinstance(places, list) or not places or not isinstance(places[0], dict):
            return None

        place = places[0]
        population = place.get("population")
        if not population:
            return None

        density = max(self.MIN_DENSITY, float(population) / self.ASSUMED_AREA_SQ_KM)
        log.debug(f"GeoNames density near ({lat:.4f}, {lon:.4f}): {density:.0f}/km² ({place.get('name')})")
        return PopulationResult(
            population_density=density,
            data_source=GEONAMES_SOURCE,
            place_name=place.get("name"),
            estimated=False,
        )

    def _district_density(self, lat: float, lon: float) -> PopulationResult:
        district = regions.classify_district(lat, lon)
        if district is None or district not in regions.POPULATION_DENSITY:
            raise ClassificationFailure(DISTRICT_SOURCE, "cannot determine population density")

        return PopulationResult(
            population_density=float(regions.POPULATION_DENSITY[district]),
            data_source=DISTRICT_SOURCE,
            district=district,
        )
