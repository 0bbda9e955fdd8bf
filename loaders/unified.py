"""
Environmental Aggregator - Combines all source adapters into one snapshot.

Fetches, in order:
- Elevation from an Open-Elevation API
- Slope derived from elevation and the zone table
- Land cover from OpenStreetMap Overpass
- Rainfall from OpenWeather
- Soil type from the district soil table
- NDVI from the zone table
- Population density from GeoNames or the district table

All-or-nothing: the first failing source fails the whole snapshot and
nothing is cached.
"""

import logging
import time
from dataclasses import replace
from typing import Callable, List, Optional

from core.cache import SnapshotCache
from core.config import Settings
from core.errors import DataSourceError, EnvironmentalDataError
from core.models import Coordinate, EnvironmentalSnapshot, round_half_up
from loaders import terrain
from loaders.demographics import DemographicsLoader
from loaders.elevation import ElevationLoader
from loaders.osm import OSMLoader
from loaders.soil import get_soil_type
from loaders.weather import WeatherLoader

log = logging.getLogger(__name__)

RESOLUTION = "30m"
CONFIDENCE = 85
# Reported processing time for a cache hit
CACHE_HIT_PROCESSING_MS = 50


class EnvironmentalAggregator:
    """
    Builds an EnvironmentalSnapshot for a coordinate.

    Usage:
        cache = SnapshotCache(ttl_seconds=1800)
        aggregator = EnvironmentalAggregator.from_settings(settings, cache)
        snapshot = aggregator.aggregate(Coordinate(-7.78, 110.37))
    """

    def __init__(
        self,
        elevation: ElevationLoader,
        osm: OSMLoader,
        weather: WeatherLoader,
        demographics: DemographicsLoader,
        cache: Optional[SnapshotCache] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.elevation = elevation
        self.osm = osm
        self.weather = weather
        self.demographics = demographics
        self.cache = cache
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, cache: Optional[SnapshotCache] = None
    ) -> "EnvironmentalAggregator":
        return cls(
            elevation=ElevationLoader(settings.elevation_api_url),
            osm=OSMLoader(settings.overpass_url),
            weather=WeatherLoader(settings.openweather_api_key, settings.openweather_url),
            demographics=DemographicsLoader(settings.geonames_username, settings.geonames_url),
            cache=cache if settings.cache_enabled else None,
        )

    def aggregate(self, coordinate: Coordinate) -> EnvironmentalSnapshot:
        """
        Fetch every environmental signal for a coordinate.

        Raises:
            EnvironmentalDataError: wrapping the first source failure
        """
        key = coordinate.cache_key()

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                log.debug(f"Using cached environmental data for {key}")
                return replace(cached, cached=True, processing_time_ms=CACHE_HIT_PROCESSING_MS)

        log.info(f"Fetching environmental data for {key}")
        start = self._clock()
        try:
            snapshot = self._fetch(coordinate)
        except (DataSourceError, ValueError) as e:
            log.error(f"Environmental data failed for {key}: {e}")
            raise EnvironmentalDataError(e) from e

        snapshot = replace(
            snapshot,
            processing_time_ms=int(round_half_up((self._clock() - start) * 1000)),
        )
        if self.cache is not None:
            self.cache.set(key, snapshot)
        return snapshot

    def _fetch(self, coordinate: Coordinate) -> EnvironmentalSnapshot:
        """Run the adapters in order, collecting provenance as each succeeds."""
        lat, lon = coordinate.latitude, coordinate.longitude
        data_sources: List[str] = []

        elevation = self.elevation.get_elevation(lat, lon)
        data_sources.append(elevation.data_source)

        # Slope needs the elevation
        slope = terrain.estimate_slope(lat, lon, elevation.elevation_meters)

        land_cover = self.osm.fetch_land_cover(lat, lon)
        data_sources.append(land_cover.data_source)

        rainfall = self.weather.get_monthly_rainfall(lat, lon)
        data_sources.append(rainfall.data_source)

        soil = get_soil_type(lat, lon)
        data_sources.append(soil.data_source)

        vegetation = terrain.get_ndvi(lat, lon)
        data_sources.append(vegetation.data_source)

        population = self.demographics.get_population_density(lat, lon)
        data_sources.append(population.data_source)

        return EnvironmentalSnapshot(
            elevation=int(round_half_up(elevation.elevation_meters)),
            slope=round_half_up(slope.slope_degrees, 1),
            land_cover=land_cover.land_cover,
            rainfall=int(round_half_up(rainfall.monthly_rainfall_mm)),
            soil_type=soil.soil_type,
            ndvi=round_half_up(vegetation.ndvi, 2),
            population_density=int(round_half_up(population.population_density)),
            resolution=RESOLUTION,
            confidence=CONFIDENCE,
            data_sources=tuple(data_sources),
            cached=False,
        )
