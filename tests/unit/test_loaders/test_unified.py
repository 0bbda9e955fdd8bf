import pytest
from unittest.mock import MagicMock

from core.cache import SnapshotCache
from core.config import Settings
from core.errors import EnvironmentalDataError, UpstreamFailure
from core.models import Coordinate
from loaders.demographics import DISTRICT_SOURCE, PopulationResult
from loaders.elevation import ElevationResult
from loaders.osm import LandCoverResult
from loaders.unified import EnvironmentalAggregator
from loaders.weather import RainfallResult

# Malioboro, inside the city box
POINT = Coordinate(-7.7956, 110.3695)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def sources():
    elevation = MagicMock()
    elevation.get_elevation.return_value = ElevationResult(
        latitude=POINT.latitude, longitude=POINT.longitude,
        elevation_meters=114.6, data_source="Open-Elevation API",
    )

    osm = MagicMock()
    osm.fetch_land_cover.return_value = LandCoverResult(
        latitude=POINT.latitude, longitude=POINT.longitude,
        land_cover="Permukiman", dominant_tag="building",
        feature_count=40, tag_counts=(("building", 40),),
    )

    weather = MagicMock()
    weather.get_monthly_rainfall.return_value = RainfallResult(
        latitude=POINT.latitude, longitude=POINT.longitude,
        monthly_rainfall_mm=1440.4, basis="current_1h",
    )

    demographics = MagicMock()
    demographics.get_population_density.return_value = PopulationResult(
        population_density=11562.0, data_source=DISTRICT_SOURCE, district="Kota Yogyakarta",
    )
    return elevation, osm, weather, demographics


@pytest.fixture
def cache_clock():
    return FakeClock()


@pytest.fixture
def aggregator(sources, cache_clock):
    elevation, osm, weather, demographics = sources
    return EnvironmentalAggregator(
        elevation, osm, weather, demographics,
        cache=SnapshotCache(ttl_seconds=1800, clock=cache_clock),
    )


def test_aggregate_builds_snapshot(aggregator):
    """Verify every source lands in the snapshot, rounded."""
    snapshot = aggregator.aggregate(POINT)

    assert snapshot.elevation == 115
    assert snapshot.slope == 3.0
    assert snapshot.land_cover == "Permukiman"
    assert snapshot.rainfall == 1440
    assert snapshot.soil_type == "Aluvial"
    assert snapshot.ndvi == 0.22
    assert snapshot.population_density == 11562
    assert snapshot.resolution == "30m"
    assert snapshot.confidence == 85
    assert snapshot.cached is False
    assert snapshot.data_sources == (
        "Open-Elevation API",
        "OpenStreetMap Overpass",
        "OpenWeather API",
        "DIY Soil Database (Real Data)",
        "NDVI Research Data",
        DISTRICT_SOURCE,
    )


def test_processing_time_from_clock(sources):
    elevation, osm, weather, demographics = sources
    clock = MagicMock(side_effect=[10.0, 10.25])
    aggregator = EnvironmentalAggregator(elevation, osm, weather, demographics, clock=clock)

    assert aggregator.aggregate(POINT).processing_time_ms == 250


def test_cache_hit_is_idempotent(aggregator, sources):
    """Second call within the TTL reuses the snapshot."""
    elevation = sources[0]

    first = aggregator.aggregate(POINT)
    second = aggregator.aggregate(Coordinate(-7.79561, 110.36949))

    assert elevation.get_elevation.call_count == 1
    assert second.cached is True
    assert second.processing_time_ms == 50
    assert second.elevation == first.elevation
    assert second.data_sources == first.data_sources

    third = aggregator.aggregate(POINT)
    assert third == second


def test_refetch_after_ttl(aggregator, sources, cache_clock):
    elevation = sources[0]

    aggregator.aggregate(POINT)
    cache_clock.now = 1799.0
    assert aggregator.aggregate(POINT).cached is True

    cache_clock.now = 1800.0
    refreshed = aggregator.aggregate(POINT)

    assert refreshed.cached is False
    assert elevation.get_elevation.call_count == 2


def test_failure_is_not_cached(aggregator, sources):
    elevation, osm, weather, demographics = sources
    osm.fetch_land_cover.side_effect = UpstreamFailure("OpenStreetMap Overpass", "timed out after 10s")

    with pytest.raises(EnvironmentalDataError) as exc:
        aggregator.aggregate(POINT)

    assert exc.value.source == "OpenStreetMap Overpass"
    assert "Environmental data failed" in str(exc.value)
    assert len(aggregator.cache) == 0
    # Later sources are never consulted
    weather.get_monthly_rainfall.assert_not_called()

    osm.fetch_land_cover.side_effect = None
    assert aggregator.aggregate(POINT).cached is False
    assert elevation.get_elevation.call_count == 2


def test_unmapped_point_fails(sources):
    elevation, osm, weather, demographics = sources
    aggregator = EnvironmentalAggregator(elevation, osm, weather, demographics)

    # North of Sleman, east of Kulon Progo: no district
    with pytest.raises(EnvironmentalDataError) as exc:
        aggregator.aggregate(Coordinate(-7.45, 110.50))
    assert exc.value.cause.kind == "classification"


def test_from_settings_respects_cache_flag():
    cache = SnapshotCache()

    enabled = EnvironmentalAggregator.from_settings(Settings(), cache)
    disabled = EnvironmentalAggregator.from_settings(Settings(cache_enabled=False), cache)

    assert enabled.cache is cache
    assert disabled.cache is None
