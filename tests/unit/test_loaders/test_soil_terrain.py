import math
import pytest

from core.errors import ClassificationFailure
from loaders.soil import get_soil_type
from loaders.terrain import elevation_factor, estimate_slope, get_ndvi


@pytest.mark.parametrize("lat, lon, soil, district", [
    (-7.65, 110.40, "Andosol (Vulkanik)", "Sleman"),
    (-7.78, 110.37, "Aluvial", "Kota Yogyakarta"),
    (-7.90, 110.30, "Latosol", "Bantul"),
    (-8.10, 110.60, "Grumusol (Liat Kapur)", "Gunungkidul"),
    (-7.50, 110.10, "Mediteran", "Kulon Progo"),
])
def test_soil_by_district(lat, lon, soil, district):
    result = get_soil_type(lat, lon)
    assert result.soil_type == soil
    assert result.district == district


def test_soil_outside_districts():
    with pytest.raises(ClassificationFailure):
        get_soil_type(-7.45, 110.50)


def test_elevation_factor_bands():
    assert elevation_factor(100) == 1.0
    assert elevation_factor(200) == 1.0
    assert elevation_factor(350) == 1.2
    assert elevation_factor(800) == 1.5


def test_slope_on_merapi():
    result = estimate_slope(-7.50, 110.45, 800)
    assert result.zone == "Lereng Merapi"
    assert result.slope_degrees == 42.0

    assert estimate_slope(-7.50, 110.45, 300).slope_degrees == 33.6


def test_slope_in_city():
    result = estimate_slope(-7.78, 110.37, 114)
    assert result.zone == "Kota Yogyakarta"
    assert result.slope_degrees == 3.0


def test_slope_rejects_non_finite():
    with pytest.raises(ValueError):
        estimate_slope(-7.78, 110.37, math.nan)


@pytest.mark.parametrize("lat, lon, ndvi, zone", [
    (-7.50, 110.45, 0.72, "Hutan Lereng Merapi"),
    (-8.10, 110.30, 0.31, "Lahan Kering Gunungkidul"),
    (-7.78, 110.37, 0.22, "Permukiman Kota"),
    (-7.80, 110.30, 0.55, "Lahan Pertanian"),
    (-7.65, 110.30, 0.65, "Sawah Irigasi"),
])
def test_ndvi_zones(lat, lon, ndvi, zone):
    result = get_ndvi(lat, lon)
    assert result.ndvi == ndvi
    assert result.zone == zone
