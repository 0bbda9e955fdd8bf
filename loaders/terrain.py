"""
Terrain estimates derived from the zone tables.

Slope comes from the zone's representative value scaled by elevation;
NDVI from the zone's reference value. Neither makes a network call.
"""

import math
from dataclasses import dataclass

from core import regions
from core.models import round_half_up

SLOPE_SOURCE = "Slope Data (DEM-based)"
NDVI_SOURCE = "NDVI Research Data"


@dataclass(frozen=True)
class SlopeResult:
    slope_degrees: float
    zone: str
    elevation_factor: float
    data_source: str = SLOPE_SOURCE


@dataclass(frozen=True)
class VegetationResult:
    ndvi: float
    zone: str
    data_source: str = NDVI_SOURCE


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")


def elevation_factor(elevation: float) -> float:
    """Steeper terrain is assumed at altitude."""
    if elevation > 500:
        return 1.5
    if elevation > 200:
        return 1.2
    return 1.0


def estimate_slope(lat: float, lon: float, elevation: float) -> SlopeResult:
    """Representative slope in degrees, rounded to one decimal."""
    _require_finite(lat=lat, lon=lon, elevation=elevation)
    zone = regions.slope_zone(lat, lon)
    factor = elevation_factor(elevation)
    slope = regions.SLOPE_ZONES[zone]["avg"] * factor
    return SlopeResult(
        slope_degrees=round_half_up(slope, 1),
        zone=zone,
        elevation_factor=factor,
    )


def get_ndvi(lat: float, lon: float) -> VegetationResult:
    """Reference vegetation index for the coordinate's zone."""
    _require_finite(lat=lat, lon=lon)
    zone = regions.vegetation_zone(lat, lon)
    return VegetationResult(ndvi=regions.NDVI_ZONES[zone]["avg"], zone=zone)
