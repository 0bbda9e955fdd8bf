"""
Landslide Risk Scoring

Weighted-sum score over five factors:
- Slope, rainfall and elevation normalized against fixed ceilings
- Land cover and soil type looked up in categorical risk tables
- Score banded into low / medium / high

Also estimates the accuracy of an analysis from its resolution,
confidence and provenance. Pure functions, no I/O.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from core.models import RiskLevel, round_half_up


# ═══════════════════════════════════════════════════════════════════════════
# WEIGHTS AND CEILINGS
# ═══════════════════════════════════════════════════════════════════════════
WEIGHTS: Mapping[str, float] = MappingProxyType({
    "slope": 0.35,
    "rainfall": 0.25,
    "elevation": 0.20,
    "land_cover": 0.15,
    "soil_type": 0.05,
})

MAX_SLOPE_DEGREES = 45.0
MAX_RAINFALL_MM = 400.0     # per month
MAX_ELEVATION_M = 1000.0

DEFAULT_CATEGORY_RISK = 50

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


# ═══════════════════════════════════════════════════════════════════════════
# CATEGORICAL RISK TABLES
# ═══════════════════════════════════════════════════════════════════════════
LAND_COVER_RISK: Mapping[str, int] = MappingProxyType({
    "Lahan Terbuka": 85,
    "Semak Belukar": 65,
    "Rumput": 55,
    "Ladang": 60,
    "Permukiman": 40,
    "Permukiman Padat": 45,
    "Kawasan Komersial": 50,
    "Hutan": 25,
    "Hutan/Pegunungan": 30,
    "Hutan Lahan Kering": 35,
    "Sawah": 30,
    "Lahan Pertanian": 35,
    "Tegalan": 50,
    "Kebun": 40,
    "Perkebunan": 35,
    "Padang Rumput": 40,
    "Lahan Kering Berbatu": 70,
    "Lahan Basah": 30,
    "Badan Air": 10,
    "Area Campuran": 50,
    "Tidak Diketahui": 50,
})

SOIL_RISK: Mapping[str, int] = MappingProxyType({
    "Liat Berat (Grumusol)": 80,
    "Grumusol (Liat Kapur)": 75,
    "Liat": 70,
    "Andosol (Vulkanik)": 75,
    "Mediteran": 60,
    "Latosol": 45,
    "Berpasir": 35,
    "Aluvial": 30,
})

# Base accuracy per declared spatial resolution
RESOLUTION_ACCURACY: Mapping[str, int] = MappingProxyType({
    "10m": 95,
    "10-30m": 90,
    "30m": 85,
    "100m": 75,
    "250m": 65,
    "5566m": 60,
})
DEFAULT_RESOLUTION_ACCURACY = 75
MAX_ACCURACY = 95
SOURCE_BONUS_POINTS = 3
MAX_SOURCE_BONUS = 15
CORROBORATING_MARKERS = ("API", "GeoNames", "OpenStreetMap")


def _normalize(value: float, ceiling: float) -> float:
    """Scale to 0-100 against a ceiling, clamped on both ends."""
    return max(0.0, min(value / ceiling * 100, 100.0))


def slope_score(slope: float) -> float:
    return _normalize(slope, MAX_SLOPE_DEGREES)


def rainfall_score(rainfall: float) -> float:
    return _normalize(rainfall, MAX_RAINFALL_MM)


def elevation_score(elevation: float) -> float:
    return _normalize(elevation, MAX_ELEVATION_M)


def land_cover_risk(land_cover: str) -> int:
    return LAND_COVER_RISK.get(land_cover, DEFAULT_CATEGORY_RISK)


def soil_risk(soil_type: str) -> int:
    return SOIL_RISK.get(soil_type, DEFAULT_CATEGORY_RISK)


# ═══════════════════════════════════════════════════════════════════════════
# SCORER
# ═══════════════════════════════════════════════════════════════════════════
def calculate_risk_score(
    elevation: float,
    slope: float,
    rainfall: float,
    land_cover: str,
    soil_type: str,
) -> int:
    """
    Weighted landslide risk score.

    Args:
        elevation: Meters above sea level
        slope: Degrees
        rainfall: Estimated monthly rainfall in mm
        land_cover: Land cover label (unknown labels weigh 50)
        soil_type: Soil type label (unknown labels weigh 50)

    Returns:
        Integer score in [0, 100]
    """
    weighted = (
        slope_score(slope) * WEIGHTS["slope"] +
        rainfall_score(rainfall) * WEIGHTS["rainfall"] +
        elevation_score(elevation) * WEIGHTS["elevation"] +
        land_cover_risk(land_cover) * WEIGHTS["land_cover"] +
        soil_risk(soil_type) * WEIGHTS["soil_type"]
    )
    return int(round_half_up(min(max(weighted, 0.0), 100.0)))


def determine_risk_level(score: float) -> RiskLevel:
    """Two-cut step function; both boundaries are inclusive."""
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def score(
    elevation: float,
    slope: float,
    rainfall: float,
    land_cover: str,
    soil_type: str,
) -> Tuple[int, RiskLevel]:
    """Score and level in one call."""
    risk_score = calculate_risk_score(elevation, slope, rainfall, land_cover, soil_type)
    return risk_score, determine_risk_level(risk_score)


def count_corroborating_sources(data_sources: Iterable[str]) -> int:
    """Provenance strings that name an external API."""
    return sum(
        1 for source in data_sources
        if any(marker in source for marker in CORROBORATING_MARKERS)
    )


def calculate_accuracy(resolution: str, confidence: float, data_sources: Iterable[str]) -> int:
    """
    Accuracy estimate (0-95).

    Base value from the resolution table, scaled by confidence, plus
    3 points per corroborating external source (at most 15).
    """
    base = RESOLUTION_ACCURACY.get(resolution, DEFAULT_RESOLUTION_ACCURACY)
    bonus = min(MAX_SOURCE_BONUS, count_corroborating_sources(data_sources) * SOURCE_BONUS_POINTS)
    return int(min(MAX_ACCURACY, round_half_up(base * (confidence / 100)) + bonus))
