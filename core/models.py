"""
Core data models for the landslide risk engine.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from negative infinity (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point. Never mutated once validated."""
    latitude: float
    longitude: float

    def cache_key(self) -> str:
        # 4 decimals is roughly 11 m
        return f"{self.latitude:.4f},{self.longitude:.4f}"

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class EnvironmentalSnapshot:
    """
    Every environmental signal for one coordinate.

    Built by the aggregator once all sources succeed. Cache hits hand
    back a copy with `cached` and `processing_time_ms` replaced.
    """
    elevation: int             # meters
    slope: float               # degrees
    land_cover: str
    rainfall: int              # mm / month
    soil_type: str
    ndvi: float                # 0.0 - 1.0
    population_density: int    # people / km²
    resolution: str = "30m"
    confidence: int = 85       # 0 - 100
    data_sources: Tuple[str, ...] = ()
    cached: bool = False
    processing_time_ms: int = 0


@dataclass(frozen=True)
class AddressDetails:
    """Reverse-geocoded address with its formatted renderings."""
    full: str
    display: Tuple[str, ...]
    components: Mapping[str, str]
    source: str = "nominatim"  # only Nominatim resolves addresses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "full": self.full,
            "display": list(self.display),
            "components": dict(self.components),
            "source": self.source,
        }


class RiskLevel(Enum):
    """Qualitative risk bands."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskAssessment:
    """Scored result for one request. Recomputed every time, never stored."""
    risk_score: int
    risk_level: RiskLevel
    geological_risk: str
    accuracy: int
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "geological_risk": self.geological_risk,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp,
        }


@dataclass
class CacheEntry:
    """A snapshot and the clock reading when it was stored."""
    snapshot: EnvironmentalSnapshot
    created_at: float = field(default_factory=time.monotonic)
