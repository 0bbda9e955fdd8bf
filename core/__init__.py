"""
Core module for the landslide risk engine.
Contains data models, lookup tables, scoring and configuration.

The request orchestrator lives in core.orchestrator and is imported
from there directly, since it depends on the loaders package.
"""

from core.models import (
    Coordinate,
    EnvironmentalSnapshot,
    AddressDetails,
    RiskAssessment,
    RiskLevel,
)
from core.config import Settings, BoundingBox
from core.cache import SnapshotCache
from core.scoring import calculate_risk_score, determine_risk_level, calculate_accuracy, score
from core.narrative import geological_risk

__all__ = [
    # Models
    "Coordinate",
    "EnvironmentalSnapshot",
    "AddressDetails",
    "RiskAssessment",
    "RiskLevel",
    # Configuration
    "Settings",
    "BoundingBox",
    "SnapshotCache",
    # Scoring
    "calculate_risk_score",
    "determine_risk_level",
    "calculate_accuracy",
    "score",
    "geological_risk",
]
