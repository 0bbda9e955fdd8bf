"""
Error taxonomy for the risk engine.

Adapters raise DataSourceError subclasses and never substitute values.
The aggregator and geocoder wrap the first failure in a stage error, and
only the orchestrator turns any of these into a client-facing payload.
"""

from typing import Any, Dict, Optional


class RiskEngineError(Exception):
    """Base class for all risk engine errors."""


class ValidationError(RiskEngineError):
    """Client-attributable input problem (missing, non-numeric, out of region)."""

    def __init__(
        self,
        message: str,
        constraint: str,
        details: Optional[str] = None,
        valid_bounds: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.constraint = constraint
        self.details = details
        self.valid_bounds = valid_bounds

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "constraint": self.constraint}
        if self.details:
            payload["details"] = self.details
        if self.valid_bounds is not None:
            payload["valid_bounds"] = self.valid_bounds
        return payload


class DataSourceError(RiskEngineError):
    """A named source adapter failed."""

    kind = "data_source"

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class ConfigurationError(DataSourceError):
    """A required endpoint or credential is not configured."""

    kind = "configuration"


class UpstreamFailure(DataSourceError):
    """External service unreachable, timed out, non-2xx, or returned nothing usable."""

    kind = "upstream"


class ClassificationFailure(DataSourceError):
    """Coordinate does not map to any known district or zone."""

    kind = "classification"


class StageError(RiskEngineError):
    """A whole fetching stage failed because one of its sources failed."""

    stage_label = "Stage"

    def __init__(self, cause: Exception):
        super().__init__(f"{self.stage_label} failed: {cause}")
        self.cause = cause

    @property
    def source(self) -> Optional[str]:
        return getattr(self.cause, "source", None)


class EnvironmentalDataError(StageError):
    stage_label = "Environmental data"


class GeocodingError(StageError):
    stage_label = "Geocoding"
