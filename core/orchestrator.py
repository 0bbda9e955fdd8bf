"""
Risk Analysis Orchestrator

Entry point for one analysis request:
    VALIDATING -> FETCHING -> SCORING -> RESPONDING

The environmental aggregator and the geocoder run concurrently. If
either fails, the request fails with a structured error. No simulated
or fallback analysis data is ever produced here.
"""

import logging
import math
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.cache import SnapshotCache
from core.config import Settings
from core.errors import (
    DataSourceError,
    EnvironmentalDataError,
    GeocodingError,
    StageError,
    ValidationError,
)
from core.models import AddressDetails, Coordinate, EnvironmentalSnapshot, RiskAssessment
from core.narrative import geological_risk
from core.scoring import calculate_accuracy, score
from loaders.demographics import GEONAMES_SOURCE, DISTRICT_SOURCE
from loaders.geocoder import Geocoder
from loaders.unified import EnvironmentalAggregator

log = logging.getLogger(__name__)

SERVICE_NAME = "DIY Landslide Risk Analysis API"
SERVICE_VERSION = "6.0.0"
SYSTEM_MODE = "REAL DATA ONLY (NO SIMULATION)"
REGION_NAME = "Daerah Istimewa Yogyakarta, Indonesia"
ENDPOINT = "/api/risk-analysis"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

ADDRESS_EXAMPLE = {
    "full": ("Jalan Malioboro, Kelurahan Gedong Tengen, Kecamatan Gondomanan, "
             "Kota Yogyakarta, Daerah Istimewa Yogyakarta, Kode Pos 55122"),
    "display": [
        "Jalan Malioboro",
        "Kelurahan Gedong Tengen",
        "Kecamatan Gondomanan",
        "Kota Yogyakarta",
        "Daerah Istimewa Yogyakarta - Kode Pos 55122",
    ],
}
ADDRESS_COMPONENTS = [
    "road (jalan)",
    "hamlet (dusun)",
    "village (desa)",
    "suburb (kelurahan)",
    "city_district (kecamatan)",
    "city/town (kota)",
    "county (kabupaten)",
    "state (provinsi)",
    "postcode (kode pos)",
]


class AnalysisStage(Enum):
    VALIDATING = "validating"
    FETCHING = "fetching"
    SCORING = "scoring"
    RESPONDING = "responding"


@dataclass
class ServiceResponse:
    """Status code and JSON-ready body, independent of any web framework."""
    status_code: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ═══════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════
def _parse_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def validate_request(payload: Any, settings: Settings) -> Coordinate:
    """
    Turn a raw request body into a coordinate inside the supported region.

    Raises:
        ValidationError: with constraint "required", "numeric" or "bounds"
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object", constraint="required")

    if payload.get("latitude") is None or payload.get("longitude") is None:
        raise ValidationError("Latitude and longitude are required", constraint="required")

    lat = _parse_number(payload["latitude"])
    lon = _parse_number(payload["longitude"])
    if lat is None or lon is None:
        raise ValidationError("Latitude and longitude must be numbers", constraint="numeric")

    bounds = settings.bounds
    if not bounds.contains(lat, lon):
        raise ValidationError(
            "Coordinates are outside the DIY analysis region",
            constraint="bounds",
            details=bounds.describe(),
            valid_bounds=bounds.to_dict(),
        )

    return Coordinate(latitude=lat, longitude=lon)


# ═══════════════════════════════════════════════════════════════════════════
# SERVICE
# ═══════════════════════════════════════════════════════════════════════════
class RiskAnalysisService:
    """
    Validates, fetches, scores and assembles one risk analysis.

    Usage:
        service = RiskAnalysisService.from_settings(Settings.from_env())
        response = service.analyze({"latitude": -7.79, "longitude": 110.36})
    """

    def __init__(
        self,
        settings: Settings,
        aggregator: EnvironmentalAggregator,
        geocoder: Geocoder,
        cache: Optional[SnapshotCache] = None,
    ):
        self.settings = settings
        self.aggregator = aggregator
        self.geocoder = geocoder
        self.cache = cache

    @classmethod
    def from_settings(cls, settings: Settings) -> "RiskAnalysisService":
        cache = SnapshotCache(ttl_seconds=settings.cache_ttl_seconds)
        return cls(
            settings=settings,
            aggregator=EnvironmentalAggregator.from_settings(settings, cache),
            geocoder=Geocoder(settings.nominatim_url, delay_seconds=settings.geocoder_delay_seconds),
            cache=cache,
        )

    # ─── submit-for-analysis ──────────────────────────────────────────────
    def analyze(self, payload: Any) -> ServiceResponse:
        start = time.perf_counter()
        request_id = uuid.uuid4().hex[:8]
        stage = AnalysisStage.VALIDATING
        log.info(f"Risk analysis request {request_id} [{stage.value}]")

        try:
            coordinate = validate_request(payload, self.settings)
        except ValidationError as e:
            log.warning(f"Request {request_id} rejected ({e.constraint}): {e.message}")
            return ServiceResponse(status_code=400, body=e.to_dict())

        stage = AnalysisStage.FETCHING
        log.info(f"Request {request_id} [{stage.value}] {coordinate.latitude}, {coordinate.longitude}")
        snapshot, address, failures = self._fetch(coordinate)
        if failures:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            log.error(f"Request {request_id} failed after {elapsed_ms}ms: {'; '.join(str(f) for f in failures)}")
            return ServiceResponse(status_code=500, body=self._failure_body(stage, failures))

        stage = AnalysisStage.SCORING
        assessment = self._score(coordinate, snapshot)

        stage = AnalysisStage.RESPONDING
        processing_ms = int((time.perf_counter() - start) * 1000)
        body = self._build_body(request_id, snapshot, address, assessment, processing_ms)
        log.info(
            f"Request {request_id} done: score={assessment.risk_score} ({assessment.risk_level.value}), "
            f"accuracy={assessment.accuracy}%, cached={snapshot.cached}, {processing_ms}ms"
        )
        return ServiceResponse(status_code=200, body=body)

    def _fetch(
        self, coordinate: Coordinate
    ) -> Tuple[Optional[EnvironmentalSnapshot], Optional[AddressDetails], List[StageError]]:
        """Run aggregator and geocoder together and collect every failure."""
        failures: List[StageError] = []
        snapshot = address = None

        with ThreadPoolExecutor(max_workers=2) as executor:
            env_future = executor.submit(self.aggregator.aggregate, coordinate)
            geo_future = executor.submit(
                self.geocoder.resolve, coordinate.latitude, coordinate.longitude
            )

            try:
                snapshot = env_future.result()
            except EnvironmentalDataError as e:
                failures.append(e)
            except Exception as e:
                log.exception("Unexpected aggregator failure")
                failures.append(EnvironmentalDataError(e))

            try:
                address = geo_future.result()
            except DataSourceError as e:
                failures.append(GeocodingError(e))
            except Exception as e:
                log.exception("Unexpected geocoder failure")
                failures.append(GeocodingError(e))

        return snapshot, address, failures

    def _score(self, coordinate: Coordinate, snapshot: EnvironmentalSnapshot) -> RiskAssessment:
        risk_score, risk_level = score(
            snapshot.elevation,
            snapshot.slope,
            snapshot.rainfall,
            snapshot.land_cover,
            snapshot.soil_type,
        )
        return RiskAssessment(
            risk_score=risk_score,
            risk_level=risk_level,
            geological_risk=geological_risk(
                risk_level, snapshot.slope, snapshot.elevation,
                coordinate.latitude, coordinate.longitude,
            ),
            accuracy=calculate_accuracy(snapshot.resolution, snapshot.confidence, snapshot.data_sources),
            timestamp=_now_iso(),
        )

    def _build_body(
        self,
        request_id: str,
        snapshot: EnvironmentalSnapshot,
        address: AddressDetails,
        assessment: RiskAssessment,
        processing_ms: int,
    ) -> Dict[str, Any]:
        population_source = (
            GEONAMES_SOURCE if GEONAMES_SOURCE in snapshot.data_sources else DISTRICT_SOURCE
        )
        body: Dict[str, Any] = {
            "elevation": snapshot.elevation,
            "slope": snapshot.slope,
            "land_cover": snapshot.land_cover,
            "rainfall": snapshot.rainfall,
            "soil_type": snapshot.soil_type,
            "address": address.full,
            "address_details": address.to_dict(),
        }
        body.update(assessment.to_dict())
        body["metadata"] = {
            "request_id": request_id,
            "sources": {
                "elevation": "Open-Elevation API",
                "rainfall": "OpenWeather API (real-time)",
                "land_cover": "OpenStreetMap Overpass",
                "soil_type": "DIY Soil Database (Real Data)",
                "population": population_source,
                "address": "OpenStreetMap Nominatim",
            },
            "ndvi": snapshot.ndvi,
            "population_density": snapshot.population_density,
            "resolution": snapshot.resolution,
            "confidence": snapshot.confidence,
            "cached": snapshot.cached,
            "environment_processing_time_ms": snapshot.processing_time_ms,
            "processing_time_ms": processing_ms,
            "data_sources": list(snapshot.data_sources),
        }
        return body

    def _failure_body(self, stage: AnalysisStage, failures: List[StageError]) -> Dict[str, Any]:
        return {
            "error": "Risk analysis failed",
            "stage": stage.value,
            "failed_sources": [
                {
                    "stage": type(f).stage_label,
                    "source": f.source,
                    "kind": getattr(f.cause, "kind", "unexpected"),
                }
                for f in failures
            ],
            "details": "; ".join(str(f) for f in failures),
            "solution": "Check internet connectivity and API key configuration",
            "requires": [
                "Coordinates inside the DIY region",
                "Internet connection for external APIs",
                "Valid API keys (OpenWeather, GeoNames)",
                "API URL configuration (Elevation, Nominatim, Overpass)",
            ],
            "note": "No simulated or fallback data was substituted.",
            "timestamp": _now_iso(),
        }

    # ─── health / info ────────────────────────────────────────────────────
    def _cache_stats(self) -> Dict[str, Any]:
        if self.cache is None:
            return {"size": 0, "ttl_minutes": self.settings.cache_ttl_seconds / 60}
        return self.cache.stats()

    def describe(self, health: bool = False, test_env: bool = False) -> ServiceResponse:
        """Read-only service information. Never fetches anything."""
        if test_env:
            return ServiceResponse(status_code=200, body=self._environment_summary())
        if health:
            return ServiceResponse(status_code=200, body=self._health())
        return ServiceResponse(status_code=200, body=self._service_description())

    def _health(self) -> Dict[str, Any]:
        api_status = self.settings.api_status()
        all_configured = all(api_status.values())
        cache_stats = self._cache_stats()
        services = {
            name: "Available" if configured else "REQUIRED"
            for name, configured in api_status.items()
        }
        services["caching"] = (
            f"Active ({cache_stats['ttl_minutes']:g}min TTL)" if self.settings.cache_enabled else "Disabled"
        )
        return {
            "status": "healthy" if all_configured else "degraded",
            "timestamp": _now_iso(),
            "system_mode": SYSTEM_MODE,
            "services": services,
            "statistics": {
                "cache_size": cache_stats["size"],
                "cache_ttl_minutes": cache_stats["ttl_minutes"],
                "real_data_coverage": "100%" if all_configured else "Partial",
                "simulation_mode": "DISABLED",
            },
            "limits": {
                "region": "DIY Yogyakarta",
                "bounds": self.settings.bounds.to_dict(),
                "resolution": "10-100m (varies by source)",
            },
            "address_system": {
                "features": [
                    "Full administrative hierarchy",
                    "Village/Kelurahan level",
                    "District/Kecamatan level",
                    "City/Kabupaten level",
                    "Province level with postal code",
                ],
                "example": ADDRESS_EXAMPLE["full"],
            },
            "note": (
                "System ready for real data analysis" if all_configured
                else "System requires all API configurations for full functionality"
            ),
        }

    def _environment_summary(self) -> Dict[str, Any]:
        api_status = self.settings.api_status()
        catalogue = [
            ("openweather_api", "OpenWeather API (rainfall)"),
            ("elevation_api", "Open-Elevation API (elevation)"),
            ("geonames_api", "GeoNames (population)"),
            ("osm_geocoding", "OpenStreetMap Nominatim (address)"),
            ("osm_overpass", "OpenStreetMap Overpass (land cover)"),
        ]
        return {
            "status": "success",
            "timestamp": _now_iso(),
            "system_mode": SYSTEM_MODE,
            "environment_config": {
                "diy_bounds": self.settings.bounds.to_dict(),
                "api_status": api_status,
                "real_data_enabled": api_status["openweather_api"] or api_status["geonames_api"],
                "cache_enabled": self.settings.cache_enabled,
                "settings": self.settings.to_dict(),
            },
            "cache_stats": self._cache_stats(),
            "data_sources": {
                "real": [label for key, label in catalogue if api_status[key]],
                "database": [
                    "DIY Soil Database (real research data)",
                    "DIY Population Database (BPS 2023)",
                ],
                "research": [
                    "NDVI Data (research-based)",
                    "Slope Data (DEM-based)",
                ],
            },
            "address_format": {
                "supports_hierarchy": True,
                "components_available": ADDRESS_COMPONENTS,
                "source": "OpenStreetMap Nominatim",
            },
            "simulation_mode": "DISABLED",
        }

    def _service_description(self) -> Dict[str, Any]:
        return {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Landslide risk analysis from real environmental data with full address hierarchy",
            "status": "OPERATIONAL",
            "mode": SYSTEM_MODE,
            "endpoints": {
                "POST": ENDPOINT,
                "GET-health": f"{ENDPOINT}?health=true",
                "GET-test-env": f"{ENDPOINT}?test-env=true",
            },
            "required_apis": [
                "OpenWeather API (rainfall)",
                "Open-Elevation API (elevation)",
                "GeoNames (population)",
                "OpenStreetMap Nominatim (addresses)",
                "OpenStreetMap Overpass (land cover)",
            ],
            "real_databases": [
                "DIY Soil Database (real research data)",
                "DIY Population Database (BPS 2023 data)",
            ],
            "simulation_mode": "DISABLED",
            "address_format": {
                "hierarchy": True,
                "components": ADDRESS_COMPONENTS,
                "source": "OpenStreetMap Nominatim",
                "example_response": ADDRESS_EXAMPLE,
            },
            "region": REGION_NAME,
            "timestamp": _now_iso(),
            "operational": True,
        }

    def preflight(self) -> ServiceResponse:
        """Allowed verbs for capability negotiation, no body."""
        return ServiceResponse(status_code=200, body=None, headers=dict(PREFLIGHT_HEADERS))
