"""
Risk Analysis HTTP API

FastAPI surface for the risk analysis service:
- POST    /api/risk-analysis               analyze {"latitude", "longitude"}
- GET     /api/risk-analysis?health=true   health report
- GET     /api/risk-analysis?test-env=true environment summary
- OPTIONS /api/risk-analysis               preflight

Run with: uvicorn api.main:app
"""

from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from core.config import Settings, configure_logging
from core.orchestrator import (
    ENDPOINT,
    SERVICE_NAME,
    SERVICE_VERSION,
    RiskAnalysisService,
    ServiceResponse,
)


app = FastAPI(
    title=SERVICE_NAME,
    description="Landslide risk analysis for points inside DIY Yogyakarta.",
    version=SERVICE_VERSION,
)

# Browser map clients call this API directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Built on first use so settings are read once, after the environment is ready
_service: Optional[RiskAnalysisService] = None


def get_service() -> RiskAnalysisService:
    """Process-wide service (and therefore process-wide cache)."""
    global _service
    if _service is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        _service = RiskAnalysisService.from_settings(settings)
    return _service


def _to_response(result: ServiceResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(content=result.body, status_code=result.status_code, headers=result.headers)


@app.post(ENDPOINT, tags=["analysis"])
async def submit_analysis(
    request: Request,
    service: RiskAnalysisService = Depends(get_service),
) -> Response:
    """
    Run a risk analysis for {"latitude": ..., "longitude": ...}.

    The body is read raw so that missing or non-numeric coordinates get
    the service's own 400 payload rather than a schema error.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    # Fetching blocks on network I/O
    result = await run_in_threadpool(service.analyze, payload)
    return _to_response(result)


@app.get(ENDPOINT, tags=["system"])
def service_info(
    health: bool = False,
    test_env: bool = Query(False, alias="test-env"),
    service: RiskAnalysisService = Depends(get_service),
) -> Response:
    """Health (?health=true), environment summary (?test-env=true) or service description."""
    return _to_response(service.describe(health=health, test_env=test_env))


@app.options(ENDPOINT, tags=["system"])
def preflight(service: RiskAnalysisService = Depends(get_service)) -> Response:
    return _to_response(service.preflight())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
