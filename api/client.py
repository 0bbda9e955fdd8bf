"""
Risk Analysis API Client

Thin requests wrapper for the /api/risk-analysis endpoint, for scripts
and map front-ends written in Python. Connection errors and timeouts
are retried; HTTP error responses are not, they come back as
RiskAnalysisRequestError carrying the server's JSON payload.
"""

import logging
from typing import Any, Dict, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)

ENDPOINT = "/api/risk-analysis"


class RiskAnalysisRequestError(Exception):
    """The server answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, payload: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.payload = payload or {}
        message = self.payload.get("error") or f"HTTP {status_code}"
        details = self.payload.get("details")
        super().__init__(f"{message}: {details}" if details else message)


class RiskAnalysisClient:
    """
    Client for a running risk analysis service.

    Usage:
        client = RiskAnalysisClient("http://localhost:8000")
        result = client.analyze(-7.7956, 110.3695)
        print(result["risk_level"], result["address"])
    """

    USER_AGENT = "DIY-Risk-Analysis-Client/1.0"
    RETRY_WAIT_MIN = 1
    RETRY_WAIT_MAX = 4

    def __init__(
        self,
        base_url: str,
        timeout: float = 8.0,
        retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})

    @property
    def url(self) -> str:
        return f"{self.base_url}{ENDPOINT}"

    def _send(self, method: str, **kwargs) -> requests.Response:
        # One initial attempt plus `retries` more, on transport failures only
        sender = retry(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=1, min=self.RETRY_WAIT_MIN, max=self.RETRY_WAIT_MAX),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            reraise=True,
        )(self.session.request)
        return sender(method, self.url, timeout=self.timeout, **kwargs)

    def _decode(self, response: requests.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            log.warning(f"Risk analysis API returned {response.status_code}")
            raise RiskAnalysisRequestError(
                response.status_code, payload if isinstance(payload, dict) else None
            )
        return payload if isinstance(payload, dict) else {}

    def analyze(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Submit a point for analysis and return the result body."""
        log.info(f"Requesting risk analysis for {latitude}, {longitude}")
        response = self._send("POST", json={"latitude": latitude, "longitude": longitude})
        return self._decode(response)

    def health(self) -> Dict[str, Any]:
        return self._decode(self._send("GET", params={"health": "true"}))

    def environment(self) -> Dict[str, Any]:
        return self._decode(self._send("GET", params={"test-env": "true"}))

    def info(self) -> Dict[str, Any]:
        return self._decode(self._send("GET"))
