from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import requests

from aviation_wrapper.airports import AirportRecord, normalize_entry
from aviation_wrapper.errors import ProtocolError, TransientUpstreamError
from aviation_wrapper.resilience import CircuitBreaker, RetryPolicy, resilient


logger = logging.getLogger(__name__)

AIRPORTS_PATH = "/v1/airports"


class AviationApiClient:
    """Client for the aviationapi.com airports endpoint.

    ``fetch`` returns None when upstream has no entry for the code. Transport
    failures are retried and counted by the circuit breaker; malformed bodies
    raise ProtocolError straight away.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 5.0,
        breaker: CircuitBreaker | None = None,
        retry: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.breaker = breaker or CircuitBreaker()
        self.retry = retry or RetryPolicy()
        self._guarded_fetch = resilient(breaker=self.breaker, retry=self.retry, sleep=sleep)(self._fetch_once)

    def fetch(self, icao_code: str) -> Optional[AirportRecord]:
        return self._guarded_fetch(icao_code)

    def _fetch_once(self, icao_code: str) -> Optional[AirportRecord]:
        logger.debug("Fetching airport data for ICAO code: %s", icao_code, extra={"icao": icao_code})
        url = f"{self.base_url}{AIRPORTS_PATH}"
        try:
            resp = requests.get(url, params={"apt": icao_code}, timeout=self.timeout_seconds)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise TransientUpstreamError(f"aviation API request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error("Aviation API returned a non-JSON body for %s", icao_code, exc_info=True, extra={"icao": icao_code})
            raise ProtocolError("response body is not valid JSON") from e

        try:
            return _first_entry(payload, icao_code)
        except ProtocolError as e:
            logger.error(
                "Aviation API returned an unexpected body for %s: %s",
                icao_code,
                e.detail,
                extra={"icao": icao_code},
            )
            raise


def _first_entry(payload: Any, icao_code: str) -> Optional[AirportRecord]:
    if not isinstance(payload, dict):
        raise ProtocolError(f"expected a JSON object, got {type(payload).__name__}")

    entries = payload.get(icao_code)
    if entries is None:
        return None
    if not isinstance(entries, list):
        raise ProtocolError(f"expected a list for {icao_code}, got {type(entries).__name__}")
    if not entries:
        return None
    if len(entries) > 1:
        # No disambiguation rule upstream; the first entry wins.
        logger.debug("Discarding %d extra entries for %s", len(entries) - 1, icao_code, extra={"icao": icao_code})
    return normalize_entry(entries[0], icao_code)
