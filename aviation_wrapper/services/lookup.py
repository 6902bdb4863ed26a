from __future__ import annotations

import logging
from typing import Optional, Protocol

from aviation_wrapper.airports import AirportRecord, normalize_identifier
from aviation_wrapper.cache import AirportCache
from aviation_wrapper.errors import AirportNotFoundError
from aviation_wrapper.metrics import MetricsRegistry


logger = logging.getLogger(__name__)


class AirportSource(Protocol):
    def fetch(self, icao_code: str) -> Optional[AirportRecord]: ...


class AirportService:
    """Cache-first airport lookup. Only found airports are cached."""

    def __init__(self, *, client: AirportSource, cache: AirportCache, metrics: MetricsRegistry | None = None) -> None:
        self.client = client
        self.cache = cache
        self.metrics = metrics or MetricsRegistry()
        self._requests = self.metrics.counter("airport_requests_total", "Total number of airport requests")
        self._not_found = self.metrics.counter("airport_not_found_total", "Total number of airport not found responses")

    def get_airport(self, icao_code: str) -> AirportRecord:
        code = normalize_identifier(icao_code)
        logger.info("Retrieving airport information for ICAO code: %s", code, extra={"icao": code})
        self._requests.increment()

        cached = self.cache.get(code)
        if cached is not None:
            logger.debug("Cache hit for %s", code, extra={"icao": code})
            return cached

        record = self.client.fetch(code)
        if record is None:
            self._not_found.increment()
            raise AirportNotFoundError(code)

        self.cache.set(code, record)
        return record
