from __future__ import annotations

from datetime import datetime
from http import HTTPStatus
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aviation_wrapper.airports import AirportRecord, validate_identifier
from aviation_wrapper.cache import TTLCache
from aviation_wrapper.config import Settings, settings
from aviation_wrapper.errors import GENERIC_INTERNAL_MESSAGE, AviationServiceError, ErrorKind, ProtocolError
from aviation_wrapper.logging_setup import setup_logging
from aviation_wrapper.metrics import MetricsRegistry
from aviation_wrapper.resilience import CircuitBreaker, RetryPolicy
from aviation_wrapper.services.aviation_api import AviationApiClient
from aviation_wrapper.services.lookup import AirportService


logger = logging.getLogger(__name__)


class AirportResponse(BaseModel):
    icao: str
    iata: str | None = None
    facility_name: str | None = None
    region: str | None = None
    district_office: str | None = None
    state: str | None = None
    state_full: str | None = None
    city: str | None = None
    county: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    elevation: int | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str
    path: str
    timestamp: datetime
    status: int


def build_service(cfg: Settings) -> AirportService:
    breaker = CircuitBreaker(
        name="aviation-api",
        window_size=cfg.circuit_window_size,
        minimum_calls=cfg.circuit_minimum_calls,
        failure_rate_threshold=cfg.circuit_failure_rate_threshold,
        open_seconds=cfg.circuit_open_seconds,
        half_open_max_calls=cfg.circuit_half_open_calls,
    )
    retry = RetryPolicy(
        max_attempts=cfg.retry_max_attempts,
        initial_backoff_seconds=cfg.retry_initial_backoff_seconds,
        multiplier=cfg.retry_backoff_multiplier,
    )
    client = AviationApiClient(
        base_url=cfg.aviation_api_base_url,
        timeout_seconds=cfg.aviation_api_timeout_seconds,
        breaker=breaker,
        retry=retry,
    )
    cache: TTLCache[AirportRecord] = TTLCache(default_ttl_seconds=cfg.cache_ttl_seconds, maxsize=cfg.cache_maxsize)
    return AirportService(client=client, cache=cache)


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(
        error=HTTPStatus(status_code).phrase,
        message=message,
        path=request.url.path,
        timestamp=datetime.now(),
        status=status_code,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def create_app(cfg: Settings | None = None, service: AirportService | None = None) -> FastAPI:
    cfg = cfg or settings
    setup_logging(cfg.log_level)

    app = FastAPI(title="Aviation API Wrapper", version="0.1.0")
    app.state.airport_service = service or build_service(cfg)

    @app.exception_handler(AviationServiceError)
    def handle_aviation_error(request: Request, exc: AviationServiceError) -> JSONResponse:
        if isinstance(exc, ProtocolError):
            logger.error("Upstream protocol failure: %s", exc.detail, exc_info=exc, extra={"request_path": request.url.path})
        elif exc.kind is ErrorKind.BAD_INPUT:
            logger.warning("Validation error: %s", exc.message, extra={"request_path": request.url.path})
        elif exc.kind is ErrorKind.SERVICE_UNAVAILABLE:
            logger.warning("Aviation service unavailable: %s", exc.message, extra={"request_path": request.url.path})
        return _error_response(request, exc.kind.status_code, exc.message)

    @app.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error: %s", exc, exc_info=exc, extra={"request_path": request.url.path})
        return _error_response(request, 500, GENERIC_INTERNAL_MESSAGE)

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        client = getattr(app.state.airport_service, "client", None)
        breaker = getattr(client, "breaker", None)
        return {"status": "ok", "circuit_breaker": breaker.snapshot() if breaker else None}

    @app.get("/api/metrics")
    def metrics() -> dict[str, int]:
        registry: MetricsRegistry = app.state.airport_service.metrics
        return registry.snapshot()

    @app.get(
        "/api/v1/airports/{icao_code}",
        response_model=AirportResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid ICAO code format"},
            404: {"model": ErrorResponse, "description": "Airport not found"},
            503: {"model": ErrorResponse, "description": "Service unavailable"},
        },
    )
    def get_airport(icao_code: str) -> dict[str, Any]:
        logger.info("Received request for airport with ICAO code: %s", icao_code)
        code = validate_identifier(icao_code)
        record = app.state.airport_service.get_airport(code)
        logger.info("Successfully processed request for ICAO: %s", code, extra={"icao": code})
        return record.to_dict()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
