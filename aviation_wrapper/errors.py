from __future__ import annotations

from enum import Enum


GENERIC_INTERNAL_MESSAGE = "An unexpected error occurred. Please try again later."
UNAVAILABLE_MESSAGE = "Aviation service temporarily unavailable. Please try again later."


class ErrorKind(str, Enum):
    """Externally observable failure category, each with its HTTP status."""

    NOT_FOUND = "not_found"
    BAD_INPUT = "bad_input"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_INPUT: 400,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.INTERNAL: 500,
}


class AviationServiceError(Exception):
    """Base error; ``kind`` is fixed where the failure is raised."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class AirportNotFoundError(AviationServiceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, icao_code: str) -> None:
        super().__init__(f"Airport with ICAO code '{icao_code}' not found")
        self.icao_code = icao_code


class InvalidIdentifierError(AviationServiceError):
    kind = ErrorKind.BAD_INPUT


class TransientUpstreamError(AviationServiceError):
    """Connection failure, timeout or non-2xx status from upstream. Retryable."""

    kind = ErrorKind.SERVICE_UNAVAILABLE


class ServiceUnavailableError(AviationServiceError):
    """Circuit open or retries exhausted."""

    kind = ErrorKind.SERVICE_UNAVAILABLE

    def __init__(self, message: str = UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class ProtocolError(AviationServiceError):
    """Upstream body could not be parsed or normalized. Never retried.

    ``detail`` holds the internal reason; the public message stays generic.
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, detail: str) -> None:
        super().__init__(GENERIC_INTERNAL_MESSAGE)
        self.detail = detail
