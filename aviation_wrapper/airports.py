from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from aviation_wrapper.errors import InvalidIdentifierError, ProtocolError


@dataclass(frozen=True)
class AirportRecord:
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

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# upstream key -> record field
_TEXT_FIELDS: dict[str, str] = {
    "faa_ident": "iata",
    "facility_name": "facility_name",
    "region": "region",
    "district_office": "district_office",
    "state": "state",
    "state_full": "state_full",
    "city": "city",
    "county": "county",
    "latitude": "latitude",
    "longitude": "longitude",
}


def normalize_identifier(value: str) -> str:
    return (value or "").strip().upper()


def validate_identifier(value: str | None) -> str:
    code = value or ""
    if not code.strip():
        raise InvalidIdentifierError("ICAO code cannot be blank")
    if len(code) != 4:
        raise InvalidIdentifierError("ICAO code must be exactly 4 characters")
    if not (code.isascii() and code.isalpha()):
        raise InvalidIdentifierError("ICAO code must contain only letters")
    return code.upper()


def normalize_entry(raw: Any, identifier: str) -> AirportRecord:
    if not isinstance(raw, Mapping):
        raise ProtocolError(f"expected an object for {identifier}, got {type(raw).__name__}")

    fields: dict[str, Any] = {}
    for key, field in _TEXT_FIELDS.items():
        fields[field] = _text(raw.get(key), key)

    icao = _text(raw.get("icao_ident"), "icao_ident") or identifier
    return AirportRecord(
        icao=icao.upper(),
        elevation=_elevation(raw.get("elevation")),
        **fields,
    )


def _text(value: Any, key: str) -> str | None:
    if value is None:
        return None
    # bool is an int subclass; upstream never means it as a number
    if isinstance(value, bool):
        raise ProtocolError(f"unexpected boolean for {key}")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    raise ProtocolError(f"unexpected {type(value).__name__} for {key}")


def _elevation(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ProtocolError("unexpected boolean for elevation")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ProtocolError(f"non-integral elevation {value!r}")
        return int(value)
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            raise ProtocolError(f"unparseable elevation {value!r}") from None
        if not number.is_integer():
            raise ProtocolError(f"non-integral elevation {value!r}")
        return int(number)
    raise ProtocolError(f"unexpected {type(value).__name__} for elevation")
