"""Upstream payload builders and fake responses shared by the tests."""

from unittest.mock import MagicMock

import requests


BASE_URL = "https://aviation.test"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def full_entry(icao="KBAB"):
    return {
        "site_number": "02188.*A",
        "type": "AIRPORT",
        "facility_name": "BEALE AFB",
        "faa_ident": "BAB",
        "icao_ident": icao,
        "region": "AWP",
        "district_office": "NONE",
        "state": "CA",
        "state_full": "CALIFORNIA",
        "county": "YUBA",
        "city": "MARYSVILLE",
        "ownership": "MA",
        "use": "PR",
        "manager": "CES/CEO",
        "latitude": "39-08-11.8000N",
        "latitude_sec": "140891.8000N",
        "longitude": "121-26-12.1000W",
        "longitude_sec": "437172.1000W",
        "elevation": "113",
    }


def minimal_entry(icao="KBAB"):
    return {
        "icao_ident": icao,
        "facility_name": "BEALE AFB",
        "city": "MARYSVILLE",
        "latitude": "39-08-11.8000N",
        "longitude": "121-26-12.1000W",
    }


def fake_response(payload=None, *, status_code=200, json_error=None):
    """Build a fake requests.Response for the airports endpoint."""
    resp = MagicMock()
    resp.status_code = status_code
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Server Error", response=resp)
    else:
        resp.raise_for_status = MagicMock()
    return resp


def found(icao="KBAB", entry=None):
    return fake_response({icao: [entry if entry is not None else full_entry(icao)]})
