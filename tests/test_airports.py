"""Tests for AirportRecord normalization and ICAO code validation."""

import dataclasses

import pytest

from aviation_wrapper.airports import AirportRecord, normalize_entry, normalize_identifier, validate_identifier
from aviation_wrapper.errors import ErrorKind, InvalidIdentifierError, ProtocolError

from helpers import full_entry, minimal_entry


class TestNormalizeEntry:
    def test_maps_every_upstream_field(self):
        record = normalize_entry(full_entry("KBAB"), "KBAB")
        assert record == AirportRecord(
            icao="KBAB",
            iata="BAB",
            facility_name="BEALE AFB",
            region="AWP",
            district_office="NONE",
            state="CA",
            state_full="CALIFORNIA",
            city="MARYSVILLE",
            county="YUBA",
            latitude="39-08-11.8000N",
            longitude="121-26-12.1000W",
            elevation=113,
        )

    def test_minimal_entry_leaves_missing_fields_empty(self):
        record = normalize_entry(minimal_entry("KBAB"), "KBAB")
        assert record.icao == "KBAB"
        assert record.facility_name == "BEALE AFB"
        assert record.city == "MARYSVILLE"
        assert record.iata is None
        assert record.state is None
        assert record.state_full is None
        assert record.elevation is None

    def test_missing_icao_falls_back_to_requested_code(self):
        record = normalize_entry({"facility_name": "SOMEWHERE"}, "EGLL")
        assert record.icao == "EGLL"

    def test_icao_is_uppercased(self):
        record = normalize_entry({"icao_ident": "kjfk"}, "KJFK")
        assert record.icao == "KJFK"

    def test_blank_strings_become_none(self):
        record = normalize_entry({"icao_ident": "KBAB", "faa_ident": "  ", "county": ""}, "KBAB")
        assert record.iata is None
        assert record.county is None

    def test_numeric_coordinates_become_strings(self):
        record = normalize_entry({"icao_ident": "KBAB", "latitude": 39.136, "longitude": -121.4367}, "KBAB")
        assert record.latitude == "39.136"
        assert record.longitude == "-121.4367"

    def test_unknown_keys_are_ignored(self):
        entry = minimal_entry()
        entry["something_new"] = {"nested": True}
        assert normalize_entry(entry, "KBAB").icao == "KBAB"

    @pytest.mark.parametrize(
        "raw, expected",
        [(113, 113), ("113", 113), ("1,234", 1234), (4410.0, 4410), ("-12", -12), ("19.0", 19), ("", None), (None, None)],
    )
    def test_elevation_parsing(self, raw, expected):
        record = normalize_entry({"icao_ident": "KBAB", "elevation": raw}, "KBAB")
        assert record.elevation == expected

    @pytest.mark.parametrize("raw", ["high", "12.5", 12.5, True, [113], {"ft": 113}])
    def test_bad_elevation_is_protocol_error(self, raw):
        with pytest.raises(ProtocolError):
            normalize_entry({"icao_ident": "KBAB", "elevation": raw}, "KBAB")

    @pytest.mark.parametrize("raw", [None, "KBAB", ["KBAB"], 42])
    def test_non_object_entry_is_protocol_error(self, raw):
        with pytest.raises(ProtocolError) as exc_info:
            normalize_entry(raw, "KBAB")
        assert exc_info.value.kind is ErrorKind.INTERNAL

    def test_structured_text_field_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            normalize_entry({"icao_ident": "KBAB", "city": ["MARYSVILLE"]}, "KBAB")


class TestAirportRecord:
    def test_is_immutable(self):
        record = AirportRecord(icao="KBAB")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.city = "ELSEWHERE"

    def test_to_dict_has_public_field_names(self):
        data = AirportRecord(icao="KBAB", elevation=113).to_dict()
        assert list(data) == [
            "icao",
            "iata",
            "facility_name",
            "region",
            "district_office",
            "state",
            "state_full",
            "city",
            "county",
            "latitude",
            "longitude",
            "elevation",
        ]
        assert data["elevation"] == 113
        assert data["iata"] is None


class TestIdentifiers:
    @pytest.mark.parametrize("raw", ["kbab", "KbAb", "KBAB", " kbab "])
    def test_normalize_uppercases(self, raw):
        assert normalize_identifier(raw) == "KBAB"

    def test_validate_returns_uppercase(self):
        assert validate_identifier("egll") == "EGLL"

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("", "ICAO code cannot be blank"),
            ("    ", "ICAO code cannot be blank"),
            (None, "ICAO code cannot be blank"),
            ("KBA", "ICAO code must be exactly 4 characters"),
            ("KBABC", "ICAO code must be exactly 4 characters"),
            ("KB1B", "ICAO code must contain only letters"),
            ("KB-B", "ICAO code must contain only letters"),
            ("KBÄB", "ICAO code must contain only letters"),
            ("KBAB ", "ICAO code must be exactly 4 characters"),
            (" KBAB", "ICAO code must be exactly 4 characters"),
            ("KBAB\t", "ICAO code must be exactly 4 characters"),
            ("KB B", "ICAO code must contain only letters"),
        ],
    )
    def test_validate_rejects(self, raw, message):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            validate_identifier(raw)
        assert exc_info.value.message == message
        assert exc_info.value.kind is ErrorKind.BAD_INPUT
