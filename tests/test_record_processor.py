"""
tests/test_record_processor.py

Pytest unit tests for raw row filtering and normalization.

All tests use an injected clock so data ages are deterministic.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.rental_record import FieldMap
from app.services.record_processor import (
    is_ontario_location,
    parse_reference_date,
    process_raw_records,
)

NOW = datetime(2024, 6, 15, tzinfo=timezone.utc)

FIELD_MAP = FieldMap(
    geography="GEO",
    bedrooms="Type of unit",
    value="VALUE",
    ref_date="REF_DATE",
    structure_type="Type of structure",
)


def _row(**overrides: str) -> dict[str, str]:
    row = {
        "REF_DATE": "2023",
        "GEO": "Toronto, Ontario",
        "Type of structure": "Apartment structures of six units and over",
        "Type of unit": "Two bedroom units",
        "VALUE": "1850",
    }
    row.update(overrides)
    return row


class TestIsOntarioLocation:
    @pytest.mark.parametrize(
        "geography",
        ["Toronto, Ontario", "Ottawa-Gatineau, Ontario part, Ontario/Quebec", "Kingston, ON", "Ontario"],
    )
    def test_accepts_ontario(self, geography: str) -> None:
        assert is_ontario_location(geography)

    @pytest.mark.parametrize("geography", ["Montreal, Quebec", "Vancouver, British Columbia", "", None])
    def test_rejects_others(self, geography: str | None) -> None:
        assert not is_ontario_location(geography)


class TestParseReferenceDate:
    def test_bare_year(self) -> None:
        assert parse_reference_date("2023", NOW) == (17, 2023)

    def test_iso_date(self) -> None:
        assert parse_reference_date("2023-10-01", NOW) == (8, 2023)

    def test_embedded_year(self) -> None:
        assert parse_reference_date("October 2022", NOW) == (29, 2022)

    def test_unparseable(self) -> None:
        assert parse_reference_date("n/a", NOW) == (None, None)
        assert parse_reference_date("", NOW) == (None, None)

    def test_future_reference_gives_negative_age(self) -> None:
        months, year = parse_reference_date("2025", NOW)
        assert year == 2025
        assert months == -7


class TestProcessRawRecords:
    def test_normalizes_a_statcan_row(self) -> None:
        records = process_raw_records([_row()], FIELD_MAP, now=NOW)

        assert len(records) == 1
        record = records[0]
        assert record.geography == "Toronto, Ontario"
        assert record.bedrooms == "2"
        assert record.value == "1850"
        assert record.year == 2023
        assert record.data_age_months == 17
        assert record.structure_type == "Apartment structures of six units and over"
        assert record.category == "Highrise"

    def test_excludes_rows_outside_ontario(self) -> None:
        rows = [
            _row(GEO="Montreal, Quebec"),
            _row(GEO="Toronto, Ontario"),
            _row(GEO="Ottawa-Gatineau, Ontario part, Ontario/Quebec"),
        ]

        records = process_raw_records(rows, FIELD_MAP, now=NOW)

        assert [record.geography for record in records] == [
            "Toronto, Ontario",
            "Ottawa-Gatineau, Ontario part, Ontario/Quebec",
        ]

    def test_drops_rows_missing_geography_or_value(self) -> None:
        rows = [_row(GEO=""), _row(VALUE=""), _row()]

        records = process_raw_records(rows, FIELD_MAP, now=NOW)

        assert len(records) == 1

    def test_never_emits_empty_bedrooms_or_value(self) -> None:
        rows = [_row(**{"Type of unit": ""}), _row(**{"Type of unit": "Bachelor units"})]

        records = process_raw_records(rows, FIELD_MAP, now=NOW)

        assert records
        assert all(record.bedrooms and record.value for record in records)

    def test_unmapped_value_column_drops_everything(self) -> None:
        field_map = FieldMap(geography="GEO", bedrooms="Type of unit")

        assert process_raw_records([_row()], field_map, now=NOW) == []

    def test_bedroom_fallback_scans_other_columns(self) -> None:
        field_map = FieldMap(geography="GEO", value="VALUE", ref_date="REF_DATE")
        row = {"GEO": "Hamilton, Ontario", "VALUE": "1400", "REF_DATE": "2023", "Unit kind": "One bedroom units"}

        records = process_raw_records([row], field_map, now=NOW)

        assert records[0].bedrooms == "1"

    def test_date_fallback_uses_period_column(self) -> None:
        field_map = FieldMap(geography="GEO", bedrooms="Type of unit", value="VALUE")
        row = {
            "GEO": "Hamilton, Ontario",
            "VALUE": "1400",
            "Type of unit": "One bedroom units",
            "Reference period": "2022",
        }

        records = process_raw_records([row], field_map, now=NOW)

        assert records[0].ref_date == "2022"
        assert records[0].year == 2022
        assert records[0].data_age_months == 29

    def test_date_fallback_finds_year_in_any_value(self) -> None:
        field_map = FieldMap(geography="GEO", bedrooms="Type of unit", value="VALUE", ref_date="REF_DATE")
        row = {
            "GEO": "Hamilton, Ontario",
            "VALUE": "1400",
            "Type of unit": "One bedroom units",
            "Survey": "October 2022 rental market survey",
        }

        records = process_raw_records([row], field_map, now=NOW)

        assert records[0].ref_date == "October 2022 rental market survey"
        assert records[0].year == 2022
        assert records[0].data_age_months == 29

    def test_unknown_structure_type_has_empty_category(self) -> None:
        records = process_raw_records([_row(**{"Type of structure": "Detached houses"})], FIELD_MAP, now=NOW)

        assert records[0].category == ""
        assert records[0].structure_type == "Detached houses"

    def test_unmapped_structure_column_leaves_structure_empty(self) -> None:
        field_map = FieldMap(geography="GEO", bedrooms="Type of unit", value="VALUE", ref_date="REF_DATE")

        records = process_raw_records([_row()], field_map, now=NOW)

        assert records[0].structure_type == ""
        assert records[0].category == ""
