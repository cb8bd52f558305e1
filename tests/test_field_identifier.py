from __future__ import annotations

import unittest

from app.domain.rental_record import FieldMap
from app.mappers.field_identifier import identify_fields, match_columns

STATCAN_SAMPLE_ROW = {
    "REF_DATE": "2023",
    "GEO": "Toronto, Ontario",
    "DGUID": "2016S0503535",
    "Type of structure": "Row and apartment structures of three units and over",
    "Type of unit": "Two bedroom units",
    "UOM": "Dollars",
    "UOM_ID": "81",
    "SCALAR_FACTOR": "units",
    "SCALAR_ID": "0",
    "VECTOR": "v4555",
    "COORDINATE": "1.1.1",
    "VALUE": "1850",
    "STATUS": "",
    "SYMBOL": "",
    "TERMINATED": "",
    "DECIMALS": "0",
}


class TestIdentifyFields(unittest.TestCase):
    def test_resolves_statcan_header(self) -> None:
        field_map = identify_fields(STATCAN_SAMPLE_ROW)

        self.assertEqual(
            field_map,
            FieldMap(
                geography="GEO",
                bedrooms="Type of unit",
                value="VALUE",
                ref_date="REF_DATE",
                structure_type="Type of structure",
            ),
        )

    def test_matching_is_case_insensitive(self) -> None:
        field_map = identify_fields({"city": "Ottawa", "BEDROOMS": "1", "Monthly Rent": "1500"})

        self.assertEqual(field_map.geography, "city")
        self.assertEqual(field_map.bedrooms, "BEDROOMS")
        self.assertEqual(field_map.value, "Monthly Rent")

    def test_unknown_columns_leave_roles_empty(self) -> None:
        with self.assertLogs("app.mappers.field_identifier", level="WARNING"):
            field_map = identify_fields({"foo": "x", "bar": "y"})

        self.assertEqual(field_map, FieldMap())

    def test_first_matching_column_wins(self) -> None:
        field_map = identify_fields({"Location": "Toronto", "Geography": "Ottawa"})

        self.assertEqual(field_map.geography, "Location")


class TestMatchColumns(unittest.TestCase):
    def test_one_column_may_fill_several_roles(self) -> None:
        resolved = match_columns(["Rent period"])

        self.assertEqual(resolved["value"], "Rent period")
        self.assertEqual(resolved["ref_date"], "Rent period")

    def test_custom_rules(self) -> None:
        resolved = match_columns(["a_col", "b_col"], rules=(("first", ("b_",)),))

        self.assertEqual(resolved, {"first": "b_col"})


if __name__ == "__main__":
    unittest.main()
