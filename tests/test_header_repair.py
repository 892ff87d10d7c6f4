"""
Tests for header repair of legacy matrices.
"""
import pytest

from src.domain.header_repair import (
    create_header_row,
    has_valid_header,
    header_matches_specs,
    needs_header_repair,
    repair_all_sheet_headers,
    repair_sheet_headers,
)
from src.domain.models import Cell, Sheet, Specification
from src.domain.sku_composer import cell_text


@pytest.fixture
def specs():
    # Deliberately listed out of order
    return [
        Specification(id="s", name="Size", order=1),
        Specification(id="c", name="Color", order=0),
    ]


def row(*texts):
    return [Cell.text(t) for t in texts]


def texts(r):
    return [cell_text(c) for c in r]


class TestHeaderChecks:

    def test_create_header_row(self, specs):
        assert texts(create_header_row(specs)) == ["SKU", "Color", "Size"]

    def test_has_valid_header_case_insensitive(self):
        assert has_valid_header([row("sku", "Color")])
        assert has_valid_header([row(" Sku ")])
        assert not has_valid_header([row("R-S", "Red")])
        assert not has_valid_header([])
        assert not has_valid_header([[]])

    def test_header_matches_specs(self, specs):
        assert header_matches_specs([row("SKU", "Color", "Size", "Notes")], specs)
        assert not header_matches_specs([row("SKU", "Size", "Color")], specs)
        assert not header_matches_specs([row("SKU", "Color")], specs)


class TestRepairSheetHeaders:

    def test_matching_sheet_returned_as_is(self, specs):
        sheet = Sheet(id="1", name="ok", rows=[row("SKU", "Color", "Size"), row("R-S", "Red", "Small")])
        assert repair_sheet_headers(sheet, specs) is sheet

    def test_missing_header_inserted(self, specs):
        data = [row("R-S", "Red", "Small")]
        sheet = Sheet(id="1", name="legacy", rows=data)

        repaired = repair_sheet_headers(sheet, specs)

        assert repaired is not sheet
        assert texts(repaired.rows[0]) == ["SKU", "Color", "Size"]
        assert texts(repaired.rows[1]) == ["R-S", "Red", "Small"]
        assert sheet.rows is data
        assert len(sheet.rows) == 1

    def test_empty_sheet_gets_header(self, specs):
        repaired = repair_sheet_headers(Sheet(id="1", name="empty"), specs)
        assert len(repaired.rows) == 1

    def test_stale_header_replaced(self, specs):
        sheet = Sheet(id="1", name="stale", rows=[row("SKU", "Colour", "Size"), row("R-S", "Red", "Small")])

        repaired = repair_sheet_headers(sheet, specs)

        assert [texts(r) for r in repaired.rows] == [
            ["SKU", "Color", "Size"],
            ["R-S", "Red", "Small"],
        ]

    def test_repair_all_and_needs_repair(self, specs):
        good = Sheet(id="1", name="good", rows=[row("SKU", "Color", "Size")])
        bad = Sheet(id="2", name="bad", rows=[row("R-S", "Red", "Small")])

        assert needs_header_repair([good, bad], specs)
        assert not needs_header_repair([good], specs)

        result = repair_all_sheet_headers([good, bad], specs)
        assert result[0] is good
        assert has_valid_header(result[1].rows)
