"""
Tests for the sheet import workflow.

Tests:
- Auto-mapping by header, specification name and identifier aliases
- Re-layout of file rows to the sheet's columns
- Preview counts, discarded rows, unmapped headers and warnings
- File dispatch (CSV, Excel, unsupported)
"""
import csv

import pytest

from src.domain.models import Cell, ColumnDef, ColumnType, Sheet, SpecValue, Specification
from src.domain.sku_composer import cell_text
from src.persistence.excel_layer import ExcelLayer
from src.workflows.sku_import import SKU_ALIASES, SheetImporter


@pytest.fixture
def specs():
    return [
        Specification(id="c", name="Color", order=0, values=[
            SpecValue(id="c1", display_value="Red", sku_fragment="R"),
            SpecValue(id="c2", display_value="Blue", sku_fragment="B"),
        ]),
        Specification(id="s", name="Size", order=1, values=[
            SpecValue(id="s1", display_value="Small", sku_fragment="S"),
        ]),
    ]


@pytest.fixture
def columns():
    return [
        ColumnDef(id="k0", type=ColumnType.SKU, header="SKU"),
        ColumnDef(id="k1", type=ColumnType.SPEC, header="Colour", spec_id="c"),
        ColumnDef(id="k2", type=ColumnType.SPEC, header="Size", spec_id="s"),
        ColumnDef(id="k3", type=ColumnType.FREE, header="Notes"),
    ]


@pytest.fixture
def importer(columns, specs):
    return SheetImporter(columns, specs)


def row(*texts):
    return [Cell.text(t) if t is not None else Cell() for t in texts]


def write_csv(path, records):
    with open(path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(records)
    return path


class TestAutoMapColumns:

    def test_header_and_spec_name_matching(self, importer):
        mapping = importer.auto_map_columns(["notes", "COLOR", "Size"])
        assert mapping == {0: 3, 1: 1, 2: 2}

    def test_identifier_aliases(self, importer):
        for alias in SKU_ALIASES:
            assert importer.auto_map_columns([alias.upper()]) == {0: 0}

    def test_first_file_column_wins(self, importer):
        assert importer.auto_map_columns(["Size", "size"]) == {0: 2}

    def test_unknown_and_blank_headers(self, importer):
        assert importer.auto_map_columns(["Weight", ""]) == {}


class TestBuildPreview:

    def test_relayout_and_counts(self, importer):
        matrix = [
            row("Size", "Color", "Extra"),
            row("Small", "Red", "x"),
            row(None, None, "only extra"),
            row("Small", "Green", None),
        ]

        preview = importer.build_preview(matrix)

        assert preview.total_rows == 3
        assert preview.valid_rows == 2
        assert preview.discarded_rows == 1
        assert preview.unmapped_headers == ["Extra"]
        cells = preview.valid_cells()
        assert [[cell_text(c) for c in r] for r in cells] == [
            ["", "Red", "Small", ""],
            ["", "Green", "Small", ""],
        ]

    def test_stale_values_are_kept_with_warning(self, importer):
        preview = importer.build_preview([row("Color"), row("Green")])

        assert preview.valid_rows == 1
        assert preview.rows[0].warnings == ['Row 2: Value "Green" does not exist in specification "Color"']
        assert preview.warnings == preview.rows[0].warnings

    def test_no_spec_column_warning(self, importer):
        preview = importer.build_preview([row("Notes"), row("hello")])
        assert "No column of the file matches a specification column" in preview.warnings

    def test_empty_matrix(self, importer):
        preview = importer.build_preview([])
        assert preview.total_rows == 0
        assert preview.warnings == ["File is empty"]

    def test_manual_mapping(self, importer):
        preview = importer.build_preview([row("a", "b"), row("Blue", "note")], column_mapping={0: 1, 1: 3})
        assert [cell_text(c) for c in preview.valid_cells()[0]] == ["", "Blue", "", "note"]


class TestParseFile:

    def test_csv(self, importer, tmp_path):
        path = write_csv(tmp_path / "data.csv", [["sku_code", "Color", "Size"], ["OLD", "Blue", "Small"]])
        preview = importer.parse_file(path)
        assert [cell_text(c) for c in preview.valid_cells()[0]] == ["OLD", "Blue", "Small", ""]

    def test_xlsx_first_worksheet(self, importer, tmp_path):
        columns = [
            ColumnDef(id="x0", type=ColumnType.SKU, header="SKU"),
            ColumnDef(id="x1", type=ColumnType.FREE, header="Color"),
        ]
        sheet = Sheet(id="s", name="Data", columns=columns, rows=[row("", "Red")])
        path = tmp_path / "data.xlsx"
        ExcelLayer().write_workbook(path, [sheet])

        preview = importer.parse_file(path)

        assert preview.valid_rows == 1
        assert cell_text(preview.valid_cells()[0][1]) == "Red"

    def test_unsupported_suffix(self, importer, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ValueError):
            importer.parse_file(path)
