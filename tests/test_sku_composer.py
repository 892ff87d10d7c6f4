"""
Tests for SKU composition.

Tests:
- Fragment order follows specification order, not column order
- Prefix / suffix / delimiter handling
- Empty results (no values, unknown values, empty fragments)
- Cell text extraction
"""
import pytest

from src.domain.models import Cell, SkuSettings, SpecValue, Specification
from src.domain.sku_composer import (
    build_header_value_map,
    cell_text,
    generate_row_sku,
    generate_sku,
)


def make_spec(spec_id, name, order, values):
    return Specification(
        id=spec_id,
        name=name,
        order=order,
        values=[
            SpecValue(id=f"{spec_id}-{i}", display_value=label, sku_fragment=fragment)
            for i, (label, fragment) in enumerate(values)
        ],
    )


@pytest.fixture
def specs():
    """Color after Size in SKU order."""
    return [
        make_spec("color", "Color", 1, [("Red", "R"), ("Blue", "B"), ("Clear", "")]),
        make_spec("size", "Size", 0, [("Small", "S"), ("Large", "L")]),
    ]


@pytest.fixture
def settings():
    return SkuSettings(delimiter="-", prefix="", suffix="")


def cells(*texts):
    return [Cell.text(t) if t is not None else Cell() for t in texts]


class TestGenerateRowSku:
    """Composition from one row."""

    def test_order_independent_of_column_layout(self, specs, settings):
        """[Color, Size] and [Size, Color] layouts both compose S-R."""
        first = generate_row_sku(cells("Red", "Small"), ["Color", "Size"], specs, settings)
        second = generate_row_sku(cells("Small", "Red"), ["Size", "Color"], specs, settings)

        assert first == "S-R"
        assert second == "S-R"

    def test_prefix_suffix_and_delimiter(self, specs):
        settings = SkuSettings(delimiter="_", prefix="ACME-", suffix="/X")
        sku = generate_row_sku(cells("Blue", "Large"), ["Color", "Size"], specs, settings)
        assert sku == "ACME-L_B/X"

    def test_no_values_gives_empty_without_prefix(self, specs):
        settings = SkuSettings(prefix="P", suffix="S")
        assert generate_row_sku(cells(None, None), ["Color", "Size"], specs, settings) == ""

    def test_all_empty_fragments_same_as_no_values(self, specs):
        settings = SkuSettings(prefix="P", suffix="S")
        assert generate_row_sku(cells("Clear", None), ["Color", "Size"], specs, settings) == ""

    def test_empty_fragment_is_skipped(self, specs, settings):
        sku = generate_row_sku(cells("Clear", "Small"), ["Color", "Size"], specs, settings)
        assert sku == "S"

    def test_unknown_value_contributes_nothing(self, specs, settings):
        sku = generate_row_sku(cells("Purple", "Small"), ["Color", "Size"], specs, settings)
        assert sku == "S"

    def test_value_match_is_exact(self, specs, settings):
        sku = generate_row_sku(cells("red", "Small"), ["Color", "Size"], specs, settings)
        assert sku == "S"

    def test_cell_text_is_trimmed(self, specs, settings):
        sku = generate_row_sku(cells("  Red ", "Small"), ["Color", "Size"], specs, settings)
        assert sku == "S-R"

    def test_headers_without_specification_are_ignored(self, specs, settings):
        sku = generate_row_sku(cells("Red", "Note", "Large"), ["Color", "Notes", "Size"], specs, settings)
        assert sku == "L-R"

    def test_short_row_is_treated_as_empty(self, specs, settings):
        sku = generate_row_sku(cells("Red"), ["Color", "Size"], specs, settings)
        assert sku == "R"

    def test_end_to_end_example(self):
        specs = [
            make_spec("t", "Temperature", 0, [("29deg C", "29C")]),
            make_spec("c", "Color", 1, [("Red", "R"), ("Blue", "B")]),
            make_spec("y", "Type", 2, [("Standard", "STD")]),
        ]
        headers = ["Temperature", "Color", "Type"]
        settings = SkuSettings()

        assert generate_row_sku(cells("29deg C", "Red", "Standard"), headers, specs, settings) == "29C-R-STD"
        assert generate_row_sku(cells("29deg C", "Blue", "Standard"), headers, specs, settings) == "29C-B-STD"


class TestGenerateSku:
    """Composition from a spec id -> value mapping."""

    def test_mapping_by_spec_id(self, specs, settings):
        assert generate_sku({"color": "Blue", "size": "Small"}, specs, settings) == "S-B"

    def test_missing_selection(self, specs, settings):
        assert generate_sku({"color": "Blue"}, specs, settings) == "B"
        assert generate_sku({}, specs, settings) == ""


class TestHelpers:
    """cell_text and header map."""

    def test_cell_text_fallbacks(self):
        assert cell_text(Cell(value="A", display_text="B")) == "A"
        assert cell_text(Cell(display_text="B")) == "B"
        assert cell_text(Cell()) == ""

    def test_cell_text_numbers_and_booleans(self):
        assert cell_text(Cell(value=29.0)) == "29"
        assert cell_text(Cell(value=2.5)) == "2.5"
        assert cell_text(Cell(value=7)) == "7"
        assert cell_text(Cell(value=True)) == "true"

    def test_header_value_map_skips_empty(self):
        result = build_header_value_map(cells("Red", "", "x"), ["Color", "Size", ""])
        assert result == {"Color": "Red"}
