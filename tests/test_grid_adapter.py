"""
Tests for the grid adapter (canonical <-> display).

Tests:
- Column roles (read-only identifier, dropdown metadata, free cells)
- Style token serialization and parsing
- Checkbox coercion
- Round trip of values and style flags
- Identifier highlighting
"""
import pytest

from src.domain.models import (
    Cell,
    CellStyle,
    ColumnDef,
    ColumnType,
    SpecValue,
    Specification,
)
from src.grid_adapter import (
    DUPLICATE_SKU_BG_COLOR,
    SKU_COLUMN_BG_COLOR,
    DisplayCell,
    apply_duplicate_highlighting,
    coerce_checkbox,
    from_display,
    strip_identifier_highlighting,
    style_to_token,
    to_display,
    token_to_style,
)


@pytest.fixture
def specs():
    return [
        Specification(id="c", name="Color", order=0, values=[
            SpecValue(id="c1", display_value="Red", sku_fragment="R", color="#fce4ec"),
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
        ColumnDef(id="k1", type=ColumnType.SPEC, header="Color", spec_id="c"),
        ColumnDef(id="k2", type=ColumnType.SPEC, header="Size", spec_id="s"),
        ColumnDef(id="k3", type=ColumnType.FREE, header="Notes"),
    ]


class TestToDisplay:
    """Canonical -> display."""

    def test_identifier_is_read_only(self, columns, specs):
        matrix = to_display([[Cell.text("R-S"), Cell(), Cell(), Cell()]], columns, specs)
        assert matrix[0][0].read_only is True
        assert matrix[0][0].value == "R-S"

    def test_spec_column_dropdown(self, columns, specs):
        matrix = to_display([[Cell(), Cell.text("Red"), Cell.text("Small"), Cell()]], columns, specs)
        color = matrix[0][1]
        size = matrix[0][2]

        assert color.dropdown_options == ["Red", "Blue"]
        assert color.dropdown_colors == {"Red": "#fce4ec"}
        assert color.value_color == "#fce4ec"
        assert size.dropdown_options == ["Small"]
        assert size.dropdown_colors is None
        assert size.value_color is None

    def test_empty_free_cell_is_none(self, columns, specs):
        matrix = to_display([[Cell(), Cell(), Cell(), Cell()]], columns, specs)
        assert matrix[0][3] is None

    def test_row_widened_to_columns(self, columns, specs):
        matrix = to_display([[Cell.text("X")]], columns, specs)
        assert len(matrix[0]) == 4

    def test_cells_past_columns_are_free(self, columns, specs):
        matrix = to_display([[Cell(), Cell(), Cell(), Cell(), Cell.text("extra")]], columns, specs)
        extra = matrix[0][4]
        assert extra.value == "extra"
        assert extra.read_only is False
        assert extra.dropdown_options is None

    def test_display_text_fallback(self, columns, specs):
        matrix = to_display([[Cell(), Cell(), Cell(), Cell(display_text="note")]], columns, specs)
        assert matrix[0][3].value == "note"

    def test_checkbox_coercion(self, columns, specs):
        rows = [[Cell(), Cell(), Cell(), Cell(value="TRUE", is_checkbox=True)]]
        cell = to_display(rows, columns, specs)[0][3]
        assert cell.checkbox is True
        assert cell.value is True


class TestStyleToken:
    """Structured style <-> token."""

    def test_full_style(self):
        style = CellStyle(bg="#fce4ec", fc="#dc2626", bold=True, italic=True, align="center")
        token = style_to_token(style)
        assert token == "bg-[#fce4ec] text-[#dc2626] font-bold italic text-center"
        assert token_to_style(token) == style

    def test_empty_style(self):
        assert style_to_token(CellStyle()) is None
        assert token_to_style(None) == CellStyle()
        assert token_to_style("") == CellStyle()

    def test_unknown_parts_ignored(self):
        style = token_to_style("rounded text-right shadow")
        assert style == CellStyle(align="right")


class TestCoerceCheckbox:
    @pytest.mark.parametrize("raw, expected", [
        (True, True), (False, False), ("true", True), ("TRUE", True),
        ("false", False), (None, False), (1, False),
    ])
    def test_values(self, raw, expected):
        assert coerce_checkbox(raw) is expected


class TestFromDisplay:
    """Display -> canonical."""

    def test_none_becomes_empty_cell(self):
        assert from_display([[None]]) == [[Cell()]]

    def test_value_sets_display_text(self):
        rows = from_display([[DisplayCell(value=29)]])
        assert rows[0][0].value == 29
        assert rows[0][0].display_text == "29"

    def test_checkbox_has_no_display_text(self):
        rows = from_display([[DisplayCell(value=True, checkbox=True)]])
        assert rows[0][0] == Cell(value=True, is_checkbox=True)

    def test_round_trip_preserves_values_and_styles(self, columns, specs):
        rows = [
            [
                Cell.text("R-S"),
                Cell(value="Red", display_text="Red", style=CellStyle(bg="#e3f2fd", bold=True)),
                Cell.text("Small"),
                Cell(value="note", display_text="note", style=CellStyle(fc="#111111", italic=True, align="left")),
            ],
            [Cell(), Cell.text("Green"), Cell(), Cell()],
        ]
        assert from_display(to_display(rows, columns, specs)) == rows


class TestHighlighting:
    """Identifier tint for duplicate and unique rows."""

    def test_tints(self, columns, specs):
        rows = [[Cell.text("A")], [Cell.text("B")], [Cell.text("A")]]
        matrix = apply_duplicate_highlighting(to_display(rows, columns, specs), {0, 2})

        assert token_to_style(matrix[0][0].class_name).bg == DUPLICATE_SKU_BG_COLOR
        assert token_to_style(matrix[1][0].class_name).bg == SKU_COLUMN_BG_COLOR
        assert token_to_style(matrix[2][0].class_name).bg == DUPLICATE_SKU_BG_COLOR

    def test_highlight_keeps_other_flags(self, columns, specs):
        rows = [[Cell(value="A", display_text="A", style=CellStyle(bold=True))]]
        matrix = apply_duplicate_highlighting(to_display(rows, columns, specs), set())
        style = token_to_style(matrix[0][0].class_name)
        assert style.bold is True
        assert style.bg == SKU_COLUMN_BG_COLOR

    def test_strip_before_storage(self, columns, specs):
        rows = [[Cell.text("A"), Cell(), Cell(), Cell()]]
        matrix = apply_duplicate_highlighting(to_display(rows, columns, specs), set())
        back = from_display(matrix)
        strip_identifier_highlighting(back)
        assert back == rows
