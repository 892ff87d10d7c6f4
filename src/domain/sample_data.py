"""
Sample catalog for first launch and demos.

Color / Size / Material specifications and a "Sample Products" sheet with
five products. Identifiers are computed by the propagator, never typed.
"""
import uuid
from typing import List, Sequence

from .auto_sku import column_headers, process_auto_sku_for_all_rows
from .colors import get_auto_color
from .models import (
    Cell,
    ColumnDef,
    ColumnType,
    Row,
    Sheet,
    SkuSettings,
    SpecValue,
    Specification,
)


SAMPLE_SHEET_NAME = "Sample Products"

# (name, [(display value, fragment), ...], auto colours)
_SAMPLE_SPECS = [
    ("Color", [("Red", "R"), ("Blue", "B"), ("Green", "G")], True),
    ("Size", [("Small", "S"), ("Medium", "M"), ("Large", "L")], False),
    ("Material", [("Cotton", "COT"), ("Polyester", "POL"), ("Wool", "WOL")], False),
]

_SAMPLE_PRODUCTS = [
    ("Red", "Small", "Cotton"),
    ("Blue", "Medium", "Polyester"),
    ("Green", "Large", "Wool"),
    ("Red", "Large", "Cotton"),
    ("Blue", "Small", "Polyester"),
]


def _new_id() -> str:
    return str(uuid.uuid4())


def sample_specifications() -> List[Specification]:
    specs = []
    for order, (name, values, colored) in enumerate(_SAMPLE_SPECS):
        spec_values = [
            SpecValue(
                id=_new_id(),
                display_value=label,
                sku_fragment=fragment,
                color=get_auto_color(index) if colored else None,
            )
            for index, (label, fragment) in enumerate(values)
        ]
        specs.append(Specification(id=_new_id(), name=name, order=order, values=spec_values))
    return specs


def sample_columns(specifications: Sequence[Specification]) -> List[ColumnDef]:
    """Identifier column followed by one spec column per specification, in order."""
    columns = [ColumnDef(id=_new_id(), type=ColumnType.SKU, header="SKU")]
    for spec in sorted(specifications, key=lambda s: s.order):
        columns.append(ColumnDef(id=_new_id(), type=ColumnType.SPEC, header=spec.name, spec_id=spec.id))
    return columns


def create_sample_sheet(settings: SkuSettings = SkuSettings()) -> Sheet:
    specs = sample_specifications()
    columns = sample_columns(specs)

    rows: List[Row] = []
    for product in _SAMPLE_PRODUCTS:
        rows.append([Cell()] + [Cell.text(label) for label in product])

    process_auto_sku_for_all_rows(rows, column_headers(columns, specs), specs, settings)

    return Sheet(
        id=_new_id(),
        name=SAMPLE_SHEET_NAME,
        rows=rows,
        columns=columns,
        specifications=specs,
    )
