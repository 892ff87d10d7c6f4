"""
Legacy "Config sheet" migration: convert a Specification | Value | SKU Code
matrix into Specification records.

Row 0 of the matrix is the header row and is skipped.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .models import Cell, SpecValue, Specification
from .sku_composer import cell_text


logger = logging.getLogger(__name__)

CONFIG_SHEET_HEADERS = ["Specification", "Value", "SKU Code"]


@dataclass(frozen=True)
class ParsedSpecValue:
    label: str
    sku_code: str


@dataclass
class ParsedSpec:
    name: str
    values: List[ParsedSpecValue] = field(default_factory=list)


def parse_config_sheet(matrix: Sequence[Sequence[Cell]]) -> List[ParsedSpec]:
    """
    Group config rows by specification name (first-appearance order).

    Rows shorter than three cells, or with an empty specification or
    value, are skipped.
    """
    if len(matrix) <= 1:
        return []

    grouped: Dict[str, List[ParsedSpecValue]] = {}
    skipped = 0
    for row in matrix[1:]:
        if row is None or len(row) < 3:
            skipped += 1
            continue
        name = cell_text(row[0])
        label = cell_text(row[1])
        sku_code = cell_text(row[2])
        if not name or not label:
            skipped += 1
            continue
        grouped.setdefault(name, []).append(ParsedSpecValue(label=label, sku_code=sku_code))

    if skipped:
        logger.warning(f"Config sheet: skipped {skipped} incomplete rows")

    return [ParsedSpec(name=name, values=values) for name, values in grouped.items()]


def get_spec_values(specs: Sequence[ParsedSpec], spec_name: str) -> List[ParsedSpecValue]:
    for spec in specs:
        if spec.name == spec_name:
            return list(spec.values)
    return []


def lookup_sku_code(specs: Sequence[ParsedSpec], spec_name: str, value_label: str) -> str:
    """SKU code of a value label, or "" when the specification or label is unknown."""
    for value in get_spec_values(specs, spec_name):
        if value.label == value_label:
            return value.sku_code
    return ""


def get_spec_names(specs: Sequence[ParsedSpec]) -> List[str]:
    return [spec.name for spec in specs]


def convert_parsed_specs(parsed: Sequence[ParsedSpec]) -> List[Specification]:
    """Fresh ids; order follows list position."""
    return [
        Specification(
            id=str(uuid.uuid4()),
            name=spec.name,
            order=index,
            values=[
                SpecValue(id=str(uuid.uuid4()), display_value=v.label, sku_fragment=v.sku_code)
                for v in spec.values
            ],
        )
        for index, spec in enumerate(parsed)
    ]


def migrate_config_sheet(matrix: Sequence[Sequence[Cell]]) -> Optional[List[Specification]]:
    """Specifications from a config matrix, or None when it holds nothing valid."""
    parsed = parse_config_sheet(matrix)
    if not parsed:
        logger.info("Config sheet migration: no specifications found")
        return None

    specs = convert_parsed_specs(parsed)
    logger.info(f"Config sheet migration: {len(specs)} specifications migrated")
    return specs
