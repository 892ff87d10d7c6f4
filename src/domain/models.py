"""
Domain models for the catalog SKU engine.

Pure data classes + value objects. No I/O, no side effects.
Deterministic and fully testable.
"""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


CellValue = Union[str, int, float, bool, None]


class ColumnType(Enum):
    """Role of a column inside a sheet."""
    SKU = "sku"      # Auto-generated identifier column (always column 0)
    SPEC = "spec"    # Bound to a Specification via spec_id, contributes to the SKU
    FREE = "free"    # Free text, no dropdown, no SKU contribution


class ValidationKind(Enum):
    """Classes of advisory validation findings."""
    STALE_VALUE = "stale-value"
    DUPLICATE_IDENTIFIER = "duplicate-identifier"


@dataclass(frozen=True)
class SpecValue:
    """One allowed value of a Specification."""
    id: str
    display_value: str          # What the user selects in the grid
    sku_fragment: str           # What it contributes to the SKU ("" = nothing)
    color: Optional[str] = None  # Optional dropdown background colour (hex)


@dataclass(frozen=True)
class Specification:
    """
    Named product attribute with an ordered list of allowed values.

    `order` decides the position of the attribute's fragment inside the SKU,
    independently of where its column sits in the grid (lower = earlier).
    """
    id: str
    name: str
    order: int
    values: List[SpecValue] = field(default_factory=list)

    def find_value(self, display_value: str) -> Optional[SpecValue]:
        """Return the value whose display label matches exactly, if any."""
        for value in self.values:
            if value.display_value == display_value:
                return value
        return None

    def display_values(self) -> List[str]:
        """Display labels in definition order."""
        return [v.display_value for v in self.values]

    def has_colors(self) -> bool:
        return any(v.color for v in self.values)


@dataclass(frozen=True)
class ColumnDef:
    """Definition of one sheet column."""
    id: str
    type: ColumnType
    header: str
    spec_id: Optional[str] = None  # Required iff type is SPEC
    width: Optional[int] = None    # Pixels; None = default width

    def __post_init__(self):
        if self.type == ColumnType.SPEC and not self.spec_id:
            raise ValueError("Spec columns require a spec_id")
        if self.type != ColumnType.SPEC and self.spec_id:
            raise ValueError("Only spec columns can reference a specification")


@dataclass(frozen=True)
class CellStyle:
    """Discrete formatting flags of a cell."""
    bg: Optional[str] = None     # Background colour (hex)
    fc: Optional[str] = None     # Font colour (hex)
    bold: bool = False
    italic: bool = False
    align: Optional[str] = None  # "left" | "center" | "right"

    def __post_init__(self):
        if self.align not in (None, "left", "center", "right"):
            raise ValueError("align must be None, 'left', 'center' or 'right'")

    def is_empty(self) -> bool:
        return self == EMPTY_STYLE


EMPTY_STYLE = CellStyle()


@dataclass
class Cell:
    """Canonical (storage-format) cell."""
    value: CellValue = None
    display_text: Optional[str] = None
    style: CellStyle = EMPTY_STYLE
    is_checkbox: bool = False

    @classmethod
    def text(cls, text: str) -> "Cell":
        """Plain text cell with matching value and display text."""
        return cls(value=text, display_text=text)

    def is_empty(self) -> bool:
        return (
            self.value is None
            and self.display_text is None
            and self.style.is_empty()
            and not self.is_checkbox
        )


Row = List[Cell]


def cell_at(row: Optional[Row], index: int) -> Cell:
    """Read a cell; anything out of range is treated as an empty cell."""
    if row is None or index < 0 or index >= len(row):
        return Cell()
    return row[index]


def copy_rows(rows: List[Row]) -> List[Row]:
    """Deep copy of a row matrix (cells are mutable)."""
    return [[copy.copy(cell) for cell in row] for row in rows]


@dataclass(frozen=True)
class SkuSettings:
    """Formatting settings for SKU composition."""
    delimiter: str = "-"
    prefix: str = ""
    suffix: str = ""


@dataclass
class Sheet:
    """One spreadsheet tab: rows plus its local columns and specifications."""
    id: str
    name: str
    rows: List[Row] = field(default_factory=list)
    columns: List[ColumnDef] = field(default_factory=list)
    specifications: List[Specification] = field(default_factory=list)

    def spec_by_id(self) -> Dict[str, Specification]:
        return {spec.id: spec for spec in self.specifications}


@dataclass(frozen=True)
class ValidationError:
    """Advisory finding for one cell. Data, never raised."""
    row: int
    column: int
    message: str
    kind: ValidationKind


@dataclass(frozen=True)
class Snapshot:
    """Saved {rows, columns} pair used by the edit history."""
    rows: List[Row]
    columns: List[ColumnDef]

    @classmethod
    def capture(cls, rows: List[Row], columns: List[ColumnDef]) -> "Snapshot":
        return cls(rows=copy_rows(rows), columns=list(columns))
