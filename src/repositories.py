"""
Repository layer for specifications and sheets (in-memory).

- SpecificationRepository: attribute definitions and their values
- SheetRepository: sheets, their columns and the active-sheet pointer

Design Principles:
- Explicitly injected context, no module-level state
- Every mutation validates first and raises a RepositoryError subclass
- Stored specifications are immutable; edits replace them
- The SKU engine only reads from here
"""
import dataclasses
import logging
import uuid
from typing import List, Optional

from .domain.models import (
    Cell,
    ColumnDef,
    ColumnType,
    Row,
    Sheet,
    SpecValue,
    Specification,
)
from .domain.header_repair import SKU_HEADER
from .utils.error_formatting import ValidationMessages


logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 120
MIN_COLUMN_WIDTH = 80


# ============================================================
# Custom Exceptions
# ============================================================

class RepositoryError(Exception):
    """Base exception for repository operations"""
    pass


class DuplicateKeyError(RepositoryError):
    """Raised when a name or id is already taken"""
    pass


class ForeignKeyError(RepositoryError):
    """Raised when a column references a specification that does not exist"""
    pass


class NotFoundError(RepositoryError):
    """Raised when entity not found"""
    pass


class BusinessRuleError(RepositoryError):
    """Raised when an operation would break a structural rule"""
    pass


def generate_id() -> str:
    return str(uuid.uuid4())


# ============================================================
# Specification Repository
# ============================================================

class SpecificationRepository:
    """
    Repository for specification definitions.

    Responsibilities:
    - CRUD on specifications and their values
    - Keeping `order` values contiguous on removal
    - Reordering with neighbour shifting
    """

    def __init__(self, specifications: Optional[List[Specification]] = None):
        self._specs: List[Specification] = list(specifications or [])

    def list(self) -> List[Specification]:
        """All specifications in definition order (copy)."""
        return list(self._specs)

    def sorted_by_order(self) -> List[Specification]:
        return sorted(self._specs, key=lambda s: s.order)

    def get(self, spec_id: str) -> Specification:
        for spec in self._specs:
            if spec.id == spec_id:
                return spec
        raise NotFoundError(ValidationMessages.not_found("Specification", spec_id))

    def get_by_name(self, name: str) -> Optional[Specification]:
        for spec in self._specs:
            if spec.name == name:
                return spec
        return None

    def add(self, name: str) -> str:
        """
        Add an empty specification at the end of the SKU order.

        Returns:
            New specification id

        Raises:
            BusinessRuleError: Empty name
            DuplicateKeyError: Name already used
        """
        name = name.strip()
        if not name:
            raise BusinessRuleError(ValidationMessages.required_field("name"))
        if self.get_by_name(name) is not None:
            raise DuplicateKeyError(ValidationMessages.duplicate_entry(name))

        order = max((s.order for s in self._specs), default=-1) + 1
        spec = Specification(id=generate_id(), name=name, order=order, values=[])
        self._specs.append(spec)
        logger.info(f"Added specification '{name}' (order {order})")
        return spec.id

    def rename(self, spec_id: str, name: str) -> None:
        name = name.strip()
        if not name:
            raise BusinessRuleError(ValidationMessages.required_field("name"))
        other = self.get_by_name(name)
        if other is not None and other.id != spec_id:
            raise DuplicateKeyError(ValidationMessages.duplicate_entry(name))
        self._replace(dataclasses.replace(self.get(spec_id), name=name))

    def remove(self, spec_id: str) -> None:
        """Remove a specification; remaining orders become 0..n-1."""
        self.get(spec_id)
        remaining = sorted((s for s in self._specs if s.id != spec_id), key=lambda s: s.order)
        new_orders = {spec.id: index for index, spec in enumerate(remaining)}
        self._specs = [
            dataclasses.replace(s, order=new_orders[s.id])
            for s in self._specs if s.id != spec_id
        ]

    def reorder(self, spec_id: str, new_order: int) -> None:
        """Move a specification to new_order, shifting the ones in between."""
        spec = self.get(spec_id)
        old_order = spec.order
        if old_order == new_order:
            return

        updated = []
        for s in self._specs:
            if s.id == spec_id:
                updated.append(dataclasses.replace(s, order=new_order))
            elif old_order < new_order and old_order < s.order <= new_order:
                updated.append(dataclasses.replace(s, order=s.order - 1))
            elif old_order > new_order and new_order <= s.order < old_order:
                updated.append(dataclasses.replace(s, order=s.order + 1))
            else:
                updated.append(s)
        self._specs = updated

    def add_value(
        self,
        spec_id: str,
        display_value: str,
        sku_fragment: str,
        color: Optional[str] = None,
    ) -> str:
        """Append an allowed value. Display values are unique per specification."""
        spec = self.get(spec_id)
        if spec.find_value(display_value) is not None:
            raise DuplicateKeyError(f"Value '{display_value}' already exists in '{spec.name}'")

        value = SpecValue(
            id=generate_id(),
            display_value=display_value,
            sku_fragment=sku_fragment,
            color=color,
        )
        self._replace(dataclasses.replace(spec, values=spec.values + [value]))
        return value.id

    def update_value(
        self,
        spec_id: str,
        value_id: str,
        display_value: Optional[str] = None,
        sku_fragment: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        spec = self.get(spec_id)
        values = []
        found = False
        for value in spec.values:
            if value.id == value_id:
                found = True
                changes = {}
                if display_value is not None:
                    changes["display_value"] = display_value
                if sku_fragment is not None:
                    changes["sku_fragment"] = sku_fragment
                if color is not None:
                    changes["color"] = color or None
                value = dataclasses.replace(value, **changes)
            values.append(value)
        if not found:
            raise NotFoundError(f"Value {value_id} not found in '{spec.name}'")
        self._replace(dataclasses.replace(spec, values=values))

    def remove_value(self, spec_id: str, value_id: str) -> None:
        spec = self.get(spec_id)
        values = [v for v in spec.values if v.id != value_id]
        if len(values) == len(spec.values):
            raise NotFoundError(f"Value {value_id} not found in '{spec.name}'")
        self._replace(dataclasses.replace(spec, values=values))

    def _replace(self, spec: Specification) -> None:
        self._specs = [spec if s.id == spec.id else s for s in self._specs]


# ============================================================
# Sheet Repository
# ============================================================

def sku_column() -> ColumnDef:
    return ColumnDef(id=generate_id(), type=ColumnType.SKU, header=SKU_HEADER)


class SheetRepository:
    """
    Repository for sheets and the active-sheet pointer.

    Responsibilities:
    - Sheet lifecycle (add / rename / remove / activate)
    - Column structure (add / remove / move), keeping rows aligned
    - Binding checks between spec columns and specifications
    """

    def __init__(self, sheets: Optional[List[Sheet]] = None):
        self._sheets: List[Sheet] = list(sheets or [])
        self._active_id: Optional[str] = self._sheets[0].id if self._sheets else None

    # ------------------------------------------------------------------
    # Sheets
    # ------------------------------------------------------------------

    def list(self) -> List[Sheet]:
        return list(self._sheets)

    def get(self, sheet_id: str) -> Sheet:
        for sheet in self._sheets:
            if sheet.id == sheet_id:
                return sheet
        raise NotFoundError(ValidationMessages.not_found("Sheet", sheet_id))

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active(self) -> Optional[Sheet]:
        if self._active_id is None:
            return None
        return self.get(self._active_id)

    def set_active(self, sheet_id: str) -> None:
        self.get(sheet_id)
        self._active_id = sheet_id

    def add_sheet(
        self,
        name: Optional[str] = None,
        columns: Optional[List[ColumnDef]] = None,
        specifications: Optional[List[Specification]] = None,
        sheet_id: Optional[str] = None,
    ) -> Sheet:
        """Create a sheet (identifier column only by default) and activate it."""
        sheet_id = sheet_id or generate_id()
        if any(s.id == sheet_id for s in self._sheets):
            raise DuplicateKeyError(f"Sheet {sheet_id} already exists")

        sheet = Sheet(
            id=sheet_id,
            name=name or f"Sheet {len(self._sheets) + 1}",
            rows=[],
            columns=list(columns) if columns else [sku_column()],
            specifications=list(specifications or []),
        )
        if sheet.columns[0].type != ColumnType.SKU:
            raise BusinessRuleError("Column 0 must be the SKU column")
        dangling = self.check_bindings(sheet)
        if dangling:
            raise ForeignKeyError(f"Columns reference unknown specifications: {dangling}")

        self._sheets.append(sheet)
        self._active_id = sheet.id
        logger.info(f"Added sheet '{sheet.name}'")
        return sheet

    def rename(self, sheet_id: str, name: str) -> None:
        self.get(sheet_id).name = name

    def remove(self, sheet_id: str) -> None:
        """Remove a sheet; if it was active, the first remaining one becomes active."""
        self.get(sheet_id)
        self._sheets = [s for s in self._sheets if s.id != sheet_id]
        if self._active_id == sheet_id:
            self._active_id = self._sheets[0].id if self._sheets else None

    def set_rows(self, sheet_id: str, rows: List[Row]) -> None:
        self.get(sheet_id).rows = rows

    def set_columns(self, sheet_id: str, columns: List[ColumnDef]) -> None:
        self.get(sheet_id).columns = list(columns)

    def set_specifications(self, sheet_id: str, specifications: List[Specification]) -> None:
        self.get(sheet_id).specifications = list(specifications)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def add_column(
        self,
        sheet_id: str,
        column_type: ColumnType,
        header: str,
        spec_id: Optional[str] = None,
        width: Optional[int] = None,
    ) -> ColumnDef:
        """
        Append a column and widen every row with an empty cell.

        Raises:
            BusinessRuleError: A second SKU column was requested
            ForeignKeyError: spec_id is not a specification of the sheet
        """
        sheet = self.get(sheet_id)
        if column_type == ColumnType.SKU:
            raise BusinessRuleError("A sheet has exactly one SKU column")
        if column_type == ColumnType.SPEC and spec_id not in sheet.spec_by_id():
            raise ForeignKeyError(f"Specification {spec_id} does not exist in sheet '{sheet.name}'")

        column = ColumnDef(
            id=generate_id(),
            type=column_type,
            header=header,
            spec_id=spec_id if column_type == ColumnType.SPEC else None,
            width=max(MIN_COLUMN_WIDTH, width if width is not None else DEFAULT_COLUMN_WIDTH),
        )
        sheet.columns = sheet.columns + [column]
        for row in sheet.rows:
            while len(row) < len(sheet.columns):
                row.append(Cell())
        return column

    def remove_column(self, sheet_id: str, column_id: str) -> None:
        sheet = self.get(sheet_id)
        index = self._column_index(sheet, column_id)
        if index == 0:
            raise BusinessRuleError("The SKU column cannot be removed")
        sheet.columns = sheet.columns[:index] + sheet.columns[index + 1:]
        for row in sheet.rows:
            if index < len(row):
                del row[index]

    def move_column(self, sheet_id: str, from_index: int, to_index: int) -> None:
        """Move a column; cells move with it. Column 0 stays in place."""
        sheet = self.get(sheet_id)
        count = len(sheet.columns)
        if from_index == 0 or to_index == 0:
            raise BusinessRuleError("The SKU column cannot be moved")
        if not (0 < from_index < count and 0 < to_index < count):
            raise NotFoundError(f"Column index out of range: {from_index} -> {to_index}")
        if from_index == to_index:
            return

        columns = list(sheet.columns)
        columns.insert(to_index, columns.pop(from_index))
        sheet.columns = columns
        for row in sheet.rows:
            while len(row) < count:
                row.append(Cell())
            row.insert(to_index, row.pop(from_index))

    @staticmethod
    def check_bindings(sheet: Sheet) -> List[str]:
        """Ids of spec columns whose specification is missing from the sheet."""
        known = sheet.spec_by_id()
        return [
            c.id for c in sheet.columns
            if c.type == ColumnType.SPEC and c.spec_id not in known
        ]

    @staticmethod
    def _column_index(sheet: Sheet, column_id: str) -> int:
        for index, column in enumerate(sheet.columns):
            if column.id == column_id:
                return index
        raise NotFoundError(f"Column {column_id} not found")
