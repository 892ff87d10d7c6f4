"""
CSV persistence layer for sheet matrices.

Reads any delimited text file into canonical cells and writes sheets back
out. Encoding: UTF-8 (BOM stripped) with latin-1 fallback. The delimiter
is sniffed from the first 4 KB.
"""
import csv
import io
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..domain.models import Cell, CellValue, Row


logger = logging.getLogger(__name__)

SNIFF_SAMPLE_SIZE = 4096
SNIFF_DELIMITERS = ",;\t|"


def export_value(value: CellValue) -> str:
    """Cell value as written to a file: booleans become TRUE / FALSE."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cell_export_text(cell: Cell) -> str:
    if cell.value is not None:
        return export_value(cell.value)
    return cell.display_text or ""


class CSVLayer:
    """Reads and writes cell matrices as CSV."""

    def __init__(self, delimiter: str = ","):
        """
        Args:
            delimiter: Delimiter used when writing (reading always sniffs)
        """
        self.delimiter = delimiter

    def detect_delimiter(self, sample: str) -> str:
        """Sniff the delimiter of a text sample (default ',')."""
        try:
            return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
        except csv.Error as e:
            logger.debug(f"Delimiter detection failed, using ',': {e}")
            return ","

    def _read_text(self, path: Path) -> str:
        try:
            with open(path, "r", newline="", encoding="utf-8-sig") as f:
                return f.read()
        except UnicodeDecodeError:
            logger.warning(f"UTF-8 decode failed for {path.name}, trying latin-1")
            with open(path, "r", newline="", encoding="latin-1") as f:
                return f.read()

    def read_matrix(self, path: Path) -> List[Row]:
        """
        Read a delimited file into rows of cells.

        Non-empty text becomes Cell(value=text, display_text=text); empty
        text an empty Cell. The header line, if any, is row 0.

        Raises:
            OSError: File cannot be read
        """
        path = Path(path)
        text = self._read_text(path)
        if not text.strip():
            return []

        delimiter = self.detect_delimiter(text[:SNIFF_SAMPLE_SIZE])
        reader = csv.reader(io.StringIO(text), delimiter=delimiter)

        rows: List[Row] = []
        for record in reader:
            if not record:
                continue
            rows.append([Cell.text(field) if field != "" else Cell() for field in record])

        logger.info(f"Read {len(rows)} rows from {path.name} (delimiter {delimiter!r})")
        return rows

    def _records(self, rows: Sequence[Row], header: Optional[Sequence[str]]) -> List[List[str]]:
        records = []
        if header is not None:
            records.append(list(header))
        for row in rows:
            records.append([cell_export_text(cell) for cell in row])
        return records

    def write_matrix(self, path: Path, rows: Sequence[Row], header: Optional[Sequence[str]] = None) -> None:
        """Write rows (optionally preceded by a header line) to a CSV file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=self.delimiter)
            writer.writerows(self._records(rows, header))
        logger.info(f"Wrote {len(rows)} rows to {path.name}")

    def matrix_to_csv_string(self, rows: Sequence[Row], header: Optional[Sequence[str]] = None) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=self.delimiter, lineterminator="\n")
        writer.writerows(self._records(rows, header))
        return buffer.getvalue()
