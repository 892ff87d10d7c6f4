#!/usr/bin/env python3
"""
Catalog SKU engine - command line entry point.

Usage:
    python main.py sample --out sample.xlsx
    python main.py regenerate products.csv --config config.csv --out products.xlsx
    python main.py regenerate products.xlsx --config config.csv --out out.csv --delimiter _ --prefix ACME-

regenerate:
    Loads a data file (CSV or first worksheet of an .xlsx), builds the
    specifications from a legacy config sheet (Specification | Value | SKU Code),
    recomputes every SKU, prints the validation findings and writes the
    result (.csv, .xlsx or .pdf, by suffix).
"""
import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

import config
from src.domain.migration import migrate_config_sheet
from src.domain.sample_data import create_sample_sheet
from src.persistence.csv_layer import CSVLayer
from src.persistence.excel_layer import ExcelLayer
from src.repositories import SheetRepository
from src.utils.error_formatting import format_error_for_messagebox
from src.utils.logging_config import setup_logging
from src.workflows.sheet_session import SheetSession
from src.workflows.sku_import import EXCEL_SUFFIXES


def read_matrix(path: Path):
    if path.suffix.lower() in EXCEL_SUFFIXES:
        worksheets = ExcelLayer().read_workbook(path)
        return worksheets[0].rows if worksheets else []
    return CSVLayer().read_matrix(path)


def _output_path(out: Optional[str], default_name: str) -> Path:
    if out:
        return Path(out)
    return config.EXPORTS_DIR / default_name


def cmd_sample(args) -> int:
    settings = config.get_sku_settings()
    sheet = create_sample_sheet(settings)
    session = SheetSession(SheetRepository([sheet]), settings, config.MAX_HISTORY_DEPTH)
    out = session.export(_output_path(args.out, "sample_products.xlsx"))
    print(f"✓ Sample sheet '{sheet.name}' ({len(sheet.rows)} products) written to {out}")
    return 0


def cmd_regenerate(args) -> int:
    settings = config.get_sku_settings()
    overrides = {
        key: getattr(args, key)
        for key in ("delimiter", "prefix", "suffix")
        if getattr(args, key) is not None
    }
    settings = dataclasses.replace(settings, **overrides)

    specifications = migrate_config_sheet(CSVLayer().read_matrix(Path(args.config)))
    if not specifications:
        raise ValueError(f"No specifications found in config sheet {args.config}")

    input_path = Path(args.input)
    session = SheetSession(SheetRepository(), settings, config.MAX_HISTORY_DEPTH)
    result = session.load_legacy_matrix(input_path.stem, read_matrix(input_path), specifications)

    if result["header_repaired"]:
        print("Header row rebuilt from the specifications")
    for warning in result["warnings"]:
        print(f"  ! {warning}")

    errors = session.validation_errors()
    for error in errors:
        print(f"  [{error.kind.value}] row {error.row}, column {error.column}: {error.message}")

    out = session.export(_output_path(args.out, f"{input_path.stem}.xlsx"))
    print(
        f"✓ {result['imported']} rows regenerated ({result['discarded']} discarded, "
        f"{len(errors)} findings) -> {out}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Catalog SKU engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sample = subparsers.add_parser("sample", help="Write the sample product sheet")
    sample.add_argument("--out", help="Output file (.csv, .xlsx or .pdf, default: data/exports)")
    sample.set_defaults(func=cmd_sample)

    regenerate = subparsers.add_parser("regenerate", help="Recompute SKUs of a data file")
    regenerate.add_argument("input", help="Data file (.csv or .xlsx)")
    regenerate.add_argument("--config", required=True, help="Config sheet CSV (Specification, Value, SKU Code)")
    regenerate.add_argument("--out", help="Output file (.csv, .xlsx or .pdf, default: data/exports)")
    regenerate.add_argument("--delimiter", help="Fragment delimiter (default from settings.json)")
    regenerate.add_argument("--prefix", help="SKU prefix")
    regenerate.add_argument("--suffix", help="SKU suffix")
    regenerate.set_defaults(func=cmd_regenerate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        return args.func(args)
    except Exception as e:
        context = {}
        file_path = getattr(args, "input", None) or args.out
        if file_path:
            context["File"] = file_path
        title, message = format_error_for_messagebox(e, args.command, context)
        print(f"❌ {title}: {message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
