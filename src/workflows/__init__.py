"""Workflows module."""
from .sku_import import SheetImporter, ImportPreview
from .sheet_session import SheetSession

__all__ = ['SheetImporter', 'ImportPreview', 'SheetSession']
