"""
Error UX & Messaging Module

Provides user-friendly error formatting, contextual messages, and recovery guidance.
Transforms technical exceptions into actionable, understandable messages for end users.
"""

from typing import Dict, Optional, Tuple, Any, List
from dataclasses import dataclass
from enum import Enum
import traceback
import zipfile

from openpyxl.utils.exceptions import InvalidFileException


# ============================================================
# Error Severity Levels
# ============================================================

class ErrorSeverity(Enum):
    """Error severity classification for UI presentation."""

    INFO = "info"           # Informational (no action needed)
    WARNING = "warning"     # Caution (optional action)
    ERROR = "error"         # Error (action required)
    CRITICAL = "critical"   # Critical (system-level issue)


# ============================================================
# Error Context
# ============================================================

@dataclass
class ErrorContext:
    """
    Structured error context for user-friendly messaging.

    Attributes:
        message: User-friendly error description
        severity: Error severity level
        technical_details: Technical error info (for logs/debugging)
        context: Additional context (sheet, file, operation)
        recovery_steps: List of recovery actions user can take
        error_code: Optional error code for support/documentation
    """
    message: str
    severity: ErrorSeverity
    technical_details: str
    context: Dict[str, Any]
    recovery_steps: List[str]
    error_code: Optional[str] = None

    def format_for_display(self, include_technical: bool = False) -> str:
        """
        Format error for display (dialog or terminal).

        Args:
            include_technical: Include technical details in message
        """
        lines = [self.message]

        if self.context:
            lines.append("")
            lines.append("Details:")
            for key, value in self.context.items():
                if value is not None:
                    lines.append(f"  • {key}: {value}")

        if self.recovery_steps:
            lines.append("")
            lines.append("Suggested actions:")
            for i, step in enumerate(self.recovery_steps, 1):
                lines.append(f"  {i}. {step}")

        if include_technical and self.technical_details:
            lines.append("")
            lines.append("Technical details:")
            lines.append(f"  {self.technical_details}")

        if self.error_code:
            lines.append("")
            lines.append(f"Error code: {self.error_code}")

        return "\n".join(lines)

    def format_for_log(self) -> str:
        """Format error for structured logging."""
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items() if v is not None)
        return f"[{self.severity.value.upper()}] {self.message} | Context: {context_str} | Technical: {self.technical_details}"


# ============================================================
# Error Formatters (Transform technical → user-friendly)
# ============================================================

class ErrorFormatter:
    """
    Main error formatting utility.
    Transforms exceptions into user-friendly ErrorContext objects.
    """

    @staticmethod
    def format_repository_error(
        exc: Exception,
        operation: str,
        additional_context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """
        Format registry errors (from src/repositories.py).

        Args:
            exc: The exception raised
            operation: Operation that failed (e.g., "add_column", "rename_specification")
            additional_context: Additional context data
        """
        from src.repositories import (
            DuplicateKeyError,
            ForeignKeyError,
            NotFoundError,
            BusinessRuleError,
        )

        context = {"Operation": operation}
        if additional_context:
            context.update(additional_context)

        if isinstance(exc, DuplicateKeyError):
            return ErrorContext(
                message=f"Already exists: {exc}",
                severity=ErrorSeverity.ERROR,
                technical_details=f"DuplicateKeyError: {exc}",
                context=context,
                recovery_steps=[
                    "Choose a different name",
                    "Edit the existing item instead",
                ],
                error_code="REPO_001"
            )

        elif isinstance(exc, ForeignKeyError):
            return ErrorContext(
                message=f"Invalid reference: {exc}",
                severity=ErrorSeverity.ERROR,
                technical_details=f"ForeignKeyError: {exc}",
                context=context,
                recovery_steps=[
                    "Create the specification before binding a column to it",
                    "Check that the column points at a specification of this sheet",
                ],
                error_code="REPO_002"
            )

        elif isinstance(exc, NotFoundError):
            return ErrorContext(
                message=f"Not found: {exc}",
                severity=ErrorSeverity.WARNING,
                technical_details=f"NotFoundError: {exc}",
                context=context,
                recovery_steps=[
                    "Refresh the view; the item may have been removed",
                ],
                error_code="REPO_003"
            )

        elif isinstance(exc, BusinessRuleError):
            return ErrorContext(
                message=f"Operation not allowed: {exc}",
                severity=ErrorSeverity.ERROR,
                technical_details=f"BusinessRuleError: {exc}",
                context=context,
                recovery_steps=[
                    "The SKU column is fixed in first position and cannot be removed",
                    "Names cannot be empty",
                ],
                error_code="REPO_004"
            )

        return ErrorContext(
            message=f"Operation failed: {exc}",
            severity=ErrorSeverity.ERROR,
            technical_details=f"{type(exc).__name__}: {exc}",
            context=context,
            recovery_steps=["Retry the operation"],
            error_code="REPO_999"
        )

    @staticmethod
    def format_import_error(
        exc: Exception,
        file_path: str,
    ) -> ErrorContext:
        """
        Format failures while reading an import file (bad type, corrupt workbook).

        Args:
            exc: Exception raised by the reader
            file_path: File being imported
        """
        context = {"File": file_path, "Operation": "import"}

        if isinstance(exc, (InvalidFileException, zipfile.BadZipFile)):
            return ErrorContext(
                message=f"Not a readable Excel workbook: {file_path}",
                severity=ErrorSeverity.ERROR,
                technical_details=f"{type(exc).__name__}: {exc}",
                context=context,
                recovery_steps=[
                    "Open the file in Excel and save it again as .xlsx",
                    "Export the sheet as CSV and import that instead",
                ],
                error_code="IMP_001"
            )

        elif isinstance(exc, ValueError):
            return ErrorContext(
                message=f"Cannot import file: {exc}",
                severity=ErrorSeverity.ERROR,
                technical_details=f"ValueError: {exc}",
                context=context,
                recovery_steps=[
                    "Use a .csv or .xlsx file",
                    "Make sure the first row holds the column headers",
                ],
                error_code="IMP_002"
            )

        elif isinstance(exc, OSError):
            return ErrorFormatter.format_io_error(exc, file_path, "import")

        return ErrorFormatter.format_generic_error(exc, "import", {"File": file_path})

    @staticmethod
    def format_io_error(
        exc: Exception,
        file_path: str,
        operation: str
    ) -> ErrorContext:
        """
        Format I/O errors (file not found, permission denied, etc.).

        Args:
            exc: I/O exception
            file_path: File path that caused the error
            operation: Operation attempted (read, write, export)
        """
        file_path = file_path or getattr(exc, "filename", None) or ""
        context = {"File": file_path, "Operation": operation}

        if isinstance(exc, FileNotFoundError):
            return ErrorContext(
                message=f"File not found: {file_path}",
                severity=ErrorSeverity.ERROR,
                technical_details=str(exc),
                context=context,
                recovery_steps=[
                    "Check that the file path is correct",
                    "Check that the file was not moved or deleted",
                ],
                error_code="IO_001"
            )

        elif isinstance(exc, PermissionError):
            return ErrorContext(
                message=f"Permission denied: {file_path}",
                severity=ErrorSeverity.ERROR,
                technical_details=str(exc),
                context=context,
                recovery_steps=[
                    "Check read/write permissions on the file",
                    "Close the file if it is open in another application",
                ],
                error_code="IO_002"
            )

        return ErrorContext(
            message=f"I/O error during {operation}: {file_path}",
            severity=ErrorSeverity.ERROR,
            technical_details=str(exc),
            context=context,
            recovery_steps=[
                "Check the available disk space",
                "Retry the operation",
            ],
            error_code="IO_003"
        )

    @staticmethod
    def format_generic_error(
        exc: Exception,
        operation: str,
        context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """Format unknown errors with minimal guidance."""
        ctx = {"Operation": operation}
        if context:
            ctx.update(context)

        return ErrorContext(
            message=f"Unexpected error during {operation}",
            severity=ErrorSeverity.ERROR,
            technical_details=f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}",
            context=ctx,
            recovery_steps=[
                "Retry the operation",
                "Report the error code if the problem persists",
            ],
            error_code="GENERIC_999"
        )


# ============================================================
# Validation Message Helpers
# ============================================================

class ValidationMessages:
    """Pre-defined messages for advisory findings and form checks."""

    @staticmethod
    def stale_value(value: str, spec_name: str) -> str:
        return f'Value "{value}" does not exist in specification "{spec_name}"'

    @staticmethod
    def duplicate_sku(sku: str, rows: List[int]) -> str:
        return f'Duplicate SKU "{sku}" found in rows {", ".join(str(r) for r in rows)}'

    @staticmethod
    def required_field(field_name: str) -> str:
        return f"Field '{field_name}' is required"

    @staticmethod
    def duplicate_entry(identifier: str) -> str:
        return f"'{identifier}' already exists"

    @staticmethod
    def not_found(entity: str, identifier: str) -> str:
        return f"{entity} '{identifier}' not found"


# ============================================================
# Helper Functions for UI Integration
# ============================================================

def format_error_context(
    exc: Exception,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> ErrorContext:
    """Pick the formatter matching the exception type."""
    from src.repositories import RepositoryError

    file_path = str(context.get("File", "")) if context else ""

    if isinstance(exc, RepositoryError):
        return ErrorFormatter.format_repository_error(exc, operation, context)
    elif operation == "import" and file_path:
        return ErrorFormatter.format_import_error(exc, file_path)
    elif isinstance(exc, OSError):
        return ErrorFormatter.format_io_error(exc, file_path, operation)
    return ErrorFormatter.format_generic_error(exc, operation, context)


def format_error_for_messagebox(
    exc: Exception,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
    include_technical: bool = False
) -> Tuple[str, str]:
    """
    Convenience function for error display.

    Returns:
        Tuple of (title, message)
    """
    error_ctx = format_error_context(exc, operation, context)

    title_map = {
        ErrorSeverity.INFO: "Information",
        ErrorSeverity.WARNING: "Warning",
        ErrorSeverity.ERROR: "Error",
        ErrorSeverity.CRITICAL: "Critical Error",
    }

    title = title_map.get(error_ctx.severity, "Error")
    message = error_ctx.format_for_display(include_technical=include_technical)

    return (title, message)
