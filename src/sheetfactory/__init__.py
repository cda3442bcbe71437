"""sheetfactory - Compile JSON workbook descriptions into .xlsx files.

A request describes a workbook, its sheets, one header per sheet and the data
rows, with optional header/row styling. The request is validated against a
fixed field allow-list, formula expressions are sanitized, and the workbook is
built with openpyxl.
"""

__version__ = "0.1.0"

from sheetfactory.builder import build, build_workbook
from sheetfactory.exceptions import (
    BuildError,
    SchemaValidationError,
    SpreadsheetError,
    StorageError,
    StyleError,
)
from sheetfactory.sanitize import derive_filename, sanitize_filename, sanitize_formulas
from sheetfactory.service import GeneratedWorkbook, SpreadsheetService
from sheetfactory.storage import WorkbookStore, save_workbook
from sheetfactory.styles import ResolvedStyle, resolve_style
from sheetfactory.validator import ValidationResult, ensure_valid, validate

__all__ = [
    "BuildError",
    "GeneratedWorkbook",
    "ResolvedStyle",
    "SchemaValidationError",
    "SpreadsheetError",
    "SpreadsheetService",
    "StorageError",
    "StyleError",
    "ValidationResult",
    "WorkbookStore",
    "__version__",
    "build",
    "build_workbook",
    "derive_filename",
    "ensure_valid",
    "resolve_style",
    "sanitize_filename",
    "sanitize_formulas",
    "save_workbook",
    "validate",
]
