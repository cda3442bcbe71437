"""Custom exceptions for the sheetfactory compile workflow."""

from __future__ import annotations


class SpreadsheetError(Exception):
    """Base exception for everything raised while compiling a workbook."""

    pass


class SchemaValidationError(SpreadsheetError):
    """Raised when the request violates the allow-list or structural rules.

    Carries every violation found during the walk, not just the first one.
    No document construction happens once this is raised.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid spreadsheet request: " + "; ".join(self.errors))


class BuildError(SpreadsheetError):
    """Raised when a node is semantically incomplete at build time.

    Examples: a sheet without a header, or a row field whose value is null.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class StyleError(BuildError):
    """Raised when a style sub-document has a bad shape, enum or color."""

    pass


class StorageError(SpreadsheetError):
    """Raised when a generated workbook cannot be written to disk."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not save workbook to '{path}': {reason}")
