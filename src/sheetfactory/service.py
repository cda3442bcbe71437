"""Spreadsheet generation service.

Orchestrates one request end to end:

1. sanitize formula expressions on a copy of the request
2. derive the output filename from the raw workbook name
3. validate the sanitized copy (aggregated errors)
4. enforce the optional per-sheet row bound
5. build the .xlsx bytes
6. optionally persist them to the templates directory
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger

from sheetfactory.builder import build_workbook, workbook_to_bytes
from sheetfactory.config import Settings, get_settings
from sheetfactory.exceptions import BuildError
from sheetfactory.sanitize import derive_filename, sanitize_formulas
from sheetfactory.storage import WorkbookStore
from sheetfactory.validator import ValidationResult, ensure_valid, validate
from sheetfactory.vocabulary import NAME, ROWS, SHEETS, WORKBOOK, get_field

if TYPE_CHECKING:
    from pathlib import Path

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass
class GeneratedWorkbook:
    """A built workbook and the metadata needed to deliver it."""

    filename: str
    content: bytes
    sheet_names: list[str]
    saved_path: Path | None = None

    @property
    def media_type(self) -> str:
        return XLSX_MEDIA_TYPE

    @property
    def sheet_count(self) -> int:
        return len(self.sheet_names)

    @property
    def size(self) -> int:
        return len(self.content)


class SpreadsheetService:
    """Turns workbook description requests into .xlsx documents."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.store = WorkbookStore(self.settings.templates_dir)

    def check(self, request: Any) -> ValidationResult:
        """Validate a request without building it."""
        return validate(
            sanitize_formulas(request), scan_business_data=self.settings.scan_business_data
        )

    def generate(self, request: Any, *, persist: bool | None = None) -> GeneratedWorkbook:
        """Generate the .xlsx document for a request.

        Args:
            request: Parsed JSON request body
            persist: Save the result to the templates directory. Defaults to
                the ``persist_generated`` setting.

        Raises:
            SchemaValidationError: If the request fails validation
            BuildError: If the request is incomplete at build time
            StorageError: If persisting the result fails
        """
        sanitized = sanitize_formulas(request)
        filename = derive_filename(request)

        ensure_valid(sanitized, scan_business_data=self.settings.scan_business_data)
        self._check_row_bound(sanitized)

        workbook = build_workbook(sanitized)
        result = GeneratedWorkbook(
            filename=filename,
            content=workbook_to_bytes(workbook),
            sheet_names=list(workbook.sheetnames),
        )

        should_persist = self.settings.persist_generated if persist is None else persist
        if should_persist:
            result.saved_path = self.store.save(result.content, filename)

        logger.bind(filename=filename, sheets=result.sheet_count, size=result.size).info(
            f"Generated {filename}: {result.sheet_count} sheet(s), {result.size} bytes"
        )
        return result

    def _check_row_bound(self, request: dict[str, Any]) -> None:
        limit = self.settings.max_rows_per_sheet
        if limit is None:
            return

        for sheet in get_field(request[WORKBOOK], SHEETS):
            if not isinstance(sheet, dict):
                continue
            rows = get_field(sheet, ROWS)
            if isinstance(rows, list) and len(rows) > limit:
                name = get_field(sheet, NAME)
                raise BuildError(
                    f'Sheet "{name}" has {len(rows)} rows; the limit is {limit}',
                    field=ROWS,
                )
