"""Document builder: validated request tree -> openpyxl workbook -> .xlsx bytes.

The builder walks the tree once and fails fast. It expects the request to have
passed schema validation, but re-checks the preconditions it depends on so it
can also be driven directly.

Root keys are dispatched through a closed table. Keys without a handler are
logged and skipped rather than failing the build.
"""

from __future__ import annotations

import io
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger
from openpyxl import Workbook
from openpyxl.utils.exceptions import IllegalCharacterError

from sheetfactory.exceptions import BuildError
from sheetfactory.styles import HEADER_FALLBACK_STYLE, ResolvedStyle, resolve_style
from sheetfactory.vocabulary import (
    COLUMNS,
    HEADER,
    NAME,
    ROWS,
    SHEETS,
    STYLE,
    STYLE_FIELDS,
    WORKBOOK,
    get_field,
    has_field,
)

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell
    from openpyxl.worksheet.worksheet import Worksheet


@dataclass
class SheetContext:
    """Per-sheet build state threaded through header and row emission."""

    worksheet: Worksheet
    name: str
    next_row: int = 1  # 1-based, as openpyxl expects

    def new_row(self) -> int:
        """Reserve the next row index and return it."""
        row = self.next_row
        self.next_row += 1
        return row

    @property
    def rows_written(self) -> int:
        return self.next_row - 1


def build(request: dict[str, Any]) -> bytes:
    """Build a request into .xlsx bytes.

    Raises:
        BuildError: If a node is semantically incomplete (missing header,
            null row value, invalid style, ...)
    """
    return workbook_to_bytes(build_workbook(request))


def build_workbook(request: dict[str, Any]) -> Workbook:
    """Build a request into an in-memory openpyxl Workbook."""
    if not isinstance(request, dict):
        raise BuildError("Request must be a JSON object")

    workbook = Workbook()
    # Drop the default "Sheet" so the output holds exactly the requested sheets
    workbook.remove(workbook.active)

    for key, node in request.items():
        handler = ROOT_HANDLERS.get(key)
        if handler is None:
            logger.warning(f'Top-level key "{key}" has no handler; skipping it')
            continue
        handler(workbook, node)

    if not workbook.worksheets:
        raise BuildError(f'Required field "{WORKBOOK}" is missing', field=WORKBOOK)

    return workbook


def workbook_to_bytes(workbook: Workbook) -> bytes:
    """Serialize a workbook to .xlsx bytes in memory."""
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_workbook_node(workbook: Workbook, node: Any) -> None:
    """Create every sheet of the ``workbook`` node, in document order."""
    if not isinstance(node, dict):
        raise BuildError(f'Field "{WORKBOOK}" must be an object', field=WORKBOOK)

    if not isinstance(get_field(node, NAME), str):
        raise BuildError(
            f'Field "{WORKBOOK}.{NAME}" is missing or not a string', field=f"{WORKBOOK}.{NAME}"
        )

    sheets = get_field(node, SHEETS)
    sheets_path = f"{WORKBOOK}.{SHEETS}"
    if not isinstance(sheets, list) or not sheets:
        raise BuildError(f'Field "{sheets_path}" must be a non-empty array', field=sheets_path)

    for index, sheet_node in enumerate(sheets):
        build_sheet(workbook, sheet_node, path=f"{sheets_path}[{index}]")


def build_sheet(workbook: Workbook, node: Any, *, path: str = "sheet") -> SheetContext:
    """Create one worksheet with its header row and data rows."""
    if not isinstance(node, dict):
        raise BuildError(f'Field "{path}" must be an object', field=path)

    name = get_field(node, NAME)
    if not isinstance(name, str):
        raise BuildError(f'Field "{path}.{NAME}" must be a string', field=f"{path}.{NAME}")
    # openpyxl would silently title an unnamed sheet "Sheet"
    if not name:
        raise BuildError(f'Field "{path}.{NAME}" must not be empty', field=f"{path}.{NAME}")

    try:
        worksheet = workbook.create_sheet(title=name)
    except ValueError as e:
        raise BuildError(f'Invalid sheet name "{name}": {e}', field=f"{path}.{NAME}") from e

    context = SheetContext(worksheet=worksheet, name=name)

    header = get_field(node, HEADER)
    if header is None:
        raise BuildError(f'Sheet "{name}" must contain a header', field=f"{path}.{HEADER}")
    write_header(context, header, path=f"{path}.{HEADER}")

    rows = get_field(node, ROWS)
    if rows is not None:
        if not isinstance(rows, list):
            raise BuildError(f'Field "{path}.{ROWS}" must be an array', field=f"{path}.{ROWS}")
        for index, row in enumerate(rows):
            write_row(context, row, path=f"{path}.{ROWS}[{index}]")

    logger.debug(f'Built sheet "{name}" ({context.rows_written} rows)')
    return context


def write_header(context: SheetContext, header: Any, *, path: str = HEADER) -> None:
    """Write the header row: one text cell per column label, uniformly styled."""
    if not isinstance(header, dict):
        raise BuildError(f'Field "{path}" must be an object', field=path)

    columns = get_field(header, COLUMNS)
    if not isinstance(columns, list):
        raise BuildError(f'Field "{path}.{COLUMNS}" must be an array', field=f"{path}.{COLUMNS}")

    style = HEADER_FALLBACK_STYLE
    if has_field(header, STYLE):
        style = resolve_style(get_field(header, STYLE), path=f"{path}.{STYLE}")

    row = context.new_row()
    for index, label in enumerate(columns):
        if not isinstance(label, str):
            raise BuildError(
                f'Field "{path}.{COLUMNS}[{index}]" must be a string',
                field=f"{path}.{COLUMNS}[{index}]",
            )
        cell = context.worksheet.cell(row=row, column=index + 1)
        _write_text(cell, label, f"{path}.{COLUMNS}[{index}]")
        style.apply(cell)


def write_row(context: SheetContext, row_node: Any, *, path: str = ROWS) -> None:
    """Write one data row in the row object's own field order.

    The ``style`` field is never a data column; when present it is resolved
    once and applied to every cell of the row.
    """
    if not isinstance(row_node, dict):
        raise BuildError(f'Field "{path}" must be an object', field=path)

    style: ResolvedStyle | None = None
    if has_field(row_node, STYLE):
        style = resolve_style(get_field(row_node, STYLE), path=f"{path}.{STYLE}")

    row = context.new_row()
    column = 1
    for key, value in row_node.items():
        if key in STYLE_FIELDS:
            continue

        if value is None:
            raise BuildError(f'Field "{key}" in rows is missing or null', field=key)

        cell = context.worksheet.cell(row=row, column=column)
        column += 1
        _write_value(cell, value, key)
        if style is not None:
            style.apply(cell)


def _write_value(cell: Cell, value: Any, field: str) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        # NaN and Infinity have no representation in a numeric cell
        raise BuildError(f'Field "{field}" must be a finite number, got {value}', field=field)
    if isinstance(value, bool | int | float):
        cell.value = value
    elif isinstance(value, str):
        _write_text(cell, value, field)
    else:
        logger.warning(
            f'Field "{field}" holds a {type(value).__name__} value; writing an empty text cell'
        )
        _write_text(cell, "", field)


def _write_text(cell: Cell, text: str, field: str) -> None:
    try:
        cell.value = text
    except IllegalCharacterError as e:
        raise BuildError(
            f'Field "{field}" contains characters not allowed in a cell', field=field
        ) from e
    # Keep text as text even when it starts with "="
    cell.data_type = "s"


RootHandler = Callable[[Workbook, Any], None]

ROOT_HANDLERS: dict[str, RootHandler] = {
    WORKBOOK: build_workbook_node,
}
