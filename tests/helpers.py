"""Request builders and xlsx inspection helpers shared by the test modules."""

from __future__ import annotations

import io
from typing import Any

from openpyxl import Workbook, load_workbook


def make_request(
    sheets: list[dict[str, Any]] | None = None, name: str = "Q1 Report"
) -> dict[str, Any]:
    """Build a request body with sensible defaults."""
    if sheets is None:
        sheets = [make_sheet()]
    return {"workbook": {"name": name, "sheets": sheets}}


def make_sheet(
    name: str = "Jan",
    columns: list[str] | None = None,
    rows: list[dict[str, Any]] | None = None,
    header_style: dict[str, Any] | None = None,
) -> dict[str, Any]:
    header: dict[str, Any] = {"columns": columns if columns is not None else ["id", "name", "value"]}
    if header_style is not None:
        header["style"] = header_style
    sheet: dict[str, Any] = {"name": name, "header": header}
    if rows is not None:
        sheet["rows"] = rows
    return sheet


def open_xlsx(content: bytes) -> Workbook:
    """Load generated .xlsx bytes back into openpyxl for inspection."""
    return load_workbook(io.BytesIO(content))
