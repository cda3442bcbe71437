"""
Input sanitizers for sheetfactory.

Provides the formula-expression character filter and output filename
sanitization.
"""

from __future__ import annotations

import copy
import re
from typing import Any

from sheetfactory.vocabulary import NAME, WORKBOOK, get_field

XLSX_EXTENSION = ".xlsx"
FALLBACK_FILENAME = "Workbook"
MAX_FILENAME_LENGTH = 64

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9_\-]")
_FORMULA_UNSAFE = re.compile(r"[^A-Za-z0-9()+\-*/^%,. ]")


def sanitize_expression(expression: str) -> str:
    """Strip one leading '=' and every character outside the formula allow-list.

    This is a character filter, not a formula grammar: parentheses and operators
    are not checked for balance or validity.

    Examples:
        "=SUM(A1:A3)" -> "SUM(A1A3)"
        "=1+2;rm" -> "1+2rm"
    """
    if expression.startswith("="):
        expression = expression[1:]
    return _FORMULA_UNSAFE.sub("", expression)


def is_formula_node(node: Any) -> bool:
    """Check whether a node is a ``{"type": "formula", "expression": ...}`` object."""
    return (
        isinstance(node, dict)
        and node.get("type") == "formula"
        and isinstance(node.get("expression"), str)
    )


def sanitize_formulas(request: Any) -> Any:
    """Return a deep copy of ``request`` with every formula expression sanitized.

    The input is left untouched.
    """
    sanitized = copy.deepcopy(request)
    _sanitize_in_place(sanitized)
    return sanitized


def _sanitize_in_place(node: Any) -> None:
    if is_formula_node(node):
        node["expression"] = sanitize_expression(node["expression"])
        return
    if isinstance(node, dict):
        for value in node.values():
            _sanitize_in_place(value)
    elif isinstance(node, list):
        for item in node:
            _sanitize_in_place(item)


def sanitize_filename(name: str) -> str:
    """Make a workbook name safe to use as a download/file name.

    Characters outside ``[A-Za-z0-9_-]`` become underscores and the result is
    cut to 64 characters. An empty result falls back to "Workbook". The
    function is idempotent.

    Examples:
        "Q1 Report" -> "Q1_Report"
        "../../etc/passwd" -> "______etc_passwd"
        "" -> "Workbook"
    """
    cleaned = _FILENAME_UNSAFE.sub("_", name)[:MAX_FILENAME_LENGTH]
    return cleaned or FALLBACK_FILENAME


def with_extension(name: str) -> str:
    """Append the .xlsx extension unless ``name`` already ends with it."""
    if name.lower().endswith(XLSX_EXTENSION):
        return name
    return name + XLSX_EXTENSION


def derive_filename(request: Any) -> str:
    """Compute the output filename from the request's workbook name.

    A missing or non-string name falls back to "Workbook".

    Examples:
        {"workbook": {"name": "Q1 Report", ...}} -> "Q1_Report.xlsx"
    """
    raw_name = FALLBACK_FILENAME
    if isinstance(request, dict):
        workbook = request.get(WORKBOOK)
        if isinstance(workbook, dict):
            name = get_field(workbook, NAME)
            if isinstance(name, str):
                raw_name = name
    return with_extension(sanitize_filename(raw_name))
