"""Schema validation for workbook description requests.

The format has no formal schema. Instead every object key must belong to a
fixed allow-list, and every string leaf is scanned for path-like content so
that file paths and drive traversal tokens never reach the builder.

Two subtrees are exempt from the allow-list because their keys are
caller-defined business data rather than format keywords:

- ``header`` (``cabecalho``): column labels
- ``rows`` (``dados``): one object per data row, keyed by column

Those subtrees are not walked at all unless ``scan_business_data`` is set, in
which case their string leaves get the path scan (never the allow-list).

Violations are aggregated. Validation fails with the full list at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from sheetfactory.exceptions import SchemaValidationError
from sheetfactory.vocabulary import (
    ALLOWED_FIELDS,
    BUSINESS_DATA_FIELDS,
    NAME,
    SHEETS,
    WORKBOOK,
    get_field,
)

PATH_MARKERS = ("/", "\\", "..:")


@dataclass
class ValidationResult:
    """Result of validating a request."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if the request can be built (no errors)."""
        return len(self.errors) == 0

    def raise_for_errors(self) -> None:
        """Raise SchemaValidationError carrying every recorded violation."""
        if self.errors:
            raise SchemaValidationError(self.errors)


def contains_path(value: str) -> bool:
    """Check whether a string looks like a file path or traversal token."""
    return any(marker in value for marker in PATH_MARKERS)


def validate(root: Any, *, scan_business_data: bool = False) -> ValidationResult:
    """Validate a raw request tree.

    Args:
        root: Parsed JSON request body
        scan_business_data: Also scan header/rows string values for path-like
            content. Keys inside those subtrees stay exempt from the allow-list.

    Returns:
        ValidationResult listing every violation found
    """
    result = ValidationResult()
    _walk(root, "", result.errors, scan_business_data)
    _check_structure(root, result.errors)

    if result.errors:
        logger.debug(f"Request rejected with {len(result.errors)} validation error(s)")
    return result


def ensure_valid(root: Any, *, scan_business_data: bool = False) -> None:
    """Validate a request and raise SchemaValidationError if it is invalid."""
    validate(root, scan_business_data=scan_business_data).raise_for_errors()


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _check_string(value: str, path: str, errors: list[str]) -> None:
    if contains_path(value):
        errors.append(f"Path-like value detected at {path}: {value}")


def _walk(node: Any, path: str, errors: list[str], scan_business_data: bool) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            child_path = _join(path, key)

            if isinstance(value, str):
                _check_string(value, child_path, errors)

            if key in BUSINESS_DATA_FIELDS:
                if scan_business_data:
                    _scan_strings(value, child_path, errors)
                continue

            if key not in ALLOWED_FIELDS:
                errors.append(f"Field not allowed: {child_path}")

            _walk(value, child_path, errors, scan_business_data)

    elif isinstance(node, list):
        for index, item in enumerate(node):
            item_path = f"{path}[{index}]"
            if isinstance(item, str):
                _check_string(item, item_path, errors)
            _walk(item, item_path, errors, scan_business_data)


def _scan_strings(node: Any, path: str, errors: list[str]) -> None:
    """Path-scan string leaves below ``node`` without applying the allow-list."""
    if isinstance(node, dict):
        children = ((_join(path, key), value) for key, value in node.items())
    elif isinstance(node, list):
        children = ((f"{path}[{index}]", item) for index, item in enumerate(node))
    else:
        return

    for child_path, value in children:
        if isinstance(value, str):
            _check_string(value, child_path, errors)
        else:
            _scan_strings(value, child_path, errors)


def _check_structure(root: Any, errors: list[str]) -> None:
    if not isinstance(root, dict):
        errors.append("Request body must be a JSON object")
        return

    if WORKBOOK not in root or root[WORKBOOK] is None:
        errors.append(f'Required field "{WORKBOOK}" is missing')
        return

    workbook = root[WORKBOOK]
    if not isinstance(workbook, dict):
        errors.append(f'Field "{WORKBOOK}" must be an object')
        return

    if not isinstance(get_field(workbook, NAME), str):
        errors.append(f'Required field "{WORKBOOK}.{NAME}" is missing or not a string')

    sheets = get_field(workbook, SHEETS)
    sheets_path = f"{WORKBOOK}.{SHEETS}"
    if sheets is None:
        errors.append(f'Required field "{sheets_path}" is missing')
        return
    if not isinstance(sheets, list):
        errors.append(f'Field "{sheets_path}" must be an array')
        return
    if not sheets:
        errors.append(f'Field "{sheets_path}" must contain at least one sheet')
        return

    first_sheet = sheets[0]
    if not isinstance(first_sheet, dict):
        errors.append(f'Field "{sheets_path}[0]" must be an object')
    elif not isinstance(get_field(first_sheet, NAME), str):
        errors.append(f'Required field "{sheets_path}[0].{NAME}" is missing or not a string')
