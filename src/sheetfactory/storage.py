"""
Workbook storage for sheetfactory.

Handles writing generated .xlsx bytes into the templates directory.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from sheetfactory.exceptions import StorageError
from sheetfactory.sanitize import with_extension


class WorkbookStore:
    """Writes generated workbooks into a directory on disk."""

    def __init__(self, directory: str | Path) -> None:
        """Initialize the store with a target directory.

        Args:
            directory: Directory to write workbooks to. Created on first save.
        """
        self.directory = Path(directory)

    def save(self, content: bytes, base_name: str) -> Path:
        """Write workbook bytes to ``<directory>/<base_name>.xlsx``.

        Args:
            content: The .xlsx bytes
            base_name: File name with or without the .xlsx extension

        Returns:
            Path to the written file

        Raises:
            StorageError: If the name is not a plain file name, or the
                directory or file cannot be written
        """
        if not base_name or "/" in base_name or "\\" in base_name or base_name in {".", ".."}:
            raise StorageError(str(self.directory / base_name), "not a plain file name")

        path = self.directory / with_extension(base_name)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(str(self.directory), f"cannot create directory: {e}") from e

        try:
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(str(path), str(e)) from e

        logger.info(f"Saved workbook to {path} ({len(content)} bytes)")
        return path


def save_workbook(content: bytes, base_name: str, directory: str | Path) -> Path:
    """Write workbook bytes under ``directory``. See WorkbookStore.save."""
    return WorkbookStore(directory).save(content, base_name)
