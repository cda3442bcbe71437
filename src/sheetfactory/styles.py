"""Style resolution: style sub-documents -> immutable ResolvedStyle.

A style sub-document looks like::

    {
        "alignment": {"horizontal": "CENTER", "vertical": "TOP"},
        "textColor": {"R": 255, "G": 255, "B": 255},
        "fillColor": {"R": 31, "G": 78, "B": 121},
        "bold": true,
        "borderAll": true
    }

The same resolver serves header and row styles. Shape problems raise
StyleError before anything is written to the workbook.

Border precedence:
- ``borderAll`` sets all four edges and ignores every other border flag
- otherwise ``borderVertical`` sets left+right and ``borderHorizontal`` sets
  top+bottom, then the individual edge flags add to that

Each border flag may also be written by its short name (``all``, ``vertical``,
``horizontal``, ``left``, ``right``, ``top``, ``bottom``).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from sheetfactory.exceptions import StyleError
from sheetfactory.vocabulary import (
    ALIGNMENT,
    BOLD,
    BORDER_ALL,
    BORDER_BOTTOM,
    BORDER_HORIZONTAL,
    BORDER_LEFT,
    BORDER_RIGHT,
    BORDER_SHORT_NAMES,
    BORDER_TOP,
    BORDER_VERTICAL,
    COLOR_CHANNELS,
    FILL_COLOR,
    HORIZONTAL,
    HORIZONTAL_ALIGNMENTS,
    ITALIC,
    TEXT_COLOR,
    UNDERLINE,
    VERTICAL,
    VERTICAL_ALIGNMENTS,
    get_field,
)

if TYPE_CHECKING:
    from openpyxl.cell.cell import Cell

RGB = tuple[int, int, int]

BORDER_STYLE = "thin"
DEFAULT_HORIZONTAL = "general"
DEFAULT_VERTICAL = "bottom"


def rgb_to_hex(rgb: RGB) -> str:
    """Convert an (R, G, B) triple of 0-255 ints to an ``RRGGBB`` hex string.

    Examples:
        (255, 0, 0) -> "FF0000"
        (31, 78, 121) -> "1F4E79"
    """
    return "".join(f"{channel:02X}" for channel in rgb)


@dataclass(frozen=True)
class Borders:
    """Which cell edges carry a thin border."""

    left: bool = False
    right: bool = False
    top: bool = False
    bottom: bool = False

    @property
    def any(self) -> bool:
        return self.left or self.right or self.top or self.bottom


def resolve_borders(
    *,
    all_edges: bool = False,
    vertical: bool = False,
    horizontal: bool = False,
    left: bool = False,
    right: bool = False,
    top: bool = False,
    bottom: bool = False,
) -> Borders:
    """Apply the border precedence rules to a set of flags."""
    if all_edges:
        return Borders(left=True, right=True, top=True, bottom=True)
    return Borders(
        left=vertical or left,
        right=vertical or right,
        top=horizontal or top,
        bottom=horizontal or bottom,
    )


@dataclass(frozen=True)
class ResolvedStyle:
    """Fully computed visual attributes, ready to apply to cells.

    ``None`` means "leave the workbook default untouched" for that attribute.
    """

    horizontal: str | None = None
    vertical: str | None = None
    text_color: RGB | None = None
    fill_color: RGB | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    borders: Borders = Borders()

    @cached_property
    def font(self) -> Font:
        return Font(
            bold=self.bold,
            italic=self.italic,
            underline="single" if self.underline else None,
            color=rgb_to_hex(self.text_color) if self.text_color is not None else None,
        )

    @cached_property
    def fill(self) -> PatternFill | None:
        if self.fill_color is None:
            return None
        return PatternFill("solid", fgColor=rgb_to_hex(self.fill_color))

    @cached_property
    def alignment(self) -> Alignment | None:
        if self.horizontal is None and self.vertical is None:
            return None
        return Alignment(horizontal=self.horizontal, vertical=self.vertical)

    @cached_property
    def border(self) -> Border | None:
        if not self.borders.any:
            return None
        thin = Side(style=BORDER_STYLE)
        empty = Side()
        return Border(
            left=thin if self.borders.left else empty,
            right=thin if self.borders.right else empty,
            top=thin if self.borders.top else empty,
            bottom=thin if self.borders.bottom else empty,
        )

    def apply(self, cell: Cell) -> None:
        """Assign this style's font, fill, alignment and border to a cell."""
        cell.font = self.font
        if self.fill is not None:
            cell.fill = self.fill
        if self.alignment is not None:
            cell.alignment = self.alignment
        if self.border is not None:
            cell.border = self.border


# Header cells without an explicit style are bold, nothing else
HEADER_FALLBACK_STYLE = ResolvedStyle(bold=True)


def resolve_style(spec: Any, *, path: str = "style") -> ResolvedStyle:
    """Shape-check a style sub-document and resolve it.

    Args:
        spec: The raw style object from the request
        path: Location of the style in the request, used in error messages

    Returns:
        ResolvedStyle with alignment defaults (GENERAL / BOTTOM) filled in

    Raises:
        StyleError: If the style, an alignment value, a color or a flag is invalid
    """
    if not isinstance(spec, dict):
        raise StyleError(f'Field "{path}" must be an object', field=path)

    horizontal, vertical = _resolve_alignment(get_field(spec, ALIGNMENT), f"{path}.{ALIGNMENT}")

    return ResolvedStyle(
        horizontal=horizontal,
        vertical=vertical,
        text_color=_resolve_color(get_field(spec, TEXT_COLOR), f"{path}.{TEXT_COLOR}"),
        fill_color=_resolve_color(get_field(spec, FILL_COLOR), f"{path}.{FILL_COLOR}"),
        bold=_flag(spec, BOLD, path),
        italic=_flag(spec, ITALIC, path),
        underline=_flag(spec, UNDERLINE, path),
        borders=resolve_borders(
            all_edges=_border_flag(spec, BORDER_ALL, path),
            vertical=_border_flag(spec, BORDER_VERTICAL, path),
            horizontal=_border_flag(spec, BORDER_HORIZONTAL, path),
            left=_border_flag(spec, BORDER_LEFT, path),
            right=_border_flag(spec, BORDER_RIGHT, path),
            top=_border_flag(spec, BORDER_TOP, path),
            bottom=_border_flag(spec, BORDER_BOTTOM, path),
        ),
    )


def _resolve_alignment(node: Any, path: str) -> tuple[str, str]:
    if node is None:
        return DEFAULT_HORIZONTAL, DEFAULT_VERTICAL
    if not isinstance(node, dict):
        raise StyleError(f'Field "{path}" must be an object', field=path)

    horizontal = _alignment_value(
        node.get(HORIZONTAL), HORIZONTAL_ALIGNMENTS, f"{path}.{HORIZONTAL}"
    )
    vertical = _alignment_value(node.get(VERTICAL), VERTICAL_ALIGNMENTS, f"{path}.{VERTICAL}")
    return horizontal or DEFAULT_HORIZONTAL, vertical or DEFAULT_VERTICAL


def _alignment_value(value: Any, vocabulary: dict[str, str], path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or value.upper() not in vocabulary:
        allowed = ", ".join(vocabulary)
        raise StyleError(f'Invalid alignment "{value}" at {path}. Use one of [{allowed}]', field=path)
    return vocabulary[value.upper()]


def _resolve_color(node: Any, path: str) -> RGB | None:
    if node is None:
        return None
    if not isinstance(node, dict):
        raise StyleError(f'Field "{path}" must be an object with R, G and B', field=path)

    channels = []
    for channel in COLOR_CHANNELS:
        if channel not in node:
            raise StyleError(f'Channel "{channel}" missing in color "{path}"', field=path)
        value = node[channel]
        # bool is an int subclass but not a channel value
        if isinstance(value, bool) or not isinstance(value, int):
            raise StyleError(
                f'Channel "{channel}" in "{path}" must be an integer (0-255)', field=path
            )
        if not 0 <= value <= 255:
            raise StyleError(
                f'Channel "{channel}" in "{path}" out of range 0-255: {value}', field=path
            )
        channels.append(value)
    return channels[0], channels[1], channels[2]


def _flag(spec: dict[str, Any], name: str, path: str) -> bool | None:
    return _check_flag(get_field(spec, name), name, path)


def _check_flag(value: Any, name: str, path: str) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise StyleError(f'Field "{path}.{name}" must be a boolean (true/false)', field=name)
    return value


def _border_flag(spec: dict[str, Any], name: str, path: str) -> bool:
    """Read a border flag under its full name or its short name ("all", "left", ...)."""
    if _flag(spec, name, path):
        return True
    short = BORDER_SHORT_NAMES[name]
    return bool(_check_flag(spec.get(short), short, path))
