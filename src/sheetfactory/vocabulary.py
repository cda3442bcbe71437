"""Field vocabulary of the workbook description format.

Canonical field names are English. The Portuguese names used by the first
version of the format are accepted everywhere as aliases, so existing request
bodies keep working.
"""

from __future__ import annotations

from typing import Any

WORKBOOK = "workbook"
NAME = "name"
SHEETS = "sheets"
HEADER = "header"
COLUMNS = "columns"
ROWS = "rows"
STYLE = "style"

ALIGNMENT = "alignment"
HORIZONTAL = "horizontal"
VERTICAL = "vertical"
TEXT_COLOR = "textColor"
FILL_COLOR = "fillColor"
BOLD = "bold"
ITALIC = "italic"
UNDERLINE = "underline"

BORDER_ALL = "borderAll"
BORDER_VERTICAL = "borderVertical"
BORDER_HORIZONTAL = "borderHorizontal"
BORDER_LEFT = "borderLeft"
BORDER_RIGHT = "borderRight"
BORDER_TOP = "borderTop"
BORDER_BOTTOM = "borderBottom"

# Short border names, only meaningful directly inside a style object.
# "horizontal"/"vertical" there are border flags; inside "alignment" they are
# alignment words.
BORDER_SHORT_NAMES: dict[str, str] = {
    BORDER_ALL: "all",
    BORDER_VERTICAL: VERTICAL,
    BORDER_HORIZONTAL: HORIZONTAL,
    BORDER_LEFT: "left",
    BORDER_RIGHT: "right",
    BORDER_TOP: "top",
    BORDER_BOTTOM: "bottom",
}

COLOR_CHANNELS = ("R", "G", "B")

# Legacy name -> canonical name
ALIASES: dict[str, str] = {
    "nomeWorkbook": NAME,
    "nomeAba": NAME,
    "abas": SHEETS,
    "cabecalho": HEADER,
    "campos": COLUMNS,
    "dados": ROWS,
    "estilo": STYLE,
    "alinhamento": ALIGNMENT,
    "corTexto": TEXT_COLOR,
    "corFundo": FILL_COLOR,
    "negrito": BOLD,
    "italico": ITALIC,
    "sublinhado": UNDERLINE,
    "bordaTotal": BORDER_ALL,
    "bordaVertical": BORDER_VERTICAL,
    "bordaHorizontal": BORDER_HORIZONTAL,
    "bordaEsquerda": BORDER_LEFT,
    "bordaDireita": BORDER_RIGHT,
    "bordaCima": BORDER_TOP,
    "bordaBaixo": BORDER_BOTTOM,
}

CANONICAL_FIELDS = frozenset(
    {
        WORKBOOK,
        NAME,
        SHEETS,
        HEADER,
        COLUMNS,
        ROWS,
        STYLE,
        ALIGNMENT,
        HORIZONTAL,
        VERTICAL,
        TEXT_COLOR,
        FILL_COLOR,
        BOLD,
        ITALIC,
        UNDERLINE,
        BORDER_ALL,
        BORDER_VERTICAL,
        BORDER_HORIZONTAL,
        BORDER_LEFT,
        BORDER_RIGHT,
        BORDER_TOP,
        BORDER_BOTTOM,
        *COLOR_CHANNELS,
    }
)

ALLOWED_FIELDS = (
    CANONICAL_FIELDS | frozenset(ALIASES) | frozenset(BORDER_SHORT_NAMES.values())
)

# Keys whose subtrees hold caller-defined business data (column labels, row keys)
BUSINESS_DATA_FIELDS = frozenset({HEADER, ROWS, "cabecalho", "dados"})

STYLE_FIELDS = frozenset({STYLE, "estilo"})

# Accepted alignment words (upper-cased) -> openpyxl alignment value
HORIZONTAL_ALIGNMENTS: dict[str, str] = {
    "LEFT": "left",
    "ESQUERDA": "left",
    "CENTER": "center",
    "CENTRO": "center",
    "RIGHT": "right",
    "DIREITA": "right",
    "GENERAL": "general",
    "GERAL": "general",
}

VERTICAL_ALIGNMENTS: dict[str, str] = {
    "TOP": "top",
    "CIMA": "top",
    "CENTER": "center",
    "CENTRO": "center",
    "BOTTOM": "bottom",
    "BAIXO": "bottom",
}

_MISSING = object()


def canonical(key: str) -> str:
    """Return the canonical name of a field, resolving legacy aliases."""
    return ALIASES.get(key, key)


def field_names(name: str) -> tuple[str, ...]:
    """Return every spelling accepted for a canonical field name."""
    return (name, *(alias for alias, target in ALIASES.items() if target == name))


def has_field(node: dict[str, Any], name: str) -> bool:
    """Check whether ``node`` carries ``name`` under any accepted spelling."""
    return any(key in node for key in field_names(name))


def get_field(node: dict[str, Any], name: str, default: Any = None) -> Any:
    """Read a field by canonical name, falling back to its legacy aliases.

    Examples:
        get_field({"cabecalho": {...}}, "header") -> {...}
        get_field({}, "rows", []) -> []
    """
    for key in field_names(name):
        value = node.get(key, _MISSING)
        if value is not _MISSING:
            return value
    return default
