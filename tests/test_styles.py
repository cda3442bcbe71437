"""Tests for style resolution."""

import pytest
from openpyxl import Workbook

from sheetfactory.exceptions import StyleError
from sheetfactory.styles import (
    HEADER_FALLBACK_STYLE,
    Borders,
    ResolvedStyle,
    resolve_borders,
    resolve_style,
    rgb_to_hex,
)


class TestRgbToHex:
    def test_red(self):
        assert rgb_to_hex((255, 0, 0)) == "FF0000"

    def test_black(self):
        assert rgb_to_hex((0, 0, 0)) == "000000"

    def test_mixed(self):
        assert rgb_to_hex((31, 78, 121)) == "1F4E79"


class TestAlignment:
    def test_defaults_when_absent(self):
        style = resolve_style({})
        assert style.horizontal == "general"
        assert style.vertical == "bottom"

    def test_partial_alignment_keeps_other_default(self):
        style = resolve_style({"alignment": {"horizontal": "RIGHT"}})
        assert style.horizontal == "right"
        assert style.vertical == "bottom"

    def test_case_insensitive(self):
        style = resolve_style({"alignment": {"horizontal": "center", "vertical": "Top"}})
        assert style.horizontal == "center"
        assert style.vertical == "top"

    def test_legacy_words(self):
        style = resolve_style({"alinhamento": {"horizontal": "ESQUERDA", "vertical": "BAIXO"}})
        assert style.horizontal == "left"
        assert style.vertical == "bottom"

    def test_unknown_horizontal_rejected(self):
        with pytest.raises(StyleError, match="Invalid alignment"):
            resolve_style({"alignment": {"horizontal": "JUSTIFY"}})

    def test_unknown_vertical_rejected(self):
        """LEFT is a horizontal word, not a vertical one."""
        with pytest.raises(StyleError):
            resolve_style({"alignment": {"vertical": "LEFT"}})

    def test_alignment_must_be_object(self):
        with pytest.raises(StyleError, match="must be an object"):
            resolve_style({"alignment": "CENTER"})

    def test_non_string_alignment_rejected(self):
        with pytest.raises(StyleError):
            resolve_style({"alignment": {"horizontal": 1}})


class TestColors:
    def test_text_color(self):
        style = resolve_style({"textColor": {"R": 10, "G": 20, "B": 30}})
        assert style.text_color == (10, 20, 30)
        assert style.font.color.rgb.endswith("0A141E")

    def test_fill_color_is_solid(self):
        style = resolve_style({"fillColor": {"R": 255, "G": 255, "B": 0}})
        assert style.fill_color == (255, 255, 0)
        assert style.fill.fill_type == "solid"
        assert style.fill.fgColor.rgb.endswith("FFFF00")

    @pytest.mark.parametrize("value", [0, 255])
    def test_boundaries_accepted(self, value):
        style = resolve_style({"textColor": {"R": value, "G": value, "B": value}})
        assert style.text_color == (value, value, value)

    @pytest.mark.parametrize("value", [-1, 256, 1000])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(StyleError, match="out of range"):
            resolve_style({"fillColor": {"R": 0, "G": value, "B": 0}})

    def test_missing_channel_rejected(self):
        with pytest.raises(StyleError, match='Channel "B" missing'):
            resolve_style({"textColor": {"R": 0, "G": 0}})

    @pytest.mark.parametrize("value", [1.5, "10", True])
    def test_non_integer_channel_rejected(self, value):
        with pytest.raises(StyleError, match="must be an integer"):
            resolve_style({"textColor": {"R": value, "G": 0, "B": 0}})

    def test_color_must_be_object(self):
        with pytest.raises(StyleError):
            resolve_style({"corTexto": [1, 2, 3]})

    def test_no_fill_by_default(self):
        assert resolve_style({}).fill is None


class TestFontFlags:
    def test_absent_flags_leave_default(self):
        style = resolve_style({})
        assert style.bold is None
        assert style.italic is None
        assert style.underline is None

    def test_flags_map_to_font(self):
        style = resolve_style({"bold": True, "italic": True, "underline": True})
        assert style.font.bold is True
        assert style.font.italic is True
        assert style.font.underline == "single"

    def test_false_is_kept_as_false(self):
        assert resolve_style({"bold": False}).bold is False

    def test_legacy_flag_names(self):
        style = resolve_style({"negrito": True, "sublinhado": True})
        assert style.bold is True
        assert style.underline is True

    def test_non_boolean_flag_rejected(self):
        with pytest.raises(StyleError, match="must be a boolean"):
            resolve_style({"bold": "yes"})


class TestBorders:
    def test_all_wins_over_everything(self):
        style = resolve_style({"borderAll": True, "borderLeft": False})
        assert style.borders == Borders(left=True, right=True, top=True, bottom=True)

    def test_vertical_plus_top(self):
        style = resolve_style({"borderVertical": True, "borderTop": True})
        assert style.borders == Borders(left=True, right=True, top=True, bottom=False)

    def test_horizontal_pair(self):
        assert resolve_borders(horizontal=True) == Borders(top=True, bottom=True)

    def test_vertical_and_horizontal_together(self):
        assert resolve_borders(vertical=True, horizontal=True) == Borders(
            left=True, right=True, top=True, bottom=True
        )

    def test_individual_edges_are_additive(self):
        assert resolve_borders(left=True, bottom=True) == Borders(left=True, bottom=True)

    def test_no_flags_no_border(self):
        style = resolve_style({})
        assert not style.borders.any
        assert style.border is None

    def test_border_objects_are_thin(self):
        style = resolve_style({"borderVertical": True})
        assert style.border.left.style == "thin"
        assert style.border.right.style == "thin"
        assert style.border.top.style is None

    def test_non_boolean_border_rejected(self):
        with pytest.raises(StyleError):
            resolve_style({"bordaTotal": 1})

    def test_short_names(self):
        style = resolve_style({"all": True, "left": False})
        assert style.borders == Borders(left=True, right=True, top=True, bottom=True)

        style = resolve_style({"vertical": True, "top": True})
        assert style.borders == Borders(left=True, right=True, top=True, bottom=False)

    def test_short_names_next_to_alignment(self):
        """Style-level "horizontal" is a border flag; inside alignment it is a position."""
        style = resolve_style({"alignment": {"horizontal": "CENTER"}, "horizontal": True})
        assert style.horizontal == "center"
        assert style.borders == Borders(top=True, bottom=True)

    def test_non_boolean_short_name_rejected(self):
        with pytest.raises(StyleError, match='"style.left" must be a boolean'):
            resolve_style({"left": "yes"})


class TestResolvedStyle:
    def test_style_must_be_object(self):
        with pytest.raises(StyleError, match='"row.style" must be an object'):
            resolve_style("bold", path="row.style")

    def test_equal_specs_resolve_equal(self):
        spec = {"bold": True, "fillColor": {"R": 1, "G": 2, "B": 3}}
        assert resolve_style(spec) == resolve_style(dict(spec))

    def test_is_immutable(self):
        style = resolve_style({})
        with pytest.raises(AttributeError):
            style.bold = True

    def test_fallback_is_bold_only(self):
        assert HEADER_FALLBACK_STYLE == ResolvedStyle(bold=True)
        assert HEADER_FALLBACK_STYLE.alignment is None
        assert HEADER_FALLBACK_STYLE.fill is None
        assert HEADER_FALLBACK_STYLE.border is None

    def test_apply_to_cell(self):
        cell = Workbook().active["A1"]
        style = resolve_style(
            {
                "alignment": {"horizontal": "CENTER"},
                "fillColor": {"R": 0, "G": 0, "B": 255},
                "italic": True,
                "borderBottom": True,
            }
        )
        style.apply(cell)
        assert cell.font.italic is True
        assert cell.alignment.horizontal == "center"
        assert cell.fill.fgColor.rgb.endswith("0000FF")
        assert cell.border.bottom.style == "thin"
        assert cell.border.top.style is None
