"""Tests for request schema validation."""

import pytest
from helpers import make_request, make_sheet

from sheetfactory.exceptions import SchemaValidationError
from sheetfactory.validator import contains_path, ensure_valid, validate


class TestContainsPath:
    def test_forward_slash(self):
        assert contains_path("reports/q1")

    def test_backslash(self):
        assert contains_path("C\\Windows")

    def test_drive_traversal_token(self):
        assert contains_path("..:secret")

    def test_plain_dots_are_fine(self):
        assert not contains_path("v1.2..final")

    def test_plain_text(self):
        assert not contains_path("Q1 Report")


class TestAllowList:
    def test_valid_request_passes(self, q1_request):
        """A well-formed request has no errors."""
        result = validate(q1_request)
        assert result.is_valid
        assert result.errors == []

    def test_legacy_vocabulary_passes(self, legacy_request):
        """Portuguese field names are accepted as aliases."""
        assert validate(legacy_request).is_valid

    def test_short_border_names_pass(self):
        sheet = make_sheet(header_style={"all": True, "left": False})
        sheet["rows"] = [{"id": 1, "style": {"vertical": True, "top": True}}]
        assert validate(make_request([sheet])).is_valid

    def test_unknown_top_level_field(self, q1_request):
        q1_request["extra"] = 1
        result = validate(q1_request)
        assert "Field not allowed: extra" in result.errors

    def test_unknown_nested_field_reports_full_path(self):
        sheet = make_sheet()
        sheet["color"] = "red"
        result = validate(make_request([make_sheet(), sheet]))
        assert "Field not allowed: workbook.sheets[1].color" in result.errors

    def test_unknown_field_inside_style(self):
        """Style keys outside the vocabulary are rejected at any depth."""
        request = make_request()
        request["workbook"]["sheets"][0]["style"] = {"alignment": {"diagonal": "UP"}}
        result = validate(request)
        assert "Field not allowed: workbook.sheets[0].style.alignment.diagonal" in result.errors

    def test_row_keys_are_exempt(self):
        """Row objects carry caller-defined column keys."""
        request = make_request([make_sheet(rows=[{"anything": 1, "goes": "here"}])])
        assert validate(request).is_valid

    def test_header_subtree_is_not_checked(self):
        """Header keys are exempt, including unusual ones."""
        request = make_request()
        request["workbook"]["sheets"][0]["header"]["whatever"] = True
        assert validate(request).is_valid

    def test_errors_are_aggregated(self):
        """Every violation is reported, not just the first."""
        request = make_request()
        request["a"] = 1
        request["workbook"]["b"] = 2
        request["workbook"]["sheets"][0]["c"] = 3
        result = validate(request)
        assert len(result.errors) == 3


class TestPathLikeValues:
    def test_path_in_workbook_name(self):
        request = make_request(name="../etc/passwd")
        result = validate(request)
        assert any("workbook.name" in e for e in result.errors)

    def test_path_in_sheet_name(self):
        request = make_request([make_sheet(name="a\\b")])
        result = validate(request)
        assert "Path-like value detected at workbook.sheets[0].name: a\\b" in result.errors

    @pytest.mark.parametrize("depth", [1, 2, 3])
    def test_detected_at_any_depth(self, depth):
        """Nested allow-listed objects are scanned all the way down."""
        node: dict = {"horizontal": "x/y"}
        for _ in range(depth):
            node = {"alignment": node}
        request = make_request()
        request["workbook"]["sheets"][0]["style"] = node
        result = validate(request)
        assert any("Path-like value" in e and "x/y" in e for e in result.errors)

    def test_string_in_array_is_scanned(self):
        request = make_request()
        request["workbook"]["sheets"].append("C:..:/x")
        result = validate(request)
        assert any("workbook.sheets[1]" in e for e in result.errors)

    def test_header_string_value_itself_is_scanned(self):
        """A header given as a plain string is still scanned."""
        request = make_request()
        request["workbook"]["sheets"][0]["header"] = "/tmp/x"
        result = validate(request)
        assert "Path-like value detected at workbook.sheets[0].header: /tmp/x" in result.errors

    def test_row_values_not_scanned_by_default(self):
        request = make_request([make_sheet(rows=[{"path": "/etc/passwd"}])])
        assert validate(request).is_valid

    def test_row_values_scanned_when_enabled(self):
        request = make_request([make_sheet(rows=[{"path": "/etc/passwd"}])])
        result = validate(request, scan_business_data=True)
        assert result.errors == [
            "Path-like value detected at workbook.sheets[0].rows[0].path: /etc/passwd"
        ]

    def test_header_labels_scanned_when_enabled(self):
        request = make_request([make_sheet(columns=["id", "a/b"])])
        result = validate(request, scan_business_data=True)
        assert result.errors == [
            "Path-like value detected at workbook.sheets[0].header.columns[1]: a/b"
        ]

    def test_scan_does_not_apply_allow_list_to_data(self):
        request = make_request([make_sheet(rows=[{"free": "text", "keys": 1}])])
        assert validate(request, scan_business_data=True).is_valid


class TestStructure:
    def test_root_must_be_object(self):
        result = validate([1, 2])
        assert "Request body must be a JSON object" in result.errors

    def test_workbook_required(self):
        result = validate({})
        assert result.errors == ['Required field "workbook" is missing']

    def test_workbook_must_be_object(self):
        result = validate({"workbook": "Q1"})
        assert result.errors == ['Field "workbook" must be an object']

    def test_workbook_name_must_be_string(self):
        request = make_request()
        request["workbook"]["name"] = 42
        result = validate(request)
        assert result.errors == ['Required field "workbook.name" is missing or not a string']

    def test_sheets_required(self):
        result = validate({"workbook": {"name": "x"}})
        assert result.errors == ['Required field "workbook.sheets" is missing']

    def test_sheets_must_be_array(self):
        result = validate({"workbook": {"name": "x", "sheets": {}}})
        assert result.errors == ['Field "workbook.sheets" must be an array']

    def test_sheets_must_not_be_empty(self):
        result = validate(make_request(sheets=[]))
        assert result.errors == ['Field "workbook.sheets" must contain at least one sheet']

    def test_first_sheet_needs_name(self):
        sheet = make_sheet()
        del sheet["name"]
        result = validate(make_request([sheet]))
        assert result.errors == [
            'Required field "workbook.sheets[0].name" is missing or not a string'
        ]

    def test_only_first_sheet_name_is_structurally_required(self):
        """Later sheets are checked by the builder, not the validator."""
        second = make_sheet()
        del second["name"]
        assert validate(make_request([make_sheet(), second])).is_valid

    def test_structural_and_walk_errors_combined(self):
        request = {"workbook": {"sheets": []}, "junk": True}
        result = validate(request)
        assert "Field not allowed: junk" in result.errors
        assert 'Required field "workbook.name" is missing or not a string' in result.errors
        assert 'Field "workbook.sheets" must contain at least one sheet' in result.errors


class TestEnsureValid:
    def test_passes_silently(self, q1_request):
        ensure_valid(q1_request)

    def test_raises_with_all_errors(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            ensure_valid({"workbook": {"name": "a/b", "sheets": []}, "x": 1})
        assert len(exc_info.value.errors) == 3
        assert "Field not allowed: x" in str(exc_info.value)
