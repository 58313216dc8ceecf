"""Tests for the recipient batch assembler."""

import pytest

from campaign_importer.schemas.imports import ImportState
from campaign_importer.services import import_service
from campaign_importer.services.import_service import (
    MIXED_PLACEHOLDERS_WARNING,
    build_validation_response,
    to_recipient_payloads,
    validate_csv_import,
    validate_manual_import,
)


def _assert_validity_invariant(diagnostics):
    assert diagnostics.is_valid == (not diagnostics.errors and diagnostics.valid_count > 0)


class TestCsvScenarios:
    def test_named_template_with_duplicate_and_bad_phone(self, scenario_a):
        template, csv_text = scenario_a
        diagnostics = validate_csv_import(template, csv_text)

        assert diagnostics.state == ImportState.VALIDATED
        assert diagnostics.is_valid
        assert diagnostics.warnings == []
        assert [r.is_valid for r in diagnostics.rows] == [True, False, False]
        assert diagnostics.rows[1].errors == ["duplicate of row 1"]
        assert diagnostics.rows[2].errors == ["invalid phone format"]

        bindings = {b.placeholder: b for b in diagnostics.column_mapping.bindings}
        assert bindings["name"].column_name == "name"
        assert bindings["order_id"].column_name == "order_id"
        assert {b.matched_by for b in bindings.values()} == {"name"}
        _assert_validity_invariant(diagnostics)

    def test_positional_template_falls_back_to_column_order(self):
        diagnostics = validate_csv_import("{{1}} bought {{2}}", "phone,qty,item\n+15551234567,2,Widget")

        bindings = {b.placeholder: (b.column_index, b.column_name) for b in diagnostics.column_mapping.bindings}
        assert bindings == {"1": (1, "qty"), "2": (2, "item")}
        assert diagnostics.rows[0].is_valid
        assert diagnostics.rows[0].params == {"1": "2", "2": "Widget"}
        assert diagnostics.warnings == []
        assert diagnostics.is_valid

    def test_mixed_template_warns(self):
        diagnostics = validate_csv_import("{{1}} {{name}}", "phone,name,x\n+15551234567,Bob,v")
        assert diagnostics.warnings == [MIXED_PLACEHOLDERS_WARNING]
        assert diagnostics.is_valid

    def test_named_placeholder_mapped_by_position_warns(self):
        diagnostics = validate_csv_import("Hi {{first}}", "phone,col_a\n+15551234567,Ann")
        assert diagnostics.is_valid
        assert len(diagnostics.warnings) == 1
        assert "first -> col_a" in diagnostics.warnings[0]

    def test_bom_crlf_and_header_case(self):
        content = "\ufeffPhone , Name\r\n+15551234567,Al\r\n\r\n".encode("utf-8")
        diagnostics = validate_csv_import("", content)
        assert diagnostics.is_valid
        assert diagnostics.rows[0].name == "Al"
        assert diagnostics.total_rows == 1

    def test_blank_lines_keep_row_numbers(self):
        diagnostics = validate_csv_import("", "phone\n+15551234567\n\n+15551234567\n")
        assert diagnostics.rows[1].line_number == 3
        assert diagnostics.rows[1].errors == ["duplicate of row 1"]


class TestCsvFailures:
    @pytest.mark.parametrize("content", [b"", "", "   \n  ", None, "\ufeff", "\ufeff\n", b"\xef\xbb\xbf\r\n"])
    def test_empty_input(self, content):
        diagnostics = validate_csv_import("Hi {{name}}", content)
        assert diagnostics.state == ImportState.FAILED
        assert diagnostics.errors == ["empty file"]
        assert not diagnostics.is_valid
        assert diagnostics.placeholders == ["name"]

    def test_undecodable_bytes(self):
        diagnostics = validate_csv_import("", b"phone\n\xff\xfe\xfa")
        assert diagnostics.errors == ["file is not valid UTF-8 text"]
        assert diagnostics.state == ImportState.FAILED

    def test_header_only(self):
        diagnostics = validate_csv_import("", "phone,name\n")
        assert diagnostics.errors == ["no data rows found"]

    def test_missing_phone_column_blocks_valid_rows(self):
        diagnostics = validate_csv_import("", "mobile_no,name\n+15551234567,Bob")
        assert diagnostics.state == ImportState.FAILED
        assert diagnostics.errors[0].startswith("no phone column found")
        assert diagnostics.rows[0].errors == ["missing phone number"]
        _assert_validity_invariant(diagnostics)

    def test_unmapped_placeholder_blocks_import(self):
        diagnostics = validate_csv_import("{{1}} {{2}}", "phone,a\n+15551234567,x")
        assert diagnostics.state == ImportState.FAILED
        assert "unmapped template parameters: 2" in diagnostics.errors[0]
        assert not diagnostics.is_valid

    def test_row_limit(self):
        diagnostics = validate_csv_import("", "phone\n+15551234567\n+15550000000", max_rows=1)
        assert diagnostics.errors == ["too many recipients: 2 rows (max 1)"]

    def test_no_valid_rows_is_not_valid(self):
        diagnostics = validate_csv_import("", "phone\nabc")
        assert diagnostics.state == ImportState.VALIDATED
        assert diagnostics.errors == []
        assert not diagnostics.is_valid
        _assert_validity_invariant(diagnostics)

    def test_unexpected_failure_becomes_diagnostics(self, monkeypatch):
        def _boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(import_service, "map_columns", _boom)
        diagnostics = validate_csv_import("", "phone\n+15551234567")
        assert diagnostics.state == ImportState.FAILED
        assert diagnostics.errors == ["could not read the uploaded file"]


class TestManualImport:
    def test_single_placeholder_scenario(self):
        diagnostics = validate_manual_import("Hi {{name}}", "+15551234567, Alice\n+15550000000")

        assert diagnostics.source == "manual"
        assert diagnostics.column_mapping is None
        assert diagnostics.total_rows == 2
        assert diagnostics.valid_count == 1
        assert diagnostics.rows[0].params == {"name": "Alice"}
        assert [(s.line_number, s.reason) for s in diagnostics.invalid_samples] == [
            (2, "missing parameters: needed 1, has 0")
        ]
        assert diagnostics.is_valid

    def test_invalid_samples_are_capped(self):
        text = "\n".join(f"bad-{i}" for i in range(8))
        diagnostics = validate_manual_import("", text, sample_limit=5)
        assert diagnostics.invalid_count == 8
        assert [s.line_number for s in diagnostics.invalid_samples] == [1, 2, 3, 4, 5]
        assert not diagnostics.is_valid

    def test_blank_text_fails(self):
        diagnostics = validate_manual_import("", "  \n \n")
        assert diagnostics.state == ImportState.FAILED
        assert diagnostics.errors == ["no recipients entered"]

    def test_mixed_template_warns(self):
        diagnostics = validate_manual_import("{{1}} {{name}}", "+15551234567, a, b")
        assert diagnostics.warnings == [MIXED_PLACEHOLDERS_WARNING]


class TestOutputs:
    def test_payloads_contain_only_valid_rows(self, scenario_a):
        template, csv_text = scenario_a
        payloads = to_recipient_payloads(validate_csv_import(template, csv_text))
        assert [p.model_dump(exclude_none=True) for p in payloads] == [
            {
                "phone_number": "+15551234567",
                "recipient_name": "Alice",
                "template_params": {"name": "Alice", "order_id": "ORD-1"},
            }
        ]

    def test_payload_omits_empty_fields(self):
        payloads = to_recipient_payloads(validate_manual_import("", "+15551234567"))
        assert payloads[0].model_dump(exclude_none=True) == {"phone_number": "+15551234567"}

    def test_preview_is_truncated_but_counts_are_not(self, scenario_a):
        template, csv_text = scenario_a
        response = build_validation_response(validate_csv_import(template, csv_text), preview_limit=1)
        assert len(response.preview_rows) == 1
        assert response.preview_truncated
        assert response.total_rows == 3
        assert response.invalid_count == 2

    def test_revalidation_replaces_result(self, scenario_a):
        template, csv_text = scenario_a
        assert validate_csv_import(template, csv_text) == validate_csv_import(template, csv_text)


class TestRecipientFieldLimits:
    def test_long_name_is_a_row_error(self):
        csv_text = "phone,name\n+15551234567," + "A" * 300 + "\n+15550000000,Bob\n"
        diagnostics = validate_csv_import("", csv_text)
        assert diagnostics.rows[0].errors == ["name too long (max 255 characters)"]
        assert diagnostics.valid_count == 1
        assert diagnostics.is_valid

        payloads = to_recipient_payloads(diagnostics)
        assert [p.phone_number for p in payloads] == ["+15550000000"]

    def test_fullwidth_digits_are_not_a_valid_phone(self):
        diagnostics = validate_csv_import("", "phone\n１２３４５６７８９０\n")
        assert diagnostics.rows[0].errors == ["invalid phone format"]
        assert not diagnostics.is_valid
