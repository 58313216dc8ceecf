from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from campaign_importer.core.logging_config import configure_logging
from campaign_importer.schemas.imports import ImportDiagnostics
from campaign_importer.services.import_service import (
    build_validation_response,
    validate_csv_import,
    validate_manual_import,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check a campaign recipient import before uploading it")
    template = parser.add_mutually_exclusive_group(required=True)
    template.add_argument("--template", help="template body text")
    template.add_argument("--template-file", type=Path, help="file holding the template body")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=Path, help="recipients CSV with a header row")
    source.add_argument("--manual", type=Path, help="pasted lines: phone, param1, param2, ...")
    parser.add_argument("--json", action="store_true", help="print the full diagnostics as JSON")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    body = args.template
    if args.template_file:
        body = args.template_file.read_text(encoding="utf-8")

    if args.csv:
        diagnostics = validate_csv_import(body, args.csv.read_bytes())
    else:
        diagnostics = validate_manual_import(body, args.manual.read_text(encoding="utf-8"))

    if args.json:
        print(build_validation_response(diagnostics).model_dump_json(indent=2))
    else:
        _print_report(diagnostics)
    return 0 if diagnostics.is_valid else 1


def _print_report(diagnostics: ImportDiagnostics) -> None:
    print("Placeholders:", ", ".join(diagnostics.placeholders) or "(none)")
    mapping = diagnostics.column_mapping
    if mapping is not None:
        print("Phone column:", mapping.phone_index, "Name column:", mapping.name_index)
        for binding in mapping.bindings:
            print(f"  {{{{{binding.placeholder}}}}} <- {binding.column_name} ({binding.matched_by})")
    for row in diagnostics.rows:
        verdict = "OK " if row.is_valid else "ERR"
        params = json.dumps(row.params, ensure_ascii=False)
        detail = "" if row.is_valid else " - " + "; ".join(row.errors)
        print(f"{verdict} #{row.line_number} {row.phone} {params}{detail}")
    for error in diagnostics.errors:
        print("ERROR:", error)
    for warning in diagnostics.warnings:
        print("WARNING:", warning)
    print(
        f"state={diagnostics.state.value} total={diagnostics.total_rows} "
        f"valid={diagnostics.valid_count} invalid={diagnostics.invalid_count}"
    )


if __name__ == "__main__":
    sys.exit(main())
