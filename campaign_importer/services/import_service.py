from __future__ import annotations

import logging
from typing import Literal

from campaign_importer.core.config import settings
from campaign_importer.core.placeholders import extract_placeholders, has_mixed_placeholders
from campaign_importer.core.tokenizer import split_lines, tokenize_line
from campaign_importer.schemas.imports import (
    ColumnMapping,
    ImportDiagnostics,
    ImportState,
    ImportValidationResponse,
    InvalidLineSample,
    RecipientPayload,
    RecipientRow,
)
from campaign_importer.services.column_mapping_service import map_columns, normalize_header
from campaign_importer.services.manual_entry_service import parse_manual_entries
from campaign_importer.services.row_validation_service import validate_rows

logger = logging.getLogger(__name__)

MIXED_PLACEHOLDERS_WARNING = (
    "template mixes positional ({{1}}) and named ({{name}}) placeholders"
)


def decode_upload(file_bytes: bytes) -> str:
    return file_bytes.decode("utf-8-sig")


def validate_csv_import(
    template_body: str | None,
    content: str | bytes | None,
    *,
    max_rows: int | None = None,
    sample_limit: int | None = None,
) -> ImportDiagnostics:
    """Validate an uploaded recipients CSV against a template body.

    Never raises for bad input: empty files, undecodable bytes and
    structural problems come back as ``FAILED`` diagnostics.
    """
    placeholders = extract_placeholders(template_body)
    try:
        return _validate_csv(placeholders, content, max_rows, sample_limit)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected failure while validating CSV recipients")
        return _failed("csv", placeholders, "could not read the uploaded file")


def validate_manual_import(
    template_body: str | None,
    text: str | None,
    *,
    max_rows: int | None = None,
    sample_limit: int | None = None,
) -> ImportDiagnostics:
    placeholders = extract_placeholders(template_body)
    try:
        return _validate_manual(placeholders, text or "", max_rows, sample_limit)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected failure while validating manual recipients")
        return _failed("manual", placeholders, "could not parse the entered recipients")


def build_validation_response(
    diagnostics: ImportDiagnostics,
    preview_limit: int | None = None,
) -> ImportValidationResponse:
    limit = settings.preview_row_limit if preview_limit is None else preview_limit
    return ImportValidationResponse(
        source=diagnostics.source,
        state=diagnostics.state,
        is_valid=diagnostics.is_valid,
        placeholders=diagnostics.placeholders,
        column_mapping=diagnostics.column_mapping,
        errors=diagnostics.errors,
        warnings=diagnostics.warnings,
        total_rows=diagnostics.total_rows,
        valid_count=diagnostics.valid_count,
        invalid_count=diagnostics.invalid_count,
        invalid_samples=diagnostics.invalid_samples,
        preview_rows=diagnostics.rows[:limit],
        preview_truncated=len(diagnostics.rows) > limit,
    )


def to_recipient_payloads(diagnostics: ImportDiagnostics) -> list[RecipientPayload]:
    return [
        RecipientPayload(
            phone_number=row.phone,
            recipient_name=row.name or None,
            template_params=dict(row.params) or None,
        )
        for row in diagnostics.valid_rows
    ]


def _validate_csv(
    placeholders: list[str],
    content: str | bytes | None,
    max_rows: int | None,
    sample_limit: int | None,
) -> ImportDiagnostics:
    if isinstance(content, bytes):
        try:
            content = decode_upload(content)
        except UnicodeDecodeError:
            return _failed("csv", placeholders, "file is not valid UTF-8 text")
    content = (content or "").lstrip("\ufeff")
    if not content.strip():
        return _failed("csv", placeholders, "empty file")

    lines = split_lines(content)
    header_pos = next(idx for idx, line in enumerate(lines) if line.strip())
    header = normalize_header(tokenize_line(lines[header_pos]))

    data_rows = [
        (offset, tokenize_line(line))
        for offset, line in enumerate(lines[header_pos + 1:], start=1)
        if line.strip()
    ]
    if not data_rows:
        return _failed("csv", placeholders, "no data rows found")
    limit_error = _row_limit_error(len(data_rows), max_rows)
    if limit_error:
        return _failed("csv", placeholders, limit_error)

    mapping = map_columns(header, placeholders)
    rows = validate_rows(data_rows, mapping, len(placeholders))

    return _assemble(
        "csv",
        placeholders,
        rows,
        mapping=mapping,
        errors=list(mapping.errors),
        warnings=_template_warnings(placeholders) + mapping.warnings,
        sample_limit=sample_limit,
    )


def _validate_manual(
    placeholders: list[str],
    text: str,
    max_rows: int | None,
    sample_limit: int | None,
) -> ImportDiagnostics:
    rows = parse_manual_entries(text, placeholders)
    if not rows:
        return _failed("manual", placeholders, "no recipients entered")
    limit_error = _row_limit_error(len(rows), max_rows)
    if limit_error:
        return _failed("manual", placeholders, limit_error)

    return _assemble(
        "manual",
        placeholders,
        rows,
        mapping=None,
        errors=[],
        warnings=_template_warnings(placeholders),
        sample_limit=sample_limit,
    )


def _assemble(
    source: Literal["csv", "manual"],
    placeholders: list[str],
    rows: list[RecipientRow],
    *,
    mapping: ColumnMapping | None,
    errors: list[str],
    warnings: list[str],
    sample_limit: int | None,
) -> ImportDiagnostics:
    limit = settings.invalid_sample_limit if sample_limit is None else sample_limit
    valid_count = sum(1 for row in rows if row.is_valid)
    invalid_rows = [row for row in rows if not row.is_valid]

    diagnostics = ImportDiagnostics(
        source=source,
        state=ImportState.FAILED if errors else ImportState.VALIDATED,
        is_valid=not errors and valid_count > 0,
        placeholders=placeholders,
        rows=rows,
        column_mapping=mapping,
        errors=errors,
        warnings=warnings,
        total_rows=len(rows),
        valid_count=valid_count,
        invalid_count=len(invalid_rows),
        invalid_samples=[
            InvalidLineSample(line_number=row.line_number, reason="; ".join(row.errors))
            for row in invalid_rows[:limit]
        ],
    )
    logger.info(
        "Recipient validation finished (source=%s, total=%s, valid=%s, invalid=%s, errors=%s)",
        source,
        diagnostics.total_rows,
        diagnostics.valid_count,
        diagnostics.invalid_count,
        len(errors),
    )
    return diagnostics


def _template_warnings(placeholders: list[str]) -> list[str]:
    if has_mixed_placeholders(placeholders):
        return [MIXED_PLACEHOLDERS_WARNING]
    return []


def _row_limit_error(count: int, max_rows: int | None) -> str | None:
    limit = settings.max_import_rows if max_rows is None else max_rows
    if count > limit:
        return f"too many recipients: {count:,} rows (max {limit:,})"
    return None


def _failed(
    source: Literal["csv", "manual"],
    placeholders: list[str],
    message: str,
) -> ImportDiagnostics:
    logger.info("Recipient validation failed (source=%s): %s", source, message)
    return ImportDiagnostics(
        source=source,
        state=ImportState.FAILED,
        is_valid=False,
        placeholders=placeholders,
        errors=[message],
        warnings=_template_warnings(placeholders),
    )
