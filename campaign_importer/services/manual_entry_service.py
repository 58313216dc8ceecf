from __future__ import annotations

from typing import Sequence

from campaign_importer.core.phone import is_valid_phone, normalize_phone
from campaign_importer.core.tokenizer import split_lines
from campaign_importer.schemas.imports import RecipientRow
from campaign_importer.services.row_validation_service import (
    INVALID_PHONE,
    MISSING_PHONE,
    missing_parameters_error,
)


def parse_manual_line(line_number: int, line: str, placeholders: Sequence[str]) -> RecipientRow:
    """Parse ``phone, value1, value2, ...`` binding values by position."""
    fields = [field.strip() for field in line.split(",")]
    raw_phone = fields[0]

    params: dict[str, str] = {}
    for placeholder, value in zip(placeholders, fields[1:]):
        if value:
            params[placeholder] = value

    errors: list[str] = []
    if not raw_phone:
        errors.append(MISSING_PHONE)
    elif not is_valid_phone(raw_phone):
        errors.append(INVALID_PHONE)
    if placeholders and len(params) < len(placeholders):
        errors.append(missing_parameters_error(len(placeholders), len(params)))

    return RecipientRow(
        line_number=line_number,
        phone=normalize_phone(raw_phone),
        params=params,
        is_valid=not errors,
        errors=errors,
    )


def parse_manual_entries(text: str, placeholders: Sequence[str]) -> list[RecipientRow]:
    """Parse pasted recipient lines, skipping blank ones.

    Line numbers refer to the pasted text, blank lines included.
    """
    rows: list[RecipientRow] = []
    for line_number, line in enumerate(split_lines(text), start=1):
        if not line.strip():
            continue
        rows.append(parse_manual_line(line_number, line, placeholders))
    return rows
