from __future__ import annotations

import logging
from typing import Iterable, Sequence

from campaign_importer.core.phone import is_valid_phone, mask_phone, phone_digits
from campaign_importer.schemas.imports import RECIPIENT_NAME_MAX_LENGTH, ColumnMapping, RecipientRow

MISSING_PHONE = "missing phone number"
INVALID_PHONE = "invalid phone format"

logger = logging.getLogger(__name__)


def missing_parameters_error(needed: int, found: int) -> str:
    return f"missing parameters: needed {needed}, has {found}"


def duplicate_error(first_line: int) -> str:
    return f"duplicate of row {first_line}"


def name_too_long_error(limit: int = RECIPIENT_NAME_MAX_LENGTH) -> str:
    return f"name too long (max {limit} characters)"


def validate_rows(
    rows: Iterable[tuple[int, Sequence[str]]],
    mapping: ColumnMapping,
    placeholder_count: int,
) -> list[RecipientRow]:
    """Validate tokenized data rows against a column mapping.

    ``rows`` yields ``(line_number, cells)`` in file order. The duplicate
    phone map lives only for this call, so the first occurrence of a number
    is never reported as a duplicate of itself.
    """
    seen_phones: dict[str, int] = {}
    return [
        validate_row(line_number, cells, mapping, placeholder_count, seen_phones)
        for line_number, cells in rows
    ]


def validate_row(
    line_number: int,
    cells: Sequence[str],
    mapping: ColumnMapping,
    placeholder_count: int,
    seen_phones: dict[str, int],
) -> RecipientRow:
    phone = _cell(cells, mapping.phone_index)
    name = _cell(cells, mapping.name_index)

    params: dict[str, str] = {}
    for binding in mapping.bindings:
        value = _cell(cells, binding.column_index)
        if value:
            params[binding.placeholder] = value

    errors: list[str] = []
    if not phone:
        errors.append(MISSING_PHONE)
    else:
        if not is_valid_phone(phone):
            errors.append(INVALID_PHONE)
        key = phone_digits(phone)
        if key:
            first_line = seen_phones.get(key)
            if first_line is None:
                seen_phones[key] = line_number
            else:
                logger.debug(
                    "Duplicate phone %s at row %s (first seen at row %s)",
                    mask_phone(phone),
                    line_number,
                    first_line,
                )
                errors.append(duplicate_error(first_line))

    if placeholder_count > 0 and len(params) < placeholder_count:
        errors.append(missing_parameters_error(placeholder_count, len(params)))
    if len(name) > RECIPIENT_NAME_MAX_LENGTH:
        errors.append(name_too_long_error())

    return RecipientRow(
        line_number=line_number,
        phone=phone,
        name=name or None,
        params=params,
        is_valid=not errors,
        errors=errors,
    )


def _cell(cells: Sequence[str], index: int) -> str:
    if index < 0 or index >= len(cells):
        return ""
    return cells[index].strip()
