from __future__ import annotations

from typing import Sequence

from campaign_importer.core.placeholders import is_positional
from campaign_importer.schemas.imports import ColumnBinding, ColumnMapping

PHONE_ALIASES: tuple[str, ...] = ("phone", "phone_number", "phonenumber", "mobile", "number")
NAME_ALIASES: tuple[str, ...] = ("name", "recipient_name", "recipientname", "customer_name")


def normalize_header(cells: Sequence[str]) -> list[str]:
    return [cell.strip().lower() for cell in cells]


def find_alias_column(header: Sequence[str], aliases: Sequence[str]) -> int:
    for idx, column in enumerate(header):
        if column in aliases:
            return idx
    return -1


def map_columns(header: Sequence[str], placeholders: Sequence[str]) -> ColumnMapping:
    """Bind template placeholders to CSV columns.

    ``header`` must already be trimmed and lower-cased. The phone column is
    never a parameter column. The name column may still be claimed by an
    exact placeholder match (``{{name}}`` next to a ``name`` header) but is
    never handed out positionally.

    Pass 1 binds each placeholder, in order, to the first free column named
    ``<placeholder>``, ``param<placeholder>`` or ``{{<placeholder>}}``.
    Pass 2 zips the placeholders left over with the free columns left over,
    in ascending column order.
    """
    phone_index = find_alias_column(header, PHONE_ALIASES)
    name_index = find_alias_column(header, NAME_ALIASES)

    consumed: set[int] = set()
    if phone_index >= 0:
        consumed.add(phone_index)

    by_name: list[ColumnBinding] = []
    for placeholder in placeholders:
        idx = _find_exact_column(header, placeholder, consumed)
        if idx < 0:
            continue
        consumed.add(idx)
        by_name.append(
            ColumnBinding(
                column_index=idx,
                column_name=header[idx],
                placeholder=placeholder,
                matched_by="name",
            )
        )

    if name_index >= 0:
        consumed.add(name_index)

    matched = {binding.placeholder for binding in by_name}
    leftover_placeholders = [p for p in placeholders if p not in matched]
    leftover_columns = [idx for idx in range(len(header)) if idx not in consumed]

    by_position = [
        ColumnBinding(
            column_index=idx,
            column_name=header[idx],
            placeholder=placeholder,
            matched_by="position",
        )
        for placeholder, idx in zip(leftover_placeholders, leftover_columns)
    ]

    bindings = by_name + by_position
    bound = {binding.placeholder for binding in bindings}
    unmapped = [p for p in placeholders if p not in bound]
    positional_named = [b.placeholder for b in by_position if not is_positional(b.placeholder)]

    errors: list[str] = []
    warnings: list[str] = []
    if phone_index < 0:
        errors.append(
            "no phone column found (expected one of: " + ", ".join(PHONE_ALIASES) + ")"
        )
    if unmapped:
        errors.append(
            f"unmapped template parameters: {', '.join(unmapped)} "
            f"({len(bindings)} of {len(placeholders)} mapped)"
        )
    if positional_named:
        warnings.append(
            "parameters mapped by column position, not by header name: "
            + ", ".join(
                f"{b.placeholder} -> {b.column_name}"
                for b in by_position
                if b.placeholder in positional_named
            )
        )

    return ColumnMapping(
        phone_index=phone_index,
        name_index=name_index,
        bindings=bindings,
        unmapped_placeholders=unmapped,
        positionally_mapped_named=positional_named,
        errors=errors,
        warnings=warnings,
    )


def _find_exact_column(header: Sequence[str], placeholder: str, consumed: set[int]) -> int:
    key = placeholder.strip().lower()
    candidates = {key, f"param{key}", f"{{{{{key}}}}}"}
    for idx, column in enumerate(header):
        if idx in consumed:
            continue
        if column in candidates:
            return idx
    return -1
