from __future__ import annotations

import csv

DEFAULT_DELIMITER = ","


def tokenize_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split one CSV line into field values.

    Quoted fields keep embedded delimiters and ``""`` collapses to ``"``.
    An unterminated quote runs to the end of the line. Empty input gives
    ``[""]``, the single field before any delimiter.
    """
    if not line:
        return [""]
    try:
        row = next(csv.reader([line], delimiter=delimiter, strict=False), None)
    except csv.Error:
        # best effort: keep the raw line as one field
        return [line]
    return row or [""]


def split_lines(text: str) -> list[str]:
    return [line.rstrip("\r") for line in text.split("\n")]
