from __future__ import annotations

import re

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]*)\}\}")
POSITIONAL_PATTERN = re.compile(r"^\d+$")


def extract_placeholders(body: str | None) -> list[str]:
    """Return placeholder names in first-occurrence order, without duplicates.

    ``{{ name }}`` is trimmed to ``name``; ``{{}}`` is ignored.
    """
    if not body:
        return []
    names: list[str] = []
    seen: set[str] = set()
    for match in PLACEHOLDER_PATTERN.finditer(body):
        name = match.group(1).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names


def is_positional(name: str) -> bool:
    return bool(POSITIONAL_PATTERN.match(name))


def has_mixed_placeholders(names: list[str]) -> bool:
    positional = any(is_positional(name) for name in names)
    named = any(not is_positional(name) for name in names)
    return positional and named
