from __future__ import annotations

import re

PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$", re.ASCII)
_NON_PHONE_CHARS = re.compile(r"[^\d+]", re.ASCII)
_NON_DIGITS = re.compile(r"\D", re.ASCII)


def normalize_phone(phone: str | None) -> str:
    """Drop everything except ASCII digits and ``+``."""
    if not phone:
        return ""
    return _NON_PHONE_CHARS.sub("", phone)


def phone_digits(phone: str | None) -> str:
    if not phone:
        return ""
    return _NON_DIGITS.sub("", phone)


def is_valid_phone(phone: str | None) -> bool:
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone))


def mask_phone(phone: str | None) -> str | None:
    if not phone:
        return None
    digits = phone_digits(phone)
    if len(digits) < 4:
        return "****"
    prefix = digits[:3]
    suffix = digits[-4:]
    return f"{prefix}-****-{suffix}"
