"""
Tenant identifier (slug) format rules
"""

import re
from typing import NamedTuple, Optional

SLUG_MIN_LENGTH = 2
SLUG_MAX_LENGTH = 50
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class SlugCheck(NamedTuple):
    valid: bool
    reason: Optional[str] = None


def has_valid_characters(value: str) -> bool:
    return bool(value) and SLUG_PATTERN.fullmatch(value) is not None


def validate_slug(value: Optional[str]) -> SlugCheck:
    """Check a tenant identifier: non-empty, allowed characters, then length."""
    if not value:
        return SlugCheck(False, "empty")
    if not has_valid_characters(value):
        return SlugCheck(False, "invalid characters")
    if len(value) < SLUG_MIN_LENGTH:
        return SlugCheck(False, "too short")
    if len(value) > SLUG_MAX_LENGTH:
        return SlugCheck(False, "too long")
    return SlugCheck(True)


def is_valid_slug(value: Optional[str]) -> bool:
    return validate_slug(value).valid
