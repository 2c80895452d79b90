"""
API Key Policy
==============
Sanitisation and strength rules for API keys.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

MIN_KEY_LENGTH = 32

ERROR_TOO_SHORT = f"API key must be at least {MIN_KEY_LENGTH} characters long"
ERROR_INVALID_CHARACTERS = (
    "API key can only contain letters, numbers, underscores, and hyphens"
)
ERROR_WEAK_COMPLEXITY = (
    "API key must contain at least one uppercase letter, "
    "one lowercase letter, and one number"
)

# Echoed to clients so they can fix a missing or malformed key
KEY_REQUIREMENTS: Dict[str, str] = {
    "format": f"Must be at least {MIN_KEY_LENGTH} characters long",
    "characters": "Can only contain letters, numbers, underscores, and hyphens",
    "complexity": (
        "Must contain at least one uppercase letter, "
        "one lowercase letter, and one number"
    ),
}

_WHITESPACE = re.compile(r"\s+")
_ALLOWED_CHARACTERS = re.compile(r"[A-Za-z0-9_\-]+")
_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")


@dataclass(frozen=True)
class KeyValidationResult:
    """Outcome of checking a key against the policy."""
    is_valid: bool
    error: Optional[str] = None


def sanitize_api_key(key: str) -> str:
    """Remove all whitespace from a key, not only at the ends."""
    return _WHITESPACE.sub("", key)


def validate_api_key(key: str) -> KeyValidationResult:
    """
    Check a key against the strength policy.

    Rules are applied in a fixed order (length, character set, complexity)
    and only the first failure is reported.

    Args:
        key: Candidate key; whitespace is removed before checking

    Returns:
        KeyValidationResult with the first failing reason, if any
    """
    sanitized = sanitize_api_key(key)

    if len(sanitized) < MIN_KEY_LENGTH:
        return KeyValidationResult(is_valid=False, error=ERROR_TOO_SHORT)

    if not _ALLOWED_CHARACTERS.fullmatch(sanitized):
        return KeyValidationResult(is_valid=False, error=ERROR_INVALID_CHARACTERS)

    if not (
        _UPPERCASE.search(sanitized)
        and _LOWERCASE.search(sanitized)
        and _DIGIT.search(sanitized)
    ):
        return KeyValidationResult(is_valid=False, error=ERROR_WEAK_COMPLEXITY)

    return KeyValidationResult(is_valid=True)


def is_strong_api_key(key: str) -> bool:
    return validate_api_key(key).is_valid
