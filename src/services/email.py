"""
Email address utilities.

This module provides reusable, side-effect free helpers for validating and
rewriting email addresses.
"""

import re
from typing import Any, Tuple

# RFC 5321 path limit and local-part limit
MAX_EMAIL_LENGTH = 254
MAX_LOCAL_PART_LENGTH = 64

# Dot-atom local part (RFC 5322 atext, no quoted strings)
_LOCAL_PART = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"

# Hostname labels: alphanumeric edges, hyphens inside, 63 chars max
_DOMAIN_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"

# Top-level label must start with a letter
_TOP_LEVEL_LABEL = r"[A-Za-z](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_DOMAIN = _DOMAIN_LABEL + r"(?:\." + _DOMAIN_LABEL + r")*\." + _TOP_LEVEL_LABEL

EMAIL_PATTERN = re.compile(_LOCAL_PART + "@" + _DOMAIN)


def validate_email(email: Any) -> bool:
    """
    Check whether a value is a syntactically valid email address.

    Args:
        email: Value to check (non-strings are never valid)

    Returns:
        True if the value is a valid address, False otherwise

    Example:
        >>> validate_email("a@b.com")
        True
        >>> validate_email("not-an-email")
        False
    """
    if not isinstance(email, str) or not email:
        return False

    if len(email) > MAX_EMAIL_LENGTH:
        return False

    if EMAIL_PATTERN.fullmatch(email) is None:
        return False

    local_part = email.rsplit('@', 1)[0]
    return len(local_part) <= MAX_LOCAL_PART_LENGTH


# Alias used by callers filtering recipient lists
is_valid_email = validate_email


def split_address(address: str) -> Tuple[str, str]:
    """
    Split an address into local part and domain.

    The split happens at the first and last "@" so a malformed value never
    raises; the domain is empty when there is no "@" at all.

    Example:
        >>> split_address("hello@example.com")
        ('hello', 'example.com')
    """
    parts = address.split('@')
    if len(parts) == 1:
        return parts[0], ''
    return parts[0], parts[-1]


def plus_address(address: str, tag: str) -> str:
    """
    Tag an address using plus-addressing: local+tag@domain.

    Example:
        >>> plus_address("hello@example.com", "1700000000")
        'hello+1700000000@example.com'
    """
    local_part, domain = split_address(address)
    return f"{local_part}+{tag}@{domain}"
