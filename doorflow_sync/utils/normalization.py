"""
String normalization utilities for member matching.

Email is the only key used to match a local member to a DoorFlow person,
so the matching key is simply the trimmed, lower-cased address.
"""

from __future__ import annotations


def normalize_email(value: str | None) -> str:
    """
    Normalize an email address for matching key generation.

    Args:
        value: Email address, possibly None or padded with whitespace

    Returns:
        Lowercase, stripped email, or an empty string when there is no email
    """
    if not value:
        return ""
    return value.strip().lower()
