"""
Field Normalizers Module.

Normalization shared by extraction and matching:
    - Customer names (case, whitespace and punctuation)
    - Postcodes (UK spacing, uppercase)

Both normalizers are idempotent, so values can safely be normalized
again at comparison time.

Author: ML Engineering Team
"""

import re
from typing import Optional

UK_POSTCODE_COMPACT = re.compile(r'^[A-Z]{1,2}\d{1,2}[A-Z]?\d[A-Z]{2}$')

_WHITESPACE = re.compile(r'\s+')
_NAME_DISALLOWED = re.compile(r'[^\w\s-]')


def normalize_customer_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize a customer name for comparison.

    Trims, lowercases, collapses internal whitespace and removes every
    character except word characters, whitespace and hyphens.

    Args:
        name: Raw name text.

    Returns:
        Normalized name, or None if nothing is left.

    Example:
        >>> normalize_customer_name("  Mrs. Alice   O'Brien ")
        "mrs alice obrien"
    """
    if name is None:
        return None

    normalized = _WHITESPACE.sub(' ', name.strip().lower())
    normalized = _NAME_DISALLOWED.sub('', normalized)
    # Removing punctuation can leave doubled or trailing spaces
    normalized = _WHITESPACE.sub(' ', normalized).strip()

    return normalized or None


def normalize_postcode(postcode: Optional[str]) -> Optional[str]:
    """
    Normalize a postcode for comparison.

    Whitespace is removed and letters uppercased. A UK postcode then gets
    a single space before its final three characters.

    Args:
        postcode: Raw postcode text.

    Returns:
        Normalized postcode, or None if empty.

    Example:
        >>> normalize_postcode("sw1a1aa")
        "SW1A 1AA"
        >>> normalize_postcode("SW1A 1AA")
        "SW1A 1AA"
    """
    if postcode is None:
        return None

    cleaned = _WHITESPACE.sub('', postcode).upper()
    if not cleaned:
        return None

    if UK_POSTCODE_COMPACT.match(cleaned):
        return f"{cleaned[:-3]} {cleaned[-3:]}"
    return cleaned
