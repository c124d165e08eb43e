"""
Extraction Rules Module.

Each heuristic used by the field extractor is a small, independent rule:
a function taking the page text and returning the raw field value or
None. The extractor runs ordered lists of rules and keeps the first
value found, so every rule can be tested in isolation.

Rule groups:
    - Order number
    - Packing slip customer name
    - Shipping label customer name
    - Postcode (UK, Canada, US)
    - Shipping service

Author: ML Engineering Team
"""

import re
from typing import Callable, Iterable, List, Optional, Pattern, Sequence

from slipmatch.utils.exceptions import ConfigurationError
from .normalizers import normalize_postcode

Rule = Callable[[str], Optional[str]]

# =============================================================================
# PATTERNS
# =============================================================================

ORDER_NUMBER = re.compile(r'Order\s*#:\s*(#?[\w\-]+)', re.IGNORECASE)

NAME_BEFORE_DATE = re.compile(r'Order\s*#:\s*[#\w\-]+\s+(.+?)\s+Date:', re.IGNORECASE)
NAME_AFTER_SHIPPING_ADDRESS = re.compile(
    r'Shipping address:\s*(.+?)(?=\s+\d+\s+[A-Z]|\s+Order\s*#)', re.IGNORECASE
)
CAPITALIZED_NAME = re.compile(r'\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)\b')

UK_POSTCODE = re.compile(r'\b[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}\b', re.IGNORECASE)
UK_POSTCODE_ANYWHERE = re.compile(r'[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}', re.IGNORECASE)
CA_POSTCODE = re.compile(r'\b[A-Z]\d[A-Z]\s?\d[A-Z]\d\b', re.IGNORECASE)
US_ZIP = re.compile(r'(?<!\d[-\s])\b\d{5}(?:-\d{4})?\b(?![-\s]\d)')

HAS_LETTERS = re.compile(r'[a-zA-Z]')
FOUR_DIGIT_RUN = re.compile(r'\d{4}')
HOUSE_NUMBER = re.compile(r'^\d+\s')
ALL_CAPS_LINE = re.compile(r'^[A-Z0-9\s\-]+$')
STREET_ADDRESS_PATTERNS = (
    re.compile(r'^\d+\s+[A-Za-z]'),                     # 42 Brighton Road
    re.compile(r'^flat\s+', re.IGNORECASE),             # Flat 1
    re.compile(r'^\d+\s+[A-Z]+\s+[A-Z]+', re.IGNORECASE),  # 41 INNEY CLOSE
)

DEFAULT_SERVICES = (
    "2nd Class",
    "1st Class",
    "Tracked 24",
    "Tracked 48",
    "Special Delivery",
    "Signed For",
)

# Royal Mail label layout; overridden by extraction.label_name_deny_patterns
DEFAULT_LABEL_NAME_DENY_PATTERNS = (
    r'^\d+[,]\s*[A-Z0-9\-]+$',
    r'^\d+[,]\s*[A-Z0-9\-]+\s*\([^)]+\)$',
    r'^2nd\s+class',
    r'^royal\s+mail',
    r'^delivered\s+by',
    r'^postage',
    r'^letter$',
    r'^[QW]\d+$',
    r'^\d+g$',
    r'^£\s*\d',
    r'^LL$',
    r'^[A-Z0-9]{2,3}-\d+',
    r'^\d+\s*[,.]\s*\d+\s*g$',
)


def compile_deny_patterns(patterns: Iterable[str]) -> List[Pattern]:
    """
    Compile deny-list patterns case-insensitively.

    Raises:
        ConfigurationError: If a pattern is not a valid regular expression.
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise ConfigurationError(
                "extraction.label_name_deny_patterns", pattern, str(e)
            ) from e
    return compiled


def is_denied(line: str, deny_patterns: Sequence[Pattern]) -> bool:
    return any(pattern.search(line) for pattern in deny_patterns)


def first_match(rules: Iterable[Rule], text: str) -> Optional[str]:
    """Return the first non-empty value produced by ``rules``."""
    for rule in rules:
        value = rule(text)
        if value:
            return value
    return None


def _lines(text: str) -> List[str]:
    return [line.strip() for line in text.split('\n') if line.strip()]


# =============================================================================
# ORDER NUMBER
# =============================================================================

def order_number(text: str) -> Optional[str]:
    """Token after ``Order #:``, leading ``#`` preserved."""
    match = ORDER_NUMBER.search(text)
    return match.group(1) if match else None


# =============================================================================
# PACKING SLIP NAME
# =============================================================================

def slip_name_before_date(text: str) -> Optional[str]:
    """Text between the order number and ``Date:``, unless it looks like a date."""
    match = NAME_BEFORE_DATE.search(text)
    if not match:
        return None

    raw_name = match.group(1).strip()
    if not raw_name or FOUR_DIGIT_RUN.search(raw_name):
        return None
    return raw_name


def slip_name_after_shipping_address(text: str) -> Optional[str]:
    """Up to five words following ``Shipping address:``."""
    match = NAME_AFTER_SHIPPING_ADDRESS.search(text)
    if not match:
        return None

    words = match.group(1).split()
    return ' '.join(words[:5]) or None


def slip_name_from_address_block(text: str) -> Optional[str]:
    """First name-like line among the three lines after ``Shipping address:``."""
    lines = text.split('\n')

    for i, line in enumerate(lines):
        if 'Shipping address:' not in line:
            continue

        for candidate in lines[i + 1:i + 4]:
            candidate = candidate.strip()
            if 'Order #:' in candidate or 'Date:' in candidate:
                continue

            words = candidate.split()
            if not 2 <= len(words) <= 4:
                continue

            if (HAS_LETTERS.search(candidate)
                    and not HOUSE_NUMBER.match(candidate)
                    and not UK_POSTCODE_ANYWHERE.search(candidate)):
                return candidate

    return None


# =============================================================================
# SHIPPING LABEL NAME
# =============================================================================

def looks_like_street_address(line: str) -> bool:
    return any(pattern.match(line) for pattern in STREET_ADDRESS_PATTERNS)


def label_name_from_lines(text: str, deny_patterns: Sequence[Pattern] = ()) -> Optional[str]:
    """
    First line that reads like a person's name on a shipping label.

    Lines matching the deny-list are skipped. A 2-5 word line with letters
    is accepted when it is not an all-caps/numeric code, or when the next
    line looks like the start of a street address.
    """
    lines = _lines(text)

    for i, line in enumerate(lines):
        if is_denied(line, deny_patterns):
            continue

        words = line.split()
        if not 2 <= len(words) <= 5:
            continue

        has_letters = HAS_LETTERS.search(line) is not None
        not_all_caps = not ALL_CAPS_LINE.match(line) or len(words) >= 3
        next_line = lines[i + 1] if i + 1 < len(lines) else ''

        if has_letters and (not_all_caps or looks_like_street_address(next_line)):
            return line

    return None


def label_name_from_capitalized_words(text: str, deny_patterns: Sequence[Pattern] = ()) -> Optional[str]:
    """Fallback: first run of Capitalized Words anywhere in the text."""
    for match in CAPITALIZED_NAME.finditer(text):
        candidate = match.group(1)
        if not is_denied(candidate, deny_patterns):
            return candidate
    return None


# =============================================================================
# POSTCODE
# =============================================================================

def uk_postcode(text: str) -> Optional[str]:
    match = UK_POSTCODE.search(text)
    return normalize_postcode(match.group(0)) if match else None


def canadian_postcode(text: str) -> Optional[str]:
    match = CA_POSTCODE.search(text)
    return match.group(0).strip().upper() if match else None


def us_zip_code(text: str) -> Optional[str]:
    match = US_ZIP.search(text)
    return match.group(0).strip() if match else None


POSTCODE_RULES = (uk_postcode, canadian_postcode, us_zip_code)


# =============================================================================
# SERVICE
# =============================================================================

def shipping_service(text: str, services: Sequence[str] = DEFAULT_SERVICES) -> Optional[str]:
    """First known service name contained in the text (case-insensitive)."""
    lowered = text.lower()
    for service in services:
        if service.lower() in lowered:
            return service
    return None
