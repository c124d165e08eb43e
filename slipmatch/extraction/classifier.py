"""
Page Classifier Module.

Decides whether a page is a packing slip or a shipping label. The rule
is binary: a page carrying the packing slip marker is a packing slip,
every other page is treated as a shipping label.

Royal Mail label indicators are also exposed for diagnostics; they never
change the classification.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Optional

from config import get_config
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageKind
from .rules import UK_POSTCODE

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_PACKING_SLIP_MARKER = "Packing slip"

DELIVERED_BY = re.compile(r'Delivered\s+by', re.IGNORECASE)
POSTAGE_INDICATORS = (
    re.compile(r'Postage\s+on\s+Account', re.IGNORECASE),
    re.compile(r'Postage\s+paid\s+GB', re.IGNORECASE),
    re.compile(r'Postage\s+paid\s+by\s+GB', re.IGNORECASE),
)


@dataclass(frozen=True)
class LabelIndicators:
    """Carrier markings found on a page."""
    royal_mail: bool
    delivered_by: bool
    postage_indicator: bool
    has_postcode: bool

    @property
    def is_royal_mail_label(self) -> bool:
        return self.royal_mail and self.delivered_by and self.postage_indicator


class PageClassifier:
    """
    Stateless packing slip / shipping label classifier.

    Example:
        >>> classifier = PageClassifier()
        >>> classifier.classify("Packing slip\\nOrder #: 1001")
        <PageKind.PACKING_SLIP: 'packing_slip'>
    """

    def __init__(self, marker: Optional[str] = None) -> None:
        """
        Args:
            marker: Case-sensitive packing slip marker; defaults to
                ``classification.packing_slip_marker``.
        """
        self.marker = marker or get_config(
            "classification.packing_slip_marker",
            DEFAULT_PACKING_SLIP_MARKER
        )

    def classify(self, raw_text: Optional[str]) -> PageKind:
        if raw_text and self.marker in raw_text:
            return PageKind.PACKING_SLIP
        return PageKind.SHIPPING_LABEL

    def label_indicators(self, raw_text: Optional[str]) -> LabelIndicators:
        """Report Royal Mail label markings present in the text."""
        text = raw_text or ""
        indicators = LabelIndicators(
            royal_mail='royal mail' in text.lower(),
            delivered_by=DELIVERED_BY.search(text) is not None,
            postage_indicator=any(p.search(text) for p in POSTAGE_INDICATORS),
            has_postcode=UK_POSTCODE.search(text) is not None,
        )
        logger.debug(
            f"Label indicators: royal_mail={indicators.royal_mail}, "
            f"delivered_by={indicators.delivered_by}, "
            f"postage={indicators.postage_indicator}"
        )
        return indicators
