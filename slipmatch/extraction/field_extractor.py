"""
Field Extractor Module.

Extracts the matching signals from one page's raw text: order number,
customer name, postcode and (for shipping labels) the carrier service.
Extraction never fails a page; a heuristic that finds nothing simply
leaves its field as None.

Author: ML Engineering Team
"""

from functools import partial
from typing import Optional, Sequence

from config import get_config
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import ExtractedFields, PageKind
from . import rules
from .normalizers import normalize_customer_name

# Initialize module logger
logger = get_logger(__name__)


class FieldExtractor:
    """
    Layout-aware field extraction for packing slips and shipping labels.

    Each field is produced by an ordered list of independent rules from
    ``slipmatch.extraction.rules``; the first rule that finds a value wins.

    Attributes:
        services: Known carrier services, in search order.
        deny_patterns: Compiled deny-list for label name lines.
        slip_name_rules: Ordered name rules for packing slips.
        label_name_rules: Ordered name rules for shipping labels.
        postcode_rules: Ordered postcode rules.

    Example:
        >>> extractor = FieldExtractor()
        >>> fields = extractor.extract(text, PageKind.PACKING_SLIP)
        >>> fields.order_number
        "#1001"
    """

    def __init__(
        self,
        services: Optional[Sequence[str]] = None,
        deny_patterns: Optional[Sequence[str]] = None
    ) -> None:
        """
        Initialize the extractor from configuration.

        Args:
            services: Override for ``extraction.services``.
            deny_patterns: Override for ``extraction.label_name_deny_patterns``.
        """
        if services is None:
            services = get_config("extraction.services", rules.DEFAULT_SERVICES)
        if deny_patterns is None:
            deny_patterns = get_config(
                "extraction.label_name_deny_patterns",
                rules.DEFAULT_LABEL_NAME_DENY_PATTERNS
            )

        self.services = tuple(services)
        self.deny_patterns = rules.compile_deny_patterns(deny_patterns)

        self.slip_name_rules = (
            rules.slip_name_before_date,
            rules.slip_name_after_shipping_address,
            rules.slip_name_from_address_block,
        )
        self.label_name_rules = (
            partial(rules.label_name_from_lines, deny_patterns=self.deny_patterns),
            partial(rules.label_name_from_capitalized_words, deny_patterns=self.deny_patterns),
        )
        self.postcode_rules = rules.POSTCODE_RULES

        logger.debug(
            f"FieldExtractor initialized ({len(self.services)} services, "
            f"{len(self.deny_patterns)} deny patterns)"
        )

    def extract(self, raw_text: Optional[str], kind_hint: PageKind) -> ExtractedFields:
        """
        Extract all fields that apply to the given page kind.

        Args:
            raw_text: Page text in approximate reading order.
            kind_hint: Page kind from the classifier.

        Returns:
            ExtractedFields with None for every field that was not found.
        """
        text = raw_text or ""

        if kind_hint is PageKind.PACKING_SLIP:
            fields = ExtractedFields(
                order_number=self.extract_order_number(text),
                customer_name=self.extract_customer_name(text, kind_hint),
                postcode=self.extract_postcode(text),
            )
        else:
            fields = ExtractedFields(
                customer_name=self.extract_customer_name(text, kind_hint),
                postcode=self.extract_postcode(text),
                service=self.extract_service(text),
            )

        if fields.missing_fields:
            logger.debug(f"{kind_hint.value}: no value for {', '.join(fields.missing_fields)}")

        return fields

    def extract_order_number(self, text: str) -> Optional[str]:
        return rules.order_number(text)

    def extract_customer_name(self, text: str, kind_hint: PageKind) -> Optional[str]:
        """Run the name rules for ``kind_hint`` and normalize the result."""
        if kind_hint is PageKind.PACKING_SLIP:
            name_rules = self.slip_name_rules
        else:
            name_rules = self.label_name_rules

        return normalize_customer_name(rules.first_match(name_rules, text))

    def extract_postcode(self, text: str) -> Optional[str]:
        return rules.first_match(self.postcode_rules, text)

    def extract_service(self, text: str) -> Optional[str]:
        return rules.shipping_service(text, self.services)
