"""
Order Group Data Classes.

An ``OrderGroup`` ties the packing slip page(s) of one order to at most
one shipping label. Groups are created by the grouping engine and may
only be changed afterwards by the manual resolution coordinator.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .page_record import PageRecord


class MatchConfidence(str, Enum):
    """How trustworthy an automatic label match is."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNMATCHED = "unmatched"

    @property
    def needs_review(self) -> bool:
        return self is not MatchConfidence.HIGH


@dataclass(frozen=True)
class LabelCandidate:
    """
    A shipping label considered for one packing slip cluster.

    Attributes:
        label: The shipping label page.
        score: Matching score against the cluster.
        match_reasons: Human-readable reasons, in the order they were awarded.
    """
    label: PageRecord
    score: int
    match_reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label_page': self.label.page_number,
            'customer_name': self.label.customer_name,
            'postcode': self.label.postcode,
            'score': self.score,
            'match_reasons': list(self.match_reasons),
        }


@dataclass
class OrderGroup:
    """
    Packing slips of one order and the shipping label matched to them.

    Attributes:
        order_number: Order token shared by all packing slips.
        packing_slips: Packing slip pages, in document order.
        shipping_label: Matched label, or None when orphaned.
        match_confidence: Confidence band of the match.
        label_candidates: Ranked candidates considered for review.
        match_score: Winning score, None for sequential or unmatched groups.
    """
    order_number: str
    packing_slips: List[PageRecord]
    shipping_label: Optional[PageRecord] = None
    match_confidence: MatchConfidence = MatchConfidence.UNMATCHED
    label_candidates: List[LabelCandidate] = field(default_factory=list)
    match_score: Optional[int] = None

    @property
    def is_orphaned(self) -> bool:
        return self.shipping_label is None

    @property
    def page_numbers(self) -> List[int]:
        return [slip.page_number for slip in self.packing_slips]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_number': self.order_number,
            'packing_slip_pages': self.page_numbers,
            'shipping_label_page': (
                self.shipping_label.page_number if self.shipping_label else None
            ),
            'service': self.shipping_label.service if self.shipping_label else None,
            'match_confidence': self.match_confidence.value,
            'match_score': self.match_score,
            'label_candidates': [c.to_dict() for c in self.label_candidates],
        }


@dataclass(frozen=True)
class ProcessedOrder:
    """A confirmed order handed to the document generation step."""
    order_number: str
    packing_slips: Tuple[PageRecord, ...]
    shipping_label: PageRecord

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_number': self.order_number,
            'packing_slip_pages': [s.page_number for s in self.packing_slips],
            'shipping_label_page': self.shipping_label.page_number,
        }


def convert_groups_to_orders(groups: List[OrderGroup]) -> List[ProcessedOrder]:
    """
    Keep only groups with a shipping label, as confirmed orders.

    Args:
        groups: Order groups in grouping order.

    Returns:
        Processed orders in the same order.
    """
    return [
        ProcessedOrder(
            order_number=group.order_number,
            packing_slips=tuple(group.packing_slips),
            shipping_label=group.shipping_label,
        )
        for group in groups
        if group.shipping_label is not None
    ]
