"""
Anomaly Reporter Module.

Derives the review warnings from the current order groups:
    - Orphaned packing slips (no shipping label)
    - Labels with a non-standard shipping service
    - A processing summary with the confirmation gate

Every derivation is a pure function of its inputs and may be recomputed
at any time, e.g. after manual resolution changed some groups.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from config import get_config
from slipmatch.utils.helpers import pluralize
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import OrderGroup

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_STANDARD_SERVICE = "2nd Class"


@dataclass(frozen=True)
class NonStandardServiceLabel:
    """A matched label whose service differs from the standard service."""
    order_number: str
    page_number: int
    service: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_number': self.order_number,
            'page_number': self.page_number,
            'service': self.service,
        }


@dataclass(frozen=True)
class ProcessingSummary:
    """
    Totals shown before the confirmed orders are handed on.

    ``requires_confirmation`` is set whenever orphaned slips or
    non-standard services exist; the caller should ask before proceeding.
    """
    total_packing_slips_detected: int
    total_shipping_labels_detected: int
    orders_matched: int
    packing_slips_matched: int
    orphaned_slips: int
    non_standard_services: int
    unmatched_labels: int

    @property
    def requires_confirmation(self) -> bool:
        return self.orphaned_slips > 0 or self.non_standard_services > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_packing_slips_detected': self.total_packing_slips_detected,
            'total_shipping_labels_detected': self.total_shipping_labels_detected,
            'orders_matched': self.orders_matched,
            'packing_slips_matched': self.packing_slips_matched,
            'orphaned_slips': self.orphaned_slips,
            'non_standard_services': self.non_standard_services,
            'unmatched_labels': self.unmatched_labels,
            'requires_confirmation': self.requires_confirmation,
        }


class AnomalyReporter:
    """
    Orphan and service anomaly derivation.

    Example:
        >>> reporter = AnomalyReporter()
        >>> reporter.orphaned_slips(result.groups)
        [PageRecord(page_number=5, ...)]
        >>> reporter.non_standard_service_labels(result.groups)
        [NonStandardServiceLabel(order_number='#1002', page_number=4, service='Special Delivery')]
    """

    def __init__(self, standard_service: Optional[str] = None) -> None:
        self.standard_service = standard_service or get_config(
            "reporting.standard_service", DEFAULT_STANDARD_SERVICE
        )

    def orphaned_slips(self, groups: Sequence[OrderGroup]) -> List[PageRecord]:
        return [
            slip
            for group in groups
            if group.shipping_label is None
            for slip in group.packing_slips
        ]

    def non_standard_service_labels(self, groups: Sequence[OrderGroup]) -> List[NonStandardServiceLabel]:
        anomalies = []
        for group in groups:
            label = group.shipping_label
            if label is None or label.service is None:
                continue
            if label.service != self.standard_service:
                anomalies.append(NonStandardServiceLabel(
                    order_number=group.order_number,
                    page_number=label.page_number,
                    service=label.service,
                ))
        return anomalies

    def summarize(
        self,
        groups: Sequence[OrderGroup],
        total_packing_slips_detected: int,
        total_shipping_labels_detected: int,
        unmatched_labels: Sequence[PageRecord] = ()
    ) -> ProcessingSummary:
        """
        Build the processing summary for the current groups.

        Args:
            groups: Current order groups.
            total_packing_slips_detected: Packing slip pages before matching.
            total_shipping_labels_detected: Shipping label pages before matching.
            unmatched_labels: Labels the grouping left unassigned.

        Returns:
            ProcessingSummary.
        """
        matched = [g for g in groups if g.shipping_label is not None]
        summary = ProcessingSummary(
            total_packing_slips_detected=total_packing_slips_detected,
            total_shipping_labels_detected=total_shipping_labels_detected,
            orders_matched=len(matched),
            packing_slips_matched=sum(len(g.packing_slips) for g in matched),
            orphaned_slips=len(self.orphaned_slips(groups)),
            non_standard_services=len(self.non_standard_service_labels(groups)),
            unmatched_labels=len(unmatched_labels),
        )

        if summary.orphaned_slips:
            logger.warning(
                f"{pluralize(summary.orphaned_slips, 'packing slip')} found without "
                f"corresponding shipping labels"
            )
        if summary.non_standard_services:
            logger.warning(
                f"{pluralize(summary.non_standard_services, 'label')} use a service "
                f"other than {self.standard_service}"
            )
        return summary
