"""
Sequential Matcher Module.

Fallback strategy for documents without usable name/postcode signals:
a packing slip cluster is matched to the page immediately after it when
that page is a shipping label. No scoring is involved and every match
is treated as HIGH confidence.

Author: ML Engineering Team
"""

from typing import Sequence

from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import MatchConfidence
from .base import (
    BaseMatcher,
    MatchOutcome,
    MatchProposal,
    MatchStrategy,
    cluster_packing_slips,
    sort_pages,
)

# Initialize module logger
logger = get_logger(__name__)


class SequentialMatcher(BaseMatcher):
    """
    Positional label matching in document order.

    Example:
        pages: slip O1, slip O1, label, slip O2, slip O3, label
        -> (O1, O1) + label page 3, O2 orphaned, O3 + label page 6
    """

    @property
    def strategy(self) -> MatchStrategy:
        return MatchStrategy.SEQUENTIAL

    def match(self, pages: Sequence[PageRecord]) -> MatchOutcome:
        ordered = sort_pages(pages)
        position = {page.page_number: index for index, page in enumerate(ordered)}
        claimed = set()
        outcome = MatchOutcome()

        for cluster in cluster_packing_slips(ordered):
            next_index = position[cluster[-1].page_number] + 1
            following = ordered[next_index] if next_index < len(ordered) else None

            if following is not None and following.is_shipping_label:
                claimed.add(following.page_number)
                self.sink.emit(
                    "label_claimed",
                    f"Order {cluster[0].order_number}: label page {following.page_number} "
                    f"follows packing slip page {cluster[-1].page_number}",
                    slip_pages=[s.page_number for s in cluster],
                    label_page=following.page_number,
                )
                outcome.proposals.append(MatchProposal(
                    slips=cluster,
                    label=following,
                    confidence=MatchConfidence.HIGH,
                ))
            else:
                self.sink.emit(
                    "slip_unmatched",
                    f"Order {cluster[0].order_number}: no label follows "
                    f"packing slip page {cluster[-1].page_number}",
                    slip_pages=[s.page_number for s in cluster],
                )
                outcome.proposals.append(MatchProposal(slips=cluster))

        outcome.unmatched_labels = [
            page for page in ordered
            if page.is_shipping_label and page.page_number not in claimed
        ]
        for label in outcome.unmatched_labels:
            self.sink.emit(
                "label_unmatched",
                f"Label page {label.page_number} has no preceding packing slip",
                label_page=label.page_number,
            )

        logger.debug(
            f"Sequential matching: {len(outcome.proposals)} clusters, "
            f"{len(outcome.unmatched_labels)} unmatched labels"
        )
        return outcome
