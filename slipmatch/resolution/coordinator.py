"""
Manual Resolution Coordinator Module.

Walks an operator through every order group whose match is below HIGH
confidence (including orphaned groups), one group at a time, in grouping
order. For each group the operator either confirms a label or skips.

The coordinator does no extraction or scoring. It is not safe for
concurrent use: one session, one caller.

Author: ML Engineering Team
"""

from typing import Callable, List, Optional, Sequence

from slipmatch.utils.exceptions import (
    InvalidSelectionError,
    LabelAlreadyAssignedError,
    ResolutionCompleteError,
)
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import LabelCandidate, MatchConfidence, OrderGroup

# Initialize module logger
logger = get_logger(__name__)


class ManualResolutionCoordinator:
    """
    Stateful review session over the uncertain order groups.

    Attributes:
        uncertain_groups: Groups presented for review, in grouping order.
        position: Index of the group currently under review.

    Example:
        >>> session = ManualResolutionCoordinator(result.groups, on_complete=done)
        >>> while not session.is_complete:
        ...     group = session.current
        ...     if group.label_candidates:
        ...         session.confirm()
        ...     else:
        ...         session.skip()
    """

    def __init__(
        self,
        groups: Sequence[OrderGroup],
        on_complete: Optional[Callable[[], None]] = None
    ) -> None:
        """
        Args:
            groups: All order groups of the document. Only those below HIGH
                confidence are reviewed; the rest are used to keep label
                assignments exclusive.
            on_complete: Called exactly once, after the last group.
        """
        self._groups = list(groups)
        self.uncertain_groups = tuple(g for g in self._groups if g.match_confidence.needs_review)
        self.position = 0
        self._on_complete = on_complete
        self._completed = False

        logger.info(f"Manual resolution started: {len(self.uncertain_groups)} groups to review")

        if not self.uncertain_groups:
            self._finish()

    @property
    def total(self) -> int:
        return len(self.uncertain_groups)

    @property
    def is_complete(self) -> bool:
        return self._completed

    @property
    def current(self) -> Optional[OrderGroup]:
        if self._completed:
            return None
        return self.uncertain_groups[self.position]

    @property
    def candidates(self) -> List[LabelCandidate]:
        group = self.current
        return list(group.label_candidates) if group is not None else []

    def confirm(self, candidate_index: Optional[int] = None, use_current: bool = False) -> OrderGroup:
        """
        Confirm a label for the current group and advance.

        Args:
            candidate_index: Index into the group's candidates; the
                top-ranked candidate when None.
            use_current: Keep the label the grouping engine assigned.

        Returns:
            The updated group.

        Raises:
            ResolutionCompleteError: If every group was already handled.
            InvalidSelectionError: If the group has no candidates, the index
                is out of range, or there is no current label to keep.
            LabelAlreadyAssignedError: If the label belongs to another group.
        """
        group = self._require_current()

        if not group.label_candidates:
            raise InvalidSelectionError(group.order_number, "no label candidates; skip instead")

        if use_current:
            if group.shipping_label is None:
                raise InvalidSelectionError(group.order_number, "group has no current label")
            label = group.shipping_label
            chosen = None
        else:
            index = 0 if candidate_index is None else candidate_index
            if not 0 <= index < len(group.label_candidates):
                raise InvalidSelectionError(
                    group.order_number,
                    f"candidate index {index} out of range (0-{len(group.label_candidates) - 1})"
                )
            chosen = group.label_candidates[index]
            label = chosen.label

        self._check_label_free(group, label)

        group.shipping_label = label
        if chosen is not None:
            group.match_score = chosen.score
        group.match_confidence = MatchConfidence.HIGH
        logger.info(f"Order {group.order_number}: confirmed label page {label.page_number}")

        self._advance()
        return group

    def skip(self) -> OrderGroup:
        """
        Leave the current group unchanged and advance.

        Raises:
            ResolutionCompleteError: If every group was already handled.
        """
        group = self._require_current()
        logger.info(
            f"Order {group.order_number}: skipped "
            f"({group.match_confidence.value} confidence kept)"
        )
        self._advance()
        return group

    def _require_current(self) -> OrderGroup:
        if self._completed:
            raise ResolutionCompleteError(self.total)
        return self.uncertain_groups[self.position]

    def _check_label_free(self, group: OrderGroup, label: PageRecord) -> None:
        for other in self._groups:
            if other is group or other.shipping_label is None:
                continue
            if other.shipping_label.page_number == label.page_number:
                raise LabelAlreadyAssignedError(
                    group.order_number, label.page_number, other.order_number
                )

    def _advance(self) -> None:
        if self.position < self.total - 1:
            self.position += 1
        else:
            self._finish()

    def _finish(self) -> None:
        if self._completed:
            return
        self._completed = True
        logger.info("Manual resolution complete")
        if self._on_complete is not None:
            self._on_complete()
