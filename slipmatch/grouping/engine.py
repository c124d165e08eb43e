"""
Grouping Engine Module.

Turns matcher proposals into the final list of order groups and
partitions them into confident, uncertain and orphaned matches.

Each packing slip moves once from unprocessed to either grouped-matched
or grouped-orphaned; nothing moves back. Given the same pages the engine
always produces the same groups in the same order.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import get_config
from slipmatch.utils.diagnostics import DiagnosticSink, resolve_sink
from slipmatch.utils.exceptions import GroupingInvariantError
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import MatchConfidence, OrderGroup
from slipmatch.matching import (
    MatchStrategy,
    ScoringPolicy,
    create_matcher,
    resolve_strategy,
)

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_UNKNOWN_ORDER_NUMBER = "UNKNOWN"


@dataclass
class GroupingResult:
    """
    Output of one grouping pass.

    Attributes:
        groups: Order groups in creation (first packing slip) order.
        unmatched_labels: Labels not assigned to any group.
        strategy: Strategy that produced the groups.
    """
    groups: List[OrderGroup] = field(default_factory=list)
    unmatched_labels: List[PageRecord] = field(default_factory=list)
    strategy: MatchStrategy = MatchStrategy.SCORED

    @property
    def confident(self) -> List[OrderGroup]:
        return [g for g in self.groups if g.match_confidence is MatchConfidence.HIGH]

    @property
    def uncertain(self) -> List[OrderGroup]:
        return [
            g for g in self.groups
            if g.match_confidence in (MatchConfidence.MEDIUM, MatchConfidence.LOW)
        ]

    @property
    def orphaned(self) -> List[OrderGroup]:
        return [g for g in self.groups if g.match_confidence is MatchConfidence.UNMATCHED]

    @property
    def needs_review(self) -> List[OrderGroup]:
        """Every group below HIGH confidence, in creation order."""
        return [g for g in self.groups if g.match_confidence.needs_review]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'strategy': self.strategy.value,
            'groups': [g.to_dict() for g in self.groups],
            'unmatched_label_pages': [l.page_number for l in self.unmatched_labels],
        }


class GroupingEngine:
    """
    Builds order groups from classified, extracted pages.

    Example:
        >>> engine = GroupingEngine(strategy=MatchStrategy.SCORED)
        >>> result = engine.group(pages)
        >>> for group in result.needs_review:
        ...     print(group.order_number, group.match_confidence)
    """

    def __init__(
        self,
        strategy: Optional[MatchStrategy] = None,
        policy: Optional[ScoringPolicy] = None,
        sink: Optional[DiagnosticSink] = None
    ) -> None:
        """
        Args:
            strategy: Matching strategy; defaults to ``matching.strategy``.
            policy: Scoring policy; defaults to the configured policy.
            sink: Diagnostic sink for matching decisions.
        """
        if strategy is None:
            strategy = get_config("matching.strategy", MatchStrategy.SCORED.value)
        self.strategy = MatchStrategy.from_value(strategy)
        self.policy = policy or ScoringPolicy.from_config()
        self.sink = resolve_sink(sink)
        self.unknown_order_number = get_config(
            "matching.unknown_order_number", DEFAULT_UNKNOWN_ORDER_NUMBER
        )

    def group(self, pages: Sequence[PageRecord]) -> GroupingResult:
        """
        Match labels to packing slips and build order groups.

        Args:
            pages: One record per page; any order, unique page numbers.

        Returns:
            GroupingResult with groups in first packing slip order.

        Raises:
            GroupingInvariantError: If page numbers repeat or the produced
                groups break an order group invariant.
        """
        self._check_unique_pages(pages)

        strategy = resolve_strategy(self.strategy, pages)
        if strategy is not self.strategy:
            logger.info(f"No name/postcode signal found; using {strategy.value} matching")

        matcher = create_matcher(strategy, policy=self.policy, sink=self.sink)
        outcome = matcher.match(pages)

        groups: List[OrderGroup] = []
        by_order_and_label: Dict[Tuple[str, int], OrderGroup] = {}

        for proposal in outcome.proposals:
            order_number = proposal.order_number or self.unknown_order_number

            if proposal.label is not None:
                key = (order_number, proposal.label.page_number)
                existing = by_order_and_label.get(key)
                if existing is not None:
                    existing.packing_slips.extend(proposal.slips)
                    self.sink.emit(
                        "group_merged",
                        f"Merged packing slip page(s) "
                        f"{[s.page_number for s in proposal.slips]} into order {order_number}",
                        order_number=order_number,
                        label_page=proposal.label.page_number,
                    )
                    continue

            if proposal.label is None:
                confidence = MatchConfidence.UNMATCHED
            elif proposal.confidence is not None:
                confidence = proposal.confidence
            else:
                confidence = self.policy.band(proposal.winner)

            group = OrderGroup(
                order_number=order_number,
                packing_slips=list(proposal.slips),
                shipping_label=proposal.label,
                match_confidence=confidence,
                label_candidates=list(proposal.candidates),
                match_score=(
                    proposal.winner.score
                    if proposal.label is not None and proposal.winner is not None
                    else None
                ),
            )
            groups.append(group)
            if proposal.label is not None:
                by_order_and_label[(order_number, proposal.label.page_number)] = group

        self._check_invariants(groups, pages)

        result = GroupingResult(
            groups=groups,
            unmatched_labels=list(outcome.unmatched_labels),
            strategy=strategy,
        )

        logger.info(
            f"Grouped {len(groups)} orders: {len(result.confident)} confident, "
            f"{len(result.uncertain)} uncertain, {len(result.orphaned)} orphaned, "
            f"{len(result.unmatched_labels)} unmatched labels"
        )
        if result.unmatched_labels:
            logger.warning(
                f"{len(result.unmatched_labels)} shipping labels were not matched "
                f"to any packing slip"
            )
        return result

    @staticmethod
    def _check_unique_pages(pages: Sequence[PageRecord]) -> None:
        seen = set()
        for page in pages:
            if page.page_number in seen:
                raise GroupingInvariantError(
                    "unique page numbers", f"page {page.page_number} appears twice"
                )
            seen.add(page.page_number)

    @staticmethod
    def _check_invariants(groups: List[OrderGroup], pages: Sequence[PageRecord]) -> None:
        slip_pages = sorted(p.page_number for p in pages if p.is_packing_slip)
        grouped_pages = sorted(n for g in groups for n in g.page_numbers)
        if slip_pages != grouped_pages:
            raise GroupingInvariantError(
                "every packing slip belongs to exactly one group",
                f"expected {slip_pages}, grouped {grouped_pages}"
            )

        used_labels = set()
        for group in groups:
            if not group.packing_slips:
                raise GroupingInvariantError("non-empty packing slips", group.order_number)

            order_numbers = {s.order_number for s in group.packing_slips}
            if len(order_numbers) != 1:
                raise GroupingInvariantError(
                    "packing slips share one order number", str(sorted(map(str, order_numbers)))
                )

            if (group.shipping_label is None) != (group.match_confidence is MatchConfidence.UNMATCHED):
                raise GroupingInvariantError(
                    "UNMATCHED iff no shipping label", group.order_number
                )

            if group.shipping_label is not None:
                label_page = group.shipping_label.page_number
                if label_page in used_labels:
                    raise GroupingInvariantError(
                        "label assigned to at most one group", f"label page {label_page}"
                    )
                used_labels.add(label_page)
