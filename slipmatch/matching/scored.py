"""
Scored Matcher Module.

Primary matching strategy. Every packing slip cluster is scored against
every label not yet claimed; the best label is accepted when it reaches
the acceptance threshold and is then claimed for the rest of the pass.

Claiming is greedy: a later cluster cannot take back a label an earlier
cluster already won.

Author: ML Engineering Team
"""

from typing import Dict, List, Optional, Sequence

from slipmatch.utils.diagnostics import DiagnosticSink
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from .base import (
    BaseMatcher,
    MatchOutcome,
    MatchProposal,
    MatchStrategy,
    cluster_packing_slips,
    sort_pages,
)
from .scoring import ScoringPolicy

# Initialize module logger
logger = get_logger(__name__)


def _describe(slips: Sequence[PageRecord]) -> str:
    first = slips[0]
    pages = ", ".join(str(s.page_number) for s in slips)
    return f"packing slip page(s) {pages} ({first.customer_name}, {first.postcode})"


class ScoredMatcher(BaseMatcher):
    """
    Score-based label matching.

    Example:
        >>> matcher = ScoredMatcher()
        >>> outcome = matcher.match(pages)
        >>> [p.label.page_number for p in outcome.proposals if p.label]
        [2, 4]
    """

    def __init__(
        self,
        policy: Optional[ScoringPolicy] = None,
        sink: Optional[DiagnosticSink] = None
    ) -> None:
        super().__init__(sink)
        self.policy = policy or ScoringPolicy.from_config()

    @property
    def strategy(self) -> MatchStrategy:
        return MatchStrategy.SCORED

    def match(self, pages: Sequence[PageRecord]) -> MatchOutcome:
        ordered = sort_pages(pages)
        unclaimed: List[PageRecord] = [p for p in ordered if p.is_shipping_label]
        label_by_order: Dict[str, PageRecord] = {}
        outcome = MatchOutcome()

        for cluster in cluster_packing_slips(ordered):
            candidates = self.policy.rank(cluster, unclaimed)
            best = candidates[0] if candidates else None
            order_number = cluster[0].order_number

            # Another cluster of the same order may already own a label
            owned = label_by_order.get(order_number) if order_number is not None else None
            if owned is not None:
                existing = self.policy.score_cluster(cluster, owned)
                if self.policy.accepts(existing) and (best is None or existing.score >= best.score):
                    self.sink.emit(
                        "slip_joined_order",
                        f"Joined {_describe(cluster)} to order {order_number} "
                        f"on label page {owned.page_number} (score: {existing.score})",
                        order_number=order_number,
                        label_page=owned.page_number,
                        score=existing.score,
                    )
                    outcome.proposals.append(MatchProposal(
                        slips=cluster,
                        label=owned,
                        winner=existing,
                        candidates=((existing,) + tuple(candidates))[:self.policy.max_candidates],
                    ))
                    continue

            if self.policy.accepts(best):
                unclaimed.remove(best.label)
                if order_number is not None:
                    label_by_order.setdefault(order_number, best.label)

                self.sink.emit(
                    "label_claimed",
                    f"Matched {_describe(cluster)} with label page "
                    f"{best.label.page_number} (score: {best.score})",
                    slip_pages=[s.page_number for s in cluster],
                    label_page=best.label.page_number,
                    score=best.score,
                    reasons=list(best.match_reasons),
                )
                outcome.proposals.append(MatchProposal(
                    slips=cluster,
                    label=best.label,
                    winner=best,
                    candidates=tuple(candidates),
                ))
            else:
                top_score = best.score if best else 0
                self.sink.emit(
                    "slip_unmatched",
                    f"No match found for {_describe(cluster)} "
                    f"(best score {top_score} < {self.policy.acceptance_threshold})",
                    slip_pages=[s.page_number for s in cluster],
                    best_score=top_score,
                )
                outcome.proposals.append(MatchProposal(
                    slips=cluster,
                    candidates=tuple(candidates),
                ))

        outcome.unmatched_labels = unclaimed
        for label in unclaimed:
            self.sink.emit(
                "label_unmatched",
                f"Unmatched label page {label.page_number} "
                f"({label.customer_name}, {label.postcode})",
                label_page=label.page_number,
            )

        logger.debug(
            f"Scored matching: {len(outcome.proposals)} clusters, "
            f"{len(unclaimed)} unmatched labels"
        )
        return outcome
