"""
Matcher Base Module.

Shared types for the matching strategies:
    - MatchStrategy: which strategy to run
    - MatchProposal: one packing slip cluster and the label proposed for it
    - BaseMatcher: strategy interface
    - cluster_packing_slips: contiguous same-order slip clustering

Author: ML Engineering Team
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from slipmatch.utils.diagnostics import DiagnosticSink, resolve_sink
from slipmatch.utils.exceptions import ConfigurationError
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import LabelCandidate, MatchConfidence


class MatchStrategy(str, Enum):
    """Available matching strategies."""
    SCORED = "scored"
    SEQUENTIAL = "sequential"
    AUTO = "auto"

    @classmethod
    def from_value(cls, value) -> 'MatchStrategy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                "matching.strategy", value,
                f"expected one of {[s.value for s in cls]}"
            ) from None


@dataclass(frozen=True)
class MatchProposal:
    """
    A packing slip cluster and the label a matcher assigned to it.

    Attributes:
        slips: Packing slip pages of the cluster, in document order.
        label: Assigned label, or None when the cluster is orphaned.
        winner: Winning candidate (scored strategy only).
        candidates: Ranked candidates considered for the cluster.
        confidence: Fixed confidence; None means "band from the winner".
    """
    slips: Tuple[PageRecord, ...]
    label: Optional[PageRecord] = None
    winner: Optional[LabelCandidate] = None
    candidates: Tuple[LabelCandidate, ...] = ()
    confidence: Optional[MatchConfidence] = None

    @property
    def order_number(self) -> Optional[str]:
        return self.slips[0].order_number


@dataclass
class MatchOutcome:
    """Proposals in cluster order plus the labels nothing claimed."""
    proposals: List[MatchProposal] = field(default_factory=list)
    unmatched_labels: List[PageRecord] = field(default_factory=list)


def sort_pages(pages: Sequence[PageRecord]) -> List[PageRecord]:
    return sorted(pages, key=lambda page: page.page_number)


def cluster_packing_slips(pages: Sequence[PageRecord]) -> List[Tuple[PageRecord, ...]]:
    """
    Group consecutive packing slip pages sharing an order number.

    ``pages`` must be in document order. Slips without an order number
    always form a cluster of their own.

    Example:
        slips O1, O1, label, O1, O2  ->  (O1, O1), (O1,), (O2,)
    """
    clusters = []
    current: List[PageRecord] = []
    previous: Optional[PageRecord] = None

    for page in pages:
        if not page.is_packing_slip:
            if current:
                clusters.append(tuple(current))
                current = []
            previous = page
            continue

        continues_cluster = (
            current
            and previous is not None
            and previous.is_packing_slip
            and page.order_number is not None
            and page.order_number == current[0].order_number
        )
        if continues_cluster:
            current.append(page)
        else:
            if current:
                clusters.append(tuple(current))
            current = [page]
        previous = page

    if current:
        clusters.append(tuple(current))

    return clusters


class BaseMatcher(ABC):
    """
    Interface for matching strategies.

    A matcher claims each label for at most one proposal and returns
    proposals in first-slip order; it never builds order groups itself.
    """

    def __init__(self, sink: Optional[DiagnosticSink] = None) -> None:
        self.sink = resolve_sink(sink)

    @property
    @abstractmethod
    def strategy(self) -> MatchStrategy:
        raise NotImplementedError

    @abstractmethod
    def match(self, pages: Sequence[PageRecord]) -> MatchOutcome:
        raise NotImplementedError
