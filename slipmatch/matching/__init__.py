"""
Candidate Matching Module for the Slip Matching System.

This module provides:
    - Label scoring and confidence banding
    - Scored (primary) and sequential (fallback) matching strategies
    - Strategy selection, including automatic fallback
"""

from typing import Optional, Sequence

from slipmatch.utils.diagnostics import DiagnosticSink
from slipmatch.models.page_record import PageRecord
from .base import (
    BaseMatcher,
    MatchOutcome,
    MatchProposal,
    MatchStrategy,
    cluster_packing_slips,
)
from .scoring import ScoringPolicy, ScoredLabel
from .scored import ScoredMatcher
from .sequential import SequentialMatcher


def resolve_strategy(strategy: MatchStrategy, pages: Sequence[PageRecord]) -> MatchStrategy:
    """
    Turn AUTO into a concrete strategy.

    AUTO uses the sequential strategy only when no page carries a customer
    name or postcode; otherwise scoring has something to work with.
    """
    if strategy is not MatchStrategy.AUTO:
        return strategy
    has_signal = any(p.customer_name or p.postcode for p in pages)
    return MatchStrategy.SCORED if has_signal else MatchStrategy.SEQUENTIAL


def create_matcher(
    strategy: MatchStrategy,
    policy: Optional[ScoringPolicy] = None,
    sink: Optional[DiagnosticSink] = None
) -> BaseMatcher:
    """Build the matcher for a concrete (non-AUTO) strategy."""
    if strategy is MatchStrategy.SEQUENTIAL:
        return SequentialMatcher(sink=sink)
    if strategy is MatchStrategy.SCORED:
        return ScoredMatcher(policy=policy, sink=sink)
    raise ValueError(f"Strategy must be resolved before creating a matcher: {strategy}")


__all__ = [
    'BaseMatcher',
    'MatchOutcome',
    'MatchProposal',
    'MatchStrategy',
    'ScoringPolicy',
    'ScoredLabel',
    'ScoredMatcher',
    'SequentialMatcher',
    'cluster_packing_slips',
    'create_matcher',
    'resolve_strategy',
]
