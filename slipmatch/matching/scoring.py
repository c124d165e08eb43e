"""
Label Scoring Module.

Scores shipping labels against a packing slip cluster and maps the
winning score to a confidence band.

Scoring:
    +100  customer names equal (after normalization)
    +50   ...and postcodes equal
    +50   label name missing, label on an adjacent page
    +20   label name missing, label 2-3 pages away

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from config import get_config
from slipmatch.utils.exceptions import ConfigurationError
from slipmatch.extraction.normalizers import normalize_customer_name, normalize_postcode
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import LabelCandidate, MatchConfidence

REASON_NAME_MATCH = "Customer name exact match"
REASON_POSTCODE_MATCH = "Postcode match"
REASON_POSTCODE_MISMATCH = "Postcode mismatch"
REASON_ADJACENT_PAGE = "Adjacent page"


@dataclass(frozen=True)
class ScoredLabel(LabelCandidate):
    """Label candidate plus the signals the confidence band depends on."""
    postcode_conflict: bool = False


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Scoring weights, acceptance threshold and confidence bands.

    Defaults equal the shipped ``matching`` settings; use ``from_config``
    to honour a customized settings file.
    """

    name_match: int = 100
    postcode_match: int = 50
    adjacent_page: int = 50
    nearby_page: int = 20
    nearby_page_max_distance: int = 3
    acceptance_threshold: int = 50
    high_confidence: int = 150
    medium_confidence: int = 100
    low_confidence: int = 50
    max_candidates: int = 5

    @classmethod
    def from_config(cls) -> 'ScoringPolicy':
        policy = cls(
            name_match=get_config("matching.scores.name_match", 100),
            postcode_match=get_config("matching.scores.postcode_match", 50),
            adjacent_page=get_config("matching.scores.adjacent_page", 50),
            nearby_page=get_config("matching.scores.nearby_page", 20),
            nearby_page_max_distance=get_config("matching.nearby_page_max_distance", 3),
            acceptance_threshold=get_config("matching.acceptance_threshold", 50),
            high_confidence=get_config("matching.confidence.high", 150),
            medium_confidence=get_config("matching.confidence.medium", 100),
            low_confidence=get_config("matching.confidence.low", 50),
            max_candidates=get_config("matching.max_candidates", 5),
        )
        policy.validate()
        return policy

    def validate(self) -> None:
        if self.acceptance_threshold <= 0:
            raise ConfigurationError(
                "matching.acceptance_threshold", self.acceptance_threshold, "must be > 0"
            )
        if not (self.high_confidence >= self.medium_confidence >= self.low_confidence):
            raise ConfigurationError(
                "matching.confidence",
                [self.high_confidence, self.medium_confidence, self.low_confidence],
                "bands must satisfy high >= medium >= low"
            )
        if self.max_candidates < 1:
            raise ConfigurationError("matching.max_candidates", self.max_candidates, "must be >= 1")
        if self.nearby_page_max_distance < 2:
            raise ConfigurationError(
                "matching.nearby_page_max_distance", self.nearby_page_max_distance, "must be >= 2"
            )

    # -------------------------------------------------------------------------

    def score_pair(self, slip: PageRecord, label: PageRecord) -> ScoredLabel:
        """Score one label against one packing slip page."""
        score = 0
        reasons = []
        postcode_conflict = False

        slip_name = normalize_customer_name(slip.customer_name)
        label_name = normalize_customer_name(label.customer_name)

        if slip_name and label_name:
            if slip_name == label_name:
                score += self.name_match
                reasons.append(REASON_NAME_MATCH)

                slip_postcode = normalize_postcode(slip.postcode)
                label_postcode = normalize_postcode(label.postcode)
                if slip_postcode and label_postcode:
                    if slip_postcode == label_postcode:
                        score += self.postcode_match
                        reasons.append(REASON_POSTCODE_MATCH)
                    else:
                        postcode_conflict = True
                        reasons.append(REASON_POSTCODE_MISMATCH)
        elif label_name is None:
            distance = abs(label.page_number - slip.page_number)
            if distance == 1:
                score += self.adjacent_page
                reasons.append(REASON_ADJACENT_PAGE)
            elif 2 <= distance <= self.nearby_page_max_distance:
                score += self.nearby_page
                reasons.append(f"Nearby page ({distance} pages apart)")

        return ScoredLabel(
            label=label,
            score=score,
            match_reasons=tuple(reasons),
            postcode_conflict=postcode_conflict,
        )

    def score_cluster(self, slips: Sequence[PageRecord], label: PageRecord) -> ScoredLabel:
        """Best score of ``label`` over the slips of one cluster (first slip wins ties)."""
        best = None
        for slip in slips:
            scored = self.score_pair(slip, label)
            if best is None or scored.score > best.score:
                best = scored
        return best

    def rank(self, slips: Sequence[PageRecord], labels: Sequence[PageRecord]) -> List[ScoredLabel]:
        """
        Rank labels for a cluster.

        Only labels with a positive score are kept. Order is descending
        score, then ascending page number; the list is capped at
        ``max_candidates``.
        """
        scored = [self.score_cluster(slips, label) for label in labels]
        scored = [s for s in scored if s.score > 0]
        scored.sort(key=lambda s: (-s.score, s.label.page_number))
        return scored[:self.max_candidates]

    def accepts(self, candidate: Optional[LabelCandidate]) -> bool:
        return candidate is not None and candidate.score >= self.acceptance_threshold

    def band(self, candidate: Optional[LabelCandidate]) -> MatchConfidence:
        """
        Confidence band of an accepted match.

        A name match with no postcode to compare is not contradicted by
        any signal and is banded HIGH; MEDIUM is left for name matches
        whose postcodes disagree.
        """
        if not self.accepts(candidate):
            return MatchConfidence.UNMATCHED

        score = candidate.score
        if score >= self.high_confidence:
            return MatchConfidence.HIGH
        if score >= self.medium_confidence:
            if getattr(candidate, 'postcode_conflict', False):
                return MatchConfidence.MEDIUM
            return MatchConfidence.HIGH
        if score >= self.low_confidence:
            return MatchConfidence.LOW
        return MatchConfidence.UNMATCHED
