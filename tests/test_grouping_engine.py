from __future__ import annotations

import unittest

from slipmatch.grouping import GroupingEngine
from slipmatch.matching import MatchStrategy, ScoringPolicy, cluster_packing_slips
from slipmatch.models import MatchConfidence, PageKind, PageRecord
from slipmatch.reporting import AnomalyReporter
from slipmatch.utils.diagnostics import RecordingSink
from slipmatch.utils.exceptions import ConfigurationError, GroupingInvariantError


def slip(page, order="O1", name=None, postcode=None):
    return PageRecord(page, PageKind.PACKING_SLIP, order_number=order,
                      customer_name=name, postcode=postcode)


def label(page, name=None, postcode=None, service=None):
    return PageRecord(page, PageKind.SHIPPING_LABEL, customer_name=name,
                      postcode=postcode, service=service)


def scored_engine(sink=None, **policy):
    return GroupingEngine(
        strategy=MatchStrategy.SCORED, policy=ScoringPolicy(**policy), sink=sink
    )


class TestScoredGrouping(unittest.TestCase):
    def test_name_match_without_postcode_is_high(self) -> None:
        result = scored_engine().group([slip(1, name="alice"), label(2, name="alice")])

        self.assertEqual(len(result.groups), 1)
        group = result.groups[0]
        self.assertEqual(group.order_number, "O1")
        self.assertEqual(group.shipping_label.page_number, 2)
        self.assertEqual(group.match_score, 100)
        self.assertIs(group.match_confidence, MatchConfidence.HIGH)
        self.assertEqual(result.needs_review, [])

    def test_unnormalized_postcodes_still_match(self) -> None:
        result = scored_engine().group([
            slip(1, name="alice", postcode="SW1A1AA"),
            label(2, name="alice", postcode="SW1A 1AA"),
        ])

        group = result.groups[0]
        self.assertEqual(group.match_score, 150)
        self.assertIs(group.match_confidence, MatchConfidence.HIGH)

    def test_adjacent_unnamed_pages_are_low_and_uncertain(self) -> None:
        result = scored_engine().group([slip(1), label(2)])

        group = result.groups[0]
        self.assertEqual(group.match_score, 50)
        self.assertIs(group.match_confidence, MatchConfidence.LOW)
        self.assertEqual(result.uncertain, [group])
        self.assertEqual(result.needs_review, [group])

    def test_slips_without_labels_are_orphaned(self) -> None:
        result = scored_engine().group([slip(1, "O1"), slip(2, "O2")])

        self.assertEqual([g.order_number for g in result.groups], ["O1", "O2"])
        for group in result.groups:
            self.assertIsNone(group.shipping_label)
            self.assertIs(group.match_confidence, MatchConfidence.UNMATCHED)
        self.assertEqual(
            [s.page_number for s in AnomalyReporter().orphaned_slips(result.groups)], [1, 2]
        )

    def test_postcode_conflict_is_medium(self) -> None:
        result = scored_engine().group([
            slip(1, name="alice", postcode="SW1A 1AA"),
            label(2, name="alice", postcode="M1 1AE"),
        ])
        self.assertIs(result.groups[0].match_confidence, MatchConfidence.MEDIUM)

    def test_label_is_claimed_by_one_group_only(self) -> None:
        result = scored_engine().group([
            slip(1, "O1", name="alice"),
            slip(2, "O2", name="alice"),
            label(3, name="alice"),
        ])

        first, second = result.groups
        self.assertEqual(first.shipping_label.page_number, 3)
        self.assertIsNone(second.shipping_label)

    def test_greedy_claiming_keeps_first_winner(self) -> None:
        result = scored_engine().group([slip(1, "O1"), label(2), slip(3, "O2")])

        self.assertEqual(result.groups[0].shipping_label.page_number, 2)
        self.assertTrue(result.groups[1].is_orphaned)

    def test_consecutive_slips_of_one_order_form_one_group(self) -> None:
        result = scored_engine().group([
            slip(1, name="alice"), slip(2, name="alice"), label(3, name="alice"),
        ])

        self.assertEqual(len(result.groups), 1)
        self.assertEqual(result.groups[0].page_numbers, [1, 2])

    def test_later_slip_of_same_order_joins_existing_group(self) -> None:
        sink = RecordingSink()
        result = scored_engine(sink).group([
            slip(1, name="alice"), label(2, name="alice"), slip(3, name="alice"),
        ])

        self.assertEqual(len(result.groups), 1)
        self.assertEqual(result.groups[0].page_numbers, [1, 3])
        self.assertEqual(result.groups[0].shipping_label.page_number, 2)
        self.assertEqual(len(sink.events_named("slip_joined_order")), 1)
        self.assertEqual(len(sink.events_named("group_merged")), 1)

    def test_different_order_numbers_never_share_a_group(self) -> None:
        result = scored_engine().group([
            slip(1, "O1", name="alice"), slip(2, "O2", name="bob"),
            label(3, name="bob"), label(4, name="alice"),
        ])

        for group in result.groups:
            self.assertEqual(len({s.order_number for s in group.packing_slips}), 1)
        self.assertEqual(
            [(g.order_number, g.shipping_label.page_number) for g in result.groups],
            [("O1", 4), ("O2", 3)],
        )

    def test_unclaimed_labels_are_reported(self) -> None:
        sink = RecordingSink()
        result = scored_engine(sink).group([
            slip(1, name="alice"), label(2, name="alice"), label(3, name="zed"),
        ])

        self.assertEqual([l.page_number for l in result.unmatched_labels], [3])
        self.assertEqual(
            [e.data["label_page"] for e in sink.events_named("label_unmatched")], [3]
        )

    def test_rejected_match_is_explained(self) -> None:
        sink = RecordingSink()
        scored_engine(sink).group([slip(1, name="alice"), label(4)])

        events = sink.events_named("slip_unmatched")
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].data["best_score"], 20)

    def test_candidates_are_capped_and_ranked(self) -> None:
        pages = [slip(1, name="alice")] + [label(n, name="alice") for n in range(2, 9)]
        result = scored_engine().group(pages)

        group = result.groups[0]
        self.assertEqual(group.shipping_label.page_number, 2)
        self.assertEqual([c.label.page_number for c in group.label_candidates], [2, 3, 4, 5, 6])
        self.assertEqual(len(result.unmatched_labels), 6)

    def test_missing_order_number_uses_placeholder(self) -> None:
        result = scored_engine().group([slip(1, order=None, name="alice"), label(2, name="alice")])
        self.assertEqual(result.groups[0].order_number, "UNKNOWN")

    def test_grouping_is_deterministic_and_order_independent(self) -> None:
        pages = [
            slip(1, "O1", name="alice"), label(2, name="alice"),
            slip(3, "O2"), label(4),
            slip(5, "O3", name="carol"),
        ]
        first = scored_engine().group(pages).to_dict()
        second = scored_engine().group(list(reversed(pages))).to_dict()

        self.assertEqual(first, second)

    def test_every_slip_lands_in_exactly_one_group(self) -> None:
        pages = [
            slip(1, "O1", name="alice"), slip(2, "O1", name="alice"), label(3, name="alice"),
            slip(4, "O2"), slip(5, "O3", name="bob"), label(6, name="bob"), label(7),
        ]
        result = scored_engine().group(pages)

        grouped = sorted(n for g in result.groups for n in g.page_numbers)
        self.assertEqual(grouped, [1, 2, 4, 5])
        labels = [g.shipping_label.page_number for g in result.groups if g.shipping_label]
        self.assertEqual(len(labels), len(set(labels)))

    def test_duplicate_page_numbers_are_rejected(self) -> None:
        with self.assertRaises(GroupingInvariantError):
            scored_engine().group([slip(1), label(1)])

    def test_empty_document(self) -> None:
        result = scored_engine().group([])
        self.assertEqual(result.groups, [])
        self.assertEqual(result.unmatched_labels, [])


class TestSequentialGrouping(unittest.TestCase):
    def test_label_directly_after_cluster_is_matched(self) -> None:
        engine = GroupingEngine(strategy=MatchStrategy.SEQUENTIAL)
        result = engine.group([
            slip(1, "O1"), slip(2, "O1"), label(3),
            slip(4, "O2"), slip(5, "O3"), label(6),
        ])

        self.assertEqual(
            [(g.order_number, g.page_numbers, g.shipping_label and g.shipping_label.page_number)
             for g in result.groups],
            [("O1", [1, 2], 3), ("O2", [4], None), ("O3", [5], 6)],
        )
        self.assertIs(result.groups[0].match_confidence, MatchConfidence.HIGH)
        self.assertEqual(result.groups[0].label_candidates, [])
        self.assertIsNone(result.groups[0].match_score)
        self.assertIs(result.groups[1].match_confidence, MatchConfidence.UNMATCHED)
        self.assertIs(result.strategy, MatchStrategy.SEQUENTIAL)

    def test_label_without_preceding_slip_is_unmatched(self) -> None:
        result = GroupingEngine(strategy=MatchStrategy.SEQUENTIAL).group(
            [label(1), slip(2, "O1"), label(3)]
        )
        self.assertEqual([l.page_number for l in result.unmatched_labels], [1])


class TestAutoStrategy(unittest.TestCase):
    def test_falls_back_to_sequential_without_signals(self) -> None:
        result = GroupingEngine(strategy=MatchStrategy.AUTO).group([slip(1), label(2)])
        self.assertIs(result.strategy, MatchStrategy.SEQUENTIAL)

    def test_scores_when_names_are_present(self) -> None:
        result = GroupingEngine(strategy="auto").group(
            [slip(1, name="alice"), label(2, name="alice")]
        )
        self.assertIs(result.strategy, MatchStrategy.SCORED)

    def test_unknown_strategy_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            GroupingEngine(strategy="fastest")


class TestClustering(unittest.TestCase):
    def test_labels_split_clusters(self) -> None:
        pages = [slip(1, "O1"), slip(2, "O1"), label(3), slip(4, "O1"), slip(5, "O2")]
        clusters = cluster_packing_slips(pages)

        self.assertEqual(
            [[p.page_number for p in c] for c in clusters], [[1, 2], [4], [5]]
        )

    def test_slips_without_order_number_stay_alone(self) -> None:
        clusters = cluster_packing_slips([slip(1, None), slip(2, None)])
        self.assertEqual(len(clusters), 2)


if __name__ == "__main__":
    unittest.main()
