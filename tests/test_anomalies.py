from __future__ import annotations

import unittest

from slipmatch.models import (
    MatchConfidence,
    OrderGroup,
    PageKind,
    PageRecord,
    convert_groups_to_orders,
)
from slipmatch.reporting import AnomalyReporter, NonStandardServiceLabel


def slip(page, order):
    return PageRecord(page, PageKind.PACKING_SLIP, order_number=order)


def label(page, service=None):
    return PageRecord(page, PageKind.SHIPPING_LABEL, service=service)


def matched(order, slip_page, label_page, service):
    return OrderGroup(
        order_number=order,
        packing_slips=[slip(slip_page, order)],
        shipping_label=label(label_page, service),
        match_confidence=MatchConfidence.HIGH,
    )


def orphan(order, *pages):
    return OrderGroup(order_number=order, packing_slips=[slip(p, order) for p in pages])


class TestAnomalyReporter(unittest.TestCase):
    def setUp(self) -> None:
        self.reporter = AnomalyReporter()
        self.groups = [
            matched("O1", 1, 2, "Special Delivery"),
            matched("O2", 3, 4, "2nd Class"),
            matched("O3", 5, 6, None),
            orphan("O4", 7, 8),
        ]

    def test_non_standard_service_is_reported_verbatim(self) -> None:
        self.assertEqual(
            self.reporter.non_standard_service_labels(self.groups),
            [NonStandardServiceLabel(order_number="O1", page_number=2, service="Special Delivery")],
        )

    def test_orphaned_slips_include_every_page_of_the_group(self) -> None:
        self.assertEqual(
            [s.page_number for s in self.reporter.orphaned_slips(self.groups)], [7, 8]
        )

    def test_custom_standard_service(self) -> None:
        reporter = AnomalyReporter(standard_service="Special Delivery")
        self.assertEqual(
            [a.service for a in reporter.non_standard_service_labels(self.groups)],
            ["2nd Class"],
        )

    def test_derivations_are_repeatable(self) -> None:
        self.assertEqual(
            self.reporter.orphaned_slips(self.groups), self.reporter.orphaned_slips(self.groups)
        )
        self.assertEqual(
            self.reporter.summarize(self.groups, 5, 3),
            self.reporter.summarize(self.groups, 5, 3),
        )

    def test_summary_requires_confirmation(self) -> None:
        summary = self.reporter.summarize(self.groups, 5, 4, unmatched_labels=[label(9)])

        self.assertEqual(summary.orders_matched, 3)
        self.assertEqual(summary.packing_slips_matched, 3)
        self.assertEqual(summary.orphaned_slips, 2)
        self.assertEqual(summary.non_standard_services, 1)
        self.assertEqual(summary.unmatched_labels, 1)
        self.assertTrue(summary.requires_confirmation)
        self.assertTrue(summary.to_dict()["requires_confirmation"])

    def test_clean_summary_needs_no_confirmation(self) -> None:
        groups = [matched("O2", 1, 2, "2nd Class")]
        self.assertFalse(self.reporter.summarize(groups, 1, 1).requires_confirmation)

    def test_results_follow_group_changes(self) -> None:
        self.groups[3].shipping_label = label(9, "2nd Class")
        self.groups[3].match_confidence = MatchConfidence.HIGH

        self.assertEqual(self.reporter.orphaned_slips(self.groups), [])


class TestConvertGroupsToOrders(unittest.TestCase):
    def test_only_matched_groups_become_orders(self) -> None:
        groups = [matched("O1", 1, 2, "2nd Class"), orphan("O2", 3)]
        orders = convert_groups_to_orders(groups)

        self.assertEqual([o.order_number for o in orders], ["O1"])
        self.assertEqual(orders[0].to_dict()["shipping_label_page"], 2)


if __name__ == "__main__":
    unittest.main()
