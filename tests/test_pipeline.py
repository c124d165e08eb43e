from __future__ import annotations

import unittest

from slipmatch.input_handler import PageTextSource
from slipmatch.models import MatchConfidence
from slipmatch.pipeline import DocumentAnalyzer
from slipmatch.resolution import ManualResolutionCoordinator
from slipmatch.utils.diagnostics import RecordingSink
from slipmatch.utils.exceptions import SourceReadError


def slip_page(order, name, street, town, postcode, date="12/01/2024"):
    return (
        f"Packing slip\nOrder #: {order}\n{name}\nDate: {date}\n"
        f"Shipping address:\n{name}\n{street}\n{town}\n{postcode}"
    )


def label_page(service, name, street, town, postcode):
    return (
        f"Royal Mail\nDelivered by\nPostage on Account GB\n{service}\n"
        f"{name}\n{street}\n{town}\n{postcode}"
    )


DOCUMENT = [
    slip_page("#1001", "Alice Smith", "42 Brighton Road", "London", "SW1A 1AA"),
    label_page("2nd Class", "Alice Smith", "42 Brighton Road", "London", "SW1A1AA"),
    slip_page("#1002", "Bob Jones", "7 High Street", "Manchester", "M1 1AE"),
    label_page("SPECIAL DELIVERY", "Bob Jones", "7 High Street", "Manchester", "M1 1AE"),
    slip_page("#1003", "Carol White", "9 Park Lane", "Leeds", "LS1 4AP", date="13/01/2024"),
]


class FailingSource(PageTextSource):
    name = "broken.pdf"

    def get_page_count(self) -> int:
        return 2

    def get_page_text(self, page_number: int) -> str:
        if page_number == 2:
            raise IOError("damaged page stream")
        return "Packing slip\nOrder #: 1"


class TestDocumentAnalyzer(unittest.TestCase):
    def setUp(self) -> None:
        self.sink = RecordingSink()
        self.analysis = DocumentAnalyzer(sink=self.sink).analyze_texts(DOCUMENT)

    def test_pages_are_classified_and_extracted(self) -> None:
        pages = self.analysis.pages

        self.assertEqual([p.page_number for p in pages], [1, 2, 3, 4, 5])
        self.assertEqual(self.analysis.total_packing_slips_detected, 3)
        self.assertEqual(self.analysis.total_shipping_labels_detected, 2)
        self.assertEqual(pages[0].order_number, "#1001")
        self.assertEqual(pages[1].customer_name, "alice smith")
        self.assertEqual(pages[1].postcode, "SW1A 1AA")
        self.assertEqual(pages[3].customer_name, "bob jones")
        self.assertEqual(pages[3].service, "Special Delivery")

    def test_orders_are_matched(self) -> None:
        groups = self.analysis.groups

        self.assertEqual(
            [(g.order_number, g.shipping_label and g.shipping_label.page_number) for g in groups],
            [("#1001", 2), ("#1002", 4), ("#1003", None)],
        )
        self.assertIs(groups[0].match_confidence, MatchConfidence.HIGH)
        self.assertEqual(groups[0].match_score, 150)
        self.assertEqual(len(self.sink.events_named("label_claimed")), 2)

    def test_anomalies_and_summary(self) -> None:
        self.assertEqual([s.page_number for s in self.analysis.orphaned_slips], [5])
        self.assertEqual(
            [(a.order_number, a.service) for a in self.analysis.non_standard_service_labels],
            [("#1002", "Special Delivery")],
        )

        summary = self.analysis.summary
        self.assertEqual(summary.orders_matched, 2)
        self.assertEqual(summary.orphaned_slips, 1)
        self.assertTrue(summary.requires_confirmation)

    def test_confirmed_orders_skip_orphans(self) -> None:
        orders = self.analysis.confirmed_orders()
        self.assertEqual([o.order_number for o in orders], ["#1001", "#1002"])

    def test_unreadable_page_aborts_the_run(self) -> None:
        with self.assertRaises(SourceReadError) as ctx:
            DocumentAnalyzer().analyze(FailingSource())

        self.assertEqual(ctx.exception.details["page_number"], 2)

    def test_review_results_are_reflected_in_analysis(self) -> None:
        analysis = DocumentAnalyzer().analyze_texts([
            "Packing slip\nOrder #: 2001",
            "Royal Mail\nLetter",
        ])
        self.assertEqual(len(analysis.uncertain_matches), 1)
        self.assertIs(analysis.groups[0].match_confidence, MatchConfidence.LOW)

        session = ManualResolutionCoordinator(analysis.groups)
        session.confirm()

        self.assertEqual(analysis.uncertain_matches, [])
        self.assertEqual(len(analysis.confirmed_orders()), 1)

    def test_unmatched_labels_follow_confirmed_label(self) -> None:
        analysis = DocumentAnalyzer().analyze_texts([
            "Packing slip\nOrder #: 2001",
            "Letter",
            "Letter",
        ])
        self.assertEqual(analysis.groups[0].shipping_label.page_number, 2)
        self.assertEqual([l.page_number for l in analysis.unmatched_labels], [3])

        ManualResolutionCoordinator(analysis.groups).confirm(candidate_index=1)

        self.assertEqual(analysis.groups[0].shipping_label.page_number, 3)
        self.assertEqual(analysis.groups[0].match_score, 20)
        self.assertEqual([l.page_number for l in analysis.unmatched_labels], [2])
        self.assertEqual(analysis.summary.unmatched_labels, 1)


if __name__ == "__main__":
    unittest.main()
