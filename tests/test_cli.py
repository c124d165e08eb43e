from __future__ import annotations

import io
import unittest

import main
from slipmatch.models import MatchConfidence
from slipmatch.pipeline import DocumentAnalyzer


class TestCommandLine(unittest.TestCase):
    def test_arguments(self) -> None:
        args = main.parse_arguments(["-i", "orders.pdf", "--strategy", "auto", "--review", "--strict"])

        self.assertEqual(args.input, "orders.pdf")
        self.assertEqual(args.strategy, "auto")
        self.assertTrue(args.review)
        self.assertTrue(args.strict)
        self.assertIsNone(args.output)

    def test_unreadable_input_exits_with_error(self) -> None:
        self.assertEqual(main.main(["--input", "/nonexistent/orders.pdf", "--quiet"]), main.EXIT_ERROR)


class TestInteractiveReview(unittest.TestCase):
    def analyze(self):
        return DocumentAnalyzer().analyze_texts([
            "Packing slip\nOrder #: 2001",
            "Royal Mail\nLetter",
            "Packing slip\nOrder #: 2002",
        ])

    def test_choices_are_applied_in_order(self) -> None:
        analysis = self.analyze()
        stdout = io.StringIO()

        main.review_interactively(analysis, stdin=io.StringIO("0\ns\n"), stdout=stdout)

        self.assertIs(analysis.groups[0].match_confidence, MatchConfidence.HIGH)
        self.assertIs(analysis.groups[1].match_confidence, MatchConfidence.UNMATCHED)
        self.assertIn("Match 1 of 2: order 2001", stdout.getvalue())

    def test_invalid_choice_is_reported_and_repeated(self) -> None:
        analysis = self.analyze()
        stdout = io.StringIO()

        main.review_interactively(analysis, stdin=io.StringIO("7\nk\n\n"), stdout=stdout)

        self.assertIn("Invalid selection for order '2001'", stdout.getvalue())
        self.assertEqual(analysis.groups[0].shipping_label.page_number, 2)
        self.assertIs(analysis.groups[0].match_confidence, MatchConfidence.HIGH)


if __name__ == "__main__":
    unittest.main()
