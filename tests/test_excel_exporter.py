from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from openpyxl import load_workbook

from slipmatch.pipeline import DocumentAnalyzer
from slipmatch.reporting import ReportExporter
from slipmatch.resolution import ManualResolutionCoordinator

DOCUMENT = [
    "Packing slip\nOrder #: #1001\nAlice Smith\nDate: 12/01/2024\nSW1A 1AA",
    "Royal Mail\nSPECIAL DELIVERY\nAlice Smith\nSW1A 1AA",
    "Packing slip\nOrder #: #1002\nBob Jones\nDate: 12/01/2024\nM1 1AE",
]


class TestReportExporter(unittest.TestCase):
    def setUp(self) -> None:
        self.analysis = DocumentAnalyzer().analyze_texts(DOCUMENT)

    def test_workbook_has_one_sheet_per_section(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = ReportExporter(output_dir=tmp).export(self.analysis, "report.xlsx")

            self.assertEqual(Path(path), Path(tmp) / "report.xlsx")
            workbook = load_workbook(path)
            self.assertEqual(
                workbook.sheetnames,
                ["Orders", "Orphaned Slips", "Non-standard Services", "Unmatched Labels", "Summary"],
            )

            orders = list(workbook["Orders"].iter_rows(min_row=2, values_only=True))
            self.assertEqual([row[0] for row in orders], ["#1001", "#1002"])
            self.assertEqual(orders[0][2], 2)
            self.assertEqual(orders[0][6], "HIGH")
            self.assertIsNone(orders[1][2])

            orphans = list(workbook["Orphaned Slips"].iter_rows(min_row=2, values_only=True))
            self.assertEqual([row[1] for row in orphans], [3])

            services = list(workbook["Non-standard Services"].iter_rows(min_row=2, values_only=True))
            self.assertEqual(services, [("#1001", 2, "Special Delivery")])

    def test_confirmed_label_is_reported_with_its_own_score_and_reasons(self) -> None:
        analysis = DocumentAnalyzer().analyze_texts([
            "Packing slip\nOrder #: 2001",
            "Letter",
            "Letter",
        ])
        ManualResolutionCoordinator(analysis.groups).confirm(candidate_index=1)

        with tempfile.TemporaryDirectory() as tmp:
            path = ReportExporter(output_dir=tmp).export(analysis, "report.xlsx")
            workbook = load_workbook(path)

            orders = list(workbook["Orders"].iter_rows(min_row=2, values_only=True))
            self.assertEqual(orders[0][2], 3)
            self.assertEqual(orders[0][7], 20)
            self.assertEqual(orders[0][8], "Nearby page (2 pages apart)")

            unmatched = list(workbook["Unmatched Labels"].iter_rows(min_row=2, values_only=True))
            self.assertEqual([row[0] for row in unmatched], [2])

    def test_generated_filename_goes_to_output_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(ReportExporter(output_dir=tmp).export(self.analysis))

            self.assertEqual(path.parent, Path(tmp))
            self.assertTrue(path.name.startswith("slip_matches_"))
            self.assertTrue(path.exists())


if __name__ == "__main__":
    unittest.main()
