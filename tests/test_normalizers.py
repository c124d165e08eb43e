from __future__ import annotations

import unittest

from slipmatch.extraction.normalizers import normalize_customer_name, normalize_postcode


class TestNormalizeCustomerName(unittest.TestCase):
    def test_lowercases_trims_and_collapses_whitespace(self) -> None:
        self.assertEqual(normalize_customer_name("  Alice   SMITH \n"), "alice smith")

    def test_removes_punctuation_but_keeps_hyphens(self) -> None:
        self.assertEqual(normalize_customer_name("Mrs. Alice O'Brien"), "mrs alice obrien")
        self.assertEqual(normalize_customer_name("Jean-Luc Picard"), "jean-luc picard")

    def test_punctuation_between_words_leaves_single_space(self) -> None:
        self.assertEqual(normalize_customer_name("Alice . Smith"), "alice smith")

    def test_empty_results_become_none(self) -> None:
        self.assertIsNone(normalize_customer_name(None))
        self.assertIsNone(normalize_customer_name(""))
        self.assertIsNone(normalize_customer_name("  !!! "))

    def test_is_idempotent(self) -> None:
        for raw in ("Mrs. Alice O'Brien", "  BOB   jones ", "Jean-Luc Picard"):
            once = normalize_customer_name(raw)
            self.assertEqual(normalize_customer_name(once), once)


class TestNormalizePostcode(unittest.TestCase):
    def test_uk_postcode_gets_space_before_inward_code(self) -> None:
        self.assertEqual(normalize_postcode("sw1a1aa"), "SW1A 1AA")
        self.assertEqual(normalize_postcode("m1 1ae"), "M1 1AE")
        self.assertEqual(normalize_postcode(" LS1  4AP "), "LS1 4AP")

    def test_normalized_uk_postcode_is_unchanged(self) -> None:
        self.assertEqual(normalize_postcode("SW1A 1AA"), "SW1A 1AA")

    def test_non_uk_postcodes_are_compacted_and_uppercased(self) -> None:
        self.assertEqual(normalize_postcode("90210"), "90210")
        self.assertEqual(normalize_postcode("k1a 0b1"), "K1A0B1")

    def test_empty_results_become_none(self) -> None:
        self.assertIsNone(normalize_postcode(None))
        self.assertIsNone(normalize_postcode("   "))

    def test_compact_and_spaced_forms_compare_equal(self) -> None:
        self.assertEqual(normalize_postcode("SW1A1AA"), normalize_postcode("SW1A 1AA"))


if __name__ == "__main__":
    unittest.main()
