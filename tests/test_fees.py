"""Tests for the flat application fee schedule."""
import sys
import os
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fundledger.exceptions import ValidationError
from fundledger.services.fees import compute_fee


class TestFeeTiers(unittest.TestCase):

    def test_small_loan_flat_fee(self):
        self.assertEqual(compute_fee(2499, 12), 30)
        self.assertEqual(compute_fee(100, 12), 30)

    def test_small_loan_ignores_term(self):
        self.assertEqual(compute_fee(100, 24), 30)
        self.assertEqual(compute_fee(2499.99, 24), 30)

    def test_threshold_is_inclusive(self):
        self.assertEqual(compute_fee(2500, 12), 50)
        self.assertEqual(compute_fee(2500, 24), 70)

    def test_large_loan_by_term(self):
        self.assertEqual(compute_fee(5000, 12), 50)
        self.assertEqual(compute_fee(5000, 24), 70)


class TestFeeValidation(unittest.TestCase):

    def test_rejects_non_positive_amount(self):
        for bad in (0, -1, -2500):
            with self.assertRaises(ValidationError):
                compute_fee(bad, 12)

    def test_rejects_non_numbers(self):
        for bad in ("2500", None, True, float("nan"), float("inf")):
            with self.assertRaises(ValidationError):
                compute_fee(bad, 12)

    def test_rejects_unsupported_term(self):
        for bad in (6, 18, 36, 12.0, "12"):
            with self.assertRaises(ValidationError):
                compute_fee(1000, bad)


if __name__ == '__main__':
    unittest.main()
