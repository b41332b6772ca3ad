"""Tests for fund summary and contribution reports."""
import unittest
from datetime import datetime

from ledger_fixtures import FixedClock, make_loan, make_member

from fundledger.engine import LedgerEngine
from fundledger.models import LoanStatus, TransactionType
from fundledger.store import InMemoryStore


class TestFundSummary(unittest.TestCase):

    def test_empty_fund(self):
        summary = LedgerEngine(InMemoryStore()).fund_summary()
        self.assertEqual(summary.as_dict(), {
            "total_funds": 0,
            "total_loaned": 0,
            "available_funds": 0,
            "active_loan_count": 0,
            "average_loan": 0,
        })

    def test_only_active_loans_count(self):
        store = InMemoryStore(
            members=[make_member("A", 1000), make_member("B", 600), make_member("C", 400)],
            loans=[
                make_loan("L-1", "A", amount=1500),
                make_loan("L-2", "B", amount=500),
                make_loan("L-3", "C", amount=900, status=LoanStatus.PAID),
                make_loan("L-4", "C", amount=300, status=LoanStatus.DEFAULTED),
            ],
        )
        summary = LedgerEngine(store).fund_summary()

        self.assertEqual(summary.total_funds, 2000)
        self.assertEqual(summary.total_loaned, 2000)
        self.assertEqual(summary.available_funds, 0)
        self.assertEqual(summary.active_loan_count, 2)
        self.assertEqual(summary.average_loan, 1000)


class TestLedgerFrames(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock(datetime(2025, 11, 5))
        self.store = InMemoryStore(members=[make_member("A"), make_member("B", 500), make_member("C", 500)])
        self.engine = LedgerEngine(self.store, self.clock)

    def test_contributions_by_year(self):
        self.engine.record_contribution("A", 20, "Cash", "Admin")
        self.clock.set(2025, 12, 5)
        self.engine.record_contribution("A", 20.5, "Cash", "Admin")
        self.clock.set(2026, 1, 5)
        self.engine.record_contribution("A", 25, "Cash", "Admin")
        self.engine.record_contribution("B", 10, "Cash", "Admin")
        self.engine.issue_loan("B", "C", 1000, 12)

        df = self.engine.contributions_by_year()
        self.assertEqual(list(df.columns), ["member_id", "year", "amount"])
        self.assertEqual(
            list(df.itertuples(index=False, name=None)),
            [("A", 2025, 40.5), ("A", 2026, 25), ("B", 2026, 10)],
        )

        only_b = self.engine.contributions_by_year("B")
        self.assertEqual(len(only_b), 1)

    def test_contributions_by_year_empty(self):
        df = self.engine.contributions_by_year()
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), ["member_id", "year", "amount"])

    def test_transactions_frame(self):
        loan = self.engine.issue_loan("B", "C", 1000, 12)
        df = self.engine.transactions_frame("B")

        self.assertEqual(list(df["type"]), [TransactionType.LOAN_DISBURSAL, TransactionType.FEE])
        self.assertEqual(set(df["loan_id"]), {loan.id})
        self.assertEqual(df["amount"].sum(), 1030)


if __name__ == '__main__':
    unittest.main()
