"""Tests for the read-only installment schedule."""
import unittest
from datetime import date, datetime

from ledger_fixtures import FixedClock, make_member

from fundledger.database import DatabaseManager
from fundledger.engine import LedgerEngine
from fundledger.exceptions import LoanNotFoundError
from fundledger.models import Transaction, TransactionType
from fundledger.store import InMemoryStore


class TestScheduleProjection(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock(datetime(2026, 3, 15, 9, 30))
        self.store = InMemoryStore(members=[make_member("B", 1000), make_member("C", 500)])
        self.engine = LedgerEngine(self.store, self.clock)
        self.loan = self.engine.issue_loan("B", "C", 4000, 12)

    def test_rows_and_due_dates(self):
        schedule = self.engine.project_schedule(self.loan.id)

        self.assertEqual(schedule.loan_id, self.loan.id)
        self.assertEqual(schedule.monthly_payment, 333.33)
        self.assertEqual(len(schedule.rows), 12)
        self.assertEqual([r.number for r in schedule.rows], list(range(1, 13)))
        self.assertEqual(schedule.rows[0].due_date, date(2026, 4, 10))
        self.assertEqual(schedule.rows[8].due_date, date(2026, 12, 10))
        self.assertEqual(schedule.rows[9].due_date, date(2027, 1, 10))
        self.assertEqual(schedule.rows[-1].due_date, date(2027, 3, 10))
        self.assertTrue(all(r.estimated == 333.33 for r in schedule.rows))
        self.assertTrue(all(r.actual is None for r in schedule.rows))
        self.assertEqual(schedule.total_paid, 0)

    def test_repayments_matched_in_order(self):
        self.clock.set(2026, 4, 8, 11, 0)
        self.engine.record_repayment(self.loan.id, 333.33, "Cash", "Admin")
        self.clock.set(2026, 5, 9, 11, 0)
        self.engine.record_repayment(self.loan.id, 400, "Cash", "Admin")

        schedule = self.engine.project_schedule(self.loan.id)

        self.assertEqual(schedule.rows[0].actual, 333.33)
        self.assertEqual(schedule.rows[0].actual_date, datetime(2026, 4, 8, 11, 0))
        self.assertEqual(schedule.rows[1].actual, 400)
        self.assertIsNone(schedule.rows[2].actual)
        self.assertEqual(schedule.total_paid, 733.33)

    def test_earlier_repayments_ignored(self):
        # a repayment from an older loan of the same borrower
        self.store.append_transaction(Transaction(
            id="T-old", member_id="B", type=TransactionType.LOAN_REPAYMENT,
            amount=250, date=datetime(2025, 11, 10), loan_id="L-old",
        ))
        schedule = self.engine.project_schedule(self.loan.id)
        self.assertIsNone(schedule.rows[0].actual)
        self.assertEqual(schedule.total_paid, 0)

    def test_projection_writes_nothing(self):
        self.clock.set(2026, 4, 8)
        self.engine.record_repayment(self.loan.id, 333.33, "Cash", "Admin")
        before = (self.store.list_transactions(), self.store.get_loan(self.loan.id))

        first = self.engine.project_schedule(self.loan.id)
        second = self.engine.project_schedule(self.loan.id)

        self.assertEqual(first, second)
        self.assertEqual((self.store.list_transactions(), self.store.get_loan(self.loan.id)), before)

    def test_dataframe(self):
        df = self.engine.project_schedule(self.loan.id).to_dataframe()
        self.assertEqual(df.shape, (12, 5))
        self.assertEqual(list(df.columns), ["number", "due_date", "estimated", "actual", "actual_date"])

    def test_unknown_loan(self):
        with self.assertRaises(LoanNotFoundError):
            self.engine.project_schedule("L-missing")


class TestScheduleOverDatabase(unittest.TestCase):

    def test_repayment_in_same_second_as_issue_is_matched(self):
        db = DatabaseManager(":memory:")
        self.addCleanup(db.close)
        db.add_member(make_member("B", 1000))
        db.add_member(make_member("C", 500))
        clock = FixedClock(datetime(2026, 3, 15, 9, 30, 0, 100000))
        engine = LedgerEngine(db, clock)
        loan = engine.issue_loan("B", "C", 1200, 12)

        clock.now = datetime(2026, 3, 15, 9, 30, 0, 900000)
        engine.record_repayment(loan.id, 100, "Cash", "Admin")

        self.assertEqual(db.get_loan(loan.id).start_date, datetime(2026, 3, 15, 9, 30, 0, 100000))
        schedule = engine.project_schedule(loan.id)
        self.assertEqual(schedule.rows[0].actual, 100)
        self.assertEqual(schedule.rows[0].actual_date, datetime(2026, 3, 15, 9, 30, 0, 900000))
        self.assertEqual(schedule.total_paid, 100)


class TestScheduleRounding(unittest.TestCase):

    def test_capitalized_long_term(self):
        clock = FixedClock(datetime(2026, 6, 2))
        store = InMemoryStore(members=[make_member("B", 1000), make_member("C", 500)])
        engine = LedgerEngine(store, clock)
        loan = engine.issue_loan("B", "C", 2500, 24, "capitalized")

        schedule = engine.project_schedule(loan.id)
        self.assertEqual(loan.original_amount, 2570)
        self.assertEqual(schedule.monthly_payment, 107.08)
        self.assertEqual(len(schedule.rows), 24)
        self.assertEqual(schedule.rows[-1].due_date, date(2028, 6, 10))


if __name__ == '__main__':
    unittest.main()
