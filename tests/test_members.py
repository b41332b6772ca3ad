"""Tests for member enrollment, status changes and guarded deletion."""
import unittest
from datetime import date, datetime

from ledger_fixtures import FixedClock, make_member

from fundledger.database import DatabaseManager
from fundledger.engine import LedgerEngine
from fundledger.exceptions import (
    DuplicateMemberError,
    MemberDeletionBlockedError,
    MemberNotFoundError,
    ValidationError,
)
from fundledger.models import AccountStatus
from fundledger.result import ErrorType
from fundledger.store import InMemoryStore


class TestAddMember(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock(datetime(2026, 1, 12, 9, 0))
        self.store = InMemoryStore()
        self.engine = LedgerEngine(self.store, self.clock)

    def test_new_member_defaults(self):
        member = self.engine.add_member("MC-000001", "Ana Lopez", email="ana@example.org")

        stored = self.store.get_member("MC-000001")
        self.assertEqual(stored, member)
        self.assertEqual(stored.account_status, AccountStatus.ACTIVE)
        self.assertEqual(stored.total_contribution, 0)
        self.assertIsNone(stored.active_loan_id)
        self.assertIsNone(stored.last_loan_paid_date)
        self.assertEqual(stored.join_date, date(2026, 1, 12))

    def test_duplicate_id(self):
        self.engine.add_member("MC-000001", "Ana Lopez")
        with self.assertRaises(DuplicateMemberError):
            self.engine.add_member("MC-000001", "Someone Else")
        self.assertEqual(self.store.get_member("MC-000001").name, "Ana Lopez")

    def test_blank_fields(self):
        with self.assertRaises(ValidationError):
            self.engine.add_member("", "Ana Lopez")
        with self.assertRaises(ValidationError):
            self.engine.add_member("MC-000001", "  ")
        self.assertEqual(self.store.list_members(), [])

    def test_batch_skips_blank_and_duplicate_rows(self):
        self.engine.add_member("MC-000001", "Ana Lopez")
        created = self.engine.add_members([
            {"id": "MC-000001", "name": "Ana Again"},
            {"id": "MC-000002", "name": "Ben Okafor", "email": "ben@example.org"},
            {"id": "MC-000002", "name": "Ben Twice"},
            {"id": "", "name": "No Id"},
            {"id": "MC-000003", "name": ""},
            {"id": " MC-000004 ", "name": " Chen Wei ", "join_date": date(2024, 5, 1)},
        ])

        self.assertEqual([m.id for m in created], ["MC-000002", "MC-000004"])
        self.assertEqual(len(self.store.list_members()), 3)
        self.assertEqual(self.store.get_member("MC-000004").name, "Chen Wei")
        self.assertEqual(self.store.get_member("MC-000004").join_date, date(2024, 5, 1))
        self.assertEqual(self.store.get_member("MC-000001").name, "Ana Lopez")

    def test_batch_accepts_numeric_ids(self):
        # ids parsed from a spreadsheet often arrive as numbers
        created = self.engine.add_members([
            {"id": 1042, "name": "Dee Moss"},
            {"id": None, "name": "No Id"},
        ])

        self.assertEqual([m.id for m in created], ["1042"])
        self.assertEqual(self.store.get_member("1042").name, "Dee Moss")


class TestAccountStatus(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock(datetime(2026, 1, 12))
        self.store = InMemoryStore(members=[make_member("A", 100)])
        self.engine = LedgerEngine(self.store, self.clock)

    def test_deactivate_blocks_borrowing(self):
        self.engine.set_account_status("A", AccountStatus.INACTIVE)
        self.assertEqual(self.store.get_member("A").account_status, AccountStatus.INACTIVE)
        self.assertEqual(self.engine.evaluate_eligibility("A").reason, "inactive account")

        self.engine.set_account_status("A", AccountStatus.ACTIVE)
        self.assertTrue(self.engine.evaluate_eligibility("A").eligible)

    def test_unknown_status_or_member(self):
        with self.assertRaises(ValidationError):
            self.engine.set_account_status("A", "Suspended")
        with self.assertRaises(MemberNotFoundError):
            self.engine.set_account_status("NOPE", AccountStatus.INACTIVE)


class TestDeleteMember(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock(datetime(2026, 3, 15))
        self.store = InMemoryStore(members=[
            make_member("B", 1000),
            make_member("C", 500),
            make_member("D", 50),
        ])
        self.engine = LedgerEngine(self.store, self.clock)

    def test_free_member_deleted(self):
        self.engine.set_yearly_contribution("D", 2025, 50)
        self.assertTrue(self.engine.can_delete_member("D"))

        self.engine.delete_member("D")
        self.assertIsNone(self.store.get_member("D"))
        self.assertEqual(self.store.get_yearly_contributions("D"), {})

    def test_borrower_and_cosigner_protected(self):
        loan = self.engine.issue_loan("B", "C", 1000, 12)

        check = self.engine.can_delete_member("B")
        self.assertFalse(check)
        self.assertEqual(check.error_type, ErrorType.ACTIVE_LOAN)
        self.assertEqual(self.engine.can_delete_member("C").error_type, ErrorType.ACTIVE_COSIGNER)

        with self.assertRaises(MemberDeletionBlockedError):
            self.engine.delete_member("B")
        with self.assertRaises(MemberDeletionBlockedError):
            self.engine.delete_member("C")
        self.assertIsNotNone(self.store.get_member("B"))
        self.assertIsNotNone(self.store.get_member("C"))

        self.clock.set(2026, 4, 1)
        self.engine.record_repayment(loan.id, 1000, "Cash", "Admin")
        self.assertTrue(self.engine.can_delete_member("C"))

    def test_unknown_member(self):
        self.assertEqual(self.engine.can_delete_member("NOPE").error_type, ErrorType.NOT_FOUND)
        with self.assertRaises(MemberNotFoundError):
            self.engine.delete_member("NOPE")


class TestMembersOverDatabase(unittest.TestCase):

    def test_add_and_delete(self):
        with DatabaseManager(":memory:") as db:
            engine = LedgerEngine(db, FixedClock(datetime(2026, 1, 12)))
            engine.add_member("MC-000001", "Ana Lopez", phone="555-0100")

            stored = db.get_member("MC-000001")
            self.assertEqual(stored.phone, "555-0100")
            self.assertEqual(stored.join_date, date(2026, 1, 12))

            engine.delete_member("MC-000001")
            self.assertIsNone(db.get_member("MC-000001"))


if __name__ == '__main__':
    unittest.main()
