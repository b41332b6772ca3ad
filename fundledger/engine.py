"""Business logic engine for FundLedger.

This module provides the LedgerEngine class which acts as a facade over
the focused service classes in fundledger/services/. It is the surface the
surrounding application (forms, import/export, reporting views) talks to.

Service Classes:
    - EligibilityEvaluator: Loan eligibility and limit
    - LoanService: Loan issuance and administrative default
    - RepaymentProcessor: Repayments, late fees, payoff
    - ContributionService: Contributions and yearly history
    - MemberService: Enrollment and guarded deletion
    - ScheduleProjector: Read-only installment schedules
"""
from datetime import datetime

from fundledger.exceptions import LoanNotFoundError
from fundledger.models import FeeDisposition
from fundledger.reports import ReportGenerator
from fundledger.services import (
    ContributionService,
    EligibilityEvaluator,
    LoanService,
    MemberService,
    RepaymentProcessor,
    ScheduleProjector,
    compute_fee,
)


class LedgerEngine:
    """Handles ledger operations over one store.

    The engine keeps no entity state. Everything is read from and written
    to `store`, so the same engine works over a SQLite database or an
    in-memory snapshot supplied by the caller.

    Attributes:
        store: LedgerStore (DatabaseManager or InMemoryStore).
        clock: Callable returning the current datetime; injectable for tests.
    """

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.now
        self._eligibility = EligibilityEvaluator(store, self.clock)
        self._loan_service = LoanService(store, self.clock, self._eligibility)
        self._repayments = RepaymentProcessor(store, self.clock)
        self._contributions = ContributionService(store, self.clock)
        self._members = MemberService(store, self.clock)
        self._schedule = ScheduleProjector(store)
        self._reports = ReportGenerator(store)

    # Core ledger operations
    def evaluate_eligibility(self, member_id):
        return self._eligibility.evaluate(member_id)

    def compute_fee(self, amount, term_months):
        return compute_fee(amount, term_months)

    def issue_loan(self, borrower_id, cosigner_id, amount, term_months,
                   fee_disposition=FeeDisposition.UPFRONT):
        return self._loan_service.issue_loan(borrower_id, cosigner_id, amount, term_months, fee_disposition)

    def record_repayment(self, loan_id, amount, method=None, received_by=None):
        return self._repayments.repay(loan_id, amount, method, received_by)

    def record_contribution(self, member_id, amount, method=None, received_by=None):
        return self._contributions.record_contribution(member_id, amount, method, received_by)

    def project_schedule(self, loan_id):
        return self._schedule.project(loan_id)

    def payable_amount(self, loan_id):
        """Balance plus the late fee a payment made now would incur."""
        loan = self.store.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)
        return self._repayments.payable_amount(loan)

    # Administration
    def mark_defaulted(self, loan_id, reason=""):
        return self._loan_service.mark_defaulted(loan_id, reason)

    def add_member(self, member_id, name, email="", phone="", join_date=None):
        return self._members.add_member(member_id, name, email, phone, join_date)

    def add_members(self, records):
        return self._members.add_members(records)

    def set_account_status(self, member_id, status):
        return self._members.set_account_status(member_id, status)

    def can_delete_member(self, member_id):
        return self._members.can_delete_member(member_id)

    def delete_member(self, member_id):
        self._members.delete_member(member_id)

    # Yearly contribution history
    def get_yearly_contributions(self, member_id):
        return self._contributions.get_yearly_contributions(member_id)

    def set_yearly_contribution(self, member_id, year, amount):
        return self._contributions.set_yearly_contribution(member_id, year, amount)

    def delete_yearly_contribution(self, member_id, year):
        self._contributions.delete_yearly_contribution(member_id, year)

    def reconcile_contributions(self, member_id, apply=False):
        return self._contributions.reconcile_contributions(member_id, apply)

    # Reporting
    def fund_summary(self):
        return self._reports.fund_summary()

    def contributions_by_year(self, member_id=None):
        return self._reports.contributions_by_year(member_id)

    def transactions_frame(self, member_id=None):
        return self._reports.transactions_frame(member_id)
