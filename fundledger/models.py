"""Ledger entities and value objects for FundLedger.

Entities are plain dataclasses with no behavior. Members and loans refer to
each other by id only (`Member.active_loan_id`, `Loan.borrower_id`).
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

import pandas as pd


class AccountStatus:
    ACTIVE = "Active"
    INACTIVE = "Inactive"

    ALL = (ACTIVE, INACTIVE)


class LoanStatus:
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    DEFAULTED = "DEFAULTED"

    ALL = (ACTIVE, PAID, DEFAULTED)


class TransactionType:
    CONTRIBUTION = "CONTRIBUTION"
    LOAN_DISBURSAL = "LOAN_DISBURSAL"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"
    FEE = "FEE"

    ALL = (CONTRIBUTION, LOAN_DISBURSAL, LOAN_REPAYMENT, FEE)


class FeeDisposition:
    """How the application fee is settled at issuance."""
    UPFRONT = "upfront"
    CAPITALIZED = "capitalized"

    ALL = (UPFRONT, CAPITALIZED)


@dataclass
class Member:
    id: str
    name: str = ""
    account_status: str = AccountStatus.ACTIVE
    total_contribution: float = 0.0
    active_loan_id: Optional[str] = None
    last_loan_paid_date: Optional[datetime] = None
    email: str = ""
    phone: str = ""
    join_date: Optional[date] = None


@dataclass
class Loan:
    id: str
    borrower_id: str
    original_amount: float
    remaining_balance: float
    term_months: int
    start_date: datetime
    next_payment_due: date
    status: str = LoanStatus.ACTIVE
    cosigner_id: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Append-only ledger record. Never mutated once written."""
    id: str
    member_id: str
    type: str
    amount: float
    date: datetime
    description: str = ""
    payment_method: Optional[str] = None
    received_by: Optional[str] = None
    loan_id: Optional[str] = None


@dataclass
class YearlyContribution:
    """Amount a member contributed in one calendar year."""
    member_id: str
    year: int
    amount: float


@dataclass
class EligibilityResult:
    eligible: bool
    reason: Optional[str] = None
    limit: Optional[float] = None
    months_remaining: Optional[int] = None

    def __bool__(self):
        return self.eligible


@dataclass
class ScheduleRow:
    number: int
    due_date: date
    estimated: float
    actual: Optional[float] = None
    actual_date: Optional[datetime] = None


@dataclass
class LoanSchedule:
    """Projected installments for a loan, matched against observed repayments.

    Best-effort reporting only: the i-th repayment is assumed to settle the
    i-th installment. The loan's remaining balance is the authoritative figure.
    """
    loan_id: str
    monthly_payment: float
    rows: List[ScheduleRow] = field(default_factory=list)
    total_paid: float = 0.0

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "number": r.number,
                    "due_date": r.due_date,
                    "estimated": r.estimated,
                    "actual": r.actual,
                    "actual_date": r.actual_date,
                }
                for r in self.rows
            ],
            columns=["number", "due_date", "estimated", "actual", "actual_date"],
        )


@dataclass
class FundSummary:
    total_funds: float
    total_loaned: float
    available_funds: float
    active_loan_count: int
    average_loan: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "total_funds": self.total_funds,
            "total_loaned": self.total_loaned,
            "available_funds": self.available_funds,
            "active_loan_count": self.active_loan_count,
            "average_loan": self.average_loan,
        }
