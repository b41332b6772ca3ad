"""Loan eligibility rules.

Rules are checked in order and the first failing rule decides the reason:

1. Member must exist.
2. Account must be Active.
3. No outstanding loan of their own.
4. Positive contribution total.
5. Not cosigning another ACTIVE loan.
6. At least 3 calendar months since the last loan was paid off.

An eligible member may borrow up to min(total contribution * 4, 5000).
"""
import math

from fundledger.config import COOL_OFF_MONTHS, LOAN_LIMIT_MULTIPLIER, MAX_LOAN_AMOUNT, CURRENCY_PLACES
from fundledger.dates import month_diff
from fundledger.models import AccountStatus, EligibilityResult

REASON_NOT_FOUND = "not found"
REASON_INACTIVE = "inactive account"
REASON_ACTIVE_LOAN = "active loan exists"
REASON_NO_CONTRIBUTIONS = "no contributions"
REASON_ACTIVE_COSIGNER = "active cosigner on another loan"
REASON_INVALID_TOTAL = "invalid contribution total"


def cool_off_reason(months_remaining):
    unit = "month" if months_remaining == 1 else "months"
    return f"cool-off period: {months_remaining} {unit} remaining"


def loan_limit(total_contribution):
    return round(min(total_contribution * LOAN_LIMIT_MULTIPLIER, MAX_LOAN_AMOUNT), CURRENCY_PLACES)


class EligibilityEvaluator:
    """Decides whether a member may take a new loan and how much."""

    def __init__(self, store, clock):
        """Initialize EligibilityEvaluator.

        Args:
            store: LedgerStore to read members and loans from.
            clock: Callable returning the current datetime.
        """
        self.store = store
        self.clock = clock

    def evaluate(self, member_id) -> EligibilityResult:
        member = self.store.get_member(member_id)
        if member is None:
            return EligibilityResult(False, REASON_NOT_FOUND)

        if member.account_status == AccountStatus.INACTIVE:
            return EligibilityResult(False, REASON_INACTIVE)
        if member.active_loan_id:
            return EligibilityResult(False, REASON_ACTIVE_LOAN)
        if not math.isfinite(member.total_contribution):
            return EligibilityResult(False, REASON_INVALID_TOTAL)
        if member.total_contribution <= 0:
            return EligibilityResult(False, REASON_NO_CONTRIBUTIONS)
        if self.store.is_active_cosigner(member.id):
            return EligibilityResult(False, REASON_ACTIVE_COSIGNER)

        if member.last_loan_paid_date is not None:
            months_since = month_diff(member.last_loan_paid_date, self.clock())
            if months_since < COOL_OFF_MONTHS:
                remaining = COOL_OFF_MONTHS - months_since
                return EligibilityResult(False, cool_off_reason(remaining), months_remaining=remaining)

        return EligibilityResult(True, limit=loan_limit(member.total_contribution))
