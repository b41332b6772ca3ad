"""Contribution service for FundLedger.

This service handles:
- Recording contributions (append to log, raise member total)
- The yearly contribution side-ledger and its manual reconciliation
"""
import structlog

from fundledger.config import (
    CURRENCY_PLACES,
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_RECEIVED_BY,
    SETTING_PAYMENT_METHOD,
    SETTING_RECEIVED_BY,
)
from fundledger.exceptions import MemberNotFoundError
from fundledger.ids import new_id, TRANSACTION_PREFIX
from fundledger.models import Transaction, TransactionType, YearlyContribution
from fundledger.result import ErrorType, Result
from fundledger.validation import require_amount, require_non_negative, require_year

logger = structlog.get_logger(__name__)

CONTRIBUTION_DESCRIPTION = "Monthly Contribution"


class ContributionService:
    """Records member contributions.

    Contributions are always accepted: there is no cap and no eligibility
    gate, and Inactive members may still contribute.
    """

    def __init__(self, store, clock):
        """Initialize ContributionService.

        Args:
            store: LedgerStore for members and the transaction log.
            clock: Callable returning the current datetime.
        """
        self.store = store
        self.clock = clock

    def record_contribution(self, member_id, amount, method=None, received_by=None,
                            description=CONTRIBUTION_DESCRIPTION):
        """Append a CONTRIBUTION transaction and raise the member's total.

        Returns:
            The appended Transaction.

        Raises:
            ValidationError: If the amount is not a positive finite number.
            MemberNotFoundError: If the member doesn't exist.
        """
        amount = require_amount(amount)

        member = self.store.get_member(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)

        method = method or self.store.get_setting(SETTING_PAYMENT_METHOD, DEFAULT_PAYMENT_METHOD)
        received_by = received_by or self.store.get_setting(SETTING_RECEIVED_BY, DEFAULT_RECEIVED_BY)

        transaction = Transaction(
            id=new_id(TRANSACTION_PREFIX, lambda i: self.store.get_transaction(i) is not None),
            member_id=member_id,
            type=TransactionType.CONTRIBUTION,
            amount=amount,
            date=self.clock(),
            description=description,
            payment_method=method,
            received_by=received_by,
        )
        member.total_contribution = round(member.total_contribution + amount, CURRENCY_PLACES)

        with self.store.transaction():
            self.store.append_transaction(transaction)
            self.store.update_member(member)

        logger.info("contribution_recorded", member_id=member_id, transaction_id=transaction.id,
                    amount=amount, total_contribution=member.total_contribution)
        return transaction

    # Yearly side-ledger
    def get_yearly_contributions(self, member_id):
        """Yearly history as a list of YearlyContribution, oldest year first."""
        self._require_member(member_id)
        history = self.store.get_yearly_contributions(member_id)
        return [YearlyContribution(member_id, year, history[year]) for year in sorted(history)]

    def set_yearly_contribution(self, member_id, year, amount):
        """Add or correct one year of history. Does not touch the member total."""
        self._require_member(member_id)
        year = require_year(year)
        amount = require_non_negative(amount)
        self.store.set_yearly_contribution(member_id, year, amount)
        return YearlyContribution(member_id, year, amount)

    def delete_yearly_contribution(self, member_id, year):
        self._require_member(member_id)
        self.store.delete_yearly_contribution(member_id, require_year(year))

    def reconcile_contributions(self, member_id, apply=False):
        """Compare the yearly history with the member's total.

        Args:
            member_id: Member to reconcile.
            apply: When True, overwrite the member total with the yearly sum.

        Returns:
            Result.ok(total) when the figures agree (or were made to agree),
            otherwise Result.fail with error_type MISMATCH and the yearly sum
            as value.
        """
        member = self._require_member(member_id)
        history = self.store.get_yearly_contributions(member_id)
        yearly_total = round(sum(history.values()), CURRENCY_PLACES)

        if abs(yearly_total - member.total_contribution) < 0.005:
            return Result.ok(yearly_total)

        if not apply:
            return Result.fail(
                f"Yearly history totals {yearly_total} but member total is {member.total_contribution}",
                ErrorType.MISMATCH,
                value=yearly_total,
            )

        previous = member.total_contribution
        member.total_contribution = yearly_total
        with self.store.transaction():
            self.store.update_member(member)

        logger.info("yearly_contributions_reconciled", member_id=member_id,
                    previous_total=previous, total_contribution=yearly_total)
        return Result.ok(yearly_total)

    def _require_member(self, member_id):
        member = self.store.get_member(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member
