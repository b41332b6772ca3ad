"""Repayment processing for FundLedger.

A repayment is applied against an ACTIVE loan as a single atomic step:

1. If today is past the due date, a 5.00 late fee is added to the balance
   and logged as a FEE transaction.
2. The payment is subtracted. Balances within 0.01 of zero snap to zero.
3. A zero balance closes the loan (PAID), clears the borrower's active loan
   and stamps their payoff date. Otherwise the due date rolls forward one
   month, pinned to the 10th.
4. The LOAN_REPAYMENT transaction is appended, followed by the late fee
   transaction if one applied. Both carry the same timestamp.
"""
import structlog

from fundledger.config import (
    BALANCE_EPSILON,
    CURRENCY_PLACES,
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_RECEIVED_BY,
    LATE_FEE,
    SETTING_PAYMENT_METHOD,
    SETTING_RECEIVED_BY,
)
from fundledger.dates import advance_due_date, is_past_due
from fundledger.exceptions import LoanInactiveError, LoanNotFoundError, PaymentExceedsBalanceError
from fundledger.ids import new_id, TRANSACTION_PREFIX
from fundledger.models import LoanStatus, Transaction, TransactionType
from fundledger.validation import require_amount

logger = structlog.get_logger(__name__)

LATE_FEE_DESCRIPTION = "Late Fee: Missed Payment Due Date"
REPAYMENT_DESCRIPTION = "Loan Repayment"


class RepaymentProcessor:
    """Applies payments to loans."""

    def __init__(self, store, clock):
        """Initialize RepaymentProcessor.

        Args:
            store: LedgerStore for members, loans and the transaction log.
            clock: Callable returning the current datetime.
        """
        self.store = store
        self.clock = clock

    def late_fee_due(self, loan, now=None):
        """Late fee that a payment made at `now` would incur."""
        now = now or self.clock()
        return LATE_FEE if is_past_due(now, loan.next_payment_due) else 0.0

    def payable_amount(self, loan, now=None):
        """Largest payment accepted right now: balance plus any late fee."""
        return round(loan.remaining_balance + self.late_fee_due(loan, now), CURRENCY_PLACES)

    def repay(self, loan_id, amount, method=None, received_by=None):
        """Apply a payment to a loan.

        Args:
            loan_id: Loan being repaid.
            amount: Payment amount, greater than zero.
            method: Payment method label (defaults to the configured method).
            received_by: Who took the payment (defaults to the configured receiver).

        Returns:
            The updated Loan.

        Raises:
            ValidationError: If the amount is not a positive finite number.
            LoanNotFoundError: If the loan doesn't exist.
            LoanInactiveError: If the loan is PAID or DEFAULTED.
            PaymentExceedsBalanceError: If the amount is above balance + late fee.
        """
        amount = require_amount(amount)

        loan = self.store.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)
        if loan.status != LoanStatus.ACTIVE:
            logger.warning("repayment_rejected", loan_id=loan_id, rule="inactive", status=loan.status)
            raise LoanInactiveError(loan_id, loan.status)

        now = self.clock()
        late_fee = self.late_fee_due(loan, now)
        payable = self.payable_amount(loan, now)
        if amount > payable + BALANCE_EPSILON:
            logger.warning("repayment_rejected", loan_id=loan_id, rule="exceeds_balance",
                           amount=amount, payable=payable)
            raise PaymentExceedsBalanceError(amount, payable, loan_id)

        method = method or self.store.get_setting(SETTING_PAYMENT_METHOD, DEFAULT_PAYMENT_METHOD)
        received_by = received_by or self.store.get_setting(SETTING_RECEIVED_BY, DEFAULT_RECEIVED_BY)

        new_balance = max(0.0, round(loan.remaining_balance + late_fee - amount, CURRENCY_PLACES))
        if new_balance < BALANCE_EPSILON:
            new_balance = 0.0

        loan.remaining_balance = new_balance
        borrower = None
        if new_balance == 0:
            loan.status = LoanStatus.PAID
            borrower = self.store.get_member(loan.borrower_id)
            if borrower is not None:
                borrower.active_loan_id = None
                borrower.last_loan_paid_date = now
        else:
            loan.next_payment_due = advance_due_date(loan.next_payment_due)

        repayment_tx = Transaction(
            id=self._new_transaction_id(),
            member_id=loan.borrower_id,
            loan_id=loan.id,
            type=TransactionType.LOAN_REPAYMENT,
            amount=amount,
            date=now,
            description=REPAYMENT_DESCRIPTION,
            payment_method=method,
            received_by=received_by,
        )
        fee_tx = None
        if late_fee:
            fee_tx = Transaction(
                id=self._new_transaction_id(exclude=repayment_tx.id),
                member_id=loan.borrower_id,
                loan_id=loan.id,
                type=TransactionType.FEE,
                amount=late_fee,
                date=now,
                description=LATE_FEE_DESCRIPTION,
            )

        with self.store.transaction():
            self.store.update_loan(loan)
            if borrower is not None:
                self.store.update_member(borrower)
            self.store.append_transaction(repayment_tx)
            if fee_tx is not None:
                self.store.append_transaction(fee_tx)

        if fee_tx is not None:
            logger.info("late_fee_applied", loan_id=loan.id, fee=late_fee)
        logger.info(
            "repayment_recorded",
            loan_id=loan.id,
            borrower_id=loan.borrower_id,
            amount=amount,
            remaining_balance=loan.remaining_balance,
            status=loan.status,
            next_payment_due=str(loan.next_payment_due),
        )
        if loan.status == LoanStatus.PAID:
            logger.info("loan_paid_off", loan_id=loan.id, borrower_id=loan.borrower_id)
        return loan

    def _new_transaction_id(self, exclude=None):
        return new_id(
            TRANSACTION_PREFIX,
            lambda i: i == exclude or self.store.get_transaction(i) is not None,
        )
