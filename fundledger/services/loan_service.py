"""Loan issuance service for FundLedger.

This service handles:
- Loan issuance (eligibility, cosigner and limit checks, fee disposition)
- Administrative default of an active loan
"""
import structlog

from fundledger.config import CURRENCY_PLACES
from fundledger.dates import first_due_date
from fundledger.exceptions import (
    CosignerError,
    IneligibleMemberError,
    LoanInactiveError,
    LoanLimitExceededError,
    LoanNotFoundError,
    MemberNotFoundError,
)
from fundledger.ids import new_id, LOAN_PREFIX, TRANSACTION_PREFIX
from fundledger.models import (
    AccountStatus,
    FeeDisposition,
    Loan,
    LoanStatus,
    Transaction,
    TransactionType,
)
from fundledger.services.eligibility import EligibilityEvaluator
from fundledger.services.fees import compute_fee
from fundledger.validation import require_amount, require_disposition, require_id, require_term

logger = structlog.get_logger(__name__)


class LoanService:
    """Creates loans and moves them out of ACTIVE by administrative action.

    Repayments are handled by RepaymentProcessor; this class never changes a
    loan's balance after issuance.
    """

    def __init__(self, store, clock, eligibility=None):
        """Initialize LoanService.

        Args:
            store: LedgerStore for members, loans and the transaction log.
            clock: Callable returning the current datetime.
            eligibility: Optional EligibilityEvaluator sharing the same store.
        """
        self.store = store
        self.clock = clock
        self.eligibility = eligibility or EligibilityEvaluator(store, clock)

    def issue_loan(self, borrower_id, cosigner_id, amount, term_months,
                   fee_disposition=FeeDisposition.UPFRONT):
        """Issue a new loan to an eligible member.

        Args:
            borrower_id: Member receiving the loan.
            cosigner_id: Second member jointly liable for the loan.
            amount: Requested principal, paid out in the disbursal.
            term_months: 12 or 24.
            fee_disposition: "upfront" (fee collected outside the ledger) or
                "capitalized" (fee added to the principal).

        Returns:
            The new Loan.

        Raises:
            ValidationError: Bad amount, term or disposition.
            MemberNotFoundError: Borrower or cosigner does not exist.
            IneligibleMemberError: Borrower fails the eligibility rules.
            CosignerError: Cosigner missing, same as borrower, inactive, or
                already backing another active loan.
            LoanLimitExceededError: Amount above the eligibility limit.
        """
        amount = require_amount(amount)
        term_months = require_term(term_months)
        fee_disposition = require_disposition(fee_disposition)

        if not cosigner_id:
            self._reject("missing_cosigner", borrower_id=borrower_id)
            raise CosignerError("A cosigner is required for all loans", {'borrower_id': borrower_id})
        require_id(borrower_id, "borrower_id")
        require_id(cosigner_id, "cosigner_id")

        borrower = self.store.get_member(borrower_id)
        if borrower is None:
            raise MemberNotFoundError(borrower_id)

        eligibility = self.eligibility.evaluate(borrower_id)
        if not eligibility.eligible:
            self._reject("ineligible", borrower_id=borrower_id, reason=eligibility.reason)
            raise IneligibleMemberError(borrower_id, eligibility.reason)

        self._check_cosigner(borrower_id, cosigner_id)

        if amount > eligibility.limit:
            self._reject("over_limit", borrower_id=borrower_id, amount=amount, limit=eligibility.limit)
            raise LoanLimitExceededError(amount, eligibility.limit, borrower_id)

        fee = compute_fee(amount, term_months)
        principal = amount
        if fee_disposition == FeeDisposition.CAPITALIZED:
            principal = round(amount + fee, CURRENCY_PLACES)

        now = self.clock()
        loan = Loan(
            id=new_id(LOAN_PREFIX, lambda i: self.store.get_loan(i) is not None),
            borrower_id=borrower_id,
            cosigner_id=cosigner_id,
            original_amount=principal,
            remaining_balance=principal,
            term_months=term_months,
            status=LoanStatus.ACTIVE,
            start_date=now,
            next_payment_due=first_due_date(now),
        )

        if fee_disposition == FeeDisposition.CAPITALIZED:
            fee_note = f"Application Fee ({term_months} Mo) - Added to Principal"
        else:
            fee_note = f"Application Fee ({term_months} Mo) - Paid Upfront"

        disbursal = Transaction(
            id=self._new_transaction_id(),
            member_id=borrower_id,
            loan_id=loan.id,
            type=TransactionType.LOAN_DISBURSAL,
            amount=amount,
            date=now,
            description="Loan Disbursal",
        )
        fee_tx = Transaction(
            id=self._new_transaction_id(exclude=disbursal.id),
            member_id=borrower_id,
            loan_id=loan.id,
            type=TransactionType.FEE,
            amount=fee,
            date=now,
            description=fee_note,
        )

        borrower.active_loan_id = loan.id

        with self.store.transaction():
            self.store.add_loan(loan)
            self.store.update_member(borrower)
            self.store.append_transaction(disbursal)
            self.store.append_transaction(fee_tx)

        logger.info(
            "loan_issued",
            loan_id=loan.id,
            borrower_id=borrower_id,
            cosigner_id=cosigner_id,
            amount=amount,
            fee=fee,
            fee_disposition=fee_disposition,
            principal=principal,
            term_months=term_months,
            next_payment_due=str(loan.next_payment_due),
        )
        return loan

    def mark_defaulted(self, loan_id, reason=""):
        """Administrative override: move an ACTIVE loan to DEFAULTED.

        The borrower's active loan link is cleared so that a member points at
        a loan only while that loan is ACTIVE. DEFAULTED is terminal.

        Raises:
            LoanNotFoundError: If the loan doesn't exist.
            LoanInactiveError: If the loan is not active.
        """
        loan = self.store.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise LoanInactiveError(loan_id, loan.status)

        loan.status = LoanStatus.DEFAULTED
        borrower = self.store.get_member(loan.borrower_id)

        with self.store.transaction():
            self.store.update_loan(loan)
            if borrower is not None and borrower.active_loan_id == loan.id:
                borrower.active_loan_id = None
                self.store.update_member(borrower)

        logger.warning("loan_defaulted", loan_id=loan_id, borrower_id=loan.borrower_id,
                       remaining_balance=loan.remaining_balance, reason=reason)
        return loan

    def _check_cosigner(self, borrower_id, cosigner_id):
        if cosigner_id == borrower_id:
            self._reject("self_cosigned", borrower_id=borrower_id)
            raise CosignerError("Cosigner must be a different member than the borrower",
                                {'borrower_id': borrower_id, 'cosigner_id': cosigner_id})

        cosigner = self.store.get_member(cosigner_id)
        if cosigner is None:
            raise MemberNotFoundError(cosigner_id)
        if cosigner.account_status != AccountStatus.ACTIVE:
            self._reject("inactive_cosigner", borrower_id=borrower_id, cosigner_id=cosigner_id)
            raise CosignerError(f"Cosigner '{cosigner_id}' does not have an active account",
                                {'cosigner_id': cosigner_id, 'status': cosigner.account_status})
        if self.store.is_active_cosigner(cosigner_id):
            self._reject("cosigner_busy", borrower_id=borrower_id, cosigner_id=cosigner_id)
            raise CosignerError(f"Cosigner '{cosigner_id}' is already cosigning an active loan",
                                {'cosigner_id': cosigner_id})

    def _new_transaction_id(self, exclude=None):
        return new_id(
            TRANSACTION_PREFIX,
            lambda i: i == exclude or self.store.get_transaction(i) is not None,
        )

    @staticmethod
    def _reject(rule, **fields):
        logger.warning("loan_issue_rejected", rule=rule, **fields)
