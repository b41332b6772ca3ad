"""Read-only amortization schedule projection."""
from fundledger.config import CURRENCY_PLACES
from fundledger.dates import installment_due_date
from fundledger.exceptions import LoanNotFoundError
from fundledger.models import LoanSchedule, ScheduleRow, TransactionType


class ScheduleProjector:
    """Derives a flat installment schedule from a loan and its repayments.

    Installments are originalAmount / termMonths, due on the 10th of each
    month after the start month. The borrower's repayments dated after the
    loan start are matched to installments by position: the first repayment
    fills installment 1, the second installment 2, and so on. Partial or
    double payments are not redistributed.
    """

    def __init__(self, store):
        self.store = store

    def project(self, loan_id) -> LoanSchedule:
        loan = self.store.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(loan_id)

        monthly_payment = round(loan.original_amount / loan.term_months, CURRENCY_PLACES)

        repayments = [
            t for t in self.store.list_transactions(loan.borrower_id)
            if t.type == TransactionType.LOAN_REPAYMENT and t.date > loan.start_date
        ]
        # stable: same-timestamp rows keep log order
        repayments.sort(key=lambda t: t.date)

        schedule = LoanSchedule(loan_id=loan.id, monthly_payment=monthly_payment)
        total_paid = 0.0
        for number in range(1, loan.term_months + 1):
            payment = repayments[number - 1] if number <= len(repayments) else None
            if payment is not None:
                total_paid += payment.amount
            schedule.rows.append(ScheduleRow(
                number=number,
                due_date=installment_due_date(loan.start_date, number),
                estimated=monthly_payment,
                actual=payment.amount if payment else None,
                actual_date=payment.date if payment else None,
            ))

        schedule.total_paid = round(total_paid, CURRENCY_PLACES)
        return schedule
