"""
Report generation module for FundLedger.
Fund position and contribution summaries derived from the ledger.
"""
import pandas as pd

from fundledger.config import CURRENCY_PLACES
from fundledger.models import FundSummary, TransactionType

TRANSACTION_COLUMNS = [
    "id", "member_id", "loan_id", "type", "amount", "date",
    "description", "payment_method", "received_by",
]


class ReportGenerator:
    def __init__(self, store):
        self.store = store

    def fund_summary(self) -> FundSummary:
        """Pooled contributions against money currently out on loan.

        Total loaned counts the original amount of every ACTIVE loan.
        """
        total_funds = round(sum(m.total_contribution for m in self.store.list_members()), CURRENCY_PLACES)
        active = self.store.active_loans()
        total_loaned = round(sum(l.original_amount for l in active), CURRENCY_PLACES)
        count = len(active)
        average = round(total_loaned / count, CURRENCY_PLACES) if count else 0.0

        return FundSummary(
            total_funds=total_funds,
            total_loaned=total_loaned,
            available_funds=round(total_funds - total_loaned, CURRENCY_PLACES),
            active_loan_count=count,
            average_loan=average,
        )

    def transactions_frame(self, member_id=None) -> pd.DataFrame:
        """The transaction log as a DataFrame, in append order."""
        rows = [
            {
                "id": t.id,
                "member_id": t.member_id,
                "loan_id": t.loan_id,
                "type": t.type,
                "amount": t.amount,
                "date": t.date,
                "description": t.description,
                "payment_method": t.payment_method,
                "received_by": t.received_by,
            }
            for t in self.store.list_transactions(member_id)
        ]
        return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)

    def contributions_by_year(self, member_id=None) -> pd.DataFrame:
        """CONTRIBUTION totals per member and calendar year.

        Columns: member_id, year, amount. Useful for checking the yearly
        side-ledger against what the transaction log actually recorded.
        """
        df = self.transactions_frame(member_id)
        df = df[df["type"] == TransactionType.CONTRIBUTION]
        if df.empty:
            return pd.DataFrame(columns=["member_id", "year", "amount"])

        df = df.assign(year=pd.to_datetime(df["date"]).dt.year)
        grouped = (
            df.groupby(["member_id", "year"], as_index=False)["amount"]
            .sum()
            .sort_values(by=["member_id", "year"])
            .reset_index(drop=True)
        )
        grouped["amount"] = grouped["amount"].round(CURRENCY_PLACES)
        return grouped
