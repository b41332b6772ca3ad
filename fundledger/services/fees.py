"""Application fee schedule.

Flat tiers, not proportional to principal:

    amount < 2500            -> 30 (any term)
    amount >= 2500, 12 mo    -> 50
    amount >= 2500, 24 mo    -> 70
"""
from fundledger.config import (
    FEE_TIER_THRESHOLD,
    FEE_SMALL_LOAN,
    FEE_LARGE_LOAN_SHORT_TERM,
    FEE_LARGE_LOAN_LONG_TERM,
    LONG_TERM_MONTHS,
)
from fundledger.validation import require_amount, require_term


def compute_fee(amount, term_months):
    """Return the flat application fee for a requested principal and term.

    Raises:
        ValidationError: If the amount is not a positive finite number or the
            term is not an allowed term.
    """
    amount = require_amount(amount)
    term_months = require_term(term_months)

    if amount < FEE_TIER_THRESHOLD:
        return float(FEE_SMALL_LOAN)
    if term_months == LONG_TERM_MONTHS:
        return float(FEE_LARGE_LOAN_LONG_TERM)
    return float(FEE_LARGE_LOAN_SHORT_TERM)
