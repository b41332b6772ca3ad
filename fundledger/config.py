"""Centralized configuration for the FundLedger core.

This module contains all policy numbers, default values, and business rule
constants used by the ledger services.
"""

# =============================================================================
# LOAN POLICY
# =============================================================================

# Loan limit is this multiple of the member's total contribution
LOAN_LIMIT_MULTIPLIER = 4

# Hard cap on any single loan, regardless of contribution size
MAX_LOAN_AMOUNT = 5000

# Allowed loan terms in months
ALLOWED_TERMS = (12, 24)

# Months a member must wait after paying off a loan before borrowing again
COOL_OFF_MONTHS = 3

# Day of the month on which every installment falls due
PAYMENT_DUE_DAY = 10

# =============================================================================
# FEES
# =============================================================================

# Principal at or above which the higher fee tier applies
FEE_TIER_THRESHOLD = 2500

# Flat application fee below the threshold (any term)
FEE_SMALL_LOAN = 30

# Flat application fees at or above the threshold
FEE_LARGE_LOAN_SHORT_TERM = 50
FEE_LARGE_LOAN_LONG_TERM = 70

# Term that selects the long-term fee
LONG_TERM_MONTHS = 24

# Charged when a repayment arrives after the due date
LATE_FEE = 5.00

# =============================================================================
# ROUNDING
# =============================================================================

# Tolerance for float drift on balances and payment caps
BALANCE_EPSILON = 0.01

# Decimal places kept on currency amounts
CURRENCY_PLACES = 2

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_PAYMENT_METHOD = "Cash"
DEFAULT_RECEIVED_BY = "Admin"

# Settings keys (stored in the settings table)
SETTING_PAYMENT_METHOD = "default_payment_method"
SETTING_RECEIVED_BY = "default_received_by"

# =============================================================================
# STORAGE FORMATS
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Timestamp format for storage
DATETIME_FORMAT_STORAGE = "%Y-%m-%d %H:%M:%S"

# Timestamps with a sub-second part keep it to the microsecond
DATETIME_FORMAT_STORAGE_FRACTIONAL = "%Y-%m-%d %H:%M:%S.%f"
