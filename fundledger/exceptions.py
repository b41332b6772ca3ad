"""Custom exceptions for the FundLedger core."""


class FundLedgerError(Exception):
    """Base exception for all FundLedger errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------

class ValidationError(FundLedgerError):
    """Raised when an argument has the wrong shape or range."""
    pass


class PolicyViolation(FundLedgerError):
    """Raised when a business rule refuses the operation."""
    pass


class NotFoundError(FundLedgerError):
    """Raised when a referenced member or loan does not exist."""
    pass


class DatabaseError(FundLedgerError):
    """Raised when a database operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass


# -----------------------------------------------------------------------------
# Not found
# -----------------------------------------------------------------------------

class MemberNotFoundError(NotFoundError):
    """Raised when a member cannot be found."""

    def __init__(self, member_id: str = None):
        details = {}
        message = "Member not found"
        if member_id:
            details['member_id'] = member_id
            message = f"Member '{member_id}' not found"
        super().__init__(message, details)


class LoanNotFoundError(NotFoundError):
    """Raised when a loan cannot be found."""

    def __init__(self, loan_id: str = None):
        details = {}
        message = "Loan not found"
        if loan_id:
            details['loan_id'] = loan_id
            message = f"Loan '{loan_id}' not found"
        super().__init__(message, details)


# -----------------------------------------------------------------------------
# Policy
# -----------------------------------------------------------------------------

class LoanInactiveError(PolicyViolation):
    """Raised when an operation requires an active loan but the loan is not active."""

    def __init__(self, loan_id: str, status: str):
        details = {
            'loan_id': loan_id,
            'status': status
        }
        message = f"Loan '{loan_id}' is not active (status: {status})"
        super().__init__(message, details)


class IneligibleMemberError(PolicyViolation):
    """Raised when a member fails the loan eligibility rules."""

    def __init__(self, member_id: str, reason: str):
        details = {
            'member_id': member_id,
            'reason': reason
        }
        super().__init__(f"Member '{member_id}' is not eligible: {reason}", details)
        self.reason = reason


class CosignerError(PolicyViolation):
    """Raised when the cosigner for a loan is missing or unacceptable."""
    pass


class LoanLimitExceededError(PolicyViolation):
    """Raised when a requested principal is above the member's limit."""

    def __init__(self, requested: float, limit: float, member_id: str = None):
        details = {
            'requested': requested,
            'limit': limit
        }
        if member_id:
            details['member_id'] = member_id
        message = f"Requested amount {requested} exceeds loan limit {limit}"
        super().__init__(message, details)


class PaymentExceedsBalanceError(PolicyViolation):
    """Raised when a repayment is larger than the payable balance."""

    def __init__(self, amount: float, payable: float, loan_id: str = None):
        details = {
            'amount': amount,
            'payable': payable
        }
        if loan_id:
            details['loan_id'] = loan_id
        message = f"Amount {amount} exceeds remaining balance (including fees) of {payable}"
        super().__init__(message, details)


class DuplicateMemberError(PolicyViolation):
    """Raised when a member id is already taken."""

    def __init__(self, member_id: str):
        super().__init__(f"Member ID '{member_id}' already exists", {'member_id': member_id})


class MemberDeletionBlockedError(PolicyViolation):
    """Raised when a member still holds ledger obligations."""

    def __init__(self, member_id: str, reason: str):
        details = {
            'member_id': member_id,
            'reason': reason
        }
        super().__init__(f"Member '{member_id}' cannot be deleted: {reason}", details)
