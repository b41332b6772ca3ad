"""Services package for FundLedger business logic.

Each class covers one ledger concern and works against a LedgerStore passed
in at construction.
"""

from .fees import compute_fee
from .eligibility import EligibilityEvaluator
from .loan_service import LoanService
from .repayment import RepaymentProcessor
from .contribution_service import ContributionService
from .member_service import MemberService
from .schedule import ScheduleProjector

__all__ = ['compute_fee', 'EligibilityEvaluator', 'LoanService', 'RepaymentProcessor',
           'ContributionService', 'MemberService', 'ScheduleProjector']
