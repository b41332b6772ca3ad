"""Result pattern for soft outcomes in FundLedger.

Operations that answer a question ("may this member be deleted?", "do the
yearly figures agree with the total?") return a Result instead of raising.
"""
from dataclasses import dataclass
from typing import Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "NOT_FOUND", "MISMATCH").

    Usage:
        result = engine.can_delete_member("MC-000001")
        if not result:
            notify(result.error)
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: str = None, value: T = None) -> 'Result[T]':
        """Create a failure result.

        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
            value: Optional payload that explains the failure.
        """
        return cls(success=False, value=value, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success


# Common error types for consistency
class ErrorType:
    """Standard error type constants."""
    NOT_FOUND = "NOT_FOUND"
    ACTIVE_LOAN = "ACTIVE_LOAN"
    ACTIVE_COSIGNER = "ACTIVE_COSIGNER"
    MISMATCH = "MISMATCH"
