"""Identifier generation for loans and transactions."""
import uuid

LOAN_PREFIX = "L"
TRANSACTION_PREFIX = "T"


def new_id(prefix, exists=None):
    """Return a fresh "<prefix>-<10 hex>" id.

    Args:
        prefix: Entity prefix, e.g. "L" or "T".
        exists: Optional callable(id) -> bool; ids it reports as taken are redrawn.
    """
    while True:
        candidate = f"{prefix}-{uuid.uuid4().hex[:10]}"
        if exists is None or not exists(candidate):
            return candidate
