"""Repository interface the ledger services work against.

The services hold no entity state of their own. Every call reads from and
writes to the store it was given, so a caller can hand in any snapshot of
members, loans and transactions (a SQLite file via DatabaseManager, or plain
lists via InMemoryStore).
"""
import copy
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from fundledger.models import Loan, LoanStatus, Member, Transaction


class LedgerStore(ABC):
    """Abstract persistence for members, loans, transactions and settings.

    Getters return copies: changing a returned entity has no effect until it
    is passed back through an update method. Writes made inside
    `transaction()` are applied all together or not at all.
    """

    @abstractmethod
    def transaction(self):
        """Context manager grouping writes into one atomic unit."""
        pass

    # Members
    @abstractmethod
    def get_member(self, member_id) -> Optional[Member]:
        pass

    @abstractmethod
    def list_members(self) -> List[Member]:
        pass

    @abstractmethod
    def add_member(self, member: Member):
        pass

    @abstractmethod
    def update_member(self, member: Member):
        pass

    @abstractmethod
    def delete_member(self, member_id):
        pass

    # Loans
    @abstractmethod
    def get_loan(self, loan_id) -> Optional[Loan]:
        pass

    @abstractmethod
    def list_loans(self) -> List[Loan]:
        pass

    @abstractmethod
    def add_loan(self, loan: Loan):
        pass

    @abstractmethod
    def update_loan(self, loan: Loan):
        pass

    # Transactions
    @abstractmethod
    def list_transactions(self, member_id=None) -> List[Transaction]:
        """Transactions in append order, optionally for one member."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id) -> Optional[Transaction]:
        pass

    @abstractmethod
    def append_transaction(self, transaction: Transaction):
        pass

    # Yearly contribution side-ledger
    @abstractmethod
    def get_yearly_contributions(self, member_id) -> Dict[int, float]:
        pass

    @abstractmethod
    def set_yearly_contribution(self, member_id, year, amount):
        pass

    @abstractmethod
    def delete_yearly_contribution(self, member_id, year):
        pass

    # Settings
    @abstractmethod
    def get_setting(self, key, default=None):
        pass

    @abstractmethod
    def set_setting(self, key, value):
        pass

    # Derived lookups shared by every backend
    def active_loans(self) -> List[Loan]:
        return [l for l in self.list_loans() if l.status == LoanStatus.ACTIVE]

    def is_active_cosigner(self, member_id) -> bool:
        return any(l.cosigner_id == member_id for l in self.active_loans())


class InMemoryStore(LedgerStore):
    """LedgerStore over plain Python lists, for snapshots and tests.

    Usage:
        store = InMemoryStore(members=members, loans=loans, transactions=txs)
        engine = LedgerEngine(store)
        engine.record_contribution("MC-000001", 20, "Cash", "Admin")
        members, loans, txs = store.snapshot()
    """

    def __init__(self, members: Iterable[Member] = (), loans: Iterable[Loan] = (),
                 transactions: Iterable[Transaction] = (), yearly_contributions=None,
                 settings=None):
        self._members = {m.id: copy.copy(m) for m in members}
        self._loans = {l.id: copy.copy(l) for l in loans}
        self._transactions = list(transactions)
        self._yearly = {
            member_id: dict(history)
            for member_id, history in (yearly_contributions or {}).items()
        }
        self._settings = dict(settings or {})
        self._depth = 0

    @contextmanager
    def transaction(self):
        """Restore every collection if the block raises.

        Nested blocks join the outermost one.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = (
            copy.deepcopy(self._members),
            copy.deepcopy(self._loans),
            list(self._transactions),
            copy.deepcopy(self._yearly),
            dict(self._settings),
        )
        self._depth = 1
        try:
            yield
        except Exception:
            (self._members, self._loans, self._transactions,
             self._yearly, self._settings) = saved
            raise
        finally:
            self._depth = 0

    def snapshot(self):
        """Return (members, loans, transactions) as independent lists."""
        return (
            [copy.copy(m) for m in self._members.values()],
            [copy.copy(l) for l in self._loans.values()],
            list(self._transactions),
        )

    def get_member(self, member_id):
        member = self._members.get(member_id)
        return copy.copy(member) if member else None

    def list_members(self):
        return [copy.copy(m) for m in self._members.values()]

    def add_member(self, member):
        self._members[member.id] = copy.copy(member)

    def update_member(self, member):
        if member.id not in self._members:
            raise KeyError(member.id)
        self._members[member.id] = copy.copy(member)

    def delete_member(self, member_id):
        self._members.pop(member_id, None)
        self._yearly.pop(member_id, None)

    def get_loan(self, loan_id):
        loan = self._loans.get(loan_id)
        return copy.copy(loan) if loan else None

    def list_loans(self):
        return [copy.copy(l) for l in self._loans.values()]

    def add_loan(self, loan):
        self._loans[loan.id] = copy.copy(loan)

    def update_loan(self, loan):
        if loan.id not in self._loans:
            raise KeyError(loan.id)
        self._loans[loan.id] = copy.copy(loan)

    def list_transactions(self, member_id=None):
        if member_id is None:
            return list(self._transactions)
        return [t for t in self._transactions if t.member_id == member_id]

    def get_transaction(self, transaction_id):
        for t in self._transactions:
            if t.id == transaction_id:
                return t
        return None

    def append_transaction(self, transaction):
        self._transactions.append(transaction)

    def get_yearly_contributions(self, member_id):
        return dict(self._yearly.get(member_id, {}))

    def set_yearly_contribution(self, member_id, year, amount):
        self._yearly.setdefault(member_id, {})[year] = amount

    def delete_yearly_contribution(self, member_id, year):
        self._yearly.get(member_id, {}).pop(year, None)

    def get_setting(self, key, default=None):
        return self._settings.get(key, default)

    def set_setting(self, key, value):
        self._settings[key] = str(value)
