"""Database management module for FundLedger."""
import sqlite3
from contextlib import contextmanager

from fundledger.dates import format_date, format_datetime, parse_date, parse_datetime
from fundledger.exceptions import DatabaseError, TransactionError
from fundledger.models import Loan, Member, Transaction
from fundledger.store import LedgerStore


class DatabaseManager(LedgerStore):
    """Handles all SQLite database operations."""

    def __init__(self, db_name="fund_ledger.db"):
        self.db_name = db_name
        self.conn = None
        self._closed = True
        try:
            self.conn = sqlite3.connect(db_name)
        except sqlite3.Error as e:
            raise DatabaseError(f"Could not open database: {e}", {'db_name': db_name})
        self._closed = False
        self._depth = 0
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        """Ensure connection is closed on garbage collection."""
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with db.transaction():
                db.add_loan(...)
                db.update_member(...)
                db.append_transaction(...)

        Writes inside the block are committed together when the outermost
        block exits. If any exception occurs, everything is rolled back.
        """
        self._depth += 1
        try:
            yield
        except sqlite3.Error as e:
            self._depth -= 1
            if self._depth == 0:
                self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.conn.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self.conn.commit()

    def _commit(self):
        """Commit standalone writes; writes inside transaction() wait for the block."""
        if self._depth == 0:
            self.conn.commit()

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS members (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL DEFAULT '',
                email TEXT DEFAULT '',
                phone TEXT DEFAULT '',
                join_date TEXT,
                account_status TEXT DEFAULT 'Active',
                total_contribution REAL DEFAULT 0,
                active_loan_id TEXT,
                last_loan_paid_date TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS loans (
                id TEXT PRIMARY KEY,
                borrower_id TEXT NOT NULL,
                cosigner_id TEXT,
                original_amount REAL NOT NULL,
                remaining_balance REAL NOT NULL,
                term_months INTEGER NOT NULL,
                status TEXT DEFAULT 'ACTIVE',
                start_date TEXT NOT NULL,
                next_payment_due TEXT NOT NULL,
                FOREIGN KEY(borrower_id) REFERENCES members(id),
                FOREIGN KEY(cosigner_id) REFERENCES members(id)
            )
        """)

        # seq preserves append order for rows sharing a timestamp
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT UNIQUE NOT NULL,
                member_id TEXT NOT NULL,
                loan_id TEXT,
                type TEXT NOT NULL,
                amount REAL NOT NULL,
                date TEXT NOT NULL,
                description TEXT DEFAULT '',
                payment_method TEXT,
                received_by TEXT,
                FOREIGN KEY(member_id) REFERENCES members(id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS yearly_contributions (
                member_id TEXT NOT NULL,
                year INTEGER NOT NULL,
                amount REAL NOT NULL,
                PRIMARY KEY (member_id, year),
                FOREIGN KEY(member_id) REFERENCES members(id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        # Migrations for databases created before loan_id was tracked
        try:
            cursor.execute("ALTER TABLE transactions ADD COLUMN loan_id TEXT")
        except sqlite3.OperationalError:
            pass

        self.conn.commit()

    def _fetch_one(self, query, params=()):
        cursor = self.conn.cursor()
        cursor.execute(query, params)
        row = cursor.fetchone()
        if row:
            cols = [description[0] for description in cursor.description]
            return dict(zip(cols, row))
        return None

    def _fetch_all(self, query, params=()):
        cursor = self.conn.cursor()
        cursor.execute(query, params)
        cols = [description[0] for description in cursor.description]
        return [dict(zip(cols, row)) for row in cursor.fetchall()]

    # Member operations
    @staticmethod
    def _row_to_member(row):
        return Member(
            id=row['id'],
            name=row['name'] or "",
            email=row['email'] or "",
            phone=row['phone'] or "",
            join_date=parse_date(row['join_date']),
            account_status=row['account_status'],
            total_contribution=float(row['total_contribution'] or 0),
            active_loan_id=row['active_loan_id'],
            last_loan_paid_date=parse_datetime(row['last_loan_paid_date']),
        )

    def get_member(self, member_id):
        row = self._fetch_one("SELECT * FROM members WHERE id=?", (member_id,))
        return self._row_to_member(row) if row else None

    def list_members(self):
        return [self._row_to_member(r) for r in self._fetch_all("SELECT * FROM members ORDER BY rowid")]

    def add_member(self, member):
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT INTO members (
                id, name, email, phone, join_date, account_status,
                total_contribution, active_loan_id, last_loan_paid_date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (member.id, member.name, member.email, member.phone, format_date(member.join_date),
              member.account_status, member.total_contribution, member.active_loan_id,
              format_datetime(member.last_loan_paid_date)))
        self._commit()

    def update_member(self, member):
        cursor = self.conn.cursor()
        cursor.execute("""
            UPDATE members
            SET name=?, email=?, phone=?, join_date=?, account_status=?,
                total_contribution=?, active_loan_id=?, last_loan_paid_date=?
            WHERE id=?
        """, (member.name, member.email, member.phone, format_date(member.join_date),
              member.account_status, member.total_contribution, member.active_loan_id,
              format_datetime(member.last_loan_paid_date), member.id))
        if cursor.rowcount == 0:
            raise DatabaseError(f"Member '{member.id}' does not exist", {'member_id': member.id})
        self._commit()

    def delete_member(self, member_id):
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM yearly_contributions WHERE member_id=?", (member_id,))
        cursor.execute("DELETE FROM members WHERE id=?", (member_id,))
        self._commit()

    # Loan operations
    @staticmethod
    def _row_to_loan(row):
        return Loan(
            id=row['id'],
            borrower_id=row['borrower_id'],
            cosigner_id=row['cosigner_id'],
            original_amount=float(row['original_amount']),
            remaining_balance=float(row['remaining_balance']),
            term_months=int(row['term_months']),
            status=row['status'],
            start_date=parse_datetime(row['start_date']),
            next_payment_due=parse_date(row['next_payment_due']),
        )

    def get_loan(self, loan_id):
        row = self._fetch_one("SELECT * FROM loans WHERE id=?", (loan_id,))
        return self._row_to_loan(row) if row else None

    def list_loans(self):
        return [self._row_to_loan(r) for r in self._fetch_all("SELECT * FROM loans ORDER BY rowid")]

    def active_loans(self):
        rows = self._fetch_all("SELECT * FROM loans WHERE status = 'ACTIVE' ORDER BY rowid")
        return [self._row_to_loan(r) for r in rows]

    def add_loan(self, loan):
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT INTO loans (
                id, borrower_id, cosigner_id, original_amount, remaining_balance,
                term_months, status, start_date, next_payment_due
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (loan.id, loan.borrower_id, loan.cosigner_id, loan.original_amount,
              loan.remaining_balance, loan.term_months, loan.status,
              format_datetime(loan.start_date), format_date(loan.next_payment_due)))
        self._commit()

    def update_loan(self, loan):
        cursor = self.conn.cursor()
        cursor.execute("""
            UPDATE loans
            SET cosigner_id=?, original_amount=?, remaining_balance=?, term_months=?,
                status=?, start_date=?, next_payment_due=?
            WHERE id=?
        """, (loan.cosigner_id, loan.original_amount, loan.remaining_balance, loan.term_months,
              loan.status, format_datetime(loan.start_date), format_date(loan.next_payment_due),
              loan.id))
        if cursor.rowcount == 0:
            raise DatabaseError(f"Loan '{loan.id}' does not exist", {'loan_id': loan.id})
        self._commit()

    # Transaction log operations
    @staticmethod
    def _row_to_transaction(row):
        return Transaction(
            id=row['id'],
            member_id=row['member_id'],
            loan_id=row['loan_id'],
            type=row['type'],
            amount=float(row['amount']),
            date=parse_datetime(row['date']),
            description=row['description'] or "",
            payment_method=row['payment_method'],
            received_by=row['received_by'],
        )

    def list_transactions(self, member_id=None):
        query = "SELECT * FROM transactions"
        params = []
        if member_id is not None:
            query += " WHERE member_id = ?"
            params.append(member_id)
        query += " ORDER BY seq"
        return [self._row_to_transaction(r) for r in self._fetch_all(query, tuple(params))]

    def get_transaction(self, transaction_id):
        row = self._fetch_one("SELECT * FROM transactions WHERE id=?", (transaction_id,))
        return self._row_to_transaction(row) if row else None

    def append_transaction(self, transaction):
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT INTO transactions (
                id, member_id, loan_id, type, amount, date, description,
                payment_method, received_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (transaction.id, transaction.member_id, transaction.loan_id, transaction.type,
              transaction.amount, format_datetime(transaction.date), transaction.description,
              transaction.payment_method, transaction.received_by))
        self._commit()

    # Yearly contribution operations
    def get_yearly_contributions(self, member_id):
        rows = self._fetch_all(
            "SELECT year, amount FROM yearly_contributions WHERE member_id=? ORDER BY year",
            (member_id,)
        )
        return {int(r['year']): float(r['amount']) for r in rows}

    def set_yearly_contribution(self, member_id, year, amount):
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO yearly_contributions (member_id, year, amount) VALUES (?, ?, ?)",
            (member_id, year, amount)
        )
        self._commit()

    def delete_yearly_contribution(self, member_id, year):
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM yearly_contributions WHERE member_id=? AND year=?", (member_id, year))
        self._commit()

    # Settings
    def get_setting(self, key, default=None):
        row = self._fetch_one("SELECT value FROM settings WHERE key=?", (key,))
        return row['value'] if row else default

    def set_setting(self, key, value):
        cursor = self.conn.cursor()
        cursor.execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, str(value)))
        self._commit()
