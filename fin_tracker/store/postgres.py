"""PostgreSQL ledger store backed by psycopg."""

import uuid
from contextlib import contextmanager
from dataclasses import fields
from datetime import datetime
from enum import Enum
from typing import Any, Iterator

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row

from fin_tracker.exceptions import (
    ConcurrentUpdateError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    StorageError,
)
from fin_tracker.logging import get_logger
from fin_tracker.models.finance import (
    CreditCard,
    Emi,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    IncomeFrequency,
    User,
)
from fin_tracker.store.base import LedgerStore

logger = get_logger(__name__)

# Child tables reference (id, user_id) so a card can only be linked by its owner.
SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    external_id TEXT NOT NULL UNIQUE,
    created_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS credit_cards (
    card_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    "limit" NUMERIC(14, 2) NOT NULL,
    used_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    available_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    due_day SMALLINT NOT NULL CHECK (due_day BETWEEN 1 AND 31),
    created_at TIMESTAMPTZ,
    updated_at TIMESTAMPTZ,
    UNIQUE (card_id, user_id)
);

CREATE TABLE IF NOT EXISTS emis (
    emi_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    amount NUMERIC(14, 2) NOT NULL,
    due_day SMALLINT NOT NULL CHECK (due_day BETWEEN 1 AND 31),
    start_date DATE NOT NULL,
    total_installments INTEGER NOT NULL CHECK (total_installments > 0),
    paid_installments INTEGER NOT NULL DEFAULT 0,
    remaining_installments INTEGER NOT NULL,
    last_payment_date TIMESTAMPTZ,
    credit_card_id TEXT,
    created_at TIMESTAMPTZ,
    updated_at TIMESTAMPTZ,
    CHECK (paid_installments BETWEEN 0 AND total_installments),
    FOREIGN KEY (credit_card_id, user_id) REFERENCES credit_cards (card_id, user_id)
);

CREATE TABLE IF NOT EXISTS expenses (
    expense_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    amount NUMERIC(14, 2) NOT NULL,
    due_day SMALLINT NOT NULL,
    category TEXT NOT NULL,
    is_recurring BOOLEAN NOT NULL DEFAULT FALSE,
    is_paid BOOLEAN NOT NULL DEFAULT FALSE,
    paid_at TIMESTAMPTZ,
    source TEXT,
    destination TEXT,
    credit_card_id TEXT,
    created_at TIMESTAMPTZ,
    updated_at TIMESTAMPTZ,
    FOREIGN KEY (credit_card_id, user_id) REFERENCES credit_cards (card_id, user_id)
);

CREATE TABLE IF NOT EXISTS incomes (
    income_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
    source TEXT NOT NULL,
    amount NUMERIC(14, 2) NOT NULL,
    is_recurring BOOLEAN NOT NULL DEFAULT FALSE,
    frequency TEXT,
    category TEXT,
    description TEXT,
    next_payment_date DATE,
    created_at TIMESTAMPTZ,
    updated_at TIMESTAMPTZ
);
"""

TABLES = ["expenses", "incomes", "emis", "credit_cards", "users"]


def _db_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _insert_sql(table: str, record: Any) -> tuple[str, dict[str, Any]]:
    """Build an INSERT for a dataclass whose fields match the table columns."""
    names = [f.name for f in fields(record)]
    columns = ", ".join(f'"{n}"' for n in names)
    placeholders = ", ".join(f"%({n})s" for n in names)
    params = {n: _db_value(getattr(record, n)) for n in names}
    return f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", params  # noqa: S608


def _row_to_expense(row: dict[str, Any]) -> Expense:
    row = dict(row)
    row["category"] = ExpenseCategory(row["category"])
    return Expense(**row)


def _row_to_income(row: dict[str, Any]) -> Income:
    row = dict(row)
    if row.get("frequency") is not None:
        row["frequency"] = IncomeFrequency(row["frequency"])
    if row.get("category") is not None:
        row["category"] = IncomeCategory(row["category"])
    return Income(**row)


class PostgresLedgerStore(LedgerStore):
    """Ledger store persisting to PostgreSQL.

    Each operation runs in its own transaction. ``record_payment`` locks the
    EMI row with ``SELECT ... FOR UPDATE`` for the whole read-check-write, so
    concurrent confirmations for the same EMI are serialized.

    Parameters
    ----------
    connection_string : str
        PostgreSQL connection string (e.g. from ``PostgresConfig``).
    """

    def __init__(self, connection_string: str) -> None:
        self.connection_string = connection_string
        try:
            self._conn = psycopg.connect(connection_string, row_factory=dict_row)
        except psycopg.Error as e:
            raise StorageError(f"Could not connect to PostgreSQL: {e}") from e

    def __enter__(self) -> "PostgresLedgerStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        """Cursor inside a transaction; commits on success, rolls back on error."""
        try:
            with self._conn.transaction():
                with self._conn.cursor() as cur:
                    yield cur
        except pg_errors.ForeignKeyViolation as e:
            raise ReferentialIntegrityError(f"Referenced record not found: {e.diag.message_primary}") from e
        except psycopg.Error as e:
            logger.error("PostgreSQL operation failed: %s", e, exc_info=True)
            raise StorageError(f"PostgreSQL operation failed: {e}") from e

    def create_tables(self) -> None:
        """Create the schema if it does not exist."""
        with self._cursor() as cur:
            cur.execute(SCHEMA)
        logger.info("Ledger tables ready")

    def truncate_tables(self) -> None:
        """Remove all rows from every ledger table."""
        with self._cursor() as cur:
            cur.execute(f"TRUNCATE {', '.join(TABLES)} CASCADE")  # noqa: S608

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def get_or_create_user(self, external_id: str, now: datetime | None = None) -> User:
        """Return the user for ``external_id``, creating it if unseen."""
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO users (user_id, external_id, created_at) VALUES (%s, %s, %s) "
                "ON CONFLICT (external_id) DO NOTHING",
                (str(uuid.uuid4()), external_id, now or datetime.now()),
            )
            cur.execute("SELECT * FROM users WHERE external_id = %s", (external_id,))
            return User(**cur.fetchone())

    def add_emi(self, emi: Emi) -> None:
        """Insert a new EMI."""
        sql, params = _insert_sql("emis", emi)
        with self._cursor() as cur:
            cur.execute(sql, params)

    def load_emi(self, emi_id: str, user_id: str) -> Emi:
        """Load an EMI owned by ``user_id``."""
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM emis WHERE emi_id = %s AND user_id = %s",
                (emi_id, user_id),
            )
            row = cur.fetchone()
        if row is None:
            raise EntityNotFoundError(f"EMI {emi_id} not found")
        return Emi(**row)

    def list_emis(self, user_id: str) -> list[Emi]:
        """All EMIs of a user ordered by due day."""
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM emis WHERE user_id = %s ORDER BY due_day ASC",
                (user_id,),
            )
            return [Emi(**row) for row in cur.fetchall()]

    def update_emi_due_day(self, emi_id: str, user_id: str, due_day: int, now: datetime) -> Emi:
        """Correct an EMI's due day."""
        with self._cursor() as cur:
            cur.execute(
                "UPDATE emis SET due_day = %s, updated_at = %s "
                "WHERE emi_id = %s AND user_id = %s RETURNING *",
                (due_day, now, emi_id, user_id),
            )
            row = cur.fetchone()
        if row is None:
            raise EntityNotFoundError(f"EMI {emi_id} not found")
        return Emi(**row)

    def delete_emi(self, emi_id: str, user_id: str) -> None:
        """Delete an EMI. Its ledger entries are kept."""
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM emis WHERE emi_id = %s AND user_id = %s",
                (emi_id, user_id),
            )
            deleted = cur.rowcount
        if deleted == 0:
            raise EntityNotFoundError(f"EMI {emi_id} not found")

    def add_expense(self, expense: Expense) -> None:
        """Insert a ledger entry."""
        sql, params = _insert_sql("expenses", expense)
        with self._cursor() as cur:
            cur.execute(sql, params)

    def list_expenses(self, user_id: str) -> list[Expense]:
        """All ledger entries of a user, newest first."""
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM expenses WHERE user_id = %s ORDER BY created_at DESC",
                (user_id,),
            )
            return [_row_to_expense(row) for row in cur.fetchall()]

    def add_income(self, income: Income) -> None:
        """Insert an income source."""
        sql, params = _insert_sql("incomes", income)
        with self._cursor() as cur:
            cur.execute(sql, params)

    def list_incomes(self, user_id: str) -> list[Income]:
        """All income sources of a user, newest first."""
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM incomes WHERE user_id = %s ORDER BY created_at DESC",
                (user_id,),
            )
            return [_row_to_income(row) for row in cur.fetchall()]

    def add_credit_card(self, card: CreditCard) -> None:
        """Insert a credit card."""
        sql, params = _insert_sql("credit_cards", card)
        with self._cursor() as cur:
            cur.execute(sql, params)

    def list_credit_cards(self, user_id: str) -> list[CreditCard]:
        """All credit cards of a user."""
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM credit_cards WHERE user_id = %s ORDER BY name ASC",
                (user_id,),
            )
            return [CreditCard(**row) for row in cur.fetchall()]

    def record_payment(self, emi: Emi, expense: Expense, expected_paid: int) -> None:
        """Update the EMI and insert its ledger entry in one transaction."""
        sql, params = _insert_sql("expenses", expense)
        with self._cursor() as cur:
            cur.execute(
                "SELECT paid_installments FROM emis "
                "WHERE emi_id = %s AND user_id = %s FOR UPDATE",
                (emi.emi_id, emi.user_id),
            )
            row = cur.fetchone()
            if row is None:
                raise EntityNotFoundError(f"EMI {emi.emi_id} not found")
            if row["paid_installments"] != expected_paid:
                raise ConcurrentUpdateError(
                    f"EMI {emi.emi_id} changed: expected {expected_paid} paid installments, "
                    f"found {row['paid_installments']}"
                )

            cur.execute(
                "UPDATE emis SET paid_installments = %s, remaining_installments = %s, "
                "last_payment_date = %s, updated_at = %s WHERE emi_id = %s",
                (
                    emi.paid_installments,
                    emi.remaining_installments,
                    emi.last_payment_date,
                    emi.updated_at,
                    emi.emi_id,
                ),
            )
            cur.execute(sql, params)
