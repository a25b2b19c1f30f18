"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Consistency Design:
------------------
1. **create()**: ``INSERT ... ON CONFLICT (email) DO NOTHING``. The UNIQUE
   constraint on email makes concurrent sign-ups for one address resolve to
   exactly one row; the losers see rowcount 0 and get DuplicateEmail.

2. **save()**: a single ``UPDATE ... WHERE id = %s`` replacing every mutable
   column. One statement, one transaction: either the whole record changes
   or none of it does.

3. No row locking across read and write. Two concurrent operations on the
   same account are last-write-wins.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from gigpass.domain.account import Account, Role
from gigpass.domain.exceptions import AccountNotFound, DuplicateEmail

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "email",
    "first_name",
    "last_name",
    "phone_number",
    "password_hash",
    "role",
    "email_verified",
    "phone_verified",
    "email_verification_code",
    "email_code_expires_at",
    "phone_verification_code",
    "phone_code_expires_at",
    "reset_token",
    "reset_token_expiry",
    "created_at",
    "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM accounts"


def _to_row(account: Account) -> dict[str, Any]:
    row = {name: getattr(account, name) for name in _COLUMNS}
    row["role"] = account.role.value
    return row


def _from_row(row: dict[str, Any]) -> Account:
    return Account(**{**row, "role": Role(row["role"])})


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_id(self, account_id: uuid.UUID) -> Account | None:
        return self._fetch_one(f"{_SELECT} WHERE id = %s", (account_id,))

    def find_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"{_SELECT} WHERE email = %s", (email,))

    def find_by_reset_token(self, token: str, not_expired_before: datetime) -> Account | None:
        """Return an account holding this token with expiry after ``not_expired_before``."""
        sql = f"""
            {_SELECT}
            WHERE reset_token = %s
              AND reset_token_expiry > %s
            ORDER BY reset_token_expiry DESC
            LIMIT 1
        """
        return self._fetch_one(sql, (token, not_expired_before))

    def create(self, account: Account) -> None:
        """
        Insert a new account.

        Raises:
            DuplicateEmail: If the email is already present (rowcount 0)
        """
        placeholders = ", ".join(f"%({name})s" for name in _COLUMNS)
        sql = f"""
            INSERT INTO accounts ({', '.join(_COLUMNS)})
            VALUES ({placeholders})
            ON CONFLICT (email) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, _to_row(account))
            conn.commit()
            if cursor.rowcount != 1:
                raise DuplicateEmail("Email already registered")

    def save(self, account: Account) -> None:
        """
        Replace every mutable column of an existing account.

        ``id``, ``email`` and ``created_at`` are never rewritten.

        Raises:
            AccountNotFound: If no row has this id
        """
        mutable = [c for c in _COLUMNS if c not in ("id", "email", "created_at")]
        assignments = ", ".join(f"{name} = %({name})s" for name in mutable)
        sql = f"UPDATE accounts SET {assignments} WHERE id = %(id)s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, _to_row(account))
            conn.commit()
            if cursor.rowcount != 1:
                raise AccountNotFound("Account not found")

    def ping(self) -> None:
        """Round-trip to the database; raises if unreachable."""
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> Account | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _from_row(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: gigpass/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
