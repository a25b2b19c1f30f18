"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local store for demos (REPOSITORY_BACKEND=memory) and tests.
A single lock serializes every operation, so email uniqueness holds under
concurrent sign-ups just as the UNIQUE constraint does in PostgreSQL.
Records are copied on the way in and out; callers never share state with
the store.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime

from gigpass.domain.account import Account
from gigpass.domain.exceptions import AccountNotFound, DuplicateEmail


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict keyed by account id.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._accounts: dict[uuid.UUID, Account] = {}
        self._ids_by_email: dict[str, uuid.UUID] = {}
        self._lock = threading.Lock()

    def find_by_id(self, account_id: uuid.UUID) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            account_id = self._ids_by_email.get(email)
            return replace(self._accounts[account_id]) if account_id else None

    def find_by_reset_token(self, token: str, not_expired_before: datetime) -> Account | None:
        with self._lock:
            for account in self._accounts.values():
                expiry = account.reset_token_expiry
                if account.reset_token == token and expiry and expiry > not_expired_before:
                    return replace(account)
            return None

    def create(self, account: Account) -> None:
        with self._lock:
            if account.email in self._ids_by_email:
                raise DuplicateEmail("Email already registered")
            self._accounts[account.id] = replace(account)
            self._ids_by_email[account.email] = account.id

    def save(self, account: Account) -> None:
        with self._lock:
            stored = self._accounts.get(account.id)
            if stored is None:
                raise AccountNotFound("Account not found")
            # id, email and created_at are immutable once created
            self._accounts[account.id] = replace(
                account, email=stored.email, created_at=stored.created_at
            )

    def ping(self) -> None:
        """Always reachable."""
