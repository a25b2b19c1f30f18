"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Protocol

from .account import Account


class Channel(str, Enum):
    """
    Verification channels. Each has independent state on the account.

    Per-channel lifecycle:
    - unverified -> challenge issued (code stored) -> verified
    - reissuing a challenge replaces the outstanding code
    - PHONE challenges require the EMAIL channel to be verified first
    """

    EMAIL = "email"
    PHONE = "phone"


class DeliveryStatus(Enum):
    """
    Outcome of the best-effort notification that follows a persisted code.

    FAILED means the code is stored but the user may not have received it
    (degraded success). QUEUED means the code is stored and delivery was
    handed off without waiting for it. SKIPPED means nothing was sent on
    purpose, e.g. a reset request for an unknown email.
    """

    DELIVERED = "delivered"
    FAILED = "failed"
    QUEUED = "queued"
    SKIPPED = "skipped"


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_id(self, account_id: uuid.UUID) -> Account | None:
        """Return the account with this id, or None."""
        ...

    def find_by_email(self, email: str) -> Account | None:
        """
        Return the account owning a normalized email address, or None.

        Args:
            email: Normalized email address (lowercase, stripped)
        """
        ...

    def find_by_reset_token(self, token: str, not_expired_before: datetime) -> Account | None:
        """
        Return the account holding this reset token, if it is still valid.

        Args:
            token: 6-digit reset token
            not_expired_before: Tokens expiring at or before this instant are ignored
        """
        ...

    def create(self, account: Account) -> None:
        """
        Persist a brand new account.

        Raises:
            DuplicateEmail: If another account already owns the email
        """
        ...

    def save(self, account: Account) -> None:
        """
        Atomically replace the stored record with this one.

        All-or-nothing: a failure leaves the previous record intact.

        Raises:
            AccountNotFound: If no record with this id exists
        """
        ...


class NotificationGateway(Protocol):
    """Port interface for code delivery to an email address or phone number."""

    def deliver(self, destination: str, code: str) -> bool:
        """
        Send a code to a destination.

        Calls run on a shared worker pool; implementations should time out
        their own network calls rather than block indefinitely.

        Args:
            destination: Email address or phone number
            code: 6-digit verification code or reset token

        Returns:
            True if the provider accepted the message, False otherwise
        """
        ...
