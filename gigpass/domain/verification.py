"""
Verification domain service - account verification and credential reset.

This module contains the core business logic for sign-up, email and phone
verification, sign-in and password reset.

Verification State Machine
==========================

Per channel (EMAIL, PHONE), state is carried by the account record:

    unverified                  code is None, verified is False
    challenge issued            code stored with expiry, verified is False
    verified                    code is None, verified is True

Transitions:
    issue_challenge     unverified/challenge issued -> challenge issued
                        (a new code silently replaces the outstanding one)
    consume_challenge   challenge issued -> verified (exact code, not expired)

Ordering: a PHONE challenge can only be issued or consumed once EMAIL is
verified.

Reset sub-state, independent of the channels:

    no reset pending -> reset pending        issue_reset_token
    reset pending    -> no reset pending     consume_reset_token
    reset pending    -> (unusable)           expiry passes

Every operation reads one record, writes it at most once via
``AccountRepository.save``, and only then attempts notification delivery.
Concurrent writes to the same account are last-write-wins.
"""

import logging
import secrets
import uuid
from collections.abc import Callable
from concurrent import futures
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

import bcrypt

from .account import Account, Role
from .exceptions import (
    AccountNotFound,
    InvalidCode,
    InvalidCredentials,
    InvalidOrExpiredToken,
    PreconditionFailed,
    RoleNotAllowed,
)
from .ports import AccountRepository, Channel, DeliveryStatus, NotificationGateway

logger = logging.getLogger(__name__)

CODE_LENGTH = 6

# bcrypt ignores (or, from 5.0, rejects) anything past this
MAX_PASSWORD_BYTES = 72

# Shared by every service instance so slow gateways cannot multiply threads
DELIVERY_WORKERS = 8
_delivery_pool = futures.ThreadPoolExecutor(
    max_workers=DELIVERY_WORKERS, thread_name_prefix="gigpass-delivery"
)

# Compared against when the email is unknown so sign-in always pays the bcrypt cost.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))

# channel -> (code field, expiry field, verified flag)
_CHALLENGE_FIELDS = {
    Channel.EMAIL: ("email_verification_code", "email_code_expires_at", "email_verified"),
    Channel.PHONE: ("phone_verification_code", "phone_code_expires_at", "phone_verified"),
}


def generate_code() -> str:
    """
    Generate a cryptographically secure 6-digit numeric code.

    Uniform over 000000-999999. Returns a string to preserve leading zeros.
    """
    return "".join(secrets.choice("0123456789") for _ in range(CODE_LENGTH))


def normalize_email(email: str) -> str:
    """Normalize email address for storage and lookup (strip + lowercase)."""
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _codes_match(stored: str | None, supplied: str) -> bool:
    # Exact equality, constant-time; an absent code never matches
    if stored is None:
        return False
    return secrets.compare_digest(stored.encode(), supplied.encode())


def _log_background_delivery(future: futures.Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.warning("Notification delivery failed: %s", type(error).__name__)
    elif not future.result():
        logger.warning("Notification gateway rejected delivery")


@dataclass
class ChallengeOutcome:
    """
    Result of an operation that stores a code and then tries to deliver it.

    The account reflects the persisted state regardless of delivery.
    """

    account: Account
    delivery: DeliveryStatus

    @property
    def delivered(self) -> bool:
        return self.delivery is DeliveryStatus.DELIVERED


@dataclass
class VerificationService:
    """
    Domain service for account verification and credential reset.

    Store and gateways are injected; clock and code generator are
    injectable so tests can pin time and codes. Deliveries run on
    ``executor``, a pool shared across instances unless one is injected.
    """

    repository: AccountRepository
    email_gateway: NotificationGateway
    sms_gateway: NotificationGateway
    clock: Callable[[], datetime] = _utcnow
    code_generator: Callable[[], str] = generate_code
    verification_code_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=10))
    reset_token_ttl: timedelta = field(default_factory=lambda: timedelta(hours=1))
    bcrypt_rounds: int = 10
    delivery_timeout: float = 5.0
    executor: futures.Executor = _delivery_pool

    def sign_up(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone_number: str | None = None,
        role: Role = Role.CONTRACTOR,
    ) -> ChallengeOutcome:
        """
        Create an account and send its email verification code.

        Only the email challenge is issued here; the phone challenge waits
        until the email is verified.

        Raises:
            RoleNotAllowed: If role is ADMIN
            DuplicateEmail: If the email is already registered (nothing is sent)
        """
        if Role(role) is Role.ADMIN:
            raise RoleNotAllowed("Admin accounts cannot be created through sign-up")

        now = self.clock()
        code = self.code_generator()
        account = Account(
            email=normalize_email(email),
            password_hash=self._hash_password(password),
            created_at=now,
            updated_at=now,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            phone_number=phone_number.strip() if phone_number else None,
            role=Role(role),
            email_verification_code=code,
            email_code_expires_at=now + self.verification_code_ttl,
        )

        self.repository.create(account)
        logger.info("Account created: %s", account.id)

        delivery = self._deliver(self.email_gateway, account.email, code)
        return ChallengeOutcome(account=account, delivery=delivery)

    def issue_challenge(self, channel: Channel, account_id: uuid.UUID) -> ChallengeOutcome:
        """
        Store a fresh code for a channel and try to deliver it.

        Any outstanding code for the channel is replaced. The code is
        persisted before delivery and kept if delivery fails.

        Raises:
            AccountNotFound: If the account does not exist
            PreconditionFailed: If the channel is already verified, or for
                PHONE when email is unverified or no phone number is on file
        """
        account = self._get_account(account_id)
        code_field, expiry_field, _ = _CHALLENGE_FIELDS[channel]

        if channel is Channel.EMAIL:
            if account.email_verified:
                raise PreconditionFailed("Email already verified")
            gateway, destination = self.email_gateway, account.email
        else:
            if not account.email_verified:
                raise PreconditionFailed("Email must be verified first")
            if account.phone_verified:
                raise PreconditionFailed("Phone already verified")
            if not account.phone_number:
                raise PreconditionFailed("No phone number on file")
            gateway, destination = self.sms_gateway, account.phone_number

        now = self.clock()
        code = self.code_generator()
        updated = replace(
            account,
            updated_at=now,
            **{code_field: code, expiry_field: now + self.verification_code_ttl},
        )
        self.repository.save(updated)

        delivery = self._deliver(gateway, destination, code)
        return ChallengeOutcome(account=updated, delivery=delivery)

    def consume_challenge(self, channel: Channel, account_id: uuid.UUID, code: str) -> Account:
        """
        Mark a channel verified if the supplied code matches the stored one.

        Raises:
            AccountNotFound: If the account does not exist
            PreconditionFailed: For PHONE when email is unverified
            InvalidCode: If no code is outstanding, it differs, or it expired
        """
        account = self._get_account(account_id)
        code_field, expiry_field, verified_flag = _CHALLENGE_FIELDS[channel]

        if channel is Channel.PHONE and not account.email_verified:
            raise PreconditionFailed("Email must be verified first")

        now = self.clock()
        expires_at = getattr(account, expiry_field)
        code_ok = _codes_match(getattr(account, code_field), code)
        if not code_ok or (expires_at is not None and expires_at <= now):
            raise InvalidCode("Invalid verification code")

        updated = replace(
            account,
            updated_at=now,
            **{verified_flag: True, code_field: None, expiry_field: None},
        )
        self.repository.save(updated)
        logger.info("Account %s verified channel %s", account.id, channel.value)
        return updated

    def sign_in(self, email: str, password: str) -> Account:
        """
        Check credentials and return the account.

        bcrypt runs even for unknown emails so response time does not
        reveal account existence. A password longer than bcrypt accepts can
        never have been stored, so it is a mismatch rather than an error.

        Raises:
            InvalidCredentials: If email is unknown or password mismatches
        """
        account = self.repository.find_by_email(normalize_email(email))
        stored_hash = account.password_hash.encode() if account else _DUMMY_BCRYPT_HASH
        password_bytes = password.encode()
        fits = len(password_bytes) <= MAX_PASSWORD_BYTES
        password_ok = bcrypt.checkpw(password_bytes[:MAX_PASSWORD_BYTES], stored_hash) and fits

        if account is None or not password_ok:
            raise InvalidCredentials("Invalid email or password")
        return account

    def issue_reset_token(self, email: str) -> ChallengeOutcome:
        """
        Store a fresh reset token (valid for ``reset_token_ttl``) and send it.

        Replaces any earlier token and expiry.

        Raises:
            AccountNotFound: If no account owns the email
        """
        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFound("Account not found")

        updated = self._store_reset_token(account)
        delivery = self._deliver(self.email_gateway, updated.email, updated.reset_token)
        return ChallengeOutcome(account=updated, delivery=delivery)

    def request_password_reset(self, email: str) -> DeliveryStatus:
        """
        Public entry point for reset requests.

        The token is stored before returning, but delivery is handed to the
        executor and never awaited, so a slow gateway cannot make known
        emails answer slower than unknown ones. The status is only for
        logging and metrics.

        Returns:
            QUEUED for a known email, SKIPPED for an unknown one
        """
        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            logger.debug("Password reset requested for unknown email")
            return DeliveryStatus.SKIPPED

        updated = self._store_reset_token(account)
        future = self.executor.submit(
            self.email_gateway.deliver, updated.email, updated.reset_token
        )
        future.add_done_callback(_log_background_delivery)
        return DeliveryStatus.QUEUED

    def verify_reset_token(self, email: str, token: str) -> None:
        """
        Check a reset token without consuming it.

        Raises:
            InvalidOrExpiredToken: If email, token or expiry does not match
        """
        self._match_reset_token(email, token)

    def consume_reset_token(self, email: str, token: str, new_password: str) -> Account:
        """
        Replace the password and clear the reset token.

        Raises:
            InvalidOrExpiredToken: If email, token or expiry does not match
        """
        account = self._match_reset_token(email, token)
        updated = replace(
            account,
            password_hash=self._hash_password(new_password),
            reset_token=None,
            reset_token_expiry=None,
            updated_at=self.clock(),
        )
        self.repository.save(updated)
        logger.info("Password reset completed for account %s", account.id)
        return updated

    def _get_account(self, account_id: uuid.UUID) -> Account:
        account = self.repository.find_by_id(account_id)
        if account is None:
            raise AccountNotFound("Account not found")
        return account

    def _store_reset_token(self, account: Account) -> Account:
        now = self.clock()
        updated = replace(
            account,
            reset_token=self.code_generator(),
            reset_token_expiry=now + self.reset_token_ttl,
            updated_at=now,
        )
        self.repository.save(updated)
        return updated

    def _match_reset_token(self, email: str, token: str) -> Account:
        account = self.repository.find_by_email(normalize_email(email))
        if account is None:
            raise InvalidOrExpiredToken("Invalid or expired reset token")

        token_ok = _codes_match(account.reset_token, token)
        expiry = account.reset_token_expiry
        if not token_ok or expiry is None or expiry <= self.clock():
            raise InvalidOrExpiredToken("Invalid or expired reset token")
        return account

    def _deliver(self, gateway: NotificationGateway, destination: str, code: str) -> DeliveryStatus:
        """
        Attempt delivery within ``delivery_timeout`` seconds.

        Errors, refusals and timeouts all count as FAILED; the stored code
        is unaffected. A timed-out call still waiting for a worker is
        cancelled; one already running keeps its worker until the gateway
        returns, so gateways should bound their own network calls.
        """
        future = self.executor.submit(gateway.deliver, destination, code)
        try:
            accepted = future.result(timeout=self.delivery_timeout)
        except futures.TimeoutError:
            future.cancel()
            logger.warning("Notification delivery timed out after %.1fs", self.delivery_timeout)
            return DeliveryStatus.FAILED
        except Exception as e:
            logger.warning("Notification delivery failed: %s", type(e).__name__)
            return DeliveryStatus.FAILED

        if not accepted:
            logger.warning("Notification gateway rejected delivery")
            return DeliveryStatus.FAILED
        return DeliveryStatus.DELIVERED

    def _hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt with the configured cost factor.

        Raises:
            ValueError: If the password is longer than MAX_PASSWORD_BYTES
        """
        password_bytes = password.encode()
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode()
