"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account verification state machine: sign-up,
email and phone challenges, sign-in and password reset. It defines its own
port interfaces so storage and notification stay swappable.
"""

from .account import Account, Role
from .exceptions import (
    AccountNotFound,
    AuthError,
    DuplicateEmail,
    InvalidCode,
    InvalidCredentials,
    InvalidOrExpiredToken,
    PreconditionFailed,
    RoleNotAllowed,
)
from .ports import AccountRepository, Channel, DeliveryStatus, NotificationGateway
from .verification import ChallengeOutcome, VerificationService

__all__ = [
    "Account",
    "AccountNotFound",
    "AccountRepository",
    "AuthError",
    "ChallengeOutcome",
    "Channel",
    "DeliveryStatus",
    "DuplicateEmail",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidOrExpiredToken",
    "NotificationGateway",
    "PreconditionFailed",
    "Role",
    "RoleNotAllowed",
    "VerificationService",
]
