"""
Domain exceptions - Semantic error types for account verification.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Messages carry no codes, tokens or password material.
"""


class AuthError(Exception):
    """Base class for account domain errors."""

    pass


class AccountNotFound(AuthError):
    """Referenced account does not exist."""

    pass


class DuplicateEmail(AuthError):
    """Another account already owns this email address."""

    pass


class RoleNotAllowed(AuthError):
    """Requested role cannot be assigned through self sign-up."""

    pass


class PreconditionFailed(AuthError):
    """Channel ordering violated, e.g. phone challenge before email is verified."""

    pass


class InvalidCode(AuthError):
    """Verification code missing, mismatched, or expired."""

    pass


class InvalidOrExpiredToken(AuthError):
    """Reset token mismatched, expired, or already consumed."""

    pass


class InvalidCredentials(AuthError):
    """Email/password pair does not match any account."""

    pass
