"""
Account model - the persisted record behind every registered identity.

The dataclass is the single shape shared by the domain service and the
repository adapters. Only ``public_view()`` crosses the HTTP boundary;
password hash, verification codes and reset token never leave the store
through it.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Account roles. ADMIN is never granted through sign-up."""

    CONTRACTOR = "contractor"
    CLIENT = "client"
    ADMIN = "admin"


@dataclass
class Account:
    """One registered identity with its verification and reset state."""

    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
    first_name: str = ""
    last_name: str = ""
    phone_number: str | None = None
    role: Role = Role.CONTRACTOR
    email_verified: bool = False
    phone_verified: bool = False
    email_verification_code: str | None = None
    email_code_expires_at: datetime | None = None
    phone_verification_code: str | None = None
    phone_code_expires_at: datetime | None = None
    reset_token: str | None = None
    reset_token_expiry: datetime | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        # A phone challenge is only meaningful once email ownership is proven
        if self.phone_verification_code is not None and not self.email_verified:
            raise ValueError("phone challenge requires a verified email")

    def public_view(self) -> dict[str, Any]:
        """Sanitized representation safe to return to clients."""
        return {
            "id": str(self.id),
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "role": self.role.value,
            "email_verified": self.email_verified,
            "phone_verified": self.phone_verified,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
