"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Requests are decoded here once; the domain only ever sees typed values.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from gigpass.domain.account import Role
from gigpass.domain.verification import MAX_PASSWORD_BYTES

Code = Annotated[
    str,
    Field(min_length=6, max_length=6, pattern=r"^\d{6}$", description="6-digit code"),
]


def _check_bcrypt_length(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class SignUpRequest(BaseModel):
    """Request model for account creation."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str | None = Field(
        default=None,
        pattern=r"^\+?[0-9]{7,15}$",
        description="Phone number with optional leading +",
    )
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")
    role: Role = Role.CONTRACTOR

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_bcrypt_length(value)


class SignUpResponse(BaseModel):
    """Response model for sign-up; delivered=False means the code must be resent."""

    message: str
    user_id: UUID
    email: str
    phone_number: str | None
    delivered: bool


class UserIdRequest(BaseModel):
    """Request model carrying only the account id."""

    user_id: UUID


class VerifyCodeRequest(BaseModel):
    """Request model for email or phone verification."""

    user_id: UUID
    code: Code


class VerificationResponse(BaseModel):
    """Response model after a successful channel verification."""

    message: str
    user_id: UUID
    email_verified: bool
    phone_verified: bool


class DeliveryResponse(BaseModel):
    """Response model for challenge (re)issuance."""

    message: str
    delivered: bool


class SignInRequest(BaseModel):
    """Request model for sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AccountView(BaseModel):
    """Sanitized account; never carries password hash, codes or tokens."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    phone_number: str | None
    role: Role
    email_verified: bool
    phone_verified: bool
    created_at: datetime
    updated_at: datetime


class SignInResponse(BaseModel):
    """Response model for successful sign-in."""

    message: str
    user: AccountView


class PasswordResetRequest(BaseModel):
    """Request model for starting a password reset."""

    email: EmailStr


class VerifyResetTokenRequest(BaseModel):
    """Request model for checking a reset token without consuming it."""

    email: EmailStr
    token: Code


class ResetPasswordRequest(BaseModel):
    """Request model for completing a password reset."""

    email: EmailStr
    token: Code
    new_password: str = Field(..., min_length=8, description="New password (min 8 characters)")

    @field_validator("new_password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_bcrypt_length(value)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
