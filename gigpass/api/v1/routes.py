"""
API v1 routes.

Defines REST endpoints for account sign-up, verification, sign-in and
password reset. Routes are plain ``def`` so FastAPI runs the blocking
domain calls (bcrypt, database, notification delivery) in its threadpool.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from gigpass.api.dependencies import get_verification_service
from gigpass.api.models import (
    AccountView,
    DeliveryResponse,
    ErrorResponse,
    MessageResponse,
    PasswordResetRequest,
    ResetPasswordRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserIdRequest,
    VerificationResponse,
    VerifyCodeRequest,
    VerifyResetTokenRequest,
)
from gigpass.domain.account import Account
from gigpass.domain.exceptions import (
    AccountNotFound,
    DuplicateEmail,
    InvalidCode,
    InvalidCredentials,
    InvalidOrExpiredToken,
    PreconditionFailed,
    RoleNotAllowed,
)
from gigpass.domain.ports import Channel
from gigpass.domain.verification import ChallengeOutcome, VerificationService

router = APIRouter(prefix="/auth", tags=["v1"])

RESET_REQUESTED_MESSAGE = "If your email is registered, you will receive a password reset code"

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Account not found"}}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


def _delivery_message(outcome: ChallengeOutcome, destination: str) -> str:
    if outcome.delivered:
        return f"Verification code sent to your {destination}"
    return f"Verification code could not be sent to your {destination}. Please request a new one."


def _verification_response(account: Account, message: str) -> VerificationResponse:
    return VerificationResponse(
        message=message,
        user_id=account.id,
        email_verified=account.email_verified,
        phone_verified=account.phone_verified,
    )


@router.post(
    "/sign-up",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Role not allowed"},
        409: {"model": ErrorResponse, "description": "Email already in use"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Create an account and send a 6-digit verification code to the email. "
    "delivered=false means the account exists but the code must be resent.",
)
def sign_up(
    request_data: SignUpRequest,
    service: VerificationService = Depends(get_verification_service),
) -> SignUpResponse:
    """Register a new contractor or client account."""
    try:
        outcome = service.sign_up(
            first_name=request_data.first_name,
            last_name=request_data.last_name,
            email=request_data.email,
            password=request_data.password,
            phone_number=request_data.phone_number,
            role=request_data.role,
        )
    except RoleNotAllowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot create admin accounts through this route",
        ) from None
    except DuplicateEmail:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already in use",
        ) from None

    account = outcome.account
    return SignUpResponse(
        message=_delivery_message(outcome, "email"),
        user_id=account.id,
        email=account.email,
        phone_number=account.phone_number,
        delivered=outcome.delivered,
    )


@router.post(
    "/verify-email",
    response_model=VerificationResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid code"}, **_NOT_FOUND},
    summary="Verify email with the 6-digit code",
)
def verify_email(
    request_data: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationResponse:
    try:
        account = service.consume_challenge(Channel.EMAIL, request_data.user_id, request_data.code)
    except AccountNotFound:
        raise _not_found() from None
    except InvalidCode:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification code",
        ) from None
    return _verification_response(account, "Email verified successfully")


@router.post(
    "/resend-email-verification",
    response_model=DeliveryResponse,
    responses={400: {"model": ErrorResponse, "description": "Email already verified"}, **_NOT_FOUND},
    summary="Issue a new email verification code",
)
def resend_email_verification(
    request_data: UserIdRequest,
    service: VerificationService = Depends(get_verification_service),
) -> DeliveryResponse:
    try:
        outcome = service.issue_challenge(Channel.EMAIL, request_data.user_id)
    except AccountNotFound:
        raise _not_found() from None
    except PreconditionFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return DeliveryResponse(message=_delivery_message(outcome, "email"), delivered=outcome.delivered)


@router.post(
    "/request-phone-verification",
    response_model=DeliveryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email not verified or phone unavailable"},
        **_NOT_FOUND,
    },
    summary="Issue a phone verification code",
    description="Requires a verified email. Calling again replaces the outstanding code.",
)
def request_phone_verification(
    request_data: UserIdRequest,
    service: VerificationService = Depends(get_verification_service),
) -> DeliveryResponse:
    try:
        outcome = service.issue_challenge(Channel.PHONE, request_data.user_id)
    except AccountNotFound:
        raise _not_found() from None
    except PreconditionFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return DeliveryResponse(
        message=_delivery_message(outcome, "phone number"), delivered=outcome.delivered
    )


@router.post(
    "/verify-phone",
    response_model=VerificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid code or email not verified"},
        **_NOT_FOUND,
    },
    summary="Verify phone with the 6-digit code",
)
def verify_phone(
    request_data: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationResponse:
    try:
        account = service.consume_challenge(Channel.PHONE, request_data.user_id, request_data.code)
    except AccountNotFound:
        raise _not_found() from None
    except PreconditionFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except InvalidCode:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification code",
        ) from None
    return _verification_response(account, "Phone number verified successfully")


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Sign in with email and password",
)
def sign_in(
    request_data: SignInRequest,
    service: VerificationService = Depends(get_verification_service),
) -> SignInResponse:
    try:
        account = service.sign_in(request_data.email, request_data.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        ) from None
    return SignInResponse(
        message="User logged in successfully",
        user=AccountView.model_validate(account.public_view()),
    )


@router.post(
    "/request-password-reset",
    response_model=MessageResponse,
    summary="Request a password reset code",
    description="Always answers the same way, whether or not the email is registered.",
)
def request_password_reset(
    request_data: PasswordResetRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    service.request_password_reset(request_data.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/verify-reset-token",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
    summary="Check a reset code without using it",
)
def verify_reset_token(
    request_data: VerifyResetTokenRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    try:
        service.verify_reset_token(request_data.email, request_data.token)
    except InvalidOrExpiredToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        ) from None
    return MessageResponse(message="Reset token is valid")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
    summary="Set a new password using a reset code",
)
def reset_password(
    request_data: ResetPasswordRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    try:
        service.consume_reset_token(
            request_data.email, request_data.token, request_data.new_password
        )
    except InvalidOrExpiredToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        ) from None
    return MessageResponse(message="Password reset successfully")
