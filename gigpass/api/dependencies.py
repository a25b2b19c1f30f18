"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the domain
service and its infrastructure adapters into routes. Adapters are built
once in the application lifespan and kept on app.state.
"""

from datetime import timedelta

from fastapi import Depends, Request

from gigpass.config.settings import Settings, get_settings
from gigpass.domain.ports import AccountRepository, NotificationGateway
from gigpass.domain.verification import VerificationService


def get_repository(request: Request) -> AccountRepository:
    """Get the account repository created during app lifespan startup."""
    return request.app.state.repository


def get_email_gateway(request: Request) -> NotificationGateway:
    """Get the email notification gateway from app state."""
    return request.app.state.email_gateway


def get_sms_gateway(request: Request) -> NotificationGateway:
    """Get the SMS notification gateway from app state."""
    return request.app.state.sms_gateway


def get_verification_service(
    repository: AccountRepository = Depends(get_repository),
    email_gateway: NotificationGateway = Depends(get_email_gateway),
    sms_gateway: NotificationGateway = Depends(get_sms_gateway),
    settings: Settings = Depends(get_settings),
) -> VerificationService:
    """
    Create verification service with injected dependencies.

    Wires together the repository, gateways and configured TTLs.
    """
    return VerificationService(
        repository=repository,
        email_gateway=email_gateway,
        sms_gateway=sms_gateway,
        verification_code_ttl=timedelta(seconds=settings.verification_code_ttl_seconds),
        reset_token_ttl=timedelta(seconds=settings.reset_token_ttl_seconds),
        bcrypt_rounds=settings.bcrypt_cost,
        delivery_timeout=settings.delivery_timeout_seconds,
    )
