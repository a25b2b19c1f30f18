"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and recording notification gateways
- A VerificationService with a pinned clock and fast bcrypt
"""

import pytest
from helpers import FakeClock, RecordingGateway

from gigpass.adapters.repository.memory import InMemoryAccountRepository
from gigpass.domain.verification import VerificationService


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def sms_gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    email_gateway: RecordingGateway,
    sms_gateway: RecordingGateway,
    clock: FakeClock,
) -> VerificationService:
    """Service with fast bcrypt and a pinned clock; codes are read from the gateways."""
    return VerificationService(
        repository=repository,
        email_gateway=email_gateway,
        sms_gateway=sms_gateway,
        clock=clock,
        bcrypt_rounds=4,
        delivery_timeout=1.0,
    )
