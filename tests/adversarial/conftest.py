"""
Shared fixtures for adversarial tests.

Provides a service over the in-memory store with recording gateways so
attacks can be replayed without a database.
"""

import pytest
from helpers import RecordingGateway

from gigpass.adapters.repository.memory import InMemoryAccountRepository
from gigpass.domain.verification import VerificationService

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def store() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def mailbox() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def target(store: InMemoryAccountRepository, mailbox: RecordingGateway) -> VerificationService:
    """Service under attack."""
    return VerificationService(
        repository=store,
        email_gateway=mailbox,
        sms_gateway=RecordingGateway(),
        bcrypt_rounds=4,
    )

