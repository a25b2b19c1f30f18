"""
Unit tests for InMemoryAccountRepository.

Tests verify the in-memory adapter honours the AccountRepository contract:
uniqueness, full-record replace, immutable fields, copy isolation and
reset-token lookup.
"""

import uuid
from dataclasses import replace
from datetime import timedelta

import pytest
from helpers import T0

from gigpass.adapters.repository.memory import InMemoryAccountRepository
from gigpass.domain.account import Account
from gigpass.domain.exceptions import AccountNotFound, DuplicateEmail


def make_account(email: str = "a@x.com", **kwargs) -> Account:
    return Account(email=email, password_hash="$2b$04$hash", created_at=T0, updated_at=T0, **kwargs)


@pytest.fixture
def repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


class TestCreate:
    def test_create_then_find(self, repo: InMemoryAccountRepository) -> None:
        account = make_account()
        repo.create(account)

        assert repo.find_by_id(account.id) == account
        assert repo.find_by_email("a@x.com") == account

    def test_duplicate_email_rejected(self, repo: InMemoryAccountRepository) -> None:
        repo.create(make_account())

        with pytest.raises(DuplicateEmail):
            repo.create(make_account())

    def test_missing_lookups_return_none(self, repo: InMemoryAccountRepository) -> None:
        assert repo.find_by_id(uuid.uuid4()) is None
        assert repo.find_by_email("nobody@x.com") is None


class TestSave:
    def test_save_replaces_record(self, repo: InMemoryAccountRepository) -> None:
        account = make_account()
        repo.create(account)

        repo.save(replace(account, email_verified=True, email_verification_code=None))

        assert repo.find_by_id(account.id).email_verified

    def test_save_unknown_account(self, repo: InMemoryAccountRepository) -> None:
        with pytest.raises(AccountNotFound):
            repo.save(make_account())

    def test_save_keeps_email_and_created_at(self, repo: InMemoryAccountRepository) -> None:
        account = make_account()
        repo.create(account)

        repo.save(replace(account, email="b@x.com", created_at=T0 + timedelta(days=1)))

        stored = repo.find_by_id(account.id)
        assert stored.email == "a@x.com"
        assert stored.created_at == T0

    def test_returned_records_are_copies(self, repo: InMemoryAccountRepository) -> None:
        account = make_account()
        repo.create(account)

        fetched = repo.find_by_id(account.id)
        fetched.email_verified = True
        account.phone_verified = True

        assert not repo.find_by_id(account.id).email_verified
        assert not repo.find_by_id(account.id).phone_verified


class TestFindByResetToken:
    def test_finds_unexpired_token(self, repo: InMemoryAccountRepository) -> None:
        account = make_account(reset_token="654321", reset_token_expiry=T0 + timedelta(hours=1))
        repo.create(account)

        assert repo.find_by_reset_token("654321", T0).id == account.id

    def test_ignores_expired_token(self, repo: InMemoryAccountRepository) -> None:
        repo.create(make_account(reset_token="654321", reset_token_expiry=T0))

        assert repo.find_by_reset_token("654321", T0) is None

    def test_ignores_other_token(self, repo: InMemoryAccountRepository) -> None:
        repo.create(make_account(reset_token="654321", reset_token_expiry=T0 + timedelta(hours=1)))

        assert repo.find_by_reset_token("111111", T0) is None
