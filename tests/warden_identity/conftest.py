"""
Pytest configuration for warden_identity tests.

Provides password policies with a cheap bcrypt work factor, a controllable
clock and ready-made token authorities.
"""

from datetime import datetime, timedelta, timezone

import pytest

from warden_identity.application.context import Principal
from warden_identity.domain.user import UserRole
from warden_identity.infrastructure.persistence.memory import InMemoryUserRepository
from warden_identity.services import (
    AccessPolicy,
    InMemoryRevocationStore,
    PasswordPolicy,
    TokenAuthority,
)

ACCESS_SECRET = "access-secret-for-tests-0123456789"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789"
TEST_BCRYPT_ROUNDS = 4


class FrozenClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def password_policy() -> PasswordPolicy:
    """Default rules, cheap hashing."""
    return PasswordPolicy(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def revocation_store() -> InMemoryRevocationStore:
    return InMemoryRevocationStore()


@pytest.fixture
def token_authority(clock, revocation_store) -> TokenAuthority:
    return TokenAuthority(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl="15m",
        refresh_ttl="7d",
        clock=clock,
        revocation_store=revocation_store,
    )


@pytest.fixture
def access_policy() -> AccessPolicy:
    return AccessPolicy()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(id="admin-1", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def customer_principal() -> Principal:
    return Principal(id="customer-1", email="customer@example.com", role=UserRole.CUSTOMER)
