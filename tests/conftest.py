"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- File-backed SQLite stores under tmp_path
- Repositories and domain services wired to a real store
- Recording email sender and a controllable clock
- Rate limiter reset between tests
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.adapters.repository.sqlite import SqliteAccountRepository, SqliteOtpRepository
from src.adapters.repository.store import SqliteStore
from src.api.rate_limit import limiter
from src.domain.otp import OtpService
from src.domain.registration import RegistrationService
from tests.fakes import TEST_BCRYPT_COST, FakeClock, RecordingEmailSender


@pytest.fixture(autouse=True)
def disable_rate_limits() -> Generator[None, None, None]:
    """Rate limits are opt-in per test; see TestRateLimiting."""
    limiter.enabled = False
    limiter.reset()
    yield
    limiter.enabled = False
    limiter.reset()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "accounts.db"


@pytest.fixture
def store(db_path: Path) -> Generator[SqliteStore, None, None]:
    """Open file-backed store; closed (and flushed) after the test."""
    store = SqliteStore(db_path)
    store.open()
    yield store
    store.close()


@pytest.fixture
def accounts(store: SqliteStore) -> SqliteAccountRepository:
    return SqliteAccountRepository(store)


@pytest.fixture
def otp_repository(store: SqliteStore) -> SqliteOtpRepository:
    return SqliteOtpRepository(store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def otp_service(otp_repository: SqliteOtpRepository, clock: FakeClock) -> OtpService:
    return OtpService(repository=otp_repository, ttl_seconds=600, clock=clock)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def service(
    accounts: SqliteAccountRepository,
    otp_service: OtpService,
    email_sender: RecordingEmailSender,
) -> RegistrationService:
    """Registration service over a real store with a recording sender."""
    return RegistrationService(
        accounts=accounts,
        otp_service=otp_service,
        email_sender=email_sender,
        bcrypt_cost=TEST_BCRYPT_COST,
    )
