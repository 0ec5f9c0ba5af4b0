"""Pytest fixtures for testing"""

import pytest
from peydey_sdk.config import SDKSettings
from peydey_sdk.domain.eligibility import calculate_limits
from peydey_sdk.domain.models import Credentials, Limits, OnboardingCredentials, UserRecord
from peydey_sdk.domain.withdrawal import WithdrawalCoordinator
from peydey_sdk.infrastructure.clients.authority import MockAuthority
from peydey_sdk.infrastructure.clients.directory import DEMO_USER, MockUserDirectory
from peydey_sdk.infrastructure.memory.ledger import TransactionLedger
from peydey_sdk.sdk import PeyDeySDK
from tests.factories import make_user


@pytest.fixture
def eligible_user() -> UserRecord:
    return make_user()


@pytest.fixture
def eligible_limits(eligible_user: UserRecord) -> Limits:
    return calculate_limits(eligible_user)


@pytest.fixture
def test_settings() -> SDKSettings:
    """Settings with simulated latency switched off"""
    return SDKSettings(
        authority_latency_seconds=0,
        directory_latency_seconds=0,
        authority_timeout_seconds=2.0,
        http_backoff_base=0,
    )


@pytest.fixture
def authority() -> MockAuthority:
    return MockAuthority(latency_seconds=0)


@pytest.fixture
def ledger() -> TransactionLedger:
    return TransactionLedger()


@pytest.fixture
def coordinator(authority: MockAuthority, ledger: TransactionLedger) -> WithdrawalCoordinator:
    return WithdrawalCoordinator(authority, ledger=ledger, timeout_seconds=2.0)


@pytest.fixture
def sdk(test_settings: SDKSettings, authority: MockAuthority) -> PeyDeySDK:
    return PeyDeySDK(
        test_settings,
        authority=authority,
        directory=MockUserDirectory(latency_seconds=0),
    )


@pytest.fixture
def known_credentials() -> OnboardingCredentials:
    return OnboardingCredentials(emirates_id=DEMO_USER.emirates_id, phone_number=DEMO_USER.phone_number)


@pytest.fixture
def wps_credentials() -> Credentials:
    return Credentials(method="emirates_id", value="784-1968-6570305-0")
