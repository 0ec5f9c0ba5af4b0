"""Integration tests for the HTTP WPS and directory clients against the stub server"""

import httpx
import pytest
from decimal import Decimal
from peydey_sdk.domain.exceptions import AuthorityAPIError, DirectoryAPIError, ErrorCode
from peydey_sdk.domain.models import Credentials, OnboardingCredentials, WithdrawalStatus
from peydey_sdk.domain.results import ValidationResult
from peydey_sdk.infrastructure.clients.authority import HttpAuthority
from peydey_sdk.infrastructure.clients.directory import DEMO_USER, HttpUserDirectory
from peydey_sdk.infrastructure.clients.schemas import UserSchema
from peydey_sdk.sdk import PeyDeySDK
from mock_wps.main import create_app
from tests.factories import make_withdrawal_request

pytestmark = pytest.mark.integration

BASE_URL = "http://mock-wps"


@pytest.fixture
def asgi_transport() -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_app())


@pytest.fixture
def http_authority(asgi_transport) -> HttpAuthority:
    return HttpAuthority(base_url=BASE_URL, timeout=5.0, max_retries=3, backoff_base=0, transport=asgi_transport)


@pytest.fixture
def http_directory(asgi_transport) -> HttpUserDirectory:
    return HttpUserDirectory(base_url=BASE_URL, timeout=5.0, max_retries=3, backoff_base=0, transport=asgi_transport)


class FlakyHandler:
    """MockTransport handler that fails a set number of times before answering"""

    def __init__(self, failures: int, response: httpx.Response, error: Exception | None = None):
        self.failures = failures
        self.response = response
        self.error = error
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.calls <= self.failures:
            if self.error is not None:
                raise self.error
            return httpx.Response(503, json={"detail": "unavailable"})
        return self.response


def user_payload() -> dict:
    return UserSchema.model_validate(DEMO_USER).model_dump(mode="json")


async def test_health(asgi_transport):
    """Stub server is up"""
    async with httpx.AsyncClient(transport=asgi_transport, base_url=BASE_URL) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_directory_lookup_known_user(http_directory):
    """Wire round trip reproduces the directory record"""
    user = await http_directory.lookup(OnboardingCredentials(DEMO_USER.emirates_id, DEMO_USER.phone_number))

    assert user == DEMO_USER


async def test_directory_lookup_unknown_user(http_directory):
    """404 from the directory means no such user"""
    user = await http_directory.lookup(OnboardingCredentials("invalid-id", "+971500000000"))

    assert user is None


async def test_directory_retries_server_errors():
    """Two 503s then success: three attempts, user returned"""
    handler = FlakyHandler(failures=2, response=httpx.Response(200, json=user_payload()))
    directory = HttpUserDirectory(
        base_url=BASE_URL, max_retries=3, backoff_base=0, transport=httpx.MockTransport(handler)
    )

    user = await directory.lookup(OnboardingCredentials(DEMO_USER.emirates_id, DEMO_USER.phone_number))

    assert user == DEMO_USER
    assert handler.calls == 3


async def test_directory_gives_up_after_max_retries():
    """Persistent 5xx surfaces as DirectoryAPIError"""
    handler = FlakyHandler(failures=10, response=httpx.Response(200, json=user_payload()))
    directory = HttpUserDirectory(
        base_url=BASE_URL, max_retries=3, backoff_base=0, transport=httpx.MockTransport(handler)
    )

    with pytest.raises(DirectoryAPIError, match="503"):
        await directory.lookup(OnboardingCredentials(DEMO_USER.emirates_id, DEMO_USER.phone_number))

    assert handler.calls == 3


async def test_directory_rejects_malformed_user():
    """Invalid user data is reported, not passed on"""
    payload = user_payload()
    payload["monthly_salary"] = "-5"
    directory = HttpUserDirectory(
        base_url=BASE_URL,
        max_retries=1,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )

    with pytest.raises(DirectoryAPIError):
        await directory.lookup(OnboardingCredentials(DEMO_USER.emirates_id, DEMO_USER.phone_number))


async def test_authority_validate_user(http_authority):
    """Validation over HTTP carries the WPS limits back"""
    result = await http_authority.validate_user(
        Credentials("emirates_id", "784-1968-6570305-0"), make_withdrawal_request()
    )

    assert result.success is True
    assert result.eligibility_check.is_eligible is True
    assert result.eligibility_check.wps_limits.remaining_daily == 4500


async def test_authority_validate_user_wrong_credentials(http_authority):
    """Failure codes survive the wire"""
    result = await http_authority.validate_user(Credentials("pin", "9999"), make_withdrawal_request())

    assert result.success is False
    assert result.code == ErrorCode.VALIDATION_FAILED


async def test_authority_process_withdrawal(http_authority):
    """Processing over HTTP returns a completed receipt"""
    request = make_withdrawal_request("250.50")
    validation = await http_authority.validate_user(Credentials("pin", "1234"), request)

    result = await http_authority.process_withdrawal(request, validation)

    assert result.success is True
    assert result.status == WithdrawalStatus.COMPLETED
    assert result.receipt.amount == Decimal("250.50")
    assert result.receipt.currency == "AED"
    assert result.receipt.employer == "Emirates NBD"


async def test_authority_validate_retries_network_errors():
    """Validation is safe to repeat, so connection errors are retried"""
    body = {"success": True, "message": "User validated successfully"}
    handler = FlakyHandler(
        failures=1,
        response=httpx.Response(200, json=body),
        error=httpx.ConnectError("connection refused"),
    )
    authority = HttpAuthority(base_url=BASE_URL, max_retries=3, backoff_base=0, transport=httpx.MockTransport(handler))

    result = await authority.validate_user(Credentials("pin", "1234"), make_withdrawal_request())

    assert result.success is True
    assert handler.calls == 2


async def test_authority_process_is_not_retried():
    """A payout is never replayed, even on 503"""
    handler = FlakyHandler(failures=1, response=httpx.Response(200, json={"success": True}))
    authority = HttpAuthority(base_url=BASE_URL, max_retries=3, backoff_base=0, transport=httpx.MockTransport(handler))

    with pytest.raises(AuthorityAPIError, match="503"):
        await authority.process_withdrawal(make_withdrawal_request(), ValidationResult(success=True))

    assert handler.calls == 1


async def test_authority_invalid_json():
    """Non-JSON bodies are reported as WPS errors"""
    authority = HttpAuthority(
        base_url=BASE_URL,
        max_retries=1,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="not json")),
    )

    with pytest.raises(AuthorityAPIError):
        await authority.validate_user(Credentials("pin", "1234"), make_withdrawal_request())


async def test_sdk_over_http(test_settings, http_authority, http_directory):
    """Full flow with both HTTP clients wired into the SDK"""
    sdk = PeyDeySDK(test_settings, authority=http_authority, directory=http_directory)

    onboard = await sdk.onboard_user(OnboardingCredentials(DEMO_USER.emirates_id, DEMO_USER.phone_number))
    assert onboard.success is True

    initiated = await sdk.handle_withdrawal_request(100)
    validation = await initiated.callback.validate_user(Credentials("password", "correct_password"))
    processing = await initiated.callback.process_withdrawal(validation)

    assert processing.success is True
    assert sdk.get_withdrawal_status(initiated.withdrawal_request.id).status == WithdrawalStatus.COMPLETED
    history = sdk.get_transaction_history()
    assert history.transactions[0].entry.status == WithdrawalStatus.COMPLETED
