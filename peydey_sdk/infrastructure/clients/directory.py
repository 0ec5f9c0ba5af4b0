"""User directory clients for onboarding lookups"""

import asyncio
from decimal import Decimal
from typing import Dict, Optional, Protocol
import httpx
from peydey_sdk.config import settings
from peydey_sdk.domain.exceptions import DirectoryAPIError
from peydey_sdk.domain.models import OnboardingCredentials, UserRecord
from peydey_sdk.infrastructure.clients.base import RetryingJsonClient
from peydey_sdk.infrastructure.clients.schemas import LookupRequest, UserSchema

DEMO_USER = UserRecord(
    id="user_001",
    name="Muhammad Abdul Majid",
    emirates_id="784-1968-6570305-0",
    phone_number="+971523213841",
    email="muhammad@example.com",
    monthly_salary=Decimal("3000"),
    earned_salary=Decimal("1500"),
    account_age=45,
    has_active_loans=False,
    credit_score=720,
    employer_name="Emirates NBD",
    wps_partner="Alfardan Exchange",
    profile_picture="https://example.com/profile.jpg",
)


class UserDirectory(Protocol):
    """Identity provider: resolves onboarding credentials to a user record"""

    async def lookup(self, credentials: OnboardingCredentials) -> Optional[UserRecord]:
        ...


class MockUserDirectory:
    """In-memory directory keyed by Emirates ID; the phone number must also match"""

    def __init__(self, users: Optional[Dict[str, UserRecord]] = None, latency_seconds: float | None = None):
        self.users = dict(users) if users is not None else {DEMO_USER.emirates_id: DEMO_USER}
        self.latency_seconds = settings.directory_latency_seconds if latency_seconds is None else latency_seconds

    async def lookup(self, credentials: OnboardingCredentials) -> Optional[UserRecord]:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        user = self.users.get(credentials.emirates_id)
        if user is None or user.phone_number != credentials.phone_number:
            return None
        return user


class HttpUserDirectory:
    """Client for the identity provider's lookup API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.http = RetryingJsonClient(
            base_url=base_url or settings.directory_endpoint,
            timeout=timeout or settings.http_timeout_seconds,
            max_retries=settings.http_max_retries if max_retries is None else max_retries,
            backoff_base=settings.http_backoff_base if backoff_base is None else backoff_base,
            transport=transport,
        )

    async def lookup(self, credentials: OnboardingCredentials) -> Optional[UserRecord]:
        """
        Fetch the user record matching the credentials; None on 404.

        Raises:
            DirectoryAPIError: On timeout, HTTP errors, or invalid response
        """
        body = LookupRequest.model_validate(credentials)
        try:
            response = await self.http.post_json("/directory/lookup", body.model_dump(mode="json"))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return UserSchema.model_validate(response.json()).to_domain()

        except httpx.TimeoutException as e:
            raise DirectoryAPIError(f"Directory API timeout after {self.http.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise DirectoryAPIError(f"Directory API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise DirectoryAPIError(f"Directory API unreachable: {e}") from e
        except ValueError as e:
            raise DirectoryAPIError(f"Invalid user data from directory: {e}") from e
