"""WPS (Wage Protection System) clients: validation and withdrawal processing"""

import asyncio
from decimal import Decimal
from typing import Dict, Optional, Protocol
import httpx
from peydey_sdk.config import settings
from peydey_sdk.domain.exceptions import AuthorityAPIError, ErrorCode
from peydey_sdk.domain.models import (
    AuthorityEligibility,
    AuthorityLimits,
    Credentials,
    Receipt,
    ValidationMethod,
    WithdrawalRequest,
    WithdrawalStatus,
)
from peydey_sdk.domain.results import ProcessingResult, ValidationResult
from peydey_sdk.infrastructure.clients.base import RetryingJsonClient
from peydey_sdk.infrastructure.clients.schemas import (
    CredentialsSchema,
    ProcessingResponse,
    ProcessRequest,
    ValidateRequest,
    ValidationResponse,
    WithdrawalRequestSchema,
)
from peydey_sdk.utils.date_utils import utcnow
from peydey_sdk.utils.ids import generate_id, generate_receipt_number

ALLOWED_METHODS = frozenset(m.value for m in ValidationMethod)

RECEIPT_MESSAGE = "Transaction is in process and will be completed shortly"


class ExternalAuthority(Protocol):
    """The WPS side of the withdrawal handshake"""

    async def validate_user(self, credentials: Credentials, request: WithdrawalRequest) -> ValidationResult:
        ...

    async def process_withdrawal(
        self, request: WithdrawalRequest, validation: ValidationResult
    ) -> ProcessingResult:
        ...


class MockAuthority:
    """
    In-memory WPS double.

    Checks credentials against fixed expected values and always passes
    its own eligibility check. Each call sleeps to mimic network latency.
    Requests are only read, never mutated.
    """

    DEFAULT_EXPECTED_VALUES: Dict[str, str] = {
        ValidationMethod.EMIRATES_ID.value: "784-1968-6570305-0",
        ValidationMethod.PASSWORD.value: "correct_password",
        ValidationMethod.PIN.value: "1234",
    }

    def __init__(
        self,
        latency_seconds: float | None = None,
        expected_values: Optional[Dict[str, str]] = None,
        wps_limits: Optional[AuthorityLimits] = None,
    ):
        self.latency_seconds = settings.authority_latency_seconds if latency_seconds is None else latency_seconds
        self.expected_values = dict(expected_values or self.DEFAULT_EXPECTED_VALUES)
        self.wps_limits = wps_limits or AuthorityLimits(
            daily_limit=Decimal("5000"),
            monthly_limit=Decimal("20000"),
            remaining_daily=Decimal("4500"),
            remaining_monthly=Decimal("18000"),
        )

    async def validate_user(self, credentials: Credentials, request: WithdrawalRequest) -> ValidationResult:
        if credentials.method not in ALLOWED_METHODS:
            return ValidationResult(
                success=False,
                error="Invalid validation method",
                code=ErrorCode.INVALID_METHOD,
            )

        if not await self._check_credentials(credentials):
            return ValidationResult(
                success=False,
                error="User validation failed",
                code=ErrorCode.VALIDATION_FAILED,
            )

        eligibility = await self.check_eligibility(request)
        if not eligibility.is_eligible:
            return ValidationResult(
                success=False,
                error="User not eligible for withdrawal",
                code=ErrorCode.NOT_ELIGIBLE,
                eligibility_check=eligibility,
                reasons=list(eligibility.reasons),
            )

        return ValidationResult(
            success=True,
            message="User validated successfully",
            eligibility_check=eligibility,
        )

    async def check_eligibility(self, request: WithdrawalRequest) -> AuthorityEligibility:
        """WPS-side limits check; the mock always approves"""
        await self._simulate_call()
        return AuthorityEligibility(is_eligible=True, reasons=[], wps_limits=self.wps_limits)

    async def process_withdrawal(
        self, request: WithdrawalRequest, validation: ValidationResult
    ) -> ProcessingResult:
        if not validation.success:
            return ProcessingResult(
                success=False,
                error="Cannot process withdrawal - validation failed",
                code=ErrorCode.VALIDATION_FAILED,
            )

        await self._simulate_call()

        return ProcessingResult(
            success=True,
            message="Withdrawal processed successfully",
            receipt=self.generate_receipt(request),
            status=WithdrawalStatus.COMPLETED,
            transaction_id=generate_id("wps"),
        )

    def generate_receipt(self, request: WithdrawalRequest) -> Receipt:
        return Receipt(
            receipt_number=generate_receipt_number(),
            date=utcnow(),
            amount=request.amount,
            currency=request.currency,
            user=request.user.name,
            emirates_id=request.user.emirates_id,
            employer=request.user.employer_name,
            wps_partner=request.user.wps_partner,
            status=WithdrawalStatus.COMPLETED,
            message=RECEIPT_MESSAGE,
        )

    async def _check_credentials(self, credentials: Credentials) -> bool:
        await self._simulate_call()
        expected = self.expected_values.get(credentials.method)
        return expected is not None and credentials.value == expected

    async def _simulate_call(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)


class HttpAuthority:
    """Client for the WPS partner API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.http = RetryingJsonClient(
            base_url=base_url or settings.wps_endpoint,
            timeout=timeout or settings.http_timeout_seconds,
            max_retries=settings.http_max_retries if max_retries is None else max_retries,
            backoff_base=settings.http_backoff_base if backoff_base is None else backoff_base,
            transport=transport,
        )

    async def validate_user(self, credentials: Credentials, request: WithdrawalRequest) -> ValidationResult:
        """
        Validate the user with the WPS. Read-only on the WPS side, so retried.

        Raises:
            AuthorityAPIError: On timeout, HTTP errors, or invalid response
        """
        body = ValidateRequest(
            credentials=CredentialsSchema.model_validate(credentials),
            request=WithdrawalRequestSchema.model_validate(request),
        )
        data = await self._post("/wps/validate", body.model_dump(mode="json"), retry=True)
        try:
            return ValidationResponse.model_validate(data).to_domain()
        except ValueError as e:
            raise AuthorityAPIError(f"Invalid validation response from WPS: {e}") from e

    async def process_withdrawal(
        self, request: WithdrawalRequest, validation: ValidationResult
    ) -> ProcessingResult:
        """
        Ask the WPS to pay out. Sent exactly once: a replay could pay twice.

        Raises:
            AuthorityAPIError: On timeout, HTTP errors, or invalid response
        """
        body = ProcessRequest(
            request=WithdrawalRequestSchema.model_validate(request),
            validation=ValidationResponse.model_validate(validation),
        )
        data = await self._post("/wps/withdrawals", body.model_dump(mode="json"), retry=False)
        try:
            return ProcessingResponse.model_validate(data).to_domain()
        except ValueError as e:
            raise AuthorityAPIError(f"Invalid processing response from WPS: {e}") from e

    async def _post(self, path: str, payload: dict, retry: bool) -> dict:
        try:
            response = await self.http.post_json(path, payload, retry=retry)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise AuthorityAPIError(f"WPS API timeout after {self.http.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise AuthorityAPIError(f"WPS API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise AuthorityAPIError(f"WPS API unreachable: {e}") from e
        except ValueError as e:
            raise AuthorityAPIError(f"Invalid JSON from WPS: {e}") from e
