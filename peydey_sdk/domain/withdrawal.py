"""Withdrawal coordination and the WPS callback handshake"""

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Awaitable, Deque, Dict, Optional, TypeVar, Union
from peydey_sdk.domain.eligibility import DEFAULT_RULES, EligibilityRules
from peydey_sdk.domain.exceptions import (
    AuthorityAPIError,
    AuthorityTimeoutError,
    ErrorCode,
    ExceedsBalanceError,
    ExceedsSalaryLimitError,
    InvalidAmountError,
    SDKError,
)
from peydey_sdk.domain.models import (
    Credentials,
    Limits,
    Receipt,
    UserRecord,
    UserSnapshot,
    WithdrawalRequest,
    WithdrawalStatus,
)
from peydey_sdk.domain.results import Failure, ProcessingResult, ValidationResult, WithdrawalInitiated
from peydey_sdk.infrastructure.clients.authority import ExternalAuthority
from peydey_sdk.infrastructure.memory.ledger import TransactionLedger
from peydey_sdk.infrastructure.observability.metrics import authority_failure_counter, authority_latency_histogram
from peydey_sdk.utils.date_utils import utcnow
from peydey_sdk.utils.ids import generate_id
from peydey_sdk.utils.money import Amount, format_amount, to_money

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A request may be (re)validated until processing starts
VALIDATABLE = frozenset({WithdrawalStatus.PENDING, WithdrawalStatus.REJECTED, WithdrawalStatus.VALIDATED})
PROCESSED = frozenset({WithdrawalStatus.PROCESSING, WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED})
FINISHED = frozenset({WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED})


def validate_withdrawal_request(
    limits: Limits,
    amount: Amount,
    rules: EligibilityRules = DEFAULT_RULES,
    currency: str = "AED",
) -> Decimal:
    """
    Check a requested amount against the user's limits.

    Checks run in order and the first failure wins. The balance and salary
    checks overlap today (available balance is derived from earned salary)
    but are evaluated separately so each keeps its own code.

    Returns:
        The amount as Decimal

    Raises:
        InvalidAmountError: amount <= 0 or not a number
        ExceedsBalanceError: amount > available balance
        ExceedsSalaryLimitError: amount > earned salary * max withdrawal percent
    """
    try:
        value = to_money(amount)
    except InvalidAmountError as e:
        raise InvalidAmountError("Invalid withdrawal amount") from e

    if value <= 0:
        raise InvalidAmountError("Invalid withdrawal amount")

    if value > limits.available_balance:
        raise ExceedsBalanceError(
            f"Amount exceeds available balance of {currency} {format_amount(limits.available_balance)}"
        )

    if value > limits.earned_salary * rules.max_withdrawal_percent:
        percent = format_amount(rules.max_withdrawal_percent * 100)
        raise ExceedsSalaryLimitError(f"Amount exceeds {percent}% of earned salary limit")

    return value


@dataclass(frozen=True)
class WithdrawalCallback:
    """
    Handle returned to the caller for the WPS steps of one withdrawal.

    Carries only the request id; the coordinator looks the request up on
    every call, so the WPS always sees the request this handle was issued for.
    """

    request_id: str
    coordinator: "WithdrawalCoordinator" = field(repr=False, compare=False)

    async def validate_user(self, credentials: Credentials) -> ValidationResult:
        return await self.coordinator.validate(self.request_id, credentials)

    async def process_withdrawal(self, validation_result: ValidationResult) -> ProcessingResult:
        return await self.coordinator.process(self.request_id, validation_result)


@dataclass
class _TrackedWithdrawal:
    request: WithdrawalRequest
    ledger_entry_id: Optional[str] = None


class WithdrawalCoordinator:
    """
    Creates withdrawal requests and sequences the WPS handshake.

    Per-request state machine:
        pending -> validating -> validated | rejected -> processing -> completed | failed

    The coordinator never calls the WPS on its own; it hands the caller a
    WithdrawalCallback and acts only when the caller invokes it.

    Finished (completed or failed) requests are kept for status lookups,
    up to retain_finished of them; older ones are dropped oldest first and
    their outcome stays in the ledger. None keeps them all.
    """

    def __init__(
        self,
        authority: ExternalAuthority,
        ledger: Optional[TransactionLedger] = None,
        currency: str = "AED",
        rules: EligibilityRules = DEFAULT_RULES,
        timeout_seconds: float | None = None,
        retain_finished: int | None = 1000,
    ):
        self.authority = authority
        self.ledger = ledger
        self.currency = currency
        self.rules = rules
        self.timeout_seconds = timeout_seconds
        self.retain_finished = retain_finished
        self._lock = threading.Lock()
        self._withdrawals: Dict[str, _TrackedWithdrawal] = {}
        self._finished: Deque[str] = deque()

    def initiate_withdrawal(
        self,
        user: UserRecord,
        limits: Limits,
        amount: Amount,
        withdrawal_type: str = "salary",
    ) -> Union[WithdrawalInitiated, Failure]:
        """Validate the amount and register a pending request; no WPS call is made here"""
        try:
            value = validate_withdrawal_request(limits, amount, self.rules, self.currency)
        except SDKError as e:
            logger.info(f"Withdrawal rejected: {e.message}", extra={"user_id": user.id, "code": e.code.value})
            return Failure.from_error(e)

        request = WithdrawalRequest(
            id=generate_id("wd"),
            user_id=user.id,
            amount=value,
            withdrawal_type=withdrawal_type,
            currency=self.currency,
            status=WithdrawalStatus.PENDING,
            timestamp=utcnow(),
            user=UserSnapshot.from_user(user),
        )

        ledger_entry = None
        if self.ledger is not None:
            ledger_entry = self.ledger.add_transaction(
                user.id,
                value,
                currency=self.currency,
                withdrawal_type=withdrawal_type,
                withdrawal_id=request.id,
            )

        with self._lock:
            self._withdrawals[request.id] = _TrackedWithdrawal(
                request=request,
                ledger_entry_id=ledger_entry.id if ledger_entry else None,
            )

        return WithdrawalInitiated(
            withdrawal_request=replace(request),
            callback=WithdrawalCallback(request_id=request.id, coordinator=self),
            ledger_entry=ledger_entry,
        )

    def get_withdrawal_status(self, request_id: str) -> Optional[WithdrawalRequest]:
        with self._lock:
            tracked = self._withdrawals.get(request_id)
            return replace(tracked.request) if tracked else None

    async def validate(self, request_id: str, credentials: Credentials) -> ValidationResult:
        """Step 6: have the WPS validate the user for this request"""
        with self._lock:
            tracked = self._withdrawals.get(request_id)
            if tracked is None:
                return ValidationResult(
                    success=False, error=f"Unknown withdrawal request {request_id}", code=ErrorCode.REQUEST_NOT_FOUND
                )
            if tracked.request.status == WithdrawalStatus.VALIDATING:
                return ValidationResult(
                    success=False,
                    error=f"Validation of withdrawal {request_id} is already in progress",
                    code=ErrorCode.VALIDATION_FAILED,
                )
            if tracked.request.status not in VALIDATABLE:
                return ValidationResult(
                    success=False,
                    error=f"Withdrawal {request_id} is already {tracked.request.status.value}",
                    code=ErrorCode.ALREADY_PROCESSED,
                )
            tracked.request.status = WithdrawalStatus.VALIDATING
            snapshot = replace(tracked.request)

        try:
            result = await self._call_authority("validate_user", self.authority.validate_user(credentials, snapshot))
        except SDKError as e:
            result = ValidationResult(success=False, error=e.message, code=e.code)
        except asyncio.CancelledError:
            # Caller gave up waiting; the request stays open for another attempt
            self._set_status(request_id, WithdrawalStatus.REJECTED)
            raise

        status = WithdrawalStatus.VALIDATED if result.success else WithdrawalStatus.REJECTED
        self._set_status(request_id, status)
        logger.info(
            "WPS validation finished",
            extra={"request_id": request_id, "status": status.value, "code": result.code.value if result.code else None},
        )
        return result

    async def process(self, request_id: str, validation: ValidationResult) -> ProcessingResult:
        """
        Step 7: have the WPS pay out this request.

        A successful validation is only accepted for a request in the
        validated state. At most one processing attempt per request: once
        processing has started, further calls return ALREADY_PROCESSED
        without reaching the WPS. A failed validation is forwarded to the
        WPS, which refuses it, and leaves the request state untouched.
        """
        with self._lock:
            tracked = self._withdrawals.get(request_id)
            if tracked is None:
                return ProcessingResult(
                    success=False, error=f"Unknown withdrawal request {request_id}", code=ErrorCode.REQUEST_NOT_FOUND
                )
            current = tracked.request.status
            if current in PROCESSED:
                return ProcessingResult(
                    success=False,
                    error=f"Withdrawal {request_id} has already been processed",
                    code=ErrorCode.ALREADY_PROCESSED,
                    status=current,
                )
            if validation.success:
                if current != WithdrawalStatus.VALIDATED:
                    return ProcessingResult(
                        success=False,
                        error=f"Withdrawal {request_id} has not been validated by the WPS",
                        code=ErrorCode.VALIDATION_FAILED,
                        status=current,
                    )
                tracked.request.status = WithdrawalStatus.PROCESSING
            snapshot = replace(tracked.request)

        try:
            result = await self._call_authority(
                "process_withdrawal", self.authority.process_withdrawal(snapshot, validation)
            )
        except SDKError as e:
            result = ProcessingResult(success=False, error=e.message, code=e.code)
        except asyncio.CancelledError:
            # The payout may already have happened, so it is never reopened
            if validation.success:
                self._set_status(request_id, WithdrawalStatus.FAILED)
            raise

        if not validation.success:
            return result

        status = WithdrawalStatus.COMPLETED if result.success else WithdrawalStatus.FAILED
        self._set_status(request_id, status, result.receipt)
        logger.info(
            "WPS processing finished",
            extra={"request_id": request_id, "status": status.value, "transaction_id": result.transaction_id},
        )
        return result

    async def _call_authority(self, operation: str, call: Awaitable[T]) -> T:
        """
        Await a WPS call, bounded by timeout_seconds when set.

        Raises:
            AuthorityTimeoutError: The call did not finish in time
            AuthorityAPIError: The WPS client failed, including unexpected exceptions
        """
        try:
            with authority_latency_histogram.labels(operation=operation).time():
                if self.timeout_seconds:
                    return await asyncio.wait_for(call, self.timeout_seconds)
                return await call

        except asyncio.TimeoutError as e:
            authority_failure_counter.labels(operation=operation).inc()
            raise AuthorityTimeoutError(f"WPS {operation} timed out after {self.timeout_seconds}s") from e
        except SDKError:
            authority_failure_counter.labels(operation=operation).inc()
            raise
        except Exception as e:
            authority_failure_counter.labels(operation=operation).inc()
            logger.exception(f"WPS {operation} raised an unexpected error")
            raise AuthorityAPIError(f"WPS {operation} failed: {e}") from e

    def _set_status(self, request_id: str, status: WithdrawalStatus, receipt: Optional[Receipt] = None) -> None:
        with self._lock:
            tracked = self._withdrawals[request_id]
            tracked.request.status = status
            ledger_entry_id = tracked.ledger_entry_id
            if status in FINISHED:
                self._retire(request_id)

        if self.ledger is not None and ledger_entry_id is not None and status in PROCESSED:
            self.ledger.update_transaction_status(ledger_entry_id, status, receipt)

    def _retire(self, request_id: str) -> None:
        """Queue a finished request and drop the oldest past retain_finished; caller holds the lock"""
        if self.retain_finished is None:
            return
        self._finished.append(request_id)
        while len(self._finished) > self.retain_finished:
            self._withdrawals.pop(self._finished.popleft(), None)
