"""PeyDey SDK facade - the seven-step early salary access flow"""

import logging
import time
from typing import Any, List, Optional, Union
from peydey_sdk.config import SDKSettings, settings as default_settings
from peydey_sdk.domain.eligibility import (
    DEFAULT_RULES,
    EligibilityRules,
    calculate_fees,
    check_eligibility,
)
from peydey_sdk.domain.exceptions import ErrorCode, SDKError
from peydey_sdk.domain.models import OnboardingCredentials, WithdrawalRequest
from peydey_sdk.domain.results import (
    CallRecord,
    ExitResult,
    Failure,
    FeesResult,
    FormattedTransaction,
    OnboardResult,
    SDKStats,
    TransactionHistoryResult,
    UserDetailsResult,
    WithdrawalInitiated,
)
from peydey_sdk.domain.withdrawal import WithdrawalCoordinator
from peydey_sdk.infrastructure.clients.authority import ExternalAuthority, MockAuthority
from peydey_sdk.infrastructure.clients.directory import MockUserDirectory, UserDirectory
from peydey_sdk.infrastructure.memory.ledger import TransactionLedger
from peydey_sdk.infrastructure.memory.session import SessionState, SessionStore
from peydey_sdk.infrastructure.observability.logging import (
    SDK_LOGGER_NAME,
    CallHistory,
    log_withdrawal,
    setup_logging,
)
from peydey_sdk.infrastructure.observability.metrics import directory_failure_counter, record_step, record_withdrawal
from peydey_sdk.utils.money import Amount

logger = logging.getLogger(SDK_LOGGER_NAME)

NOT_AUTHENTICATED = "User not authenticated"


class PeyDeySDK:
    """
    Entry point for host apps.

    Flow:
    1. onboard_user - look the user up in the directory, open a session
    2. get_user_details - eligibility, limits and recent withdrawals
    3. get_transaction_history - available balance + formatted ledger
    4. calculate_withdrawal_fees - fee quote for an amount
    5. handle_withdrawal_request - create the request, get a WPS callback
    6. callback.validate_user - WPS validates the user (caller-driven)
    7. callback.process_withdrawal - WPS pays out (caller-driven)
    Then exit_sdk.

    Every step returns a result object with a success flag; failures are
    Failure(code, error, reasons) and never raised.
    """

    def __init__(
        self,
        settings: Optional[SDKSettings] = None,
        *,
        authority: Optional[ExternalAuthority] = None,
        directory: Optional[UserDirectory] = None,
        rules: EligibilityRules = DEFAULT_RULES,
        **overrides: Any,
    ):
        base = settings or default_settings
        self.settings = base.model_copy(update=overrides) if overrides else base
        self.rules = rules

        self.directory = directory or MockUserDirectory(latency_seconds=self.settings.directory_latency_seconds)
        self.authority = authority or MockAuthority(latency_seconds=self.settings.authority_latency_seconds)
        self.session = SessionStore()
        self.ledger = TransactionLedger(currency=self.settings.currency)
        self.withdrawals = WithdrawalCoordinator(
            self.authority,
            ledger=self.ledger,
            currency=self.settings.currency,
            rules=self.rules,
            timeout_seconds=self.settings.authority_timeout_seconds,
            retain_finished=self.settings.finished_withdrawal_retention,
        )

        if self.settings.debug:
            setup_logging(self.settings.log_level, self.settings.service_name)
        self.calls = CallHistory(logger, debug=self.settings.debug)

    # Step 1: Onboard / login with Emirates ID
    async def onboard_user(self, credentials: OnboardingCredentials) -> Union[OnboardResult, Failure]:
        try:
            user = await self.directory.lookup(credentials)

            if user is None:
                self.calls.log("Authentication failed")
                record_step("onboard", False)
                return Failure(code=ErrorCode.AUTH_FAILED, error="Authentication failed")

            session_id = self.session.create_session(user)
            self.calls.log("User onboarded successfully", user_id=user.id, session_id=session_id)
            record_step("onboard", True)
            return OnboardResult(session_id=session_id, user=user)

        except Exception as e:
            directory_failure_counter.inc()
            logger.exception("Onboarding failed")
            self.calls.log("Onboarding failed", call_type="error", error=str(e))
            record_step("onboard", False)
            return Failure(code=ErrorCode.ONBOARDING_ERROR, error="Onboarding failed")

    # Step 2: Welcome screen details
    def get_user_details(self) -> Union[UserDetailsResult, Failure]:
        session = self.session.get_session()
        if not session.is_authenticated:
            return self._not_authenticated("details")

        try:
            user = session.user
            eligibility = check_eligibility(user, self.rules)
            history = self.ledger.get_transaction_history(user.id, self.settings.history_limit)

            self.calls.log("User details retrieved", user_id=user.id)
            record_step("details", True)
            return UserDetailsResult(
                user=user,
                limits=eligibility.limits,
                eligibility=eligibility,
                transaction_history=history,
                can_proceed=eligibility.is_eligible,
            )

        except Exception:
            return self._unexpected("details", ErrorCode.DETAILS_ERROR, "Failed to retrieve user details")

    # Step 3: Available balance and transaction history
    def get_transaction_history(self) -> Union[TransactionHistoryResult, Failure]:
        session = self.session.get_session()
        if not session.is_authenticated:
            return self._not_authenticated("history")

        try:
            user = session.user
            eligibility = check_eligibility(user, self.rules)
            entries = self.ledger.get_transaction_history(user.id, self.settings.history_limit)

            self.calls.log("Transaction history retrieved", user_id=user.id, count=len(entries))
            record_step("history", True)
            return TransactionHistoryResult(
                available_balance=eligibility.limits.available_balance,
                transactions=[
                    FormattedTransaction(entry=entry, formatted_date=self.ledger.format_transaction_date(entry.timestamp))
                    for entry in entries
                ],
            )

        except Exception:
            return self._unexpected("history", ErrorCode.HISTORY_ERROR, "Failed to retrieve transaction history")

    # Step 4: Fee quote
    def calculate_withdrawal_fees(self, amount: Amount) -> Union[FeesResult, Failure]:
        session = self.session.get_session()
        if not session.is_authenticated:
            return self._not_authenticated("fees")

        try:
            fees = calculate_fees(amount, self.rules)
            self.calls.log("Fees calculated", user_id=session.user.id, amount=str(fees.requested_amount))
            record_step("fees", True)
            return FeesResult(fees=fees)

        except SDKError as e:
            record_step("fees", False)
            return Failure.from_error(e)
        except Exception:
            return self._unexpected("fees", ErrorCode.FEES_ERROR, "Failed to calculate fees")

    # Step 5: Get Paid - create the withdrawal and hand back the WPS callback
    async def handle_withdrawal_request(
        self, amount: Amount, withdrawal_type: str = "salary"
    ) -> Union[WithdrawalInitiated, Failure]:
        start_time = time.time()
        session = self.session.get_session()
        if not session.is_authenticated:
            return self._not_authenticated("withdrawal")

        try:
            user = session.user
            eligibility = check_eligibility(user, self.rules)

            if not eligibility.is_eligible:
                record_withdrawal("not_eligible")
                record_step("withdrawal", False)
                self.calls.log("Withdrawal refused: not eligible", user_id=user.id, reasons=eligibility.reasons)
                return Failure(
                    code=ErrorCode.NOT_ELIGIBLE,
                    error="User not eligible for withdrawal",
                    reasons=eligibility.reasons,
                )

            result = self.withdrawals.initiate_withdrawal(user, eligibility.limits, amount, withdrawal_type)

            duration_ms = (time.time() - start_time) * 1000
            if result.success:
                request = result.withdrawal_request
                record_withdrawal("initiated", request.amount)
                self.calls.log(
                    "Withdrawal request initiated", request_id=request.id, amount=str(request.amount), user_id=user.id
                )
                log_withdrawal(session.session_id, user.id, request.id, "initiated", str(request.amount), duration_ms)
            else:
                record_withdrawal("rejected")
                self.calls.log("Withdrawal request rejected", user_id=user.id, code=result.code.value)
                log_withdrawal(session.session_id, user.id, None, result.code.value, str(amount), duration_ms)

            record_step("withdrawal", result.success)
            return result

        except Exception:
            return self._unexpected("withdrawal", ErrorCode.WITHDRAWAL_ERROR, "Failed to create withdrawal request")

    def get_withdrawal_status(self, request_id: str) -> Optional[WithdrawalRequest]:
        return self.withdrawals.get_withdrawal_status(request_id)

    def get_session(self) -> SessionState:
        return self.session.get_session()

    def exit_sdk(self) -> ExitResult:
        self.session.clear_session()
        self.calls.log("User exited SDK")
        record_step("exit", True)
        return ExitResult()

    # Call history
    def get_call_history(self) -> List[CallRecord]:
        return self.calls.calls()

    def clear_history(self) -> None:
        self.calls.clear()

    def get_stats(self) -> SDKStats:
        return self.calls.stats()

    def _not_authenticated(self, step: str) -> Failure:
        record_step(step, False)
        return Failure(code=ErrorCode.NOT_AUTHENTICATED, error=NOT_AUTHENTICATED)

    def _unexpected(self, step: str, code: ErrorCode, message: str) -> Failure:
        logger.exception(message)
        self.calls.log(message, call_type="error", step=step)
        record_step(step, False)
        return Failure(code=code, error=message)
