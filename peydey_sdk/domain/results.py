"""Structured step results returned by the SDK instead of raising"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional
from peydey_sdk.domain.exceptions import ErrorCode, SDKError
from peydey_sdk.domain.models import (
    AuthorityEligibility,
    EligibilityResult,
    FeeBreakdown,
    LedgerEntry,
    Limits,
    Receipt,
    UserRecord,
    WithdrawalRequest,
    WithdrawalStatus,
)

if TYPE_CHECKING:
    from peydey_sdk.domain.withdrawal import WithdrawalCallback


@dataclass
class Failure:
    """Any failed step: code + human message (+ reasons for eligibility failures)"""

    code: ErrorCode
    error: str
    reasons: List[str] = field(default_factory=list)
    success: bool = field(default=False, init=False)

    @classmethod
    def from_error(cls, error: SDKError) -> "Failure":
        return cls(code=error.code, error=error.message, reasons=error.reasons)


@dataclass
class OnboardResult:
    session_id: str
    user: UserRecord
    message: str = "User onboarded successfully"
    success: bool = field(default=True, init=False)


@dataclass
class UserDetailsResult:
    user: UserRecord
    limits: Limits
    eligibility: EligibilityResult
    transaction_history: List[LedgerEntry]
    can_proceed: bool
    success: bool = field(default=True, init=False)


@dataclass
class FormattedTransaction:
    entry: LedgerEntry
    formatted_date: str


@dataclass
class TransactionHistoryResult:
    available_balance: Decimal
    transactions: List[FormattedTransaction]
    success: bool = field(default=True, init=False)


@dataclass
class FeesResult:
    fees: FeeBreakdown
    success: bool = field(default=True, init=False)


@dataclass
class WithdrawalInitiated:
    withdrawal_request: WithdrawalRequest
    callback: "WithdrawalCallback"
    ledger_entry: Optional[LedgerEntry] = None
    message: str = "Withdrawal request created. Proceed with WPS validation."
    success: bool = field(default=True, init=False)


@dataclass
class ValidationResult:
    """
    Outcome of WPS user validation.

    Consumed by process_withdrawal; never persisted.
    """

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    eligibility_check: Optional[AuthorityEligibility] = None
    reasons: List[str] = field(default_factory=list)


@dataclass
class ProcessingResult:
    """Outcome of WPS withdrawal processing"""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    receipt: Optional[Receipt] = None
    status: Optional[WithdrawalStatus] = None
    transaction_id: Optional[str] = None


@dataclass
class ExitResult:
    message: str = "Successfully exited SDK"
    success: bool = field(default=True, init=False)


@dataclass
class CallRecord:
    type: str
    message: str
    data: Dict[str, object]
    timestamp: float


@dataclass
class SDKStats:
    total_calls: int
    call_types: Dict[str, int]
    last_call: Optional[CallRecord]
