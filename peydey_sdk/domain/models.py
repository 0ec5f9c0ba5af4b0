"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from peydey_sdk.domain.exceptions import InvalidAmountError, InvalidUserDataError
from peydey_sdk.utils.money import to_money


class WithdrawalStatus(str, Enum):
    """Lifecycle of a withdrawal request and its ledger entry"""

    PENDING = "pending"  # created, not yet sent to WPS
    VALIDATING = "validating"
    VALIDATED = "validated"
    REJECTED = "rejected"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ValidationMethod(str, Enum):
    """Credential types the WPS accepts for user validation"""

    PASSWORD = "password"
    PIN = "pin"
    EMIRATES_ID = "emirates_id"


@dataclass(frozen=True)
class UserRecord:
    """Employee record returned by the user directory"""

    id: str
    name: str
    emirates_id: str
    phone_number: str
    employer_name: str
    wps_partner: str
    monthly_salary: Decimal
    earned_salary: Decimal
    account_age: int  # days
    has_active_loans: bool
    credit_score: int
    email: Optional[str] = None
    profile_picture: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            monthly = to_money(self.monthly_salary)
            earned = to_money(self.earned_salary)
        except InvalidAmountError as e:
            raise InvalidUserDataError(f"Invalid salary for user {self.id}: {e}") from e

        if monthly < 0 or earned < 0:
            raise InvalidUserDataError(f"Negative salary for user {self.id}")
        if self.account_age < 0:
            raise InvalidUserDataError(f"Negative account age for user {self.id}")

        # Frozen dataclass: normalise money fields in place
        object.__setattr__(self, "monthly_salary", monthly)
        object.__setattr__(self, "earned_salary", earned)


@dataclass(frozen=True)
class OnboardingCredentials:
    """Login details used for the directory lookup"""

    emirates_id: str
    phone_number: str


@dataclass(frozen=True)
class Credentials:
    """Credential presented to the WPS during validation"""

    method: str
    value: str


@dataclass
class Limits:
    """Withdrawal limits derived from a user record"""

    monthly_salary: Decimal
    earned_salary: Decimal
    available_balance: Decimal
    max_withdrawal_percent: Decimal  # in percent, e.g. 25
    account_age: int
    early_access_fee: Decimal  # rate, e.g. 0.05
    vat_rate: Decimal


@dataclass
class EligibilityResult:
    """Output of the eligibility check"""

    is_eligible: bool
    reasons: List[str]
    limits: Limits


@dataclass
class FeeBreakdown:
    """Fee quote for a requested withdrawal amount"""

    requested_amount: Decimal
    early_access_fee: Decimal
    vat_amount: Decimal
    total_fee: Decimal
    you_receive: Decimal


@dataclass(frozen=True)
class UserSnapshot:
    """Display fields copied off the user record when a withdrawal is created"""

    name: str
    emirates_id: str
    phone_number: str
    employer_name: str
    wps_partner: str

    @classmethod
    def from_user(cls, user: UserRecord) -> "UserSnapshot":
        return cls(
            name=user.name,
            emirates_id=user.emirates_id,
            phone_number=user.phone_number,
            employer_name=user.employer_name,
            wps_partner=user.wps_partner,
        )


@dataclass
class WithdrawalRequest:
    """Early salary withdrawal handed to the WPS"""

    id: str
    user_id: str
    amount: Decimal
    withdrawal_type: str
    currency: str
    status: WithdrawalStatus
    timestamp: datetime
    user: UserSnapshot


@dataclass
class AuthorityLimits:
    """Limits the WPS applies on its own side"""

    daily_limit: Decimal
    monthly_limit: Decimal
    remaining_daily: Decimal
    remaining_monthly: Decimal


@dataclass
class AuthorityEligibility:
    """WPS-side eligibility sub-check attached to a validation"""

    is_eligible: bool
    reasons: List[str] = field(default_factory=list)
    wps_limits: Optional[AuthorityLimits] = None


@dataclass
class Receipt:
    """Proof of a processed withdrawal"""

    receipt_number: str
    date: datetime
    amount: Decimal
    currency: str
    user: str
    emirates_id: str
    employer: str
    wps_partner: str
    status: WithdrawalStatus
    message: str


@dataclass
class LedgerEntry:
    """Withdrawal transaction recorded in the in-memory ledger"""

    id: str
    user_id: str
    amount: Decimal
    currency: str
    status: WithdrawalStatus
    timestamp: datetime
    withdrawal_type: str = "salary"
    withdrawal_id: Optional[str] = None
    updated_at: Optional[datetime] = None
    receipt: Optional[Receipt] = None
