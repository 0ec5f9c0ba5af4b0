"""Pydantic schemas for the WPS and user directory wire format"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from peydey_sdk.domain.exceptions import ErrorCode
from peydey_sdk.domain.models import (
    AuthorityEligibility,
    AuthorityLimits,
    Credentials,
    OnboardingCredentials,
    Receipt,
    UserRecord,
    UserSnapshot,
    WithdrawalRequest,
    WithdrawalStatus,
)
from peydey_sdk.domain.results import ProcessingResult, ValidationResult


class WireModel(BaseModel):
    """Base for schemas built straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


class LookupRequest(WireModel):
    """Request body for POST /directory/lookup"""

    emirates_id: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)

    def to_domain(self) -> OnboardingCredentials:
        return OnboardingCredentials(emirates_id=self.emirates_id, phone_number=self.phone_number)


class UserSchema(WireModel):
    """Response for POST /directory/lookup"""

    id: str
    name: str
    emirates_id: str
    phone_number: str
    employer_name: str
    wps_partner: str
    monthly_salary: Decimal = Field(..., ge=0)
    earned_salary: Decimal = Field(..., ge=0)
    account_age: int = Field(..., ge=0)
    has_active_loans: bool
    credit_score: int
    email: Optional[str] = None
    profile_picture: Optional[str] = None

    def to_domain(self) -> UserRecord:
        return UserRecord(**self.model_dump())


class UserSnapshotSchema(WireModel):
    name: str
    emirates_id: str
    phone_number: str
    employer_name: str
    wps_partner: str

    def to_domain(self) -> UserSnapshot:
        return UserSnapshot(**self.model_dump())


class WithdrawalRequestSchema(WireModel):
    id: str
    user_id: str
    amount: Decimal = Field(..., gt=0)
    withdrawal_type: str
    currency: str
    status: WithdrawalStatus
    timestamp: datetime
    user: UserSnapshotSchema

    def to_domain(self) -> WithdrawalRequest:
        return WithdrawalRequest(
            id=self.id,
            user_id=self.user_id,
            amount=self.amount,
            withdrawal_type=self.withdrawal_type,
            currency=self.currency,
            status=self.status,
            timestamp=self.timestamp,
            user=self.user.to_domain(),
        )


class CredentialsSchema(WireModel):
    method: str
    value: str

    def to_domain(self) -> Credentials:
        return Credentials(method=self.method, value=self.value)


class AuthorityLimitsSchema(WireModel):
    daily_limit: Decimal
    monthly_limit: Decimal
    remaining_daily: Decimal
    remaining_monthly: Decimal

    def to_domain(self) -> AuthorityLimits:
        return AuthorityLimits(**self.model_dump())


class AuthorityEligibilitySchema(WireModel):
    is_eligible: bool
    reasons: List[str] = []
    wps_limits: Optional[AuthorityLimitsSchema] = None

    def to_domain(self) -> AuthorityEligibility:
        return AuthorityEligibility(
            is_eligible=self.is_eligible,
            reasons=list(self.reasons),
            wps_limits=self.wps_limits.to_domain() if self.wps_limits else None,
        )


class ValidateRequest(WireModel):
    """Request body for POST /wps/validate"""

    credentials: CredentialsSchema
    request: WithdrawalRequestSchema


class ValidationResponse(WireModel):
    """Response for POST /wps/validate"""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    eligibility_check: Optional[AuthorityEligibilitySchema] = None
    reasons: List[str] = []

    def to_domain(self) -> ValidationResult:
        return ValidationResult(
            success=self.success,
            message=self.message,
            error=self.error,
            code=self.code,
            eligibility_check=self.eligibility_check.to_domain() if self.eligibility_check else None,
            reasons=list(self.reasons),
        )


class ReceiptSchema(WireModel):
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

    def to_domain(self) -> Receipt:
        return Receipt(**self.model_dump())


class ProcessRequest(WireModel):
    """Request body for POST /wps/withdrawals"""

    request: WithdrawalRequestSchema
    validation: ValidationResponse


class ProcessingResponse(WireModel):
    """Response for POST /wps/withdrawals"""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    receipt: Optional[ReceiptSchema] = None
    status: Optional[WithdrawalStatus] = None
    transaction_id: Optional[str] = None

    def to_domain(self) -> ProcessingResult:
        return ProcessingResult(
            success=self.success,
            message=self.message,
            error=self.error,
            code=self.code,
            receipt=self.receipt.to_domain() if self.receipt else None,
            status=self.status,
            transaction_id=self.transaction_id,
        )
