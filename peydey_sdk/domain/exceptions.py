"""Domain-specific exceptions and the error codes surfaced in step results"""

from enum import Enum
from typing import List, Optional


class ErrorCode(str, Enum):
    """Machine-readable failure codes returned in structured results"""

    AUTH_FAILED = "AUTH_FAILED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    EXCEEDS_BALANCE = "EXCEEDS_BALANCE"
    EXCEEDS_SALARY_LIMIT = "EXCEEDS_SALARY_LIMIT"
    INVALID_METHOD = "INVALID_METHOD"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    AUTHORITY_ERROR = "AUTHORITY_ERROR"
    AUTHORITY_TIMEOUT = "AUTHORITY_TIMEOUT"

    # Generic per-step codes for unexpected internal errors
    ONBOARDING_ERROR = "ONBOARDING_ERROR"
    DETAILS_ERROR = "DETAILS_ERROR"
    HISTORY_ERROR = "HISTORY_ERROR"
    FEES_ERROR = "FEES_ERROR"
    WITHDRAWAL_ERROR = "WITHDRAWAL_ERROR"


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SDKError(DomainException):
    """Domain error that maps onto a structured failure code"""

    code: ErrorCode = ErrorCode.WITHDRAWAL_ERROR

    def __init__(self, message: str, reasons: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.reasons = list(reasons or [])


class InvalidAmountError(SDKError):
    """Amount is not a positive (or, for fee quotes, non-negative) number"""

    code = ErrorCode.INVALID_AMOUNT


class ExceedsBalanceError(SDKError):
    """Requested amount is above the user's available balance"""

    code = ErrorCode.EXCEEDS_BALANCE


class ExceedsSalaryLimitError(SDKError):
    """Requested amount is above the share of earned salary that may be advanced"""

    code = ErrorCode.EXCEEDS_SALARY_LIMIT


class InvalidUserDataError(DomainException):
    """User record from the directory is malformed or invalid"""

    pass


class AuthorityAPIError(SDKError):
    """WPS API returned an error or is unavailable"""

    code = ErrorCode.AUTHORITY_ERROR


class DirectoryAPIError(DomainException):
    """User directory returned an error or is unavailable"""

    pass


class AuthorityTimeoutError(SDKError):
    """WPS did not answer within the configured bound"""

    code = ErrorCode.AUTHORITY_TIMEOUT
