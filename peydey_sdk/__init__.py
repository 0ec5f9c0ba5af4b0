"""PeyDey SDK - early salary access with UAE WPS integration"""

__version__ = "1.0.0"

from peydey_sdk.config import SDKSettings
from peydey_sdk.domain.eligibility import EligibilityRules, calculate_fees, calculate_limits, check_eligibility
from peydey_sdk.domain.exceptions import ErrorCode
from peydey_sdk.domain.models import Credentials, OnboardingCredentials, ValidationMethod, WithdrawalStatus
from peydey_sdk.domain.withdrawal import WithdrawalCallback, WithdrawalCoordinator
from peydey_sdk.infrastructure.clients.authority import ExternalAuthority, HttpAuthority, MockAuthority
from peydey_sdk.infrastructure.clients.directory import HttpUserDirectory, MockUserDirectory, UserDirectory
from peydey_sdk.sdk import PeyDeySDK

__all__ = [
    "PeyDeySDK",
    "SDKSettings",
    "EligibilityRules",
    "check_eligibility",
    "calculate_limits",
    "calculate_fees",
    "ErrorCode",
    "Credentials",
    "OnboardingCredentials",
    "ValidationMethod",
    "WithdrawalStatus",
    "WithdrawalCallback",
    "WithdrawalCoordinator",
    "ExternalAuthority",
    "MockAuthority",
    "HttpAuthority",
    "UserDirectory",
    "MockUserDirectory",
    "HttpUserDirectory",
]
