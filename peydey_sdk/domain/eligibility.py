"""Eligibility engine - core business logic for early salary access"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List
from peydey_sdk.domain.models import UserRecord, Limits, EligibilityResult, FeeBreakdown
from peydey_sdk.domain.exceptions import InvalidAmountError
from peydey_sdk.utils.money import Amount, to_money, round2


@dataclass(frozen=True)
class EligibilityRules:
    """UAE early-access policy thresholds"""

    min_salary: Decimal = Decimal("1000")  # AED per month
    min_account_age: int = 30  # days
    min_credit_score: int = 650
    max_withdrawal_percent: Decimal = Decimal("0.25")  # of earned salary
    early_access_fee: Decimal = Decimal("0.05")
    vat_rate: Decimal = Decimal("0.05")  # applied to the fee, not the amount


DEFAULT_RULES = EligibilityRules()


def get_ineligibility_reasons(user: UserRecord, rules: EligibilityRules = DEFAULT_RULES) -> List[str]:
    """
    Collect every failing condition, in a fixed order:
    salary, account age, active loans, credit score, earned salary.
    """
    reasons = []

    if user.monthly_salary < rules.min_salary:
        reasons.append(f"Monthly salary below minimum requirement (AED {rules.min_salary})")
    if user.account_age < rules.min_account_age:
        reasons.append(f"Account age below minimum requirement ({rules.min_account_age} days)")
    if user.has_active_loans:
        reasons.append("Active loans detected")
    if user.credit_score < rules.min_credit_score:
        reasons.append(f"Credit score below minimum requirement ({rules.min_credit_score})")
    if user.earned_salary <= 0:
        reasons.append("No earned salary available")

    return reasons


def calculate_limits(user: UserRecord, rules: EligibilityRules = DEFAULT_RULES) -> Limits:
    """Available balance is a fixed share of salary earned so far this month"""
    available_balance = round2(user.earned_salary * rules.max_withdrawal_percent)

    return Limits(
        monthly_salary=user.monthly_salary,
        earned_salary=user.earned_salary,
        available_balance=available_balance,
        max_withdrawal_percent=rules.max_withdrawal_percent * 100,
        account_age=user.account_age,
        early_access_fee=rules.early_access_fee,
        vat_rate=rules.vat_rate,
    )


def check_eligibility(user: UserRecord, rules: EligibilityRules = DEFAULT_RULES) -> EligibilityResult:
    """
    Main entry point: decide whether the user may withdraw early.

    Eligible iff salary >= minimum, account old enough, no active loans,
    credit score >= minimum and some salary already earned. Limits are
    always computed, even for ineligible users.
    """
    reasons = get_ineligibility_reasons(user, rules)

    return EligibilityResult(
        is_eligible=not reasons,
        reasons=reasons,
        limits=calculate_limits(user, rules),
    )


def calculate_fees(amount: Amount, rules: EligibilityRules = DEFAULT_RULES) -> FeeBreakdown:
    """
    Quote the early-access fee for a withdrawal.

    fee = amount * 5%, VAT = fee * 5%, both rounded to cents; the user
    receives the amount minus fee and VAT.

    Example:
        100 -> fee 5.00, VAT 0.25, total 5.25, you receive 94.75

    Raises:
        InvalidAmountError: If amount is negative or not a number
    """
    value = to_money(amount)
    if value < 0:
        raise InvalidAmountError(f"Fee amount cannot be negative: {value}")

    early_access_fee = round2(value * rules.early_access_fee)
    vat_amount = round2(early_access_fee * rules.vat_rate)
    total_fee = round2(early_access_fee + vat_amount)

    return FeeBreakdown(
        requested_amount=value,
        early_access_fee=early_access_fee,
        vat_amount=vat_amount,
        total_fee=total_fee,
        you_receive=round2(value - total_fee),
    )
