"""Currency arithmetic helpers"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union
from peydey_sdk.domain.exceptions import InvalidAmountError

Amount = Union[int, float, str, Decimal]

CENT = Decimal("0.01")


def to_money(value: Amount) -> Decimal:
    """
    Convert a caller-supplied amount to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise InvalidAmountError(f"Invalid amount: {value!r}") from e

    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


def round2(value: Decimal) -> Decimal:
    """Round to cents, half away from zero"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Render without exponent or trailing zeros: 100.00 -> '100', 375.50 -> '375.5'"""
    return format(value.normalize(), "f")
