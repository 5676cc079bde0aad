"""Order cost computation and down-payment validation"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from agrocredit.config import settings
from agrocredit.domain.exceptions import ValidationError
from agrocredit.domain.models import OrderTerms

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
MAX_TOTAL = Decimal("9999999999.99")


def to_decimal(value: Number) -> Decimal:
    """
    Convert a numeric input to Decimal without binary float drift.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1") and
    not 0.1000000000000000055511151231257827.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Not a numeric amount: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"Not a numeric amount: {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"Not a numeric amount: {value!r}")
    return result


def to_money(value: Number) -> Decimal:
    """Quantize to the currency minor unit (cents, half-up)"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _ratio(ratio: Number | None) -> Decimal:
    return to_decimal(settings.down_payment_ratio if ratio is None else ratio)


def total_cost(quantity: Number, unit_price: Number) -> Decimal:
    """total = quantity x unit_price"""
    return to_money(to_decimal(quantity) * to_decimal(unit_price))


def down_payment(total: Number, ratio: Number | None = None) -> Decimal:
    """Required upfront share of the total (50% by default)"""
    return to_money(to_decimal(total) * _ratio(ratio))


def remaining_balance(total: Number, ratio: Number | None = None) -> Decimal:
    """
    Balance left after the down payment.

    Computed as total - down_payment so the two always sum to the total; on an
    odd-cent total the half cent is collected upfront.
    """
    return to_money(total) - down_payment(total, ratio)


def is_valid_down_payment(
    total: Number,
    recorded: Number,
    ratio: Number | None = None,
    tolerance: Number | None = None,
) -> bool:
    """
    Check a recorded down payment against the exact required share.

    The tolerance only absorbs rounding from currency parsing. Partial or
    larger down payments are invalid.
    """
    tol = to_decimal(settings.down_payment_tolerance if tolerance is None else tolerance)
    required = to_decimal(total) * _ratio(ratio)
    return abs(to_decimal(recorded) - required) < tol


def validate_down_payment(total: Number, recorded: Number, ratio: Number | None = None) -> None:
    """Raise ValidationError unless the recorded down payment is exactly the required share"""
    if not is_valid_down_payment(total, recorded, ratio):
        required = down_payment(total, ratio)
        raise ValidationError(
            f"Down payment must be exactly {_ratio(ratio) * 100:.0f}% of total cost "
            f"({required}), got {to_money(recorded)}"
        )


def _whole_cents(value: Number, label: str) -> Decimal:
    amount = to_decimal(value)
    try:
        exact = amount == amount.quantize(CENT)
    except InvalidOperation as e:
        raise ValidationError(f"{label} is out of range") from e
    if not exact:
        raise ValidationError(f"{label} allows at most 2 decimal places, got {amount}")
    return amount


def calculate_order_terms(quantity: Number, unit_price: Number, ratio: Number | None = None) -> OrderTerms:
    """
    Main entry point: validate order inputs and compute the cost breakdown.

    Quantity and unit price are stored to the cent, so finer inputs are
    refused rather than rounded; the total is their product to the cent.

    Raises:
        ValidationError: quantity, unit price or resulting total is not strictly
            positive, the total exceeds MAX_TOTAL, or an input has more than
            2 decimal places
    """
    qty = _whole_cents(quantity, "Quantity")
    price = _whole_cents(unit_price, "Unit price")
    if qty <= 0:
        raise ValidationError("Quantity must be positive")
    if price <= 0:
        raise ValidationError("Unit price must be positive")

    total = total_cost(qty, price)
    if total <= 0:
        raise ValidationError(f"Total cost must be positive, got {total}")
    if total > MAX_TOTAL:
        raise ValidationError(f"Total cost {total} exceeds the maximum of {MAX_TOTAL}")
    return OrderTerms(
        total_cost=total,
        down_payment=down_payment(total, ratio),
        remaining_balance=remaining_balance(total, ratio),
    )
