"""Fixed-point money helpers.

Every amount that enters the domain goes through :func:`to_amount`, which
quantizes it to the currency's minor unit. Allocation totals are compared
with ``==``, so amounts must never be left as binary floats.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from schoolpay.exceptions import ValidationError
from schoolpay.utils.config import get_settings

AmountLike = Union[Decimal, int, str, float]

ZERO = Decimal("0")


def _quantum(digits: int) -> Decimal:
    return Decimal(1).scaleb(-digits)


def to_amount(value: AmountLike, *, digits: int | None = None) -> Decimal:
    """Convert ``value`` to a Decimal quantized to the currency minor unit.

    Floats are converted through their shortest ``repr`` so ``0.1`` becomes
    ``Decimal("0.10")`` and not the binary expansion.

    Args:
        value: Amount as Decimal, int, numeric string or float
        digits: Decimal places; defaults to ``Settings.minor_unit_digits``

    Raises:
        ValidationError: If the value is not a finite number or is too large
            to hold at the requested precision
    """
    if digits is None:
        digits = get_settings().minor_unit_digits

    if isinstance(value, bool):
        raise ValidationError("Amount must be numeric", value=value, constraint="numeric")

    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip().replace(",", ""))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(
            "Amount must be numeric",
            value=value,
            constraint="numeric",
            original_error=e,
        ) from e

    if not amount.is_finite():
        raise ValidationError("Amount must be finite", value=value, constraint="finite")

    try:
        return amount.quantize(_quantum(digits), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError(
            "Amount is too large",
            value=value,
            constraint="range",
            original_error=e,
        ) from e


def clamp(amount: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp ``amount`` into ``[lower, upper]``."""
    return min(max(lower, amount), upper)


def format_amount(amount: AmountLike, symbol: str | None = None) -> str:
    """Format an amount for display, e.g. ``₦18,000.00``.

    Negative amounts keep the sign in front of the symbol.
    """
    settings = get_settings()
    value = to_amount(amount)
    symbol = settings.currency_symbol if symbol is None else symbol
    digits = settings.minor_unit_digits
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{digits}f}"
