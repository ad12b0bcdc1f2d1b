"""Collection statistics over recorded payments."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from ...domain.enums import FeeType, PaymentMethod, PaymentStatus
from ...domain.models import PaymentRecord
from ...domain.money import ZERO, to_amount


@dataclass(frozen=True)
class CategoryTotal:
    """How many allocations hit a fee type and how much they brought in."""

    count: int = 0
    amount: Decimal = ZERO

    def add(self, amount: Decimal) -> "CategoryTotal":
        return CategoryTotal(count=self.count + 1, amount=self.amount + amount)


@dataclass(frozen=True)
class PaymentSummary:
    """Totals over confirmed payments."""

    total_count: int = 0
    total_amount: Decimal = ZERO
    by_fee_type: dict[FeeType, CategoryTotal] = field(default_factory=dict)
    by_method: dict[PaymentMethod, Decimal] = field(default_factory=dict)

    @property
    def average_amount(self) -> Decimal:
        if self.total_count == 0:
            return ZERO
        return to_amount(self.total_amount / self.total_count)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_count": self.total_count,
            "total_amount": str(self.total_amount),
            "by_fee_type": {
                fee_type.value: {"count": total.count, "amount": str(total.amount)}
                for fee_type, total in self.by_fee_type.items()
            },
            "by_method": {method.value: str(amount) for method, amount in self.by_method.items()},
        }


def summarize_payments(
    payments: Iterable[PaymentRecord],
    *,
    start: date | None = None,
    end: date | None = None,
) -> PaymentSummary:
    """Summarize confirmed payments, optionally within ``[start, end]`` payment dates.

    Pending, cancelled and refunded payments are ignored.
    """
    total_count = 0
    total_amount = ZERO
    by_fee_type: dict[FeeType, CategoryTotal] = {}
    by_method: dict[PaymentMethod, Decimal] = {}

    for payment in payments:
        if payment.status != PaymentStatus.CONFIRMED:
            continue
        if start is not None and payment.payment_date < start:
            continue
        if end is not None and payment.payment_date > end:
            continue

        total_count += 1
        total_amount += payment.amount
        by_method[payment.payment_method] = (
            by_method.get(payment.payment_method, ZERO) + payment.amount
        )
        for allocation in payment.fee_allocations:
            by_fee_type[allocation.type] = by_fee_type.get(allocation.type, CategoryTotal()).add(
                allocation.amount
            )

    return PaymentSummary(
        total_count=total_count,
        total_amount=total_amount,
        by_fee_type=by_fee_type,
        by_method=by_method,
    )
