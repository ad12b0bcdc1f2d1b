"""Value objects of the allocation engine.

``AllocationItem`` is the engine's mutable working record, one per fee
category with an outstanding balance. ``PaymentAllocation`` and
``AllocationSummary`` are immutable outputs handed to callers.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .enums import AllocationState, FeeType
from .money import ZERO


@dataclass
class AllocationItem:
    """Portion of the current payment attributed to one fee category.

    ``max_amount`` is the category balance when the working set was built;
    ``allocated_amount`` always stays within ``[0, max_amount]``.
    """

    category_id: str
    category_name: str
    type: FeeType
    max_amount: Decimal
    is_mandatory: bool = False
    allocated_amount: Decimal = ZERO

    @property
    def priority_key(self) -> tuple[bool, Decimal]:
        """Sort key for automatic allocation: mandatory first, then larger balances."""
        return (not self.is_mandatory, -self.max_amount)

    @property
    def is_fully_allocated(self) -> bool:
        return self.allocated_amount == self.max_amount

    def to_payment_allocation(self) -> "PaymentAllocation":
        return PaymentAllocation(
            category_id=self.category_id,
            category_name=self.category_name,
            type=self.type,
            amount=self.allocated_amount,
        )


@dataclass(frozen=True)
class PaymentAllocation:
    """Amount of a payment applied to one fee category.

    Only categories that received a non-zero amount are represented.
    """

    category_id: str
    category_name: str
    type: FeeType
    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"Allocation amount must be positive, got {self.amount}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "type": self.type.value,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class AllocationSummary:
    """Snapshot of the engine for rendering a payment-entry screen."""

    payment_amount: Decimal
    total_allocated: Decimal
    remaining: Decimal
    is_valid: bool
    state: AllocationState
    auto_allocate_enabled: bool
    allocations: tuple[PaymentAllocation, ...] = field(default_factory=tuple)

    @property
    def outstanding_after_payment(self) -> bool:
        """Whether some of the payment still needs a category."""
        return self.remaining > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "payment_amount": str(self.payment_amount),
            "total_allocated": str(self.total_allocated),
            "remaining": str(self.remaining),
            "is_valid": self.is_valid,
            "state": self.state.value,
            "auto_allocate_enabled": self.auto_allocate_enabled,
            "allocations": [a.to_dict() for a in self.allocations],
        }
