"""Domain models for fee assignments and payment records.

Fee assignments are read-only inputs to the allocation engine; recording a
payment produces a new assignment rather than mutating the old one.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from .enums import AssignmentStatus, FeeType, PaymentMethod, PaymentStatus, Term
from .money import ZERO, to_amount
from .value_objects import PaymentAllocation


def derive_status(amount_paid: Decimal, balance: Decimal) -> AssignmentStatus:
    """Status of an assignment given what has been paid and what is left."""
    if balance == 0:
        return AssignmentStatus.PAID
    if balance < 0:
        return AssignmentStatus.OVERPAID
    if amount_paid == 0:
        return AssignmentStatus.UNPAID
    return AssignmentStatus.PARTIAL


@dataclass(frozen=True)
class FeeLineItem:
    """One fee obligation (a category such as tuition or uniform) of an assignment.

    ``amount`` and ``amount_paid`` are optional; whichever is missing is
    derived so that ``amount - amount_paid == balance``.
    """

    category_id: str
    category_name: str
    type: FeeType
    balance: Decimal
    is_mandatory: bool = False
    amount: Decimal | None = None
    amount_paid: Decimal | None = None

    def __post_init__(self) -> None:
        """Normalize amounts and validate the balance."""
        if not self.category_id:
            raise ValueError("Fee line item requires a category_id")

        object.__setattr__(self, "type", FeeType(self.type))
        balance = to_amount(self.balance)
        if balance < 0:
            raise ValueError(f"Balance must be non-negative, got {balance}")
        object.__setattr__(self, "balance", balance)

        amount = None if self.amount is None else to_amount(self.amount)
        amount_paid = None if self.amount_paid is None else to_amount(self.amount_paid)

        if amount is None and amount_paid is None:
            amount, amount_paid = balance, ZERO
        elif amount is None:
            amount = balance + amount_paid
        elif amount_paid is None:
            amount_paid = amount - balance
        elif amount - amount_paid != balance:
            raise ValueError(
                f"Inconsistent line item {self.category_id}: "
                f"amount {amount} - paid {amount_paid} != balance {balance}"
            )

        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "amount_paid", amount_paid)

    @property
    def is_settled(self) -> bool:
        return self.balance == 0

    def with_payment(self, paid: Decimal) -> "FeeLineItem":
        """Return a copy of the item with ``paid`` applied."""
        return replace(
            self,
            balance=self.balance - paid,
            amount_paid=self.amount_paid + paid,
        )


@dataclass(frozen=True)
class FeeAssignment:
    """Fee obligations billed to one student for a billing period."""

    fee_items: tuple[FeeLineItem, ...] = ()
    id: str = ""
    student_id: str = ""
    student_name: str = ""
    class_name: str = ""
    academic_year: str | None = None
    term: Term | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fee_items", tuple(self.fee_items))
        if self.term is not None:
            object.__setattr__(self, "term", Term(self.term))

    @property
    def total_amount(self) -> Decimal:
        return sum((item.amount for item in self.fee_items), ZERO)

    @property
    def amount_paid(self) -> Decimal:
        return sum((item.amount_paid for item in self.fee_items), ZERO)

    @property
    def balance(self) -> Decimal:
        return sum((item.balance for item in self.fee_items), ZERO)

    @property
    def status(self) -> AssignmentStatus:
        return derive_status(self.amount_paid, self.balance)

    def get_item(self, category_id: str) -> FeeLineItem | None:
        for item in self.fee_items:
            if item.category_id == category_id:
                return item
        return None


@dataclass(frozen=True)
class PaymentRecord:
    """A payment as written to the backing store by the hosting application."""

    reference: str
    student_id: str
    student_name: str
    fee_assignment_id: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: date
    fee_allocations: tuple[PaymentAllocation, ...]
    recorded_by: str
    status: PaymentStatus = PaymentStatus.CONFIRMED
    class_id: str = ""
    class_name: str = ""
    paid_by: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_allocated(self) -> Decimal:
        return sum((a.amount for a in self.fee_allocations), ZERO)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "reference": self.reference,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "class_id": self.class_id,
            "class_name": self.class_name,
            "fee_assignment_id": self.fee_assignment_id,
            "amount": str(self.amount),
            "payment_method": self.payment_method.value,
            "payment_date": self.payment_date.isoformat(),
            "fee_allocations": [a.to_dict() for a in self.fee_allocations],
            "paid_by": self.paid_by,
            "status": self.status.value,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
