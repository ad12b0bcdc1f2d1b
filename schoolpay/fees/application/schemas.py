"""Input schemas for data coming from the hosting application.

Documents in the backing store use camelCase keys; both camelCase and
snake_case are accepted. Schemas convert to the immutable domain models.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..domain.enums import FeeType, PaymentMethod, Term
from ..domain.models import FeeAssignment, FeeLineItem
from ..domain.money import to_amount
from ..domain.value_objects import PaymentAllocation


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class FeeLineItemInput(_Schema):
    """One fee item of a stored fee assignment."""

    category_id: str = Field(..., min_length=1)
    category_name: str = Field(..., min_length=1)
    type: FeeType = FeeType.OTHER
    balance: Decimal = Field(..., ge=0)
    is_mandatory: bool = False
    amount: Decimal | None = Field(None, ge=0)
    amount_paid: Decimal | None = Field(None, ge=0)

    @field_validator("balance", "amount", "amount_paid")
    @classmethod
    def quantize_amount(cls, v: Decimal | None) -> Decimal | None:
        return None if v is None else to_amount(v)

    def to_domain(self) -> FeeLineItem:
        return FeeLineItem(
            category_id=self.category_id,
            category_name=self.category_name,
            type=self.type,
            balance=self.balance,
            is_mandatory=self.is_mandatory,
            amount=self.amount,
            amount_paid=self.amount_paid,
        )


class FeeAssignmentInput(_Schema):
    """A stored student fee assignment."""

    id: str = ""
    student_id: str = ""
    student_name: str = ""
    class_name: str = ""
    academic_year: str | None = None
    term: Term | None = None
    fee_items: list[FeeLineItemInput] = Field(default_factory=list)

    def to_domain(self) -> FeeAssignment:
        return FeeAssignment(
            fee_items=tuple(item.to_domain() for item in self.fee_items),
            id=self.id,
            student_id=self.student_id,
            student_name=self.student_name,
            class_name=self.class_name,
            academic_year=self.academic_year,
            term=self.term,
        )


class AllocationInput(_Schema):
    """One allocation row submitted with a payment."""

    category_id: str = Field(..., min_length=1)
    category_name: str = Field(..., min_length=1)
    type: FeeType
    amount: Decimal = Field(..., gt=0)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        return to_amount(v)

    @classmethod
    def from_domain(cls, allocation: PaymentAllocation) -> "AllocationInput":
        return cls(
            category_id=allocation.category_id,
            category_name=allocation.category_name,
            type=allocation.type,
            amount=allocation.amount,
        )

    def to_domain(self) -> PaymentAllocation:
        return PaymentAllocation(
            category_id=self.category_id,
            category_name=self.category_name,
            type=self.type,
            amount=self.amount,
        )


class PaymentDraft(_Schema):
    """A payment as entered by the bursar, before it gets a reference."""

    student_id: str = Field(..., min_length=1)
    student_name: str = Field(..., min_length=1)
    class_id: str = ""
    class_name: str = ""
    fee_assignment_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Amount must be greater than 0")
    payment_method: PaymentMethod
    payment_date: date
    fee_allocations: list[AllocationInput] = Field(..., min_length=1)
    paid_by: str | None = None
    notes: str | None = None
    recorded_by: str = Field(..., min_length=1)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, v: Decimal) -> Decimal:
        return to_amount(v)
